from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from itasset.db.queries import count_scoped
from itasset.db.session import get_db
from itasset.models.inventory import Asset, Employee, PurchaseOrder, SimCard, SoftwareLicense
from itasset.models.security import Project
from itasset.schemas.inventory import DashboardStats
from itasset.security.decorators import require_permissions
from itasset.security.dependencies import get_scope
from itasset.security.scope import AccessScope, resolve_project_filter

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
@require_permissions("reports.read")
def dashboard_stats(db: Session = Depends(get_db), scope: AccessScope = Depends(get_scope)) -> DashboardStats:
    # No YAML rule for this route: the decorator supplies the permission requirement.
    project_filter = resolve_project_filter(scope)
    if project_filter.is_empty:
        return DashboardStats()

    return DashboardStats(
        total_assets=count_scoped(db, Asset, Asset.project_id, project_filter),
        total_employees=count_scoped(db, Employee, Employee.project_id, project_filter),
        total_projects=count_scoped(db, Project, Project.id, project_filter),
        total_sim_cards=count_scoped(db, SimCard, SimCard.project_id, project_filter),
        total_software_licenses=count_scoped(db, SoftwareLicense, SoftwareLicense.project_id, project_filter),
        total_purchase_orders=count_scoped(db, PurchaseOrder, PurchaseOrder.project_id, project_filter),
    )
