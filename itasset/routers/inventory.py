"""
Read-only listings of project-scoped records.

Each endpoint merges its own filters (search, paging) with the caller's
AccessScope through ``resolve_project_filter``; the session-level filter in
itasset/db/filters.py applies the same scope again underneath.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from itasset.db.queries import PageResult, paginate_scoped
from itasset.db.session import get_db
from itasset.models.inventory import Asset, Employee, PurchaseOrder, SimCard, SoftwareLicense
from itasset.models.security import Project
from itasset.schemas.inventory import (
    AssetOut,
    EmployeeOut,
    Page,
    PurchaseOrderOut,
    SimCardOut,
    SoftwareLicenseOut,
)
from itasset.schemas.security import ProjectOut
from itasset.security.dependencies import get_scope
from itasset.security.scope import AccessScope, resolve_project_filter

router = APIRouter(tags=["inventory"])


class ListParams:
    def __init__(
        self,
        project_id: str | None = Query(default=None),
        search: str | None = Query(default=None, max_length=100),
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=20, ge=1, le=200),
    ) -> None:
        self.project_id = project_id
        self.search = search.strip() if search else None
        self.page = page
        self.page_size = page_size


def _to_page(result: PageResult, schema: type) -> dict:
    return {
        "items": [schema.model_validate(item) for item in result.items],
        "total_count": result.total_count,
        "page": result.page,
        "page_size": result.page_size,
    }


@router.get("/projects", response_model=list[ProjectOut])
def list_projects(db: Session = Depends(get_db), scope: AccessScope = Depends(get_scope)) -> list[Project]:
    project_filter = resolve_project_filter(scope)
    if project_filter.is_empty:
        return []
    stmt = project_filter.apply(select(Project).order_by(Project.code), Project.id)
    return list(db.scalars(stmt).all())


@router.get("/assets", response_model=Page[AssetOut])
def list_assets(
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    scope: AccessScope = Depends(get_scope),
) -> dict:
    project_filter = resolve_project_filter(scope, params.project_id)
    stmt = select(Asset).order_by(Asset.asset_tag)
    if params.search:
        term = f"%{params.search}%"
        stmt = stmt.where(or_(Asset.asset_tag.ilike(term), Asset.name.ilike(term), Asset.serial_number.ilike(term)))
    result = paginate_scoped(db, stmt, Asset.project_id, project_filter, page=params.page, page_size=params.page_size)
    return _to_page(result, AssetOut)


@router.get("/assets/{asset_id}", response_model=AssetOut)
def get_asset(asset_id: str, db: Session = Depends(get_db)) -> Asset:
    asset = db.scalars(select(Asset).where(Asset.id == asset_id)).first()
    if asset is None:
        # Assets outside the caller's scope are filtered by the session and look absent.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return asset


@router.get("/employees", response_model=Page[EmployeeOut])
def list_employees(
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    scope: AccessScope = Depends(get_scope),
) -> dict:
    project_filter = resolve_project_filter(scope, params.project_id)
    stmt = select(Employee).order_by(Employee.employee_code)
    if params.search:
        term = f"%{params.search}%"
        stmt = stmt.where(or_(Employee.employee_code.ilike(term), Employee.full_name.ilike(term)))
    result = paginate_scoped(
        db, stmt, Employee.project_id, project_filter, page=params.page, page_size=params.page_size
    )
    return _to_page(result, EmployeeOut)


@router.get("/sim-cards", response_model=Page[SimCardOut])
def list_sim_cards(
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    scope: AccessScope = Depends(get_scope),
) -> dict:
    project_filter = resolve_project_filter(scope, params.project_id)
    stmt = select(SimCard).order_by(SimCard.sim_number)
    if params.search:
        term = f"%{params.search}%"
        stmt = stmt.where(or_(SimCard.sim_number.ilike(term), SimCard.phone_number.ilike(term)))
    result = paginate_scoped(db, stmt, SimCard.project_id, project_filter, page=params.page, page_size=params.page_size)
    return _to_page(result, SimCardOut)


@router.get("/software-licenses", response_model=Page[SoftwareLicenseOut])
def list_software_licenses(
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    scope: AccessScope = Depends(get_scope),
) -> dict:
    project_filter = resolve_project_filter(scope, params.project_id)
    stmt = select(SoftwareLicense).order_by(SoftwareLicense.software_name)
    if params.search:
        stmt = stmt.where(SoftwareLicense.software_name.ilike(f"%{params.search}%"))
    result = paginate_scoped(
        db, stmt, SoftwareLicense.project_id, project_filter, page=params.page, page_size=params.page_size
    )
    return _to_page(result, SoftwareLicenseOut)


@router.get("/purchase-orders", response_model=Page[PurchaseOrderOut])
def list_purchase_orders(
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    scope: AccessScope = Depends(get_scope),
) -> dict:
    project_filter = resolve_project_filter(scope, params.project_id)
    stmt = select(PurchaseOrder).order_by(PurchaseOrder.po_number)
    if params.search:
        term = f"%{params.search}%"
        stmt = stmt.where(or_(PurchaseOrder.po_number.ilike(term), PurchaseOrder.supplier_name.ilike(term)))
    result = paginate_scoped(
        db, stmt, PurchaseOrder.project_id, project_filter, page=params.page, page_size=params.page_size
    )
    return _to_page(result, PurchaseOrderOut)
