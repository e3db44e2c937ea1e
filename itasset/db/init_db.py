from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from itasset.authz.roles import Role
from itasset.db.base import Base
from itasset.db.session import SessionLocal, engine
from itasset.models.inventory import Asset, Employee, PurchaseOrder, SimCard, SoftwareLicense
from itasset.models.security import Project, UserProject
from itasset.security.permission_store import provision_user


def init_db() -> None:
    """
    Create tables + seed demo data.

    Small and deterministic so the permission gate and project scoping can be
    tried without additional setup. Every seeded account logs in with
    APP_DEMO_PASSWORD.
    """

    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Project.id).limit(1)).first() is not None


def seed(db: Session) -> None:
    # Projects
    hq = Project(code="HQ", name="Head Office", description="Head office fit-out")
    site = Project(code="SITE-A", name="Site A", description="Construction site A")
    port = Project(code="PORT", name="Port Expansion", description="Port expansion works")
    db.add_all([hq, site, port])
    db.commit()

    # Users: explicit grants are seeded from role defaults by provision_user.
    provision_user(db, email="sara.super@example.com", role=Role.SUPER_ADMIN, first_name="Sara", last_name="Super")
    provision_user(db, email="adam.admin@example.com", role=Role.ADMIN, first_name="Adam", last_name="Admin")
    mira = provision_user(db, email="mira.manager@example.com", role=Role.MANAGER, first_name="Mira", last_name="Manager")
    uma = provision_user(db, email="uma.user@example.com", role=Role.USER, first_name="Uma", last_name="User")
    provision_user(db, email="nadia.new@example.com", role=Role.USER, first_name="Nadia", last_name="New")

    # Memberships (nadia has none: she logs in fine but sees no rows)
    db.add_all(
        [
            UserProject(user_id=mira.id, project_id=hq.id),
            UserProject(user_id=mira.id, project_id=site.id),
            UserProject(user_id=uma.id, project_id=site.id),
        ]
    )
    db.flush()

    # Inventory
    db.add_all(
        [
            Asset(project_id=hq.id, asset_tag="AST-0001", name="Dell Latitude 7440", serial_number="DL7440-01"),
            Asset(project_id=hq.id, asset_tag="AST-0002", name="HP LaserJet M404", serial_number="HPM404-17"),
            Asset(project_id=site.id, asset_tag="AST-0101", name="Lenovo ThinkPad T14", serial_number="LT14-88"),
            Asset(project_id=port.id, asset_tag="AST-0201", name="Cisco Catalyst 9200", status="in_use"),
        ]
    )
    db.add_all(
        [
            Employee(project_id=hq.id, employee_code="E-1001", full_name="Omar Haddad", email="omar@example.com"),
            Employee(project_id=site.id, employee_code="E-2001", full_name="Lina Saleh", email="lina@example.com"),
            Employee(project_id=port.id, employee_code="E-3001", full_name="Karim Nasser"),
        ]
    )
    db.add_all(
        [
            SimCard(project_id=hq.id, sim_number="8997100000000001", phone_number="+971500000001"),
            SimCard(project_id=site.id, sim_number="8997100000000002", phone_number="+971500000002"),
        ]
    )
    db.add_all(
        [
            SoftwareLicense(project_id=hq.id, software_name="Microsoft 365 E3", seats=25, expiry_date=date(2027, 3, 31)),
            SoftwareLicense(project_id=site.id, software_name="AutoCAD", seats=3, expiry_date=date(2026, 12, 31)),
        ]
    )
    db.add_all(
        [
            PurchaseOrder(
                project_id=hq.id,
                po_number="PO-2026-001",
                supplier_name="Gulf IT Supplies",
                total_amount=Decimal("18450.00"),
                po_date=date(2026, 1, 12),
            ),
            PurchaseOrder(
                project_id=port.id,
                po_number="PO-2026-014",
                supplier_name="NetServe LLC",
                total_amount=Decimal("7200.00"),
                po_date=date(2026, 2, 3),
            ),
        ]
    )

    db.commit()
