"""
Project-scoped inventory records.

Only the columns needed to list and search are modelled here; full CRUD for
these records lives outside this service. Every class mixes in
``ProjectScopedMixin`` and is registered in ``PROJECT_SCOPED_MODELS`` so the
session-level scope filter (itasset.db.filters) covers it automatically.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from itasset.db.base import Base
from itasset.models.security import _new_id, _utcnow


class ProjectScopedMixin:
    """Carries the ``project_id`` that row-level scoping filters on."""

    @declared_attr
    def project_id(cls) -> Mapped[str]:
        return mapped_column(ForeignKey("projects.id"), nullable=False, index=True)


class Asset(ProjectScopedMixin, Base):
    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    asset_tag: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    serial_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="available", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Employee(ProjectScopedMixin, Base):
    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    employee_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class SimCard(ProjectScopedMixin, Base):
    __tablename__ = "sim_cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    sim_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class SoftwareLicense(ProjectScopedMixin, Base):
    __tablename__ = "software_licenses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    software_name: Mapped[str] = mapped_column(String(200), nullable=False)
    license_key: Mapped[str | None] = mapped_column(String(200), nullable=True)
    seats: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class PurchaseOrder(ProjectScopedMixin, Base):
    __tablename__ = "purchase_orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    po_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    supplier_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    total_amount: Mapped[float | None] = mapped_column(Numeric(12, 2), nullable=True)
    po_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


PROJECT_SCOPED_MODELS: tuple[type[ProjectScopedMixin], ...] = (
    Asset,
    Employee,
    SimCard,
    SoftwareLicense,
    PurchaseOrder,
)
