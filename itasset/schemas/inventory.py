from __future__ import annotations

from datetime import date, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    total_count: int
    page: int
    page_size: int


class AssetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    asset_tag: str
    name: str
    serial_number: str | None
    status: str
    project_id: str
    created_at: datetime


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_code: str
    full_name: str
    email: str | None
    project_id: str


class SimCardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sim_number: str
    phone_number: str | None
    status: str
    project_id: str


class SoftwareLicenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    software_name: str
    seats: int
    expiry_date: date | None
    project_id: str


class PurchaseOrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    po_number: str
    supplier_name: str | None
    total_amount: float | None
    po_date: date | None
    project_id: str


class DashboardStats(BaseModel):
    total_assets: int = 0
    total_employees: int = 0
    total_projects: int = 0
    total_sim_cards: int = 0
    total_software_licenses: int = 0
    total_purchase_orders: int = 0
