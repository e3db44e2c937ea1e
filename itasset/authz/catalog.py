"""
Permission catalog.

The catalog is the closed vocabulary of capability strings. Anything that
persists a permission (grant, revoke, replace-all) validates against it
first; anything outside it is rejected before the store is touched.

Strings follow ``<domain>.<action>``, grouped by resource domain so an admin
UI can render one block of checkboxes per domain.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

CATALOG_VERSION = "1"

# Master data
MASTER_DATA_READ = "master_data.read"
MASTER_DATA_CREATE = "master_data.create"
MASTER_DATA_UPDATE = "master_data.update"
MASTER_DATA_DELETE = "master_data.delete"

# Employees
EMPLOYEES_READ = "employees.read"
EMPLOYEES_CREATE = "employees.create"
EMPLOYEES_UPDATE = "employees.update"
EMPLOYEES_DELETE = "employees.delete"
EMPLOYEES_IMPORT = "employees.import"
EMPLOYEES_EXPORT = "employees.export"

# Assets
ASSETS_READ = "assets.read"
ASSETS_CREATE = "assets.create"
ASSETS_UPDATE = "assets.update"
ASSETS_DELETE = "assets.delete"
ASSETS_ASSIGN = "assets.assign"
ASSETS_UNASSIGN = "assets.unassign"

# Accessories
ACCESSORIES_READ = "accessories.read"
ACCESSORIES_CREATE = "accessories.create"
ACCESSORIES_UPDATE = "accessories.update"
ACCESSORIES_DELETE = "accessories.delete"
ACCESSORIES_ASSIGN = "accessories.assign"
ACCESSORIES_UNASSIGN = "accessories.unassign"

# SIM cards
SIM_CARDS_READ = "sim_cards.read"
SIM_CARDS_CREATE = "sim_cards.create"
SIM_CARDS_UPDATE = "sim_cards.update"
SIM_CARDS_DELETE = "sim_cards.delete"
SIM_CARDS_ASSIGN = "sim_cards.assign"
SIM_CARDS_UNASSIGN = "sim_cards.unassign"

# Software licenses
SOFTWARE_LICENSES_READ = "software_licenses.read"
SOFTWARE_LICENSES_CREATE = "software_licenses.create"
SOFTWARE_LICENSES_UPDATE = "software_licenses.update"
SOFTWARE_LICENSES_DELETE = "software_licenses.delete"
SOFTWARE_LICENSES_ASSIGN = "software_licenses.assign"
SOFTWARE_LICENSES_UNASSIGN = "software_licenses.unassign"

# Purchase orders
PURCHASE_ORDERS_READ = "purchase_orders.read"
PURCHASE_ORDERS_CREATE = "purchase_orders.create"
PURCHASE_ORDERS_UPDATE = "purchase_orders.update"
PURCHASE_ORDERS_DELETE = "purchase_orders.delete"
PURCHASE_ORDERS_APPROVE = "purchase_orders.approve"

# Reports
REPORTS_READ = "reports.read"
REPORTS_GENERATE = "reports.generate"
REPORTS_EXPORT = "reports.export"

# User management
USERS_READ = "users.read"
USERS_CREATE = "users.create"
USERS_UPDATE = "users.update"
USERS_DELETE = "users.delete"
USERS_ASSIGN_ROLES = "users.assign_roles"
USERS_MANAGE_PERMISSIONS = "users.manage_permissions"

# System operations
SYSTEM_ADMIN = "system.admin"
SYSTEM_AUDIT_LOGS = "system.audit_logs"
SYSTEM_BACKUP = "system.backup"
SYSTEM_RESTORE = "system.restore"


PERMISSION_GROUPS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "master_data": (MASTER_DATA_READ, MASTER_DATA_CREATE, MASTER_DATA_UPDATE, MASTER_DATA_DELETE),
        "employees": (
            EMPLOYEES_READ,
            EMPLOYEES_CREATE,
            EMPLOYEES_UPDATE,
            EMPLOYEES_DELETE,
            EMPLOYEES_IMPORT,
            EMPLOYEES_EXPORT,
        ),
        "assets": (ASSETS_READ, ASSETS_CREATE, ASSETS_UPDATE, ASSETS_DELETE, ASSETS_ASSIGN, ASSETS_UNASSIGN),
        "accessories": (
            ACCESSORIES_READ,
            ACCESSORIES_CREATE,
            ACCESSORIES_UPDATE,
            ACCESSORIES_DELETE,
            ACCESSORIES_ASSIGN,
            ACCESSORIES_UNASSIGN,
        ),
        "sim_cards": (
            SIM_CARDS_READ,
            SIM_CARDS_CREATE,
            SIM_CARDS_UPDATE,
            SIM_CARDS_DELETE,
            SIM_CARDS_ASSIGN,
            SIM_CARDS_UNASSIGN,
        ),
        "software_licenses": (
            SOFTWARE_LICENSES_READ,
            SOFTWARE_LICENSES_CREATE,
            SOFTWARE_LICENSES_UPDATE,
            SOFTWARE_LICENSES_DELETE,
            SOFTWARE_LICENSES_ASSIGN,
            SOFTWARE_LICENSES_UNASSIGN,
        ),
        "purchase_orders": (
            PURCHASE_ORDERS_READ,
            PURCHASE_ORDERS_CREATE,
            PURCHASE_ORDERS_UPDATE,
            PURCHASE_ORDERS_DELETE,
            PURCHASE_ORDERS_APPROVE,
        ),
        "reports": (REPORTS_READ, REPORTS_GENERATE, REPORTS_EXPORT),
        "users": (
            USERS_READ,
            USERS_CREATE,
            USERS_UPDATE,
            USERS_DELETE,
            USERS_ASSIGN_ROLES,
            USERS_MANAGE_PERMISSIONS,
        ),
        "system": (SYSTEM_ADMIN, SYSTEM_AUDIT_LOGS, SYSTEM_BACKUP, SYSTEM_RESTORE),
    }
)

ALL_PERMISSIONS: tuple[str, ...] = tuple(p for group in PERMISSION_GROUPS.values() for p in group)

_KNOWN: frozenset[str] = frozenset(ALL_PERMISSIONS)
_ORDER: dict[str, int] = {p: i for i, p in enumerate(ALL_PERMISSIONS)}


class UnknownPermissionError(ValueError):
    """Raised when a permission string is not part of the catalog."""

    def __init__(self, permissions: Iterable[str]) -> None:
        self.permissions = tuple(sorted(set(permissions)))
        super().__init__(f"Unknown permission(s): {list(self.permissions)}")


def is_known_permission(permission: str) -> bool:
    return permission in _KNOWN


def validate_permissions(permissions: Iterable[str]) -> tuple[str, ...]:
    """
    Validate every entry against the catalog.

    Returns the de-duplicated permissions in catalog order. Raises
    UnknownPermissionError naming *all* unknown entries (not just the first).
    """

    requested = set(permissions)
    unknown = requested - _KNOWN
    if unknown:
        raise UnknownPermissionError(unknown)
    return in_catalog_order(requested)


def in_catalog_order(permissions: Iterable[str]) -> tuple[str, ...]:
    """Sort known permissions by catalog position; unknown ones sort last, alphabetically."""
    return tuple(sorted(set(permissions), key=lambda p: (_ORDER.get(p, len(_ORDER)), p)))
