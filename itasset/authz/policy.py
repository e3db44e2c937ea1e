"""
Default permission policy: role -> ordered default permission set.

Used to seed the permission store when an account is provisioned and when an
administrator asks to reset an account to its role defaults. The live
authorization check never consults this table; it reads explicit grants only.
"""

from __future__ import annotations

from . import catalog as c
from .catalog import ALL_PERMISSIONS, in_catalog_order
from .roles import Role

# Capabilities only a SuperAdmin receives by default.
SYSTEM_OPERATIONS: frozenset[str] = frozenset(
    {
        c.SYSTEM_ADMIN,
        c.SYSTEM_AUDIT_LOGS,
        c.SYSTEM_BACKUP,
        c.SYSTEM_RESTORE,
        c.USERS_ASSIGN_ROLES,
        c.USERS_MANAGE_PERMISSIONS,
    }
)

_USER_DEFAULTS: frozenset[str] = frozenset(
    {
        c.EMPLOYEES_READ,
        c.ASSETS_READ,
        c.ACCESSORIES_READ,
        c.SIM_CARDS_READ,
        c.SOFTWARE_LICENSES_READ,
        c.PURCHASE_ORDERS_READ,
        c.REPORTS_READ,
    }
)

_MANAGER_DEFAULTS: frozenset[str] = _USER_DEFAULTS | {
    c.MASTER_DATA_READ,
    c.EMPLOYEES_CREATE,
    c.EMPLOYEES_UPDATE,
    c.ASSETS_ASSIGN,
    c.ASSETS_UNASSIGN,
    c.ACCESSORIES_ASSIGN,
    c.ACCESSORIES_UNASSIGN,
    c.SIM_CARDS_ASSIGN,
    c.SIM_CARDS_UNASSIGN,
    c.SOFTWARE_LICENSES_ASSIGN,
    c.SOFTWARE_LICENSES_UNASSIGN,
    c.PURCHASE_ORDERS_CREATE,
    c.PURCHASE_ORDERS_UPDATE,
    c.REPORTS_GENERATE,
    c.REPORTS_EXPORT,
}

_DEFAULTS: dict[Role, tuple[str, ...]] = {
    Role.SUPER_ADMIN: ALL_PERMISSIONS,
    Role.ADMIN: tuple(p for p in ALL_PERMISSIONS if p not in SYSTEM_OPERATIONS),
    Role.MANAGER: in_catalog_order(_MANAGER_DEFAULTS),
    Role.USER: in_catalog_order(_USER_DEFAULTS),
}


def default_permissions_for(role: Role | str | int) -> tuple[str, ...]:
    """Return the default permissions for ``role`` in catalog order."""
    return _DEFAULTS[Role.parse(role)]
