"""
Pure authorization primitives: roles, the permission catalog, role defaults,
and the signed token codec.

This package has no dependency on other itasset packages (db, security, ...)
and never touches the database.
"""

from .catalog import (
    ALL_PERMISSIONS,
    CATALOG_VERSION,
    PERMISSION_GROUPS,
    UnknownPermissionError,
    is_known_permission,
    validate_permissions,
)
from .config import TokenConfig
from .context import TokenClaims, TokenState
from .policy import SYSTEM_OPERATIONS, default_permissions_for
from .roles import Role
from .tokens import TokenCodec, TokenValidationError

__all__ = [
    "ALL_PERMISSIONS",
    "CATALOG_VERSION",
    "PERMISSION_GROUPS",
    "SYSTEM_OPERATIONS",
    "Role",
    "TokenClaims",
    "TokenCodec",
    "TokenConfig",
    "TokenState",
    "TokenValidationError",
    "UnknownPermissionError",
    "default_permissions_for",
    "is_known_permission",
    "validate_permissions",
]
