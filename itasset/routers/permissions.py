from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from itasset.authz.catalog import CATALOG_VERSION, PERMISSION_GROUPS, in_catalog_order
from itasset.authz.policy import default_permissions_for
from itasset.authz.roles import Role
from itasset.db.session import get_db
from itasset.models.security import User
from itasset.schemas.security import (
    PermissionCatalogOut,
    PermissionCheckOut,
    PermissionListOut,
    PermissionSetIn,
)
from itasset.security.context import AuthzContext
from itasset.security.dependencies import get_authz
from itasset.security.errors import UserNotFoundError
from itasset.security.permission_store import PermissionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["permissions"])


@router.get("/permissions/catalog", response_model=PermissionCatalogOut)
def permission_catalog() -> PermissionCatalogOut:
    return PermissionCatalogOut(
        version=CATALOG_VERSION,
        groups={domain: list(perms) for domain, perms in PERMISSION_GROUPS.items()},
    )


@router.get("/permissions/defaults/{role}", response_model=list[str])
def role_defaults(role: str) -> list[str]:
    try:
        parsed = Role.parse(role)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role") from exc
    return list(default_permissions_for(parsed))


@router.get("/users/{user_id}/permissions", response_model=PermissionListOut)
def get_user_permissions(user_id: str, db: Session = Depends(get_db)) -> PermissionListOut:
    _require_user(db, user_id)
    permissions = PermissionStore(db).get_permissions(user_id)
    return PermissionListOut(user_id=user_id, permissions=list(in_catalog_order(permissions)))


@router.put("/users/{user_id}/permissions", response_model=PermissionListOut)
def set_user_permissions(
    user_id: str,
    body: PermissionSetIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> PermissionListOut:
    permissions = PermissionStore(db).set_all(user_id, body.permissions)
    logger.info("Permissions set by=%s user_id=%s count=%d", authz.user_id, user_id, len(permissions))
    return PermissionListOut(user_id=user_id, permissions=list(in_catalog_order(permissions)))


@router.post("/users/{user_id}/permissions/reset", response_model=PermissionListOut)
def reset_user_permissions(
    user_id: str,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> PermissionListOut:
    permissions = PermissionStore(db).reset_to_role_defaults(user_id)
    logger.info("Permissions reset to role defaults by=%s user_id=%s", authz.user_id, user_id)
    return PermissionListOut(user_id=user_id, permissions=list(in_catalog_order(permissions)))


@router.get("/users/{user_id}/permissions/{permission}", response_model=PermissionCheckOut)
def check_user_permission(user_id: str, permission: str, db: Session = Depends(get_db)) -> PermissionCheckOut:
    _require_user(db, user_id)
    granted = PermissionStore(db).has_permission(user_id, permission)
    return PermissionCheckOut(user_id=user_id, permission=permission, granted=granted)


@router.post("/users/{user_id}/permissions/{permission}", response_model=PermissionCheckOut)
def grant_user_permission(
    user_id: str,
    permission: str,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> PermissionCheckOut:
    PermissionStore(db).grant(user_id, permission)
    logger.info("Grant by=%s user_id=%s permission=%s", authz.user_id, user_id, permission)
    return PermissionCheckOut(user_id=user_id, permission=permission, granted=True)


@router.delete("/users/{user_id}/permissions/{permission}", response_model=PermissionCheckOut)
def revoke_user_permission(
    user_id: str,
    permission: str,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> PermissionCheckOut:
    PermissionStore(db).revoke(user_id, permission)
    logger.info("Revoke by=%s user_id=%s permission=%s", authz.user_id, user_id, permission)
    return PermissionCheckOut(user_id=user_id, permission=permission, granted=False)


def _require_user(db: Session, user_id: str) -> None:
    if db.get(User, user_id) is None:
        raise UserNotFoundError(user_id)
