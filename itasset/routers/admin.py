from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from itasset.authz.roles import Role
from itasset.db.session import get_db
from itasset.models.security import User
from itasset.schemas.security import (
    ProjectIdsIn,
    ProjectIdsOut,
    UserCreateIn,
    UserOut,
    UserStatusIn,
    UserUpdateIn,
)
from itasset.security.context import AuthzContext
from itasset.security.dependencies import get_authz
from itasset.security.errors import UserNotFoundError
from itasset.security.membership import ProjectMembershipStore
from itasset.security.permission_store import provision_user
from itasset.security.scope import ensure_within_scope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


def _get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def _require_not_outranked(authz: AuthzContext, target: User, action: str) -> None:
    if target.role.outranks(authz.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Cannot {action} a higher-ranked account")


def _require_assignable(authz: AuthzContext, role: Role) -> None:
    if not authz.role.at_least(role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot give an account a higher role than your own",
        )


@router.get("/admin/users", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)) -> list[User]:
    return list(db.scalars(select(User).order_by(User.email)).all())


@router.post("/admin/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> User:
    _require_assignable(authz, body.role)
    if db.scalars(select(User.id).where(User.email == body.email.strip().lower())).first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    memberships = ProjectMembershipStore(db)
    ensure_within_scope(authz.scope, body.project_ids)
    memberships.ensure_projects_exist(body.project_ids)

    user = provision_user(
        db,
        email=body.email,
        role=body.role,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    if body.project_ids:
        memberships.set_all(user.id, body.project_ids)

    logger.info("User created by=%s user_id=%s role=%s", authz.user_id, user.id, user.role.value)
    return user


@router.get("/admin/users/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)) -> User:
    return _get_user(db, user_id)


@router.put("/admin/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    body: UserUpdateIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> User:
    """
    Edit name, role and active flag.

    A role change does not touch explicit grants (use the permissions reset
    for that); it changes the caller's data scope on their next request.
    """

    user = _get_user(db, user_id)
    _require_not_outranked(authz, user, "modify")
    if body.role is not None:
        _require_assignable(authz, body.role)

    previous_role = user.role
    if body.first_name is not None:
        user.first_name = body.first_name
    if body.last_name is not None:
        user.last_name = body.last_name
    if body.role is not None:
        user.role = body.role
    if body.is_active is not None:
        user.is_active = body.is_active
    db.commit()

    logger.info(
        "User updated by=%s user_id=%s role=%s->%s is_active=%s",
        authz.user_id,
        user_id,
        previous_role.value,
        user.role.value,
        user.is_active,
    )
    return user


@router.patch("/admin/users/{user_id}/status", response_model=UserOut)
def set_user_status(
    user_id: str,
    body: UserStatusIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> User:
    user = _get_user(db, user_id)
    _require_not_outranked(authz, user, "modify")

    user.is_active = body.is_active
    db.commit()
    # Outstanding tokens of a deactivated account resolve to an empty scope.
    logger.info("User status set by=%s user_id=%s is_active=%s", authz.user_id, user_id, body.is_active)
    return user


@router.delete("/admin/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> None:
    user = _get_user(db, user_id)
    _require_not_outranked(authz, user, "delete")

    db.delete(user)
    db.commit()
    # Outstanding tokens for this subject stay signed until they expire; scope
    # resolution for a missing subject yields no rows.
    logger.info("User deleted by=%s user_id=%s", authz.user_id, user_id)


@router.get("/users/{user_id}/projects", response_model=ProjectIdsOut)
def get_user_projects(user_id: str, db: Session = Depends(get_db)) -> ProjectIdsOut:
    _get_user(db, user_id)
    project_ids = ProjectMembershipStore(db).project_ids_of(user_id)
    return ProjectIdsOut(user_id=user_id, project_ids=sorted(project_ids))


@router.put("/users/{user_id}/projects", response_model=ProjectIdsOut)
def set_user_projects(
    user_id: str,
    body: ProjectIdsIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> ProjectIdsOut:
    ensure_within_scope(authz.scope, body.project_ids)
    project_ids = ProjectMembershipStore(db).set_all(user_id, body.project_ids)
    logger.info("Project membership set by=%s user_id=%s projects=%s", authz.user_id, user_id, sorted(project_ids))
    return ProjectIdsOut(user_id=user_id, project_ids=sorted(project_ids))
