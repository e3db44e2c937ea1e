"""
Explicit per-user permission grants.

This table is the only thing the live permission lookup reads. Role defaults
are copied in when an account is provisioned (or explicitly reset) and are
never consulted afterwards: an account whose rows are removed has no
permissions, whatever its role.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from itasset.authz.catalog import UnknownPermissionError, validate_permissions
from itasset.authz.policy import default_permissions_for
from itasset.authz.roles import Role
from itasset.models.security import User, UserPermission
from itasset.security.errors import UserNotFoundError

logger = logging.getLogger(__name__)


class PermissionStore:
    def __init__(self, db: Session) -> None:
        self._db = db

    # ---- Reads -----------------------------------------------------------------------

    def get_permissions(self, user_id: str) -> frozenset[str]:
        """Explicit grants for ``user_id``; empty for unknown users."""
        rows = self._db.scalars(select(UserPermission.permission).where(UserPermission.user_id == user_id)).all()
        return frozenset(rows)

    def has_permission(self, user_id: str, permission: str) -> bool:
        """Never raises for unknown users or permissions; False means forbidden."""
        found = self._db.scalars(
            select(UserPermission.id)
            .where(UserPermission.user_id == user_id, UserPermission.permission == permission)
            .limit(1)
        ).first()
        return found is not None

    # ---- Mutations -------------------------------------------------------------------

    def grant(self, user_id: str, permission: str) -> None:
        """Idempotent: granting an existing permission is a no-op."""

        validate_permissions([permission])
        self._require_user(user_id)
        if self.has_permission(user_id, permission):
            return

        self._db.add(UserPermission(user_id=user_id, permission=permission))
        try:
            self._db.commit()
        except IntegrityError:
            # Concurrent grant of the same pair won the insert.
            self._db.rollback()
            if not self.has_permission(user_id, permission):
                raise
            return
        logger.info("Permission granted user_id=%s permission=%s", user_id, permission)

    def revoke(self, user_id: str, permission: str) -> None:
        """Idempotent: revoking a permission that is not granted is a no-op."""

        validate_permissions([permission])
        self._require_user(user_id)
        result = self._db.execute(
            delete(UserPermission).where(
                UserPermission.user_id == user_id,
                UserPermission.permission == permission,
            )
        )
        self._db.commit()
        if result.rowcount:
            logger.info("Permission revoked user_id=%s permission=%s", user_id, permission)

    def set_all(self, user_id: str, permissions: Iterable[str]) -> frozenset[str]:
        """
        Replace the user's grants with ``permissions`` atomically.

        The whole list is validated first; on any failure nothing changes.
        Only the difference is written: removed rows are deleted, new rows
        inserted, unchanged rows left alone. Returns the new grant set.
        """

        desired = frozenset(validate_permissions(permissions))
        self._require_user(user_id)

        try:
            current = self.get_permissions(user_id)
            removed = current - desired
            added = desired - current
            if removed:
                self._db.execute(
                    delete(UserPermission).where(
                        UserPermission.user_id == user_id,
                        UserPermission.permission.in_(removed),
                    )
                )
            self._db.add_all(UserPermission(user_id=user_id, permission=p) for p in sorted(added))
            self._db.commit()
        except Exception:
            self._db.rollback()
            logger.exception("Permission replacement failed user_id=%s", user_id)
            raise

        logger.info(
            "Permissions replaced user_id=%s added=%s removed=%s",
            user_id,
            sorted(added),
            sorted(removed),
        )
        return desired

    def reset_to_role_defaults(self, user_id: str) -> frozenset[str]:
        user = self._require_user(user_id)
        return self.set_all(user.id, default_permissions_for(user.role))

    def _require_user(self, user_id: str) -> User:
        user = self._db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user


def provision_user(
    db: Session,
    *,
    email: str,
    role: Role,
    first_name: str = "",
    last_name: str = "",
    user_id: str | None = None,
    seed_defaults: bool = True,
) -> User:
    """
    Create an account and seed its explicit grants from the role defaults,
    in a single transaction.
    """

    user = User(email=email.strip().lower(), role=role, first_name=first_name, last_name=last_name, is_active=True)
    if user_id is not None:
        user.id = user_id

    try:
        db.add(user)
        db.flush()
        if seed_defaults:
            db.add_all(UserPermission(user_id=user.id, permission=p) for p in default_permissions_for(role))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("User provisioned user_id=%s role=%s seeded=%s", user.id, role.value, seed_defaults)
    return user


__all__ = ["PermissionStore", "UnknownPermissionError", "provision_user"]
