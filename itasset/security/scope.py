"""
Access scope: which projects' rows a caller may see.

Every query over a project-scoped resource goes through two steps:

1. ``AccessScopeResolver.resolve_scope_for(user_id)`` once per request
   (done by the global security dependency), and
2. ``resolve_project_filter(scope, requested_project_id)`` in the handler,
   whose result is applied by ``itasset.db.queries``.

Branching lives here and nowhere else:

    unrestricted                  -> no project filter (or the caller's own)
    restricted(S), asks for p     -> p in S: filter p; otherwise forbidden
    restricted(empty), no p       -> empty result, no query issued
    restricted(S), no p           -> project_id IN S
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select
from sqlalchemy.orm import Session

from itasset.authz.roles import Role
from itasset.models.security import User
from itasset.security.errors import ProjectAccessForbidden
from itasset.security.membership import ProjectMembershipStore

logger = logging.getLogger(__name__)

# Roles whose scope is never narrowed by membership.
UNRESTRICTED_ROLES: frozenset[Role] = frozenset({Role.SUPER_ADMIN, Role.ADMIN})


@dataclass(frozen=True)
class AccessScope:
    """Derived per request, never persisted."""

    unrestricted: bool
    project_ids: frozenset[str] = frozenset()

    @classmethod
    def everything(cls) -> AccessScope:
        return cls(unrestricted=True)

    @classmethod
    def restricted(cls, project_ids: Iterable[str]) -> AccessScope:
        return cls(unrestricted=False, project_ids=frozenset(project_ids))

    @classmethod
    def nothing(cls) -> AccessScope:
        return cls(unrestricted=False)

    @property
    def is_empty(self) -> bool:
        return not self.unrestricted and not self.project_ids

    def allows(self, project_id: str) -> bool:
        return self.unrestricted or project_id in self.project_ids

    def to_dict(self) -> dict[str, object]:
        return {
            "unrestricted": self.unrestricted,
            "project_ids": sorted(self.project_ids),
        }


@dataclass(frozen=True)
class ProjectFilter:
    """
    Outcome of merging a scope with the caller's optional project filter.

    ``project_ids is None`` means "no project filter". An empty frozenset means
    "nothing is visible"; callers must short-circuit instead of querying.
    """

    project_ids: frozenset[str] | None

    @property
    def is_empty(self) -> bool:
        return self.project_ids is not None and not self.project_ids

    def apply(self, stmt: Select, column: ColumnElement) -> Select:
        if self.project_ids is None:
            return stmt
        if len(self.project_ids) == 1:
            (only,) = self.project_ids
            return stmt.where(column == only)
        return stmt.where(column.in_(sorted(self.project_ids)))


def resolve_project_filter(scope: AccessScope, requested_project_id: str | None = None) -> ProjectFilter:
    """
    Apply the scope to a request. Raises ProjectAccessForbidden when the
    caller names a project outside a restricted scope (including an empty one).
    """

    requested = requested_project_id or None

    if scope.unrestricted:
        return ProjectFilter(frozenset({requested}) if requested else None)

    if requested is not None:
        if requested not in scope.project_ids:
            logger.info("Project outside scope requested project_id=%s", requested)
            raise ProjectAccessForbidden(requested)
        return ProjectFilter(frozenset({requested}))

    return ProjectFilter(scope.project_ids)


def ensure_within_scope(scope: AccessScope, project_ids: Iterable[str]) -> None:
    """
    Reject project ids a restricted caller cannot see, whether or not they exist.

    Run before any existence check so a project outside the scope is reported
    as forbidden rather than unknown.
    """

    if scope.unrestricted:
        return
    outside = sorted(set(project_ids) - scope.project_ids)
    if outside:
        logger.info("Project outside scope referenced project_ids=%s", outside)
        raise ProjectAccessForbidden(outside[0])


class AccessScopeResolver:
    """Combines role and project membership into an AccessScope."""

    def __init__(self, db: Session) -> None:
        self._db = db
        self._memberships = ProjectMembershipStore(db)

    def can_see_all_data(self, user: User | None) -> bool:
        if user is None:
            return False
        return user.role in UNRESTRICTED_ROLES

    def project_ids_of(self, user: User | None) -> frozenset[str]:
        if user is None:
            return frozenset()
        return self._memberships.project_ids_of(user.id)

    def resolve_scope(self, user: User | None) -> AccessScope:
        if self.can_see_all_data(user):
            return AccessScope.everything()
        return AccessScope.restricted(self.project_ids_of(user))

    def resolve_scope_for(self, user_id: str) -> AccessScope:
        """
        Resolve scope for a token subject, reading role and membership live.

        A subject that no longer exists or was deactivated gets an empty scope.
        """

        user = self._db.get(User, user_id)
        if user is None or not user.is_active:
            logger.warning("Scope resolved for missing or inactive user_id=%s; denying all rows", user_id)
            return AccessScope.nothing()

        scope = self.resolve_scope(user)
        logger.debug(
            "Scope resolved user_id=%s role=%s unrestricted=%s projects=%s",
            user_id,
            user.role.value,
            scope.unrestricted,
            sorted(scope.project_ids),
        )
        return scope
