from __future__ import annotations

from dataclasses import dataclass

from itasset.authz.context import TokenClaims
from itasset.authz.roles import Role
from itasset.security.scope import AccessScope


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context.

    This is intentionally small and serializable-ish so it can be attached to:
    - request.state (FastAPI request lifetime)
    - Session.info (SQLAlchemy session lifetime; only ``scope`` is copied there)

    ``permissions`` come from the token snapshot; ``scope`` is resolved live
    from the store once per request.
    """

    user_id: str
    role: Role
    permissions: frozenset[str]
    scope: AccessScope
    display_name: str | None = None

    @classmethod
    def from_claims(cls, claims: TokenClaims, scope: AccessScope) -> AuthzContext:
        return cls(
            user_id=claims.subject_id,
            role=claims.role,
            permissions=claims.permissions,
            scope=scope,
            display_name=claims.display_name,
        )
