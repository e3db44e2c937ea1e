"""Serializable claims carried by an access token."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from .roles import Role


class TokenState(str, Enum):
    """Tokens only ever move VALID -> EXPIRED, driven by the clock."""

    VALID = "valid"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenClaims:
    """
    Identity plus a permission snapshot taken at issuance.

    ``permissions`` is a copy of the explicit grants at login time. Grants and
    revokes made afterwards are not reflected here until a new token is issued.
    """

    subject_id: str
    """User id (``sub``)."""

    role: Role

    permissions: frozenset[str]
    """Explicit grants at issuance time."""

    issued_at: datetime
    expires_at: datetime

    display_name: str | None = None
    """For UI only; never used for authorization."""

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def missing(self, required: set[str] | frozenset[str]) -> frozenset[str]:
        return frozenset(required) - self.permissions

    def state(self, at: datetime | None = None, leeway_seconds: int = 0) -> TokenState:
        now = at or datetime.now(UTC)
        if now.timestamp() >= self.expires_at.timestamp() + leeway_seconds:
            return TokenState.EXPIRED
        return TokenState.VALID

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "subject_id": self.subject_id,
            "display_name": self.display_name,
            "role": self.role.value,
            "permissions": sorted(self.permissions),
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }
