"""
Encode and verify signed access tokens.

A token is a JWT carrying the subject id, display name, role and a snapshot
of the subject's explicit permissions. Once minted it is self-verifying: the
request path checks the signature, issuer, audience and expiry, then trusts
the embedded claims without touching the database.

Claim layout::

    sub          user id
    name         display name (UI only)
    role         Role value, e.g. "Manager"
    permissions  sorted list of catalog strings
    cv           catalog version the snapshot was taken against
    iat / exp    issued-at / expiry (epoch seconds)
    iss / aud    issuer / audience
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from .catalog import CATALOG_VERSION
from .config import TokenConfig
from .context import TokenClaims, TokenState
from .roles import Role

logger = logging.getLogger(__name__)


class TokenValidationError(Exception):
    """Raised when a token cannot be trusted. Do not log the token."""

    pass


class TokenCodec:
    """Mints and verifies tokens for one signing configuration."""

    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    @property
    def config(self) -> TokenConfig:
        return self._config

    def build_claims(
        self,
        *,
        subject_id: str,
        role: Role,
        permissions: frozenset[str] | set[str],
        display_name: str | None = None,
        now: datetime | None = None,
    ) -> TokenClaims:
        # JWT timestamps are whole seconds; truncate so decode(encode(c)) == c.
        issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
        return TokenClaims(
            subject_id=subject_id,
            role=role,
            permissions=frozenset(permissions),
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self._config.ttl_seconds),
            display_name=display_name,
        )

    def encode(self, claims: TokenClaims) -> str:
        payload: dict[str, Any] = {
            "sub": claims.subject_id,
            "name": claims.display_name,
            "role": claims.role.value,
            "permissions": sorted(claims.permissions),
            "cv": CATALOG_VERSION,
            "iat": int(claims.issued_at.timestamp()),
            "exp": int(claims.expires_at.timestamp()),
            "iss": self._config.issuer,
        }
        if self._config.audience:
            payload["aud"] = self._config.audience
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def decode(self, token: str, now: datetime | None = None) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Signature, issuer and audience are checked by PyJWT; expiry is checked
        here against ``now`` (defaults to the current time) so the lifetime
        rule has a single implementation that tests can drive with a fixed clock.
        Raises TokenValidationError on any failure.
        """

        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                issuer=self._config.issuer,
                options={
                    "verify_signature": True,
                    "verify_exp": False,
                    "verify_iss": True,
                    "verify_aud": self._config.audience is not None,
                    "require": ["sub", "exp", "iat", "iss"],
                },
            )
        except jwt.InvalidIssuerError as e:
            logger.info("Token invalid issuer")
            raise TokenValidationError("Invalid token: issuer") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Token invalid audience")
            raise TokenValidationError("Invalid token: audience") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise TokenValidationError("Invalid token") from e

        claims = _extract_claims(payload)
        if claims.state(now, leeway_seconds=self._config.clock_skew_seconds) is TokenState.EXPIRED:
            logger.info("Token expired sub=%s", claims.subject_id)
            raise TokenValidationError("Token expired")
        return claims


def _extract_claims(payload: dict[str, Any]) -> TokenClaims:
    """Build TokenClaims from a verified payload; malformed private claims are rejected."""

    subject_id = str(payload.get("sub") or "")
    if not subject_id:
        raise TokenValidationError("Invalid token: missing subject")

    try:
        role = Role.parse(payload.get("role", ""))
    except ValueError as e:
        raise TokenValidationError("Invalid token: role") from e

    raw_permissions = payload.get("permissions", [])
    if not isinstance(raw_permissions, list):
        raise TokenValidationError("Invalid token: permissions")
    permissions = frozenset(str(p) for p in raw_permissions)

    display_name = payload.get("name")
    if display_name is not None:
        display_name = str(display_name)

    try:
        issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=UTC)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
    except (TypeError, ValueError) as e:
        raise TokenValidationError("Invalid token: timestamps") from e

    return TokenClaims(
        subject_id=subject_id,
        role=role,
        permissions=permissions,
        issued_at=issued_at,
        expires_at=expires_at,
        display_name=display_name,
    )
