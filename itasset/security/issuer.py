from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from itasset.authz.context import TokenClaims
from itasset.authz.tokens import TokenCodec
from itasset.models.security import User
from itasset.security.permission_store import PermissionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedToken:
    access_token: str
    claims: TokenClaims

    @property
    def expires_at(self) -> datetime:
        return self.claims.expires_at


class TokenIssuer:
    """
    Mints an access token for a verified user.

    This is the only place the live permission store meets the token: the
    grant set is read once here and copied into the token. Later grants and
    revokes are not visible to the token until the user logs in again; no
    lock is held between the read and the signing.
    """

    def __init__(self, db: Session, codec: TokenCodec) -> None:
        self._store = PermissionStore(db)
        self._codec = codec

    def issue(self, user: User, now: datetime | None = None) -> IssuedToken:
        snapshot = self._store.get_permissions(user.id)
        claims = self._codec.build_claims(
            subject_id=user.id,
            role=user.role,
            permissions=snapshot,
            display_name=user.display_name,
            now=now or datetime.now(UTC),
        )
        token = self._codec.encode(claims)
        logger.info(
            "Token issued user_id=%s role=%s permissions=%d expires_at=%s",
            user.id,
            user.role.value,
            len(snapshot),
            claims.expires_at.isoformat(),
        )
        return IssuedToken(access_token=token, claims=claims)
