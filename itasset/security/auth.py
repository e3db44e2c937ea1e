from __future__ import annotations

import hmac
import logging
from datetime import UTC, datetime

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from itasset.models.security import User
from itasset.security.config import SecurityConfig

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request, config: SecurityConfig) -> str | None:
    """
    Extract the bearer credential.

    - Input: `Authorization: Bearer <token>`
    - Returns None when the header is absent; malformed headers are a 400.
    - The token itself is never logged.
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing Authorization header (auth required) path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Expected '{bearer_prefix} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Missing token after '{bearer_prefix}'.",
        )

    return token


def verify_credentials(db: Session, email: str, password: str, expected_password: str) -> User | None:
    """
    Stand-in for the upstream credential check.

    Password verification belongs to the identity provider in front of this
    service; here an active account plus the shared development password
    (APP_DEMO_PASSWORD) counts as verified. Returns the user or None.
    """

    user = db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()
    if user is None or not user.is_active:
        logger.info("Login rejected: unknown or inactive account")
        return None

    if not hmac.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8")):
        logger.info("Login rejected: bad credentials user_id=%s", user.id)
        return None

    return user


def record_login(db: Session, user: User) -> None:
    user.last_login = datetime.now(UTC)
    db.commit()
