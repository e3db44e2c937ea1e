from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from itasset.authz.context import TokenClaims
from itasset.authz.tokens import TokenCodec, TokenValidationError
from itasset.db.session import bind_request_scope, get_db
from itasset.security.auth import extract_bearer_token
from itasset.security.config import SecurityConfig
from itasset.security.context import AuthzContext
from itasset.security.permission_store import PermissionStore
from itasset.security.scope import AccessScope, AccessScopeResolver

logger = logging.getLogger(__name__)


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_token_codec(request: Request) -> TokenCodec:
    codec = getattr(request.app.state, "token_codec", None)
    if codec is None:
        raise RuntimeError("Token codec not configured. Did app startup run?")
    return codec


def get_authz(request: Request) -> AuthzContext:
    authz = getattr(request.state, "authz", None)
    if authz is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return authz


def get_scope(authz: AuthzContext = Depends(get_authz)) -> AccessScope:
    return authz.scope


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    codec: TokenCodec = Depends(get_token_codec),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global security dependency (PRIMARY, configuration-driven).

    Per request:
    1. Match the YAML rule (plus optional decorator metadata) for path+method.
    2. Verify the bearer token; permission checks use its embedded snapshot.
    3. Re-check `live_recheck` permissions against the store.
    4. Resolve the AccessScope live, once, and attach an AuthzContext to
       request.state for handlers and for the DB session.
    """

    path = request.url.path
    method = request.method.upper()

    rule = config.match(path, method)

    # Optional decorator metadata (alternative to YAML rules).
    endpoint = request.scope.get("endpoint")
    decorator_permissions = set(getattr(endpoint, "__security_required_permissions__", set())) if endpoint else set()
    decorator_public = bool(getattr(endpoint, "__security_public__", False)) if endpoint else False

    auth_required = (rule.auth_required and not decorator_public) or bool(decorator_permissions)
    if not auth_required:
        return

    token = extract_bearer_token(request, config)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = codec.decode(token)
    except TokenValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    required = set(rule.required_permissions) | decorator_permissions
    _check_snapshot(claims, required, path, method)
    _check_live(db, claims, required & config.live_recheck, path, method)

    scope = AccessScopeResolver(db).resolve_scope_for(claims.subject_id)
    request.state.authz = AuthzContext.from_claims(claims, scope)
    # Handlers may receive this same session from the dependency cache; it was
    # opened before the scope existed, so bind it now.
    bind_request_scope(db, request)


def _check_snapshot(claims: TokenClaims, required: set[str], path: str, method: str) -> None:
    missing = claims.missing(required)
    if missing:
        logger.info(
            "Denied (token snapshot) user_id=%s method=%s path=%s missing=%s",
            claims.subject_id,
            method,
            path,
            sorted(missing),
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing permission(s): {sorted(missing)}",
        )


def _check_live(db: Session, claims: TokenClaims, recheck: set[str], path: str, method: str) -> None:
    if not recheck:
        return
    live = PermissionStore(db).get_permissions(claims.subject_id)
    missing = recheck - live
    if missing:
        logger.info(
            "Denied (live store) user_id=%s method=%s path=%s missing=%s",
            claims.subject_id,
            method,
            path,
            sorted(missing),
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing permission(s): {sorted(missing)}",
        )
