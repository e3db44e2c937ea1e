from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from itasset.authz.tokens import TokenCodec
from itasset.db.session import get_db
from itasset.schemas.security import LoginRequest, LoginUser, MeOut, ScopeOut, TokenResponse
from itasset.security.auth import record_login, verify_credentials
from itasset.security.context import AuthzContext
from itasset.security.dependencies import get_authz, get_token_codec
from itasset.security.issuer import TokenIssuer
from itasset.security.membership import ProjectMembershipStore
from itasset.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    user = verify_credentials(db, body.email, body.password, settings.demo_password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    record_login(db, user)
    issued = TokenIssuer(db, codec).issue(user)
    project_ids = ProjectMembershipStore(db).project_ids_of(user.id)

    return TokenResponse(
        access_token=issued.access_token,
        expires_at=issued.expires_at,
        user=LoginUser(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            permissions=sorted(issued.claims.permissions),
            project_ids=sorted(project_ids),
        ),
    )


@router.get("/me", response_model=MeOut)
def me(authz: AuthzContext = Depends(get_authz)) -> MeOut:
    return MeOut(
        id=authz.user_id,
        display_name=authz.display_name,
        role=authz.role,
        permissions=sorted(authz.permissions),
        scope=ScopeOut(**authz.scope.to_dict()),
    )
