from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from itasset.authz.roles import Role


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: str
    role: Role
    is_active: bool
    last_login: datetime | None = None


class UserCreateIn(BaseModel):
    email: str
    first_name: str = ""
    last_name: str = ""
    role: Role = Role.USER
    project_ids: list[str] = Field(default_factory=list)

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value: object) -> Role:
        return Role.parse(value)  # type: ignore[arg-type]


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    is_active: bool


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginUser(BaseModel):
    id: str
    email: str
    display_name: str
    role: Role
    permissions: list[str]
    project_ids: list[str]


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: LoginUser


class ScopeOut(BaseModel):
    unrestricted: bool
    project_ids: list[str]


class MeOut(BaseModel):
    id: str
    display_name: str | None
    role: Role
    permissions: list[str]
    """From the token snapshot, not the live store."""
    scope: ScopeOut


class PermissionCatalogOut(BaseModel):
    version: str
    groups: dict[str, list[str]]


class PermissionListOut(BaseModel):
    user_id: str
    permissions: list[str]


class PermissionCheckOut(BaseModel):
    user_id: str
    permission: str
    granted: bool


class PermissionSetIn(BaseModel):
    permissions: list[str]


class ProjectIdsIn(BaseModel):
    project_ids: list[str]


class ProjectIdsOut(BaseModel):
    user_id: str
    project_ids: list[str]


class UserUpdateIn(BaseModel):
    """Fields left as None are unchanged."""

    first_name: str | None = None
    last_name: str | None = None
    role: Role | None = None
    is_active: bool | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value: object) -> Role | None:
        if value is None:
            return None
        return Role.parse(value)  # type: ignore[arg-type]


class UserStatusIn(BaseModel):
    is_active: bool
