from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from itasset.authz.config import TokenConfig


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Keep defaults *local* and deterministic for development.
    - Allow overriding via env vars (``APP_*``) for real deployments.
    - ``token_ttl_minutes`` bounds how long a permission snapshot can be stale.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    db_url: str | None = None
    security_config_path: str | None = None
    log_level: str = "INFO"

    jwt_secret: str = "dev-secret-change-me-before-deploying!"
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "itasset"
    jwt_audience: str | None = "itasset-api"
    token_ttl_minutes: int = 60
    clock_skew_seconds: int = 0

    # Stand-in for the upstream credential check (see itasset.security.auth).
    demo_password: str = "changeme"

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "itasset.db"
        return f"sqlite:///{db_path}"

    def resolved_security_config_path(self) -> Path:
        if self.security_config_path:
            return Path(self.security_config_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "security_config.yaml"

    def token_config(self) -> TokenConfig:
        return TokenConfig(
            secret=self.jwt_secret,
            algorithm=self.jwt_algorithm,
            issuer=self.jwt_issuer,
            audience=self.jwt_audience or None,
            ttl_seconds=self.token_ttl_minutes * 60,
            clock_skew_seconds=self.clock_skew_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
