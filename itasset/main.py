from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from itasset.authz.tokens import TokenCodec
from itasset.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from itasset.db.init_db import init_db
from itasset.logging_config import configure_app_logging
from itasset.routers import admin, auth, dashboard, health, inventory, permissions
from itasset.security.config import load_security_config
from itasset.security.dependencies import enforce_security
from itasset.security.errors import (
    ProjectAccessForbidden,
    UnknownPermissionError,
    UnknownProjectError,
    UserNotFoundError,
)
from itasset.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(settings.resolved_security_config_path())
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())

        token_config = settings.token_config()
        app.state.token_codec = TokenCodec(token_config)
        logger.info("Token codec ready alg=%s ttl_seconds=%d", token_config.algorithm, token_config.ttl_seconds)

        init_db()
        logger.info("Database initialized (tables ensured + seed if needed)")

        yield

    # Global dependency: applies security with zero changes to route handlers.
    app = FastAPI(title="IT Asset Register", dependencies=[Depends(enforce_security)], lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(permissions.router)
    app.include_router(admin.router)
    app.include_router(inventory.router)
    app.include_router(dashboard.router)

    register_exception_handlers(app)
    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors raised by the stores and the scope filter to HTTP responses."""

    @app.exception_handler(UnknownPermissionError)
    async def unknown_permission_handler(_request: Request, exc: UnknownPermissionError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "unknown_permissions": list(exc.permissions)},
        )

    @app.exception_handler(UnknownProjectError)
    async def unknown_project_handler(_request: Request, exc: UnknownProjectError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "unknown_projects": list(exc.project_ids)},
        )

    @app.exception_handler(UserNotFoundError)
    async def user_not_found_handler(_request: Request, exc: UserNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "User not found"})

    @app.exception_handler(ProjectAccessForbidden)
    async def project_forbidden_handler(request: Request, exc: ProjectAccessForbidden):
        authz = getattr(request.state, "authz", None)
        logger.info(
            "Denied (project scope) user_id=%s path=%s project_id=%s",
            getattr(authz, "user_id", None),
            request.url.path,
            exc.project_id,
        )
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": "No access to this project"})


app = create_app()
