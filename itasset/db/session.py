from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from itasset.settings import get_settings


_settings = get_settings()

engine = create_engine(
    _settings.resolved_db_url(),
    connect_args={"check_same_thread": False} if _settings.resolved_db_url().startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)

SCOPE_INFO_KEY = "scope"


def bind_request_scope(db: Session, request: Request) -> Session:
    """
    Copy the request's resolved AccessScope onto the session.

    The `do_orm_execute` listener in itasset/db/filters.py reads it from
    `Session.info` and restricts every project-scoped SELECT accordingly.
    """

    authz = getattr(getattr(request, "state", None), "authz", None)
    if authz is not None:
        db.info[SCOPE_INFO_KEY] = authz.scope
    return db


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Main DB dependency.

    Handlers that forget to apply the project filter explicitly are still
    scoped: the session carries the AccessScope resolved for this request.
    """

    db = SessionLocal()
    try:
        bind_request_scope(db, request)
        yield db
    finally:
        db.close()
