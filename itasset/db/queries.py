"""
Scoped read helpers shared by every project-scoped list endpoint.

Handlers build their own statement (search, ordering) and hand it here with
the ProjectFilter produced by itasset.security.scope.resolve_project_filter.
An empty filter returns immediately, before any SQL is issued.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import Session

from itasset.security.scope import ProjectFilter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageResult:
    items: list[Any] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 20


def paginate_scoped(
    db: Session,
    stmt: Select,
    project_column: ColumnElement,
    project_filter: ProjectFilter,
    *,
    page: int = 1,
    page_size: int = 20,
) -> PageResult:
    if project_filter.is_empty:
        logger.debug("Empty project scope; skipping query")
        return PageResult(items=[], total_count=0, page=page, page_size=page_size)

    stmt = project_filter.apply(stmt, project_column)

    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
    items = list(db.scalars(stmt.offset((page - 1) * page_size).limit(page_size)).all())
    return PageResult(items=items, total_count=total, page=page, page_size=page_size)


def count_scoped(
    db: Session,
    model: type,
    project_column: ColumnElement,
    project_filter: ProjectFilter,
) -> int:
    if project_filter.is_empty:
        return 0
    stmt = project_filter.apply(select(func.count()).select_from(model), project_column)
    return db.scalar(stmt) or 0
