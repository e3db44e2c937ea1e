from __future__ import annotations

from sqlalchemy import event, false
from sqlalchemy.orm import Session, with_loader_criteria

from itasset.db.session import SCOPE_INFO_KEY


@event.listens_for(Session, "do_orm_execute")
def _apply_project_scope(execute_state) -> None:
    """
    Transparent project scoping.

    Any ORM SELECT issued on a session that carries an AccessScope is limited
    to the scope's projects:
        db.scalars(select(Asset)).all()
    returns only rows whose project_id is visible to the caller, and nothing
    at all for a restricted-to-empty scope.
    """

    if not execute_state.is_select:
        return

    scope = execute_state.session.info.get(SCOPE_INFO_KEY)
    if scope is None or scope.unrestricted:
        return

    # Local import to avoid cycles.
    from itasset.models.inventory import PROJECT_SCOPED_MODELS  # noqa: WPS433 (local import)
    from itasset.models.security import Project  # noqa: WPS433 (local import)

    project_ids = tuple(sorted(scope.project_ids))

    options = []
    for model in PROJECT_SCOPED_MODELS:
        criteria = model.project_id.in_(project_ids) if project_ids else false()
        options.append(with_loader_criteria(model, criteria, include_aliases=True))
    project_criteria = Project.id.in_(project_ids) if project_ids else false()
    options.append(with_loader_criteria(Project, project_criteria, include_aliases=True))

    execute_state.statement = execute_state.statement.options(*options)
