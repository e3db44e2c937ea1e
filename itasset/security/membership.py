from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from itasset.models.security import Project, User, UserProject
from itasset.security.errors import UnknownProjectError, UserNotFoundError

logger = logging.getLogger(__name__)


class ProjectMembershipStore:
    """
    Per-user project membership (``user_projects``).

    Membership only decides which rows a non-privileged user can see; it
    grants no capabilities. Mutations are idempotent and validate the user
    and project ids before touching any row.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def project_ids_of(self, user_id: str) -> frozenset[str]:
        rows = self._db.scalars(select(UserProject.project_id).where(UserProject.user_id == user_id)).all()
        return frozenset(rows)

    def assign(self, user_id: str, project_id: str) -> None:
        self._require_user(user_id)
        self.ensure_projects_exist({project_id})
        if project_id in self.project_ids_of(user_id):
            return

        self._db.add(UserProject(user_id=user_id, project_id=project_id))
        try:
            self._db.commit()
        except IntegrityError:
            # Lost a race with an identical insert; the pair exists either way.
            self._db.rollback()
            if project_id not in self.project_ids_of(user_id):
                raise
        logger.info("Project assigned user_id=%s project_id=%s", user_id, project_id)

    def unassign(self, user_id: str, project_id: str) -> None:
        self._require_user(user_id)
        self._db.execute(
            delete(UserProject).where(UserProject.user_id == user_id, UserProject.project_id == project_id)
        )
        self._db.commit()
        logger.info("Project unassigned user_id=%s project_id=%s", user_id, project_id)

    def set_all(self, user_id: str, project_ids: Iterable[str]) -> frozenset[str]:
        """Replace the user's membership in one transaction. Returns the new set."""

        desired = frozenset(project_ids)
        self._require_user(user_id)
        self.ensure_projects_exist(desired)

        try:
            current = self.project_ids_of(user_id)
            removed = current - desired
            added = desired - current
            if removed:
                self._db.execute(
                    delete(UserProject).where(
                        UserProject.user_id == user_id,
                        UserProject.project_id.in_(removed),
                    )
                )
            self._db.add_all(UserProject(user_id=user_id, project_id=p) for p in sorted(added))
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        logger.info(
            "Project membership replaced user_id=%s added=%s removed=%s",
            user_id,
            sorted(added),
            sorted(removed),
        )
        return desired

    def _require_user(self, user_id: str) -> None:
        if self._db.get(User, user_id) is None:
            raise UserNotFoundError(user_id)

    def ensure_projects_exist(self, project_ids: Iterable[str]) -> None:
        wanted = set(project_ids)
        if not wanted:
            return
        found = set(self._db.scalars(select(Project.id).where(Project.id.in_(wanted))).all())
        missing = wanted - found
        if missing:
            raise UnknownProjectError(missing)
