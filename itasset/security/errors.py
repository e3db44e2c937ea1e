from __future__ import annotations

from itasset.authz.catalog import UnknownPermissionError


class UserNotFoundError(LookupError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User not found: {user_id!r}")


class UnknownProjectError(ValueError):
    def __init__(self, project_ids: set[str] | frozenset[str]) -> None:
        self.project_ids = tuple(sorted(project_ids))
        super().__init__(f"Unknown project(s): {list(self.project_ids)}")


class ProjectAccessForbidden(PermissionError):
    """
    The caller asked for a project outside their scope.

    Distinct from "not found": the project may exist, the caller may not see it.
    """

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"No access to project {project_id!r}")


__all__ = [
    "ProjectAccessForbidden",
    "UnknownPermissionError",
    "UnknownProjectError",
    "UserNotFoundError",
]
