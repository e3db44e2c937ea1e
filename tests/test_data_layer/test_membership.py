"""
Tests for project membership.

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

import pytest

from itasset.authz.roles import Role
from itasset.models.security import Project
from itasset.security.errors import UnknownProjectError, UserNotFoundError
from itasset.security.membership import ProjectMembershipStore
from itasset.security.permission_store import provision_user


@pytest.fixture
def projects(db_session):
    p1 = Project(code="P1", name="Project One")
    p2 = Project(code="P2", name="Project Two")
    db_session.add_all([p1, p2])
    db_session.commit()
    return p1, p2


@pytest.fixture
def user(db_session):
    return provision_user(db_session, email="uma@example.com", role=Role.USER)


def test_assign_and_unassign_are_idempotent(db_session, projects, user):
    p1, _p2 = projects
    store = ProjectMembershipStore(db_session)

    store.assign(user.id, p1.id)
    store.assign(user.id, p1.id)
    assert store.project_ids_of(user.id) == frozenset({p1.id})

    store.unassign(user.id, p1.id)
    store.unassign(user.id, p1.id)
    assert store.project_ids_of(user.id) == frozenset()


def test_set_all_replaces_membership(db_session, projects, user):
    p1, p2 = projects
    store = ProjectMembershipStore(db_session)
    store.assign(user.id, p1.id)

    result = store.set_all(user.id, [p2.id])

    assert result == frozenset({p2.id})
    assert store.project_ids_of(user.id) == frozenset({p2.id})


def test_unknown_project_rejected_without_change(db_session, projects, user):
    p1, _p2 = projects
    store = ProjectMembershipStore(db_session)
    store.assign(user.id, p1.id)

    with pytest.raises(UnknownProjectError) as exc_info:
        store.set_all(user.id, [p1.id, "nope"])

    assert exc_info.value.project_ids == ("nope",)
    assert store.project_ids_of(user.id) == frozenset({p1.id})


def test_unknown_user_rejected(db_session, projects):
    p1, _p2 = projects
    with pytest.raises(UserNotFoundError):
        ProjectMembershipStore(db_session).assign("missing", p1.id)


def test_membership_does_not_touch_permissions(db_session, projects, user):
    from itasset.security.permission_store import PermissionStore

    before = PermissionStore(db_session).get_permissions(user.id)
    ProjectMembershipStore(db_session).set_all(user.id, [p.id for p in projects])

    assert PermissionStore(db_session).get_permissions(user.id) == before
