"""
Tests for scope resolution and the project filter merge.

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

import pytest

from itasset.authz.roles import Role
from itasset.models.security import Project, User
from itasset.security.errors import ProjectAccessForbidden
from itasset.security.membership import ProjectMembershipStore
from itasset.security.permission_store import provision_user
from itasset.security.scope import AccessScope, AccessScopeResolver, resolve_project_filter


@pytest.fixture
def projects(db_session):
    p1 = Project(code="P1", name="Project One")
    p2 = Project(code="P2", name="Project Two")
    db_session.add_all([p1, p2])
    db_session.commit()
    return p1, p2


@pytest.mark.parametrize("role", [Role.SUPER_ADMIN, Role.ADMIN])
def test_privileged_roles_are_unrestricted_without_membership(db_session, role):
    user = provision_user(db_session, email="boss@example.com", role=role)

    scope = AccessScopeResolver(db_session).resolve_scope_for(user.id)

    assert scope == AccessScope.everything()
    assert scope.unrestricted


@pytest.mark.parametrize("role", [Role.SUPER_ADMIN, Role.ADMIN])
def test_privileged_roles_stay_unrestricted_with_memberships(db_session, projects, role):
    # Arrange: membership rows exist but must not narrow a privileged role
    p1, p2 = projects
    user = provision_user(db_session, email="boss@example.com", role=role)
    ProjectMembershipStore(db_session).set_all(user.id, [p1.id, p2.id])

    # Act
    scope = AccessScopeResolver(db_session).resolve_scope_for(user.id)

    # Assert
    assert scope == AccessScope.everything()
    assert resolve_project_filter(scope).project_ids is None


@pytest.mark.parametrize("role", [Role.MANAGER, Role.USER])
def test_other_roles_are_limited_to_membership(db_session, projects, role):
    p1, _p2 = projects
    user = provision_user(db_session, email="staff@example.com", role=role)
    ProjectMembershipStore(db_session).assign(user.id, p1.id)

    scope = AccessScopeResolver(db_session).resolve_scope_for(user.id)

    assert scope == AccessScope.restricted({p1.id})
    assert scope.allows(p1.id)


def test_no_membership_means_empty_scope(db_session):
    user = provision_user(db_session, email="new@example.com", role=Role.USER)

    scope = AccessScopeResolver(db_session).resolve_scope_for(user.id)

    assert not scope.unrestricted
    assert scope.is_empty


def test_missing_user_is_denied_everything(db_session):
    scope = AccessScopeResolver(db_session).resolve_scope_for("deleted-user")
    assert scope == AccessScope.nothing()


def test_inactive_admin_is_denied_everything(db_session):
    user = provision_user(db_session, email="old.admin@example.com", role=Role.ADMIN)
    user.is_active = False
    db_session.commit()

    assert AccessScopeResolver(db_session).resolve_scope_for(user.id).is_empty


def test_resolver_helpers_handle_absent_user(db_session):
    resolver = AccessScopeResolver(db_session)
    assert resolver.can_see_all_data(None) is False
    assert resolver.project_ids_of(None) == frozenset()
    assert resolver.resolve_scope(None).is_empty


def test_role_change_takes_effect_on_next_resolution(db_session):
    user = provision_user(db_session, email="promo@example.com", role=Role.USER)
    resolver = AccessScopeResolver(db_session)
    assert not resolver.resolve_scope_for(user.id).unrestricted

    db_session.get(User, user.id).role = Role.ADMIN
    db_session.commit()

    assert resolver.resolve_scope_for(user.id).unrestricted


# ---- resolve_project_filter ---------------------------------------------------------------


def test_unrestricted_without_request_has_no_filter():
    project_filter = resolve_project_filter(AccessScope.everything())
    assert project_filter.project_ids is None
    assert not project_filter.is_empty


def test_unrestricted_honours_requested_project():
    project_filter = resolve_project_filter(AccessScope.everything(), "p9")
    assert project_filter.project_ids == frozenset({"p9"})


def test_restricted_requested_member_project():
    project_filter = resolve_project_filter(AccessScope.restricted({"p1", "p2"}), "p2")
    assert project_filter.project_ids == frozenset({"p2"})


def test_restricted_requested_foreign_project_is_forbidden():
    with pytest.raises(ProjectAccessForbidden) as exc_info:
        resolve_project_filter(AccessScope.restricted({"p1"}), "p2")
    assert exc_info.value.project_id == "p2"


def test_empty_scope_requesting_a_project_is_forbidden():
    with pytest.raises(ProjectAccessForbidden):
        resolve_project_filter(AccessScope.nothing(), "p1")


def test_empty_scope_without_request_is_empty_filter():
    assert resolve_project_filter(AccessScope.nothing()).is_empty


def test_restricted_without_request_covers_every_member_project():
    project_filter = resolve_project_filter(AccessScope.restricted({"p1", "p2", "p3"}))
    assert project_filter.project_ids == frozenset({"p1", "p2", "p3"})


def test_blank_request_is_treated_as_absent():
    assert resolve_project_filter(AccessScope.restricted({"p1"}), "").project_ids == frozenset({"p1"})


def test_scope_to_dict():
    assert AccessScope.restricted({"b", "a"}).to_dict() == {"unrestricted": False, "project_ids": ["a", "b"]}
