"""
Tests for account provisioning and credential data access (ORM).

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

from itasset.authz.roles import Role
from itasset.models.security import User
from itasset.security.auth import record_login, verify_credentials
from itasset.security.permission_store import provision_user


def test_provisioned_user_is_stored_normalized(db_session):
    # Arrange: provision a user (like init_db does)
    user = provision_user(db_session, email="Test@Example.com", role=Role.MANAGER, first_name="Tess", last_name="Ter")

    # Act
    loaded = db_session.get(User, user.id)

    # Assert
    assert loaded.email == "test@example.com"
    assert loaded.role is Role.MANAGER
    assert loaded.is_active
    assert loaded.display_name == "Tess Ter"


def test_verify_credentials(db_session):
    user = provision_user(db_session, email="uma@example.com", role=Role.USER)

    assert verify_credentials(db_session, "  UMA@example.com ", "pw", "pw").id == user.id
    assert verify_credentials(db_session, "uma@example.com", "wrong", "pw") is None
    assert verify_credentials(db_session, "nobody@example.com", "pw", "pw") is None


def test_verify_credentials_rejects_inactive(db_session):
    user = provision_user(db_session, email="gone@example.com", role=Role.USER)
    user.is_active = False
    db_session.commit()

    assert verify_credentials(db_session, "gone@example.com", "pw", "pw") is None


def test_record_login_sets_timestamp(db_session):
    user = provision_user(db_session, email="uma@example.com", role=Role.USER)
    assert user.last_login is None

    record_login(db_session, user)

    assert db_session.get(User, user.id).last_login is not None


def test_display_name_falls_back_to_email(db_session):
    user = provision_user(db_session, email="anon@example.com", role=Role.USER)
    assert user.display_name == "anon@example.com"
