"""Tests for the admin maintenance script."""

import pytest
from sqlalchemy import select

from backend.newsletter.db.models.user import User
from backend.newsletter.security import verify_password
from scripts import create_admin


@pytest.fixture
def use_test_database(monkeypatch, session_factory):
    monkeypatch.setattr(create_admin, "get_session_factory", lambda: session_factory)


def test_create_admin_stores_a_hashed_password(use_test_database, test_session):
    user = create_admin.create_admin("editor", "a-long-enough-password")

    assert user is not None
    stored = test_session.execute(select(User)).scalar_one()
    assert stored.username == "editor"
    assert stored.password_hash != "a-long-enough-password"
    assert verify_password("a-long-enough-password", stored.password_hash)


def test_create_admin_refuses_duplicate_usernames(use_test_database):
    assert create_admin.create_admin("editor", "a-long-enough-password") is not None
    assert create_admin.create_admin("editor", "another-long-password") is None


def test_create_admin_rejects_short_passwords(use_test_database):
    with pytest.raises(ValueError):
        create_admin.create_admin("editor", "short")
