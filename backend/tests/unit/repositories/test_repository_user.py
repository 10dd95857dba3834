"""Tests for UserRepository and RoleRepository."""

from __future__ import annotations

from space_auth.repositories import RoleRepository, UserRepository
from tests.factories.role import RoleFactory
from tests.factories.user import UserFactory


class TestUserRepository:
    def test_get_by_email_is_case_insensitive(self, session):
        user = UserFactory(email="carol@example.com")
        repo = UserRepository(session=session)
        assert repo.get_by_email("  CAROL@Example.com") is user
        assert repo.get_by_email("nobody@example.com") is None

    def test_get_by_primary_key(self, session):
        user = UserFactory(display_name="Grace")
        repo = UserRepository(session=session)
        assert repo.get(user.id) is user
        assert repo.get("missing") is None

    def test_get_for_update(self, session):
        user = UserFactory()
        repo = UserRepository(session=session)
        assert repo.get_for_update(user.id) is user


class TestRoleRepository:
    def test_get_or_create(self, session):
        repo = RoleRepository(session=session)
        role, created = repo.get_or_create("Admin")
        assert created is True
        again, created_again = repo.get_or_create("Admin")
        assert again is role
        assert created_again is False

    def test_get_by_name(self, session):
        role = RoleFactory(name="Support")
        repo = RoleRepository(session=session)
        assert repo.get_by_name("Support") is role
        assert repo.get_by_name("support") is None
