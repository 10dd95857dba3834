"""Tests for IdentityService acting as the user directory."""

from __future__ import annotations

from unittest import mock

import pytest
from space_auth.models import ADMIN_ROLE
from space_auth.services import IdentityService, PasswordPolicy, UserRegisterIn
from space_auth.repositories import UserRepository
from space_auth.services._shared.errors import (
    EmailTakenError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from sqlalchemy.exc import OperationalError


@pytest.fixture()
def service() -> IdentityService:
    return IdentityService()


class TestRegistration:
    def test_register_normalizes_email_and_defaults_display_name(self, service):
        account = service.register_user(
            UserRegisterIn(email=" Alice@Example.COM ", password="secret1")
        )
        assert account.email == "alice@example.com"
        assert account.display_name == "alice"
        assert account.roles == ()

    def test_explicit_display_name_kept(self, service):
        account = service.create_user("bob@example.com", "secret1", "Bobby")
        assert account.display_name == "Bobby"

    def test_duplicate_email_case_insensitive(self, service):
        first = service.create_user("carol@example.com", "secret1", "Carol")

        with pytest.raises(EmailTakenError):
            service.create_user("CAROL@example.com", "other99", "Impostor")

        stored = service.find_user_by_email("carol@example.com")
        assert stored == first
        assert service.verify_password(stored, "secret1") is True
        assert service.verify_password(stored, "other99") is False

    @pytest.mark.parametrize(
        ("password", "expected"),
        [
            ("abc1", ["Passwords must be at least 6 characters."]),
            ("abcdefg", ["Passwords must have at least one digit ('0'-'9')."]),
            ("ABCDEF1", ["Passwords must have at least one lowercase ('a'-'z')."]),
            (
                "A",
                [
                    "Passwords must be at least 6 characters.",
                    "Passwords must have at least one digit ('0'-'9').",
                    "Passwords must have at least one lowercase ('a'-'z').",
                ],
            ),
        ],
    )
    def test_password_policy_messages(self, service, password, expected):
        with pytest.raises(ValidationError) as excinfo:
            service.create_user("dave@example.com", password)
        assert excinfo.value.messages == expected
        assert service.find_user_by_email("dave@example.com") is None

    def test_invalid_email(self, service):
        with pytest.raises(ValidationError) as excinfo:
            service.create_user("not-an-email", "secret1")
        assert excinfo.value.messages == ["Email format looks invalid."]

    def test_custom_policy(self):
        relaxed = IdentityService(policy=PasswordPolicy(min_length=3, require_digit=False))
        account = relaxed.create_user("erin@example.com", "abc")
        assert account.email == "erin@example.com"


class TestLookups:
    def test_find_and_get(self, service):
        account = service.create_user("frank@example.com", "secret1")
        assert service.find_user_by_email("FRANK@example.com") == account
        assert service.get_user(account.id) == account
        assert service.find_user_by_email("ghost@example.com") is None
        assert service.get_user("00000000-0000-0000-0000-000000000000") is None

    def test_verify_password(self, service):
        account = service.create_user("gina@example.com", "secret1")
        assert service.verify_password(account, "secret1") is True
        assert service.verify_password(account, "secret2") is False


class TestRoles:
    def test_ensure_role_is_idempotent(self, service):
        assert service.ensure_role() is True
        assert service.ensure_role(ADMIN_ROLE) is False

    def test_add_role(self, service):
        account = service.create_user("hank@example.com", "secret1")
        updated = service.add_role(account.id, ADMIN_ROLE)
        assert updated.roles == (ADMIN_ROLE,)
        assert service.roles_of(account) == [ADMIN_ROLE]

        # Granting twice keeps a single membership
        again = service.add_role(account.id, ADMIN_ROLE)
        assert again.roles == (ADMIN_ROLE,)

    def test_add_role_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.add_role("missing", ADMIN_ROLE)


class TestStorageFailures:
    @pytest.fixture()
    def outage(self):
        return OperationalError("SELECT", {}, Exception("connection refused"))

    def test_lookup_failure_becomes_storage_error(self, service, outage):
        with (
            mock.patch.object(UserRepository, "get_by_email", side_effect=outage),
            pytest.raises(StorageError) as excinfo,
        ):
            service.find_user_by_email("ivy@example.com")
        assert excinfo.value.__cause__ is outage

    def test_verify_failure_becomes_storage_error(self, service, outage):
        account = service.create_user("jack@example.com", "secret1")
        with (
            mock.patch.object(UserRepository, "get", side_effect=outage),
            pytest.raises(StorageError),
        ):
            service.verify_password(account, "secret1")

    def test_roles_failure_becomes_storage_error(self, service, outage):
        account = service.create_user("kate@example.com", "secret1")
        with (
            mock.patch.object(UserRepository, "get", side_effect=outage),
            pytest.raises(StorageError),
        ):
            service.roles_of(account)

    def test_insert_failure_becomes_storage_error(self, service, outage):
        with (
            mock.patch.object(UserRepository, "add", side_effect=outage),
            pytest.raises(StorageError),
        ):
            service.create_user("liam@example.com", "secret1")
        assert service.find_user_by_email("liam@example.com") is None
