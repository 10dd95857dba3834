"""
IdentityService
===============

User directory over the ``users`` / ``roles`` tables:
- Account creation with password policy and email uniqueness
- Lookups by email or id
- Password verification (no token issuance)
- Role membership
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from space_auth.models.role import ADMIN_ROLE
from space_auth.models.user import User, normalize_email
from space_auth.repositories.user import UserRepository
from space_auth.services._shared.base import BaseService
from space_auth.services._shared.errors import (
    EmailTakenError,
    NotFoundError,
    StorageError,
    ValidationError,
    violates,
)
from space_auth.services._shared.ports import UserAccount, UserDirectory
from space_auth.services.identity.dto import PasswordPolicy, UserRegisterIn

log = logging.getLogger(__name__)


def _to_account(user: User) -> UserAccount:
    return UserAccount(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        roles=tuple(user.role_names),
    )


def _looks_like_email(value: str) -> bool:
    local, sep, domain = value.partition("@")
    return bool(local) and bool(sep) and "." in domain and not domain.startswith(".")


class IdentityService(BaseService, UserDirectory):
    """
    Application service for the `User` aggregate, used as the user directory.

    Responsibilities
    ----------------
    - Create users enforcing the password policy and email uniqueness.
    - Look users up by email (case-insensitive) or id.
    - Verify passwords against stored hashes.
    - Manage role membership (seeding and token claims).
    """

    def __init__(self, *, policy: PasswordPolicy | None = None) -> None:
        self.policy = policy or PasswordPolicy()

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def validate_registration(self, dto: UserRegisterIn) -> list[str]:
        """Return every validation message for ``dto``; empty when acceptable."""
        messages: list[str] = []
        if not _looks_like_email(normalize_email(dto.email or "")):
            messages.append("Email format looks invalid.")
        messages.extend(self.policy.violations(dto.password or ""))
        return messages

    def register_user(self, dto: UserRegisterIn) -> UserAccount:
        """
        Create a new user.

        :param dto: Registration input DTO.
        :type dto: UserRegisterIn
        :returns: The stored account.
        :rtype: UserAccount
        :raises ValidationError: When the email or password is rejected.
        :raises EmailTakenError: When the email is already registered.
        :raises StorageError: When the database is unavailable.
        """
        messages = self.validate_registration(dto)
        if messages:
            raise ValidationError(messages)

        email = normalize_email(dto.email)
        if self.find_user_by_email(email) is not None:
            raise EmailTakenError()

        display_name = dto.display_name
        if display_name is None or not display_name.strip():
            display_name = email.partition("@")[0]

        try:
            with self.rw_uow() as uow:
                try:
                    user = uow.users.add(
                        User(email=email, password=dto.password, display_name=display_name)
                    )
                except ValueError as exc:
                    raise ValidationError([str(exc)]) from exc
                account = _to_account(user)
        except IntegrityError as exc:
            # Concurrent registration won between the lookup and the insert
            if violates(exc, "uq_users_email"):
                raise EmailTakenError() from exc
            raise
        except SQLAlchemyError as exc:
            log.error("identity.user.create_failed", exc_info=True)
            raise StorageError() from exc

        log.info("identity.user.created", extra={"user_id": account.id})
        return account

    def create_user(
        self, email: str, password: str, display_name: str | None = None
    ) -> UserAccount:
        return self.register_user(
            UserRegisterIn(email=email, password=password, display_name=display_name)
        )

    # --------------------------------------------------------------------- #
    # Lookups
    # --------------------------------------------------------------------- #

    def find_user_by_email(self, email: str) -> UserAccount | None:
        try:
            with self.ro_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get_by_email(email)
                return _to_account(user) if user is not None else None
        except SQLAlchemyError as exc:
            log.error("identity.lookup.failed", exc_info=True)
            raise StorageError() from exc

    def get_user(self, user_id: str) -> UserAccount | None:
        try:
            with self.ro_uow() as uow:
                user = uow.users.get(user_id)
                return _to_account(user) if user is not None else None
        except SQLAlchemyError as exc:
            log.error("identity.lookup.failed", extra={"user_id": user_id}, exc_info=True)
            raise StorageError() from exc

    # --------------------------------------------------------------------- #
    # Credentials
    # --------------------------------------------------------------------- #

    def verify_password(self, user: UserAccount, password: str) -> bool:
        try:
            with self.ro_uow() as uow:
                stored = uow.users.get(user.id)
                return stored is not None and stored.verify_password(password)
        except SQLAlchemyError as exc:
            log.error("identity.verify.failed", extra={"user_id": user.id}, exc_info=True)
            raise StorageError() from exc

    def roles_of(self, user: UserAccount) -> list[str]:
        try:
            with self.ro_uow() as uow:
                stored = uow.users.get(user.id)
                return stored.role_names if stored is not None else []
        except SQLAlchemyError as exc:
            log.error("identity.roles.failed", extra={"user_id": user.id}, exc_info=True)
            raise StorageError() from exc

    # --------------------------------------------------------------------- #
    # Roles
    # --------------------------------------------------------------------- #

    def ensure_role(self, name: str = ADMIN_ROLE) -> bool:
        """Create role ``name`` when missing. Returns ``True`` if it was created."""
        try:
            with self.rw_uow() as uow:
                _, created = uow.roles.get_or_create(name)
        except SQLAlchemyError as exc:
            log.error("identity.role.failed", exc_info=True)
            raise StorageError() from exc
        if created:
            log.info("identity.role.created")
        return created

    def add_role(self, user_id: str, name: str) -> UserAccount:
        """
        Grant role ``name`` to a user (idempotent); the role is created if missing.

        :raises NotFoundError: If the user does not exist.
        :raises StorageError: If the database is unavailable.
        """
        try:
            with self.rw_uow() as uow:
                user = uow.users.get_for_update(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                role, _ = uow.roles.get_or_create(name)
                if role not in user.roles:
                    user.roles.append(role)
                    uow.users.flush()
                return _to_account(user)
        except SQLAlchemyError as exc:
            log.error("identity.role.failed", extra={"user_id": user_id}, exc_info=True)
            raise StorageError() from exc
