from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True, slots=True)
class UserAccount:
    """
    Read-model of a directory account handed to the session layer.

    :ivar id: Opaque user identifier.
    :ivar email: Normalized email.
    :ivar display_name: Optional display name.
    :ivar roles: Role names, sorted.
    """

    id: str
    email: str
    display_name: str | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)


class UserDirectory(Protocol):
    """
    Account storage and password verification consumed by the session layer.

    Lookups are case-insensitive on email. ``create_user`` raises
    :class:`~space_auth.services._shared.errors.ValidationError` with the
    list of rejected rules, or
    :class:`~space_auth.services._shared.errors.EmailTakenError` when the
    email is already registered.
    """

    def find_user_by_email(self, email: str) -> UserAccount | None: ...

    def get_user(self, user_id: str) -> UserAccount | None: ...

    def create_user(
        self, email: str, password: str, display_name: str | None = None
    ) -> UserAccount: ...

    def verify_password(self, user: UserAccount, password: str) -> bool: ...

    def roles_of(self, user: UserAccount) -> list[str]: ...
