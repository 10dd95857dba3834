"""
DTOs for SessionService.

Inputs mirror the request bodies of the auth endpoints; outputs are the
session bundle and the public user projection returned to clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from space_auth.services._shared.ports import UserAccount

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Registration input.

    :param email: Login email (case-insensitive).
    :param password: Raw password, checked against the password policy.
    :param display_name: Optional public name.
    """

    email: str
    password: str
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class RevokeIn:
    refresh_token: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user projection.

    :param id: Opaque user id.
    :param email: Normalized email.
    :param display_name: Public name.
    :param roles: Role names, sorted.
    """

    id: str
    email: str
    display_name: str | None = None
    roles: list[str] = field(default_factory=list)

    @classmethod
    def from_account(cls, account: UserAccount, roles: list[str] | None = None) -> UserPublicOut:
        return cls(
            id=account.id,
            email=account.email,
            display_name=account.display_name,
            roles=list(account.roles if roles is None else roles),
        )


@dataclass(frozen=True, slots=True)
class SessionBundleOut:
    """
    Credentials handed to a client after register, login or refresh.

    :param access_token: Signed bearer token.
    :param refresh_token: Opaque single-use refresh token.
    :param expires_at: Access-token expiry instant (UTC).
    :param user: Public projection of the authenticated user.
    """

    access_token: str
    refresh_token: str
    expires_at: datetime
    user: UserPublicOut
