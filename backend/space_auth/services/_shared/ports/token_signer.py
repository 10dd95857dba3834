from __future__ import annotations

import secrets
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from .user_directory import UserAccount


class TokenSigner(Protocol):
    """Port for minting access tokens and opaque refresh-token strings.

    Verification of access tokens belongs to the transport layer.
    """

    @property
    def access_expires(self) -> timedelta:
        """Lifetime applied to every access token."""
        ...

    def issue_access_token(self, user: UserAccount, roles: Sequence[str]) -> str: ...

    def issue_refresh_token(self) -> str: ...


def generate_refresh_token() -> str:
    """Return a URL-safe random string carrying 256 bits of entropy."""
    return secrets.token_urlsafe(32)


class StubTokenSigner(TokenSigner):
    """Deterministic signer used in unit tests.

    Access tokens are readable ``access.<user_id>.<seq>`` strings whose
    claims are kept in :attr:`issued`; refresh tokens are ``rt-<seq>``.
    """

    def __init__(self, access_expires: timedelta = timedelta(minutes=60)) -> None:
        self._access_expires = access_expires
        self._seq = 0
        self.issued: dict[str, dict[str, Any]] = {}

    @property
    def access_expires(self) -> timedelta:
        return self._access_expires

    def issue_access_token(self, user: UserAccount, roles: Sequence[str]) -> str:
        self._seq += 1
        now = datetime.now(UTC)
        token = f"access.{user.id}.{self._seq}"
        self.issued[token] = {
            "sub": user.id,
            "email": user.email,
            "roles": list(roles),
            "iat": int(now.timestamp()),
            "exp": int((now + self._access_expires).timestamp()),
        }
        return token

    def issue_refresh_token(self) -> str:
        self._seq += 1
        return f"rt-{self._seq}"

    def decode(self, token: str) -> dict[str, Any]:
        return self.issued[token]
