"""
space_auth.services._shared.ports
=================================

*Ports* (hexagonal interfaces) that the session layer depends on.

Modules
-------
- :mod:`token_signer`:
    Defines :class:`~.TokenSigner` - access-token minting and refresh-token
    string generation.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, :class:`~.RotationResult`,
    :class:`~.Rotation` and :class:`~.RefreshTokenView` - persistence and
    atomic rotation of refresh tokens.

- :mod:`user_directory`:
    Defines :class:`~.UserDirectory` and :class:`~.UserAccount` - account
    lookup, creation and password verification.

Concrete adapters (SQLAlchemy, Redis, Flask-JWT-Extended) live under
``space_auth.infra``; the in-memory and stub variants here serve tests.
"""

from __future__ import annotations

from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    RefreshTokenView,
    Rotation,
    RotationResult,
    token_digest,
)
from .token_signer import StubTokenSigner, TokenSigner, generate_refresh_token
from .user_directory import UserAccount, UserDirectory

__all__ = [
    "TokenSigner",
    "StubTokenSigner",
    "generate_refresh_token",
    "RefreshTokenStore",
    "RefreshTokenView",
    "Rotation",
    "RotationResult",
    "InMemoryRefreshTokenStore",
    "token_digest",
    "UserAccount",
    "UserDirectory",
]
