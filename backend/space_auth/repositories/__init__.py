"""Repository package exposing persistence-layer access for the auth models."""

from __future__ import annotations

from space_auth.repositories.base import BaseRepository
from space_auth.repositories.refresh_token import RefreshTokenRepository
from space_auth.repositories.role import RoleRepository
from space_auth.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "RoleRepository",
    "UserRepository",
]
