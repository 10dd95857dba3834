"""SQLAlchemy models for accounts, roles and refresh tokens."""

from __future__ import annotations

from .refresh_token import RefreshToken
from .role import ADMIN_ROLE, Role, user_roles
from .user import User, normalize_email

__all__ = ["ADMIN_ROLE", "RefreshToken", "Role", "User", "normalize_email", "user_roles"]
