"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`space_auth.services` without knowing internal
structure.

Re-exports
----------
- Base primitives (from ``space_auth.services._shared.base``)
    * :class:`BaseService`

- Identity service (from ``space_auth.services.identity``)
    * :class:`IdentityService` (the user directory)
    * DTOs: :class:`UserRegisterIn`, :class:`PasswordPolicy`

- Session service (from ``space_auth.services.session``)
    * :class:`SessionService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`RevokeIn`, :class:`SessionBundleOut`, :class:`UserPublicOut`
"""

from __future__ import annotations

# Base primitives
from ._shared.base import BaseService

# Identity service + DTOs
from .identity.dto import PasswordPolicy, UserRegisterIn
from .identity.service import IdentityService

# Session service + DTOs
from .session.dto import (
    LoginIn,
    RefreshIn,
    RegisterIn,
    RevokeIn,
    SessionBundleOut,
    UserPublicOut,
)
from .session.service import SessionService

__all__ = [
    # Base
    "BaseService",
    # Identity
    "IdentityService",
    "PasswordPolicy",
    "UserRegisterIn",
    # Session
    "SessionService",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "RevokeIn",
    "SessionBundleOut",
    "UserPublicOut",
]
