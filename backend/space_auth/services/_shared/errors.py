"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or
HTTP. They are the stable contract between stores, the user directory and
the session service.

The translation to HTTP responses (RFC 7807) is handled by
``space_auth/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite only reports the column
    list (``UNIQUE constraint failed: users.email``), so the column suffix of
    ``uq_<table>_<column>`` names is matched as a fallback.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if not name.startswith("uq_"):
        return False
    table_column = name.removeprefix("uq_")
    dotted = {
        f"{table_column[:i]}.{table_column[i + 1 :]}"
        for i, ch in enumerate(table_column)
        if ch == "_"
    }
    return any(candidate in message for candidate in dotted)


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores, the directory or services.
    - The API layer translates them to APIError via BaseService.
    """

    pass


# --------------------------------------------------------------------------- #
# Input validation
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationError(ServiceError):
    """
    Raised when the user directory rejects registration input.

    :param messages: Human-readable validation messages, in check order.
    :type messages: list[str]
    """

    messages: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return "; ".join(self.messages) or "Validation failed"


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Raised when presented credentials do not authenticate a user."""


class InvalidCredentialsError(AuthenticationError):
    """
    Unknown email or wrong password.

    Both causes share one message so callers cannot tell which one occurred.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class TokenError(ServiceError):
    """Raised when a refresh token cannot be redeemed."""


class InvalidTokenError(TokenError):
    """No record exists for the presented refresh token."""

    def __init__(self, message: str = "Invalid refresh token") -> None:
        super().__init__(message)


class TokenInactiveError(TokenError):
    """
    The refresh token exists but is expired or revoked.

    :param cause: ``"expired"`` or ``"revoked"``; kept for logs, not exposed.
    :type cause: str
    """

    EXPIRED = "expired"
    REVOKED = "revoked"

    def __init__(
        self, cause: str, message: str = "Refresh token is expired or revoked"
    ) -> None:
        super().__init__(message)
        self.cause = cause


# --------------------------------------------------------------------------- #
# Lookup / uniqueness
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


class EmailTakenError(ConflictError):
    """An account already uses this (case-insensitive) email."""

    def __init__(self, detail: str = "User with this email already exists") -> None:
        super().__init__(entity="User", detail=detail)


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class StorageError(ServiceError):
    """
    The backing store failed (database or Redis unavailable, I/O error).

    The original exception is chained as ``__cause__``; the message stays
    opaque.
    """

    def __init__(self, message: str = "Storage backend unavailable") -> None:
        super().__init__(message)
