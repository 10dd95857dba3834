"""User account model."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from space_auth.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin
from .role import user_roles

if TYPE_CHECKING:
    from .refresh_token import RefreshToken
    from .role import Role


def normalize_email(value: str) -> str:
    """Return the canonical (trimmed, lowercased) form of an email address."""
    return value.strip().lower()


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account that can authenticate and receive tokens.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed) so the unique
        constraint is effectively case-insensitive.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    display_name : str | None
        Optional public name.
    roles : list[Role]
        Role memberships (many-to-many through ``user_roles``).
    refresh_tokens : list[RefreshToken]
        Every refresh token ever issued to the account.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    roles: Mapped[list[Role]] = relationship(
        secondary=user_roles,
        back_populates="users",
        lazy="selectin",
        order_by="Role.name",
    )
    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    @property
    def role_names(self) -> list[str]:
        """Sorted role names for token claims."""
        return sorted(role.name for role in self.roles)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = normalize_email(value)
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("display_name")
    def _normalize_display_name(self, key: str, value: str | None) -> str | None:
        """Trim display names and store blanks as ``None``."""
        if value is None:
            return None
        v = value.strip()
        return v or None
