"""Persisted refresh-token record."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from space_auth.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin, as_utc, utcnow

if TYPE_CHECKING:
    from .user import User


class RefreshToken(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    One issued refresh token.

    Only the SHA-256 digest of the opaque token string is stored; lookups
    hash the presented value. Rows are never deleted by the auth flows: a
    token moves once from active to revoked (logout or rotation) and stays
    there for audit and replay detection.

    Fields
    ------
    token_hash : str
        Hex SHA-256 digest of the token string (unique).
    user_id : str
        Owning user.
    expires_at : datetime
        Absolute expiry (UTC).
    revoked_at : datetime | None
        Revocation instant; ``None`` while not revoked.
    """

    __tablename__ = "refresh_tokens"

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        Index("uq_refresh_tokens_token_hash", "token_hash", unique=True),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )

    @property
    def is_expired(self) -> bool:
        return utcnow() >= as_utc(self.expires_at)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_revoked and not self.is_expired
