"""Refresh-token repository: digest lookups and conditional state changes."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from space_auth.models.refresh_token import RefreshToken
from space_auth.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    State changes are single conditional ``UPDATE`` statements; the returned
    row count tells the caller whether its condition still held when the
    database applied the change.
    """

    model = RefreshToken

    def get_by_digest(self, token_hash: str) -> RefreshToken | None:
        """Return the record stored under ``token_hash`` (active or not)."""
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def consume_if_active(self, token_hash: str, *, user_id: str, now: datetime) -> bool:
        """Revoke the record only while it is still active and owned by ``user_id``.

        :param token_hash: Digest of the presented token.
        :type token_hash: str
        :param user_id: Expected owner.
        :type user_id: str
        :param now: Instant used both as ``revoked_at`` and as the expiry cutoff.
        :type now: datetime
        :returns: ``True`` when this call flipped the record to revoked.
        :rtype: bool
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    def mark_revoked(self, token_hash: str, *, now: datetime) -> bool:
        """Set ``revoked_at`` unless already set. Returns whether a row changed."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token_hash == token_hash, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        """Revoke every active record of ``user_id``; returns the affected count."""
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]
