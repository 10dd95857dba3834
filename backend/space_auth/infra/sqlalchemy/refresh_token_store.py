"""Relational refresh-token store on top of the SQLAlchemy Unit of Work."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from space_auth.models.base import as_utc, utcnow
from space_auth.models.refresh_token import RefreshToken
from space_auth.services._shared.errors import StorageError
from space_auth.services._shared.ports import (
    RefreshTokenStore,
    RefreshTokenView,
    Rotation,
    RotationResult,
    generate_refresh_token,
    token_digest,
)
from space_auth.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Refresh-token store persisting SHA-256 digests in ``refresh_tokens``.

    Rotation is a single conditional ``UPDATE`` (``revoked_at IS NULL AND
    expires_at > now``) followed by the successor ``INSERT`` in the same
    transaction; the database row lock decides the winner among concurrent
    callers.

    :param token_factory: Produces new opaque token strings.
    :param uow_factory: Read-write unit of work factory.
    :param ro_uow_factory: Read-only unit of work factory.
    """

    token_factory: Callable[[], str] = generate_refresh_token
    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork
    ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork

    # -------------------- helpers --------------------

    @staticmethod
    def _view(token: str, record: RefreshToken) -> RefreshTokenView:
        return RefreshTokenView(
            token=token,
            user_id=record.user_id,
            created_at=as_utc(record.created_at),
            expires_at=as_utc(record.expires_at),
            revoked_at=as_utc(record.revoked_at) if record.revoked_at else None,
        )

    def _insert(
        self, uow: SQLAlchemyUnitOfWork, user_id: str, ttl: timedelta, now: datetime
    ) -> RefreshTokenView:
        token = self.token_factory()
        record = RefreshToken(
            token_hash=token_digest(token),
            user_id=user_id,
            created_at=now,
            expires_at=now + ttl,
        )
        uow.refresh_tokens.add(record)
        return self._view(token, record)

    # -------------------- API ------------------------

    def issue(self, user_id: str, ttl: timedelta) -> RefreshTokenView:
        try:
            with self.uow_factory() as uow:
                return self._insert(uow, user_id, ttl, utcnow())
        except SQLAlchemyError as exc:
            log.error("refresh_store.issue.failed", extra={"user_id": user_id}, exc_info=True)
            raise StorageError() from exc

    def find(self, token: str) -> RefreshTokenView | None:
        try:
            with self.ro_uow_factory() as uow:
                record = uow.refresh_tokens.get_by_digest(token_digest(token))
                return self._view(token, record) if record is not None else None
        except SQLAlchemyError as exc:
            log.error("refresh_store.find.failed", exc_info=True)
            raise StorageError() from exc

    def revoke(self, token: str) -> None:
        try:
            with self.uow_factory() as uow:
                uow.refresh_tokens.mark_revoked(token_digest(token), now=utcnow())
        except SQLAlchemyError as exc:
            log.error("refresh_store.revoke.failed", exc_info=True)
            raise StorageError() from exc

    def rotate(self, *, old_token: str, user_id: str, ttl: timedelta) -> Rotation:
        digest = token_digest(old_token)
        now = utcnow()
        try:
            with self.uow_factory() as uow:
                if uow.refresh_tokens.consume_if_active(digest, user_id=user_id, now=now):
                    return Rotation(RotationResult.OK, self._insert(uow, user_id, ttl, now))

                # Lost the condition: report why from the current row state.
                record = uow.refresh_tokens.get_by_digest(digest)
                if record is None or record.user_id != user_id:
                    return Rotation(RotationResult.NOT_FOUND)
                if record.revoked_at is not None:
                    return Rotation(RotationResult.REVOKED)
                return Rotation(RotationResult.EXPIRED)
        except SQLAlchemyError as exc:
            log.error("refresh_store.rotate.failed", extra={"user_id": user_id}, exc_info=True)
            raise StorageError() from exc

    def revoke_all_for_user(self, user_id: str) -> int:
        try:
            with self.uow_factory() as uow:
                return uow.refresh_tokens.revoke_all_for_user(user_id, now=utcnow())
        except SQLAlchemyError as exc:
            log.error(
                "refresh_store.revoke_all.failed", extra={"user_id": user_id}, exc_info=True
            )
            raise StorageError() from exc
