from __future__ import annotations

import hashlib
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from enum import Enum, auto
from typing import Protocol

from .token_signer import generate_refresh_token


def token_digest(token: str) -> str:
    """Return the hex SHA-256 digest under which ``token`` is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RotationResult(Enum):
    """Outcome of an atomic refresh rotation attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """
    Read-model for one refresh token.

    :ivar token: The opaque token string as presented or issued.
    :ivar user_id: Owner user id.
    :ivar created_at: Issue instant (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked_at: Revocation instant, ``None`` while not revoked.
    """

    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        return datetime.now(UTC) >= self.expires_at

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_revoked and not self.is_expired


@dataclass(frozen=True, slots=True)
class Rotation:
    """Result of :meth:`RefreshTokenStore.rotate`; ``token`` is set only on ``OK``."""

    result: RotationResult
    token: RefreshTokenView | None = None

    @property
    def ok(self) -> bool:
        return self.result is RotationResult.OK


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh tokens.

    A record moves at most once from active to revoked and is never
    reactivated. ``rotate`` MUST be atomic: revoking the old record and
    inserting its successor happen together or not at all, and at most one
    concurrent caller can consume a given token. Backend failures surface as
    :class:`~space_auth.services._shared.errors.StorageError`.
    """

    def issue(self, user_id: str, ttl: timedelta) -> RefreshTokenView:
        """Create and persist a new active token for ``user_id``."""
        ...

    def find(self, token: str) -> RefreshTokenView | None:
        """Return the record for ``token`` whether active or not."""
        ...

    def revoke(self, token: str) -> None:
        """Revoke ``token`` if not revoked yet; unknown tokens are ignored."""
        ...

    def rotate(self, *, old_token: str, user_id: str, ttl: timedelta) -> Rotation:
        """Atomically revoke ``old_token`` and issue its successor."""
        ...

    def revoke_all_for_user(self, user_id: str) -> int:
        """Revoke every active token of ``user_id``; returns how many changed."""
        ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store with atomic rotation behavior.

    .. note::
       A single lock serialises every operation; meant for tests and local
       tooling, state is lost on restart.
    """

    def __init__(self, token_factory: Callable[[], str] = generate_refresh_token) -> None:
        self._token_factory = token_factory
        self._by_token: dict[str, RefreshTokenView] = {}
        self._lock = threading.Lock()

    # ------------------------- helpers -------------------------

    def _new_record(self, user_id: str, ttl: timedelta, now: datetime) -> RefreshTokenView:
        token = self._token_factory()
        while token in self._by_token:
            token = self._token_factory()
        record = RefreshTokenView(
            token=token, user_id=user_id, created_at=now, expires_at=now + ttl
        )
        self._by_token[token] = record
        return record

    # -------------------------- API ----------------------------

    def issue(self, user_id: str, ttl: timedelta) -> RefreshTokenView:
        with self._lock:
            return self._new_record(user_id, ttl, datetime.now(UTC))

    def find(self, token: str) -> RefreshTokenView | None:
        with self._lock:
            return self._by_token.get(token)

    def revoke(self, token: str) -> None:
        with self._lock:
            record = self._by_token.get(token)
            if record is None or record.is_revoked:
                return
            self._by_token[token] = replace(record, revoked_at=datetime.now(UTC))

    def rotate(self, *, old_token: str, user_id: str, ttl: timedelta) -> Rotation:
        with self._lock:
            record = self._by_token.get(old_token)
            if record is None or record.user_id != user_id:
                return Rotation(RotationResult.NOT_FOUND)
            if record.is_revoked:
                return Rotation(RotationResult.REVOKED)
            if record.is_expired:
                return Rotation(RotationResult.EXPIRED)

            now = datetime.now(UTC)
            self._by_token[old_token] = replace(record, revoked_at=now)
            return Rotation(RotationResult.OK, self._new_record(user_id, ttl, now))

    def revoke_all_for_user(self, user_id: str) -> int:
        with self._lock:
            now = datetime.now(UTC)
            active = [
                token
                for token, record in self._by_token.items()
                if record.user_id == user_id and record.is_active
            ]
            for token in active:
                self._by_token[token] = replace(self._by_token[token], revoked_at=now)
            return len(active)

    def tokens_for_user(self, user_id: str) -> list[RefreshTokenView]:
        """Return every record of ``user_id`` in issue order (test helper)."""
        with self._lock:
            return [r for r in self._by_token.values() if r.user_id == user_id]
