# comments in English; reST docstrings
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import redis  # type: ignore[import-untyped]

from space_auth.services._shared.errors import StorageError
from space_auth.services._shared.ports import (
    RefreshTokenStore,
    RefreshTokenView,
    Rotation,
    RotationResult,
    generate_refresh_token,
    token_digest,
)

log = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=30)


def _s(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


def _dt(value: str) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store with atomic rotation.

    Layout
    ------
    ``rt:<sha256>``
        Hash with ``user_id``, ``created_at``, ``expires_at`` and
        ``revoked_at`` (empty while active), ISO-8601 UTC.
    ``rt:u:<user_id>``
        Set of the user's token digests; its TTL follows the newest token key.

    Keys outlive ``expires_at`` by ``retention`` so that an expired or
    revoked token is still reported as inactive instead of unknown.

    :param r: A Redis client (already connected).
    :param token_factory: Produces new opaque token strings.
    :param retention: Extra key lifetime after expiry.
    """

    r: redis.Redis
    token_factory: Callable[[], str] = generate_refresh_token
    retention: timedelta = DEFAULT_RETENTION

    # -------------------- helpers --------------------

    @staticmethod
    def _k(digest: str) -> str:
        return f"rt:{digest}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    def _key_ttl(self, expires_at: datetime, now: datetime) -> int:
        return max(1, int((expires_at - now + self.retention).total_seconds()))

    @staticmethod
    def _view(token: str, h: dict[Any, Any]) -> RefreshTokenView:
        data = {_s(k): _s(v) for k, v in h.items()}
        return RefreshTokenView(
            token=token,
            user_id=data.get("user_id", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            revoked_at=_dt(data.get("revoked_at", "")),
        )

    def _stage_new(
        self, pipe: Any, user_id: str, ttl: timedelta, now: datetime
    ) -> RefreshTokenView:
        """Queue the writes for a fresh token on ``pipe`` and return its view."""
        token = self.token_factory()
        digest = token_digest(token)
        expires_at = now + ttl
        key = self._k(digest)
        pipe.hset(
            key,
            mapping={
                "user_id": user_id,
                "created_at": now.isoformat(),
                "expires_at": expires_at.isoformat(),
                "revoked_at": "",
            },
        )
        key_ttl = self._key_ttl(expires_at, now)
        pipe.expire(key, key_ttl)
        # The index lives as long as the newest token key.
        pipe.sadd(self._ku(user_id), digest)
        pipe.expire(self._ku(user_id), key_ttl)
        return RefreshTokenView(
            token=token, user_id=user_id, created_at=now, expires_at=expires_at
        )

    @contextmanager
    def _storage_errors(self, op: str) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            log.error("refresh_store.%s.failed", op, exc_info=True)
            raise StorageError() from exc

    # -------------------- API ------------------------

    def issue(self, user_id: str, ttl: timedelta) -> RefreshTokenView:
        """
        Insert the token record *before* the string is handed to the client.
        """
        with self._storage_errors("issue"):
            pipe = self.r.pipeline(transaction=True)
            view = self._stage_new(pipe, user_id, ttl, datetime.now(UTC))
            pipe.execute()
            return view

    def find(self, token: str) -> RefreshTokenView | None:
        with self._storage_errors("find"):
            h = self.r.hgetall(self._k(token_digest(token)))
            return self._view(token, h) if h else None

    def revoke(self, token: str) -> None:
        """Set ``revoked_at`` once; later calls and unknown tokens are no-ops."""
        key = self._k(token_digest(token))
        with self._storage_errors("revoke"):
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        h = p.hgetall(key)
                        if not h or self._view(token, h).is_revoked:
                            p.unwatch()
                            return
                        p.multi()
                        p.hset(key, "revoked_at", datetime.now(UTC).isoformat())
                        p.execute()
                        return
                except redis.WatchError:
                    continue

    def rotate(self, *, old_token: str, user_id: str, ttl: timedelta) -> Rotation:
        """
        Atomically consume ``old_token`` and create its successor.

        Uses WATCH/MULTI/EXEC (optimistic locking) on the old token key:
        - Check existence, ownership and state of the old record.
        - Reject if revoked or expired.
        - Mark old as revoked and create the new entry in one EXEC.
        A concurrent change to the watched key aborts the EXEC and the
        state is re-read, so a losing caller observes ``REVOKED``.
        """
        k_old = self._k(token_digest(old_token))

        with self._storage_errors("rotate"):
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(k_old)
                        h = p.hgetall(k_old)
                        if not h:
                            p.unwatch()
                            return Rotation(RotationResult.NOT_FOUND)

                        current = self._view(old_token, h)
                        if current.user_id != user_id:
                            p.unwatch()
                            return Rotation(RotationResult.NOT_FOUND)
                        if current.is_revoked:
                            p.unwatch()
                            return Rotation(RotationResult.REVOKED)
                        if current.is_expired:
                            p.unwatch()
                            return Rotation(RotationResult.EXPIRED)

                        now = datetime.now(UTC)
                        p.multi()
                        p.hset(k_old, "revoked_at", now.isoformat())
                        new = self._stage_new(p, user_id, ttl, now)
                        p.execute()
                    return Rotation(RotationResult.OK, new)
                except redis.WatchError:
                    # Concurrent modification detected; re-read the state
                    continue

    def revoke_all_for_user(self, user_id: str) -> int:
        key_u = self._ku(user_id)
        with self._storage_errors("revoke_all"):
            digests = [_s(member) for member in self.r.smembers(key_u)]
            revoked = 0
            stale: list[str] = []
            now = datetime.now(UTC).isoformat()
            for digest in digests:
                key = self._k(digest)
                while True:
                    try:
                        with self.r.pipeline() as p:
                            p.watch(key)
                            h = p.hgetall(key)
                            if not h:
                                p.unwatch()
                                stale.append(digest)
                                break
                            if not self._view("", h).is_active:
                                p.unwatch()
                                break
                            p.multi()
                            p.hset(key, "revoked_at", now)
                            p.execute()
                            revoked += 1
                            break
                    except redis.WatchError:
                        continue
            if stale:
                # Hashes already evicted by TTL
                self.r.srem(key_u, *stale)
            return revoked
