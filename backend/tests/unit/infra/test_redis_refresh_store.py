"""
Unit tests for RedisRefreshTokenStore using fakeredis.

Covered flows:
- issue + find
- rotate (success, replay, foreign owner, expiry)
- revoke idempotency
- revoke_all_for_user with stale index cleanup
- Redis failures surfacing as StorageError
"""

from __future__ import annotations

from datetime import timedelta

import fakeredis
import pytest
from freezegun import freeze_time
from space_auth.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from space_auth.services._shared.errors import StorageError
from space_auth.services._shared.ports import RotationResult, token_digest

TTL = timedelta(days=7)


@pytest.fixture
def server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(server):
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis(server=server)
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    """Provide a RedisRefreshTokenStore backed by FakeRedis."""
    return RedisRefreshTokenStore(r=fake_redis)


def test_issue_and_find(store, fake_redis):
    view = store.issue("user-1", TTL)

    found = store.find(view.token)
    assert found is not None
    assert found.user_id == "user-1"
    assert found.is_active
    assert found.expires_at == view.expires_at

    # Keyed by digest; the raw token never reaches Redis
    digest = token_digest(view.token)
    assert fake_redis.exists(f"rt:{digest}")
    assert not fake_redis.exists(f"rt:{view.token}")
    assert fake_redis.sismember("rt:u:user-1", digest)
    assert fake_redis.ttl(f"rt:{digest}") > int(TTL.total_seconds())


def test_find_unknown(store):
    assert store.find("missing") is None


def test_rotate_success_and_replay(store):
    old = store.issue("user-1", TTL)

    rotation = store.rotate(old_token=old.token, user_id="user-1", ttl=TTL)
    assert rotation.ok
    assert rotation.token.token != old.token
    assert store.find(old.token).is_revoked
    assert store.find(rotation.token.token).is_active

    replay = store.rotate(old_token=old.token, user_id="user-1", ttl=TTL)
    assert replay.result is RotationResult.REVOKED


def test_rotate_not_found(store):
    view = store.issue("user-1", TTL)
    assert store.rotate(old_token="nope", user_id="user-1", ttl=TTL).result is (
        RotationResult.NOT_FOUND
    )
    assert store.rotate(old_token=view.token, user_id="user-2", ttl=TTL).result is (
        RotationResult.NOT_FOUND
    )
    assert store.find(view.token).is_active


def test_rotate_expired(store):
    with freeze_time("2026-02-01 09:00:00") as frozen:
        view = store.issue("user-1", timedelta(minutes=10))
        frozen.tick(timedelta(minutes=11))
        rotation = store.rotate(old_token=view.token, user_id="user-1", ttl=TTL)
        found = store.find(view.token)
    assert rotation.result is RotationResult.EXPIRED
    assert found is not None
    assert found.revoked_at is None


def test_revoke_idempotent(store):
    view = store.issue("user-1", TTL)
    store.revoke(view.token)
    first = store.find(view.token).revoked_at
    assert first is not None

    store.revoke(view.token)
    store.revoke("never-issued")
    assert store.find(view.token).revoked_at == first


def test_revoke_all_for_user(store, fake_redis):
    a = store.issue("user-1", TTL)
    b = store.issue("user-1", TTL)
    other = store.issue("user-2", TTL)
    store.revoke(a.token)

    # Simulate an evicted hash still listed in the user index
    evicted = store.issue("user-1", TTL)
    fake_redis.delete(f"rt:{token_digest(evicted.token)}")

    assert store.revoke_all_for_user("user-1") == 1
    assert store.find(b.token).is_revoked
    assert store.find(other.token).is_active
    assert not fake_redis.sismember("rt:u:user-1", token_digest(evicted.token))


def test_redis_outage_raises_storage_error(store, server):
    server.connected = False
    with pytest.raises(StorageError):
        store.issue("user-1", TTL)
    with pytest.raises(StorageError):
        store.find("anything")
    with pytest.raises(StorageError):
        store.rotate(old_token="anything", user_id="user-1", ttl=TTL)


def test_user_index_expires_with_newest_token(store, fake_redis):
    short = store.issue("user-ttl", timedelta(hours=1))
    index_ttl_after_short = fake_redis.ttl("rt:u:user-ttl")
    assert 0 < index_ttl_after_short <= fake_redis.ttl(f"rt:{token_digest(short.token)}")

    longer = store.issue("user-ttl", TTL)
    newest_key_ttl = fake_redis.ttl(f"rt:{token_digest(longer.token)}")
    index_ttl = fake_redis.ttl("rt:u:user-ttl")
    assert index_ttl > index_ttl_after_short
    assert newest_key_ttl - 1 <= index_ttl <= newest_key_ttl


def test_rotation_refreshes_user_index_ttl(store, fake_redis):
    first = store.issue("user-rot", timedelta(hours=1))
    before = fake_redis.ttl("rt:u:user-rot")

    rotation = store.rotate(old_token=first.token, user_id="user-rot", ttl=TTL)

    assert rotation.result is RotationResult.OK
    assert fake_redis.ttl("rt:u:user-rot") > before
