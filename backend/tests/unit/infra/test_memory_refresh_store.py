"""Tests for InMemoryRefreshTokenStore."""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest
from freezegun import freeze_time
from space_auth.services._shared.ports import InMemoryRefreshTokenStore, RotationResult

TTL = timedelta(days=7)


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


def test_issue_and_find(store):
    view = store.issue("user-1", TTL)
    found = store.find(view.token)
    assert found == view
    assert found.is_active
    assert found.expires_at - found.created_at == TTL
    assert store.find("unknown") is None


def test_issued_tokens_are_unique(store):
    tokens = {store.issue("user-1", TTL).token for _ in range(50)}
    assert len(tokens) == 50


def test_rotate_revokes_old_and_issues_successor(store):
    old = store.issue("user-1", TTL)

    rotation = store.rotate(old_token=old.token, user_id="user-1", ttl=TTL)

    assert rotation.ok
    assert rotation.token.token != old.token
    assert rotation.token.user_id == "user-1"
    assert store.find(old.token).is_revoked
    assert store.find(rotation.token.token).is_active


def test_rotate_twice_reports_revoked(store):
    old = store.issue("user-1", TTL)
    store.rotate(old_token=old.token, user_id="user-1", ttl=TTL)
    again = store.rotate(old_token=old.token, user_id="user-1", ttl=TTL)
    assert again.result is RotationResult.REVOKED
    assert again.token is None


def test_rotate_unknown_or_foreign_token(store):
    view = store.issue("user-1", TTL)
    assert store.rotate(old_token="nope", user_id="user-1", ttl=TTL).result is (
        RotationResult.NOT_FOUND
    )
    assert store.rotate(old_token=view.token, user_id="user-2", ttl=TTL).result is (
        RotationResult.NOT_FOUND
    )
    assert store.find(view.token).is_active


def test_rotate_expired(store):
    with freeze_time("2026-03-01 08:00:00") as frozen:
        view = store.issue("user-1", timedelta(minutes=1))
        frozen.tick(timedelta(minutes=2))
        rotation = store.rotate(old_token=view.token, user_id="user-1", ttl=TTL)
    assert rotation.result is RotationResult.EXPIRED
    assert store.find(view.token).revoked_at is None


def test_revoke_is_idempotent(store):
    view = store.issue("user-1", TTL)
    store.revoke(view.token)
    first = store.find(view.token).revoked_at
    store.revoke(view.token)
    store.revoke("never-issued")
    assert store.find(view.token).revoked_at == first


def test_revoke_all_for_user(store):
    a = store.issue("user-1", TTL)
    store.issue("user-1", TTL)
    other = store.issue("user-2", TTL)
    store.revoke(a.token)

    assert store.revoke_all_for_user("user-1") == 1
    assert all(r.is_revoked for r in store.tokens_for_user("user-1"))
    assert store.find(other.token).is_active


def test_concurrent_rotation_has_single_winner(store):
    old = store.issue("user-1", TTL)
    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(store.rotate(old_token=old.token, user_id="user-1", ttl=TTL).result)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(RotationResult.OK) == 1
    assert results.count(RotationResult.REVOKED) == 7
    active = [r for r in store.tokens_for_user("user-1") if r.is_active]
    assert len(active) == 1
