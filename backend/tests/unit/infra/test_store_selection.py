"""Tests for choosing the refresh-token backend from configuration."""

from __future__ import annotations

import fakeredis
import pytest
from flask import Flask
from space_auth.infra import stores
from space_auth.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from space_auth.infra.sqlalchemy.refresh_token_store import SQLAlchemyRefreshTokenStore
from space_auth.services._shared.ports import InMemoryRefreshTokenStore


def _app(**config) -> Flask:
    app = Flask("store-selection")
    app.config.update(config)
    return app


def _factory() -> str:
    return "fixed"


def test_default_backend_is_relational():
    store = stores.build_refresh_token_store(_app(), _factory)
    assert isinstance(store, SQLAlchemyRefreshTokenStore)
    assert store.token_factory is _factory


def test_memory_backend():
    store = stores.build_refresh_token_store(_app(REFRESH_TOKEN_BACKEND="memory"), _factory)
    assert isinstance(store, InMemoryRefreshTokenStore)


def test_redis_backend(monkeypatch):
    client = fakeredis.FakeRedis()
    monkeypatch.setattr(stores, "get_redis", lambda: client)
    store = stores.build_refresh_token_store(
        _app(REFRESH_TOKEN_BACKEND="Redis", REDIS_URL="redis://cache:6379/0"), _factory
    )
    assert isinstance(store, RedisRefreshTokenStore)
    assert store.r is client


def test_redis_backend_requires_url():
    with pytest.raises(RuntimeError, match="REDIS_URL"):
        stores.build_refresh_token_store(_app(REFRESH_TOKEN_BACKEND="redis"), _factory)


def test_unknown_backend():
    with pytest.raises(RuntimeError, match="Unknown REFRESH_TOKEN_BACKEND"):
        stores.build_refresh_token_store(_app(REFRESH_TOKEN_BACKEND="mongo"), _factory)
