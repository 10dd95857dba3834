"""Selection of the refresh-token backend from configuration."""

from __future__ import annotations

from collections.abc import Callable

from flask import Flask

from space_auth.core.config import REFRESH_BACKENDS
from space_auth.core.extensions import get_redis
from space_auth.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from space_auth.infra.sqlalchemy.refresh_token_store import SQLAlchemyRefreshTokenStore
from space_auth.services._shared.ports import InMemoryRefreshTokenStore, RefreshTokenStore


def build_refresh_token_store(
    app: Flask, token_factory: Callable[[], str]
) -> RefreshTokenStore:
    """Instantiate the store named by ``REFRESH_TOKEN_BACKEND``.

    :param app: Configured application (Redis already initialised if used).
    :type app: flask.Flask
    :param token_factory: Source of new opaque token strings.
    :type token_factory: Callable[[], str]
    :returns: The process-wide refresh-token store.
    :rtype: RefreshTokenStore
    :raises RuntimeError: On an unknown backend name, or ``redis`` without
        ``REDIS_URL``.
    """
    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).strip().lower()
    if backend not in REFRESH_BACKENDS:
        raise RuntimeError(
            f"Unknown REFRESH_TOKEN_BACKEND {backend!r}; "
            f"expected one of {sorted(REFRESH_BACKENDS)}"
        )

    if backend == "redis":
        if not app.config.get("REDIS_URL"):
            raise RuntimeError("REFRESH_TOKEN_BACKEND=redis requires REDIS_URL.")
        return RedisRefreshTokenStore(get_redis(), token_factory=token_factory)
    if backend == "memory":
        app.logger.warning("Refresh tokens are kept in process memory; they vanish on restart.")
        return InMemoryRefreshTokenStore(token_factory=token_factory)
    return SQLAlchemyRefreshTokenStore(token_factory=token_factory)
