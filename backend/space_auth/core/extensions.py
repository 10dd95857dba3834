"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import redis
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError
from sqlalchemy import MetaData

from space_auth.core.config import AuthSettings, load_auth_settings

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
redis_client: redis.Redis | None = None


def _apply_jwt_config(app: Flask, settings: AuthSettings) -> None:
    """Project :class:`AuthSettings` onto the keys Flask-JWT-Extended reads.

    The bearer-auth middleware (``verify_jwt_in_request``) validates tokens
    with the very same key, algorithm, issuer and audience used to sign them.
    """
    app.config["JWT_SECRET_KEY"] = settings.signing_key
    app.config["JWT_ALGORITHM"] = settings.algorithm
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = settings.access_expires
    app.config["JWT_ENCODE_ISSUER"] = settings.issuer
    app.config["JWT_DECODE_ISSUER"] = settings.issuer
    app.config["JWT_ENCODE_AUDIENCE"] = settings.audience
    app.config["JWT_DECODE_AUDIENCE"] = settings.audience


def init_app(app: Flask) -> None:
    """Initialize settings, SQLAlchemy, migrations, JWT and (optionally) Redis.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. The frozen
        :class:`AuthSettings` is stored under ``app.extensions["auth_settings"]``.

    Raises
    ------
    RuntimeError
        When ``JWT_SECRET_KEY`` is absent, or Redis is selected but unreachable.
    """
    settings = load_auth_settings(app.config)
    app.extensions["auth_settings"] = settings
    _apply_jwt_config(app, settings)

    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from space_auth import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    timeout = app.config.get("REDIS_SOCKET_TIMEOUT")
    redis_client = redis.Redis.from_url(
        redis_url,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
    if app.config.get("REFRESH_TOKEN_BACKEND") == "redis":
        try:
            redis_client.ping()
        except RedisError as exc:
            raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client
