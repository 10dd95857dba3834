"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

REFRESH_BACKENDS: Final[frozenset[str]] = frozenset({"sqlalchemy", "redis", "memory"})

# Loads .env during development (no-op when the file is absent)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str | None
        Symmetric key used to sign access tokens. Required: application
        creation aborts when it is missing.
    JWT_ACCESS_EXPIRES_MINUTES: int
        Access-token lifetime in minutes.
    JWT_REFRESH_EXPIRES_DAYS: int
        Refresh-token lifetime in days.
    JWT_ISSUER / JWT_AUDIENCE: str | None
        Optional ``iss``/``aud`` claims written into and required from
        access tokens.
    REFRESH_TOKEN_BACKEND: str
        Storage engine for refresh tokens: ``sqlalchemy``, ``redis`` or
        ``memory``.
    REDIS_URL: str | None
        Connection URL used when the backend is ``redis``.
    REDIS_SOCKET_TIMEOUT: float
        Per-call socket timeout (seconds) for Redis commands.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    SQLALCHEMY_ENGINE_OPTIONS: dict
        Engine options; ``pool_timeout`` bounds waits for a connection.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    ADMIN_EMAIL / ADMIN_PASSWORD: str
        Credentials used by ``flask auth seed-admin``.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ACCESS_EXPIRES_MINUTES = env_int("JWT_ACCESS_EXPIRES_MINUTES", 60)
    JWT_REFRESH_EXPIRES_DAYS = env_int("JWT_REFRESH_EXPIRES_DAYS", 7)
    JWT_ISSUER = os.getenv("JWT_ISSUER") or None
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None

    # Refresh-token storage
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sqlalchemy").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL") or None
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5"))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"pool_pre_ping": True}

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Seeded administrator
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@space.local")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled and bounds connection-pool waits so
    storage calls cannot hang a request thread indefinitely.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"pool_pre_ping": True, "pool_timeout": 10}
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


# --------------------------------------------------------------------------- #
# Immutable auth settings
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Process-wide token settings, frozen once at startup.

    :param signing_key: Symmetric secret for access-token signatures.
    :type signing_key: str
    :param access_expires: Access-token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh-token lifetime.
    :type refresh_expires: timedelta
    :param issuer: Optional ``iss`` claim.
    :type issuer: str | None
    :param audience: Optional ``aud`` claim.
    :type audience: str | None
    :param algorithm: JWS algorithm (fixed per deployment).
    :type algorithm: str
    """

    signing_key: str
    access_expires: timedelta
    refresh_expires: timedelta
    issuer: str | None = None
    audience: str | None = None
    algorithm: str = "HS256"

    def __repr__(self) -> str:
        # Never render the secret in logs or tracebacks.
        return (
            f"AuthSettings(access_expires={self.access_expires!r}, "
            f"refresh_expires={self.refresh_expires!r}, issuer={self.issuer!r}, "
            f"audience={self.audience!r}, algorithm={self.algorithm!r})"
        )


def load_auth_settings(config: Mapping[str, Any]) -> AuthSettings:
    """Build :class:`AuthSettings` from a Flask config mapping.

    :param config: Mapping holding the ``JWT_*`` keys.
    :type config: Mapping[str, Any]
    :returns: Frozen settings object.
    :rtype: AuthSettings
    :raises RuntimeError: If ``JWT_SECRET_KEY`` is missing or blank, or a
        lifetime is not positive.
    """
    secret = config.get("JWT_SECRET_KEY")
    if not isinstance(secret, str) or not secret.strip():
        raise RuntimeError("JWT_SECRET_KEY is not configured; refusing to start.")

    access_minutes = int(config.get("JWT_ACCESS_EXPIRES_MINUTES", 60))
    refresh_days = int(config.get("JWT_REFRESH_EXPIRES_DAYS", 7))
    if access_minutes <= 0 or refresh_days <= 0:
        raise RuntimeError("Token lifetimes must be positive.")

    return AuthSettings(
        signing_key=secret,
        access_expires=timedelta(minutes=access_minutes),
        refresh_expires=timedelta(days=refresh_days),
        issuer=config.get("JWT_ISSUER") or None,
        audience=config.get("JWT_AUDIENCE") or None,
    )
