"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from space_auth.core.config import AuthSettings, BaseConfig, get_config
from space_auth.core.logger import configure_logging, init_app as init_logging


def _init_services(app: Flask) -> None:
    """Build the signer, refresh-token store and session service once per app."""

    from space_auth.api.deps import SESSION_SERVICE_KEY
    from space_auth.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
    from space_auth.infra.stores import build_refresh_token_store
    from space_auth.services.identity.service import IdentityService
    from space_auth.services.session.service import SessionService

    settings: AuthSettings = app.extensions["auth_settings"]
    signer = JWTTokenSigner(settings)
    store = build_refresh_token_store(app, signer.issue_refresh_token)

    directory = IdentityService()

    app.extensions["refresh_token_store"] = store
    app.extensions["user_directory"] = directory
    app.extensions[SESSION_SERVICE_KEY] = SessionService(
        signer=signer,
        refresh_store=store,
        directory=directory,
        settings=settings,
    )


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises RuntimeError: When ``JWT_SECRET_KEY`` is missing or the refresh
        token backend cannot be set up.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from space_auth.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from space_auth.core import cors

    cors.init_app(app)

    _init_services(app)

    from space_auth.api import init_app as init_api

    init_api(app)

    from space_auth.core import errors

    errors.init_app(app)

    from space_auth import cli as app_cli

    app_cli.init_app(app)

    return app
