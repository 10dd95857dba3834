"""Flask CLI commands for operating on accounts and sessions."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from space_auth.models.role import ADMIN_ROLE
from space_auth.services._shared.errors import ServiceError, ValidationError
from space_auth.services.identity.service import IdentityService

LOGGER = logging.getLogger(__name__)


def _directory() -> IdentityService:
    return current_app.extensions.get("user_directory") or IdentityService()


@click.group("auth")
def auth_cli() -> None:
    """Account and refresh-token administration."""


@auth_cli.command("seed-admin")
@click.option("--email", default=None, help="Admin email (defaults to ADMIN_EMAIL).")
@click.option("--password", default=None, help="Admin password (defaults to ADMIN_PASSWORD).")
@with_appcontext
def seed_admin_command(email: str | None, password: str | None) -> None:
    """Create the Admin role and the admin account when missing (idempotent)."""
    email = email or current_app.config["ADMIN_EMAIL"]
    password = password or current_app.config["ADMIN_PASSWORD"]
    directory = _directory()

    role_created = directory.ensure_role(ADMIN_ROLE)
    account = directory.find_user_by_email(email)
    user_created = account is None
    try:
        if account is None:
            account = directory.create_user(email, password)
        account = directory.add_role(account.id, ADMIN_ROLE)
    except ValidationError as exc:
        raise click.ClickException("; ".join(exc.messages)) from exc
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc

    LOGGER.info("cli.seed_admin.done", extra={"user_id": account.id})
    click.echo(
        f"role {ADMIN_ROLE}: {'created' if role_created else 'existing'}; "
        f"user {account.email}: {'created' if user_created else 'existing'}"
    )


@auth_cli.command("revoke-user")
@click.argument("email")
@with_appcontext
def revoke_user_command(email: str) -> None:
    """Revoke every active refresh token of the account EMAIL."""
    account = _directory().find_user_by_email(email)
    if account is None:
        raise click.ClickException(f"No user with email {email!r}")

    store = current_app.extensions["refresh_token_store"]
    try:
        revoked = store.revoke_all_for_user(account.id)
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc

    LOGGER.info("cli.revoke_user.done", extra={"user_id": account.id})
    click.echo(f"revoked {revoked} refresh token(s) for {account.email}")
