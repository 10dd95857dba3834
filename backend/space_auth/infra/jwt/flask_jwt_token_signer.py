from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import cast

from flask_jwt_extended import create_access_token

from space_auth.core.config import AuthSettings
from space_auth.services._shared.ports import TokenSigner, UserAccount, generate_refresh_token


@dataclass(slots=True)
class JWTTokenSigner(TokenSigner):
    """
    Adapter for Flask-JWT-Extended.

    Access tokens carry ``sub`` (user id), ``email`` and ``roles`` next to the
    library's standard claims (``iat``, ``exp``, ``nbf``, ``jti``, ``type``,
    ``fresh`` and, when configured, ``iss``/``aud``).

    .. note::
       Requires an active Flask app context; key, algorithm, issuer and
       audience come from the app config projected from ``settings``.
    """

    settings: AuthSettings

    @property
    def access_expires(self) -> timedelta:
        return self.settings.access_expires

    def issue_access_token(self, user: UserAccount, roles: Sequence[str]) -> str:
        return cast(
            str,
            create_access_token(
                identity=str(user.id),
                additional_claims={"email": user.email, "roles": list(roles)},
                expires_delta=self.settings.access_expires,
            ),
        )

    def issue_refresh_token(self) -> str:
        # Opaque string; lookups go through the refresh-token store.
        return generate_refresh_token()
