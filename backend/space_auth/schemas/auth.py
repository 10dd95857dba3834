"""Authentication-related Marshmallow schemas.

Wire format is camelCase; input schemas load into snake_case keys.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class _RequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(_RequestSchema):
    """Input payload for account registration.

    Password rules are enforced by the user directory, not here.
    """

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    display_name = fields.String(
        data_key="displayName",
        load_default=None,
        allow_none=True,
        validate=validate.Length(max=100),
    )


class LoginSchema(_RequestSchema):
    """Input payload for authenticating a user."""

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(_RequestSchema):
    """Input payload carrying an opaque refresh token (refresh and revoke)."""

    refresh_token = fields.String(
        data_key="refreshToken", required=True, validate=validate.Length(min=1, max=512)
    )


class UserInfoSchema(Schema):
    """Public user projection."""

    id = fields.String(required=True)
    email = fields.String(required=True)
    display_name = fields.String(data_key="displayName", allow_none=True)
    roles = fields.List(fields.String(), required=True)


class SessionBundleSchema(Schema):
    """Response payload for register, login and refresh."""

    access_token = fields.String(data_key="accessToken", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
    expires_at = fields.AwareDateTime(data_key="expiresAt", required=True)
    user = fields.Nested(UserInfoSchema, required=True)
