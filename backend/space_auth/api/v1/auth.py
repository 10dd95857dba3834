"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint
from flask_jwt_extended import get_jwt_identity

from space_auth.api.deps import (
    get_session_service,
    json_response,
    load_body,
    no_content,
    require_auth,
    timing,
)
from space_auth.schemas import (
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    SessionBundleSchema,
    UserInfoSchema,
)
from space_auth.services._shared.base import BaseService
from space_auth.services._shared.errors import ServiceError
from space_auth.services.session.dto import LoginIn, RefreshIn, RegisterIn, RevokeIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
bundle_schema = SessionBundleSchema()
user_info_schema = UserInfoSchema()


@bp.post("/register")
@timing
def register():
    """Create an account and return its first session bundle (201)."""

    data = load_body(register_schema)
    try:
        bundle = get_session_service().register(RegisterIn(**data))
    except ServiceError as exc:
        raise BaseService.translate_exceptions(exc) from exc
    return json_response(bundle_schema.dump(bundle), status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and return a session bundle."""

    data = load_body(login_schema)
    try:
        bundle = get_session_service().login(LoginIn(**data))
    except ServiceError as exc:
        raise BaseService.translate_exceptions(exc) from exc
    return json_response(bundle_schema.dump(bundle))


@bp.post("/refresh")
@timing
def refresh():
    """Redeem a refresh token; the response carries its replacement."""

    data = load_body(refresh_token_schema)
    try:
        bundle = get_session_service().refresh(RefreshIn(**data))
    except ServiceError as exc:
        raise BaseService.translate_exceptions(exc) from exc
    return json_response(bundle_schema.dump(bundle))


@bp.post("/revoke")
@timing
def revoke():
    """Revoke a refresh token. Always 204 for well-formed requests."""

    data = load_body(refresh_token_schema)
    try:
        get_session_service().revoke(RevokeIn(**data))
    except ServiceError as exc:
        raise BaseService.translate_exceptions(exc) from exc
    return no_content()


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the user named by the bearer access token."""

    try:
        user = get_session_service().current_user(str(get_jwt_identity()))
    except ServiceError as exc:
        raise BaseService.translate_exceptions(exc) from exc
    return json_response(user_info_schema.dump(user))
