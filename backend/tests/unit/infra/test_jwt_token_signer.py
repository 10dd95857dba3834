"""Tests for the Flask-JWT-Extended access-token signer."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from flask_jwt_extended import decode_token
from space_auth.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
from space_auth.services._shared.ports import UserAccount


@pytest.fixture()
def signer(app) -> JWTTokenSigner:
    return JWTTokenSigner(app.extensions["auth_settings"])


@pytest.fixture()
def account() -> UserAccount:
    return UserAccount(id="8a1d7a4e-0000-4000-8000-000000000001", email="a@x.com")


def test_access_token_claims(app, signer, account):
    with app.app_context():
        token = signer.issue_access_token(account, ["Admin"])
        claims = decode_token(token)

    assert claims["sub"] == account.id
    assert claims["email"] == "a@x.com"
    assert claims["roles"] == ["Admin"]
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == int(timedelta(minutes=15).total_seconds())


def test_access_expires_mirrors_settings(app, signer):
    assert signer.access_expires == app.extensions["auth_settings"].access_expires


def test_foreign_signature_is_rejected(app, account):
    now = datetime.now(UTC)
    forged = jwt.encode(
        {
            "sub": account.id,
            "type": "access",
            "iat": now,
            "nbf": now,
            "exp": now + timedelta(minutes=5),
            "jti": "forged",
        },
        "another-key",
        algorithm="HS256",
    )
    with app.app_context(), pytest.raises(jwt.InvalidSignatureError):
        decode_token(forged)


def test_refresh_tokens_are_opaque_and_unique(signer):
    tokens = {signer.issue_refresh_token() for _ in range(100)}
    assert len(tokens) == 100
    assert all(len(t) >= 43 and "." not in t for t in tokens)
