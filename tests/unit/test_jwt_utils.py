from datetime import timedelta

import pytest
from jose import jwt

from core.exceptions import InvalidTokenError, TokenExpiredError
from utils.jwt_utils import JWTManager

USER = {"id": 7, "username": "bob", "email": "bob@x.com", "role": "agent"}


def test_access_token_round_trips_identity_claims():
    token = JWTManager.create_access_token(USER)

    context = JWTManager.extract_user_context(token)

    assert context["id"] == 7
    assert context["username"] == "bob"
    assert context["email"] == "bob@x.com"
    assert context["role"] == "agent"
    assert context["jti"]


def test_token_never_carries_password_material():
    token = JWTManager.create_access_token({**USER, "hashed_password": "$2b$10$abc"})

    claims = jwt.get_unverified_claims(token)

    assert "hashed_password" not in claims
    assert "password" not in claims


def test_expired_token_is_reported_as_expired():
    token = JWTManager.encode_token(
        JWTManager.create_token_payload(USER), expires_delta=timedelta(seconds=-30)
    )

    with pytest.raises(TokenExpiredError) as exc_info:
        JWTManager.decode_token(token)

    assert exc_info.value.message == "Token expired"
    assert exc_info.value.status_code == 401


def test_tampered_signature_is_reported_as_invalid():
    token = JWTManager.create_access_token(USER)
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(InvalidTokenError) as exc_info:
        JWTManager.decode_token(tampered)

    assert exc_info.value.message == "Invalid token"


def test_token_signed_with_another_secret_is_invalid():
    forged = jwt.encode(
        {**JWTManager.create_token_payload(USER), "type": "access"},
        "another-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidTokenError):
        JWTManager.decode_token(forged)


def test_token_without_identity_claims_is_invalid():
    token = JWTManager.encode_token({"username": "bob"})

    with pytest.raises(InvalidTokenError):
        JWTManager.extract_user_context(token)
