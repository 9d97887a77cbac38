"""Tests for access token issuance and verification."""

import jwt as pyjwt
import pytest
from datetime import datetime, timedelta

from coallytasks.auth.jwt import ACCESS_TOKEN_TTL, create_access_token, decode_access_token
from coallytasks.config import Settings
from coallytasks.errors import Unauthorized


def test_round_trip(settings):
    token = create_access_token("user-1", settings)
    assert decode_access_token(token, settings) == "user-1"


def test_token_carries_issue_time_and_one_hour_expiry(settings):
    issued = datetime(2030, 1, 1, 12, 0, 0)
    token = create_access_token("user-1", settings, now=issued)

    claims = pyjwt.decode(token, options={"verify_signature": False})
    assert claims["sub"] == "user-1"
    assert claims["exp"] - claims["iat"] == 3600
    assert ACCESS_TOKEN_TTL == timedelta(hours=1)


def test_expired_token_is_rejected(settings):
    token = create_access_token("user-1", settings, now=datetime.utcnow() - timedelta(hours=1, minutes=1))

    with pytest.raises(Unauthorized):
        decode_access_token(token, settings)


def test_token_signed_with_other_secret_is_rejected(settings):
    other = Settings(jwt_secret="another-secret")
    token = create_access_token("user-1", other)

    with pytest.raises(Unauthorized):
        decode_access_token(token, settings)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_is_rejected(settings, token):
    with pytest.raises(Unauthorized):
        decode_access_token(token, settings)


def test_token_without_subject_is_rejected(settings):
    now = datetime.utcnow()
    token = pyjwt.encode({"iat": now, "exp": now + timedelta(hours=1)}, settings.jwt_secret, algorithm="HS256")

    with pytest.raises(Unauthorized):
        decode_access_token(token, settings)


def test_unauthorized_message_does_not_leak_reason(settings):
    token = create_access_token("user-1", settings, now=datetime.utcnow() - timedelta(hours=2))

    with pytest.raises(Unauthorized) as exc_info:
        decode_access_token(token, settings)
    assert exc_info.value.to_dict() == {"message": "No autorizado"}
