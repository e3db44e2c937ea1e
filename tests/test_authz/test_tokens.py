"""Tests for token encoding, verification and claim extraction."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from itasset.authz.config import TokenConfig
from itasset.authz.context import TokenState
from itasset.authz.roles import Role
from itasset.authz.tokens import TokenCodec, TokenValidationError, _extract_claims

ISSUED = datetime(2025, 3, 1, 9, 30, 15, 123456, tzinfo=UTC)


def _claims(codec, **overrides):
    values = {
        "subject_id": "user-1",
        "role": Role.MANAGER,
        "permissions": {"assets.read", "employees.read"},
        "display_name": "Mira Manager",
        "now": ISSUED,
    }
    values.update(overrides)
    return codec.build_claims(**values)


def test_build_claims_truncates_to_seconds_and_applies_ttl(codec, token_config):
    claims = _claims(codec)
    assert claims.issued_at == ISSUED.replace(microsecond=0)
    assert claims.expires_at - claims.issued_at == timedelta(seconds=token_config.ttl_seconds)


def test_roundtrip_preserves_claims(codec):
    claims = _claims(codec)
    token = codec.encode(claims)

    decoded = codec.decode(token, now=ISSUED + timedelta(seconds=60))

    assert decoded == claims


def test_payload_layout(codec, token_config):
    token = codec.encode(_claims(codec))
    payload = jwt.decode(token, options={"verify_signature": False})

    assert payload["sub"] == "user-1"
    assert payload["role"] == "Manager"
    assert payload["permissions"] == ["assets.read", "employees.read"]
    assert payload["iss"] == token_config.issuer
    assert payload["aud"] == token_config.audience
    assert payload["exp"] - payload["iat"] == token_config.ttl_seconds


def test_expired_token_rejected(codec):
    claims = _claims(codec)
    token = codec.encode(claims)

    with pytest.raises(TokenValidationError, match="expired"):
        codec.decode(token, now=claims.expires_at)


def test_clock_skew_extends_acceptance(token_config):
    lenient = TokenCodec(TokenConfig(secret=token_config.secret, ttl_seconds=60, clock_skew_seconds=30))
    claims = _claims(lenient)
    token = lenient.encode(claims)

    assert lenient.decode(token, now=claims.expires_at + timedelta(seconds=10)) == claims
    with pytest.raises(TokenValidationError):
        lenient.decode(token, now=claims.expires_at + timedelta(seconds=30))


def test_wrong_secret_rejected(codec, token_config):
    other = TokenCodec(TokenConfig(secret="another-secret-that-is-also-32-bytes-long"))
    token = other.encode(_claims(other))

    with pytest.raises(TokenValidationError):
        codec.decode(token, now=ISSUED)


def test_tampered_payload_rejected(codec):
    token = codec.encode(_claims(codec))
    header, payload, signature = token.split(".")
    forged = jwt.encode(
        {**jwt.decode(token, options={"verify_signature": False}), "permissions": ["system.admin"]},
        "x" * 40,
        algorithm="HS256",
    ).split(".")[1]

    with pytest.raises(TokenValidationError):
        codec.decode(f"{header}.{forged}.{signature}", now=ISSUED)


def test_wrong_issuer_rejected(codec, token_config):
    other = TokenCodec(TokenConfig(secret=token_config.secret, issuer="someone-else"))
    token = other.encode(_claims(other))

    with pytest.raises(TokenValidationError, match="issuer"):
        codec.decode(token, now=ISSUED)


def test_wrong_audience_rejected(codec, token_config):
    other = TokenCodec(TokenConfig(secret=token_config.secret, audience="another-api"))
    token = other.encode(_claims(other))

    with pytest.raises(TokenValidationError, match="audience"):
        codec.decode(token, now=ISSUED)


def test_garbage_rejected(codec):
    with pytest.raises(TokenValidationError):
        codec.decode("not-a-jwt")


def test_extract_claims_rejects_unknown_role():
    with pytest.raises(TokenValidationError):
        _extract_claims({"sub": "u", "role": "Owner", "iat": 0, "exp": 60})


def test_extract_claims_rejects_non_list_permissions():
    with pytest.raises(TokenValidationError):
        _extract_claims({"sub": "u", "role": "User", "permissions": "assets.read", "iat": 0, "exp": 60})


def test_extract_claims_defaults_missing_permissions_to_empty():
    claims = _extract_claims({"sub": "u", "role": "User", "iat": 0, "exp": 60})
    assert claims.permissions == frozenset()
    assert claims.state(datetime.fromtimestamp(59, tz=UTC)) is TokenState.VALID


@pytest.mark.parametrize(
    "kwargs",
    [
        {"secret": ""},
        {"secret": "short"},
        {"secret": "s" * 32, "ttl_seconds": 0},
        {"secret": "s" * 32, "clock_skew_seconds": -1},
    ],
)
def test_token_config_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        TokenConfig(**kwargs)
