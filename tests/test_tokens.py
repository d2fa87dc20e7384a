from datetime import timedelta

import jwt
import pytest

from utils.tokens import (
    ConfigurationError,
    KindSettings,
    TokenError,
    TokenIssuer,
    TokenKind,
    TokenSettings,
    TokenValidator,
)

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcde"


@pytest.fixture
def settings(clock):
    return TokenSettings(
        access=KindSettings(ACCESS_SECRET, timedelta(minutes=15)),
        refresh=KindSettings(REFRESH_SECRET, timedelta(days=15)),
        clock=clock,
    )


@pytest.fixture
def issuer(settings):
    return TokenIssuer(settings)


@pytest.fixture
def validator(settings):
    return TokenValidator(settings)


def test_access_token_round_trip(issuer, validator):
    result = validator.validate(issuer.issue_access_token("acct-1"), TokenKind.ACCESS)
    assert result.is_ok
    assert result.value == "acct-1"


def test_refresh_token_round_trip(issuer, validator):
    result = validator.validate(issuer.issue_refresh_token("acct-1"), TokenKind.REFRESH)
    assert result.is_ok
    assert result.value == "acct-1"


def test_kinds_use_different_secrets(issuer, validator):
    access = issuer.issue_access_token("acct-1")
    refresh = issuer.issue_refresh_token("acct-1")
    assert validator.validate(access, TokenKind.REFRESH).error is TokenError.SIGNATURE_INVALID
    assert validator.validate(refresh, TokenKind.ACCESS).error is TokenError.SIGNATURE_INVALID


def test_access_token_expires(issuer, validator, clock):
    token = issuer.issue_access_token("acct-1")
    clock.advance(minutes=14)
    assert validator.validate(token, TokenKind.ACCESS).is_ok
    clock.advance(minutes=1)
    assert validator.validate(token, TokenKind.ACCESS).error is TokenError.EXPIRED


def test_refresh_token_expires(issuer, validator, clock):
    token = issuer.issue_refresh_token("acct-1")
    clock.advance(days=15, seconds=1)
    assert validator.validate(token, TokenKind.REFRESH).error is TokenError.EXPIRED


def test_tampered_signature(issuer, validator):
    token = issuer.issue_access_token("acct-1")
    forged = jwt.encode(
        jwt.decode(token, options={"verify_signature": False}),
        "someone-elses-secret-0123456789abcdef",
        algorithm="HS256",
    )
    assert validator.validate(forged, TokenKind.ACCESS).error is TokenError.SIGNATURE_INVALID


@pytest.mark.parametrize("token", ["", "abc", "a.b.c", None, 42])
def test_malformed_tokens(validator, token):
    assert validator.validate(token, TokenKind.ACCESS).error is TokenError.MALFORMED


def test_wrong_type_claim_is_malformed(validator, clock):
    payload = {
        "iss": "blog-auth-api",
        "sub": "acct-1",
        "exp": int(clock().timestamp()) + 60,
        "type": "refresh",
    }
    token = jwt.encode(payload, ACCESS_SECRET, algorithm="HS256")
    assert validator.validate(token, TokenKind.ACCESS).error is TokenError.MALFORMED


def test_missing_subject_is_malformed(validator, clock):
    payload = {"iss": "blog-auth-api", "exp": int(clock().timestamp()) + 60, "type": "access"}
    token = jwt.encode(payload, ACCESS_SECRET, algorithm="HS256")
    assert validator.validate(token, TokenKind.ACCESS).error is TokenError.MALFORMED


def test_pair_tokens_are_distinct_even_in_the_same_second(issuer):
    first = issuer.issue_pair("acct-1")
    second = issuer.issue_pair("acct-1")
    assert first.refresh_token != second.refresh_token
    assert first.access_token != second.access_token
    assert first.access_expires_in == 15 * 60
    assert first.refresh_expires_in == 15 * 24 * 60 * 60


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        TokenSettings(
            access=KindSettings("", timedelta(minutes=15)),
            refresh=KindSettings(REFRESH_SECRET, timedelta(days=15)),
        )


def test_shared_secret_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        TokenSettings(
            access=KindSettings(ACCESS_SECRET, timedelta(minutes=15)),
            refresh=KindSettings(ACCESS_SECRET, timedelta(days=15)),
        )


def test_from_mapping_requires_keys():
    with pytest.raises(ConfigurationError):
        TokenSettings.from_mapping({"ACCESS_TOKEN_SECRET": ACCESS_SECRET})


def test_from_mapping_reads_flask_config(app):
    settings = TokenSettings.from_mapping(app.config)
    assert settings.access.lifetime == timedelta(minutes=15)
    assert settings.refresh.lifetime == timedelta(days=15)
    assert settings.access.secret != settings.refresh.secret
