import importlib
from datetime import timedelta

import jwt
import pytest

import api.config
from api import create_app
from models import storage
from utils.tokens import ConfigurationError, TokenError, TokenKind, TokenSettings

ENV_SECRETS = ("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET")


@pytest.fixture
def reload_config(monkeypatch):
    """Re-read api.config under a patched environment, restoring it afterwards."""
    def _reload(**env):
        for name in ENV_SECRETS:
            monkeypatch.delenv(name, raising=False)
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        importlib.reload(api.config)

    yield _reload
    monkeypatch.undo()
    importlib.reload(api.config)


def test_production_without_secrets_refuses_to_start(reload_config, uploader):
    reload_config()
    assert api.config.ProductionConfig.ACCESS_TOKEN_SECRET == ""
    with pytest.raises(ConfigurationError):
        create_app("prod", overrides={"DATABASE_URL": "sqlite://"}, uploader=uploader)


def test_production_rejects_tokens_signed_with_dev_placeholder(reload_config, uploader, clock):
    reload_config(
        ACCESS_TOKEN_SECRET="prod-access-secret-0123456789abcdef0123",
        REFRESH_TOKEN_SECRET="prod-refresh-secret-0123456789abcdef012",
    )
    app = create_app("prod", overrides={"DATABASE_URL": "sqlite://"}, uploader=uploader, clock=clock)
    try:
        forged = jwt.encode(
            {
                "iss": "blog-auth-api",
                "sub": "any-account",
                "type": "access",
                "exp": int(clock().timestamp()) + 600,
            },
            "dev-access-secret-change-me",
            algorithm="HS256",
        )
        result = app.extensions["session_service"].authenticate(forged)
        assert not result.is_ok
        validator = app.extensions["session_service"].validator
        assert validator.validate(forged, TokenKind.ACCESS).error is TokenError.SIGNATURE_INVALID
    finally:
        storage.drop_all()


def test_development_keeps_placeholder_secrets(reload_config):
    reload_config()
    dev = api.config.DevelopmentConfig
    assert dev.ACCESS_TOKEN_SECRET and dev.REFRESH_TOKEN_SECRET
    assert dev.ACCESS_TOKEN_SECRET != dev.REFRESH_TOKEN_SECRET


def test_lifetimes_given_in_seconds_are_accepted():
    settings = TokenSettings.from_mapping(
        {
            "ACCESS_TOKEN_SECRET": "access-secret-for-tests-0123456789abcdef",
            "ACCESS_TOKEN_EXPIRES": 900,
            "REFRESH_TOKEN_SECRET": "refresh-secret-for-tests-0123456789abcde",
            "REFRESH_TOKEN_EXPIRES": 1296000,
        }
    )
    assert settings.access.lifetime == timedelta(minutes=15)
    assert settings.refresh.lifetime == timedelta(days=15)


@pytest.mark.parametrize("bad", ["900", None, True, -5])
def test_unusable_lifetime_is_a_configuration_error(bad):
    with pytest.raises(ConfigurationError):
        TokenSettings.from_mapping(
            {
                "ACCESS_TOKEN_SECRET": "access-secret-for-tests-0123456789abcdef",
                "ACCESS_TOKEN_EXPIRES": bad,
                "REFRESH_TOKEN_SECRET": "refresh-secret-for-tests-0123456789abcde",
                "REFRESH_TOKEN_EXPIRES": timedelta(days=15),
            }
        )


def test_create_app_accepts_integer_lifetime_override(uploader):
    app = create_app("testing", overrides={"ACCESS_TOKEN_EXPIRES": 600}, uploader=uploader)
    try:
        assert app.extensions["token_settings"].access.lifetime == timedelta(minutes=10)
    finally:
        storage.drop_all()
