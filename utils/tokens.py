"""
JWT access/refresh token issuing and validation via PyJWT.

Access and refresh tokens are signed with different secrets and carry
different lifetimes. TokenSettings is built once from the app config and
handed to TokenIssuer and TokenValidator; nothing here reads flask.current_app.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Mapping

import jwt

from services.result import Err, Ok, Result
from utils.security import generate_jti

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Signing configuration is missing or unusable."""


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(str, Enum):
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _lifetime(value):
    """Accept a timedelta or a number of seconds (bools are not seconds)."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    return value


@dataclass(frozen=True)
class KindSettings:
    secret: str
    lifetime: timedelta


@dataclass(frozen=True)
class TokenSettings:
    access: KindSettings
    refresh: KindSettings
    algorithm: str = "HS256"
    issuer: str = "blog-auth-api"
    clock: Callable[[], datetime] = field(default=_utcnow, compare=False)

    def __post_init__(self):
        for kind, ks in ((TokenKind.ACCESS, self.access), (TokenKind.REFRESH, self.refresh)):
            if not ks.secret:
                raise ConfigurationError(f"{kind.value} token secret is not configured")
            if not isinstance(ks.lifetime, timedelta):
                raise ConfigurationError(f"{kind.value} token lifetime must be a timedelta")
            if ks.lifetime <= timedelta(0):
                raise ConfigurationError(f"{kind.value} token lifetime must be positive")
        if self.access.secret == self.refresh.secret:
            raise ConfigurationError("access and refresh tokens must use different secrets")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any], clock: Callable[[], datetime] | None = None) -> "TokenSettings":
        """Build settings from a Flask config (or any mapping with the same keys)."""
        try:
            access = KindSettings(config["ACCESS_TOKEN_SECRET"], _lifetime(config["ACCESS_TOKEN_EXPIRES"]))
            refresh = KindSettings(config["REFRESH_TOKEN_SECRET"], _lifetime(config["REFRESH_TOKEN_EXPIRES"]))
        except KeyError as exc:
            raise ConfigurationError(f"missing token setting {exc.args[0]}") from exc
        return cls(
            access=access,
            refresh=refresh,
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "blog-auth-api"),
            clock=clock or _utcnow,
        )

    def for_kind(self, kind: TokenKind) -> KindSettings:
        return self.access if kind is TokenKind.ACCESS else self.refresh


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    access_expires_in: int
    refresh_expires_in: int


class TokenIssuer:
    def __init__(self, settings: TokenSettings):
        self.settings = settings

    def _issue(self, account_id: str, kind: TokenKind) -> str:
        ks = self.settings.for_kind(kind)
        now = self.settings.clock()
        payload = {
            "iss": self.settings.issuer,
            "sub": str(account_id),
            "iat": int(now.timestamp()),
            "exp": int((now + ks.lifetime).timestamp()),
            "type": kind.value,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, ks.secret, algorithm=self.settings.algorithm)

    def issue_access_token(self, account_id: str) -> str:
        return self._issue(account_id, TokenKind.ACCESS)

    def issue_refresh_token(self, account_id: str) -> str:
        return self._issue(account_id, TokenKind.REFRESH)

    def issue_pair(self, account_id: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(account_id),
            refresh_token=self.issue_refresh_token(account_id),
            access_expires_in=int(self.settings.access.lifetime.total_seconds()),
            refresh_expires_in=int(self.settings.refresh.lifetime.total_seconds()),
        )


class TokenValidator:
    def __init__(self, settings: TokenSettings):
        self.settings = settings

    def validate(self, token: str, kind: TokenKind) -> Result[str, TokenError]:
        """
        Verify signature and expiry of a token of the given kind and return
        the account id it was issued for.
        Expiry is compared against the settings clock, not PyJWT's own.
        """
        if not isinstance(token, str) or not token:
            return Err(TokenError.MALFORMED)

        ks = self.settings.for_kind(kind)
        try:
            decoded = jwt.decode(
                token,
                ks.secret,
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["sub", "exp", "type"],
                },
            )
        except jwt.InvalidSignatureError:
            return Err(TokenError.SIGNATURE_INVALID)
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected %s token: %s", kind.value, exc.__class__.__name__)
            return Err(TokenError.MALFORMED)

        if decoded.get("type") != kind.value:
            return Err(TokenError.MALFORMED)
        exp = decoded["exp"]
        if not isinstance(exp, (int, float)):
            return Err(TokenError.MALFORMED)
        if self.settings.clock().timestamp() >= exp:
            return Err(TokenError.EXPIRED)
        subject = decoded["sub"]
        if not isinstance(subject, str) or not subject:
            return Err(TokenError.MALFORMED)
        return Ok(subject)
