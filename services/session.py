"""
Login, refresh, logout and access-token authentication.

Invariants kept here:
- one live session per account: login overwrites the stored refresh token,
  so logging in again silently retires the previous one
- single-use rotation: refresh swaps the stored token with compare_and_set,
  so a refresh token that has been used (or rotated away by a concurrent
  refresh, or cleared by logout) is rejected
- tokens are handed back only after the new refresh token is committed
- logout only cuts off the refresh path; access tokens live until they expire
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from models.session_store import SessionStore
from models.user import User
from services.errors import ServiceError, not_found, unauthorized
from services.result import Err, Ok, Result
from utils.security import verify_password
from utils.tokens import TokenIssuer, TokenKind, TokenPair, TokenValidator

logger = logging.getLogger(__name__)

REFRESH_MISSING = "Refresh token missing"
REFRESH_REJECTED = "Invalid or expired refresh token"


class SessionState(str, Enum):
    """Phases of a session, used to label the session log lines.

    Nothing is stored per account beyond the refresh token, so these are
    not enforced; only the refresh token comparisons below gate a flow.
    """
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESH_PENDING = "refresh_pending"
    REVOKED = "revoked"
    LOGGED_OUT = "logged_out"


def _transition(account_id: str, src: SessionState, dst: SessionState) -> SessionState:
    logger.debug("session %s: %s -> %s", account_id, src.value, dst.value)
    return dst


@dataclass(frozen=True)
class LoginOutcome:
    user: User
    tokens: TokenPair


class SessionService:
    def __init__(self, storage, issuer: TokenIssuer, validator: TokenValidator,
                 store: SessionStore | None = None):
        self.storage = storage
        self.issuer = issuer
        self.validator = validator
        self.store = store or SessionStore(storage)

    def _find_by_email(self, email: str) -> User | None:
        session = self.storage.get_session()
        normalized = (email or "").strip().lower()
        return session.query(User).filter(User.email == normalized).first()

    def login(self, email: str, secret: str) -> Result[LoginOutcome, ServiceError]:
        user = self._find_by_email(email)
        if user is None:
            logger.info("Login rejected: no account for the given email")
            return Err(not_found("User does not exist"))

        state = _transition(user.id, SessionState.UNAUTHENTICATED, SessionState.AUTHENTICATING)
        if not verify_password(secret, user.password_hash):
            _transition(user.id, state, SessionState.UNAUTHENTICATED)
            logger.info("Login rejected for %s: bad credentials", user.id)
            return Err(unauthorized("Invalid credentials"))

        tokens = self.issuer.issue_pair(user.id)
        # a failed write raises here and no token leaves this method
        self.store.set_current_refresh_token(user.id, tokens.refresh_token)
        _transition(user.id, state, SessionState.AUTHENTICATED)
        logger.info("Login succeeded for %s", user.id)
        return Ok(LoginOutcome(user=user, tokens=tokens))

    def refresh(self, presented: str | None) -> Result[TokenPair, ServiceError]:
        if not presented:
            return Err(unauthorized(REFRESH_MISSING))

        checked = self.validator.validate(presented, TokenKind.REFRESH)
        if not checked.is_ok:
            logger.info("Refresh rejected: %s", checked.error.value)
            return Err(unauthorized(REFRESH_REJECTED))
        account_id = checked.value

        if self.storage.get(User, account_id) is None:
            logger.info("Refresh rejected: account %s no longer exists", account_id)
            return Err(unauthorized(REFRESH_REJECTED))

        state = _transition(account_id, SessionState.AUTHENTICATED, SessionState.REFRESH_PENDING)
        if self.store.get_current_refresh_token(account_id) != presented:
            _transition(account_id, state, SessionState.REVOKED)
            logger.warning("Refresh rejected for %s: token reused or superseded", account_id)
            return Err(unauthorized(REFRESH_REJECTED))

        tokens = self.issuer.issue_pair(account_id)
        if not self.store.compare_and_set(account_id, presented, tokens.refresh_token):
            # another refresh or a logout got there first
            _transition(account_id, state, SessionState.REVOKED)
            logger.warning("Refresh rejected for %s: lost rotation race", account_id)
            return Err(unauthorized(REFRESH_REJECTED))

        _transition(account_id, state, SessionState.AUTHENTICATED)
        logger.info("Rotated refresh token for %s", account_id)
        return Ok(tokens)

    def logout(self, account_id: str) -> Result[None, ServiceError]:
        self.store.clear_refresh_token(account_id)
        _transition(account_id, SessionState.AUTHENTICATED, SessionState.LOGGED_OUT)
        logger.info("Logged out %s", account_id)
        return Ok(None)

    def authenticate(self, access_token: str | None) -> Result[str, ServiceError]:
        """Gate for protected endpoints: the account id an access token was issued for."""
        if not access_token:
            return Err(unauthorized("Access token missing"))
        checked = self.validator.validate(access_token, TokenKind.ACCESS)
        if not checked.is_ok:
            logger.debug("Access token rejected: %s", checked.error.value)
            return Err(unauthorized("Invalid or expired access token"))
        return Ok(checked.value)
