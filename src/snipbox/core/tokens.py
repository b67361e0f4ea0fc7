"""Per-session anti-forgery tokens and the admin login flag.

A session moves ``NO_TOKEN -> ISSUED -> (ISSUED again after rotate | EXPIRED)``.
Tokens are bound to the session, not to a single request: every mutating
request of the session presents the same token until it is rotated (login,
explicit refresh) or expires.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable, MutableMapping
from enum import Enum
from typing import Any

from snipbox.errors import AuthError, TokenError

logger = logging.getLogger(__name__)

TOKEN_KEY = "csrf_token"
ISSUED_AT_KEY = "csrf_issued_at"
AUTH_KEY = "authenticated"

Session = MutableMapping[str, Any]


class TokenState(str, Enum):
    NO_TOKEN = "no_token"
    ISSUED = "issued"
    EXPIRED = "expired"


class TokenGuard:
    def __init__(self, ttl_seconds: int = 24 * 60 * 60, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def state(self, session: Session) -> TokenState:
        if not session.get(TOKEN_KEY):
            return TokenState.NO_TOKEN
        issued_at = float(session.get(ISSUED_AT_KEY, 0))
        if self._clock() - issued_at > self.ttl_seconds:
            return TokenState.EXPIRED
        return TokenState.ISSUED

    def issue(self, session: Session) -> str:
        """Return the session's current token, minting one if it has none or it expired."""
        if self.state(session) is TokenState.ISSUED:
            return str(session[TOKEN_KEY])
        return self.rotate(session)

    def rotate(self, session: Session) -> str:
        token = secrets.token_urlsafe(32)
        session[TOKEN_KEY] = token
        session[ISSUED_AT_KEY] = self._clock()
        return token

    def validate(self, session: Session, presented: str | None) -> None:
        """Raise ``TokenError`` unless *presented* is the session's live token."""
        state = self.state(session)
        if state is not TokenState.ISSUED:
            logger.warning("rejected request: session token %s", state.value)
            raise TokenError()
        if not presented or not secrets.compare_digest(str(session[TOKEN_KEY]), presented):
            logger.warning("rejected request: %s token", "mismatched" if presented else "missing")
            raise TokenError()

    def login(self, session: Session, password: str | None, expected: str) -> bool:
        if not password or not secrets.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
            logger.warning("failed admin login")
            return False
        session[AUTH_KEY] = True
        self.rotate(session)
        logger.info("admin logged in")
        return True

    @staticmethod
    def logout(session: Session) -> None:
        session.clear()

    @staticmethod
    def is_authenticated(session: Session) -> bool:
        return session.get(AUTH_KEY) is True

    def require_auth(self, session: Session) -> None:
        if not self.is_authenticated(session):
            raise AuthError()
