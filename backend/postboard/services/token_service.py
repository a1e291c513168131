"""
Postboard Backend — Token Service
===================================

What:  Issues and verifies signed, expiring session tokens.
How:   HS256 JWTs via PyJWT. Payload: {"user": {"id": "<uuid>"}, "iat", "exp"}.
Who:   Built once by create_app() from settings; used by the login/register
       routes (issue) and the auth dependency (verify).

Secret and lifetime are constructor arguments, never read from globals.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from postboard.exceptions import InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)


class TokenService:
    """Signs and verifies identity tokens with a process-wide secret."""

    def __init__(self, secret: str, ttl_seconds: int, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("Token lifetime must be positive")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        """
        Creates a token identifying `user_id`, valid for `ttl_seconds`.

        Args:
            user_id: Identifier of the authenticated user
            now:     Issue time, defaults to the current UTC time
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user": {"id": str(user_id)},
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> str:
        """
        Checks signature, structure and expiry; returns the user id.

        Raises:
            InvalidTokenError: token absent, malformed, wrongly signed, or
                               without a user id
            TokenExpiredError: token is past its `exp`
        """
        if not token:
            raise InvalidTokenError(message="No token, authorization denied")

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError(context={"reason": "expired"}) from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(context={"reason": type(exc).__name__}) from exc

        user = payload.get("user")
        user_id = user.get("id") if isinstance(user, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError(context={"reason": "missing user id"})
        return user_id
