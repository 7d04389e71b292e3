"""
JWT Service - token generation and validation.

Tokens are signed with HS256, bind a single user id and expire after a
fixed number of days. There is no refresh token and no revocation list:
expiry is the only way a token stops working.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from bistro_shared.errors import Unauthenticated

JWT_ALGORITHM = "HS256"
TOKEN_TYPE = "access"


class TokenExpiredError(Unauthenticated):
    """Token has expired."""

    code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class InvalidTokenError(Unauthenticated):
    """Token is invalid or malformed."""

    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenService:
    """Issues and verifies bearer tokens."""

    def __init__(self, secret: str, expires_days: int = 7):
        if not secret:
            raise RuntimeError("JWT_SECRET or SECRET_KEY must be configured")
        self._secret = secret
        self.expires_days = expires_days

    def issue_token(self, user_id: int) -> str:
        """
        Create a signed access token for a user.

        Args:
            user_id: User database ID

        Returns:
            Encoded JWT token string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "userId": user_id,
            "iat": now,
            "exp": now + timedelta(days=self.expires_days),
            "type": TOKEN_TYPE,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If token has expired
            InvalidTokenError: If token is invalid
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError() from exc

        if payload.get("type") != TOKEN_TYPE:
            raise InvalidTokenError("Expected an access token")
        return payload

    def user_id_from_token(self, token: str) -> int:
        payload = self.decode_token(token)
        try:
            return int(payload.get("userId", payload.get("sub")))
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc


def extract_bearer_token(authorization: str | None) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header value.

    Raises:
        Unauthenticated: If the header is absent or malformed
    """
    if not authorization:
        raise Unauthenticated("No token provided")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise Unauthenticated("Malformed authorization header")
    return token
