"""
Authentication Service - login, bearer token verification and role checks.

Every login failure (unknown email, inactive account, wrong password) is
reported with the same ``InvalidCredentials`` error so responses never reveal
which accounts exist. The specific reason is only logged.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from bistro_shared.constants import STAFF_ROLES, Access, Roles
from bistro_shared.db import Database
from bistro_shared.errors import Forbidden, InvalidCredentials, Unauthenticated
from bistro_shared.jwt_service import TokenService, extract_bearer_token
from bistro_shared.logging_config import get_logger
from bistro_shared.models import User
from bistro_shared.security import normalize_email
from bistro_shared.serializers import serialize_user_summary

logger = get_logger(__name__)


class AuthService:
    """
    Responsibilities:
    - Validate credentials and issue tokens
    - Resolve a bearer token to an active user
    - Enforce per-endpoint access levels
    """

    def __init__(self, db: Database, tokens: TokenService, staff_require_auth: bool = False):
        self.db = db
        self.tokens = tokens
        self.staff_require_auth = staff_require_auth

    def login(self, email: str, password: str) -> dict[str, Any]:
        normalized = normalize_email(email)
        with self.db.session() as session:
            user = session.execute(
                select(User).where(User.email == normalized)
            ).scalar_one_or_none()

            if user is None:
                logger.warning("Login failed: unknown email")
                raise InvalidCredentials()
            if not user.is_active:
                logger.warning("Login failed: inactive account %s", user.id)
                raise InvalidCredentials()
            if not user.check_password(password):
                logger.warning("Login failed: wrong password for user %s", user.id)
                raise InvalidCredentials()

            logger.info("User %s logged in", user.id)
            return {
                "token": self.tokens.issue_token(user.id),
                "user": serialize_user_summary(user),
            }

    def authenticate(self, authorization: str | None) -> User:
        """
        Resolve an ``Authorization`` header to an active user.

        Raises:
            Unauthenticated: Missing, malformed, invalid or expired token, or
                the user no longer exists or was deactivated
        """
        token = extract_bearer_token(authorization)
        user_id = self.tokens.user_id_from_token(token)
        with self.db.session() as session:
            user = session.get(User, user_id)
            if user is None or not user.is_active:
                raise Unauthenticated("User not found or inactive")
            session.expunge(user)
            return user

    def authenticate_optional(self, authorization: str | None) -> User | None:
        """Like :meth:`authenticate` but anonymous or bad tokens yield None."""
        if not authorization:
            return None
        try:
            return self.authenticate(authorization)
        except Unauthenticated:
            return None

    @staticmethod
    def authorize(user: User, required_role: Roles | str) -> None:
        role = required_role.value if isinstance(required_role, Roles) else required_role
        if user.role != role:
            raise Forbidden(f"Access denied. Required role: {role}")

    def requires_token(self, access: Access) -> bool:
        if access == Access.PUBLIC:
            return False
        if access == Access.STAFF:
            return self.staff_require_auth
        return True

    def check_access(self, access: Access, authorization: str | None) -> User | None:
        """
        Enforce an endpoint's access level.

        ``staff`` endpoints stay open unless staff authentication is switched
        on, in which case any active user with a staff role is accepted.
        """
        if not self.requires_token(access):
            return self.authenticate_optional(authorization)

        user = self.authenticate(authorization)
        if access == Access.ADMIN:
            self.authorize(user, Roles.ADMIN)
        elif access == Access.STAFF and user.role not in STAFF_ROLES:
            raise Forbidden("Staff access required")
        return user
