"""
Staff account management.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bistro_shared.constants import Roles
from bistro_shared.db import Database
from bistro_shared.errors import Conflict, NotFound
from bistro_shared.logging_config import get_logger
from bistro_shared.models import User
from bistro_shared.security import normalize_email
from bistro_shared.serializers import serialize_user
from bistro_shared.validation import validate_email, validate_password, validate_role

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Database):
        self.db = db

    def _get(self, session: Session, user_id: int) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def _email_taken(self, session: Session, email: str, exclude_id: int | None = None) -> bool:
        stmt = select(User.id).where(User.email == normalize_email(email))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return session.execute(stmt).first() is not None

    def list_users(self) -> list[dict[str, Any]]:
        with self.db.session() as session:
            users = session.execute(
                select(User).order_by(User.created_at.desc(), User.id.desc())
            ).scalars()
            return [serialize_user(user) for user in users]

    def get_user(self, user_id: int) -> dict[str, Any]:
        with self.db.session() as session:
            return serialize_user(self._get(session, user_id))

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str = Roles.WAITER.value,
        is_active: bool = True,
    ) -> dict[str, Any]:
        validate_email(normalize_email(email))
        validate_password(password)
        validate_role(role)
        with self.db.session() as session:
            if self._email_taken(session, email):
                raise Conflict("User already exists")
            user = User(name=name, role=role, is_active=is_active)
            user.set_email(email)
            user.set_password(password)
            session.add(user)
            try:
                session.flush()
            except IntegrityError as exc:
                raise Conflict("User already exists") from exc
            logger.info("User %s created with role %s", user.id, role)
            return serialize_user(user)

    def update_user(self, user_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a partial update. The password is rehashed only when a new one
        is supplied.
        """
        with self.db.session() as session:
            user = self._get(session, user_id)

            email = changes.get("email")
            if email is not None and normalize_email(email) != user.email:
                validate_email(normalize_email(email))
                if self._email_taken(session, email, exclude_id=user.id):
                    raise Conflict("Email already in use")
                user.set_email(email)
            if changes.get("name") is not None:
                user.name = changes["name"]
            if changes.get("role") is not None:
                validate_role(changes["role"])
                user.role = changes["role"]
            if changes.get("is_active") is not None:
                user.is_active = changes["is_active"]
            if changes.get("password"):
                validate_password(changes["password"])
                user.set_password(changes["password"])

            session.flush()
            return serialize_user(user)

    def delete_user(self, user_id: int) -> None:
        with self.db.session() as session:
            user = self._get(session, user_id)
            session.delete(user)
            logger.info("User %s deleted", user_id)
