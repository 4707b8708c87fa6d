"""Staff registration and login."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from paytrack.core.errors import AuthenticationError, ConflictError
from paytrack.core.security import create_access_token, hash_password, verify_password
from paytrack.models.user import User
from paytrack.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository(db)

    def register(self, name: str, email: str, password: str) -> tuple[str, User]:
        """Create a user and issue a session token.

        Emails are compared lowercased, so registrations differing only in
        case conflict.
        """
        if self.repo.get_by_email(email) is not None:
            raise ConflictError("User already exists")
        user = self.repo.create(name=name, email=email, password_hash=hash_password(password))
        logger.info("Registered user %s", user.id)
        return self._issue_token(user), user

    def login(self, email: str, password: str) -> tuple[str, User]:
        user = self.repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):  # type: ignore[arg-type]
            raise AuthenticationError(INVALID_CREDENTIALS)
        return self._issue_token(user), user

    @staticmethod
    def _issue_token(user: User) -> str:
        return create_access_token(
            subject=str(user.id),
            email=user.email,  # type: ignore[arg-type]
            role=user.role,  # type: ignore[arg-type]
        )
