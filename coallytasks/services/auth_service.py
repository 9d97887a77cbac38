"""Registration and login."""

import logging
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError

from coallytasks.auth.jwt import create_access_token
from coallytasks.auth.passwords import hash_password, verify_password
from coallytasks.config import Settings
from coallytasks.database.user_repository import UserRepository
from coallytasks.errors import (
    Conflict,
    LoginFailed,
    USER_EXISTS_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
    WRONG_PASSWORD_MESSAGE,
)
from coallytasks.models.user import User
from coallytasks.validation import LOGIN_RULES, REGISTER_RULES, ensure_valid

logger = logging.getLogger(__name__)


class AuthService:
    """Registers users and exchanges credentials for access tokens."""

    def __init__(self, users: UserRepository, settings: Settings):
        self.users = users
        self.settings = settings

    def register(self, payload: Mapping[str, Any]) -> User:
        """Create a user from a registration payload.

        Raises:
            ValidationError: If name, email or password are malformed
            Conflict: If a user with the same email already exists
        """
        ensure_valid(payload, REGISTER_RULES)
        email = payload["email"]

        if self.users.get_by_email(email) is not None:
            raise Conflict(USER_EXISTS_MESSAGE)

        user = User(
            name=str(payload["name"]),
            email=email,
            password_hash=hash_password(payload["password"], rounds=self.settings.bcrypt_rounds),
        )
        try:
            created = self.users.create(user)
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise Conflict(USER_EXISTS_MESSAGE)

        logger.info(f"Registered user {created.id}")
        return created

    def login(self, payload: Mapping[str, Any]) -> str:
        """Check credentials and return a signed access token.

        Raises:
            ValidationError: If email or password are malformed
            LoginFailed: If the email is unknown or the password does not match
        """
        ensure_valid(payload, LOGIN_RULES)

        user = self.users.get_by_email(payload["email"])
        if user is None:
            raise LoginFailed(USER_NOT_FOUND_MESSAGE)

        if not verify_password(payload["password"], user.password_hash):
            raise LoginFailed(WRONG_PASSWORD_MESSAGE)

        logger.info(f"Login: {user.id}")
        return create_access_token(user.id, self.settings)
