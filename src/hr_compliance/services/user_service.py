"""Login accounts and password verification."""

from __future__ import annotations

import asyncio
import logging

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.config import Settings, get_settings
from hr_compliance.models import User
from hr_compliance.services.errors import AuthenticationError, NotFoundError, ServiceError

logger = logging.getLogger(__name__)

# bcrypt rejects longer inputs
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


class UserService:
    """Service for user registration and login."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    async def get(self, user_id: int) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def find_by_username(self, username: str) -> User | None:
        result = await self.session.execute(
            select(User).where(func.lower(User.username) == username.lower())
        )
        return result.scalar_one_or_none()

    async def register(self, username: str, password: str, role: str = "hr") -> User:
        """Create an account."""
        if await self.find_by_username(username) is not None:
            raise ServiceError("Username already exists")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ServiceError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

        password_hash = await asyncio.to_thread(
            hash_password, password, self.settings.bcrypt_rounds
        )
        user = User(username=username, password_hash=password_hash, role=role)
        self.session.add(user)
        await self.session.flush()
        logger.info("Registered user %s with role %s", username, role)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """Check a username/password pair.

        Raises:
            AuthenticationError: If the user is unknown or the password is wrong.
        """
        user = await self.find_by_username(username)
        if user is None or not await asyncio.to_thread(
            check_password, password, user.password_hash
        ):
            logger.warning("Failed login for %s", username)
            raise AuthenticationError("Invalid username or password")
        return user
