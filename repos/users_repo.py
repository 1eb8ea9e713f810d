"""Repository for User database operations.

Username uniqueness is enforced at insert time by the store itself
(`insert_unique`), never by a prior lookup.
"""

import threading
from datetime import datetime, UTC
from typing import Protocol
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User

USERNAME_CONSTRAINT = "uq_users_username"

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class DuplicateUsernameError(Exception):
    """Raised by a repository when the username is already taken."""

    def __init__(self, username: str):
        super().__init__(f"username {username!r} is already taken")
        self.username = username


class UsersRepository(Protocol):
    """Persistence capabilities the registration service depends on."""

    async def insert_unique(self, user: User) -> User:
        """Insert atomically, raising DuplicateUsernameError on conflict."""
        ...

    async def find_by_username(self, username: str) -> User | None:
        ...


def is_username_conflict(error: IntegrityError) -> bool:
    """
    Check whether an IntegrityError is a violation of the username constraint.

    Args:
        error: Error raised on flush/commit

    Returns:
        True for unique violations on users.username
    """
    orig = getattr(error, "orig", None)
    error_msg_lower = str(orig if orig is not None else error).lower()

    # psycopg exposes the SQLSTATE as sqlstate (v3) or pgcode (v2)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == UNIQUE_VIOLATION:
        return USERNAME_CONSTRAINT in error_msg_lower or "username" in error_msg_lower

    return any(pattern in error_msg_lower for pattern in [
        USERNAME_CONSTRAINT,
        "unique constraint failed: users.username",
    ])


class SqlAlchemyUsersRepository:
    """UsersRepository backed by an AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_unique(self, user: User) -> User:
        """
        Insert a user and commit.

        Args:
            user: Unsaved User instance

        Returns:
            Created user (refreshed)

        Raises:
            DuplicateUsernameError: If the username constraint rejects the row
            IntegrityError: For any other constraint violation
        """
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if is_username_conflict(e):
                raise DuplicateUsernameError(user.username) from e
            raise
        await self.session.refresh(user)
        return user

    async def find_by_username(self, username: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()


class InMemoryUsersRepository:
    """Process-local UsersRepository, safe to share between threads."""

    def __init__(self):
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()

    async def insert_unique(self, user: User) -> User:
        with self._lock:
            if user.username in self._users:
                raise DuplicateUsernameError(user.username)
            if user.id is None:
                user.id = uuid4()
            if user.created_at is None:
                user.created_at = datetime.now(UTC)
            self._users[user.username] = user
        return user

    async def find_by_username(self, username: str) -> User | None:
        with self._lock:
            return self._users.get(username)

    def __len__(self) -> int:
        return len(self._users)
