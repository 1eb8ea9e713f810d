"""FastAPI dependencies for database access and password hashing."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth.passwords import PasswordHasher
from db import get_db as get_db_session
from repos.users_repo import SqlAlchemyUsersRepository, UsersRepository


async def get_db() -> AsyncSession:
    """
    Dependency to get database session.
    Reuses the get_db function from db.py.
    """
    async for session in get_db_session():
        yield session


async def get_users_repository(
    db: AsyncSession = Depends(get_db),
) -> UsersRepository:
    """
    Dependency to get the users repository for this request.

    Tests override this to swap in InMemoryUsersRepository.
    """
    return SqlAlchemyUsersRepository(db)


def get_password_hasher() -> PasswordHasher:
    """Dependency to get the password hasher configured from settings."""
    return PasswordHasher()
