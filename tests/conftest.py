"""Pytest configuration and fixtures."""

import asyncio
import os
import sys

# Must be set before config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from api.deps import get_db, get_password_hasher, get_users_repository
from auth.passwords import PasswordHasher
from db import Base, build_engine, build_session_factory
from main import app
from repos.users_repo import InMemoryUsersRepository

# Fix Windows asyncio event loop
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Cheapest cost bcrypt accepts; keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def hasher():
    """Low-cost password hasher."""
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def users_repo():
    """Fresh in-memory users repository."""
    return InMemoryUsersRepository()


@pytest.fixture
def override_deps(users_repo, hasher):
    """Route the app to the in-memory repository and low-cost hasher."""
    app.dependency_overrides[get_users_repository] = lambda: users_repo
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_deps):
    """Create test client."""
    return TestClient(app)


@pytest_asyncio.fixture
async def async_client(override_deps):
    """Async client sharing the test's event loop, for concurrent requests."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create a session on a throwaway in-memory SQLite database."""
    import models  # noqa: F401

    engine = build_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest_asyncio.fixture
async def sql_client(db_session, hasher):
    """Async client whose requests go through the SQLAlchemy repository."""

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
