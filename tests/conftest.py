"""
Pytest fixtures for test database, client, and seeded catalog data.

Uses a separate test database (TEST_DATABASE_URL, SQLite by default) with
tables created and dropped around every test for isolation.
"""

import os
from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from moviebooking.main import app
from moviebooking.db.base import Base
from moviebooking.db.session import get_db
from moviebooking.models import Customer, Movie, Screen, Show, Theatre
from moviebooking.services.interfaces.local_show_lock import LocalShowLock

TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL", "sqlite+aiosqlite:///./moviebooking_test.db"
)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Engine bound to this test's event loop; schema rebuilt per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Factory for independent sessions (one per simulated request)."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with a fresh test session per request."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def show_lock() -> LocalShowLock:
    return LocalShowLock()


@pytest_asyncio.fixture
async def catalog(session_factory) -> dict:
    """
    Two customers, two movies, one theatre with one screen, three shows.

    Show 2 plays "Inception" and is the one most tests book against.
    """
    async with session_factory() as session:
        theatre = Theatre(id=1, name="Galaxy Cinema", city="Bengaluru")
        screen = Screen(id=1, theatre_id=1, name="Screen 3", rows=10, columns=12)
        inception = Movie(id=5, name="Inception", genre="Sci-Fi", language="English")
        arrival = Movie(id=6, name="Arrival", genre="Drama", language="English")
        shows = [
            Show(id=1, name="Morning Show", movie_id=6, screen_id=1, theatre_id=1,
                 start_time=datetime(2026, 11, 1, 10, 0), end_time=datetime(2026, 11, 1, 12, 30)),
            Show(id=2, name="Evening Premiere", movie_id=5, screen_id=1, theatre_id=1,
                 start_time=datetime(2026, 11, 1, 19, 0), end_time=datetime(2026, 11, 1, 21, 30)),
            Show(id=3, name="Late Show", movie_id=5, screen_id=1, theatre_id=1,
                 start_time=datetime(2026, 11, 2, 22, 0), end_time=datetime(2026, 11, 3, 0, 30)),
        ]
        customers = [
            Customer(id=1, name="Test User", email="test@example.com", mobile_number="9999999999"),
            Customer(id=2, name="Other User", email="other@example.com", mobile_number="8888888888"),
        ]
        session.add_all([theatre, screen, inception, arrival, *shows, *customers])
        await session.commit()

    return {
        "customer_id": 1,
        "other_customer_id": 2,
        "show_id": 2,
        "morning_show_id": 1,
        "late_show_id": 3,
        "movie_id": 5,
        "other_movie_id": 6,
        "theatre_id": 1,
        "screen_id": 1,
    }
