"""Shared test fixtures — fresh in-memory DB per test, seeded users and products."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from review_moderation.api.deps import get_store
from review_moderation.api.main import app
from review_moderation.db.repository import AsyncSQLStore
from review_moderation.db.tables import Base, ProductRow, UserRow
from review_moderation.models import Role
from review_moderation.services import ModerationService, ReviewService

TEST_DB_URL = "sqlite+aiosqlite://"

# Seeded ids used throughout the suite
ALICE = 1      # regular user
BOB = 2        # regular user
MIA = 9        # moderator
MAX = 10       # moderator
LAMP = 5       # product
KETTLE = 6     # product
MISSING = 999


class FakeClock:
    """Deterministic clock for the Store; advance it between operations."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def seed_rows():
    return [
        UserRow(id=ALICE, username="alice", email="alice@test.com", role=Role.USER),
        UserRow(id=BOB, username="bob", email="bob@test.com", role=Role.USER),
        UserRow(id=MIA, username="mia", email="mia@test.com", role=Role.MODERATOR),
        UserRow(id=MAX, username="max", email="max@test.com", role=Role.MODERATOR),
        ProductRow(id=LAMP, name="Desk Lamp", description="Warm LED lamp", category="home"),
        ProductRow(id=KETTLE, name="Kettle", description="1.7L steel kettle", category="kitchen"),
    ]


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(test_engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        session.add_all(seed_rows())
        await session.commit()

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def store(session_factory, clock):
    async with session_factory() as session:
        yield AsyncSQLStore(session, clock=clock)


@pytest_asyncio.fixture
async def review_service(store):
    return ReviewService(store)


@pytest_asyncio.fixture
async def moderation_service(store):
    return ModerationService(store)


@pytest_asyncio.fixture
async def client(session_factory, clock):
    async def override_get_store():
        async with session_factory() as session:
            yield AsyncSQLStore(session, clock=clock)

    app.dependency_overrides[get_store] = override_get_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_store, None)


async def submit(service: ReviewService, user_id=ALICE, product_id=LAMP, rating=4, text="Solid and bright"):
    """Create a review with sensible defaults."""
    return await service.create_review(user_id, product_id, rating, text)
