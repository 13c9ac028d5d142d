"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mastery_analytics.database import Base
from mastery_analytics.models import Learner
from mastery_analytics.schemas.records import SessionRecord
from mastery_analytics.services.stores import (
    InMemoryLearnerDirectory, InMemoryMasteryStore, InMemorySessionStore
)

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for reproducible day arithmetic."""
    return NOW


@pytest.fixture
def make_session() -> Callable[..., SessionRecord]:
    """Factory for session records completed ``days_ago`` before NOW."""

    def _make(
        score: float,
        module: str = "addition",
        days_ago: float = 0.0,
        total: int = 10,
        correct: int = None,
        seconds: int = 300,
        difficulty: int = 1,
        learner_id: int = 1,
        grade: str = "3",
        at: datetime = None,
    ) -> SessionRecord:
        if correct is None:
            correct = round(total * score / 100)
        return SessionRecord(
            learner_id=learner_id,
            module_name=module,
            grade=grade,
            completed_at=at or NOW - timedelta(days=days_ago),
            final_score=score,
            questions_total=total,
            questions_correct=correct,
            time_spent_seconds=seconds,
            difficulty_level=difficulty,
        )

    return _make


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def mastery_store() -> InMemoryMasteryStore:
    return InMemoryMasteryStore()


@pytest.fixture
def learner_directory() -> InMemoryLearnerDirectory:
    return InMemoryLearnerDirectory({1: "3", 2: "K"})


@pytest_asyncio.fixture
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create test database session with one seeded learner."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        session.add(Learner(id=1, username="ada", grade="3"))
        await session.commit()
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """File-backed database so every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'mastery.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add(Learner(id=1, username="ada", grade="3"))
        await session.commit()

    yield factory

    await engine.dispose()
