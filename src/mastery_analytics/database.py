"""Database configuration and session management."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .config import get_settings
from .utils.exceptions import ConfigurationException

settings = get_settings()

_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def async_database_url(url: str) -> str:
    """Rewrite a plain database URL to use its async driver."""
    if not url:
        raise ConfigurationException("Database URL is not configured", config_key="database_url")
    for plain, driver in _ASYNC_DRIVERS.items():
        if url.startswith(plain):
            return url.replace(plain, driver, 1)
    return url


# Async engine for store operations
async_engine = create_async_engine(
    async_database_url(settings.database_url),
    echo=settings.database_echo,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)

# Base class for models
Base = declarative_base()


async def init_db() -> None:
    """Initialize database tables."""
    # Importing registers the tables on Base.metadata
    from . import models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await async_engine.dispose()
