from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from weather_pusher.core.config import settings


# ---------------------------------------------------------------------
# Database engine
# ---------------------------------------------------------------------

# Asynchronous SQLAlchemy engine.
# Uses the database URL provided via environment variables.
engine: AsyncEngine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,  # Validates connections before using them
)


# ---------------------------------------------------------------------
# Database session factory
# ---------------------------------------------------------------------

# Factory for asynchronous database sessions.
# Shared by request handlers and by the push pipeline, which opens
# one session per run because it also runs outside any request.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------
# Dependency injection
# ---------------------------------------------------------------------

async def get_db() -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency that provides an asynchronous database session.

    A new `AsyncSession` is created for each request and automatically
    closed once the request lifecycle ends.
    """
    async with AsyncSessionLocal() as session:
        yield session
