"""Local datastore connection: one lazily created engine per process."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from compagnon.config import get_settings

from .models import Base

logger = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _prepare_sqlite_directory(database_url: str) -> None:
    """Create the directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def get_engine() -> AsyncEngine:
    """
    Get the datastore engine, creating it and its session factory on first use.

    The URL comes from the COMPAGNON_DATABASE_URL setting.
    """
    global _engine, _async_session_factory

    if _engine is None:
        settings = get_settings()
        _prepare_sqlite_directory(settings.database_url)
        _engine = create_async_engine(settings.database_url, echo=settings.debug)
        _async_session_factory = async_sessionmaker(
            _engine, class_=AsyncSession, expire_on_commit=False
        )

    return _engine


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Open a datastore session that commits when the block succeeds.

    Example:
        async with get_session() as session:
            await save_personnage(session, record)
    """
    get_engine()
    assert _async_session_factory is not None  # Set by get_engine
    async with _async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the character and reference tables if they are missing."""
    engine = get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.debug("database_initialized", url=engine.url.render_as_string(hide_password=True))


async def close_db() -> None:
    """Dispose of the engine; the next call to get_engine reconnects."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None
