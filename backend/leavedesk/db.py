from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated, Any

from fastapi import Depends
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from leavedesk.config import Settings, get_settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for ``settings.database_url``.

    Pool sizing applies to server databases only; SQLite keeps its default pool.
    """
    url = make_url(settings.database_url)
    options: dict[str, Any] = {"echo": settings.db_echo or settings.debug}
    if url.get_backend_name() != "sqlite":
        options.update(pool_size=settings.db_pool_size, pool_pre_ping=True)
    logger.info("Connecting to %s database at %s", url.get_backend_name(), url.render_as_string(hide_password=True))
    return create_async_engine(url, **options)


def get_engine() -> AsyncEngine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the shared session factory.

    Objects stay loaded after commit so services can build responses from them.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request."""
    async with get_session_factory()() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine. Called on shutdown."""
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
