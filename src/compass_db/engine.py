"""Shared async engine for the lead store.

Built on first use and kept for the life of the process; the lead sink,
the admin routes and ``/health`` all draw from the same pool.
``dispose_engine()`` runs from the server's shutdown hook.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from compass_db.config import get_async_url, get_pool_options

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        # Leads arrive sporadically; stale pooled connections are
        # replaced on checkout.
        _engine = create_async_engine(
            get_async_url(), pool_pre_ping=True, **get_pool_options()
        )
        logger.info("Lead store engine created")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to :func:`get_engine`; objects survive commit."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def ping() -> None:
    """Round-trip ``SELECT 1``; raises whatever the driver raises."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Lead store engine disposed")
