"""FastAPI dependency injection — registry, catalog and DB sessions.

The registry and catalog are built once in the lifespan handler and
stashed on ``app.state``.  Admin endpoints get a fresh ``AsyncSession``
per request via ``get_db()``.
"""

import hmac
from typing import AsyncGenerator

from fastapi import Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from compass_db.engine import get_session_factory
from compass_quiz.models.catalog import QuizCatalog

from compass_server.registry import SessionRegistry


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_catalog(request: Request) -> QuizCatalog:
    return request.app.state.catalog


def get_client_info(
    user_agent: str | None = Header(None, alias="User-Agent"),
) -> str:
    """Client metadata stored with each lead (the browser's user agent)."""
    return user_agent or ""


async def require_admin_key(
    request: Request,
    x_admin_key: str | None = Header(None, alias="X-Admin-Key"),
) -> str:
    """Validate ``X-Admin-Key`` against the configured ``ADMIN_API_KEY``.

    Raises 403 if admin endpoints are disabled or the key is wrong, 401
    if the header is missing.
    """
    expected: str | None = request.app.state.settings.admin_api_key
    if not expected:
        raise HTTPException(
            status_code=403,
            detail="Admin endpoints are disabled (ADMIN_API_KEY not configured)",
        )
    if not x_admin_key:
        raise HTTPException(status_code=401, detail="X-Admin-Key header is required")
    # Constant-time comparison to prevent timing side-channels.
    if not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=403, detail="Invalid admin key")
    return x_admin_key
