"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the catalog and builds the lead sink once
  - CORS middleware
  - Global exception handlers (SDK ValueError → 404/409/403/400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness checks

The ``cli()`` function is the ``compass-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from compass_db.engine import dispose_engine, get_session_factory, ping
from compass_db.sink import DatabaseLeadSink
from compass_quiz.catalog import CatalogStore
from compass_quiz.interfaces import LeadSink
from compass_quiz.webhook import WebhookLeadSink

from compass_server.config import ServerSettings, load_settings
from compass_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from compass_server.registry import SessionRegistry
from compass_server.routes import register_routes

logger = logging.getLogger(__name__)


def _build_sink(settings: ServerSettings) -> LeadSink:
    """Webhook sink when ``LEAD_WEBHOOK_URL`` is set, PostgreSQL otherwise."""
    if settings.lead_webhook_url:
        logger.info("Leads will be posted to %s", settings.lead_webhook_url)
        return WebhookLeadSink(settings.lead_webhook_url)
    return DatabaseLeadSink(get_session_factory())


# ------------------------------------------------------------------
# Lifespan — runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the YAML catalog via ``CatalogStore``
      2. Build the lead sink (unless one was pre-set on ``app.state.lead_sink``)
      3. Build the ``SessionRegistry`` and stash everything on ``app.state``

    Shutdown:
      1. Dispose the database engine's connection pool
    """
    settings: ServerSettings = app.state.settings

    # --- Load catalog ---
    catalog = CatalogStore(catalog_dir=settings.catalog_dir).load()

    # --- Lead sink & sessions ---
    sink = getattr(app.state, "lead_sink", None) or _build_sink(settings)
    registry = SessionRegistry(
        catalog,
        sink,
        idle_minutes=settings.session_idle_minutes,
    )

    app.state.catalog = catalog
    app.state.lead_sink = sink
    app.state.registry = registry

    yield

    # --- Shutdown ---
    await dispose_engine()


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Cosmic Compass API Server",
        description="REST API for the Cosmic Compass screening quiz",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Read by the lifespan handler and the admin-key dependency
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness check — verifies DB connectivity when leads go to PostgreSQL."""
        status = {"status": "ok", "catalog": app.state.catalog.version}
        if not isinstance(app.state.lead_sink, DatabaseLeadSink):
            return status
        try:
            await ping()
        except Exception:
            logger.exception("Health check failed")
            return {"status": "error", "detail": "Database unavailable"}
        return status

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn compass_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``compass-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "compass_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
