"""Server configuration — reads settings from environment variables.

All settings have sensible defaults for local development.
"""

import os
from dataclasses import dataclass, field

# Module-level constants read at import time so FastAPI Query() defaults
# can reference them.
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "20"))
MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", "100"))


@dataclass(frozen=True)
class ServerSettings:
    """Immutable server configuration read from environment at startup."""

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # CORS — comma-separated origins, or "*" for wide-open dev mode
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Catalog directory (None → CatalogStore default, v1/catalog from repo root)
    catalog_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # Quiz sessions idle longer than this are dropped from memory
    session_idle_minutes: int = 60

    # Admin API key — shared secret for admin endpoints (None = disabled)
    admin_api_key: str | None = None

    # When set, leads are POSTed here instead of written to PostgreSQL
    lead_webhook_url: str | None = None


def load_settings() -> ServerSettings:
    """Build settings from ``SERVER_*`` and related environment variables."""
    raw_origins = os.getenv("SERVER_CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]

    return ServerSettings(
        host=os.getenv("SERVER_HOST", "0.0.0.0"),
        port=int(os.getenv("SERVER_PORT", "8080")),
        cors_origins=origins,
        catalog_dir=os.getenv("SERVER_CATALOG_DIR") or None,
        log_level=os.getenv("SERVER_LOG_LEVEL", "INFO").upper(),
        session_idle_minutes=int(os.getenv("SESSION_IDLE_MINUTES", "60")),
        admin_api_key=os.getenv("ADMIN_API_KEY") or None,
        lead_webhook_url=os.getenv("LEAD_WEBHOOK_URL") or None,
    )
