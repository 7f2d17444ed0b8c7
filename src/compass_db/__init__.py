"""compass_db — PostgreSQL persistence layer for quiz leads.

This package provides the ORM model, async engine factory, repository,
and the database-backed ``LeadSink`` used by the server.
"""

from compass_db.engine import get_engine, get_session_factory
from compass_db.models.lead import LeadRecord
from compass_db.repository import LeadRepository
from compass_db.sink import DatabaseLeadSink

__all__ = [
    "LeadRecord",
    "get_engine",
    "get_session_factory",
    "LeadRepository",
    "DatabaseLeadSink",
]
