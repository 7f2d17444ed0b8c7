"""DatabaseLeadSink — the PostgreSQL-backed :class:`LeadSink`.

Each ``save`` runs in its own transaction: open a session, insert, commit.
Database and connection failures are rolled back and re-raised as ``LeadSinkError`` with
a user-facing message; the raw driver error stays in the log.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compass_db.repository import LeadRepository
from compass_quiz.constants import SINK_FAILURE_MESSAGE
from compass_quiz.errors import LeadSinkError
from compass_quiz.interfaces import LeadSink
from compass_quiz.models.lead import LeadPayload

logger = logging.getLogger(__name__)


class DatabaseLeadSink(LeadSink):
    """Stores leads in ``quiz_leads``.

    Args:
        session_factory: usually ``compass_db.engine.get_session_factory()``
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._factory = session_factory
        self._repo = LeadRepository()

    async def save(self, payload: LeadPayload) -> None:
        async with self._factory() as db:
            try:
                lead = await self._repo.create_lead(db, payload.to_record())
                await db.commit()
            except (SQLAlchemyError, OSError) as exc:
                # asyncpg connect failures surface as bare OSError
                await db.rollback()
                logger.error("Failed to persist lead: %s", exc)
                raise LeadSinkError(SINK_FAILURE_MESSAGE) from exc
        logger.info("Lead %s saved (outcome=%s)", lead.id, lead.outcome_id)
