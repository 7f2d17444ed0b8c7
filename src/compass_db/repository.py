"""Async CRUD repository for LeadRecord.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries.  The repository flushes but never commits.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from compass_db.models.lead import LeadRecord


class LeadRepository:
    """Async read/write operations on the ``quiz_leads`` table."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_lead(
        self, db: AsyncSession, record: dict[str, Any]
    ) -> LeadRecord:
        """Insert a lead from a ``LeadPayload.to_record()`` dict.

        ``created_at`` may arrive as an ISO-8601 string; it is parsed here
        so the column stays a real timestamp.
        """
        values = dict(record)
        created_at = values.get("created_at")
        if isinstance(created_at, str):
            values["created_at"] = datetime.fromisoformat(created_at)

        lead = LeadRecord(**values)
        db.add(lead)
        await db.flush()  # Populate defaults (id)
        return lead

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(
        self, db: AsyncSession, lead_id: uuid.UUID
    ) -> LeadRecord | None:
        return await db.get(LeadRecord, lead_id)

    async def list_recent(
        self,
        db: AsyncSession,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> list[LeadRecord]:
        """List leads, most recent first."""
        stmt = (
            select(LeadRecord)
            .order_by(LeadRecord.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_by_outcome(self, db: AsyncSession) -> dict[str, int]:
        """Number of leads per planet id."""
        stmt = (
            select(LeadRecord.outcome_id, func.count())
            .group_by(LeadRecord.outcome_id)
            .order_by(LeadRecord.outcome_id)
        )
        result = await db.execute(stmt)
        return {outcome_id: count for outcome_id, count in result.all()}
