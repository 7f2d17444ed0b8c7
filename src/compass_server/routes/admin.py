"""Admin endpoints — read access to submitted leads.

Protected by the ``ADMIN_API_KEY`` setting.  Every request must include
an ``X-Admin-Key`` header whose value matches the configured key.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from compass_db.repository import LeadRepository

from compass_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from compass_server.dependencies import get_db, require_admin_key

router = APIRouter(prefix="/admin", tags=["admin"])


class LeadSummary(BaseModel):
    """One lead as listed to admins."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str | None
    phone: str | None
    screening_total: int
    severity_band: str
    dominant_tag: str
    outcome_id: str
    age: int | None
    category: str
    referral: str
    created_at: datetime


class LeadDetail(LeadSummary):
    """A single lead with its stored answers and metadata."""
    outcome_name: str
    item_scores: list[int]
    answers: dict
    client_info: str
    source: str


class OutcomeStats(BaseModel):
    total: int
    by_outcome: dict[str, int]


_repo = LeadRepository()


@router.get("/leads")
async def list_leads(
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _admin: str = Depends(require_admin_key),
) -> list[LeadSummary]:
    """Submitted leads, most recent first."""
    rows = await _repo.list_recent(db, limit=limit, offset=offset)
    return [LeadSummary.model_validate(r) for r in rows]


@router.get("/leads/stats")
async def lead_stats(
    db: AsyncSession = Depends(get_db),
    _admin: str = Depends(require_admin_key),
) -> OutcomeStats:
    """Lead counts per planet."""
    counts = await _repo.count_by_outcome(db)
    return OutcomeStats(total=sum(counts.values()), by_outcome=counts)


@router.get("/leads/{lead_id}")
async def get_lead(
    lead_id: UUID,
    db: AsyncSession = Depends(get_db),
    _admin: str = Depends(require_admin_key),
) -> LeadDetail:
    """One lead by id."""
    lead = await _repo.get_by_id(db, lead_id)
    if lead is None:
        raise ValueError(f"Lead not found: lead_id={lead_id}")
    return LeadDetail.model_validate(lead)
