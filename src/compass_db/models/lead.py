"""LeadRecord ORM model — one row per submitted quiz lead.

The answer map is stored as an opaque JSONB blob; the scored fields are
flattened into columns so reporting queries (outcome counts, referral
mix) never need to parse JSON.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, SmallInteger, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from compass_db.models.base import Base


class LeadRecord(Base):
    """A contact + quiz result bundle, written once at reveal time."""

    __tablename__ = "quiz_leads"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # --- Contact (at least one is set) ---
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Answers ---
    # {qid: {"kind": ..., <field>: ...}}
    answers: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )

    # --- Screening ---
    screening_total: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    severity_band: Mapped[str] = mapped_column(String(20), nullable=False)
    # phq1..phq4 in catalog order
    item_scores: Mapped[list[int]] = mapped_column(ARRAY(SmallInteger), nullable=False)

    # --- Classification / outcome ---
    dominant_tag: Mapped[str] = mapped_column(String(20), nullable=False)
    outcome_id: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    outcome_name: Mapped[str] = mapped_column(Text, nullable=False)

    # --- Demographics / routing ---
    age: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    referral: Mapped[str] = mapped_column(String(20), nullable=False)

    # --- Submission metadata ---
    client_info: Mapped[str] = mapped_column(Text, nullable=False, default="")
    source: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(
            "email IS NOT NULL OR phone IS NOT NULL",
            name="ck_lead_has_contact",
        ),
        CheckConstraint(
            "screening_total BETWEEN 0 AND 12",
            name="ck_screening_total_range",
        ),
        CheckConstraint(
            "array_length(item_scores, 1) = 4",
            name="ck_four_item_scores",
        ),
        Index("ix_quiz_leads_created_at", "created_at"),
        Index("ix_quiz_leads_referral", "referral"),
    )

    def __repr__(self) -> str:
        return (
            f"<LeadRecord(id={self.id!s}, outcome={self.outcome_id!r}, "
            f"band={self.severity_band!r}, referral={self.referral!r})>"
        )
