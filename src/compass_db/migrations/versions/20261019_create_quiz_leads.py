"""Create the quiz_leads table.

One row per submitted lead: contact fields, the raw answer map (JSONB)
and the flattened quiz result.

Revision ID: 20261019_quiz_leads
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261019_quiz_leads"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "quiz_leads",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column(
            "answers", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("screening_total", sa.SmallInteger(), nullable=False),
        sa.Column("severity_band", sa.String(20), nullable=False),
        sa.Column("item_scores", ARRAY(sa.SmallInteger()), nullable=False),
        sa.Column("dominant_tag", sa.String(20), nullable=False),
        sa.Column("outcome_id", sa.String(40), nullable=False),
        sa.Column("outcome_name", sa.Text(), nullable=False),
        sa.Column("age", sa.SmallInteger(), nullable=True),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("referral", sa.String(20), nullable=False),
        sa.Column("client_info", sa.Text(), nullable=False),
        sa.Column("source", sa.Text(), nullable=False),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint(
            "email IS NOT NULL OR phone IS NOT NULL", name="ck_lead_has_contact",
        ),
        sa.CheckConstraint(
            "screening_total BETWEEN 0 AND 12", name="ck_screening_total_range",
        ),
        sa.CheckConstraint(
            "array_length(item_scores, 1) = 4", name="ck_four_item_scores",
        ),
    )
    op.create_index("ix_quiz_leads_outcome_id", "quiz_leads", ["outcome_id"])
    op.create_index("ix_quiz_leads_created_at", "quiz_leads", ["created_at"])
    op.create_index("ix_quiz_leads_referral", "quiz_leads", ["referral"])


def downgrade() -> None:
    op.drop_index("ix_quiz_leads_referral", table_name="quiz_leads")
    op.drop_index("ix_quiz_leads_created_at", table_name="quiz_leads")
    op.drop_index("ix_quiz_leads_outcome_id", table_name="quiz_leads")
    op.drop_table("quiz_leads")
