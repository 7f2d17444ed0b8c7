"""Lead payload models — the bundle handed to the persistence sink.

A ``LeadPayload`` is built once at submission time and never modified.
``to_record()`` flattens it into the row shape the ``quiz_leads`` table
accepts, so sinks do not need to know the nested layout.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class LeadContact(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str = ""
    phone: str = ""


class LeadQuiz(BaseModel):
    """Answer snapshot plus the flattened result fields."""

    model_config = ConfigDict(frozen=True)

    answers: dict[str, dict[str, Any]]
    screening_total: int
    severity_band: str
    item_scores: dict[str, int]
    dominant_tag: str
    outcome_id: str
    outcome_name: str
    age: Optional[int] = None
    category: str
    referral: str


class LeadMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    # ISO-8601, UTC
    timestamp: str
    client_info: str
    source: str


class LeadPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    contact: LeadContact
    quiz: LeadQuiz
    meta: LeadMeta

    def to_record(self) -> dict[str, Any]:
        """Flatten into the persisted record shape.

        Empty contact fields become ``None``; item scores become a list in
        catalog order.
        """
        return {
            "email": self.contact.email or None,
            "phone": self.contact.phone or None,
            "answers": self.quiz.answers,
            "screening_total": self.quiz.screening_total,
            "severity_band": self.quiz.severity_band,
            "item_scores": list(self.quiz.item_scores.values()),
            "dominant_tag": self.quiz.dominant_tag,
            "outcome_id": self.quiz.outcome_id,
            "outcome_name": self.quiz.outcome_name,
            "age": self.quiz.age,
            "category": self.quiz.category,
            "referral": self.quiz.referral,
            "client_info": self.meta.client_info,
            "source": self.meta.source,
            "created_at": self.meta.timestamp,
        }
