"""Lead validation and payload construction.

Contact validation is loose: a plausible email *or* a phone
number with enough digits is sufficient.  The payload builder is pure
apart from the optional clock read for the timestamp.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from compass_quiz.constants import LEAD_SOURCE, MIN_PHONE_DIGITS
from compass_quiz.models.answer import QuizAnswers, dump_answers
from compass_quiz.models.lead import LeadContact, LeadMeta, LeadPayload, LeadQuiz
from compass_quiz.models.result import QuizResult

_NON_DIGITS = re.compile(r"\D")


def is_valid_email(email: str | None) -> bool:
    """``@`` not first, a ``.`` after the character following ``@``, not trailing."""
    trimmed = (email or "").strip()
    at = trimmed.find("@")
    dot = trimmed.rfind(".")
    return at > 0 and dot > at + 1 and dot < len(trimmed) - 1


def is_valid_phone(phone: str | None) -> bool:
    digits = _NON_DIGITS.sub("", phone or "")
    return len(digits) >= MIN_PHONE_DIGITS


def is_valid_contact(email: str | None, phone: str | None) -> bool:
    return is_valid_email(email) or is_valid_phone(phone)


def build_payload(
    answers: QuizAnswers,
    result: QuizResult,
    email: str | None,
    phone: str | None,
    *,
    client_info: str = "",
    now: datetime | None = None,
) -> LeadPayload:
    """Bundle contact details, an answer snapshot and the result."""
    if now is None:
        now = datetime.now(timezone.utc)

    return LeadPayload(
        contact=LeadContact(
            email=(email or "").strip(),
            phone=(phone or "").strip(),
        ),
        quiz=LeadQuiz(
            answers=dump_answers(answers),
            screening_total=result.screening_total,
            severity_band=result.severity_band,
            item_scores=dict(result.item_scores),
            dominant_tag=result.dominant_tag,
            outcome_id=result.outcome.id,
            outcome_name=result.outcome.name,
            age=result.age,
            category=result.category,
            referral=result.referral,
        ),
        meta=LeadMeta(
            timestamp=now.isoformat(),
            client_info=client_info,
            source=LEAD_SOURCE,
        ),
    )
