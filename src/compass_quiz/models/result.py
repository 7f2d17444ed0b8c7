"""Scoring output models.

``QuizResult`` is a pure function of a complete answer map and the
catalog; ``FormattedResult`` adds the display strings the reveal screen
shows (band label, planet description, referral link).
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from .catalog import OutcomeAssignment, ReferralRoute

SeverityBand = Literal["normal", "mild", "moderate", "severe"]
Referral = Literal["samh", "comit", "limitless"]


class QuizResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    screening_total: int
    severity_band: SeverityBand
    # {"phq1": 0..3, ..., "phq4": 0..3}
    item_scores: dict[str, int]
    anxiety_score: int
    depression_score: int
    anxiety_risk: bool
    depression_risk: bool
    dominant_tag: str
    outcome: OutcomeAssignment
    age: Optional[int] = None
    category: str = ""
    referral: Referral


class FormattedResult(QuizResult):
    """QuizResult plus the display text used on the reveal screen."""

    band_label: str
    flavor_label: str
    description: str
    referral_info: ReferralRoute
