"""Pydantic models for the catalog reference data.

These mirror the YAML files in ``v1/catalog/``:

  - questions.yaml: PHQ option set, all items, the fixed sequence
  - outcomes.yaml: flavor priority, severity bands, planet matrix,
    planet descriptions
  - referrals.yaml: referral routes and category codes

``QuizCatalog`` is the assembled, validated view the rest of the SDK
reads from.  It is built by :class:`compass_quiz.catalog.CatalogStore`.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .question import QuizOption, QuizQuestion


class OutcomeAssignment(BaseModel):
    """A planet from the outcome matrix."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class SeverityBandDef(BaseModel):
    """A named range of the screening total, inclusive on both ends."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    min_total: int
    max_total: int


class ReferralRoute(BaseModel):
    """A downstream support service the user is pointed to."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    url: str


class CategoryCode(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class QuizCatalog(BaseModel):
    """Everything the sequencer and scoring engine need, loaded once."""

    model_config = ConfigDict(frozen=True)

    items: dict[str, QuizQuestion]
    sequence: tuple[str, ...]
    phq_options: tuple[QuizOption, ...]
    # Declaration order doubles as the dominant-flavor tie-break order
    flavor_priority: tuple[str, ...]
    bands: tuple[SeverityBandDef, ...]
    # flavor -> band id -> planet
    outcome_matrix: dict[str, dict[str, OutcomeAssignment]]
    descriptions: dict[str, str]
    default_description: str = "A mysterious cosmic destination awaits you."
    referrals: dict[str, ReferralRoute]
    categories: tuple[CategoryCode, ...]
    local_category: str
    version: Optional[str] = None

    @property
    def screening_ids(self) -> list[str]:
        """Screening item ids in sequence order."""
        return [qid for qid in self.sequence if self.items[qid].is_screening]

    @property
    def classification_ids(self) -> list[str]:
        return [qid for qid in self.sequence if self.items[qid].is_classification]

    @property
    def category_codes(self) -> set[str]:
        return {c.value for c in self.categories}

    def band_label(self, band_id: str) -> str:
        for band in self.bands:
            if band.id == band_id:
                return band.label
        raise KeyError(f"Unknown severity band: {band_id}")
