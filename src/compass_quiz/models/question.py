"""Question models for the Cosmic Compass quiz catalog.

Four question types, each mapped to one UI component:

  - phq: PHQ-4 screening item, fixed 0..3 option set (scored-choice)
  - planet: themed multiple choice whose options carry a flavor tag
    (classification-choice)
  - input_year: free numeric input for the birth year
  - select_nat: category select over a fixed list of codes

Catalog entries are frozen.  The sequencer builds per-session copies with
``model_copy(update=...)`` so the catalog itself is never mutated.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

QuestionType = Literal["phq", "planet", "input_year", "select_nat"]


class QuizOption(BaseModel):
    """A selectable option.

    Exactly one of ``score`` (phq), ``tag`` (planet) or ``value``
    (select_nat) is set, depending on the owning question's type.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    score: Optional[int] = None
    tag: Optional[str] = None
    value: Optional[str] = None

    @model_validator(mode="after")
    def _one_payload(self):
        populated = [f for f in ("score", "tag", "value") if getattr(self, f) is not None]
        if len(populated) != 1:
            raise ValueError(
                f"option {self.label!r} must carry exactly one of score/tag/value, "
                f"got {populated or 'none'}"
            )
        return self


class QuizQuestion(BaseModel):
    """An immutable catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: QuestionType
    text: str
    options: tuple[QuizOption, ...] = ()
    placeholder: Optional[str] = None
    image: Optional[str] = None

    @model_validator(mode="after")
    def _options_match_type(self):
        # phq options are attached by the sequencer, input_year has none
        if self.type == "planet" and any(o.tag is None for o in self.options):
            raise ValueError(f"planet question {self.id} has an option without a tag")
        if self.type == "select_nat" and any(o.value is None for o in self.options):
            raise ValueError(f"select_nat question {self.id} has an option without a value")
        return self

    @property
    def is_screening(self) -> bool:
        return self.type == "phq"

    @property
    def is_classification(self) -> bool:
        return self.type == "planet"
