"""Answer models — one tagged variant per question type.

The ``Answer`` union uses ``kind`` as its discriminator so Pydantic can
deserialise request bodies directly into the right variant:

  - ScoreAnswer (phq)         {"kind": "score", "score": 2}
  - TagAnswer (planet)        {"kind": "tag", "tag": "fire"}
  - YearAnswer (input_year)   {"kind": "year", "year": "2004"}
  - CategoryAnswer (select_nat) {"kind": "category", "category": "sg"}

No range checks happen here.  A year of "abc" or a score of 7 is stored
as-is; validity is decided later by the session and the scoring engine.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .question import QuizQuestion


class ScoreAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["score"] = "score"
    score: int


class TagAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["tag"] = "tag"
    tag: str


class YearAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["year"] = "year"
    year: str


class CategoryAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["category"] = "category"
    category: str


Answer = Annotated[
    Union[ScoreAnswer, TagAnswer, YearAnswer, CategoryAnswer],
    Field(discriminator="kind"),
]

# Answer map keyed by question id.
QuizAnswers = dict[str, Answer]

_answer_adapter: TypeAdapter = TypeAdapter(Answer)

_ANSWER_TYPES = (ScoreAnswer, TagAnswer, YearAnswer, CategoryAnswer)

# Variant kind expected for each question type.
KIND_BY_TYPE = {
    "phq": "score",
    "planet": "tag",
    "input_year": "year",
    "select_nat": "category",
}


def coerce_answer(question: QuizQuestion | None, value: Any) -> Answer:
    """Turn a raw value into the answer variant for ``question``.

    Accepts an existing answer model, a dict carrying ``kind``, or a bare
    value (int score, tag string, year string/int, category code).  Bare
    values need the question to know which variant to build.

    Raises:
        KeyError: if a bare value is given without a known question.
        ValueError: if a tagged answer does not match the question type.
    """
    if isinstance(value, _ANSWER_TYPES):
        return _check_kind(question, value)
    if isinstance(value, dict) and "kind" in value:
        return _check_kind(question, _answer_adapter.validate_python(value))
    if question is None:
        raise KeyError("Question not found; a bare answer value needs a known question")

    qt = question.type
    if qt == "phq":
        return ScoreAnswer(score=int(value))
    if qt == "planet":
        return TagAnswer(tag=str(value))
    if qt == "input_year":
        return YearAnswer(year=str(value))
    return CategoryAnswer(category=str(value))


def _check_kind(question: QuizQuestion | None, answer: Answer) -> Answer:
    if question is None:
        return answer
    expected = KIND_BY_TYPE.get(question.type)
    if expected is not None and answer.kind != expected:
        raise ValueError(
            f"Answer kind {answer.kind!r} does not match question {question.id} "
            f"of type {question.type}"
        )
    return answer


def dump_answers(answers: QuizAnswers) -> dict[str, dict]:
    """JSON-ready snapshot of an answer map."""
    return {qid: answer.model_dump() for qid, answer in answers.items()}
