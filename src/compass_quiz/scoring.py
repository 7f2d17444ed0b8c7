"""Scoring engine — reduces an answer map to a :class:`QuizResult`.

Every function here is pure: no clock reads unless ``current_year`` is
omitted, no randomness, no I/O.  Partial answer maps are tolerated; a
missing item contributes 0, a missing year gives ``age=None``, a missing
category gives ``""``.

PHQ-4 bands (inclusive):

    normal    0-2
    mild      3-5
    moderate  6-8
    severe    9-12

The sub-scales are the standard PHQ-4 split: anxiety = items 1+2 (GAD-2),
depression = items 3+4 (PHQ-2), each flagged at >= 3.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date

from compass_quiz.constants import (
    CATEGORY_QUESTION_ID,
    FLAVOR_PRIORITY,
    LOCAL_CATEGORY,
    MIN_BIRTH_YEAR,
    ROUTE_ADULT,
    ROUTE_DEFAULT,
    ROUTE_YOUTH,
    SCREENING_ITEM_IDS,
    SUBSCALE_RISK_THRESHOLD,
    YEAR_QUESTION_ID,
    YOUTH_MAX_AGE,
    YOUTH_MIN_AGE,
)
from compass_quiz.errors import CatalogError
from compass_quiz.models.answer import CategoryAnswer, QuizAnswers, ScoreAnswer, TagAnswer, YearAnswer
from compass_quiz.models.catalog import OutcomeAssignment, QuizCatalog
from compass_quiz.models.result import FormattedResult, QuizResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Screening score
# ---------------------------------------------------------------------------

def item_scores(
    answers: QuizAnswers, item_ids: Iterable[str] = SCREENING_ITEM_IDS
) -> dict[str, int]:
    """Per-item scores, clamped into 0..3.  Missing or non-score answers are 0."""
    scores: dict[str, int] = {}
    for qid in item_ids:
        answer = answers.get(qid)
        score = answer.score if isinstance(answer, ScoreAnswer) else 0
        scores[qid] = min(3, max(0, score))
    return scores


def screening_total(
    answers: QuizAnswers, item_ids: Iterable[str] = SCREENING_ITEM_IDS
) -> int:
    return sum(item_scores(answers, item_ids).values())


def severity_band(total: int) -> str:
    """Four-band PHQ-4 classification of the screening total."""
    if total <= 2:
        return "normal"
    if total <= 5:
        return "mild"
    if total <= 8:
        return "moderate"
    return "severe"


def has_subscale_risk(subscale_score: int) -> bool:
    return subscale_score >= SUBSCALE_RISK_THRESHOLD


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def dominant_tag(
    answers: QuizAnswers,
    classification_ids: Iterable[str] | None = None,
    priority: Iterable[str] = FLAVOR_PRIORITY,
) -> str:
    """Most frequently chosen flavor.

    Only tags listed in ``priority`` are counted.  Ties go to the flavor
    declared first in ``priority``; with no tagged answers the first
    flavor wins.  When ``classification_ids`` is None every tag answer in
    the map is counted.
    """
    order = list(priority)
    counts = dict.fromkeys(order, 0)

    if classification_ids is None:
        candidates = answers.values()
    else:
        candidates = (answers.get(qid) for qid in classification_ids)

    for answer in candidates:
        if isinstance(answer, TagAnswer) and answer.tag in counts:
            counts[answer.tag] += 1

    best = order[0]
    for tag in order[1:]:
        # strict ">" keeps the earlier-declared flavor on ties
        if counts[tag] > counts[best]:
            best = tag
    return best


# ---------------------------------------------------------------------------
# Demographics
# ---------------------------------------------------------------------------

def parse_birth_year(raw: str | None, current_year: int | None = None) -> int | None:
    """Return the birth year if ``raw`` is an integer in [1900, current_year].

    Only plain ASCII digits count; signs, underscores and non-Latin
    numerals are rejected.
    """
    if raw is None:
        return None
    if current_year is None:
        current_year = date.today().year
    stripped = raw.strip()
    if not (stripped.isascii() and stripped.isdigit()):
        return None
    year = int(stripped)
    if MIN_BIRTH_YEAR <= year <= current_year:
        return year
    return None


def derived_age(
    answers: QuizAnswers,
    current_year: int | None = None,
    year_id: str = YEAR_QUESTION_ID,
) -> int | None:
    if current_year is None:
        current_year = date.today().year
    answer = answers.get(year_id)
    if not isinstance(answer, YearAnswer):
        return None
    year = parse_birth_year(answer.year, current_year)
    if year is None:
        return None
    return current_year - year


def category(answers: QuizAnswers, category_id: str = CATEGORY_QUESTION_ID) -> str:
    answer = answers.get(category_id)
    if isinstance(answer, CategoryAnswer):
        return answer.category
    return ""


def referral_route(
    age: int | None, category_code: str, local_category: str = LOCAL_CATEGORY
) -> str:
    """Route by category and age.

    ``local`` + 12..25 (inclusive) -> samh, ``local`` + over 25 -> comit,
    anything else (including unknown age) -> limitless.
    """
    if category_code == local_category and age is not None:
        if YOUTH_MIN_AGE <= age <= YOUTH_MAX_AGE:
            return ROUTE_YOUTH
        if age > YOUTH_MAX_AGE:
            return ROUTE_ADULT
    return ROUTE_DEFAULT


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

def outcome_assignment(
    tag: str,
    band: str,
    matrix: Mapping[str, Mapping[str, OutcomeAssignment]],
) -> OutcomeAssignment:
    """Look up the planet for (flavor, band).

    Raises:
        CatalogError: if the matrix has no entry for the pair.
    """
    try:
        return matrix[tag][band]
    except KeyError as exc:
        raise CatalogError(f"No outcome for flavor {tag!r} in band {band!r}") from exc


def process(
    answers: QuizAnswers,
    catalog: QuizCatalog,
    current_year: int | None = None,
) -> QuizResult:
    """Compute the full result from scratch.

    Deterministic: the same answers, catalog and year always give an
    identical result.
    """
    if current_year is None:
        current_year = date.today().year

    screening_ids = catalog.screening_ids
    scores = item_scores(answers, screening_ids)
    total = sum(scores.values())
    band = severity_band(total)

    # First two items are anxiety, last two depression
    values = list(scores.values())
    anxiety = sum(values[:2])
    depression = sum(values[2:4])

    tag = dominant_tag(answers, catalog.classification_ids, catalog.flavor_priority)
    age = derived_age(answers, current_year, _id_of_type(catalog, "input_year"))
    category_code = category(answers, _id_of_type(catalog, "select_nat"))
    referral = referral_route(age, category_code, catalog.local_category)

    result = QuizResult(
        screening_total=total,
        severity_band=band,
        item_scores=scores,
        anxiety_score=anxiety,
        depression_score=depression,
        anxiety_risk=has_subscale_risk(anxiety),
        depression_risk=has_subscale_risk(depression),
        dominant_tag=tag,
        outcome=outcome_assignment(tag, band, catalog.outcome_matrix),
        age=age,
        category=category_code,
        referral=referral,
    )
    logger.debug(
        "Scored quiz: total=%d band=%s flavor=%s planet=%s referral=%s",
        total, band, tag, result.outcome.id, referral,
    )
    return result


def format_result(result: QuizResult, catalog: QuizCatalog) -> FormattedResult:
    """Attach display strings for the reveal screen."""
    return FormattedResult(
        **result.model_dump(),
        band_label=catalog.band_label(result.severity_band),
        flavor_label=result.dominant_tag.capitalize(),
        description=catalog.descriptions.get(result.outcome.id, catalog.default_description),
        referral_info=catalog.referrals[result.referral],
    )


def _id_of_type(catalog: QuizCatalog, qtype: str) -> str:
    for qid in catalog.sequence:
        if catalog.items[qid].type == qtype:
            return qid
    raise CatalogError(f"Sequence has no {qtype} question")
