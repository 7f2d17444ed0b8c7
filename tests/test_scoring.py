"""Scoring engine tests — screening total, bands, dominant flavor, age,
referral routing and the planet lookup.

Worked examples use the shipped v1 catalog and a fixed current year of 2026.
"""

import pytest

from compass_quiz.errors import CatalogError
from compass_quiz.models.answer import CategoryAnswer, ScoreAnswer, TagAnswer, YearAnswer
from compass_quiz.scoring import (
    derived_age,
    dominant_tag,
    format_result,
    item_scores,
    outcome_assignment,
    parse_birth_year,
    process,
    referral_route,
    screening_total,
    severity_band,
)

YEAR = 2026


def _answers(scores=(0, 0, 0, 0), tags=("fire",) * 8, year="2006", category="sg"):
    """Build a complete answer map for the v1 catalog."""
    answers = {}
    for i, score in enumerate(scores, start=1):
        answers[f"phq{i}"] = ScoreAnswer(score=score)
    for i, tag in enumerate(tags, start=1):
        answers[f"pq{i}"] = TagAnswer(tag=tag)
    if year is not None:
        answers["yob"] = YearAnswer(year=year)
    if category is not None:
        answers["nat"] = CategoryAnswer(category=category)
    return answers


# =====================================================================
# Screening
# =====================================================================


class TestScreening:
    def test_total_is_sum_of_items(self):
        answers = _answers(scores=(1, 2, 0, 3))
        assert screening_total(answers) == 6

    def test_missing_items_count_as_zero(self):
        answers = {"phq1": ScoreAnswer(score=2)}
        assert item_scores(answers) == {"phq1": 2, "phq2": 0, "phq3": 0, "phq4": 0}

    def test_out_of_range_scores_are_clamped(self):
        answers = _answers(scores=(7, -2, 3, 3))
        assert item_scores(answers) == {"phq1": 3, "phq2": 0, "phq3": 3, "phq4": 3}
        assert screening_total(answers) == 9

    def test_non_score_answer_on_screening_item_counts_zero(self):
        answers = {"phq1": TagAnswer(tag="fire"), "phq2": ScoreAnswer(score=1)}
        assert screening_total(answers) == 1

    @pytest.mark.parametrize(
        "total, band",
        [
            (0, "normal"), (2, "normal"),
            (3, "mild"), (5, "mild"),
            (6, "moderate"), (8, "moderate"),
            (9, "severe"), (12, "severe"),
        ],
    )
    def test_band_boundaries(self, total, band):
        assert severity_band(total) == band, f"total={total}"


# =====================================================================
# Dominant flavor
# =====================================================================


class TestDominantTag:
    def test_majority_wins(self):
        tags = ("air", "air", "air", "fire", "ice", "water", "air", "fire")
        assert dominant_tag(_answers(tags=tags)) == "air"

    def test_tie_goes_to_first_declared(self):
        """fire and water tie at 4; fire is declared first."""
        tags = ("water", "fire") * 4
        assert dominant_tag(_answers(tags=tags)) == "fire"

    def test_tie_between_later_flavors(self):
        """Ties are settled by declaration order, not by answer order."""
        tags = ("air", "water", "ice", "air", "water", "ice", "fire", "fire")
        # fire=2 ice=2 water=2 air=2 -> fire
        assert dominant_tag(_answers(tags=tags)) == "fire"
        tags = ("air", "water", "ice", "air", "water", "ice", "air", "ice")
        # ice=3 air=3 water=2 -> ice
        assert dominant_tag(_answers(tags=tags)) == "ice"

    def test_no_tags_falls_back_to_first_flavor(self):
        assert dominant_tag({}) == "fire"

    def test_unknown_tags_are_ignored(self):
        answers = {"pq1": TagAnswer(tag="plasma"), "pq2": TagAnswer(tag="water")}
        assert dominant_tag(answers) == "water"

    def test_only_classification_ids_are_counted(self):
        answers = {"pq1": TagAnswer(tag="air"), "extra": TagAnswer(tag="ice")}
        answers["extra2"] = TagAnswer(tag="ice")
        assert dominant_tag(answers, classification_ids=["pq1"]) == "air"


# =====================================================================
# Age & referral
# =====================================================================


class TestDemographics:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2006", 2006),
            (" 1990 ", 1990),
            ("1900", 1900),
            ("2026", 2026),
            ("1899", None),
            ("2027", None),
            ("abc", None),
            ("20.5", None),
            ("2_000", None),
            ("٢٠٠٠", None),
            ("+2000", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse_birth_year(self, raw, expected):
        assert parse_birth_year(raw, YEAR) == expected, f"raw={raw!r}"

    def test_age_from_year(self):
        assert derived_age(_answers(year="2006"), YEAR) == 20

    def test_invalid_or_missing_year_gives_no_age(self):
        assert derived_age(_answers(year="abc"), YEAR) is None
        assert derived_age(_answers(year=None), YEAR) is None

    @pytest.mark.parametrize(
        "age, category, route",
        [
            (12, "sg", "samh"),
            (20, "sg", "samh"),
            (25, "sg", "samh"),
            (26, "sg", "comit"),
            (60, "sg", "comit"),
            (11, "sg", "limitless"),
            (None, "sg", "limitless"),
            (20, "spr", "limitless"),
            (40, "non-sg", "limitless"),
            (20, "", "limitless"),
        ],
    )
    def test_referral_route(self, age, category, route):
        assert referral_route(age, category, "sg") == route, f"age={age} category={category}"


# =====================================================================
# process / format_result
# =====================================================================


class TestProcess:
    def test_worked_example_young_local(self, catalog):
        """All zeros, all fire, born 2006, local -> Mars, normal, samh."""
        result = process(_answers(), catalog, current_year=YEAR)
        assert result.screening_total == 0
        assert result.severity_band == "normal"
        assert result.dominant_tag == "fire"
        assert result.outcome.id == "mars"
        assert result.age == 20
        assert result.category == "sg"
        assert result.referral == "samh"

    def test_severe_ice_adult(self, catalog):
        result = process(
            _answers(scores=(3, 3, 3, 3), tags=("ice",) * 8, year="1980"),
            catalog,
            current_year=YEAR,
        )
        assert result.screening_total == 12
        assert result.severity_band == "severe"
        assert result.outcome.id == "uranus"
        assert result.referral == "comit"

    def test_subscales(self, catalog):
        result = process(_answers(scores=(2, 1, 0, 1)), catalog, current_year=YEAR)
        assert result.anxiety_score == 3 and result.anxiety_risk
        assert result.depression_score == 1 and not result.depression_risk

    def test_every_flavor_band_pair_resolves(self, catalog):
        totals = {"normal": (0, 0, 0, 0), "mild": (1, 1, 1, 0),
                  "moderate": (2, 2, 2, 0), "severe": (3, 3, 3, 0)}
        for flavor in catalog.flavor_priority:
            for band, scores in totals.items():
                result = process(
                    _answers(scores=scores, tags=(flavor,) * 8), catalog, current_year=YEAR
                )
                expected = catalog.outcome_matrix[flavor][band]
                assert result.severity_band == band
                assert result.outcome == expected, f"{flavor}/{band}"

    def test_partial_answers_are_tolerated(self, catalog):
        result = process({}, catalog, current_year=YEAR)
        assert result.screening_total == 0
        assert result.age is None
        assert result.category == ""
        assert result.referral == "limitless"
        assert result.outcome.id == "mars"

    def test_deterministic(self, catalog):
        answers = _answers(scores=(1, 2, 3, 0), tags=("water", "air") * 4)
        assert process(answers, catalog, YEAR) == process(answers, catalog, YEAR)

    def test_missing_matrix_entry_raises_catalog_error(self):
        with pytest.raises(CatalogError):
            outcome_assignment("fire", "normal", {"ice": {}})

    def test_format_result(self, catalog):
        result = process(_answers(scores=(1, 1, 1, 0), tags=("water",) * 8), catalog, YEAR)
        formatted = format_result(result, catalog)
        assert formatted.outcome.id == "venus"
        assert formatted.band_label == "Mild (3–5)"
        assert formatted.flavor_label == "Water"
        assert formatted.description.startswith("The harmony planet")
        assert formatted.referral_info.id == "samh"
        assert formatted.referral_info.url == "https://t.me/CommanderSam_bot"
        assert formatted.screening_total == result.screening_total
