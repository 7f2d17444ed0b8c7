"""CatalogStore — loads the question catalog from ``v1/catalog/`` and builds
per-session question sequences.

The store is loaded once at startup; every consistency problem in the YAML
(missing sequence id, unmapped outcome, unknown flavor tag) raises
:class:`CatalogError` immediately rather than surfacing mid-quiz.

Usage::

    store = CatalogStore()          # defaults to v1/catalog relative to repo root
    catalog = store.load()

    questions = build_sequence(catalog)        # once per session
    questions[0].options                       # shuffled for planet items
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from compass_quiz.errors import CatalogError
from compass_quiz.models.catalog import (
    CategoryCode,
    OutcomeAssignment,
    QuizCatalog,
    ReferralRoute,
    SeverityBandDef,
)
from compass_quiz.models.question import QuizOption, QuizQuestion
from compass_quiz.scoring import severity_band

logger = logging.getLogger(__name__)

# Referral route ids the scoring engine can emit.
_REQUIRED_ROUTES = ("samh", "comit", "limitless")

# Highest option score on the PHQ scale.
_MAX_ITEM_SCORE = 3


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# CatalogStore
# ---------------------------------------------------------------------------

class CatalogStore:
    """Loads ``questions.yaml``, ``outcomes.yaml`` and ``referrals.yaml``.

    After :meth:`load`, ``self.catalog`` holds the validated
    :class:`QuizCatalog`.
    """

    def __init__(self, catalog_dir: str | Path | None = None) -> None:
        if catalog_dir is None:
            catalog_dir = find_repo_root() / "v1" / "catalog"
        self._base = Path(catalog_dir)
        self.catalog: QuizCatalog | None = None

    def load(self) -> QuizCatalog:
        """Parse and validate all catalog files.  Call once at startup.

        Raises:
            FileNotFoundError: if a catalog file is missing.
            CatalogError: if the files are inconsistent with each other.
        """
        questions_raw = load_yaml(self._base / "questions.yaml")
        outcomes_raw = load_yaml(self._base / "outcomes.yaml")
        referrals_raw = load_yaml(self._base / "referrals.yaml")

        try:
            items = self._parse_items(questions_raw.get("items", []))
            phq_options = tuple(QuizOption(**o) for o in questions_raw["phq_options"])
            bands = tuple(SeverityBandDef(**b) for b in outcomes_raw["bands"])
            matrix = {
                flavor: {band: OutcomeAssignment(**planet) for band, planet in row.items()}
                for flavor, row in outcomes_raw["matrix"].items()
            }
            routes = {
                r["id"]: ReferralRoute(**r) for r in referrals_raw["routes"]
            }
        except (KeyError, TypeError, ValidationError) as exc:
            raise CatalogError(f"Malformed catalog under {self._base}: {exc}") from exc

        sequence = tuple(questions_raw.get("sequence", []))
        for qid in sequence:
            if qid not in items:
                raise CatalogError(f"Question with id {qid!r} not found in catalog")

        categories = tuple(
            CategoryCode(value=o.value, label=o.label)
            for qid in sequence
            if items[qid].type == "select_nat"
            for o in items[qid].options
        )

        catalog = QuizCatalog(
            items=items,
            sequence=sequence,
            phq_options=phq_options,
            flavor_priority=tuple(outcomes_raw["flavor_priority"]),
            bands=bands,
            outcome_matrix=matrix,
            descriptions=outcomes_raw.get("descriptions", {}),
            default_description=outcomes_raw.get(
                "default_description", "A mysterious cosmic destination awaits you."
            ),
            referrals=routes,
            categories=categories,
            local_category=referrals_raw["local_category"],
            version=questions_raw.get("version"),
        )
        self._validate(catalog)
        self.catalog = catalog

        logger.info(
            "CatalogStore loaded: %d items, %d in sequence, %d flavors, %d bands",
            len(items),
            len(sequence),
            len(catalog.flavor_priority),
            len(bands),
        )
        return catalog

    # ------------------------------------------------------------------
    # Parsing / validation
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_items(raw_items: list[dict]) -> dict[str, QuizQuestion]:
        items: dict[str, QuizQuestion] = {}
        for raw in raw_items:
            q = QuizQuestion(**raw)
            if q.id in items:
                raise CatalogError(f"Duplicate question id {q.id!r} in catalog")
            items[q.id] = q
        return items

    @staticmethod
    def _validate(catalog: QuizCatalog) -> None:
        """Cross-file consistency checks."""
        seq_types = [catalog.items[qid].type for qid in catalog.sequence]
        for qtype in ("input_year", "select_nat"):
            if seq_types.count(qtype) != 1:
                raise CatalogError(
                    f"Sequence must contain exactly one {qtype} question, "
                    f"found {seq_types.count(qtype)}"
                )

        # Bands must tile 0..max screening total with no gaps
        max_total = _MAX_ITEM_SCORE * len(catalog.screening_ids)
        expected_min = 0
        for band in catalog.bands:
            if band.min_total != expected_min or band.max_total < band.min_total:
                raise CatalogError(f"Severity band {band.id!r} leaves a gap or overlap")
            if severity_band(band.min_total) != band.id or severity_band(band.max_total) != band.id:
                raise CatalogError(
                    f"Severity band {band.id!r} does not match the scoring cut points"
                )
            expected_min = band.max_total + 1
        if expected_min - 1 != max_total:
            raise CatalogError(
                f"Severity bands end at {expected_min - 1}, expected {max_total}"
            )

        flavors = set(catalog.flavor_priority)
        for qid in catalog.classification_ids:
            for opt in catalog.items[qid].options:
                if opt.tag not in flavors:
                    raise CatalogError(
                        f"Option {opt.label!r} on {qid} uses unknown flavor {opt.tag!r}"
                    )

        # Every (flavor, band) pair must resolve to a planet
        for flavor in catalog.flavor_priority:
            row = catalog.outcome_matrix.get(flavor)
            if row is None:
                raise CatalogError(f"No outcome row for flavor {flavor!r}")
            for band in catalog.bands:
                if band.id not in row:
                    raise CatalogError(
                        f"No outcome for flavor {flavor!r} in band {band.id!r}"
                    )

        for route in _REQUIRED_ROUTES:
            if route not in catalog.referrals:
                raise CatalogError(f"Missing referral route {route!r}")

        if catalog.local_category not in catalog.category_codes:
            raise CatalogError(
                f"local_category {catalog.local_category!r} is not a category code"
            )


# ---------------------------------------------------------------------------
# Sequencer
# ---------------------------------------------------------------------------

def build_sequence(
    catalog: QuizCatalog, rng: random.Random | None = None
) -> list[QuizQuestion]:
    """Assemble the session's question list in ``catalog.sequence`` order.

    planet questions get an independently shuffled copy of their options;
    phq questions get the shared 0..3 option set.  Call once per session
    and keep the result, otherwise options reorder under the user.
    """
    rng = rng or random.Random()
    questions: list[QuizQuestion] = []
    for qid in catalog.sequence:
        item = catalog.items.get(qid)
        if item is None:
            raise CatalogError(f"Question with id {qid!r} not found in catalog")

        if item.type == "planet":
            options = list(item.options)
            rng.shuffle(options)
            questions.append(item.model_copy(update={"options": tuple(options)}))
        elif item.type == "phq":
            questions.append(item.model_copy(update={"options": catalog.phq_options}))
        else:
            questions.append(item)
    return questions
