"""Reference data endpoints — planets, severity bands, referral routes.

Read-only views over the loaded catalog; no session or auth needed.
"""

from fastapi import APIRouter, Depends

from compass_quiz.models.catalog import QuizCatalog, ReferralRoute, SeverityBandDef

from compass_server.dependencies import get_catalog

router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/outcomes")
def list_outcomes(
    catalog: QuizCatalog = Depends(get_catalog),
) -> list[dict]:
    """Every planet reachable from the outcome matrix, with its description."""
    seen: dict[str, dict] = {}
    for row in catalog.outcome_matrix.values():
        for planet in row.values():
            if planet.id not in seen:
                seen[planet.id] = {
                    "id": planet.id,
                    "name": planet.name,
                    "description": catalog.descriptions.get(
                        planet.id, catalog.default_description
                    ),
                }
    return list(seen.values())


@router.get("/bands")
def list_bands(
    catalog: QuizCatalog = Depends(get_catalog),
) -> list[SeverityBandDef]:
    return list(catalog.bands)


@router.get("/referrals")
def list_referrals(
    catalog: QuizCatalog = Depends(get_catalog),
) -> list[ReferralRoute]:
    return list(catalog.referrals.values())
