"""Bundle builder API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from sisustus.api.deps import get_assist, get_catalog
from sisustus.config import BUDGET_CEILINGS
from sisustus.models.bundle import AlternativesRequest, BundleAnswers, BundleResponse
from sisustus.models.product import ProductCard
from sisustus.services.bundler import assemble_bundles, rank_alternatives
from sisustus.services.llm import AIAssist
from sisustus.services.room_filter import filter_catalog_for_room
from sisustus.storage.catalog import CatalogClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["bundle"])

BUNDLES_MESSAGE = "Siin on sinu personaalsed komplektid:"
NO_BUNDLES_MESSAGE = (
    "Kahjuks ei õnnestunud praegu komplekte koostada. Proovi palun hetke pärast uuesti "
    "või muuda valikuid."
)


def _validate_answers(answers: BundleAnswers) -> None:
    """Raise HTTPException 400 when the required answers are missing or invalid."""
    if not answers.room or not answers.budget_range or not answers.style:
        raise HTTPException(
            status_code=400,
            detail="Ruum, eelarve ja stiil on kohustuslikud.",
        )

    if answers.budget_range == "custom":
        if answers.budget_custom is None or answers.budget_custom <= 0:
            raise HTTPException(
                status_code=400,
                detail="Sisesta eelarve positiivse arvuna.",
            )
    elif answers.budget_range not in BUDGET_CEILINGS:
        raise HTTPException(status_code=400, detail="Tundmatu eelarvevahemik.")


# ---------------------------------------------------------------------------
# POST /api/bundle
# ---------------------------------------------------------------------------

@router.post("/bundle", response_model=BundleResponse)
def build_bundles(
    answers: BundleAnswers,
    catalog: CatalogClient = Depends(get_catalog),
    assist: AIAssist = Depends(get_assist),
) -> BundleResponse:
    """Assemble up to three furniture bundles for the questionnaire answers."""
    _validate_answers(answers)

    bundles = assemble_bundles(answers, catalog.fetch_catalog(), assist)
    logger.info("[bundle] Built %d bundles for room=%s", len(bundles), answers.room)
    return BundleResponse(bundles=bundles, message=BUNDLES_MESSAGE if bundles else NO_BUNDLES_MESSAGE)


# ---------------------------------------------------------------------------
# POST /api/bundle/alternatives
# ---------------------------------------------------------------------------

@router.post("/bundle/alternatives")
def bundle_alternatives(
    request: AlternativesRequest,
    catalog: CatalogClient = Depends(get_catalog),
) -> dict:
    """Replacement candidates for one item of an existing bundle."""
    item = next((item for item in request.bundle.items if item.id == request.item_id), None)
    if item is None:
        raise HTTPException(status_code=404, detail="Toodet komplektis ei leitud.")

    answers = request.answers
    cards: list[ProductCard] = [product.to_card() for product in catalog.fetch_catalog()]
    pool = filter_catalog_for_room(cards, answers.room, answers.selected_elements, answers.anchor_product)
    alternatives = rank_alternatives(item, request.bundle, pool, answers)
    return {"item_id": item.id, "alternatives": [card.model_dump() for card in alternatives]}
