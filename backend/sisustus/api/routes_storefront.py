"""Storefront search, recommendation and product lookup routes."""

from fastapi import APIRouter, Depends, HTTPException, Query

from sisustus.api.deps import get_assist, get_catalog
from sisustus.models.chat import RecommendRequest
from sisustus.services.intent import parse_constraints
from sisustus.services.llm import AIAssist
from sisustus.services.search import recommend_products
from sisustus.storage.catalog import CatalogClient

router = APIRouter(prefix="/api/storefront", tags=["storefront"])


# --------------------------------------------------------------------------- #
# 1. Keyword search
# --------------------------------------------------------------------------- #

@router.get("/search")
def search(
    q: str = Query(default="", description="Search text"),
    limit: int = Query(default=4, description="Max results (capped at 30)"),
    budget_max: float | None = Query(default=None, description="Maximum price in EUR"),
    catalog: CatalogClient = Depends(get_catalog),
) -> dict:
    if not q.strip():
        raise HTTPException(status_code=400, detail="Otsingusõna on kohustuslik")

    cards = catalog.search_cards(q.strip(), limit=limit, budget_max=budget_max)
    return {"products": [card.model_dump() for card in cards], "total": len(cards)}


# --------------------------------------------------------------------------- #
# 2. Recommendations
# --------------------------------------------------------------------------- #

@router.post("/recommend")
def recommend(
    request: RecommendRequest,
    catalog: CatalogClient = Depends(get_catalog),
    assist: AIAssist = Depends(get_assist),
) -> dict:
    """Ranked product recommendations for a free-text query."""
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Päring on kohustuslik")

    constraints = request.constraints or parse_constraints(request.query)
    limit = max(1, min(request.limit, 12))
    cards = recommend_products(request.query, constraints, limit, catalog, assist)
    return {"products": [card.model_dump() for card in cards], "total": len(cards)}


# --------------------------------------------------------------------------- #
# 3. Single product by id or slug
# --------------------------------------------------------------------------- #

@router.get("/product/{handle_or_id}")
def product(handle_or_id: str, catalog: CatalogClient = Depends(get_catalog)) -> dict:
    """Product card by numeric id or slug. Raises 400 for a non-positive id
    and 404 when the store has no such product."""
    value = handle_or_id.strip()
    if value.isdigit() and int(value) <= 0:
        raise HTTPException(status_code=400, detail="Vigane toote ID")

    card = catalog.get_product(value)
    if card is None:
        raise HTTPException(status_code=404, detail="Toodet ei leitud")
    return card.model_dump()
