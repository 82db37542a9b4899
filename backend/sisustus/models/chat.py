"""Pydantic v2 models for chat turns and responses."""

from typing import Literal

from pydantic import BaseModel

from sisustus.models.product import ProductCard
from sisustus.models.search import ParsedConstraints

Intent = Literal["greeting", "shipping", "returns", "faq", "order_help", "product_reco", "smalltalk"]

INTENTS: tuple[str, ...] = ("greeting", "shipping", "returns", "faq", "order_help", "product_reco", "smalltalk")


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    text: str


class ChatRequest(BaseModel):
    message: str = ""
    cart_id: str | None = None
    session_id: str | None = None
    history: list[ChatTurn] = []


class CommerceActions(BaseModel):
    free_shipping_gap: float | None = None
    apply_discount_hint: str | None = None


class ChatResponse(BaseModel):
    message: str
    cards: list[ProductCard] = []
    suggestions: list[str] = []
    actions: CommerceActions = CommerceActions()
    cart_id: str | None = None
    product_summary: str | None = None


class RecommendRequest(BaseModel):
    """Body of the storefront recommendation endpoint."""

    query: str = ""
    constraints: ParsedConstraints | None = None
    limit: int = 4
