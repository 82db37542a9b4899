"""
Chat orchestration.

One turn: classify the message (rules, optionally refined by AI), honour a
pending category-clarification answer, then route to escalation, FAQ,
canned replies, a clarification question or product recommendations.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from sisustus.config import (
    CHAT_SUGGESTIONS,
    COMMERCE_CONFIG,
    ESCALATION_SUGGESTIONS,
)
from sisustus.models.chat import INTENTS, ChatRequest, ChatResponse, CommerceActions
from sisustus.models.product import Category
from sisustus.models.search import ClarificationOption, ParsedConstraints
from sisustus.services.clarification import (
    clarification_message,
    has_specific_subcategory_mention,
    pending_clarification_query,
    plan_category_clarification,
    resolve_clarification_reply,
)
from sisustus.services.faq import answer_faq
from sisustus.services.intent import detect_intent, parse_constraints
from sisustus.services.search import recommend_products

if TYPE_CHECKING:
    from sisustus.services.llm import AIAssist
    from sisustus.storage.catalog import CatalogClient

logger = logging.getLogger(__name__)

ESCALATION_RE = re.compile(r"pahane|vihane|petetud|fraud|chargeback|kadunud pakk|makse probleem")

RECOMMENDATION_LIMIT = 4

GREETING_MESSAGE = (
    "Tere! Olen IDA Sisustuspood assistent. Aitan tarne, tagastuse, tingimuste ja kontakti "
    "küsimustega ning leian sulle sobivaid tooteid."
)
ORDER_HELP_MESSAGE = (
    "Aitan hea meelega. Kui küsimus on tellimuse või makse kohta, kirjuta palun tellimuse number "
    f"ja kontakt või kirjuta otse: {COMMERCE_CONFIG['support_email']}."
)
SMALLTALK_MESSAGE = (
    "Selge! Kas soovid abi tarne/tagastuse küsimuses või otsid mõnda toodet? Tootesoovituseks "
    "kirjelda palun stiili, toote tüüpi ja eelarvet."
)
RECOMMENDATIONS_MESSAGE = "Siin on minu soovitused just sulle:"
NO_PRODUCTS_MESSAGE = (
    "Kahjuks ei leidnud praegu sobivaid tooteid. Proovi palun kirjeldada täpsemalt "
    "(nt toote tüüp, stiil ja eelarve)."
)


# ---------------------------------------------------------------------------
# Commerce helpers
# ---------------------------------------------------------------------------

def compute_commerce_actions(subtotal: float) -> CommerceActions:
    """Free-shipping gap and next discount tier hint for a cart subtotal."""
    threshold = COMMERCE_CONFIG["free_shipping_threshold"]
    gap = max(0.0, threshold - subtotal) if threshold > 0 else None

    hint = None
    for tier in COMMERCE_CONFIG["discount_thresholds"]:
        if subtotal < tier["subtotal"]:
            hint = f"Lisa {tier['subtotal'] - subtotal:.2f}€ eest ja saa {tier['discount_pct']}% allahindlust."
            break
    return CommerceActions(free_shipping_gap=gap, apply_discount_hint=hint)


def handoff(summary: str) -> str:
    """Next step offered when a conversation is handed to human support."""
    logger.info("[chat] Escalating to support: %s", summary)
    return f"Palun kirjuta {COMMERCE_CONFIG['support_email']} või helista {COMMERCE_CONFIG['support_phone']}."


# ---------------------------------------------------------------------------
# Turn resolution
# ---------------------------------------------------------------------------

class _CategoryTree:
    """Fetches the category tree at most once per turn, and only if needed."""

    def __init__(self, catalog: CatalogClient):
        self._catalog = catalog
        self._categories: list[Category] | None = None

    def get(self) -> list[Category]:
        if self._categories is None:
            self._categories = self._catalog.fetch_all_categories()
        return self._categories


def resolve_turn(
    request: ChatRequest,
    categories: _CategoryTree,
    assist: AIAssist | None,
) -> tuple[str, str, ParsedConstraints, ClarificationOption | None]:
    """Return ``(intent, effective query, constraints, selected option)``.

    A reply to a pending clarification question forces ``product_reco`` and
    re-runs the original query with the chosen sub-category appended.
    """
    intent = detect_intent(request.message)
    if assist is not None:
        refined = assist.classify_intent(request.message, request.history)
        if refined and refined[0] in INTENTS:
            intent = refined[0]

    query = request.message
    base_query = pending_clarification_query(request.history)
    if base_query:
        plan = plan_category_clarification(base_query, parse_constraints(base_query).product_types, categories.get())
        selected = resolve_clarification_reply(request.message, plan.options) if plan else None
        if selected is not None:
            query = f"{base_query} {selected.query_token}"
            return "product_reco", query, parse_constraints(query), selected

    return intent, query, parse_constraints(query), None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def run_chat(request: ChatRequest, catalog: CatalogClient, assist: AIAssist | None = None) -> ChatResponse:
    """Produce the assistant's reply to one chat message."""
    categories = _CategoryTree(catalog)
    intent, query, constraints, selected = resolve_turn(request, categories, assist)
    logger.info("[chat] intent=%s query=%r", intent, query)

    if ESCALATION_RE.search(request.message.lower()):
        next_step = handoff(f"Klient vajab kiiret tuge: {request.message}")
        return ChatResponse(
            message=f"Võtan selle kohe klienditoele edasi. {next_step}",
            suggestions=ESCALATION_SUGGESTIONS,
            cart_id=request.cart_id,
        )

    if intent in ("shipping", "returns", "faq"):
        faq = answer_faq(request.message)
        reply = assist.short_reply(request.message, faq.answer) if assist is not None else None
        return ChatResponse(
            message=reply or f"{faq.answer} Vaata ka: {faq.recommended_link}",
            suggestions=CHAT_SUGGESTIONS,
            cart_id=request.cart_id,
        )

    if intent == "greeting":
        return ChatResponse(message=GREETING_MESSAGE, suggestions=CHAT_SUGGESTIONS, cart_id=request.cart_id)

    if intent in ("order_help", "smalltalk"):
        fallback = ORDER_HELP_MESSAGE if intent == "order_help" else SMALLTALK_MESSAGE
        reply = assist.general_reply(request.message) if assist is not None else None
        return ChatResponse(message=reply or fallback, suggestions=CHAT_SUGGESTIONS, cart_id=request.cart_id)

    if selected is None:
        plan = plan_category_clarification(query, constraints.product_types, categories.get())
        if plan and not has_specific_subcategory_mention(query, plan.options):
            return ChatResponse(
                message=clarification_message(plan),
                suggestions=[option.label for option in plan.options][:10],
                cart_id=request.cart_id,
            )

    cards = recommend_products(query, constraints, RECOMMENDATION_LIMIT, catalog, assist)

    summary = None
    if cards:
        message = RECOMMENDATIONS_MESSAGE
        if assist is not None and len(cards) >= 2:
            summary = assist.product_set_summary(query, cards)
    else:
        message = NO_PRODUCTS_MESSAGE

    return ChatResponse(
        message=message,
        cards=cards,
        suggestions=CHAT_SUGGESTIONS,
        actions=compute_commerce_actions(0),
        cart_id=request.cart_id,
        product_summary=summary or None,
    )
