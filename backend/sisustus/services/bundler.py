"""
Bundle assembler service.

Takes the bundle-builder answers and the product catalog, scopes the catalog
to the room, and assembles up to three non-overlapping furniture bundles:

    1. a strict bundle built from the user's explicitly selected elements,
    2. AI-generated bundles when an assist is available, otherwise
    3. role-slot variants (anchor / secondary / accessory) ranked by the
       preference scorer.

Every bundle gets per-item alternatives and a total equal to the sum of the
displayed item prices.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sisustus.config import (
    ACCESSORY_ELEMENT_KEYS,
    ANCHOR_ELEMENT_KEYS,
    AUTO_ANCHOR_LABEL,
    BUNDLE_ROLES,
    DEFAULT_ROLE_SLOTS,
    DEFECT_MARKERS,
    ELEMENT_SPECS,
    MAX_ALTERNATIVES,
    MAX_BUNDLES,
    ROLE_WHY_CHOSEN,
    SOFA_BED_MARKERS,
    TRUE_BED_MARKERS,
)
from sisustus.models.bundle import Bundle, BundleAnswers, BundleItem, BundleRole, item_from_card
from sisustus.models.product import ProductCandidate, ProductCard, parse_price
from sisustus.services.room_filter import (
    card_text,
    element_focused_pool,
    element_slug_hits,
    filter_catalog_for_room,
    infer_element_key,
    matches_element_keywords,
    resolve_element_key,
)
from sisustus.services.scorer import resolve_budget, score_product
from sisustus.services.text import contains_any, normalize_text

if TYPE_CHECKING:
    from sisustus.services.llm import AIAssist

logger = logging.getLogger(__name__)

STRICT_BUNDLE_TITLE = "Valitud elementide komplekt"
AUTO_ANCHOR_WHY = "Komplekti põhitoode (automaatselt valitud)"
VALID_ROLES: tuple[str, ...] = ("ankur", "lisatoode", "aksessuaar")


# ---------------------------------------------------------------------------
# Shared text
# ---------------------------------------------------------------------------

def _style_summary(answers: BundleAnswers) -> str:
    return f"{answers.style or 'Vaba'} stiil, {(answers.color_tone or 'neutraalne').lower()} toonid"


def _key_reasons(answers: BundleAnswers, budget: float) -> list[str]:
    return [
        f"Sobib {(answers.room or 'kodu').lower()}",
        f"Eelarve kuni {budget:.0f}€",
        "Vastupidavad materjalid" if answers.has_children or answers.has_pets else f"{answers.style} stiil",
    ]


def _role_for_key(element_key: str | None) -> BundleRole:
    return "aksessuaar" if element_key in ACCESSORY_ELEMENT_KEYS else "lisatoode"


# ---------------------------------------------------------------------------
# Strategy A: strict selection-driven assembly
# ---------------------------------------------------------------------------

def score_for_element(card: ProductCard, element_key: str) -> int:
    """How well *card* fits one element spec (slug +28, keyword +10)."""
    text = card_text(card)
    score = 0
    if element_slug_hits(card, element_key):
        score += 28
    if matches_element_keywords(card, element_key, text):
        score += 10
    if contains_any(text, DEFECT_MARKERS):
        score -= 4
    if element_key == "bed":
        if contains_any(text, SOFA_BED_MARKERS):
            score -= 30
        elif contains_any(text, TRUE_BED_MARKERS):
            score += 12
    return score


def _pick_for_element(
    pool: list[ProductCard],
    element_key: str,
    used: set[str],
    answers: BundleAnswers,
    budget: float,
) -> ProductCard | None:
    scored = [
        (score_for_element(card, element_key), score_product(card, answers, budget), card)
        for card in pool
        if card.id not in used
    ]
    scored = [entry for entry in scored if entry[0] > 0]
    if not scored:
        return None
    scored.sort(key=lambda entry: (entry[0], entry[1]), reverse=True)
    return scored[0][2]


def _assign_anchor(items: list[tuple[str, BundleItem]], anchor_product: str | None) -> None:
    """Mark one item as ``ankur`` and move it to the front, in place.

    *items* holds ``(selected element label, item)`` pairs.
    """
    if not items:
        return

    anchor_index: int | None = None
    automatic = not anchor_product or anchor_product == AUTO_ANCHOR_LABEL
    if not automatic:
        anchor_key = ANCHOR_ELEMENT_KEYS.get(anchor_product)
        if anchor_key:
            anchor_index = next(
                (i for i, (_, item) in enumerate(items) if item.element_key == anchor_key), None
            )
        if anchor_index is None:
            wanted = normalize_text(anchor_product)
            anchor_index = next(
                (
                    i for i, (label, _) in enumerate(items)
                    if wanted and (wanted in normalize_text(label) or normalize_text(label) in wanted)
                ),
                None,
            )

    why = ROLE_WHY_CHOSEN["ankur"]
    if anchor_index is None:
        anchor_index = next(
            (i for i, (_, item) in enumerate(items) if item.role_in_bundle != "aksessuaar"), 0
        )
        why = AUTO_ANCHOR_WHY

    label, anchor = items.pop(anchor_index)
    anchor.role_in_bundle = "ankur"
    anchor.why_chosen = why
    items.insert(0, (label, anchor))


def build_strict_bundle(
    answers: BundleAnswers,
    room_pool: list[ProductCard],
    catalog: list[ProductCard],
    budget: float,
) -> Bundle | None:
    """One bundle with a product per selected element, or None if nothing fits."""
    placed: list[tuple[str, BundleItem]] = []
    tradeoffs: list[str] = []
    used: set[str] = set()
    seen_keys: set[str] = set()

    for label in answers.selected_elements:
        element_key = resolve_element_key(answers.room, label)
        if not element_key:
            tradeoffs.append(f'Elementi "{label}" ei õnnestunud tuvastada')
            continue
        if element_key in seen_keys:
            continue
        seen_keys.add(element_key)

        card = _pick_for_element(room_pool, element_key, used, answers, budget)
        if card is None:
            card = _pick_for_element(element_focused_pool(catalog, element_key), element_key, used, answers, budget)
        if card is None:
            tradeoffs.append(f'Elemendile "{label}" ei leitud sobivat toodet')
            continue

        used.add(card.id)
        role = _role_for_key(element_key)
        placed.append((label, item_from_card(card, role, ROLE_WHY_CHOSEN[role], element_key)))

    if not placed:
        return None

    _assign_anchor(placed, answers.anchor_product)
    return Bundle(
        title=STRICT_BUNDLE_TITLE,
        style_summary=_style_summary(answers),
        items=[item for _, item in placed],
        key_reasons=_key_reasons(answers, budget),
        tradeoffs=tradeoffs,
    )


# ---------------------------------------------------------------------------
# Strategy B: role-slot variants
# ---------------------------------------------------------------------------

def _slot_text(card: ProductCard) -> str:
    return normalize_text(" ".join([card.title, *card.category_names, card.description]))


def _rank_slot(slot: dict, pool: list[ProductCard], answers: BundleAnswers, budget: float) -> list[ProductCard]:
    keywords = slot["keywords"]
    candidates = [card for card in pool if not keywords or contains_any(_slot_text(card), keywords)]
    if not candidates:
        candidates = list(pool)
    candidates.sort(key=lambda card: score_product(card, answers, budget), reverse=True)
    return candidates[:10]


def build_role_variants(answers: BundleAnswers, pool: list[ProductCard], budget: float) -> list[Bundle]:
    """Up to three bundles, variant *i* taking the i-th best candidate per slot."""
    slots = BUNDLE_ROLES.get(answers.room or "", DEFAULT_ROLE_SLOTS)
    ranked = [_rank_slot(slot, pool, answers, budget) for slot in slots]

    bundles: list[Bundle] = []
    for variant in range(MAX_BUNDLES):
        items: list[BundleItem] = []
        used: set[str] = set()

        for slot, candidates in zip(slots, ranked):
            picked = next((card for card in candidates[variant:] if card.id not in used), None)
            if picked is None:
                picked = next((card for card in candidates if card.id not in used), None)
            if picked is None and slot["required"]:
                picked = next((card for card in pool if card.id not in used), None)
            if picked is None:
                continue
            used.add(picked.id)
            role = slot["role"]
            items.append(item_from_card(picked, role, ROLE_WHY_CHOSEN[role], infer_element_key(picked)))

        if not items:
            continue
        bundles.append(
            Bundle(
                title=f"Komplekt {variant + 1}",
                style_summary=_style_summary(answers),
                items=items,
                key_reasons=_key_reasons(answers, budget),
            )
        )
    return bundles


# ---------------------------------------------------------------------------
# AI bundles
# ---------------------------------------------------------------------------

def _catalog_for_ai(pool: list[ProductCard]) -> list[dict]:
    return [
        {
            "id": card.id,
            "title": card.title,
            "price": card.price,
            "categories": card.category_names,
            "description": card.description[:200],
        }
        for card in pool
    ]


def _list_field(raw: dict, key: str) -> list:
    value = raw.get(key)
    return value if isinstance(value, list) else []


def bundles_from_ai(
    raw_bundles: list[dict],
    pool: list[ProductCard],
    answers: BundleAnswers,
    budget: float,
) -> list[Bundle]:
    """Map AI bundle proposals back onto pool cards.

    Unknown ids and repeated products are dropped; a proposal left without
    items is discarded. List fields of any other type are treated as empty.
    """
    by_id = {card.id: card for card in pool}
    bundles: list[Bundle] = []

    for index, raw in enumerate(raw_bundles, start=1):
        if not isinstance(raw, dict):
            continue
        items: list[BundleItem] = []
        used: set[str] = set()
        for raw_item in _list_field(raw, "items"):
            if not isinstance(raw_item, dict):
                continue
            card = by_id.get(str(raw_item.get("id", "")))
            if card is None or card.id in used:
                continue
            used.add(card.id)
            role = raw_item.get("roleInBundle")
            if role not in VALID_ROLES:
                role = "lisatoode"
            why = raw_item.get("whyChosen") if isinstance(raw_item.get("whyChosen"), str) else ""
            items.append(item_from_card(card, role, why or ROLE_WHY_CHOSEN[role], infer_element_key(card)))

        if not items:
            continue
        bundles.append(
            Bundle(
                title=str(raw.get("title") or f"Komplekt {index}"),
                style_summary=str(raw.get("styleSummary") or _style_summary(answers)),
                items=items,
                key_reasons=(
                    [r for r in _list_field(raw, "keyReasons") if isinstance(r, str)] or _key_reasons(answers, budget)
                ),
                tradeoffs=[t for t in _list_field(raw, "tradeoffs") if isinstance(t, str)],
            )
        )
    return bundles


# ---------------------------------------------------------------------------
# Alternatives
# ---------------------------------------------------------------------------

def rank_alternatives(
    item: BundleItem,
    bundle: Bundle,
    pool: list[ProductCard],
    answers: BundleAnswers,
) -> list[ProductCard]:
    """Best replacement candidates for *item*, never a product already in *bundle*."""
    budget = resolve_budget(answers)
    item_key = item.element_key or infer_element_key(item)
    spec_slugs = set(ELEMENT_SPECS.get(item_key or "", {}).get("slugs", []))
    item_price = parse_price(item.price)
    item_is_accessory = item.role_in_bundle == "aksessuaar" or item_key in ACCESSORY_ELEMENT_KEYS
    in_bundle = {existing.id for existing in bundle.items}

    scored: list[tuple[float, ProductCard]] = []
    for card in pool:
        if card.id in in_bundle:
            continue
        card_key = infer_element_key(card)
        same_key = item_key is not None and card_key == item_key

        if not same_key and item_is_accessory != (card_key in ACCESSORY_ELEMENT_KEYS):
            continue

        score: float = score_product(card, answers, budget)
        slug_overlap = len(spec_slugs.intersection(card.category_slugs))
        keyword_hit = bool(item_key) and matches_element_keywords(card, item_key)
        if same_key:
            score += 42
        score += 15 * slug_overlap
        if keyword_hit:
            score += 12
        if not (same_key or slug_overlap or keyword_hit):
            score -= 38
        if item.role_in_bundle == "ankur":
            score += 8
        card_price = parse_price(card.price)
        if item_price > 0 and card_price > 0:
            score += max(0.0, 10 - 25 * abs(card_price - item_price) / item_price)

        scored.append((score, card))

    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [card for _, card in scored[:MAX_ALTERNATIVES]]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def finalize_bundle(bundle: Bundle, budget: float) -> Bundle:
    """Recompute the total and note any budget overage."""
    total = bundle.recompute_total()
    bundle.tradeoffs = [note for note in bundle.tradeoffs if not note.startswith("Koguhind ületab eelarve")]
    if total > budget:
        bundle.tradeoffs.append(f"Koguhind ületab eelarve {total - budget:.0f}€ võrra")
    return bundle


def _apply_ai_summaries(bundles: list[Bundle], answers: BundleAnswers, assist: AIAssist) -> None:
    summaries = assist.bundle_summary(answers, bundles)
    if not summaries:
        return
    for bundle, summary in zip(bundles, summaries):
        if not isinstance(summary, dict):
            continue
        if summary.get("title"):
            bundle.title = str(summary["title"])
        if summary.get("styleSummary"):
            bundle.style_summary = str(summary["styleSummary"])


def assemble_bundles(
    answers: BundleAnswers,
    catalog_products: list[ProductCandidate],
    assist: AIAssist | None = None,
) -> list[Bundle]:
    """Assemble one to three bundles for the answers (empty if the catalog is)."""
    budget = resolve_budget(answers)
    catalog = [product.to_card() for product in catalog_products]
    room_pool = filter_catalog_for_room(catalog, answers.room, answers.selected_elements, answers.anchor_product)
    logger.info(
        "[bundler] room=%s budget=%.0f catalog=%d pool=%d", answers.room, budget, len(catalog), len(room_pool)
    )

    bundles: list[Bundle] = []
    strict = build_strict_bundle(answers, room_pool, catalog, budget) if answers.selected_elements else None
    if strict is not None:
        bundles.append(strict)

    extra: list[Bundle] = []
    if assist is not None and room_pool:
        raw = assist.generate_bundles(_catalog_for_ai(room_pool), answers)
        if raw:
            extra = bundles_from_ai(raw, room_pool, answers, budget)
            logger.info("[bundler] AI proposed %d usable bundles", len(extra))
    if not extra:
        extra = build_role_variants(answers, room_pool, budget)

    signatures = {bundle.signature() for bundle in bundles}
    for bundle in extra:
        if bundle.signature() in signatures:
            continue
        signatures.add(bundle.signature())
        bundles.append(bundle)
    bundles = bundles[:MAX_BUNDLES]

    for bundle in bundles:
        for item in bundle.items:
            item.alternatives = rank_alternatives(item, bundle, room_pool, answers)
        finalize_bundle(bundle, budget)

    if assist is not None and bundles:
        _apply_ai_summaries(bundles, answers, assist)

    return bundles
