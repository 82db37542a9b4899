"""
Product search and relevance ranking for chat recommendations.

A free-text query is interpreted into QuerySemantics (required product type,
excluded look-alike types, dimension bound, small-size preference). Every
candidate card is then checked and scored against those semantics, so a
request for a nightstand never surfaces a TV cabinet and "alla 50cm" never
surfaces a 90 cm table.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from sisustus.config import (
    PRODUCT_TYPE_SEARCH_TERMS,
    RECOMMEND_CANDIDATE_LIMIT,
    RECOMMEND_POOL_LIMIT,
    RECOMMEND_WIDEN_LIMIT,
    RECOMMEND_WIDEN_THRESHOLD,
)
from sisustus.models.product import ProductCard, parse_price
from sisustus.models.search import DimensionAxis, DimensionProfile, ParsedConstraints, QuerySemantics
from sisustus.services.text import normalize_text, strip_html

if TYPE_CHECKING:
    from sisustus.services.llm import AIAssist
    from sisustus.storage.catalog import CatalogClient

logger = logging.getLogger(__name__)

DEFAULT_PICK_REASON = "Sobib sinu otsingule."

PRODUCT_STOP_WORDS: frozenset[str] = frozenset({
    "tahan", "soovita", "soovin", "otsin", "vajan", "mul", "mulle", "teil", "on",
    "oleks", "umbes", "vahel", "seina", "sein", "teise", "ruumi", "vaba", "kui",
    "kus", "mis", "milline", "milliseid", "valikuid", "palju", "saaks", "jaoks",
    "sisse", "laius", "lai", "kirjutada", "laia", "palun", "mingit", "mingi",
    "kas", "et", "ja", "voi", "alla", "ule", "uleks", "vahemalt", "alates", "max",
    "min", "kuni", "eur", "euro", "eurot", "hind", "hinnaga", "tahtsin", "peaks",
    "meetri", "meetrit", "meeter", "meetrine", "m",
})

# Ordered alias groups: the first group found in the query decides the
# required type. Excluded aliases are look-alike types that must not leak in.
TYPE_ALIAS_GROUPS: list[dict] = [
    {
        "type": "nightstand",
        "triggers": ["ookapp", "oo kapp", "nightstand"],
        "required": ["ookapp", "oo kapp", "nightstand", "ookapid"],
        "excluded": ["tvkapp", "tv kapp", "vitriinkapp", "raamaturiiul", "seinariiul", "riiul"],
    },
    {
        "type": "tv-cabinet",
        "triggers": ["tvkapp", "tv kapp"],
        "required": ["tvkapp", "tv kapp"],
        "excluded": ["ookapp", "vitriinkapp"],
    },
    {
        "type": "display-cabinet",
        "triggers": ["vitriinkapp"],
        "required": ["vitriinkapp"],
        "excluded": ["ookapp", "tvkapp", "tv kapp"],
    },
    {
        "type": "dresser",
        "triggers": ["kummut"],
        "required": ["kummut"],
        "excluded": [],
    },
    {
        "type": "shelf",
        "triggers": ["riiul", "raamaturiiul", "seinariiul"],
        "required": ["riiul", "raamaturiiul", "seinariiul"],
        "excluded": ["ookapp", "tvkapp", "tv kapp", "vitriinkapp"],
    },
    {
        "type": "table",
        "triggers": ["laud", "soogilaud", "diivanilaud", "abilaud", "aialaud", "kirjutuslaud", "konsoollaud"],
        "required": ["laud", "soogilaud", "diivanilaud", "abilaud", "aialaud", "kirjutuslaud", "konsoollaud"],
        "excluded": [],
    },
    {
        "type": "chair",
        "triggers": [
            "tool", "tugitool", "soogitool", "baaritool", "kontoritool",
            "office chair", "dining chair", "lounge chair",
        ],
        "required": [
            "tool", "tugitool", "soogitool", "baaritool", "kontoritool",
            "chair", "dining chair", "lounge chair",
        ],
        "excluded": [],
    },
]

# (triggers, keywords) pairs for turning a message into store search terms.
SEARCH_KEYWORD_RULES: list[tuple[list[str], list[str]]] = [
    (["ookapp", "oo kapp", "nightstand"], ["öökapp"]),
    (["tvkapp", "tv kapp"], ["tv-kapp"]),
    (["vitriinkapp"], ["vitriinkapp"]),
    (["kummut"], ["kummut"]),
    (["riiul", "raamaturiiul", "seinariiul"], ["riiul"]),
    (["diivan", "nurgadiivan", "mooduldiivan"], ["diivan"]),
    (["tugitool"], ["tugitool"]),
    (["tool", "soogitool", "baaritool"], ["tool"]),
    (["kontor", "kontoritool", "office chair", "chair"], ["kontoritool", "tool"]),
    (["laud", "soogilaud", "diivanilaud", "abilaud", "kirjutuslaud", "konsoollaud", "aialaud"], ["laud"]),
    (["voodi", "madrats"], ["voodi"]),
    (["valgust", "lamp"], ["valgusti"]),
    (["vaip"], ["vaip"]),
    (["peegel"], ["peegel"]),
    (["terrass", "aed", "ouemoobel", "aiamoobel"], ["aiamööbel"]),
    (["nordic", "skandinaav"], ["nordic"]),
]

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------
DIMENSION_REQUEST_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*(m|meetrit|meetri|meeter|cm)\b", re.IGNORECASE)
MAX_SIGNAL_RE = re.compile(r"\bkuni\b|\balla\b|\bmax\b|\bsisse\b|\bmahub\b|\bvaba ruumi?\b|\bseina vahel\b|\bvahel\b")
MIN_SIGNAL_RE = re.compile(r"\bvahemalt\b|\balates\b|\bmin\b|\brohkem\b|\bsuurem\b")
STRONG_MAX_SIGNAL_RE = re.compile(r"\bsisse\b|\bkuni\b|\balla\b|\bmax\b|\bmahub\b")
WIDTH_AXIS_RE = re.compile(r"\blai(?:us|a|ad|ale|une)?\b|\bwidth\b|\bwide\b")
LENGTH_AXIS_RE = re.compile(r"\bpikk(?:us|a|ad|ale|une)?\b|\blength\b|\blong\b")
SMALL_PREFERRED_RE = re.compile(r"\bvaik|\bpisik|\bkompakt|\bkitsa|\bkitsas|\bmadal|\bsmall\b")

CROSS_DIMENSION_RE = re.compile(r"(?<!\d)(\d{2,3})\s*[x×]\s*(\d{2,3})(?:\s*[x×]\s*(\d{2,3}))?", re.IGNORECASE)
DIAMETER_RE = re.compile(r"(?:[ø⌀]|\bo)\s*(\d{2,3})(?!\d)", re.IGNORECASE)
CENTIMETRE_RE = re.compile(r"(?<!\d)(\d{2,3})\s*cm\b", re.IGNORECASE)

_CANONICAL_PREFIXES: list[tuple[re.Pattern, str]] = [
    (re.compile(r"^(?:laud|laua|lauda|lauale|laudne)"), "laud"),
    (re.compile(r"^(?:kirjutuslaud|kirjutus)"), "laud"),
    (re.compile(r"^(?:ookapp|ookapi|ookappi|ookap)"), "ookapp"),
    (re.compile(r"^(?:tvkapp|tv)"), "tvkapp"),
    (re.compile(r"^(?:vitriinkapp|vitriin)"), "vitriinkapp"),
    (re.compile(r"^(?:riiul|raamaturiiul|seinariiul)"), "riiul"),
    (re.compile(r"^kummut"), "kummut"),
    (re.compile(r"^diivan"), "diivan"),
    (re.compile(r"^(?:kontor|office)"), "kontor"),
    (re.compile(r"tool"), "tool"),
    (re.compile(r"^(?:valgust|lamp)"), "valgusti"),
    (re.compile(r"^vaip"), "vaip"),
    (re.compile(r"^peegel"), "peegel"),
    (re.compile(r"^(?:meetri|meetrit|meeter|meetrine)$"), "meeter"),
]


# ---------------------------------------------------------------------------
# Query interpretation
# ---------------------------------------------------------------------------

def canonicalize_token(token: str) -> str:
    """Fold inflected furniture words onto one stem ("laua" -> "laud")."""
    if token == "oo":
        return "ookapp"
    for pattern, canonical in _CANONICAL_PREFIXES:
        if pattern.search(token):
            return canonical
    return token


def extract_query_tokens(query: str) -> list[str]:
    """Canonical, de-duplicated content tokens of *query* (stop words removed)."""
    tokens: list[str] = []
    for raw in normalize_text(query).split(" "):
        token = canonicalize_token(raw)
        if len(token) < 3 or token in PRODUCT_STOP_WORDS or token in tokens:
            continue
        tokens.append(token)
    return tokens


def parse_dimension_constraint(query: str) -> tuple[float | None, float | None, bool]:
    """Return ``(max_cm, min_cm, has_request)`` for the first size in *query*.

    Metre values are converted to centimetres. Without a directional word a
    size is read as an upper bound ("fits in 50cm").
    """
    match = DIMENSION_REQUEST_RE.search(query.lower())
    if not match:
        return None, None, False

    value = float(match.group(1).replace(",", "."))
    if value <= 0:
        return None, None, False
    value_cm = value if match.group(2).lower() == "cm" else value * 100

    normalized = normalize_text(query)
    has_max = bool(MAX_SIGNAL_RE.search(normalized))
    has_min = bool(MIN_SIGNAL_RE.search(normalized))

    if has_min and not has_max:
        return None, value_cm, True
    if has_min and has_max and not STRONG_MAX_SIGNAL_RE.search(normalized):
        return None, value_cm, True
    return value_cm, None, True


def detect_dimension_axis(normalized: str) -> DimensionAxis:
    if WIDTH_AXIS_RE.search(normalized):
        return "width"
    if LENGTH_AXIS_RE.search(normalized):
        return "length"
    return "any"


def detect_query_semantics(query: str) -> QuerySemantics:
    """Interpret *query* into type, size and preference constraints."""
    normalized = normalize_text(query)
    dimension_max, dimension_min, has_dimension = parse_dimension_constraint(query)

    group = next(
        (group for group in TYPE_ALIAS_GROUPS if any(trigger in normalized for trigger in group["triggers"])),
        {},
    )
    return QuerySemantics(
        normalized_query=normalized,
        small_preferred=bool(SMALL_PREFERRED_RE.search(normalized)),
        dimension_max_cm=dimension_max,
        dimension_min_cm=dimension_min,
        has_dimension_request=has_dimension,
        dimension_axis=detect_dimension_axis(normalized),
        required_type=group.get("type"),
        required_aliases=list(group.get("required", [])),
        excluded_aliases=list(group.get("excluded", [])),
    )


def extract_search_keywords(text: str) -> list[str]:
    """Store search terms implied by a natural-language message."""
    normalized = normalize_text(text)
    keywords: list[str] = []

    for triggers, mapped in SEARCH_KEYWORD_RULES:
        if any(trigger in normalized for trigger in triggers):
            keywords.extend(value for value in mapped if value not in keywords)

    # A bare "kapp" stays generic; it is not widened to shelves or vitrines.
    if "kapp" in normalized and "ookapp" not in normalized and "tvkapp" not in normalized:
        if "kapp" not in keywords:
            keywords.append("kapp")

    return keywords


# ---------------------------------------------------------------------------
# Candidate scoring
# ---------------------------------------------------------------------------

def _unique_sorted(values: list[float]) -> list[float]:
    return sorted({value for value in values if value > 0})


def parse_dimension_profile(value: str) -> DimensionProfile:
    """Collect every size (cm) written in a product title or handle.

    ``AxB`` (and ``AxBxC``) feed both width and length candidates since store
    titles are not consistent about the order; a diameter counts for both.
    """
    numbers: list[float] = []
    widths: list[float] = []
    lengths: list[float] = []

    for match in CROSS_DIMENSION_RE.finditer(value):
        first, second = float(match.group(1)), float(match.group(2))
        numbers.extend([first, second])
        if match.group(3):
            numbers.append(float(match.group(3)))
        widths.extend([min(first, second), second])
        lengths.extend([max(first, second), first])

    for match in DIAMETER_RE.finditer(value):
        diameter = float(match.group(1))
        numbers.append(diameter)
        widths.append(diameter)
        lengths.append(diameter)

    for match in CENTIMETRE_RE.finditer(value):
        numbers.append(float(match.group(1)))

    all_dims = _unique_sorted(numbers)
    return DimensionProfile(
        all=all_dims,
        width_candidates=_unique_sorted(widths),
        length_candidates=_unique_sorted(lengths),
        max_dimension=max(all_dims) if all_dims else None,
    )


def searchable_text(card: ProductCard) -> str:
    return normalize_text(
        " ".join([card.title, card.handle, *card.category_names, *card.category_slugs, card.description])
    )


def _comparable_dimensions(profile: DimensionProfile, axis: DimensionAxis) -> list[float]:
    if axis == "width":
        return profile.width_candidates or profile.all
    if axis == "length":
        return profile.length_candidates or profile.all
    return [profile.max_dimension] if profile.max_dimension is not None else profile.all


def score_candidate(
    card: ProductCard,
    semantics: QuerySemantics,
    query_tokens: list[str],
) -> tuple[bool, int]:
    """Decide whether *card* answers the query and how well.

    Returns ``(relevant, score)``. Type mismatches and size misfits are hard
    rejections with a negative score; anything scoring below 4 is rejected.
    """
    text = searchable_text(card)
    profile = parse_dimension_profile(f"{card.title} {card.handle}")

    has_required = any(alias in text for alias in semantics.required_aliases)
    if semantics.required_aliases and not has_required:
        return False, -100
    if any(alias in text for alias in semantics.excluded_aliases) and not has_required:
        return False, -80

    score = 0
    for token in query_tokens:
        if token in text:
            score += 4 if len(token) >= 6 else 3

    if semantics.required_type:
        score += 18

    if semantics.has_dimension_request:
        dims = _comparable_dimensions(profile, semantics.dimension_axis)
        if not dims:
            return False, -90

        if semantics.dimension_max_cm is not None:
            bound = semantics.dimension_max_cm
            if not any(dim <= bound + 0.5 for dim in dims):
                return False, -70
            closeness = min(abs(bound - dim) for dim in dims)
            score += 8 if closeness <= 5 else 6 if closeness <= 20 else 4

        if semantics.dimension_min_cm is not None:
            bound = semantics.dimension_min_cm
            if not any(dim >= bound - 0.5 for dim in dims):
                return False, -70
            score += 5 if max(dims) - bound <= 20 else 3

    if semantics.small_preferred and profile.max_dimension is not None:
        threshold = 70 if semantics.required_type == "nightstand" else 120
        if profile.max_dimension > threshold:
            return False, -50
        score += 6

    if score < 4:
        return False, score
    return True, score


def rank_candidates(cards: list[ProductCard], query: str) -> list[ProductCard]:
    """Relevant cards for *query*, best first; ties keep pool order."""
    semantics = detect_query_semantics(query)
    tokens = extract_query_tokens(query)

    scored: list[tuple[int, ProductCard]] = []
    for card in cards:
        relevant, score = score_candidate(card, semantics, tokens)
        if relevant:
            scored.append((score, card))

    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [card for _, card in scored]


def dedupe_by_title(cards: list[ProductCard]) -> list[ProductCard]:
    """Keep the first card per normalised title."""
    seen: set[str] = set()
    unique: list[ProductCard] = []
    for card in cards:
        key = normalize_text(strip_html(card.title))
        if key in seen:
            continue
        seen.add(key)
        unique.append(card)
    return unique


# ---------------------------------------------------------------------------
# Recommendation pipeline
# ---------------------------------------------------------------------------

def build_fallback_queries(query: str, constraints: ParsedConstraints) -> list[str]:
    """Deterministic search queries: type terms, extracted keywords, raw query."""
    queries: list[str] = []
    for product_type in constraints.product_types:
        queries.append(PRODUCT_TYPE_SEARCH_TERMS.get(product_type, product_type))
    queries.extend(extract_search_keywords(query))
    queries.append(query)
    return _dedupe_queries(queries)[:8]


def _dedupe_queries(queries: list[str]) -> list[str]:
    unique: list[str] = []
    for query in queries:
        cleaned = query.strip()
        if cleaned and cleaned not in unique:
            unique.append(cleaned)
    return unique


def summarize_pool(cards: list[ProductCard]) -> str:
    """Plain-text catalog listing handed to the product picker."""
    blocks = []
    for card in cards:
        lines = [f"- {card.title} (handle: {card.handle})", f"  Hind: {card.price}"]
        if card.category_names:
            lines.append(f"  Kategooriad: {', '.join(card.category_names[:5])}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _collect_candidates(
    queries: list[str],
    catalog: CatalogClient,
    limit: int,
    budget_max: float | None,
) -> list[ProductCard]:
    seen: set[str] = set()
    candidates: list[ProductCard] = []

    for query in queries:
        for card in catalog.search_cards(query, limit=max(limit * 3, 12), budget_max=budget_max):
            if card.id not in seen:
                seen.add(card.id)
                candidates.append(card)
            if len(candidates) >= RECOMMEND_CANDIDATE_LIMIT:
                return candidates

    if len(candidates) < RECOMMEND_WIDEN_THRESHOLD:
        logger.info("[search] Only %d search hits, widening with catalog slice", len(candidates))
        for product in catalog.fetch_catalog()[:RECOMMEND_WIDEN_LIMIT]:
            card = product.to_card()
            if budget_max and parse_price(card.price) > budget_max:
                continue
            if card.id not in seen:
                seen.add(card.id)
                candidates.append(card)

    return candidates


def recommend_products(
    query: str,
    constraints: ParsedConstraints,
    limit: int,
    catalog: CatalogClient,
    assist: AIAssist | None = None,
) -> list[ProductCard]:
    """Find up to *limit* products that answer *query*.

    Search queries are planned (AI when available, otherwise from product
    types and keywords), candidates pooled and ranked for relevance. The AI
    picker may reorder and explain, but only among ranked candidates.
    """
    queries = build_fallback_queries(query, constraints)
    if assist is not None:
        planned = assist.plan_search_queries(query, queries)
        if planned:
            queries = _dedupe_queries([*planned, *queries])[:10]

    candidates = _collect_candidates(queries, catalog, limit, constraints.budget_max)
    pool = dedupe_by_title(candidates)[:RECOMMEND_POOL_LIMIT]
    if not pool:
        logger.info("[search] No candidates for query %r", query)
        return []

    ranked = rank_candidates(pool, query)
    logger.info("[search] %d candidates, %d relevant for %r", len(pool), len(ranked), query)

    selected: list[ProductCard] = []
    if assist is not None and ranked:
        picks = assist.pick_products(query, summarize_pool(ranked), limit) or []
        by_handle = {card.handle: card for card in ranked}
        for pick in picks:
            card = by_handle.get(pick.get("handle", ""))
            if card is None or any(chosen.id == card.id for chosen in selected):
                continue
            selected.append(card.model_copy(update={"reason": pick.get("reason") or DEFAULT_PICK_REASON}))

    if not selected:
        selected = [card.model_copy(update={"reason": DEFAULT_PICK_REASON}) for card in ranked]

    if constraints.budget_max:
        selected = [card for card in selected if parse_price(card.price) <= constraints.budget_max]

    return selected[:limit]
