"""
Preference scorer for the bundle builder.

Rates how well a single product card fits the collected answers (style,
colour tone, material, children/pets and budget). The score is a small
integer used for ordering only; it never filters anything out.
"""

from __future__ import annotations

from sisustus.config import (
    BUDGET_CEILINGS,
    BUDGET_TOLERANCE,
    COLOR_TONE_KEYWORDS,
    EASY_CLEAN_MATERIALS,
    MATERIAL_CONFLICTS,
    NO_MATERIAL_PREFERENCE,
    STYLE_KEYWORDS,
)
from sisustus.models.bundle import BundleAnswers
from sisustus.models.product import ProductCard, parse_price
from sisustus.services.text import normalize_text


def resolve_budget(answers: BundleAnswers) -> float:
    """Budget ceiling in euros for the answers.

    ``"custom"`` uses the user's own number; known buckets map to their upper
    bound; anything else falls back to the smallest bucket ceiling.
    """
    if answers.budget_range == "custom" and answers.budget_custom:
        return float(answers.budget_custom)
    if answers.budget_range in BUDGET_CEILINGS:
        return float(BUDGET_CEILINGS[answers.budget_range])
    return float(min(BUDGET_CEILINGS.values()))


def product_text(card: ProductCard) -> str:
    """Normalised title plus category names, the text every rule matches on."""
    return normalize_text(" ".join([card.title, *card.category_names]))


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def score_product(card: ProductCard, answers: BundleAnswers, budget: float | None = None) -> int:
    """Score *card* against the bundle answers.

    Breakdown:
        - style keyword (first hit only)           +3
        - colour tone keyword                      +2
        - preferred material present               +2
        - conflict material, per raised flag       -3
        - easy-clean material with kids/pets       +2
        - price within ceiling                     +1
        - price above ceiling * tolerance          -2

    The conflict penalty is only evaluated when a material preference is set,
    so a product can collect both the material bonus and the penalty.
    """
    text = product_text(card)
    score = 0

    for keyword in STYLE_KEYWORDS.get(answers.style or "", []):
        if normalize_text(keyword) in text:
            score += 3
            break

    tone_keywords = COLOR_TONE_KEYWORDS.get(answers.color_tone or "", [])
    if any(normalize_text(keyword) in text for keyword in tone_keywords):
        score += 2

    preference = answers.material_preference
    if preference and preference != NO_MATERIAL_PREFERENCE:
        if normalize_text(preference) in text:
            score += 2
        for material, flags in MATERIAL_CONFLICTS.items():
            if material not in text:
                continue
            for flag in flags:
                if getattr(answers, flag):
                    score -= 3

    if answers.has_pets or answers.has_children:
        if any(material in text for material in EASY_CLEAN_MATERIALS):
            score += 2

    ceiling = budget if budget is not None else resolve_budget(answers)
    price = parse_price(card.price)
    if 0 < price <= ceiling:
        score += 1
    elif price > ceiling * BUDGET_TOLERANCE:
        score -= 2

    return score
