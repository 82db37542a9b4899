"""
Category clarification planner.

When a product query only names a broad store category ("kapp", "valgusti")
the assistant asks which sub-category is meant instead of guessing. This
module builds that question from the live category tree and recognises the
user's answer on the next turn.
"""

from __future__ import annotations

import re

from sisustus.config import CLARIFICATION_MARKER, MAIN_CATEGORY_HINTS, MAX_CLARIFICATION_OPTIONS
from sisustus.models.chat import ChatTurn
from sisustus.models.product import Category
from sisustus.models.search import ClarificationOption, ClarificationPlan
from sisustus.services.search import canonicalize_token
from sisustus.services.text import decode_entities, normalize_text

_PLURAL_SUFFIX_RE = re.compile(r"[sd]$")

# shorter replies ("ei", "ok") must not select an option by substring
MIN_REPLY_LENGTH = 3


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

def _category_name(category: Category) -> str:
    return decode_entities(category.name)


def _match_category_by_label(categories: list[Category], label: str) -> Category | None:
    wanted = normalize_text(label)
    for category in categories:
        if normalize_text(_category_name(category)) == wanted:
            return category
    for category in categories:
        if wanted in normalize_text(_category_name(category)):
            return category
    return None


def _detect_main_category_label(
    normalized_query: str,
    product_types: list[str],
    parents: list[Category],
) -> str | None:
    for hint in MAIN_CATEGORY_HINTS:
        if any(hint_type in product_types for hint_type in hint["product_type_hints"]):
            return hint["main_category"]

    for hint in MAIN_CATEGORY_HINTS:
        if any(normalize_text(keyword) in normalized_query for keyword in hint["keywords"]):
            return hint["main_category"]

    for category in parents:
        name = normalize_text(_category_name(category))
        if len(name) >= 3 and name in normalized_query:
            return _category_name(category)
    return None


def plan_category_clarification(
    query: str,
    product_types: list[str],
    categories: list[Category],
) -> ClarificationPlan | None:
    """Sub-category options for the broad category *query* points at.

    Only non-empty categories count. Returns None when no parent category
    can be identified or it has fewer than two non-empty children.
    """
    populated = [category for category in categories if category.count > 0]
    parent_ids = {category.parent for category in populated}
    parents = [category for category in populated if category.id in parent_ids]
    if not parents:
        return None

    label = _detect_main_category_label(normalize_text(query), product_types, parents)
    if not label:
        return None

    main = _match_category_by_label(parents, label)
    if main is None:
        return None

    children = sorted(
        (category for category in populated if category.parent == main.id),
        key=lambda category: category.count,
        reverse=True,
    )
    options: list[ClarificationOption] = []
    for child in children[:MAX_CLARIFICATION_OPTIONS]:
        name = _category_name(child)
        slug_words = child.slug.replace("-", " ").strip()
        options.append(
            ClarificationOption(
                label=name,
                query_token=name.lower(),
                keywords=[value for value in (name, slug_words) if value],
                slug=child.slug,
                count=child.count,
            )
        )

    if len(options) < 2:
        return None
    return ClarificationPlan(
        main_category_label=_category_name(main),
        main_category_slug=main.slug,
        options=options,
    )


def format_natural_list(values: list[str]) -> str:
    """``["a", "b", "c"]`` -> ``"a, b või c"``."""
    if len(values) <= 1:
        return values[0] if values else ""
    return f"{', '.join(values[:-1])} või {values[-1]}"


def clarification_message(plan: ClarificationPlan) -> str:
    labels = [option.label.lower() for option in plan.options]
    return (
        f"Et leiaksin täpsema vaste, täpsusta palun kategooria ({plan.main_category_label}): "
        f"{format_natural_list(labels)}."
    )


# ---------------------------------------------------------------------------
# Reply matching
# ---------------------------------------------------------------------------

def token_match(left: str, right: str) -> bool:
    """Loose token equality tolerant of plural endings and compounds."""
    if not left or not right:
        return False
    if left == right:
        return True
    if canonicalize_token(left) == canonicalize_token(right):
        return True
    if len(left) >= 6 and len(right) >= 6 and (left in right or right in left):
        return True
    left_stem = _PLURAL_SUFFIX_RE.sub("", left)
    right_stem = _PLURAL_SUFFIX_RE.sub("", right)
    if left_stem == right_stem:
        return True
    if len(left_stem) >= 6 and len(right_stem) >= 6:
        return left_stem in right_stem or right_stem in left_stem
    return False


def option_matches_message(message: str, option: ClarificationOption) -> bool:
    normalized = normalize_text(message)
    if not normalized:
        return False

    message_tokens = [token for token in normalized.split(" ") if len(token) > 2]
    option_tokens = [
        token
        for value in [option.label, *option.keywords]
        for token in normalize_text(value).split(" ")
        if len(token) > 2
    ]
    for option_token in option_tokens:
        if option_token in normalized or (len(normalized) >= MIN_REPLY_LENGTH and normalized in option_token):
            return True
        if any(token_match(token, option_token) for token in message_tokens):
            return True
    return False


def has_specific_subcategory_mention(message: str, options: list[ClarificationOption]) -> bool:
    """True when *message* already names one of the offered sub-categories."""
    return any(option_matches_message(message, option) for option in options)


def resolve_clarification_reply(message: str, options: list[ClarificationOption]) -> ClarificationOption | None:
    return next((option for option in options if option_matches_message(message, option)), None)


def pending_clarification_query(history: list[ChatTurn]) -> str | None:
    """The user query a clarification question was asked about, if the last
    assistant turn was such a question."""
    for index in range(len(history) - 1, -1, -1):
        if history[index].role != "assistant":
            continue
        if CLARIFICATION_MARKER not in normalize_text(history[index].text):
            return None
        for turn in reversed(history[:index]):
            if turn.role == "user" and turn.text.strip():
                return turn.text
        return None
    return None
