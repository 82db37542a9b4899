"""
Rule-based intent classification and constraint parsing for chat messages.

Everything here is a pure function of the message text; the optional AI
refinement and the clarification-reply override live in the chat service.
"""

import re

from sisustus.models.chat import Intent
from sisustus.models.search import ParsedConstraints

# ---------------------------------------------------------------------------
# Budget expressions
# ---------------------------------------------------------------------------
_AMOUNT = r"(\d{1,6}(?:[.,]\d{1,2})?)"
_CURRENCY = r"(?:€|eur(?:ot|o)?\b)"

BUDGET_KEYWORD_RE = re.compile(
    r"(?:eel\s*arve|eelarve|budget|hinnapiir|hinnaga|hind)\s*"
    r"(?:on|=|:|kuni|alla|under|max|<=?)?\s*" + _AMOUNT + r"\s*" + _CURRENCY + r"?",
    re.IGNORECASE,
)
BUDGET_COMPARISON_RE = re.compile(
    r"(?:kuni|alla|under|max|<=?)\s*" + _AMOUNT + r"\s*" + _CURRENCY,
    re.IGNORECASE,
)
DIMENSION_UNIT_RE = re.compile(r"\b(?:cm|m|meetri|meetrit|meeter)\b", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Intent vocabularies
# ---------------------------------------------------------------------------
_ACK_WORD = (
    r"(?:okei|ok|okay|selge|sain aru|mhm|jaa?h?|ei|t[aä]nan|ait[aä]h|super|lahe|vahva|"
    r"kena|tore|h[aä][aä]sti|n[aä]gemist|head aega|davai|n[oõ]us|j[aä]rjest)"
)
ACKNOWLEDGMENT_RE = re.compile(
    r"^\s*" + _ACK_WORD + r"(?:[\s,.!?]+" + _ACK_WORD + r")*[\s!,.?]*$",
    re.IGNORECASE,
)
GREETING_ONLY_RE = re.compile(r"^\s*(?:tere|tervist|tsau|hei|hello|hey)\s*[!,.?]*\s*$", re.IGNORECASE)

ORDER_HELP_RE = re.compile(r"tellimus|order|tracking|makse|makstud|maksmine|kassa|(?<!eel)arve|status|saadetis")
SHIPPING_RE = re.compile(
    r"tarne|shipping|kohale|kohaletoimet|kuller|pakiautomaat|omniva|smartpost|itella|tarneaeg|laos|j[aä]reltellit"
)
RETURNS_RE = re.compile(
    r"tagast|refund|return|raha tagasi|taganemis|pretensioon|reklamatsioon|defekt|katki|kahjust"
)
FAQ_RE = re.compile(
    r"kontakt|telefon|email|e-post|klienditugi|support|garantii|privaatsus|isikuandmed|"
    r"andmekaitse|tingimused|m[uü][uü]gitingimused"
)
PRODUCT_RE = re.compile(
    r"soovita|soovitus|otsi|otsin|soovin|vajan|milline|diivan|tugitool|tool|laud|s[öo]ögilaud|"
    r"diivanilaud|voodi|riiul|kapp|kummut|valgust|lamp|vaip|peegel|aiam[öo][öo]bel|terrass|"
    r"nordic|skandinaav|sisustus|mööbel|moobel|eelarve|kuni\s*\d|under\s*\d|<=?\s*\d"
)
GENERIC_PRODUCT_RE = re.compile(r"toode|tooted|toote|mööbel|moobel|sisustus")

# ---------------------------------------------------------------------------
# Goals & product types
# ---------------------------------------------------------------------------
GOAL_RULES: list[tuple[str, re.Pattern]] = [
    ("outdoor", re.compile(r"välis|outdoor|terrass|aed|rõdu|rodu")),
    ("style", re.compile(r"stiil|disain|värv|varv|nordic|skandinaav")),
    ("function", re.compile(r"praktiline|mahut|funktsioon|hoiusta|ladusta")),
]

_NIGHTSTAND = r"öö\s*kapp|oo\s*kapp|ookapp|nightstand"
_TV_CABINET = r"tv\s*-?\s*kapp|tvkapp"

PRODUCT_TYPE_RULES: list[tuple[str, re.Pattern]] = [
    ("nightstand", re.compile(_NIGHTSTAND)),
    ("tv-cabinet", re.compile(_TV_CABINET)),
    ("display-cabinet", re.compile(r"vitriinkapp")),
    ("dresser", re.compile(r"kummut")),
    ("shelf", re.compile(r"riiul|raamaturiiul|seinariiul")),
    ("sofa", re.compile(r"diivan|nurgadiivan|mooduldiivan")),
    ("chair", re.compile(r"tugitool|tool|söögitool|soogitool|baaritool")),
    ("table", re.compile(r"laud|söögilaud|soogilaud|diivanilaud|abilaud|kirjutuslaud")),
    ("bed", re.compile(r"voodi|madrats")),
    ("light", re.compile(r"valgust|lamp|laevalgusti|lauavalgusti|põrandavalgusti|porandavalgusti")),
    ("rug", re.compile(r"vaip")),
    ("mirror", re.compile(r"peegel")),
    ("outdoor-furniture", re.compile(r"terrass|aed|õuemööbel|ouemoobel|aiamööbel|aiamoobel")),
]

_ANY_CABINET_RE = re.compile(r"kapp")
_SPECIFIC_CABINET_RE = re.compile(_NIGHTSTAND + "|" + _TV_CABINET + r"|vitriinkapp|kummut")


def _to_amount(raw: str) -> float | None:
    try:
        value = float(raw.replace(",", "."))
    except ValueError:
        return None
    return value if value > 0 else None


def extract_budget_max(text: str) -> float | None:
    """Return the budget ceiling mentioned in *text*, if any.

    A budget keyword next to a number wins. Otherwise a comparison word plus
    number plus currency is used, unless a length unit follows within ten
    characters ("alla 200cm" is a size, not a price).
    """
    lowered = text.lower()

    keyword_match = BUDGET_KEYWORD_RE.search(lowered)
    if keyword_match:
        amount = _to_amount(keyword_match.group(1))
        if amount is not None:
            return amount

    comparison_match = BUDGET_COMPARISON_RE.search(lowered)
    if comparison_match:
        tail = lowered[comparison_match.start(): comparison_match.end() + 10]
        if DIMENSION_UNIT_RE.search(tail):
            return None
        return _to_amount(comparison_match.group(1))

    return None


def detect_intent(message: str) -> Intent:
    """Classify a single message without any conversation context."""
    text = message.lower()

    if ACKNOWLEDGMENT_RE.match(message):
        return "smalltalk"
    if extract_budget_max(text) is not None:
        return "product_reco"

    if ORDER_HELP_RE.search(text):
        return "order_help"
    if SHIPPING_RE.search(text):
        return "shipping"
    if RETURNS_RE.search(text):
        return "returns"
    if FAQ_RE.search(text):
        return "faq"
    if PRODUCT_RE.search(text):
        return "product_reco"

    if GENERIC_PRODUCT_RE.search(text):
        return "product_reco"
    if GREETING_ONLY_RE.match(message):
        return "greeting"

    return "smalltalk"


def detect_goal(text: str) -> str | None:
    lowered = text.lower()
    for goal, pattern in GOAL_RULES:
        if pattern.search(lowered):
            return goal
    return None


def detect_product_types(text: str) -> list[str]:
    """Product types mentioned in *text*, deduplicated in rule order.

    The generic cabinet type is only added when no specific cabinet type
    (nightstand, TV cabinet, display cabinet, dresser) matched.
    """
    lowered = text.lower()
    found: list[str] = []
    for product_type, pattern in PRODUCT_TYPE_RULES:
        if product_type == "light" and _is_generic_cabinet(lowered):
            found.append("generic-cabinet")
        if pattern.search(lowered) and product_type not in found:
            found.append(product_type)
    return found


def _is_generic_cabinet(lowered: str) -> bool:
    return bool(_ANY_CABINET_RE.search(lowered)) and not _SPECIFIC_CABINET_RE.search(lowered)


def parse_constraints(text: str) -> ParsedConstraints:
    """Extract budget ceiling, goal, product types and tags from *text*."""
    goal = detect_goal(text)
    return ParsedConstraints(
        budget_max=extract_budget_max(text),
        goal=goal,
        product_types=detect_product_types(text),
        tags=[f"goal_{goal}"] if goal else [],
    )
