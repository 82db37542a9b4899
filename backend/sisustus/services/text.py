"""Text normalisation shared by every matching stage."""

import re
import unicodedata

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_HTML_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

_HTML_ENTITIES: dict[str, str] = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&#038;": "&",
    "&#8211;": "-",
    "&#8220;": '"',
    "&#8221;": '"',
    "&quot;": '"',
}


def normalize_text(value: str | None) -> str:
    """Lowercase, strip diacritics, collapse non-alphanumerics to single spaces.

    ``"Öökapp, 45×40 cm!"`` becomes ``"ookapp 45 40 cm"``.
    """
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM_RE.sub(" ", stripped).strip()


def contains_any(normalized: str, needles: list[str]) -> bool:
    """True if any (normalised) needle is a substring of *normalized*."""
    return any(needle and normalize_text(needle) in normalized for needle in needles)


def decode_entities(value: str) -> str:
    for entity, replacement in _HTML_ENTITIES.items():
        value = re.sub(re.escape(entity), replacement, value, flags=re.IGNORECASE)
    return _WHITESPACE_RE.sub(" ", value).strip()


def strip_html(value: str | None) -> str:
    """Remove tags and common WordPress entities from a description."""
    if not value:
        return ""
    return decode_entities(_HTML_TAG_RE.sub(" ", value))
