"""Keyword-scored FAQ answers and support links."""

from sisustus.config import COMMERCE_CONFIG, FAQ_ENTRIES, FAQ_LINK_RULES
from sisustus.models.search import FaqAnswer
from sisustus.services.text import normalize_text

MIN_FAQ_SCORE = 3


def link_topic_for_question(normalized_question: str) -> str:
    """Topic of the support page to recommend; contact when nothing matches."""
    for topic, stems in FAQ_LINK_RULES:
        if any(stem in normalized_question for stem in stems):
            return topic
    return "contact"


def score_entry(entry: dict, text: str, tokens: set[str]) -> int:
    score = 0
    for raw_keyword in entry["keywords"]:
        keyword = normalize_text(raw_keyword)
        if not keyword:
            continue
        if keyword in text:
            score += 4 if len(keyword) >= 8 else 3
        score += sum(1 for part in keyword.split(" ") if len(part) > 2 and part in tokens)
    return score


def answer_faq(question: str) -> FaqAnswer:
    """Best canned answer for *question*, or a contact-support fallback."""
    text = normalize_text(question)
    tokens = {token for token in text.split(" ") if len(token) > 2}
    links: dict[str, str] = COMMERCE_CONFIG["links"]
    link = links[link_topic_for_question(text)]

    best_entry: dict | None = None
    best_score = 0
    for entry in FAQ_ENTRIES:
        score = score_entry(entry, text, tokens)
        if best_entry is None or score > best_score:
            best_entry, best_score = entry, score

    if best_entry is not None and best_score >= MIN_FAQ_SCORE:
        return FaqAnswer(
            answer=best_entry["answer"],
            topic=best_entry["topic"],
            recommended_link=link,
            links=links,
        )

    return FaqAnswer(
        answer=(
            "Kahjuks ei leidnud sellele kohe täpset vastust. Võta ühendust: "
            f"{COMMERCE_CONFIG['support_email']} või {COMMERCE_CONFIG['support_phone']}. Vaata ka: {link}"
        ),
        recommended_link=link,
        links=links,
    )
