"""AI assist layer backed by Gemini.

Every capability here is optional enrichment: each method returns None when
the model is unavailable, fails, or answers with something unusable, and the
caller falls back to its deterministic result. Nothing in this module raises.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol

from google import genai
from google.genai import types as genai_types

from sisustus.config import (
    BUNDLE_GENERATION_PROMPT,
    BUNDLE_SUMMARY_PROMPT,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    INTENT_PROMPT,
    PRODUCT_PICKS_PROMPT,
    PRODUCT_SET_SUMMARY_PROMPT,
    SEARCH_QUERIES_PROMPT,
    STORE_KNOWLEDGE,
    STRICT_RULES,
    SUPPORT_SYSTEM_PROMPT,
    USE_AI,
)
from sisustus.models.bundle import Bundle, BundleAnswers
from sisustus.models.chat import INTENTS, ChatTurn
from sisustus.models.product import ProductCard

logger = logging.getLogger(__name__)

_CLOSERS = {"[": "]", "{": "}"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def extract_json_block(text: str | None, opener: str = "[") -> str | None:
    """Return the first balanced ``[...]`` or ``{...}`` block in *text*.

    Models like to wrap JSON in prose or markdown fences; brackets inside
    JSON strings are ignored while balancing.
    """
    if not text:
        return None
    closer = _CLOSERS[opener]
    start = text.find(opener)
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start: index + 1]
    return None


def build_knowledge_block() -> str:
    """Store knowledge as the plain-text block embedded in support prompts."""
    sections = []
    for title, lines in STORE_KNOWLEDGE.items():
        sections.append(f"{title}:\n" + "\n".join(f"- {line}" for line in lines))
    return "\n\n".join(sections)


def _answers_block(answers: BundleAnswers) -> str:
    lines = [
        f"- Ruum: {answers.room}",
        f"- Soovitud ankurtoode: {answers.anchor_product}",
        f"- Eelarve: {answers.budget_range}"
        + (f" (täpne: {answers.budget_custom}€)" if answers.budget_custom else ""),
        f"- Stiil: {answers.style}",
        f"- Värvitoon: {answers.color_tone}",
        f"- Materjal: {answers.material_preference}",
        f"- Lapsi majas: {'Jah' if answers.has_children else 'Ei'}",
        f"- Lemmikloomi: {'Jah' if answers.has_pets else 'Ei'}",
    ]
    if answers.dimensions_known:
        lines.append(f"- Ruumi mõõdud: {answers.width_cm}cm x {answers.length_cm}cm")
    elements = "\n".join(f"  - {element}" for element in answers.selected_elements) or "  (kõik ruumielemendid)"
    preferences = "\n".join(
        f"  - {pref.element}: stiil={pref.style}, materjal={pref.material}"
        for pref in answers.element_preferences
    ) or "  (täpsustamata)"
    return (
        "KLIENDI EELISTUSED:\n" + "\n".join(lines)
        + f"\n\nVALITUD ELEMENDID:\n{elements}"
        + f"\n\nELEMENTIDE EELISTUSED:\n{preferences}"
    )


# ---------------------------------------------------------------------------
# Capability
# ---------------------------------------------------------------------------

class AIAssist(Protocol):
    """Optional AI enrichment used by the chat and bundle services."""

    def plan_search_queries(self, user_message: str, fallback_queries: list[str]) -> list[str] | None: ...

    def pick_products(self, user_message: str, catalog_summary: str, limit: int) -> list[dict] | None: ...

    def generate_bundles(self, catalog: list[dict], answers: BundleAnswers) -> list[dict] | None: ...

    def classify_intent(self, user_message: str, history: list[ChatTurn]) -> tuple[str, float] | None: ...

    def short_reply(self, user_text: str, context_summary: str) -> str | None: ...

    def general_reply(self, user_text: str) -> str | None: ...

    def product_set_summary(self, user_message: str, products: list[ProductCard]) -> str | None: ...

    def bundle_summary(self, answers: BundleAnswers, bundles: list[Bundle]) -> list[dict] | None: ...


class NullAssist:
    """AI disabled: every capability declines."""

    def plan_search_queries(self, user_message, fallback_queries):
        return None

    def pick_products(self, user_message, catalog_summary, limit):
        return None

    def generate_bundles(self, catalog, answers):
        return None

    def classify_intent(self, user_message, history):
        return None

    def short_reply(self, user_text, context_summary):
        return None

    def general_reply(self, user_text):
        return None

    def product_set_summary(self, user_message, products):
        return None

    def bundle_summary(self, answers, bundles):
        return None


class GeminiAssist:
    """AIAssist implementation on top of the google-genai client."""

    def __init__(self, api_key: str, model: str = GEMINI_MODEL, client: genai.Client | None = None):
        self._client = client or genai.Client(api_key=api_key)
        self._model = model
        self._support_prompt = SUPPORT_SYSTEM_PROMPT.format(
            rules=STRICT_RULES,
            knowledge=build_knowledge_block(),
        )

    def _generate(self, system_prompt: str, user_prompt: str, label: str) -> str | None:
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=user_prompt,
                config=genai_types.GenerateContentConfig(system_instruction=system_prompt),
            )
            text = (response.text or "").strip()
        except Exception as exc:
            logger.warning("[llm] %s request failed: %s", label, exc)
            return None

        if not text:
            logger.warning("[llm] %s returned an empty response", label)
            return None
        return text

    def _generate_json(self, system_prompt: str, user_prompt: str, opener: str, label: str):
        block = extract_json_block(self._generate(system_prompt, user_prompt, label), opener)
        if block is None:
            return None
        try:
            return json.loads(block)
        except json.JSONDecodeError as exc:
            logger.warning("[llm] %s returned invalid JSON: %s", label, exc)
            return None

    # -- Chat ------------------------------------------------------------------

    def plan_search_queries(self, user_message: str, fallback_queries: list[str]) -> list[str] | None:
        parsed = self._generate_json(
            SEARCH_QUERIES_PROMPT,
            f'KLIENDI SÕNUM: "{user_message}"\n\nTagasta ainult JSON.',
            "{",
            "search query planning",
        )
        if not isinstance(parsed, dict) or not isinstance(parsed.get("queries"), list):
            return None
        queries = [
            query.strip()
            for query in parsed["queries"]
            if isinstance(query, str) and 2 <= len(query.strip()) <= 64
        ]
        return queries or None

    def pick_products(self, user_message: str, catalog_summary: str, limit: int) -> list[dict] | None:
        parsed = self._generate_json(
            PRODUCT_PICKS_PROMPT,
            f"TOOTEKATALOOG:\n{catalog_summary}\n\nKLIENDI SÕNUM: \"{user_message}\"\n\n"
            f"Vali kuni {limit} kõige sobivamat toodet. Tagasta AINULT JSON massiiv.",
            "[",
            "product picks",
        )
        if not isinstance(parsed, list):
            return None
        picks = [
            {"handle": item["handle"], "reason": item.get("reason") if isinstance(item.get("reason"), str) else ""}
            for item in parsed
            if isinstance(item, dict) and isinstance(item.get("handle"), str) and item["handle"]
        ]
        return picks or None

    def classify_intent(self, user_message: str, history: list[ChatTurn]) -> tuple[str, float] | None:
        history_text = "\n".join(
            f"{'KLIENT' if turn.role == 'user' else 'ASSISTENT'}: {turn.text}" for turn in history[-8:]
        )
        parsed = self._generate_json(
            INTENT_PROMPT,
            f"VESTLUSE AJALUGU:\n{history_text or '(puudub)'}\n\nVIIMANE SÕNUM:\n{user_message}\n\n"
            "Tagasta ainult JSON.",
            "{",
            "intent classification",
        )
        if not isinstance(parsed, dict) or parsed.get("intent") not in INTENTS:
            return None
        try:
            confidence = float(parsed.get("confidence", 0))
        except (TypeError, ValueError):
            confidence = 0.0
        return parsed["intent"], confidence

    def short_reply(self, user_text: str, context_summary: str) -> str | None:
        return self._generate(
            self._support_prompt,
            f"Kliendi küsimus: {user_text}\nFAQ kontekst: {context_summary}\n\n"
            "Vasta 1-3 lausega ainult poe teabe põhjal. Kui FAQ kontekst sisaldab vastust, kasuta seda.",
            "short reply",
        )

    def general_reply(self, user_text: str) -> str | None:
        return self._generate(
            self._support_prompt,
            f"Kliendi sõnum: {user_text}\n\nVasta lühidalt ja kasulikult. Kui klient küsib toodete kohta, "
            "palu täpsustada toote tüüpi ja eelarvet. Ära leiuta hindu ega tootenimesid.",
            "general reply",
        )

    def product_set_summary(self, user_message: str, products: list[ProductCard]) -> str | None:
        if len(products) < 2:
            return None
        listing = "\n".join(f"{i}. {card.title} - {card.reason}" for i, card in enumerate(products, start=1))
        return self._generate(
            PRODUCT_SET_SUMMARY_PROMPT,
            f'KLIENDI SÕNUM: "{user_message}"\n\nVALITUD TOOTED:\n{listing}\n\n'
            "Kirjuta lühike kokkuvõte, miks need tooted moodustavad hea koosluse.",
            "product set summary",
        )

    # -- Bundles ---------------------------------------------------------------

    def generate_bundles(self, catalog: list[dict], answers: BundleAnswers) -> list[dict] | None:
        parsed = self._generate_json(
            BUNDLE_GENERATION_PROMPT,
            f"{_answers_block(answers)}\n\nKATALOOG ({len(catalog)} toodet):\n"
            f"{json.dumps(catalog, ensure_ascii=False, indent=2)}",
            "[",
            "bundle generation",
        )
        if not isinstance(parsed, list):
            return None
        bundles = [item for item in parsed if isinstance(item, dict) and isinstance(item.get("items"), list)]
        return bundles or None

    def bundle_summary(self, answers: BundleAnswers, bundles: list[Bundle]) -> list[dict] | None:
        listing = "\n\n".join(
            f"KOMPLEKT {i}: {bundle.title}\n" + "\n".join(
                f"- {item.title} ({item.role_in_bundle}, {item.price})" for item in bundle.items
            )
            for i, bundle in enumerate(bundles, start=1)
        )
        parsed = self._generate_json(
            BUNDLE_SUMMARY_PROMPT,
            f"{_answers_block(answers)}\n\nKOMPLEKTID:\n{listing}",
            "[",
            "bundle summary",
        )
        if not isinstance(parsed, list):
            return None
        return [item for item in parsed if isinstance(item, dict)] or None


def get_assist() -> AIAssist:
    """Gemini-backed assist when enabled and configured, otherwise a no-op."""
    if USE_AI and GEMINI_API_KEY:
        logger.info("[llm] AI assist enabled (model=%s)", GEMINI_MODEL)
        return GeminiAssist(api_key=GEMINI_API_KEY)
    logger.info("[llm] AI assist disabled")
    return NullAssist()
