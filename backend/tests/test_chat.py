"""Tests for chat orchestration."""

import pytest
from conftest import FakeCatalog, ScriptedAssist, make_candidate

from sisustus.config import CHAT_SUGGESTIONS, ESCALATION_SUGGESTIONS
from sisustus.models.chat import ChatRequest, ChatTurn
from sisustus.services.chat import (
    GREETING_MESSAGE,
    NO_PRODUCTS_MESSAGE,
    RECOMMENDATIONS_MESSAGE,
    SMALLTALK_MESSAGE,
    compute_commerce_actions,
    run_chat,
)


@pytest.fixture
def catalog(cabinet_categories) -> FakeCatalog:
    return FakeCatalog(
        [
            make_candidate("1", "Diivan Oslo", 750, slugs=["diivanid"], names=["Diivanid"]),
            make_candidate("2", "Nurgadiivan Tallinn", 790, slugs=["diivanid"], names=["Diivanid"]),
            make_candidate("3", "Diivan Bergen", 1200, slugs=["diivanid"], names=["Diivanid"]),
            make_candidate("4", "Kummut Mira", 340, slugs=["kummutid"], names=["Kummutid"]),
            make_candidate("5", "Kummut Alva", 290, slugs=["kummutid"], names=["Kummutid"]),
        ],
        cabinet_categories,
    )


class TestRunChat:
    def test_greeting(self, catalog):
        response = run_chat(ChatRequest(message="Tere!"), catalog)
        assert response.message == GREETING_MESSAGE
        assert response.suggestions == CHAT_SUGGESTIONS

    def test_acknowledgement_is_smalltalk(self, catalog):
        response = run_chat(ChatRequest(message="okei, aitäh"), catalog)
        assert response.message == SMALLTALK_MESSAGE
        assert response.cards == []

    def test_faq_fallback_text(self, catalog):
        response = run_chat(ChatRequest(message="kuidas tagastan toote"), catalog)
        assert "taganemisõigus" in response.message
        assert response.message.endswith("Vaata ka: /myygitingimused/")

    def test_faq_ai_short_reply(self, catalog):
        assist = ScriptedAssist(short_reply="Tagastada saad 14 päeva jooksul.")
        response = run_chat(ChatRequest(message="kuidas tagastan toote"), catalog, assist)
        assert response.message == "Tagastada saad 14 päeva jooksul."

    def test_escalation(self, catalog):
        response = run_chat(ChatRequest(message="Olen väga pahane, kadunud pakk!"), catalog)
        assert response.message.startswith("Võtan selle kohe klienditoele edasi.")
        assert "info@idastuudio.ee" in response.message
        assert response.suggestions == ESCALATION_SUGGESTIONS

    def test_recommendations_within_budget(self, catalog):
        response = run_chat(ChatRequest(message="otsin diivanit kuni 800€", cart_id="c1"), catalog)
        assert response.message == RECOMMENDATIONS_MESSAGE
        assert [card.id for card in response.cards] == ["1", "2"]
        assert response.cart_id == "c1"

    def test_product_summary_from_assist(self, catalog):
        assist = ScriptedAssist(product_set_summary="Kaks mugavat diivanit.")
        response = run_chat(ChatRequest(message="otsin diivanit kuni 800€"), catalog, assist)
        assert response.product_summary == "Kaks mugavat diivanit."

    def test_no_products(self, catalog):
        response = run_chat(ChatRequest(message="otsin peeglit"), catalog)
        assert response.message == NO_PRODUCTS_MESSAGE
        assert response.cards == []

    def test_broad_category_asks_for_clarification(self, catalog):
        response = run_chat(ChatRequest(message="soovin kappi"), catalog)
        assert "täpsusta palun kategooria" in response.message
        assert response.suggestions == ["Öökapid", "Kummutid", "Riidekapid"]
        assert response.cards == []

    def test_clarification_reply_runs_refined_search(self, catalog):
        history = [
            ChatTurn(role="user", text="soovin kappi"),
            ChatTurn(role="assistant", text=run_chat(ChatRequest(message="soovin kappi"), catalog).message),
        ]
        response = run_chat(ChatRequest(message="kummutid", history=history), catalog)
        assert response.message == RECOMMENDATIONS_MESSAGE
        assert {card.id for card in response.cards} == {"4", "5"}

    def test_ai_intent_refinement(self, catalog):
        assist = ScriptedAssist(classify_intent=("greeting", 0.95))
        response = run_chat(ChatRequest(message="hommikust"), catalog, assist)
        assert response.message == GREETING_MESSAGE

    def test_ai_intent_outside_vocabulary_ignored(self, catalog):
        assist = ScriptedAssist(classify_intent=("weather", 0.99))
        response = run_chat(ChatRequest(message="Tere!"), catalog, assist)
        assert response.message == GREETING_MESSAGE


class TestCommerceActions:
    def test_no_thresholds_configured(self):
        actions = compute_commerce_actions(0)
        assert actions.free_shipping_gap is None
        assert actions.apply_discount_hint is None

    def test_discount_hint(self, monkeypatch):
        from sisustus.services import chat

        monkeypatch.setitem(chat.COMMERCE_CONFIG, "free_shipping_threshold", 100)
        monkeypatch.setitem(chat.COMMERCE_CONFIG, "discount_thresholds", [{"subtotal": 500, "discount_pct": 5}])
        actions = compute_commerce_actions(80)
        assert actions.free_shipping_gap == 20
        assert actions.apply_discount_hint == "Lisa 420.00€ eest ja saa 5% allahindlust."
