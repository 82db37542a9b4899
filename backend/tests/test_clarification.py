"""Tests for the category clarification planner."""

from sisustus.config import CLARIFICATION_MARKER
from sisustus.models.chat import ChatTurn
from sisustus.models.search import ClarificationOption
from sisustus.services.clarification import (
    clarification_message,
    format_natural_list,
    has_specific_subcategory_mention,
    pending_clarification_query,
    plan_category_clarification,
    resolve_clarification_reply,
    token_match,
)
from sisustus.services.text import normalize_text


class TestPlan:
    def test_generic_cabinet_query(self, cabinet_categories):
        plan = plan_category_clarification("otsin kappi", ["generic-cabinet"], cabinet_categories)
        assert plan is not None
        assert plan.main_category_label == "KAPID"
        # ordered by product count, empty categories skipped
        assert [option.label for option in plan.options] == ["Öökapid", "Kummutid", "Riidekapid"]
        assert plan.options[0].query_token == "öökapid"

    def test_keyword_detection_without_product_type(self, cabinet_categories):
        plan = plan_category_clarification("mingi kapp", [], cabinet_categories)
        assert plan is not None and plan.main_category_slug == "kapid"

    def test_single_child_is_not_worth_asking(self, cabinet_categories):
        assert plan_category_clarification("laevalgusti", ["light"], cabinet_categories) is None

    def test_unknown_category(self, cabinet_categories):
        assert plan_category_clarification("diivan", ["sofa"], cabinet_categories) is None

    def test_no_categories(self):
        assert plan_category_clarification("kapp", ["generic-cabinet"], []) is None

    def test_message_contains_marker(self, cabinet_categories):
        plan = plan_category_clarification("otsin kappi", ["generic-cabinet"], cabinet_categories)
        message = clarification_message(plan)
        assert CLARIFICATION_MARKER in normalize_text(message)
        assert message.endswith("öökapid, kummutid või riidekapid.")


class TestReplies:
    def test_format_natural_list(self):
        assert format_natural_list(["a"]) == "a"
        assert format_natural_list(["a", "b", "c"]) == "a, b või c"
        assert format_natural_list([]) == ""

    def test_token_match_plural(self):
        assert token_match("kummut", "kummutid")
        assert token_match("ookapp", "ookapid")
        assert not token_match("kapp", "lamp")

    def test_resolve_reply(self, cabinet_categories):
        plan = plan_category_clarification("otsin kappi", ["generic-cabinet"], cabinet_categories)
        assert resolve_clarification_reply("kummutid palun", plan.options).label == "Kummutid"
        assert resolve_clarification_reply("ei tea", plan.options) is None

    def test_specific_mention(self, cabinet_categories):
        plan = plan_category_clarification("kapp", ["generic-cabinet"], cabinet_categories)
        assert has_specific_subcategory_mention("soovin kummutit", plan.options)
        assert not has_specific_subcategory_mention("otsin kappi", plan.options)
        assert has_specific_subcategory_mention("öökapp", plan.options)

    def test_short_reply_does_not_select_by_substring(self):
        options = [ClarificationOption(label="Seinavalgustid", query_token="seinavalgustid", slug="seinavalgustid")]
        assert resolve_clarification_reply("ei", options) is None
        assert resolve_clarification_reply("ok", options) is None
        assert resolve_clarification_reply("seina", options).label == "Seinavalgustid"

    def test_pending_query(self):
        history = [
            ChatTurn(role="user", text="otsin kappi"),
            ChatTurn(role="assistant", text="Et leiaksin täpsema vaste, täpsusta palun kategooria (KAPID): a või b."),
        ]
        assert pending_clarification_query(history) == "otsin kappi"

    def test_no_pending_query_after_other_answer(self):
        history = [
            ChatTurn(role="user", text="otsin kappi"),
            ChatTurn(role="assistant", text="Siin on minu soovitused just sulle:"),
        ]
        assert pending_clarification_query(history) is None
