"""Tests for text normalisation helpers."""

from sisustus.services.text import contains_any, decode_entities, normalize_text, strip_html


class TestNormalizeText:
    def test_strips_estonian_diacritics(self):
        assert normalize_text("Öökapp, 45×40 cm!") == "ookapp 45 40 cm"

    def test_all_diacritics(self):
        assert normalize_text("ÕÄÖÜ šž") == "oaou sz"

    def test_empty_and_none(self):
        assert normalize_text("") == ""
        assert normalize_text(None) == ""

    def test_idempotent(self):
        once = normalize_text("TV-kapp  «Nordic»")
        assert normalize_text(once) == once


class TestContainsAny:
    def test_needles_are_normalised(self):
        assert contains_any("valge ookapp", ["Öökapp"])

    def test_no_match(self):
        assert not contains_any("valge kummut", ["öökapp", ""])


class TestHtml:
    def test_strip_html(self):
        assert strip_html("<p>Tamm&nbsp;&amp; <b>saar</b></p>") == "Tamm & saar"

    def test_decode_entities_collapses_whitespace(self):
        assert decode_entities("KÖÖK &#038;   SÖÖGITUBA") == "KÖÖK & SÖÖGITUBA"
