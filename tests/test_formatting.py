"""
Tests for formatting helpers — currency, quantities, word wrap.
"""

import math

import pytest

from app.services.formatting import (
    BOLD,
    REGULAR,
    format_currency,
    format_percent,
    format_quantity,
    safe_filename,
    text_width,
    to_winansi,
    wrap_text,
)


class TestFormatCurrency:
    def test_two_fraction_digits_and_grouping(self):
        assert format_currency(1234.5) == "NGN 1,234.50"
        assert format_currency(225) == "NGN 225.00"

    @pytest.mark.parametrize("bad", [-5, float("nan"), float("inf"), None, "abc"])
    def test_invalid_amounts_format_as_zero(self, bad):
        assert format_currency(bad) == format_currency(0) == "NGN 0.00"

    def test_numeric_strings_are_accepted(self):
        assert format_currency("12.5") == "NGN 12.50"


class TestFormatNumbers:
    def test_quantity(self):
        assert format_quantity(2.0) == "2"
        assert format_quantity(2.5) == "2.5"
        assert format_quantity("x") == "0"

    def test_percent(self):
        assert format_percent(7.5) == "7.5"
        assert format_percent(10) == "10"


class TestWrapText:
    def test_empty_input_is_one_empty_line(self):
        assert wrap_text("", 100, REGULAR) == [""]
        assert wrap_text("   ", 100, REGULAR) == [""]

    def test_short_text_stays_on_one_line(self):
        assert wrap_text("Service / Product", 300, REGULAR) == ["Service / Product"]

    def test_lines_respect_max_width(self):
        text = " ".join(["quotation"] * 60)
        lines = wrap_text(text, 120, REGULAR)
        assert len(lines) > 1
        for line in lines:
            assert text_width(line, REGULAR) <= 120 or len(line.split()) == 1

    def test_overlong_word_gets_its_own_line(self):
        word = "supercalifragilisticexpialidocious"
        lines = wrap_text(f"a {word} b", 30, REGULAR)
        assert lines == ["a", word, "b"]
        assert text_width(word, REGULAR) > 30

    def test_words_are_never_split(self):
        text = "alpha beta gamma delta epsilon zeta eta theta"
        lines = wrap_text(text, 40, BOLD)
        assert " ".join(lines).split() == text.split()

    def test_newlines_force_breaks(self):
        assert wrap_text("line one\n\nline two", 400, REGULAR) == ["line one", "", "line two"]


class TestHelpers:
    def test_winansi_replaces_unsupported_glyphs(self):
        assert to_winansi("₦100") == "?100"
        assert to_winansi("Café – 5") == "Café – 5"

    def test_text_width_is_positive(self):
        assert text_width("Widget", REGULAR) > 0
        assert math.isclose(text_width("", REGULAR), 0.0)

    def test_safe_filename(self):
        assert safe_filename("Q-20261019-001", "pdf") == "Q-20261019-001.pdf"
        assert safe_filename('a/b:c*"d', "pdf") == "abcd.pdf"
        assert safe_filename("", "csv") == "quotation.csv"

    def test_safe_filename_is_ascii_header_safe(self):
        assert safe_filename("Q-₦-001", "pdf") == "Q--001.pdf"
        assert safe_filename("Qé-\r\n002", "csv") == "Qe-002.csv"
        assert safe_filename("₦₦", "pdf") == "quotation.pdf"
