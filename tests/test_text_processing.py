"""Tests for text normalization and answer-marker detection."""

from __future__ import annotations

import pytest

from mcq_extractor.markers import ANSWER_MARKER_PATTERNS, detect_answer_marker
from mcq_extractor.normalizer import clean_ocr_text, clean_text


class TestCleanText:
    def test_empty_input(self):
        assert clean_text(None) == ""
        assert clean_text("") == ""

    def test_collapses_whitespace_and_drops_empty_lines(self):
        raw = "  Question   one \t here\n\n\r\n   \nA.   yes  "
        assert clean_text(raw) == "Question one here\nA. yes"

    def test_strips_non_printable(self):
        assert clean_text("✓ B) Paris\x00\x07") == "B) Paris"


class TestCleanOCRText:
    def test_empty_input(self):
        assert clean_ocr_text(None) == ""

    def test_splits_glued_sentences(self):
        assert clean_ocr_text("It is Paris.Next question") == "It is Paris. Next question"

    def test_collapses_blank_lines(self):
        assert clean_ocr_text("line one\n   \nline two  \t x") == "line one\nline two x"


class TestDetectAnswerMarker:
    def test_checkmark_scenario(self):
        assert detect_answer_marker("The capital is Paris. ✓ B) Paris") == "B"

    def test_no_marker(self):
        assert detect_answer_marker("") is None
        assert detect_answer_marker(None) is None
        assert detect_answer_marker("1. Pick one\nA. x\nB. y") is None

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Options: *C) Mars", "C"),
            ("[x]D) Saturn", "D"),
            ("Option B (correct)", "B"),
            ("Paris C ✅", "C"),
            ("✓ b) lowercase", "B"),
        ],
    )
    def test_symbolic_markers(self, text, expected):
        assert detect_answer_marker(text) == expected

    def test_checkmark_takes_precedence_over_asterisk(self):
        assert detect_answer_marker("*A) London ✓ C) Paris") == "C"

    def test_bracket_takes_precedence_over_correct_suffix(self):
        assert detect_answer_marker("B (correct) and [x]D") == "D"

    def test_detection_is_idempotent(self):
        text = "Q1. Pick one\nA) one\n* B) two\nC) three"
        assert detect_answer_marker(text) == detect_answer_marker(text) == "B"

    def test_pattern_order_is_stable(self):
        assert ANSWER_MARKER_PATTERNS[0].pattern.startswith("✓")
        assert ANSWER_MARKER_PATTERNS[-1].pattern.startswith("answer")
        assert len(ANSWER_MARKER_PATTERNS) == 8
