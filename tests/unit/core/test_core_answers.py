"""
Tests for answer normalization against a variant's option ordering.
"""

import pytest

from exam_analysis.core.answers import (
    letter_index,
    normalize_answer,
    option_letter,
    resolve_correct_answer,
)
from exam_analysis.core.data_models import QuestionType, VariantQuestion

CAPITALS = ("Paris", "London", "Berlin", "Rome")
TRUE_FALSE = ("True", "False")


class TestOptionLetters:
    def test_option_letter(self) -> None:
        """Indices map to letters from A."""
        assert option_letter(0) == "A"
        assert option_letter(3) == "D"

    def test_option_letter_out_of_range(self) -> None:
        """Only 26 letters exist."""
        with pytest.raises(ValueError, match="No option letter"):
            option_letter(26)

    def test_letter_index(self) -> None:
        """Letters map back to indices, case-insensitively."""
        assert letter_index("A") == 0
        assert letter_index("d") == 3
        assert letter_index(" c ") == 2

    def test_letter_index_rejects_non_letters(self) -> None:
        """Multi-character and non-letter tokens are not letters."""
        assert letter_index("AB") is None
        assert letter_index("1") is None
        assert letter_index("") is None


class TestNormalizeAnswer:
    def test_blank_is_omitted(self) -> None:
        """Blank answers map to None."""
        assert normalize_answer(None, CAPITALS) is None
        assert normalize_answer("", CAPITALS) is None
        assert normalize_answer("   ", CAPITALS) is None

    def test_exact_text(self) -> None:
        """Option text is returned unchanged."""
        assert normalize_answer("Berlin", CAPITALS) == "Berlin"

    def test_case_insensitive_text(self) -> None:
        """Text matching ignores case and surrounding whitespace."""
        assert normalize_answer(" paris ", CAPITALS) == "Paris"

    def test_letter_uses_variant_ordering(self) -> None:
        """The same letter maps to different text on different orderings."""
        reordered = ("Rome", "Paris", "London", "Berlin")
        assert normalize_answer("B", CAPITALS) == "London"
        assert normalize_answer("B", reordered) == "Paris"
        assert normalize_answer("b", reordered) == "Paris"

    def test_letter_out_of_range_kept(self) -> None:
        """Letters beyond the option list are returned as-is."""
        assert normalize_answer("E", CAPITALS) == "E"

    def test_option_text_wins_over_letter(self) -> None:
        """An option whose text is a letter matches by text first."""
        options = ("B", "A")
        assert normalize_answer("A", options) == "A"

    def test_true_false_tokens(self) -> None:
        """T/F tokens map to the boolean options."""
        tf = QuestionType.TRUE_FALSE
        assert normalize_answer("T", TRUE_FALSE, tf) == "True"
        assert normalize_answer("f", TRUE_FALSE, tf) == "False"
        assert normalize_answer("TRUE", TRUE_FALSE, tf) == "True"

    def test_true_false_letters(self) -> None:
        """Letters still work on true/false items."""
        tf = QuestionType.TRUE_FALSE
        assert normalize_answer("A", TRUE_FALSE, tf) == "True"
        assert normalize_answer("B", TRUE_FALSE, tf) == "False"

    def test_unknown_text_kept(self) -> None:
        """Unmatched answers are kept so they still count as responses."""
        assert normalize_answer("Madrid", CAPITALS) == "Madrid"


class TestResolveCorrectAnswer:
    def test_text_key(self) -> None:
        """A text key resolves to itself."""
        q = VariantQuestion(id="q1", options=CAPITALS, correct_answer="Rome")
        assert resolve_correct_answer(q) == "Rome"

    def test_letter_key(self) -> None:
        """A letter key resolves through the variant's options."""
        q = VariantQuestion(id="q1", options=CAPITALS, correct_answer="C")
        assert resolve_correct_answer(q) == "Berlin"

    def test_missing_key(self) -> None:
        """No key resolves to None."""
        q = VariantQuestion(id="q1", options=CAPITALS)
        assert resolve_correct_answer(q) is None

    def test_key_not_among_options(self) -> None:
        """A key that matches no option is unresolvable."""
        q = VariantQuestion(id="q1", options=CAPITALS, correct_answer="Oslo")
        assert resolve_correct_answer(q) is None
