"""
Tests for the answer-sharing probability model.
"""

import math

import pytest

from exam_analysis.detection.model import (
    ModelInputs,
    predict_probability,
    similarity_component,
)


def _inputs(**overrides: float) -> ModelInputs:
    values = {
        "variant_similarity": 1.0,
        "response_similarity": 0.95,
        "student1_score": 80.0,
        "student2_score": 80.0,
        "class_average_score": 66.7,
        "student1_biserial": 0.45,
        "student2_biserial": 0.45,
    }
    values.update(overrides)
    return ModelInputs(**values)


class TestSimilarityComponent:
    def test_harmonic_style_combination(self) -> None:
        """Sv * Ss / (Sv + Ss)."""
        assert similarity_component(1.0, 1.0) == pytest.approx(0.5)
        assert similarity_component(1.0, 0.0) == 0.0

    def test_both_zero(self) -> None:
        """0/0 is defined as 0."""
        assert similarity_component(0.0, 0.0) == 0.0


class TestPredictProbability:
    def test_closed_form(self) -> None:
        """Matches the formula on a strong pair."""
        expected = math.sqrt(0.95 / 1.95 * 160 / 66.7 * 0.45 * 0.45)
        assert predict_probability(_inputs()) == pytest.approx(expected)

    def test_strong_pair_outranks_weaker_pairs(self) -> None:
        """Lowering any one signal lowers the probability."""
        strong = predict_probability(_inputs())
        assert strong > predict_probability(_inputs(response_similarity=0.3))
        assert strong > predict_probability(
            _inputs(student1_score=40.0, student2_score=40.0)
        )
        assert strong > predict_probability(
            _inputs(student1_biserial=0.1, student2_biserial=0.1)
        )

    def test_same_variant_pair_outranks_low_similarity_cross_pair(self) -> None:
        """A near-identical same-variant pair ranks above a weak cross pair."""
        strong = predict_probability(_inputs())
        weak = predict_probability(
            _inputs(
                variant_similarity=0.2,
                student2_score=60.0,
                student1_cross_grade=30.0,
                student2_cross_grade=40.0,
            )
        )
        assert strong > weak

    def test_cross_grade_raises_probability(self) -> None:
        """A high cross grade adds to the score component."""
        base = predict_probability(_inputs())
        assert predict_probability(_inputs(student2_cross_grade=100.0)) > base
        assert predict_probability(
            _inputs(student1_cross_grade=100.0, student2_cross_grade=20.0)
        ) == pytest.approx(predict_probability(_inputs(student1_cross_grade=100.0)))

    def test_capped(self) -> None:
        """Probabilities never reach 1."""
        p = predict_probability(
            _inputs(
                response_similarity=1.0,
                student1_score=100.0,
                student2_score=100.0,
                student1_cross_grade=100.0,
                class_average_score=0.0,
                student1_biserial=1.0,
                student2_biserial=1.0,
            )
        )
        assert p == 0.999

    def test_zero_cases(self) -> None:
        """Negative biserials or zero similarity give 0."""
        assert predict_probability(_inputs(student1_biserial=-0.2)) == 0.0
        assert (
            predict_probability(
                _inputs(variant_similarity=0.0, response_similarity=0.0)
            )
            == 0.0
        )
        assert (
            predict_probability(_inputs(student1_score=0.0, student2_score=0.0))
            == 0.0
        )

    def test_inputs_clamped(self) -> None:
        """Out-of-range inputs are clamped before use."""
        assert predict_probability(
            _inputs(response_similarity=1.7)
        ) == pytest.approx(predict_probability(_inputs(response_similarity=1.0)))
        assert predict_probability(
            _inputs(student1_score=130.0)
        ) == pytest.approx(predict_probability(_inputs(student1_score=100.0)))

    @pytest.mark.parametrize("sv", [0.0, 0.25, 0.5, 1.0])
    @pytest.mark.parametrize("q", [-1.0, 0.0, 0.3, 1.0])
    def test_range(self, sv: float, q: float) -> None:
        """The result always lies in [0, 0.999]."""
        p = predict_probability(
            _inputs(variant_similarity=sv, student1_biserial=q, student2_biserial=q)
        )
        assert 0.0 <= p <= 0.999
