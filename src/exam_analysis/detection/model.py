"""
Answer-sharing probability model.

    p = sqrt( (Sv * Ss) / (Sv + Ss)
              * (s1 + s2 + max(c1, c2)) / s_av
              * |Q1 * Q2| )

Sv: variant similarity, Ss: response similarity, s1/s2: percentage scores,
c1/c2: cross-variant grades, s_av: class average percentage,
Q1/Q2: average point-biserial of each student's variant.

Roughly two of the three factors (similarity, score excess, item
discrimination health) have to be elevated together before the square
root exceeds ~0.7. A single strong signal does not flag a pair.
"""

import math
from dataclasses import dataclass

from exam_analysis.core.constants import MAX_PROBABILITY, MIN_CLASS_AVERAGE
from exam_analysis.core.utils import clamp


@dataclass(frozen=True)
class ModelInputs:
    variant_similarity: float
    response_similarity: float
    student1_score: float
    student2_score: float
    class_average_score: float
    student1_biserial: float
    student2_biserial: float
    student1_cross_grade: float = 0.0
    student2_cross_grade: float = 0.0


def similarity_component(variant_similarity: float, response_similarity: float) -> float:
    """Sv * Ss / (Sv + Ss), defined as 0 when both are 0."""
    denominator = variant_similarity + response_similarity
    if denominator == 0:
        return 0.0
    return variant_similarity * response_similarity / denominator


def predict_probability(inputs: ModelInputs) -> float:
    """
    Probability that a pair shared answers, in [0, 0.999].

    Inputs are clamped first: similarities to [0, 1], scores and cross
    grades to [0, 100], the class average to at least 0.1, and biserial
    averages to at least 0.
    """
    sv = clamp(inputs.variant_similarity, 0.0, 1.0)
    ss = clamp(inputs.response_similarity, 0.0, 1.0)
    s1 = clamp(inputs.student1_score, 0.0, 100.0)
    s2 = clamp(inputs.student2_score, 0.0, 100.0)
    c1 = clamp(inputs.student1_cross_grade, 0.0, 100.0)
    c2 = clamp(inputs.student2_cross_grade, 0.0, 100.0)
    s_av = max(MIN_CLASS_AVERAGE, inputs.class_average_score)
    q1 = max(0.0, inputs.student1_biserial)
    q2 = max(0.0, inputs.student2_biserial)

    similarity = similarity_component(sv, ss)
    score = (s1 + s2 + max(c1, c2)) / s_av
    health = abs(q1 * q2)

    probability = math.sqrt(similarity * score * health)
    return clamp(probability, 0.0, MAX_PROBABILITY)
