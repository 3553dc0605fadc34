"""
Cross-variant regrading.

A student's raw answers are re-read through another variant's option
ordering and graded against that variant's key. If a student copied
option letters from a neighbour sitting a different variant, their answers
score well on the neighbour's variant and poorly on their own.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from exam_analysis.analysis.data_models import AnswerKeyEntry
from exam_analysis.core.answers import normalize_answer
from exam_analysis.core.data_models import StudentResponse

logger = logging.getLogger(__name__)

AnswerKey = Mapping[str, AnswerKeyEntry]


@dataclass(frozen=True)
class CrossVariantGrades:
    student1_cross_grade: float
    student2_cross_grade: float
    student1_grade_change: float
    student2_grade_change: float


SAME_VARIANT_GRADES = CrossVariantGrades(
    student1_cross_grade=0.0,
    student2_cross_grade=0.0,
    student1_grade_change=0.0,
    student2_grade_change=0.0,
)


def cross_grade(student: StudentResponse, target_key: AnswerKey) -> float | None:
    """
    Percentage of the student's responses correct under ``target_key``.

    Responses to questions missing from the target key count as wrong.
    Returns None when the student has no responses.
    """
    responses = student.question_responses
    if not responses:
        return None

    correct = 0
    for response in responses:
        entry = target_key.get(response.question_id)
        if entry is None:
            continue
        answer = normalize_answer(
            response.student_answer, entry.options, entry.question_type
        )
        if answer is not None and answer == entry.correct_answer:
            correct += 1
    return 100.0 * correct / len(responses)


def calculate_cross_variant_grades(
    student1: StudentResponse | None,
    student2: StudentResponse | None,
    variant1: str | None,
    variant2: str | None,
    answer_keys: Mapping[str, AnswerKey],
) -> CrossVariantGrades | None:
    """
    Grade each student on the other student's variant.

    Same-variant pairs carry no information and get exactly 0 for every
    field. Returns None when either student or either variant's answer key
    is unavailable.
    """
    if variant1 is not None and variant1 == variant2:
        return SAME_VARIANT_GRADES
    if student1 is None or student2 is None:
        return None
    if variant1 is None or variant2 is None:
        return None

    key1 = answer_keys.get(variant1)
    key2 = answer_keys.get(variant2)
    if key1 is None or key2 is None:
        logger.warning(
            f"No answer key for variant {variant1 if key1 is None else variant2}"
        )
        return None

    grade1 = cross_grade(student1, key2)
    grade2 = cross_grade(student2, key1)
    if grade1 is None or grade2 is None:
        return None

    return CrossVariantGrades(
        student1_cross_grade=grade1,
        student2_cross_grade=grade2,
        student1_grade_change=grade1 - student1.percentage,
        student2_grade_change=grade2 - student2.percentage,
    )
