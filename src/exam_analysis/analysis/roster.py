"""
Roster preparation for item analysis.

Turns raw submissions into per-question canonical answers, applying the
incomplete-data policy and collecting the union of question ids across
variants.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.exceptions import (
    DuplicateVariantError,
    EmptyQuestionSetError,
)
from exam_analysis.core.answers import normalize_answer
from exam_analysis.core.data_models import (
    ExamVariant,
    StudentResponse,
    VariantQuestion,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedAnswer:
    answer: str | None
    is_correct: bool


@dataclass(frozen=True)
class PreparedSubmission:
    student: StudentResponse
    answers: dict[str, PreparedAnswer]

    @property
    def total_score(self) -> float:
        return self.student.total_score


@dataclass(frozen=True)
class QuestionCatalog:
    """
    Union of questions across variants, in order of first appearance.

    Attributes:
        questions: Question definition per id, taken from the first
            variant that lists it.
        variants: Variants by code.
    """

    questions: dict[str, VariantQuestion]
    variants: dict[str, ExamVariant]

    @classmethod
    def from_variants(cls, exam_variants: Sequence[ExamVariant]) -> "QuestionCatalog":
        questions: dict[str, VariantQuestion] = {}
        variants: dict[str, ExamVariant] = {}
        for variant in exam_variants:
            if variant.variant_code in variants:
                raise DuplicateVariantError(variant.variant_code)
            variants[variant.variant_code] = variant
            for question in variant.questions:
                questions.setdefault(question.id, question)

        if not questions:
            raise EmptyQuestionSetError()
        return cls(questions=questions, variants=variants)

    @property
    def question_ids(self) -> list[str]:
        return list(self.questions)

    def question_for(
        self, question_id: str, variant_code: str
    ) -> VariantQuestion | None:
        """Question as the given variant shows it, else its first definition."""
        variant = self.variants.get(variant_code)
        if variant is not None:
            question = variant.question(question_id)
            if question is not None:
                return question
        return self.questions.get(question_id)


@dataclass
class PreparedRoster:
    submissions: list[PreparedSubmission] = field(default_factory=list)
    excluded_students: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def sample_size(self) -> int:
        return len(self.submissions)


def is_incomplete(
    student: StudentResponse, expected_ids: Sequence[str]
) -> bool:
    """Unfinished, empty, or missing an answer to any expected question."""
    if student.completed_at is None or not student.question_responses:
        return True
    answered = {r.question_id for r in student.question_responses}
    return any(qid not in answered for qid in expected_ids)


def prepare_roster(
    student_responses: Sequence[StudentResponse],
    catalog: QuestionCatalog,
    config: AnalysisConfig,
) -> PreparedRoster:
    """
    Apply the incomplete-data policy and normalize every answer.

    With ``exclude_incomplete_data`` incomplete students are dropped and
    counted. Otherwise each question of the student's variant that has no
    response is filled in as an omitted, incorrect answer.
    Responses to question ids that no variant defines are ignored.
    """
    roster = PreparedRoster()
    unknown_ids: set[str] = set()
    unknown_variants: set[str] = set()

    for student in student_responses:
        variant = catalog.variants.get(student.variant_code)
        if variant is None:
            unknown_variants.add(student.variant_code)
            expected_ids: list[str] = []
        else:
            expected_ids = variant.question_ids

        if config.exclude_incomplete_data and is_incomplete(
            student, expected_ids
        ):
            roster.excluded_students += 1
            continue

        answers: dict[str, PreparedAnswer] = {}
        for response in student.question_responses:
            question = catalog.question_for(
                response.question_id, student.variant_code
            )
            if question is None:
                unknown_ids.add(response.question_id)
                continue
            answers[response.question_id] = PreparedAnswer(
                answer=normalize_answer(
                    response.student_answer,
                    question.options,
                    question.question_type,
                ),
                is_correct=response.is_correct,
            )

        for qid in expected_ids:
            if qid not in answers:
                answers[qid] = PreparedAnswer(answer=None, is_correct=False)

        roster.submissions.append(
            PreparedSubmission(student=student, answers=answers)
        )

    if roster.excluded_students:
        logger.info(
            f"Excluded {roster.excluded_students} incomplete submissions"
        )
    if unknown_ids:
        message = (
            f"Ignored responses to {len(unknown_ids)} question ids not "
            f"defined in any variant: {sorted(unknown_ids)}"
        )
        logger.warning(message)
        roster.warnings.append(message)
    if unknown_variants:
        message = (
            f"Students reference undefined variants: {sorted(unknown_variants)}"
        )
        logger.warning(message)
        roster.warnings.append(message)

    return roster
