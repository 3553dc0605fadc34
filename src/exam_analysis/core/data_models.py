"""
Input records for exam analysis.

This module defines the data structures for:
- QuestionResponse / StudentResponse: one student's submission
- VariantQuestion / ExamVariant: the authoritative answer key per variant
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"


class QuestionResponse(BaseModel):
    """
    One student's answer to one question.

    Attributes:
        question_id: Identifier of the question, shared across variants.
        student_answer: Raw answer text, an option letter or a boolean
            token. Blank means the question was omitted.
        is_correct: Correctness as graded upstream.
        points: Points earned.
        max_points: Points available.
        response_time: Seconds spent on the question, if recorded.
    """

    model_config = ConfigDict(frozen=True)

    question_id: str
    student_answer: str = ""
    is_correct: bool = False
    points: float = Field(default=0.0, ge=0)
    max_points: float = Field(default=1.0, ge=0)
    response_time: float | None = None

    @property
    def is_omitted(self) -> bool:
        return not self.student_answer.strip()


class StudentResponse(BaseModel):
    """
    One student's full submission for a single exam generation.

    Attributes:
        student_id: Raw identifier from the roster.
        display_student_id: Human-readable identifier used in similarity
            matrix keys, when it differs from the raw id.
        name: Student name, if known.
        variant_code: Code of the exam variant the student sat.
        question_responses: Responses in the order they were answered.
        total_score: Points earned on the whole exam.
        max_possible_score: Points available on the whole exam.
        completion_time: Minutes taken, if recorded.
        started_at: Submission start.
        completed_at: Submission end. None for unfinished submissions.
    """

    model_config = ConfigDict(frozen=True)

    student_id: str
    display_student_id: str | None = None
    name: str | None = None
    variant_code: str
    question_responses: tuple[QuestionResponse, ...] = ()
    total_score: float = Field(ge=0)
    max_possible_score: float = Field(ge=0)
    completion_time: float | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def percentage(self) -> float:
        """Total score as a percentage of the maximum."""
        if self.max_possible_score <= 0:
            return 0.0
        return 100.0 * self.total_score / self.max_possible_score

    @property
    def score_proportion(self) -> float:
        if self.max_possible_score <= 0:
            return 0.0
        return self.total_score / self.max_possible_score

    def response_for(self, question_id: str) -> QuestionResponse | None:
        for response in self.question_responses:
            if response.question_id == question_id:
                return response
        return None


class VariantQuestion(BaseModel):
    """
    A question as it appears on one exam variant.

    Attributes:
        id: Question identifier, stable across variants.
        question_text: Stem shown to the student.
        question_type: Multiple choice or true/false.
        options: Option texts in the order this variant shows them.
        correct_answer: Option text of the key, or its letter on this
            variant. None when the key is missing.
        points: Points awarded for a correct answer.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    question_text: str = ""
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: tuple[str, ...] = ()
    correct_answer: str | None = None
    points: float = Field(default=1.0, ge=0)


class ExamVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant_code: str
    exam_id: str | None = None
    exam_title: str | None = None
    questions: tuple[VariantQuestion, ...] = ()

    @model_validator(mode="after")
    def validate_unique_question_ids(self) -> "ExamVariant":
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError(
                f"Variant {self.variant_code} lists a question id more than once"
            )
        return self

    @property
    def question_ids(self) -> list[str]:
        return [q.id for q in self.questions]

    def question(self, question_id: str) -> VariantQuestion | None:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None
