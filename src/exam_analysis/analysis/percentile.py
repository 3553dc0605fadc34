"""
Percentile slicing of a roster by score.

A range such as (75, 100) selects the top quarter of students ranked by
percentage; (0, 25) selects the bottom quarter.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from exam_analysis.core.data_models import StudentResponse
from exam_analysis.core.utils import safe_mean


@dataclass(frozen=True)
class PercentileRange:
    from_: float
    to: float
    label: str | None = None

    def __post_init__(self) -> None:
        if not (0 <= self.from_ <= 100 and 0 <= self.to <= 100):
            raise ValueError("percentile bounds must be in [0, 100]")
        if self.from_ >= self.to:
            raise ValueError(
                f"from_ must be < to, got {self.from_} >= {self.to}"
            )

    @property
    def display_label(self) -> str:
        if self.label:
            return self.label
        return f"{self.from_:g}% - {self.to:g}%"


class StudentScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    student_id: str
    display_student_id: str | None
    name: str | None
    variant_code: str
    total_score: float
    max_possible_score: float
    percentage: float
    questions_correct: int
    total_questions: int
    rank: int | None = None

    @classmethod
    def from_response(cls, student: StudentResponse) -> "StudentScore":
        return cls(
            student_id=student.student_id,
            display_student_id=student.display_student_id,
            name=student.name,
            variant_code=student.variant_code,
            total_score=student.total_score,
            max_possible_score=student.max_possible_score,
            percentage=student.percentage,
            questions_correct=sum(
                1 for r in student.question_responses if r.is_correct
            ),
            total_questions=len(student.question_responses),
        )


class FilteredStudentData(BaseModel):
    model_config = ConfigDict(frozen=True)

    students: tuple[StudentScore, ...]
    total_students: int
    average_score: float
    highest_score: float
    lowest_score: float


def _ranked(students: Sequence[StudentScore]) -> list[StudentScore]:
    return sorted(students, key=lambda s: -s.percentage)


def filter_students_by_percentile(
    students: Sequence[StudentScore], percentile_range: PercentileRange
) -> list[StudentScore]:
    """
    Students whose rank falls inside the percentile range.

    Ranks run from the highest percentage down. The slice is
    [floor((100 - to) / 100 * n), floor((100 - from) / 100 * n)), widened
    to one student when rounding would leave it empty.
    """
    if not students:
        return []

    ranked = _ranked(students)
    n = len(ranked)
    start = math.floor((100 - percentile_range.to) / 100 * n)
    end = math.floor((100 - percentile_range.from_) / 100 * n)
    start = max(0, min(start, n - 1))
    end = max(start + 1, min(end, n))
    return ranked[start:end]


def apply_percentile_filter(
    students: Sequence[StudentScore],
    percentile_range: PercentileRange | None = None,
) -> FilteredStudentData:
    """Rank, optionally slice, and summarize a roster."""
    if percentile_range is None:
        selected = _ranked(students)
    else:
        selected = filter_students_by_percentile(students, percentile_range)

    ranked = [
        s.model_copy(update={"rank": i + 1}) for i, s in enumerate(selected)
    ]
    return FilteredStudentData(
        students=tuple(ranked),
        total_students=len(ranked),
        average_score=safe_mean([s.percentage for s in ranked]),
        highest_score=ranked[0].percentage if ranked else 0.0,
        lowest_score=ranked[-1].percentage if ranked else 0.0,
    )
