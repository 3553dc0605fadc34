import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from exam_analysis.core.data_models import StudentResponse
from exam_analysis.detection.similarity import parse_student_key

logger = logging.getLogger(__name__)

_PARENTHETICAL = re.compile(r"\([^)]*\)")


class MatchStrategy(StrEnum):
    DISPLAY_ID = "display_id"
    STUDENT_ID = "student_id"
    VARIANT_FUZZY = "variant_fuzzy"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class ResolvedStudent:
    student: StudentResponse
    strategy: MatchStrategy

    @property
    def percentage(self) -> float:
        return self.student.percentage

    @property
    def variant_code(self) -> str:
        return self.student.variant_code


def _clean(text: str | None) -> str:
    if not text:
        return ""
    return _PARENTHETICAL.sub("", text).strip()


def _fuzzy_name_match(student: StudentResponse, name: str) -> bool:
    clean_name = _clean(name)
    clean_display = _clean(student.display_student_id)
    if not clean_name or not clean_display:
        return False
    display = student.display_student_id or ""
    return (
        clean_display == clean_name
        or clean_name in display
        or clean_name in clean_display
    )


def _substring_match(student: StudentResponse, name: str) -> bool:
    display = student.display_student_id or ""
    if not display or not name:
        return False
    return name in display or display in name


def _prefer_variant(
    matches: Sequence[StudentResponse], variant_code: str | None
) -> StudentResponse | None:
    """First match that sat ``variant_code``, else the first match."""
    if variant_code is not None:
        for student in matches:
            if student.variant_code == variant_code:
                return student
    return matches[0] if matches else None


def resolve_student(
    key: str, roster: Sequence[StudentResponse]
) -> ResolvedStudent | None:
    """
    Find the roster entry behind a similarity-matrix key.

    Strategies, in order: exact display id, exact raw id, fuzzy name match
    among students of the key's variant, then a substring match on display
    ids across the whole roster.

    Exact display-id and raw-id matches prefer a student who sat the
    key's variant, so namesakes on different variants stay distinct.

    Args:
        key: Matrix key, usually ``"Name (VariantCode)"``.
        roster: Students analyzed in the run.

    Returns:
        The matched student and the strategy that found it, or None if no
        strategy matched.
    """
    parsed = parse_student_key(key)

    display_matches = [
        s
        for s in roster
        if s.display_student_id and s.display_student_id == parsed.name
    ]
    student = _prefer_variant(display_matches, parsed.variant_code)
    if student is not None:
        return ResolvedStudent(student, MatchStrategy.DISPLAY_ID)

    id_matches = [s for s in roster if s.student_id in (key, parsed.name)]
    student = _prefer_variant(id_matches, parsed.variant_code)
    if student is not None:
        return ResolvedStudent(student, MatchStrategy.STUDENT_ID)

    if parsed.variant_code is not None:
        for student in roster:
            if student.variant_code != parsed.variant_code:
                continue
            if _fuzzy_name_match(student, parsed.name):
                return ResolvedStudent(student, MatchStrategy.VARIANT_FUZZY)

    for student in roster:
        if _substring_match(student, parsed.name):
            logger.debug(f"Resolved {key} by substring match")
            return ResolvedStudent(student, MatchStrategy.SUBSTRING)

    return None
