"""
Tests for resolving similarity-matrix keys to roster entries.
"""

from exam_analysis.core.data_models import StudentResponse
from exam_analysis.detection.identity import MatchStrategy, resolve_student


def _student(
    student_id: str, display: str | None, variant: str = "V1"
) -> StudentResponse:
    return StudentResponse(
        student_id=student_id,
        display_student_id=display,
        variant_code=variant,
        total_score=5,
        max_possible_score=10,
    )


ROSTER = [
    _student("u1", "Alice Smith"),
    _student("stu-42", None, "V2"),
    _student("u3", "Bob (section 3)", "V2"),
    _student("u4", "Carol Jones"),
]


class TestResolveStudent:
    def test_display_id(self) -> None:
        """The key's name matches a display id exactly."""
        resolved = resolve_student("Alice Smith (V1)", ROSTER)
        assert resolved is not None
        assert resolved.student.student_id == "u1"
        assert resolved.strategy == MatchStrategy.DISPLAY_ID

    def test_student_id(self) -> None:
        """Raw ids are matched when no display id does."""
        resolved = resolve_student("stu-42", ROSTER)
        assert resolved is not None
        assert resolved.strategy == MatchStrategy.STUDENT_ID
        assert resolved.variant_code == "V2"

    def test_variant_fuzzy(self) -> None:
        """Parentheticals in display ids are ignored within the variant."""
        resolved = resolve_student("Bob (V2)", ROSTER)
        assert resolved is not None
        assert resolved.student.student_id == "u3"
        assert resolved.strategy == MatchStrategy.VARIANT_FUZZY

    def test_substring(self) -> None:
        """Partial names fall back to a roster-wide substring match."""
        resolved = resolve_student("Carol (V9)", ROSTER)
        assert resolved is not None
        assert resolved.student.student_id == "u4"
        assert resolved.strategy == MatchStrategy.SUBSTRING
        assert resolved.percentage == 50.0

    def test_unresolved(self) -> None:
        """Unknown names resolve to None."""
        assert resolve_student("Zed (V1)", ROSTER) is None
        assert resolve_student("Zed (V1)", []) is None

    def test_missing_display_ids_never_match(self) -> None:
        """Students without display ids are not substring matches."""
        roster = [_student("u9", None)]
        assert resolve_student("anyone", roster) is None


class TestNamesakesOnDifferentVariants:
    NAMESAKES = [
        _student("db1", "Alice"),
        _student("db2", "Alice", "V2"),
    ]

    def test_display_id_prefers_key_variant(self) -> None:
        """Each namesake key resolves to the student who sat that variant."""
        first = resolve_student("Alice (V1)", self.NAMESAKES)
        second = resolve_student("Alice (V2)", self.NAMESAKES)
        assert first is not None and second is not None
        assert first.student.student_id == "db1"
        assert second.student.student_id == "db2"
        assert second.variant_code == "V2"
        assert second.strategy == MatchStrategy.DISPLAY_ID

    def test_raw_id_prefers_key_variant(self) -> None:
        """Raw ids shared across variants also follow the key's variant."""
        roster = [_student("alice", None), _student("alice", None, "V2")]
        resolved = resolve_student("alice (V2)", roster)
        assert resolved is not None
        assert resolved.variant_code == "V2"
        assert resolved.strategy == MatchStrategy.STUDENT_ID

    def test_falls_back_to_other_variant(self) -> None:
        """Without a namesake on the key's variant the exact match still wins."""
        resolved = resolve_student("Alice (V3)", self.NAMESAKES)
        assert resolved is not None
        assert resolved.student.student_id == "db1"
        assert resolved.strategy == MatchStrategy.DISPLAY_ID
