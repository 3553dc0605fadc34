import logging
from collections import Counter
from collections.abc import Mapping, Sequence

from exam_analysis.analysis.data_models import (
    BiPointAnalysisResult,
    VariantAnalysisResult,
)
from exam_analysis.core.data_models import StudentResponse
from exam_analysis.detection.config import FlaggingConfig, ModelConfig
from exam_analysis.detection.data_models import (
    FlaggedSubmission,
    FlaggingSummary,
)
from exam_analysis.detection.identity import (
    MatchStrategy,
    ResolvedStudent,
    resolve_student,
)
from exam_analysis.detection.model import ModelInputs, predict_probability
from exam_analysis.detection.regrading import (
    AnswerKey,
    calculate_cross_variant_grades,
)
from exam_analysis.detection.similarity import (
    SimilarityMatrix,
    SimilarityPair,
    parse_student_key,
)

logger = logging.getLogger(__name__)

MatrixLike = SimilarityMatrix | Mapping[str, Mapping[str, float]]

# Resolutions that may have picked the wrong student
_WEAK_MATCHES = frozenset({MatchStrategy.VARIANT_FUZZY, MatchStrategy.SUBSTRING})


def _as_matrix(matrix: MatrixLike) -> SimilarityMatrix:
    if isinstance(matrix, SimilarityMatrix):
        return matrix
    return SimilarityMatrix(matrix)


def class_average_score(roster: Sequence[StudentResponse]) -> float | None:
    """Mean percentage over the roster, None when the roster is empty."""
    if not roster:
        return None
    return sum(s.percentage for s in roster) / len(roster)


class _RunContext:
    """Baselines shared by every pair of one flagging run."""

    def __init__(
        self,
        variant_similarity: SimilarityMatrix,
        exam_result: BiPointAnalysisResult,
        variant_results: Sequence[VariantAnalysisResult],
        model_config: ModelConfig,
    ) -> None:
        self.variant_similarity = variant_similarity
        self.model_config = model_config
        self.roster = exam_result.metadata.student_responses
        self.class_average = class_average_score(self.roster)
        self.biserials: dict[str, float] = {
            v.variant_code: v.summary.average_point_biserial
            for v in variant_results
        }
        self.answer_keys: dict[str, AnswerKey] = {
            v.variant_code: v.answer_key for v in variant_results
        }
        self._resolved: dict[str, ResolvedStudent | None] = {}

    def resolve(self, key: str) -> ResolvedStudent | None:
        if key not in self._resolved:
            resolved = resolve_student(key, self.roster)
            if resolved is None:
                logger.warning(f"Could not resolve student {key}")
            self._resolved[key] = resolved
        return self._resolved[key]


def _score_pair(pair: SimilarityPair, ctx: _RunContext) -> FlaggedSubmission:
    warnings: list[str] = []

    resolved1 = ctx.resolve(pair.student1)
    resolved2 = ctx.resolve(pair.student2)
    for key, resolved in (
        (pair.student1, resolved1),
        (pair.student2, resolved2),
    ):
        if resolved is None:
            warnings.append(f"Unresolved student: {key}")
        elif resolved.strategy in _WEAK_MATCHES:
            warnings.append(
                f"Student {key} matched by {resolved.strategy} to "
                f"{resolved.student.student_id}"
            )

    variant1 = (
        resolved1.variant_code
        if resolved1
        else parse_student_key(pair.student1).variant_code
    )
    variant2 = (
        resolved2.variant_code
        if resolved2
        else parse_student_key(pair.student2).variant_code
    )

    variant_similarity = ctx.variant_similarity.lookup(
        pair.student1, pair.student2, variant1, variant2
    )
    if variant_similarity is None:
        warnings.append("No variant similarity for pair")
    elif ctx.model_config.invert_variant_similarity:
        variant_similarity = 1.0 - variant_similarity

    biserial1 = ctx.biserials.get(variant1) if variant1 else None
    biserial2 = ctx.biserials.get(variant2) if variant2 else None
    for variant, biserial in ((variant1, biserial1), (variant2, biserial2)):
        if biserial is None:
            warnings.append(f"No variant analysis for variant {variant}")

    grades = calculate_cross_variant_grades(
        resolved1.student if resolved1 else None,
        resolved2.student if resolved2 else None,
        variant1,
        variant2,
        ctx.answer_keys,
    )
    if grades is None:
        warnings.append("Cross-variant grades unavailable")

    score1 = resolved1.percentage if resolved1 else None
    score2 = resolved2.percentage if resolved2 else None

    probability = 0.0
    if (
        score1 is not None
        and score2 is not None
        and variant_similarity is not None
        and biserial1 is not None
        and biserial2 is not None
        and ctx.class_average is not None
    ):
        probability = predict_probability(
            ModelInputs(
                variant_similarity=variant_similarity,
                response_similarity=pair.similarity,
                student1_score=score1,
                student2_score=score2,
                class_average_score=ctx.class_average,
                student1_biserial=biserial1,
                student2_biserial=biserial2,
                student1_cross_grade=grades.student1_cross_grade
                if grades
                else 0.0,
                student2_cross_grade=grades.student2_cross_grade
                if grades
                else 0.0,
            )
        )

    return FlaggedSubmission(
        student1=pair.student1,
        student2=pair.student2,
        probability=probability,
        student1_score=score1,
        student2_score=score2,
        student1_variant=variant1,
        student2_variant=variant2,
        variant_similarity=variant_similarity,
        response_similarity=pair.similarity,
        class_average_score=ctx.class_average,
        student1_biserial=biserial1,
        student2_biserial=biserial2,
        student1_cross_grade=grades.student1_cross_grade if grades else None,
        student2_cross_grade=grades.student2_cross_grade if grades else None,
        student1_grade_change=grades.student1_grade_change if grades else None,
        student2_grade_change=grades.student2_grade_change if grades else None,
        warnings=tuple(warnings),
    )


def process_submissions(
    variant_similarity: MatrixLike,
    response_similarity: MatrixLike,
    exam_result: BiPointAnalysisResult,
    variant_results: Sequence[VariantAnalysisResult],
    config: FlaggingConfig | None = None,
    model_config: ModelConfig | None = None,
) -> list[FlaggedSubmission]:
    """
    Score every unique student pair of the response-similarity matrix.

    Self-pairs and mirrored duplicates are skipped, and each pair is
    oriented with the smaller key first, so the output does not depend on
    the orientation or order of the input matrices. Pairs with an
    unresolved student, variant similarity or variant analysis are kept
    with probability 0 and a warning.

    Args:
        variant_similarity: Seating/variant-order similarity per pair.
        response_similarity: Response-pattern similarity per pair.
        exam_result: Exam-level item analysis, supplying the roster.
        variant_results: Per-variant item analyses, supplying biserial
            averages and answer keys.
        config: Display thresholds, only used for logging bucket counts.
        model_config: Scoring model options.

    Returns:
        Flagged pairs sorted by probability, highest first.
    """
    if config is None:
        config = FlaggingConfig()
    if model_config is None:
        model_config = ModelConfig()

    ctx = _RunContext(
        _as_matrix(variant_similarity),
        exam_result,
        variant_results,
        model_config,
    )
    pairs = list(_as_matrix(response_similarity).unique_pairs())
    logger.info(
        f"Scoring {len(pairs)} student pairs across "
        f"{len(ctx.roster)} students"
    )

    flagged = [_score_pair(pair, ctx) for pair in pairs]
    flagged.sort(key=lambda f: (-f.probability, f.student1, f.student2))

    buckets = Counter(config.classify(f.probability) for f in flagged)
    logger.info(
        "Risk buckets: "
        + ", ".join(f"{level}={count}" for level, count in sorted(buckets.items()))
    )
    return flagged


def filter_by_probability(
    submissions: Sequence[FlaggedSubmission], min_probability: float
) -> list[FlaggedSubmission]:
    return [s for s in submissions if s.probability >= min_probability]


def get_flagging_summary(
    submissions: Sequence[FlaggedSubmission],
) -> FlaggingSummary:
    """Count, unique students and mean probability/similarity of a list."""
    students = {s.student1 for s in submissions} | {
        s.student2 for s in submissions
    }
    n = len(submissions)
    return FlaggingSummary(
        total_flagged=n,
        unique_students_involved=len(students),
        average_probability=sum(s.probability for s in submissions) / n
        if n
        else 0.0,
        average_similarity=sum(s.response_similarity for s in submissions) / n
        if n
        else 0.0,
    )
