import logging
from collections.abc import Sequence
from datetime import UTC, datetime

import numpy as np
from numpy.typing import NDArray

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.data_models import (
    AnalysisMetadata,
    AnalysisSummary,
    AnswerKeyEntry,
    BiPointAnalysisResult,
    QuestionAnalysisResult,
    QuestionFailure,
    VariantAnalysisResult,
)
from exam_analysis.analysis.distractors import analyze_distractors
from exam_analysis.analysis.exceptions import (
    InsufficientSampleError,
    QuestionAnalysisError,
)
from exam_analysis.analysis.roster import (
    PreparedSubmission,
    QuestionCatalog,
    prepare_roster,
)
from exam_analysis.analysis.statistics import (
    chi_square_significance,
    discrimination_index,
    point_biserial,
    reliability_metrics,
    score_distribution,
)
from exam_analysis.core.answers import resolve_correct_answer
from exam_analysis.core.data_models import (
    ExamVariant,
    QuestionType,
    StudentResponse,
    VariantQuestion,
)
from exam_analysis.core.utils import as_float_array, safe_mean

logger = logging.getLogger(__name__)


def _number_of_options(question: VariantQuestion) -> int:
    if question.question_type == QuestionType.TRUE_FALSE:
        return 2
    return len(question.options)


def analyze_question(
    question: VariantQuestion,
    submissions: Sequence[PreparedSubmission],
    config: AnalysisConfig,
) -> QuestionAnalysisResult:
    """
    Item statistics for one question over the students who saw it.

    Args:
        question: Question definition supplying options and key.
        submissions: Prepared roster. Only students whose submission
            contains the question are counted.
        config: Analysis settings.

    Returns:
        The question's statistics.

    Raises:
        QuestionAnalysisError: If the question has no options or no
            resolvable correct answer.
    """
    if not question.options:
        raise QuestionAnalysisError(question.id, "question has no options")
    key = resolve_correct_answer(question)
    if key is None:
        raise QuestionAnalysisError(question.id, "missing correct answer")
    n_options = _number_of_options(question)
    if n_options < 2:
        raise QuestionAnalysisError(
            question.id, "question needs at least two options"
        )

    population = [s for s in submissions if question.id in s.answers]
    prepared = [s.answers[question.id] for s in population]
    outcomes: NDArray[np.bool_] = np.array(
        [a.is_correct for a in prepared], dtype=np.bool_
    )
    totals = as_float_array([s.total_score for s in population])

    n_total = len(population)
    n_correct = int(np.count_nonzero(outcomes))

    distractor_analysis = None
    if config.include_distractor_analysis:
        distractor_analysis = analyze_distractors(
            [a.answer for a in prepared],
            totals,
            question.options,
            key,
            config.group_fraction,
        )

    return QuestionAnalysisResult(
        question_id=question.id,
        question_text=question.question_text,
        question_type=question.question_type,
        total_responses=n_total,
        correct_responses=n_correct,
        difficulty_index=n_correct / n_total if n_total else 0.0,
        discrimination_index=discrimination_index(
            outcomes, totals, config.group_fraction
        ),
        point_biserial_correlation=point_biserial(outcomes, totals),
        distractor_analysis=distractor_analysis,
        statistical_significance=chi_square_significance(
            n_correct, n_total, n_options, config.confidence_level
        ),
    )


def _analyze_questions(
    questions: Sequence[VariantQuestion],
    submissions: Sequence[PreparedSubmission],
    config: AnalysisConfig,
) -> tuple[list[QuestionAnalysisResult], list[QuestionFailure]]:
    results: list[QuestionAnalysisResult] = []
    failures: list[QuestionFailure] = []
    for question in questions:
        try:
            results.append(analyze_question(question, submissions, config))
        except QuestionAnalysisError as e:
            logger.warning(f"Skipping question {e.question_id}: {e.reason}")
            failures.append(
                QuestionFailure(question_id=e.question_id, reason=e.reason)
            )
    return results, failures


def summarize(
    question_results: Sequence[QuestionAnalysisResult],
    submissions: Sequence[PreparedSubmission],
) -> AnalysisSummary:
    """Aggregate question statistics, score distribution and reliability."""
    proportions = as_float_array(
        [s.student.score_proportion for s in submissions]
    )

    question_ids = [r.question_id for r in question_results]
    item_scores = np.array(
        [
            [
                1.0 if qid in s.answers and s.answers[qid].is_correct else 0.0
                for qid in question_ids
            ]
            for s in submissions
        ],
        dtype=np.float64,
    ).reshape(len(submissions), len(question_ids))

    return AnalysisSummary(
        average_difficulty=safe_mean(
            [r.difficulty_index for r in question_results]
        ),
        average_discrimination=safe_mean(
            [r.discrimination_index for r in question_results]
        ),
        average_point_biserial=safe_mean(
            [r.point_biserial_correlation for r in question_results]
        ),
        score_distribution=score_distribution(proportions),
        reliability=reliability_metrics(item_scores),
        question_count=len(question_results),
    )


def _answer_key(variant: ExamVariant) -> dict[str, AnswerKeyEntry]:
    key: dict[str, AnswerKeyEntry] = {}
    for question in variant.questions:
        correct = resolve_correct_answer(question)
        if correct is None:
            continue
        key[question.id] = AnswerKeyEntry(
            question_id=question.id,
            question_type=question.question_type,
            options=question.options,
            correct_answer=correct,
        )
    return key


def _analyze_variant(
    variant: ExamVariant,
    submissions: Sequence[PreparedSubmission],
    config: AnalysisConfig,
) -> VariantAnalysisResult | None:
    variant_submissions = [
        s for s in submissions if s.student.variant_code == variant.variant_code
    ]
    if not variant_submissions:
        logger.info(f"No students for variant {variant.variant_code}")
        return None

    results, _ = _analyze_questions(
        variant.questions, variant_submissions, config
    )
    return VariantAnalysisResult(
        variant_code=variant.variant_code,
        student_count=len(variant_submissions),
        question_results=tuple(results),
        summary=summarize(results, variant_submissions),
        answer_key=_answer_key(variant),
        student_responses=tuple(s.student for s in variant_submissions),
    )


def analyze_by_variant(
    exam_variants: Sequence[ExamVariant],
    student_responses: Sequence[StudentResponse],
    config: AnalysisConfig | None = None,
) -> list[VariantAnalysisResult]:
    """
    Run the item analysis separately for each variant's students.

    There is no minimum sample check per variant; variants nobody sat are
    skipped.
    """
    if config is None:
        config = AnalysisConfig()
    catalog = QuestionCatalog.from_variants(exam_variants)
    roster = prepare_roster(student_responses, catalog, config)

    variant_results: list[VariantAnalysisResult] = []
    for variant in exam_variants:
        result = _analyze_variant(variant, roster.submissions, config)
        if result is not None:
            variant_results.append(result)
    return variant_results


def analyze_exam(
    exam_variants: Sequence[ExamVariant],
    student_responses: Sequence[StudentResponse],
    config: AnalysisConfig | None = None,
    exam_title: str | None = None,
    include_variant_results: bool = True,
) -> BiPointAnalysisResult:
    """
    Item analysis of one exam generation across all of its variants.

    Questions are identified by id and merged across variants; the analyzed
    set is the union of every variant's questions in order of first
    appearance.

    Args:
        exam_variants: Variant definitions with answer keys.
        student_responses: The roster.
        config: Analysis settings. Defaults to AnalysisConfig().
        exam_title: Overrides the title carried by the variants.
        include_variant_results: Also run the per-variant breakdown.

    Returns:
        The full analysis result.

    Raises:
        EmptyQuestionSetError: If no variant defines any question.
        InsufficientSampleError: If fewer than ``config.min_sample_size``
            students remain after exclusions.
    """
    if config is None:
        config = AnalysisConfig()

    catalog = QuestionCatalog.from_variants(exam_variants)
    roster = prepare_roster(student_responses, catalog, config)

    if roster.sample_size == 0 or roster.sample_size < config.min_sample_size:
        raise InsufficientSampleError(
            roster.sample_size, config.min_sample_size
        )

    logger.info(
        f"Analyzing {len(catalog.questions)} questions across "
        f"{len(catalog.variants)} variants for {roster.sample_size} students"
    )

    results, failures = _analyze_questions(
        list(catalog.questions.values()), roster.submissions, config
    )

    variant_results: tuple[VariantAnalysisResult, ...] | None = None
    if include_variant_results:
        per_variant: list[VariantAnalysisResult] = []
        for variant in exam_variants:
            result = _analyze_variant(variant, roster.submissions, config)
            if result is not None:
                per_variant.append(result)
        variant_results = tuple(per_variant)

    first_variant = exam_variants[0] if exam_variants else None
    metadata = AnalysisMetadata(
        total_students=len(student_responses),
        total_variants=len(catalog.variants),
        analysis_date=datetime.now(UTC),
        sample_size=roster.sample_size,
        excluded_students=roster.excluded_students,
        student_responses=tuple(s.student for s in roster.submissions),
        failed_questions=tuple(failures),
        warnings=tuple(roster.warnings),
    )

    return BiPointAnalysisResult(
        exam_id=first_variant.exam_id if first_variant else None,
        exam_title=exam_title
        or (first_variant.exam_title if first_variant else None),
        analysis_config=config,
        question_results=tuple(results),
        summary=summarize(results, roster.submissions),
        metadata=metadata,
        variant_results=variant_results,
    )
