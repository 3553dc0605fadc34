"""
Classical test theory statistics.

All functions are pure and deterministic. Inputs are 1D arrays over the
students who saw a question: a boolean outcome per student (answered
correctly, or selected a given option) and the student's total score.
"""

import math

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from exam_analysis.analysis.data_models import (
    ConfidenceInterval,
    ReliabilityInterpretation,
    ReliabilityMetrics,
    ScoreDistribution,
    StatisticalSignificance,
)
from exam_analysis.core.constants import (
    DISCRIMINATION_GROUP_FRACTION,
    MIN_EXPECTED_FREQUENCY,
    SMALL_SAMPLE_THRESHOLD,
)
from exam_analysis.core.utils import clamp


# Lower bounds of each Cronbach's alpha band, highest first
ALPHA_THRESHOLDS: tuple[tuple[float, ReliabilityInterpretation], ...] = (
    (0.90, ReliabilityInterpretation.EXCELLENT),
    (0.80, ReliabilityInterpretation.GOOD),
    (0.70, ReliabilityInterpretation.ACCEPTABLE),
    (0.60, ReliabilityInterpretation.QUESTIONABLE),
    (0.50, ReliabilityInterpretation.POOR),
)


def discrimination_group_size(
    n: int, fraction: float = DISCRIMINATION_GROUP_FRACTION
) -> int:
    """
    Size of the upper and lower groups for the discrimination index.

    The group holds ceil(fraction * n) students with a minimum of one.
    For very small rosters the groups overlap or coincide:

    - n = 0: 0 (no groups)
    - n = 1: 1 (both groups are the same student, so D = 0)
    - n = 2, 3: 1
    - n = 4: 2

    Args:
        n: Number of students.
        fraction: Share of students per group, in (0, 0.5].

    Returns:
        Number of students in each group.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    if n == 0:
        return 0
    # Round before ceil so 0.27 * 100 gives 27, not 28
    return max(1, math.ceil(round(fraction * n, 9)))


def discrimination_index(
    outcomes: NDArray[np.bool_],
    totals: NDArray[np.float64],
    fraction: float = DISCRIMINATION_GROUP_FRACTION,
) -> float:
    """
    Upper-lower discrimination index.

    Students are ranked by total score (descending, ties kept in input
    order). D is the correct rate of the top group minus the correct rate
    of the bottom group. D is exactly 0 when every student has the same
    total score, since there is no ranking signal.

    Args:
        outcomes: Boolean outcome per student.
        totals: Total score per student.
        fraction: Share of students per group.

    Returns:
        Discrimination index in [-1, 1].
    """
    n = len(outcomes)
    if n < 2 or np.ptp(totals) == 0:
        return 0.0

    group_size = discrimination_group_size(n, fraction)
    order = np.argsort(-totals, kind="stable")
    upper = order[:group_size]
    lower = order[n - group_size :]

    p_upper = float(np.mean(outcomes[upper]))
    p_lower = float(np.mean(outcomes[lower]))
    return clamp(p_upper - p_lower, -1.0, 1.0)


def point_biserial(
    outcomes: NDArray[np.bool_], totals: NDArray[np.float64]
) -> float:
    """
    Point-biserial correlation between a dichotomous outcome and total score.

    r = ((M1 - M0) / sd) * sqrt(n1 * n0 / n^2), with sd the population
    standard deviation of all totals. Defined as 0 when sd is 0, when
    either group is empty, or when fewer than two students are present.
    """
    n = len(outcomes)
    if n < 2:
        return 0.0

    n1 = int(np.count_nonzero(outcomes))
    n0 = n - n1
    if n1 == 0 or n0 == 0:
        return 0.0

    sd = float(np.std(totals))
    if sd == 0:
        return 0.0

    mean_1 = float(np.mean(totals[outcomes]))
    mean_0 = float(np.mean(totals[~outcomes]))
    r = ((mean_1 - mean_0) / sd) * math.sqrt(n1 * n0 / (n * n))
    return clamp(r, -1.0, 1.0)


def critical_value(confidence_level: float, degrees_of_freedom: int = 1) -> float:
    """Inverse chi-square CDF: 0.95 -> 3.841, 0.99 -> 6.635 at 1 df."""
    return float(stats.chi2.ppf(confidence_level, degrees_of_freedom))


def chance_proportion(n_options: int) -> float:
    if n_options < 2:
        raise ValueError(f"n_options must be >= 2, got {n_options}")
    return 1.0 / n_options


def chi_square_significance(
    n_correct: int,
    n_total: int,
    n_options: int,
    confidence_level: float,
) -> StatisticalSignificance:
    """
    Chi-square goodness-of-fit of correct/incorrect counts against chance.

    The chance baseline is 1 / n_options (1/2 for true/false). Small
    samples and small expected counts add warnings but never raise.

    Args:
        n_correct: Number of correct responses.
        n_total: Number of responses.
        n_options: Number of answer options.
        confidence_level: Confidence level for the critical value.

    Returns:
        The test result, with a Wald interval on the observed proportion.
    """
    expected_p = chance_proportion(n_options)
    critical = critical_value(confidence_level)
    warnings: list[str] = []

    if n_total < SMALL_SAMPLE_THRESHOLD:
        warnings.append(
            f"Sample size ({n_total}) < {SMALL_SAMPLE_THRESHOLD}: "
            "chi-square approximation may be unreliable"
        )

    if n_total == 0:
        return StatisticalSignificance(
            test_statistic=0.0,
            p_value=1.0,
            critical_value=critical,
            is_significant=False,
            expected_proportion=expected_p,
            confidence_interval=ConfidenceInterval(lower=0.0, upper=0.0),
            warnings=tuple(warnings),
        )

    n_incorrect = n_total - n_correct
    expected_correct = n_total * expected_p
    expected_incorrect = n_total * (1 - expected_p)

    if expected_correct < MIN_EXPECTED_FREQUENCY:
        warnings.append(
            f"Expected correct responses ({expected_correct:.1f}) "
            f"< {MIN_EXPECTED_FREQUENCY:.0f}"
        )
    if expected_incorrect < MIN_EXPECTED_FREQUENCY:
        warnings.append(
            f"Expected incorrect responses ({expected_incorrect:.1f}) "
            f"< {MIN_EXPECTED_FREQUENCY:.0f}"
        )

    statistic = (n_correct - expected_correct) ** 2 / expected_correct + (
        n_incorrect - expected_incorrect
    ) ** 2 / expected_incorrect
    p_value = float(stats.chi2.sf(statistic, 1))

    proportion = n_correct / n_total
    z = float(stats.norm.ppf(1 - (1 - confidence_level) / 2))
    margin = z * math.sqrt(proportion * (1 - proportion) / n_total)

    return StatisticalSignificance(
        test_statistic=float(statistic),
        p_value=clamp(p_value, 0.0, 1.0),
        critical_value=critical,
        is_significant=bool(statistic > critical),
        expected_proportion=expected_p,
        confidence_interval=ConfidenceInterval(
            lower=clamp(proportion - margin, 0.0, 1.0),
            upper=clamp(proportion + margin, 0.0, 1.0),
        ),
        warnings=tuple(warnings),
    )


def interpret_alpha(alpha: float) -> ReliabilityInterpretation:
    for threshold, label in ALPHA_THRESHOLDS:
        if alpha >= threshold:
            return label
    return ReliabilityInterpretation.UNACCEPTABLE


def cronbach_alpha(item_scores: NDArray[np.float64]) -> float | None:
    """
    Cronbach's alpha from a (n_students, n_items) item score matrix.

    alpha = k / (k - 1) * (1 - sum(item variances) / variance(total)),
    with the total taken as the row sum of item scores. Returns None with
    fewer than 3 students, fewer than 2 items, or zero total variance.
    """
    if item_scores.ndim != 2:
        raise ValueError(
            f"item_scores must be 2D, got shape {item_scores.shape}"
        )
    n_students, n_items = item_scores.shape
    if n_students < 3 or n_items < 2:
        return None

    total_variance = float(np.var(item_scores.sum(axis=1)))
    if total_variance == 0:
        return None

    item_variance_sum = float(np.var(item_scores, axis=0).sum())
    return (n_items / (n_items - 1)) * (1 - item_variance_sum / total_variance)


def reliability_metrics(
    item_scores: NDArray[np.float64],
) -> ReliabilityMetrics | None:
    alpha = cronbach_alpha(item_scores)
    if alpha is None:
        return None

    total_variance = float(np.var(item_scores.sum(axis=1)))
    standard_error = math.sqrt(total_variance * (1 - min(alpha, 1.0)))
    n_students, n_items = item_scores.shape
    return ReliabilityMetrics(
        cronbachs_alpha=alpha,
        standard_error=standard_error,
        interpretation=interpret_alpha(alpha),
        n_items=n_items,
        n_students=n_students,
    )


def score_distribution(scores: NDArray[np.float64]) -> ScoreDistribution:
    """
    Descriptive statistics of score proportions.

    Skewness needs at least 3 scores and kurtosis at least 4 (bias
    corrected sample estimators); both are None when undefined or when
    every score is the same.
    """
    if scores.size == 0:
        raise ValueError("score_distribution requires at least one score")

    variance = float(np.var(scores))
    skewness: float | None = None
    kurtosis: float | None = None
    if variance > 0:
        if scores.size >= 3:
            skewness = float(stats.skew(scores, bias=False))
        if scores.size >= 4:
            kurtosis = float(stats.kurtosis(scores, fisher=True, bias=False))

    q1, q2, q3 = np.percentile(scores, [25, 50, 75])
    return ScoreDistribution(
        mean=float(np.mean(scores)),
        median=float(np.median(scores)),
        variance=variance,
        standard_deviation=math.sqrt(variance),
        skewness=skewness,
        kurtosis=kurtosis,
        min=float(np.min(scores)),
        max=float(np.max(scores)),
        quartiles=(float(q1), float(q2), float(q3)),
    )
