import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from exam_analysis.analysis.data_models import (
    DistractorAnalysis,
    DistractorOption,
)
from exam_analysis.analysis.statistics import (
    discrimination_index,
    point_biserial,
)
from exam_analysis.core.constants import (
    DISCRIMINATION_GROUP_FRACTION,
    OMITTED_LABEL,
)

logger = logging.getLogger(__name__)


def _option_stats(
    label: str,
    selected: NDArray[np.bool_],
    totals: NDArray[np.float64],
    fraction: float,
    is_correct: bool,
) -> DistractorOption:
    n = len(selected)
    frequency = int(np.count_nonzero(selected))
    return DistractorOption(
        option=label,
        frequency=frequency,
        proportion=frequency / n if n else 0.0,
        discrimination_index=discrimination_index(selected, totals, fraction),
        point_biserial_correlation=point_biserial(selected, totals),
        is_correct=is_correct,
    )


def analyze_distractors(
    answers: Sequence[str | None],
    totals: NDArray[np.float64],
    options: Sequence[str],
    correct_answer: str,
    fraction: float = DISCRIMINATION_GROUP_FRACTION,
) -> DistractorAnalysis:
    """
    Per-option statistics for one question.

    Each option gets its own discrimination index and point-biserial
    correlation, keyed on "selected this option" vs not. Blank answers
    form the omitted bucket. Answers matching no listed option count
    towards the total but get no entry.

    Args:
        answers: Canonical answer per student, None for omitted.
        totals: Total score per student, aligned with ``answers``.
        options: Listed option texts.
        correct_answer: Canonical text of the key.
        fraction: Group fraction for the discrimination index.

    Returns:
        The distractor breakdown.
    """
    correct_option: DistractorOption | None = None
    distractors: list[DistractorOption] = []

    for option in options:
        selected = np.array([a == option for a in answers], dtype=np.bool_)
        is_correct = option == correct_answer
        entry = _option_stats(option, selected, totals, fraction, is_correct)
        if is_correct:
            correct_option = entry
        else:
            distractors.append(entry)

    omitted_mask = np.array([a is None for a in answers], dtype=np.bool_)
    omitted = _option_stats(
        OMITTED_LABEL, omitted_mask, totals, fraction, is_correct=False
    )

    listed = set(options)
    unlisted = sum(1 for a in answers if a is not None and a not in listed)
    if unlisted:
        logger.debug(f"{unlisted} answers match no listed option")

    return DistractorAnalysis(
        distractors=tuple(distractors),
        correct_option=correct_option,
        omitted=omitted,
        omitted_responses=omitted.frequency,
        omitted_proportion=omitted.proportion,
    )
