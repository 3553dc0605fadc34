"""
Configuration for item analysis runs.
"""

from dataclasses import dataclass

from exam_analysis.core.constants import DISCRIMINATION_GROUP_FRACTION

DEFAULT_MIN_SAMPLE_SIZE = 10
DEFAULT_CONFIDENCE_LEVEL = 0.95


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Settings for one item analysis run.

    Attributes:
        min_sample_size: Minimum number of eligible students. Runs with
            fewer students fail with InsufficientSampleError.
        confidence_level: Confidence level of the chi-square test.
            0.95 gives a critical value of 3.84, 0.99 gives 6.63.
        exclude_incomplete_data: Drop unfinished or partial submissions
            instead of treating missing answers as omitted.
        include_distractor_analysis: Compute per-option statistics.
        group_fraction: Share of students in each of the upper and lower
            groups of the discrimination index.
    """

    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    exclude_incomplete_data: bool = False
    include_distractor_analysis: bool = True
    group_fraction: float = DISCRIMINATION_GROUP_FRACTION

    def __post_init__(self) -> None:
        if self.min_sample_size < 1:
            raise ValueError(
                f"min_sample_size must be >= 1, got {self.min_sample_size}"
            )
        if not (0 < self.confidence_level < 1):
            raise ValueError(
                f"confidence_level must be in (0, 1), got {self.confidence_level}"
            )
        if not (0 < self.group_fraction <= 0.5):
            raise ValueError(
                f"group_fraction must be in (0, 0.5], got {self.group_fraction}"
            )
