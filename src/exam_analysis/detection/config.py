"""
Configuration for integrity flagging.

FlaggingConfig only drives display bucketing of probabilities; it never
changes how a pair is scored. ModelConfig changes the scoring model.
"""

from dataclasses import dataclass
from enum import StrEnum

DEFAULT_HIGH_PROBABILITY_THRESHOLD = 0.8
DEFAULT_MEDIUM_PROBABILITY_THRESHOLD = 0.7
DEFAULT_LOW_PROBABILITY_THRESHOLD = 0.5


class RiskLevel(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass(frozen=True)
class FlaggingConfig:
    """
    Probability thresholds for the high/medium/low risk buckets.

    Attributes:
        high_probability_threshold: Lower bound of the high bucket.
        medium_probability_threshold: Lower bound of the medium bucket.
        low_probability_threshold: Lower bound of the low bucket.
    """

    high_probability_threshold: float = DEFAULT_HIGH_PROBABILITY_THRESHOLD
    medium_probability_threshold: float = DEFAULT_MEDIUM_PROBABILITY_THRESHOLD
    low_probability_threshold: float = DEFAULT_LOW_PROBABILITY_THRESHOLD

    def __post_init__(self) -> None:
        thresholds = (
            self.low_probability_threshold,
            self.medium_probability_threshold,
            self.high_probability_threshold,
        )
        if any(not (0 <= t <= 1) for t in thresholds):
            raise ValueError("probability thresholds must be in [0, 1]")
        if not (
            self.low_probability_threshold
            <= self.medium_probability_threshold
            <= self.high_probability_threshold
        ):
            raise ValueError(
                "thresholds must satisfy low <= medium <= high"
            )

    def classify(self, probability: float) -> RiskLevel:
        if probability >= self.high_probability_threshold:
            return RiskLevel.HIGH
        if probability >= self.medium_probability_threshold:
            return RiskLevel.MEDIUM
        if probability >= self.low_probability_threshold:
            return RiskLevel.LOW
        return RiskLevel.NONE


@dataclass(frozen=True)
class ModelConfig:
    """
    Attributes:
        invert_variant_similarity: Score with 1 - variant similarity, so
            pairs that share little seating/order similarity yet answer
            alike rank as more suspicious.
    """

    invert_variant_similarity: bool = False
