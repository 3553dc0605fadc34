from pydantic import BaseModel, Field, model_validator

from exam_analysis.analysis.config import (
    DEFAULT_CONFIDENCE_LEVEL,
    DEFAULT_MIN_SAMPLE_SIZE,
    AnalysisConfig,
)
from exam_analysis.analysis.data_models import (
    BiPointAnalysisResult,
    VariantAnalysisResult,
)
from exam_analysis.core.data_models import ExamVariant, StudentResponse
from exam_analysis.detection.config import (
    DEFAULT_HIGH_PROBABILITY_THRESHOLD,
    DEFAULT_LOW_PROBABILITY_THRESHOLD,
    DEFAULT_MEDIUM_PROBABILITY_THRESHOLD,
    FlaggingConfig,
    ModelConfig,
)
from exam_analysis.detection.data_models import (
    FlaggedSubmission,
    FlaggingSummary,
)

# --- Request schemas ---


class AnalysisConfigSchema(BaseModel):
    min_sample_size: int = Field(default=DEFAULT_MIN_SAMPLE_SIZE, ge=1)
    confidence_level: float = Field(
        default=DEFAULT_CONFIDENCE_LEVEL, gt=0, lt=1
    )
    exclude_incomplete_data: bool = False
    include_distractor_analysis: bool = True

    def to_domain(self) -> AnalysisConfig:
        return AnalysisConfig(
            min_sample_size=self.min_sample_size,
            confidence_level=self.confidence_level,
            exclude_incomplete_data=self.exclude_incomplete_data,
            include_distractor_analysis=self.include_distractor_analysis,
        )


class AnalysisRequest(BaseModel):
    exam_variants: list[ExamVariant]
    student_responses: list[StudentResponse]
    config: AnalysisConfigSchema = AnalysisConfigSchema()
    exam_title: str | None = None
    include_variant_results: bool = True


class FlaggingConfigSchema(BaseModel):
    high_probability_threshold: float = Field(
        default=DEFAULT_HIGH_PROBABILITY_THRESHOLD, ge=0, le=1
    )
    medium_probability_threshold: float = Field(
        default=DEFAULT_MEDIUM_PROBABILITY_THRESHOLD, ge=0, le=1
    )
    low_probability_threshold: float = Field(
        default=DEFAULT_LOW_PROBABILITY_THRESHOLD, ge=0, le=1
    )

    @model_validator(mode="after")
    def validate_order(self) -> "FlaggingConfigSchema":
        if not (
            self.low_probability_threshold
            <= self.medium_probability_threshold
            <= self.high_probability_threshold
        ):
            raise ValueError("thresholds must satisfy low <= medium <= high")
        return self

    def to_domain(self) -> FlaggingConfig:
        return FlaggingConfig(
            high_probability_threshold=self.high_probability_threshold,
            medium_probability_threshold=self.medium_probability_threshold,
            low_probability_threshold=self.low_probability_threshold,
        )


class ScoringConfigSchema(BaseModel):
    invert_variant_similarity: bool = False

    def to_domain(self) -> ModelConfig:
        return ModelConfig(
            invert_variant_similarity=self.invert_variant_similarity
        )


class IntegrityRequest(BaseModel):
    variant_similarity: dict[str, dict[str, float]]
    response_similarity: dict[str, dict[str, float]]
    exam_result: BiPointAnalysisResult
    variant_results: list[VariantAnalysisResult] | None = None
    flagging_config: FlaggingConfigSchema = FlaggingConfigSchema()
    scoring_config: ScoringConfigSchema = ScoringConfigSchema()
    min_probability: float = Field(default=0.0, ge=0, le=1)

    def resolved_variant_results(self) -> list[VariantAnalysisResult]:
        """Explicit variant results, else those carried by the exam result."""
        if self.variant_results is not None:
            return self.variant_results
        return list(self.exam_result.variant_results or ())


# --- Response schemas ---


class IntegrityResponse(BaseModel):
    flagged: list[FlaggedSubmission]
    summary: FlaggingSummary


class ErrorDetail(BaseModel):
    code: str
    message: str
    request_id: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
