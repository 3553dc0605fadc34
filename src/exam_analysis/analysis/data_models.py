"""
Result records produced by the item analysis engine.

All records are frozen pydantic models so results can be cached,
compared or serialized with ``model_dump_json``.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.core.data_models import QuestionType, StudentResponse


class ReliabilityInterpretation(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    QUESTIONABLE = "questionable"
    POOR = "poor"
    UNACCEPTABLE = "unacceptable"


class DistractorOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    option: str
    frequency: int = Field(ge=0)
    proportion: float = Field(ge=0, le=1)
    discrimination_index: float = Field(ge=-1, le=1)
    point_biserial_correlation: float = Field(ge=-1, le=1)
    is_correct: bool = False


class DistractorAnalysis(BaseModel):
    """
    Per-option breakdown of one question.

    Attributes:
        distractors: Every listed option other than the key, including
            options nobody chose.
        correct_option: Statistics of the key, or None if the key is not
            among the listed options.
        omitted: Statistics of the blank-answer bucket.
        omitted_responses: Number of blank answers.
        omitted_proportion: Share of blank answers.
    """

    model_config = ConfigDict(frozen=True)

    distractors: tuple[DistractorOption, ...]
    correct_option: DistractorOption | None
    omitted: DistractorOption
    omitted_responses: int = Field(ge=0)
    omitted_proportion: float = Field(ge=0, le=1)


class ConfidenceInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    lower: float
    upper: float


class StatisticalSignificance(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_statistic: float
    p_value: float = Field(ge=0, le=1)
    critical_value: float
    degrees_of_freedom: int = 1
    is_significant: bool
    expected_proportion: float = Field(ge=0, le=1)
    confidence_interval: ConfidenceInterval
    warnings: tuple[str, ...] = ()


class ReliabilityMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    cronbachs_alpha: float
    standard_error: float
    interpretation: ReliabilityInterpretation
    n_items: int
    n_students: int


class ScoreDistribution(BaseModel):
    """Distribution of total_score / max_possible_score across students."""

    model_config = ConfigDict(frozen=True)

    mean: float
    median: float
    variance: float
    standard_deviation: float
    skewness: float | None
    kurtosis: float | None
    min: float
    max: float
    quartiles: tuple[float, float, float]


class AnalysisSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_difficulty: float
    average_discrimination: float
    average_point_biserial: float
    score_distribution: ScoreDistribution
    reliability: ReliabilityMetrics | None
    question_count: int


class QuestionAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    question_text: str
    question_type: QuestionType
    total_responses: int = Field(ge=0)
    correct_responses: int = Field(ge=0)
    difficulty_index: float = Field(ge=0, le=1)
    discrimination_index: float = Field(ge=-1, le=1)
    point_biserial_correlation: float = Field(ge=-1, le=1)
    distractor_analysis: DistractorAnalysis | None
    statistical_significance: StatisticalSignificance


class QuestionFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    reason: str


class AnswerKeyEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    question_type: QuestionType
    options: tuple[str, ...]
    correct_answer: str


class AnalysisMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_students: int
    total_variants: int
    analysis_date: datetime
    sample_size: int
    excluded_students: int
    student_responses: tuple[StudentResponse, ...]
    failed_questions: tuple[QuestionFailure, ...] = ()
    warnings: tuple[str, ...] = ()


class VariantAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant_code: str
    student_count: int
    question_results: tuple[QuestionAnalysisResult, ...]
    summary: AnalysisSummary
    answer_key: dict[str, AnswerKeyEntry]
    student_responses: tuple[StudentResponse, ...]


class BiPointAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    exam_id: str | None
    exam_title: str | None
    analysis_config: AnalysisConfig
    question_results: tuple[QuestionAnalysisResult, ...]
    summary: AnalysisSummary
    metadata: AnalysisMetadata
    variant_results: tuple[VariantAnalysisResult, ...] | None = None
