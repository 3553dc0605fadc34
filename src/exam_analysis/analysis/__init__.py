from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.data_models import (
    AnalysisMetadata,
    AnalysisSummary,
    AnswerKeyEntry,
    BiPointAnalysisResult,
    DistractorAnalysis,
    DistractorOption,
    QuestionAnalysisResult,
    QuestionFailure,
    ReliabilityMetrics,
    ScoreDistribution,
    StatisticalSignificance,
    VariantAnalysisResult,
)
from exam_analysis.analysis.engine import analyze_by_variant, analyze_exam
from exam_analysis.analysis.exceptions import (
    AnalysisError,
    DuplicateVariantError,
    EmptyQuestionSetError,
    InsufficientSampleError,
)
from exam_analysis.analysis.percentile import (
    PercentileRange,
    StudentScore,
    apply_percentile_filter,
    filter_students_by_percentile,
)
from exam_analysis.analysis.statistics import (
    discrimination_group_size,
    discrimination_index,
    point_biserial,
)

__all__ = [
    "AnalysisConfig",
    "AnalysisError",
    "AnalysisMetadata",
    "AnalysisSummary",
    "analyze_by_variant",
    "analyze_exam",
    "AnswerKeyEntry",
    "apply_percentile_filter",
    "BiPointAnalysisResult",
    "discrimination_group_size",
    "discrimination_index",
    "DistractorAnalysis",
    "DistractorOption",
    "DuplicateVariantError",
    "EmptyQuestionSetError",
    "filter_students_by_percentile",
    "InsufficientSampleError",
    "PercentileRange",
    "point_biserial",
    "QuestionAnalysisResult",
    "QuestionFailure",
    "ReliabilityMetrics",
    "ScoreDistribution",
    "StatisticalSignificance",
    "StudentScore",
    "VariantAnalysisResult",
]
