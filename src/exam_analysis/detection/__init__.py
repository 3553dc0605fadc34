from exam_analysis.detection.config import FlaggingConfig, ModelConfig, RiskLevel
from exam_analysis.detection.data_models import FlaggedSubmission, FlaggingSummary
from exam_analysis.detection.identity import (
    MatchStrategy,
    ResolvedStudent,
    resolve_student,
)
from exam_analysis.detection.model import ModelInputs, predict_probability
from exam_analysis.detection.pipeline import (
    filter_by_probability,
    get_flagging_summary,
    process_submissions,
)
from exam_analysis.detection.regrading import (
    CrossVariantGrades,
    calculate_cross_variant_grades,
    cross_grade,
)
from exam_analysis.detection.similarity import (
    SimilarityMatrix,
    StudentKey,
    parse_student_key,
)

__all__ = [
    "calculate_cross_variant_grades",
    "cross_grade",
    "CrossVariantGrades",
    "filter_by_probability",
    "FlaggedSubmission",
    "FlaggingConfig",
    "FlaggingSummary",
    "get_flagging_summary",
    "MatchStrategy",
    "ModelConfig",
    "ModelInputs",
    "parse_student_key",
    "predict_probability",
    "process_submissions",
    "ResolvedStudent",
    "resolve_student",
    "RiskLevel",
    "SimilarityMatrix",
    "StudentKey",
]
