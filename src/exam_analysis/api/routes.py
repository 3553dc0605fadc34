import logging

from fastapi import APIRouter, Depends

from exam_analysis.analysis.data_models import BiPointAnalysisResult
from exam_analysis.analysis.engine import analyze_exam
from exam_analysis.api.config import ApiSettings
from exam_analysis.api.dependencies import get_app_settings, get_version
from exam_analysis.api.errors import DataSizeExceededError
from exam_analysis.api.schemas import (
    AnalysisRequest,
    HealthResponse,
    IntegrityRequest,
    IntegrityResponse,
)
from exam_analysis.detection.pipeline import (
    filter_by_probability,
    get_flagging_summary,
    process_submissions,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def _validate_analysis_size(
    request: AnalysisRequest, settings: ApiSettings
) -> None:
    n_students = len(request.student_responses)
    n_variants = len(request.exam_variants)
    n_questions = len(
        {q.id for v in request.exam_variants for q in v.questions}
    )

    if n_students > settings.max_students:
        raise DataSizeExceededError(
            f"n_students={n_students} exceeds max={settings.max_students}"
        )
    if n_questions > settings.max_questions:
        raise DataSizeExceededError(
            f"n_questions={n_questions} exceeds max={settings.max_questions}"
        )
    if n_variants > settings.max_variants:
        raise DataSizeExceededError(
            f"n_variants={n_variants} exceeds max={settings.max_variants}"
        )


def _validate_integrity_size(
    request: IntegrityRequest, settings: ApiSettings
) -> None:
    students = set(request.response_similarity)
    for row in request.response_similarity.values():
        students.update(row)
    n_students = len(students)
    n_pairs = n_students * (n_students - 1) // 2

    if n_students > settings.max_students:
        raise DataSizeExceededError(
            f"n_students={n_students} exceeds max={settings.max_students}"
        )
    if n_pairs > settings.max_pairs:
        raise DataSizeExceededError(
            f"n_pairs={n_pairs} exceeds max={settings.max_pairs}"
        )


@router.post("/analysis")
def run_analysis(
    request: AnalysisRequest,
    settings: ApiSettings = Depends(get_app_settings),
) -> BiPointAnalysisResult:
    _validate_analysis_size(request, settings)
    return analyze_exam(
        request.exam_variants,
        request.student_responses,
        request.config.to_domain(),
        exam_title=request.exam_title,
        include_variant_results=request.include_variant_results,
    )


@router.post("/integrity")
def run_integrity_flagging(
    request: IntegrityRequest,
    settings: ApiSettings = Depends(get_app_settings),
) -> IntegrityResponse:
    _validate_integrity_size(request, settings)
    flagged = process_submissions(
        request.variant_similarity,
        request.response_similarity,
        request.exam_result,
        request.resolved_variant_results(),
        request.flagging_config.to_domain(),
        request.scoring_config.to_domain(),
    )
    flagged = filter_by_probability(flagged, request.min_probability)
    logger.info(
        f"{len(flagged)} pairs at or above probability {request.min_probability}"
    )
    return IntegrityResponse(
        flagged=flagged, summary=get_flagging_summary(flagged)
    )


@router.get("/health")
async def health_check(
    version: str = Depends(get_version),
) -> HealthResponse:
    return HealthResponse(version=version)
