import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from exam_analysis.analysis.exceptions import (
    DuplicateVariantError,
    EmptyQuestionSetError,
    InsufficientSampleError,
)
from exam_analysis.api.schemas import ErrorDetail

logger = logging.getLogger(__name__)


class DataSizeExceededError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _get_request_id(request: Request) -> str | None:
    if hasattr(request.state, "request_id"):
        result: str = request.state.request_id
        return result
    return None


async def data_size_exceeded_handler(
    request: Request, exc: DataSizeExceededError
) -> JSONResponse:
    detail = ErrorDetail(
        code="DATA_SIZE_EXCEEDED",
        message=exc.message,
        request_id=_get_request_id(request),
    )
    return JSONResponse(status_code=422, content=detail.model_dump())


async def insufficient_sample_handler(
    request: Request, exc: InsufficientSampleError
) -> JSONResponse:
    detail = ErrorDetail(
        code="INSUFFICIENT_SAMPLE",
        message=str(exc),
        request_id=_get_request_id(request),
    )
    return JSONResponse(status_code=422, content=detail.model_dump())


async def duplicate_variant_handler(
    request: Request, exc: DuplicateVariantError
) -> JSONResponse:
    detail = ErrorDetail(
        code="DUPLICATE_VARIANT",
        message=str(exc),
        request_id=_get_request_id(request),
    )
    return JSONResponse(status_code=422, content=detail.model_dump())


async def empty_question_set_handler(
    request: Request, exc: EmptyQuestionSetError
) -> JSONResponse:
    detail = ErrorDetail(
        code="EMPTY_QUESTION_SET",
        message=str(exc),
        request_id=_get_request_id(request),
    )
    return JSONResponse(status_code=422, content=detail.model_dump())


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    detail = ErrorDetail(
        code="VALIDATION_ERROR",
        message=str(exc),
        request_id=_get_request_id(request),
    )
    return JSONResponse(status_code=422, content=detail.model_dump())


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.exception("Unhandled exception")
    detail = ErrorDetail(
        code="INTERNAL_ERROR",
        message="Internal server error",
        request_id=_get_request_id(request),
    )
    return JSONResponse(status_code=500, content=detail.model_dump())
