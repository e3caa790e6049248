"""
Exception handlers for the FastAPI application.

Assessment errors are rendered as ``{error, message, retryable}`` with the
status code of their kind. Messages come from ``user_message``; internal
detail stays in the logs.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse, Response
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_CONTENT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from practiceboard.domain.exceptions import AssessmentError, AssessmentErrorKind

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[AssessmentErrorKind, int] = {
    AssessmentErrorKind.CATALOG_UNAVAILABLE: HTTP_503_SERVICE_UNAVAILABLE,
    AssessmentErrorKind.CONFIGURATION: HTTP_500_INTERNAL_SERVER_ERROR,
    AssessmentErrorKind.FETCH_FAILED: HTTP_503_SERVICE_UNAVAILABLE,
    AssessmentErrorKind.TEMPLATE_NOT_FOUND: HTTP_404_NOT_FOUND,
    AssessmentErrorKind.NOT_FOUND: HTTP_404_NOT_FOUND,
    AssessmentErrorKind.ASSIGNMENT_FAILED: HTTP_502_BAD_GATEWAY,
    AssessmentErrorKind.INVALID_TRANSITION: HTTP_409_CONFLICT,
    AssessmentErrorKind.INVALID_REQUEST: HTTP_422_UNPROCESSABLE_CONTENT,
}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the assessment error handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(
        AssessmentError,
        cast(Callable[[Request, Exception], Awaitable[Response]], assessment_error_handler),
    )
    app.add_exception_handler(
        Exception,
        cast(Callable[[Request, Exception], Awaitable[Response]], unhandled_exception_handler),
    )
    logger.info("Assessment exception handlers registered")


async def assessment_error_handler(request: Request, exc: AssessmentError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(exc.kind, HTTP_500_INTERNAL_SERVER_ERROR)
    log = logger.error if status_code >= HTTP_500_INTERNAL_SERVER_ERROR else logger.info
    log(f"{request.method} {request.url.path} -> {status_code} {exc.kind.value}: {exc}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = str(uuid.uuid4())
    logger.error(
        f"Unhandled error {error_id} on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred.",
            "retryable": False,
            "error_id": error_id,
        },
    )
