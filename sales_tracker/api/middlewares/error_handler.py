"""
Error handling middleware for the API

Provides centralized error handling and consistent error responses.
"""

from fastapi import Request, status, FastAPI
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
import logging
import traceback
import uuid

from sales_tracker.core.errors import ErrorCategory, SalesTrackerError
from sales_tracker.core.report_engine import utc_now

# Configure logging
logger = logging.getLogger(__name__)

# HTTP status per domain error category
CATEGORY_STATUS = {
    ErrorCategory.DATA_VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.EMPTY_BATCH: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.IDENTIFIER_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.FILE_PROCESSING: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def _error_body(request: Request, error_id: str, status_code: int, error_type: str, message) -> dict:
    return {
        "error_id": error_id,
        "timestamp": utc_now().strftime("%Y-%m-%d %H:%M:%S"),
        "status": status_code,
        "type": error_type,
        "message": message,
        "path": str(request.url)
    }


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors in a user-friendly way
    """
    error_id = str(uuid.uuid4())

    errors = [
        {
            "location": list(error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]

    logger.warning(
        f"Validation error {error_id}: URL: {request.url} - Errors: {errors}"
    )

    body = _error_body(request, error_id, 422, "validation_error", "Request validation failed")
    body["errors"] = errors
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body)


async def sales_tracker_exception_handler(request: Request, exc: SalesTrackerError):
    """
    Map domain errors onto 400 and 404 responses
    """
    error_id = str(uuid.uuid4())
    status_code = CATEGORY_STATUS.get(exc.category, status.HTTP_400_BAD_REQUEST)

    logger.warning(
        f"{exc.category.value} error {error_id}: {exc.message} - URL: {request.url}"
    )

    return JSONResponse(
        status_code=status_code,
        content=_error_body(request, error_id, status_code, exc.category.value, exc.message)
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions with consistent response format
    """
    error_id = str(uuid.uuid4())

    # Log the error with different levels based on status code
    if exc.status_code >= 500:
        logger.error(
            f"HTTP error {error_id}: {exc.status_code} {exc.detail} - URL: {request.url}"
        )
    elif exc.status_code >= 400:
        logger.warning(
            f"HTTP error {error_id}: {exc.status_code} {exc.detail} - URL: {request.url}"
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, error_id, exc.status_code, "http_error", exc.detail),
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Catch-all exception handler for unhandled exceptions
    """
    error_id = str(uuid.uuid4())

    logger.error(
        f"Unhandled exception {error_id}: {str(exc)} - URL: {request.url}"
    )
    logger.error(traceback.format_exc())

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            request, error_id, 500, "server_error", "An unexpected error occurred"
        )
    )


def add_exception_handlers(app: FastAPI):
    """
    Add all exception handlers to the FastAPI app

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SalesTrackerError, sales_tracker_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
