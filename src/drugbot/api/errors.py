"""
Exception handlers for the DrugBot API.

Every error leaves the API as ``{"error": message}``:

    400  invalid request (bad names, unknown tables/columns/types, missing fields)
    401  no caller identity on a report endpoint
    404  addressed record does not exist
    500  database failure or anything unexpected
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from drugbot.exceptions import (
    CascadeDeleteError,
    InvalidRequestError,
    ParentEntityNotFoundError,
    RecordNotFoundError,
    RepositoryError,
    UnknownAggregateTypeError,
    UnknownEntityTypeError,
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def invalid_request_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return error_response(400, str(exc))


async def not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return error_response(404, str(exc))


async def cascade_delete_handler(request: Request, exc: CascadeDeleteError) -> JSONResponse:
    logger.error(
        f"Cascading delete stopped at {exc.table} in {request.method} {request.url.path}; "
        f"already cleared: {exc.cleared_tables}"
    )
    message = f"{exc}: {exc.cause}" if exc.cause else str(exc)
    return error_response(500, message)


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    logger.error(f"Database error in {request.method} {request.url.path}: {exc}")
    return error_response(500, str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Invalid body for {request.method} {request.url.path}: {exc.errors()}")
    return error_response(400, "Invalid request parameters")


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log anything unhandled with its traceback and return a generic 500."""
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return error_response(500, "Internal server error")


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the DrugBot exception handlers on ``app``."""
    app.add_exception_handler(InvalidRequestError, invalid_request_handler)
    app.add_exception_handler(UnknownEntityTypeError, invalid_request_handler)
    app.add_exception_handler(UnknownAggregateTypeError, invalid_request_handler)
    app.add_exception_handler(ParentEntityNotFoundError, invalid_request_handler)
    app.add_exception_handler(RecordNotFoundError, not_found_handler)
    app.add_exception_handler(CascadeDeleteError, cascade_delete_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")
