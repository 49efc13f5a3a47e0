"""Exception handlers translating domain errors into stable status codes and messages."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import (
    AppError,
    AuthenticationError,
    InternalError,
    ValidationError,
    field_errors,
)

logger = logging.getLogger(__name__)


def error_response(exc: AppError) -> JSONResponse:
    body: dict = {"message": exc.message}
    headers = None
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed: %s",
            exc.message,
            exc_info=exc.__cause__ or exc,
            extra={"path": request.url.path},
        )
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(ValidationError(errors=field_errors(exc.errors())))


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Database error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return error_response(InternalError("Internal server error."))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
