"""Exception-to-HTTP mapping shared by every router."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config.settings import get_config
from database.exceptions import (
    DatabaseError,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
    RequestTimeoutError,
    ServiceUnavailableError,
)
from entry.messages import DEFAULT_ERROR_MESSAGE, get_error_message
from entry.steps import field_errors
from entry.workflow import WorkflowError

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Credential or session failure, identified by an `auth/...` code."""

    def __init__(self, code: str, message: str = None):
        self.code = code
        super().__init__(message or get_error_message(code=code))


STATUS_BY_ERROR = [
    (NotFoundError, 404),
    (PermissionDeniedError, 403),
    (DuplicateError, 409),
    (IntegrityError, 400),
    (ServiceUnavailableError, 503),
    (RequestTimeoutError, 504),
    (RateLimitedError, 429),
]


def status_for(exc: DatabaseError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def report_error(exc: BaseException) -> None:
    """Log, and outside development mark the error for external reporting."""
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    if not get_config().is_development():
        # TODO: forward to an error-reporting service once one is chosen
        logger.info("Error flagged for external reporting: %s", type(exc).__name__)


def recovery_payload(message: str = DEFAULT_ERROR_MESSAGE) -> dict:
    return {
        "detail": message,
        "code": "internal",
        "recovery": {
            "message": "Please reload the page or try again in a moment.",
            "actions": ["retry", "reload"],
        },
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        status = status_for(exc)
        if status == 500:
            report_error(exc)
            return JSONResponse(status_code=500, content=recovery_payload())
        logger.warning("%s %s -> %d (%s): %s", request.method, request.url.path,
                       status, exc.code, exc)
        return JSONResponse(
            status_code=status,
            content={"detail": get_error_message(exc), "code": exc.code,
                     "retryable": exc.retryable},
        )

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        logger.warning("Auth failure on %s: %s", request.url.path, exc.code)
        return JSONResponse(status_code=401, content={"detail": str(exc), "code": exc.code})

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError):
        logger.info("Rejected entry operation on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=409, content={"detail": str(exc), "code": "workflow"})

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError):
        logger.info("Validation failed on %s", request.url.path)
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation failed", "errors": field_errors(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = {}
        for item in exc.errors():
            key = ".".join(str(part) for part in item["loc"])
            errors.setdefault(key, item["msg"])
        logger.info("Invalid request on %s: %s", request.url.path, sorted(errors))
        return JSONResponse(
            status_code=422, content={"detail": "Validation failed", "errors": errors}
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        report_error(exc)
        return JSONResponse(status_code=500, content=recovery_payload())
