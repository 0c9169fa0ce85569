"""Exception handlers mapping domain errors onto HTTP responses."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.v1.schemas.common import ErrorResponse, FieldError
from core.config import Settings
from core.exceptions import AppException, ErrorCode

logger = structlog.get_logger()


def error_response(
    status_code: int, error_code: str, message: str, details: Any = None
) -> ORJSONResponse:
    """Render the shared error envelope."""
    body = ErrorResponse(error_code=error_code, message=message, details=details)
    return ORJSONResponse(status_code=status_code, content=body.model_dump())


def setup_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> ORJSONResponse:
        # Upstream failures are ours to investigate; the rest are client mistakes.
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "app_exception",
            error_code=exc.error_code.value,
            message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return error_response(exc.status_code, exc.error_code.value, exc.message, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Malformed requests are plain 400s, never 422s."""
        errors = [
            FieldError(
                field=".".join(str(part) for part in error["loc"]),
                message=error["msg"],
                type=error["type"],
            ).model_dump()
            for error in exc.errors()
        ]
        logger.info("validation_error", errors=errors)
        return error_response(
            400, ErrorCode.VALIDATION_ERROR.value, "Request validation failed", errors
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=request_id,
            exc_info=True,
        )

        message = "An unexpected error occurred" if settings.is_production else str(exc)
        return error_response(
            500, ErrorCode.INTERNAL_ERROR.value, message, {"request_id": request_id}
        )
