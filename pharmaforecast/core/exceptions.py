"""Application exceptions and FastAPI exception handlers.

Every error leaves the service as an RFC 7807 Problem Details body.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from pharmaforecast.core.logging import get_logger
from pharmaforecast.core.problem_details import ProblemDetailResponse, problem_response

logger = get_logger(__name__)


# =============================================================================
# Exception Classes
# =============================================================================


class PharmaForecastError(Exception):
    """Base exception for application errors.

    Each subclass carries the HTTP status and machine-readable code it maps to.
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application error.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            status_code: HTTP status code.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    @property
    def title(self) -> str:
        """RFC 7807 title derived from the error code."""
        return self.code.replace("_", " ").title()


class BadRequestError(PharmaForecastError):
    """Request understood but cannot be forecast.

    ``code`` may be narrowed to a forecasting error code (``NOT_FITTED``,
    ``INVALID_PERIODS``, ...) so clients can branch on it.
    """

    def __init__(
        self,
        message: str = "Bad request",
        code: str = "BAD_REQUEST",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details,
        )


class InsufficientHistoryError(BadRequestError):
    """No sales history to forecast from."""

    def __init__(
        self,
        message: str = "Not enough historical sales data for forecasting",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code="INSUFFICIENT_HISTORY", details=details)


# =============================================================================
# Exception Handlers (RFC 7807)
# =============================================================================


async def pharmaforecast_exception_handler(
    _request: Request,
    exc: PharmaForecastError,
) -> ProblemDetailResponse:
    """Render a PharmaForecastError as Problem Details."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app.error_handled",
        error=exc.message,
        error_type=type(exc).__name__,
        error_code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
    )

    return problem_response(
        status=exc.status_code,
        title=exc.title,
        detail=exc.message,
        error_code=exc.code,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> ProblemDetailResponse:
    """Render request validation failures with per-field errors.

    Args:
        request: FastAPI request object.
        exc: Pydantic validation error.

    Returns:
        422 Problem Details response with an ``errors`` list.
    """
    field_errors: list[dict[str, str]] = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = ".".join(str(part) for part in loc if part != "body")
        field_errors.append(
            {
                "field": field_path,
                "message": str(error.get("msg", "Validation failed")),
                "type": str(error.get("type", "unknown")),
            }
        )

    logger.warning(
        "app.validation_error",
        error_count=len(field_errors),
        path=request.url.path,
        fields=[e["field"] for e in field_errors],
    )

    return problem_response(
        status=422,
        title="Validation Error",
        detail=f"Request validation failed with {len(field_errors)} error(s).",
        error_code="VALIDATION_ERROR",
        errors=field_errors,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> ProblemDetailResponse:
    """Render anything unexpected as a 500 without leaking internals."""
    logger.error(
        "app.unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )

    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred. Contact support with the request_id.",
        error_code="INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the Problem Details handlers on the app."""
    app.add_exception_handler(PharmaForecastError, pharmaforecast_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
