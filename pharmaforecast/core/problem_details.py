"""RFC 7807 Problem Details responses.

Forecast clients (the pharmacy dashboard, procurement jobs) branch on the
``code`` field, so every error the service returns goes through here.

Reference: https://datatracker.ietf.org/doc/html/rfc7807
"""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from pharmaforecast.core.logging import request_id_ctx

ERROR_TYPE_BASE = "/errors"

ERROR_TYPES = {
    "BAD_REQUEST": f"{ERROR_TYPE_BASE}/bad-request",
    "VALIDATION_ERROR": f"{ERROR_TYPE_BASE}/validation",
    "NOT_FITTED": f"{ERROR_TYPE_BASE}/not-fitted",
    "INVALID_PERIODS": f"{ERROR_TYPE_BASE}/invalid-periods",
    "INVALID_SEASONAL_LENGTH": f"{ERROR_TYPE_BASE}/invalid-seasonal-length",
    "INSUFFICIENT_HISTORY": f"{ERROR_TYPE_BASE}/insufficient-history",
    "INTERNAL_ERROR": f"{ERROR_TYPE_BASE}/internal",
}


class ProblemDetail(BaseModel):
    """RFC 7807 problem body.

    Attributes:
        type: URI identifying the error category.
        title: Short summary of the problem type.
        status: HTTP status code.
        detail: Explanation specific to this occurrence.
        instance: URI for this occurrence (derived from the request ID).
        errors: Field-level validation errors (422 only).
        code: Machine-readable error code.
        request_id: Request correlation ID.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="about:blank", description="Problem type URI")
    title: str = Field(..., description="Short summary of the problem type")
    status: int = Field(..., ge=400, le=599, description="HTTP status code")
    detail: str | None = Field(None, description="Occurrence-specific explanation")
    instance: str | None = Field(None, description="URI of this occurrence")
    errors: list[dict[str, Any]] | None = Field(None, description="Field-level errors")
    code: str | None = Field(None, description="Machine-readable error code")
    request_id: str | None = Field(None, description="Request correlation ID")


class ProblemDetailResponse(JSONResponse):
    """JSON response with the problem+json media type."""

    media_type = "application/problem+json"


def create_problem_detail(
    status: int,
    title: str,
    detail: str | None = None,
    error_code: str = "INTERNAL_ERROR",
    errors: list[dict[str, Any]] | None = None,
) -> ProblemDetail:
    """Build a ProblemDetail with type URI and request correlation filled in.

    Args:
        status: HTTP status code.
        title: Short problem summary.
        detail: Detailed explanation.
        error_code: Error code used to look up the type URI.
        errors: Field-level validation errors.

    Returns:
        ProblemDetail instance.
    """
    request_id = request_id_ctx.get()

    return ProblemDetail(
        type=ERROR_TYPES.get(error_code, f"{ERROR_TYPE_BASE}/{error_code.lower()}"),
        title=title,
        status=status,
        detail=detail,
        instance=f"/requests/{request_id}" if request_id else None,
        errors=errors,
        code=error_code,
        request_id=request_id,
    )


def problem_response(
    status: int,
    title: str,
    detail: str | None = None,
    error_code: str = "INTERNAL_ERROR",
    errors: list[dict[str, Any]] | None = None,
) -> ProblemDetailResponse:
    """Wrap a ProblemDetail in a problem+json response."""
    problem = create_problem_detail(
        status=status,
        title=title,
        detail=detail,
        error_code=error_code,
        errors=errors,
    )

    return ProblemDetailResponse(
        status_code=status,
        content=problem.model_dump(exclude_none=True),
    )
