"""Tests for application exceptions and Problem Details rendering."""

from pharmaforecast.core.exceptions import (
    BadRequestError,
    InsufficientHistoryError,
    PharmaForecastError,
)
from pharmaforecast.core.logging import request_id_ctx
from pharmaforecast.core.problem_details import create_problem_detail


def test_bad_request_defaults():
    """BadRequestError maps to 400 with the generic code."""
    error = BadRequestError()

    assert error.status_code == 400
    assert error.code == "BAD_REQUEST"
    assert error.title == "Bad Request"


def test_bad_request_accepts_forecast_code():
    """Forecast error codes pass through for client branching."""
    error = BadRequestError("Model must be fitted", code="NOT_FITTED")

    assert error.code == "NOT_FITTED"
    assert error.title == "Not Fitted"
    assert isinstance(error, PharmaForecastError)


def test_insufficient_history_error():
    """InsufficientHistoryError is a 400 with its own code."""
    error = InsufficientHistoryError(details={"medicine_id": "med-1"})

    assert error.status_code == 400
    assert error.code == "INSUFFICIENT_HISTORY"
    assert error.details == {"medicine_id": "med-1"}


def test_problem_detail_uses_request_id():
    """Problem details carry the current request ID as instance."""
    token = request_id_ctx.set("abc")
    try:
        problem = create_problem_detail(status=400, title="Not Fitted", error_code="NOT_FITTED")
    finally:
        request_id_ctx.reset(token)

    assert problem.type == "/errors/not-fitted"
    assert problem.instance == "/requests/abc"
    assert problem.request_id == "abc"


def test_problem_detail_unknown_code_type_uri():
    """Unknown codes get a derived type URI."""
    problem = create_problem_detail(status=400, title="Odd", error_code="SOMETHING_ODD")

    assert problem.type == "/errors/something_odd"
