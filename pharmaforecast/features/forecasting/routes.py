"""Forecasting API routes."""

from fastapi import APIRouter, status

from pharmaforecast.core.exceptions import BadRequestError
from pharmaforecast.core.logging import get_logger
from pharmaforecast.features.forecasting.models import (
    ForecastEngineError,
    TimeSeriesObservation,
)
from pharmaforecast.features.forecasting.schemas import (
    ForecastRecord,
    PeriodForecastRequest,
    SalesForecastRequest,
    SalesForecastResponse,
    SeriesForecastRequest,
    SeriesForecastResponse,
)
from pharmaforecast.features.forecasting.service import ForecastingService

logger = get_logger(__name__)

router = APIRouter(prefix="/forecasting", tags=["forecasting"])


def _engine_error(exc: ForecastEngineError, **context: object) -> BadRequestError:
    logger.warning(
        "forecasting.request_failed",
        error=str(exc),
        error_type=type(exc).__name__,
        error_code=exc.code,
        **context,
    )
    return BadRequestError(message=str(exc), code=exc.code, details=dict(context))


@router.post(
    "/series",
    response_model=SeriesForecastResponse,
    status_code=status.HTTP_200_OK,
    summary="Forecast a pre-aggregated series",
    description="""
Forecast a daily or monthly series that the caller has already aggregated.

**Models:**
- `sarima`: seasonal indices + linear trend over the last 12 observations
- `flat_average`: mean of the history, used when fewer than
  `forecast_min_history` observations are supplied

**Confidence bands:** +/-15% of each point forecast.

**Gaps:** periods without activity must be sent as explicit zero values.
""",
)
async def forecast_series(request: SeriesForecastRequest) -> SeriesForecastResponse:
    """Forecast a caller-supplied series.

    Raises:
        BadRequestError: On engine errors (empty series, horizon too long).
    """
    logger.info(
        "forecasting.series_request_received",
        n_observations=len(request.observations),
        periods=request.periods,
        cadence=request.cadence,
    )

    observations = [
        TimeSeriesObservation(period=obs.period, value=obs.value) for obs in request.observations
    ]
    try:
        return ForecastingService().forecast_series(
            observations,
            request.periods,
            cadence=request.cadence,
            params=request.params,
        )
    except ForecastEngineError as e:
        raise _engine_error(e, periods=request.periods) from e


@router.post(
    "/sarima",
    response_model=SalesForecastResponse,
    status_code=status.HTTP_200_OK,
    summary="Forecast daily sales of a medicine",
    description="""
Aggregate a medicine's sale line items per day (UTC), fill missing days with
zero, and forecast `period_days` days ahead.

**Response:** the dated forecast plus a summary with the forecast window and
the total forecasted quantity.
""",
)
async def forecast_sales(request: SalesForecastRequest) -> SalesForecastResponse:
    """Forecast daily demand for one medicine.

    Raises:
        InsufficientHistoryError: If no sales are supplied.
        BadRequestError: On engine errors.
    """
    logger.info(
        "forecasting.sarima_request_received",
        medicine_id=request.medicine_id,
        n_sales=len(request.sales),
        period_days=request.period_days,
    )

    try:
        return ForecastingService().forecast_sales(request)
    except ForecastEngineError as e:
        raise _engine_error(e, medicine_id=request.medicine_id) from e


@router.post(
    "/period",
    response_model=ForecastRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Estimate monthly demand for a planning window",
    description="""
Average monthly sales of a medicine and return a forecast record for a
`monthly`, `quarterly` or `yearly` window. Without sales history the
configured default quantity is returned.
""",
)
async def forecast_period(request: PeriodForecastRequest) -> ForecastRecord:
    """Build a forecast record for a planning window."""
    logger.info(
        "forecasting.period_request_received",
        medicine_id=request.medicine_id,
        period=request.period,
        n_sales=len(request.sales),
    )

    try:
        return ForecastingService().forecast_period(request)
    except ForecastEngineError as e:
        raise _engine_error(e, medicine_id=request.medicine_id) from e
