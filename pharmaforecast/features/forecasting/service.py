"""Forecasting service.

Orchestrates:
- Aggregating sale line items into daily or monthly series
- Picking the forecaster (seasonal, or flat average for sparse history)
- Fitting and forecasting with a fresh forecaster per call
- Shaping dated forecast points, summaries, and forecast records

Engine errors (ForecastEngineError) propagate to the caller unchanged.
"""

from __future__ import annotations

import math
import time
from collections.abc import Sequence
from datetime import UTC, date, datetime

import pandas as pd
import structlog

from pharmaforecast.core.config import Settings, get_settings
from pharmaforecast.core.exceptions import InsufficientHistoryError
from pharmaforecast.features.forecasting.aggregation import (
    Cadence,
    aggregate_sales,
    future_periods,
)
from pharmaforecast.features.forecasting.models import (
    FixedUncertainty,
    FlatAverageForecaster,
    InvalidPeriodsError,
    RandomUncertainty,
    TimeSeriesObservation,
    UncertaintySource,
    select_forecaster,
)
from pharmaforecast.features.forecasting.schemas import (
    ConfidenceIntervalOut,
    ForecastPoint,
    ForecastRecord,
    ForecastResultOut,
    ForecastSummary,
    PeriodForecastRequest,
    SalesForecastRequest,
    SalesForecastResponse,
    SARIMAParamsConfig,
    SeriesForecastResponse,
)

logger = structlog.get_logger()

MONTHLY_SEASON_LENGTH = 12

PERIOD_MONTHS = {"monthly": 1, "quarterly": 3, "yearly": 12}


class ForecastingService:
    """Service for sales forecasts.

    Stateless apart from settings: every call builds its own forecaster, so
    one instance can serve concurrent requests.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the forecasting service.

        Args:
            settings: Settings override; defaults to the cached settings.
        """
        self.settings = settings or get_settings()

    def uncertainty_source(self) -> UncertaintySource:
        """Adjustment source for the flat-average fallback.

        Returns:
            Seeded RandomUncertainty when forecast_random_adjustment is on,
            otherwise a fixed 1.0.
        """
        if self.settings.forecast_random_adjustment:
            return RandomUncertainty(
                low=self.settings.forecast_adjustment_low,
                high=self.settings.forecast_adjustment_high,
                random_state=self.settings.forecast_random_seed,
            )
        return FixedUncertainty(1.0)

    def default_season_length(self, cadence: Cadence) -> int:
        if cadence == "monthly":
            return MONTHLY_SEASON_LENGTH
        return self.settings.forecast_seasonal_period

    def forecast_series(
        self,
        observations: Sequence[TimeSeriesObservation],
        periods: int,
        cadence: Cadence = "daily",
        params: SARIMAParamsConfig | None = None,
    ) -> SeriesForecastResponse:
        """Forecast an already-aggregated series.

        Args:
            observations: Series ascending by period.
            periods: Number of future periods.
            cadence: Period size of the series.
            params: SARIMA configuration; ``s`` defaults from the cadence.

        Returns:
            SeriesForecastResponse with dated forecast points.

        Raises:
            InvalidPeriodsError: If periods exceeds forecast_max_horizon.
            NotFittedError: If observations is empty.
            InvalidSeasonalLengthError: If the seasonal length is invalid.
        """
        start_time = time.perf_counter()

        if periods > self.settings.forecast_max_horizon:
            raise InvalidPeriodsError(
                f"periods={periods} exceeds the maximum horizon of "
                f"{self.settings.forecast_max_horizon}"
            )

        config = (params or SARIMAParamsConfig()).resolve(self.default_season_length(cadence))
        forecaster = select_forecaster(
            len(observations),
            config.to_params(),
            min_history=self.settings.forecast_min_history,
            uncertainty=self.uncertainty_source(),
            trend_window=self.settings.forecast_trend_window,
            interval_width=self.settings.forecast_interval_width,
        )

        logger.info(
            "forecasting.series_started",
            model_type=forecaster.model_type,
            cadence=cadence,
            n_observations=len(observations),
            periods=periods,
            config_hash=config.config_hash(),
        )

        result = forecaster.fit(observations).forecast(periods)
        labels = future_periods(observations[-1].period, periods, cadence)

        forecasts = [
            ForecastPoint(
                period=label,
                forecast=point,
                lower_bound=interval.lower,
                upper_bound=interval.upper,
            )
            for label, point, interval in zip(
                labels, result.predictions, result.confidence_intervals, strict=True
            )
        ]

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "forecasting.series_completed",
            model_type=forecaster.model_type,
            n_observations=len(observations),
            periods=periods,
            accuracy=result.accuracy,
            duration_ms=duration_ms,
        )

        return SeriesForecastResponse(
            model_type=forecaster.model_type,
            config_hash=config.config_hash(),
            cadence=cadence,
            n_observations=len(observations),
            forecasts=forecasts,
            result=ForecastResultOut(
                predictions=result.predictions,
                confidence_intervals=[
                    ConfidenceIntervalOut(lower=ci.lower, upper=ci.upper)
                    for ci in result.confidence_intervals
                ],
                seasonal_factors=result.seasonal_factors,
                accuracy=result.accuracy,
            ),
            duration_ms=duration_ms,
        )

    def forecast_sales(self, request: SalesForecastRequest) -> SalesForecastResponse:
        """Daily forecast for one medicine from its sale line items.

        Args:
            request: Medicine, horizon and sales.

        Returns:
            Series forecast with its summary.

        Raises:
            InsufficientHistoryError: If there are no sales.
        """
        series = aggregate_sales(request.sales, "daily")
        if not series:
            logger.warning(
                "forecasting.sales_rejected",
                medicine_id=request.medicine_id,
                reason="no_sales_history",
            )
            raise InsufficientHistoryError(
                f"No sales history for medicine {request.medicine_id}",
                details={"medicine_id": request.medicine_id},
            )

        period_days = request.period_days or self.settings.forecast_default_horizon
        confidence_level = (
            request.confidence_level or self.settings.forecast_default_confidence_level
        )
        forecast = self.forecast_series(series, period_days, "daily", request.params)

        start_date = date.fromisoformat(forecast.forecasts[0].period)
        end_date = date.fromisoformat(forecast.forecasts[-1].period)
        summary = ForecastSummary(
            medicine_id=request.medicine_id,
            medicine_name=request.medicine_name,
            period=f"{start_date} to {end_date}",
            start_date=start_date,
            end_date=end_date,
            total_forecasted_quantity=sum(forecast.result.predictions),
            confidence_level=confidence_level,
        )

        logger.info(
            "forecasting.sales_completed",
            medicine_id=request.medicine_id,
            days_of_history=len(series),
            total_forecasted_quantity=summary.total_forecasted_quantity,
        )

        return SalesForecastResponse(forecast=forecast, summary=summary)

    def forecast_period(
        self,
        request: PeriodForecastRequest,
        now: datetime | None = None,
    ) -> ForecastRecord:
        """Monthly quantity estimate for a monthly, quarterly or yearly window.

        Uses the flat average of monthly totals regardless of history
        length. Months between the first and last sale with no sales count
        as zero, so a gap month lowers the estimate rather than being
        skipped. Without any sales the configured default quantity is used.

        Args:
            request: Medicine, window and sales.
            now: Clock override for the record timestamp and default start.

        Returns:
            ForecastRecord ready to be persisted by the caller.
        """
        now = now or datetime.now(UTC)
        start_date = request.start_date or now.date()
        end_date = (
            pd.Timestamp(start_date) + pd.DateOffset(months=PERIOD_MONTHS[request.period])
        ).date()

        series = aggregate_sales(request.sales, "monthly")
        if series:
            forecaster = FlatAverageForecaster(
                seasonal_period_length=MONTHLY_SEASON_LENGTH,
                uncertainty=self.uncertainty_source(),
                interval_width=self.settings.forecast_interval_width,
            )
            estimate = forecaster.fit(series).forecast(1).predictions[0]
            # half-up rounding
            quantity = math.floor(estimate + 0.5)
        else:
            quantity = self.settings.forecast_default_quantity

        logger.info(
            "forecasting.period_completed",
            medicine_id=request.medicine_id,
            forecast_period=request.period,
            months_of_history=len(series),
            forecasted_quantity=quantity,
        )

        return ForecastRecord(
            medicine_id=request.medicine_id,
            start_date=start_date,
            end_date=end_date,
            forecast_period=request.period,
            forecasted_quantity=quantity,
            confidence_level=self.settings.forecast_period_confidence_level,
            created_at=now,
        )
