"""Sales forecasting for pharmacy inventory.

Exports:
    Models:
        - SARIMAForecaster: Seasonal indices + linear trend
        - FlatAverageForecaster: Sparse-history fallback
        - forecast_series, select_forecaster: Stateless entry points
        - SARIMAParams, TimeSeriesObservation, SeasonalProfile, ForecastResult
        - FixedUncertainty, RandomUncertainty
        - ForecastEngineError, NotFittedError, InvalidPeriodsError,
          InvalidSeasonalLengthError

    Aggregation:
        - aggregate_sales, future_periods

    Service:
        - ForecastingService
"""

from pharmaforecast.features.forecasting.aggregation import aggregate_sales, future_periods
from pharmaforecast.features.forecasting.models import (
    ConfidenceInterval,
    FixedUncertainty,
    FlatAverageForecaster,
    ForecastEngineError,
    ForecastResult,
    InvalidPeriodsError,
    InvalidSeasonalLengthError,
    NotFittedError,
    RandomUncertainty,
    SARIMAForecaster,
    SARIMAParams,
    SeasonalProfile,
    TimeSeriesObservation,
    forecast_series,
    select_forecaster,
)
from pharmaforecast.features.forecasting.service import ForecastingService

__all__ = [
    "ConfidenceInterval",
    "FixedUncertainty",
    "FlatAverageForecaster",
    "ForecastEngineError",
    "ForecastResult",
    "ForecastingService",
    "InvalidPeriodsError",
    "InvalidSeasonalLengthError",
    "NotFittedError",
    "RandomUncertainty",
    "SARIMAForecaster",
    "SARIMAParams",
    "SeasonalProfile",
    "TimeSeriesObservation",
    "aggregate_sales",
    "forecast_series",
    "future_periods",
    "select_forecaster",
]
