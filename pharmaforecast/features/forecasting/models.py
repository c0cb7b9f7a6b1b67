"""Seasonal sales forecasters.

Two forecasters share one interface:

- SARIMAForecaster: multiplicative seasonal indices + linear trend over the
  most recent observations. It accepts the full SARIMA order set
  (p, d, q, P, D, Q, s) but only ``s`` changes the output; the trend term
  stands in for ``d``. The remaining orders are inert.
- FlatAverageForecaster: mean of the history scaled by an uncertainty
  adjustment, used when there is too little history to see a season.

Interface:
- fit(series) -> self
- forecast(periods) -> ForecastResult
- get_params() -> dict

Forecasters are stateful per series: fit() replaces any previous fit and
instances must not be shared between series without re-fitting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

import numpy as np

from pharmaforecast.features.forecasting.metrics import MetricsCalculator

# Observations used to estimate the trend slope
TREND_WINDOW = 12
# Half-width of the confidence band as a fraction of the point forecast
INTERVAL_WIDTH = 0.15
# Below this many observations seasonal decomposition is not attempted
MIN_SEASONAL_HISTORY = 7

FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]


# =============================================================================
# Errors
# =============================================================================


class ForecastEngineError(Exception):
    """Base class for forecaster errors. ``code`` is machine-readable."""

    code: str = "FORECAST_ERROR"


class NotFittedError(ForecastEngineError, RuntimeError):
    """forecast() before a successful fit(), or fit() on an empty series."""

    code = "NOT_FITTED"


class InvalidPeriodsError(ForecastEngineError, ValueError):
    """Requested forecast horizon is not a positive integer."""

    code = "INVALID_PERIODS"


class InvalidSeasonalLengthError(ForecastEngineError, ValueError):
    """Seasonal period length ``s`` is below 1."""

    code = "INVALID_SEASONAL_LENGTH"


def _validate_season_length(s: int) -> None:
    if s < 1:
        raise InvalidSeasonalLengthError(f"Seasonal period length must be >= 1, got {s}")


# =============================================================================
# Data Model
# =============================================================================


@dataclass(frozen=True)
class TimeSeriesObservation:
    """One period-aggregated value.

    Attributes:
        period: Calendar label, "YYYY-MM-DD" (daily) or "YYYY-MM" (monthly).
        value: Quantity or amount for the period.
    """

    period: str
    value: float


@dataclass(frozen=True)
class SARIMAParams:
    """SARIMA orders. Only ``s`` is used; see module docstring.

    Attributes:
        p: Autoregressive order.
        d: Differencing order.
        q: Moving average order.
        P: Seasonal autoregressive order.
        D: Seasonal differencing order.
        Q: Seasonal moving average order.
        s: Observations per seasonal cycle (12 monthly, 7 daily-weekly).
    """

    p: int = 2
    d: int = 1
    q: int = 2
    P: int = 1
    D: int = 1
    Q: int = 1
    s: int = 12

    def __post_init__(self) -> None:
        _validate_season_length(self.s)


@dataclass(frozen=True)
class SeasonalProfile:
    """Multiplicative seasonal indices, one per phase of the cycle."""

    seasonal_period_length: int
    factors: tuple[float, ...]

    @classmethod
    def neutral(cls, seasonal_period_length: int) -> SeasonalProfile:
        """Profile with every factor at 1.0."""
        return cls(seasonal_period_length, (1.0,) * seasonal_period_length)


@dataclass(frozen=True)
class ConfidenceInterval:
    """Lower and upper bound around a point forecast."""

    lower: float
    upper: float


@dataclass
class ForecastResult:
    """Output of a single forecast() call.

    Attributes:
        predictions: One point forecast per future period.
        confidence_intervals: Bounds parallel to predictions.
        seasonal_factors: Seasonal profile used for the projection.
        accuracy: In-sample fit score in [0, 100].
    """

    predictions: list[float]
    confidence_intervals: list[ConfidenceInterval]
    seasonal_factors: list[float]
    accuracy: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys dashboard clients read."""
        return {
            "predictions": list(self.predictions),
            "confidenceIntervals": [asdict(ci) for ci in self.confidence_intervals],
            "seasonalFactors": list(self.seasonal_factors),
            "accuracy": self.accuracy,
        }


# =============================================================================
# Uncertainty Sources
# =============================================================================


class UncertaintySource(Protocol):
    """Supplies the multiplier applied to flat-average forecasts."""

    def adjustment(self) -> float: ...


@dataclass
class FixedUncertainty:
    """Constant multiplier. The default, so forecasts are reproducible."""

    value: float = 1.0

    def adjustment(self) -> float:
        return self.value


@dataclass
class RandomUncertainty:
    """Uniform multiplier in [low, high] from a seeded numpy Generator.

    Simulates noise when history is too thin to detect a trend. The same
    random_state yields the same sequence of adjustments.
    """

    low: float = 0.8
    high: float = 1.2
    random_state: int = 42
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must not exceed high ({self.high})")
        self._rng = np.random.default_rng(self.random_state)

    def adjustment(self) -> float:
        return float(self._rng.uniform(self.low, self.high))


# =============================================================================
# Estimation Helpers
# =============================================================================


def ols_slope(values: FloatArray) -> float:
    """Least-squares slope of values against their index.

    Formula: (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)

    Returns 0.0 for fewer than two points.
    """
    n = len(values)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=np.float64)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(values))
    sum_xy = float(np.sum(x * values))
    sum_x2 = float(np.sum(x * x))
    return (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)


def ols_line(values: FloatArray) -> tuple[float, float]:
    """Intercept and slope of the least-squares line through values."""
    slope = ols_slope(values)
    intercept = float(np.mean(values)) - slope * (len(values) - 1) / 2.0
    return intercept, slope


def compute_seasonal_factors(values: FloatArray, s: int) -> tuple[float, ...]:
    """Ratio of each phase's mean to the overall mean.

    Phases are ``index mod s``. When the series is shorter than one cycle or
    its mean is zero, every factor is 1.0.
    """
    _validate_season_length(s)
    overall_mean = float(np.mean(values))
    if len(values) < s or overall_mean == 0.0:
        return (1.0,) * s

    phases = np.arange(len(values)) % s
    return tuple(float(np.mean(values[phases == k])) / overall_mean for k in range(s))


def confidence_interval(point: float, width: float = INTERVAL_WIDTH) -> ConfidenceInterval:
    """Symmetric band of ``width`` times the forecast magnitude."""
    margin = abs(point) * width
    return ConfidenceInterval(lower=point - margin, upper=point + margin)


# =============================================================================
# Forecasters
# =============================================================================


class BaseForecaster(ABC):
    """Abstract base class for forecasters.

    Attributes:
        seasonal_period_length: Observations per seasonal cycle.
        interval_width: Confidence band half-width as a fraction of the forecast.
    """

    model_type: str = "base"

    def __init__(self, seasonal_period_length: int, interval_width: float = INTERVAL_WIDTH) -> None:
        _validate_season_length(seasonal_period_length)
        if interval_width < 0:
            raise ValueError(f"interval_width must be >= 0, got {interval_width}")
        self.seasonal_period_length = seasonal_period_length
        self.interval_width = interval_width
        self._is_fitted = False
        self._data: FloatArray = np.array([], dtype=np.float64)
        self._last_period: str | None = None

    def fit(self, series: Sequence[TimeSeriesObservation]) -> BaseForecaster:
        """Store the series values and derive model state.

        Args:
            series: Observations in ascending period order. Not re-sorted.

        Returns:
            self (for method chaining).

        Raises:
            NotFittedError: If series is empty. Prior state is kept.
        """
        values = np.array([float(obs.value) for obs in series], dtype=np.float64)
        if values.size == 0:
            raise NotFittedError("Cannot fit on an empty series")
        self._data = values
        self._last_period = series[-1].period
        self._fit_values(values)
        self._is_fitted = True
        return self

    @abstractmethod
    def _fit_values(self, values: FloatArray) -> None:
        """Derive model state from the fitted values."""

    @abstractmethod
    def forecast(self, periods: int) -> ForecastResult:
        """Project ``periods`` values past the last observation.

        Raises:
            NotFittedError: If the model has not been fitted.
            InvalidPeriodsError: If periods < 1.
        """

    @abstractmethod
    def fitted_values(self) -> FloatArray:
        """In-sample reconstruction of the fitted series."""

    def get_params(self) -> dict[str, Any]:
        """Get model parameters."""
        return {
            "seasonal_period_length": self.seasonal_period_length,
            "interval_width": self.interval_width,
        }

    def accuracy(self) -> float:
        """In-sample accuracy score in [0, 100] (100 - WAPE, clipped)."""
        self._check_fitted()
        return MetricsCalculator.accuracy_score(self._data, self.fitted_values())

    @property
    def is_fitted(self) -> bool:
        """True once fit() has succeeded."""
        return self._is_fitted

    @property
    def n_observations(self) -> int:
        return int(self._data.size)

    @property
    def last_period(self) -> str | None:
        """Period label of the last fitted observation."""
        return self._last_period

    def _check_fitted(self) -> None:
        if not self._is_fitted:
            raise NotFittedError("Model must be fitted before forecast")

    @staticmethod
    def _check_periods(periods: int) -> None:
        if isinstance(periods, bool) or not isinstance(periods, int | np.integer) or periods < 1:
            raise InvalidPeriodsError(f"periods must be a positive integer, got {periods!r}")

    def _result(self, points: list[float], seasonal_factors: Sequence[float]) -> ForecastResult:
        return ForecastResult(
            predictions=points,
            confidence_intervals=[confidence_interval(p, self.interval_width) for p in points],
            seasonal_factors=list(seasonal_factors),
            accuracy=self.accuracy(),
        )


class SARIMAForecaster(BaseForecaster):
    """Seasonal-index + linear-trend forecaster.

    Formula: y_hat[n+i] = (y[n-1] + trend * (i + 1)) * factor[(n + i) mod s]

    ``trend`` is the least-squares slope over the last ``trend_window``
    observations. Forecasts are not clamped; negative history can produce
    negative forecasts.
    """

    model_type = "sarima"

    def __init__(
        self,
        params: SARIMAParams | None = None,
        trend_window: int = TREND_WINDOW,
        interval_width: float = INTERVAL_WIDTH,
    ) -> None:
        """Initialize the forecaster.

        Args:
            params: SARIMA orders; only ``s`` is used.
            trend_window: Number of trailing observations for the trend slope.
            interval_width: Confidence band half-width fraction.

        Raises:
            InvalidSeasonalLengthError: If params.s < 1.
        """
        self.params = params or SARIMAParams()
        super().__init__(self.params.s, interval_width)
        if trend_window < 1:
            raise ValueError(f"trend_window must be >= 1, got {trend_window}")
        self.trend_window = trend_window
        self._profile = SeasonalProfile.neutral(self.params.s)

    def _fit_values(self, values: FloatArray) -> None:
        self._profile = SeasonalProfile(
            self.params.s, compute_seasonal_factors(values, self.params.s)
        )

    @property
    def seasonal_profile(self) -> SeasonalProfile:
        self._check_fitted()
        return self._profile

    @property
    def seasonal_factors(self) -> tuple[float, ...]:
        return self.seasonal_profile.factors

    @property
    def trend(self) -> float:
        """Slope over the trailing trend window."""
        self._check_fitted()
        return ols_slope(self._data[-self.trend_window :])

    def forecast(self, periods: int) -> ForecastResult:
        """Project with the seasonal profile and trailing trend.

        Args:
            periods: Number of future periods.

        Returns:
            ForecastResult with ``periods`` predictions.

        Raises:
            NotFittedError: If the model has not been fitted.
            InvalidPeriodsError: If periods < 1.
        """
        self._check_fitted()
        self._check_periods(periods)

        recent = self._data[-self.trend_window :]
        trend = ols_slope(recent)
        base_level = float(recent[-1])
        n = self.n_observations
        factors = self._profile.factors

        points = [
            (base_level + trend * (i + 1)) * factors[(n + i) % self.params.s]
            for i in range(periods)
        ]
        return self._result(points, factors)

    def fitted_values(self) -> FloatArray:
        """Whole-series trend line modulated by the seasonal factors."""
        self._check_fitted()
        intercept, slope = ols_line(self._data)
        index = np.arange(self.n_observations)
        factors = np.array(self._profile.factors, dtype=np.float64)
        return (intercept + slope * index) * factors[index % self.params.s]

    def get_params(self) -> dict[str, Any]:
        return {
            **asdict(self.params),
            "trend_window": self.trend_window,
            "interval_width": self.interval_width,
        }


class FlatAverageForecaster(BaseForecaster):
    """Mean of the history times an uncertainty adjustment.

    Formula: y_hat[n+i] = mean(y) * adjustment_i

    Used for sparse history where no trend or season can be detected. The
    adjustment is drawn once per forecast step.
    """

    model_type = "flat_average"

    def __init__(
        self,
        seasonal_period_length: int = 12,
        uncertainty: UncertaintySource | None = None,
        interval_width: float = INTERVAL_WIDTH,
    ) -> None:
        """Initialize the forecaster.

        Args:
            seasonal_period_length: Length of the (neutral) seasonal profile reported.
            uncertainty: Adjustment source; defaults to a fixed 1.0.
            interval_width: Confidence band half-width fraction.
        """
        super().__init__(seasonal_period_length, interval_width)
        self.uncertainty: UncertaintySource = uncertainty or FixedUncertainty()
        self._mean = 0.0

    def _fit_values(self, values: FloatArray) -> None:
        self._mean = float(np.mean(values))

    @property
    def mean(self) -> float:
        self._check_fitted()
        return self._mean

    def forecast(self, periods: int) -> ForecastResult:
        """Project the adjusted historical mean.

        Raises:
            NotFittedError: If the model has not been fitted.
            InvalidPeriodsError: If periods < 1.
        """
        self._check_fitted()
        self._check_periods(periods)
        points = [self._mean * self.uncertainty.adjustment() for _ in range(periods)]
        return self._result(points, SeasonalProfile.neutral(self.seasonal_period_length).factors)

    def fitted_values(self) -> FloatArray:
        self._check_fitted()
        return np.full(self.n_observations, self._mean, dtype=np.float64)


# =============================================================================
# Entry Points
# =============================================================================


def select_forecaster(
    n_observations: int,
    params: SARIMAParams | None = None,
    min_history: int = MIN_SEASONAL_HISTORY,
    uncertainty: UncertaintySource | None = None,
    trend_window: int = TREND_WINDOW,
    interval_width: float = INTERVAL_WIDTH,
) -> BaseForecaster:
    """Pick the forecaster for a series of the given length.

    Args:
        n_observations: Length of the series to be fitted.
        params: SARIMA orders.
        min_history: Fewest observations for seasonal decomposition.
        uncertainty: Adjustment source for the flat-average fallback.
        trend_window: Trend window for the seasonal forecaster.
        interval_width: Confidence band half-width fraction.

    Returns:
        Unfitted SARIMAForecaster, or FlatAverageForecaster for short history.
    """
    params = params or SARIMAParams()
    if n_observations < min_history:
        return FlatAverageForecaster(
            seasonal_period_length=params.s,
            uncertainty=uncertainty,
            interval_width=interval_width,
        )
    return SARIMAForecaster(params, trend_window=trend_window, interval_width=interval_width)


def forecast_series(
    series: Sequence[TimeSeriesObservation],
    periods: int,
    params: SARIMAParams | None = None,
    min_history: int = MIN_SEASONAL_HISTORY,
    uncertainty: UncertaintySource | None = None,
) -> ForecastResult:
    """Fit a fresh forecaster on series and forecast ``periods`` ahead.

    Stateless: nothing is retained between calls.

    Raises:
        NotFittedError: If series is empty.
        InvalidPeriodsError: If periods < 1.
        InvalidSeasonalLengthError: If params.s < 1.
    """
    BaseForecaster._check_periods(periods)
    forecaster = select_forecaster(
        len(series), params, min_history=min_history, uncertainty=uncertainty
    )
    return forecaster.fit(series).forecast(periods)
