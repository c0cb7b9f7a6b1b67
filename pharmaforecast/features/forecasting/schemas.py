"""Pydantic schemas for forecast configuration and API contracts.

SARIMA configs are:
- Immutable (frozen=True) so a request's config cannot drift mid-forecast
- Versioned (schema_version) for stored forecast records
- Hashable (config_hash) so identical configurations are recognizable
"""

from __future__ import annotations

import hashlib
import re
from datetime import date as date_type
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pharmaforecast.features.forecasting.aggregation import parse_period
from pharmaforecast.features.forecasting.models import SARIMAParams

PERIOD_PATTERNS = {
    "daily": r"^\d{4}-\d{2}-\d{2}$",
    "monthly": r"^\d{4}-\d{2}$",
}

# =============================================================================
# Model Configuration
# =============================================================================


class SARIMAParamsConfig(BaseModel):
    """SARIMA orders as accepted over the API.

    Only ``s`` affects the forecast; the other orders are stored for
    compatibility and have no effect. When ``s`` is omitted the cadence
    default applies (7 for daily data, 12 for monthly).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    schema_version: str = Field(
        default="1.0",
        description="Semantic version of this config schema",
        pattern=r"^\d+\.\d+(\.\d+)?$",
    )
    p: int = Field(default=2, ge=0, description="Autoregressive order (inert)")
    d: int = Field(default=1, ge=0, description="Differencing order (linear trend)")
    q: int = Field(default=2, ge=0, description="Moving average order (inert)")
    P: int = Field(default=1, ge=0, description="Seasonal autoregressive order (inert)")
    D: int = Field(default=1, ge=0, description="Seasonal differencing order (inert)")
    Q: int = Field(default=1, ge=0, description="Seasonal moving average order (inert)")
    s: int | None = Field(
        default=None,
        ge=1,
        le=366,
        description="Observations per seasonal cycle",
    )

    def resolve(self, default_season_length: int) -> SARIMAParamsConfig:
        """Return a copy with ``s`` filled in from the cadence default."""
        if self.s is not None:
            return self
        return self.model_copy(update={"s": default_season_length})

    def to_params(self) -> SARIMAParams:
        """Convert a resolved config into engine parameters.

        Raises:
            ValueError: If ``s`` has not been resolved.
        """
        if self.s is None:
            raise ValueError("Seasonal period length is unresolved; call resolve() first")
        return SARIMAParams(p=self.p, d=self.d, q=self.q, P=self.P, D=self.D, Q=self.Q, s=self.s)

    def config_hash(self) -> str:
        """16-character hex hash of the config JSON."""
        return hashlib.sha256(self.model_dump_json().encode()).hexdigest()[:16]


# =============================================================================
# Inputs
# =============================================================================


class ObservationIn(BaseModel):
    """Pre-aggregated series point."""

    period: str = Field(..., description="YYYY-MM-DD (daily) or YYYY-MM (monthly)")
    value: float = Field(
        ..., allow_inf_nan=False, description="Quantity or amount for the period"
    )


class SaleItem(BaseModel):
    """Sale line item for a single medicine."""

    quantity: float = Field(..., ge=0, allow_inf_nan=False, description="Units sold")
    created_at: datetime = Field(..., description="Sale timestamp")


class SeriesForecastRequest(BaseModel):
    """Request body for POST /forecasting/series.

    Attributes:
        observations: Series ascending by period, gaps as explicit zeros.
        periods: Number of future periods to forecast.
        cadence: Period size of the series.
        params: SARIMA configuration.
    """

    observations: list[ObservationIn] = Field(..., description="Historical series")
    periods: int = Field(..., ge=1, description="Number of periods to forecast")
    cadence: Literal["daily", "monthly"] = "daily"
    params: SARIMAParamsConfig = Field(default_factory=SARIMAParamsConfig)

    @model_validator(mode="after")
    def validate_series(self) -> SeriesForecastRequest:
        """Periods must be real calendar dates or months of the cadence, strictly ascending."""
        pattern = PERIOD_PATTERNS[self.cadence]
        for obs in self.observations:
            if not re.match(pattern, obs.period):
                raise ValueError(
                    f"Period '{obs.period}' does not match {self.cadence} cadence"
                )
            parse_period(obs.period, self.cadence)
        labels = [obs.period for obs in self.observations]
        if any(a >= b for a, b in zip(labels, labels[1:], strict=False)):
            raise ValueError("observations must be strictly ascending by period")
        return self


class SalesForecastRequest(BaseModel):
    """Request body for POST /forecasting/sarima.

    Attributes:
        medicine_id: Medicine the sales belong to.
        medicine_name: Display name echoed in the summary.
        period_days: Number of days to forecast.
        confidence_level: Confidence level recorded with the forecast summary.
        sales: Sale line items; aggregated per day.
        params: SARIMA configuration.
    """

    medicine_id: str = Field(..., min_length=1, description="Medicine ID")
    medicine_name: str | None = None
    period_days: int | None = Field(
        default=None, ge=1, description="Days to forecast (defaults to forecast_default_horizon)"
    )
    confidence_level: float | None = Field(default=None, gt=0, lt=1)
    sales: list[SaleItem] = Field(default_factory=list)
    params: SARIMAParamsConfig = Field(default_factory=SARIMAParamsConfig)


class PeriodForecastRequest(BaseModel):
    """Request body for POST /forecasting/period.

    Attributes:
        medicine_id: Medicine the sales belong to.
        period: Forecast window.
        sales: Sale line items; aggregated per month.
        start_date: First day of the window (defaults to today, UTC).
    """

    medicine_id: str = Field(..., min_length=1, description="Medicine ID")
    period: Literal["monthly", "quarterly", "yearly"]
    sales: list[SaleItem] = Field(default_factory=list)
    start_date: date_type | None = None


# =============================================================================
# Outputs
# =============================================================================


class ConfidenceIntervalOut(BaseModel):
    lower: float
    upper: float


class ForecastResultOut(BaseModel):
    """Engine output.

    Attributes:
        predictions: Point forecast per period.
        confidence_intervals: Bounds parallel to predictions.
        seasonal_factors: Seasonal profile used.
        accuracy: In-sample fit score (0-100).
    """

    predictions: list[float]
    confidence_intervals: list[ConfidenceIntervalOut]
    seasonal_factors: list[float]
    accuracy: float = Field(..., ge=0, le=100)


class ForecastPoint(BaseModel):
    """Single dated forecast.

    Attributes:
        period: Label of the forecast period.
        forecast: Point forecast value.
        lower_bound: Lower bound of the confidence band.
        upper_bound: Upper bound of the confidence band.
    """

    period: str
    forecast: float
    lower_bound: float
    upper_bound: float


class SeriesForecastResponse(BaseModel):
    """Response body for POST /forecasting/series.

    Attributes:
        model_type: ``sarima`` or ``flat_average`` (sparse history).
        config_hash: Hash of the resolved configuration.
        cadence: Period size.
        n_observations: Length of the fitted series.
        forecasts: Dated forecast points.
        result: Raw engine output.
        duration_ms: Forecast duration in milliseconds.
    """

    model_config = ConfigDict(protected_namespaces=())

    model_type: str
    config_hash: str
    cadence: Literal["daily", "monthly"]
    n_observations: int
    forecasts: list[ForecastPoint]
    result: ForecastResultOut
    duration_ms: float


class ForecastSummary(BaseModel):
    """Headline numbers for a medicine forecast."""

    medicine_id: str
    medicine_name: str | None = None
    period: str
    start_date: date_type
    end_date: date_type
    total_forecasted_quantity: float
    confidence_level: float


class SalesForecastResponse(BaseModel):
    """Response body for POST /forecasting/sarima."""

    forecast: SeriesForecastResponse
    summary: ForecastSummary


class ForecastRecord(BaseModel):
    """Immutable forecast record, ready for the caller to persist.

    Attributes:
        medicine_id: Medicine forecast.
        start_date: First day covered.
        end_date: Last day covered.
        forecast_period: monthly, quarterly or yearly.
        forecasted_quantity: Units expected per month.
        confidence_level: Confidence attached to the estimate.
        created_at: Creation timestamp (UTC).
    """

    model_config = ConfigDict(frozen=True)

    medicine_id: str
    start_date: date_type
    end_date: date_type
    forecast_period: Literal["monthly", "quarterly", "yearly"]
    forecasted_quantity: int
    confidence_level: float
    created_at: datetime
