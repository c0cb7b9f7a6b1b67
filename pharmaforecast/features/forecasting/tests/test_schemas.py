"""Tests for forecasting schemas."""

import pytest
from pydantic import ValidationError

from pharmaforecast.features.forecasting.models import SARIMAParams
from pharmaforecast.features.forecasting.schemas import (
    ForecastRecord,
    PeriodForecastRequest,
    SalesForecastRequest,
    SARIMAParamsConfig,
    SeriesForecastRequest,
)


class TestSARIMAParamsConfig:
    """Tests for SARIMAParamsConfig."""

    def test_resolve_fills_missing_season_length(self):
        config = SARIMAParamsConfig().resolve(7)

        assert config.s == 7
        assert config.to_params() == SARIMAParams(s=7)

    def test_resolve_keeps_explicit_season_length(self):
        assert SARIMAParamsConfig(s=4).resolve(7).s == 4

    def test_to_params_requires_resolution(self):
        with pytest.raises(ValueError, match="unresolved"):
            SARIMAParamsConfig().to_params()

    def test_season_length_must_be_positive(self):
        with pytest.raises(ValidationError):
            SARIMAParamsConfig(s=0)

    def test_config_is_frozen(self):
        config = SARIMAParamsConfig(s=12)

        with pytest.raises(ValidationError):
            config.s = 7  # type: ignore[misc]

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            SARIMAParamsConfig(s=12, r=3)  # type: ignore[call-arg]

    def test_config_hash_deterministic(self):
        """Equal configs hash equally; different configs differ."""
        assert SARIMAParamsConfig(s=12).config_hash() == SARIMAParamsConfig(s=12).config_hash()
        assert SARIMAParamsConfig(s=12).config_hash() != SARIMAParamsConfig(s=7).config_hash()
        assert len(SARIMAParamsConfig(s=12).config_hash()) == 16


class TestSeriesForecastRequest:
    """Tests for SeriesForecastRequest validation."""

    def test_valid_daily_request(self):
        request = SeriesForecastRequest(
            observations=[
                {"period": "2024-01-01", "value": 3},
                {"period": "2024-01-02", "value": 0},
            ],
            periods=5,
        )

        assert request.cadence == "daily"
        assert request.params.s is None

    def test_period_format_must_match_cadence(self):
        with pytest.raises(ValidationError, match="does not match monthly cadence"):
            SeriesForecastRequest(
                observations=[{"period": "2024-01-01", "value": 3}],
                periods=2,
                cadence="monthly",
            )

    def test_periods_must_ascend(self):
        with pytest.raises(ValidationError, match="strictly ascending"):
            SeriesForecastRequest(
                observations=[
                    {"period": "2024-02", "value": 3},
                    {"period": "2024-01", "value": 4},
                ],
                periods=2,
                cadence="monthly",
            )

    def test_duplicate_periods_rejected(self):
        with pytest.raises(ValidationError, match="strictly ascending"):
            SeriesForecastRequest(
                observations=[
                    {"period": "2024-01-01", "value": 3},
                    {"period": "2024-01-01", "value": 4},
                ],
                periods=2,
            )

    @pytest.mark.parametrize(
        ("cadence", "periods"),
        [
            ("daily", ["2024-02-28", "2024-02-30"]),
            ("daily", ["2023-02-29"]),
            ("monthly", ["2024-12", "2024-13"]),
        ],
    )
    def test_impossible_calendar_periods_rejected(self, cadence, periods):
        with pytest.raises(ValidationError, match="is not a valid"):
            SeriesForecastRequest(
                observations=[{"period": p, "value": 1} for p in periods],
                periods=2,
                cadence=cadence,
            )

    def test_leap_day_accepted(self):
        request = SeriesForecastRequest(
            observations=[{"period": "2024-02-29", "value": 1}],
            periods=1,
        )

        assert request.observations[0].period == "2024-02-29"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_values_rejected(self, value):
        with pytest.raises(ValidationError):
            SeriesForecastRequest(
                observations=[{"period": "2024-01-01", "value": value}],
                periods=1,
            )

    @pytest.mark.parametrize("periods", [0, -1])
    def test_periods_must_be_positive(self, periods):
        with pytest.raises(ValidationError):
            SeriesForecastRequest(observations=[], periods=periods)


class TestRequests:
    """Tests for medicine-level request schemas."""

    def test_sales_request_defaults(self):
        request = SalesForecastRequest(medicine_id="med-1")

        assert request.period_days is None
        assert request.confidence_level is None
        assert request.sales == []

    def test_confidence_level_bounds(self):
        with pytest.raises(ValidationError):
            SalesForecastRequest(medicine_id="med-1", confidence_level=1.5)

    def test_non_finite_quantity_rejected(self):
        with pytest.raises(ValidationError):
            SalesForecastRequest(
                medicine_id="med-1",
                sales=[{"quantity": float("inf"), "created_at": "2024-01-01T10:00:00Z"}],
            )

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            SalesForecastRequest(
                medicine_id="med-1",
                sales=[{"quantity": -1, "created_at": "2024-01-01T10:00:00Z"}],
            )

    def test_period_request_rejects_unknown_period(self):
        with pytest.raises(ValidationError):
            PeriodForecastRequest(medicine_id="med-1", period="weekly")

    def test_forecast_record_is_frozen(self):
        record = ForecastRecord(
            medicine_id="med-1",
            start_date="2024-01-01",
            end_date="2024-02-01",
            forecast_period="monthly",
            forecasted_quantity=12,
            confidence_level=0.85,
            created_at="2024-01-01T00:00:00Z",
        )

        with pytest.raises(ValidationError):
            record.forecasted_quantity = 20  # type: ignore[misc]
