"""Tests for sale aggregation."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from pharmaforecast.features.forecasting.aggregation import (
    aggregate_sales,
    future_periods,
    parse_period,
)
from pharmaforecast.features.forecasting.schemas import SaleItem


class TestAggregateSales:
    """Tests for aggregate_sales."""

    def test_daily_totals_with_gap_filled(self, daily_sales):
        """Same-day sales are summed and missing days appear as zero."""
        series = aggregate_sales(daily_sales, "daily")

        assert [obs.period for obs in series][:5] == [
            "2024-01-01",
            "2024-01-02",
            "2024-01-03",
            "2024-01-04",
            "2024-01-05",
        ]
        assert [obs.value for obs in series] == [4.0, 5.0, 6.0, 0.0, 5.0, 7.0, 4.0, 6.0, 5.0, 8.0]

    def test_unordered_input_is_sorted(self, daily_sales):
        """Input order does not matter."""
        assert aggregate_sales(reversed(daily_sales)) == aggregate_sales(daily_sales)

    def test_monthly_totals(self):
        """Monthly cadence buckets by calendar month and fills empty months."""
        items = [
            SaleItem(quantity=10, created_at=datetime(2024, 1, 5, tzinfo=UTC)),
            SaleItem(quantity=5, created_at=datetime(2024, 1, 28, tzinfo=UTC)),
            SaleItem(quantity=7, created_at=datetime(2024, 3, 2, tzinfo=UTC)),
        ]

        series = aggregate_sales(items, "monthly")

        assert [(obs.period, obs.value) for obs in series] == [
            ("2024-01", 15.0),
            ("2024-02", 0.0),
            ("2024-03", 7.0),
        ]

    def test_timestamps_bucketed_in_utc(self):
        """A late-evening sale west of UTC lands on the next UTC day."""
        eastern = timezone(timedelta(hours=-5))
        items = [SaleItem(quantity=3, created_at=datetime(2024, 6, 1, 22, 0, tzinfo=eastern))]

        series = aggregate_sales(items, "daily")

        assert series[0].period == "2024-06-02"

    def test_empty_input(self):
        """No sales, no observations."""
        assert aggregate_sales([], "daily") == []

    def test_unknown_cadence(self, daily_sales):
        with pytest.raises(ValueError, match="Unknown cadence"):
            aggregate_sales(daily_sales, "weekly")


class TestFuturePeriods:
    """Tests for future_periods."""

    def test_daily_crosses_month_end(self):
        assert future_periods("2024-02-28", 3, "daily") == [
            "2024-02-29",
            "2024-03-01",
            "2024-03-02",
        ]

    def test_monthly_crosses_year_end(self):
        assert future_periods("2023-11", 3, "monthly") == ["2023-12", "2024-01", "2024-02"]


class TestParsePeriod:
    """Tests for parse_period."""

    def test_valid_labels(self):
        assert str(parse_period("2024-02-29", "daily")) == "2024-02-29"
        assert str(parse_period("2024-12", "monthly")) == "2024-12"

    @pytest.mark.parametrize(
        ("label", "cadence"),
        [("2024-02-30", "daily"), ("2023-02-29", "daily"), ("2024-13", "monthly")],
    )
    def test_impossible_dates_raise_value_error(self, label, cadence):
        with pytest.raises(ValueError, match="is not a valid"):
            parse_period(label, cadence)
