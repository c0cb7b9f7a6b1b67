"""Test fixtures for forecasting module."""

from datetime import UTC, date, datetime, timedelta

import pytest

from pharmaforecast.core.config import Settings
from pharmaforecast.features.forecasting.models import TimeSeriesObservation
from pharmaforecast.features.forecasting.schemas import SaleItem


def make_series(values, start=date(2024, 1, 1)):
    """Build daily observations starting at ``start``."""
    return [
        TimeSeriesObservation(period=(start + timedelta(days=i)).isoformat(), value=float(v))
        for i, v in enumerate(values)
    ]


def make_monthly_series(values, year=2023):
    """Build monthly observations starting in January of ``year``."""
    return [
        TimeSeriesObservation(period=f"{year + i // 12}-{i % 12 + 1:02d}", value=float(v))
        for i, v in enumerate(values)
    ]


@pytest.fixture
def linear_series() -> list[TimeSeriesObservation]:
    """Twelve monthly values rising by 2: 10, 12, ..., 32."""
    return make_monthly_series(range(10, 34, 2))


@pytest.fixture
def weekly_pattern_series() -> list[TimeSeriesObservation]:
    """Four weeks of daily data with pattern [10, 20, 30, 40, 50, 60, 70]."""
    return make_series([10, 20, 30, 40, 50, 60, 70] * 4)


@pytest.fixture
def constant_series() -> list[TimeSeriesObservation]:
    """Thirty days of constant sales (25 units)."""
    return make_series([25.0] * 30)


@pytest.fixture
def sparse_series() -> list[TimeSeriesObservation]:
    """Three days of history: 5, 0, 7."""
    return make_series([5, 0, 7])


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults, independent of the cached singleton."""
    return Settings(app_env="testing")


@pytest.fixture
def daily_sales() -> list[SaleItem]:
    """Sale line items over 10 days with a gap on Jan 4 and two sales on Jan 2."""
    base = datetime(2024, 1, 1, 9, 30, tzinfo=UTC)
    quantities = {0: [4], 1: [3, 2], 2: [6], 4: [5], 5: [7], 6: [4], 7: [6], 8: [5], 9: [8]}
    return [
        SaleItem(quantity=q, created_at=base + timedelta(days=day, hours=i))
        for day, qs in quantities.items()
        for i, q in enumerate(qs)
    ]
