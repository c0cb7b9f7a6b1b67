"""Aggregate sale line items into fixed-cadence series.

Seasonal bucketing relies on position, so missing periods are materialized
as zero-value observations between the first and last sale.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Literal, Protocol

import pandas as pd

from pharmaforecast.features.forecasting.models import TimeSeriesObservation

Cadence = Literal["daily", "monthly"]

_PERIOD_FREQ: dict[str, str] = {"daily": "D", "monthly": "M"}


class SaleRecord(Protocol):
    """Anything with a quantity and a sale timestamp."""

    quantity: float
    created_at: datetime


def _freq(cadence: Cadence) -> str:
    try:
        return _PERIOD_FREQ[cadence]
    except KeyError:
        raise ValueError(f"Unknown cadence: {cadence}") from None


def aggregate_sales(
    items: Iterable[SaleRecord],
    cadence: Cadence = "daily",
) -> list[TimeSeriesObservation]:
    """Sum quantities per period and fill gaps with zeros.

    Timestamps are bucketed in UTC; naive timestamps are taken as UTC.

    Args:
        items: Sale line items in any order.
        cadence: Period size.

    Returns:
        Observations ascending by period, one per period from first to last
        sale. Empty when there are no items.
    """
    freq = _freq(cadence)
    rows = [(item.created_at, float(item.quantity)) for item in items]
    if not rows:
        return []

    frame = pd.DataFrame(rows, columns=["created_at", "quantity"])
    timestamps = pd.to_datetime(frame["created_at"], utc=True).dt.tz_convert(None)
    frame["period"] = timestamps.dt.to_period(freq)

    totals = frame.groupby("period")["quantity"].sum()
    full_range = pd.period_range(start=totals.index.min(), end=totals.index.max(), freq=freq)
    totals = totals.reindex(full_range, fill_value=0.0)

    return [
        TimeSeriesObservation(period=str(period), value=float(value))
        for period, value in totals.items()
    ]


def parse_period(label: str, cadence: Cadence = "daily") -> pd.Period:
    """Parse a period label, rejecting impossible calendar dates.

    Raises:
        ValueError: If the label is not a valid date or month.
    """
    freq = _freq(cadence)
    try:
        return pd.Period(label, freq=freq)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Period '{label}' is not a valid {cadence} period: {e}") from e


def future_periods(last_period: str, count: int, cadence: Cadence = "daily") -> list[str]:
    """Labels of the ``count`` periods following ``last_period``."""
    freq = _freq(cadence)
    start = parse_period(last_period, cadence) + 1
    return [str(period) for period in pd.period_range(start=start, periods=count, freq=freq)]
