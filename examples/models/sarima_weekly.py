"""Example: Forecasting daily pharmacy sales with the seasonal forecaster.

Four weeks of daily sales with a weekend peak are fitted, a week is
forecast, and the result is compared with the flat-average fallback used
for short histories.

Usage:
    python examples/models/sarima_weekly.py
"""

from datetime import date, timedelta

from pharmaforecast.features.forecasting.models import (
    FlatAverageForecaster,
    RandomUncertainty,
    SARIMAForecaster,
    SARIMAParams,
    TimeSeriesObservation,
    select_forecaster,
)


def main():
    # 1. Four weeks of daily sales, busier towards the weekend
    week = [12, 10, 11, 13, 18, 24, 20]
    start = date(2024, 3, 4)
    series = [
        TimeSeriesObservation(period=(start + timedelta(days=i)).isoformat(), value=float(v))
        for i, v in enumerate(week * 4)
    ]
    print(f"History: {len(series)} days, {series[0].period} to {series[-1].period}")

    # 2. Fit with a weekly season
    model = SARIMAForecaster(SARIMAParams(s=7))
    model.fit(series)
    print(f"\nModel params: {model.get_params()}")
    print(f"Seasonal factors: {[round(f, 3) for f in model.seasonal_factors]}")
    print(f"Trend per day: {model.trend:.3f}")

    # 3. Forecast one week
    result = model.forecast(7)
    print(f"\n7-day forecast (accuracy {result.accuracy:.1f}):")
    for i, (point, band) in enumerate(
        zip(result.predictions, result.confidence_intervals, strict=True)
    ):
        day = start + timedelta(days=len(series) + i)
        print(f"  {day}: {point:6.2f}  [{band.lower:6.2f}, {band.upper:6.2f}]")

    # 4. Short histories fall back to the mean
    short = series[:3]
    fallback = select_forecaster(len(short), SARIMAParams(s=7))
    print(f"\nWith {len(short)} days the selected model is: {fallback.model_type}")
    print(f"Flat forecast: {fallback.fit(short).forecast(3).predictions}")

    # 5. Optional seeded noise on the fallback
    noisy = FlatAverageForecaster(7, uncertainty=RandomUncertainty(random_state=42))
    noisy_points = noisy.fit(short).forecast(3).predictions
    print(f"Seeded noisy forecast: {[round(p, 2) for p in noisy_points]}")

    # 6. Payload shape returned to callers
    print(f"\nto_dict keys: {sorted(result.to_dict())}")


if __name__ == "__main__":
    main()
