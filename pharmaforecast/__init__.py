"""PharmaForecast: seasonal sales forecasting for pharmacy inventory."""
