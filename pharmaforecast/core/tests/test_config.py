"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from pharmaforecast.core.config import Settings, get_settings


def test_settings_has_defaults():
    """Settings should have sensible defaults."""
    settings = Settings()

    assert settings.app_name == "PharmaForecast"
    assert settings.app_env == "development"
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"
    assert settings.api_port == 8123


def test_forecast_defaults():
    """Forecast defaults match the documented engine policy."""
    settings = Settings()

    assert settings.forecast_trend_window == 12
    assert settings.forecast_interval_width == pytest.approx(0.15)
    assert settings.forecast_min_history == 7
    assert settings.forecast_seasonal_period == 7
    assert settings.forecast_default_quantity == 10
    assert settings.forecast_random_adjustment is False


def test_settings_is_production_property():
    """is_production should return True for production env."""
    settings = Settings(app_env="production")
    assert settings.is_development is False
    assert settings.is_production is True


def test_settings_is_testing_property():
    """is_testing should return True for testing env."""
    settings = Settings(app_env="testing")
    assert settings.is_testing is True


def test_get_settings_returns_singleton():
    """get_settings should return cached singleton."""
    assert get_settings() is get_settings()


def test_settings_from_environment(monkeypatch):
    """Settings should load from environment variables."""
    monkeypatch.setenv("APP_NAME", "TestForecast")
    monkeypatch.setenv("FORECAST_MIN_HISTORY", "14")
    monkeypatch.setenv("FORECAST_RANDOM_ADJUSTMENT", "true")

    settings = Settings()

    assert settings.app_name == "TestForecast"
    assert settings.forecast_min_history == 14
    assert settings.forecast_random_adjustment is True


def test_inverted_adjustment_bounds_rejected():
    """Adjustment low above high is a configuration error."""
    with pytest.raises(ValidationError, match="must not exceed"):
        Settings(forecast_adjustment_low=1.3, forecast_adjustment_high=1.1)


def test_negative_interval_width_rejected():
    """A negative confidence band width is a configuration error."""
    with pytest.raises(ValidationError, match="forecast_interval_width"):
        Settings(forecast_interval_width=-0.1)


def test_negative_interval_width_from_environment(monkeypatch):
    monkeypatch.setenv("FORECAST_INTERVAL_WIDTH", "-0.1")

    with pytest.raises(ValidationError):
        Settings()
