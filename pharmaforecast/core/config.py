"""Application configuration via Pydantic Settings v2."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "PharmaForecast"
    app_env: Literal["development", "testing", "staging", "production"] = "development"
    debug: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # API
    api_host: str = "0.0.0.0"  # noqa: S104
    api_port: int = 8123

    # Forecasting
    forecast_random_seed: int = 42
    forecast_default_horizon: int = 30
    forecast_max_horizon: int = 365
    forecast_seasonal_period: int = 7  # weekly cycle over daily data
    forecast_trend_window: int = 12
    forecast_interval_width: float = Field(default=0.15, ge=0)
    forecast_min_history: int = 7
    forecast_default_quantity: int = 10
    forecast_default_confidence_level: float = 0.95
    forecast_period_confidence_level: float = 0.85

    # Sparse-history adjustment (flat average fallback)
    forecast_random_adjustment: bool = False
    forecast_adjustment_low: float = 0.8
    forecast_adjustment_high: float = 1.2

    @model_validator(mode="after")
    def validate_adjustment_bounds(self) -> "Settings":
        """Ensure the random adjustment range is not inverted.

        Returns:
            Validated settings.

        Raises:
            ValueError: If the lower bound exceeds the upper bound.
        """
        if self.forecast_adjustment_low > self.forecast_adjustment_high:
            raise ValueError(
                f"forecast_adjustment_low ({self.forecast_adjustment_low}) must not exceed "
                f"forecast_adjustment_high ({self.forecast_adjustment_high})"
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
