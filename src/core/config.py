"""
MineSentinel - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    log_level: str = "INFO"

    # Sensor data store
    sensor_api_url: Optional[str] = None
    sensor_api_key: Optional[str] = None
    sensor_request_timeout: float = 10.0

    # Risk prediction model
    ml_model_api_url: Optional[str] = None
    ml_model_api_key: Optional[str] = None
    ml_request_timeout: float = 10.0

    # Monitoring cadence
    sensor_poll_interval_seconds: int = 5
    prediction_interval_seconds: int = 10

    # Evacuation
    auto_evacuation_enabled: bool = True

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def sensor_store_configured(self) -> bool:
        return bool(self.sensor_api_url and self.sensor_api_key)

    @property
    def ml_model_configured(self) -> bool:
        return bool(self.ml_model_api_url)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
