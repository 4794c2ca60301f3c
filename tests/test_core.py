"""
Tests for settings and logging setup
"""
import logging

import pytest

import sys
sys.path.insert(0, '.')

from src.core.config import Settings
from src.core.logging import setup_logging


class TestSettings:

    def test_defaults(self):
        settings = Settings(sensor_api_url=None, sensor_api_key=None, ml_model_api_url=None)

        assert settings.api_port == 8000
        assert settings.sensor_poll_interval_seconds == 5
        assert settings.prediction_interval_seconds == 10
        assert settings.sensor_store_configured is False
        assert settings.ml_model_configured is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("API_HOST", "127.0.0.1")
        monkeypatch.setenv("API_PORT", "9100")
        monkeypatch.setenv("AUTO_EVACUATION_ENABLED", "false")

        settings = Settings()

        assert settings.api_host == "127.0.0.1"
        assert settings.api_port == 9100
        assert settings.auto_evacuation_enabled is False

    def test_store_needs_url_and_key(self):
        assert Settings(sensor_api_url="https://store.example.com", sensor_api_key=None).sensor_store_configured is False


class TestLogging:

    def test_setup_logging(self):
        logger = setup_logging("DEBUG")

        assert logger.name == "minesentinel"
        assert logger.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("apscheduler").level == logging.WARNING
