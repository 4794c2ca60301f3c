"""
MineSentinel - Core Utilities
Central configuration, logging, errors and constants.
"""

from src.core.config import settings
from src.core.constants import (
    DEFAULT_SENSOR_THRESHOLDS,
    EVACUATION_CONFIDENCE_THRESHOLD,
    FALLBACK_RISK_RULES,
    TREND_DEAD_BAND,
)
from src.core.exceptions import (
    MineSentinelError,
    ConfigurationError,
    PredictionUnavailable,
    SensorDataUnavailable,
)

__all__ = [
    "settings",
    "DEFAULT_SENSOR_THRESHOLDS",
    "EVACUATION_CONFIDENCE_THRESHOLD",
    "FALLBACK_RISK_RULES",
    "TREND_DEAD_BAND",
    "MineSentinelError",
    "ConfigurationError",
    "PredictionUnavailable",
    "SensorDataUnavailable",
]
