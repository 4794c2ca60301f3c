"""
MineSentinel - Sensors Module
Sensor readings, threshold classification and the data store client.
"""

from src.sensors.models import SensorReading
from src.sensors.thresholds import (
    SensorStatus,
    Trend,
    ThresholdTier,
    SensorSnapshot,
    SensorThresholds,
    classify,
    trend,
    fill_percentage,
    evaluate_sensor,
)
from src.sensors.client import SensorDataClient, get_sensor_client

__all__ = [
    "SensorReading",
    # Thresholds
    "SensorStatus",
    "Trend",
    "ThresholdTier",
    "SensorSnapshot",
    "SensorThresholds",
    "classify",
    "trend",
    "fill_percentage",
    "evaluate_sensor",
    # Client
    "SensorDataClient",
    "get_sensor_client",
]
