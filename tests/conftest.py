"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.prediction.models import RiskPrediction
from src.sensors.models import SensorReading


@pytest.fixture
def raw_sensor_records():
    """Raw records as returned by the sensor data store."""
    return [
        {
            "id": "rec-001",
            "timestamp": "2026-10-18T08:00:00+00:00",
            "Rainfall_mm": "12.5",
            "Rainfall_3Day": 30,
            "Rainfall_7Day": 64.2,
            "Temperature_C": 23.8,
            "Soil_Strain": 156.7,
            "Pore_Water_Pressure_kPa": 87.3,
            "sensor_location": "North Pit Wall",
        },
        {
            "id": "rec-002",
            "timestamp": "2026-10-18T08:00:05+00:00",
            "Rainfall_mm": 30,
            "Rainfall_3Day": 60,
            "Rainfall_7Day": 110,
            "Temperature_C": 24.1,
            "Soil_Strain": 320,
            "Pore_Water_Pressure_kPa": 210,
            "sensor_location": "North Pit Wall",
        },
    ]


@pytest.fixture
def safe_reading():
    """Reading well inside every threshold."""
    return SensorReading(
        id="safe-1",
        timestamp="2026-10-18T08:00:00+00:00",
        rainfall_mm=2.0,
        rainfall_3day=10.0,
        rainfall_7day=20.0,
        temperature_c=22.0,
        soil_strain=80.0,
        pore_water_pressure_kpa=60.0,
        location="Bench 4",
    )


@pytest.fixture
def critical_reading():
    """Reading that fires every fallback risk rule."""
    return SensorReading(
        id="crit-1",
        timestamp="2026-10-18T08:05:00+00:00",
        rainfall_mm=30.0,
        rainfall_3day=60.0,
        rainfall_7day=110.0,
        temperature_c=24.0,
        soil_strain=320.0,
        pore_water_pressure_kpa=210.0,
        location="Bench 4",
    )


@pytest.fixture
def high_risk_prediction():
    return RiskPrediction(
        is_high_risk=True,
        confidence=0.9,
        contributing_factors=("Critical soil strain levels", "Elevated pore water pressure"),
    )


@pytest.fixture
def safe_prediction():
    return RiskPrediction(
        is_high_risk=False,
        confidence=0.2,
        contributing_factors=("Normal conditions",),
    )
