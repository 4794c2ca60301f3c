"""
MineSentinel - Sensor Reading Model
One record from the site sensor data store.
"""

import math
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Raw store key -> SensorReading attribute
RAW_NUMERIC_FIELDS: Dict[str, str] = {
    "Rainfall_mm": "rainfall_mm",
    "Rainfall_3Day": "rainfall_3day",
    "Rainfall_7Day": "rainfall_7day",
    "Temperature_C": "temperature_c",
    "Soil_Strain": "soil_strain",
    "Pore_Water_Pressure_kPa": "pore_water_pressure_kpa",
}

DEFAULT_LOCATION = "Unknown Location"


def _to_float(value: Any) -> float:
    """Parse a numeric field, falling back to 0 for missing or bad values."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


@dataclass
class SensorReading:
    """
    Snapshot of all site sensors at one point in time.

    Attributes:
        id: Record identifier from the data store
        timestamp: ISO-8601 acquisition time
        rainfall_mm: Current rainfall
        rainfall_3day: Rainfall accumulated over the last 3 days
        rainfall_7day: Rainfall accumulated over the last 7 days
        temperature_c: Ambient temperature in Celsius
        soil_strain: Soil strain in microstrain
        pore_water_pressure_kpa: Pore water pressure in kPa
        location: Sensor location label
    """

    id: str
    timestamp: str
    rainfall_mm: float = 0.0
    rainfall_3day: float = 0.0
    rainfall_7day: float = 0.0
    temperature_c: float = 0.0
    soil_strain: float = 0.0
    pore_water_pressure_kpa: float = 0.0
    location: str = DEFAULT_LOCATION

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "SensorReading":
        """Build a reading from a raw data store record."""
        numeric = {
            attr: _to_float(raw.get(key))
            for key, attr in RAW_NUMERIC_FIELDS.items()
        }
        location = raw.get("location") or raw.get("sensor_location") or DEFAULT_LOCATION

        return cls(
            id=str(raw.get("id") or f"sensor-{int(time.time() * 1000)}"),
            timestamp=raw.get("timestamp") or datetime.now(timezone.utc).isoformat(),
            location=location,
            **numeric,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_raw(self, timestamp: Optional[str] = None) -> Dict[str, Any]:
        """Convert back to the data store's field names."""
        raw = {key: getattr(self, attr) for key, attr in RAW_NUMERIC_FIELDS.items()}
        raw["sensor_location"] = self.location
        raw["timestamp"] = timestamp or self.timestamp
        return raw

    def to_model_features(self) -> Dict[str, float]:
        """Feature vector expected by the remote risk model."""
        return {
            "rainfall_mm": self.rainfall_mm,
            "rainfall_3day": self.rainfall_3day,
            "rainfall_7day": self.rainfall_7day,
            "temperature_c": self.temperature_c,
            "soil_strain": self.soil_strain,
            "pore_water_pressure_kpa": self.pore_water_pressure_kpa,
        }
