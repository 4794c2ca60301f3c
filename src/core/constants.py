"""
MineSentinel - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, List, Tuple

# =============================================================================
# SENSOR EVALUATION
# =============================================================================

# Minimum change between consecutive readings to report a trend
TREND_DEAD_BAND: float = 0.1

# Default threshold tiers per sensor: (safe, moderate, high)
DEFAULT_SENSOR_THRESHOLDS: Dict[str, Tuple[float, float, float]] = {
    "displacement": (5.0, 8.0, 12.0),
    "strain": (100.0, 200.0, 300.0),
    "pore_pressure": (100.0, 150.0, 200.0),
    "rainfall": (5.0, 15.0, 25.0),
    "temperature": (40.0, 50.0, 60.0),
    "vibration": (5.0, 10.0, 15.0),
}

SENSOR_UNITS: Dict[str, str] = {
    "displacement": "mm",
    "strain": "μɛ",
    "pore_pressure": "kPa",
    "rainfall": "mm/h",
    "temperature": "°C",
    "vibration": "mm/s",
}

# Sensor name -> SensorReading attribute, for sensors the data store reports
READING_FIELDS: Dict[str, str] = {
    "strain": "soil_strain",
    "pore_pressure": "pore_water_pressure_kpa",
    "rainfall": "rainfall_mm",
    "temperature": "temperature_c",
}

# =============================================================================
# RISK PREDICTION
# =============================================================================

# Score at or above which the fallback evaluator reports high risk
HIGH_RISK_SCORE: float = 0.7

# Fallback rules: (reading attribute, limit, weight, contributing factor)
FALLBACK_RISK_RULES: List[Tuple[str, float, float, str]] = [
    ("rainfall_mm", 25.0, 0.3, "High current rainfall"),
    ("rainfall_3day", 50.0, 0.2, "High 3-day rainfall accumulation"),
    ("rainfall_7day", 100.0, 0.2, "High 7-day rainfall accumulation"),
    ("soil_strain", 300.0, 0.4, "Critical soil strain levels"),
    ("pore_water_pressure_kpa", 200.0, 0.3, "Elevated pore water pressure"),
]

NORMAL_CONDITIONS_FACTOR = "Normal conditions"
NO_DATA_FACTOR = "No data available"

# =============================================================================
# EVACUATION
# =============================================================================

# Minimum prediction confidence that can trigger an automatic evacuation
EVACUATION_CONFIDENCE_THRESHOLD: float = 0.7
