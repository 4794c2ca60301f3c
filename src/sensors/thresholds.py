"""
MineSentinel - Sensor Threshold Evaluation
Classifies raw sensor values against three-tier thresholds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from src.core.constants import DEFAULT_SENSOR_THRESHOLDS, SENSOR_UNITS, TREND_DEAD_BAND
from src.core.exceptions import ConfigurationError


class SensorStatus(str, Enum):
    """Classification of a single sensor value."""
    SAFE = "safe"
    MODERATE = "moderate"
    HIGH = "high"


class Trend(str, Enum):
    """Direction of change between two consecutive readings."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class ThresholdTier:
    """Safe/moderate/high boundaries for one sensor."""
    safe: float
    moderate: float
    high: float

    def validate(self) -> "ThresholdTier":
        """Raise ConfigurationError unless safe < moderate < high."""
        if not (self.safe < self.moderate < self.high):
            raise ConfigurationError(
                f"Thresholds must be strictly ascending, got "
                f"safe={self.safe}, moderate={self.moderate}, high={self.high}"
            )
        return self

    def to_dict(self) -> Dict[str, float]:
        return {"safe": self.safe, "moderate": self.moderate, "high": self.high}


def classify(value: float, thresholds: ThresholdTier) -> SensorStatus:
    """
    Classify a reading against a threshold tier.

    Args:
        value: Raw sensor value
        thresholds: Tier to compare against (must be strictly ascending)

    Returns:
        HIGH at or above the high boundary, MODERATE at or above the
        moderate boundary, SAFE otherwise.

    Raises:
        ConfigurationError: If the tier is not strictly ascending
    """
    thresholds.validate()

    if value >= thresholds.high:
        return SensorStatus.HIGH
    if value >= thresholds.moderate:
        return SensorStatus.MODERATE
    return SensorStatus.SAFE


def trend(previous: float, current: float) -> Trend:
    """Direction of change, ignoring jitter inside the dead band."""
    delta = current - previous
    if delta > TREND_DEAD_BAND:
        return Trend.UP
    if delta < -TREND_DEAD_BAND:
        return Trend.DOWN
    return Trend.STABLE


def fill_percentage(value: float, thresholds: ThresholdTier) -> float:
    """Gauge fill relative to the high boundary, capped at 100."""
    if thresholds.high <= 0:
        return 100.0
    return min(max(value, 0.0) / thresholds.high * 100, 100.0)


@dataclass
class SensorSnapshot:
    """Display-ready evaluation of one sensor."""
    name: str
    value: float
    unit: str
    status: SensorStatus
    trend: Trend
    thresholds: ThresholdTier
    location: Optional[str] = None
    timestamp: Optional[str] = None

    @property
    def fill_percentage(self) -> float:
        return fill_percentage(self.value, self.thresholds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": round(self.value, 2),
            "unit": self.unit,
            "status": self.status.value,
            "trend": self.trend.value,
            "thresholds": self.thresholds.to_dict(),
            "fill_percentage": round(self.fill_percentage, 1),
            "location": self.location,
            "timestamp": self.timestamp,
        }


class SensorThresholds:
    """Per-sensor threshold registry, seeded with site defaults."""

    def __init__(self, overrides: Optional[Dict[str, ThresholdTier]] = None):
        self._tiers: Dict[str, ThresholdTier] = {
            name: ThresholdTier(*values).validate()
            for name, values in DEFAULT_SENSOR_THRESHOLDS.items()
        }
        for name, tier in (overrides or {}).items():
            self._tiers[name] = tier.validate()

    def get(self, name: str) -> ThresholdTier:
        try:
            return self._tiers[name]
        except KeyError:
            raise ConfigurationError(f"No thresholds configured for sensor '{name}'")

    def update(
        self,
        name: str,
        moderate: Optional[float] = None,
        high: Optional[float] = None,
        safe: Optional[float] = None,
    ) -> ThresholdTier:
        """
        Replace part of a sensor's tier.

        The new tier is validated before it is stored, so a rejected
        update leaves the previous tier in place.
        """
        current = self.get(name)
        tier = ThresholdTier(
            safe=current.safe if safe is None else safe,
            moderate=current.moderate if moderate is None else moderate,
            high=current.high if high is None else high,
        ).validate()
        self._tiers[name] = tier
        return tier

    def names(self):
        return list(self._tiers)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {name: tier.to_dict() for name, tier in self._tiers.items()}


def evaluate_sensor(
    name: str,
    value: float,
    thresholds: ThresholdTier,
    previous: Optional[float] = None,
    location: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> SensorSnapshot:
    """Classify a value and its trend into a display snapshot."""
    return SensorSnapshot(
        name=name,
        value=value,
        unit=SENSOR_UNITS.get(name, ""),
        status=classify(value, thresholds),
        trend=trend(previous, value) if previous is not None else Trend.STABLE,
        thresholds=thresholds,
        location=location,
        timestamp=timestamp,
    )
