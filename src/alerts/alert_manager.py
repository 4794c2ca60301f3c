"""
MineSentinel - Alert Manager
Threshold, manual and evacuation alerts for the site dashboard.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from src.evacuation.coordinator import EvacuationEvent, EvacuationState
from src.sensors.thresholds import SensorSnapshot, SensorStatus

logger = logging.getLogger(__name__)


class AlertLevel(str, Enum):
    """Alert severity levels."""
    INFO = "info"           # Informational, no action required
    WARNING = "warning"     # Sensor above moderate threshold, monitor
    ALERT = "alert"         # Manual alert raised by an operator
    CRITICAL = "critical"   # Sensor above high threshold
    EMERGENCY = "emergency" # Evacuate


class AlertSource(str, Enum):
    """What raised the alert."""
    THRESHOLD = "threshold"
    MANUAL = "manual"
    EVACUATION = "evacuation"


@dataclass
class Alert:
    """Site alert object."""
    alert_id: str
    level: AlertLevel
    source: AlertSource
    title: str
    message: str
    created_at: datetime
    location: Optional[str] = None
    sensor_name: Optional[str] = None
    evacuation_recommended: bool = False
    evacuation_id: Optional[str] = None
    active: bool = True
    cleared_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_id": self.alert_id,
            "level": self.level.value,
            "source": self.source.value,
            "title": self.title,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "location": self.location,
            "sensor_name": self.sensor_name,
            "evacuation_recommended": self.evacuation_recommended,
            "evacuation_id": self.evacuation_id,
            "active": self.active,
            "cleared_at": self.cleared_at.isoformat() if self.cleared_at else None,
        }


class AlertManager:
    """Manages alert creation and lifetime."""

    def __init__(self):
        """Initialize the alert manager."""
        self.alerts: Dict[str, Alert] = {}
        self.alert_history: List[Alert] = []
        self._lock = threading.RLock()
        # (sensor name, status) -> alert id of the active threshold alert
        self._threshold_alerts: Dict[Tuple[str, SensorStatus], str] = {}

    def create_alert(
        self,
        level: AlertLevel,
        source: AlertSource,
        title: str,
        message: str,
        location: Optional[str] = None,
        sensor_name: Optional[str] = None,
        evacuation: bool = False,
        evacuation_id: Optional[str] = None,
    ) -> Alert:
        """
        Create and register a new active alert.

        Args:
            level: Alert severity level
            source: What raised the alert
            title: Short title for banners
            message: Full alert message
            location: Affected site location
            sensor_name: Sensor that crossed a threshold
            evacuation: Whether evacuation is recommended
            evacuation_id: Related evacuation event

        Returns:
            Alert object
        """
        alert = Alert(
            alert_id=f"ALERT-{uuid.uuid4().hex[:8].upper()}",
            level=level,
            source=source,
            title=title,
            message=message,
            created_at=datetime.now(),
            location=location,
            sensor_name=sensor_name,
            evacuation_recommended=evacuation,
            evacuation_id=evacuation_id,
        )

        with self._lock:
            self.alerts[alert.alert_id] = alert
            self.alert_history.append(alert)

        logger.info(f"[{level.value.upper()}] {title}")
        return alert

    def clear_alert(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            alert = self.alerts.get(alert_id)
            if alert is None or not alert.active:
                return alert
            alert.active = False
            alert.cleared_at = datetime.now()
            return alert

    # ------------------------------------------------------------------
    # Threshold alerts
    # ------------------------------------------------------------------

    def evaluate_snapshot(self, snapshot: SensorSnapshot) -> Optional[Alert]:
        """
        Raise an alert when a sensor leaves the safe band.

        A sensor keeps at most one active threshold alert per status;
        repeated readings at the same status do not raise new ones.
        Returning to safe clears that sensor's threshold alerts.
        """
        with self._lock:
            if snapshot.status == SensorStatus.SAFE:
                for key in [k for k in self._threshold_alerts if k[0] == snapshot.name]:
                    self.clear_alert(self._threshold_alerts.pop(key))
                return None

            key = (snapshot.name, snapshot.status)
            existing = self._threshold_alerts.get(key)
            if existing and self.alerts[existing].active:
                return None

            # Moving between moderate and high replaces the previous alert
            for other in [k for k in self._threshold_alerts if k[0] == snapshot.name and k != key]:
                self.clear_alert(self._threshold_alerts.pop(other))

            alert = self.create_alert(
                level=self._level_for(snapshot.status),
                source=AlertSource.THRESHOLD,
                title=self._threshold_title(snapshot),
                message=self._threshold_message(snapshot),
                location=snapshot.location,
                sensor_name=snapshot.name,
            )
            self._threshold_alerts[key] = alert.alert_id
            return alert

    @staticmethod
    def _level_for(status: SensorStatus) -> AlertLevel:
        return AlertLevel.CRITICAL if status == SensorStatus.HIGH else AlertLevel.WARNING

    @staticmethod
    def _threshold_title(snapshot: SensorSnapshot) -> str:
        label = snapshot.name.replace("_", " ").capitalize()
        if snapshot.status == SensorStatus.HIGH:
            return f"{label} threshold exceeded"
        return f"{label} approaching threshold"

    @staticmethod
    def _threshold_message(snapshot: SensorSnapshot) -> str:
        boundary = (
            snapshot.thresholds.high
            if snapshot.status == SensorStatus.HIGH
            else snapshot.thresholds.moderate
        )
        msg = (
            f"{snapshot.name.replace('_', ' ').capitalize()} reading of "
            f"{snapshot.value:.1f} {snapshot.unit} reached the {snapshot.status.value} "
            f"threshold of {boundary:g} {snapshot.unit}"
        )
        if snapshot.location:
            msg += f" at {snapshot.location}"
        return msg + "."

    # ------------------------------------------------------------------
    # Manual controls
    # ------------------------------------------------------------------

    def activate_manual_alert(
        self,
        location: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Alert:
        """Operator-raised site alert."""
        return self.create_alert(
            level=AlertLevel.ALERT,
            source=AlertSource.MANUAL,
            title="Manual site alert activated",
            message=message or "Emergency alert activated by site operator. Stand by for instructions.",
            location=location,
        )

    def activate_manual_evacuation(
        self,
        location: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Alert:
        """Operator-ordered evacuation."""
        return self.create_alert(
            level=AlertLevel.EMERGENCY,
            source=AlertSource.MANUAL,
            title="EMERGENCY: Evacuation ordered",
            message=message or "Evacuate immediately via designated routes to the assembly point.",
            location=location,
            evacuation=True,
        )

    def reset(self) -> int:
        """Clear every active alert. Returns how many were cleared."""
        with self._lock:
            active = [a for a in self.alerts.values() if a.active]
            for alert in active:
                self.clear_alert(alert.alert_id)
            self._threshold_alerts.clear()

        logger.info(f"Alerts reset ({len(active)} cleared)")
        return len(active)

    # ------------------------------------------------------------------
    # Evacuation subscriber
    # ------------------------------------------------------------------

    def on_evacuation_event(self, event: EvacuationEvent) -> None:
        """Mirror automatic evacuations as emergency alerts."""
        if event.state == EvacuationState.TRIGGERED:
            prediction = event.source_prediction
            factors = ", ".join(prediction.contributing_factors) or "unspecified"
            self.create_alert(
                level=AlertLevel.EMERGENCY,
                source=AlertSource.EVACUATION,
                title="EMERGENCY: Automatic evacuation triggered",
                message=(
                    f"Landslide risk model reports {prediction.assessment_text()}. "
                    f"Contributing factors: {factors}."
                ),
                evacuation=True,
                evacuation_id=event.id,
            )
        elif event.state == EvacuationState.RESOLVED:
            with self._lock:
                for alert in self.alerts.values():
                    if alert.evacuation_id == event.id and alert.active:
                        self.clear_alert(alert.alert_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_active_alerts(self) -> List[Alert]:
        """Get all active alerts, oldest first."""
        with self._lock:
            return [a for a in self.alert_history if a.active]

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        """Get a specific alert by ID."""
        return self.alerts.get(alert_id)
