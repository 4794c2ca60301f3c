"""
MineSentinel - Monitoring Service

Background jobs that keep the dashboard current:

* poll_sensors        - fetch readings, classify them, raise threshold alerts
* run_prediction_cycle - predict risk from the latest readings and feed the
                         evacuation coordinator

The coordinator itself never schedules anything; this service is the only
place that owns a polling cadence.
"""

import logging
import threading
from typing import Dict, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.alerts.alert_manager import AlertManager
from src.core.constants import READING_FIELDS
from src.core.exceptions import PredictionUnavailable, SensorDataUnavailable
from src.evacuation.coordinator import EvacuationCoordinator
from src.prediction.models import RiskPrediction
from src.prediction.source import ResilientPredictionSource
from src.sensors.client import SensorDataClient
from src.sensors.models import SensorReading
from src.sensors.thresholds import SensorSnapshot, SensorThresholds, evaluate_sensor

logger = logging.getLogger(__name__)


class MonitoringService:
    """Polls sensors and feeds risk predictions to the evacuation coordinator."""

    def __init__(
        self,
        coordinator: EvacuationCoordinator,
        prediction_source: ResilientPredictionSource,
        alert_manager: Optional[AlertManager] = None,
        sensor_client: Optional[SensorDataClient] = None,
        thresholds: Optional[SensorThresholds] = None,
        poll_interval_seconds: int = 5,
        prediction_interval_seconds: int = 10,
    ):
        self.coordinator = coordinator
        self.prediction_source = prediction_source
        self.alert_manager = alert_manager
        self.sensor_client = sensor_client
        self.thresholds = thresholds or SensorThresholds()
        self.poll_interval_seconds = poll_interval_seconds
        self.prediction_interval_seconds = prediction_interval_seconds

        self.scheduler = BackgroundScheduler()
        self.is_running = False
        self.last_prediction: Optional[RiskPrediction] = None

        self._lock = threading.Lock()
        self._readings: List[SensorReading] = []
        self._previous: Optional[SensorReading] = None
        self._snapshots: Dict[str, SensorSnapshot] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the scheduler and its two interval jobs."""
        if self.is_running:
            return

        self.scheduler.add_job(
            self.poll_sensors,
            IntervalTrigger(seconds=self.poll_interval_seconds),
            id="poll_sensors",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.add_job(
            self.run_prediction_cycle,
            IntervalTrigger(seconds=self.prediction_interval_seconds),
            id="run_prediction_cycle",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info(
            f"Monitoring started (sensors every {self.poll_interval_seconds}s, "
            f"predictions every {self.prediction_interval_seconds}s)"
        )

    def shutdown(self) -> None:
        """Stop the scheduler without waiting for running jobs."""
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Monitoring stopped")

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def poll_sensors(self) -> List[SensorSnapshot]:
        """Fetch readings from the data store. Store failures skip the cycle."""
        if self.sensor_client is None:
            return []

        try:
            readings = self.sensor_client.fetch_sensor_data()
        except SensorDataUnavailable as e:
            logger.warning(f"Sensor poll skipped: {e}")
            return []

        snapshots = self.ingest_readings(readings)
        self.sensor_client.publish(readings)
        return snapshots

    def ingest_readings(self, readings: List[SensorReading]) -> List[SensorSnapshot]:
        """Record new readings and evaluate the latest one against thresholds."""
        if not readings:
            return []

        with self._lock:
            self._previous = self._readings[-1] if self._readings else None
            self._readings = list(readings)
            latest = readings[-1]
            previous = self._previous

            snapshots = []
            for name, attribute in READING_FIELDS.items():
                snapshot = evaluate_sensor(
                    name=name,
                    value=getattr(latest, attribute),
                    thresholds=self.thresholds.get(name),
                    previous=getattr(previous, attribute) if previous else None,
                    location=latest.location,
                    timestamp=latest.timestamp,
                )
                self._snapshots[name] = snapshot
                snapshots.append(snapshot)

        if self.alert_manager is not None:
            for snapshot in snapshots:
                self.alert_manager.evaluate_snapshot(snapshot)

        return snapshots

    def run_prediction_cycle(self) -> Optional[RiskPrediction]:
        """
        Predict risk from the latest readings and hand it to the coordinator.

        Nothing reaches the coordinator when there are no readings yet or
        when the prediction source fails.
        """
        readings = self.latest_readings()
        if not readings:
            logger.debug("No sensor readings yet, prediction cycle skipped")
            return None

        try:
            prediction = self.prediction_source.predict(readings)
        except PredictionUnavailable as e:
            logger.warning(f"Prediction cycle skipped: {e}")
            return None

        self.last_prediction = prediction
        self.coordinator.process_prediction(prediction)
        return prediction

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def latest_readings(self) -> List[SensorReading]:
        with self._lock:
            return list(self._readings)

    def latest_snapshots(self) -> List[SensorSnapshot]:
        with self._lock:
            return list(self._snapshots.values())
