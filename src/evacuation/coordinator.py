"""
MineSentinel - Evacuation Coordinator

Turns the risk prediction stream into evacuation events and drives
their lifecycle:

    TRIGGERED -> ACKNOWLEDGED -> RESOLVED
    TRIGGERED -> RESOLVED

At most one event is current (non-resolved) at a time. High-risk
predictions that arrive while an event is current are ignored, and a
safe prediction resolves the current event whether or not it was
acknowledged.

All mutating operations hold a reentrant lock for the whole transition,
including subscriber dispatch, so notifications are delivered in
transition order and a subscriber may call back into the coordinator.
Subscriber exceptions are logged and never interrupt dispatch.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from src.core.constants import EVACUATION_CONFIDENCE_THRESHOLD
from src.prediction.models import RiskPrediction

logger = logging.getLogger(__name__)


class EvacuationState(str, Enum):
    """Lifecycle state of an evacuation event."""
    TRIGGERED = "triggered"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


@dataclass
class EvacuationEvent:
    """One automatic evacuation, from trigger to resolution."""
    id: str
    triggered_at: datetime
    source_prediction: RiskPrediction
    state: EvacuationState = EvacuationState.TRIGGERED
    acknowledged_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.state != EvacuationState.RESOLVED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "triggered_at": self.triggered_at.isoformat(),
            "state": self.state.value,
            "acknowledged_at": self.acknowledged_at.isoformat() if self.acknowledged_at else None,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "prediction": self.source_prediction.to_dict(),
        }


@dataclass(frozen=True)
class EvacuationStatistics:
    """Event counts by state over the recorded history."""
    total: int
    triggered: int
    acknowledged: int
    resolved: int
    currently_evacuating: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "triggered": self.triggered,
            "acknowledged": self.acknowledged,
            "resolved": self.resolved,
            "currently_evacuating": self.currently_evacuating,
        }


EvacuationCallback = Callable[[], None]
EvacuationEventCallback = Callable[[EvacuationEvent], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EvacuationCoordinator:
    """Owns the current evacuation slot and the evacuation history."""

    def __init__(
        self,
        enabled: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the coordinator.

        Args:
            enabled: Whether predictions may trigger new evacuations
            clock: Source of timestamps for lifecycle transitions
        """
        self._enabled = enabled
        self._clock = clock
        self._lock = threading.RLock()
        self._current: Optional[EvacuationEvent] = None
        self._history: List[EvacuationEvent] = []
        self._evacuation_callbacks: List[EvacuationCallback] = []
        self._event_callbacks: List[EvacuationEventCallback] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def on_evacuation_triggered(self, callback: EvacuationCallback) -> None:
        """Register a no-argument callback run once per new evacuation."""
        with self._lock:
            self._evacuation_callbacks.append(callback)

    def on_evacuation_event(self, callback: EvacuationEventCallback) -> None:
        """Register a callback run with a snapshot of every lifecycle change."""
        with self._lock:
            self._event_callbacks.append(callback)

    def unsubscribe(self, callback: Callable) -> None:
        with self._lock:
            self._evacuation_callbacks = [cb for cb in self._evacuation_callbacks if cb != callback]
            self._event_callbacks = [cb for cb in self._event_callbacks if cb != callback]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool) -> None:
        """Allow or block new triggers. Does not touch a current event."""
        with self._lock:
            self._enabled = enabled
        logger.info(f"Auto evacuation {'enabled' if enabled else 'disabled'}")

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def should_trigger(self, prediction: RiskPrediction) -> bool:
        with self._lock:
            return (
                self._current is None
                and prediction.is_high_risk
                and prediction.confidence >= EVACUATION_CONFIDENCE_THRESHOLD
            )

    def process_prediction(self, prediction: RiskPrediction) -> Optional[EvacuationEvent]:
        """
        Apply one prediction.

        Returns:
            Snapshot of the event created by this prediction, if any
        """
        with self._lock:
            if not self._enabled:
                return None

            if self.should_trigger(prediction):
                return self._trigger(prediction)

            if self._current is not None and not prediction.is_high_risk:
                logger.info("Risk prediction back to safe, resolving evacuation")
                self.resolve()

            return None

    def acknowledge(self) -> Optional[EvacuationEvent]:
        """Mark the current triggered event as acknowledged by an operator."""
        with self._lock:
            event = self._current
            if event is None or event.state != EvacuationState.TRIGGERED:
                return None

            event.state = EvacuationState.ACKNOWLEDGED
            event.acknowledged_at = self._clock()
            logger.info(f"Evacuation {event.id} acknowledged by operator")

            snapshot = self._snapshot(event)
            self._notify_event(snapshot)
            return snapshot

    def resolve(self) -> Optional[EvacuationEvent]:
        """Close the current event and clear the current slot."""
        with self._lock:
            event = self._current
            if event is None:
                return None

            event.state = EvacuationState.RESOLVED
            event.resolved_at = self._clock()
            self._current = None
            logger.info(f"Evacuation {event.id} resolved - conditions safe")

            snapshot = self._snapshot(event)
            self._notify_event(snapshot)
            return snapshot

    def clear_history(self) -> None:
        """Forget past events. A current event stays current."""
        with self._lock:
            self._history = []
        logger.info("Evacuation history cleared")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current(self) -> Optional[EvacuationEvent]:
        with self._lock:
            return self._snapshot(self._current) if self._current else None

    def get_history(self) -> List[EvacuationEvent]:
        with self._lock:
            return [self._snapshot(event) for event in self._history]

    def get_statistics(self) -> EvacuationStatistics:
        with self._lock:
            counts = {state: 0 for state in EvacuationState}
            for event in self._history:
                counts[event.state] += 1

            return EvacuationStatistics(
                total=len(self._history),
                triggered=counts[EvacuationState.TRIGGERED],
                acknowledged=counts[EvacuationState.ACKNOWLEDGED],
                resolved=counts[EvacuationState.RESOLVED],
                currently_evacuating=self._current is not None,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _trigger(self, prediction: RiskPrediction) -> EvacuationEvent:
        event = EvacuationEvent(
            id=f"evac-{uuid.uuid4().hex[:12]}",
            triggered_at=self._clock(),
            source_prediction=prediction,
        )
        self._current = event
        self._history.append(event)

        logger.warning(
            f"AUTO EVACUATION TRIGGERED: {event.id} "
            f"confidence={prediction.confidence:.2f} "
            f"factors={list(prediction.contributing_factors)}"
        )

        snapshot = self._snapshot(event)
        for callback in list(self._evacuation_callbacks):
            self._dispatch(callback)
        self._notify_event(snapshot)

        return snapshot

    def _notify_event(self, snapshot: EvacuationEvent) -> None:
        # Every subscriber sees the state of this transition, even if an
        # earlier subscriber moved the event on
        for callback in list(self._event_callbacks):
            self._dispatch(callback, self._snapshot(snapshot))

    @staticmethod
    def _dispatch(callback: Callable, *args) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Evacuation subscriber {callback!r} failed")

    @staticmethod
    def _snapshot(event: EvacuationEvent) -> EvacuationEvent:
        # RiskPrediction is frozen, so a shallow copy is fully detached
        return replace(event)
