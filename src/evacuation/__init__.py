"""
MineSentinel - Evacuation Module
Automatic evacuation lifecycle driven by risk predictions.
"""

from src.evacuation.coordinator import (
    EvacuationCoordinator,
    EvacuationEvent,
    EvacuationState,
    EvacuationStatistics,
)

__all__ = [
    "EvacuationCoordinator",
    "EvacuationEvent",
    "EvacuationState",
    "EvacuationStatistics",
]
