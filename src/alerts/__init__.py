"""
MineSentinel - Alert System
Threshold, manual and evacuation alerts.
"""

from src.alerts.alert_manager import (
    Alert,
    AlertLevel,
    AlertManager,
    AlertSource,
)

__all__ = [
    "Alert",
    "AlertLevel",
    "AlertManager",
    "AlertSource",
]
