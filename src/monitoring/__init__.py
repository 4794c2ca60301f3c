"""
MineSentinel - Monitoring Module
Scheduled sensor polling and risk prediction cycles.
"""

from src.monitoring.service import MonitoringService

__all__ = ["MonitoringService"]
