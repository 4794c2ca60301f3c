"""
MineSentinel - Exceptions
"""


class MineSentinelError(Exception):
    """Base class for application errors."""


class ConfigurationError(MineSentinelError):
    """Invalid or missing configuration (thresholds, credentials)."""


class PredictionUnavailable(MineSentinelError):
    """The remote risk model could not produce a prediction."""


class SensorDataUnavailable(MineSentinelError):
    """The sensor data store could not be reached or returned an error."""
