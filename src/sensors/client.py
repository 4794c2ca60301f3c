"""
MineSentinel - Sensor Data Client

HTTP client for the site sensor data store. The store exposes a single
collection:

    GET  {base_url}/sensor-data   -> list of raw sensor records
    POST {base_url}/sensor-data   <- one raw sensor record

Authentication is a Bearer API key.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

import httpx

from src.core.exceptions import ConfigurationError, SensorDataUnavailable
from src.sensors.models import SensorReading

logger = logging.getLogger(__name__)

ReadingsCallback = Callable[[List[SensorReading]], None]


class SensorDataClient:
    """
    Client for the sensor data store.

    Usage:
        with SensorDataClient(base_url, api_key) as client:
            readings = client.fetch_sensor_data()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize sensor data client.

        Args:
            base_url: Data store base URL
            api_key: Data store API key
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not base_url or not api_key:
            raise ConfigurationError("Sensor data store URL and API key are required")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._subscribers: List[ReadingsCallback] = []
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def url(self) -> str:
        return f"{self.base_url}/sensor-data"

    def fetch_sensor_data(self) -> List[SensorReading]:
        """
        Fetch the latest sensor records.

        Returns:
            Readings in store order (oldest first)

        Raises:
            SensorDataUnavailable: On transport or HTTP failure
        """
        try:
            response = self._client.get(self.url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch sensor data: {e}")
            raise SensorDataUnavailable(f"Database fetch failed: {e}") from e

        if not isinstance(payload, list):
            raise SensorDataUnavailable("Sensor data store returned a non-list payload")

        readings = [SensorReading.from_raw(item) for item in payload if isinstance(item, dict)]
        logger.debug(f"Retrieved {len(readings)} sensor readings")
        return readings

    def insert_sensor_reading(self, reading: SensorReading) -> None:
        """Store a reading (manual entry or testing), stamped with the current time."""
        body = reading.to_raw(timestamp=datetime.now(timezone.utc).isoformat())
        try:
            response = self._client.post(self.url, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to insert sensor reading: {e}")
            raise SensorDataUnavailable(f"Database insert failed: {e}") from e

    # Subscriptions

    def subscribe(self, callback: ReadingsCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ReadingsCallback) -> None:
        self._subscribers = [cb for cb in self._subscribers if cb != callback]

    def publish(self, readings: List[SensorReading]) -> None:
        """Hand fresh readings to every subscriber."""
        for callback in list(self._subscribers):
            try:
                callback(readings)
            except Exception as e:
                logger.error(f"Sensor data subscriber failed: {e}", exc_info=True)


def get_sensor_client(settings) -> Optional[SensorDataClient]:
    """Build a client from settings, or None if the store is not configured."""
    if not settings.sensor_store_configured:
        logger.warning("Sensor data store not configured, live polling disabled")
        return None

    return SensorDataClient(
        base_url=settings.sensor_api_url,
        api_key=settings.sensor_api_key,
        timeout=settings.sensor_request_timeout,
    )
