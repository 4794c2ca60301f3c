"""
MineSentinel - Remote Risk Model Client
Submits the latest sensor reading to an external prediction endpoint.
"""

import logging
from typing import Optional, Sequence

import httpx

from src.core.exceptions import ConfigurationError, PredictionUnavailable
from src.prediction.models import RiskPrediction
from src.sensors.models import SensorReading

logger = logging.getLogger(__name__)


class RemoteRiskModel:
    """
    Client for a landslide risk model served over HTTP.

    The model receives ``POST {api_url}/predict`` with the latest
    reading's features and answers with ``risk_level`` (or
    ``prediction``), ``confidence`` and ``contributing_factors``.
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_url:
            raise ConfigurationError("Risk model API URL is required")

        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.Client(timeout=timeout, transport=transport, headers=headers)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def build_request(reading: SensorReading) -> dict:
        return {
            "features": reading.to_model_features(),
            "timestamp": reading.timestamp,
            "location": reading.location,
        }

    def predict(self, readings: Sequence[SensorReading]) -> RiskPrediction:
        """
        Request a prediction for the most recent reading.

        Raises:
            PredictionUnavailable: No reading, transport failure, HTTP
                error or an unparseable response
        """
        if not readings:
            raise PredictionUnavailable("No sensor data available")

        body = self.build_request(readings[-1])

        try:
            response = self._client.post(f"{self.api_url}/predict", json=body)
            response.raise_for_status()
            raw = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Risk model request failed: {e}")
            raise PredictionUnavailable(f"ML Model API failed: {e}") from e
        except ValueError as e:
            raise PredictionUnavailable("ML Model API returned invalid JSON") from e

        if not isinstance(raw, dict):
            raise PredictionUnavailable("ML Model API returned an unexpected payload")

        return RiskPrediction.from_model_response(raw)
