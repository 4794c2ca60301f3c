"""
Tests for the sensor data store client
"""
import json

import httpx
import pytest

import sys
sys.path.insert(0, '.')

from src.core.config import Settings
from src.core.exceptions import ConfigurationError, SensorDataUnavailable
from src.sensors.client import SensorDataClient, get_sensor_client


def make_client(handler):
    return SensorDataClient(
        base_url="https://store.example.com/",
        api_key="test_api_key",
        transport=httpx.MockTransport(handler),
    )


class TestSensorDataClient:
    """Test suite for the sensor data client."""

    def test_client_without_credentials(self):
        with pytest.raises(ConfigurationError):
            SensorDataClient(base_url="", api_key="key")

    def test_fetch_sensor_data(self, raw_sensor_records):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json=raw_sensor_records)

        with make_client(handler) as client:
            readings = client.fetch_sensor_data()

        assert seen["url"] == "https://store.example.com/sensor-data"
        assert seen["auth"] == "Bearer test_api_key"
        assert [r.id for r in readings] == ["rec-001", "rec-002"]
        assert readings[1].soil_strain == 320

    def test_fetch_http_error(self):
        client = make_client(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(SensorDataUnavailable):
            client.fetch_sensor_data()

    def test_fetch_non_list_payload(self):
        client = make_client(lambda request: httpx.Response(200, json={"error": "nope"}))

        with pytest.raises(SensorDataUnavailable):
            client.fetch_sensor_data()

    def test_fetch_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(SensorDataUnavailable):
            make_client(handler).fetch_sensor_data()

    def test_insert_sensor_reading(self, safe_reading):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={})

        make_client(handler).insert_sensor_reading(safe_reading)

        assert bodies[0]["Soil_Strain"] == 80.0
        assert bodies[0]["sensor_location"] == "Bench 4"
        assert bodies[0]["timestamp"] != safe_reading.timestamp

    def test_insert_failure(self, safe_reading):
        client = make_client(lambda request: httpx.Response(401))

        with pytest.raises(SensorDataUnavailable):
            client.insert_sensor_reading(safe_reading)


class TestSubscriptions:

    def setup_method(self):
        self.client = make_client(lambda request: httpx.Response(200, json=[]))
        self.received = []

    def test_publish_reaches_subscribers(self, safe_reading):
        self.client.subscribe(self.received.append)
        self.client.publish([safe_reading])

        assert self.received == [[safe_reading]]

    def test_unsubscribe(self, safe_reading):
        self.client.subscribe(self.received.append)
        self.client.unsubscribe(self.received.append)
        self.client.publish([safe_reading])

        assert self.received == []

    def test_failing_subscriber_is_isolated(self, safe_reading):
        def broken(readings):
            raise RuntimeError("subscriber bug")

        self.client.subscribe(broken)
        self.client.subscribe(self.received.append)
        self.client.publish([safe_reading])

        assert self.received == [[safe_reading]]


class TestGetSensorClient:

    def test_unconfigured(self):
        assert get_sensor_client(Settings(sensor_api_url=None, sensor_api_key=None)) is None

    def test_configured(self):
        client = get_sensor_client(
            Settings(sensor_api_url="https://store.example.com", sensor_api_key="k")
        )

        assert isinstance(client, SensorDataClient)
        client.close()
