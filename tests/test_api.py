"""
Tests for API endpoints
"""
import pytest
from fastapi.testclient import TestClient

import sys
sys.path.insert(0, '.')

from src.api.main import create_app
from src.core.config import Settings


@pytest.fixture
def client():
    settings = Settings(sensor_api_url=None, sensor_api_key=None, ml_model_api_url=None)
    return TestClient(create_app(settings=settings))


HIGH_RISK = {"is_high_risk": True, "confidence": 0.9, "contributing_factors": ["Critical soil strain levels"]}
SAFE = {"is_high_risk": False, "confidence": 0.1}

CRITICAL_READING = {
    "Rainfall_mm": 30,
    "Rainfall_3Day": 60,
    "Rainfall_7Day": 110,
    "Temperature_C": 24,
    "Soil_Strain": 320,
    "Pore_Water_Pressure_kPa": 210,
    "location": "North Pit Wall",
}


class TestSystemEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["modules"]["sensor_store"] is False
        assert data["modules"]["auto_evacuation"] is True


class TestSensorEndpoints:

    def test_post_reading_updates_sensors(self, client):
        response = client.post("/api/v1/sensors/readings", json=CRITICAL_READING)

        assert response.status_code == 200
        assert response.json()["reading"]["soil_strain"] == 320

        sensors = {s["name"]: s for s in client.get("/api/v1/sensors").json()["sensors"]}
        assert sensors["strain"]["status"] == "high"
        assert sensors["temperature"]["status"] == "safe"

    def test_post_reading_with_bad_values(self, client):
        response = client.post(
            "/api/v1/sensors/readings",
            json={"Rainfall_mm": "n/a", "Soil_Strain": None, "Temperature_C": "21.5", "location": "X"},
        )

        assert response.status_code == 200
        reading = response.json()["reading"]
        assert reading["rainfall_mm"] == 0.0
        assert reading["soil_strain"] == 0.0
        assert reading["pore_water_pressure_kpa"] == 0.0
        assert reading["temperature_c"] == 21.5
        assert reading["location"] == "X"

    def test_update_thresholds(self, client):
        response = client.put("/api/v1/sensors/thresholds/rainfall", json={"moderate": 18})

        assert response.status_code == 200
        assert response.json()["thresholds"]["moderate"] == 18
        assert client.get("/api/v1/sensors/thresholds").json()["rainfall"]["moderate"] == 18

    def test_update_thresholds_rejects_non_ascending(self, client):
        response = client.put("/api/v1/sensors/thresholds/rainfall", json={"moderate": 40})

        assert response.status_code == 400

    def test_update_unknown_sensor(self, client):
        assert client.put("/api/v1/sensors/thresholds/humidity", json={"high": 1}).status_code == 404


class TestPredictionEndpoints:

    def test_predict_does_not_trigger(self, client):
        response = client.post("/api/v1/prediction", json=CRITICAL_READING)

        assert response.status_code == 200
        assert response.json()["is_high_risk"] is True
        assert response.json()["confidence"] == 1.0
        assert client.get("/api/v1/evacuation/current").json()["current"] is None

    def test_predict_with_unparseable_values(self, client):
        response = client.post(
            "/api/v1/prediction",
            json={"Rainfall_mm": 30, "Soil_Strain": "broken", "Pore_Water_Pressure_kPa": None},
        )

        assert response.status_code == 200
        assert response.json()["confidence"] == 0.3
        assert response.json()["contributing_factors"] == ["High current rainfall"]

    def test_latest_prediction_missing(self, client):
        assert client.get("/api/v1/prediction/latest").status_code == 404


class TestEvacuationEndpoints:

    def test_lifecycle(self, client):
        response = client.post("/api/v1/evacuation/predictions", json=HIGH_RISK)
        assert response.json()["triggered"] is True
        assert response.json()["current"]["state"] == "triggered"

        # Debounced
        assert client.post("/api/v1/evacuation/predictions", json=HIGH_RISK).json()["triggered"] is False

        ack = client.post("/api/v1/evacuation/acknowledge").json()
        assert ack["changed"] is True
        assert ack["event"]["state"] == "acknowledged"

        resolved = client.post("/api/v1/evacuation/resolve").json()
        assert resolved["event"]["state"] == "resolved"

        stats = client.get("/api/v1/evacuation/stats").json()
        assert stats == {
            "total": 1,
            "triggered": 0,
            "acknowledged": 0,
            "resolved": 1,
            "currently_evacuating": False,
        }

    def test_auto_resolve(self, client):
        client.post("/api/v1/evacuation/predictions", json=HIGH_RISK)
        client.post("/api/v1/evacuation/predictions", json=SAFE)

        history = client.get("/api/v1/evacuation/history").json()
        assert history["count"] == 1
        assert history["events"][0]["state"] == "resolved"

    def test_noop_acknowledge(self, client):
        response = client.post("/api/v1/evacuation/acknowledge")

        assert response.status_code == 200
        assert response.json() == {"changed": False, "event": None}

    def test_disable(self, client):
        assert client.put("/api/v1/evacuation/enabled", json={"enabled": False}).json() == {"enabled": False}

        response = client.post("/api/v1/evacuation/predictions", json=HIGH_RISK)
        assert response.json()["triggered"] is False
        assert client.get("/api/v1/evacuation/history").json()["count"] == 0

    def test_invalid_confidence(self, client):
        response = client.post(
            "/api/v1/evacuation/predictions",
            json={"is_high_risk": True, "confidence": 1.5},
        )
        assert response.status_code == 422

    def test_clear_history(self, client):
        client.post("/api/v1/evacuation/predictions", json=HIGH_RISK)
        client.post("/api/v1/evacuation/resolve")

        assert client.delete("/api/v1/evacuation/history").status_code == 200
        assert client.get("/api/v1/evacuation/history").json()["count"] == 0


class TestAlertEndpoints:

    def test_evacuation_raises_alert(self, client):
        client.post("/api/v1/evacuation/predictions", json=HIGH_RISK)

        alerts = client.get("/api/v1/alerts").json()["alerts"]
        assert len(alerts) == 1
        assert alerts[0]["level"] == "emergency"
        assert alerts[0]["source"] == "evacuation"

        client.post("/api/v1/evacuation/resolve")
        assert client.get("/api/v1/alerts").json()["count"] == 0

    def test_manual_controls(self, client):
        alert = client.post("/api/v1/alerts/manual", json={"location": "Zone C"}).json()
        assert alert["source"] == "manual"
        assert client.get(f"/api/v1/alerts/{alert['alert_id']}").status_code == 200

        evac = client.post("/api/v1/alerts/evacuate", json={}).json()
        assert evac["evacuation_recommended"] is True

        assert client.post("/api/v1/alerts/reset").json() == {"cleared": 2}
        assert client.get("/api/v1/alerts").json()["count"] == 0

    def test_unknown_alert(self, client):
        assert client.get("/api/v1/alerts/ALERT-NOPE").status_code == 404
