"""
MineSentinel - REST API

FastAPI application exposing live sensor status, risk predictions,
the automatic evacuation lifecycle and site alerts to the dashboard.

Run with: uvicorn src.api.main:app --reload
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from src.alerts.alert_manager import AlertManager
from src.core.config import Settings, get_settings
from src.core.exceptions import ConfigurationError, SensorDataUnavailable
from src.core.logging import setup_logging
from src.evacuation.coordinator import EvacuationCoordinator
from src.monitoring.service import MonitoringService
from src.prediction.models import RiskPrediction
from src.prediction.source import get_prediction_source
from src.sensors.client import get_sensor_client
from src.sensors.models import SensorReading
from src.sensors.thresholds import SensorThresholds

API_VERSION = "0.1.0"


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    modules: dict


class SensorReadingRequest(BaseModel):
    """Raw sensor reading, in the data store's field names. Bad values read as 0."""
    Rainfall_mm: Optional[Any] = None
    Rainfall_3Day: Optional[Any] = None
    Rainfall_7Day: Optional[Any] = None
    Temperature_C: Optional[Any] = None
    Soil_Strain: Optional[Any] = None
    Pore_Water_Pressure_kPa: Optional[Any] = None
    location: Optional[str] = None
    timestamp: Optional[str] = None


class ThresholdUpdateRequest(BaseModel):
    """Partial threshold update for one sensor."""
    safe: Optional[float] = None
    moderate: Optional[float] = None
    high: Optional[float] = None


class PredictionRequest(BaseModel):
    """Externally produced risk prediction."""
    is_high_risk: bool
    confidence: float = Field(..., ge=0, le=1)
    contributing_factors: List[str] = Field(default_factory=list)


class EnabledRequest(BaseModel):
    enabled: bool


class ManualAlertRequest(BaseModel):
    """Operator-raised alert."""
    location: Optional[str] = None
    message: Optional[str] = None


# ============================================================================
# Dependencies
# ============================================================================

def get_coordinator(request: Request) -> EvacuationCoordinator:
    return request.app.state.coordinator


def get_monitoring(request: Request) -> MonitoringService:
    return request.app.state.monitoring


def get_alert_manager(request: Request) -> AlertManager:
    return request.app.state.alert_manager


# ============================================================================
# Application factory
# ============================================================================

def create_app(
    settings: Optional[Settings] = None,
    coordinator: Optional[EvacuationCoordinator] = None,
    monitoring: Optional[MonitoringService] = None,
    alert_manager: Optional[AlertManager] = None,
) -> FastAPI:
    """
    Build the API with explicitly wired components.

    Anything not supplied is built from settings. The monitoring
    scheduler only starts with the app lifespan, and only when a sensor
    data store is configured.
    """
    settings = settings or get_settings()
    logger = setup_logging(settings.log_level)

    coordinator = coordinator or EvacuationCoordinator(enabled=settings.auto_evacuation_enabled)
    alert_manager = alert_manager or AlertManager()
    if monitoring is None:
        monitoring = MonitoringService(
            coordinator=coordinator,
            prediction_source=get_prediction_source(settings),
            alert_manager=alert_manager,
            sensor_client=get_sensor_client(settings),
            thresholds=SensorThresholds(),
            poll_interval_seconds=settings.sensor_poll_interval_seconds,
            prediction_interval_seconds=settings.prediction_interval_seconds,
        )
    coordinator.on_evacuation_event(alert_manager.on_evacuation_event)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if monitoring.sensor_client is not None:
            monitoring.start()
        else:
            logger.warning("No sensor data store configured, readings must be posted to the API")
        yield
        monitoring.shutdown()

    app = FastAPI(
        title="MineSentinel",
        description="Mining-site environmental monitoring and automatic evacuation API",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.coordinator = coordinator
    app.state.monitoring = monitoring
    app.state.alert_manager = alert_manager

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    # ========================================================================
    # System Routes
    # ========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request):
        """Check API health and which collaborators are configured."""
        settings = request.app.state.settings
        monitoring = request.app.state.monitoring
        modules = {
            "sensor_store": settings.sensor_store_configured,
            "risk_model": settings.ml_model_configured,
            "monitoring": monitoring.is_running,
            "auto_evacuation": request.app.state.coordinator.is_enabled,
        }

        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
            modules=modules,
        )

    # ========================================================================
    # Sensor Routes
    # ========================================================================

    @app.get("/api/v1/sensors", tags=["Sensors"])
    async def list_sensors(monitoring: MonitoringService = Depends(get_monitoring)):
        """Latest classified value of every monitored sensor."""
        snapshots = monitoring.latest_snapshots()
        return {
            "count": len(snapshots),
            "sensors": [s.to_dict() for s in snapshots],
        }

    @app.post("/api/v1/sensors/readings", tags=["Sensors"])
    async def post_reading(
        body: SensorReadingRequest,
        monitoring: MonitoringService = Depends(get_monitoring),
    ):
        """Manually enter a reading. It is also stored when a data store is configured."""
        reading = SensorReading.from_raw(body.model_dump())

        if monitoring.sensor_client is not None:
            try:
                monitoring.sensor_client.insert_sensor_reading(reading)
            except SensorDataUnavailable as e:
                raise HTTPException(status_code=503, detail=str(e))

        snapshots = monitoring.ingest_readings([reading])
        return {
            "reading": reading.to_dict(),
            "sensors": [s.to_dict() for s in snapshots],
        }

    @app.get("/api/v1/sensors/thresholds", tags=["Sensors"])
    async def get_thresholds(monitoring: MonitoringService = Depends(get_monitoring)):
        return monitoring.thresholds.to_dict()

    @app.put("/api/v1/sensors/thresholds/{name}", tags=["Sensors"])
    async def update_thresholds(
        name: str,
        body: ThresholdUpdateRequest,
        monitoring: MonitoringService = Depends(get_monitoring),
    ):
        """Update one sensor's threshold tier. Tiers must stay strictly ascending."""
        if name not in monitoring.thresholds.names():
            raise HTTPException(status_code=404, detail=f"Unknown sensor: {name}")
        try:
            tier = monitoring.thresholds.update(
                name, safe=body.safe, moderate=body.moderate, high=body.high
            )
        except ConfigurationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"name": name, "thresholds": tier.to_dict()}

    # ========================================================================
    # Prediction Routes
    # ========================================================================

    @app.post("/api/v1/prediction", tags=["Prediction"])
    async def predict_risk(
        body: SensorReadingRequest,
        monitoring: MonitoringService = Depends(get_monitoring),
    ):
        """Evaluate risk for a reading without touching the evacuation state."""
        reading = SensorReading.from_raw(body.model_dump())
        prediction = monitoring.prediction_source.predict([reading])
        return prediction.to_dict()

    @app.get("/api/v1/prediction/latest", tags=["Prediction"])
    async def latest_prediction(monitoring: MonitoringService = Depends(get_monitoring)):
        if monitoring.last_prediction is None:
            raise HTTPException(status_code=404, detail="No prediction produced yet")
        return monitoring.last_prediction.to_dict()

    # ========================================================================
    # Evacuation Routes
    # ========================================================================

    @app.post("/api/v1/evacuation/predictions", tags=["Evacuation"])
    async def process_prediction(
        body: PredictionRequest,
        coordinator: EvacuationCoordinator = Depends(get_coordinator),
    ):
        """Feed a prediction to the evacuation coordinator."""
        prediction = RiskPrediction(
            is_high_risk=body.is_high_risk,
            confidence=body.confidence,
            contributing_factors=tuple(body.contributing_factors),
        )
        triggered = coordinator.process_prediction(prediction)
        current = coordinator.get_current()
        return {
            "triggered": triggered is not None,
            "current": current.to_dict() if current else None,
        }

    @app.get("/api/v1/evacuation/current", tags=["Evacuation"])
    async def current_evacuation(coordinator: EvacuationCoordinator = Depends(get_coordinator)):
        current = coordinator.get_current()
        return {"current": current.to_dict() if current else None}

    @app.get("/api/v1/evacuation/history", tags=["Evacuation"])
    async def evacuation_history(coordinator: EvacuationCoordinator = Depends(get_coordinator)):
        history = coordinator.get_history()
        return {"count": len(history), "events": [e.to_dict() for e in history]}

    @app.delete("/api/v1/evacuation/history", tags=["Evacuation"])
    async def clear_evacuation_history(coordinator: EvacuationCoordinator = Depends(get_coordinator)):
        coordinator.clear_history()
        return {"cleared": True}

    @app.get("/api/v1/evacuation/stats", tags=["Evacuation"])
    async def evacuation_stats(coordinator: EvacuationCoordinator = Depends(get_coordinator)):
        return coordinator.get_statistics().to_dict()

    @app.post("/api/v1/evacuation/acknowledge", tags=["Evacuation"])
    async def acknowledge_evacuation(coordinator: EvacuationCoordinator = Depends(get_coordinator)):
        """Acknowledge the current evacuation. A no-op when nothing is triggered."""
        event = coordinator.acknowledge()
        return {"changed": event is not None, "event": event.to_dict() if event else None}

    @app.post("/api/v1/evacuation/resolve", tags=["Evacuation"])
    async def resolve_evacuation(coordinator: EvacuationCoordinator = Depends(get_coordinator)):
        """Resolve the current evacuation. A no-op when nothing is current."""
        event = coordinator.resolve()
        return {"changed": event is not None, "event": event.to_dict() if event else None}

    @app.put("/api/v1/evacuation/enabled", tags=["Evacuation"])
    async def set_auto_evacuation(
        body: EnabledRequest,
        coordinator: EvacuationCoordinator = Depends(get_coordinator),
    ):
        coordinator.set_enabled(body.enabled)
        return {"enabled": coordinator.is_enabled}

    # ========================================================================
    # Alert Routes
    # ========================================================================

    @app.get("/api/v1/alerts", tags=["Alerts"])
    async def list_alerts(alert_manager: AlertManager = Depends(get_alert_manager)):
        """List active alerts."""
        alerts = alert_manager.get_active_alerts()
        return {"count": len(alerts), "alerts": [a.to_dict() for a in alerts]}

    @app.get("/api/v1/alerts/{alert_id}", tags=["Alerts"])
    async def get_alert(alert_id: str, alert_manager: AlertManager = Depends(get_alert_manager)):
        alert = alert_manager.get_alert(alert_id)
        if alert is None:
            raise HTTPException(status_code=404, detail="Alert not found")
        return alert.to_dict()

    @app.post("/api/v1/alerts/manual", tags=["Alerts"])
    async def manual_alert(
        body: ManualAlertRequest,
        alert_manager: AlertManager = Depends(get_alert_manager),
    ):
        alert = alert_manager.activate_manual_alert(body.location, body.message)
        return alert.to_dict()

    @app.post("/api/v1/alerts/evacuate", tags=["Alerts"])
    async def manual_evacuation(
        body: ManualAlertRequest,
        alert_manager: AlertManager = Depends(get_alert_manager),
    ):
        alert = alert_manager.activate_manual_evacuation(body.location, body.message)
        return alert.to_dict()

    @app.post("/api/v1/alerts/reset", tags=["Alerts"])
    async def reset_alerts(alert_manager: AlertManager = Depends(get_alert_manager)):
        return {"cleared": alert_manager.reset()}


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app.state.settings.api_host, port=app.state.settings.api_port)
