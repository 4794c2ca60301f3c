"""
MineSentinel - Risk Prediction Source
Remote model with rule-based fallback, as consumed by the monitoring loop.
"""

import logging
from typing import Callable, List, Optional, Protocol, Sequence

from src.core.exceptions import PredictionUnavailable
from src.prediction.fallback import FallbackRiskEvaluator
from src.prediction.models import RiskPrediction
from src.prediction.remote import RemoteRiskModel
from src.sensors.models import SensorReading

logger = logging.getLogger(__name__)

PredictionCallback = Callable[[RiskPrediction], None]


class RiskPredictor(Protocol):
    def predict(self, readings: Sequence[SensorReading]) -> RiskPrediction:
        ...


class ResilientPredictionSource:
    """
    Produces one prediction per cycle.

    The remote model is tried first when present. If it raises
    PredictionUnavailable the failure is logged and the rule-based
    evaluator answers instead. With ``use_fallback=False`` the error
    propagates so the caller can skip the cycle.
    """

    def __init__(
        self,
        remote: Optional[RiskPredictor] = None,
        fallback: Optional[FallbackRiskEvaluator] = None,
        use_fallback: bool = True,
    ):
        self.remote = remote
        self.fallback = fallback or FallbackRiskEvaluator()
        self.use_fallback = use_fallback
        self._callbacks: List[PredictionCallback] = []

    @property
    def is_remote_configured(self) -> bool:
        return self.remote is not None

    def on_prediction(self, callback: PredictionCallback) -> None:
        """Subscribe to every produced prediction."""
        self._callbacks.append(callback)

    def predict(self, readings: Sequence[SensorReading]) -> RiskPrediction:
        prediction = self._predict(readings)

        for callback in list(self._callbacks):
            try:
                callback(prediction)
            except Exception as e:
                logger.error(f"Prediction subscriber failed: {e}", exc_info=True)

        return prediction

    def _predict(self, readings: Sequence[SensorReading]) -> RiskPrediction:
        if self.remote is None:
            return self.fallback.predict(readings)

        try:
            return self.remote.predict(readings)
        except PredictionUnavailable as e:
            if not self.use_fallback:
                raise
            logger.warning(f"Risk model unavailable, using rule-based fallback: {e}")
            return self.fallback.predict(readings)


def get_prediction_source(settings) -> ResilientPredictionSource:
    """
    Get prediction source instance.

    Uses the rule-based evaluator only if no model endpoint is configured.
    """
    if not settings.ml_model_configured:
        logger.warning("Risk model not configured, using rule-based fallback")
        return ResilientPredictionSource()

    remote = RemoteRiskModel(
        api_url=settings.ml_model_api_url,
        api_key=settings.ml_model_api_key,
        timeout=settings.ml_request_timeout,
    )
    logger.info("Risk model client initialized")
    return ResilientPredictionSource(remote=remote)
