"""
MineSentinel - Prediction Module
Risk predictions from a remote model or local rule-based fallback.
"""

from src.prediction.models import RiskPrediction
from src.prediction.fallback import FallbackRiskEvaluator
from src.prediction.remote import RemoteRiskModel
from src.prediction.source import (
    ResilientPredictionSource,
    get_prediction_source,
)

__all__ = [
    "RiskPrediction",
    "FallbackRiskEvaluator",
    "RemoteRiskModel",
    "ResilientPredictionSource",
    "get_prediction_source",
]
