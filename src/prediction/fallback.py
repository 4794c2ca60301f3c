"""
MineSentinel - Rule-Based Risk Evaluator

Local fallback used when the remote risk model is not configured or
unavailable. Each rule that fires adds its weight to a risk score:

    Rule                              Limit     Weight
    current rainfall (mm)             > 25      0.3
    3-day rainfall (mm)               > 50      0.2
    7-day rainfall (mm)               > 100     0.2
    soil strain (μɛ)                  > 300     0.4
    pore water pressure (kPa)         > 200     0.3

Confidence is the score capped at 1.0; a score of 0.7 or more is high risk.
Only the most recent reading is evaluated.
"""

import logging
from typing import Sequence

from src.core.constants import (
    FALLBACK_RISK_RULES,
    HIGH_RISK_SCORE,
    NORMAL_CONDITIONS_FACTOR,
    NO_DATA_FACTOR,
)
from src.prediction.models import RiskPrediction
from src.sensors.models import SensorReading

logger = logging.getLogger(__name__)


class FallbackRiskEvaluator:
    """Weighted rule evaluator over the latest sensor reading."""

    def __init__(self, rules=None, high_risk_score: float = HIGH_RISK_SCORE):
        self.rules = list(rules or FALLBACK_RISK_RULES)
        self.high_risk_score = high_risk_score

    def score(self, reading: SensorReading):
        """Return (score, fired factors) for a single reading."""
        score = 0.0
        factors = []

        for attribute, limit, weight, factor in self.rules:
            if getattr(reading, attribute) > limit:
                score += weight
                factors.append(factor)

        # Sums of tenths drift in binary floats, so 0.3 + 0.2 + 0.2 may land just off 0.7
        return round(score, 6), factors

    def predict(self, readings: Sequence[SensorReading]) -> RiskPrediction:
        """
        Evaluate the most recent reading.

        Args:
            readings: Readings in chronological order

        Returns:
            RiskPrediction; a zero-confidence safe prediction if no
            reading is available
        """
        if not readings:
            return RiskPrediction(
                is_high_risk=False,
                confidence=0.0,
                contributing_factors=(NO_DATA_FACTOR,),
            )

        latest = readings[-1]
        score, factors = self.score(latest)

        prediction = RiskPrediction(
            is_high_risk=score >= self.high_risk_score,
            confidence=min(score, 1.0),
            contributing_factors=tuple(factors) if factors else (NORMAL_CONDITIONS_FACTOR,),
        )
        logger.debug(f"Fallback evaluation for {latest.location}: {prediction.assessment_text()}")
        return prediction
