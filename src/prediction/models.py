"""
MineSentinel - Risk Prediction Model
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RiskPrediction:
    """
    Outcome of one risk evaluation cycle.

    Attributes:
        is_high_risk: True when evacuation may be needed
        confidence: Model confidence in [0, 1]
        contributing_factors: Human-readable reasons, in rule order
        produced_at: When the prediction was produced
    """
    is_high_risk: bool
    confidence: float
    contributing_factors: Tuple[str, ...] = ()
    produced_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        # Accept any sequence but store it immutably
        object.__setattr__(self, "contributing_factors", tuple(self.contributing_factors))

    @classmethod
    def from_model_response(cls, raw: Dict[str, Any]) -> "RiskPrediction":
        """Normalize a remote model response."""
        try:
            confidence = float(raw.get("confidence") or 0)
        except (TypeError, ValueError):
            confidence = 0.0

        factors = raw.get("contributing_factors") or []
        if isinstance(factors, str):
            factors = [factors]

        return cls(
            is_high_risk=bool(raw.get("risk_level") or raw.get("prediction") == 1),
            confidence=min(max(confidence, 0.0), 1.0),
            contributing_factors=tuple(str(f) for f in factors),
        )

    def assessment_text(self) -> str:
        """Short label for banners and notifications."""
        label = "HIGH RISK" if self.is_high_risk else "SAFE"
        return f"{label} - Confidence: {self.confidence * 100:.1f}%"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_high_risk": self.is_high_risk,
            "confidence": round(self.confidence, 4),
            "contributing_factors": list(self.contributing_factors),
            "produced_at": self.produced_at.isoformat(),
            "assessment": self.assessment_text(),
        }
