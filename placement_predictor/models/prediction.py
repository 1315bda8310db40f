"""
Prediction output models.

``PredictionResult`` is the combined response for one scoring request:
probability, label, and the ranked advice list. ``PredictionRecord`` is the
same result persisted together with the inputs that produced it and the
model version used, forming the prediction history.

``Recommendation`` objects are never stored on their own; they only exist
inside a ``PredictionResult`` or as the JSON column of a ``PredictionRecord``.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from placement_predictor.models.attributes import AttributeSet


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key: high=0, medium=1, low=2."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[Priority, int] = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}


class PredictionLabel(StrEnum):
    PLACED = "Placed"
    NOT_PLACED = "Not Placed"


class Recommendation(BaseModel):
    """One piece of improvement advice."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    priority: Priority
    category: str


class ScoreResult(BaseModel):
    """Output of the scoring engine.

    Attributes:
        probability: Placement probability as an integer percent, 0–100.
        label: ``"Placed"`` iff ``probability >= 50``.
    """

    model_config = ConfigDict(frozen=True)

    probability: int
    label: PredictionLabel

    @field_validator("probability")
    @classmethod
    def validate_probability(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"probability must be in [0, 100], got {v}.")
        return v


class PredictionResult(BaseModel):
    """Combined response: score plus recommendations."""

    model_config = ConfigDict(frozen=True)

    probability: int
    prediction: PredictionLabel
    recommendations: list[Recommendation]


class PredictionRecord(BaseModel):
    """A persisted prediction with the inputs that produced it.

    Attributes:
        prediction_id: Auto-assigned DB PK; ``None`` before insertion.
        user_id: Free-text identity of the requester, if known.
        attributes: The six submitted attributes.
        probability: Integer percent from the scoring engine.
        prediction: Label from the scoring engine.
        recommendations: The advice list returned with the prediction.
        model_version: ``ModelState.version`` used for scoring.
        created_at: UTC time of the prediction; filled by the DB when ``None``.
    """

    model_config = ConfigDict(frozen=True)

    prediction_id: Optional[int] = None
    user_id: Optional[str] = None
    attributes: AttributeSet
    probability: int
    prediction: PredictionLabel
    recommendations: list[Recommendation] = []
    model_version: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_result(
        cls,
        attributes: AttributeSet,
        result: PredictionResult,
        model_version: int,
        user_id: Optional[str] = None,
    ) -> "PredictionRecord":
        return cls(
            user_id=user_id,
            attributes=attributes,
            probability=result.probability,
            prediction=result.prediction,
            recommendations=result.recommendations,
            model_version=model_version,
        )


class PredictionStats(BaseModel):
    """Aggregate figures over the prediction history."""

    model_config = ConfigDict(frozen=True)

    total_predictions: int
    avg_probability: int
    placed_count: int
    distinct_users: int
