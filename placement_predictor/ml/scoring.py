"""
Scoring engine: linear score -> logistic probability -> label.

    z           = sum(coef_i * feature_i) + bias
    probability = round(sigmoid(z) * 100)        integer percent, 0–100
    label       = "Placed" if probability >= 50 else "Not Placed"

Rounding is half-up (``floor(x + 0.5)``), not Python's banker's rounding,
so a probability of exactly 49.5% reports as 50 and labels as "Placed".
"""

from __future__ import annotations

import math

from placement_predictor.ml.features import FeatureVector, build_feature_vector
from placement_predictor.models.attributes import AttributeSet
from placement_predictor.models.coefficients import Coefficients
from placement_predictor.models.prediction import PredictionLabel, ScoreResult

PLACED_THRESHOLD_PCT = 50


def sigmoid(z: float) -> float:
    """Logistic function ``1 / (1 + e^-z)``.

    ``math.exp`` raises instead of returning inf for very negative ``z``;
    the limit there is 0, which is returned directly. NaN propagates.
    """
    try:
        return 1.0 / (1.0 + math.exp(-z))
    except OverflowError:
        return 0.0


def linear_score(features: FeatureVector, coefficients: Coefficients) -> float:
    """Dot product of the six features with their weights, plus bias."""
    total = coefficients.bias * features.bias
    for weight, value in zip(coefficients.weights(), features.features()):
        total += weight * value
    return total


def probability_pct(z: float) -> int:
    """Convert a linear score to an integer percent, rounding half up."""
    return int(math.floor(sigmoid(z) * 100 + 0.5))


def label_for(probability: int) -> PredictionLabel:
    if probability >= PLACED_THRESHOLD_PCT:
        return PredictionLabel.PLACED
    return PredictionLabel.NOT_PLACED


def score(attrs: AttributeSet, coefficients: Coefficients) -> ScoreResult:
    """Score one applicant against a coefficient vector.

    Args:
        attrs:        Validated applicant attributes.
        coefficients: Coefficients to score with, normally
            ``ModelState.coefficients`` from the store.

    Returns:
        ScoreResult with integer probability and label.
    """
    z = linear_score(build_feature_vector(attrs), coefficients)
    probability = probability_pct(z)
    return ScoreResult(probability=probability, label=label_for(probability))
