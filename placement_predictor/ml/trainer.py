"""
Batch gradient-descent trainer and training-set accuracy evaluator.

train_coefficients() fits the seven coefficients to a labeled corpus with
plain full-batch gradient descent on the logistic loss. evaluate_accuracy()
scores the same corpus with the fitted vector. retrain() runs both.

Design decisions
----------------
- Fixed hyperparameters (learning_rate=0.1, iterations=1000 by default) and
  NO early stopping, convergence check, decay, or regularization. Every run
  performs exactly ``iterations`` full passes, so identical input always
  yields bit-identical output.
- Every retrain starts from ``DEFAULT_COEFFICIENTS``, not from the previous
  fit. Passing ``initial`` explicitly is supported for tests and tooling.
- Gradients are summed over records in corpus order, then applied as
  ``coef -= (learning_rate * grad_sum) / n``.
- No minimum-size guard here. The retrain stage enforces
  ``min_training_samples`` before calling in; an empty corpus raises
  ``ZeroDivisionError``.
- Non-finite values from pathological data propagate without a distinct
  error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from placement_predictor.ml.features import build_feature_vector
from placement_predictor.ml.scoring import sigmoid
from placement_predictor.models.coefficients import (
    COEFFICIENT_NAMES,
    DEFAULT_COEFFICIENTS,
    Coefficients,
)
from placement_predictor.models.training import LabeledRecord

logger = logging.getLogger(__name__)

DEFAULT_LEARNING_RATE = 0.1
DEFAULT_ITERATIONS = 1000
DECISION_THRESHOLD = 0.5


@dataclass(frozen=True)
class RetrainResult:
    """Outcome of one retrain.

    Attributes:
        coefficients: Fitted coefficient vector.
        accuracy:     Training-set accuracy percent, 0–100 (unrounded).
        sample_count: Number of records trained on.
    """

    coefficients: Coefficients
    accuracy:     float
    sample_count: int


def _prepare(records: Sequence[LabeledRecord]) -> list[tuple[tuple[float, ...], float]]:
    """Pair each record's feature tuple with its 0/1 target."""
    return [
        (build_feature_vector(r).features(), 1.0 if r.was_placed else 0.0)
        for r in records
    ]


def _linear(bias: float, weights: Sequence[float], values: Sequence[float]) -> float:
    # Same summation order as scoring.linear_score: bias term first.
    z = bias * 1.0
    for weight, value in zip(weights, values):
        z += weight * value
    return z


def train_coefficients(
    records: Sequence[LabeledRecord],
    initial: Coefficients = DEFAULT_COEFFICIENTS,
    learning_rate: float = DEFAULT_LEARNING_RATE,
    iterations: int = DEFAULT_ITERATIONS,
) -> Coefficients:
    """Fit coefficients by full-batch gradient descent.

    Feature tuples are built once up front and the weights are plain floats
    during the loop; ``Coefficients`` is only constructed for the result.

    Args:
        records:       Labeled corpus. Must be non-empty.
        initial:       Starting coefficients.
        learning_rate: Step size applied to the mean gradient.
        iterations:    Number of full passes; always run to completion.

    Returns:
        A new ``Coefficients`` instance. ``initial`` is not modified.
    """
    samples = _prepare(records)
    n = len(samples)

    weights = list(initial.weights())
    bias = initial.bias
    n_features = len(weights)

    for _ in range(iterations):
        grad = [0.0] * n_features
        grad_bias = 0.0

        for values, target in samples:
            error = sigmoid(_linear(bias, weights, values)) - target
            grad_bias += error
            for i, value in enumerate(values):
                grad[i] += error * value

        bias -= (learning_rate * grad_bias) / n
        for i in range(n_features):
            weights[i] -= (learning_rate * grad[i]) / n

    fitted = Coefficients(bias=bias, **dict(zip(COEFFICIENT_NAMES, weights)))
    logger.debug(
        "Gradient descent finished: n=%d iterations=%d lr=%s coefficients=%s",
        n, iterations, learning_rate, fitted.rounded(),
    )
    return fitted


def evaluate_accuracy(
    records: Sequence[LabeledRecord],
    coefficients: Coefficients,
) -> float:
    """Percentage of records whose thresholded prediction matches the label.

    A record is correct when ``sigmoid(z) >= 0.5`` equals ``was_placed``.
    """
    weights = coefficients.weights()
    correct = 0
    for values, target in _prepare(records):
        z = _linear(coefficients.bias, weights, values)
        predicted = sigmoid(z) >= DECISION_THRESHOLD
        if predicted == bool(target):
            correct += 1
    return (correct / len(records)) * 100


def retrain(
    records: Sequence[LabeledRecord],
    learning_rate: float = DEFAULT_LEARNING_RATE,
    iterations: int = DEFAULT_ITERATIONS,
    initial: Coefficients = DEFAULT_COEFFICIENTS,
) -> RetrainResult:
    """Fit coefficients from the default starting point and evaluate them.

    Args:
        records:       Full training corpus (caller guarantees the minimum size).
        learning_rate: Gradient-descent step size.
        iterations:    Number of full-batch iterations.
        initial:       Starting coefficients; the hand-chosen defaults unless
            a caller explicitly overrides them.

    Returns:
        RetrainResult with fitted coefficients, accuracy and sample count.
    """
    logger.info(
        "Retraining on %d record(s): iterations=%d learning_rate=%s",
        len(records), iterations, learning_rate,
    )
    coefficients = train_coefficients(
        records,
        initial=initial,
        learning_rate=learning_rate,
        iterations=iterations,
    )
    accuracy = evaluate_accuracy(records, coefficients)
    logger.info("Retrain accuracy on training set: %.2f%%", accuracy)
    return RetrainResult(
        coefficients=coefficients,
        accuracy=accuracy,
        sample_count=len(records),
    )
