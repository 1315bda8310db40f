"""
Prediction: score an applicant and attach recommendations.

predict() is the single call behind the prediction command. Scoring and
recommendation generation are independent of each other; both read only
their arguments, so concurrent calls need no synchronisation. Persisting
the result as a ``PredictionRecord`` is the caller's job.
"""

from __future__ import annotations

import logging

from placement_predictor.ml.scoring import score
from placement_predictor.models.attributes import AttributeSet
from placement_predictor.models.coefficients import Coefficients
from placement_predictor.models.prediction import PredictionResult
from placement_predictor.recommendations import recommend
from placement_predictor.recommendations.ranker import MAX_RECOMMENDATIONS

logger = logging.getLogger(__name__)


def predict(
    attrs: AttributeSet,
    coefficients: Coefficients,
    max_recommendations: int = MAX_RECOMMENDATIONS,
) -> PredictionResult:
    """Score ``attrs`` and combine it with the ranked advice list.

    Args:
        attrs:               Validated applicant attributes.
        coefficients:        Coefficients to score with.
        max_recommendations: Cap on the advice list length.

    Returns:
        PredictionResult ``{probability, prediction, recommendations}``.
    """
    result = score(attrs, coefficients)
    recommendations = recommend(attrs, max_items=max_recommendations)
    logger.debug(
        "Predicted %d%% (%s) with %d recommendation(s)",
        result.probability, result.label.value, len(recommendations),
    )
    return PredictionResult(
        probability=result.probability,
        prediction=result.label,
        recommendations=recommendations,
    )
