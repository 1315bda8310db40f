"""
Recommendation engine: maps applicant attributes to ranked improvement advice.

Modules
-------
rules  : Rule dataclass + RULES table + fired_rules() — pure predicates over
         an AttributeSet, evaluated independently in declaration order.
ranker : rank_recommendations() — de-duplicate, stable sort by priority,
         truncate.

``recommend(attrs)`` runs both and is the only entry point callers need.
"""

from __future__ import annotations

from placement_predictor.models.attributes import AttributeSet
from placement_predictor.models.prediction import Recommendation
from placement_predictor.recommendations.ranker import (
    MAX_RECOMMENDATIONS,
    rank_recommendations,
)
from placement_predictor.recommendations.rules import fired_rules


def recommend(
    attrs: AttributeSet,
    max_items: int = MAX_RECOMMENDATIONS,
) -> list[Recommendation]:
    """Return at most ``max_items`` recommendations, highest priority first.

    An empty list is a valid result (nothing to improve); rendering an
    empty-state message is left to the caller.
    """
    return rank_recommendations(
        [rule.recommendation for rule in fired_rules(attrs)],
        max_items=max_items,
    )


__all__ = ["recommend"]
