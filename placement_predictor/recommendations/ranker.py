"""
Recommendation ranking: de-duplicate, order by priority, truncate.

Ordering is a stable sort on priority rank (high=0, medium=1, low=2), so
recommendations of equal priority keep the order their rules were declared
in. The list is cut to ``max_items`` only after sorting, which means a low
priority item is always the first to be dropped.
"""

from __future__ import annotations

from collections.abc import Iterable

from placement_predictor.models.prediction import Recommendation

MAX_RECOMMENDATIONS = 5


def rank_recommendations(
    recommendations: Iterable[Recommendation],
    max_items: int = MAX_RECOMMENDATIONS,
) -> list[Recommendation]:
    """Return the top ``max_items`` recommendations, highest priority first.

    Duplicate titles are collapsed to their first occurrence.
    """
    seen: set[str] = set()
    unique: list[Recommendation] = []
    for rec in recommendations:
        if rec.title in seen:
            continue
        seen.add(rec.title)
        unique.append(rec)

    ranked = sorted(unique, key=lambda rec: rec.priority.rank)
    return ranked[:max_items]
