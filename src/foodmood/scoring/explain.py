"""
Small explainability formatting helpers.

Used by the CLI to print compact summaries of recommendation results.
"""

from __future__ import annotations

from foodmood.domain.models import RecommendationItem


def one_line_summary(item: RecommendationItem) -> str:
    """Render a compact single-line summary for a ranked place."""
    place = item.place
    parts = [f"rating={place.rating:.1f}", f"price={place.price_level}"]
    if item.score is not None:
        parts.insert(0, f"score={item.score:.3f}")
    if place.cuisines:
        parts.append("cuisines=" + ",".join(place.cuisines))
    return " | ".join(parts)
