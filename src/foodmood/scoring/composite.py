"""
Shared scoring terms.

Every score is a weighted sum of small normalized terms:
- `rating_term`: place rating over the maximum rating (1-5 maps to 0.2-1.0)
- `duration_term`: driving-time desirability, 1 at zero seconds, 0 at or beyond the cap
- `cuisine_affinity`: share of the user's history held by the place's best-matching cuisine
"""

from __future__ import annotations

from typing import Mapping

from foodmood.domain.models import Place


def rating_term(place: Place, *, max_rating: float = 5.0) -> float:
    return float(place.rating) / float(max_rating)


def duration_term(duration_seconds: float, *, max_duration_seconds: float) -> float:
    """`max(1 - d / cap, 0)`; never negative even when `d` exceeds the cap."""
    return max(1.0 - float(duration_seconds) / float(max_duration_seconds), 0.0)


def cuisine_affinity(place: Place, history: Mapping[str, int], total: float) -> float:
    """Best history count among the place's cuisines over the history total.

    Cuisines missing from the history count as 0, as does a place with no cuisines.
    """
    if total <= 0:
        return 0.0
    best = max((int(history.get(c, 0)) for c in place.cuisines), default=0)
    return best / float(total)
