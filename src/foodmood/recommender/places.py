"""
Pure list operations over fetched places: filtering, random ordering, score ordering.

Nothing here does I/O; scores come from whichever scorer the caller passes in.
"""

from __future__ import annotations

import random
from typing import Iterable, Mapping, Sequence

from foodmood.domain.models import BusinessStatus, LatLng, Place
from foodmood.scoring.scorers import PlacesScorer


def random_sort(places: Iterable[Place], rng: random.Random | None = None) -> list[Place]:
    """Return a uniformly shuffled copy of `places`."""
    out = list(places)
    (rng or random).shuffle(out)
    return out


def sort_by_scores(places: Iterable[Place], scores: Mapping[str, float]) -> list[Place]:
    """Order by descending score; ties keep their input order, unscored places sort last."""
    return sorted(places, key=lambda p: scores.get(p.place_id, float("-inf")), reverse=True)


def score_sort(places: Sequence[Place], user_location: LatLng, scorer: PlacesScorer) -> list[Place]:
    """Return `places` ordered by descending `scorer` score."""
    return sort_by_scores(places, scorer.get_scores(places, user_location))


def _has_website(place: Place) -> bool:
    return bool(place.website_url) or bool(place.google_url)


def filter_places(
    places: Iterable[Place],
    *,
    min_rating: float,
    filter_if_no_website: bool = True,
    filter_branches_of_same_place: bool = True,
) -> list[Place]:
    """Drop places the user should not be offered.

    Kept places are operational, rated at least `min_rating` and (optionally) reachable through a
    website or Maps URL. With `filter_branches_of_same_place`, only the first place seen per exact
    name is kept. Input order is preserved.
    """
    out: list[Place] = []
    seen_names: set[str] = set()
    for place in places:
        if place.business_status != BusinessStatus.OPERATIONAL:
            continue
        if place.rating < min_rating:
            continue
        if filter_if_no_website and not _has_website(place):
            continue
        if filter_branches_of_same_place:
            if place.name in seen_names:
                continue
            seen_names.add(place.name)
        out.append(place)
    return out
