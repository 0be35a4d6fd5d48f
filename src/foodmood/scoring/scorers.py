"""
Place scorers.

Two implementations share the `PlacesScorer` contract
`get_scores(places, user_location) -> {place_id: score}`:

- `UnregisteredScorer`: rating + driving duration.
- `RegisteredScorer`: rating + driving duration + cuisine affinity from the user's history.
  With no history it delegates to an `UnregisteredScorer`.

Scorers never raise for collaborator failures. If the durations fetch fails they log a warning
and score without the duration term (rating only, or rating + cuisines), re-weighted per
`settings.scoring`.
"""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, Sequence

from foodmood.config.settings import ScoringSettings
from foodmood.domain.models import LatLng, Place
from foodmood.scoring.composite import cuisine_affinity, duration_term, rating_term

logger = logging.getLogger(__name__)


class DurationProvider(Protocol):
    def get_durations(
        self, places: Sequence[Place], destination: LatLng, fallback_seconds: float
    ) -> Mapping[str, float]: ...


class CuisineHistorySource(Protocol):
    def get_preferred_cuisines(self, user_id: str) -> Mapping[str, int]: ...


class PlacesScorer(Protocol):
    def get_scores(self, places: Sequence[Place], user_location: LatLng) -> dict[str, float]: ...


class UnregisteredScorer:
    """Scores by rating (0.7) and driving duration (0.3)."""

    kind = "unregistered"

    def __init__(self, durations: DurationProvider, settings: ScoringSettings | None = None):
        self._durations = durations
        self._settings = settings or ScoringSettings()

    def get_scores(self, places: Sequence[Place], user_location: LatLng) -> dict[str, float]:
        if not places:
            return {}
        cfg = self._settings
        try:
            durations = self._durations.get_durations(
                places, user_location, fallback_seconds=cfg.max_duration_seconds
            )
        except Exception as e:
            logger.warning("Durations fetch failed; scoring %d places by rating only: %s", len(places), e)
            return {p.place_id: rating_term(p, max_rating=cfg.max_rating) for p in places}

        w = cfg.unregistered_weights
        return {
            p.place_id: w.rating * rating_term(p, max_rating=cfg.max_rating)
            + w.duration
            * duration_term(
                durations.get(p.place_id, cfg.max_duration_seconds),
                max_duration_seconds=cfg.max_duration_seconds,
            )
            for p in places
        }


class RegisteredScorer:
    """Scores by rating (0.5), driving duration (0.3) and cuisine affinity (0.2)."""

    kind = "registered"

    def __init__(
        self,
        user_id: str,
        history: CuisineHistorySource,
        durations: DurationProvider,
        fallback: PlacesScorer,
        settings: ScoringSettings | None = None,
    ):
        self.user_id = user_id
        self._history = history
        self._durations = durations
        self._fallback = fallback
        self._settings = settings or ScoringSettings()

    def _load_history(self) -> dict[str, int]:
        try:
            history = self._history.get_preferred_cuisines(self.user_id)
        except Exception as e:
            logger.warning("Could not read cuisine history for user %s: %s", self.user_id, e)
            return {}
        return {str(k): max(0, int(v)) for k, v in (history or {}).items()}

    def get_scores(self, places: Sequence[Place], user_location: LatLng) -> dict[str, float]:
        if not places:
            return {}
        cfg = self._settings

        # One history read per batch; the same history applies to every place.
        history = self._load_history()
        total = sum(history.values())
        if total <= 0:
            return self._fallback.get_scores(places, user_location)
        affinity = {p.place_id: cuisine_affinity(p, history, total) for p in places}

        try:
            durations = self._durations.get_durations(
                places, user_location, fallback_seconds=cfg.max_duration_seconds
            )
        except Exception as e:
            logger.warning(
                "Durations fetch failed; scoring %d places by rating and cuisines: %s", len(places), e
            )
            w = cfg.registered_weights_no_durations
            return {
                p.place_id: w.rating * rating_term(p, max_rating=cfg.max_rating)
                + w.cuisines * affinity[p.place_id]
                for p in places
            }

        w = cfg.registered_weights
        return {
            p.place_id: w.rating * rating_term(p, max_rating=cfg.max_rating)
            + w.duration
            * duration_term(
                durations.get(p.place_id, cfg.max_duration_seconds),
                max_duration_seconds=cfg.max_duration_seconds,
            )
            + w.cuisines * affinity[p.place_id]
            for p in places
        }
