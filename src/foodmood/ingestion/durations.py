"""
Driving durations from candidate places to the user (Distance Matrix).

`DurationsFetcher` is the duration provider the scorers depend on:
- one entry per input place, keyed by `place_id`, value in seconds;
- a single unroutable place gets `fallback_seconds` instead of failing the batch;
- request/transport failures propagate (the scorers catch them and fall back).
"""

from __future__ import annotations

import logging
from typing import Sequence

from foodmood.domain.models import LatLng, Place
from foodmood.ingestion.maps_client import MapsApiError, MapsClient

logger = logging.getLogger(__name__)


class DurationsFetcher:
    def __init__(self, client: MapsClient, *, max_origins_per_request: int = 25):
        self._client = client
        self._chunk = max(1, int(max_origins_per_request))

    def get_durations(
        self, places: Sequence[Place], destination: LatLng, fallback_seconds: float
    ) -> dict[str, float]:
        """Return driving seconds from each place to `destination`, keyed by place_id."""
        durations: dict[str, float] = {}
        for start in range(0, len(places), self._chunk):
            batch = list(places[start : start + self._chunk])
            payload = self._client.distance_matrix(
                origins=[p.location for p in batch], destination=destination
            )
            rows = payload.get("rows") or []
            if len(rows) != len(batch):
                raise MapsApiError(
                    "MALFORMED_RESPONSE", f"expected {len(batch)} rows, got {len(rows)}"
                )
            for place, row in zip(batch, rows):
                durations[place.place_id] = _element_seconds(row, fallback_seconds, place.place_id)
        return durations


def _element_seconds(row: dict, fallback_seconds: float, place_id: str) -> float:
    elements = row.get("elements") or []
    element = elements[0] if elements else {}
    if element.get("status") == "OK":
        value = (element.get("duration") or {}).get("value")
        if value is not None:
            return float(value)
    logger.debug("No route for place %s (status=%s); using fallback", place_id, element.get("status"))
    return float(fallback_seconds)
