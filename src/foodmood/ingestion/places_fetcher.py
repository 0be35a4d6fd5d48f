"""
Places fetcher: turn a user's preferences into validated `Place` candidates.

Search strategy (one text search per cuisine):
- the query text is the cuisine's configured search words joined with `|`;
- with no preferred cuisines, every cuisine in the catalog is searched;
- when a search comes back empty the radius is widened and the search repeated,
  up to `search.max_search_attempts` attempts per cuisine.

A place found by several cuisine searches is kept once (first-seen order) and carries every
cuisine that found it. Any Maps failure is reported as `FetchError` rather than swallowed; a
cuisine missing from the catalog is `UnknownCuisineError` (a `ValueError`), raised before any request.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from foodmood.config.settings import Settings
from foodmood.domain.models import BusinessStatus, LatLng, Place, UserPreferences
from foodmood.ingestion.maps_client import MapsApiError, MapsClient

logger = logging.getLogger(__name__)

_FETCH_ERRORS = (httpx.HTTPError, MapsApiError, ValueError)


class FetchError(RuntimeError):
    """Fetching candidates from the places API failed; the cause is chained."""


class UnknownCuisineError(ValueError):
    """A requested cuisine is not in the configured catalog."""


class PlacesFetcher:
    def __init__(self, client: MapsClient, settings: Settings):
        self._client = client
        self._settings = settings

    def search_words(self, cuisine: str) -> str:
        """Return the `|`-joined search words for a catalog cuisine."""
        words = self._settings.search.cuisines.get(cuisine)
        if not words:
            raise UnknownCuisineError(f"invalid cuisine '{cuisine}'")
        return "|".join(words)

    def fetch(self, preferences: UserPreferences) -> list[Place]:
        cuisines = preferences.cuisines or tuple(self._settings.search.cuisines)

        # Every cuisine is checked before the first request goes out.
        queries = {cuisine: self.search_words(cuisine) for cuisine in cuisines}

        found: dict[str, list[str]] = {}
        for cuisine, query in queries.items():
            try:
                results = self._search_with_radius_extension(query, preferences)
            except _FETCH_ERRORS as exc:
                raise FetchError(f"Failed to fetch places for cuisine '{cuisine}'") from exc
            for result in results:
                place_id = result.get("place_id")
                if not place_id:
                    continue
                tags = found.setdefault(str(place_id), [])
                if cuisine not in tags:
                    tags.append(cuisine)

        places: list[Place] = []
        for place_id, place_cuisines in found.items():
            try:
                details = self._client.place_details(place_id)
            except _FETCH_ERRORS as exc:
                raise FetchError(f"Failed to fetch place details for {place_id}") from exc
            place = _place_from_details(place_id, details, place_cuisines)
            if place is not None:
                places.append(place)

        logger.info(
            "Fetched %d places (%d search hits) for cuisines=%s", len(places), len(found), list(cuisines)
        )
        return places

    def _search_with_radius_extension(
        self, query: str, preferences: UserPreferences
    ) -> list[dict[str, Any]]:
        cfg = self._settings.search
        radius = float(cfg.initial_radius_m)
        for attempt in range(cfg.max_search_attempts):
            results = self._client.text_search(
                query=query,
                location=preferences.location,
                radius_m=int(min(radius, cfg.max_radius_m)),
                max_price=preferences.max_price_level,
                open_now=preferences.open_now,
                place_type=cfg.place_type,
            )
            if results:
                return results
            logger.debug("No results for %r at radius=%dm (attempt %d)", query, radius, attempt + 1)
            radius *= cfg.radius_extension_factor
        return []


def _place_from_details(place_id: str, details: dict[str, Any], cuisines: list[str]) -> Place | None:
    """Build a validated Place; details that cannot form a valid Place are skipped."""
    location = (details.get("geometry") or {}).get("location") or {}
    try:
        return Place(
            name=str(details.get("name") or ""),
            website_url=str(details.get("website") or ""),
            phone=str(details.get("formatted_phone_number") or ""),
            rating=details.get("rating"),
            price_level=details.get("price_level"),
            location=LatLng(lat=location.get("lat"), lng=location.get("lng")),
            google_url=str(details.get("url") or ""),
            place_id=str(details.get("place_id") or place_id),
            business_status=BusinessStatus.parse(details.get("business_status")),
            cuisines=tuple(cuisines),
        )
    except ValidationError as exc:
        logger.warning("Skipping place %s with invalid details: %s", place_id, exc.errors()[0].get("msg"))
        return None
