"""
Google Maps web-services client (Places text search, Place details, Distance Matrix).

One `MapsClient` is built from settings at process start and handed to every collaborator
that talks to Google (the places fetcher and the durations fetcher). It is responsible only for:
- attaching the API key,
- retrying transient failures (HTTP 429/5xx, transport errors, `OVER_QUERY_LIMIT`),
- turning non-OK API statuses into `MapsApiError`.

It intentionally does not build `Place` objects or compute scores; see
`foodmood.ingestion.places_fetcher` and `foodmood.scoring` for that.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Sequence

import httpx

from foodmood.config.settings import Settings
from foodmood.core.http import get_json, retry_after_seconds
from foodmood.domain.models import LatLng

logger = logging.getLogger(__name__)

OK_STATUSES = {"OK", "ZERO_RESULTS"}
RETRYABLE_HTTP_STATUSES = {429, 500, 502, 503, 504}
RETRYABLE_API_STATUSES = {"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}

DETAILS_FIELDS = (
    "place_id",
    "name",
    "website",
    "formatted_phone_number",
    "rating",
    "price_level",
    "geometry/location",
    "url",
    "business_status",
)


class MapsApiError(RuntimeError):
    """The Maps API answered, but with a non-OK top-level status."""

    def __init__(self, status: str, message: str | None = None):
        self.status = status
        self.message = message
        super().__init__(f"Maps API returned status={status}" + (f": {message}" if message else ""))


class MapsClient:
    """Thin Maps web-services client; the shared context for all Google requests."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _require_api_key(self) -> str:
        api_key = self._settings.maps.api_key
        if not api_key:
            raise RuntimeError("Maps API key is not configured. Set GOOGLE_MAPS_API_KEY.")
        return api_key

    def _request(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET `<base_url>/<endpoint>/json` with retry/backoff; return the OK payload."""
        cfg = self._settings.maps
        url = f"{cfg.base_url.rstrip('/')}/{endpoint}/json"
        query = {**params, "key": self._require_api_key()}

        max_attempts = int(cfg.retry.max_attempts)
        base_delay_seconds = float(cfg.retry.base_delay_seconds)
        max_delay_seconds = float(cfg.retry.max_delay_seconds)

        for attempt in range(max_attempts + 1):
            delay = min(max_delay_seconds, base_delay_seconds * (2**attempt))
            try:
                payload = get_json(
                    url, params=query, timeout_seconds=self._settings.app.http_timeout_seconds
                )
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status not in RETRYABLE_HTTP_STATUSES or attempt >= max_attempts:
                    raise
                hinted = retry_after_seconds(exc)
                if hinted is not None:
                    delay = min(max_delay_seconds, max(delay, hinted))
                logger.warning(
                    "Maps %s request failed with status=%s; retrying in %.2fs (attempt %s/%s)",
                    endpoint,
                    status,
                    delay,
                    attempt + 1,
                    max_attempts,
                )
                time.sleep(delay)
                continue
            except httpx.TransportError:
                if attempt >= max_attempts:
                    raise
                logger.warning(
                    "Maps %s transport error; retrying in %.2fs (attempt %s/%s)",
                    endpoint,
                    delay,
                    attempt + 1,
                    max_attempts,
                )
                time.sleep(delay)
                continue

            if not isinstance(payload, dict):
                raise MapsApiError("MALFORMED_RESPONSE", f"unexpected payload type {type(payload).__name__}")

            api_status = str(payload.get("status", "UNKNOWN_ERROR"))
            if api_status in OK_STATUSES:
                return payload
            if api_status in RETRYABLE_API_STATUSES and attempt < max_attempts:
                logger.warning(
                    "Maps %s returned %s; retrying in %.2fs (attempt %s/%s)",
                    endpoint,
                    api_status,
                    delay,
                    attempt + 1,
                    max_attempts,
                )
                time.sleep(delay)
                continue
            raise MapsApiError(api_status, payload.get("error_message"))

        raise RuntimeError("Maps request failed without an exception (unexpected).")

    def text_search(
        self,
        *,
        query: str,
        location: LatLng,
        radius_m: int,
        max_price: int | None = None,
        open_now: bool = False,
        place_type: str | None = None,
    ) -> list[dict[str, Any]]:
        """Run a Places text search; returns the raw `results` list (possibly empty)."""
        params: dict[str, Any] = {
            "query": query,
            "location": location.as_param(),
            "radius": int(radius_m),
        }
        if max_price is not None:
            params["maxprice"] = int(max_price)
        if open_now:
            params["opennow"] = "true"
        if place_type:
            params["type"] = place_type
        payload = self._request("place/textsearch", params)
        results = payload.get("results") or []
        return [r for r in results if isinstance(r, dict)]

    def place_details(self, place_id: str, fields: Sequence[str] = DETAILS_FIELDS) -> dict[str, Any]:
        """Fetch details for one place; returns the raw `result` object."""
        payload = self._request("place/details", {"place_id": place_id, "fields": ",".join(fields)})
        result = payload.get("result")
        if not isinstance(result, dict):
            raise MapsApiError("NOT_FOUND", f"no details for place_id={place_id}")
        return result

    def distance_matrix(
        self, *, origins: Sequence[LatLng], destination: LatLng, mode: str | None = None
    ) -> dict[str, Any]:
        """Distance Matrix with many origins and one destination; returns the raw payload."""
        params = {
            "origins": "|".join(o.as_param() for o in origins),
            "destinations": destination.as_param(),
            "mode": mode or self._settings.maps.travel_mode,
        }
        return self._request("distancematrix", params)
