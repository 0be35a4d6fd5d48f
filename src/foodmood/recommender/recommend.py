from __future__ import annotations

# Orchestrator for the recommendation pipeline:
#   fetch (Places API) -> filter -> score + sort (or shuffle) -> top-N
# Each layer stays focused: ingestion fetches, scoring does the math, this file wires them.

import logging
import random
import sqlite3
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from foodmood.auth.verifier import UserVerifier
from foodmood.config.settings import Settings, get_settings
from foodmood.core.env import resolve_project_path
from foodmood.domain.models import RecommendationItem, RecommendationResult, UserPreferences
from foodmood.ingestion.durations import DurationsFetcher
from foodmood.ingestion.maps_client import MapsClient
from foodmood.ingestion.places_fetcher import PlacesFetcher
from foodmood.recommender.places import filter_places, random_sort, sort_by_scores
from foodmood.scoring.factory import ScorerFactory
from foodmood.storage.preferences import PreferenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    """Long-lived collaborators, built once per process from settings."""

    settings: Settings
    maps: MapsClient
    fetcher: PlacesFetcher
    durations: DurationsFetcher
    verifier: UserVerifier
    store: PreferenceStore
    scorer_factory: ScorerFactory


def build_services(settings: Settings) -> Services:
    maps = MapsClient(settings)
    durations = DurationsFetcher(maps, max_origins_per_request=settings.maps.max_origins_per_request)
    verifier = UserVerifier(settings)
    store = PreferenceStore(resolve_project_path(settings.storage.path))
    return Services(
        settings=settings,
        maps=maps,
        fetcher=PlacesFetcher(maps, settings),
        durations=durations,
        verifier=verifier,
        store=store,
        scorer_factory=ScorerFactory(
            verifier=verifier, history=store, durations=durations, settings=settings.scoring
        ),
    )


def _remember_preferences(store: PreferenceStore, user_id: str, preferences: UserPreferences) -> None:
    try:
        store.store_preferences(user_id, preferences)
    except (sqlite3.Error, ValueError) as e:
        logger.warning("Could not store preferences for user %s: %s", user_id, str(e))


def recommend(
    preferences: UserPreferences,
    *,
    id_token: str | None = None,
    settings: Settings | None = None,
    fetcher: PlacesFetcher | None = None,
    scorer_factory: ScorerFactory | None = None,
    store: PreferenceStore | None = None,
    rng: random.Random | None = None,
    max_results: int | None = None,
    ordering: str | None = None,
) -> RecommendationResult:
    """Run the pipeline for one query and return the top-N places.

    Injected collaborators (tests, the API's cached services) are used as given; anything missing
    is built from settings and released before returning. `FetchError` from the fetch step and
    `ValueError` for a cuisine outside the catalog propagate to the caller.
    """
    settings = settings or get_settings()
    if fetcher is not None and scorer_factory is not None:
        return _recommend(
            preferences,
            id_token=id_token,
            settings=settings,
            fetcher=fetcher,
            scorer_factory=scorer_factory,
            store=store,
            rng=rng,
            max_results=max_results,
            ordering=ordering,
        )

    services = build_services(settings)
    try:
        return _recommend(
            preferences,
            id_token=id_token,
            settings=settings,
            fetcher=fetcher or services.fetcher,
            scorer_factory=scorer_factory or services.scorer_factory,
            store=store or services.store,
            rng=rng,
            max_results=max_results,
            ordering=ordering,
        )
    finally:
        services.store.close()


def _recommend(
    preferences: UserPreferences,
    *,
    id_token: str | None,
    settings: Settings,
    fetcher: PlacesFetcher,
    scorer_factory: ScorerFactory,
    store: PreferenceStore | None,
    rng: random.Random | None,
    max_results: int | None,
    ordering: str | None,
) -> RecommendationResult:
    t0 = time.monotonic()
    timings_ms: dict[str, int] = {}

    top_n = int(settings.recommend.max_results if max_results is None else max_results)
    if top_n < 0:
        raise ValueError(f"max_results must be >= 0, got {top_n}")
    ordering = ordering or settings.recommend.ordering

    scorer = scorer_factory.create(id_token)
    user_id = getattr(scorer, "user_id", None)

    t_fetch = time.monotonic()
    fetched = fetcher.fetch(preferences)
    timings_ms["fetch"] = int((time.monotonic() - t_fetch) * 1000)

    # Only a query the fetcher accepted is remembered, even when it found nothing.
    if user_id and store is not None:
        _remember_preferences(store, user_id, preferences)

    candidates = filter_places(
        fetched,
        min_rating=preferences.min_rating,
        filter_if_no_website=settings.recommend.filter_if_no_website,
        filter_branches_of_same_place=settings.recommend.filter_branches_of_same_place,
    )

    t_rank = time.monotonic()
    if ordering == "random":
        ranked = random_sort(candidates, rng=rng)[:top_n]
        results = [RecommendationItem(place=p, score=None) for p in ranked]
        scorer_kind = "random"
    else:
        scores = scorer.get_scores(candidates, preferences.location)
        ranked = sort_by_scores(candidates, scores)[:top_n]
        results = [RecommendationItem(place=p, score=scores.get(p.place_id)) for p in ranked]
        scorer_kind = getattr(scorer, "kind", "unregistered")
    timings_ms["rank"] = int((time.monotonic() - t_rank) * 1000)
    timings_ms["total"] = int((time.monotonic() - t0) * 1000)

    logger.info(
        "Recommended %d of %d candidates (%d fetched) scorer=%s",
        len(results),
        len(candidates),
        len(fetched),
        scorer_kind,
    )

    return RecommendationResult(
        generated_at=datetime.now(timezone.utc),
        query=preferences,
        scorer=scorer_kind,
        results=results,
        meta={
            "registered": bool(user_id),
            "max_results": top_n,
            "counts": {"fetched": len(fetched), "candidates": len(candidates)},
            "timings_ms": timings_ms,
        },
    )
