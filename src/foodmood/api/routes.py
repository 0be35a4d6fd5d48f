"""
API routes.

Endpoints:
- GET  `/query`: ranked food places for a location and preferences (optionally as a signed-in user).
- POST `/register`: register the signed-in user (idempotent).
- POST `/feedback`: record which recommended place the signed-in user chose.

List parameters (`cuisines`, `recommendedPlaces`) are comma-separated strings.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError

from foodmood.config.settings import get_settings
from foodmood.domain.models import LatLng, Place, UserFeedback, UserPreferences
from foodmood.ingestion.places_fetcher import FetchError
from foodmood.recommender.recommend import Services, build_services, recommend

router = APIRouter()

MISSING_TOKEN_MESSAGE = "No user ID token was received."
UNVERIFIED_TOKEN_MESSAGE = "Didn't manage to get data for given user ID token."


@lru_cache
def _services() -> Services:
    return build_services(get_settings())


def _split_csv(value: str | None) -> list[str]:
    return [s.strip() for s in (value or "").split(",") if s.strip()]


def _verified_user_id(services: Services, id_token: str | None) -> str:
    """Resolve a request's ID token, raising 400 when absent and 404 when it does not verify."""
    if not id_token:
        raise HTTPException(status_code=400, detail={"code": "MISSING_TOKEN", "message": MISSING_TOKEN_MESSAGE})
    user_id = services.verifier.get_user_id(id_token)
    if not user_id:
        raise HTTPException(
            status_code=404, detail={"code": "UNKNOWN_USER", "message": UNVERIFIED_TOKEN_MESSAGE}
        )
    return user_id


@router.get("/query", response_model=list[Place])
def get_query(
    lat: float,
    lng: float,
    min_rating: float = Query(1.0, alias="minRating"),
    max_price_level: int = Query(4, alias="maxPriceLevel"),
    cuisines: str | None = Query(None),
    open_now: bool = Query(False, alias="openNow"),
    id_token: str | None = Query(None, alias="idToken"),
) -> list[Place]:
    """Run the recommender and return the top places (best first)."""
    services = _services()
    try:
        preferences = UserPreferences(
            location=LatLng(lat=lat, lng=lng),
            min_rating=min_rating,
            max_price_level=max_price_level,
            cuisines=tuple(_split_csv(cuisines)),
            open_now=open_now,
        )
        result = recommend(
            preferences,
            id_token=id_token,
            settings=services.settings,
            fetcher=services.fetcher,
            scorer_factory=services.scorer_factory,
            store=services.store,
        )
    except FetchError as e:
        raise HTTPException(status_code=502, detail={"code": "FETCH_ERROR", "message": str(e)}) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    return [item.place for item in result.results]


@router.post("/register")
def post_register(id_token: str | None = Query(None, alias="idToken")) -> dict:
    services = _services()
    user_id = _verified_user_id(services, id_token)
    if not services.store.is_registered(user_id):
        services.store.register_user(user_id)
    return {"user_id": user_id, "registered": True}


@router.post("/feedback")
def post_feedback(
    id_token: str | None = Query(None, alias="idToken"),
    recommended_places: str | None = Query(None, alias="recommendedPlaces"),
    chosen_place: str | None = Query(None, alias="chosenPlace"),
    try_again: bool = Query(False, alias="tryAgain"),
) -> dict:
    services = _services()
    user_id = _verified_user_id(services, id_token)
    try:
        feedback = UserFeedback(
            user_id=user_id,
            recommended_places=tuple(_split_csv(recommended_places)),
            chosen_place=chosen_place or None,
            tried_again=try_again,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail={"code": "INVALID_FEEDBACK", "message": str(e)}
        ) from e
    services.store.record_feedback(feedback)
    return {"user_id": user_id, "recorded": len(feedback.recommended_places)}
