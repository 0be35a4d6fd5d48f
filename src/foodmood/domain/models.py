"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- fetched candidates (`Place`), built once by the places fetcher and immutable afterwards
- API/CLI inputs (`UserPreferences`, `UserFeedback`)
- ranked output (`RecommendationResult`)

All input models are frozen and validate on construction, so an out-of-range rating or
price level never reaches the scorers. Validation failures raise pydantic's
`ValidationError`, which is a `ValueError` (the API layer turns it into a 400).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MIN_RATING = 1.0
MAX_RATING = 5.0
MIN_PRICE_LEVEL = 0
MAX_PRICE_LEVEL = 4


def validate_rating(rating: float) -> float:
    """Raise ValueError unless `rating` is within 1-5."""
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"Rating should be between {MIN_RATING}-{MAX_RATING}")
    return rating


def validate_price_level(price_level: int) -> int:
    """Raise ValueError unless `price_level` is within 0-4."""
    if not MIN_PRICE_LEVEL <= price_level <= MAX_PRICE_LEVEL:
        raise ValueError(f"Price level should be between {MIN_PRICE_LEVEL}-{MAX_PRICE_LEVEL}")
    return price_level


class LatLng(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def as_param(self) -> str:
        """Render as the `lat,lng` string the Maps web services expect."""
        return f"{self.lat},{self.lng}"


class BusinessStatus(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    CLOSED_TEMPORARILY = "CLOSED_TEMPORARILY"
    CLOSED_PERMANENTLY = "CLOSED_PERMANENTLY"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "BusinessStatus":
        """Map a raw API value onto a status; missing or unrecognized values become UNKNOWN."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


class Place(BaseModel):
    """A candidate food place, as fetched from the places API."""

    model_config = ConfigDict(frozen=True)

    name: str
    website_url: str = ""
    phone: str = ""
    rating: float
    price_level: int
    location: LatLng
    google_url: str = ""
    place_id: str
    business_status: BusinessStatus = BusinessStatus.UNKNOWN
    cuisines: tuple[str, ...] = ()

    @field_validator("rating")
    @classmethod
    def _check_rating(cls, v: float) -> float:
        return validate_rating(v)

    @field_validator("price_level")
    @classmethod
    def _check_price_level(cls, v: int) -> int:
        return validate_price_level(v)


class UserPreferences(BaseModel):
    """What the user asked for in one query."""

    model_config = ConfigDict(frozen=True)

    min_rating: float = MIN_RATING
    max_price_level: int = MAX_PRICE_LEVEL
    location: LatLng
    cuisines: tuple[str, ...] = ()
    open_now: bool = False

    @field_validator("min_rating")
    @classmethod
    def _check_min_rating(cls, v: float) -> float:
        return validate_rating(v)

    @field_validator("max_price_level")
    @classmethod
    def _check_max_price_level(cls, v: int) -> int:
        return validate_price_level(v)

    @field_validator("cuisines")
    @classmethod
    def _normalize_cuisines(cls, cuisines: tuple[str, ...]) -> tuple[str, ...]:
        # Lower-case, drop blanks and duplicates, keep the user's order.
        seen: dict[str, None] = {}
        for c in cuisines:
            if c and c.strip():
                seen.setdefault(c.strip().lower(), None)
        return tuple(seen)


class UserFeedback(BaseModel):
    """What a registered user did with a set of recommendations."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    recommended_places: tuple[str, ...] = Field(..., min_length=1)
    chosen_place: str | None = None
    tried_again: bool = False

    @model_validator(mode="after")
    def _chosen_place_was_recommended(self) -> "UserFeedback":
        if self.chosen_place is not None and self.chosen_place not in self.recommended_places:
            raise ValueError(
                f"chosen place '{self.chosen_place}' is not one of the recommended places"
            )
        return self


class RecommendationItem(BaseModel):
    """One ranked output item. `score` is None when the list was randomly ordered."""

    place: Place
    score: float | None = None


class RecommendationResult(BaseModel):
    """Top-N recommendations plus the query that produced them."""

    generated_at: datetime
    query: UserPreferences
    scorer: Literal["registered", "unregistered", "random"]
    results: list[RecommendationItem]
    meta: dict[str, Any] = Field(default_factory=dict)
