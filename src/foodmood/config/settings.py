# src/foodmood/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/foodmood/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `GOOGLE_MAPS_API_KEY`, `GOOGLE_CLIENT_ID`)
- an external YAML file via `FOODMOOD_CONFIG_PATH`

Design rule:
- Tuning knobs (weights, radii, cuisine search words) live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from foodmood.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `foodmood.config`."""
    text = resources.files("foodmood.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "FoodMood"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class MapsRetrySettings(BaseModel):
    max_attempts: int = Field(2, ge=0)
    base_delay_seconds: float = Field(0.5, ge=0)
    max_delay_seconds: float = Field(4.0, ge=0)


class MapsSettings(BaseModel):
    base_url: str = "https://maps.googleapis.com/maps/api"
    api_key: str | None = None
    travel_mode: Literal["driving", "walking", "bicycling", "transit"] = "driving"
    max_origins_per_request: int = Field(25, ge=1, le=25)
    retry: MapsRetrySettings = Field(default_factory=MapsRetrySettings)


class SearchSettings(BaseModel):
    place_type: str = "restaurant"
    initial_radius_m: int = Field(1000, ge=1)
    radius_extension_factor: float = Field(2.0, ge=1)
    max_search_attempts: int = Field(4, ge=1)
    max_radius_m: int = 50_000
    # cuisine name -> search words; words are OR-ed in the text query.
    cuisines: dict[str, list[str]] = Field(default_factory=dict)


class AuthSettings(BaseModel):
    client_id: str | None = None
    tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"
    issuers: list[str] = Field(
        default_factory=lambda: ["accounts.google.com", "https://accounts.google.com"]
    )


class StorageSettings(BaseModel):
    path: str = ".data/foodmood.sqlite3"


class UnregisteredWeights(BaseModel):
    rating: float = Field(0.7, ge=0, le=1)
    duration: float = Field(0.3, ge=0, le=1)


class RegisteredWeights(BaseModel):
    rating: float = Field(0.5, ge=0, le=1)
    duration: float = Field(0.3, ge=0, le=1)
    cuisines: float = Field(0.2, ge=0, le=1)


class RegisteredNoDurationWeights(BaseModel):
    rating: float = Field(0.7, ge=0, le=1)
    cuisines: float = Field(0.3, ge=0, le=1)


class ScoringSettings(BaseModel):
    max_rating: float = 5.0
    max_duration_seconds: float = Field(2400, gt=0)
    unregistered_weights: UnregisteredWeights = Field(default_factory=UnregisteredWeights)
    registered_weights: RegisteredWeights = Field(default_factory=RegisteredWeights)
    registered_weights_no_durations: RegisteredNoDurationWeights = Field(
        default_factory=RegisteredNoDurationWeights
    )


class RecommendSettings(BaseModel):
    max_results: int = Field(3, ge=1)
    ordering: Literal["score", "random"] = "score"
    filter_if_no_website: bool = True
    filter_branches_of_same_place: bool = True


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    maps: MapsSettings = Field(default_factory=MapsSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    recommend: RecommendSettings = Field(default_factory=RecommendSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small to avoid exposing unsafe overrides.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("FOODMOOD_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    db_path = os.getenv("FOODMOOD_DB_PATH")
    if db_path:
        data.setdefault("storage", {})["path"] = db_path

    api_key = os.getenv("GOOGLE_MAPS_API_KEY") or os.getenv("API_KEY")
    if api_key:
        data.setdefault("maps", {})["api_key"] = api_key

    client_id = os.getenv("GOOGLE_CLIENT_ID") or os.getenv("CLIENT_ID")
    if client_id:
        data.setdefault("auth", {})["client_id"] = client_id

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("FOODMOOD_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
