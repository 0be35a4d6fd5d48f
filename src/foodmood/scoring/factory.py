"""
Scorer selection.

`ScorerFactory.create(id_token)` returns a `RegisteredScorer` when the token verifies to a
user id and an `UnregisteredScorer` otherwise. Verification problems never reach the caller.
"""

from __future__ import annotations

import logging
from typing import Protocol

from foodmood.config.settings import ScoringSettings
from foodmood.scoring.scorers import (
    CuisineHistorySource,
    DurationProvider,
    PlacesScorer,
    RegisteredScorer,
    UnregisteredScorer,
)

logger = logging.getLogger(__name__)


class TokenVerifier(Protocol):
    def get_user_id(self, id_token: str | None) -> str | None: ...


class ScorerFactory:
    def __init__(
        self,
        *,
        verifier: TokenVerifier,
        history: CuisineHistorySource,
        durations: DurationProvider,
        settings: ScoringSettings | None = None,
    ):
        self._verifier = verifier
        self._history = history
        self._durations = durations
        self._settings = settings or ScoringSettings()

    def create(self, id_token: str | None) -> PlacesScorer:
        user_id: str | None = None
        if id_token:
            try:
                user_id = self._verifier.get_user_id(id_token)
            except Exception as e:
                logger.warning("User verification raised; falling back to unregistered scoring: %s", e)
        return self.for_user(user_id)

    def for_user(self, user_id: str | None) -> PlacesScorer:
        unregistered = UnregisteredScorer(self._durations, self._settings)
        if not user_id:
            return unregistered
        return RegisteredScorer(user_id, self._history, self._durations, unregistered, self._settings)
