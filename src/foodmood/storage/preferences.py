"""
SQLite-backed store for registered users, their feedback and their cuisine history.

Tables:
- `users`: one row per registered user id.
- `recommendations`: one row per recommended place per feedback event (chosen / tried-again flags).
- `preferences`: the cuisines a registered user asked for, one row per query.

`get_preferred_cuisines` aggregates the `preferences` rows into the cuisine -> count history
the registered scorer reads.
"""
from __future__ import annotations

import json
import sqlite3
import time
from collections import Counter
from pathlib import Path

from foodmood.domain.models import UserFeedback, UserPreferences


def _require_user_id(user_id: str | None) -> str:
    if not user_id or not str(user_id).strip():
        raise ValueError("user_id must be a non-empty string")
    return str(user_id)


class PreferenceStore:
    def __init__(self, db_path: str | Path = ":memory:"):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._init_schema()

    def _init_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                user_id TEXT PRIMARY KEY,
                registered_at INTEGER NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS recommendations (
                id INTEGER PRIMARY KEY,
                user_id TEXT NOT NULL,
                place_id TEXT NOT NULL,
                chosen INTEGER NOT NULL,
                tried_again INTEGER NOT NULL,
                created_at INTEGER NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS preferences (
                id INTEGER PRIMARY KEY,
                user_id TEXT NOT NULL,
                cuisines_json TEXT NOT NULL,
                created_at INTEGER NOT NULL
            )
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_recommendations_user ON recommendations(user_id)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_preferences_user ON preferences(user_id)")
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def is_registered(self, user_id: str) -> bool:
        uid = _require_user_id(user_id)
        row = self._conn.execute("SELECT 1 FROM users WHERE user_id=? LIMIT 1", (uid,)).fetchone()
        return row is not None

    def register_user(self, user_id: str) -> None:
        """Add the user; registering the same id twice is an error."""
        uid = _require_user_id(user_id)
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO users (user_id, registered_at) VALUES (?, ?)",
                    (uid, int(time.time() * 1000)),
                )
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"user {uid} is already registered") from exc

    def record_feedback(self, feedback: UserFeedback) -> None:
        """Store one row per recommended place (duplicates in the list are stored as given)."""
        now = int(time.time() * 1000)
        rows = [
            (
                feedback.user_id,
                place_id,
                int(place_id == feedback.chosen_place),
                int(feedback.tried_again),
                now,
            )
            for place_id in feedback.recommended_places
        ]
        with self._conn:
            self._conn.executemany(
                """
                INSERT INTO recommendations (user_id, place_id, chosen, tried_again, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                rows,
            )

    def store_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Remember the cuisines asked for in a query; queries without cuisines add nothing."""
        uid = _require_user_id(user_id)
        if not preferences.cuisines:
            return
        with self._conn:
            self._conn.execute(
                "INSERT INTO preferences (user_id, cuisines_json, created_at) VALUES (?, ?, ?)",
                (uid, json.dumps(list(preferences.cuisines)), int(time.time() * 1000)),
            )

    def get_preferred_cuisines(self, user_id: str) -> dict[str, int]:
        """Return cuisine -> number of stored queries that asked for it."""
        uid = _require_user_id(user_id)
        counts: Counter[str] = Counter()
        for (cuisines_json,) in self._conn.execute(
            "SELECT cuisines_json FROM preferences WHERE user_id=?", (uid,)
        ):
            counts.update(str(c) for c in json.loads(cuisines_json))
        return dict(counts)

    def get_past_recommendations(self, user_id: str, only_chosen: bool = False) -> list[str]:
        """Distinct place ids recommended to the user (or chosen by them), first-seen order."""
        uid = _require_user_id(user_id)
        sql = "SELECT place_id FROM recommendations WHERE user_id=?"
        if only_chosen:
            sql += " AND chosen=1"
        sql += " ORDER BY id"
        seen: dict[str, None] = {}
        for (place_id,) in self._conn.execute(sql, (uid,)):
            seen.setdefault(place_id, None)
        return list(seen)
