"""
FoodMood CLI entrypoint.

This CLI is intended for quick local demos and debugging without a frontend.
It delegates all recommendation logic to `foodmood.recommender.recommend.recommend`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from foodmood.config.settings import get_settings
from foodmood.core.env import resolve_project_path
from foodmood.core.logging import configure_logging
from foodmood.domain.models import LatLng, UserPreferences
from foodmood.recommender.recommend import recommend
from foodmood.scoring.explain import one_line_summary
from foodmood.storage.preferences import PreferenceStore


def _cmd_recommend(args: argparse.Namespace) -> int:
    """Handle the `recommend` subcommand."""
    settings = get_settings()

    prefs = UserPreferences(
        location=LatLng(lat=float(args.lat), lng=float(args.lng)),
        min_rating=float(args.min_rating),
        max_price_level=int(args.max_price_level),
        cuisines=tuple(args.cuisine or []),
        open_now=bool(args.open_now),
    )

    result = recommend(
        prefs,
        id_token=args.id_token,
        settings=settings,
        max_results=args.max_results,
        ordering="random" if args.random else None,
    )

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    print(f"Generated at: {result.generated_at.isoformat()} (scorer: {result.scorer})")
    if not result.results:
        print("No places matched.")
        return 0
    print("Top results:")
    for i, item in enumerate(result.results, start=1):
        place = item.place
        print(f"{i:>2}. {place.name}  {one_line_summary(item)}")
        link = place.website_url or place.google_url
        if link:
            print(f"    {link}")
    return 0


def _cmd_history(args: argparse.Namespace) -> int:
    """Print the place ids previously recommended to (or chosen by) a user."""
    settings = get_settings()
    store = PreferenceStore(resolve_project_path(settings.storage.path))
    try:
        place_ids = store.get_past_recommendations(args.user_id, only_chosen=bool(args.only_chosen))
        cuisines = store.get_preferred_cuisines(args.user_id)
    finally:
        store.close()

    if args.json:
        print(json.dumps({"place_ids": place_ids, "cuisines": cuisines}, ensure_ascii=False, indent=2))
        return 0

    label = "Chosen places" if args.only_chosen else "Recommended places"
    print(f"{label} ({len(place_ids)}):")
    for place_id in place_ids:
        print(f"  - {place_id}")
    if cuisines:
        ranked = sorted(cuisines.items(), key=lambda kv: (-kv[1], kv[0]))
        print("Cuisine history: " + ", ".join(f"{c}={n}" for c, n in ranked))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the FoodMood CLI."""
    parser = argparse.ArgumentParser(prog="foodmood")
    sub = parser.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("recommend", help="Recommend food places near a location.")
    rec.add_argument("--lat", required=True, type=float)
    rec.add_argument("--lng", required=True, type=float)
    rec.add_argument("--min-rating", type=float, default=1.0, help="1..5")
    rec.add_argument("--max-price-level", type=int, default=4, help="0..4")
    rec.add_argument("--cuisine", action="append", default=[], help="Repeatable, e.g. --cuisine sushi")
    rec.add_argument("--open-now", action="store_true")
    rec.add_argument("--id-token", type=str, default=None, help="Google ID token of a registered user")
    rec.add_argument("--max-results", type=int, default=None)
    rec.add_argument("--random", action="store_true", help="Shuffle instead of ranking by score")
    rec.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    rec.set_defaults(func=_cmd_recommend)

    hist = sub.add_parser("history", help="Show a user's stored recommendations and cuisine history.")
    hist.add_argument("--user-id", required=True)
    hist.add_argument("--only-chosen", action="store_true")
    hist.add_argument("--json", action="store_true")
    hist.set_defaults(func=_cmd_history)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m foodmood.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
