"""
ProxiTour CLI entrypoint.

Quick local checks without the map UI: which catalog landmarks are near a
point, and what a user's proximity settings are.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from proxitour.catalog.loader import LandmarkCatalog
from proxitour.config.settings import get_settings
from proxitour.core.env import resolve_project_path
from proxitour.core.geo import format_distance
from proxitour.core.logging import configure_logging
from proxitour.domain.models import ProximitySettings, UserLocation
from proxitour.proximity.nearby import find_nearby_landmarks
from proxitour.storage.settings_store import JsonFileSettingsStore


def _store() -> JsonFileSettingsStore:
    settings = get_settings()
    return JsonFileSettingsStore(
        resolve_project_path(settings.storage.settings_path), defaults=settings.proximity
    )


def _cmd_nearby(args: argparse.Namespace) -> int:
    """Handle the `nearby` subcommand."""
    settings = get_settings()
    catalog = LandmarkCatalog.from_file(args.catalog or settings.catalog.path)
    location = UserLocation(latitude=float(args.lat), longitude=float(args.lon))
    radius = float(args.radius) if args.radius is not None else settings.proximity.notification_distance_m

    results = find_nearby_landmarks(location, catalog.all(), radius, max_results=args.max_results)

    if args.json:
        payload = [r.model_dump(mode="json") for r in results]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    if not results:
        print(f"No landmarks within {format_distance(radius)}.")
        return 0
    print(f"{len(results)} landmark(s) within {format_distance(radius)}:")
    for i, item in enumerate(results, start=1):
        print(f"{i:>2}. {item.landmark.name}  {format_distance(item.distance_m)}")
    return 0


def _print_settings(s: ProximitySettings) -> None:
    print(json.dumps(s.model_dump(mode="json"), ensure_ascii=False, indent=2))


def _cmd_settings_show(args: argparse.Namespace) -> int:
    _print_settings(_store().get_or_default(args.user_id))
    return 0


def _cmd_settings_set(args: argparse.Namespace) -> int:
    store = _store()
    current = store.get_or_default(args.user_id)
    changes: dict[str, Any] = {}
    if args.enabled is not None:
        changes["is_enabled"] = bool(args.enabled)
    if args.distance is not None:
        changes["notification_distance"] = float(args.distance)
    try:
        updated = ProximitySettings.model_validate({**current.model_dump(), **changes})
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2
    _print_settings(store.upsert(updated))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ProxiTour CLI."""
    parser = argparse.ArgumentParser(prog="proxitour")
    sub = parser.add_subparsers(dest="command", required=True)

    near = sub.add_parser("nearby", help="List catalog landmarks within a radius, nearest first.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lon", required=True, type=float)
    near.add_argument("--radius", type=float, default=None, help="Meters (default: configured notification distance)")
    near.add_argument("--max-results", type=int, default=None)
    near.add_argument("--catalog", type=str, default=None, help="Landmark catalog JSON path")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    st = sub.add_parser("settings", help="Show or change a user's proximity settings.")
    st_sub = st.add_subparsers(dest="settings_command", required=True)

    show = st_sub.add_parser("show")
    show.add_argument("user_id")
    show.set_defaults(func=_cmd_settings_show)

    set_ = st_sub.add_parser("set")
    set_.add_argument("user_id")
    toggle = set_.add_mutually_exclusive_group()
    toggle.add_argument("--enabled", dest="enabled", action="store_const", const=True, default=None)
    toggle.add_argument("--disabled", dest="enabled", action="store_const", const=False)
    set_.add_argument("--distance", type=float, default=None, help="Notification distance in meters")
    set_.set_defaults(func=_cmd_settings_set)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m proxitour.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
