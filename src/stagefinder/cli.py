#!/usr/bin/env python3
"""
CLI for stagefinder. Run as: stagefinder --city MARSEILLE (or python -m stagefinder.cli).

Defaults are read from environment variables:
    STAGEFINDER_API_BASE     base URL of the stages API
    STAGEFINDER_TIMEOUT      per-city request timeout in seconds
    STAGEFINDER_CITIES_CSV   optional city,latitude,longitude table
"""
import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .engine import SessionSearch
from .io import load_cities_csv, load_sessions_json
from .provider.api import BASE, DEFAULT_TIMEOUT, ApiSessionProvider
from .provider.static import StaticSessionProvider
from .ranker import RankConfig, SortMode, fmt_price
from .registry import CityRegistry
from .selection import CitySelection

_DEFAULT_API_BASE = os.environ.get("STAGEFINDER_API_BASE", BASE)
_DEFAULT_CITIES_CSV = os.environ.get("STAGEFINDER_CITIES_CSV")


def _env_timeout() -> float:
    raw = os.environ.get("STAGEFINDER_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"STAGEFINDER_TIMEOUT must be a number of seconds, got '{raw}'") from None


def _fmt_dates(session) -> str:
    if session.date_start is None:
        return "TBA"
    start = session.date_start.strftime("%d/%m/%Y")
    if session.date_end and session.date_end != session.date_start:
        return f"{start}-{session.date_end.strftime('%d/%m')}"
    return start


def print_results_table(result, sessions, title: str) -> None:
    print("\n" + "=" * 100)
    print(title)
    if result.nearby_cities:
        nearby = ", ".join(f"{c.city} ({c.distance_km:.0f} km)" for c in result.nearby_cities)
        print(f"Nearby: {nearby}")
    print("=" * 100)
    print(f"{'RANK':<4} {'CITY':<18} {'DATES':<17} {'PRICE':>10} {'PLACES':>6} {'DIST(km)':>8} {'SCORE':>8}  SITE")
    print("-" * 100)

    for i, r in enumerate(sessions, start=1):
        s = r.session
        print(f"{i:<4} {s.city:<18} {_fmt_dates(s):<17} {fmt_price(s.price):>10} {s.places_left:>6} "
              f"{r.distance_km:>8.1f} {r.pertinence_score:>8.1f}  {s.location.site_name}")

    print("=" * 100)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find course sessions near a city, ranked")
    parser.add_argument("--city", required=True, help="reference city, e.g. MARSEILLE")
    parser.add_argument("--radius", type=float, help="search radius in km (default 40)")
    parser.add_argument("--sort", default="pertinence",
                        help="pertinence | proximity | date | price (French labels accepted)")
    parser.add_argument("--only", nargs="+", metavar="CITY", help="restrict output to these cities")
    parser.add_argument("--limit", type=int, help="max sessions to output")
    parser.add_argument("--horizon", type=int, help="ignore sessions starting more than N days ahead")
    parser.add_argument("--sessions-json", help="read sessions from a JSON dump instead of the API")
    parser.add_argument("--cities-csv", default=_DEFAULT_CITIES_CSV, help="city coordinate table (CSV)")
    parser.add_argument("--api-base", default=_DEFAULT_API_BASE, help="stages API base URL")
    parser.add_argument("--timeout", type=float, help="per-city timeout in seconds (default 30)")
    parser.add_argument("--json", action="store_true", help="print JSON instead of a table")
    parser.add_argument("--output", "-o", help="write JSON to file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        timeout = args.timeout if args.timeout is not None else _env_timeout()
        mode = SortMode.parse(args.sort)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.sessions_json:
        provider = StaticSessionProvider(load_sessions_json(args.sessions_json))
    else:
        provider = ApiSessionProvider(base_url=args.api_base, timeout=timeout)

    registry = load_cities_csv(args.cities_csv) if args.cities_csv else CityRegistry.default()
    cfg = RankConfig(horizon_days=args.horizon)

    search = SessionSearch(provider, registry=registry, cfg=cfg)
    try:
        result = search.search(args.city, radius_km=args.radius)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if result.failed_cities:
        print(f"Could not check: {', '.join(result.failed_cities)}", file=sys.stderr)

    sessions = list(result.sessions)
    if args.only:
        selection = CitySelection()
        for city in args.only:
            selection = selection.toggle(city)
        sessions = search.select(sessions, selection)
    if mode is not SortMode.PERTINENCE:
        sessions = search.apply_sort(sessions, mode)
    if args.limit and args.limit > 0:
        sessions = sessions[: args.limit]

    if args.json or args.output:
        payload = result.to_dict()
        payload["sessions"] = [r.to_dict() for r in sessions]
        json_str = json.dumps(payload, indent=2, ensure_ascii=False)
        if args.output:
            out_path = Path(args.output)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(json_str, encoding="utf-8")
            print(f"Wrote {len(sessions)} session(s) to {args.output}", file=sys.stderr)
        else:
            print(json_str)
    else:
        title = f"{len(sessions)} session(s) near {args.city.strip().upper()} - sorted by {mode.value}"
        print_results_table(result, sessions, title)


if __name__ == "__main__":
    main()
