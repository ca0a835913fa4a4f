"""Standalone CLI over the geo, weather and media services.

Usage::

    python -m backpackbuddy.cli geo --country-code PE --city Cusco
    python -m backpackbuddy.cli weather -13.5319 -71.9675 --units metric
    python -m backpackbuddy.cli photo destination 42 "Machu Picchu" --country Peru
    python -m backpackbuddy.cli populate attractions.yaml
    python -m backpackbuddy.cli rate-limit --json

``--json`` prints machine-readable output on stdout and moves logging to
stderr at WARNING level.  Exit code is 0 on success and 1 on any error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from backpackbuddy.models.geo import GeoBasicsQuery
from backpackbuddy.models.media import PhotoLookupOptions
from backpackbuddy.utils.errors import BackpackBuddyError
from backpackbuddy.utils.logging import configure_logging

# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _emit(result: BaseModel, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return
    for key, value in result.model_dump(mode="json").items():
        if isinstance(value, (dict, list)):
            print(f"{key}:")
            print(f"  {json.dumps(value, ensure_ascii=False)}")
        else:
            print(f"{key}: {value}")


def load_entities(path: Path) -> list[PhotoLookupOptions]:
    """Read a YAML or JSON list of entities to populate.

    Each item needs ``entity_type``, ``entity_id`` and ``entity_name`` (or
    ``name``); ``country`` and ``photo_reference`` are optional.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of entities")

    entries: list[PhotoLookupOptions] = []
    for item in data:
        item = dict(item)
        if "entity_name" not in item and "name" in item:
            item["entity_name"] = item.pop("name")
        item["entity_id"] = str(item.get("entity_id", ""))
        entries.append(PhotoLookupOptions.model_validate(item))
    return entries


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_geo(args: argparse.Namespace, components: dict[str, Any]) -> int:
    query = GeoBasicsQuery(
        country_code=args.country_code,
        country_name=args.country_name,
        city_name=args.city,
        lat=args.lat,
        lng=args.lng,
        lang=args.lang,
    )
    result = await components["geo_service"].get_basics(query)
    if result is None:
        print("Country not found", file=sys.stderr)
        return 1
    _emit(result, args.json)
    return 0


async def _handle_weather(args: argparse.Namespace, components: dict[str, Any]) -> int:
    result = await components["weather_service"].get_by_lat_lng(
        args.lat, args.lng, units=args.units, lang=args.lang
    )
    _emit(result, args.json)
    return 0


async def _handle_photo(args: argparse.Namespace, components: dict[str, Any]) -> int:
    await components["photo_store"].initialize()
    orchestrator = components["media_orchestrator"]
    await orchestrator.initialize()
    result = await orchestrator.get_location_photo(
        PhotoLookupOptions(
            entity_type=args.entity_type,
            entity_id=args.entity_id,
            entity_name=args.name,
            country=args.country,
            photo_reference=args.photo_reference,
            force_refresh=args.force_refresh,
        )
    )
    _emit(result, args.json)
    return 0


async def _handle_populate(args: argparse.Namespace, components: dict[str, Any]) -> int:
    entries = load_entities(Path(args.file))
    await components["photo_store"].initialize()
    orchestrator = components["media_orchestrator"]
    await orchestrator.initialize()
    report = await orchestrator.populate(entries)

    if args.json:
        print(json.dumps({**report.model_dump(mode="json"), "total": report.total}, indent=2))
    else:
        print("Population complete")
        print(f"  Success: {report.success}")
        print(f"  Skipped: {report.skipped}")
        print(f"  Failed:  {report.failed}")
        print(f"  Total:   {report.total}")
        for entity_id, error in report.failures.items():
            print(f"    {entity_id}: {error}")
    return 0


async def _handle_rate_limit(args: argparse.Namespace, components: dict[str, Any]) -> int:
    status = components["media_orchestrator"].get_unsplash_rate_limit()
    if status is None:
        print("Unsplash is not configured", file=sys.stderr)
        return 1
    _emit(status, args.json)
    return 0


_HANDLERS = {
    "geo": _handle_geo,
    "weather": _handle_weather,
    "photo": _handle_photo,
    "populate": _handle_populate,
    "rate-limit": _handle_rate_limit,
}


async def run_command(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Dispatch *args* to its handler, turning application errors into exit code 1."""
    try:
        return await _HANDLERS[args.command](args, components)
    except (BackpackBuddyError, ValidationError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


async def _run_with_services(args: argparse.Namespace) -> int:
    # Deferred: importing main builds settings, logging and the app.
    from backpackbuddy.main import build_services, config, settings

    if args.json:
        configure_logging(log_level="WARNING", stream=sys.stderr)

    components = build_services(settings, config)
    try:
        return await run_command(args, components)
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the destinations CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m backpackbuddy.cli",
        description="Destination basics, weather and location photos.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- geo --
    geo_parser = subparsers.add_parser("geo", parents=[common], help="Country and city basics")
    country = geo_parser.add_mutually_exclusive_group(required=True)
    country.add_argument("--country-code", help="ISO 3166 alpha-2 or alpha-3 code")
    country.add_argument("--country-name", help="Full country name")
    geo_parser.add_argument("--city", help="City name")
    geo_parser.add_argument("--lat", type=float, help="Latitude (with --lng)")
    geo_parser.add_argument("--lng", type=float, help="Longitude (with --lat)")
    geo_parser.add_argument("--lang", default="en", help="Response language (default: en)")

    # -- weather --
    weather_parser = subparsers.add_parser(
        "weather", parents=[common], help="Current weather and forecast"
    )
    weather_parser.add_argument("lat", type=float, help="Latitude")
    weather_parser.add_argument("lng", type=float, help="Longitude")
    weather_parser.add_argument("--units", choices=["metric", "imperial"], default="metric")
    weather_parser.add_argument("--lang", default="en")

    # -- photo --
    photo_parser = subparsers.add_parser(
        "photo", parents=[common], help="Get or fetch a location photo"
    )
    photo_parser.add_argument("entity_type", help="destination, attraction, restaurant...")
    photo_parser.add_argument("entity_id")
    photo_parser.add_argument("name", help="Entity name used for searches")
    photo_parser.add_argument("--country")
    photo_parser.add_argument("--photo-reference", dest="photo_reference")
    photo_parser.add_argument("--force-refresh", action="store_true", dest="force_refresh")

    # -- populate --
    populate_parser = subparsers.add_parser(
        "populate", parents=[common], help="Fetch photos for every entity in a YAML/JSON file"
    )
    populate_parser.add_argument("file", help="YAML or JSON list of entities")

    # -- rate-limit --
    subparsers.add_parser("rate-limit", parents=[common], help="Show the Unsplash request quota")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    return asyncio.run(_run_with_services(args))


if __name__ == "__main__":
    sys.exit(main())
