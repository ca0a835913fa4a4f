"""Unit tests for the destinations CLI (backpackbuddy.cli.destinations)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from backpackbuddy.cli.destinations import _build_parser, load_entities, main, run_command
from backpackbuddy.models.geo import CountryInfo, GeoBasicsResponse, GeoMeta
from backpackbuddy.models.media import PhotoLookupResult, PopulateReport, RateLimitStatus
from backpackbuddy.utils.errors import NotEnabledError, NotFoundError, StorageError

_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


# ======================================================================
# Shared helpers
# ======================================================================


def _geo_response() -> GeoBasicsResponse:
    return GeoBasicsResponse(
        country=CountryInfo(name="Peru", code="PE", calling_code="+51"),
        meta=GeoMeta(provider=["restcountries"], fetched_at=_NOW),
    )


def _components(**overrides) -> dict:
    components = {
        "geo_service": AsyncMock(),
        "weather_service": AsyncMock(),
        "media_orchestrator": AsyncMock(),
        "photo_store": AsyncMock(),
    }
    components.update(overrides)
    return components


def _parse(*argv: str):
    return _build_parser().parse_args(list(argv))


# ======================================================================
# Argument parsing
# ======================================================================


class TestParser:
    def test_geo_arguments(self) -> None:
        args = _parse("geo", "--country-code", "PE", "--city", "Cusco", "--json")
        assert args.command == "geo"
        assert args.country_code == "PE"
        assert args.country_name is None
        assert args.city == "Cusco"
        assert args.lang == "en"
        assert args.json is True

    def test_geo_requires_a_country(self) -> None:
        with pytest.raises(SystemExit):
            _parse("geo", "--city", "Cusco")

    def test_geo_country_options_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            _parse("geo", "--country-code", "PE", "--country-name", "Peru")

    def test_weather_accepts_negative_coordinates(self) -> None:
        args = _parse("weather", "-13.5319", "-71.9675", "--units", "imperial")
        assert (args.lat, args.lng) == (-13.5319, -71.9675)
        assert args.units == "imperial"
        assert args.json is False

    def test_weather_rejects_unknown_units(self) -> None:
        with pytest.raises(SystemExit):
            _parse("weather", "1", "2", "--units", "kelvin")

    def test_photo_arguments(self) -> None:
        args = _parse(
            "photo", "destination", "42", "Machu Picchu", "--country", "Peru", "--force-refresh"
        )
        assert args.entity_type == "destination"
        assert args.entity_id == "42"
        assert args.name == "Machu Picchu"
        assert args.force_refresh is True
        assert args.photo_reference is None

    def test_main_without_command_prints_help(self, capsys) -> None:
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_main_dispatches_to_services(self) -> None:
        with patch(
            "backpackbuddy.cli.destinations._run_with_services", new=AsyncMock(return_value=0)
        ) as run:
            assert main(["rate-limit"]) == 0
        assert run.await_args.args[0].command == "rate-limit"


# ======================================================================
# load_entities
# ======================================================================


class TestLoadEntities:
    def test_reads_yaml_with_name_alias(self, tmp_path: Path) -> None:
        path = tmp_path / "entities.yaml"
        path.write_text(
            "- entity_type: attraction\n"
            "  entity_id: 7\n"
            "  name: Sacsayhuaman\n"
            "  country: Peru\n"
            "- entity_type: destination\n"
            "  entity_id: cusco\n"
            "  entity_name: Cusco\n",
            encoding="utf-8",
        )

        entries = load_entities(path)

        assert [e.entity_id for e in entries] == ["7", "cusco"]
        assert entries[0].entity_name == "Sacsayhuaman"
        assert entries[0].search_query == "Sacsayhuaman Peru"
        assert entries[1].country is None

    def test_reads_json(self, tmp_path: Path) -> None:
        path = tmp_path / "entities.json"
        path.write_text(
            json.dumps([{"entity_type": "destination", "entity_id": 1, "name": "Lima"}]),
            encoding="utf-8",
        )
        assert load_entities(path)[0].entity_name == "Lima"

    def test_rejects_non_list(self, tmp_path: Path) -> None:
        path = tmp_path / "entities.yaml"
        path.write_text("entity_type: destination\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must contain a list"):
            load_entities(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_entities(path) == []


# ======================================================================
# Command handlers
# ======================================================================


class TestRunCommand:
    @pytest.mark.asyncio
    async def test_geo_plain_output(self, capsys) -> None:
        components = _components()
        components["geo_service"].get_basics.return_value = _geo_response()

        code = await run_command(_parse("geo", "--country-code", "PE"), components)

        assert code == 0
        out = capsys.readouterr().out
        assert "country:" in out
        assert '"code": "PE"' in out
        query = components["geo_service"].get_basics.await_args.args[0]
        assert query.country_code == "PE"
        assert query.wants_city is False

    @pytest.mark.asyncio
    async def test_geo_json_output(self, capsys) -> None:
        components = _components()
        components["geo_service"].get_basics.return_value = _geo_response()

        code = await run_command(_parse("geo", "--country-name", "Peru", "--json"), components)

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["country"]["calling_code"] == "+51"
        assert payload["meta"]["provider"] == ["restcountries"]

    @pytest.mark.asyncio
    async def test_geo_country_not_found(self, capsys) -> None:
        components = _components()
        components["geo_service"].get_basics.return_value = None

        code = await run_command(_parse("geo", "--country-code", "ZZ"), components)

        assert code == 1
        assert "Country not found" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_invalid_coordinates_exit_with_error(self, capsys) -> None:
        components = _components()

        code = await run_command(
            _parse("geo", "--country-code", "PE", "--lat", "120", "--lng", "0"), components
        )

        assert code == 1
        assert capsys.readouterr().err.startswith("Error:")
        components["geo_service"].get_basics.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_weather_disabled(self, capsys) -> None:
        components = _components()
        components["weather_service"].get_by_lat_lng.side_effect = NotEnabledError(
            "OpenWeather API is not enabled", provider_name="openweather"
        )

        code = await run_command(_parse("weather", "48.85", "2.35"), components)

        assert code == 1
        assert "Error: [openweather] OpenWeather API is not enabled" in capsys.readouterr().err
        components["weather_service"].get_by_lat_lng.assert_awaited_once_with(
            48.85, 2.35, units="metric", lang="en"
        )

    @pytest.mark.asyncio
    async def test_photo(self, capsys) -> None:
        components = _components()
        orchestrator = components["media_orchestrator"]
        orchestrator.get_location_photo.return_value = PhotoLookupResult(
            url="/media/location-photos/x.jpg", source="wikimedia", attribution="X.jpg"
        )

        code = await run_command(
            _parse("photo", "destination", "42", "Machu Picchu", "--country", "Peru", "--json"),
            components,
        )

        assert code == 0
        orchestrator.initialize.assert_awaited_once()
        options = orchestrator.get_location_photo.await_args.args[0]
        assert options.search_query == "Machu Picchu Peru"
        assert json.loads(capsys.readouterr().out)["source"] == "wikimedia"

    @pytest.mark.asyncio
    async def test_photo_not_found(self, capsys) -> None:
        components = _components()
        components["media_orchestrator"].get_location_photo.side_effect = NotFoundError(
            "No image source available for Atlantis"
        )

        code = await run_command(_parse("photo", "destination", "1", "Atlantis"), components)

        assert code == 1
        assert "No image source available for Atlantis" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_photo_store_failure_exits_with_error(self, capsys) -> None:
        components = _components()
        components["photo_store"].initialize.side_effect = StorageError(
            "Failed to initialize location photo store", provider_name="sqlite"
        )

        code = await run_command(_parse("photo", "destination", "1", "Lima"), components)

        assert code == 1
        assert "Error: [sqlite] Failed to initialize" in capsys.readouterr().err
        components["media_orchestrator"].get_location_photo.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_populate_summary(self, capsys, tmp_path: Path) -> None:
        path = tmp_path / "entities.yaml"
        path.write_text(
            "- {entity_type: destination, entity_id: 1, name: Lima}\n"
            "- {entity_type: destination, entity_id: 3, name: Atlantis}\n",
            encoding="utf-8",
        )
        components = _components()
        components["media_orchestrator"].populate.return_value = PopulateReport(
            success=1, failed=1, failures={"3": "No image source available for Atlantis"}
        )

        code = await run_command(_parse("populate", str(path)), components)

        assert code == 0
        entries = components["media_orchestrator"].populate.await_args.args[0]
        assert [e.entity_id for e in entries] == ["1", "3"]
        out = capsys.readouterr().out
        assert "Success: 1" in out
        assert "Total:   2" in out
        assert "3: No image source available for Atlantis" in out

    @pytest.mark.asyncio
    async def test_populate_json(self, capsys, tmp_path: Path) -> None:
        path = tmp_path / "entities.yaml"
        path.write_text("[]\n", encoding="utf-8")
        components = _components()
        components["media_orchestrator"].populate.return_value = PopulateReport(skipped=2)

        code = await run_command(_parse("populate", str(path), "--json"), components)

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["skipped"] == 2
        assert payload["total"] == 2

    @pytest.mark.asyncio
    async def test_populate_missing_file(self, capsys, tmp_path: Path) -> None:
        code = await run_command(
            _parse("populate", str(tmp_path / "missing.yaml")), _components()
        )
        assert code == 1
        assert "Error:" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_rate_limit(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.get_unsplash_rate_limit.return_value = RateLimitStatus(
            remaining=49, total=50, reset_at=_NOW
        )

        code = await run_command(
            _parse("rate-limit", "--json"), _components(media_orchestrator=orchestrator)
        )

        assert code == 0
        assert json.loads(capsys.readouterr().out)["remaining"] == 49

    @pytest.mark.asyncio
    async def test_rate_limit_without_unsplash(self, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.get_unsplash_rate_limit.return_value = None

        code = await run_command(
            _parse("rate-limit"), _components(media_orchestrator=orchestrator)
        )

        assert code == 1
        assert "Unsplash is not configured" in capsys.readouterr().err
