"""CLI smoke tests: commands render `FetchResult`s and set the exit code."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from adapters import http_client
from cli.main import app
from core.services import pipeline

runner = CliRunner()

APOD_ENTRY = {
    "date": "2024-01-01",
    "title": "NGC 1232",
    "explanation": "A grand design spiral.",
    "media_type": "image",
    "url": "https://apod.nasa.gov/apod/image/2401/ngc1232.jpg",
}


@pytest.fixture(autouse=True)
def offline(monkeypatch, tmp_path, upstream):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NASA_EXPLORER_API_KEY", raising=False)

    def build(settings=None, *, transport=None):
        return http_client.build_async_client(settings, transport=upstream.transport)

    monkeypatch.setattr(pipeline, "build_async_client", build)


def _json(result) -> dict:
    return json.loads(result.stdout)


def test_apod_json(upstream) -> None:
    upstream.json("/planetary/apod", APOD_ENTRY)

    result = runner.invoke(app, ["--api-key", "TEST_KEY", "apod", "--date", "2024-01-01", "--json"])

    assert result.exit_code == 0
    payload = _json(result)
    assert payload["state"] == "succeeded"
    assert payload["data"]["title"] == "NGC 1232"
    assert upstream.last_params() == {"date": "2024-01-01", "api_key": "TEST_KEY"}


def test_empty_result_exits_zero(upstream) -> None:
    upstream.json("/mars-photos/api/v1/rovers/curiosity/photos", {"photos": []})

    result = runner.invoke(app, ["--api-key", "TEST_KEY", "rover", "--sol", "1000", "--json"])

    assert result.exit_code == 0
    payload = _json(result)
    assert payload["state"] == "empty_result"
    assert payload["message"] == "no results for these parameters"


def test_invalid_range_exits_one_without_network(upstream) -> None:
    result = runner.invoke(
        app,
        ["--api-key", "TEST_KEY", "neo-feed", "--start", "2024-01-05", "--end", "2024-01-01", "--json"],
    )

    assert result.exit_code == 1
    assert _json(result)["error"]["kind"] == "invalid_range"
    assert upstream.calls == 0


def test_missing_key(upstream) -> None:
    result = runner.invoke(app, ["apod", "--json"])

    assert result.exit_code == 1
    assert _json(result)["error"]["kind"] == "missing_credential"
    assert upstream.calls == 0


def test_techtransfer_json(upstream, fixture_json) -> None:
    upstream.json("/techtransfer/patent/", fixture_json("techtransfer_patent.json"))

    result = runner.invoke(app, ["--api-key", "TEST_KEY", "techtransfer", "engine", "--json"])

    assert result.exit_code == 0
    first = _json(result)["data"][0]
    assert first["code"] == "LAR-123"
    assert first["title"] == "Widget"


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
EARTH_ASSET = {"date": "2024-01-01T03:04:37.155000", "id": "LANDSAT/LC08/C01/T1_SR/LC08_127059_20240101"}


def _earth_upstream(upstream) -> None:
    upstream.raw("/planetary/earth/imagery", PNG, "image/png")
    upstream.json("/planetary/earth/assets", EARTH_ASSET)


def test_earth_saves_image_and_reports_it(upstream, tmp_path) -> None:
    _earth_upstream(upstream)
    target = tmp_path / "img.png"

    result = runner.invoke(app, ["--api-key", "TEST_KEY", "earth", "--date", "2024-01-01", "-o", str(target)])

    assert result.exit_code == 0
    assert target.read_bytes() == PNG
    assert "unavailable" not in result.stdout
    assert "image/png" in result.stdout


def test_earth_json_with_output_is_not_revoked(upstream, tmp_path) -> None:
    _earth_upstream(upstream)
    target = tmp_path / "img.png"

    result = runner.invoke(
        app, ["--api-key", "TEST_KEY", "earth", "--date", "2024-01-01", "-o", str(target), "--json"]
    )

    assert result.exit_code == 0
    blob = _json(result)["data"]["image_blob"]
    assert blob == {"content_type": "image/png", "size": len(PNG), "revoked": False}
    assert target.read_bytes() == PNG
