"""Tests for the earth imagery adapter: concurrent join and partial failure."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from adapters.nasa_sources.earth_imagery import EarthImageryAdapter
from core.domain.errors import ErrorKind, PartialFailureError, TransportError
from core.domain.models import EarthImageAsset
from core.domain.results import AdapterState

IMAGERY = "/planetary/earth/imagery"
ASSETS = "/planetary/earth/assets"

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
ASSET = {
    "date": "2024-01-28T03:04:37.155000",
    "id": "LANDSAT/LC08/C01/T1_SR/LC08_127059_20240128",
    "resource": {"dataset": "LANDSAT/LC08/C01/T1_SR", "planet": "earth"},
    "service_version": "v5000",
    "url": "https://earthengine.googleapis.com/v1alpha/projects/earthengine-legacy/thumbnails/x:getPixels",
}


def _fetch(adapter: EarthImageryAdapter, credential, **overrides):
    params = {"lat": 1.5, "lon": 100.75, "date": "2024-01-29", **overrides}
    return asyncio.run(adapter.fetch(credential, **params))


@pytest.fixture
def adapter(settings, upstream) -> EarthImageryAdapter:
    return EarthImageryAdapter(settings, transport=upstream.transport)


def test_both_halves_succeed(adapter, upstream, credential) -> None:
    upstream.raw(IMAGERY, PNG, "image/png")
    upstream.json(ASSETS, ASSET)

    result = _fetch(adapter, credential)

    assert result.state is AdapterState.SUCCEEDED
    asset = result.data
    assert asset.image_blob.read() == PNG
    assert asset.image_blob.content_type == "image/png"
    assert asset.asset_date == "2024-01-28"
    assert asset.asset_id == ASSET["id"]
    for request in upstream.requests:
        assert dict(request.url.params) == {
            "lon": "100.75",
            "lat": "1.5",
            "date": "2024-01-29",
            "dim": "0.15",
            "api_key": "TEST_KEY",
        }
    assert len(upstream.calls_to(IMAGERY)) == 1
    assert len(upstream.calls_to(ASSETS)) == 1


def test_only_assets_succeed(adapter, upstream, credential) -> None:
    upstream.json(IMAGERY, {"msg": "No imagery for specified date."}, status=404)
    upstream.json(ASSETS, ASSET)

    result = _fetch(adapter, credential)

    assert result.is_failed
    error = result.error
    assert isinstance(error, PartialFailureError)
    assert error.succeeded_half == "assets"
    assert isinstance(error.cause, TransportError)
    assert error.cause.status_code == 404
    assert result.data == EarthImageAsset(image_blob=None, asset_date="2024-01-28", asset_id=ASSET["id"])


def test_only_imagery_succeeds(adapter, upstream, credential) -> None:
    upstream.raw(IMAGERY, PNG, "image/png")
    upstream.json(ASSETS, {"error": {"message": "No assets"}})

    result = _fetch(adapter, credential)

    assert result.error.kind is ErrorKind.PARTIAL_FAILURE
    assert result.error.succeeded_half == "imagery"
    assert result.error.cause.kind is ErrorKind.UPSTREAM
    assert result.data.image_blob.read() == PNG
    assert result.data.asset_id is None


def test_both_halves_fail(adapter, upstream, credential) -> None:
    upstream.network_error(IMAGERY)
    upstream.network_error(ASSETS)

    result = _fetch(adapter, credential)

    assert result.error.kind is ErrorKind.TRANSPORT
    assert result.data is None


def test_halves_are_in_flight_together(settings, credential) -> None:
    async def scenario():
        arrived = {"imagery": asyncio.Event(), "assets": asyncio.Event()}

        async def handler(request: httpx.Request) -> httpx.Response:
            half = request.url.path.rsplit("/", 1)[-1]
            other = "assets" if half == "imagery" else "imagery"
            arrived[half].set()
            await asyncio.wait_for(arrived[other].wait(), timeout=2)
            if half == "imagery":
                return httpx.Response(200, content=PNG, headers={"Content-Type": "image/png"})
            return httpx.Response(200, json=ASSET)

        adapter = EarthImageryAdapter(settings, transport=httpx.MockTransport(handler))
        return await adapter.fetch(credential, lat=1.5, lon=100.75, date="2024-01-29")

    result = asyncio.run(scenario())
    assert result.ok


@pytest.mark.parametrize(
    "overrides",
    [
        {"lat": 91},
        {"lat": "north"},
        {"lon": -180.5},
        {"date": "29/01/2024"},
        {"date": ""},
    ],
)
def test_invalid_input_is_rejected_locally(adapter, upstream, credential, overrides) -> None:
    result = _fetch(adapter, credential, **overrides)
    assert result.error.kind is ErrorKind.INVALID_PARAMETER
    assert upstream.calls == 0


def test_blob_can_be_revoked(adapter, upstream, credential) -> None:
    upstream.raw(IMAGERY, PNG, "image/png")
    upstream.json(ASSETS, ASSET)
    blob = _fetch(adapter, credential).data.image_blob

    blob.revoke()

    assert blob.revoked
    with pytest.raises(ValueError):
        blob.read()


def test_json_dump_describes_blob(adapter, upstream, credential) -> None:
    upstream.raw(IMAGERY, PNG, "image/png")
    upstream.json(ASSETS, ASSET)
    dumped = _fetch(adapter, credential).data.model_dump(mode="json")
    assert dumped["image_blob"] == {"content_type": "image/png", "size": len(PNG), "revoked": False}
