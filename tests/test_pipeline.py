"""Tests for the adapter pipeline, source dispatch and request descriptors."""

from __future__ import annotations

import asyncio

import pytest

from adapters.nasa_sources.daily_image import DailyImageQuery
from adapters.nasa_sources.earth_imagery import EarthImageryQuery, EarthImageryRequest
from adapters.nasa_sources.epic import EpicDatesQuery, EpicFramesQuery
from adapters.nasa_sources.media_search import MediaAssetQuery, MediaSearchQuery
from adapters.nasa_sources.neo_detail import NeoDetailQuery
from adapters.nasa_sources.neo_feed import NeoFeedQuery
from adapters.nasa_sources.rover_photos import RoverPhotoQuery
from adapters.nasa_sources.tech_transfer import TechTransferQuery
from core.credentials import CredentialContext
from core.domain.errors import ErrorKind, InvalidRangeError, MissingCredentialError
from core.domain.results import AdapterState
from core.domain.sources import SourceKind
from core.requests import RequestDescriptor, ResponseFormat
from core.services import dispatch
from core.services.pipeline import AdapterHooks

APOD = "/planetary/apod"
APOD_ENTRY = {
    "date": "2024-01-01",
    "title": "NGC 1232",
    "explanation": "A grand design spiral.",
    "media_type": "image",
    "url": "https://apod.nasa.gov/apod/image/2401/ngc1232.jpg",
    "hdurl": "https://apod.nasa.gov/apod/image/2401/ngc1232_big.jpg",
}

PARAMS = {
    SourceKind.DAILY_IMAGE: DailyImageQuery(date="2024-01-01"),
    SourceKind.NEO_FEED: NeoFeedQuery(start_date="2024-01-01", end_date="2024-01-02"),
    SourceKind.NEO_DETAIL: NeoDetailQuery(asteroid_id="3553060"),
    SourceKind.ROVER_PHOTO: RoverPhotoQuery(sol=1000),
    SourceKind.EARTH_IMAGERY: EarthImageryQuery(lat=1.5, lon=100.75, date="2024-01-29"),
    SourceKind.EPIC_DATES: EpicDatesQuery(),
    SourceKind.EPIC_IMAGERY: EpicFramesQuery(date="2024-01-15"),
    SourceKind.MEDIA_SEARCH: MediaSearchQuery(q="apollo"),
    SourceKind.MEDIA_ASSET: MediaAssetQuery(nasa_id="Apollo11Highlights"),
    SourceKind.TECH_TRANSFER: TechTransferQuery(term="engine"),
}


class Recorder:
    def __init__(self) -> None:
        self.states: list[AdapterState] = []

    def __call__(self, source: SourceKind, state: AdapterState) -> None:
        self.states.append(state)


class TestStateMachine:
    def test_success_walks_every_state(self, settings, upstream, credential) -> None:
        upstream.json(APOD, APOD_ENTRY)
        recorder = Recorder()

        result = asyncio.run(
            dispatch.fetch(
                SourceKind.DAILY_IMAGE,
                PARAMS[SourceKind.DAILY_IMAGE],
                credential,
                settings=settings,
                transport=upstream.transport,
                hooks=AdapterHooks(state_changed=recorder),
            )
        )

        assert result.ok
        assert recorder.states == [
            AdapterState.IDLE,
            AdapterState.VALIDATING,
            AdapterState.IN_FLIGHT,
            AdapterState.SUCCEEDED,
        ]

    def test_validation_failure_never_goes_in_flight(self, settings, upstream, no_credential) -> None:
        recorder = Recorder()

        result = asyncio.run(
            dispatch.fetch(
                SourceKind.DAILY_IMAGE,
                PARAMS[SourceKind.DAILY_IMAGE],
                no_credential,
                settings=settings,
                transport=upstream.transport,
                hooks=AdapterHooks(state_changed=recorder),
            )
        )

        assert result.error.kind is ErrorKind.MISSING_CREDENTIAL
        assert recorder.states == [AdapterState.IDLE, AdapterState.VALIDATING, AdapterState.FAILED]
        assert upstream.calls == 0

    def test_exactly_one_terminal_state(self, settings, upstream, credential) -> None:
        upstream.network_error(APOD)
        recorder = Recorder()
        asyncio.run(
            dispatch.fetch(
                SourceKind.DAILY_IMAGE,
                PARAMS[SourceKind.DAILY_IMAGE],
                credential,
                settings=settings,
                transport=upstream.transport,
                hooks=AdapterHooks(state_changed=recorder),
            )
        )
        assert [s for s in recorder.states if s.is_terminal] == [AdapterState.FAILED]

    def test_repeated_fetches_are_equal(self, settings, upstream, credential) -> None:
        upstream.json(APOD, APOD_ENTRY)

        async def twice():
            first = await dispatch.fetch(
                SourceKind.DAILY_IMAGE, PARAMS[SourceKind.DAILY_IMAGE], credential,
                settings=settings, transport=upstream.transport,
            )
            second = await dispatch.fetch(
                SourceKind.DAILY_IMAGE, PARAMS[SourceKind.DAILY_IMAGE], credential,
                settings=settings, transport=upstream.transport,
            )
            return first, second

        first, second = asyncio.run(twice())
        assert first == second
        assert upstream.calls == 2


class TestDispatch:
    def test_every_source_has_an_adapter(self) -> None:
        assert set(dispatch.ADAPTERS) == set(SourceKind)

    @pytest.mark.parametrize("source", list(SourceKind))
    def test_build_is_pure_and_carries_source(self, source, settings, credential) -> None:
        built = dispatch.build(source, PARAMS[source], credential, settings)
        requests = [built.imagery, built.assets] if isinstance(built, EarthImageryRequest) else [built]
        for request in requests:
            assert isinstance(request, RequestDescriptor)
            assert request.source is source

    @pytest.mark.parametrize(
        "source",
        [SourceKind.DAILY_IMAGE, SourceKind.NEO_FEED, SourceKind.ROVER_PHOTO, SourceKind.TECH_TRANSFER],
    )
    def test_gateway_sources_require_credential(self, source, settings) -> None:
        with pytest.raises(MissingCredentialError):
            dispatch.build(source, PARAMS[source], CredentialContext(""), settings)

    def test_reversed_ranges_raise(self, settings, credential) -> None:
        with pytest.raises(InvalidRangeError):
            dispatch.build(
                SourceKind.DAILY_IMAGE,
                DailyImageQuery(start_date="2024-01-05", end_date="2024-01-01"),
                credential,
                settings,
            )
        with pytest.raises(InvalidRangeError):
            dispatch.build(
                SourceKind.NEO_FEED,
                NeoFeedQuery(start_date="2024-01-05", end_date="2024-01-01"),
                credential,
                settings,
            )

    def test_earth_imagery_builds_both_halves(self, settings, credential) -> None:
        built = dispatch.build(SourceKind.EARTH_IMAGERY, PARAMS[SourceKind.EARTH_IMAGERY], credential, settings)
        assert built.imagery.response_format is ResponseFormat.BINARY
        assert built.assets.response_format is ResponseFormat.JSON
        assert built.imagery.params == built.assets.params

    def test_normalize_without_network(self, settings) -> None:
        entry = dispatch.normalize(SourceKind.DAILY_IMAGE, APOD_ENTRY, PARAMS[SourceKind.DAILY_IMAGE], settings)
        assert entry.title == "NGC 1232"
        assert entry.high_res_url == APOD_ENTRY["hdurl"]

    def test_normalize_epic_dates(self, settings) -> None:
        dates = dispatch.normalize(
            SourceKind.EPIC_DATES,
            [{"date": "2024-01-01"}, {"date": "2024-01-02"}, {"date": "2024-01-02"}],
            EpicDatesQuery(),
            settings,
        )
        assert dates == ("2024-01-02", "2024-01-01")


class TestRequestDescriptor:
    def test_full_url_encodes_params(self) -> None:
        request = RequestDescriptor(
            source=SourceKind.MEDIA_SEARCH,
            url="https://images-api.nasa.gov/search",
            params=(("q", "apollo 11"), ("media_type", "image")),
        )
        assert request.full_url == "https://images-api.nasa.gov/search?q=apollo+11&media_type=image"

    def test_bare_query_goes_first(self) -> None:
        request = RequestDescriptor(
            source=SourceKind.TECH_TRANSFER,
            url="https://api.nasa.gov/techtransfer/patent/",
            params=(("api_key", "SECRET"),),
            bare_query="solar panel",
        )
        assert request.full_url == "https://api.nasa.gov/techtransfer/patent/?solar%20panel&api_key=SECRET"

    def test_redacted_url_hides_key(self) -> None:
        request = RequestDescriptor(
            source=SourceKind.DAILY_IMAGE,
            url="https://api.nasa.gov/planetary/apod",
            params=(("date", "2024-01-01"), ("api_key", "SECRET")),
        )
        assert "SECRET" not in request.redacted_url()
        assert request.redacted_url().endswith("api_key=%2A%2A%2A")

    def test_no_params(self) -> None:
        request = RequestDescriptor(source=SourceKind.MEDIA_ASSET, url="https://images-api.nasa.gov/asset/x")
        assert request.full_url == "https://images-api.nasa.gov/asset/x"


def test_credential_repr_hides_key() -> None:
    assert "TEST_KEY" not in repr(CredentialContext("TEST_KEY"))
    assert not CredentialContext("   ").present
