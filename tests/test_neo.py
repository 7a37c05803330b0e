"""Tests for the near earth object feed and detail adapters."""

from __future__ import annotations

import asyncio
import datetime as dt

import pytest

from adapters.nasa_sources.neo_detail import NeoDetailAdapter, NeoDetailQuery
from adapters.nasa_sources.neo_feed import NeoFeedAdapter
from core.domain.errors import ErrorKind, MalformedEnvelopeError
from core.domain.results import AdapterState
from core.domain.sources import SourceKind
from core.services import dispatch
from core.services.pipeline import AdapterHooks

FEED = "/neo/rest/v1/feed"


@pytest.fixture
def feed_adapter(settings, upstream) -> NeoFeedAdapter:
    return NeoFeedAdapter(settings, transport=upstream.transport)


class TestNeoFeed:
    def test_keys_are_exactly_the_window(self, feed_adapter, upstream, credential, fixture_json) -> None:
        upstream.json(FEED, fixture_json("neo_feed.json"))
        result = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-01", end_date="2024-01-03"))

        assert result.state is AdapterState.SUCCEEDED
        feed = result.data
        assert feed.dates() == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert feed.near_earth_objects["2024-01-03"] == ()
        assert upstream.last_params() == {
            "start_date": "2024-01-01",
            "end_date": "2024-01-03",
            "api_key": "TEST_KEY",
        }

    def test_ids_unique_within_bucket(self, feed_adapter, upstream, credential, fixture_json) -> None:
        upstream.json(FEED, fixture_json("neo_feed.json"))
        feed = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-01", end_date="2024-01-03")).data

        for bucket in feed.near_earth_objects.values():
            ids = [neo.id for neo in bucket]
            assert len(ids) == len(set(ids))
        assert [neo.id for neo in feed.near_earth_objects["2024-01-02"]] == ["2465633", "3426410"]
        assert feed.element_count == 3

    def test_object_normalization(self, feed_adapter, upstream, credential, fixture_json) -> None:
        upstream.json(FEED, fixture_json("neo_feed.json"))
        feed = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-01", end_date="2024-01-03")).data

        neo = feed.near_earth_objects["2024-01-02"][0]
        assert neo.name == "465633 (2009 JR5)"
        assert neo.absolute_magnitude == pytest.approx(20.36)
        assert neo.hazardous is True
        assert neo.estimated_diameter_km_min == pytest.approx(0.2251930467)
        approach = neo.close_approaches[0]
        assert approach.date == "2024-01-02"
        assert approach.miss_distance_km == pytest.approx(45290298.225725659)
        assert approach.relative_velocity_km_h == pytest.approx(65259.0528312)
        assert approach.orbiting_body == "Earth"

    def test_single_date_is_one_day_window(self, feed_adapter, upstream, credential) -> None:
        upstream.json(FEED, {"near_earth_objects": {"2024-01-01": []}})
        result = asyncio.run(feed_adapter.fetch(credential, date=dt.date(2024, 1, 1)))
        assert upstream.last_params()["start_date"] == "2024-01-01"
        assert upstream.last_params()["end_date"] == "2024-01-01"
        assert result.state is AdapterState.EMPTY_RESULT
        assert result.message() == "no results for these parameters"

    def test_reversed_window(self, feed_adapter, upstream, credential) -> None:
        result = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-03", end_date="2024-01-01"))
        assert result.error.kind is ErrorKind.INVALID_RANGE
        assert result.error.message.startswith("End date cannot be earlier than start date")
        assert upstream.calls == 0

    def test_window_longer_than_seven_days(self, feed_adapter, upstream, credential) -> None:
        result = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-01", end_date="2024-01-09"))
        assert result.error.kind is ErrorKind.INVALID_RANGE
        assert upstream.calls == 0

    def test_seven_day_span_is_accepted(self, feed_adapter, upstream, credential) -> None:
        upstream.json(FEED, {"near_earth_objects": {}})
        result = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-01", end_date="2024-01-08"))
        assert not result.is_failed
        assert len(result.data.dates()) == 8

    def test_both_dates_required(self, feed_adapter, upstream, credential) -> None:
        result = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-01"))
        assert result.error.kind is ErrorKind.INVALID_PARAMETER
        assert upstream.calls == 0

    def test_missing_container_is_malformed(self, feed_adapter, upstream, credential) -> None:
        upstream.json(FEED, {"element_count": 0})
        result = asyncio.run(feed_adapter.fetch(credential, start_date="2024-01-01", end_date="2024-01-02"))
        assert result.error.kind is ErrorKind.MALFORMED_ENVELOPE


class TestNeoDetail:
    def test_fetch_detail(self, settings, upstream, credential, fixture_json) -> None:
        payload = fixture_json("neo_feed.json")["near_earth_objects"]["2024-01-01"][0]
        upstream.json("/neo/rest/v1/neo/3553060", payload)
        adapter = NeoDetailAdapter(settings, transport=upstream.transport)

        result = asyncio.run(adapter.fetch(credential, "3553060"))

        assert result.ok
        assert result.data.id == "3553060"
        assert result.data.name == "(2010 XT10)"
        assert upstream.last_params() == {"api_key": "TEST_KEY"}

    @pytest.mark.parametrize("asteroid_id", ["", "  ", "35/53", "../feed"])
    def test_invalid_id(self, settings, upstream, credential, asteroid_id) -> None:
        adapter = NeoDetailAdapter(settings, transport=upstream.transport)
        result = asyncio.run(adapter.fetch(credential, asteroid_id))
        assert result.error.kind is ErrorKind.INVALID_PARAMETER
        assert upstream.calls == 0

    def test_unknown_id(self, settings, upstream, credential) -> None:
        adapter = NeoDetailAdapter(settings, transport=upstream.transport)
        result = asyncio.run(adapter.fetch(credential, "1"))
        assert result.error.kind is ErrorKind.TRANSPORT
        assert result.error.status_code == 404


def _neo(**overrides) -> dict:
    payload = {
        "id": "3542519",
        "name": "(2010 PK9)",
        "absolute_magnitude_h": 21.5,
        "estimated_diameter": {"kilometers": {"estimated_diameter_min": 0.12, "estimated_diameter_max": 0.27}},
        "is_potentially_hazardous_asteroid": False,
        "close_approach_data": [
            {
                "close_approach_date": "2024-01-01",
                "miss_distance": {"kilometers": "1000.5"},
                "relative_velocity": {"kilometers_per_hour": "5000"},
                "orbiting_body": "Earth",
            }
        ],
    }
    payload.update(overrides)
    return payload


class TestOutOfRangeValues:
    def test_nan_miss_distance_is_malformed(self, settings, upstream, credential) -> None:
        approach = {"close_approach_date": "2024-01-01", "miss_distance": {"kilometers": "NaN"}}
        upstream.json(FEED, {"near_earth_objects": {"2024-01-01": [_neo(close_approach_data=[approach])]}})
        states = []
        adapter = NeoFeedAdapter(
            settings,
            transport=upstream.transport,
            hooks=AdapterHooks(state_changed=lambda source, state: states.append(state)),
        )

        result = asyncio.run(adapter.fetch(credential, date="2024-01-01"))

        assert result.error.kind is ErrorKind.MALFORMED_ENVELOPE
        assert [s for s in states if s.is_terminal] == [AdapterState.FAILED]

    def test_negative_diameter_is_malformed(self, settings, upstream, credential) -> None:
        diameter = {"kilometers": {"estimated_diameter_min": -1, "estimated_diameter_max": 0.2}}
        upstream.json("/neo/rest/v1/neo/3542519", _neo(estimated_diameter=diameter))
        adapter = NeoDetailAdapter(settings, transport=upstream.transport)

        result = asyncio.run(adapter.fetch(credential, "3542519"))

        assert result.is_failed
        assert result.error.kind is ErrorKind.MALFORMED_ENVELOPE

    def test_dispatch_normalize_classifies_too(self, settings) -> None:
        approach = {"close_approach_date": "2024-01-01", "miss_distance": {"kilometers": "-1"}}
        with pytest.raises(MalformedEnvelopeError):
            dispatch.normalize(
                SourceKind.NEO_DETAIL, _neo(close_approach_data=[approach]), NeoDetailQuery("3542519"), settings
            )


class TestFeedIsReadOnly:
    def test_buckets_cannot_be_mutated(self, feed_adapter, upstream, credential) -> None:
        upstream.json(FEED, {"near_earth_objects": {"2024-01-01": [_neo()]}})
        feed = asyncio.run(feed_adapter.fetch(credential, date="2024-01-01")).data

        with pytest.raises(TypeError):
            feed.near_earth_objects["2024-01-02"] = ()
        assert feed.dates() == ["2024-01-01"]

    def test_json_dump_keeps_buckets(self, feed_adapter, upstream, credential) -> None:
        upstream.json(FEED, {"near_earth_objects": {"2024-01-01": [_neo()]}})
        feed = asyncio.run(feed_adapter.fetch(credential, date="2024-01-01")).data

        dumped = feed.model_dump(mode="json")

        assert list(dumped["near_earth_objects"]) == ["2024-01-01"]
        assert dumped["near_earth_objects"]["2024-01-01"][0]["id"] == "3542519"
