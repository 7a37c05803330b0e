"""Dispatch over `SourceKind`.

The single place where a source tag is mapped to its implementation. The
module-level `build` / `normalize` helpers expose the Request Builder and
Response Normalizer of any source without going through the network,
which is what tests and alternative hosts (batch jobs, notebooks) need.
"""

from __future__ import annotations

from typing import Any

import httpx

from adapters.nasa_sources import (
    DailyImageAdapter,
    EarthImageryAdapter,
    EpicDatesAdapter,
    EpicFramesAdapter,
    MediaAssetAdapter,
    MediaSearchAdapter,
    NeoDetailAdapter,
    NeoFeedAdapter,
    RoverPhotosAdapter,
    TechTransferAdapter,
)
from adapters.nasa_sources._base import NasaSourceAdapter
from core.config import AppSettings
from core.credentials import CredentialContext
from core.domain.results import FetchResult
from core.domain.sources import SourceKind
from core.services.pipeline import AdapterHooks, execute, normalize_body

ADAPTERS: dict[SourceKind, type[NasaSourceAdapter[Any, Any]]] = {
    SourceKind.DAILY_IMAGE: DailyImageAdapter,
    SourceKind.NEO_FEED: NeoFeedAdapter,
    SourceKind.NEO_DETAIL: NeoDetailAdapter,
    SourceKind.ROVER_PHOTO: RoverPhotosAdapter,
    SourceKind.EARTH_IMAGERY: EarthImageryAdapter,
    SourceKind.EPIC_DATES: EpicDatesAdapter,
    SourceKind.EPIC_IMAGERY: EpicFramesAdapter,
    SourceKind.MEDIA_SEARCH: MediaSearchAdapter,
    SourceKind.MEDIA_ASSET: MediaAssetAdapter,
    SourceKind.TECH_TRANSFER: TechTransferAdapter,
}


def adapter_for(
    source: SourceKind,
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    hooks: AdapterHooks | None = None,
) -> NasaSourceAdapter[Any, Any]:
    return ADAPTERS[source](settings, transport=transport, hooks=hooks)


def build(
    source: SourceKind,
    params: Any,
    credential: CredentialContext,
    settings: AppSettings | None = None,
) -> Any:
    """Validate `params` and return the request(s) to issue.

    Raises a `ValidationError` subclass; nothing is sent.
    """

    return adapter_for(source, settings).build_request(params, credential)


def normalize(
    source: SourceKind,
    raw: Any,
    params: Any,
    settings: AppSettings | None = None,
) -> Any:
    """Turn a decoded upstream body into the entity shape of `source`."""

    return normalize_body(adapter_for(source, settings), raw, params)


async def fetch(
    source: SourceKind,
    params: Any,
    credential: CredentialContext,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    hooks: AdapterHooks | None = None,
) -> FetchResult[Any]:
    adapter = adapter_for(source, settings, transport=transport, hooks=hooks)
    return await execute(
        adapter,
        params,
        credential,
        settings=adapter.settings,
        transport=transport,
        hooks=hooks,
    )
