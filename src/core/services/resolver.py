"""Derived-asset resolution.

Some entries only carry metadata; the viewable/playable URL needs a second
step. That step runs on demand for ONE entity (when a caller opens an
item), never for a whole result list.

- Media search video/audio: per-item asset lookup, first href whose
  extension matches the item's kind. No match => `ResolutionUnavailable`.
- Media search image: already resolved at normalisation time.
- EPIC frame: no network; the archive URL is rebuilt from the frame's own
  `date`, `image_kind` and `image_name`.

The earth-imagery join (two concurrent calls, partial outcome) happens
inside its adapter, see `adapters.nasa_sources.earth_imagery.merge_halves`.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Union
from urllib.parse import urlsplit

import httpx

from adapters.nasa_sources.media_search import MediaAssetAdapter
from core.config import AppSettings
from core.credentials import CredentialContext
from core.domain.errors import (
    InvalidParameterError,
    MalformedEnvelopeError,
    ResolutionUnavailableError,
)
from core.domain.models import EpicFrame, MediaSearchResult
from core.domain.results import FetchResult
from core.domain.sources import MediaKind, SourceKind
from core.services.pipeline import AdapterHooks

log = logging.getLogger("nasa-explorer")

ResolvableEntity = Union[MediaSearchResult, EpicFrame]

PLAYABLE_EXTENSIONS: dict[MediaKind, tuple[str, ...]] = {
    MediaKind.VIDEO: (".mp4",),
    MediaKind.AUDIO: (".mp3", ".m4a"),
}


def select_media_url(hrefs: Iterable[str], kind: MediaKind) -> str | None:
    """First href whose path ends with an extension playable for `kind`."""

    extensions = PLAYABLE_EXTENSIONS.get(kind, ())
    for href in hrefs:
        path = urlsplit(href).path.lower()
        if path.endswith(extensions):
            return href
    return None


def epic_image_url(frame: EpicFrame, archive_base: str) -> str:
    """`{archive}/{kind}/{yyyy}/{mm}/{dd}/png/{image}.png` from the frame's own date."""

    try:
        day = dt.date.fromisoformat(frame.date[:10])
    except ValueError:
        raise MalformedEnvelopeError(f"EPIC frame {frame.identifier} has an invalid date {frame.date!r}") from None
    name = frame.image_name or frame.identifier
    return (
        f"{archive_base.rstrip('/')}/{frame.image_kind.value}/"
        f"{day.year:04d}/{day.month:02d}/{day.day:02d}/png/{name}.png"
    )


async def _resolve_media(
    item: MediaSearchResult,
    credential: CredentialContext,
    *,
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None,
    hooks: AdapterHooks | None,
) -> FetchResult[MediaSearchResult]:
    if item.media_kind is MediaKind.IMAGE or item.resolved_media_url:
        return FetchResult.succeeded(SourceKind.MEDIA_SEARCH, item)

    lookup = MediaAssetAdapter(settings, transport=transport, hooks=hooks)
    assets = await lookup.fetch(credential, item.id)
    if assets.is_failed:
        assert assets.error is not None
        return FetchResult.failed(SourceKind.MEDIA_SEARCH, assets.error, data=item)

    url = select_media_url(assets.data or (), item.media_kind)
    if url is None:
        log.debug("no %s asset for %s", item.media_kind.value, item.id)
        error = ResolutionUnavailableError(f"no playable {item.media_kind.value} file for {item.id}")
        return FetchResult.failed(SourceKind.MEDIA_SEARCH, error, data=item)
    return FetchResult.succeeded(SourceKind.MEDIA_SEARCH, item.model_copy(update={"resolved_media_url": url}))


async def resolve(
    entity: ResolvableEntity,
    source: SourceKind,
    credential: CredentialContext,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    hooks: AdapterHooks | None = None,
) -> FetchResult[ResolvableEntity]:
    """Return a copy of `entity` with its media URL filled in.

    The input entity is never modified. Failures come back as a failed
    `FetchResult` whose `data` is the unresolved entity.
    """

    settings = settings or AppSettings()
    if source is SourceKind.MEDIA_SEARCH and isinstance(entity, MediaSearchResult):
        return await _resolve_media(entity, credential, settings=settings, transport=transport, hooks=hooks)
    if source is SourceKind.EPIC_IMAGERY and isinstance(entity, EpicFrame):
        try:
            url = epic_image_url(entity, settings.epic_archive_base_url)
        except MalformedEnvelopeError as exc:
            return FetchResult.failed(source, exc, data=entity)
        return FetchResult.succeeded(source, entity.model_copy(update={"image_url": url}))

    error = InvalidParameterError(
        f"{type(entity).__name__} from {source.label()} has no derived asset to resolve.", field="entity"
    )
    return FetchResult.failed(source, error)
