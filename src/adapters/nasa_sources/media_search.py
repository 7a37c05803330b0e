"""Fuente: índice de medios (`images-api.nasa.gov`).

Dos endpoints:
- `/search?q=...&media_type=...`: lista de items, solo metadatos.
- `/asset/{nasa_id}`: lista de ficheros de un item (se usa bajo demanda
  para resolver la URL reproducible de video/audio).

Este upstream no usa api_key. Aun así el contrato (input, credencial) es
el mismo que en el resto: la credencial se exige pero no se envía.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar
from urllib.parse import quote

from adapters.nasa_sources._base import NasaSourceAdapter, require_list, require_mapping, text_or_none
from core.credentials import CredentialContext
from core.domain.errors import InvalidParameterError, MalformedEnvelopeError
from core.domain.models import MediaSearchResult
from core.domain.results import FetchResult
from core.domain.sources import MediaKind, SourceKind
from core.requests import RequestDescriptor, optional_text, parse_choice, parse_non_negative_int, require_text


@dataclass(frozen=True)
class MediaSearchQuery:
    q: str
    media_type: MediaKind | str = MediaKind.IMAGE
    page: int | str | None = None


@dataclass(frozen=True)
class MediaAssetQuery:
    nasa_id: str


def _collection_items(raw: Any, *, what: str) -> list[Any]:
    envelope = require_mapping(raw, what=what)
    collection = require_mapping(envelope.get("collection"), what=f"{what} collection")
    if "items" not in collection:
        raise MalformedEnvelopeError(f"{what} collection has no 'items' list")
    return require_list(collection["items"], what=f"{what} items")


def _keywords(value: Any) -> frozenset[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        return frozenset()
    return frozenset(k for k in (text_or_none(v) for v in value) if k)


def _result(item: Any) -> MediaSearchResult:
    entry = require_mapping(item, what="media search item")
    data = entry.get("data")
    if not isinstance(data, list) or not data:
        raise MalformedEnvelopeError("media search item has no data")
    meta = require_mapping(data[0], what="media search item data")

    nasa_id = text_or_none(meta.get("nasa_id"))
    if nasa_id is None:
        raise MalformedEnvelopeError("media search item has no nasa_id")
    try:
        kind = MediaKind(text_or_none(meta.get("media_type")))
    except ValueError:
        raise MalformedEnvelopeError(
            f"media search item {nasa_id} has an unknown media type {meta.get('media_type')!r}"
        ) from None

    thumbnail: str | None = None
    links = entry.get("links")
    if isinstance(links, list) and links and isinstance(links[0], dict):
        thumbnail = text_or_none(links[0].get("href"))

    return MediaSearchResult(
        id=nasa_id,
        title=text_or_none(meta.get("title")) or "",
        description=text_or_none(meta.get("description")) or "",
        media_kind=kind,
        date_created=text_or_none(meta.get("date_created")),
        center=text_or_none(meta.get("center")),
        photographer=text_or_none(meta.get("photographer")),
        keywords=_keywords(meta.get("keywords")),
        thumbnail_url=thumbnail,
        # Video/audio se resuelven bajo demanda.
        resolved_media_url=thumbnail if kind is MediaKind.IMAGE else None,
    )


class MediaSearchAdapter(NasaSourceAdapter[MediaSearchQuery, tuple[MediaSearchResult, ...]]):
    """Búsqueda por término; nunca resuelve assets de la lista completa."""

    source: ClassVar[SourceKind] = SourceKind.MEDIA_SEARCH

    def build_request(self, params: MediaSearchQuery, credential: CredentialContext) -> RequestDescriptor:
        credential.require()
        term = require_text(params.q, field="q")
        kind = parse_choice(params.media_type, MediaKind, field="media_type")
        query: list[tuple[str, str]] = [("q", term), ("media_type", kind.value)]
        if optional_text(params.page) is not None:
            page = parse_non_negative_int(params.page, field="page")
            if page < 1:
                raise InvalidParameterError("page must be >= 1.", field="page")
            query.append(("page", str(page)))
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.images_api_base_url}/search",
            params=tuple(query),
        )

    def normalize(self, raw: Any, params: MediaSearchQuery) -> tuple[MediaSearchResult, ...]:
        return tuple(_result(item) for item in _collection_items(raw, what="media search"))

    def is_empty(self, value: tuple[MediaSearchResult, ...]) -> bool:
        return not value

    async def search(
        self,
        credential: CredentialContext,
        q: str,
        *,
        media_type: MediaKind | str = MediaKind.IMAGE,
        page: int | str | None = None,
    ) -> FetchResult[tuple[MediaSearchResult, ...]]:
        return await self._run(MediaSearchQuery(q=q, media_type=media_type, page=page), credential)


class MediaAssetAdapter(NasaSourceAdapter[MediaAssetQuery, tuple[str, ...]]):
    """Ficheros de un item (`href` de cada entrada, en orden upstream)."""

    source: ClassVar[SourceKind] = SourceKind.MEDIA_ASSET

    def build_request(self, params: MediaAssetQuery, credential: CredentialContext) -> RequestDescriptor:
        credential.require()
        nasa_id = require_text(params.nasa_id, field="nasa_id")
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.images_api_base_url}/asset/{quote(nasa_id, safe='')}",
        )

    def normalize(self, raw: Any, params: MediaAssetQuery) -> tuple[str, ...]:
        hrefs: list[str] = []
        for item in _collection_items(raw, what="media asset"):
            href = text_or_none(item.get("href")) if isinstance(item, dict) else None
            if href:
                hrefs.append(href)
        return tuple(hrefs)

    def is_empty(self, value: tuple[str, ...]) -> bool:
        return not value

    async def fetch(self, credential: CredentialContext, nasa_id: str) -> FetchResult[tuple[str, ...]]:
        return await self._run(MediaAssetQuery(nasa_id=nasa_id), credential)
