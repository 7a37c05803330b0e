"""Fuente: imagen del día (`/planetary/apod`).

Dialecto:
- Una fecha (`date`) o un rango (`start_date` + `end_date`), nunca ambos.
  El rango gana solo si sus dos extremos vienen rellenos; sin nada se pide
  la entrada de hoy.
- Una fecha => objeto JSON; un rango => array JSON.
- Errores propios: {"code": 400, "msg": "..."}.
- `url` puede venir sin esquema (`//www.youtube.com/embed/...`).
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Union
from urllib.parse import urljoin, urlsplit

from adapters.nasa_sources._base import NasaSourceAdapter, require_list, require_mapping, text_or_none
from core.credentials import CredentialContext
from core.domain.errors import InvalidParameterError, MalformedEnvelopeError
from core.domain.models import DailyImageEntry
from core.domain.results import FetchResult
from core.domain.sources import MediaKind, SourceKind
from core.requests import RequestDescriptor, optional_text, parse_date_window, parse_iso_date

log = logging.getLogger("nasa-explorer")

FIRST_AVAILABLE_DATE = dt.date(1995, 6, 16)
_RELATIVE_BASE = "https://apod.nasa.gov/apod/"

DailyImagePayload = Union[DailyImageEntry, tuple[DailyImageEntry, ...]]


@dataclass(frozen=True)
class DailyImageQuery:
    date: str | dt.date | None = None
    start_date: str | dt.date | None = None
    end_date: str | dt.date | None = None
    thumbs: bool = False

    @property
    def is_range(self) -> bool:
        return optional_text(self.start_date) is not None and optional_text(self.end_date) is not None


def _check_first_date(value: dt.date, *, field: str) -> None:
    if value < FIRST_AVAILABLE_DATE:
        raise InvalidParameterError(
            f"{field} must be on or after {FIRST_AVAILABLE_DATE.isoformat()}.", field=field
        )


def absolute_media_url(url: str) -> str:
    """Resuelve URLs sin esquema o relativas a una URL absoluta."""

    url = url.strip()
    if url.startswith("//"):
        return f"https:{url}"
    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        return url
    return urljoin(_RELATIVE_BASE, url)


def _collapse(value: Any) -> str | None:
    text = text_or_none(value)
    return " ".join(text.split()) if text else None


def _entry(item: Any) -> DailyImageEntry:
    data = require_mapping(item, what="daily image entry")

    raw_date = text_or_none(data.get("date"))
    if raw_date is None:
        raise MalformedEnvelopeError("daily image entry has no date")
    try:
        entry_date = dt.date.fromisoformat(raw_date[:10])
    except ValueError:
        raise MalformedEnvelopeError(f"daily image entry has an invalid date {raw_date!r}") from None

    media_type = text_or_none(data.get("media_type"))
    if media_type not in (MediaKind.IMAGE.value, MediaKind.VIDEO.value):
        raise MalformedEnvelopeError(f"unsupported media type {media_type!r} for {entry_date}")

    url = text_or_none(data.get("url"))
    if url is None:
        raise MalformedEnvelopeError(f"daily image entry for {entry_date} has no url")

    hdurl = text_or_none(data.get("hdurl"))
    thumbnail = text_or_none(data.get("thumbnail_url"))
    return DailyImageEntry(
        date=entry_date.isoformat(),
        title=_collapse(data.get("title")) or "",
        explanation=text_or_none(data.get("explanation")) or "",
        media_kind=MediaKind(media_type),
        media_url=absolute_media_url(url),
        high_res_url=absolute_media_url(hdurl) if hdurl else None,
        attribution=_collapse(data.get("copyright")),
        thumbnail_url=absolute_media_url(thumbnail) if thumbnail else None,
    )


class DailyImageAdapter(NasaSourceAdapter[DailyImageQuery, DailyImagePayload]):
    """Imagen del día por fecha o por rango."""

    source: ClassVar[SourceKind] = SourceKind.DAILY_IMAGE

    def build_request(self, params: DailyImageQuery, credential: CredentialContext) -> RequestDescriptor:
        api_key = credential.require()
        query: list[tuple[str, str]] = []

        if params.is_range:
            start, end = parse_date_window(params.start_date, params.end_date)
            _check_first_date(start, field="start_date")
            query += [("start_date", start.isoformat()), ("end_date", end.isoformat())]
        else:
            if optional_text(params.start_date) or optional_text(params.end_date):
                log.warning("incomplete daily image range ignored (both start and end are required)")
            if optional_text(params.date) is not None:
                day = parse_iso_date(params.date, field="date")
                _check_first_date(day, field="date")
                query.append(("date", day.isoformat()))

        if params.thumbs:
            query.append(("thumbs", "true"))
        query.append(("api_key", api_key))
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.api_base_url}/planetary/apod",
            params=tuple(query),
        )

    def normalize(self, raw: Any, params: DailyImageQuery) -> DailyImagePayload:
        if params.is_range:
            entries: list[DailyImageEntry] = []
            for item in require_list(raw, what="daily image range"):
                try:
                    entries.append(_entry(item))
                except MalformedEnvelopeError as exc:
                    log.warning("skipping daily image entry: %s", exc.message)
            entries.sort(key=lambda e: e.date)
            return tuple(entries)

        entry = _entry(raw)
        requested = optional_text(params.date)
        if requested is not None:
            expected = parse_iso_date(params.date, field="date").isoformat()
            if entry.date != expected:
                raise MalformedEnvelopeError(
                    f"requested daily image for {expected}, upstream returned {entry.date}"
                )
        return entry

    def is_empty(self, value: DailyImagePayload) -> bool:
        return isinstance(value, tuple) and not value

    async def fetch(
        self,
        credential: CredentialContext,
        *,
        date: str | dt.date | None = None,
        start_date: str | dt.date | None = None,
        end_date: str | dt.date | None = None,
        thumbs: bool = False,
    ) -> FetchResult[DailyImagePayload]:
        """Una entrada (fecha u hoy) o una secuencia ordenada (rango)."""

        query = DailyImageQuery(date=date, start_date=start_date, end_date=end_date, thumbs=thumbs)
        return await self._run(query, credential)
