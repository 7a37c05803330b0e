"""Fuente: EPIC (`/EPIC/api/{kind}/all` y `/EPIC/api/{kind}/date/{date}`).

Sub-protocolo en dos pasos:
1) Listar las fechas disponibles para un tipo (natural / enhanced).
2) Pedir los frames de UNA de esas fechas.

Este módulo solo sabe hacer cada paso por separado; la secuencia con
estado (qué tipo, qué fecha, qué respuesta es la vigente) vive en
`core.services.epic_session`.

Nota:
- `/all` devuelve objetos `{"date": "YYYY-MM-DD"}` (o strings, según
  versión del API); se normaliza a fechas ISO, más reciente primero.
- La URL del PNG no viene en la respuesta: la deriva el resolver.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from adapters.nasa_sources._base import (
    NasaSourceAdapter,
    float_or_none,
    require_list,
    require_mapping,
    text_or_none,
)
from core.config import AppSettings
from core.credentials import CredentialContext
from core.domain.errors import MalformedEnvelopeError
from core.domain.models import EpicFrame
from core.domain.results import FetchResult
from core.domain.sources import EpicImageKind, SourceKind
from core.requests import RequestDescriptor, parse_choice, parse_iso_date
from core.services.pipeline import AdapterHooks


@dataclass(frozen=True)
class EpicDatesQuery:
    kind: EpicImageKind | str = EpicImageKind.NATURAL


@dataclass(frozen=True)
class EpicFramesQuery:
    date: str | dt.date
    kind: EpicImageKind | str = EpicImageKind.NATURAL


def _iso_day(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("date")
    text = text_or_none(value)
    if text is None:
        raise MalformedEnvelopeError("EPIC date entry is empty")
    try:
        return dt.date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        raise MalformedEnvelopeError(f"EPIC date entry {text!r} is not an ISO date") from None


def _frame(item: Any, kind: EpicImageKind) -> EpicFrame:
    data = require_mapping(item, what="EPIC frame")
    identifier = text_or_none(data.get("identifier"))
    if identifier is None:
        raise MalformedEnvelopeError("EPIC frame has no identifier")
    timestamp = text_or_none(data.get("date"))
    if timestamp is None:
        raise MalformedEnvelopeError(f"EPIC frame {identifier} has no date")
    _iso_day(timestamp)

    centroid = data.get("centroid_coordinates")
    centroid = centroid if isinstance(centroid, dict) else {}
    return EpicFrame(
        identifier=identifier,
        caption=text_or_none(data.get("caption")) or "",
        image_name=text_or_none(data.get("image")) or identifier,
        version_tag=text_or_none(data.get("version")),
        date=timestamp,
        centroid_lat=float_or_none(centroid.get("lat")),
        centroid_lon=float_or_none(centroid.get("lon")),
        image_kind=kind,
    )


class EpicDatesAdapter(NasaSourceAdapter[EpicDatesQuery, tuple[str, ...]]):
    source: ClassVar[SourceKind] = SourceKind.EPIC_DATES

    def build_request(self, params: EpicDatesQuery, credential: CredentialContext) -> RequestDescriptor:
        api_key = credential.require()
        kind = parse_choice(params.kind, EpicImageKind, field="kind")
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.api_base_url}/EPIC/api/{kind.value}/all",
            params=(("api_key", api_key),),
        )

    def normalize(self, raw: Any, params: EpicDatesQuery) -> tuple[str, ...]:
        days = {_iso_day(item) for item in require_list(raw, what="EPIC available dates")}
        return tuple(sorted(days, reverse=True))

    def is_empty(self, value: tuple[str, ...]) -> bool:
        return not value

    async def fetch(
        self, credential: CredentialContext, kind: EpicImageKind | str = EpicImageKind.NATURAL
    ) -> FetchResult[tuple[str, ...]]:
        return await self._run(EpicDatesQuery(kind=kind), credential)


class EpicFramesAdapter(NasaSourceAdapter[EpicFramesQuery, tuple[EpicFrame, ...]]):
    source: ClassVar[SourceKind] = SourceKind.EPIC_IMAGERY

    def build_request(self, params: EpicFramesQuery, credential: CredentialContext) -> RequestDescriptor:
        api_key = credential.require()
        kind = parse_choice(params.kind, EpicImageKind, field="kind")
        day = parse_iso_date(params.date, field="date")
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.api_base_url}/EPIC/api/{kind.value}/date/{day.isoformat()}",
            params=(("api_key", api_key),),
        )

    def normalize(self, raw: Any, params: EpicFramesQuery) -> tuple[EpicFrame, ...]:
        kind = parse_choice(params.kind, EpicImageKind, field="kind")
        return tuple(_frame(item, kind) for item in require_list(raw, what="EPIC frames"))

    def is_empty(self, value: tuple[EpicFrame, ...]) -> bool:
        return not value

    async def fetch(
        self,
        credential: CredentialContext,
        date: str | dt.date,
        kind: EpicImageKind | str = EpicImageKind.NATURAL,
    ) -> FetchResult[tuple[EpicFrame, ...]]:
        return await self._run(EpicFramesQuery(date=date, kind=kind), credential)


class EpicAdapter:
    """Las dos operaciones EPIC detrás de un solo objeto."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        hooks: AdapterHooks | None = None,
    ) -> None:
        self.settings = settings or AppSettings()
        self.dates = EpicDatesAdapter(self.settings, transport=transport, hooks=hooks)
        self.frames = EpicFramesAdapter(self.settings, transport=transport, hooks=hooks)

    async def fetch_dates(
        self, credential: CredentialContext, kind: EpicImageKind | str = EpicImageKind.NATURAL
    ) -> FetchResult[tuple[str, ...]]:
        return await self.dates.fetch(credential, kind)

    async def fetch_frames(
        self,
        credential: CredentialContext,
        date: str | dt.date,
        kind: EpicImageKind | str = EpicImageKind.NATURAL,
    ) -> FetchResult[tuple[EpicFrame, ...]]:
        return await self.frames.fetch(credential, date, kind)
