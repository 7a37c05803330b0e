"""Fuente: imágenes de la Tierra (`/planetary/earth/imagery` + `/assets`).

Por qué es distinta:
- Son DOS peticiones por invocación: la imagen (binaria) y sus metadatos
  (JSON). Se lanzan juntas y se espera a que ambas terminen (join, no race).
- Cada mitad falla por su cuenta. Si solo una funciona el resultado es un
  fallo parcial que dice cuál sobrevivió y lleva su dato.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from dataclasses import dataclass
from typing import Any, Awaitable, ClassVar, Generic, TypeVar

import httpx

from adapters.http_client import fetch_binary, fetch_json
from adapters.nasa_sources._base import NasaSourceAdapter, require_mapping, text_or_none
from core.credentials import CredentialContext
from core.domain.errors import MalformedEnvelopeError, NasaExplorerError, PartialFailureError
from core.domain.models import EarthImageAsset, ImageBlobRef
from core.domain.results import FetchResult
from core.domain.sources import SourceKind
from core.requests import RequestDescriptor, ResponseFormat, parse_float, parse_iso_date

V = TypeVar("V")

IMAGERY_HALF = "imagery"
ASSETS_HALF = "assets"


@dataclass(frozen=True)
class EarthImageryQuery:
    lat: float | str
    lon: float | str
    date: str | dt.date


@dataclass(frozen=True)
class EarthImageryRequest:
    imagery: RequestDescriptor
    assets: RequestDescriptor


@dataclass(frozen=True)
class Settled(Generic[V]):
    """Resultado asentado de una sub-llamada: valor o error, nunca ambos."""

    value: V | None = None
    error: NasaExplorerError | None = None


@dataclass(frozen=True)
class EarthHalves:
    imagery: Settled[ImageBlobRef]
    assets: Settled[Any]


async def _settle(call: Awaitable[V]) -> Settled[V]:
    try:
        return Settled(value=await call)
    except NasaExplorerError as exc:
        return Settled(error=exc)


def _asset_fields(payload: Any) -> tuple[str | None, str | None]:
    data = require_mapping(payload, what="earth assets")
    raw_date = text_or_none(data.get("date"))
    asset_date = None
    if raw_date is not None:
        try:
            asset_date = dt.date.fromisoformat(raw_date[:10]).isoformat()
        except ValueError:
            raise MalformedEnvelopeError(f"earth asset has an invalid date {raw_date!r}") from None
    return asset_date, text_or_none(data.get("id"))


def merge_halves(halves: EarthHalves) -> EarthImageAsset:
    """Une las dos mitades.

    - ambas bien        => `EarthImageAsset` completo
    - solo una bien     => `PartialFailureError` con el valor parcial
    - ninguna           => el error de la imagen
    """

    asset_date: str | None = None
    asset_id: str | None = None
    assets_error = halves.assets.error
    if assets_error is None:
        try:
            asset_date, asset_id = _asset_fields(halves.assets.value)
        except MalformedEnvelopeError as exc:
            assets_error = exc

    imagery_error = halves.imagery.error
    if imagery_error is not None and assets_error is not None:
        raise imagery_error

    merged = EarthImageAsset(image_blob=halves.imagery.value, asset_date=asset_date, asset_id=asset_id)
    if imagery_error is not None:
        raise PartialFailureError(succeeded_half=ASSETS_HALF, cause=imagery_error, partial=merged)
    if assets_error is not None:
        raise PartialFailureError(succeeded_half=IMAGERY_HALF, cause=assets_error, partial=merged)
    return merged


class EarthImageryAdapter(NasaSourceAdapter[EarthImageryQuery, EarthImageAsset]):
    source: ClassVar[SourceKind] = SourceKind.EARTH_IMAGERY

    def build_request(self, params: EarthImageryQuery, credential: CredentialContext) -> EarthImageryRequest:
        api_key = credential.require()
        lat = parse_float(params.lat, field="lat", minimum=-90.0, maximum=90.0)
        lon = parse_float(params.lon, field="lon", minimum=-180.0, maximum=180.0)
        day = parse_iso_date(params.date, field="date")

        query = (
            ("lon", f"{lon:g}"),
            ("lat", f"{lat:g}"),
            ("date", day.isoformat()),
            ("dim", f"{self.settings.earth_dim_degrees:g}"),
            ("api_key", api_key),
        )
        base = f"{self.settings.api_base_url}/planetary/earth"
        return EarthImageryRequest(
            imagery=RequestDescriptor(
                source=self.source,
                url=f"{base}/imagery",
                params=query,
                response_format=ResponseFormat.BINARY,
            ),
            assets=RequestDescriptor(source=self.source, url=f"{base}/assets", params=query),
        )

    async def fetch_raw(self, client: httpx.AsyncClient, request: EarthImageryRequest) -> EarthHalves:
        imagery, assets = await asyncio.gather(
            _settle(fetch_binary(client, request.imagery)),
            _settle(fetch_json(client, request.assets)),
        )
        return EarthHalves(imagery=imagery, assets=assets)

    def normalize(self, raw: EarthHalves, params: EarthImageryQuery) -> EarthImageAsset:
        return merge_halves(raw)

    async def fetch(
        self,
        credential: CredentialContext,
        *,
        lat: float | str,
        lon: float | str,
        date: str | dt.date,
    ) -> FetchResult[EarthImageAsset]:
        return await self._run(EarthImageryQuery(lat=lat, lon=lon, date=date), credential)
