"""Fuente: feed de objetos cercanos (`/neo/rest/v1/feed`).

Reglas:
- Ventana inclusiva [start_date, end_date] de como mucho 7 días; se valida
  antes de emitir la petición.
- Una fecha suelta (`date`) equivale a la ventana de un solo día; si vienen
  ambos extremos del rango, el rango gana.
- Las claves del resultado son exactamente las fechas de la ventana (las que
  upstream omite quedan vacías, las que sobran se descartan).
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, ClassVar

from adapters.nasa_sources._base import NasaSourceAdapter, require_list, require_mapping
from adapters.nasa_sources.neo_detail import parse_near_earth_object
from core.credentials import CredentialContext
from core.domain.errors import InvalidParameterError, MalformedEnvelopeError
from core.domain.models import NearEarthObject, NeoFeedByDate
from core.domain.results import FetchResult
from core.domain.sources import SourceKind
from core.requests import RequestDescriptor, iter_dates, optional_text, parse_date_window, parse_iso_date

log = logging.getLogger("nasa-explorer")


@dataclass(frozen=True)
class NeoFeedQuery:
    start_date: str | dt.date | None = None
    end_date: str | dt.date | None = None
    date: str | dt.date | None = None


class NeoFeedAdapter(NasaSourceAdapter[NeoFeedQuery, NeoFeedByDate]):
    """Feed NEO agrupado por fecha."""

    source: ClassVar[SourceKind] = SourceKind.NEO_FEED

    def window(self, params: NeoFeedQuery) -> tuple[dt.date, dt.date]:
        if optional_text(params.start_date) is not None and optional_text(params.end_date) is not None:
            return parse_date_window(
                params.start_date,
                params.end_date,
                max_span_days=self.settings.neo_max_span_days,
            )
        if optional_text(params.date) is not None:
            day = parse_iso_date(params.date, field="date")
            return day, day
        raise InvalidParameterError("Please select both start and end dates.", field="start_date")

    def build_request(self, params: NeoFeedQuery, credential: CredentialContext) -> RequestDescriptor:
        api_key = credential.require()
        start, end = self.window(params)
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.api_base_url}/neo/rest/v1/feed",
            params=(
                ("start_date", start.isoformat()),
                ("end_date", end.isoformat()),
                ("api_key", api_key),
            ),
        )

    def normalize(self, raw: Any, params: NeoFeedQuery) -> NeoFeedByDate:
        start, end = self.window(params)
        envelope = require_mapping(raw, what="near earth object feed")
        by_date = envelope.get("near_earth_objects")
        if not isinstance(by_date, dict):
            raise MalformedEnvelopeError("near earth object feed has no 'near_earth_objects' mapping")

        buckets: dict[str, tuple[NearEarthObject, ...]] = {d.isoformat(): () for d in iter_dates(start, end)}
        for key, items in by_date.items():
            if key not in buckets:
                log.warning("dropping near earth objects outside the requested window (%s)", key)
                continue
            seen: set[str] = set()
            bucket: list[NearEarthObject] = []
            for item in require_list(items, what=f"near earth objects on {key}"):
                neo = parse_near_earth_object(item)
                if neo.id in seen:
                    log.warning("dropping duplicate near earth object %s on %s", neo.id, key)
                    continue
                seen.add(neo.id)
                bucket.append(neo)
            buckets[key] = tuple(bucket)

        return NeoFeedByDate(start_date=start.isoformat(), end_date=end.isoformat(), near_earth_objects=buckets)

    def is_empty(self, value: NeoFeedByDate) -> bool:
        return value.element_count == 0

    async def fetch(
        self,
        credential: CredentialContext,
        *,
        start_date: str | dt.date | None = None,
        end_date: str | dt.date | None = None,
        date: str | dt.date | None = None,
    ) -> FetchResult[NeoFeedByDate]:
        query = NeoFeedQuery(start_date=start_date, end_date=end_date, date=date)
        return await self._run(query, credential)
