"""Fuente: detalle de un objeto cercano (`/neo/rest/v1/neo/{id}`).

También expone `parse_near_earth_object`, el parser compartido con el feed:
ambos endpoints devuelven el mismo objeto NEO.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from adapters.nasa_sources._base import NasaSourceAdapter, float_or_none, require_mapping, text_or_none
from core.credentials import CredentialContext
from core.domain.errors import InvalidParameterError, MalformedEnvelopeError
from core.domain.models import CloseApproach, NearEarthObject
from core.domain.results import FetchResult
from core.domain.sources import SourceKind
from core.requests import RequestDescriptor, require_text


@dataclass(frozen=True)
class NeoDetailQuery:
    asteroid_id: str


def _close_approach(item: Any) -> CloseApproach | None:
    if not isinstance(item, dict):
        return None
    date = text_or_none(item.get("close_approach_date"))
    if date is None:
        return None
    miss = item.get("miss_distance") or {}
    velocity = item.get("relative_velocity") or {}
    return CloseApproach(
        date=date,
        miss_distance_km=float_or_none(miss.get("kilometers")) if isinstance(miss, dict) else None,
        relative_velocity_km_h=(
            float_or_none(velocity.get("kilometers_per_hour")) if isinstance(velocity, dict) else None
        ),
        orbiting_body=text_or_none(item.get("orbiting_body")),
    )


def parse_near_earth_object(payload: Any) -> NearEarthObject:
    data = require_mapping(payload, what="near earth object")

    neo_id = text_or_none(data.get("id")) or text_or_none(data.get("neo_reference_id"))
    if neo_id is None:
        raise MalformedEnvelopeError("near earth object has no id")
    magnitude = float_or_none(data.get("absolute_magnitude_h"))
    if magnitude is None:
        raise MalformedEnvelopeError(f"near earth object {neo_id} has no absolute magnitude")

    kilometers: dict[str, Any] = {}
    diameter = data.get("estimated_diameter")
    if isinstance(diameter, dict) and isinstance(diameter.get("kilometers"), dict):
        kilometers = diameter["kilometers"]

    approaches_raw = data.get("close_approach_data") or []
    if not isinstance(approaches_raw, list):
        raise MalformedEnvelopeError(f"close_approach_data of {neo_id} is not a list")
    approaches = tuple(a for a in (_close_approach(item) for item in approaches_raw) if a is not None)

    return NearEarthObject(
        id=neo_id,
        name=text_or_none(data.get("name")) or "",
        absolute_magnitude=magnitude,
        estimated_diameter_km_min=float_or_none(kilometers.get("estimated_diameter_min")),
        estimated_diameter_km_max=float_or_none(kilometers.get("estimated_diameter_max")),
        hazardous=bool(data.get("is_potentially_hazardous_asteroid")),
        close_approaches=approaches,
        nasa_jpl_url=text_or_none(data.get("nasa_jpl_url")),
    )


class NeoDetailAdapter(NasaSourceAdapter[NeoDetailQuery, NearEarthObject]):
    source: ClassVar[SourceKind] = SourceKind.NEO_DETAIL

    def build_request(self, params: NeoDetailQuery, credential: CredentialContext) -> RequestDescriptor:
        api_key = credential.require()
        asteroid_id = require_text(params.asteroid_id, field="asteroid_id")
        if not asteroid_id.isalnum():
            raise InvalidParameterError(
                f"asteroid_id must be alphanumeric, got {asteroid_id!r}.", field="asteroid_id"
            )
        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.api_base_url}/neo/rest/v1/neo/{asteroid_id}",
            params=(("api_key", api_key),),
        )

    def normalize(self, raw: Any, params: NeoDetailQuery) -> NearEarthObject:
        return parse_near_earth_object(raw)

    async def fetch(self, credential: CredentialContext, asteroid_id: str) -> FetchResult[NearEarthObject]:
        return await self._run(NeoDetailQuery(asteroid_id=asteroid_id), credential)
