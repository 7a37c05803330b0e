"""Fuente: fotos de los rovers de Marte (`/mars-photos/api/v1/rovers/{rover}/photos`).

Nota:
- `sol` es obligatorio; `camera` vacío significa "todas las cámaras".
- Una lista `photos` vacía es "sin resultados", no un error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from adapters.nasa_sources._base import NasaSourceAdapter, require_list, require_mapping, text_or_none
from core.credentials import CredentialContext
from core.domain.errors import InvalidParameterError, MalformedEnvelopeError
from core.domain.models import RoverPhoto
from core.domain.results import FetchResult
from core.domain.sources import Rover, RoverCamera, SourceKind
from core.requests import (
    RequestDescriptor,
    optional_text,
    parse_choice,
    parse_non_negative_int,
)


@dataclass(frozen=True)
class RoverPhotoQuery:
    sol: int | str | None
    rover: Rover | str = Rover.CURIOSITY
    camera: RoverCamera | str | None = None
    page: int | str | None = None


def _photo(item: Any) -> RoverPhoto:
    data = require_mapping(item, what="rover photo")
    photo_id = data.get("id")
    if isinstance(photo_id, bool) or not isinstance(photo_id, int):
        raise MalformedEnvelopeError(f"rover photo has an invalid id {photo_id!r}")
    image_url = text_or_none(data.get("img_src"))
    if image_url is None:
        raise MalformedEnvelopeError(f"rover photo {photo_id} has no img_src")

    rover = data.get("rover") if isinstance(data.get("rover"), dict) else {}
    camera = data.get("camera") if isinstance(data.get("camera"), dict) else {}
    sol = data.get("sol")
    return RoverPhoto(
        id=photo_id,
        image_url=image_url,
        earth_date=text_or_none(data.get("earth_date")) or "",
        rover_name=text_or_none(rover.get("name")) or "",
        camera_full_name=text_or_none(camera.get("full_name")) or "",
        camera_name=text_or_none(camera.get("name")),
        sol=sol if isinstance(sol, int) and not isinstance(sol, bool) else None,
    )


class RoverPhotosAdapter(NasaSourceAdapter[RoverPhotoQuery, tuple[RoverPhoto, ...]]):
    source: ClassVar[SourceKind] = SourceKind.ROVER_PHOTO

    def build_request(self, params: RoverPhotoQuery, credential: CredentialContext) -> RequestDescriptor:
        api_key = credential.require()
        rover = parse_choice(params.rover, Rover, field="rover")
        if optional_text(params.sol) is None:
            raise InvalidParameterError("Please enter a sol value.", field="sol")
        sol = parse_non_negative_int(params.sol, field="sol")

        query: list[tuple[str, str]] = [("sol", str(sol))]
        if optional_text(params.camera) is not None:
            camera = parse_choice(params.camera, RoverCamera, field="camera")
            query.append(("camera", camera.value))
        if optional_text(params.page) is not None:
            page = parse_non_negative_int(params.page, field="page")
            if page < 1:
                raise InvalidParameterError("page must be >= 1.", field="page")
            query.append(("page", str(page)))
        query.append(("api_key", api_key))

        return RequestDescriptor(
            source=self.source,
            url=f"{self.settings.api_base_url}/mars-photos/api/v1/rovers/{rover.value.lower()}/photos",
            params=tuple(query),
        )

    def normalize(self, raw: Any, params: RoverPhotoQuery) -> tuple[RoverPhoto, ...]:
        envelope = require_mapping(raw, what="rover photos")
        if "photos" not in envelope:
            raise MalformedEnvelopeError("rover photos response has no 'photos' list")
        photos = require_list(envelope["photos"], what="rover photos")
        return tuple(_photo(item) for item in photos)

    def is_empty(self, value: tuple[RoverPhoto, ...]) -> bool:
        return not value

    async def fetch(
        self,
        credential: CredentialContext,
        *,
        sol: int | str | None,
        rover: Rover | str = Rover.CURIOSITY,
        camera: RoverCamera | str | None = None,
        page: int | str | None = None,
    ) -> FetchResult[tuple[RoverPhoto, ...]]:
        query = RoverPhotoQuery(sol=sol, rover=rover, camera=camera, page=page)
        return await self._run(query, credential)
