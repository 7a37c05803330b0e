"""Modelos del dominio (Pydantic v2).

- Validación estricta y documentación autocontenida (Field) sin acoplar el
  Core a librerías de I/O.
- Todos son `frozen`: el Core construye un valor nuevo por llamada y nunca
  muta lo que devolvió. Las secuencias son tuplas por la misma razón.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_serializer, field_validator
from pydantic.config import ConfigDict

from core.domain.sources import EpicImageKind, MediaKind


class ImageBlobRef:
    """Referencia opaca a bytes de imagen (equivalente a un object URL).

    Los bytes se exponen tal cual llegaron: no se decodifican ni se
    re-codifican. `revoke()` libera la referencia localmente.
    """

    __slots__ = ("content_type", "_data", "_revoked")

    def __init__(self, data: bytes, content_type: str = "application/octet-stream") -> None:
        self.content_type = content_type
        self._data: bytes | None = data
        self._revoked = False

    @property
    def revoked(self) -> bool:
        return self._revoked

    @property
    def size(self) -> int:
        return len(self._data) if self._data is not None else 0

    def read(self) -> bytes:
        if self._revoked or self._data is None:
            raise ValueError("image blob reference has been revoked")
        return self._data

    def revoke(self) -> None:
        self._data = None
        self._revoked = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageBlobRef):
            return NotImplemented
        return (
            self.content_type == other.content_type
            and self._revoked == other._revoked
            and self._data == other._data
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        state = "revoked" if self._revoked else f"{self.size} bytes"
        return f"ImageBlobRef({self.content_type}, {state})"


class DailyImageEntry(BaseModel):
    """Una entrada de la imagen del día."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    date: str = Field(..., description="Fecha ISO (YYYY-MM-DD) de la entrada.")
    title: str = Field(default="", description="Título publicado.")
    explanation: str = Field(default="", description="Texto explicativo.")
    media_kind: MediaKind = Field(..., description="image o video.")
    media_url: str = Field(
        ...,
        min_length=1,
        description="URL absoluta del medio (imagen o embed de video).",
    )
    high_res_url: str | None = Field(default=None, description="URL de alta resolución.")
    attribution: str | None = Field(default=None, description="Copyright, si no es dominio público.")
    thumbnail_url: str | None = Field(default=None, description="Miniatura (solo videos).")


class CloseApproach(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = Field(..., description="Fecha ISO del acercamiento.")
    miss_distance_km: float | None = Field(default=None, ge=0)
    relative_velocity_km_h: float | None = Field(default=None, ge=0)
    orbiting_body: str | None = None


class NearEarthObject(BaseModel):
    """Objeto cercano a la Tierra (feed o detalle)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Identificador upstream (único por feed).")
    name: str = Field(default="", description="Designación.")
    absolute_magnitude: float = Field(..., description="Magnitud absoluta H.")
    estimated_diameter_km_min: float | None = Field(default=None, ge=0)
    estimated_diameter_km_max: float | None = Field(default=None, ge=0)
    hazardous: bool = Field(default=False, description="Potencialmente peligroso.")
    close_approaches: tuple[CloseApproach, ...] = Field(default=())
    nasa_jpl_url: str | None = None


class NeoFeedByDate(BaseModel):
    """Feed NEO agrupado por fecha.

    Invariante: las claves son exactamente las fechas de [start_date, end_date].
    El mapeo es de solo lectura (`MappingProxyType`), como el resto del modelo.
    """

    model_config = ConfigDict(frozen=True)

    start_date: str
    end_date: str
    near_earth_objects: Mapping[str, tuple[NearEarthObject, ...]] = Field(default_factory=lambda: MappingProxyType({}))

    @field_validator("near_earth_objects", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, tuple[NearEarthObject, ...]]) -> Mapping[str, tuple[NearEarthObject, ...]]:
        return MappingProxyType(dict(value))

    @field_serializer("near_earth_objects")
    def _serialize_buckets(
        self, value: Mapping[str, tuple[NearEarthObject, ...]]
    ) -> dict[str, tuple[NearEarthObject, ...]]:
        return dict(value)

    @property
    def element_count(self) -> int:
        return sum(len(bucket) for bucket in self.near_earth_objects.values())

    def dates(self) -> list[str]:
        return sorted(self.near_earth_objects)


class RoverPhoto(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    image_url: str = Field(..., min_length=1)
    earth_date: str
    rover_name: str
    camera_full_name: str
    camera_name: str | None = None
    sol: int | None = Field(default=None, ge=0)


class EarthImageAsset(BaseModel):
    """Resultado combinado de imagery (binario) + assets (JSON).

    En un fallo parcial la mitad ausente queda en `None`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    image_blob: ImageBlobRef | None = Field(default=None, description="Bytes de la imagen.")
    asset_date: str | None = Field(default=None, description="Fecha ISO del asset.")
    asset_id: str | None = Field(default=None, description="Identificador del asset.")

    @field_serializer("image_blob")
    def _serialize_blob(self, blob: ImageBlobRef | None) -> dict[str, Any] | None:
        if blob is None:
            return None
        return {"content_type": blob.content_type, "size": blob.size, "revoked": blob.revoked}


class EpicFrame(BaseModel):
    """Metadatos de un frame EPIC.

    `image_url` empieza vacío: lo deriva el resolver a partir de
    (`image_kind`, `date`, `image_name`) del propio frame.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    caption: str = ""
    image_name: str = Field(..., min_length=1, description="Nombre base del PNG en el archivo.")
    version_tag: str | None = None
    date: str = Field(..., description="Timestamp upstream 'YYYY-MM-DD HH:MM:SS'.")
    centroid_lat: float | None = None
    centroid_lon: float | None = None
    image_kind: EpicImageKind = EpicImageKind.NATURAL
    image_url: str | None = None


class MediaSearchResult(BaseModel):
    """Item del índice de medios.

    `resolved_media_url` solo se rellena de entrada para imágenes; video y
    audio lo obtienen bajo demanda (`core.services.resolver`).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    media_kind: MediaKind
    date_created: str | None = None
    center: str | None = None
    photographer: str | None = None
    keywords: frozenset[str] = Field(default_factory=frozenset)
    thumbnail_url: str | None = None
    resolved_media_url: str | None = None


class TechTransferResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    code: str = ""
    title: str = Field(default="", description="Título sin markup.")
    description_html: str = Field(default="", description="Descripción con su markup original.")
    center: str = ""
    category: str = ""
    image_url: str | None = None
