"""Source and selection enums shared across the application.

`SourceKind` is the closed set of upstream dialects; everything that varies
per upstream is dispatched on it in exactly one place
(`core.services.dispatch`). The remaining enums are the selections a caller
may pass (rover, camera, media kind...).
"""

from __future__ import annotations

from enum import Enum


class SourceKind(str, Enum):
    """One tag per upstream API."""

    DAILY_IMAGE = "daily_image"
    NEO_FEED = "neo_feed"
    NEO_DETAIL = "neo_detail"
    ROVER_PHOTO = "rover_photo"
    EARTH_IMAGERY = "earth_imagery"
    EPIC_DATES = "epic_dates"
    EPIC_IMAGERY = "epic_imagery"
    MEDIA_SEARCH = "media_search"
    MEDIA_ASSET = "media_asset"
    TECH_TRANSFER = "tech_transfer"

    def label(self) -> str:
        """Human readable label for tables and logging."""

        return self.value.replace("_", " ")


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


class EpicImageKind(str, Enum):
    NATURAL = "natural"
    ENHANCED = "enhanced"

    @classmethod
    def default(cls) -> "EpicImageKind":
        return cls.NATURAL


class TechTransferCategory(str, Enum):
    PATENT = "patent"
    PATENT_ISSUED = "patent_issued"
    SOFTWARE = "software"
    SPINOFF = "spinoff"

    @classmethod
    def default(cls) -> "TechTransferCategory":
        return cls.PATENT


class Rover(str, Enum):
    CURIOSITY = "Curiosity"
    OPPORTUNITY = "Opportunity"
    SPIRIT = "Spirit"
    PERSEVERANCE = "Perseverance"

    @classmethod
    def default(cls) -> "Rover":
        return cls.CURIOSITY


class RoverCamera(str, Enum):
    """Cámaras aceptadas por el filtro `camera` (valor = código upstream)."""

    FHAZ = "FHAZ"
    RHAZ = "RHAZ"
    MAST = "MAST"
    CHEMCAM = "CHEMCAM"
    MAHLI = "MAHLI"
    MARDI = "MARDI"
    NAVCAM = "NAVCAM"
    PANCAM = "PANCAM"
    MINITES = "MINITES"

    def label(self) -> str:
        return _CAMERA_LABELS[self]


_CAMERA_LABELS: dict[RoverCamera, str] = {
    RoverCamera.FHAZ: "Front Hazard Avoidance Camera",
    RoverCamera.RHAZ: "Rear Hazard Avoidance Camera",
    RoverCamera.MAST: "Mast Camera",
    RoverCamera.CHEMCAM: "Chemistry and Camera Complex",
    RoverCamera.MAHLI: "Mars Hand Lens Imager",
    RoverCamera.MARDI: "Mars Descent Imager",
    RoverCamera.NAVCAM: "Navigation Camera",
    RoverCamera.PANCAM: "Panoramic Camera",
    RoverCamera.MINITES: "Miniature Thermal Emission Spectrometer (Mini-TES)",
}
