"""Adaptadores de las APIs de la NASA (uno por dialecto upstream).

Por qué un paquete:
- Cada módulo encapsula builder + normalizer de UNA fuente.
- Todos implementan `core.interfaces.source_adapter.SourceAdapter`.
"""

from adapters.nasa_sources.daily_image import DailyImageAdapter
from adapters.nasa_sources.earth_imagery import EarthImageryAdapter
from adapters.nasa_sources.epic import EpicAdapter, EpicDatesAdapter, EpicFramesAdapter
from adapters.nasa_sources.media_search import MediaAssetAdapter, MediaSearchAdapter
from adapters.nasa_sources.neo_detail import NeoDetailAdapter
from adapters.nasa_sources.neo_feed import NeoFeedAdapter
from adapters.nasa_sources.rover_photos import RoverPhotosAdapter
from adapters.nasa_sources.tech_transfer import TechTransferAdapter

__all__ = [
	"DailyImageAdapter",
	"EarthImageryAdapter",
	"EpicAdapter",
	"EpicDatesAdapter",
	"EpicFramesAdapter",
	"MediaAssetAdapter",
	"MediaSearchAdapter",
	"NeoDetailAdapter",
	"NeoFeedAdapter",
	"RoverPhotosAdapter",
	"TechTransferAdapter",
]
