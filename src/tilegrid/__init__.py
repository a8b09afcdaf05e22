"""tilegrid: coordinate conversions for Spherical Mercator tile pyramids.

Converts between WGS84 lat/lon, EPSG:900913 meters, zoom-level pixels and tile
indices (TMS, Google/Bing and quadkeys). Log output is disabled by default; call
configure_logging() to see it.
"""

from loguru import logger

from .config import Config, configure_logging, get_config, load_config
from .geometry import Bounds, LatLon, LatLonBounds, Meters, Pixel, Tile
from .mercator import GlobalMercator, InvalidPixelSize, InvalidTileSize, MercatorConstants, get_mercator

__version__ = "0.1.0"

logger.disable(__name__)

__all__ = [
    "Bounds",
    "Config",
    "GlobalMercator",
    "InvalidPixelSize",
    "InvalidTileSize",
    "LatLon",
    "LatLonBounds",
    "MercatorConstants",
    "Meters",
    "Pixel",
    "Tile",
    "configure_logging",
    "get_config",
    "get_mercator",
    "load_config",
]
