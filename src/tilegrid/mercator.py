"""TMS Global Mercator pyramid.

GlobalMercator converts between the coordinate spaces of a Spherical Mercator
(EPSG:900913, a.k.a. EPSG:3857) tile pyramid::

     LatLon      <->      Meters      <->     Pixels     <->      Tile
     WGS84            Spherical Mercator   XY pixels at Z     TMS / Google / QuadTree

Pixel and tile coordinates are in TMS notation (origin bottom-left). The whole world
is a single tile at zoom 0 and every further zoom level halves the resolution.

The projector is immutable once built and safe to share between threads. Conversions
are pure float formulas: out-of-domain input (e.g. latitude 90) yields inf/nan rather
than an exception, so numeric pipelines can carry the sentinels through.
"""

import functools
import math
import operator
from collections.abc import Iterator
from dataclasses import dataclass
from math import atan, degrees, pi, sinh

from loguru import logger

from .config import get_config
from .geometry import Bounds, LatLon, LatLonBounds, Meters, Pixel, Tile

EARTH_RADIUS = 6378137
MAX_ZOOM_SEARCH = 30
# latitude where the projected square world ends: |my| == origin shift
MAX_LATITUDE = degrees(atan(sinh(pi)))
# box edges this close to a tile line count as on it (lat 0 projects to about -7e-10 m)
EDGE_TOLERANCE = 1e-6


class InvalidTileSize(ValueError):
    """Raised when a pyramid is configured with a non-positive or non-integer tile size."""

    def __init__(self, tile_size: object) -> None:
        self.tile_size = tile_size
        super().__init__(f"Tile size must be a positive integer, got {tile_size!r}")


class InvalidPixelSize(ValueError):
    """Raised when no zoom level in the pyramid matches the requested pixel size."""

    def __init__(self, pixel_size: float) -> None:
        self.pixel_size = pixel_size
        super().__init__(f"Invalid pixel size: {pixel_size!r} (no zoom level in 0-{MAX_ZOOM_SEARCH - 1} fits)")


def _validate_tile_size(tile_size: object) -> int:
    """Return `tile_size` as an int, accepting any integral type except bool."""
    if isinstance(tile_size, bool):
        raise InvalidTileSize(tile_size)
    try:
        size = operator.index(tile_size)
    except TypeError:
        raise InvalidTileSize(tile_size) from None
    if size <= 0:
        raise InvalidTileSize(tile_size)
    return size


@dataclass(frozen=True)
class MercatorConstants:
    """Per-pyramid constants, fixed at construction."""

    tile_size: int
    initial_resolution: float  # meters/pixel at zoom 0; 156543.03392804062 for 256px tiles
    origin_shift: float  # half the equatorial circumference; 20037508.342789244

    def __post_init__(self):
        object.__setattr__(self, "tile_size", _validate_tile_size(self.tile_size))

    @classmethod
    def for_tile_size(cls, tile_size: int) -> "MercatorConstants":
        tile_size = _validate_tile_size(tile_size)
        return cls(
            tile_size=tile_size,
            initial_resolution=2 * pi * EARTH_RADIUS / tile_size,
            origin_shift=2 * pi * EARTH_RADIUS / 2.0,
        )


def _tan(angle: float) -> float:
    return math.tan(angle) if math.isfinite(angle) else math.nan


def _log(value: float) -> float:
    """Natural log that follows IEEE semantics instead of raising on the singular points."""
    if value > 0 or math.isnan(value):
        return math.log(value)
    return -math.inf if value == 0 else math.nan


def _exp(value: float) -> float:
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf


class GlobalMercator:
    """TMS Global Mercator pyramid for a given tile size."""

    def __init__(self, tile_size: int = 256):
        """Initialize the pyramid. Raises InvalidTileSize unless tile_size is a positive integer."""
        self._constants = MercatorConstants.for_tile_size(tile_size)
        logger.debug(
            f"Built {self.tile_size}px Mercator pyramid: "
            f"{self._constants.initial_resolution} m/px at zoom 0, origin shift {self._constants.origin_shift} m"
        )

    def __repr__(self) -> str:
        return f"GlobalMercator(tile_size={self.tile_size})"

    @property
    def constants(self) -> MercatorConstants:
        return self._constants

    @property
    def tile_size(self) -> int:
        return self._constants.tile_size

    @property
    def initial_resolution(self) -> float:
        return self._constants.initial_resolution

    @property
    def origin_shift(self) -> float:
        return self._constants.origin_shift

    def lat_lon_to_meters(self, lat: float, lon: float) -> Meters:
        """Converts given lat/lon in WGS84 Datum to XY in Spherical Mercator EPSG:900913."""
        origin_shift = self._constants.origin_shift
        mx = lon * origin_shift / 180.0
        my = _log(_tan((90 + lat) * pi / 360.0)) / (pi / 180.0)
        my = my * origin_shift / 180.0
        return Meters(mx, my)

    def meters_to_lat_lon(self, mx: float, my: float) -> LatLon:
        """Converts XY point from Spherical Mercator EPSG:900913 to lat/lon in WGS84 Datum."""
        origin_shift = self._constants.origin_shift
        lon = (mx / origin_shift) * 180.0
        lat = (my / origin_shift) * 180.0
        lat = 180 / pi * (2 * atan(_exp(lat * pi / 180.0)) - pi / 2.0)
        return LatLon(lat, lon)

    def resolution(self, zoom: int) -> float:
        """Resolution (meters/pixel) for given zoom level (measured at Equator)."""
        return self._constants.initial_resolution / (2**zoom)

    def map_size(self, zoom: int) -> int:
        """Width and height of the whole pyramid level in pixels."""
        return self._constants.tile_size << zoom

    def pixels_to_meters(self, px: float, py: float, zoom: int) -> Meters:
        """Converts pixel coordinates in given zoom level of pyramid to EPSG:900913."""
        res = self.resolution(zoom)
        origin_shift = self._constants.origin_shift
        return Meters(px * res - origin_shift, py * res - origin_shift)

    def meters_to_pixels(self, mx: float, my: float, zoom: int) -> Pixel:
        """Converts EPSG:900913 to pyramid pixel coordinates in given zoom level."""
        res = self.resolution(zoom)
        origin_shift = self._constants.origin_shift
        return Pixel((mx + origin_shift) / res, (my + origin_shift) / res)

    def pixels_to_tile(self, px: float, py: float) -> tuple[int, int]:
        """Returns a tile covering region in given pixel coordinates.

        Tiles own the half-open pixel range (n * size, (n + 1) * size], so pixel 0 maps to tile -1.
        """
        size = self._constants.tile_size
        return int(math.ceil(px / size) - 1), int(math.ceil(py / size) - 1)

    def pixels_to_raster(self, px: float, py: float, zoom: int) -> Pixel:
        """Move the origin of pixel coordinates to top-left corner."""
        return Pixel(px, self.map_size(zoom) - py)

    def meters_to_tile(self, mx: float, my: float, zoom: int) -> tuple[int, int]:
        """Returns tile for given mercator coordinates."""
        px, py = self.meters_to_pixels(mx, my, zoom)
        return self.pixels_to_tile(px, py)

    def lat_lon_to_tile(self, lat: float, lon: float, zoom: int) -> tuple[int, int]:
        """Returns the TMS tile containing the given WGS84 point."""
        mx, my = self.lat_lon_to_meters(lat, lon)
        return self.meters_to_tile(mx, my, zoom)

    def tile_to_pixels(self, tx: int, ty: int) -> Pixel:
        """Bottom-left pixel corner of the tile, in TMS pixel space."""
        size = self._constants.tile_size
        return Pixel(float(tx * size), float(ty * size))

    def tile_to_meters(self, tx: int, ty: int, zoom: int) -> Meters:
        px, py = self.tile_to_pixels(tx, ty)
        return self.pixels_to_meters(px, py, zoom)

    def tile_bounds(self, tx: int, ty: int, zoom: int) -> Bounds:
        """Returns bounds of the given tile in EPSG:900913 coordinates."""
        min_x, min_y = self.tile_to_meters(tx, ty, zoom)
        max_x, max_y = self.tile_to_meters(tx + 1, ty + 1, zoom)
        return Bounds(min_x, min_y, max_x, max_y)

    def tile_lat_lon_bounds(self, tx: int, ty: int, zoom: int) -> LatLonBounds:
        """Returns bounds of the given tile in latitude/longitude using WGS84 datum."""
        min_x, min_y, max_x, max_y = self.tile_bounds(tx, ty, zoom)
        min_lat, min_lon = self.meters_to_lat_lon(min_x, min_y)
        max_lat, max_lon = self.meters_to_lat_lon(max_x, max_y)
        return LatLonBounds(min_lat, min_lon, max_lat, max_lon)

    def zoom_for_pixel_size(self, pixel_size: float) -> int:
        """Maximal scaledown zoom of the pyramid closest to the pixel size.

        Never scales up past zoom 0. Raises InvalidPixelSize if even the finest level
        searched is still coarser than `pixel_size` (e.g. zero, negative or nan).
        """
        for i in range(MAX_ZOOM_SEARCH):
            if pixel_size > self.resolution(i):
                return i - 1 if i != 0 else 0  # We don't want to scale up
        logger.error(f"No zoom level fits pixel size {pixel_size!r} for {self.tile_size}px tiles")
        raise InvalidPixelSize(pixel_size)

    def google_tile(self, tx: int, ty: int, zoom: int) -> tuple[int, int]:
        """Converts TMS tile coordinates to Google Tile coordinates (and back)."""
        google = Tile(tx, ty, zoom).to_google()
        return google.x, google.y

    def quad_tree(self, tx: int, ty: int, zoom: int) -> str:
        """Converts TMS tile coordinates to Microsoft QuadTree."""
        return Tile(tx, ty, zoom).quadkey

    def quad_key_to_tile(self, quadkey: str) -> Tile:
        """Converts a Microsoft QuadTree key to TMS tile coordinates."""
        return Tile.from_quadkey(quadkey)

    def tiles_for_bounds(
        self, min_lat: float, min_lon: float, max_lat: float, max_lon: float, zoom: int
    ) -> Iterator[Tile]:
        """Yield the TMS tiles covering a lat/lon box, row by row from the bottom.

        Latitudes are clamped to the projected square and indices to the grid at `zoom`,
        so a box touching the edges of the world stays inside the pyramid. A box edge lying
        on a tile line (within EDGE_TOLERANCE meters) does not pull in the tiles beyond it.
        """
        lats = sorted(max(-MAX_LATITUDE, min(MAX_LATITUDE, lat)) for lat in (min_lat, max_lat))
        lons = sorted((min_lon, max_lon))
        last = 2**zoom - 1
        min_x, min_y = self.lat_lon_to_meters(lats[0], lons[0])
        max_x, max_y = self.lat_lon_to_meters(lats[1], lons[1])
        left, right = self._tile_span(min_x, max_x, zoom)
        bottom, top = self._tile_span(min_y, max_y, zoom)
        left, bottom = max(0, left), max(0, bottom)
        right, top = min(last, right), min(last, top)
        logger.debug(f"Zoom {zoom}: {(right - left + 1) * (top - bottom + 1)} tiles in x {left}-{right}, y {bottom}-{top}")
        for ty in range(bottom, top + 1):
            for tx in range(left, right + 1):
                yield Tile(tx, ty, zoom)

    def _tile_span(self, low: float, high: float, zoom: int) -> tuple[int, int]:
        """First and last tile index spanned by [low, high] meters along one axis."""
        tile_meters = self.resolution(zoom) * self._constants.tile_size
        origin_shift = self._constants.origin_shift
        first = math.floor((low + origin_shift + EDGE_TOLERANCE) / tile_meters)
        last = math.ceil((high + origin_shift - EDGE_TOLERANCE) / tile_meters) - 1
        # a zero-width box on a tile line still touches one tile
        return first, max(first, last)


@functools.cache
def _mercator_for(tile_size: int) -> GlobalMercator:
    return GlobalMercator(tile_size)


def get_mercator() -> GlobalMercator:
    """Shared read-only pyramid for the configured tile size."""
    return _mercator_for(get_config().tile_size)
