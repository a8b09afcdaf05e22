"""Value types for tile pyramid coordinates.

Provides immutable types for the four coordinate spaces of a web-mapping tile pyramid:
- LatLon: WGS84 latitude/longitude in degrees
- Meters: Spherical Mercator (EPSG:900913) projected coordinates
- Pixel: pixel coordinates at a zoom level, origin bottom-left unless rasterized
- Tile: tile indices (TMS convention) with Google/Bing and quadkey conversions
- Bounds, LatLonBounds: tile extents in meters and degrees

All types are NamedTuples, so they unpack like plain tuples: ``mx, my = meters``.
Tile-index math that does not depend on the tile size lives here; everything that
needs resolution or origin shift lives in GlobalMercator.
"""

from __future__ import annotations

from typing import NamedTuple

QUADKEY_DIGITS = "0123"


class LatLon(NamedTuple):
    """Latitude/longitude in degrees, WGS84 datum."""

    lat: float
    lon: float


class Meters(NamedTuple):
    """XY in Spherical Mercator meters."""

    x: float
    y: float


class Pixel(NamedTuple):
    """Pixel coordinates within the raster at a given zoom level."""

    x: float
    y: float


class Bounds(NamedTuple):
    """Extent in Spherical Mercator meters."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float


class LatLonBounds(NamedTuple):
    """Extent in WGS84 degrees."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float


class Tile(NamedTuple):
    """Tile indices in TMS notation (origin bottom-left) at a zoom level."""

    x: int = 0
    y: int = 0
    zoom: int = 0

    def __str__(self) -> str:
        return f"{self.zoom}/{self.x}/{self.y}"

    def to_google(self) -> Tile:
        """Flip the row index between TMS and Google/Bing numbering. The flip is its own inverse."""
        return Tile(self.x, (2**self.zoom - 1) - self.y, self.zoom)

    @property
    def quadkey(self) -> str:
        """Microsoft QuadTree key: one base-4 digit per zoom level, coarsest first."""
        google = self.to_google()
        digits = []
        for i in range(self.zoom, 0, -1):
            mask = 1 << (i - 1)
            digit = 0
            if google.x & mask:
                digit += 1
            if google.y & mask:
                digit += 2
            digits.append(QUADKEY_DIGITS[digit])
        return "".join(digits)

    @classmethod
    def from_quadkey(cls, quadkey: str) -> Tile:
        """Decode a quadkey back into a TMS tile. The zoom level is the key length."""
        x = y = 0
        for char in quadkey:
            digit = QUADKEY_DIGITS.find(char)
            if digit < 0:
                raise ValueError(f"Invalid quadkey digit {char!r} in {quadkey!r}")
            x = (x << 1) | (digit & 1)
            y = (y << 1) | (digit >> 1)
        # decoded row is in Google numbering
        return cls(x, y, len(quadkey)).to_google()
