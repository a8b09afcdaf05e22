import pytest

from tilegrid.geometry import Bounds, LatLon, Meters, Pixel, Tile


def test_value_types_unpack_like_tuples():
    lat, lon = LatLon(12.5, -3.25)
    assert (lat, lon) == (12.5, -3.25)
    mx, my = Meters(1.0, 2.0)
    assert (mx, my) == (1.0, 2.0)
    assert Pixel(3.0, 4.0) == (3.0, 4.0)
    assert Bounds(0, 1, 2, 3).max_y == 3


def test_tile_defaults_and_str():
    assert Tile() == Tile(0, 0, 0)
    assert str(Tile(3, 5, 4)) == "4/3/5"


@pytest.mark.parametrize(
    "tms, google",
    [
        (Tile(0, 0, 0), Tile(0, 0, 0)),
        (Tile(0, 0, 1), Tile(0, 1, 1)),
        (Tile(3, 1, 2), Tile(3, 2, 2)),
        (Tile(5, 7, 3), Tile(5, 0, 3)),
    ],
)
def test_to_google(tms: Tile, google: Tile):
    assert tms.to_google() == google
    assert google.to_google() == tms


@pytest.mark.parametrize(
    "tile, quadkey",
    [
        (Tile(0, 0, 0), ""),
        (Tile(0, 0, 1), "2"),
        (Tile(1, 1, 1), "1"),
        (Tile(0, 1, 1), "0"),
        (Tile(1, 0, 1), "3"),
        # Bing Maps example: Google tile (3, 5) at level 3 is "213"
        (Tile(3, 2, 3), "213"),
    ],
)
def test_quadkey(tile: Tile, quadkey: str):
    assert tile.quadkey == quadkey
    assert Tile.from_quadkey(quadkey) == tile


def test_quadkey_length_matches_zoom():
    for zoom in range(25):
        assert len(Tile(0, 0, zoom).quadkey) == zoom


def test_quadkey_prefix_is_parent_tile():
    """Dropping the last digit addresses the parent tile."""
    child = Tile(13, 6, 4)
    parent = Tile.from_quadkey(child.quadkey[:-1])
    assert parent.zoom == 3
    assert (parent.x, parent.y) == (child.x // 2, child.y // 2)


@pytest.mark.parametrize("bad", ["4", "01a", "1 2", "-1"])
def test_from_quadkey_rejects_invalid_digits(bad: str):
    with pytest.raises(ValueError, match="Invalid quadkey digit"):
        Tile.from_quadkey(bad)
