"""Builders for tile payloads, features and mock tile servers used in tests."""

from __future__ import annotations

from typing import Callable

import httpx
import mapbox_vector_tile
from shapely.geometry import box

from playground.geo.geometry import Feature, geometry_from_geojson

LAYER = "public.data_building"


def square(x0: float, y0: float, x1: float, y1: float, ccw: bool = True) -> dict:
    """GeoJSON polygon for an axis-aligned rectangle."""
    ring = [[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]
    if not ccw:
        ring.reverse()
    return {"type": "Polygon", "coordinates": [ring]}


def feature(fid: str, geojson: dict, **props) -> Feature:
    return Feature(id=fid, geometry=geometry_from_geojson(geojson), properties={"id": fid, **props})


def encode_tile(buildings: list[tuple[str, tuple[int, int, int, int]]], layer: str = LAYER) -> bytes:
    """Encode ``(id, (x0, y0, x1, y1))`` rectangles in tile-local units."""
    return mapbox_vector_tile.encode(
        [{
            "name": layer,
            "features": [
                {"geometry": box(*bounds), "properties": {"id": fid, "height": 10}}
                for fid, bounds in buildings
            ],
        }],
        default_options={"y_coord_down": True},
    )


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def tile_server(tiles: dict[tuple[int, int, int], bytes],
                fail: set[tuple[int, int, int]] = frozenset(),
                calls: list | None = None) -> httpx.AsyncClient:
    """Client serving ``tiles`` by (z, x, y); ``fail`` tiles answer 500.

    Missing tiles get an empty layer.
    """
    empty = encode_tile([])

    def handler(request: httpx.Request) -> httpx.Response:
        z, x, y = request.url.path.rsplit(".", 1)[0].split("/")[-3:]
        key = (int(z), int(x), int(y))
        if calls is not None:
            calls.append(key)
        if key in fail:
            return httpx.Response(500, content=b"boom")
        return httpx.Response(200, content=tiles.get(key, empty))

    return mock_client(handler)
