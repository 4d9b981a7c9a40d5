"""Tile grid covering a viewport.

Mirrors the d3-tile layout: the projection's world scale picks the nearest
integer zoom, and every 256 px tile intersecting the viewport rectangle is
listed row by row (y outer, x inner).  Tile columns and rows are clamped
to the valid range of the zoom level.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from playground.geo.projection import MercatorProjection

TILE_SIZE = 256


@dataclass(frozen=True, order=True)
class TileCoordinate:
    """One tile in the z/x/y pyramid."""

    x: int
    y: int
    z: int

    def __str__(self) -> str:
        return f"{self.z}/{self.x}/{self.y}"


def zoom_for_scale(world_scale: float, tile_size: int = TILE_SIZE) -> int:
    """Nearest integer zoom for a world width of ``world_scale`` pixels."""
    return int(round(max(math.log2(world_scale / tile_size), 0.0)))


def tile_grid(
    width: float,
    height: float,
    world_scale: float,
    translate: tuple[float, float],
    tile_size: int = TILE_SIZE,
) -> list[TileCoordinate]:
    """List the tiles intersecting a ``width`` x ``height`` viewport.

    Args:
        width: Viewport width in pixels.
        height: Viewport height in pixels.
        world_scale: Width of the whole world in pixels (projection scale
            times 2π).  Must be positive.
        translate: Pixel position of lng=0, lat=0.
        tile_size: Tile edge length in pixels.

    Returns:
        TileCoordinates in row-major order.
    """
    z = math.log2(world_scale / tile_size)
    z0 = int(round(max(z, 0.0)))
    k = 2.0 ** (z - z0) * tile_size
    ox = translate[0] - world_scale / 2.0
    oy = translate[1] - world_scale / 2.0
    n = 1 << z0

    xmin = max(0, math.floor((0.0 - ox) / k))
    xmax = min(n, math.ceil((width - ox) / k))
    ymin = max(0, math.floor((0.0 - oy) / k))
    ymax = min(n, math.ceil((height - oy) / k))

    return [
        TileCoordinate(x=x, y=y, z=z0)
        for y in range(ymin, ymax)
        for x in range(xmin, xmax)
    ]


def tiles_for_projection(
    projection: MercatorProjection, width: float, height: float,
) -> list[TileCoordinate]:
    """Tile grid for a viewport rendered through ``projection``."""
    return tile_grid(width, height, projection.world_scale, projection.origin)
