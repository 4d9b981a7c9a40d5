"""Ear-clipping triangulation of polygon features.

Rings are flattened into one vertex array with ring boundaries (the
earcut "holes" convention) and handed to ``mapbox_earcut``.  MultiPolygon
members are triangulated one by one and concatenated with index offsets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence

import mapbox_earcut as earcut
import numpy as np

from playground.errors import GeometryError
from playground.geo.geometry import MergedFeature, Polygon, iter_polygons
from playground.geo.projection import to_web_mercator

Point = tuple[float, float]


@dataclass
class Triangulation:
    """Flattened vertex/index triangulation of one feature.

    ``vertices`` holds ``dimensions`` floats per vertex; every three
    consecutive ``indices`` form one triangle.
    """

    feature_id: str
    vertices: list[float] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    dimensions: int = 2

    def point(self, index: int) -> Point:
        i = index * self.dimensions
        return (self.vertices[i], self.vertices[i + 1])

    @property
    def triangles(self) -> list[tuple[Point, Point, Point]]:
        idx = self.indices
        return [
            (self.point(idx[i]), self.point(idx[i + 1]), self.point(idx[i + 2]))
            for i in range(0, len(idx) - 2, 3)
        ]


def _open_ring(ring: Sequence[Point]) -> list[Point]:
    pts = list(ring)
    if len(pts) > 1 and pts[0] == pts[-1]:
        pts.pop()
    return pts


def flatten_rings(rings: Sequence[Sequence[Point]]) -> tuple[list[float], list[int]]:
    """Flatten rings into ``(vertices, hole_indices)``.

    ``hole_indices`` lists the vertex index at which each hole starts.
    Closing duplicates are dropped.
    """
    vertices: list[float] = []
    holes: list[int] = []
    count = 0
    for n, ring in enumerate(rings):
        pts = _open_ring(ring)
        if n > 0:
            holes.append(count)
        for x, y in pts:
            vertices.extend((float(x), float(y)))
        count += len(pts)
    return vertices, holes


def triangulate_rings(rings: Sequence[Sequence[Point]]) -> tuple[list[float], list[int]]:
    """Triangulate one polygon given as exterior + hole rings.

    Returns:
        ``(vertices, indices)`` with two floats per vertex.

    Raises:
        GeometryError: If the coordinates are not finite.
    """
    vertices, holes = flatten_rings(rings)
    count = len(vertices) // 2
    if count < 3:
        return vertices, []
    ring_ends = np.array(holes + [count], dtype=np.uint32)
    verts = np.array(vertices, dtype=np.float64).reshape(-1, 2)
    if not np.isfinite(verts).all():
        raise GeometryError("Cannot triangulate non-finite coordinates")
    indices = earcut.triangulate_float64(verts, ring_ends)
    return vertices, [int(i) for i in indices]


def _project_polygon(poly: Polygon, transform: Callable[[float, float], Point]) -> list[list[Point]]:
    return [[transform(x, y) for x, y in ring] for ring in poly.rings]


def triangulate_feature(
    feature: MergedFeature,
    transform: Callable[[float, float], Point] = to_web_mercator,
) -> Triangulation:
    """Triangulate a feature after projecting it with ``transform``.

    The default transform projects lng/lat to Web-Mercator meters.
    """
    result = Triangulation(feature_id=feature.id)
    for poly in iter_polygons(feature.geometry):
        vertices, indices = triangulate_rings(_project_polygon(poly, transform))
        offset = len(result.vertices) // 2
        result.vertices.extend(vertices)
        result.indices.extend(i + offset for i in indices)
    return result
