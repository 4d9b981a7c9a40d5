"""Tagged polygon geometry and the features that carry it.

Geometry is either a ``Polygon`` (an exterior ring followed by hole rings)
or a ``MultiPolygon`` (a sequence of polygons).  Rings are tuples of
``(x, y)`` positions and are always closed (first == last) with at least
four positions.  All coordinates follow the GeoJSON convention: x = lng,
y = lat.

Instances are validated once, when they are built from GeoJSON-like
mappings at the decode boundary, and are immutable afterwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Union

import shapely.geometry
from shapely.geometry.polygon import orient

from playground.errors import GeometryError

Position = tuple[float, float]
Ring = tuple[Position, ...]


@dataclass(frozen=True)
class Polygon:
    """A polygon: ``rings[0]`` is the exterior, the rest are holes."""

    rings: tuple[Ring, ...]

    type = "Polygon"

    @property
    def exterior(self) -> Ring:
        return self.rings[0]

    @property
    def holes(self) -> tuple[Ring, ...]:
        return self.rings[1:]

    def to_geojson(self) -> dict:
        return {
            "type": "Polygon",
            "coordinates": [[list(p) for p in ring] for ring in self.rings],
        }

    def to_shapely(self) -> shapely.geometry.Polygon:
        return shapely.geometry.Polygon(self.rings[0], self.rings[1:])


@dataclass(frozen=True)
class MultiPolygon:
    """A set of polygons sharing one feature identity."""

    polygons: tuple[Polygon, ...]

    type = "MultiPolygon"

    def to_geojson(self) -> dict:
        return {
            "type": "MultiPolygon",
            "coordinates": [
                [[list(p) for p in ring] for ring in poly.rings]
                for poly in self.polygons
            ],
        }

    def to_shapely(self) -> shapely.geometry.MultiPolygon:
        return shapely.geometry.MultiPolygon(
            [poly.to_shapely() for poly in self.polygons]
        )


Geometry = Union[Polygon, MultiPolygon]


@dataclass(frozen=True)
class Feature:
    """A geographic polygon with a stable cross-tile identifier.

    Attributes:
        id: Identifier assigned by the upstream data source.  Fragments of
            the same building in neighbouring tiles share it; it is the
            only merge key.
        geometry: Polygon or MultiPolygon in lng/lat.
        properties: Source attributes (read-only by convention).
    """

    id: str
    geometry: Geometry
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MergedFeature:
    """One or more same-id features unioned into a single geometry.

    Attributes:
        id: The shared identifier of the group.
        geometry: Union of every fragment, rewound when more than one
            fragment contributed.
        properties: Properties of the first fragment in sort order.
        fragments: Number of input features folded into this one.
    """

    id: str
    geometry: Geometry
    properties: dict[str, Any] = field(default_factory=dict)
    fragments: int = 1

    def to_geojson(self) -> dict:
        return {
            "type": "Feature",
            "id": self.id,
            "geometry": self.geometry.to_geojson(),
            "properties": dict(self.properties),
        }


def feature_collection(features: Iterable[MergedFeature]) -> dict:
    """Export merged features as a GeoJSON FeatureCollection dict."""
    return {
        "type": "FeatureCollection",
        "features": [f.to_geojson() for f in features],
    }


# ---------------------------------------------------------------------------
# Construction / validation
# ---------------------------------------------------------------------------

def _position(raw: Any) -> Position:
    try:
        x, y = float(raw[0]), float(raw[1])
    except (TypeError, ValueError, IndexError) as e:
        raise GeometryError(f"Invalid position: {raw!r}") from e
    if not (math.isfinite(x) and math.isfinite(y)):
        raise GeometryError(f"Non-finite position: {raw!r}")
    return (x, y)


def _ring(raw: Any) -> Ring:
    if not isinstance(raw, (list, tuple)):
        raise GeometryError(f"Ring must be a sequence, got {type(raw).__name__}")
    points = [_position(p) for p in raw]
    if points and points[0] != points[-1]:
        points.append(points[0])
    if len(points) < 4:
        raise GeometryError(f"Ring has {len(points)} positions, need at least 4")
    return tuple(points)


def _polygon(raw: Any) -> Polygon:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise GeometryError("Polygon needs at least one ring")
    return Polygon(rings=tuple(_ring(r) for r in raw))


def geometry_from_geojson(obj: Any) -> Geometry:
    """Build a validated geometry from a GeoJSON-style mapping.

    Open rings are closed.  Anything that is not a Polygon or MultiPolygon
    with finite coordinates and rings of at least four positions raises
    ``GeometryError``.
    """
    if not isinstance(obj, dict):
        raise GeometryError(f"Geometry must be a mapping, got {type(obj).__name__}")
    geom_type = obj.get("type")
    coordinates = obj.get("coordinates")
    if geom_type == "Polygon":
        return _polygon(coordinates)
    if geom_type == "MultiPolygon":
        if not isinstance(coordinates, (list, tuple)) or not coordinates:
            raise GeometryError("MultiPolygon needs at least one polygon")
        return MultiPolygon(polygons=tuple(_polygon(p) for p in coordinates))
    raise GeometryError(f"Unsupported geometry type: {geom_type!r}")


def _polygon_from_shapely(poly: shapely.geometry.Polygon) -> Polygon:
    rings = [poly.exterior, *poly.interiors]
    return Polygon(rings=tuple(
        tuple((float(c[0]), float(c[1])) for c in ring.coords) for ring in rings
    ))


def geometry_from_shapely(geom: Any) -> Geometry:
    """Convert a shapely polygonal geometry back to the tagged form.

    Non-polygonal members of a GeometryCollection (slivers collapsed to
    lines or points) are dropped.
    """
    if geom.geom_type == "Polygon":
        if geom.is_empty:
            raise GeometryError("Empty polygon")
        return _polygon_from_shapely(geom)
    if geom.geom_type in ("MultiPolygon", "GeometryCollection"):
        polys = [
            _polygon_from_shapely(g) for g in geom.geoms
            if g.geom_type == "Polygon" and not g.is_empty
        ]
        if not polys:
            raise GeometryError(f"No polygonal area in {geom.geom_type}")
        if len(polys) == 1:
            return polys[0]
        return MultiPolygon(polygons=tuple(polys))
    raise GeometryError(f"Expected polygonal geometry, got {geom.geom_type}")


# ---------------------------------------------------------------------------
# Winding
# ---------------------------------------------------------------------------

def iter_polygons(geometry: Geometry) -> Iterator[Polygon]:
    if isinstance(geometry, MultiPolygon):
        yield from geometry.polygons
    else:
        yield geometry


def ring_signed_area(ring: Iterable[Position]) -> float:
    """Area of a ring: negative when clockwise (y up)."""
    lr = shapely.geometry.LinearRing(list(ring))
    area = shapely.geometry.Polygon(lr).area
    return area if lr.is_ccw else -area


def rewind(geometry: Geometry, clockwise: bool = True) -> Geometry:
    """Orient every ring consistently.

    With ``clockwise=True`` exterior rings run clockwise and holes
    counter-clockwise, the convention path renderers expect for polygons
    smaller than a hemisphere.
    """
    sign = -1.0 if clockwise else 1.0
    polys = tuple(
        _polygon_from_shapely(orient(p.to_shapely(), sign=sign))
        for p in iter_polygons(geometry)
    )
    if isinstance(geometry, MultiPolygon):
        return MultiPolygon(polygons=polys)
    return polys[0]
