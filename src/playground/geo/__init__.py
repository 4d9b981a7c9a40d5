"""Geographic primitives: tagged polygon geometry, features, projections."""

from playground.geo.geometry import (
    Feature,
    Geometry,
    MergedFeature,
    MultiPolygon,
    Polygon,
    feature_collection,
    geometry_from_geojson,
    geometry_from_shapely,
    rewind,
    ring_signed_area,
)
from playground.geo.projection import MercatorProjection, to_web_mercator

__all__ = [
    "Feature",
    "Geometry",
    "MergedFeature",
    "MultiPolygon",
    "Polygon",
    "feature_collection",
    "geometry_from_geojson",
    "geometry_from_shapely",
    "rewind",
    "ring_signed_area",
    "MercatorProjection",
    "to_web_mercator",
]
