"""Decode Mapbox vector tiles into lng/lat building features.

Payloads are parsed with ``mapbox_vector_tile``; tile-local integer
coordinates (origin top-left, ``extent`` units per tile edge) are then
converted to WGS84 the same way vector-tile-js ``toGeoJSON`` does.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable

import mapbox_vector_tile
from google.protobuf.message import DecodeError as ProtobufDecodeError
from loguru import logger

from playground.errors import DecodeError, GeometryError
from playground.geo.geometry import Feature, geometry_from_geojson
from playground.tiles.grid import TileCoordinate

DEFAULT_EXTENT = 4096

FeatureFilter = Callable[[Feature], bool]


@dataclass
class RawTile:
    """A decoded tile: layer name -> decoded layer dict.

    Each layer dict carries ``extent`` and ``features`` (GeoJSON-like
    feature dicts in tile-local coordinates).  Discarded once features
    are extracted.
    """

    coordinate: TileCoordinate
    layers: dict[str, dict] = field(default_factory=dict)


def decode_tile(coordinate: TileCoordinate, payload: bytes) -> RawTile:
    """Parse a protobuf vector-tile payload.

    Raises:
        DecodeError: If the payload is not a valid vector tile.
    """
    try:
        layers = mapbox_vector_tile.decode(
            payload, default_options={"y_coord_down": True},
        )
    except (ProtobufDecodeError, ValueError, KeyError, IndexError, TypeError) as e:
        raise DecodeError(f"Tile {coordinate} is not a vector tile: {e}") from e
    if not isinstance(layers, dict):
        raise DecodeError(f"Tile {coordinate} decoded to {type(layers).__name__}")
    return RawTile(coordinate=coordinate, layers=layers)


def _tile_to_lnglat(coordinate: TileCoordinate, extent: int) -> Callable[[Any], list[float]]:
    size = extent * (2 ** coordinate.z)
    x0 = extent * coordinate.x
    y0 = extent * coordinate.y

    def convert(point: Any) -> list[float]:
        lng = (point[0] + x0) * 360.0 / size - 180.0
        y2 = 180.0 - (point[1] + y0) * 360.0 / size
        lat = 360.0 / math.pi * math.atan(math.exp(y2 * math.pi / 180.0)) - 90.0
        return [lng, lat]

    return convert


def _convert_coordinates(coords: Any, convert: Callable[[Any], list[float]]) -> Any:
    # Positions are the innermost sequences of numbers.
    if coords and isinstance(coords[0], (int, float)):
        return convert(coords)
    return [_convert_coordinates(c, convert) for c in coords]


def layer_features(
    tile: RawTile,
    layer_name: str,
    feature_filter: FeatureFilter | None = None,
) -> list[Feature]:
    """Extract polygon features with an ``id`` property from one layer.

    Args:
        tile: The decoded tile.
        layer_name: Layer to read; a missing layer yields no features.
        feature_filter: Optional predicate; features for which it returns
            False are dropped.

    Returns:
        Features in lng/lat, in layer order.
    """
    layer = tile.layers.get(layer_name)
    if not layer:
        return []

    convert = _tile_to_lnglat(tile.coordinate, int(layer.get("extent", DEFAULT_EXTENT)))
    features: list[Feature] = []
    for raw in layer.get("features", []):
        geometry = raw.get("geometry") or {}
        if geometry.get("type") not in ("Polygon", "MultiPolygon"):
            continue
        properties = dict(raw.get("properties") or {})
        if properties.get("id") is None:
            continue
        try:
            geom = geometry_from_geojson({
                "type": geometry["type"],
                "coordinates": _convert_coordinates(geometry.get("coordinates") or [], convert),
            })
        except GeometryError as e:
            logger.warning(f"Tile {tile.coordinate}: dropping feature {properties['id']}: {e}")
            continue
        feature = Feature(id=str(properties["id"]), geometry=geom, properties=properties)
        if feature_filter is None or feature_filter(feature):
            features.append(feature)
    return features


def flatten_features(
    tiles: list[RawTile],
    layer_name: str,
    feature_filter: FeatureFilter | None = None,
) -> list[Feature]:
    """Concatenate one layer's features across all tiles, in tile order."""
    features: list[Feature] = []
    for tile in tiles:
        features.extend(layer_features(tile, layer_name, feature_filter))
    return features
