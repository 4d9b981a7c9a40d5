"""Tests for vector-tile decoding into lng/lat features."""

import pytest

from playground.errors import DecodeError
from playground.geo.geometry import Polygon
from playground.tiles.decoder import RawTile, decode_tile, flatten_features, layer_features
from playground.tiles.grid import TileCoordinate
from tests.lib.tiles import LAYER, encode_tile

Z0 = TileCoordinate(0, 0, 0)


@pytest.mark.unit
class TestDecodeTile:

    def test_layers(self):
        tile = decode_tile(Z0, encode_tile([("a", (1024, 1024, 3072, 3072))]))
        assert isinstance(tile, RawTile)
        assert LAYER in tile.layers

    def test_garbage_payload(self):
        with pytest.raises(DecodeError):
            decode_tile(Z0, b"not a vector tile")

    def test_truncated_payload(self):
        payload = encode_tile([("a", (1024, 1024, 3072, 3072))])
        with pytest.raises(DecodeError):
            decode_tile(Z0, payload[:-5])


@pytest.mark.unit
class TestLayerFeatures:

    def test_tile_local_to_lnglat(self):
        tile = decode_tile(Z0, encode_tile([("a", (1024, 1024, 3072, 3072))]))
        [feature] = layer_features(tile, LAYER)
        assert feature.id == "a"
        assert isinstance(feature.geometry, Polygon)
        lngs = [p[0] for p in feature.geometry.exterior]
        lats = [p[1] for p in feature.geometry.exterior]
        assert min(lngs) == pytest.approx(-90.0)
        assert max(lngs) == pytest.approx(90.0)
        # Symmetric about the equator at z0.
        assert min(lats) == pytest.approx(-max(lats))

    def test_tile_center_is_null_island(self):
        tile = RawTile(coordinate=Z0, layers={LAYER: {
            "extent": 4096,
            "features": [{
                "geometry": {"type": "Polygon", "coordinates": [
                    [[2048, 2048], [3072, 2048], [3072, 1024], [2048, 2048]],
                ]},
                "properties": {"id": "x"},
            }],
        }})
        [feature] = layer_features(tile, LAYER)
        assert feature.geometry.exterior[0] == pytest.approx((0.0, 0.0))

    def test_offset_by_tile_position(self):
        tile = decode_tile(TileCoordinate(1, 0, 1), encode_tile([("a", (0, 0, 100, 100))]))
        [feature] = layer_features(tile, LAYER)
        assert min(p[0] for p in feature.geometry.exterior) == pytest.approx(0.0)

    def test_missing_layer(self):
        tile = decode_tile(Z0, encode_tile([("a", (0, 0, 10, 10))]))
        assert layer_features(tile, "roads") == []

    def test_features_without_id_are_skipped(self):
        tile = RawTile(coordinate=Z0, layers={LAYER: {"extent": 4096, "features": [{
            "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 0]]]},
            "properties": {"height": 3},
        }]}})
        assert layer_features(tile, LAYER) == []

    def test_non_polygons_are_skipped(self):
        tile = RawTile(coordinate=Z0, layers={LAYER: {"extent": 4096, "features": [{
            "geometry": {"type": "Point", "coordinates": [5, 5]},
            "properties": {"id": "p"},
        }]}})
        assert layer_features(tile, LAYER) == []

    def test_invalid_geometry_is_dropped(self):
        tile = RawTile(coordinate=Z0, layers={LAYER: {"extent": 4096, "features": [
            {"geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 1]]]},
             "properties": {"id": "bad"}},
            {"geometry": {"type": "Polygon", "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 0]]]},
             "properties": {"id": "good"}},
        ]}})
        assert [f.id for f in layer_features(tile, LAYER)] == ["good"]

    def test_numeric_ids_become_strings(self):
        tile = RawTile(coordinate=Z0, layers={LAYER: {"extent": 4096, "features": [{
            "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 0]]]},
            "properties": {"id": 42},
        }]}})
        assert layer_features(tile, LAYER)[0].id == "42"

    def test_feature_filter(self):
        tile = decode_tile(Z0, encode_tile([("a", (0, 0, 10, 10)), ("b", (20, 20, 30, 30))]))
        kept = layer_features(tile, LAYER, feature_filter=lambda f: f.id == "b")
        assert [f.id for f in kept] == ["b"]

    def test_properties_kept(self):
        tile = decode_tile(Z0, encode_tile([("a", (0, 0, 10, 10))]))
        assert layer_features(tile, LAYER)[0].properties["height"] == 10


@pytest.mark.unit
class TestFlattenFeatures:

    def test_tile_order(self):
        t1 = decode_tile(TileCoordinate(0, 0, 1), encode_tile([("z", (0, 0, 10, 10))]))
        t2 = decode_tile(TileCoordinate(1, 0, 1), encode_tile([("a", (0, 0, 10, 10)),
                                                               ("z", (20, 20, 30, 30))]))
        assert [f.id for f in flatten_features([t1, t2], LAYER)] == ["z", "a", "z"]

    def test_no_tiles(self):
        assert flatten_features([], LAYER) == []
