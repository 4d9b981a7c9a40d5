"""Vector-tile pipeline stages: grid, fetch/decode, merge."""

from playground.tiles.decoder import RawTile, decode_tile, flatten_features, layer_features
from playground.tiles.fetcher import DEFAULT_PROPERTIES, FetchPolicy, TileFetcher
from playground.tiles.grid import TileCoordinate, tile_grid, tiles_for_projection, zoom_for_scale
from playground.tiles.merge import merge_features

__all__ = [
    "RawTile",
    "decode_tile",
    "flatten_features",
    "layer_features",
    "DEFAULT_PROPERTIES",
    "FetchPolicy",
    "TileFetcher",
    "TileCoordinate",
    "tile_grid",
    "tiles_for_projection",
    "zoom_for_scale",
    "merge_features",
]
