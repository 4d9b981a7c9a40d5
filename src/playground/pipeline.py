"""MapSession - one tile-union pipeline run from viewport to output.

Stages run strictly forward:

  1. grid    tiles covering the viewport at the nearest zoom
  2. fetch   all tiles requested concurrently, joined before continuing
  3. merge   same-id fragments unioned and rewound
  4. render  SVG markup or triangulated raster

The session owns the projection and the tile fetcher; callers construct
it explicitly and release it with ``aclose()``.  Nothing carries over
between runs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from loguru import logger

from playground.geo.geometry import MergedFeature, feature_collection
from playground.geo.projection import MercatorProjection
from playground.render.raster import DeviceTransform, render_triangles_png
from playground.render.svg import render_svg
from playground.render.triangulate import Triangulation, triangulate_feature
from playground.tiles.decoder import FeatureFilter, flatten_features
from playground.tiles.fetcher import TileFetcher
from playground.tiles.grid import TileCoordinate, tiles_for_projection
from playground.tiles.merge import merge_features


@dataclass
class MapResult:
    """Output of one pipeline run."""

    tiles: list[TileCoordinate]
    fragment_count: int
    features: list[MergedFeature] = field(default_factory=list)

    def to_geojson(self) -> dict:
        return feature_collection(self.features)


class MapSession:
    """Viewport, projection and tile source for the map pipeline."""

    def __init__(
        self,
        fetcher: TileFetcher,
        projection: MercatorProjection,
        width: int,
        height: int,
        pixel_ratio: float = 1.0,
        rewind: bool = True,
        feature_filter: FeatureFilter | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.projection = projection
        self.width = width
        self.height = height
        self.pixel_ratio = pixel_ratio
        self.rewind = rewind
        self.feature_filter = feature_filter

    def tiles(self) -> list[TileCoordinate]:
        return tiles_for_projection(self.projection, self.width, self.height)

    async def run(self, rewind: bool | None = None) -> MapResult:
        """Fetch, decode and merge every tile in the viewport.

        ``rewind`` overrides the session's winding-correction switch for
        this run only.

        Raises:
            FetchError / DecodeError: When any tile fails and the fetcher
                does not isolate failures.  Merging never starts.
            GeometryError: When a union receives invalid geometry.
        """
        coords = self.tiles()
        logger.info(f"tiles: {len(coords)} tiles at z{coords[0].z if coords else '-'}")

        start = time.perf_counter()
        raw_tiles = await self.fetcher.fetch_all(coords)
        logger.info(f"fetch: {len(raw_tiles)} tiles in {time.perf_counter() - start:.3f}s")

        features = flatten_features(raw_tiles, self.fetcher.layer, self.feature_filter)
        del raw_tiles

        merged = merge_features(features, rewind=self.rewind if rewind is None else rewind)
        return MapResult(tiles=coords, fragment_count=len(features), features=merged)

    # -- rendering ---------------------------------------------------------

    def render_svg(self, result: MapResult) -> str:
        start = time.perf_counter()
        svg = render_svg(result.features, self.projection, self.width, self.height)
        logger.info(f"draw svg: {len(result.features)} paths in {time.perf_counter() - start:.3f}s")
        return svg

    def triangulate(self, result: MapResult) -> list[Triangulation]:
        start = time.perf_counter()
        tris = [triangulate_feature(f) for f in result.features]
        logger.info(f"earcut: {sum(len(t.indices) // 3 for t in tris)} triangles "
                    f"in {time.perf_counter() - start:.3f}s")
        return tris

    def render_png(self, result: MapResult) -> bytes:
        transform = DeviceTransform.for_viewport(self.projection, self.width, self.height)
        return render_triangles_png(
            self.triangulate(result), transform, self.width, self.height, self.pixel_ratio,
        )

    async def aclose(self) -> None:
        await self.fetcher.aclose()
