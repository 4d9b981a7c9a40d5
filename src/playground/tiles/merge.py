"""Merge building fragments that share an id across tile boundaries.

A building crossing a tile edge arrives as one fragment per tile, all
carrying the same ``id``.  Merging is a single linear pass that only ever
compares a feature to the *last* accumulated entry, so the features must
be sorted by id first: the sort is what makes same-id fragments adjacent.

After every union the geometry is rewound (exterior rings clockwise),
because the union does not guarantee a winding order and the path
renderer uses it to tell inside from outside.  Without the rewind merged
buildings render inside-out.
"""

from __future__ import annotations

import time
from typing import Sequence

from loguru import logger
from shapely.errors import GEOSException
from shapely.validation import explain_validity

from playground.errors import GeometryError
from playground.geo.geometry import (
    Feature,
    Geometry,
    MergedFeature,
    geometry_from_shapely,
    rewind as rewind_geometry,
)


def _union(a: Geometry, b: Geometry) -> Geometry:
    """Polygonal union of two geometries."""
    sa, sb = a.to_shapely(), b.to_shapely()
    for g in (sa, sb):
        if not g.is_valid:
            raise GeometryError(f"Invalid union input: {explain_validity(g)}")
    try:
        return geometry_from_shapely(sa.union(sb))
    except GEOSException as e:
        raise GeometryError(f"Union failed: {e}") from e


def merge_features(
    features: Sequence[Feature],
    rewind: bool = True,
    presort: bool = True,
) -> list[MergedFeature]:
    """Union every group of same-id features into one merged feature.

    Args:
        features: Flattened features from all tiles.  Not modified.
        rewind: Rewind ring winding after each union.  Turning it off
            reproduces the inside-out rendering of unrewound unions.
        presort: Sort by id before the linear pass.  Only meaningful to
            turn off when the input is already grouped; otherwise
            non-adjacent fragments stay separate.

    Returns:
        Merged features in id order (input order when ``presort`` is off).
        Groups of one are passed through with their geometry untouched.

    Raises:
        GeometryError: If any union input is invalid.  Nothing is returned
            for the other groups.
    """
    start = time.perf_counter()
    ordered = sorted(features, key=lambda f: f.id) if presort else list(features)

    # Accumulator entries: [id, geometry, properties, fragment count]
    acc: list[list] = []
    for feature in ordered:
        if acc and acc[-1][0] == feature.id:
            last = acc[-1]
            unioned = _union(last[1], feature.geometry)
            last[1] = rewind_geometry(unioned) if rewind else unioned
            last[3] += 1
        else:
            acc.append([feature.id, feature.geometry, feature.properties, 1])

    merged = [
        MergedFeature(id=fid, geometry=geom, properties=dict(props), fragments=count)
        for fid, geom, props, count in acc
    ]
    logger.info(
        f"unionize: {len(features)} fragments -> {len(merged)} features "
        f"in {time.perf_counter() - start:.3f}s"
    )
    return merged
