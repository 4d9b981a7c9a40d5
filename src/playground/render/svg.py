"""SVG markup for merged features.

One ``<path>`` per feature, its id as element id, projected through a
Mercator projection into viewport pixels.
"""

from __future__ import annotations

from typing import Iterable

import svgwrite

from playground.geo.geometry import Geometry, MergedFeature, iter_polygons
from playground.geo.projection import MercatorProjection

FEATURE_FILL = "rgba(255,0,0,0.05)"
FEATURE_STROKE = "#000"
FEATURE_STROKE_WIDTH = 0.5


def _fmt(v: float) -> str:
    return f"{v:.2f}".rstrip("0").rstrip(".")


def path_data(geometry: Geometry, projection: MercatorProjection) -> str:
    """Path ``d`` string: one ``M…L…Z`` subpath per ring."""
    parts: list[str] = []
    for poly in iter_polygons(geometry):
        for ring in poly.rings:
            pts = list(ring)
            if len(pts) > 1 and pts[0] == pts[-1]:
                pts.pop()
            if not pts:
                continue
            projected = [projection.project(x, y) for x, y in pts]
            head, rest = projected[0], projected[1:]
            parts.append(
                f"M{_fmt(head[0])},{_fmt(head[1])}"
                + "".join(f"L{_fmt(x)},{_fmt(y)}" for x, y in rest)
                + "Z"
            )
    return "".join(parts)


def render_svg(
    features: Iterable[MergedFeature],
    projection: MercatorProjection,
    width: int,
    height: int,
) -> str:
    """Render features into a standalone SVG document string."""
    dwg = svgwrite.Drawing(viewBox=f"0 0 {width} {height}", debug=False)
    for feature in features:
        dwg.add(dwg.path(
            d=path_data(feature.geometry, projection),
            id=feature.id,
            fill=FEATURE_FILL,
            stroke=FEATURE_STROKE,
            stroke_width=FEATURE_STROKE_WIDTH,
        ))
    return dwg.tostring()
