"""Output stages: SVG markup and triangulated raster fills."""

from playground.render.raster import DeviceTransform, render_triangles_png
from playground.render.svg import path_data, render_svg
from playground.render.triangulate import (
    Triangulation,
    flatten_rings,
    triangulate_feature,
    triangulate_rings,
)

__all__ = [
    "DeviceTransform",
    "render_triangles_png",
    "path_data",
    "render_svg",
    "Triangulation",
    "flatten_rings",
    "triangulate_feature",
    "triangulate_rings",
]
