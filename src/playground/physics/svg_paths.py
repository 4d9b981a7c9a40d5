"""SVG path extraction, scaling and simplification for the shape drop.

Only the ``d`` attribute of each ``<path>`` inside the container group is
read; transforms and styles are ignored.  A path contributes the vertices
of its first subpath's straight segments, scaled into canvas space and
simplified with Douglas-Peucker.
"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterable

from loguru import logger
from shapely.geometry import LineString
from svgpathtools import Line, parse_path as _parse_svg_path

from playground.errors import InsufficientDataError, ParseError

Vertex = tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def load_svg_paths(svg_text: str, group_id: str = "PatchCollection_1") -> list[str]:
    """Return the ``d`` attribute of every path inside the group ``group_id``.

    Raises:
        ParseError: If the document is not well-formed XML.
    """
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as e:
        raise ParseError(f"Malformed SVG document: {e}") from e

    group = next((el for el in root.iter() if el.get("id") == group_id), None)
    if group is None:
        logger.warning(f"SVG has no element with id '{group_id}'")
        return []

    return [
        el.get("d", "")
        for el in group.iter()
        if el is not group and el.tag.rsplit("}", 1)[-1] == "path"
    ]


def _parse(path_data: str):
    try:
        return _parse_svg_path(path_data)
    except (ValueError, IndexError) as e:
        raise ParseError(f"Malformed path data {path_data[:40]!r}: {e}") from e


def _line_points(subpath) -> list[Vertex]:
    """Start of the subpath plus the end point of each straight segment."""
    points: list[Vertex] = []
    for seg in subpath:
        if not points:
            points.append((seg.start.real, seg.start.imag))
        if isinstance(seg, Line):
            points.append((seg.end.real, seg.end.imag))
    return points


def bounding_box(paths: Iterable[str], skip_invalid: bool = False) -> BoundingBox:
    """Bounding box of every straight-segment vertex across all paths.

    With ``skip_invalid`` unparsable paths are left out instead of raising.

    Raises:
        ParseError: If a path cannot be parsed and ``skip_invalid`` is off.
        InsufficientDataError: If there are no vertices at all.
    """
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for d in paths:
        try:
            parsed = _parse(d)
        except ParseError:
            if not skip_invalid:
                raise
            continue
        for subpath in parsed.continuous_subpaths():
            for x, y in _line_points(subpath):
                min_x, min_y = min(min_x, x), min(min_y, y)
                max_x, max_y = max(max_x, x), max(max_y, y)
    if min_x == math.inf:
        raise InsufficientDataError("No vertices in any path")
    return BoundingBox(min_x, min_y, max_x, max_y)


def fit_scale(bbox: BoundingBox, width: float, height: float) -> float:
    """Uniform scale that fits ``bbox`` inside a ``width`` x ``height`` canvas."""
    scales = []
    if bbox.width > 0:
        scales.append(width / bbox.width)
    if bbox.height > 0:
        scales.append(height / bbox.height)
    return min(scales) if scales else 1.0


def simplify(vertices: list[Vertex], tolerance: float) -> list[Vertex]:
    """Douglas-Peucker simplification of an open polyline."""
    if len(vertices) < 3 or tolerance <= 0:
        return list(vertices)
    line = LineString(vertices).simplify(tolerance, preserve_topology=False)
    return [(float(x), float(y)) for x, y in line.coords]


def parse_path(
    path_data: str,
    scale: float,
    offset_x: float,
    offset_y: float,
    tolerance: float = 0.3,
) -> list[Vertex]:
    """Vertices of the first subpath, offset, scaled and simplified.

    A closing vertex equal to the first one is dropped.

    Raises:
        ParseError: If the path data is malformed.
    """
    subpaths = _parse(path_data).continuous_subpaths()
    if not subpaths:
        return []
    points = [
        ((x - offset_x) * scale, (y - offset_y) * scale)
        for x, y in _line_points(subpaths[0])
    ]
    vertices = simplify(points, tolerance)
    if len(vertices) > 1 and vertices[0] == vertices[-1]:
        vertices.pop()
    return vertices
