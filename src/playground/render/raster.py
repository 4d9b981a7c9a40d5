"""Raster output of triangulated features.

Triangles live in Web-Mercator meters; ``DeviceTransform`` maps them into
viewport pixels from the Mercator extent of the viewport corners.  The
image is supersampled by the device pixel ratio when it exceeds 1.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Iterable

from PIL import Image, ImageDraw

from playground.geo.projection import MercatorProjection, to_web_mercator
from playground.render.triangulate import Triangulation

TRIANGLE_STROKE = (255, 0, 0, 51)
TRIANGLE_FILL = (255, 255, 0, 51)


@dataclass(frozen=True)
class DeviceTransform:
    """Affine map from Web-Mercator meters to viewport pixels.

    ``min_y`` is the northing of the top edge and ``ratio_y`` is negative,
    so y grows downward on screen.
    """

    min_x: float
    min_y: float
    ratio_x: float
    ratio_y: float

    @classmethod
    def for_viewport(cls, projection: MercatorProjection, width: float,
                     height: float) -> DeviceTransform:
        min_x, min_y = to_web_mercator(*projection.invert(0.0, 0.0))
        max_x, max_y = to_web_mercator(*projection.invert(width, height))
        return cls(
            min_x=min_x,
            min_y=min_y,
            ratio_x=width / (max_x - min_x),
            ratio_y=height / (max_y - min_y),
        )

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (x - self.min_x) * self.ratio_x, (y - self.min_y) * self.ratio_y


def render_triangles_png(
    triangulations: Iterable[Triangulation],
    transform: DeviceTransform,
    width: int,
    height: int,
    pixel_ratio: float = 1.0,
) -> bytes:
    """Draw every triangle, filled and stroked, and return PNG bytes."""
    scale = pixel_ratio if pixel_ratio > 1 else 1.0
    img = Image.new("RGBA", (int(round(width * scale)), int(round(height * scale))), "white")
    draw = ImageDraw.Draw(img, "RGBA")
    for tri in triangulations:
        for triangle in tri.triangles:
            pts = []
            for x, y in triangle:
                px, py = transform.apply(x, y)
                pts.append((px * scale, py * scale))
            draw.polygon(pts, fill=TRIANGLE_FILL, outline=TRIANGLE_STROKE)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
