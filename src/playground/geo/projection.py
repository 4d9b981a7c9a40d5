"""Spherical Mercator projection to screen pixels.

Follows the d3-geo ``geoMercator`` parameterisation: a projection is fully
described by its ``center`` (lng, lat), ``scale`` (pixels per radian) and
``translate`` (pixel position of the center).  The tile layout consumes
the world scale (``scale * 2π``, pixels per full world width) and the
pixel position of (0, 0).

Coordinate convention: x grows east, y grows south (screen space).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6378137.0

# Latitude limit of Web-Mercator tiles.
_MAX_LAT = 85.0511287798


def _raw(lng: float, lat: float) -> tuple[float, float]:
    lam = math.radians(lng)
    phi = math.radians(max(min(lat, _MAX_LAT), -_MAX_LAT))
    return lam, math.log(math.tan(math.pi / 4.0 + phi / 2.0))


@dataclass(frozen=True)
class MercatorProjection:
    """Mercator projection from lng/lat degrees to screen pixels."""

    center: tuple[float, float]
    scale: float
    translate: tuple[float, float]

    @classmethod
    def for_viewport(cls, center: tuple[float, float], scale_exponent: float,
                     width: float, height: float) -> MercatorProjection:
        """Center the map in a ``width`` x ``height`` viewport.

        ``scale_exponent`` fixes the world width at ``2**scale_exponent``
        pixels, so the tile zoom is ``scale_exponent - 8``.
        """
        return cls(
            center=center,
            scale=2.0 ** scale_exponent / (2.0 * math.pi),
            translate=(width / 2.0, height / 2.0),
        )

    @property
    def _offset(self) -> tuple[float, float]:
        cx, cy = _raw(*self.center)
        tx, ty = self.translate
        return tx - self.scale * cx, ty + self.scale * cy

    def project(self, lng: float, lat: float) -> tuple[float, float]:
        x, y = _raw(lng, lat)
        dx, dy = self._offset
        return dx + self.scale * x, dy - self.scale * y

    def invert(self, x: float, y: float) -> tuple[float, float]:
        dx, dy = self._offset
        lam = (x - dx) / self.scale
        phi = 2.0 * math.atan(math.exp((dy - y) / self.scale)) - math.pi / 2.0
        return math.degrees(lam), math.degrees(phi)

    @property
    def world_scale(self) -> float:
        """Width of the whole world in pixels."""
        return self.scale * 2.0 * math.pi

    @property
    def origin(self) -> tuple[float, float]:
        """Pixel position of lng=0, lat=0."""
        return self.project(0.0, 0.0)


def to_web_mercator(lng: float, lat: float) -> tuple[float, float]:
    """Convert lng/lat degrees to EPSG:3857 meters (y grows north)."""
    lam, y = _raw(lng, lat)
    return lam * EARTH_RADIUS_M, y * EARTH_RADIUS_M
