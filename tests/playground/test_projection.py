"""Tests for the Mercator projection and Web-Mercator conversion."""

import math

import pytest

from playground.geo.projection import EARTH_RADIUS_M, MercatorProjection, to_web_mercator

VIENNA = (16.3731, 48.2083)


@pytest.fixture
def projection():
    return MercatorProjection.for_viewport(VIENNA, 26, 1280, 800)


@pytest.mark.unit
class TestMercatorProjection:

    def test_center_maps_to_translate(self, projection):
        x, y = projection.project(*VIENNA)
        assert x == pytest.approx(640.0)
        assert y == pytest.approx(400.0)

    def test_scale(self, projection):
        assert projection.scale == pytest.approx(2 ** 26 / (2 * math.pi))
        assert projection.world_scale == pytest.approx(2 ** 26)

    def test_invert_round_trip(self, projection):
        lng, lat = projection.invert(*projection.project(16.38, 48.21))
        assert lng == pytest.approx(16.38)
        assert lat == pytest.approx(48.21)

    def test_y_grows_south(self, projection):
        _, y_north = projection.project(16.3731, 48.21)
        _, y_south = projection.project(16.3731, 48.20)
        assert y_north < y_south

    def test_origin_is_projected_null_island(self, projection):
        assert projection.origin == projection.project(0.0, 0.0)

    def test_world_origin_offset(self):
        """With center (0,0) the origin sits at the translate point."""
        p = MercatorProjection.for_viewport((0.0, 0.0), 9, 256, 256)
        assert p.origin == pytest.approx((128.0, 128.0))


@pytest.mark.unit
class TestWebMercator:

    def test_null_island(self):
        assert to_web_mercator(0.0, 0.0) == pytest.approx((0.0, 0.0), abs=1e-6)

    def test_antimeridian(self):
        x, _ = to_web_mercator(180.0, 0.0)
        assert x == pytest.approx(math.pi * EARTH_RADIUS_M)

    def test_north_is_positive(self):
        _, y = to_web_mercator(16.37, 48.2)
        assert y > 0
