"""Tests for settings and the session factories built from them."""

import pytest

from app.config import Settings
from app.main import create_map_session, create_physics_world
from playground.tiles.fetcher import FetchPolicy
from tests.lib.tiles import tile_server


@pytest.mark.unit
class TestSettings:

    def test_defaults(self):
        cfg = Settings(_env_file=None)
        assert cfg.tile_server_url == "https://tiles.eubucco.com"
        assert cfg.tile_layer == "public.data_building"
        assert cfg.map_scale_exponent == 26
        assert cfg.physics_batch_size == 50
        assert cfg.rewind_after_union is True

    def test_property_list(self):
        cfg = Settings(_env_file=None, tile_properties="id, height,,age")
        assert cfg.tile_property_list == ["id", "height", "age"]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TILE_FETCH_POLICY", "skip")
        monkeypatch.setenv("VIEWPORT_WIDTH", "640")
        cfg = Settings(_env_file=None)
        assert cfg.tile_fetch_policy == "skip"
        assert cfg.viewport_width == 640


@pytest.mark.unit
class TestFactories:

    def test_map_session(self):
        cfg = Settings(_env_file=None, tile_fetch_policy="retry", viewport_width=512,
                       viewport_height=256, rewind_after_union=False)
        session = create_map_session(cfg, client=tile_server({}))
        assert session.fetcher.policy is FetchPolicy.RETRY
        assert session.width == 512
        assert session.rewind is False
        assert {t.z for t in session.tiles()} == {18}

    def test_physics_world(self):
        cfg = Settings(_env_file=None, viewport_width=300, viewport_height=200, physics_iterations=4)
        world = create_physics_world(cfg)
        assert (world.width, world.height) == (300, 200)
        assert world.space.iterations == 4
