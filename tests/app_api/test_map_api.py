"""Tests for the /api/map endpoints against a mocked tile server."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.routers import map_router
from playground.geo.projection import MercatorProjection
from playground.pipeline import MapSession
from playground.tiles.fetcher import TileFetcher
from tests.lib.tiles import LAYER, encode_tile, tile_server

TILES = {
    (1, 0, 0): encode_tile([("house", (3000, 1000, 4096, 2000))]),
    (1, 1, 0): encode_tile([("house", (0, 1000, 1000, 2000)), ("shed", (100, 100, 200, 200))]),
}


def _make_app(fail=frozenset()) -> FastAPI:
    app = FastAPI()
    app.include_router(map_router)
    fetcher = TileFetcher("https://tiles.test", LAYER, client=tile_server(TILES, fail=fail))
    app.state.map_session = MapSession(
        fetcher, MercatorProjection.for_viewport((0.0, 0.0), 9, 256, 256), 256, 256,
    )
    return app


@pytest.fixture
def client():
    return TestClient(_make_app())


@pytest.mark.unit
class TestTiles:

    def test_grid(self, client):
        resp = client.get("/api/map/tiles")
        assert resp.status_code == 200
        data = resp.json()
        assert [(t["z"], t["x"], t["y"]) for t in data] == [(1, 0, 0), (1, 1, 0), (1, 0, 1), (1, 1, 1)]
        assert data[0]["url"].startswith(f"https://tiles.test/{LAYER}/1/0/0.pbf?properties=")


@pytest.mark.unit
class TestFeatures:

    def test_merged_collection(self, client):
        resp = client.get("/api/map/features")
        assert resp.status_code == 200
        fc = resp.json()
        assert fc["type"] == "FeatureCollection"
        assert [f["id"] for f in fc["features"]] == ["house", "shed"]
        assert fc["features"][0]["geometry"]["type"] == "Polygon"

    def test_rewind_query(self, client):
        resp = client.get("/api/map/features", params={"rewind": "false"})
        assert resp.status_code == 200

    def test_tile_failure_is_bad_gateway(self):
        client = TestClient(_make_app(fail={(1, 1, 1)}))
        resp = client.get("/api/map/features")
        assert resp.status_code == 502
        assert "Tile source failed" in resp.json()["detail"]

    def test_no_session(self):
        app = FastAPI()
        app.include_router(map_router)
        resp = TestClient(app).get("/api/map/features")
        assert resp.status_code == 503


@pytest.mark.unit
class TestRenderEndpoints:

    def test_svg(self, client):
        resp = client.get("/api/map/svg")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("image/svg+xml")
        assert resp.text.count("<path") == 2

    def test_triangles_png(self, client):
        resp = client.get("/api/map/triangles.png")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.content[:4] == b"\x89PNG"
