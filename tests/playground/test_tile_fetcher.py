"""Tests for concurrent tile fetching under each failure policy."""

import asyncio

import httpx
import pytest

from playground.errors import DecodeError, FetchError
from playground.tiles.fetcher import DEFAULT_PROPERTIES, FetchPolicy, TileFetcher
from playground.tiles.grid import TileCoordinate
from tests.lib.tiles import LAYER, encode_tile, mock_client, tile_server

SERVER = "https://tiles.test"
COORDS = [TileCoordinate(0, 0, 1), TileCoordinate(1, 0, 1),
          TileCoordinate(0, 1, 1), TileCoordinate(1, 1, 1)]


def _fetcher(client, **kwargs):
    return TileFetcher(SERVER, LAYER, client=client, **kwargs)


@pytest.mark.unit
class TestTileUrl:

    def test_url_template(self):
        fetcher = TileFetcher(SERVER + "/", LAYER, properties=["id", "height"])
        assert fetcher.tile_url(TileCoordinate(3, 5, 7)) == (
            f"{SERVER}/{LAYER}/7/3/5.pbf?properties=id,height"
        )

    def test_default_properties(self):
        url = TileFetcher(SERVER, LAYER).tile_url(TileCoordinate(0, 0, 0))
        assert url.endswith("?properties=" + ",".join(DEFAULT_PROPERTIES))

    def test_policy_from_string(self):
        assert TileFetcher(SERVER, LAYER, policy="skip").policy is FetchPolicy.SKIP


@pytest.mark.unit
class TestFetchAll:

    def test_returns_tiles_in_request_order(self):
        tiles = {(1, 1, 0): encode_tile([("a", (0, 0, 10, 10))])}
        fetcher = _fetcher(tile_server(tiles))
        result = asyncio.run(fetcher.fetch_all(COORDS))
        assert [t.coordinate for t in result] == COORDS
        assert LAYER in result[1].layers

    def test_requests_every_tile(self):
        calls = []
        fetcher = _fetcher(tile_server({}, calls=calls))
        asyncio.run(fetcher.fetch_all(COORDS))
        assert sorted(calls) == sorted((c.z, c.x, c.y) for c in COORDS)

    def test_one_failure_aborts(self):
        fetcher = _fetcher(tile_server({}, fail={(1, 1, 1)}))
        with pytest.raises(FetchError) as exc:
            asyncio.run(fetcher.fetch_all(COORDS))
        assert exc.value.status_code == 500
        assert "1/1/1" in exc.value.url

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        fetcher = _fetcher(mock_client(handler))
        with pytest.raises(FetchError):
            asyncio.run(fetcher.fetch_all(COORDS[:1]))

    def test_undecodable_payload_aborts(self):
        fetcher = _fetcher(mock_client(lambda request: httpx.Response(200, content=b"junk")))
        with pytest.raises(DecodeError):
            asyncio.run(fetcher.fetch_all(COORDS[:1]))

    def test_skip_policy_drops_failed_tiles(self):
        fetcher = _fetcher(tile_server({}, fail={(1, 0, 0)}), policy=FetchPolicy.SKIP)
        result = asyncio.run(fetcher.fetch_all(COORDS))
        assert [t.coordinate for t in result] == COORDS[1:]

    def test_retry_policy_recovers(self):
        attempts = []

        def handler(request):
            attempts.append(request.url.path)
            if len(attempts) == 1:
                return httpx.Response(503)
            return httpx.Response(200, content=encode_tile([]))

        fetcher = _fetcher(mock_client(handler), policy=FetchPolicy.RETRY, retries=2)
        result = asyncio.run(fetcher.fetch_all(COORDS[:1]))
        assert len(result) == 1
        assert len(attempts) == 2

    def test_retry_policy_gives_up(self):
        calls = []
        fetcher = _fetcher(tile_server({}, fail={(1, 0, 0)}, calls=calls),
                           policy=FetchPolicy.RETRY, retries=2)
        with pytest.raises(FetchError):
            asyncio.run(fetcher.fetch_all(COORDS[:1]))
        assert len(calls) == 3

    def test_no_retry_by_default(self):
        calls = []
        fetcher = _fetcher(tile_server({}, fail={(1, 0, 0)}, calls=calls))
        with pytest.raises(FetchError):
            asyncio.run(fetcher.fetch_all(COORDS[:1]))
        assert len(calls) == 1


@pytest.mark.unit
class TestClientOwnership:

    def test_injected_client_left_open(self):
        client = tile_server({})
        fetcher = _fetcher(client)
        asyncio.run(fetcher.aclose())
        assert not client.is_closed

    def test_owned_client_closed(self):
        fetcher = TileFetcher(SERVER, LAYER)

        async def run():
            client = fetcher._get_client()
            await fetcher.aclose()
            return client

        assert asyncio.run(run()).is_closed
