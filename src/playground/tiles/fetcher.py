"""Concurrent vector-tile retrieval.

All tiles of one pipeline run are requested at once and joined with
``asyncio.gather``.  What happens when one of them fails depends on the
fetch policy:

  all_or_nothing  the first failure aborts the batch (default)
  retry           each tile is retried up to ``retries`` extra times,
                  then the batch aborts
  skip            failed tiles are logged and left out of the result

In-flight requests are never cancelled; a request timeout is the only
bound on how long a run can take.
"""

from __future__ import annotations

import asyncio
from enum import Enum

import httpx
from loguru import logger

from playground.errors import DecodeError, FetchError
from playground.tiles.decoder import RawTile, decode_tile
from playground.tiles.grid import TileCoordinate

_USER_AGENT = "tile-playground/0.1.0"

DEFAULT_PROPERTIES = ("id", "id_source", "type", "type_source", "height", "age")


class FetchPolicy(str, Enum):
    ALL_OR_NOTHING = "all_or_nothing"
    RETRY = "retry"
    SKIP = "skip"


class TileFetcher:
    """Fetches and decodes vector tiles from a ``{z}/{x}/{y}.pbf`` server.

    Usage:
        fetcher = TileFetcher("https://tiles.example.com", "buildings")
        tiles = await fetcher.fetch_all(coordinates)
        await fetcher.aclose()
    """

    def __init__(
        self,
        tile_server: str,
        layer: str,
        properties: tuple[str, ...] | list[str] = DEFAULT_PROPERTIES,
        policy: FetchPolicy | str = FetchPolicy.ALL_OR_NOTHING,
        retries: int = 2,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.tile_server = tile_server.rstrip("/")
        self.layer = layer
        self.properties = tuple(properties)
        self.policy = FetchPolicy(policy)
        self.retries = max(0, retries)
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def tile_url(self, coordinate: TileCoordinate) -> str:
        """Resource address of one tile, restricted to the declared properties."""
        return (
            f"{self.tile_server}/{self.layer}/{coordinate.z}/{coordinate.x}/{coordinate.y}.pbf"
            f"?properties={','.join(self.properties)}"
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, headers={"User-Agent": _USER_AGENT},
            )
        return self._client

    async def fetch(self, coordinate: TileCoordinate) -> bytes:
        """Retrieve the raw payload of one tile.

        Raises:
            FetchError: On network failure or a non-success status.
        """
        url = self.tile_url(coordinate)
        try:
            resp = await self._get_client().get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Tile {coordinate}: HTTP {e.response.status_code}",
                url=url, status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Tile {coordinate}: {e}", url=url) from e
        return resp.content

    async def fetch_tile(self, coordinate: TileCoordinate) -> RawTile:
        """Fetch and decode one tile, retrying fetches under the retry policy."""
        attempts = 1 + (self.retries if self.policy is FetchPolicy.RETRY else 0)
        for attempt in range(1, attempts + 1):
            try:
                payload = await self.fetch(coordinate)
                break
            except FetchError as e:
                logger.warning(f"Fetch attempt {attempt}/{attempts} failed: {e}")
                if attempt == attempts:
                    raise
        return decode_tile(coordinate, payload)

    async def _fetch_isolated(self, coordinate: TileCoordinate) -> RawTile | None:
        try:
            return await self.fetch_tile(coordinate)
        except (FetchError, DecodeError) as e:
            logger.warning(f"Skipping tile {coordinate}: {e}")
            return None

    async def fetch_all(self, coordinates: list[TileCoordinate]) -> list[RawTile]:
        """Fetch every tile concurrently and wait for all of them.

        Returns:
            Decoded tiles in the order of ``coordinates`` (minus skipped
            tiles under the skip policy).

        Raises:
            FetchError / DecodeError: Unless the skip policy is active.
        """
        if self.policy is FetchPolicy.SKIP:
            results = await asyncio.gather(*(self._fetch_isolated(c) for c in coordinates))
            return [t for t in results if t is not None]
        return list(await asyncio.gather(*(self.fetch_tile(c) for c in coordinates)))

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
