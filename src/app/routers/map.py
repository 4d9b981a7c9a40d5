"""Map endpoints - tile grid, merged features, SVG and triangle raster.

Every request runs the whole pipeline (grid -> fetch -> merge -> render)
against the session stored on ``app.state.map_session``; no results are
cached between requests.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response
from loguru import logger
from pydantic import BaseModel

from playground.errors import DecodeError, FetchError, GeometryError
from playground.pipeline import MapResult, MapSession

router = APIRouter(prefix="/api/map", tags=["map"])


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class TileInfo(BaseModel):
    """One tile of the viewport grid."""
    x: int
    y: int
    z: int
    url: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _session(request: Request) -> MapSession:
    session = getattr(request.app.state, "map_session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Map session not initialized")
    return session


async def _run(session: MapSession, rewind: bool | None) -> MapResult:
    try:
        return await session.run(rewind=rewind)
    except (FetchError, DecodeError) as e:
        logger.error(f"Tile pipeline aborted: {e}")
        raise HTTPException(status_code=502, detail=f"Tile source failed: {e}")
    except GeometryError as e:
        logger.error(f"Merge aborted: {e}")
        raise HTTPException(status_code=422, detail=f"Invalid geometry: {e}")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/tiles", response_model=list[TileInfo])
async def list_tiles(request: Request):
    """Tiles covering the configured viewport, row by row."""
    session = _session(request)
    return [
        TileInfo(x=c.x, y=c.y, z=c.z, url=session.fetcher.tile_url(c))
        for c in session.tiles()
    ]


@router.get("/features")
async def merged_features(
    request: Request,
    rewind: bool | None = Query(default=None, description="Override winding correction"),
):
    """Merged buildings as a GeoJSON FeatureCollection."""
    result = await _run(_session(request), rewind)
    return result.to_geojson()


@router.get("/svg")
async def map_svg(
    request: Request,
    rewind: bool | None = Query(default=None, description="Override winding correction"),
):
    """Merged buildings as an SVG document, one path per building."""
    session = _session(request)
    result = await _run(session, rewind)
    return Response(content=session.render_svg(result), media_type="image/svg+xml")


@router.get("/triangles.png")
async def map_triangles(request: Request):
    """Ear-clipped triangulation of the merged buildings as a PNG."""
    session = _session(request)
    result = await _run(session, None)
    try:
        png = session.render_png(result)
    except GeometryError as e:
        raise HTTPException(status_code=422, detail=f"Triangulation failed: {e}")
    return Response(content=png, media_type="image/png")
