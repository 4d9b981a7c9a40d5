"""tile-playground - main FastAPI application.

Both pipelines get an explicit session at startup (a ``MapSession`` and a
``PhysicsWorld``) stored on ``app.state`` and torn down at shutdown.
"""

import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from loguru import logger

from app.config import Settings, settings
from app.routers import map_router, physics_router
from playground.geo.projection import MercatorProjection
from playground.physics.world import PhysicsWorld
from playground.pipeline import MapSession
from playground.tiles.fetcher import TileFetcher


# ---------------------------------------------------------------------------
# Session factories
# ---------------------------------------------------------------------------

def configure_logging(cfg: Settings = settings) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.log_level.upper())


def create_map_session(
    cfg: Settings = settings,
    client: httpx.AsyncClient | None = None,
) -> MapSession:
    """Build the map pipeline session from settings."""
    fetcher = TileFetcher(
        cfg.tile_server_url,
        cfg.tile_layer,
        properties=cfg.tile_property_list,
        policy=cfg.tile_fetch_policy,
        retries=cfg.tile_fetch_retries,
        timeout=cfg.tile_fetch_timeout,
        client=client,
    )
    projection = MercatorProjection.for_viewport(
        (cfg.map_center_lng, cfg.map_center_lat),
        cfg.map_scale_exponent,
        cfg.viewport_width,
        cfg.viewport_height,
    )
    return MapSession(
        fetcher,
        projection,
        cfg.viewport_width,
        cfg.viewport_height,
        pixel_ratio=cfg.device_pixel_ratio,
        rewind=cfg.rewind_after_union,
    )


def create_physics_world(cfg: Settings = settings) -> PhysicsWorld:
    """Build the shape-drop world (walls included) from settings."""
    return PhysicsWorld(
        width=cfg.viewport_width,
        height=cfg.viewport_height,
        border_thickness=cfg.physics_border_thickness,
        density=cfg.physics_density,
        iterations=cfg.physics_iterations,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    configure_logging()
    logger.info(f"{settings.app_name} starting")
    logger.info(
        f"Viewport: {settings.viewport_width}x{settings.viewport_height} "
        f"@{settings.device_pixel_ratio}x, center "
        f"{settings.map_center_lng:.4f}, {settings.map_center_lat:.4f}"
    )

    app.state.map_session = create_map_session()
    app.state.physics_world = create_physics_world()
    logger.info(f"Tile source: {settings.tile_server_url}/{settings.tile_layer} "
                f"(policy={settings.tile_fetch_policy})")

    yield

    logger.info("Shutting down...")
    await app.state.map_session.aclose()
    app.state.physics_world.close()


app = FastAPI(
    title=settings.app_name,
    description="Vector-tile building union and SVG shape-drop physics",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(map_router)
app.include_router(physics_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": "0.1.0",
        "system": settings.app_name,
    }


def main() -> None:
    import uvicorn
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
