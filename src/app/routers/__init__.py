"""API routers for tile-playground."""

from app.routers.map import router as map_router
from app.routers.physics import router as physics_router

__all__ = ["map_router", "physics_router"]
