"""Shape-drop endpoints - load an SVG into the world and step it.

The world lives on ``app.state.physics_world``.  Attraction is applied by
the step endpoint before every tick; there is no background loop.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from app.config import settings
from playground.errors import ParseError
from playground.physics.attraction import simulate
from playground.physics.loader import drop_svg
from playground.physics.world import PhysicsWorld

router = APIRouter(prefix="/api/physics", tags=["physics"])


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class LoadRequest(BaseModel):
    """SVG document whose container group holds the outlines."""
    svg: str
    group_id: str | None = None


class LoadResponse(BaseModel):
    created: int
    rejected: int
    failed: int
    batches: int


class StepRequest(BaseModel):
    ticks: int = Field(default=1, ge=1, le=600)
    dt: float = Field(default=1.0 / 60.0, gt=0.0, le=1.0)


class BodySnapshot(BaseModel):
    """A body's label, pose and outline in canvas coordinates."""
    label: str
    position: list[float]
    angle: float
    area: float
    vertices: list[list[float]]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

def _world(request: Request) -> PhysicsWorld:
    world = getattr(request.app.state, "physics_world", None)
    if world is None:
        raise HTTPException(status_code=503, detail="Physics world not initialized")
    return world


@router.post("/load", response_model=LoadResponse)
async def load(request: Request, body: LoadRequest):
    """Reset the world and drop every outline of the document into it."""
    world = _world(request)
    try:
        report = await drop_svg(
            world,
            body.svg,
            group_id=body.group_id or settings.svg_group_id,
            batch_size=settings.physics_batch_size,
            tolerance=settings.physics_simplify_tolerance,
        )
    except ParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return LoadResponse(
        created=report.created,
        rejected=report.rejected,
        failed=report.failed,
        batches=report.batches,
    )


@router.post("/step", response_model=list[BodySnapshot])
async def step(request: Request, body: StepRequest | None = None):
    """Advance the simulation, attracting toward the largest bodies each tick."""
    world = _world(request)
    body = body or StepRequest()
    simulate(
        world,
        ticks=body.ticks,
        dt=body.dt,
        strength=settings.physics_attraction_strength,
        attractor_count=settings.physics_attractor_count,
    )
    return world.snapshot()


@router.get("/bodies", response_model=list[BodySnapshot])
async def bodies(request: Request):
    """Current pose of every body, borders included."""
    return _world(request).snapshot()


@router.delete("")
async def clear(request: Request):
    """Remove every shape; the borders are re-created."""
    world = _world(request)
    world.reset()
    return {"status": "cleared", "bodies": len(world.bodies)}
