"""Simulation control routes."""

import time
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ui.auth import verify_basic_auth

router = APIRouter(prefix="/api/v1/control", tags=["control"])

# These will be set by app.py
_engine = None
_bus = None


class SpawnRequest(BaseModel):
    count: Optional[int] = Field(default=None, ge=0)
    x: Optional[float] = None
    y: Optional[float] = None


class BoundsRequest(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


def init(engine, bus):
    """Initialize with engine and bus references."""
    global _engine, _bus
    _engine = engine
    _bus = bus


@router.post("/pause")
async def pause(username=Depends(verify_basic_auth)):
    """Pause simulation (requires basic auth)."""
    await _engine.pause()
    await _bus.publish({"kind": "paused", "timestamp": time.time()}, topic="event")
    return {"ok": True}


@router.post("/resume")
async def resume(username=Depends(verify_basic_auth)):
    """Resume simulation (requires basic auth)."""
    await _engine.resume()
    await _bus.publish({"kind": "resumed", "timestamp": time.time()}, topic="event")
    return {"ok": True}


@router.post("/reset")
async def reset(username=Depends(verify_basic_auth)):
    """Reset simulation (requires basic auth)."""
    _engine.reset()
    await _bus.publish({"kind": "reset", "timestamp": time.time()}, topic="event")
    return {"ok": True}


@router.post("/spawn")
async def spawn(request: Optional[SpawnRequest] = None, username=Depends(verify_basic_auth)):
    """Spawn a batch of particles at one point. 409 when the world has no room for the batch."""
    request = request or SpawnRequest()
    count = _engine.config.spawn_batch if request.count is None else request.count
    ok = await _engine.spawn(count, request.x, request.y)
    if not ok:
        return JSONResponse(status_code=409, content={
            "ok": False,
            "reason": "capacity",
            "requested": count,
            "free": _engine.world.free_slots,
        })
    await _bus.publish({"kind": "spawned", "count": count, "timestamp": time.time()}, topic="event")
    return {"ok": True, "count": count, "total": len(_engine.world)}


@router.post("/bounds")
async def bounds(request: BoundsRequest, username=Depends(verify_basic_auth)):
    """Resize the world bounds, e.g. after the display area changed."""
    await _engine.resize(request.width, request.height)
    await _bus.publish({"kind": "bounds", "width": request.width, "height": request.height,
                        "timestamp": time.time()}, topic="event")
    return {"ok": True, "width": request.width, "height": request.height}
