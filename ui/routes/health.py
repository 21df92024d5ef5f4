"""Unauthenticated liveness and health routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.health import Status
from utils.timestamp import format_timestamp

router = APIRouter(prefix="/api/v1", tags=["health"])

# These will be set by app.py
_engine = None
_checker = None


def init(engine, checker):
    global _engine, _checker
    _engine = engine
    _checker = checker


@router.get("/health")
async def health():
    """Aggregated component health; 503 when a critical probe fails."""
    report = await _checker.check()
    return JSONResponse(content=report.to_dict(), status_code=503 if report.status == Status.FAIL else 200)


@router.get("/heartbeat")
async def heartbeat():
    """Cheap poll target: tick, simulated time and particle count."""
    snapshot = await _engine.get_snapshot()
    return {
        "status": "ok",
        "timestamp": format_timestamp(),
        "tick": snapshot.tick,
        "sim_time_s": snapshot.sim_time_s,
        "particles": len(snapshot.particles),
        "engine_state": _engine.state,
    }
