"""Read-only inspection routes: snapshot, statistics and bus subscribers."""

import time

from fastapi import APIRouter, Depends

from utils.ksuid import ksuid_time
from utils.timestamp import format_timestamp
from ui.auth import verify_basic_auth

router = APIRouter(prefix="/api/v1", tags=["api"], dependencies=[Depends(verify_basic_auth)])

# These will be set by app.py
_engine = None
_bus = None
_file_logger = None


def init(engine, bus, file_logger):
    global _engine, _bus, _file_logger
    _engine, _bus, _file_logger = engine, bus, file_logger


def snapshot_age(snap):
    """Whole seconds since the snapshot id was minted."""
    return max(0, int(time.time()) - ksuid_time(snap.id))


def world_stats(world):
    return {
        "width": world.width,
        "height": world.height,
        "count": len(world),
        "capacity": world.max_particles_count,
        "free_slots": world.free_slots,
        "gravity": world.gravity,
        "max_life_s": world.max_life_s,
        "max_speed_cms": world.max_speed_cms,
    }


@router.get("/snapshot")
async def snapshot():
    """Current particle positions and velocities."""
    return (await _engine.get_snapshot()).to_dict()


@router.get("/stats")
async def stats():
    """Engine, world, bus and file logger counters."""
    snap = await _engine.get_snapshot()
    return {
        "timestamp": format_timestamp(),
        "simulation": {"tick": snap.tick, "sim_time_s": snap.sim_time_s, "entity_count": len(snap.particles),
                       "state": _engine.state, "snapshot_id": snap.id, "snapshot_age_s": snapshot_age(snap)},
        "world": world_stats(_engine.world),
        "bus": _bus.get_stats(),
        "logger": _file_logger.get_stats(),
    }


@router.get("/subscribers")
async def subscribers():
    return await _bus.get_subscriber_info()
