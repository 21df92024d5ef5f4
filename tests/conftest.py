"""Pytest fixtures for all tests."""

import random

import pytest
from httpx import AsyncClient, ASGITransport

from ui.app import create_app
from communication.bus import EventBus
from simulation.engine import SimulationEngine
from simulation.world import World
from simulation.entities import Particle, Position, Vector2
from config import Config, LoggingConfig, SimulationConfig


@pytest.fixture
def world():
    """Create a test world: 100x60, earth gravity, seeded."""
    return World(width=100, height=60, max_life_s=10.0, max_particles_count=50,
                 max_speed_cms=700.0, gravity=980.0, rng=random.Random(42))


@pytest.fixture
def place():
    """Put a hand-built particle into a world and return it."""
    def _place(world, x, y, vx, vy, life=5.0, id="t0"):
        particle = Particle(id, Vector2(vx, vy), life, Position(x, y))
        world._particles.append(particle)
        return particle
    return _place


@pytest.fixture
def sim_config():
    """Create test simulation config."""
    return SimulationConfig(
        tick_interval=0.05,
        world_width=100,
        world_height=60,
        max_particles_count=50,
        particle_count=5,
        spawn_batch=10,
        seed=7,
    )


@pytest.fixture
async def bus():
    """Create test event bus."""
    return EventBus(queue_size=10)


@pytest.fixture
async def engine(bus, sim_config):
    """Create test simulation engine."""
    eng = SimulationEngine(bus=bus, config=sim_config)
    yield eng
    if eng._task:
        await eng.stop()


@pytest.fixture
def app_config(sim_config, tmp_path):
    return Config(simulation=sim_config,
                  logging=LoggingConfig(level="ERROR", file=str(tmp_path / "sim.log"),
                                        crash_file=str(tmp_path / "crash.log")))


@pytest.fixture
def app(app_config, monkeypatch):
    """Create test FastAPI app with known credentials."""
    monkeypatch.setenv("API_USERNAME", "admin")
    monkeypatch.setenv("API_PASSWORD", "secret")
    return create_app(app_config)


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
