import asyncio
import random
from config import load_config
from internal.logging import get_logger
from simulation.state import StateSnapshot
from simulation.world import World
from utils.timestamp import monotonic_s

class EngineState:
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"

class SimulationEngine:
    """Host loop: owns one World, feeds it real elapsed time and publishes snapshots."""

    def __init__(self, bus, config=None, rng=None):
        self.bus = bus
        self.config = config or load_config().simulation
        self._lock = asyncio.Lock()
        self._log = get_logger(component="engine")
        self.world = World(self.config.world_width, self.config.world_height,
                           max_life_s=self.config.max_life_s,
                           max_particles_count=self.config.max_particles_count,
                           max_speed_cms=self.config.max_speed_cms,
                           gravity=self.config.gravity,
                           rng=rng or random.Random(self.config.seed),
                           debug_particles=self.config.debug_particles,
                           truncate_bounce=self.config.truncate_bounce)
        self.tick = 0
        self.sim_time = 0.0
        self._state = EngineState.STOPPED
        self._task = None
        self._stop = asyncio.Event()
        self._last_publish_tick = -1
        self._last_step_time = None
        self.reset()

    @property
    def paused(self):
        return self._state == EngineState.PAUSED

    @property
    def state(self):
        return self._state

    @property
    def particles(self):
        return self.world.snapshot()

    def reset(self):
        self.tick = 0
        self.sim_time = 0.0
        self._last_publish_tick = -1
        self.world.clear()
        if self.config.particle_count:
            self._spawn_at_center(self.config.particle_count)

    def _spawn_at_center(self, count):
        center = (self.world.width / 2.0, self.world.height / 2.0)
        return self.world.spawn(count, [center] * count)

    async def spawn(self, count=None, x=None, y=None):
        """Spawn a batch at one location (default: spawn_batch at the world centre)."""
        count = self.config.spawn_batch if count is None else count
        async with self._lock:
            if x is None and y is None:
                ok = self._spawn_at_center(count)
            else:
                location = (self.world.width / 2.0 if x is None else x,
                            self.world.height / 2.0 if y is None else y)
                ok = self.world.spawn(count, [location] * count)
            if ok:
                self._log.info("spawned", count=count, total=len(self.world))
            else:
                self._log.warn("spawn rejected", count=count, free=self.world.free_slots)
            return ok

    async def resize(self, width, height):
        async with self._lock:
            self.world.update_bounds(width, height)
            self._log.info("bounds updated", width=width, height=height)

    async def start(self):
        if self._task:
            return
        self._stop.clear()
        self._state = EngineState.RUNNING
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None
        self._state = EngineState.STOPPED
        await self.bus.publish({"kind": "engine_stopped", "tick": self.tick}, topic="event")

    async def pause(self):
        async with self._lock:
            self._state = EngineState.PAUSED
            self._log.info("engine paused", tick=self.tick)

    async def resume(self):
        async with self._lock:
            self._state = EngineState.RUNNING
            self._log.info("engine resumed", tick=self.tick)

    async def get_snapshot(self):
        async with self._lock:
            return self._snapshot()

    def _snapshot(self):
        return StateSnapshot(self.tick, self.sim_time, list(self.world.snapshot()),
                             width=self.world.width, height=self.world.height)

    def step(self, elapsed):
        """Advance the world once. Caller holds the lock."""
        self.world.update(elapsed)
        self.tick += 1
        self.sim_time += elapsed

    async def _tick(self):
        """One pass of the loop: measure real time, advance if running, snapshot."""
        async with self._lock:
            now = monotonic_s()
            elapsed, self._last_step_time = now - self._last_step_time, now
            # Paused time is consumed, not replayed on resume
            if self._state == EngineState.RUNNING:
                self.step(elapsed)
            return self._snapshot()

    async def _sleep_until(self, deadline):
        """Wait for the next tick deadline. Returns True if stop was requested meanwhile."""
        remaining = deadline - monotonic_s()
        if remaining <= 0:
            await asyncio.sleep(0)
            return self._stop.is_set()
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=remaining)
        except asyncio.TimeoutError:
            return False
        return True

    async def _loop(self):
        interval = self.config.tick_interval
        self._last_step_time = deadline = monotonic_s()
        self._log.info("engine start", tick_interval=interval)

        while not await self._sleep_until(deadline):
            deadline += interval
            try:
                snapshot = await self._tick()
            except Exception as exc:
                self._log.error("tick fail", error=exc, tick=self.tick)
                continue
            # Paused ticks produce identical snapshots; publish each tick once
            if snapshot.tick != self._last_publish_tick:
                await self.bus.publish(snapshot, topic="state")
                self._last_publish_tick = snapshot.tick

        self._log.info("engine stop", tick=self.tick)
