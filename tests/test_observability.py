"""Tests for structured logging and health checks."""

import io
import json

import pytest
from core.health import (
    HealthChecker,
    CheckResult,
    Status,
    create_bus_check,
    create_engine_check,
    create_logger_check,
    create_world_check,
)
from internal.logging import AsyncFileLogger, LogLevel, StructuredLogger
from simulation.world import World


class TestStructuredLogger:

    def test_emits_json_line(self):
        stream = io.StringIO()
        logger = StructuredLogger(LogLevel.DEBUG, stream=stream)
        logger.info("spawned", count=100)
        record = json.loads(stream.getvalue())
        assert record["level"] == "INFO"
        assert record["msg"] == "spawned"
        assert record["count"] == 100

    def test_level_filter(self):
        stream = io.StringIO()
        logger = StructuredLogger(LogLevel.WARN, stream=stream)
        logger.info("quiet")
        logger.warn("loud", error=ValueError("x"))
        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["err"] == "x"

    def test_bind_adds_fields(self):
        stream = io.StringIO()
        logger = StructuredLogger(LogLevel.DEBUG, stream=stream).bind(component="world")
        logger.debug("spawn rejected", reason="capacity")
        record = json.loads(stream.getvalue())
        assert record["component"] == "world"
        assert record["reason"] == "capacity"

    def test_world_logs_rejection(self):
        """World reports malformed spawns through the shared logger."""
        stream = io.StringIO()
        StructuredLogger.configure(LogLevel.DEBUG, stream=stream)
        try:
            world = World(100, 60)
            world.spawn(3, [(1, 1)])
        finally:
            StructuredLogger.configure(LogLevel.INFO)
        record = json.loads(stream.getvalue().splitlines()[-1])
        assert record["component"] == "world"
        assert record["reason"] == "missing_locations"

    @pytest.mark.parametrize("name,level", [("debug", LogLevel.DEBUG), ("WARN", LogLevel.WARN), ("bogus", LogLevel.INFO)])
    def test_parse_level(self, name, level):
        assert LogLevel.parse(name) == level


class TestAsyncFileLogger:

    @pytest.mark.asyncio
    async def test_writes_queued_records(self, tmp_path):
        path = tmp_path / "logs" / "particles.log"
        file_logger = AsyncFileLogger(str(path), queue_size=10)
        await file_logger.start()
        assert file_logger.try_log("event", {"kind": "spawned"})
        await file_logger.stop()

        lines = path.read_text().splitlines()
        assert json.loads(lines[0])["data"] == {"kind": "spawned"}
        assert file_logger.get_stats()["written"] == 1

    @pytest.mark.asyncio
    async def test_full_queue_drops(self, tmp_path):
        file_logger = AsyncFileLogger(str(tmp_path / "x.log"), queue_size=1)
        assert file_logger.try_log("state", {}) is True
        assert file_logger.try_log("state", {}) is False
        assert file_logger.get_stats()["dropped"] == 1


class FakeEngine:
    def __init__(self, state, tick=0):
        self.state = state
        self.tick = tick

    async def get_snapshot(self):
        return type("Snap", (), {"tick": self.tick})()


class TestHealth:

    @pytest.mark.asyncio
    async def test_world_check_degrades_near_capacity(self):
        world = World(100, 60, max_particles_count=10, seed=1)
        check = create_world_check(world)
        assert (await check()).status == Status.OK
        world.spawn(9, [(1, 1)] * 9)
        result = await check()
        assert result.status == Status.DEGRADED
        assert result.msg == "9/10"

    @pytest.mark.asyncio
    async def test_engine_check_states(self):
        assert (await create_engine_check(FakeEngine("stopped"))()).status == Status.DEGRADED
        assert (await create_engine_check(FakeEngine("paused", 3))()).msg == "paused@3"
        assert (await create_engine_check(FakeEngine("running", 4))()).status == Status.OK

    @pytest.mark.asyncio
    async def test_bus_check_flags_drops(self, bus):
        sub = await bus.subscribe("slow", max_queue_size=1)
        for _ in range(5):
            await bus.publish({"kind": "tick"})
        assert sub.dropped == 4
        assert (await create_bus_check(bus)()).status == Status.DEGRADED

    @pytest.mark.asyncio
    async def test_logger_check(self, tmp_path):
        file_logger = AsyncFileLogger(str(tmp_path / "x.log"), queue_size=10)
        assert (await create_logger_check(file_logger)()).status == Status.OK

    @pytest.mark.asyncio
    async def test_checker_aggregates(self):
        checker = HealthChecker(ttl=0)

        async def ok():
            return CheckResult("a", Status.OK)

        async def broken():
            raise RuntimeError("boom")

        checker.register("a", ok)
        checker.register("b", broken, critical=False)
        report = await checker.check()
        assert report.status == Status.DEGRADED
        assert report.to_dict()["checks"][1]["msg"] == "boom"

        checker.register("c", broken, critical=True)
        assert (await checker.check()).status == Status.FAIL
