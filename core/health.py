"""Component health: async probes aggregated into one cached report."""

import asyncio
import time
from enum import Enum
from utils.timestamp import format_timestamp


class Status(Enum):
    OK = "healthy"
    DEGRADED = "degraded"
    FAIL = "unhealthy"


class CheckResult:
    __slots__ = ("name", "status", "msg")

    def __init__(self, name, status, msg=""):
        self.name, self.status, self.msg = name, status, msg

    def to_dict(self):
        return {"name": self.name, "status": self.status.value, "msg": self.msg}


class HealthReport:
    __slots__ = ("status", "checks", "uptime", "timestamp")

    def __init__(self, status, checks, uptime=0):
        self.status = status
        self.checks = checks
        self.uptime = uptime
        self.timestamp = format_timestamp()

    def to_dict(self):
        return {"status": self.status.value, "timestamp": self.timestamp, "uptime": round(self.uptime, 1),
                "checks": [check.to_dict() for check in self.checks]}


def overall_status(results):
    """FAIL if a critical probe failed, DEGRADED if anything is not OK."""
    status = Status.OK
    for result, critical in results:
        if result.status == Status.FAIL and critical:
            return Status.FAIL
        if result.status != Status.OK:
            status = Status.DEGRADED
    return status


class HealthChecker:
    """Runs the registered probes concurrently; the report is reused for ttl seconds."""

    def __init__(self, ttl=1.0, timeout=5.0):
        self._probes = {}
        self._report = None
        self._report_time = 0.0
        self._ttl = ttl
        self._timeout = timeout
        self._started = time.time()

    def register(self, name, probe, critical=True):
        self._probes[name] = (probe, critical)

    async def _run(self, name, probe):
        try:
            return await asyncio.wait_for(probe(), timeout=self._timeout)
        except asyncio.TimeoutError:
            return CheckResult(name, Status.FAIL, "timeout")
        except Exception as exc:
            return CheckResult(name, Status.FAIL, str(exc))

    async def check(self):
        now = time.time()
        if self._report is not None and now - self._report_time < self._ttl:
            return self._report

        names = list(self._probes)
        outcomes = await asyncio.gather(*(self._run(name, self._probes[name][0]) for name in names))
        results = [(outcome, self._probes[name][1]) for name, outcome in zip(names, outcomes)]

        self._report = HealthReport(overall_status(results), list(outcomes), now - self._started)
        self._report_time = now
        return self._report


async def check_event_loop():
    await asyncio.sleep(0)
    return CheckResult("loop", Status.OK)


def create_bus_check(bus, drop_ratio=0.1):
    """Degraded when more than drop_ratio of publishes were dropped somewhere."""
    async def check():
        stats = bus.get_stats()
        published = stats["total_published"]
        if published and stats["total_dropped"] / published > drop_ratio:
            return CheckResult("bus", Status.DEGRADED, "drops")
        return CheckResult("bus", Status.OK, f"{stats['subscriber_count']}sub")
    return check


def create_engine_check(engine, stall_after=5.0):
    """Fails when a running engine has not advanced its tick for stall_after seconds."""
    seen = {"tick": None, "at": time.time()}

    async def check():
        tick = (await engine.get_snapshot()).tick
        now = time.time()

        if engine.state == "stopped":
            return CheckResult("engine", Status.DEGRADED, "stopped")
        if engine.state == "running" and tick == seen["tick"] and now - seen["at"] > stall_after:
            return CheckResult("engine", Status.FAIL, f"stuck@{tick}")

        if tick != seen["tick"] or engine.state == "paused":
            seen["tick"], seen["at"] = tick, now
        if engine.state == "paused":
            return CheckResult("engine", Status.OK, f"paused@{tick}")
        return CheckResult("engine", Status.OK, f"t{tick}")
    return check


def create_world_check(world, saturation=0.9):
    """Degraded once the world is close to capacity and spawns start getting rejected."""
    async def check():
        used, capacity = len(world), world.max_particles_count
        status = Status.DEGRADED if capacity and used / capacity >= saturation else Status.OK
        return CheckResult("world", status, f"{used}/{capacity}")
    return check


def create_logger_check(file_logger, backlog=0.9):
    async def check():
        queued, limit = file_logger.queue.qsize(), file_logger.queue.maxsize
        if queued / limit > backlog:
            return CheckResult("log", Status.DEGRADED, f"{queued}/{limit}")
        return CheckResult("log", Status.OK)
    return check
