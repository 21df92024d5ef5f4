"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from communication.bus import EventBus
from config import load_config
from core.health import (
    HealthChecker,
    check_event_loop,
    create_bus_check,
    create_engine_check,
    create_logger_check,
    create_world_check,
)
from internal.logging import get_logger, LogLevel, StructuredLogger, AsyncFileLogger
from utils.crash import create_async_handler
from simulation.engine import SimulationEngine
from simulation.state import StateSnapshot
from ui.routes import control, api, health, stream

VERSION = "1.0.0"


async def pump_to_file(subscriber, file_logger):
    """Copy everything the bus hands the subscriber into the file log."""
    while True:
        item = await subscriber.queue.get()
        if isinstance(item, StateSnapshot):
            file_logger.try_log("state", item.to_dict())
        else:
            file_logger.try_log("event", item)


def register_checks(checker, bus, engine, file_logger):
    checker.register("event_loop", check_event_loop, critical=True)
    checker.register("event_bus", create_bus_check(bus), critical=True)
    checker.register("simulation_engine", create_engine_check(engine), critical=True)
    checker.register("world", create_world_check(engine.world), critical=False)
    checker.register("async_logger", create_logger_check(file_logger), critical=False)


def create_app(config=None):
    """Build the app around one engine; the engine runs only inside the lifespan."""
    config = config or load_config()

    StructuredLogger.configure(min_level=LogLevel.parse(config.logging.level))
    log = get_logger(component="app")

    bus = EventBus(queue_size=100)
    engine = SimulationEngine(bus=bus, config=config.simulation)
    file_logger = AsyncFileLogger(file_path=config.logging.file)
    checker = HealthChecker()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Application starting", version=VERSION)
        asyncio.get_running_loop().set_exception_handler(create_async_handler(log))

        await file_logger.start()
        subscriber = await bus.subscribe("logger", max_queue_size=200)
        pump = asyncio.create_task(pump_to_file(subscriber, file_logger))
        register_checks(checker, bus, engine, file_logger)
        await engine.start()
        log.info("Application started", width=engine.world.width, height=engine.world.height,
                 capacity=engine.world.max_particles_count)
        try:
            yield
        finally:
            log.info("Application shutting down")
            await engine.stop()
            pump.cancel()
            try:
                await pump
            except asyncio.CancelledError:
                pass
            await file_logger.stop()
            log.info("Application shutdown complete")

    app = FastAPI(
        title="Particle World",
        version=VERSION,
        description="bounded 2-D particle simulation with gravity, collisions and lifespan",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.bus = bus

    app.mount("/static", StaticFiles(directory=stream.STATIC_DIR), name="static")

    control.init(engine, bus)
    api.init(engine, bus, file_logger)
    health.init(engine, checker)
    stream.init(engine, bus)

    for module in (control, api, health, stream):
        app.include_router(module.router)

    return app
