"""Particle World server: one bounded gravity world stepped by the engine and
served over HTTP (control routes, snapshots and a live canvas at /).

Run with ``python simulator.py`` or ``uvicorn simulator:app``. Settings come
from config.json next to this file when it exists.
"""

from config import load_config
from internal.logging import get_logger
from utils.crash import configure as configure_crash, install_crash_handler

config = load_config()
configure_crash(config.logging.crash_file)
install_crash_handler()

from ui.app import create_app

app = create_app(config)


def announce(config, log=None):
    """Log where the server listens and the shape of the world it runs."""
    world = config.simulation
    (log or get_logger(component="main")).info(
        "Serving particle world", host=config.server.host, port=config.server.port,
        width=world.world_width, height=world.world_height,
        capacity=world.max_particles_count, gravity=world.gravity)


if __name__ == "__main__":
    import uvicorn

    announce(config)
    uvicorn.run("simulator:app", host=config.server.host, port=config.server.port, reload=True)
