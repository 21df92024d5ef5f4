import json
from pathlib import Path

from core.errors import ConfigError

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"


class SimulationConfig:
    __slots__ = ("tick_interval", "world_width", "world_height", "max_life_s", "max_particles_count",
                 "max_speed_cms", "gravity", "particle_count", "spawn_batch", "seed",
                 "debug_particles", "truncate_bounce")

    def __init__(self, tick_interval=0.05, world_width=650, world_height=630, max_life_s=20.0,
                 max_particles_count=1000, max_speed_cms=700.0, gravity=980.0, particle_count=0,
                 spawn_batch=100, seed=None, debug_particles=False, truncate_bounce=False):
        self.tick_interval = tick_interval
        self.world_width = world_width
        self.world_height = world_height
        self.max_life_s = max_life_s
        self.max_particles_count = max_particles_count
        self.max_speed_cms = max_speed_cms
        self.gravity = gravity
        self.particle_count = particle_count
        self.spawn_batch = spawn_batch
        self.seed = seed
        self.debug_particles = debug_particles
        self.truncate_bounce = truncate_bounce

    def validate(self):
        positive = ("tick_interval", "world_width", "world_height", "max_life_s", "max_speed_cms")
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive", key=name, value=getattr(self, name))
        for name in ("max_particles_count", "particle_count", "spawn_batch"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative", key=name, value=getattr(self, name))
        if self.particle_count > self.max_particles_count:
            raise ConfigError("particle_count exceeds max_particles_count", key="particle_count",
                              value=self.particle_count)
        return self


class ServerConfig:
    __slots__ = ("host", "port")

    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "file", "crash_file")

    def __init__(self, level="INFO", file="logs/particles.log", crash_file="logs/crash.log"):
        self.level = level
        self.file = file
        self.crash_file = crash_file


class Config:
    __slots__ = ("simulation", "server", "logging")

    def __init__(self, simulation=None, server=None, logging=None):
        self.simulation = simulation or SimulationConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()

    @classmethod
    def from_dict(cls, d):
        try:
            simulation = SimulationConfig(**d.get("simulation", {}))
            server = ServerConfig(**d.get("server", {}))
            logging = LoggingConfig(**d.get("logging", {}))
        except TypeError as exc:
            raise ConfigError("unknown config key", cause=exc) from exc
        return cls(simulation.validate(), server, logging)


def load_config(path=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        return Config()

    with open(config_path) as file:
        try:
            data = json.load(file)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON in {config_path}", cause=exc) from exc
    return Config.from_dict(data)
