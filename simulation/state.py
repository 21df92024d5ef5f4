from utils.ksuid import generate_ksuid
from utils.timestamp import format_timestamp


class ParticleState:
    __slots__ = ("id", "x", "y", "vx", "vy", "life")

    def __init__(self, id, x, y, vx, vy, life):
        self.id, self.x, self.y, self.vx, self.vy, self.life = id, x, y, vx, vy, life

    def to_dict(self):
        return {"id": self.id, "x": self.x, "y": self.y, "vx": self.vx, "vy": self.vy, "life": self.life}


class StateSnapshot:
    __slots__ = ("id", "timestamp", "tick", "time", "width", "height", "particles")

    def __init__(self, tick, time, particles, width=0, height=0, id=None, timestamp=None):
        self.id = id or generate_ksuid()
        self.timestamp = timestamp or format_timestamp()
        self.tick = tick
        self.time = time
        self.width = width
        self.height = height
        self.particles = particles

    @property
    def sim_time_s(self):
        return self.time

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "tick": self.tick,
            "sim_time_s": self.time,
            "bounds": {"width": self.width, "height": self.height},
            "particles": [p.to_dict() for p in self.particles]
        }
