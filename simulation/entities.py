"""Particles and the vectors they move with."""

from simulation.state import ParticleState


class Vector2:
    """Velocity in cm/s."""

    __slots__ = ("x", "y")

    def __init__(self, x=0.0, y=0.0):
        self.x = x
        self.y = y

    def __repr__(self):
        return f"Vector2({self.x!r}, {self.y!r})"


class Position:
    """Point in world coordinates, same units as the world bounds."""

    __slots__ = ("x", "y")

    def __init__(self, x=0.0, y=0.0):
        self.x = x
        self.y = y

    @classmethod
    def of(cls, value):
        """Copy a Position or an (x, y) pair into a new Position."""
        if isinstance(value, Position):
            return cls(value.x, value.y)
        x, y = value
        return cls(x, y)

    def __repr__(self):
        return f"Position({self.x!r}, {self.y!r})"


class Particle:
    """A point mass with a finite lifespan, owned by a World."""

    __slots__ = ("id", "velocity", "life", "position")

    def __init__(self, id, velocity, life, position):
        self.id = id
        self.velocity = velocity
        self.life = life
        self.position = position

    @property
    def alive(self):
        return self.life > 0

    def move(self, dt, gravity):
        """Integrate position over dt under constant vertical acceleration."""
        self.position.x += self.velocity.x * dt
        self.position.y += self.velocity.y * dt + 0.5 * gravity * dt * dt

    def to_state(self):
        """Create a detached copy for snapshots."""
        return ParticleState(self.id, self.position.x, self.position.y,
                             self.velocity.x, self.velocity.y, self.life)
