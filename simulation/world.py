"""World owns the particles and applies gravity, collisions and lifespan."""

import math
import random

from internal.logging import get_logger
from simulation.entities import Particle, Position, Vector2

RESTITUTION = 0.5

# Fixed values handed to every particle in debug mode
DEBUG_VELOCITY = (0.0, -100.0)
DEBUG_LIFE_S = 100.0


class World:
    """Bounded 2-D world with a fixed particle capacity.

    Units are centimeters and seconds throughout. The bounds are only used as
    clamps during collision response: the floor sits at y == height and the
    walls at x == 0 and x == width.

    Not thread-safe; callers serialise spawn/update themselves.
    """

    def __init__(self, width, height, max_life_s=20.0, max_particles_count=1000,
                 max_speed_cms=700.0, gravity=980.0, rng=None, seed=None,
                 debug_particles=False, truncate_bounce=False):
        self.width = width
        self.height = height
        self.max_life_s = max_life_s
        self.max_particles_count = max_particles_count
        self.max_speed_cms = max_speed_cms
        self.gravity = gravity
        self.debug_particles = debug_particles
        self.truncate_bounce = truncate_bounce
        self._rng = rng or random.Random(seed)
        self._particles = []
        self._next_id = 0
        self._log = get_logger(component="world")

    def __len__(self):
        return len(self._particles)

    @property
    def free_slots(self):
        return self.max_particles_count - len(self._particles)

    def update_bounds(self, width, height):
        """Replace the bounds; particles outside them are clamped on their next contact."""
        self.width = width
        self.height = height

    def spawn(self, count, locations):
        """Append count new particles at the given locations.

        The whole batch is rejected (False, nothing added) when it does not fit
        in the remaining capacity, when count is negative, or when fewer than
        count locations are supplied. Extra locations are ignored.
        """
        if count < 0:
            self._log.warn("spawn rejected", reason="negative_count", requested=count)
            return False
        if len(locations) < count:
            self._log.warn("spawn rejected", reason="missing_locations", requested=count,
                           locations=len(locations))
            return False
        if count > self.free_slots:
            self._log.debug("spawn rejected", reason="capacity", requested=count, free=self.free_slots)
            return False

        self._particles.extend(self._generate(Position.of(location)) for location in locations[:count])
        return True

    def update(self, elapsed_seconds):
        """Advance every particle by elapsed_seconds, then cull the dead ones."""
        if elapsed_seconds < 0:
            self._log.warn("negative step ignored", dt=elapsed_seconds)
            return
        if elapsed_seconds == 0:
            return

        dt = elapsed_seconds
        for particle in self._particles:
            if not particle.alive:
                continue
            particle.move(dt, self.gravity)
            collided = self._collide(particle)
            if not collided:
                particle.velocity.y += self.gravity * dt
            particle.life -= dt

        self._particles = [particle for particle in self._particles if particle.alive]

    def snapshot(self):
        """Ordered copies of the live particles. Valid until the next spawn/update."""
        return tuple(particle.to_state() for particle in self._particles)

    def clear(self):
        self._particles = []

    def _collide(self, particle):
        """Apply at most one boundary response. Returns True if one fired."""
        position, velocity = particle.position, particle.velocity

        if position.y >= self.height:
            position.y = self.height
            velocity.x = -velocity.x
            velocity.y = -velocity.y
            velocity.x *= RESTITUTION
            velocity.y *= RESTITUTION
            if self.truncate_bounce:
                velocity.x = float(math.trunc(velocity.x))
                velocity.y = float(math.trunc(velocity.y))
            return True

        if position.x >= self.width:
            position.x = self.width
            velocity.x = -velocity.x
            return True

        if position.x <= 0:
            position.x = 0
            velocity.x = -velocity.x
            return True

        return False

    def _generate(self, position):
        particle_id = f"p{self._next_id}"
        self._next_id += 1

        if self.debug_particles:
            return Particle(particle_id, Vector2(*DEBUG_VELOCITY), DEBUG_LIFE_S, position)

        # Halving each component keeps the combined speed under max_speed_cms
        half_speed = self.max_speed_cms / 2.0
        velocity = Vector2(self._rng.uniform(-half_speed, half_speed),
                           self._rng.uniform(-half_speed, half_speed))
        # random() is in [0, 1) so life lands in (0, max_life_s]
        life = self.max_life_s - self._rng.random() * self.max_life_s
        return Particle(particle_id, velocity, life, position)
