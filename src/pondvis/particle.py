import math
from collections import deque

from pondvis.constants import (
    BASE_AREA,
    BASE_PARTICLE_COUNT,
    BREATH_FORCE,
    EDGE_MARGIN,
    MAX_PARTICLE_COUNT,
    MIN_PARTICLE_COUNT,
    PARTICLE_COLORS,
    POINTER_FORCE,
    POINTER_RADIUS,
    RIPPLE_BAND,
    SWIRL_FORCE,
    TRAIL_CAPACITY,
    VELOCITY_DAMPING,
)


def calculate_particle_count(width, height):
    """Scale the particle count to the canvas area for a consistent density."""
    area = max(1, width * height)
    scaled = int(math.floor(area / BASE_AREA * BASE_PARTICLE_COUNT + 0.5))
    return min(MAX_PARTICLE_COUNT, max(MIN_PARTICLE_COUNT, scaled))


def random_color(rng):
    return PARTICLE_COLORS[int(rng.integers(len(PARTICLE_COLORS)))]


class TrailPoint:
    """A remembered position with its own fading alpha."""

    __slots__ = ("x", "y", "alpha", "color")

    def __init__(self, x, y, alpha, color):
        self.x = x
        self.y = y
        self.alpha = alpha
        self.color = color


class Particle:
    """
    A point of light drifting around its home position.

    A particle is always in exactly one lifecycle state:
    free (integrated by the field), captured (animated by a black hole)
    or destroyed (waiting at a wormhole to respawn).
    """

    def __init__(self, x, y, rng):
        self.x = x
        self.y = y
        self.base_x = x
        self.base_y = y
        self.vx = 0.0
        self.vy = 0.0
        self.radius = rng.random() * 2 + 1
        self.color = random_color(rng)
        self.alpha = rng.random() * 0.5 + 0.3
        self.pulse = rng.random() * math.pi * 2
        self.pulse_speed = rng.random() * 0.02 + 0.01
        self.drift_x = (rng.random() - 0.5) * 0.3
        self.drift_y = (rng.random() - 0.5) * 0.3

        # Capture bookkeeping, frozen when a black hole takes the particle
        self.captured = False
        self.captured_by = None
        self.capture_time = 0.0
        self.capture_x = x
        self.capture_y = y
        self.capture_animation = None
        self.capture_angle = 0.0
        self.capture_radius = 0.0
        self.capture_size = self.radius
        self.capture_color = self.color
        self.capture_ticks = 0

        self.destroyed = False
        self.respawn_at = 0.0
        self.respawn_wormhole = None
        self.trail = deque(maxlen=TRAIL_CAPACITY)

    @property
    def is_free(self):
        return not self.captured and not self.destroyed

    def capture(self, black_hole, now):
        """Hand the particle to `black_hole`.

        The centre, animation and polar offset are copied so the animation can
        finish even if the black hole expires first.
        """
        dx = self.x - black_hole.x
        dy = self.y - black_hole.y
        self.captured = True
        self.captured_by = black_hole.id
        self.capture_time = now
        self.capture_x = black_hole.x
        self.capture_y = black_hole.y
        self.capture_animation = black_hole.animation_type
        self.capture_angle = math.atan2(dy, dx)
        self.capture_radius = math.hypot(dx, dy)
        self.capture_size = self.radius
        self.capture_color = self.color
        self.capture_ticks = 0
        self.trail.clear()
        black_hole.captured_count += 1

    def destroy(self, respawn_at, wormhole_id):
        self.captured = False
        self.captured_by = None
        self.destroyed = True
        self.respawn_at = respawn_at
        self.respawn_wormhole = wormhole_id

    def respawn(self, x, y, rng):
        """Bring a destroyed particle back into the field, invisible at first."""
        self.x = x
        self.y = y
        self.base_x = x
        self.base_y = y
        self.vx = (rng.random() - 0.5) * 2
        self.vy = (rng.random() - 0.5) * 2
        self.color = random_color(rng)
        self.alpha = 0.0
        self.radius = rng.random() * 2 + 1
        self.pulse = rng.random() * math.pi * 2
        self.drift_x = (rng.random() - 0.5) * 0.3
        self.drift_y = (rng.random() - 0.5) * 0.3
        self.captured = False
        self.captured_by = None
        self.destroyed = False
        self.respawn_at = 0.0
        self.respawn_wormhole = None
        self.trail.clear()

    def update(self, world):
        """Integrate one tick of ambient forces. Only free particles move here."""
        if not self.is_free:
            return

        # Drift the home position and wrap around just outside the canvas
        self.base_x += self.drift_x
        self.base_y += self.drift_y
        if self.base_x < -EDGE_MARGIN:
            self.base_x = world.width + EDGE_MARGIN
        if self.base_x > world.width + EDGE_MARGIN:
            self.base_x = -EDGE_MARGIN
        if self.base_y < -EDGE_MARGIN:
            self.base_y = world.height + EDGE_MARGIN
        if self.base_y > world.height + EDGE_MARGIN:
            self.base_y = -EDGE_MARGIN

        # Pointer pushes particles away
        dx = world.pointer[0] - self.base_x
        dy = world.pointer[1] - self.base_y
        dist = math.hypot(dx, dy)
        if dist < POINTER_RADIUS:
            force = (1 - dist / POINTER_RADIUS) * POINTER_FORCE
            angle = math.atan2(dy, dx)
            self.vx -= math.cos(angle) * force * 0.1
            self.vy -= math.sin(angle) * force * 0.1

        for ripple in world.ripples:
            rdx = self.base_x - ripple.x
            rdy = self.base_y - ripple.y
            rdist = math.hypot(rdx, rdy)
            if abs(rdist - ripple.radius) < RIPPLE_BAND:
                angle = math.atan2(rdy, rdx)
                wave = ripple.wave_at(rdist)
                self.vx += math.cos(angle) * wave * 0.5
                self.vy += math.sin(angle) * wave * 0.5

        modulation = world.modulation
        if modulation is not None and modulation.active:
            bx = self.base_x - world.width / 2
            by = self.base_y - world.height / 2
            # A particle sitting exactly on the centre would divide by zero
            b_dist = math.hypot(bx, by) or 1.0

            breath = modulation.breath * BREATH_FORCE
            self.vx += (bx / b_dist) * breath
            self.vy += (by / b_dist) * breath

            swirl = modulation.swirl * SWIRL_FORCE
            self.vx += (-by / b_dist) * swirl
            self.vy += (bx / b_dist) * swirl

        self.x = self.base_x + self.vx
        self.y = self.base_y + self.vy
        self.vx *= VELOCITY_DAMPING
        self.vy *= VELOCITY_DAMPING
        self.pulse += self.pulse_speed
