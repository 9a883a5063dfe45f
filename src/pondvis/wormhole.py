import logging

from pondvis.constants import (
    FADE_IN_FLOOR,
    FADE_IN_STEP,
    RESPAWN_DELAY,
    RESPAWN_JITTER,
    WORMHOLE_FADE_WINDOW,
    WORMHOLE_RAMP,
)

logger = logging.getLogger(__name__)


class Wormhole:
    """Marks where a destroyed particle is going to reappear."""

    def __init__(self, id, x, y, now):
        self.id = id
        self.x = x
        self.y = y
        self.created_at = now
        self.expires_at = now + RESPAWN_DELAY + WORMHOLE_FADE_WINDOW
        self.opacity = 0.0
        # One particle per wormhole for now; kept so a wormhole could be reused
        self.spawned_particle = False

    def update_opacity(self, now):
        """Fade in over the first ramp, hold, fade out over the last ramp."""
        age = now - self.created_at
        if age < WORMHOLE_RAMP:
            self.opacity = max(0.0, age / WORMHOLE_RAMP)
        elif now > self.expires_at - WORMHOLE_RAMP:
            self.opacity = max(0.0, (self.expires_at - now) / WORMHOLE_RAMP)
        else:
            self.opacity = 1.0
        return self.opacity

    def is_expired(self, now):
        return now > self.expires_at


def schedule_respawn(world, particle):
    """Destroy `particle` and open a wormhole somewhere for it to come back through."""
    now = world.clock.now()
    wormhole = Wormhole(
        world.next_id(),
        world.rng.random() * world.width,
        world.rng.random() * world.height,
        now,
    )
    world.wormholes[wormhole.id] = wormhole
    particle.destroy(now + RESPAWN_DELAY, wormhole.id)
    return wormhole


def update_wormholes(world):
    now = world.clock.now()
    for wormhole in list(world.wormholes.values()):
        wormhole.update_opacity(now)
        if wormhole.is_expired(now):
            del world.wormholes[wormhole.id]


def respawn_particles(world):
    """Bring back particles whose delay is up, and fade in dim free particles."""
    now = world.clock.now()
    rng = world.rng
    for particle in world.particles:
        if particle.destroyed and now >= particle.respawn_at:
            wormhole = world.wormholes.get(particle.respawn_wormhole)
            if wormhole is not None:
                x = wormhole.x + (rng.random() - 0.5) * RESPAWN_JITTER
                y = wormhole.y + (rng.random() - 0.5) * RESPAWN_JITTER
                wormhole.spawned_particle = True
            else:
                x = rng.random() * world.width
                y = rng.random() * world.height
            particle.respawn(x, y, rng)
            logger.debug(f"[i] Particle respawned at ({x:.0f}, {y:.0f})")

        if particle.is_free and particle.alpha < FADE_IN_FLOOR:
            particle.alpha = min(FADE_IN_FLOOR, particle.alpha + FADE_IN_STEP)
