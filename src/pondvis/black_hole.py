import logging
import math
from enum import Enum

from pondvis.constants import (
    AFTERBURN_RADIUS_FACTOR,
    BLACK_HOLE_FADE,
    CAPTURE_RADIUS_FACTOR,
    DESTROY_DURATION,
    PERSIST_DURATION,
)

logger = logging.getLogger(__name__)


class AnimationType(Enum):
    """How a black hole takes apart the particles it captures."""

    SPAGHETTIFY = "spaghettify"
    ACCRETION = "accretion"
    COLOR_CASCADE = "colorCascade"
    IMPLOSION = "implosion"

    @property
    def message(self):
        return ANIMATION_MESSAGES[self]


ANIMATION_MESSAGES = {
    AnimationType.SPAGHETTIFY: "🌀 spaghettification",
    AnimationType.ACCRETION: "💫 accretion disk",
    AnimationType.COLOR_CASCADE: "🌈 color cascade",
    AnimationType.IMPLOSION: "💥 implosion",
}


class BlackHole:
    """
    A loop-drawn singularity.

    It captures particles while it animates, stays visible afterwards with a
    narrower pull, then fades out and expires.
    """

    def __init__(self, id, x, y, radius, animation_type, now):
        self.id = id
        self.x = x
        self.y = y
        self.radius = radius
        self.animation_type = animation_type
        self.created_at = now
        self.anim_done_at = now + DESTROY_DURATION
        self.expires_at = self.anim_done_at + PERSIST_DURATION
        self.opacity = 1.0
        self.captured_count = 0

    def contains(self, particle, factor):
        return math.hypot(particle.x - self.x, particle.y - self.y) <= self.radius * factor

    def in_afterburn(self, now):
        return self.anim_done_at < now < self.expires_at

    def is_expired(self, now):
        return now > self.expires_at

    def update_opacity(self, now):
        time_left = self.expires_at - now
        if time_left < BLACK_HOLE_FADE:
            self.opacity = min(1.0, max(0.0, time_left / BLACK_HOLE_FADE))
        return self.opacity


def sweep(world, black_hole, factor, now):
    """Capture every free particle within `factor` radii of the black hole."""
    captured = 0
    for particle in world.particles:
        if particle.is_free and black_hole.contains(particle, factor):
            particle.capture(black_hole, now)
            captured += 1
    return captured


def create_black_hole(world, x, y, radius):
    """Spawn a black hole with a random animation and pull in what it covers."""
    animation_types = list(AnimationType)
    animation_type = animation_types[int(world.rng.integers(len(animation_types)))]
    now = world.clock.now()
    black_hole = BlackHole(world.next_id(), x, y, radius, animation_type, now)
    world.black_holes[black_hole.id] = black_hole

    captured = sweep(world, black_hole, CAPTURE_RADIUS_FACTOR, now)
    logger.debug(
        f"[+] Black hole {black_hole.id} at ({x:.0f}, {y:.0f}) r={radius:.0f} "
        f"({animation_type.value}) captured {captured} particles"
    )
    world.notifier.show(animation_type.message, now)
    return black_hole


def update_black_holes(world):
    """Age every black hole: after-burn captures, fade out, expire."""
    now = world.clock.now()
    for black_hole in list(world.black_holes.values()):
        # Keeps capturing after the headline animation, over a smaller area
        if black_hole.in_afterburn(now):
            sweep(world, black_hole, AFTERBURN_RADIUS_FACTOR, now)

        black_hole.update_opacity(now)
        if black_hole.is_expired(now):
            logger.debug(f"[i] Black hole {black_hole.id} expired ({black_hole.captured_count} captured)")
            del world.black_holes[black_hole.id]
