"""
Capture animations.

Each variant is a function of the particle's frozen capture snapshot and the
animation progress, returning where the particle should be drawn and how.
The only state a variant touches besides its return value is the particle's
own trail.
"""

import logging
import math
from collections import namedtuple

from pondvis.black_hole import AnimationType
from pondvis.constants import DESTROY_DURATION, TRAIL_DECAY, TRAIL_START_ALPHA
from pondvis.particle import TrailPoint
from pondvis.wormhole import schedule_respawn

logger = logging.getLogger(__name__)

CaptureFrame = namedtuple("CaptureFrame", ["x", "y", "color", "alpha", "radius"])


def round_half_up(value):
    return int(math.floor(value + 0.5))


def _orbit(particle, angle, radius):
    return particle.capture_x + math.cos(angle) * radius, particle.capture_y + math.sin(angle) * radius


def spaghettify(particle, progress, ease):
    """Stretch and spin inwards, swelling as it fades."""
    x, y = _orbit(
        particle,
        particle.capture_angle + progress * math.pi * 6,
        particle.capture_radius * (1 - ease),
    )
    return CaptureFrame(
        x,
        y,
        particle.color,
        (1 - ease) * 0.8,
        particle.capture_size * (1 + ease * 2),
    )


def accretion(particle, progress, ease):
    """Fast inward spiral that leaves a glowing trail."""
    x, y = _orbit(
        particle,
        particle.capture_angle + progress * math.pi * 8,
        particle.capture_radius * (1 - ease),
    )

    # Sample the path every other tick; the deque drops the oldest point
    if not particle.trail or particle.capture_ticks % 2 == 0:
        particle.trail.append(TrailPoint(x, y, TRAIL_START_ALPHA, particle.color))
    for point in particle.trail:
        point.alpha *= TRAIL_DECAY

    return CaptureFrame(x, y, particle.color, (1 - ease * ease) * 0.9, particle.capture_size)


def cascade_color(progress):
    """Purple to magenta to pink, then warming towards orange, in three equal thirds."""
    if progress < 0.33:
        t = progress / 0.33
        return (round_half_up(180 + 75 * t), round_half_up(100 * (1 - t)), 255)
    if progress < 0.66:
        t = (progress - 0.33) / 0.33
        return (255, round_half_up(50 * t), round_half_up(255 * (1 - t)))
    t = (progress - 0.66) / 0.34
    return (255, round_half_up(50 + 205 * t), round_half_up(200 * t))


def color_cascade(particle, progress, ease):
    """Slow single turn while sweeping through the cascade palette."""
    x, y = _orbit(
        particle,
        particle.capture_angle + progress * math.pi * 2,
        particle.capture_radius * (1 - ease * 0.95),
    )
    alpha = (1 - progress) * 10 * 0.8 if progress > 0.9 else 0.8
    return CaptureFrame(x, y, cascade_color(progress), alpha, particle.capture_size)


def implosion(particle, progress, ease):
    """Straight fall to the centre, shrinking and burning white."""
    x, y = _orbit(particle, particle.capture_angle, particle.capture_radius * (1 - ease))
    boost = round_half_up(ease * 100)
    color = tuple(min(255, channel + boost) for channel in particle.capture_color)
    return CaptureFrame(x, y, color, 0.3 + ease * 0.7, particle.capture_size * (1 - ease * 0.8))


ANIMATIONS = {
    AnimationType.SPAGHETTIFY: spaghettify,
    AnimationType.ACCRETION: accretion,
    AnimationType.COLOR_CASCADE: color_cascade,
    AnimationType.IMPLOSION: implosion,
}


def capture_progress(particle, now):
    elapsed = now - particle.capture_time
    return min(1.0, max(0.0, elapsed / DESTROY_DURATION))


def animate(particle, now):
    """Apply one tick of the capture animation. Returns the progress reached."""
    progress = capture_progress(particle, now)
    ease = progress * progress * progress

    frame = ANIMATIONS[particle.capture_animation](particle, progress, ease)
    particle.x = frame.x
    particle.y = frame.y
    particle.color = frame.color
    particle.alpha = frame.alpha
    particle.radius = frame.radius
    particle.capture_ticks += 1
    return progress


def update_captured_particles(world):
    """Advance every captured particle; finished ones go off to respawn."""
    now = world.clock.now()
    for particle in world.particles:
        if not particle.captured:
            continue

        # Runs from the capture snapshot, so an expired black hole changes nothing
        if animate(particle, now) >= 1:
            wormhole = schedule_respawn(world, particle)
            logger.debug(f"[i] Particle destroyed, respawning through wormhole {wormhole.id}")
