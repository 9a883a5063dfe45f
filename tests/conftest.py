import math

import pytest

from pondvis.black_hole import BlackHole
from pondvis.clock import ManualClock
from pondvis.world import World

FRAME_MS = 16  # whole milliseconds keep tick boundaries exact


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def world(clock):
    return World(1000, 1000, clock=clock, seed=7)


def add_black_hole(world, x, y, radius, animation_type):
    """Register a black hole with a chosen animation, without the capture sweep."""
    black_hole = BlackHole(world.next_id(), x, y, radius, animation_type, world.clock.now())
    world.black_holes[black_hole.id] = black_hole
    return black_hole


def circle_path(cx, cy, radius, points=40):
    return [
        (cx + math.cos(i / points * 2 * math.pi) * radius, cy + math.sin(i / points * 2 * math.pi) * radius)
        for i in range(points + 1)
    ]
