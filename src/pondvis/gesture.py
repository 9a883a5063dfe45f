import logging
import math
from collections import namedtuple

from pondvis.constants import (
    DRAG_THRESHOLD,
    LOOP_CLOSE_MIN,
    LOOP_CLOSE_RATIO,
    LOOP_MIN_POINTS,
    LOOP_MIN_RADIUS,
)

logger = logging.getLogger(__name__)

Loop = namedtuple("Loop", ["x", "y", "radius"])


def detect_loop(path):
    """
    Decide whether a drawn path roughly closes on itself.

    This is a loose heuristic rather than a circle fit: spirals, ellipses and
    shaky hand-drawn paths all pass as long as the end lands near the start
    and the shape has some size. Returns a `Loop` (centroid and mean radius)
    or None.
    """
    if not path or len(path) < LOOP_MIN_POINTS:
        return None

    start_x, start_y = path[0]
    end_x, end_y = path[-1]
    close_dist = math.hypot(end_x - start_x, end_y - start_y)

    xs = [p[0] for p in path]
    ys = [p[1] for p in path]
    extent = max(max(xs) - min(xs), max(ys) - min(ys))
    if close_dist > max(LOOP_CLOSE_MIN, extent * LOOP_CLOSE_RATIO):
        logger.debug(f"[i] Path not closed ({close_dist:.1f}px gap)")
        return None

    cx = sum(xs) / len(path)
    cy = sum(ys) / len(path)
    avg_r = sum(math.hypot(x - cx, y - cy) for x, y in path) / len(path)
    if avg_r < LOOP_MIN_RADIUS:
        logger.debug(f"[i] Loop too small (radius {avg_r:.1f}px)")
        return None

    return Loop(cx, cy, avg_r)


class GestureRecorder:
    """
    Turns raw pointer events into gestures for the world.

    A press followed by a drag beyond the threshold records a path that is
    checked for a loop on release. A press released without dragging is a
    click and becomes a ripple.
    """

    def __init__(self, world):
        self.world = world
        self.press_pos = None
        self.has_dragged = False
        self.is_drawing = False
        self.path = []

    def press(self, x, y):
        self.press_pos = (x, y)
        self.has_dragged = False
        self.is_drawing = False
        self.path = []

    def move(self, x, y):
        self.world.pointer = (x, y)
        if self.press_pos is None:
            return

        dx = x - self.press_pos[0]
        dy = y - self.press_pos[1]
        if math.hypot(dx, dy) > DRAG_THRESHOLD:
            self.has_dragged = True
            self.is_drawing = True
        if self.is_drawing:
            self.path.append((x, y))

    def release(self, x, y):
        if self.is_drawing:
            self.world.queue_path(self.path)
        elif not self.has_dragged and self.press_pos is not None:
            self.world.queue_ripple(x, y)

        self.press_pos = None
        self.is_drawing = False
        self.path = []
