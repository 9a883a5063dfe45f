"""
Scripted pointer input for offline renders.

Loops are drawn point by point over a short stretch of time so the path shows
up on screen before it collapses into a black hole.
"""

import math

LOOP_DRAW_TIME = 0.6  # seconds spent tracing a scripted loop
LOOP_POINTS = 48


def _parse_floats(text, count, label):
    values = [float(v) for v in text.split(",")]
    if len(values) != count:
        raise ValueError(f"expected {count} comma separated numbers for {label}, got {text!r}")
    return values


def parse_loop(text):
    """Parse ``X,Y,R@T`` into (t, x, y, radius)."""
    try:
        coords, at = text.split("@")
        x, y, radius = _parse_floats(coords, 3, "a loop")
        return float(at), x, y, radius
    except ValueError as e:
        raise ValueError(f"invalid loop {text!r} (expected X,Y,R@T): {e}") from e


def parse_ripple(text):
    """Parse ``X,Y@T`` into (t, x, y)."""
    try:
        coords, at = text.split("@")
        x, y = _parse_floats(coords, 2, "a ripple")
        return float(at), x, y
    except ValueError as e:
        raise ValueError(f"invalid ripple {text!r} (expected X,Y@T): {e}") from e


def loop_path(x, y, radius, points=LOOP_POINTS):
    """A hand-drawn-ish circle that starts and ends at the same spot."""
    return [
        (x + math.cos(i / points * 2 * math.pi) * radius, y + math.sin(i / points * 2 * math.pi) * radius)
        for i in range(points + 1)
    ]


class ScriptedInput:
    """Replays loops and clicks through a GestureRecorder as time passes."""

    def __init__(self, recorder, loops=(), ripples=()):
        self.recorder = recorder
        self.strokes = []
        for t, x, y, radius in loops:
            self.strokes.append([t, loop_path(x, y, radius), 0])
        self.clicks = sorted(ripples)
        self.active = None

    def replay_until(self, t):
        """Feed every pointer event due at or before `t` seconds."""
        while self.clicks and self.clicks[0][0] <= t:
            _, x, y = self.clicks.pop(0)
            self.recorder.press(x, y)
            self.recorder.release(x, y)

        if self.active is None:
            due = [s for s in self.strokes if s[0] <= t]
            if due:
                self.active = min(due, key=lambda s: s[0])
                self.strokes.remove(self.active)
                start = self.active[1][0]
                self.recorder.press(*start)

        if self.active is not None:
            started, path, sent = self.active
            fraction = min(1.0, (t - started) / LOOP_DRAW_TIME)
            target = max(1, int(math.ceil(fraction * len(path))))
            for point in path[sent:target]:
                self.recorder.move(*point)
            self.active[2] = target
            if target >= len(path):
                self.recorder.release(*path[-1])
                self.active = None
