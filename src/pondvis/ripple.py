import math

from pondvis.constants import RIPPLE_DECAY, RIPPLE_GROWTH, RIPPLE_STRENGTH


class Ripple:
    """An expanding ring left behind by a click or tap."""

    def __init__(self, x, y):
        self.x = x
        self.y = y
        self.radius = 0.0
        self.strength = RIPPLE_STRENGTH
        self.life = 1.0

    def wave_at(self, dist):
        """Signed push felt by something `dist` away from the ripple centre."""
        return math.sin((dist - self.radius) * 0.1) * self.strength * self.life

    def update(self):
        """Grow the ring. Returns False once the ripple has died out."""
        self.radius += RIPPLE_GROWTH
        self.life -= RIPPLE_DECAY
        return self.life > 0
