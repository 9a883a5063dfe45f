import itertools
import logging

import numpy as np

from pondvis.black_hole import create_black_hole, update_black_holes
from pondvis.capture_animation import update_captured_particles
from pondvis.clock import SystemClock
from pondvis.gesture import detect_loop
from pondvis.notifications import Notifier
from pondvis.particle import Particle, calculate_particle_count
from pondvis.ripple import Ripple
from pondvis.wormhole import respawn_particles, update_wormholes

logger = logging.getLogger(__name__)


class World:
    """
    Everything the animation loop owns: particles, black holes, wormholes,
    ripples and the pointer.

    Black holes and wormholes are kept by id so particles can refer to them
    without keeping them alive.
    """

    def __init__(self, width, height, clock=None, seed=None, notifier=None, modulation=None):
        self.width = width
        self.height = height
        self.clock = clock or SystemClock()
        self.rng = np.random.default_rng(seed)
        self.notifier = notifier or Notifier()
        self.modulation = modulation

        self.particles = []
        self.black_holes = {}
        self.wormholes = {}
        self.ripples = []
        self.pointer = (width / 2, height / 2)

        self.pending_paths = []
        self.pending_ripples = []
        self._ids = itertools.count(1)

    def next_id(self):
        return next(self._ids)

    # --- Particle store ---

    def add_particle(self, x=None, y=None):
        x = self.rng.random() * self.width if x is None else x
        y = self.rng.random() * self.height if y is None else y
        particle = Particle(x, y, self.rng)
        self.particles.append(particle)
        return particle

    def populate(self, count):
        self.particles = []
        for _ in range(count):
            self.add_particle()

    def sync_particle_count(self):
        """Grow or trim the particle list to suit the canvas size."""
        target = calculate_particle_count(self.width, self.height)
        while len(self.particles) < target:
            self.add_particle()
        del self.particles[target:]
        logger.debug(f"[i] {target} particles for {self.width}x{self.height}")
        return target

    def resize(self, width, height):
        self.width = width
        self.height = height
        self.pointer = (
            min(width, max(0, self.pointer[0])),
            min(height, max(0, self.pointer[1])),
        )
        return self.sync_particle_count()

    # --- Input ---

    def queue_path(self, path):
        self.pending_paths.append(list(path))

    def queue_ripple(self, x, y):
        self.pending_ripples.append((x, y))

    def add_ripple(self, x, y):
        ripple = Ripple(x, y)
        self.ripples.append(ripple)
        return ripple

    def _process_gestures(self):
        for path in self.pending_paths:
            loop = detect_loop(path)
            if loop is not None:
                create_black_hole(self, loop.x, loop.y, loop.radius)
        for x, y in self.pending_ripples:
            self.add_ripple(x, y)
        self.pending_paths = []
        self.pending_ripples = []

    # --- Frame ---

    def tick(self):
        """Advance the whole simulation by one frame."""
        self._process_gestures()
        update_black_holes(self)
        update_captured_particles(self)
        update_wormholes(self)
        respawn_particles(self)

        for particle in self.particles:
            particle.update(self)

        self.ripples = [ripple for ripple in self.ripples if ripple.update()]
