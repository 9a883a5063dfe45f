import colorsys
import math

import cv2
import numpy as np

from pondvis.constants import BACKGROUND_COLOR, CONNECTION_DISTANCE, PERSISTENCE_FADE

TOAST_DURATION = 2500  # ms


def rotate_hue(color, degrees):
    """Shift an RGB colour around the hue wheel."""
    r, g, b = (c / 255 for c in color)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    r, g, b = colorsys.hls_to_rgb((h + degrees / 360) % 1.0, l, s)
    return (int(r * 255), int(g * 255), int(b * 255))


def to_bgr(color, alpha=1.0):
    r, g, b = color
    return (int(b * alpha), int(g * alpha), int(r * alpha))


class VisualiserRenderer:
    """
    Draws the particle field with OpenCV.
    Keeps the previous frame around so moving things leave a fading smear.
    """

    def __init__(self, world, width, height, fps, clock, analyser=None, modulator=None, recorder=None, script=None):
        self.world = world
        self.w = width
        self.h = height
        self.fps = fps
        self.clock = clock
        self.analyser = analyser
        self.modulator = modulator
        self.recorder = recorder
        self.script = script

        self.bg = np.full((self.h, self.w, 3), BACKGROUND_COLOR, dtype=np.uint8)
        self.canvas = self.bg.copy()

    def _audio_active(self):
        modulation = self.world.modulation
        return modulation is not None and modulation.active

    def _shade(self, color):
        if self._audio_active():
            return rotate_hue(color, self.world.modulation.hue_rotation)
        return color

    def _draw_connections(self, layer):
        free = [p for p in self.world.particles if p.is_free]
        if len(free) < 2:
            return

        max_dist = CONNECTION_DISTANCE
        if self._audio_active():
            max_dist += self.world.modulation.connection_boost

        positions = np.array([(p.x, p.y) for p in free])
        diff = positions[:, None, :] - positions[None, :, :]
        dist = np.sqrt((diff**2).sum(axis=-1))
        rows, cols = np.nonzero(np.triu(dist < max_dist, k=1))

        for i, j in zip(rows, cols):
            p1, p2 = free[i], free[j]
            alpha = (1 - dist[i, j] / max_dist) * 0.15
            mixed = tuple((a + b) / 2 for a, b in zip(p1.color, p2.color))
            cv2.line(
                layer,
                (int(p1.x), int(p1.y)),
                (int(p2.x), int(p2.y)),
                to_bgr(self._shade(mixed), alpha),
                1,
                cv2.LINE_AA,
            )

    def _draw_trails(self, layer):
        for particle in self.world.particles:
            if not particle.captured or len(particle.trail) < 2:
                continue
            points = list(particle.trail)
            for prev, point in zip(points, points[1:]):
                if point.alpha < 0.01:
                    continue
                cv2.line(
                    layer,
                    (int(prev.x), int(prev.y)),
                    (int(point.x), int(point.y)),
                    to_bgr(point.color, point.alpha),
                    2,
                    cv2.LINE_AA,
                )

    def _draw_particles(self, layer):
        sparkle = self.world.modulation.sparkle if self._audio_active() else 0.0
        for particle in self.world.particles:
            if particle.destroyed:
                continue

            pulse = math.sin(particle.pulse)
            alpha = particle.alpha * (0.7 + 0.3 * pulse)
            radius = particle.radius * (0.8 + 0.2 * pulse) * (1 + sparkle * 0.5)
            glow = 4 + sparkle * 3
            center = (int(particle.x), int(particle.y))

            glow_alpha = min(1.0, alpha * (1 + sparkle * 0.5))
            color = self._shade(particle.color)
            cv2.circle(layer, center, max(1, int(radius * glow)), to_bgr(color, glow_alpha * 0.3), -1, cv2.LINE_AA)
            core_alpha = min(1.0, alpha * (0.8 + sparkle * 0.4))
            cv2.circle(layer, center, max(1, int(radius)), to_bgr((255, 255, 255), core_alpha), -1, cv2.LINE_AA)

    def _draw_ripples(self, layer):
        for ripple in self.world.ripples:
            cv2.circle(
                layer,
                (int(ripple.x), int(ripple.y)),
                int(ripple.radius),
                to_bgr((255, 255, 255), ripple.life * 0.2),
                2,
                cv2.LINE_AA,
            )

    def _draw_black_holes(self, frame, now):
        for black_hole in self.world.black_holes.values():
            op = black_hole.opacity
            center = (int(black_hole.x), int(black_hole.y))

            # Dark core darkens whatever is underneath
            shadow = frame.copy()
            cv2.circle(shadow, center, int(black_hole.radius * 0.6), (0, 0, 0), -1, cv2.LINE_AA)
            frame = cv2.addWeighted(shadow, 0.8 * op, frame, 1 - 0.8 * op, 0)

            pulse = 1 + math.sin((now - black_hole.created_at) * 0.003) * 0.1
            ring = np.zeros_like(frame)
            cv2.circle(ring, center, int(black_hole.radius * 0.95 * pulse), to_bgr((150, 80, 255), 0.4 * op), 6, cv2.LINE_AA)
            cv2.circle(ring, center, int(black_hole.radius * pulse), to_bgr((180, 120, 255), 0.2 * op), 2, cv2.LINE_AA)
            frame = cv2.add(frame, ring)
        return frame

    def _draw_wormholes(self, layer, now):
        for wormhole in self.world.wormholes.values():
            op = wormhole.opacity
            if op <= 0:
                continue
            pulse = 1 + math.sin((now - wormhole.created_at) * 0.005) * 0.2
            radius = 25 * pulse
            center = (int(wormhole.x), int(wormhole.y))
            cv2.circle(layer, center, int(radius), to_bgr((180, 100, 255), 0.15 * op), -1, cv2.LINE_AA)
            cv2.circle(layer, center, int(radius * 0.5), to_bgr((150, 255, 200), 0.6 * op), -1, cv2.LINE_AA)
            cv2.circle(layer, center, int(radius * 0.6), to_bgr((150, 255, 220), 0.4 * op), 1, cv2.LINE_AA)

    def _draw_path(self, frame):
        if self.recorder is None or not self.recorder.is_drawing or len(self.recorder.path) < 2:
            return
        points = np.array(self.recorder.path, dtype=np.int32)
        cv2.polylines(frame, [points], False, to_bgr((180, 120, 255), 0.5), 2, cv2.LINE_AA)

    def _draw_toast(self, frame, now):
        notifier = self.world.notifier
        if notifier.message is None or notifier.shown_at is None:
            return
        if now - notifier.shown_at > TOAST_DURATION:
            return
        # Hershey fonts have no emoji
        text = notifier.message.encode("ascii", "ignore").decode().strip()
        cv2.putText(frame, text, (30, self.h - 40), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (230, 220, 220), 2, cv2.LINE_AA)

    def make_frame(self, t):
        """
        The callback function for MoviePy.
        Steps the world to time t and draws it.
        """
        # 1. Move the clock and feed input
        self.clock.set(t * 1000)
        now = self.clock.now()
        if self.script is not None:
            self.script.replay_until(t)
        if self.analyser is not None and self.modulator is not None:
            if t <= self.analyser.duration:
                self.modulator.update(self.analyser.get_data_at_time(t))
            elif self.modulator.audio_active:
                # Track is over, let the field settle back
                self.modulator.stop()

        # 2. Simulate
        self.world.tick()

        # 3. Fade the previous frame towards the background
        self.canvas = cv2.addWeighted(self.canvas, 1 - PERSISTENCE_FADE, self.bg, PERSISTENCE_FADE, 0)

        # 4. Additive light layer
        light = np.zeros_like(self.canvas)
        self._draw_connections(light)
        self._draw_trails(light)
        self._draw_particles(light)
        self._draw_ripples(light)
        self._draw_wormholes(light, now)
        frame = cv2.add(self.canvas, light)

        # 5. Black holes and overlays on top
        frame = self._draw_black_holes(frame, now)
        self.canvas = frame
        overlay = frame.copy()
        self._draw_path(overlay)
        self._draw_toast(overlay, now)

        return overlay
