import numpy as np

from pondvis.audio_analyser import AudioModulator
from pondvis.black_hole import create_black_hole
from pondvis.clock import ManualClock
from pondvis.gesture import GestureRecorder
from pondvis.visualiser_renderer import VisualiserRenderer, rotate_hue, to_bgr
from pondvis.world import World
from pondvis.wormhole import schedule_respawn


def make_renderer(modulation=None):
    clock = ManualClock()
    world = World(160, 120, clock=clock, seed=5, modulation=modulation)
    world.populate(40)
    recorder = GestureRecorder(world)
    return VisualiserRenderer(world, 160, 120, 30, clock, recorder=recorder), world, recorder


def test_rotate_hue_full_turn_keeps_colour():
    assert np.allclose(rotate_hue((100, 200, 255), 360), (100, 200, 255), atol=1)
    assert rotate_hue((255, 0, 0), 120)[1] > 200


def test_to_bgr_swaps_and_scales():
    assert to_bgr((10, 20, 30)) == (30, 20, 10)
    assert to_bgr((100, 100, 100), 0.5) == (50, 50, 50)


def test_frame_shape_and_clock():
    renderer, world, _ = make_renderer()
    frame = renderer.make_frame(0.5)
    assert frame.shape == (120, 160, 3)
    assert frame.dtype == np.uint8
    assert world.clock.now() == 500


def test_draws_everything_at_once():
    modulator = AudioModulator()
    modulator.start()
    modulator.update({"lows": 200.0, "mids": 200.0, "highs": 200.0})
    renderer, world, recorder = make_renderer(modulator.trippy)

    create_black_hole(world, 80, 60, 40)
    schedule_respawn(world, world.particles[-1])
    world.add_ripple(20, 20)
    recorder.press(10, 10)
    for x in range(10, 100, 5):
        recorder.move(x, 10)

    first = renderer.make_frame(0.1)
    second = renderer.make_frame(0.2)
    assert first.shape == second.shape == (120, 160, 3)
    assert second.any()


class ShortTrack:
    duration = 0.1

    def get_data_at_time(self, t):
        return {"lows": 200.0, "mids": 200.0, "highs": 200.0}


def test_audio_switches_off_after_track_ends():
    modulator = AudioModulator()
    modulator.start()
    renderer, world, _ = make_renderer(modulator.trippy)
    renderer.analyser = ShortTrack()
    renderer.modulator = modulator

    renderer.make_frame(0.05)
    assert modulator.trippy.active
    assert modulator.trippy.hue_rotation > 0

    renderer.make_frame(0.2)
    assert not modulator.audio_active
    assert not world.modulation.active
    assert modulator.trippy.hue_rotation == 0


def test_calibration_toast_is_drawn():
    modulator = AudioModulator()
    renderer, world, _ = make_renderer(modulator.trippy)
    modulator.calibrate(ShortTrack(), world.notifier, world.clock.now())

    blank = np.zeros((120, 160, 3), dtype=np.uint8)
    renderer._draw_toast(blank, 100)
    assert blank.any()

    expired = np.zeros_like(blank)
    renderer._draw_toast(expired, 10000)
    assert not expired.any()
