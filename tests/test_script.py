import pytest

from pondvis.gesture import GestureRecorder
from pondvis.script import LOOP_DRAW_TIME, ScriptedInput, loop_path, parse_loop, parse_ripple


def test_parse_loop():
    assert parse_loop("400,300,120@2.5") == (2.5, 400.0, 300.0, 120.0)


def test_parse_ripple():
    assert parse_ripple("10,20@0") == (0.0, 10.0, 20.0)


@pytest.mark.parametrize("text", ["400,300@2", "400,300,120", "a,b,c@1", ""])
def test_parse_loop_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_loop(text)


def test_loop_path_closes():
    path = loop_path(100, 100, 50)
    assert path[0] == pytest.approx(path[-1])


def test_scripted_loop_is_drawn_over_time(world):
    recorder = GestureRecorder(world)
    script = ScriptedInput(recorder, loops=[(1.0, 500, 500, 120)])

    script.replay_until(0.5)
    assert recorder.press_pos is None

    script.replay_until(1.0 + LOOP_DRAW_TIME / 2)
    assert recorder.is_drawing
    assert world.pending_paths == []

    script.replay_until(1.0 + LOOP_DRAW_TIME)
    assert not recorder.is_drawing
    assert len(world.pending_paths) == 1

    world.tick()
    assert len(world.black_holes) == 1


def test_scripted_click_makes_ripple(world):
    recorder = GestureRecorder(world)
    script = ScriptedInput(recorder, ripples=[(0.2, 40, 50)])
    script.replay_until(0.1)
    assert world.pending_ripples == []
    script.replay_until(0.3)
    assert world.pending_ripples == [(40, 50)]
