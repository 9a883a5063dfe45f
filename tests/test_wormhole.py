import math

import pytest

from conftest import FRAME_MS, add_black_hole, circle_path
from pondvis.black_hole import AnimationType, create_black_hole
from pondvis.constants import DESTROY_DURATION, FADE_IN_FLOOR, FADE_IN_STEP, RESPAWN_DELAY
from pondvis.wormhole import (
    Wormhole,
    respawn_particles,
    schedule_respawn,
    update_wormholes,
)


def test_wormhole_opacity_ramps(world, clock):
    wormhole = Wormhole(world.next_id(), 10, 10, 0)
    world.wormholes[wormhole.id] = wormhole
    assert wormhole.expires_at == 5000

    for now, expected in ((0, 0.0), (500, 0.5), (1000, 1.0), (3000, 1.0), (4500, 0.5), (5000, 0.0)):
        clock.set(now)
        update_wormholes(world)
        assert wormhole.opacity == pytest.approx(expected)
    assert wormhole.id in world.wormholes

    clock.set(5001)
    update_wormholes(world)
    assert wormhole.id not in world.wormholes


def test_schedule_respawn_links_particle_and_wormhole(world, clock):
    clock.set(200)
    particle = world.add_particle(50, 50)
    black_hole = add_black_hole(world, 60, 50, 40, AnimationType.IMPLOSION)
    particle.capture(black_hole, 100)

    wormhole = schedule_respawn(world, particle)

    assert particle.destroyed and not particle.captured
    assert particle.captured_by is None
    assert particle.respawn_at == 200 + RESPAWN_DELAY
    assert particle.respawn_wormhole == wormhole.id
    assert world.wormholes[wormhole.id] is wormhole
    assert 0 <= wormhole.x <= world.width
    assert 0 <= wormhole.y <= world.height


def test_respawn_at_wormhole(world, clock):
    particle = world.add_particle(50, 50)
    wormhole = schedule_respawn(world, particle)

    clock.set(RESPAWN_DELAY - 1)
    respawn_particles(world)
    assert particle.destroyed

    clock.set(RESPAWN_DELAY)
    respawn_particles(world)
    assert particle.is_free
    assert abs(particle.x - wormhole.x) <= 10
    assert abs(particle.y - wormhole.y) <= 10
    assert particle.alpha == pytest.approx(FADE_IN_STEP)
    assert particle.respawn_wormhole is None
    assert len(particle.trail) == 0
    assert wormhole.spawned_particle


def test_respawn_without_wormhole_lands_anywhere(world, clock):
    particle = world.add_particle(50, 50)
    wormhole = schedule_respawn(world, particle)
    del world.wormholes[wormhole.id]

    clock.set(RESPAWN_DELAY)
    respawn_particles(world)
    assert particle.is_free
    assert 0 <= particle.x <= world.width
    assert 0 <= particle.y <= world.height


def test_dim_free_particles_fade_in(world):
    dim = world.add_particle(10, 10)
    dim.alpha = 0.1
    bright = world.add_particle(20, 20)
    bright.alpha = 0.6
    nearly = world.add_particle(30, 30)
    nearly.alpha = FADE_IN_FLOOR - 0.001

    respawn_particles(world)

    assert dim.alpha == pytest.approx(0.1 + FADE_IN_STEP)
    assert bright.alpha == 0.6
    assert nearly.alpha == pytest.approx(FADE_IN_FLOOR)


def test_capture_to_respawn_round_trip(world, clock):
    particle = world.add_particle(510, 500)
    create_black_hole(world, 500, 500, 40)
    assert particle.captured

    destroyed_at = respawned_at = None
    while respawned_at is None:
        clock.advance(FRAME_MS)
        world.tick()
        assert not (particle.captured and particle.destroyed)
        if particle.destroyed and destroyed_at is None:
            destroyed_at = clock.now()
        if destroyed_at is not None and particle.is_free:
            respawned_at = clock.now()
        assert clock.now() < 20000

    assert DESTROY_DURATION <= destroyed_at < DESTROY_DURATION + FRAME_MS
    assert destroyed_at + RESPAWN_DELAY <= respawned_at < destroyed_at + RESPAWN_DELAY + FRAME_MS
    assert particle.alpha == pytest.approx(FADE_IN_STEP)

    # Keep the black hole from pulling it straight back in
    world.black_holes.clear()
    previous = particle.alpha
    for _ in range(5):
        clock.advance(FRAME_MS)
        world.tick()
        assert particle.alpha > previous
        previous = particle.alpha


def test_lifecycle_states_stay_exclusive(clock):
    from pondvis.world import World

    world = World(800, 600, clock=clock, seed=3)
    world.populate(150)
    world.queue_path(circle_path(400, 300, 120))
    world.queue_path(circle_path(150, 150, 60))

    for step in range(1100):
        clock.advance(FRAME_MS)
        if step == 300:
            world.queue_path(circle_path(600, 400, 90))
        world.tick()
        for particle in world.particles:
            assert not (particle.captured and particle.destroyed)
            assert math.isfinite(particle.x) and math.isfinite(particle.y)
            if particle.captured:
                assert clock.now() - particle.capture_time < DESTROY_DURATION


def test_late_afterburn_capture_runs_full_animation(world, clock):
    black_hole = add_black_hole(world, 500, 500, 40, AnimationType.SPAGHETTIFY)
    particle = world.add_particle(510, 500)
    particle.drift_x = particle.drift_y = 0.0
    world.pointer = (0, 0)

    captured_at = black_hole.expires_at - 1000
    clock.set(captured_at)
    world.tick()
    assert particle.captured
    assert particle.capture_time == captured_at

    destroyed_at = None
    while destroyed_at is None:
        clock.advance(FRAME_MS)
        world.tick()
        if particle.destroyed:
            destroyed_at = clock.now()
        assert clock.now() < captured_at + 10000

    assert black_hole.id not in world.black_holes
    assert captured_at + DESTROY_DURATION <= destroyed_at < captured_at + DESTROY_DURATION + FRAME_MS
