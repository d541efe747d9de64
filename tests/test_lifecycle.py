"""Tests for the shot lifecycle."""

import random
import pytest

from tennis_engine import court
from tennis_engine.config import SimConfig
from tennis_engine.lifecycle import InvalidTransition, Shot, ShotPhase
from tennis_engine.types import SURFACES, Lifecycle, ShotParameters, SurfaceType

DEFAULT_SHOT = ShotParameters(force=270, angle=39, spin=0)


def _shot(auto_relaunch=True, **config):
    return Shot(
        SURFACES[SurfaceType.HARD],
        SimConfig(**config),
        rng=random.Random(7),
        auto_relaunch=auto_relaunch,
    )


def _finish(shot, lifecycle=Lifecycle.OUT_OF_BOUNDS):
    shot.ball.lifecycle = lifecycle
    assert shot.observe()


def test_new_shot_is_idle():
    shot = _shot()
    assert shot.phase is ShotPhase.IDLE
    assert shot.update(0.01) == []
    assert shot.ball.elapsed == 0.0


def test_launch_starts_flight():
    shot = _shot()
    shot.launch(DEFAULT_SHOT)

    assert shot.phase is ShotPhase.FLYING
    assert shot.launches == 1
    assert shot.ball.position == (court.LAUNCH_X, court.LAUNCH_Y)
    assert shot.ball.vx == pytest.approx(10.49, abs=0.01)
    assert shot.last_params == DEFAULT_SHOT


def test_drop_releases_from_rest():
    shot = _shot()
    shot.drop(2.0)
    assert shot.phase is ShotPhase.FLYING
    assert shot.ball.position == (court.DROP_X, 2.0)
    assert shot.ball.velocity == (0.0, 0.0)


def test_pause_and_resume():
    shot = _shot()
    shot.launch(DEFAULT_SHOT)
    shot.pause()
    assert shot.phase is ShotPhase.PAUSED
    assert shot.update(0.01) == []
    shot.resume()
    assert shot.phase is ShotPhase.FLYING


def test_invalid_transitions():
    shot = _shot()
    with pytest.raises(InvalidTransition):
        shot.pause()
    with pytest.raises(InvalidTransition):
        shot.resume()

    shot.launch(DEFAULT_SHOT)
    shot.pause()
    with pytest.raises(InvalidTransition):
        shot.launch(DEFAULT_SHOT)
    with pytest.raises(InvalidTransition):
        shot.drop()


def test_observe_waits_to_relaunch():
    shot = _shot(relaunch_delay=1.5)
    shot.launch(DEFAULT_SHOT)
    assert not shot.observe()

    _finish(shot, Lifecycle.AT_REST)
    assert shot.phase is ShotPhase.WAITING_TO_RELAUNCH
    assert shot.relaunch_timer == 1.5
    assert shot.last_outcome is Lifecycle.AT_REST


def test_observe_settles_without_relaunch():
    shot = _shot(auto_relaunch=False)
    shot.drop()
    _finish(shot, Lifecycle.AT_REST)
    assert shot.phase is ShotPhase.SETTLED
    assert not shot.relaunch_pending
    assert not shot.tick_timer(10.0)


def test_relaunch_after_delay():
    shot = _shot(relaunch_delay=2.0)
    shot.launch(DEFAULT_SHOT)
    _finish(shot)

    assert not shot.tick_timer(1.0)
    assert shot.phase is ShotPhase.WAITING_TO_RELAUNCH
    assert shot.tick_timer(1.0)
    assert shot.phase is ShotPhase.FLYING
    assert shot.launches == 2
    assert not shot.relaunch_pending

    params = shot.last_params
    assert 200.0 <= params.force <= 400.0
    assert 9 <= params.angle < 39
    assert params.angle == int(params.angle)
    assert 60.0 <= params.spin <= 600.0


def test_reset_cancels_relaunch():
    shot = _shot()
    shot.launch(DEFAULT_SHOT)
    _finish(shot)
    assert shot.relaunch_pending

    shot.reset()
    assert shot.phase is ShotPhase.IDLE
    assert not shot.relaunch_pending
    assert not shot.tick_timer(10.0)
    assert shot.phase is ShotPhase.IDLE


def test_launch_cancels_relaunch():
    shot = _shot()
    shot.launch(DEFAULT_SHOT)
    _finish(shot)
    shot.launch(DEFAULT_SHOT)
    assert not shot.relaunch_pending
    assert not shot.tick_timer(10.0)
    assert shot.launches == 2


def test_reset_twice_equals_reset_once():
    shot = _shot()
    shot.launch(DEFAULT_SHOT)
    for _ in range(50):
        shot.update(0.01)

    shot.reset()
    once = (shot.phase, shot.ball.copy(), shot.relaunch_timer)
    shot.reset()
    twice = (shot.phase, shot.ball.copy(), shot.relaunch_timer)
    assert once == twice


def test_update_counts_net_hits():
    shot = _shot(net_noise=0.0, air_drag=0.0)
    shot.launch(DEFAULT_SHOT)
    shot.ball.x = court.NET_X - 0.05
    shot.ball.y = 0.4
    shot.ball.vx = 10.0
    shot.ball.vy = 0.0

    shot.update(0.01)
    assert shot.net_hits == 1


def test_random_shots_reproducible_with_seed():
    a = Shot(SURFACES[SurfaceType.CLAY], rng=random.Random(3))
    b = Shot(SURFACES[SurfaceType.CLAY], rng=random.Random(3))
    assert [a.random_shot() for _ in range(5)] == [b.random_shot() for _ in range(5)]
