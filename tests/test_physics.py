"""Tests for the physics engine."""

import math
import random
import pytest

from tennis_engine import court
from tennis_engine.physics import advance, bounce_apexes, launch_velocity, simulate, step
from tennis_engine.types import (
    SURFACES,
    BallState,
    BounceEvent,
    Lifecycle,
    NetEvent,
    OutEvent,
    RestEvent,
    ShotParameters,
    SurfaceProfile,
    SurfaceType,
    Telemetry,
    TrajectorySample,
)


def _ball(x=court.DROP_X, y=2.0, vx=0.0, vy=0.0, spin=0.0):
    ball = BallState()
    ball.reset(x, y, vx, vy, spin)
    return ball


@pytest.mark.parametrize("surface_type", list(SurfaceType))
def test_bounce_heights_follow_restitution(surface_type):
    """Drop from 2m without drag or spin → apex n is h * e^(2n)."""
    surface = SURFACES[surface_type]
    final, _ = simulate(_ball(), surface, dt=0.001, max_time=10.0, net_noise=0.0)

    apexes = bounce_apexes(final.trajectory)
    assert len(apexes) >= 2
    for n, apex in enumerate(apexes[:2], start=1):
        assert apex == pytest.approx(2.0 * surface.restitution ** (2 * n), rel=0.03)


def test_parabola_matches_discrete_closed_form():
    """Zero spin and drag → y_n = y0 + vy0*n*dt - g*dt^2*n(n+1)/2."""
    dt = 0.001
    y0, vy0 = 1.0, 8.0
    ball = _ball(x=2.0, y=y0, vy=vy0)

    for n in range(1, 501):
        advance(ball, dt, air_drag=0.0)
        expected = y0 + vy0 * n * dt - court.GRAVITY * dt**2 * n * (n + 1) / 2
        assert ball.y == pytest.approx(expected, rel=1e-9)


def test_parabola_close_to_continuous():
    """The integrator stays within the semi-implicit bias of 0.5*g*t*dt."""
    dt = 0.001
    y0, vy0 = 1.0, 8.0
    ball = _ball(x=2.0, y=y0, vy=vy0)

    for _ in range(500):
        advance(ball, dt, air_drag=0.0)
    t = ball.elapsed
    ideal = y0 + vy0 * t - 0.5 * court.GRAVITY * t**2
    assert ball.y == pytest.approx(ideal, abs=0.5 * court.GRAVITY * t * dt + 1e-9)


def test_clay_drop_first_bounce():
    """Clay drop from 2m at dt 0.0083 → first bounce at step 77, rebound 0.75x impact."""
    dt = 0.0083
    ball = _ball()
    surface = SURFACES[SurfaceType.CLAY]

    events = []
    while not any(isinstance(e, BounceEvent) for e in events):
        events = step(ball, surface, dt, air_drag=0.0, net_noise=0.0)

    bounce = events[0]
    assert bounce.t == pytest.approx(0.639, abs=0.001)
    impact = court.GRAVITY * 77 * dt
    assert bounce.rebound == pytest.approx(0.75 * impact, rel=1e-9)
    assert ball.bounces[0].t == pytest.approx(bounce.t)


def test_bounce_count_capped():
    """A very lively surface still comes to rest after 11 bounces."""
    lively = SurfaceProfile(SurfaceType.HARD, "Test", 0.99, 0.5)
    final, events = simulate(_ball(), lively, dt=0.001, max_time=60.0, net_noise=0.0)

    assert final.lifecycle is Lifecycle.AT_REST
    assert final.bounce_count == court.MAX_BOUNCES + 1
    assert len([e for e in events if isinstance(e, BounceEvent)]) == court.MAX_BOUNCES + 1
    assert len(final.bounces) == court.MAX_RECORDED_BOUNCES


def test_slow_rebound_comes_to_rest():
    """Rebound below 0.1 m/s → AT_REST with zero velocity."""
    ball = _ball(y=0.00001, vx=1.5, vy=-0.02)
    events = step(ball, SURFACES[SurfaceType.CLAY], 0.001, air_drag=0.0, net_noise=0.0)

    assert ball.lifecycle is Lifecycle.AT_REST
    assert ball.vx == 0.0
    assert ball.vy == 0.0
    assert ball.y == 0.0
    assert any(isinstance(e, RestEvent) for e in events)


def test_ball_at_rest_is_not_integrated():
    ball = _ball(y=0.0)
    ball.lifecycle = Lifecycle.AT_REST
    events = step(ball, SURFACES[SurfaceType.HARD], 0.01, air_drag=0.0)
    assert events == []
    assert ball.elapsed == 0.0
    assert len(ball.trajectory) == 1


def test_bounce_damping_and_spin_kick():
    """Horizontal speed x0.8, topspin kick spin/5000*2, spin x0.7."""
    ball = _ball(x=15.0, y=0.001, vx=4.0, vy=-5.0, spin=1000.0)
    step(ball, SURFACES[SurfaceType.CLAY], 0.001, air_drag=0.0, net_noise=0.0)

    assert ball.bounce_count == 1
    assert ball.vx == pytest.approx(4.0 * 0.8 + 1000.0 / 5000.0 * 2.0)
    assert ball.spin == pytest.approx(700.0)
    assert ball.vy > 0


def test_friction_on_bounce_uses_surface_friction():
    ball = _ball(x=15.0, y=0.001, vx=4.0, vy=-5.0, spin=1000.0)
    clay = SURFACES[SurfaceType.CLAY]
    step(ball, clay, 0.001, air_drag=0.0, net_noise=0.0, friction_on_bounce=True)

    assert ball.vx == pytest.approx(4.0 * (1.0 - clay.friction) + 0.4)


def test_net_pass_through_unchanged():
    """A ball clearing the tape keeps exactly the integrated velocity."""
    ball = _ball(x=court.NET_X - 0.05, y=2.0, vx=10.0, vy=0.0)
    reference = ball.copy()
    advance(reference, 0.01, air_drag=0.0)

    events = step(ball, SURFACES[SurfaceType.HARD], 0.01, air_drag=0.0, net_noise=0.0)

    assert not any(isinstance(e, NetEvent) for e in events)
    assert ball.velocity == reference.velocity
    assert ball.x > court.NET_X


def test_net_hit_keeps_at_most_twenty_percent():
    """Low ball into the net → snapped to the net, <=20% of velocity and spin."""
    ball = _ball(x=court.NET_X - 0.05, y=0.5, vx=10.0, vy=-1.0, spin=500.0)
    events = step(ball, SURFACES[SurfaceType.HARD], 0.01, air_drag=0.0, net_noise=0.0)

    assert any(isinstance(e, NetEvent) for e in events)
    assert ball.x == court.NET_X
    assert ball.vx == pytest.approx(2.0)
    assert abs(ball.vy) <= 0.2 * (1.0 + court.GRAVITY * 0.01) + 0.01
    assert ball.spin == pytest.approx(100.0)


def test_net_crossing_height_is_interpolated():
    """Crossing height comes from the line between pre- and post-step positions."""
    ball = _ball(x=court.NET_X - 0.5, y=0.5, vx=100.0, vy=0.0)
    step(ball, SURFACES[SurfaceType.HARD], 0.01, air_drag=0.0, net_noise=0.0)

    # Pre-step y is 0.5, post-step y dropped by g*dt^2; crossing is halfway
    expected = 0.5 - 0.5 * court.GRAVITY * 0.01**2
    assert ball.y == pytest.approx(expected)


def test_soft_net_hit_drops_straight_down():
    ball = _ball(x=court.NET_X - 0.005, y=0.3, vx=1.0, vy=0.0)
    step(ball, SURFACES[SurfaceType.HARD], 0.01, air_drag=0.0, net_noise=0.0)
    assert ball.vx == 0.0


def test_out_of_bounds():
    ball = _ball(x=court.COURT_LENGTH - 0.01, y=1.0, vx=5.0)
    events = step(ball, SURFACES[SurfaceType.GRASS], 0.01, air_drag=0.0)

    assert ball.lifecycle is Lifecycle.OUT_OF_BOUNDS
    assert isinstance(events[-1], OutEvent)


def test_launch_velocity_default_shot():
    """270 N at 39 deg → 13.5 m/s, vx ~10.49, vy ~8.49."""
    vx, vy = launch_velocity(ShotParameters(force=270, angle=39, spin=0))
    assert math.hypot(vx, vy) == pytest.approx(13.5)
    assert vx == pytest.approx(10.49, abs=0.01)
    assert vy == pytest.approx(8.50, abs=0.01)


def test_launch_velocity_clamped():
    vx, vy = launch_velocity(ShotParameters(force=5000, angle=120, spin=0))
    assert vx == pytest.approx(0.0, abs=1e-9)
    assert vy == pytest.approx(court.LAUNCH_MAX_FORCE * court.LAUNCH_SPEED_SCALE)


def test_topspin_dips_backspin_floats():
    """Same shot: topspin lands shorter than flat, backspin longer."""
    hard = SURFACES[SurfaceType.HARD]

    def first_bounce_x(spin):
        vx, vy = launch_velocity(ShotParameters(force=150, angle=15, spin=spin))
        final, events = simulate(_ball(court.LAUNCH_X, court.LAUNCH_Y, vx, vy, spin), hard, net_noise=0.0)
        return next(e.x for e in events if isinstance(e, BounceEvent))

    assert first_bounce_x(3000) < first_bounce_x(0) < first_bounce_x(-2000)


def test_air_drag_shortens_shot():
    hard = SURFACES[SurfaceType.HARD]
    vx, vy = launch_velocity(ShotParameters(force=200, angle=15, spin=0))
    ball = _ball(court.LAUNCH_X, court.LAUNCH_Y, vx, vy)

    _, plain = simulate(ball, hard, air_drag=0.0, net_noise=0.0)
    _, dragged = simulate(ball, hard, air_drag=0.0012, net_noise=0.0)
    x_plain = next(e.x for e in plain if isinstance(e, BounceEvent))
    x_dragged = next(e.x for e in dragged if isinstance(e, BounceEvent))
    assert x_dragged < x_plain


def test_simulate_leaves_initial_state_alone():
    ball = _ball()
    simulate(ball, SURFACES[SurfaceType.CLAY], max_time=1.0)
    assert ball.y == 2.0
    assert ball.elapsed == 0.0
    assert len(ball.trajectory) == 1


def test_telemetry_is_a_snapshot():
    ball = _ball()
    tel = Telemetry.of(SurfaceType.CLAY, ball)
    advance(ball, 0.01, air_drag=0.0)

    assert tel.position == (court.DROP_X, 2.0)
    assert len(tel.trajectory) == 1
    assert len(ball.trajectory) == 2


def _into_net(seed, noise=court.NET_DEFLECTION_NOISE):
    ball = _ball(x=court.NET_X - 0.05, y=0.5, vx=10.0, vy=-1.0)
    before = ball.copy()
    advance(before, 0.01, air_drag=0.0)
    step(ball, SURFACES[SurfaceType.HARD], 0.01, air_drag=0.0,
         rng=random.Random(seed), net_noise=noise)
    return ball, before.vy


def test_net_deflection_within_noise():
    """Net hit adds at most +-0.15 m/s to the damped vertical speed."""
    deflected = set()
    for seed in range(25):
        ball, vy_before = _into_net(seed)
        assert abs(ball.vy - 0.2 * vy_before) <= court.NET_DEFLECTION_NOISE + 1e-9
        deflected.add(ball.vy)
    assert len(deflected) > 1


def test_net_deflection_repeatable_with_seed():
    a, _ = _into_net(42)
    b, _ = _into_net(42)
    assert a.vy == b.vy


def test_magnus_off_for_slow_ball():
    """Below 0.1 m/s even 9000 RPM adds nothing; above it the spin bends the path."""
    slow_spin = _ball(x=2.0, vx=0.05, spin=9000.0)
    slow_flat = _ball(x=2.0, vx=0.05)
    advance(slow_spin, 0.001, air_drag=0.0)
    advance(slow_flat, 0.001, air_drag=0.0)
    assert slow_spin.vy == slow_flat.vy

    fast_spin = _ball(x=2.0, vx=5.0, spin=9000.0)
    fast_flat = _ball(x=2.0, vx=5.0)
    advance(fast_spin, 0.001, air_drag=0.0)
    advance(fast_flat, 0.001, air_drag=0.0)
    assert fast_spin.vy < fast_flat.vy


def test_bounce_apexes_between_contacts():
    heights = [2.0, 1.0, -0.01, 0.4, 0.9, 0.5, -0.02, 0.3, 0.0]
    samples = [TrajectorySample(i * 0.1, h) for i, h in enumerate(heights)]
    assert bounce_apexes(samples) == [0.9, 0.3]


def test_simulate_without_rng_leaves_global_random_alone():
    random.seed(5)
    expected = random.random()

    random.seed(5)
    ball = _ball(x=court.NET_X - 1.0, y=0.5, vx=10.0)
    _, events = simulate(ball, SURFACES[SurfaceType.HARD], max_time=0.5)
    assert any(isinstance(e, NetEvent) for e in events)
    assert random.random() == expected
