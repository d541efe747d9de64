"""Ball physics -- gravity, Magnus curvature, air drag, net strikes, bounces.

Integration is semi-implicit Euler: velocities are updated first and the
position step uses the updated velocities. Collision checks run after each
integration step, net before ground, then the out-of-bounds check.
"""

import math
import random
from typing import Optional, Union

from tennis_engine import court
from tennis_engine.types import (
    BallState,
    BounceEvent,
    BounceMark,
    Lifecycle,
    NetEvent,
    OutEvent,
    RestEvent,
    ShotParameters,
    SurfaceProfile,
    TrajectoryPoint,
    TrajectorySample,
)

Event = Union[NetEvent, BounceEvent, RestEvent, OutEvent]


def _magnus_accel(vx: float, vy: float, spin_rpm: float) -> float:
    """Downward acceleration from spin (negative for backspin lift)."""
    speed = math.hypot(vx, vy)
    if speed <= court.MAGNUS_MIN_SPEED:
        return 0.0
    omega = spin_rpm * court.RPM_TO_RAD_S
    return court.MAGNUS_COEFFICIENT * omega * speed / court.BALL_MASS


def _drag_accel(vx: float, air_drag: float) -> float:
    return -air_drag * vx * abs(vx) / court.BALL_MASS


def launch_velocity(params: ShotParameters) -> tuple[float, float]:
    """Initial (vx, vy) for a launched shot.

    Force and angle come from trusted configuration, so they are clamped
    here rather than rejected.
    """
    force = max(0.0, min(court.LAUNCH_MAX_FORCE, params.force))
    angle = max(0.0, min(court.LAUNCH_MAX_ANGLE, params.angle))
    speed = force * court.LAUNCH_SPEED_SCALE
    rad = math.radians(angle)
    return speed * math.cos(rad), speed * math.sin(rad)


def advance(ball: BallState, dt: float, air_drag: float) -> None:
    """Advance a flying ball by one time step, in place."""
    if ball.lifecycle is not Lifecycle.FLYING:
        return

    ball.elapsed += dt

    ball.vy -= court.GRAVITY * dt
    # Topspin pulls the ball down, backspin holds it up
    ball.vy -= _magnus_accel(ball.vx, ball.vy, ball.spin) * dt
    ball.vx += _drag_accel(ball.vx, air_drag) * dt

    ball.y += ball.vy * dt
    ball.x += ball.vx * dt

    ball.trajectory.append(TrajectorySample(ball.elapsed, ball.y))
    ball.path.append(TrajectoryPoint(ball.elapsed, ball.x, ball.y))


def resolve_net(
    ball: BallState,
    prev_x: float,
    prev_y: float,
    rng: Optional[random.Random] = None,
    noise: float = court.NET_DEFLECTION_NOISE,
) -> bool:
    """Check whether this step's straight-line path ran into the net.

    The crossing height is interpolated between the pre-step and post-step
    positions. A ball that clears the tape is left untouched. A ball that
    hits the net keeps 20% of its velocity and spin and dribbles on in the
    same direction.

    Returns:
        True if the ball struck the net.
    """
    crossed = (prev_x < court.NET_X <= ball.x) or (prev_x > court.NET_X >= ball.x)
    if not crossed:
        return False

    t = (court.NET_X - prev_x) / (ball.x - prev_x)
    y_collision = prev_y + t * (ball.y - prev_y)
    if y_collision > court.NET_HEIGHT + court.BALL_RADIUS:
        return False

    ball.x = court.NET_X
    ball.y = y_collision

    keep = 1.0 - court.NET_ABSORPTION
    ball.vx *= keep
    ball.vy *= keep
    ball.spin *= keep

    if noise > 0:
        ball.vy += (rng or random.Random()).uniform(-noise, noise)

    # Soft hit: the ball falls straight down the net
    if abs(ball.vx) < court.NET_DROP_SPEED and abs(ball.vy) < court.NET_DROP_SPEED:
        ball.vx = 0.0

    return True


def resolve_ground(
    ball: BallState,
    surface: SurfaceProfile,
    friction_on_bounce: bool = False,
) -> bool:
    """Bounce the ball off the court if it has reached the surface.

    Restitution scales the rebound. Horizontal speed is damped by a fixed
    rolling factor (or by the surface friction when ``friction_on_bounce``
    is set), spin gives a forward kick and then decays.

    Returns:
        True if the ball touched the ground this step.
    """
    if ball.y > 0.0:
        return False

    ball.y = 0.0

    if ball.bounce_count < court.MAX_RECORDED_BOUNCES:
        ball.bounces.append(BounceMark(ball.elapsed, 0.0))

    ball.vy = -ball.vy * surface.restitution

    if friction_on_bounce:
        ball.vx *= 1.0 - surface.friction
    else:
        ball.vx *= court.ROLLING_DAMPING
    ball.vx += (ball.spin / court.SPIN_KICK_DIVISOR) * court.SPIN_KICK_GAIN
    ball.spin *= court.BOUNCE_SPIN_DECAY

    ball.bounce_count += 1

    if abs(ball.vy) < court.REST_SPEED or ball.bounce_count > court.MAX_BOUNCES:
        ball.lifecycle = Lifecycle.AT_REST
        ball.vx = 0.0
        ball.vy = 0.0

    return True


def check_out_of_bounds(ball: BallState) -> bool:
    """Mark the ball out of play once it passes either baseline."""
    if ball.lifecycle is not Lifecycle.FLYING:
        return False
    if ball.x < 0.0 or ball.x > court.COURT_LENGTH:
        ball.lifecycle = Lifecycle.OUT_OF_BOUNDS
        return True
    return False


def step(
    ball: BallState,
    surface: SurfaceProfile,
    dt: float,
    air_drag: float,
    rng: Optional[random.Random] = None,
    net_noise: float = court.NET_DEFLECTION_NOISE,
    friction_on_bounce: bool = False,
) -> list[Event]:
    """Run one full tick: integrate, then net, ground and bounds checks."""
    events: list[Event] = []
    if ball.lifecycle is not Lifecycle.FLYING:
        return events

    prev_x, prev_y = ball.x, ball.y
    advance(ball, dt, air_drag)

    if resolve_net(ball, prev_x, prev_y, rng=rng, noise=net_noise):
        events.append(NetEvent(t=ball.elapsed, height=ball.y))

    if resolve_ground(ball, surface, friction_on_bounce=friction_on_bounce):
        events.append(BounceEvent(
            t=ball.elapsed, x=ball.x, number=ball.bounce_count, rebound=ball.vy,
        ))
        if ball.lifecycle is Lifecycle.AT_REST:
            events.append(RestEvent(t=ball.elapsed, x=ball.x))

    if check_out_of_bounds(ball):
        events.append(OutEvent(t=ball.elapsed, x=ball.x))

    return events


def simulate(
    initial_state: BallState,
    surface: SurfaceProfile,
    dt: float = 1.0 / court.TICK_RATE,
    max_time: float = 10.0,
    air_drag: float = 0.0,
    rng: Optional[random.Random] = None,
    net_noise: float = court.NET_DEFLECTION_NOISE,
    friction_on_bounce: bool = False,
) -> tuple[BallState, list[Event]]:
    """Run a ball on one surface until it stops, leaves the court or time runs out.

    The initial state is not modified. Returns the final state (whose
    ``trajectory``, ``path`` and ``bounces`` hold the full history) and
    every event raised along the way.
    """
    state = initial_state.copy()
    rng = rng or random.Random()
    all_events: list[Event] = []
    steps = int(max_time / dt)

    for _ in range(steps):
        if state.lifecycle is not Lifecycle.FLYING:
            break
        all_events.extend(step(
            state, surface, dt, air_drag,
            rng=rng, net_noise=net_noise, friction_on_bounce=friction_on_bounce,
        ))

    return state, all_events


def bounce_apexes(samples) -> list[float]:
    """Peak height reached between consecutive ground contacts.

    ``samples`` is a trajectory of ``TrajectorySample``; a contact is any
    sample at or below the ground.
    """
    apexes = []
    peak = 0.0
    after_contact = False
    for sample in samples:
        if sample.height <= 0.0:
            if after_contact and peak > 0.0:
                apexes.append(peak)
            after_contact = True
            peak = 0.0
        elif after_contact:
            peak = max(peak, sample.height)
    return apexes
