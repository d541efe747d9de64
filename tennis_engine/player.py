"""Receiving player -- movement, ball contact and the return-shot hand-off.

When the ball reaches the player the shot is paused and an external
return-shot collaborator (a dialog, a script) is asked synchronously for
the human's force, angle and spin. The collaborator either accepts a
validated ``ShotParameters`` or cancels; the ball is re-injected
accordingly and the shot resumes.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Union

from tennis_engine import court
from tennis_engine.config import SimConfig
from tennis_engine.lifecycle import Shot, ShotPhase
from tennis_engine.types import BallState, Lifecycle, ShotParameters

logger = logging.getLogger(__name__)


class InvalidReturnShot(ValueError):
    """Return-shot input outside the accepted ranges."""


@dataclass(frozen=True)
class Accepted:
    """The player chose a return shot."""
    params: ShotParameters


@dataclass(frozen=True)
class Cancelled:
    """The player dismissed the return-shot prompt."""


CANCELLED = Cancelled()

ReturnOutcome = Union[Accepted, Cancelled]


class ReturnShotProvider(Protocol):
    """Anything that can ask for a return shot and block until it has one."""

    def request_return_shot(self, defaults: ShotParameters) -> ReturnOutcome:
        ...


def validate_return_shot(
    force: float,
    angle: float,
    spin: float,
    config: Optional[SimConfig] = None,
) -> ShotParameters:
    """Check return-shot values against the configured ranges.

    Out-of-range values are rejected, never clamped.

    Raises:
        InvalidReturnShot: naming the first offending field.
    """
    config = config or SimConfig()
    if not config.min_force <= force <= config.max_force:
        raise InvalidReturnShot(
            f"Force must be between {config.min_force:g} and {config.max_force:g} N"
        )
    if not config.min_angle <= angle <= config.max_angle:
        raise InvalidReturnShot(
            f"Angle must be between {config.min_angle:g} and {config.max_angle:g} degrees"
        )
    if not config.min_spin <= spin <= config.max_spin:
        raise InvalidReturnShot(
            f"Spin must be between {config.min_spin:g} and {config.max_spin:g} RPM"
        )
    return ShotParameters(force=float(force), angle=float(angle), spin=float(spin))


def parse_return_shot(
    force_text: str,
    angle_text: str,
    spin_text: str,
    config: Optional[SimConfig] = None,
) -> ShotParameters:
    """Parse and validate text entered in a return-shot dialog."""
    values = []
    for label, text in (("Force", force_text), ("Angle", angle_text), ("Spin", spin_text)):
        try:
            value = float(text)
        except ValueError:
            raise InvalidReturnShot(f"{label} must be a number, got {text!r}") from None
        if not math.isfinite(value):
            raise InvalidReturnShot(f"{label} must be a finite number")
        values.append(value)
    return validate_return_shot(*values, config=config)


class ScriptedReturnShots:
    """Return-shot collaborator that replays a fixed list of outcomes.

    Used by tests and headless runs in place of a dialog. Once the script
    is exhausted every request gets ``fallback``.
    """

    def __init__(
        self,
        outcomes: Iterable[ReturnOutcome] = (),
        fallback: ReturnOutcome = CANCELLED,
        config: Optional[SimConfig] = None,
    ):
        self._outcomes = deque(outcomes)
        self.fallback = fallback
        self.config = config or SimConfig()
        self.requests: list[ShotParameters] = []

    def request_return_shot(self, defaults: ShotParameters) -> ReturnOutcome:
        self.requests.append(defaults)
        outcome = self._outcomes.popleft() if self._outcomes else self.fallback
        if isinstance(outcome, Accepted):
            p = outcome.params
            validate_return_shot(p.force, p.angle, p.spin, self.config)
        return outcome


def return_velocity(params: ShotParameters) -> tuple[float, float]:
    """(vx, vy) of a player's return, hit back toward the left baseline."""
    speed = max(
        court.RETURN_MIN_SPEED,
        (params.force / court.RETURN_MAX_FORCE) * court.RETURN_MAX_SPEED,
    )
    rad = math.radians(params.angle)
    return -speed * math.cos(rad), speed * math.sin(rad)


def apply_return_shot(ball: BallState, params: ShotParameters, player_x: float) -> None:
    """Re-inject the ball with the player's chosen return."""
    ball.vx, ball.vy = return_velocity(params)
    ball.spin = params.spin
    ball.x = player_x - court.RETURN_NUDGE


def apply_cancellation(ball: BallState, player_x: float) -> None:
    """Bounce the ball back off the player at half speed."""
    ball.vx = -ball.vx * court.CANCEL_SPEED_FACTOR
    ball.x = player_x - court.RETURN_NUDGE


class PlayerInteractionController:
    """Owns the player position and handles ball-vs-player contact."""

    def __init__(
        self,
        config: SimConfig,
        return_shots: ReturnShotProvider,
        x: float = court.PLAYER_START_X,
    ):
        self.config = config
        self.return_shots = return_shots
        self.x = self._clamp(x)
        self.returns = 0
        self.cancellations = 0
        # Cleared after a contact until the ball has left the contact zone
        self._armed = True

    @staticmethod
    def _clamp(x: float) -> float:
        return max(court.NET_X, min(court.COURT_LENGTH, x))

    def move_left(self, dt: float) -> None:
        """Step toward the net; dt is the raw, unscaled tick."""
        self.x = self._clamp(self.x - self.config.player_speed * dt)

    def move_right(self, dt: float) -> None:
        """Step toward the baseline; dt is the raw, unscaled tick."""
        self.x = self._clamp(self.x + self.config.player_speed * dt)

    def reset(self) -> None:
        self.x = self._clamp(court.PLAYER_START_X)
        self._armed = True

    def check_collision(self, ball: BallState, player_x: Optional[float] = None) -> bool:
        """Whether a flying ball is touching the player."""
        if ball.lifecycle is not Lifecycle.FLYING:
            return False
        px = self.x if player_x is None else player_x
        return (
            abs(ball.x - px) <= court.BALL_RADIUS + court.PLAYER_RADIUS
            and 0.0 <= ball.y <= court.PLAYER_REACH_HEIGHT
        )

    def defaults(self) -> ShotParameters:
        return ShotParameters(
            force=self.config.default_force,
            angle=self.config.default_angle,
            spin=self.config.default_spin,
        )

    def interact(self, shot: Shot) -> bool:
        """Pause the shot and ask for a return if the ball reached the player.

        Blocks on the return-shot collaborator. The shot is resumed before
        returning whatever the outcome.

        Returns:
            True if a contact was handled this tick.
        """
        if shot.phase is not ShotPhase.FLYING:
            return False

        ball = shot.ball
        if not self.check_collision(ball):
            self._armed = True
            return False
        if not self._armed:
            return False
        self._armed = False

        shot.pause()
        try:
            outcome = self.return_shots.request_return_shot(self.defaults())
            if isinstance(outcome, Accepted):
                apply_return_shot(ball, outcome.params, self.x)
                self.returns += 1
                logger.info(
                    f"Return on {shot.surface.label}: force={outcome.params.force:g}N "
                    f"angle={outcome.params.angle:g}deg spin={outcome.params.spin:g}rpm"
                )
            else:
                apply_cancellation(ball, self.x)
                self.cancellations += 1
                logger.info(f"Return cancelled on {shot.surface.label}, ball knocked back")
        finally:
            shot.resume()
        return True
