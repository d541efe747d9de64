"""Shot lifecycle -- one ball on one surface, from launch to relaunch.

    IDLE --launch--> FLYING --(at rest | out of bounds)--> WAITING_TO_RELAUNCH
    WAITING_TO_RELAUNCH --timer--> FLYING (new random shot)
    FLYING --pause--> PAUSED --resume--> FLYING   (player contact)
    FLYING --(at rest | out of bounds)--> SETTLED  (drop test, no relaunch)
    any --reset--> IDLE

Reset and launch both cancel a pending relaunch.
"""

import logging
import random
from enum import Enum
from typing import Optional

from tennis_engine import court, physics
from tennis_engine.config import SimConfig
from tennis_engine.types import (
    BallState,
    Lifecycle,
    NetEvent,
    ShotParameters,
    SurfaceProfile,
    Telemetry,
)

logger = logging.getLogger(__name__)


class ShotPhase(Enum):
    IDLE = "idle"
    FLYING = "flying"
    PAUSED = "paused"
    WAITING_TO_RELAUNCH = "waiting_to_relaunch"
    SETTLED = "settled"


class InvalidTransition(RuntimeError):
    """A lifecycle call that is not valid in the current phase."""


class Shot:
    """A ball played on one surface, driven through the shot lifecycle."""

    def __init__(
        self,
        surface: SurfaceProfile,
        config: Optional[SimConfig] = None,
        rng: Optional[random.Random] = None,
        auto_relaunch: bool = True,
    ):
        """Create an idle shot.

        Args:
            surface: Court the ball plays on. Shared, never modified.
            config: Simulation settings (drag, noise, relaunch delay).
            rng: Random source for relaunch draws and net deflection.
            auto_relaunch: Relaunch a random shot after the ball stops or
                leaves the court. Off for the drop test.
        """
        self.surface = surface
        self.config = config or SimConfig()
        self.rng = rng or random.Random()
        self.auto_relaunch = auto_relaunch

        self.ball = BallState()
        self.ball.reset(court.LAUNCH_X, court.LAUNCH_Y)
        self.phase = ShotPhase.IDLE
        self.last_outcome: Optional[Lifecycle] = None
        self.last_params: Optional[ShotParameters] = None
        self.relaunch_timer: Optional[float] = None
        self.launches = 0
        self.net_hits = 0

    def __repr__(self) -> str:
        return f"Shot({self.surface.label}, {self.phase.value})"

    @property
    def relaunch_pending(self) -> bool:
        return self.relaunch_timer is not None

    def launch(self, params: ShotParameters) -> None:
        """Start a new flight from the launch point."""
        if self.phase is ShotPhase.PAUSED:
            raise InvalidTransition("Cannot launch while waiting for a return shot")
        self.relaunch_timer = None
        vx, vy = physics.launch_velocity(params)
        self.ball.reset(court.LAUNCH_X, court.LAUNCH_Y, vx, vy, params.spin)
        self.phase = ShotPhase.FLYING
        self.last_outcome = None
        self.last_params = params
        self.launches += 1
        logger.debug(
            f"{self.surface.label}: launch force={params.force:g}N "
            f"angle={params.angle:g}deg spin={params.spin:g}rpm"
        )

    def drop(self, height: float = court.DROP_HEIGHT) -> None:
        """Release the ball from rest at the given height (drop test)."""
        if self.phase is ShotPhase.PAUSED:
            raise InvalidTransition("Cannot drop while waiting for a return shot")
        self.relaunch_timer = None
        self.ball.reset(court.DROP_X, height)
        self.phase = ShotPhase.FLYING
        self.last_outcome = None
        self.last_params = None

    def reset(self) -> None:
        """Back to IDLE with a clean ball; cancels any pending relaunch."""
        self.relaunch_timer = None
        self.ball.reset(court.LAUNCH_X, court.LAUNCH_Y)
        self.phase = ShotPhase.IDLE
        self.last_outcome = None
        self.last_params = None

    def pause(self) -> None:
        if self.phase is not ShotPhase.FLYING:
            raise InvalidTransition(f"Cannot pause a shot that is {self.phase.value}")
        self.phase = ShotPhase.PAUSED

    def resume(self) -> None:
        if self.phase is not ShotPhase.PAUSED:
            raise InvalidTransition(f"Cannot resume a shot that is {self.phase.value}")
        self.phase = ShotPhase.FLYING

    def update(self, dt: float) -> list:
        """Integrate and collide for one ball step (FLYING only)."""
        if self.phase is not ShotPhase.FLYING:
            return []
        events = physics.step(
            self.ball,
            self.surface,
            dt,
            self.config.air_drag,
            rng=self.rng,
            net_noise=self.config.net_noise,
            friction_on_bounce=self.config.friction_on_bounce,
        )
        self.net_hits += sum(1 for e in events if isinstance(e, NetEvent))
        return events

    def observe(self) -> bool:
        """Leave FLYING once the ball has stopped or left the court.

        Returns:
            True if the shot changed phase.
        """
        if self.phase is not ShotPhase.FLYING or self.ball.lifecycle is Lifecycle.FLYING:
            return False

        self.last_outcome = self.ball.lifecycle
        if self.auto_relaunch:
            self.phase = ShotPhase.WAITING_TO_RELAUNCH
            self.relaunch_timer = self.config.relaunch_delay
        else:
            self.phase = ShotPhase.SETTLED
        logger.info(
            f"{self.surface.label}: ball {self.last_outcome.value} after "
            f"{self.ball.elapsed:.2f}s, {self.ball.bounce_count} bounces"
        )
        return True

    def tick_timer(self, dt: float) -> bool:
        """Count down a pending relaunch; launch a random shot on expiry.

        Returns:
            True if a relaunch happened.
        """
        if self.phase is not ShotPhase.WAITING_TO_RELAUNCH or self.relaunch_timer is None:
            return False
        self.relaunch_timer -= dt
        if self.relaunch_timer > 0:
            return False
        self.launch(self.random_shot())
        return True

    def random_shot(self) -> ShotParameters:
        """Draw a relaunch shot from the configured ranges."""
        return ShotParameters(
            force=self.rng.uniform(*court.RELAUNCH_FORCE_RANGE),
            angle=float(self.rng.randrange(*court.RELAUNCH_ANGLE_RANGE)),
            spin=self.rng.uniform(*court.RELAUNCH_SPIN_RANGE),
        )

    def telemetry(self) -> Telemetry:
        return Telemetry.of(self.surface.type, self.ball)
