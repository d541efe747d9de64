"""One court view: the fixed-step tick loop over the active shots.

Per tick, for every active shot:
  1. count down a pending relaunch
  2. integrate and resolve net/ground/bounds (ball step, scaled by pace)
  3. in rally mode, check the player and possibly block on a return shot
  4. observe whether the ball has stopped or left the court

The view mode decides which shots are active: the drop comparison runs
all four surfaces side by side, a rally runs one.
"""

import logging
import random
from typing import Optional

from tennis_engine.config import SimConfig
from tennis_engine.lifecycle import Shot, ShotPhase
from tennis_engine.player import (
    PlayerInteractionController,
    ReturnShotProvider,
    ScriptedReturnShots,
)
from tennis_engine.types import (
    SURFACES,
    DropComparison,
    RallyMode,
    ShotParameters,
    SurfaceType,
    Telemetry,
    ViewMode,
)

logger = logging.getLogger(__name__)


class Simulation:
    """Owns every ball, the player and the clock for one court view."""

    def __init__(
        self,
        config: Optional[SimConfig] = None,
        return_shots: Optional[ReturnShotProvider] = None,
        rng: Optional[random.Random] = None,
        mode: ViewMode = DropComparison(),
    ):
        self.config = config or SimConfig()
        self.rng = rng or random.Random()
        # Without a dialog every contact is treated as a cancelled return
        self.return_shots = return_shots or ScriptedReturnShots(config=self.config)
        self.player = PlayerInteractionController(self.config, self.return_shots)
        self.shots = {
            surface_type: Shot(SURFACES[surface_type], self.config, self.rng)
            for surface_type in SurfaceType
        }
        self.mode = mode
        self.started = False
        self.clock = 0.0
        self._apply_mode()

    def _apply_mode(self) -> None:
        relaunch = isinstance(self.mode, RallyMode)
        for shot in self.shots.values():
            shot.auto_relaunch = relaunch
            shot.reset()
        self.player.reset()
        self.started = False
        self.clock = 0.0

    def set_mode(self, mode: ViewMode) -> None:
        """Switch view mode; every shot goes back to IDLE."""
        logger.info(f"Switching mode to {mode}")
        self.mode = mode
        self._apply_mode()

    @property
    def active_shots(self) -> list[Shot]:
        if isinstance(self.mode, RallyMode):
            return [self.shots[self.mode.surface]]
        return [self.shots[t] for t in SurfaceType]

    @property
    def player_enabled(self) -> bool:
        return isinstance(self.mode, RallyMode)

    @property
    def complete(self) -> bool:
        """Drop test finished: every active ball has settled."""
        if isinstance(self.mode, RallyMode):
            return False
        return self.started and all(s.phase is ShotPhase.SETTLED for s in self.active_shots)

    def default_shot(self) -> ShotParameters:
        return ShotParameters(
            force=self.config.default_force,
            angle=self.config.default_angle,
            spin=self.config.default_spin,
        )

    def start(self, params: Optional[ShotParameters] = None) -> None:
        """Drop every ball (drop test) or launch the rally shot."""
        self.reset()
        if isinstance(self.mode, RallyMode):
            self.shots[self.mode.surface].launch(params or self.default_shot())
        else:
            for shot in self.active_shots:
                shot.drop(self.mode.height)
        self.started = True
        logger.info(f"Simulation started in {self.mode}")

    def reset(self) -> None:
        for shot in self.shots.values():
            shot.reset()
        self.player.reset()
        self.started = False
        self.clock = 0.0

    def tick(self, dt: Optional[float] = None) -> list:
        """Advance the simulation by one fixed step.

        Args:
            dt: Raw tick length in seconds, defaults to the configured step.
                The ball step is ``dt * visual_pace``; relaunch timers run on
                the raw step.

        Returns:
            Physics events raised this tick.
        """
        if not self.started:
            return []

        dt = self.config.dt if dt is None else dt
        ball_dt = dt * self.config.pace
        self.clock += dt

        events = []
        for shot in self.active_shots:
            shot.tick_timer(dt)
            events.extend(shot.update(ball_dt))
            if self.player_enabled:
                self.player.interact(shot)
            shot.observe()
        return events

    def run(self, duration: float, dt: Optional[float] = None) -> list:
        """Tick headlessly for ``duration`` seconds of raw clock."""
        dt = self.config.dt if dt is None else dt
        events = []
        for _ in range(int(round(duration / dt))):
            events.extend(self.tick(dt))
            if self.complete:
                break
        return events

    def move_player_left(self, dt: Optional[float] = None) -> None:
        self.player.move_left(self.config.dt if dt is None else dt)

    def move_player_right(self, dt: Optional[float] = None) -> None:
        self.player.move_right(self.config.dt if dt is None else dt)

    def telemetry(self) -> dict[SurfaceType, Telemetry]:
        return {shot.surface.type: shot.telemetry() for shot in self.active_shots}
