"""Text-mode collaborators: a stdin return-shot dialog and headless reports."""

import random
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from tennis_engine import court
from tennis_engine.config import SimConfig
from tennis_engine.lifecycle import ShotPhase
from tennis_engine.physics import bounce_apexes
from tennis_engine.player import (
    CANCELLED,
    Accepted,
    InvalidReturnShot,
    ReturnOutcome,
    ReturnShotProvider,
    parse_return_shot,
)
from tennis_engine.simulation import Simulation
from tennis_engine.types import (
    SURFACES,
    BounceEvent,
    DropComparison,
    NetEvent,
    OutEvent,
    RallyMode,
    RestEvent,
    ShotParameters,
    SurfaceType,
)

CANCEL_WORDS = ("c", "q", "cancel", "quit")


class ConsoleReturnShotDialog:
    """Ask for a return shot on the terminal, re-prompting until it is valid."""

    def __init__(
        self,
        config: Optional[SimConfig] = None,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.config = config or SimConfig()
        self.input_fn = input_fn
        self.output_fn = output_fn

    def _ask(self, label: str, default: float, unit: str) -> Optional[str]:
        answer = self.input_fn(f"  {label} [{default:g} {unit}]: ").strip()
        if answer.lower() in CANCEL_WORDS:
            return None
        return answer or f"{default:g}"

    def request_return_shot(self, defaults: ShotParameters) -> ReturnOutcome:
        c = self.config
        self.output_fn(
            f"Ball reached the player. Enter return shot "
            f"(force {c.min_force:g}-{c.max_force:g} N, angle {c.min_angle:g}-{c.max_angle:g} deg, "
            f"spin {c.min_spin:g}-{c.max_spin:g} RPM; 'c' cancels)"
        )
        while True:
            force = self._ask("Force", defaults.force, "N")
            if force is None:
                return CANCELLED
            angle = self._ask("Angle", defaults.angle, "deg")
            if angle is None:
                return CANCELLED
            spin = self._ask("Spin", defaults.spin, "RPM")
            if spin is None:
                return CANCELLED
            try:
                return Accepted(parse_return_shot(force, angle, spin, self.config))
            except InvalidReturnShot as e:
                self.output_fn(f"  Invalid shot: {e}. Try again.")


@dataclass
class DropRow:
    """Drop-test summary for one surface."""
    surface: SurfaceType
    first_bounce_t: Optional[float]
    bounces: int
    rest_t: Optional[float]
    apexes: list = field(default_factory=list)


def drop_report(
    config: Optional[SimConfig] = None,
    height: float = court.DROP_HEIGHT,
    max_time: float = 30.0,
) -> list[DropRow]:
    """Run the four-court drop test headlessly and summarise each ball.

    Always runs at pace 1 so ``max_time`` is ball time.
    """
    config = replace(config or SimConfig(), visual_pace=1.0)
    sim = Simulation(config, mode=DropComparison(height), rng=random.Random(0))
    sim.start()
    sim.run(max_time)

    rows = []
    for surface_type in SurfaceType:
        shot = sim.shots[surface_type]
        ball = shot.ball
        rows.append(DropRow(
            surface=surface_type,
            first_bounce_t=ball.bounces[0].t if ball.bounces else None,
            bounces=ball.bounce_count,
            rest_t=ball.elapsed if shot.phase is ShotPhase.SETTLED else None,
            apexes=bounce_apexes(ball.trajectory)[:court.MAX_RECORDED_BOUNCES],
        ))
    return rows


@dataclass
class RallySummary:
    """What happened during a headless rally."""
    surface: SurfaceType
    duration: float
    launches: int
    returns: int
    cancellations: int
    net_hits: int
    bounces: int
    rests: int
    outs: int


def run_rally(
    config: Optional[SimConfig] = None,
    return_shots: Optional[ReturnShotProvider] = None,
    surface: SurfaceType = SurfaceType.CLAY,
    duration: float = 20.0,
    rng: Optional[random.Random] = None,
) -> RallySummary:
    """Play shots on one court for ``duration`` seconds of clock."""
    config = config or SimConfig()
    sim = Simulation(config, return_shots=return_shots, rng=rng, mode=RallyMode(surface))
    sim.start()
    events = sim.run(duration)
    shot = sim.shots[surface]
    return RallySummary(
        surface=surface,
        duration=sim.clock,
        launches=shot.launches,
        returns=sim.player.returns,
        cancellations=sim.player.cancellations,
        net_hits=sum(1 for e in events if isinstance(e, NetEvent)),
        bounces=sum(1 for e in events if isinstance(e, BounceEvent)),
        rests=sum(1 for e in events if isinstance(e, RestEvent)),
        outs=sum(1 for e in events if isinstance(e, OutEvent)),
    )


def format_drop_report(rows: list[DropRow]) -> str:
    lines = [f"  {'Court':24s} {'1st bounce':>10s} {'Bounces':>8s} {'At rest':>8s}  Apexes (m)"]
    for row in rows:
        first = f"{row.first_bounce_t:.3f}s" if row.first_bounce_t is not None else "-"
        rest = f"{row.rest_t:.2f}s" if row.rest_t is not None else "-"
        apexes = ", ".join(f"{a:.2f}" for a in row.apexes)
        lines.append(
            f"  {SURFACES[row.surface].name:24s} {first:>10s} {row.bounces:>8d} {rest:>8s}  {apexes}"
        )
    return "\n".join(lines)
