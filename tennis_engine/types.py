"""Core data types for the tennis court simulation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from tennis_engine import court


class SurfaceType(Enum):
    """The four courts the simulator compares."""
    CLAY = "clay"      # Roland Garros -- slower, higher bounce
    GRASS = "grass"    # Wimbledon -- faster, lower bounce
    HARD = "hard"      # US Open -- medium speed, consistent bounce
    BLACK = "black"    # Laver Cup -- special hard court


@dataclass(frozen=True)
class SurfaceProfile:
    """Physical constants of one court surface.

    Attributes:
        type: Which court this is.
        name: Display name.
        restitution: Coefficient of restitution e, ratio of rebound to
            incoming vertical speed.
        friction: Surface friction. Only used by the bounce when
            ``SimConfig.friction_on_bounce`` is enabled.
        color: Court colour (RGB) for renderers.
        ball_color: Ball/trace colour (RGB) for renderers.
    """
    type: SurfaceType
    name: str
    restitution: float
    friction: float
    color: tuple = (0, 0, 0)
    ball_color: tuple = (255, 255, 255)

    @property
    def label(self) -> str:
        return self.type.value.capitalize()


SURFACES = {
    SurfaceType.CLAY: SurfaceProfile(
        SurfaceType.CLAY, "Roland Garros (Clay)", 0.75, 0.6,
        color=(209, 133, 77), ball_color=(255, 204, 0),
    ),
    SurfaceType.GRASS: SurfaceProfile(
        SurfaceType.GRASS, "Wimbledon (Grass)", 0.70, 0.4,
        color=(51, 153, 51), ball_color=(0, 255, 0),
    ),
    SurfaceType.HARD: SurfaceProfile(
        SurfaceType.HARD, "US Open (Hard Court)", 0.73, 0.5,
        color=(51, 102, 178), ball_color=(255, 77, 77),
    ),
    SurfaceType.BLACK: SurfaceProfile(
        SurfaceType.BLACK, "Laver Cup (Black Court)", 0.72, 0.5,
        color=(38, 38, 38), ball_color=(255, 255, 255),
    ),
}


class Lifecycle(Enum):
    """Whether a ball is still being integrated."""
    FLYING = "flying"
    AT_REST = "at_rest"
    OUT_OF_BOUNDS = "out_of_bounds"


@dataclass(frozen=True)
class ShotParameters:
    """Force (N), elevation angle (degrees) and spin (RPM, + = topspin)."""
    force: float
    angle: float
    spin: float


@dataclass(frozen=True)
class TrajectorySample:
    """Height of the ball at a point in time."""
    t: float
    height: float


@dataclass(frozen=True)
class BounceMark:
    """A recorded ground contact (height is always 0)."""
    t: float
    height: float = 0.0


@dataclass(frozen=True)
class TrajectoryPoint:
    """Position of the ball at a point in time, for side-view trails."""
    t: float
    x: float
    y: float


@dataclass
class BallState:
    """Kinematic state of one ball plus its trajectory and bounce history."""
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    spin: float = 0.0  # RPM
    elapsed: float = 0.0
    bounce_count: int = 0
    lifecycle: Lifecycle = Lifecycle.FLYING
    trajectory: list = field(default_factory=list)  # list[TrajectorySample]
    path: list = field(default_factory=list)        # list[TrajectoryPoint]
    bounces: list = field(default_factory=list)     # list[BounceMark]

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def velocity(self) -> tuple[float, float]:
        return (self.vx, self.vy)

    @property
    def speed(self) -> float:
        return (self.vx**2 + self.vy**2) ** 0.5

    def reset(
        self,
        x: float = 0.0,
        y: float = 0.0,
        vx: float = 0.0,
        vy: float = 0.0,
        spin: float = 0.0,
    ) -> None:
        """Put the ball back at the start of a flight and drop all history."""
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.spin = spin
        self.elapsed = 0.0
        self.bounce_count = 0
        self.lifecycle = Lifecycle.FLYING
        self.trajectory = [TrajectorySample(0.0, y)]
        self.path = [TrajectoryPoint(0.0, x, y)]
        self.bounces = []

    def copy(self) -> "BallState":
        return BallState(
            x=self.x,
            y=self.y,
            vx=self.vx,
            vy=self.vy,
            spin=self.spin,
            elapsed=self.elapsed,
            bounce_count=self.bounce_count,
            lifecycle=self.lifecycle,
            trajectory=list(self.trajectory),
            path=list(self.path),
            bounces=list(self.bounces),
        )


@dataclass(frozen=True)
class Telemetry:
    """Read-only snapshot of a ball, handed to renderers and reports."""
    surface: SurfaceType
    position: tuple
    velocity: tuple
    spin: float
    elapsed: float
    bounce_count: int
    lifecycle: Lifecycle
    trajectory: tuple  # tuple[TrajectorySample, ...]
    path: tuple        # tuple[TrajectoryPoint, ...]
    bounces: tuple     # tuple[BounceMark, ...]

    @classmethod
    def of(cls, surface: SurfaceType, ball: BallState) -> "Telemetry":
        return cls(
            surface=surface,
            position=ball.position,
            velocity=ball.velocity,
            spin=ball.spin,
            elapsed=ball.elapsed,
            bounce_count=ball.bounce_count,
            lifecycle=ball.lifecycle,
            trajectory=tuple(ball.trajectory),
            path=tuple(ball.path),
            bounces=tuple(ball.bounces),
        )


@dataclass
class NetEvent:
    """The ball struck the net below the top of the tape."""
    t: float
    height: float


@dataclass
class BounceEvent:
    """A ground contact."""
    t: float
    x: float
    number: int  # 1-based bounce count after this contact
    rebound: float  # vertical speed after the bounce


@dataclass
class RestEvent:
    """The ball stopped bouncing."""
    t: float
    x: float


@dataclass
class OutEvent:
    """The ball left the court past a baseline."""
    t: float
    x: float


@dataclass(frozen=True)
class DropComparison:
    """All four courts active: drop a ball on each from the same height."""
    height: float = court.DROP_HEIGHT


@dataclass(frozen=True)
class RallyMode:
    """One court active: launched shots, player returns, automatic relaunch."""
    surface: SurfaceType = SurfaceType.CLAY


ViewMode = Union[DropComparison, RallyMode]
