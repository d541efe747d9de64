"""Pygame visualizer -- four-court drop comparison and single-court rally view."""

from typing import Callable, Optional

import pygame

from tennis_engine import court
from tennis_engine.config import SimConfig
from tennis_engine.lifecycle import ShotPhase
from tennis_engine.player import (
    CANCELLED,
    Accepted,
    InvalidReturnShot,
    ReturnOutcome,
    parse_return_shot,
)
from tennis_engine.simulation import Simulation
from tennis_engine.types import (
    SURFACES,
    DropComparison,
    Lifecycle,
    RallyMode,
    ShotParameters,
    SurfaceType,
    Telemetry,
)

WIN_W = 1100
WIN_H = 720

# Colors
BG_COLOR = (12, 12, 22)
LINE_WHITE = (255, 255, 255)
NET_GRAY = (180, 180, 180)
GRID_GRAY = (77, 77, 77)
GRAPH_BG = (26, 26, 26)
BOUNCE_RED = (255, 0, 0)
ACCENT = (233, 69, 96)
CARD_BG = (26, 26, 46)
PANEL_BG = (22, 33, 62)
TEXT_WHITE = (224, 224, 224)
TEXT_DIM = (136, 136, 136)
PLAYER_COLOR = (78, 205, 196)
ERROR_RED = (255, 107, 107)

HEADER_H = 42
GRAPH_RECT = pygame.Rect(10, HEADER_H + 8, WIN_W - 20, 170)
GRAPH_MAX_HEIGHT = 2.5  # meters
FLOOR_Y = WIN_H - 150
COURT_TOP = GRAPH_RECT.bottom + 20
DROP_PX_PER_M = (FLOOR_Y - COURT_TOP - 20) / GRAPH_MAX_HEIGHT
RALLY_MARGIN = 40
RALLY_PX_PER_M = (WIN_W - 2 * RALLY_MARGIN) / court.COURT_LENGTH

SURFACE_KEYS = {
    pygame.K_1: SurfaceType.CLAY,
    pygame.K_2: SurfaceType.GRASS,
    pygame.K_3: SurfaceType.HARD,
    pygame.K_4: SurfaceType.BLACK,
}

FIELD_NAMES = ("Force (N)", "Angle (deg)", "Spin (RPM)")


class PygameReturnShotDialog:
    """Modal return-shot prompt drawn over the frozen court.

    ``request_return_shot`` runs its own event loop and only returns once
    the player accepts a valid shot (ENTER) or cancels (ESC / window close).
    """

    def __init__(
        self,
        screen,
        config: SimConfig,
        redraw: Optional[Callable[[], None]] = None,
    ):
        self.screen = screen
        self.config = config
        self.redraw = redraw
        self.font = pygame.font.SysFont("monospace", 16)
        self.font_title = pygame.font.SysFont("monospace", 18, bold=True)

    def _steps(self) -> tuple[float, float, float]:
        return (self.config.force_step, self.config.angle_step, self.config.spin_step)

    def request_return_shot(self, defaults: ShotParameters) -> ReturnOutcome:
        values = [f"{defaults.force:g}", f"{defaults.angle:g}", f"{defaults.spin:g}"]
        active = 0
        error = ""
        clock = pygame.time.Clock()

        while True:
            clock.tick(30)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    # Let the main loop see the close request too
                    pygame.event.post(pygame.event.Event(pygame.QUIT))
                    return CANCELLED
                if event.type != pygame.KEYDOWN:
                    continue
                if event.key == pygame.K_ESCAPE:
                    return CANCELLED
                elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    try:
                        return Accepted(parse_return_shot(*values, config=self.config))
                    except InvalidReturnShot as e:
                        error = str(e)
                elif event.key == pygame.K_TAB:
                    shift = event.mod & pygame.KMOD_SHIFT
                    active = (active + (-1 if shift else 1)) % len(values)
                elif event.key in (pygame.K_UP, pygame.K_DOWN):
                    step = self._steps()[active]
                    if event.key == pygame.K_DOWN:
                        step = -step
                    try:
                        values[active] = f"{float(values[active]) + step:g}"
                        error = ""
                    except ValueError:
                        error = f"{FIELD_NAMES[active]} is not a number"
                elif event.key == pygame.K_BACKSPACE:
                    values[active] = values[active][:-1]
                elif event.unicode and event.unicode in "0123456789.-":
                    values[active] += event.unicode

            if self.redraw:
                self.redraw()
            self._draw(values, active, error)
            pygame.display.flip()

    def _draw(self, values, active, error):
        w, h = 460, 220
        box = pygame.Rect((WIN_W - w) // 2, (WIN_H - h) // 2, w, h)
        shade = pygame.Surface((WIN_W, WIN_H), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 140))
        self.screen.blit(shade, (0, 0))
        pygame.draw.rect(self.screen, CARD_BG, box)
        pygame.draw.rect(self.screen, ACCENT, box, 2)

        x, y = box.x + 20, box.y + 16
        self.screen.blit(self.font_title.render("RETURN SHOT", True, ACCENT), (x, y))
        y += 34
        c = self.config
        ranges = (
            f"{c.min_force:g}..{c.max_force:g}",
            f"{c.min_angle:g}..{c.max_angle:g}",
            f"{c.min_spin:g}..{c.max_spin:g}",
        )
        for i, (name, value, rng) in enumerate(zip(FIELD_NAMES, values, ranges)):
            color = LINE_WHITE if i == active else TEXT_DIM
            cursor = "_" if i == active else ""
            self.screen.blit(self.font.render(f"{name:12s} {value}{cursor}", True, color), (x, y))
            self.screen.blit(self.font.render(rng, True, TEXT_DIM), (box.right - 150, y))
            y += 26
        if error:
            self.screen.blit(self.font.render(error, True, ERROR_RED), (x, y + 4))
        hint = "TAB field  UP/DOWN step  ENTER hit  ESC cancel"
        self.screen.blit(self.font.render(hint, True, TEXT_DIM), (x, box.bottom - 26))


def _graph_point(t, height, max_time):
    gx = GRAPH_RECT.x + (t / max_time) * GRAPH_RECT.width
    top = GRAPH_RECT.y + 24
    plot_h = GRAPH_RECT.height - 34
    gy = top + plot_h - (height / GRAPH_MAX_HEIGHT) * plot_h
    return int(gx), int(max(top, min(top + plot_h, gy)))


def _draw_combined_graph(screen, telemetry: dict, font):
    """Height vs time for every active ball, with legend."""
    pygame.draw.rect(screen, GRAPH_BG, GRAPH_RECT)
    pygame.draw.rect(screen, LINE_WHITE, GRAPH_RECT, 1)
    screen.blit(font.render("Height vs Time", True, LINE_WHITE), (GRAPH_RECT.x + 5, GRAPH_RECT.y + 5))

    top = GRAPH_RECT.y + 24
    plot_h = GRAPH_RECT.height - 34
    for i in range(6):
        gy = top + plot_h * i // 5
        pygame.draw.line(screen, GRID_GRAY, (GRAPH_RECT.x, gy), (GRAPH_RECT.right, gy), 1)

    max_time = max((tel.elapsed for tel in telemetry.values()), default=0.0)
    if max_time < 0.1:
        max_time = 1.0

    for i, (surface_type, tel) in enumerate(telemetry.items()):
        color = SURFACES[surface_type].ball_color
        if len(tel.trajectory) > 1:
            step = max(1, len(tel.trajectory) // 1000)
            pts = [_graph_point(s.t, s.height, max_time) for s in tel.trajectory[::step]]
            pygame.draw.lines(screen, color, False, pts, 2)

        lx = GRAPH_RECT.x + 10 + i * 150
        ly = GRAPH_RECT.bottom - 10
        pygame.draw.circle(screen, color, (lx, ly), 4)
        screen.blit(font.render(SURFACES[surface_type].label, True, LINE_WHITE), (lx + 10, ly - 7))


def _draw_drop_section(screen, index, tel: Telemetry, started, font):
    """One quarter of the window: court floor, ball, height marker, telemetry."""
    section_w = WIN_W // 4
    x0 = index * section_w
    surface = SURFACES[tel.surface]

    pygame.draw.rect(screen, surface.color, (x0, FLOOR_Y, section_w, 40))
    pygame.draw.line(screen, BG_COLOR, (x0, FLOOR_Y), (x0, WIN_H), 2)
    screen.blit(font.render(surface.name, True, LINE_WHITE), (x0 + 6, FLOOR_Y + 12))

    if not started:
        return

    bx = x0 + section_w // 2
    by = int(FLOOR_Y - tel.position[1] * DROP_PX_PER_M)
    pygame.draw.circle(screen, surface.ball_color, (bx, by - 8), 8)
    pygame.draw.line(screen, NET_GRAY, (x0 + 5, by), (x0 + 15, by), 1)

    for _ in tel.bounces:
        marker = pygame.Surface((8, 8), pygame.SRCALPHA)
        pygame.draw.circle(marker, (*BOUNCE_RED, 180), (4, 4), 4)
        screen.blit(marker, (bx - 4, FLOOR_Y - 4))

    lines = [
        f"Time:    {tel.elapsed:.2f}s",
        f"Height:  {tel.position[1]:.2f}m",
        f"Bounces: {tel.bounce_count}",
    ]
    if tel.lifecycle is Lifecycle.AT_REST:
        lines.append("At rest")
    for j, line in enumerate(lines):
        screen.blit(font.render(line, True, TEXT_WHITE), (x0 + 6, FLOOR_Y + 48 + j * 16))


def _to_side(x, y):
    return int(RALLY_MARGIN + x * RALLY_PX_PER_M), int(FLOOR_Y - y * RALLY_PX_PER_M)


def _draw_rally_view(screen, sim: Simulation, font):
    """Side view of one court: net, player, ball trail, bounce marks, telemetry."""
    shot = sim.active_shots[0]
    surface = shot.surface
    tel = shot.telemetry()

    left, floor = _to_side(0, 0)
    right, _ = _to_side(court.COURT_LENGTH, 0)
    pygame.draw.rect(screen, surface.color, (left, floor, right - left, 30))
    pygame.draw.line(screen, LINE_WHITE, (left, floor), (right, floor), 2)
    net_x, net_top = _to_side(court.NET_X, court.NET_HEIGHT)
    pygame.draw.line(screen, NET_GRAY, (net_x, floor), (net_x, net_top), 3)

    # Player: reach column with a head
    px, reach = _to_side(sim.player.x, court.PLAYER_REACH_HEIGHT)
    width = int(2 * court.PLAYER_RADIUS * RALLY_PX_PER_M)
    body = pygame.Surface((width, floor - reach), pygame.SRCALPHA)
    body.fill((*PLAYER_COLOR, 70))
    screen.blit(body, (px - width // 2, reach))
    pygame.draw.circle(screen, PLAYER_COLOR, (px, reach), 7)

    if shot.phase is not ShotPhase.IDLE:
        if len(tel.path) > 1:
            step = max(1, len(tel.path) // 800)
            pts = [_to_side(p.x, max(p.y, 0.0)) for p in tel.path[::step]]
            pygame.draw.lines(screen, ACCENT, False, pts, 2)
        for mark in tel.bounces:
            point = next((p for p in tel.path if p.t >= mark.t), None)
            if point is not None:
                pygame.draw.circle(screen, BOUNCE_RED, _to_side(point.x, 0), 4)
        bx, by = _to_side(*tel.position)
        pygame.draw.circle(screen, surface.ball_color, (bx, by - 6), 6)

    panel_y = floor + 40
    status = shot.phase.value.replace("_", " ")
    if shot.relaunch_pending:
        status += f" ({shot.relaunch_timer:.1f}s)"
    lines = [
        f"{surface.name}   e={surface.restitution}   status: {status}",
        f"t={tel.elapsed:5.2f}s  x={tel.position[0]:6.2f}m  y={tel.position[1]:5.2f}m  "
        f"vx={tel.velocity[0]:6.2f}  vy={tel.velocity[1]:6.2f}  spin={tel.spin:7.0f}rpm",
        f"bounces={tel.bounce_count}  launches={shot.launches}  net hits={shot.net_hits}  "
        f"returns={sim.player.returns}  cancelled={sim.player.cancellations}",
    ]
    for j, line in enumerate(lines):
        screen.blit(font.render(line, True, TEXT_WHITE), (RALLY_MARGIN, panel_y + j * 18))


def run_visualizer(config: Optional[SimConfig] = None):
    """Launch the Pygame visualizer."""
    config = config or SimConfig()

    pygame.init()
    screen = pygame.display.set_mode((WIN_W, WIN_H))
    pygame.display.set_caption("Tennis Ball Physics -- 4 Court Surfaces")
    clock = pygame.time.Clock()

    font_sm = pygame.font.SysFont("monospace", 12)
    font_md = pygame.font.SysFont("monospace", 14)
    font_title = pygame.font.SysFont("monospace", 15, bold=True)

    rally_surface = SurfaceType.CLAY
    sim: Simulation = None

    def draw_scene():
        screen.fill(BG_COLOR)

        pygame.draw.rect(screen, CARD_BG, (0, 0, WIN_W, HEADER_H))
        pygame.draw.line(screen, ACCENT, (0, HEADER_H - 1), (WIN_W, HEADER_H - 1), 2)
        screen.blit(font_title.render("TENNIS BALL PHYSICS", True, TEXT_WHITE), (14, 13))
        controls = font_sm.render(
            "SPACE:start  R:reset  M:mode  1-4:court  LEFT/RIGHT:move  Q:quit",
            True, TEXT_DIM,
        )
        screen.blit(controls, (WIN_W - controls.get_width() - 10, 16))

        telemetry = sim.telemetry()
        if sim.started:
            _draw_combined_graph(screen, telemetry, font_sm)

        if isinstance(sim.mode, DropComparison):
            for i, tel in enumerate(telemetry.values()):
                _draw_drop_section(screen, i, tel, sim.started, font_sm)
            if not sim.started:
                msg = "Press SPACE to start simulation | Press R to reset"
                screen.blit(font_md.render(msg, True, LINE_WHITE), (10, WIN_H - 26))
            elif sim.complete:
                screen.blit(font_md.render("All balls at rest", True, LINE_WHITE), (10, WIN_H - 26))
        else:
            _draw_rally_view(screen, sim, font_sm)
            if not sim.started:
                msg = "Press SPACE to serve | M for drop comparison"
                screen.blit(font_md.render(msg, True, LINE_WHITE), (10, WIN_H - 26))

    dialog = PygameReturnShotDialog(screen, config, redraw=draw_scene)
    sim = Simulation(config, return_shots=dialog, mode=DropComparison())

    dt = config.dt
    accumulator = 0.0
    running = True

    while running:
        # Cap frame time so a long modal dialog does not cause a catch-up burst
        accumulator += min(clock.tick(60) / 1000.0, 0.1)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    running = False
                elif event.key == pygame.K_SPACE:
                    sim.start()
                elif event.key == pygame.K_r:
                    sim.reset()
                elif event.key == pygame.K_m:
                    if isinstance(sim.mode, DropComparison):
                        sim.set_mode(RallyMode(rally_surface))
                    else:
                        sim.set_mode(DropComparison())
                elif event.key in SURFACE_KEYS:
                    rally_surface = SURFACE_KEYS[event.key]
                    if isinstance(sim.mode, RallyMode):
                        sim.set_mode(RallyMode(rally_surface))

        keys = pygame.key.get_pressed()
        while accumulator >= dt:
            if sim.player_enabled:
                if keys[pygame.K_LEFT]:
                    sim.move_player_left(dt)
                if keys[pygame.K_RIGHT]:
                    sim.move_player_right(dt)
            sim.tick(dt)
            accumulator -= dt

        draw_scene()
        pygame.display.flip()

    pygame.quit()
