"""Matplotlib analysis charts -- drop comparison, bounce decay, spin paths."""

import os

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from tennis_engine import court, physics
from tennis_engine.physics import launch_velocity, simulate
from tennis_engine.types import SURFACES, BallState, ShotParameters, SurfaceType

_HEX = {
    SurfaceType.CLAY: "#ffcc00",
    SurfaceType.GRASS: "#00ff00",
    SurfaceType.HARD: "#ff4d4d",
    SurfaceType.BLACK: "#ffffff",
}


def _style_chart(ax, title):
    """Apply dark theme styling to chart."""
    ax.set_facecolor("#0f0f1a")
    ax.set_title(title, color="#e0e0e0", fontsize=13, fontweight="bold", pad=12)
    ax.tick_params(colors="#888888", labelsize=9)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["bottom"].set_color("#333333")
    ax.spines["left"].set_color("#333333")
    ax.xaxis.label.set_color("#aaaaaa")
    ax.yaxis.label.set_color("#aaaaaa")


def drop_runs(
    height: float = court.DROP_HEIGHT,
    dt: float = 1.0 / court.TICK_RATE,
    air_drag: float = 0.0,
) -> dict[SurfaceType, BallState]:
    """Drop one ball on every surface and return each final state."""
    results = {}
    for surface_type, surface in SURFACES.items():
        ball = BallState()
        ball.reset(court.DROP_X, height)
        final, _ = simulate(ball, surface, dt=dt, max_time=30.0, air_drag=air_drag, net_noise=0.0)
        results[surface_type] = final
    return results


def bounce_apexes(ball: BallState) -> np.ndarray:
    """Peak height reached between consecutive ground contacts."""
    return np.array(physics.bounce_apexes(ball.trajectory))


def theoretical_apexes(height: float, restitution: float, n: int) -> np.ndarray:
    """Ideal bounce heights h * e^(2n) for n = 1..n."""
    return height * restitution ** (2 * np.arange(1, n + 1))


def chart_drop_heights(save_path=None, height=court.DROP_HEIGHT):
    """Chart 1: Height vs Time on all four courts."""
    runs = drop_runs(height)

    fig, ax = plt.subplots(figsize=(10, 4))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Height vs Time (All Courts)")

    for surface_type, ball in runs.items():
        t = np.array([s.t for s in ball.trajectory])
        h = np.array([s.height for s in ball.trajectory])
        ax.plot(t, h, color=_HEX[surface_type], linewidth=2, label=SURFACES[surface_type].label)
        for mark in ball.bounces:
            ax.scatter(mark.t, 0, color="#ff0000", s=18, alpha=0.7, zorder=5)

    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Height (m)")
    ax.set_ylim(0, height * 1.25)
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_bounce_decay(save_path=None, height=court.DROP_HEIGHT, n_bounces=5):
    """Chart 2: Measured bounce apex vs the ideal h * e^(2n) per surface."""
    runs = drop_runs(height, dt=0.001)

    fig, ax = plt.subplots(figsize=(8, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Bounce Height Decay")

    n = np.arange(1, n_bounces + 1)
    for surface_type, ball in runs.items():
        surface = SURFACES[surface_type]
        measured = bounce_apexes(ball)[:n_bounces]
        ideal = theoretical_apexes(height, surface.restitution, n_bounces)
        color = _HEX[surface_type]
        ax.plot(n[:len(measured)], measured, color=color, marker="o", linewidth=2,
                label=f"{surface.label} (e={surface.restitution})")
        ax.plot(n, ideal, color=color, linestyle="--", linewidth=1, alpha=0.6)

    ax.set_xlabel("Bounce")
    ax.set_ylabel("Apex height (m)")
    ax.set_xticks(n)
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_spin_paths(save_path=None, surface_type=SurfaceType.HARD, air_drag=0.0012):
    """Chart 3: Side-view paths of the same shot with backspin, flat and topspin."""
    surface = SURFACES[surface_type]
    variants = [
        ("Backspin -2000 RPM", -2000, "#4ecdc4"),
        ("Flat", 0, "#e0e0e0"),
        ("Topspin 3000 RPM", 3000, "#e94560"),
    ]

    fig, ax = plt.subplots(figsize=(10, 4))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, f"Spin and Trajectory ({surface.label})")

    for label, spin, color in variants:
        params = ShotParameters(force=270, angle=20, spin=spin)
        vx, vy = launch_velocity(params)
        ball = BallState()
        ball.reset(court.LAUNCH_X, court.LAUNCH_Y, vx, vy, spin)
        final, _ = simulate(ball, surface, air_drag=air_drag, net_noise=0.0)
        x = np.array([p.x for p in final.path])
        y = np.array([p.y for p in final.path])
        ax.plot(x, y, color=color, linewidth=2, label=label)

    ax.axvline(court.NET_X, ymax=court.NET_HEIGHT / 4.0, color="#b4b4b4", linewidth=3)
    ax.set_xlim(0, court.COURT_LENGTH)
    ax.set_ylim(0, 4.0)
    ax.set_xlabel("Distance from baseline (m)")
    ax.set_ylabel("Height (m)")
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def generate_all_charts(output_dir="."):
    """Generate all analysis charts and save to output directory."""
    os.makedirs(output_dir, exist_ok=True)

    paths = []

    path = os.path.join(output_dir, "chart_drop_heights.png")
    chart_drop_heights(save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    path = os.path.join(output_dir, "chart_bounce_decay.png")
    chart_bounce_decay(save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    path = os.path.join(output_dir, "chart_spin_paths.png")
    chart_spin_paths(save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    plt.close("all")
    return paths
