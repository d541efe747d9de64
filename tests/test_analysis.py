"""Tests for the analysis charts."""

import numpy as np
import pytest

from tennis_engine.types import SURFACES, SurfaceType
from tennis_sim.analysis import (
    bounce_apexes,
    chart_bounce_decay,
    drop_runs,
    generate_all_charts,
    theoretical_apexes,
)


def test_theoretical_apexes():
    np.testing.assert_allclose(theoretical_apexes(2.0, 0.5, 3), [0.5, 0.125, 0.03125])


def test_measured_apexes_close_to_theory():
    runs = drop_runs(dt=0.001)
    for surface_type, ball in runs.items():
        e = SURFACES[surface_type].restitution
        measured = bounce_apexes(ball)[:2]
        np.testing.assert_allclose(measured, theoretical_apexes(2.0, e, 2), rtol=0.03)


def test_drop_runs_settle_every_court():
    runs = drop_runs()
    assert set(runs) == set(SurfaceType)
    assert all(ball.bounce_count > 0 for ball in runs.values())


def test_chart_saved(tmp_path):
    path = tmp_path / "decay.png"
    fig = chart_bounce_decay(save_path=str(path))
    assert path.exists()
    assert fig.axes[0].get_title() == "Bounce Height Decay"


def test_generate_all_charts(tmp_path):
    paths = generate_all_charts(output_dir=str(tmp_path))
    assert len(paths) == 3
    for p in paths:
        assert (tmp_path / p.split("/")[-1]).exists()
