import matplotlib
matplotlib.use('Agg')

import pytest
import numpy as np

from molsim.visualization import RMSDPlotter, COLOR_SCHEMES, style_params


def test_series_plot(tmp_path):
    out = tmp_path / "plots" / "rmsd.png"
    path = RMSDPlotter(([2, 4, 6], [0.0, 0.3, 0.2]), 'series', out).generate_plot()
    assert path == out
    assert out.exists() and out.stat().st_size > 0


def test_series_plot_from_values(tmp_path):
    out = tmp_path / "rmsd.png"
    RMSDPlotter(np.array([0.0, 0.1, 0.4]), 'series', out, theme='dark', dpi=50).generate_plot()
    assert out.exists()


def test_matrix_plot(tmp_path):
    out = tmp_path / "matrix.png"
    m = np.array([[0.0, 0.5], [0.5, 0.0]])
    RMSDPlotter(m, 'matrix', out, dpi=50, colorbar_label='RMSD (A)').generate_plot()
    assert out.exists()


@pytest.mark.parametrize("data, plot_type, message", [
    (np.zeros(3), 'histogram', "Invalid plot_type"),
    (np.zeros((2, 3)), 'matrix', "square"),
    (([1, 2], [0.1]), 'series', "frame indices"),
    (np.array([]), 'series', "non-empty"),
])
def test_invalid_plots(tmp_path, data, plot_type, message):
    with pytest.raises(ValueError, match=message):
        RMSDPlotter(data, plot_type, tmp_path / "x.png").generate_plot()
    assert not (tmp_path / "x.png").exists()


def test_style_params():
    params = style_params({'lines.linewidth': 3}, color_scheme='dark')
    assert params['lines.linewidth'] == 3
    assert params['axes.facecolor'] == COLOR_SCHEMES['dark']['background']
    with pytest.raises(ValueError, match="Unknown color scheme"):
        style_params(color_scheme='neon')
