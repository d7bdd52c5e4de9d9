"""
Visualization module for RMSD results.
"""
import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Dict, Any, Tuple, Union
import logging

from .styles import style_params
from ..utils.helpers import ensure_directory

logger = logging.getLogger(__name__)

class RMSDPlotter:
    """
    Plots an RMSD series against frame index, or a pairwise RMSD matrix as a heatmap.

    For ``plot_type='series'`` the data is a tuple ``(frame_indices, rmsd_values)``
    or a plain 1D array of values (plotted against 1, 2, ...). For
    ``plot_type='matrix'`` the data is a square 2D array.
    """

    VALID_TYPES = ('series', 'matrix')

    def __init__(self, data: Union[np.ndarray, Tuple[Any, Any]], plot_type: str, output_path: Union[str, Path], **kwargs):
        """
        Initialize RMSDPlotter with RMSD data and plotting parameters.

        Args:
            data: RMSD series or matrix to plot
            plot_type: Type of plot to generate ('series' or 'matrix')
            output_path: Path to save the plot
            **kwargs: Additional plotting parameters
        """
        self.data = data
        self.plot_type = plot_type
        self.output_path = Path(output_path)

        # Default parameters
        self.default_params: Dict[str, Any] = {
            'title': 'RMSD' if plot_type == 'series' else 'Pairwise RMSD',
            'xlabel': 'Frame',
            'ylabel': 'RMSD' if plot_type == 'series' else 'Frame',
            'cmap': 'viridis',
            'figsize': (8, 5) if plot_type == 'series' else (7, 6),
            'dpi': 300,
            'marker': None,
            'show_colorbar': True,
            'colorbar_label': 'RMSD',
            'grid': True,
            'theme': 'light'
        }

        # Update with user parameters
        self.plot_params = {**self.default_params, **kwargs}

    def generate_plot(self) -> Path:
        """Render the plot and save it to ``output_path``."""
        self._validate()
        theme = self.plot_params.get('theme', 'light')
        scheme = 'dark' if theme == 'dark' else 'default'

        fig = None
        with plt.style.context(style_params(color_scheme=scheme)):
            try:
                if self.plot_type == 'series':
                    fig, ax = self._plot_series()
                else:
                    fig, ax = self._plot_matrix()

                ax.set_title(self.plot_params['title'])
                fig.tight_layout()
                ensure_directory(self.output_path.parent)
                fig.savefig(self.output_path, dpi=self.plot_params['dpi'], bbox_inches='tight')
                logger.info(f"Plot saved: {self.output_path}")
            finally:
                if fig is not None:
                    plt.close(fig)
        return self.output_path

    def _series_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        if isinstance(self.data, tuple):
            frames, values = self.data
            return np.asarray(frames), np.asarray(values, dtype=np.float64)
        values = np.asarray(self.data, dtype=np.float64)
        return np.arange(1, len(values) + 1), values

    def _plot_series(self):
        frames, values = self._series_arrays()
        fig, ax = plt.subplots(figsize=self.plot_params['figsize'])
        ax.plot(frames, values, marker=self.plot_params['marker'])
        ax.set_xlabel(self.plot_params['xlabel'])
        ax.set_ylabel(self.plot_params['ylabel'])
        ax.grid(bool(self.plot_params['grid']))
        return fig, ax

    def _plot_matrix(self):
        matrix = np.asarray(self.data, dtype=np.float64)
        fig, ax = plt.subplots(figsize=self.plot_params['figsize'])
        im = ax.imshow(matrix, cmap=self.plot_params['cmap'], origin='lower', interpolation='nearest')
        ax.set_xlabel(self.plot_params['xlabel'])
        ax.set_ylabel(self.plot_params['ylabel'])
        ax.grid(False)
        if self.plot_params['show_colorbar']:
            cbar = fig.colorbar(im, ax=ax)
            cbar.set_label(self.plot_params['colorbar_label'])
        return fig, ax

    def _validate(self):
        if self.plot_type not in self.VALID_TYPES:
            raise ValueError(f"Invalid plot_type '{self.plot_type}'. Choose from {list(self.VALID_TYPES)}.")

        if self.plot_type == 'series':
            frames, values = self._series_arrays()
            if values.ndim != 1 or values.size == 0:
                raise ValueError(f"RMSD series must be a non-empty 1D array, got shape {values.shape}.")
            if frames.shape != values.shape:
                raise ValueError(f"Got {frames.shape[0]} frame indices for {values.shape[0]} RMSD values.")
        else:
            matrix = np.asarray(self.data)
            if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1] or matrix.size == 0:
                raise ValueError(f"RMSD matrix must be square and non-empty, got shape {matrix.shape}.")
