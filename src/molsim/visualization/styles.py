"""
Plot styling module for molsim.

This module provides predefined styles and color schemes for RMSD plots.
"""
import matplotlib.pyplot as plt
from typing import Dict, Any, Optional

# Default style parameters
DEFAULT_STYLE = {
    'figure.figsize': (8, 5),
    'figure.dpi': 100,
    'font.size': 12,
    'axes.labelsize': 14,
    'axes.titlesize': 14,
    'xtick.labelsize': 11,
    'ytick.labelsize': 11,
    'legend.fontsize': 11,
    'lines.linewidth': 1.5,
    'lines.markersize': 4,
    'image.cmap': 'viridis',
    'axes.grid': True,
    'grid.alpha': 0.3,
    'grid.linestyle': '--',
    'axes.spines.top': False,
    'axes.spines.right': False
}

# Color schemes
COLOR_SCHEMES = {
    'default': {
        'primary': '#1f77b4',  # Blue
        'secondary': '#ff7f0e',  # Orange
        'background': '#ffffff',
        'text': '#000000',
        'grid': '#cccccc'
    },
    'dark': {
        'primary': '#4c72b0',
        'secondary': '#dd8452',
        'background': '#2d2d2d',
        'text': '#ffffff',
        'grid': '#404040'
    },
    'scientific': {
        'primary': '#000000',
        'secondary': '#e41a1c',
        'background': '#ffffff',
        'text': '#000000',
        'grid': '#dddddd'
    }
}

def style_params(style: Optional[Dict[str, Any]] = None, color_scheme: str = 'default') -> Dict[str, Any]:
    """
    Build the rcParams for a plot from the defaults, a color scheme and overrides.

    Args:
        style: Dictionary of style parameters to override defaults
        color_scheme: Name of the color scheme to use ('default', 'dark', or 'scientific')

    Returns:
        Dictionary usable with ``plt.style.context``
    """
    if color_scheme not in COLOR_SCHEMES:
        raise ValueError(f"Unknown color scheme: {color_scheme}. Must be one of: {list(COLOR_SCHEMES.keys())}")
    colors = COLOR_SCHEMES[color_scheme]

    params = dict(DEFAULT_STYLE)
    params.update({
        'axes.facecolor': colors['background'],
        'figure.facecolor': colors['background'],
        'savefig.facecolor': colors['background'],
        'grid.color': colors['grid'],
        'axes.edgecolor': colors['text'],
        'axes.labelcolor': colors['text'],
        'xtick.color': colors['text'],
        'ytick.color': colors['text'],
        'text.color': colors['text'],
        'axes.prop_cycle': plt.cycler(color=[colors['primary'], colors['secondary']]),
    })
    if style:
        params.update(style)
    return params

def apply_style(style: Optional[Dict[str, Any]] = None, color_scheme: str = 'default') -> None:
    """
    Apply a style globally to matplotlib plots.

    Args:
        style: Dictionary of style parameters to override defaults
        color_scheme: Name of the color scheme to use
    """
    plt.style.use(style_params(style, color_scheme))

def reset_style() -> None:
    """Reset matplotlib style to defaults."""
    plt.style.use('default')
