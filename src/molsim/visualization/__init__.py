"""
Visualization module for molsim.

This module provides plotting capabilities for RMSD results.
"""

from .rmsd_plotter import RMSDPlotter
from .styles import apply_style, reset_style, style_params, DEFAULT_STYLE, COLOR_SCHEMES

__all__ = [
    'RMSDPlotter',
    'apply_style',
    'reset_style',
    'style_params',
    'DEFAULT_STYLE',
    'COLOR_SCHEMES'
]
