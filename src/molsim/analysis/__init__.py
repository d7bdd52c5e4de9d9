"""
Analysis module for molsim.
"""

from .rmsd import rmsd, rmsd_over_trajectory, rmsd_matrix

__all__ = [
    'rmsd',
    'rmsd_over_trajectory',
    'rmsd_matrix',
]
