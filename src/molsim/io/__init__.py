"""
Input/Output module for molsim.

This module provides the sequential trajectory backends used by Simulation,
backend selection by file format, and writers for analysis results.
"""
from pathlib import Path
from typing import Union

from .backend import TrajectoryBackend
from .lammps import LammpsDumpBackend
from .npy import NpyBackend, save_npy_trajectory
from .ovito_backend import OvitoBackend, OVITO_AVAILABLE
from .writer import ResultWriter, write_lammps_dump

VALID_FORMATS = ['auto', 'lammps', 'npy', 'ovito']


def detect_file_format(filename: Union[str, Path]) -> str:
    """Guess the backend format from the file name."""
    name = Path(filename).name.lower()
    for compressed in ('.gz', '.bz2'):
        if name.endswith(compressed):
            name = name[:-len(compressed)]
    if name.endswith('.npy'):
        return 'npy'
    if name.endswith(('.lammpstrj', '.dump', '.lammpsdump')):
        return 'lammps'
    return 'ovito'


def open_trajectory(filename: Union[str, Path], file_format: str = 'auto') -> TrajectoryBackend:
    """
    Open a trajectory file with the backend matching its format.

    Args:
        filename: Trajectory file
        file_format: One of 'auto', 'lammps', 'npy', 'ovito'

    Returns:
        Opened TrajectoryBackend
    """
    if file_format not in VALID_FORMATS:
        raise ValueError(f"Unsupported file format. Must be one of: {VALID_FORMATS}")
    if file_format == 'auto':
        file_format = detect_file_format(filename)
    if file_format == 'lammps':
        return LammpsDumpBackend(filename)
    if file_format == 'npy':
        return NpyBackend(filename)
    return OvitoBackend(filename)


__all__ = [
    'TrajectoryBackend',
    'LammpsDumpBackend',
    'NpyBackend',
    'OvitoBackend',
    'OVITO_AVAILABLE',
    'VALID_FORMATS',
    'detect_file_format',
    'open_trajectory',
    'save_npy_trajectory',
    'ResultWriter',
    'write_lammps_dump',
]
