"""
Core module for molsim.

This module provides the core data structures (atoms, frames, the
Simulation frame iterator) and the rigid-body alignment engine.
"""

from .errors import (
    MolsimError,
    OpenError,
    EndOfData,
    EndOfSelection,
    NoFrameRead,
    OutOfRange,
    DimensionMismatch,
)
from .atoms import Atom, make_atoms, atom_masses
from .frame import TrajectoryFrame
from .procrustes import center_of_mass, align, align_in_place
from .simulation import Simulation, frame_selection

__all__ = [
    'MolsimError',
    'OpenError',
    'EndOfData',
    'EndOfSelection',
    'NoFrameRead',
    'OutOfRange',
    'DimensionMismatch',
    'Atom',
    'make_atoms',
    'atom_masses',
    'TrajectoryFrame',
    'center_of_mass',
    'align',
    'align_in_place',
    'Simulation',
    'frame_selection',
]
