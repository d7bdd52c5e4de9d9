"""
molsim: frame-by-frame trajectory access and RMSD analysis for molecular simulations
"""

__version__ = "0.1.0"

# Core components
from .core.atoms import Atom, make_atoms
from .core.frame import TrajectoryFrame
from .core.simulation import Simulation
from .core.procrustes import align, align_in_place, center_of_mass
from .core.errors import (
    MolsimError,
    OpenError,
    EndOfData,
    EndOfSelection,
    NoFrameRead,
    OutOfRange,
    DimensionMismatch,
)

# IO components
from .io import open_trajectory, ResultWriter, write_lammps_dump, save_npy_trajectory

# Analysis
from .analysis.rmsd import rmsd, rmsd_over_trajectory, rmsd_matrix

# Visualization components
from .visualization import RMSDPlotter
from .visualization.styles import apply_style, DEFAULT_STYLE, COLOR_SCHEMES

# Utility components
from .utils.helpers import parse_atom_indices, update_dict_recursively
from .utils.config_manager import ConfigManager

__all__ = [
    'Atom', 'make_atoms', 'TrajectoryFrame', 'Simulation',
    'align', 'align_in_place', 'center_of_mass',
    'MolsimError', 'OpenError', 'EndOfData', 'EndOfSelection',
    'NoFrameRead', 'OutOfRange', 'DimensionMismatch',
    'open_trajectory', 'ResultWriter', 'write_lammps_dump', 'save_npy_trajectory',
    'rmsd', 'rmsd_over_trajectory', 'rmsd_matrix',
    'RMSDPlotter', 'apply_style', 'DEFAULT_STYLE', 'COLOR_SCHEMES',
    'parse_atom_indices', 'update_dict_recursively', 'ConfigManager',
]
