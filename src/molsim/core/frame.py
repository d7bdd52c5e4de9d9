"""
Reusable frame buffer for trajectory reading.
"""
from dataclasses import dataclass, field
import numpy as np


@dataclass
class TrajectoryFrame:
    """Coordinates and cell of one trajectory frame.

     'x'     : particle positions as 3xN array (Fortran ordered),
     'box'   : simulation box as 3 row vectors,
     'step'  : time step stored in the file, if the format has one.

    A frame owned by a Simulation is overwritten in place on every read, so
    arrays taken from it are only valid until the iterator advances.
    """
    x: np.ndarray
    box: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))
    step: int = 0

    def __post_init__(self):
        if self.x.ndim != 2 or self.x.shape[0] != 3:
            raise ValueError(f"Frame positions must be a 3xN array, got shape {self.x.shape}.")
        if self.box.shape != (3, 3):
            raise ValueError(f"Box matrix must be 3x3, got {self.box.shape}")

    @classmethod
    def empty(cls, n_atoms: int) -> 'TrajectoryFrame':
        return cls(x=np.zeros((3, n_atoms), order='F'))

    @property
    def n_atoms(self) -> int:
        return self.x.shape[1]

    @property
    def positions(self) -> np.ndarray:
        """(N, 3) view on the coordinates. Fancy indexing it returns a copy."""
        return self.x.T

    @property
    def unitcell(self) -> np.ndarray:
        """Cell matrix with the cell vectors as columns."""
        return self.box.T.copy()

    def copy(self) -> 'TrajectoryFrame':
        return TrajectoryFrame(x=self.x.copy(order='F'), box=self.box.copy(), step=self.step)
