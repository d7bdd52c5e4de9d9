"""
Atom records making up the topology of a simulation.

Any object with a mutable ``position`` (3 floats) and a ``mass`` can be used
as an atom by Simulation; ``Atom`` is the record used when nothing else is
supplied.
"""
from dataclasses import dataclass, field
import numpy as np
from typing import List, Optional, Sequence


@dataclass
class Atom:
    index: int
    name: str = "X"
    mass: float = 1.0
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64)
        if self.position.shape != (3,):
            raise ValueError(f"Atom position must have 3 components, got shape {self.position.shape}")


def make_atoms(n_atoms: int, masses: Optional[Sequence[float]] = None,
               names: Optional[Sequence[str]] = None) -> List[Atom]:
    """
    Build a list of default atom records.

    Args:
        n_atoms: Number of atoms
        masses: Optional per-atom masses (default 1.0)
        names: Optional per-atom names (default 'X')

    Returns:
        List of Atom records with zeroed positions
    """
    if masses is not None and len(masses) != n_atoms:
        raise ValueError(f"Got {len(masses)} masses for {n_atoms} atoms.")
    if names is not None and len(names) != n_atoms:
        raise ValueError(f"Got {len(names)} names for {n_atoms} atoms.")
    return [
        Atom(index=i,
             name=names[i] if names is not None else "X",
             mass=float(masses[i]) if masses is not None else 1.0)
        for i in range(n_atoms)
    ]


def atom_masses(atoms: Sequence, indices: Optional[Sequence[int]] = None) -> np.ndarray:
    """Masses of ``atoms`` (or of the subset ``indices``) as a float array."""
    if indices is None:
        return np.array([a.mass for a in atoms], dtype=np.float64)
    return np.array([atoms[i].mass for i in indices], dtype=np.float64)
