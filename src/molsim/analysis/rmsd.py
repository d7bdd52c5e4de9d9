"""
Root mean square deviation between point sets and along trajectories.
"""
import numpy as np
import logging
from typing import Optional, Sequence
from tqdm import tqdm

from ..core import procrustes
from ..core.errors import DimensionMismatch
from ..core.simulation import Simulation

logger = logging.getLogger(__name__)


def rmsd(x, y) -> float:
    """
    RMSD between two sets of points, with correspondence given by order.

    Computed as ``sqrt(sum_i |x_i - y_i|^2) / N``: the square root is taken
    of the summed squared distances before dividing by the number of points.
    This normalization is kept for compatibility with earlier results and is
    not the textbook ``sqrt(mean |x_i - y_i|^2)``.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise DimensionMismatch(f"x and y must have the same shape, got {x.shape} and {y.shape}")
    if len(x) == 0:
        raise ValueError("Cannot compute the RMSD of empty point sets.")
    return float(np.sqrt(np.sum((x - y) ** 2)) / len(x))


def _atom_indices(atom_indices: Sequence[int]) -> np.ndarray:
    indices = np.asarray(atom_indices, dtype=np.int64)
    if indices.ndim != 1 or indices.size == 0:
        raise ValueError("atom_indices must be a non-empty 1D sequence of atom indices.")
    return indices


def rmsd_over_trajectory(simulation: Simulation, atom_indices: Sequence[int],
                         weights: Optional[Sequence[float]] = None,
                         reference_frame: Optional[int] = None,
                         align: bool = True,
                         progress: bool = False) -> np.ndarray:
    """
    RMSD of a group of atoms along a trajectory.

    Args:
        simulation: Simulation to iterate over (its selection is honored)
        atom_indices: 0-based indices of the atoms to compare
        weights: Optional per-atom weights (e.g. masses) of the selected atoms,
            used for the centers of the superposition
        reference_frame: Raw frame index of the reference structure; the
            first selected frame by default
        align: Superpose every frame onto the reference before comparing
        progress: Show a progress bar

    Returns:
        One RMSD per selected frame, in selection order
    """
    indices = _atom_indices(atom_indices)
    with simulation.read_lock:
        if reference_frame is None:
            xref = simulation.firstframe().current().positions[indices]
        else:
            xref = simulation.seek_to(reference_frame).positions[indices]
        simulation.restart()

        rmsds = np.zeros(len(simulation))
        frames = tqdm(simulation, total=len(simulation), desc="RMSD", unit="fr", disable=not progress)
        for iframe, frame in enumerate(frames):
            x = frame.positions[indices]
            if align:
                procrustes.align_in_place(x, xref, weights)
            rmsds[iframe] = rmsd(x, xref)
    logger.info(f"RMSD computed for {len(rmsds)} frames ({len(indices)} atoms).")
    return rmsds


def rmsd_matrix(simulation: Simulation, atom_indices: Sequence[int],
                weights: Optional[Sequence[float]] = None,
                align: bool = True,
                progress: bool = False) -> np.ndarray:
    """
    Pairwise RMSD between all selected frames of a trajectory.

    The coordinates of the selected atoms of every frame are kept in memory,
    and F*(F-1)/2 superpositions are computed for F frames, so both memory
    and time grow quickly with the number of frames.

    Args:
        simulation: Simulation to iterate over (its selection is honored)
        atom_indices: 0-based indices of the atoms to compare
        weights: Optional per-atom weights of the selected atoms
        align: Superpose frame j onto frame i before computing each element
        progress: Show a progress bar

    Returns:
        Symmetric (F, F) matrix with a zero diagonal
    """
    indices = _atom_indices(atom_indices)
    with simulation.read_lock:
        coordinates = [frame.positions[indices] for frame in simulation]

    n_frames = len(coordinates)
    matrix = np.zeros((n_frames, n_frames))
    for iframe in tqdm(range(n_frames), desc="RMSD matrix", unit="fr", disable=not progress):
        for jframe in range(iframe + 1, n_frames):
            y = coordinates[jframe]
            if align:
                y = procrustes.align(y, coordinates[iframe], weights)
            matrix[iframe, jframe] = rmsd(coordinates[iframe], y)
            matrix[jframe, iframe] = matrix[iframe, jframe]
    logger.info(f"RMSD matrix computed for {n_frames} frames ({len(indices)} atoms).")
    return matrix
