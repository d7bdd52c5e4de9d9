"""
Backend for trajectories cached as numpy arrays.

Layout (stem = file name without suffixes):
    <stem>.positions.npy   : (frames, atoms, 3) coordinates
    <stem>.box_matrix.npy  : optional, (3, 3) or (frames, 3, 3) cell vectors as rows
"""
import numpy as np
from pathlib import Path
import logging
from typing import Optional, Union

from .backend import TrajectoryBackend
from ..core.errors import EndOfData, OpenError
from ..core.frame import TrajectoryFrame
from ..utils.helpers import ensure_directory

logger = logging.getLogger(__name__)


def cache_stem(filename: Union[str, Path]) -> Path:
    """Strip the '.positions.npy' (or '.npy') suffixes off a cache file name."""
    path = Path(filename)
    name = path.name
    for suffix in ('.positions.npy', '.npy'):
        if name.endswith(suffix):
            return path.with_name(name[:-len(suffix)])
    return path


def save_npy_trajectory(filename: Union[str, Path], positions: np.ndarray,
                        box_matrix: Optional[np.ndarray] = None) -> Path:
    """
    Write a trajectory in the layout read by NpyBackend.

    Args:
        filename: Cache stem or positions file name
        positions: (frames, atoms, 3) coordinates
        box_matrix: Optional (3, 3) or (frames, 3, 3) cell

    Returns:
        Path of the positions file
    """
    positions = np.asarray(positions, dtype=np.float64)
    if positions.ndim != 3 or positions.shape[2] != 3:
        raise ValueError("Positions must be 3D (frames, atoms, xyz) and last dimension must be 3.")
    stem = cache_stem(filename)
    ensure_directory(stem.parent)
    pos_file = stem.with_name(stem.name + '.positions.npy')
    np.save(pos_file, positions)
    if box_matrix is not None:
        np.save(stem.with_name(stem.name + '.box_matrix.npy'), np.asarray(box_matrix, dtype=np.float64))
    logger.info(f"Trajectory saved to .npy (stem: {stem.name}).")
    return pos_file


class NpyBackend(TrajectoryBackend):
    """Read a .npy trajectory cache forward, one frame per call.

    The positions array is memory mapped, so only the frame being read is
    loaded from disk.
    """

    def __init__(self, filename: Union[str, Path]):
        stem = cache_stem(filename)
        super().__init__(stem.with_name(stem.name + '.positions.npy'))
        self._box_path = stem.with_name(stem.name + '.box_matrix.npy')
        if not self._path.exists():
            raise OpenError(f"Trajectory file not found: {self._path}")
        self._positions = None
        self._box = None
        self._open()
        logger.info(f"Opened .npy trajectory '{self._path.name}': "
                    f"{self.frame_count()} frames, {self.n_atoms} atoms.")

    def _open(self) -> None:
        try:
            positions = np.load(self._path, mmap_mode='r')
            box = np.load(self._box_path) if self._box_path.exists() else np.zeros((3, 3))
        except (OSError, ValueError) as e:
            raise OpenError(f"Could not load {self._path.name}: {e}") from e
        if positions.ndim != 3 or positions.shape[2] != 3:
            raise OpenError(f"{self._path.name} has shape {positions.shape}, expected (frames, atoms, 3).")
        if box.shape != (3, 3) and box.shape != (positions.shape[0], 3, 3):
            raise OpenError(f"Cached box_matrix has shape {box.shape}, expected (3,3) or ({positions.shape[0]},3,3).")
        self._positions = positions
        self._box = box
        self._n_frames, self._natoms = positions.shape[0], positions.shape[1]
        self._cursor = 0

    def close(self) -> None:
        # Dropping the memmap releases the file
        self._positions = None

    @property
    def n_atoms(self) -> int:
        return self._natoms

    def frame_count(self) -> int:
        return self._n_frames

    def read_next(self, frame: TrajectoryFrame) -> TrajectoryFrame:
        if self._positions is None or self._cursor >= self._positions.shape[0]:
            raise EndOfData(f"No more frames in {self._path.name}")
        frame.x[...] = self._positions[self._cursor].T
        frame.box[...] = self._box if self._box.ndim == 2 else self._box[self._cursor]
        frame.step = self._cursor
        self._cursor += 1
        return frame
