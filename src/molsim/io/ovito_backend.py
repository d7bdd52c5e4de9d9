"""
Backend reading any trajectory format supported by OVITO.
"""
import numpy as np
from pathlib import Path
import logging
from typing import Optional, Union

from .backend import TrajectoryBackend
from ..core.errors import EndOfData, OpenError
from ..core.frame import TrajectoryFrame

# Try to import OVITO, but don't fail if it's not available
try:
    from ovito.io import import_file
    OVITO_AVAILABLE = True
except ImportError:
    OVITO_AVAILABLE = False

logger = logging.getLogger(__name__)


class OvitoBackend(TrajectoryBackend):
    """Read frames through an OVITO pipeline, strictly in order.

    Args:
        filename: Trajectory file
        input_format: OVITO format name (e.g. 'lammps/dump'), auto-detected if None
    """

    @classmethod
    def reader_available(cls) -> bool:
        return OVITO_AVAILABLE

    def __init__(self, filename: Union[str, Path], input_format: Optional[str] = None):
        if not OVITO_AVAILABLE:
            raise OpenError("OVITO is not available. Please install OVITO Python to read this trajectory format.")
        super().__init__(filename)
        if not self._path.exists():
            raise OpenError(f"Trajectory file not found: {filename}")
        self.input_format = input_format
        self._pipeline = None
        self._open()

        try:
            frame0_data = self._pipeline.compute(0)
        except Exception as e:
            raise OpenError(f"OVITO compute failed on frame 0 of {self._path.name}: {e}") from e
        if not (hasattr(frame0_data, 'particles') and frame0_data.particles):
            raise OpenError("OVITO: Could not read particle data from frame 0.")
        self._natoms = len(frame0_data.particles.positions)
        if self._natoms == 0:
            raise OpenError("OVITO: 0 atoms in frame 0.")
        logger.info(f"Opened '{self._path.name}' via OVITO: {self._n_frames} frames, {self._natoms} atoms.")

    def _open(self) -> None:
        try:
            self._pipeline = import_file(str(self._path), input_format=self.input_format)
        except Exception as e:
            raise OpenError(f"OVITO import failed for '{self._path.name}': {e}") from e
        self._n_frames = self._pipeline.source.num_frames
        if self._n_frames == 0:
            raise OpenError("OVITO: 0 frames in trajectory.")
        self._cursor = 0

    def close(self) -> None:
        self._pipeline = None

    @property
    def n_atoms(self) -> int:
        return self._natoms

    def frame_count(self) -> int:
        return self._n_frames

    def read_next(self, frame: TrajectoryFrame) -> TrajectoryFrame:
        if self._pipeline is None or self._cursor >= self._n_frames:
            raise EndOfData(f"No more frames in {self._path.name}")
        data = self._pipeline.compute(self._cursor)
        positions = np.asarray(data.particles.positions, dtype=np.float64)
        if positions.shape != (self._natoms, 3):
            raise IOError(f"OVITO: Pos shape mismatch frame {self._cursor + 1}. "
                          f"Expected ({self._natoms},3), got {positions.shape}.")
        ids = getattr(data.particles, 'identifiers', None)
        if ids is not None:
            positions = positions[np.argsort(np.asarray(ids))]
        frame.x[...] = positions.T
        # OVITO stores the cell vectors as the first three columns
        frame.box[...] = np.asarray(data.cell.matrix, dtype=np.float64)[:3, :3].T
        frame.step = self._cursor
        self._cursor += 1
        return frame
