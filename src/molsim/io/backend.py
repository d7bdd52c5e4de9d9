"""
Sequential trajectory backends.

A backend reads the frames of one trajectory file strictly in order into a
caller supplied TrajectoryFrame. Random access is emulated by Simulation by
reopening the file and reading forward.
"""
from abc import ABC, abstractmethod
from pathlib import Path
import logging
from typing import Union

from ..core.frame import TrajectoryFrame

logger = logging.getLogger(__name__)


class TrajectoryBackend(ABC):
    """Provide a way to read a molecular dynamics trajectory file frame by frame."""

    def __init__(self, filename: Union[str, Path]):
        self._path = Path(filename)

    @classmethod
    def reader_available(cls) -> bool:
        """Is this backend available on this particular system"""
        return True

    @property
    def path(self) -> Path:
        return self._path

    @property
    @abstractmethod
    def n_atoms(self) -> int:
        """Number of atoms in every frame"""

    @abstractmethod
    def frame_count(self) -> int:
        """Total number of frames in the file"""

    @abstractmethod
    def read_next(self, frame: TrajectoryFrame) -> TrajectoryFrame:
        """Overwrite ``frame`` with the next frame; EndOfData past the last one"""

    @abstractmethod
    def close(self) -> None:
        """Close down, release resources etc"""

    @abstractmethod
    def _open(self) -> None:
        """(Re)open the file and place the cursor before the first frame"""

    def reopen(self) -> None:
        logger.debug(f"Reopening trajectory {self.path.name}")
        self.close()
        self._open()

    def new_frame(self) -> TrajectoryFrame:
        return TrajectoryFrame.empty(self.n_atoms)

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.path}')"
