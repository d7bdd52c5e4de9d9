"""
Frame-by-frame access to a trajectory with a fixed topology.
"""
import operator
import threading
import numpy as np
from pathlib import Path
import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from .atoms import atom_masses
from .errors import DimensionMismatch, EndOfData, EndOfSelection, NoFrameRead, OutOfRange
from .frame import TrajectoryFrame

logger = logging.getLogger(__name__)


def frame_selection(raw_length: int, first: int = 1, last: Optional[int] = None, step: int = 1) -> range:
    """
    Build the range of raw frame indices (1-based) to be visited.

    ``last`` defaults to the number of frames in the file. A ``last`` beyond
    that is accepted here and only fails when iteration gets there.
    """
    first = operator.index(first)
    step = operator.index(step)
    if first < 1:
        raise ValueError(f"first frame must be >= 1, got {first}")
    if step < 1:
        raise ValueError(f"step must be >= 1, got {step}")
    last = raw_length if last is None else operator.index(last)
    if last < first:
        raise ValueError(f"Empty frame range: first={first}, last={last}")
    return range(first, last + 1, step)


class Simulation:
    """
    A topology (list of atoms) plus a trajectory file that can be iterated
    frame by frame.

    The trajectory backend only reads forward, into a single frame buffer
    owned by the simulation. Frames outside the selected range are read and
    discarded; going back means reopening the file. The frame returned by
    ``advance``/``current``/iteration is that shared buffer: copy what must
    survive the next read.

    Example:
        >>> sim = Simulation(atoms, "traj.lammpstrj", first=2, step=2, last=4)
        >>> for frame in sim:
        ...     print(sim.frame_index, frame.positions[0, 0])

    Args:
        atoms: Atom records (anything with ``position`` and ``mass``), one per
            atom in the trajectory
        trajectory: Path to the trajectory file, or an opened TrajectoryBackend
        first, last, step: Frame selection, 1-based and inclusive
        file_format: Backend format when ``trajectory`` is a path
    """

    def __init__(self, atoms: Sequence, trajectory, first: int = 1, last: Optional[int] = None,
                 step: int = 1, file_format: str = 'auto'):
        if isinstance(trajectory, (str, Path)):
            from ..io import open_trajectory
            backend = open_trajectory(trajectory, file_format)
        else:
            backend = trajectory
        try:
            if len(atoms) != backend.n_atoms:
                raise DimensionMismatch(f"Topology has {len(atoms)} atoms but the trajectory "
                                        f"{backend.path.name} has {backend.n_atoms}.")
            self._frame_range = frame_selection(backend.frame_count(), first, last, step)
        except (ValueError, TypeError):
            backend.close()
            raise
        self._atoms = atoms
        self._backend = backend
        self._frame = backend.new_frame()
        self._frame_index = None
        self._read_lock = threading.RLock()
        self.restart()

    def __repr__(self) -> str:
        atom_type = type(self._atoms[0]).__name__ if len(self._atoms) else '-'
        return (
            "Simulation\n"
            f"    Atom type: {atom_type}\n"
            f"    Trajectory file: {self.path_trajectory}\n"
            f"    Total number of frames: {self.raw_length()}\n"
            f"    Frame range: {self._frame_range.start}:{self._frame_range.step}:{self._frame_range[-1]}\n"
            f"    Number of frames in range: {len(self)}\n"
            f"    Current frame: {self._frame_index}"
        )

    def __enter__(self) -> 'Simulation':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def read_lock(self) -> threading.RLock:
        """Guard serializing reads; hold it to keep a frame valid across several calls."""
        return self._read_lock

    @property
    def frame_range(self) -> range:
        return self._frame_range

    @property
    def frame_index(self) -> Optional[int]:
        """Raw index of the frame in the buffer, None if none was read since the last restart."""
        return self._frame_index

    current_index = frame_index

    @property
    def atoms(self) -> Sequence:
        return self._atoms

    @property
    def backend(self):
        return self._backend

    @property
    def path_trajectory(self) -> str:
        return str(Path(self._backend.path).resolve())

    def raw_length(self) -> int:
        """Number of frames in the trajectory file."""
        return self._backend.frame_count()

    def __len__(self) -> int:
        return len(self._frame_range)

    def selected_length(self) -> int:
        """Number of frames in the selection."""
        return len(self._frame_range)

    def masses(self, indices: Optional[Sequence[int]] = None) -> np.ndarray:
        return atom_masses(self._atoms, indices)

    def close(self) -> None:
        with self._read_lock:
            self._backend.close()

    def restart(self) -> 'Simulation':
        """Reopen the trajectory; no frame is current afterwards."""
        with self._read_lock:
            self._backend.reopen()
            self._frame_index = None
        return self

    def set_selection(self, first: int = 1, last: Optional[int] = None, step: int = 1) -> 'Simulation':
        """Replace the frame selection and restart the iteration."""
        with self._read_lock:
            self._frame_range = frame_selection(self.raw_length(), first, last, step)
            self.restart()
        logger.debug(f"Frame range set to {first}:{step}:{self._frame_range[-1]}")
        return self

    set_frame_range = set_selection

    def current(self) -> TrajectoryFrame:
        with self._read_lock:
            if self._frame_index is None:
                raise NoFrameRead("No frame has been read yet.")
            return self._frame

    current_frame = current

    @property
    def unitcell(self) -> np.ndarray:
        """Unit cell (cell vectors as columns) of the current frame."""
        return self.current().unitcell

    def advance(self) -> TrajectoryFrame:
        """
        Read the next selected frame into the buffer and return it.

        Raw frames that are not part of the selection are read and discarded.

        Raises:
            EndOfSelection: if the last selected frame was already read, or the
                file ends before the next selected frame (the simulation is
                restarted in that case)
            OSError: if the backend cannot decode a frame (the simulation is
                restarted before the error propagates)
        """
        with self._read_lock:
            frame_range = self._frame_range
            last = frame_range[-1]
            if self._frame_index == last:
                raise EndOfSelection(f"End of trajectory: frame {last} is the last of {frame_range}.")
            iframe = 0 if self._frame_index is None else self._frame_index
            try:
                self._backend.read_next(self._frame)
                iframe += 1
                while iframe not in frame_range and iframe < last:
                    self._backend.read_next(self._frame)
                    iframe += 1
            except EndOfData as e:
                self.restart()
                raise EndOfSelection(f"End of trajectory: file has {self.raw_length()} frames, "
                                     f"selection ends at {last}.") from e
            except OSError:
                # Cursor is somewhere inside the broken frame
                self.restart()
                raise
            if iframe not in frame_range:
                self.restart()
                raise EndOfSelection(f"End of trajectory: raw frame {iframe} is not in {frame_range}.")
            self._frame_index = iframe
            return self._frame

    nextframe = advance

    def firstframe(self) -> 'Simulation':
        """Restart and place the first selected frame in the buffer."""
        with self._read_lock:
            self.restart()
            self.advance()
        return self

    def seek_to(self, index: int) -> TrajectoryFrame:
        """
        Place raw frame ``index`` in the buffer and return it.

        The file is reopened and read forward, so the cost grows with the
        distance from the start of the file.
        """
        with self._read_lock:
            if index not in self._frame_range:
                raise OutOfRange(f"Index {index} out of simulation range: {self._frame_range}.")
            self.restart()
            while self._frame_index != index:
                self.advance()
            return self._frame

    def get_frame(self, index: int) -> List:
        """
        Copy the coordinates of frame ``index`` into the atom records.

        The simulation is restarted afterwards.

        Returns:
            The atom records, with updated positions
        """
        with self._read_lock:
            positions = self.seek_to(index).positions.copy()
            self.restart()
        for atom, p in zip(self._atoms, positions):
            atom.position = p
        return self._atoms

    def __iter__(self) -> Iterator[TrajectoryFrame]:
        self.restart()
        while self._frame_index != self._frame_range[-1]:
            yield self.advance()

    def items(self) -> Iterator[Tuple[int, TrajectoryFrame]]:
        """Iterate over (raw frame index, frame) pairs."""
        for frame in self:
            yield self._frame_index, frame
