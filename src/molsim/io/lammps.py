"""
LAMMPS text dump backend.
"""
import bz2
import gzip
import re
import numpy as np
from pathlib import Path
import logging
from typing import List, Tuple, Union

from .backend import TrajectoryBackend
from ..core.errors import EndOfData, OpenError
from ..core.frame import TrajectoryFrame

logger = logging.getLogger(__name__)

# ITEM: TIMESTEP
# 81000
# ITEM: NUMBER OF ATOMS
# 1536
# ITEM: BOX BOUNDS pp pp pp
# 1.54223 26.5378
# 1.54223 26.5378
# 1.54223 26.5378
# ITEM: ATOMS id type x y z vx vy vz
# 247 1 3.69544 2.56202 3.27701 0.00433856 -0.00099307 -0.00486166
# 249 2 3.73324 3.05962 4.14359 0.00346029 0.00332502 -0.00731005

_ITEM_RE = re.compile(r'^ITEM: (TIMESTEP|NUMBER OF ATOMS|BOX BOUNDS|ATOMS) ?(.*)$')

_POSITION_COLUMNS = (
    (('xu', 'yu', 'zu'), False),
    (('x', 'y', 'z'), False),
    (('xs', 'ys', 'zs'), True),
)


def _open_text(path: Path):
    if path.suffix == '.gz':
        return gzip.open(path, 'rt')
    if path.suffix == '.bz2':
        return bz2.open(path, 'rt')
    return open(path, 'r')


def _box_from_bounds(bounds: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Convert dump box bounds into (origin, box with cell vectors as rows)."""
    if bounds.shape == (3, 2):
        lo, hi = bounds[:, 0], bounds[:, 1]
        return lo.copy(), np.diag(hi - lo)
    if bounds.shape != (3, 3):
        raise IOError('LAMMPS dump: Malformed box bounds in frame header')
    xy, xz, yz = bounds[0, 2], bounds[1, 2], bounds[2, 2]
    xlo = bounds[0, 0] - min(0.0, xy, xz, xy + xz)
    xhi = bounds[0, 1] - max(0.0, xy, xz, xy + xz)
    ylo = bounds[1, 0] - min(0.0, yz)
    yhi = bounds[1, 1] - max(0.0, yz)
    zlo, zhi = bounds[2, 0], bounds[2, 1]
    box = np.array([
        [xhi - xlo, 0.0, 0.0],
        [xy, yhi - ylo, 0.0],
        [xz, yz, zhi - zlo],
    ])
    return np.array([xlo, ylo, zlo]), box


class LammpsDumpBackend(TrajectoryBackend):
    """Read a LAMMPS text dump (optionally gzip or bzip2 compressed).

    The number of frames is determined by scanning the file once when it is
    opened. Atoms are ordered by their id. Coordinates are kept in the units
    of the file.
    """

    def __init__(self, filename: Union[str, Path]):
        super().__init__(filename)
        if not self._path.exists():
            raise OpenError(f"Trajectory file not found: {filename}")
        self._fh = None
        try:
            self._n_frames, self._natoms = self._index_file()
        except (IOError, ValueError, EOFError) as e:
            raise OpenError(f"LAMMPS dump: cannot index {self._path.name}: {e}") from e
        if self._n_frames == 0:
            raise OpenError(f"LAMMPS dump: no frames found in {self._path.name}")
        logger.info(f"Opened LAMMPS dump '{self._path.name}': {self._n_frames} frames, {self._natoms} atoms.")
        self._open()

    @property
    def n_atoms(self) -> int:
        return self._natoms

    def frame_count(self) -> int:
        return self._n_frames

    def _index_file(self) -> Tuple[int, int]:
        n_frames = 0
        natoms = None
        with _open_text(self._path) as fh:
            expect_natoms = False
            for line in fh:
                if line.startswith('ITEM: TIMESTEP'):
                    n_frames += 1
                elif line.startswith('ITEM: NUMBER OF ATOMS'):
                    expect_natoms = natoms is None
                elif expect_natoms:
                    natoms = int(line)
                    expect_natoms = False
        if n_frames and natoms is None:
            raise IOError("missing NUMBER OF ATOMS item")
        return n_frames, natoms or 0

    def _open(self) -> None:
        try:
            self._fh = _open_text(self._path)
        except OSError as e:
            raise OpenError(f"LAMMPS dump: failed to open {self._path}: {e}") from e
        self._cursor = 0

    def close(self) -> None:
        if self._fh is not None and not self._fh.closed:
            self._fh.close()

    def _read_frame_header(self) -> Tuple[int, int, np.ndarray, np.ndarray, List[str]]:
        step = natoms = None
        bounds = None
        while True:
            line = self._fh.readline()
            m = _ITEM_RE.match(line)
            if not m:
                if line == '':
                    raise EndOfData(f"End of {self._path.name} reached")
                if line.strip() == '':
                    continue
                raise IOError("LAMMPS dump: Failed to read/parse frame header")
            if m.group(1) == "TIMESTEP":
                step = int(self._fh.readline())
            elif m.group(1) == "NUMBER OF ATOMS":
                natoms = int(self._fh.readline())
            elif m.group(1) == "BOX BOUNDS":
                bounds = np.array([[float(v) for v in self._fh.readline().split()]
                                   for _ in range(3)])
            elif m.group(1) == "ATOMS":
                if step is None or natoms is None or bounds is None:
                    raise IOError("LAMMPS dump: Incomplete frame header")
                origin, box = _box_from_bounds(bounds)
                return step, natoms, origin, box, m.group(2).split()

    def _position_columns(self, cols: List[str]) -> Tuple[List[int], bool]:
        for keys, scaled in _POSITION_COLUMNS:
            if all(k in cols for k in keys):
                return [cols.index(k) for k in keys], scaled
        raise IOError('LAMMPS dump must contain at least atom-id, x, y, '
                      'and z coordinates to be useful.')

    def read_next(self, frame: TrajectoryFrame) -> TrajectoryFrame:
        if self._fh is None or self._fh.closed or self._cursor >= self._n_frames:
            raise EndOfData(f"No more frames in {self._path.name}")

        try:
            step, natoms, origin, box, cols = self._read_frame_header()
        except ValueError as e:
            raise IOError(f"LAMMPS dump: malformed header in frame {self._cursor + 1}: {e}") from e
        if natoms != self._natoms:
            raise IOError(f"LAMMPS dump: frame {self._cursor + 1} has {natoms} atoms, expected {self._natoms}")
        if 'id' not in cols:
            raise IOError("LAMMPS dump: atom id column missing")
        id_col = cols.index('id')
        x_cols, scaled = self._position_columns(cols)

        ids = np.empty(natoms, dtype=np.int64)
        coords = np.empty((natoms, 3))
        for i in range(natoms):
            parts = self._fh.readline().split()
            if len(parts) < len(cols):
                raise IOError(f"LAMMPS dump: truncated atom block in frame {self._cursor + 1} "
                              f"(atom line {i + 1} of {natoms})")
            try:
                ids[i] = int(parts[id_col])
                coords[i] = [float(parts[c]) for c in x_cols]
            except ValueError as e:
                raise IOError(f"LAMMPS dump: malformed atom line in frame {self._cursor + 1}: {e}") from e
        if scaled:
            coords = origin + coords @ box

        frame.x[...] = coords[np.argsort(ids)].T
        frame.box[...] = box
        frame.step = step
        self._cursor += 1
        return frame
