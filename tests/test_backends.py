import gzip

import pytest
import numpy as np

from molsim.core.errors import EndOfData, OpenError
from molsim.core.frame import TrajectoryFrame
from molsim.io import (
    LammpsDumpBackend,
    NpyBackend,
    OvitoBackend,
    detect_file_format,
    open_trajectory,
    save_npy_trajectory,
    write_lammps_dump,
)
from molsim.io.npy import cache_stem

from conftest import N_ATOMS, N_FRAMES, FIRST_ATOM_X


def read_all(backend):
    frame = backend.new_frame()
    frames = []
    while True:
        try:
            backend.read_next(frame)
        except EndOfData:
            return frames
        frames.append(frame.copy())


def test_lammps_reads_all_frames(lammps_dump, trajectory_positions, box_matrix):
    backend = LammpsDumpBackend(lammps_dump)
    assert backend.n_atoms == N_ATOMS
    assert backend.frame_count() == N_FRAMES
    frames = read_all(backend)
    assert len(frames) == N_FRAMES
    for i, frame in enumerate(frames):
        np.testing.assert_allclose(frame.positions, trajectory_positions[i], atol=1e-6)
        np.testing.assert_allclose(frame.box, box_matrix)
        assert frame.step == i
    backend.close()


def test_lammps_reopen_starts_over(lammps_dump):
    backend = LammpsDumpBackend(lammps_dump)
    frame = backend.new_frame()
    backend.read_next(frame)
    backend.read_next(frame)
    backend.reopen()
    backend.read_next(frame)
    assert frame.positions[0, 0] == pytest.approx(FIRST_ATOM_X[0])
    backend.close()


def test_lammps_read_after_close(lammps_dump):
    backend = LammpsDumpBackend(lammps_dump)
    backend.close()
    with pytest.raises(EndOfData):
        backend.read_next(backend.new_frame())


def test_lammps_triclinic_box(tmp_path, trajectory_positions):
    box = np.array([
        [10.0, 0.0, 0.0],
        [2.0, 9.0, 0.0],
        [1.0, 1.5, 8.0],
    ])
    path = tmp_path / "tri.dump"
    write_lammps_dump(path, trajectory_positions, box)
    backend = LammpsDumpBackend(path)
    frame = read_all(backend)[0]
    np.testing.assert_allclose(frame.box, box, atol=1e-8)
    np.testing.assert_allclose(frame.unitcell, box.T, atol=1e-8)
    np.testing.assert_allclose(frame.positions, trajectory_positions[0], atol=1e-6)


def test_lammps_gzip(tmp_path, lammps_dump, trajectory_positions):
    gz_path = tmp_path / "traj.lammpstrj.gz"
    with gzip.open(gz_path, 'wt') as f:
        f.write(lammps_dump.read_text())
    backend = open_trajectory(gz_path)
    assert isinstance(backend, LammpsDumpBackend)
    frames = read_all(backend)
    assert len(frames) == N_FRAMES
    np.testing.assert_allclose(frames[-1].positions, trajectory_positions[-1], atol=1e-6)


def test_lammps_scaled_and_unsorted(tmp_path):
    path = tmp_path / "scaled.lammpstrj"
    path.write_text(
        "ITEM: TIMESTEP\n100\n"
        "ITEM: NUMBER OF ATOMS\n2\n"
        "ITEM: BOX BOUNDS pp pp pp\n"
        "1.0 11.0\n0.0 10.0\n0.0 20.0\n"
        "ITEM: ATOMS id type xs ys zs\n"
        "2 1 0.5 0.5 0.5\n"
        "1 1 0.0 0.1 0.25\n"
    )
    backend = LammpsDumpBackend(path)
    frame = backend.read_next(backend.new_frame())
    assert frame.step == 100
    np.testing.assert_allclose(frame.positions, [[1.0, 1.0, 5.0], [6.0, 5.0, 10.0]])


def test_lammps_missing_id_column(tmp_path):
    path = tmp_path / "noid.lammpstrj"
    path.write_text(
        "ITEM: TIMESTEP\n0\n"
        "ITEM: NUMBER OF ATOMS\n1\n"
        "ITEM: BOX BOUNDS pp pp pp\n"
        "0.0 1.0\n0.0 1.0\n0.0 1.0\n"
        "ITEM: ATOMS type x y z\n"
        "1 0.5 0.5 0.5\n"
    )
    backend = LammpsDumpBackend(path)
    with pytest.raises(IOError, match="id"):
        backend.read_next(backend.new_frame())


@pytest.mark.parametrize("content", [
    "",
    "not a dump file\n",
    "ITEM: TIMESTEP\n0\nITEM: BOX BOUNDS pp pp pp\n",
])
def test_lammps_malformed_raises_open_error(tmp_path, content):
    path = tmp_path / "bad.lammpstrj"
    path.write_text(content)
    with pytest.raises(OpenError):
        LammpsDumpBackend(path)


def test_missing_file(tmp_path):
    with pytest.raises(OpenError, match="not found"):
        LammpsDumpBackend(tmp_path / "missing.lammpstrj")
    with pytest.raises(OSError):
        open_trajectory(tmp_path / "missing.npy")


def test_npy_backend(npy_trajectory, trajectory_positions, box_matrix):
    backend = NpyBackend(npy_trajectory)
    assert backend.n_atoms == N_ATOMS
    assert backend.frame_count() == N_FRAMES
    frames = read_all(backend)
    np.testing.assert_allclose(np.array([f.positions for f in frames]), trajectory_positions)
    np.testing.assert_allclose(frames[2].box, box_matrix)
    backend.reopen()
    frame = backend.read_next(backend.new_frame())
    assert frame.positions[0, 0] == pytest.approx(FIRST_ATOM_X[0])


def test_npy_per_frame_box(tmp_path, trajectory_positions):
    boxes = np.array([np.eye(3) * (10.0 + i) for i in range(N_FRAMES)])
    path = save_npy_trajectory(tmp_path / "boxes", trajectory_positions, boxes)
    frames = read_all(NpyBackend(tmp_path / "boxes"))
    assert path.name == "boxes.positions.npy"
    np.testing.assert_allclose(frames[3].box, boxes[3])


def test_npy_without_box(tmp_path, trajectory_positions):
    save_npy_trajectory(tmp_path / "nobox", trajectory_positions)
    frame = NpyBackend(tmp_path / "nobox.positions.npy").read_next(TrajectoryFrame.empty(N_ATOMS))
    np.testing.assert_array_equal(frame.box, np.zeros((3, 3)))


def test_npy_bad_shape(tmp_path):
    np.save(tmp_path / "bad.positions.npy", np.zeros((4, 3)))
    with pytest.raises(OpenError, match="expected"):
        NpyBackend(tmp_path / "bad")


def test_save_npy_validates_shape(tmp_path):
    with pytest.raises(ValueError, match="Positions must be 3D"):
        save_npy_trajectory(tmp_path / "x", np.zeros((4, 3)))


@pytest.mark.parametrize("name, stem", [
    ("traj.positions.npy", "traj"),
    ("traj.npy", "traj"),
    ("traj", "traj"),
])
def test_cache_stem(tmp_path, name, stem):
    assert cache_stem(tmp_path / name) == tmp_path / stem


@pytest.mark.parametrize("name, expected", [
    ("run.lammpstrj", "lammps"),
    ("run.dump", "lammps"),
    ("run.lammpstrj.gz", "lammps"),
    ("run.dump.bz2", "lammps"),
    ("run.positions.npy", "npy"),
    ("run.xyz", "ovito"),
    ("run.dcd", "ovito"),
])
def test_detect_file_format(name, expected):
    assert detect_file_format(name) == expected


def test_open_trajectory_explicit_format(npy_trajectory, lammps_dump):
    assert isinstance(open_trajectory(npy_trajectory, 'npy'), NpyBackend)
    assert isinstance(open_trajectory(lammps_dump, 'lammps'), LammpsDumpBackend)
    with pytest.raises(ValueError, match="Unsupported file format"):
        open_trajectory(lammps_dump, 'pdb')


@pytest.mark.skipif(OvitoBackend.reader_available(), reason="OVITO is installed")
def test_ovito_unavailable(lammps_dump):
    with pytest.raises(OpenError, match="OVITO"):
        OvitoBackend(lammps_dump)


@pytest.mark.skipif(not OvitoBackend.reader_available(), reason="OVITO not installed")
def test_ovito_backend_matches_lammps(lammps_dump, trajectory_positions):
    backend = OvitoBackend(lammps_dump, input_format='lammps/dump')
    assert backend.n_atoms == N_ATOMS
    assert backend.frame_count() == N_FRAMES
    frames = read_all(backend)
    np.testing.assert_allclose(frames[1].positions, trajectory_positions[1], atol=1e-5)


def test_frame_validation():
    with pytest.raises(ValueError, match="3xN"):
        TrajectoryFrame(x=np.zeros((4, 3)))
    with pytest.raises(ValueError, match="3x3"):
        TrajectoryFrame(x=np.zeros((3, 4)), box=np.zeros((2, 2)))
    frame = TrajectoryFrame.empty(6)
    assert frame.n_atoms == 6
    assert frame.positions.shape == (6, 3)


def test_lammps_truncated_atom_block(truncated_dump, trajectory_positions):
    backend = LammpsDumpBackend(truncated_dump)
    assert backend.frame_count() == N_FRAMES
    frame = backend.new_frame()
    for _ in range(N_FRAMES - 1):
        backend.read_next(frame)
    np.testing.assert_allclose(frame.positions, trajectory_positions[N_FRAMES - 2], atol=1e-6)
    with pytest.raises(IOError, match="truncated atom block in frame 5") as excinfo:
        backend.read_next(frame)
    assert not isinstance(excinfo.value, IndexError)


def test_lammps_malformed_atom_line(tmp_path):
    path = tmp_path / "badline.lammpstrj"
    path.write_text(
        "ITEM: TIMESTEP\n0\n"
        "ITEM: NUMBER OF ATOMS\n1\n"
        "ITEM: BOX BOUNDS pp pp pp\n"
        "0.0 1.0\n0.0 1.0\n0.0 1.0\n"
        "ITEM: ATOMS id type x y z\n"
        "1 1 0.5 abc 0.5\n"
    )
    backend = LammpsDumpBackend(path)
    with pytest.raises(IOError, match="malformed atom line"):
        backend.read_next(backend.new_frame())
