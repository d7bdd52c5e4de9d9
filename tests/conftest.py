import pytest
import numpy as np

from molsim.io import write_lammps_dump, save_npy_trajectory

N_FRAMES = 5
N_ATOMS = 4

# x coordinate of the first atom in raw frames 1..5
FIRST_ATOM_X = np.array([4.104, 5.912, 6.221, 7.347, 8.050])


@pytest.fixture
def trajectory_positions():
    """(5, 4, 3) coordinates of a small rigid-ish molecule drifting along x."""
    rng = np.random.default_rng(42)
    base = np.array([
        [0.0, 0.0, 0.0],
        [1.5, 0.0, 0.0],
        [0.0, 1.5, 0.0],
        [0.0, 0.0, 1.5],
    ])
    positions = np.empty((N_FRAMES, N_ATOMS, 3))
    for i in range(N_FRAMES):
        noise = rng.normal(scale=0.05, size=(N_ATOMS, 3))
        noise[0] = 0.0
        positions[i] = base + noise + np.array([FIRST_ATOM_X[i], 2.0, 3.0])
    return positions


@pytest.fixture
def box_matrix():
    return np.diag([20.0, 20.0, 20.0])


@pytest.fixture
def lammps_dump(tmp_path, trajectory_positions, box_matrix):
    """Five frame LAMMPS dump file."""
    path = tmp_path / "traj.lammpstrj"
    write_lammps_dump(path, trajectory_positions, box_matrix)
    return path


@pytest.fixture
def npy_trajectory(tmp_path, trajectory_positions, box_matrix):
    """The same five frames in the .npy cache layout."""
    return save_npy_trajectory(tmp_path / "traj", trajectory_positions, box_matrix)


@pytest.fixture
def truncated_dump(tmp_path, lammps_dump):
    """The five frame dump with the last two atom lines of frame 5 missing."""
    path = tmp_path / "truncated.lammpstrj"
    lines = lammps_dump.read_text().splitlines(keepends=True)
    path.write_text(''.join(lines[:-2]))
    return path
