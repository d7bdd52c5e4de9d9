import pytest
import numpy as np

from molsim.core.errors import DimensionMismatch
from molsim.core.procrustes import (
    align,
    align_in_place,
    center_of_mass,
    optimal_rotation,
    quaternion_to_rotation,
)
from molsim.analysis.rmsd import rmsd


def random_rotation(rng):
    """Uniformly distributed proper rotation matrix."""
    q, r = np.linalg.qr(rng.normal(size=(3, 3)))
    q = q @ np.diag(np.sign(np.diag(r)))
    if np.linalg.det(q) < 0:
        q[:, 0] = -q[:, 0]
    return q


@pytest.fixture
def points():
    rng = np.random.default_rng(7)
    return rng.uniform(-10.0, 10.0, size=(20, 3))


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_align_recovers_rotated_translated_copy(points, seed):
    rng = np.random.default_rng(seed)
    y = (points + np.array([45.0, -15.0, 31.5])) @ random_rotation(rng).T
    assert rmsd(points, y) > 0.0
    z = align(points, y)
    assert rmsd(z, y) == pytest.approx(0.0, abs=1e-10)


def test_align_identity(points):
    np.testing.assert_allclose(align(points, points), points, atol=1e-10)


def test_align_does_not_modify_inputs(points):
    rng = np.random.default_rng(3)
    y = points @ random_rotation(rng).T + 5.0
    x_before, y_before = points.copy(), y.copy()
    align(points, y)
    np.testing.assert_array_equal(points, x_before)
    np.testing.assert_array_equal(y, y_before)


def test_align_in_place_overwrites_moving(points):
    rng = np.random.default_rng(4)
    y = points @ random_rotation(rng).T - 2.0
    x = points.copy()
    out = align_in_place(x, y)
    assert out is x
    np.testing.assert_allclose(x, y, atol=1e-9)


def test_align_in_place_needs_float_array(points):
    with pytest.raises(TypeError):
        align_in_place(points.tolist(), points)
    with pytest.raises(TypeError):
        align_in_place(np.zeros((3, 3), dtype=int), points[:3])


def test_align_accepts_sequences():
    x = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
    y = [[0.0, 0.0, 0.0], [0.0, 1.0, 0.0], [-1.0, 0.0, 0.0]]
    np.testing.assert_allclose(align(x, y), y, atol=1e-10)


def test_aligned_centroid_matches_fixed(points):
    rng = np.random.default_rng(5)
    noisy = points + rng.normal(scale=0.3, size=points.shape)
    z = align(noisy, points)
    np.testing.assert_allclose(z.mean(axis=0), points.mean(axis=0), atol=1e-10)
    assert rmsd(z, points) <= rmsd(noisy, points)


@pytest.mark.parametrize("moving, fixed", [
    (np.zeros((4, 3)), np.zeros((5, 3))),
    (np.zeros((4, 2)), np.zeros((4, 2))),
    (np.zeros(3), np.zeros(3)),
])
def test_align_dimension_mismatch(moving, fixed):
    with pytest.raises(DimensionMismatch):
        align(moving, fixed)


def test_dimension_mismatch_is_value_error():
    with pytest.raises(ValueError):
        align(np.zeros((4, 3)), np.zeros((5, 3)))


def test_weights_only_move_the_centers(points):
    rng = np.random.default_rng(6)
    weights = rng.uniform(1.0, 16.0, size=len(points))
    y = (points + 3.0) @ random_rotation(rng).T
    # For an exact rigid copy any weighting recovers it
    np.testing.assert_allclose(align(points, y, weights), y, atol=1e-9)
    z = align(points, y, weights)
    np.testing.assert_allclose(center_of_mass(z, weights), center_of_mass(y, weights), atol=1e-9)


def test_weights_length_mismatch(points):
    with pytest.raises(DimensionMismatch, match="weights"):
        align(points, points, weights=np.ones(3))


def test_center_of_mass():
    p = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
    np.testing.assert_allclose(center_of_mass(p), [1.0, 0.0, 0.0])
    np.testing.assert_allclose(center_of_mass(p, [3.0, 1.0]), [0.5, 0.0, 0.0])


def test_rotation_is_proper(points):
    rng = np.random.default_rng(8)
    y = points @ random_rotation(rng).T
    xc = points - points.mean(axis=0)
    yc = y - y.mean(axis=0)
    u = optimal_rotation(xc, yc)
    np.testing.assert_allclose(u @ u.T, np.eye(3), atol=1e-10)
    assert np.linalg.det(u) == pytest.approx(1.0)


def test_identity_quaternion():
    np.testing.assert_allclose(quaternion_to_rotation(np.array([1.0, 0.0, 0.0, 0.0])), np.eye(3))
