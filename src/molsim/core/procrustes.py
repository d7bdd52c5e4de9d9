"""
Rigid-body superposition of point sets.

The optimal rotation is obtained with the quaternion method: a symmetric 4x4
key matrix is accumulated from the sums and differences of the centered
coordinates, and the eigenvector of its smallest eigenvalue is the unit
quaternion of the rotation that minimizes the summed squared distance.

Only proper rotations and translations are applied; there is no scaling and
no reflection correction. Fewer than three non-collinear points give an
ill-defined rotation, which is left to the caller.
"""
import numpy as np
import logging
from typing import Optional, Sequence, Union

from .errors import DimensionMismatch

logger = logging.getLogger(__name__)

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]


def _as_points(points: ArrayLike, name: str) -> np.ndarray:
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise DimensionMismatch(f"{name} must be a set of 3D points with shape (N, 3), got {arr.shape}")
    return arr


def center_of_mass(points: ArrayLike, weights: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Weighted mean of a set of points.

    Args:
        points: (N, 3) coordinates
        weights: Optional per-point weights, uniform if not given

    Returns:
        The 3-component center
    """
    p = np.asarray(points, dtype=np.float64)
    if weights is None:
        return p.mean(axis=0)
    w = np.asarray(weights, dtype=np.float64)
    if w.ndim != 1 or len(w) != len(p):
        raise DimensionMismatch(f"Got {len(w)} weights for {len(p)} points.")
    return (w[:, None] * p).sum(axis=0) / w.sum()


def key_matrix(xm: np.ndarray, xp: np.ndarray) -> np.ndarray:
    """
    Symmetric 4x4 matrix whose lowest eigenvector is the optimal quaternion.

    Args:
        xm: (N, 3) differences fixed - moving of centered points
        xp: (N, 3) sums fixed + moving of centered points
    """
    m0, m1, m2 = xm[:, 0], xm[:, 1], xm[:, 2]
    p0, p1, p2 = xp[:, 0], xp[:, 1], xp[:, 2]

    q = np.empty((4, 4))
    q[0, 0] = np.sum(m0**2 + m1**2 + m2**2)
    q[0, 1] = np.sum(p1 * m2 - m1 * p2)
    q[0, 2] = np.sum(m0 * p2 - p0 * m2)
    q[0, 3] = np.sum(p0 * m1 - m0 * p1)
    q[1, 1] = np.sum(p1**2 + p2**2 + m0**2)
    q[1, 2] = np.sum(m0 * m1 - p0 * p1)
    q[1, 3] = np.sum(m0 * m2 - p0 * p2)
    q[2, 2] = np.sum(p0**2 + p2**2 + m1**2)
    q[2, 3] = np.sum(m1 * m2 - p1 * p2)
    q[3, 3] = np.sum(p0**2 + p1**2 + m2**2)
    q[1, 0] = q[0, 1]
    q[2, 0] = q[0, 2]
    q[2, 1] = q[1, 2]
    q[3, 0] = q[0, 3]
    q[3, 1] = q[1, 3]
    q[3, 2] = q[2, 3]
    return q


def quaternion_to_rotation(v: np.ndarray) -> np.ndarray:
    """3x3 rotation matrix of the unit quaternion ``v = (q0, q1, q2, q3)``."""
    q0, q1, q2, q3 = v
    u = np.empty((3, 3))
    u[0, 0] = q0**2 + q1**2 - q2**2 - q3**2
    u[0, 1] = 2.0 * (q1 * q2 + q0 * q3)
    u[0, 2] = 2.0 * (q1 * q3 - q0 * q2)
    u[1, 0] = 2.0 * (q1 * q2 - q0 * q3)
    u[1, 1] = q0**2 + q2**2 - q1**2 - q3**2
    u[1, 2] = 2.0 * (q2 * q3 + q0 * q1)
    u[2, 0] = 2.0 * (q1 * q3 + q0 * q2)
    u[2, 1] = 2.0 * (q2 * q3 - q0 * q1)
    u[2, 2] = q0**2 + q3**2 - q1**2 - q2**2
    return u


def optimal_rotation(moving: np.ndarray, fixed: np.ndarray) -> np.ndarray:
    """Rotation matrix superposing centered ``moving`` onto centered ``fixed``."""
    q = key_matrix(fixed - moving, fixed + moving)
    # eigh sorts eigenvalues in ascending order
    _, vecs = np.linalg.eigh(q)
    return quaternion_to_rotation(vecs[:, 0])


def align_in_place(moving: np.ndarray, fixed: ArrayLike,
                   weights: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Superpose ``moving`` onto ``fixed``, overwriting ``moving``.

    Args:
        moving: (N, 3) float array, modified in place
        fixed: (N, 3) reference coordinates, not modified
        weights: Optional per-point weights (e.g. masses) for the centers

    Returns:
        ``moving``
    """
    if not isinstance(moving, np.ndarray) or not np.issubdtype(moving.dtype, np.floating):
        raise TypeError("align_in_place needs a floating point numpy array to overwrite.")
    x = _as_points(moving, "moving")
    y = _as_points(fixed, "fixed")
    if len(x) != len(y):
        raise DimensionMismatch(f"moving and fixed must have the same length, got {len(x)} and {len(y)}")

    cmx = center_of_mass(x, weights)
    cmy = center_of_mass(y, weights)
    xc = x - cmx
    yc = y - cmy

    u = optimal_rotation(xc, yc)
    moving[...] = xc @ u.T + cmy
    return moving


def align(moving: ArrayLike, fixed: ArrayLike,
          weights: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Return a copy of ``moving`` rigidly superposed onto ``fixed``.

    Solves the rotation-only Procrustes problem: the rotation and translation
    minimizing the summed squared distance between corresponding points.
    Correspondence is given by the order of the points.

    Args:
        moving: (N, 3) coordinates to be moved
        fixed: (N, 3) reference coordinates
        weights: Optional per-point weights (e.g. masses) for the centers

    Returns:
        New (N, 3) array with the aligned coordinates
    """
    x = np.array(moving, dtype=np.float64)
    return align_in_place(x, fixed, weights)
