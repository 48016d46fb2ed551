from __future__ import annotations

import numpy as np

from fivepoint.errors import DegenerateConfigurationError


def epipolar_constraint_matrix(right_points: np.ndarray, left_points: np.ndarray) -> np.ndarray:
    """
    Build the (N,9) linear system of `right^T E left = 0`.

    Row layout: [rx*lx, ry*lx, lx, rx*ly, ry*ly, ly, rx, ry, 1], i.e. the
    unknown vector is E stacked column by column (see `vector_to_matrix`).
    """
    r = np.asarray(right_points, dtype=np.float64).reshape(-1, 2)
    l = np.asarray(left_points, dtype=np.float64).reshape(-1, 2)
    if r.shape != l.shape:
        raise ValueError("right and left point arrays must have the same shape")
    rx, ry = r[:, 0], r[:, 1]
    lx, ly = l[:, 0], l[:, 1]
    one = np.ones_like(rx)
    return np.stack([rx * lx, ry * lx, lx, rx * ly, ry * ly, ly, rx, ry, one], axis=-1)


def nullspace_basis(right_points: np.ndarray, left_points: np.ndarray, tolerance: float = 1e-4) -> np.ndarray:
    """
    Returns (4,9): the right singular vectors of the 5x9 epipolar system
    associated with its four smallest singular values.

    The system must have rank 5; a fifth singular value <= tolerance * s_max
    means the correspondences do not pin down a 4-dimensional family.
    """
    A = epipolar_constraint_matrix(right_points, left_points)
    if A.shape != (5, 9):
        raise ValueError(f"expected a 5x9 epipolar system, got {A.shape}")

    _u, s, vt = np.linalg.svd(A, full_matrices=True)
    if not np.all(np.isfinite(s)):
        raise DegenerateConfigurationError("non-finite singular values in the epipolar system")
    s_max = float(s[0])
    if s_max <= 0.0 or float(s[4]) <= float(tolerance) * s_max:
        raise DegenerateConfigurationError(
            f"epipolar system is rank deficient (singular values {np.array2string(s, precision=3)})"
        )
    return np.ascontiguousarray(vt[5:, :])


def vector_to_matrix(vec: np.ndarray) -> np.ndarray:
    """Inverse of the column-major stacking used by `epipolar_constraint_matrix`."""
    vec = np.asarray(vec, dtype=np.float64).reshape(9)
    return vec.reshape(3, 3, order="F").copy()


def matrix_to_vector(E: np.ndarray) -> np.ndarray:
    E = np.asarray(E, dtype=np.float64).reshape(3, 3)
    return E.reshape(9, order="F").copy()
