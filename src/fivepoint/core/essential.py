from __future__ import annotations

import numpy as np


def skew(t: np.ndarray) -> np.ndarray:
    """Cross-product matrix [t]_x."""
    tx, ty, tz = np.asarray(t, dtype=np.float64).reshape(3)
    return np.array([[0.0, -tz, ty], [tz, 0.0, -tx], [-ty, tx, 0.0]], dtype=np.float64)


def essential_from_pose(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """
    E = [t]_x R for the convention X_R = R X_L + t, so that
    right^T E left = 0 for homogeneous normalized points.
    """
    R = np.asarray(R, dtype=np.float64).reshape(3, 3)
    return skew(t) @ R


def normalize_essential(E: np.ndarray) -> np.ndarray:
    """Unit Frobenius norm; sign chosen so the largest-magnitude entry is positive."""
    E = np.asarray(E, dtype=np.float64).reshape(3, 3)
    n = float(np.linalg.norm(E))
    if not np.isfinite(n) or n == 0.0:
        raise ValueError("cannot normalize a zero or non-finite matrix")
    E = E / n
    flat = E.reshape(-1)
    if flat[int(np.argmax(np.abs(flat)))] < 0.0:
        E = -E
    return E


def scale_invariant_distance(A: np.ndarray, B: np.ndarray) -> float:
    """Frobenius distance between A and B after normalizing both, minimized over sign."""
    a = np.asarray(A, dtype=np.float64).reshape(3, 3)
    b = np.asarray(B, dtype=np.float64).reshape(3, 3)
    a = a / np.linalg.norm(a)
    b = b / np.linalg.norm(b)
    return float(min(np.linalg.norm(a - b), np.linalg.norm(a + b)))


def same_up_to_scale(A: np.ndarray, B: np.ndarray, tol: float = 1e-6) -> bool:
    return scale_invariant_distance(A, B) <= tol


def constraint_residuals(E: np.ndarray) -> tuple[float, float]:
    """
    (|det E|, ||E E^T E - 0.5 trace(E E^T) E||_F) evaluated on E scaled to unit norm.
    """
    E = np.asarray(E, dtype=np.float64).reshape(3, 3)
    E = E / np.linalg.norm(E)
    det = abs(float(np.linalg.det(E)))
    EEt = E @ E.T
    sv = E @ E.T @ E - 0.5 * np.trace(EEt) * E
    return det, float(np.linalg.norm(sv))


def is_essential(E: np.ndarray, tol: float = 1e-6) -> bool:
    det, sv = constraint_residuals(E)
    return det <= tol and sv <= tol


def epipolar_residuals(E: np.ndarray, right_points: np.ndarray, left_points: np.ndarray) -> np.ndarray:
    """Algebraic residuals right_i^T E left_i, shape (N,)."""
    E = np.asarray(E, dtype=np.float64).reshape(3, 3)
    r = np.asarray(right_points, dtype=np.float64).reshape(-1, 2)
    l = np.asarray(left_points, dtype=np.float64).reshape(-1, 2)
    rh = np.concatenate([r, np.ones((r.shape[0], 1))], axis=1)
    lh = np.concatenate([l, np.ones((l.shape[0], 1))], axis=1)
    return np.einsum("ni,ij,nj->n", rh, E, lh)
