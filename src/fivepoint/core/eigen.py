from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from fivepoint.core.essential import constraint_residuals
from fivepoint.core.nullspace import vector_to_matrix
from fivepoint.errors import NumericOverflowError

logger = logging.getLogger(__name__)

# Positions of x, y, z and 1 in the quotient basis [x2 xy y2 xz yz z2 x y z 1].
_X, _Y, _Z, _ONE = 6, 7, 8, 9


@dataclass(frozen=True)
class EigenResolution:
    essential_matrices: list[np.ndarray]
    real_eigenvalues: int
    dropped_candidates: int


def _checked_divisor(value, scale_tolerance: float, what: str):
    if not np.isfinite(value) or abs(value) <= scale_tolerance:
        raise NumericOverflowError(f"{what} is too close to zero ({abs(value):.3e})")
    return value


def normalize_scale(vec: np.ndarray, normalization: str = "bottom_right", scale_tolerance: float = 1e-12) -> np.ndarray:
    """
    Fix the projective scale of a stacked essential matrix.

    - bottom_right: E[2,2] == 1 (last stacked entry); raises NumericOverflowError
      when |E[2,2]| <= scale_tolerance * ||E||
    - frobenius: unit norm with E[2,2] >= 0
    """
    vec = np.asarray(vec, dtype=np.float64)
    norm = float(np.linalg.norm(vec))
    if normalization == "bottom_right":
        _checked_divisor(float(vec[8]), scale_tolerance * norm, "E[2,2]")
        return vec / vec[8]
    if normalization == "frobenius":
        out = vec / _checked_divisor(norm, scale_tolerance, "norm of E")
        return -out if out[8] < 0.0 else out
    raise ValueError("normalization must be bottom_right|frobenius")


def _is_essential_vector(vec: np.ndarray, tolerance: float) -> bool:
    det, sv = constraint_residuals(vector_to_matrix(vec))
    return det <= tolerance and sv <= tolerance


def essential_matrices_from_action(
    basis: np.ndarray,
    action: np.ndarray,
    *,
    tolerance: float = 1e-4,
    scale_tolerance: float = 1e-12,
    normalization: str = "bottom_right",
) -> EigenResolution:
    """
    One essential matrix per real eigenvalue of the action matrix.

    The right eigenvector of a root is proportional to the quotient basis
    evaluated there, so (x, y, z) are its entries 6..8 over entry 9.

    Eigenvalues with |imag| <= tolerance count as real; of a conjugate pair
    only the member with imag >= 0 is used. Candidates are dropped when their
    scale entry vanishes or when det(E) / the trace constraint exceed
    `tolerance` on unit-norm E. A candidate with E[2,2] ~ 0 under bottom_right
    scaling is kept with frobenius scaling instead. Order follows the
    eigen-decomposition.
    """
    basis = np.asarray(basis, dtype=np.float64)
    if basis.shape != (4, 9):
        raise ValueError(f"basis must be (4,9), got {basis.shape}")

    eigvals, eigvecs = np.linalg.eig(np.asarray(action, dtype=np.float64))

    out: list[np.ndarray] = []
    n_real = 0
    dropped = 0
    for i, lam in enumerate(eigvals):
        if abs(lam.imag) > tolerance or lam.imag < 0.0:
            continue
        n_real += 1
        v = eigvecs[:, i]
        try:
            w = _checked_divisor(v[_ONE], scale_tolerance, "eigenvector scale component")
        except NumericOverflowError as e:
            dropped += 1
            logger.debug("dropping candidate for eigenvalue %.6g: %s", lam.real, e)
            continue
        x = float((v[_X] / w).real)
        y = float((v[_Y] / w).real)
        z = float((v[_Z] / w).real)
        linear_e = x * basis[0] + y * basis[1] + z * basis[2] + basis[3]

        if not _is_essential_vector(linear_e, tolerance):
            dropped += 1
            logger.debug("dropping candidate for eigenvalue %s: not an essential matrix", lam)
            continue

        try:
            linear_e = normalize_scale(linear_e, normalization, scale_tolerance)
        except NumericOverflowError as e:
            if normalization != "bottom_right":
                dropped += 1
                logger.debug("dropping candidate for eigenvalue %.6g: %s", lam.real, e)
                continue
            logger.debug("eigenvalue %.6g: %s, using frobenius scaling", lam.real, e)
            linear_e = normalize_scale(linear_e, "frobenius", scale_tolerance)
        out.append(vector_to_matrix(linear_e))

    return EigenResolution(essential_matrices=out, real_eigenvalues=n_real, dropped_candidates=dropped)
