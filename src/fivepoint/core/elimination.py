from __future__ import annotations

from typing import Sequence

import numpy as np

from fivepoint.core.polynomial import Polynomial, coefficient_matrix
from fivepoint.errors import DegenerateConfigurationError

N_CONSTRAINTS = 10

# Multiplication by x maps the quotient basis [x2 xy y2 xz yz z2 x y z 1] either
# onto a leading cubic (row of the reduced template) or back into the basis.
_ACTION_GROEBNER_ROWS = (0, 1, 2, 4, 5, 7)  # x3 x2y xy2 x2z xyz xz2
_ACTION_UNIT_ENTRIES = ((6, 0), (7, 1), (8, 3), (9, 6))  # x*x, x*y, x*z, x*1


def gauss_jordan(matrix: np.ndarray, n_pivots: int | None = None, pivot_tolerance: float = 1e-12) -> np.ndarray:
    """
    Reduced row-echelon form with partial pivoting, pivoting on the first
    `n_pivots` columns (default: number of rows).

    Raises DegenerateConfigurationError if a pivot column has no entry above
    `pivot_tolerance` times the largest magnitude of the pivot block.
    """
    A = np.array(matrix, dtype=np.float64)
    if A.ndim != 2:
        raise ValueError("matrix must be 2-D")
    rows, cols = A.shape
    n_pivots = rows if n_pivots is None else int(n_pivots)
    if n_pivots > min(rows, cols):
        raise ValueError("cannot pivot on more columns than rows/cols")

    scale = float(np.max(np.abs(A[:, :n_pivots]))) if A.size else 0.0
    if not np.isfinite(scale) or scale == 0.0:
        raise DegenerateConfigurationError("elimination template has an empty or non-finite pivot block")
    thresh = float(pivot_tolerance) * scale

    for col in range(n_pivots):
        p = col + int(np.argmax(np.abs(A[col:, col])))
        if abs(A[p, col]) <= thresh:
            raise DegenerateConfigurationError(
                f"elimination template is singular at pivot {col} (|pivot|={abs(A[p, col]):.3e})"
            )
        if p != col:
            A[[col, p]] = A[[p, col]]
        A[col] /= A[col, col]
        others = np.arange(rows) != col
        A[others] -= np.outer(A[others, col], A[col])
    return A


def groebner_basis(constraints: Sequence[Polynomial], pivot_tolerance: float = 1e-12) -> np.ndarray:
    """
    Row-reduce the 10x20 coefficient template so its leading block is the
    identity and return the trailing 10x10 block.
    """
    if len(constraints) != N_CONSTRAINTS:
        raise ValueError(f"expected {N_CONSTRAINTS} constraint polynomials, got {len(constraints)}")
    A = coefficient_matrix(constraints)
    reduced = gauss_jordan(A, n_pivots=N_CONSTRAINTS, pivot_tolerance=pivot_tolerance)
    return reduced[:, N_CONSTRAINTS:].copy()


def action_matrix(groebner: np.ndarray) -> np.ndarray:
    """
    10x10 matrix M with M @ b = x * b for b = [x2 xy y2 xz yz z2 x y z 1]
    evaluated at any root of the constraint system.
    """
    G = np.asarray(groebner, dtype=np.float64)
    if G.shape != (N_CONSTRAINTS, N_CONSTRAINTS):
        raise ValueError(f"groebner block must be 10x10, got {G.shape}")
    M = np.zeros((10, 10), dtype=np.float64)
    M[: len(_ACTION_GROEBNER_ROWS)] = -G[list(_ACTION_GROEBNER_ROWS)]
    for r, c in _ACTION_UNIT_ENTRIES:
        M[r, c] = 1.0
    return M
