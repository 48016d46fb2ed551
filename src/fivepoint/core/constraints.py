from __future__ import annotations

import numpy as np

from fivepoint.core.nullspace import vector_to_matrix
from fivepoint.core.polynomial import Polynomial, polynomial_sum

EntryGrid = list[list[Polynomial]]


def entry_polynomials(basis: np.ndarray) -> EntryGrid:
    """
    Entries of E = x*B0 + y*B1 + z*B2 + B3 as linear polynomials in (x, y, z).

    `basis` is (4,9) in the stacking of `epipolar_constraint_matrix`; the
    result is indexed as entries[row][col] of E.
    """
    basis = np.asarray(basis, dtype=np.float64)
    if basis.shape != (4, 9):
        raise ValueError(f"basis must be (4,9), got {basis.shape}")
    B = [vector_to_matrix(b) for b in basis]
    return [
        [Polynomial.linear(B[0][r, c], B[1][r, c], B[2][r, c], B[3][r, c]) for c in range(3)]
        for r in range(3)
    ]


def determinant_constraint(E: EntryGrid) -> Polynomial:
    # Cofactor expansion along the middle row.
    term_1 = E[1][1] * (E[0][0] * E[2][2] - E[2][0] * E[0][2])
    term_2 = E[1][2] * (E[0][1] * E[2][0] - E[0][0] * E[2][1])
    term_3 = E[1][0] * (E[0][2] * E[2][1] - E[0][1] * E[2][2])
    return term_1 + term_2 + term_3


def trace_constraints(E: EntryGrid) -> list[Polynomial]:
    """
    The nine entries of 2*E*E^T*E - trace(E*E^T)*E, row-major.
    """
    sum_of_squares = polynomial_sum(E[r][c] * E[r][c] for r in range(3) for c in range(3))

    # (E E^T)[r][k], quadratic; the factor 2 is folded in here.
    EEt = [[polynomial_sum(E[r][j] * E[k][j] for j in range(3)) * 2.0 for k in range(3)] for r in range(3)]

    out = []
    for r in range(3):
        for c in range(3):
            acc = -(E[r][c] * sum_of_squares)
            for k in range(3):
                acc = acc + EEt[r][k] * E[k][c]
            out.append(acc)
    return out


def constraint_polynomials(basis: np.ndarray) -> list[Polynomial]:
    """det(E) = 0 followed by the nine singular-value constraints."""
    E = entry_polynomials(basis)
    return [determinant_constraint(E), *trace_constraints(E)]
