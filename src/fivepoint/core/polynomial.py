from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

MAX_DEGREE = 3

# Canonical monomial ordering for the elimination template (exponents of x, y, z).
#   x3 x2y xy2 y3 x2z xyz y2z xz2 yz2 z3 | x2 xy y2 xz yz z2 x y z 1
MONOMIALS: tuple[tuple[int, int, int], ...] = (
    (3, 0, 0),
    (2, 1, 0),
    (1, 2, 0),
    (0, 3, 0),
    (2, 0, 1),
    (1, 1, 1),
    (0, 2, 1),
    (1, 0, 2),
    (0, 1, 2),
    (0, 0, 3),
    (2, 0, 0),
    (1, 1, 0),
    (0, 2, 0),
    (1, 0, 1),
    (0, 1, 1),
    (0, 0, 2),
    (1, 0, 0),
    (0, 1, 0),
    (0, 0, 1),
    (0, 0, 0),
)

_N = MAX_DEGREE + 1
_DEGREE = np.add.outer(np.add.outer(np.arange(_N), np.arange(_N)), np.arange(_N))
_MONOMIAL_INDEX = tuple(np.asarray(MONOMIALS, dtype=np.intp).T)


class Polynomial:
    """
    Real polynomial in (x, y, z) of total degree <= 3.

    Coefficients live in a dense (4, 4, 4) cube indexed by exponents, so every
    monomial of degree <= 3 has a slot (zero when the term is absent).
    """

    __slots__ = ("_cube",)

    def __init__(self, cube: np.ndarray) -> None:
        cube = np.array(cube, dtype=np.float64)
        if cube.shape != (_N, _N, _N):
            raise ValueError(f"coefficient cube must be {(_N, _N, _N)}, got {cube.shape}")
        if np.any(cube[_DEGREE > MAX_DEGREE] != 0.0):
            raise ValueError(f"terms of degree > {MAX_DEGREE} are not representable")
        cube.setflags(write=False)
        self._cube = cube

    @classmethod
    def zero(cls) -> "Polynomial":
        return cls(np.zeros((_N, _N, _N), dtype=np.float64))

    @classmethod
    def constant(cls, c: float) -> "Polynomial":
        cube = np.zeros((_N, _N, _N), dtype=np.float64)
        cube[0, 0, 0] = float(c)
        return cls(cube)

    @classmethod
    def linear(cls, cx: float, cy: float, cz: float, c0: float) -> "Polynomial":
        """cx*x + cy*y + cz*z + c0"""
        cube = np.zeros((_N, _N, _N), dtype=np.float64)
        cube[1, 0, 0] = float(cx)
        cube[0, 1, 0] = float(cy)
        cube[0, 0, 1] = float(cz)
        cube[0, 0, 0] = float(c0)
        return cls(cube)

    @classmethod
    def from_terms(cls, terms: dict[tuple[int, int, int], float]) -> "Polynomial":
        cube = np.zeros((_N, _N, _N), dtype=np.float64)
        for (i, j, k), c in terms.items():
            if min(i, j, k) < 0 or i + j + k > MAX_DEGREE:
                raise ValueError(f"invalid exponent triple {(i, j, k)}")
            cube[i, j, k] += float(c)
        return cls(cube)

    @property
    def cube(self) -> np.ndarray:
        return self._cube

    @property
    def degree(self) -> int:
        nz = _DEGREE[self._cube != 0.0]
        return int(nz.max()) if nz.size else -1

    def coefficient(self, i: int, j: int, k: int) -> float:
        if min(i, j, k) < 0 or i + j + k > MAX_DEGREE:
            raise KeyError((i, j, k))
        return float(self._cube[i, j, k])

    def terms(self) -> dict[tuple[int, int, int], float]:
        """All representable terms, zero coefficients included."""
        return {m: float(self._cube[m]) for m in _all_exponents()}

    def evaluate(self, x: float, y: float, z: float) -> float:
        px = np.power(float(x), np.arange(_N))
        py = np.power(float(y), np.arange(_N))
        pz = np.power(float(z), np.arange(_N))
        return float(np.einsum("ijk,i,j,k->", self._cube, px, py, pz))

    def __add__(self, other: "Polynomial") -> "Polynomial":
        if not isinstance(other, Polynomial):
            return NotImplemented
        return Polynomial(self._cube + other._cube)

    def __sub__(self, other: "Polynomial") -> "Polynomial":
        if not isinstance(other, Polynomial):
            return NotImplemented
        return Polynomial(self._cube - other._cube)

    def __neg__(self) -> "Polynomial":
        return Polynomial(-self._cube)

    def __mul__(self, other: "Polynomial | float") -> "Polynomial":
        if isinstance(other, (int, float, np.floating)):
            return Polynomial(self._cube * float(other))
        if not isinstance(other, Polynomial):
            return NotImplemented
        from scipy.signal import convolve  # type: ignore

        # Direct convolution keeps out-of-range products exactly zero.
        full = convolve(self._cube, other._cube, method="direct")
        if np.any(full[_N:, :, :] != 0.0) or np.any(full[:, _N:, :] != 0.0) or np.any(full[:, :, _N:] != 0.0):
            raise ValueError(f"product exceeds degree {MAX_DEGREE}")
        cube = full[:_N, :_N, :_N]
        if np.any(cube[_DEGREE > MAX_DEGREE] != 0.0):
            raise ValueError(f"product exceeds degree {MAX_DEGREE}")
        return Polynomial(cube)

    def __rmul__(self, other: float) -> "Polynomial":
        if isinstance(other, (int, float, np.floating)):
            return Polynomial(self._cube * float(other))
        return NotImplemented

    def __repr__(self) -> str:
        parts = [f"{c:+.6g}*x^{i}y^{j}z^{k}" for (i, j, k), c in self.terms().items() if c != 0.0]
        return f"Polynomial({' '.join(parts) or '0'})"


def _all_exponents() -> Iterable[tuple[int, int, int]]:
    for i in range(_N):
        for j in range(_N - i):
            for k in range(_N - i - j):
                yield (i, j, k)


def polynomial_sum(polys: Iterable[Polynomial]) -> Polynomial:
    out = Polynomial.zero()
    for p in polys:
        out = out + p
    return out


def coefficient_row(poly: Polynomial) -> np.ndarray:
    """Coefficients of `poly` in the `MONOMIALS` ordering, shape (20,)."""
    return np.asarray(poly.cube[_MONOMIAL_INDEX], dtype=np.float64)


def coefficient_matrix(polys: Sequence[Polynomial]) -> np.ndarray:
    return np.stack([coefficient_row(p) for p in polys], axis=0)
