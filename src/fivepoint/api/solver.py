from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from fivepoint.config import SolverConfig
from fivepoint.core.constraints import constraint_polynomials
from fivepoint.core.eigen import essential_matrices_from_action
from fivepoint.core.elimination import action_matrix, groebner_basis
from fivepoint.core.nullspace import nullspace_basis
from fivepoint.errors import FivePointError, InputCountError

logger = logging.getLogger(__name__)

N_POINTS = 5


def _as_points(p, name: str) -> np.ndarray:
    p = np.asarray(p, dtype=np.float64)
    if p.size == 0:
        p = p.reshape(0, 2)
    if p.ndim != 2 or p.shape[1] != 2:
        raise ValueError(f"{name}_points must be an (N,2) array, got shape {p.shape}")
    return p


def validate_correspondences(right_points, left_points) -> tuple[np.ndarray, np.ndarray]:
    """
    Coerce both point sets to (5,2) float64 arrays.

    Raises InputCountError unless each side holds exactly five points.
    """
    r = _as_points(right_points, "right")
    l = _as_points(left_points, "left")
    if r.shape[0] != N_POINTS or l.shape[0] != N_POINTS:
        raise InputCountError(
            f"wrong number of input points: right_points has {r.shape[0]} "
            f"and left_points has {l.shape[0]} (need {N_POINTS})"
        )
    if not (np.all(np.isfinite(r)) and np.all(np.isfinite(l))):
        raise ValueError("non-finite point coordinates")
    return r, l


@dataclass(frozen=True)
class FivePointResult:
    """
    Outcome of one five-point solve.

    On failure `essential_matrices` is empty and `error` holds the reason.
    """

    essential_matrices: tuple[np.ndarray, ...]
    error: FivePointError | None = None
    real_eigenvalues: int = 0
    dropped_candidates: int = 0

    @property
    def success(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.success


class FivePointSolver:
    """
    Essential matrices from five calibrated correspondences (Nister's minimal
    problem, solved through an action matrix on the ten cubic constraints).

    Points must be normalized camera coordinates; the recovered E satisfy
    right^T E left = 0. Instances hold only a read-only config and can be
    shared across threads.
    """

    def __init__(self, config: SolverConfig | None = None) -> None:
        self.config = config if config is not None else SolverConfig()

    def solve(self, right_points, left_points) -> FivePointResult:
        """Like `compute`, but raises FivePointError subclasses on failure."""
        cfg = self.config
        r, l = validate_correspondences(right_points, left_points)

        t0 = time.perf_counter()
        basis = nullspace_basis(r, l, cfg.tolerance)
        constraints = constraint_polynomials(basis)
        G = groebner_basis(constraints, cfg.pivot_tolerance)
        M = action_matrix(G)
        res = essential_matrices_from_action(
            basis,
            M,
            tolerance=cfg.tolerance,
            scale_tolerance=cfg.scale_tolerance,
            normalization=cfg.normalization,
        )
        dt_ms = (time.perf_counter() - t0) * 1e3

        if res.dropped_candidates and cfg.verbose:
            logger.warning(
                "dropped %d candidate(s): vanishing scale or constraint residual above tolerance",
                res.dropped_candidates,
            )
        logger.debug(
            "five-point solve: %d real eigenvalue(s), %d essential matrice(s) in %.3fms",
            res.real_eigenvalues,
            len(res.essential_matrices),
            dt_ms,
        )
        return FivePointResult(
            essential_matrices=tuple(res.essential_matrices),
            real_eigenvalues=res.real_eigenvalues,
            dropped_candidates=res.dropped_candidates,
        )

    def compute(self, right_points, left_points) -> FivePointResult:
        """
        Solve and report failures through `FivePointResult.success` instead of
        raising, so a robust estimator can move on to the next sample.
        """
        try:
            return self.solve(right_points, left_points)
        except FivePointError as e:
            level = logging.WARNING if self.config.verbose else logging.DEBUG
            logger.log(level, "%s: %s", type(e).__name__, e)
            return FivePointResult(essential_matrices=(), error=e)


def compute_essential_matrices(
    right_points,
    left_points,
    *,
    tolerance: float | None = None,
    normalization: str | None = None,
    config: SolverConfig | None = None,
) -> list[np.ndarray]:
    """
    Convenience wrapper: returns the list of 3x3 essential matrices (0..10).

    Pass either `config` or the individual `tolerance` / `normalization`
    overrides, not both. Raises InputCountError, DegenerateConfigurationError
    on invalid input.
    """
    if config is None:
        overrides = {}
        if tolerance is not None:
            overrides["tolerance"] = float(tolerance)
        if normalization is not None:
            overrides["normalization"] = normalization
        config = SolverConfig(**overrides)
    elif tolerance is not None or normalization is not None:
        raise ValueError("pass either config or tolerance/normalization, not both")
    return list(FivePointSolver(config).solve(right_points, left_points).essential_matrices)
