import logging

import numpy as np
import pytest

from fivepoint.api.solver import FivePointSolver, compute_essential_matrices, validate_correspondences
from fivepoint.config import SolverConfig
from fivepoint.core.essential import (
    constraint_residuals,
    epipolar_residuals,
    essential_from_pose,
    normalize_essential,
    scale_invariant_distance,
)
from fivepoint.errors import DegenerateConfigurationError, InputCountError
from fivepoint.sim.synthetic import project_normalized, random_two_view


def _best_distance(candidates, E) -> float:
    return min(scale_invariant_distance(C, E) for C in candidates)


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_recovers_ground_truth_essential_matrix(seed: int):
    scene = random_two_view(np.random.default_rng(seed))
    result = FivePointSolver().compute(scene.right, scene.left)
    assert result.success
    assert 1 <= len(result.essential_matrices) <= 10
    gt = normalize_essential(scene.essential_gt)
    assert _best_distance(result.essential_matrices, gt) < 1e-6


@pytest.mark.parametrize(
    "seed, max_angle",
    [(11, 0.3), (12, 0.3), (613, 0.6), (614, 0.6), (966, 0.6), (1, 0.6), (2, 0.6), (3, 0.6)],
)
def test_every_solution_is_an_essential_matrix(seed: int, max_angle: float):
    scene = random_two_view(np.random.default_rng(seed), max_angle_rad=max_angle)
    cfg = SolverConfig()
    for E in FivePointSolver(cfg).solve(scene.right, scene.left).essential_matrices:
        assert E.shape == (3, 3)
        assert np.all(np.isfinite(E))
        det, sv = constraint_residuals(E)
        assert det < cfg.tolerance
        assert sv < cfg.tolerance
        res = epipolar_residuals(E / np.linalg.norm(E), scene.right, scene.left)
        assert np.max(np.abs(res)) < cfg.tolerance


def test_solution_set_has_no_duplicates():
    for seed in (613, 614, 966):
        scene = random_two_view(np.random.default_rng(seed), max_angle_rad=0.6)
        Es = compute_essential_matrices(scene.right, scene.left)
        for i in range(len(Es)):
            for j in range(i + 1, len(Es)):
                assert scale_invariant_distance(Es[i], Es[j]) > 1e-9


@pytest.mark.parametrize("normalization", ["bottom_right", "frobenius"])
def test_pure_translation_ground_truth_is_recovered(normalization: str):
    rng = np.random.default_rng(20)
    z = rng.uniform(4.0, 8.0, size=(5,))
    XYZ_left = np.c_[rng.uniform(-0.5, 0.5, size=(5, 2)) * z[:, None], z]
    t = np.array([1.0, 0.2, 0.1])
    left = project_normalized(XYZ_left)
    right = project_normalized(XYZ_left + t)
    E_gt = essential_from_pose(np.eye(3), t)
    assert E_gt[2, 2] == 0.0

    result = FivePointSolver(SolverConfig(normalization=normalization)).solve(right, left)
    assert all(np.all(np.isfinite(E)) for E in result.essential_matrices)
    assert _best_distance(result.essential_matrices, E_gt) < 1e-6


def test_bottom_right_and_frobenius_normalization():
    scene = random_two_view(np.random.default_rng(12))
    for E in compute_essential_matrices(scene.right, scene.left):
        assert abs(E[2, 2] - 1.0) < 1e-12
    for E in compute_essential_matrices(scene.right, scene.left, normalization="frobenius"):
        assert abs(np.linalg.norm(E) - 1.0) < 1e-12
        assert E[2, 2] >= 0.0


def test_consistent_permutation_gives_the_same_solution_set():
    scene = random_two_view(np.random.default_rng(13))
    perm = np.array([3, 0, 4, 1, 2])
    a = compute_essential_matrices(scene.right, scene.left)
    b = compute_essential_matrices(scene.right[perm], scene.left[perm])
    assert len(a) == len(b)
    for E in a:
        assert _best_distance(b, E) < 1e-6
    for E in b:
        assert _best_distance(a, E) < 1e-6


@pytest.mark.parametrize("n", [0, 4, 6])
def test_wrong_point_count_fails_without_solutions(n: int):
    rng = np.random.default_rng(n)
    pts = rng.uniform(-0.5, 0.5, size=(n, 2))
    result = FivePointSolver().compute(pts, pts)
    assert not result.success
    assert isinstance(result.error, InputCountError)
    assert result.essential_matrices == ()
    with pytest.raises(InputCountError):
        FivePointSolver().solve(pts, pts)


def test_mismatched_point_counts_fail():
    scene = random_two_view(np.random.default_rng(14), n_points=6)
    with pytest.raises(InputCountError):
        validate_correspondences(scene.right[:5], scene.left)


def test_bad_point_shapes_raise_value_error():
    with pytest.raises(ValueError):
        validate_correspondences(np.zeros((5, 3)), np.zeros((5, 2)))
    bad = np.zeros((5, 2))
    bad[2, 1] = np.nan
    with pytest.raises(ValueError):
        validate_correspondences(bad, np.zeros((5, 2)))


def test_collinear_correspondences_are_reported_as_degenerate():
    s = np.array([-0.3, -0.1, 0.05, 0.2, 0.4])
    right = np.stack([s, 0.1 - 0.4 * s], axis=-1)
    left = np.stack([0.25 + 0.8 * s, 0.3 * s - 0.2], axis=-1)
    result = FivePointSolver().compute(right, left)
    assert not result.success
    assert isinstance(result.error, DegenerateConfigurationError)
    assert result.essential_matrices == ()
    with pytest.raises(DegenerateConfigurationError):
        compute_essential_matrices(right, left)


def test_verbose_solver_logs_failures(caplog):
    solver = FivePointSolver(SolverConfig(verbose=True))
    with caplog.at_level(logging.WARNING, logger="fivepoint"):
        result = solver.compute(np.zeros((4, 2)), np.zeros((4, 2)))
    assert not result
    assert "InputCountError" in caplog.text


def test_config_and_individual_overrides_are_exclusive():
    scene = random_two_view(np.random.default_rng(15))
    with pytest.raises(ValueError):
        compute_essential_matrices(scene.right, scene.left, tolerance=1e-6, config=SolverConfig())
    with pytest.raises(ValueError):
        compute_essential_matrices(scene.right, scene.left, normalization="frobenius", config=SolverConfig())
    Es = compute_essential_matrices(scene.right, scene.left, config=SolverConfig(normalization="frobenius"))
    assert all(abs(np.linalg.norm(E) - 1.0) < 1e-12 for E in Es)
