import numpy as np
import pytest

from fivepoint.core.eigen import essential_matrices_from_action, normalize_scale
from fivepoint.core.essential import constraint_residuals, essential_from_pose, skew
from fivepoint.core.nullspace import matrix_to_vector
from fivepoint.errors import NumericOverflowError


def _rot_x(a: float) -> np.ndarray:
    ca, sa = np.cos(a), np.sin(a)
    return np.array([[1, 0, 0], [0, ca, -sa], [0, sa, ca]], dtype=np.float64)


def _basis_with_offset(E0: np.ndarray) -> np.ndarray:
    # x, y, z directions are arbitrary; the constant term is E0.
    basis = np.eye(9)[[0, 1, 2, 3]].copy()
    basis[3] = matrix_to_vector(E0)
    return basis


def test_candidates_with_vanishing_scale_component_are_dropped():
    E0 = essential_from_pose(_rot_x(0.3), np.array([0.2, -1.0, 0.5]))
    action = np.diag(np.arange(1.0, 11.0))
    res = essential_matrices_from_action(_basis_with_offset(E0), action)
    assert res.real_eigenvalues == 10
    # Eigenvectors e0..e8 have a zero scale entry; e9 gives x = y = z = 0.
    assert res.dropped_candidates == 9
    assert len(res.essential_matrices) == 1
    E = res.essential_matrices[0]
    assert np.all(np.isfinite(E))
    np.testing.assert_allclose(E, E0 / E0[2, 2], atol=1e-12)


def test_vanishing_bottom_right_entry_falls_back_to_unit_norm():
    E0 = skew(np.array([1.0, 0.2, 0.1]))  # pure translation: E[2,2] == 0
    action = np.diag(np.arange(1.0, 11.0))
    res = essential_matrices_from_action(_basis_with_offset(E0), action, normalization="bottom_right")
    assert len(res.essential_matrices) == 1
    E = res.essential_matrices[0]
    assert np.all(np.isfinite(E))
    np.testing.assert_allclose(E, E0 / np.linalg.norm(E0), atol=1e-12)


def test_complex_eigenvalues_are_skipped():
    basis = np.eye(9)[[0, 1, 2, 8]]
    action = np.zeros((10, 10))
    # Rotation block -> eigenvalues +-i, remaining diagonal real.
    action[0, 1], action[1, 0] = -1.0, 1.0
    action[9, 9] = 2.0
    res = essential_matrices_from_action(basis, action)
    assert res.real_eigenvalues == 8
    assert len(res.essential_matrices) + res.dropped_candidates == 8


def test_near_real_conjugate_pair_yields_at_most_one_candidate():
    rng = np.random.default_rng(0)
    D = np.zeros((10, 10))
    # One pair -0.3 +- 1e-5j, four pairs far from the real axis.
    for k, (re, im) in enumerate([(-0.3, 1e-5), (0.5, 1.0), (1.5, 2.0), (-1.0, 0.7), (2.5, 1.3)]):
        i = 2 * k
        D[i, i] = D[i + 1, i + 1] = re
        D[i, i + 1], D[i + 1, i] = -im, im
    P = rng.normal(size=(10, 10))
    action = P @ D @ np.linalg.inv(P)

    E0 = essential_from_pose(_rot_x(-0.2), np.array([1.0, 0.3, -0.4]))
    basis = _basis_with_offset(E0)
    basis[:3] = rng.normal(size=(3, 9))

    tol = 1e-4
    res = essential_matrices_from_action(basis, action, tolerance=tol)
    assert res.real_eigenvalues == 1
    assert len(res.essential_matrices) <= 1
    assert len(res.essential_matrices) + res.dropped_candidates == 1
    for E in res.essential_matrices:
        det, sv = constraint_residuals(E)
        assert det <= tol
        assert sv <= tol


def test_normalize_scale_modes():
    v = np.arange(1.0, 10.0)
    np.testing.assert_allclose(normalize_scale(v)[8], 1.0)
    f = normalize_scale(-v, "frobenius")
    assert abs(np.linalg.norm(f) - 1.0) < 1e-12
    assert f[8] > 0.0
    with pytest.raises(NumericOverflowError):
        normalize_scale(np.r_[np.ones(8), 0.0])
    # Threshold is relative to the norm of the vector.
    with pytest.raises(NumericOverflowError):
        normalize_scale(np.r_[1e6 * np.ones(8), 1e-7])
    with pytest.raises(ValueError):
        normalize_scale(v, "max")
