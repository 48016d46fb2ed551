"""
Five-point hypotheses inside a minimal RANSAC loop (demo).

Scoring and sampling are deliberately naive; the point is how a caller treats
failed samples (`result.success == False`) as "no hypothesis" and moves on.
"""
from __future__ import annotations

import numpy as np

from fivepoint import FivePointSolver, SolverConfig
from fivepoint.core.essential import epipolar_residuals, scale_invariant_distance
from fivepoint.sim.synthetic import random_two_view


def main() -> None:
    rng = np.random.default_rng(0)
    scene = random_two_view(rng, n_points=60)

    right = scene.right.copy()
    left = scene.left.copy()
    outliers = rng.choice(right.shape[0], size=15, replace=False)
    right[outliers] = rng.uniform(-0.5, 0.5, size=(outliers.size, 2))

    solver = FivePointSolver(SolverConfig(normalization="frobenius"))
    best_E, best_inliers = None, -1
    failed = 0
    for _ in range(200):
        idx = rng.choice(right.shape[0], size=5, replace=False)
        result = solver.compute(right[idx], left[idx])
        if not result.success:
            failed += 1
            continue
        for E in result.essential_matrices:
            n_in = int(np.sum(np.abs(epipolar_residuals(E, right, left)) < 1e-6))
            if n_in > best_inliers:
                best_E, best_inliers = E, n_in

    print(f"failed samples: {failed}")
    print(f"best hypothesis: {best_inliers} inliers out of {right.shape[0]}")
    if best_E is not None:
        print(f"distance to ground truth: {scale_invariant_distance(best_E, scene.essential_gt):.3e}")


if __name__ == "__main__":
    main()
