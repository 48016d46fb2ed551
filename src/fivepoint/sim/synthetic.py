from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from fivepoint.core.essential import essential_from_pose


@dataclass(frozen=True)
class SyntheticTwoView:
    """
    Two calibrated views of a random point cloud.

    Convention (left camera is the reference frame):
    - X_R = R_RL X_L + t_RL
    - `left` / `right`: normalized coordinates x = X/Z, y = Y/Z, shape (N,2)
    """

    R_RL: np.ndarray  # (3,3)
    t_RL: np.ndarray  # (3,)
    XYZ_left: np.ndarray  # (N,3)
    left: np.ndarray  # (N,2)
    right: np.ndarray  # (N,2)

    @property
    def essential_gt(self) -> np.ndarray:
        return essential_from_pose(self.R_RL, self.t_RL)


def project_normalized(P_cam: np.ndarray) -> np.ndarray:
    P_cam = np.asarray(P_cam, dtype=np.float64).reshape(-1, 3)
    if np.any(P_cam[:, 2] <= 0.0):
        raise ValueError("points must lie in front of the camera (Z > 0)")
    return P_cam[:, :2] / P_cam[:, 2:3]


def random_two_view(
    rng: np.random.Generator,
    *,
    n_points: int = 5,
    max_angle_rad: float = 0.3,
    baseline: float = 1.0,
    depth_range: tuple[float, float] = (4.0, 8.0),
    half_fov: float = 0.5,
) -> SyntheticTwoView:
    """
    Random rotation (axis-angle, angle <= max_angle_rad), random translation of
    norm `baseline`, and points sampled in the left frustum, visible in both views.
    """
    from scipy.spatial.transform import Rotation as R  # type: ignore

    for _ in range(1000):
        axis = rng.normal(size=3)
        axis /= np.linalg.norm(axis)
        angle = float(rng.uniform(0.05, max_angle_rad))
        R_RL = R.from_rotvec(axis * angle).as_matrix()
        t = rng.normal(size=3)
        t_RL = float(baseline) * t / np.linalg.norm(t)

        z = rng.uniform(depth_range[0], depth_range[1], size=(n_points,))
        xy = rng.uniform(-half_fov, half_fov, size=(n_points, 2)) * z[:, None]
        XYZ_left = np.concatenate([xy, z[:, None]], axis=1)
        XYZ_right = XYZ_left @ R_RL.T + t_RL[None, :]
        if np.any(XYZ_right[:, 2] <= 0.1):
            continue

        return SyntheticTwoView(
            R_RL=R_RL,
            t_RL=t_RL,
            XYZ_left=XYZ_left,
            left=project_normalized(XYZ_left),
            right=project_normalized(XYZ_right),
        )
    raise RuntimeError("failed to sample a two-view configuration with points in front of both cameras")
