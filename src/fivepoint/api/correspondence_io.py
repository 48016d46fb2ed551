from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from fivepoint.core.essential import constraint_residuals, epipolar_residuals

CORRESPONDENCES_SCHEMA = "fivepoint.correspondences.v0"
SOLUTIONS_SCHEMA = "fivepoint.solutions.v0"


def _to_points(x: Any, name: str) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        x = x.reshape(0, 2)
    if x.ndim != 2 or x.shape[1] != 2:
        raise ValueError(f"{name} must be a list of [x, y] pairs")
    if not np.all(np.isfinite(x)):
        raise ValueError(f"{name}: non-finite values")
    return x


def load_correspondences(path: Path) -> tuple[np.ndarray, np.ndarray, np.ndarray | None]:
    """
    Load (right, left, essential_gt) from a JSON or NPZ file.

    JSON: {"schema_version": "fivepoint.correspondences.v0",
           "right": [[x, y], ...], "left": [[x, y], ...], "essential_gt": optional 3x3}
    NPZ: arrays `right`, `left` and optionally `essential_gt`.
    """
    path = Path(path)
    if path.suffix.lower() == ".npz":
        with np.load(str(path)) as npz:
            for k in ("right", "left"):
                if k not in npz:
                    raise ValueError(f"{path} missing key: {k}")
            right = _to_points(npz["right"], "right")
            left = _to_points(npz["left"], "left")
            gt = np.asarray(npz["essential_gt"], dtype=np.float64).reshape(3, 3) if "essential_gt" in npz else None
        return right, left, gt

    data = json.loads(path.read_text(encoding="utf-8"))
    if str(data.get("schema_version")) != CORRESPONDENCES_SCHEMA:
        raise ValueError(f"{path} schema_version must be {CORRESPONDENCES_SCHEMA}")
    try:
        right = _to_points(data["right"], "right")
        left = _to_points(data["left"], "left")
    except KeyError as e:
        raise ValueError(f"{path} missing key: {e}") from e
    gt_raw = data.get("essential_gt")
    gt = np.asarray(gt_raw, dtype=np.float64).reshape(3, 3) if gt_raw is not None else None
    return right, left, gt


def save_correspondences(
    path: Path, right: np.ndarray, left: np.ndarray, essential_gt: np.ndarray | None = None
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = {
        "schema_version": CORRESPONDENCES_SCHEMA,
        "right": np.asarray(right, dtype=np.float64).reshape(-1, 2).tolist(),
        "left": np.asarray(left, dtype=np.float64).reshape(-1, 2).tolist(),
    }
    if essential_gt is not None:
        data["essential_gt"] = np.asarray(essential_gt, dtype=np.float64).reshape(3, 3).tolist()
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def solutions_to_dict(
    essential_matrices: Sequence[np.ndarray],
    right: np.ndarray,
    left: np.ndarray,
    *,
    error: str | None = None,
) -> dict[str, Any]:
    solutions = []
    for E in essential_matrices:
        det, sv = constraint_residuals(E)
        epi = epipolar_residuals(E, right, left)
        solutions.append(
            {
                "E": np.asarray(E, dtype=np.float64).reshape(3, 3).tolist(),
                "det_residual": det,
                "trace_residual": sv,
                "epipolar_rms": float(np.sqrt(np.mean(epi * epi))),
            }
        )
    return {
        "schema_version": SOLUTIONS_SCHEMA,
        "success": error is None,
        "error": error,
        "n_solutions": len(solutions),
        "solutions": solutions,
    }


def save_solutions(path: Path, report: dict[str, Any]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2, sort_keys=True), encoding="utf-8")
    return path
