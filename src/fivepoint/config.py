from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Literal

Normalization = Literal["bottom_right", "frobenius"]


class ConfigValidationError(ValueError):
    pass


@dataclass(frozen=True)
class SolverConfig:
    """
    Read-only numeric settings of the five-point solver.

    `tolerance` is used both as the relative singular-value cutoff of the
    epipolar system and as the bound on |imag| for an eigenvalue to count as real.
    """

    verbose: bool = False
    tolerance: float = 1e-4
    pivot_tolerance: float = 1e-12
    scale_tolerance: float = 1e-12
    normalization: Normalization = "bottom_right"


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigValidationError(msg)


def load_solver_config(path: Path) -> SolverConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_solver_config(data)


def parse_solver_config(data: dict[str, Any]) -> SolverConfig:
    _require(isinstance(data, dict), "solver config must be an object")
    schema_version = data.get("schema_version", "fivepoint.config.v0")
    _require(schema_version == "fivepoint.config.v0", "schema_version must be fivepoint.config.v0")

    known = {"schema_version", "verbose", "tolerance", "pivot_tolerance", "scale_tolerance", "normalization"}
    unknown = sorted(set(data) - known)
    _require(not unknown, f"unknown config keys: {unknown}")

    verbose = data.get("verbose", False)
    _require(isinstance(verbose, bool), "verbose must be a boolean")

    tols = {}
    for key in ("tolerance", "pivot_tolerance", "scale_tolerance"):
        raw = data.get(key, getattr(SolverConfig, key))
        _require(isinstance(raw, (int, float)) and not isinstance(raw, bool), f"{key} must be a number")
        value = float(raw)
        _require(0.0 < value < 1.0, f"{key} must be in (0, 1)")
        tols[key] = value

    normalization = data.get("normalization", "bottom_right")
    _require(normalization in ("bottom_right", "frobenius"), "normalization must be bottom_right|frobenius")

    return SolverConfig(verbose=verbose, normalization=normalization, **tols)


def solver_config_to_dict(config: SolverConfig) -> dict[str, Any]:
    out: dict[str, Any] = {"schema_version": "fivepoint.config.v0"}
    out.update(asdict(config))
    return out
