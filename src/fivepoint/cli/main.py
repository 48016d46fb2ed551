from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

import numpy as np

from fivepoint.api.correspondence_io import (
    load_correspondences,
    save_correspondences,
    save_solutions,
    solutions_to_dict,
)
from fivepoint.api.solver import FivePointSolver
from fivepoint.config import ConfigValidationError, SolverConfig, load_solver_config, solver_config_to_dict
from fivepoint.core.essential import scale_invariant_distance
from fivepoint.sim.synthetic import random_two_view


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="fivepoint")
    sub = parser.add_subparsers(dest="cmd", required=True)

    solve = sub.add_parser("solve", help="Essential matrices from five normalized correspondences (JSON or NPZ).")
    solve.add_argument("input", type=Path)
    solve.add_argument("--config", type=Path, default=None, help="Solver config JSON (fivepoint.config.v0).")
    solve.add_argument("--tolerance", type=float, default=None, help="Override rank / real-eigenvalue tolerance.")
    solve.add_argument("--normalization", type=str, default=None, choices=["bottom_right", "frobenius"])
    solve.add_argument("--out", type=Path, default=None, help="Write solutions JSON here (default: stdout).")
    solve.add_argument("-v", "--verbose", action="store_true")

    synth = sub.add_parser("synth", help="Write a random synthetic five-point problem with its ground-truth E.")
    synth.add_argument("--out", type=Path, required=True)
    synth.add_argument("--seed", type=int, default=0)
    synth.add_argument("--max-angle", type=float, default=0.3, help="Maximum rotation angle (rad).")

    chk = sub.add_parser("check-config", help="Validate a solver config JSON and print it with defaults filled in.")
    chk.add_argument("config", type=Path)

    args = parser.parse_args(argv)

    if args.cmd == "solve":
        cfg = load_solver_config(args.config) if args.config is not None else SolverConfig()
        if args.tolerance is not None:
            cfg = replace(cfg, tolerance=float(args.tolerance))
        if args.normalization is not None:
            cfg = replace(cfg, normalization=args.normalization)
        if args.verbose:
            cfg = replace(cfg, verbose=True)
        if cfg.verbose:
            logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(name)s: %(message)s")
            logging.getLogger("fivepoint").setLevel(logging.DEBUG)

        right, left, gt = load_correspondences(args.input)
        result = FivePointSolver(cfg).compute(right, left)
        report = solutions_to_dict(
            result.essential_matrices,
            right,
            left,
            error=None if result.success else f"{type(result.error).__name__}: {result.error}",
        )
        if gt is not None and result.essential_matrices:
            report["gt_distance"] = min(scale_invariant_distance(E, gt) for E in result.essential_matrices)

        if args.out is not None:
            save_solutions(args.out, report)
            print(f"Wrote {args.out}")
        else:
            print(json.dumps(report, indent=2, sort_keys=True))
        return 0 if result.success else 2

    if args.cmd == "synth":
        rng = np.random.default_rng(args.seed)
        scene = random_two_view(rng, n_points=5, max_angle_rad=args.max_angle)
        save_correspondences(args.out, scene.right, scene.left, essential_gt=scene.essential_gt)
        print(f"Wrote {args.out}")
        return 0

    if args.cmd == "check-config":
        try:
            cfg = load_solver_config(args.config)
        except ConfigValidationError as e:
            print(f"Invalid config: {e}")
            return 1
        print(json.dumps(solver_config_to_dict(cfg), indent=2, sort_keys=True))
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
