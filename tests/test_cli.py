from __future__ import annotations

import json
from pathlib import Path

import numpy as np

from fivepoint.api.correspondence_io import save_correspondences
from fivepoint.cli.main import main


def test_synth_then_solve(tmp_path: Path) -> None:
    case = tmp_path / "case.json"
    out = tmp_path / "solutions.json"
    assert main(["synth", "--out", str(case), "--seed", "3"]) == 0
    assert main(["solve", str(case), "--out", str(out), "--normalization", "frobenius"]) == 0

    report = json.loads(out.read_text(encoding="utf-8"))
    assert report["success"] is True
    assert 1 <= report["n_solutions"] <= 10
    assert report["gt_distance"] < 1e-6


def test_solve_reports_wrong_count(tmp_path: Path, capsys) -> None:
    case = save_correspondences(tmp_path / "four.json", np.zeros((4, 2)), np.zeros((4, 2)))
    assert main(["solve", str(case)]) == 2
    report = json.loads(capsys.readouterr().out)
    assert report["success"] is False
    assert report["error"].startswith("InputCountError")
    assert report["n_solutions"] == 0


def test_check_config(tmp_path: Path, capsys) -> None:
    good = tmp_path / "good.json"
    good.write_text(json.dumps({"tolerance": 1e-5}), encoding="utf-8")
    assert main(["check-config", str(good)]) == 0
    assert json.loads(capsys.readouterr().out)["tolerance"] == 1e-5

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"normalization": "max"}), encoding="utf-8")
    assert main(["check-config", str(bad)]) == 1
