import csv
import json
from pathlib import Path

import pytest

from chomp.datasets import ExportArgs, run_export
from chomp.game_basics import OutOfRange


def test_export_creates_csv_and_manifest(tmp_path: Path):
    out = tmp_path / "exp"
    res = run_export(ExportArgs(out=out, rows=2, columns=3))
    positions = res / "chomp_positions.csv"
    assert positions.exists()
    manifest = res / "manifest.json"
    assert manifest.exists()
    data = json.loads(manifest.read_text())
    assert data["dataset_version"]
    assert data["row_counts"]["positions"] == 10
    assert data["outcome_split"] == {"N": 6, "P": 4}
    assert data["checksums"]["positions_csv"]
    assert "source_revision" in data
    assert data["solver"]["board_squares"] == 6

    with positions.open(newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["board"] == "a1 a2 b1 b2 c1 c2"
    assert rows[0]["column_heights"] == "2 2 2"
    assert rows[0]["winning_move"] == "c2"
    assert rows[-1]["board"] == "-"
    assert rows[-1]["outcome"] == "P"


def test_run_export_reproducible(tmp_path: Path):
    out1 = run_export(ExportArgs(out=tmp_path / "exp1", rows=3, columns=3))
    out2 = run_export(ExportArgs(out=tmp_path / "exp2", rows=3, columns=3))
    m1 = json.loads((out1 / "manifest.json").read_text())
    m2 = json.loads((out2 / "manifest.json").read_text())
    assert m1["row_counts"] == m2["row_counts"]
    assert m1["schema_hash"] == m2["schema_hash"]
    assert (out1 / "chomp_positions.csv").read_bytes() == (out2 / "chomp_positions.csv").read_bytes()


def test_export_refuses_boards_over_the_limit(tmp_path: Path):
    with pytest.raises(OutOfRange):
        run_export(ExportArgs(out=tmp_path / "big", rows=4, columns=4, max_squares=12))


def test_export_unknown_format(tmp_path: Path):
    with pytest.raises(ValueError):
        run_export(ExportArgs(out=tmp_path / "x", rows=1, columns=2, format="xlsx"))


def test_manifest_records_solver_ceiling(tmp_path: Path):
    res = run_export(ExportArgs(out=tmp_path / "lim", rows=2, columns=2, max_squares=5))
    data = json.loads((res / "manifest.json").read_text())
    assert data["solver"] == {"board_squares": 4, "max_squares": 5}
