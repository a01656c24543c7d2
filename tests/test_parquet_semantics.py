import json
from pathlib import Path

import pytest

from chomp.datasets import ExportArgs, run_export


def _hide_parquet_deps(monkeypatch: pytest.MonkeyPatch) -> None:
    # Simulate missing pandas/pyarrow by making importlib.find_spec return None
    import importlib

    real_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str, package=None):  # type: ignore[override]
        if name in {"pandas", "pyarrow"}:
            return None
        return real_find_spec(name, package)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)


def test_format_both_graceful_without_parquet_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    res = run_export(ExportArgs(out=tmp_path / "exp_both", rows=2, columns=2, format="both"))

    assert (res / "chomp_positions.csv").exists()
    manifest = json.loads((res / "manifest.json").read_text())
    assert manifest["parquet_written"] is False
    assert manifest["files"]["positions_parquet"] is None
    assert not (res / "chomp_positions.parquet").exists()


def test_format_parquet_raises_without_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    out = tmp_path / "exp_parquet"
    with pytest.raises(RuntimeError):
        run_export(ExportArgs(out=out, rows=2, columns=2, format="parquet"))

    # No partial outputs should exist
    assert not out.exists() or not any(out.iterdir())


def test_parquet_matches_csv_rows(tmp_path: Path):
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")
    res = run_export(ExportArgs(out=tmp_path / "exp_pq", rows=2, columns=3, format="both"))
    df = pd.read_parquet(res / "chomp_positions.parquet")
    df_csv = pd.read_csv(res / "chomp_positions.csv", keep_default_na=False)
    assert len(df) == len(df_csv) == 10
    assert list(df["board"]) == list(df_csv["board"])
    assert json.loads((res / "manifest.json").read_text())["parquet_written"] is True
