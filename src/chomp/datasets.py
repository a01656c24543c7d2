"""
Datasets helpers: solve every position reachable from a rectangle and export
one row per position, plus a manifest for reproducibility.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from .config import check_solvable, max_squares as default_max_squares, source_revision
from .game_basics import DEFAULT_ALPHABET, BoardSize, serialize_state
from .solver import reachable_states, solve_state


@dataclass
class ExportArgs:
    out: Path
    rows: int
    columns: int
    alphabet: str = DEFAULT_ALPHABET
    max_squares: int | None = None
    verbose: bool = False
    cli_argv: List[str] | None = None
    format: str = "csv"  # one of: "csv", "parquet", "both"


DATASET_VERSION = "1.0.0"
POSITIONS_STEM = "chomp_positions"


def _schema_hash(rows: List[Dict[str, Any]]) -> str:
    keys = sorted({k for r in rows for k in r.keys()})
    payload = "\n".join(keys).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def position_rows(size: BoardSize) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for s in reachable_states(size):
        sol = solve_state(s)
        best = sol['winning_move']
        rows.append({
            'board': serialize_state(s),
            'column_heights': ' '.join(map(str, s.column_heights())),
            'num_squares': len(s),
            'value': sol['value'],
            'outcome': sol['outcome'],
            'winning_move': best.to_algebraic(size.alphabet) if best is not None else '',
            'winning_moves': ' '.join(p.to_algebraic(size.alphabet) for p in sol['winning_moves']),
            'num_moves': sol['num_moves'],
        })
    # Deterministic row order: most squares first, then by board string
    rows.sort(key=lambda r: (-r['num_squares'], r['board']))
    return rows


def write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    fnames = list(rows[0].keys()) if rows else []
    with path.open('w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=fnames)
        w.writeheader()
        for r in rows:
            w.writerow(r)


def run_export(args: ExportArgs) -> Path:
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")
    size = BoardSize(args.rows, args.columns, args.alphabet)
    check_solvable(size.num_squares, args.max_squares)
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {args.format}")
    args.out.mkdir(parents=True, exist_ok=True)

    logging.info("Solving all states reachable from a %s board…", size)
    rows = position_rows(size)
    logging.info("Solved %d states", len(rows))

    positions_csv = args.out / f"{POSITIONS_STEM}.csv"
    positions_parquet = args.out / f"{POSITIONS_STEM}.parquet"
    wrote_csv = False
    wrote_parquet = False

    if fmt in {"csv", "both"}:
        write_csv(positions_csv, rows)
        wrote_csv = True
        logging.info("Wrote CSV: %s (%d rows)", positions_csv, len(rows))

    if fmt in {"parquet", "both"}:
        have_pandas = importlib.util.find_spec('pandas') is not None
        have_pyarrow = importlib.util.find_spec('pyarrow') is not None
        if have_pandas and have_pyarrow:
            import pandas as pd

            pd.DataFrame(rows).to_parquet(positions_parquet)
            wrote_parquet = True
            logging.info("Wrote Parquet: %s", positions_parquet)
        else:
            msg = (
                "Parquet dependencies not available (install pandas and pyarrow). "
                "Use pip install .[parquet] to enable parquet support."
            )
            if fmt == "parquet":
                raise RuntimeError(msg)
            logging.warning("%s Proceeding with CSV only; manifest will record parquet_written=false.", msg)

    packages: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is not None:
            ver = getattr(__import__(pkg), "__version__", None)
            if ver:
                packages[pkg] = ver

    files: Dict[str, Any] = {
        "positions_csv": str(positions_csv) if wrote_csv else None,
        "positions_parquet": str(positions_parquet) if wrote_parquet else None,
    }
    checksums = {label: _sha256_file(Path(p)) for label, p in files.items() if p is not None}
    outcome_counts = Counter(r['outcome'] for r in rows)

    manifest = {
        "dataset_version": DATASET_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "args": {
            "rows": args.rows,
            "columns": args.columns,
            "alphabet": args.alphabet,
            "format": fmt,
        },
        "source_revision": source_revision(),
        "solver": {
            "board_squares": size.num_squares,
            "max_squares": args.max_squares if args.max_squares is not None else default_max_squares(),
        },
        "python": {
            "python_version": sys.version.split(" ")[0],
            "packages": packages,
        },
        "cli_argv": args.cli_argv,
        "row_counts": {"positions": len(rows)},
        "outcome_split": dict(sorted(outcome_counts.items())),
        "schema_hash": _schema_hash(rows) if rows else None,
        "files": files,
        "checksums": checksums,
        "parquet_written": wrote_parquet,
    }
    (args.out / "manifest.json").write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json with metadata and schema hash")
    return args.out
