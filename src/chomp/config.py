"""Centralized settings: data locations, solver limits, and repo metadata.

Environment-first, with fallbacks that still work when installed as a
package or executed from arbitrary CWDs.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from .game_basics import OutOfRange

DEFAULT_MAX_SQUARES = 16


def _source_checkout() -> Path | None:
    # src/chomp/config.py -> checkout root, when running from a source tree
    root = Path(__file__).resolve().parents[2]
    return root if (root / "pyproject.toml").is_file() else None


def repo_root() -> Path:
    """Best-effort project root.

    Order: env var CHOMP_REPO_ROOT -> source checkout holding this package -> CWD.
    """
    env = os.getenv("CHOMP_REPO_ROOT")
    if env:
        return Path(env)
    return _source_checkout() or Path.cwd()


def data_raw() -> Path:
    p = os.getenv("CHOMP_DATA_RAW")
    return Path(p) if p else repo_root() / "data_raw"


def max_squares() -> int:
    """Largest board the solver is asked to search (env CHOMP_MAX_SQUARES)."""
    raw = os.getenv("CHOMP_MAX_SQUARES")
    if not raw:
        return DEFAULT_MAX_SQUARES
    try:
        value = int(raw)
    except ValueError:
        raise OutOfRange(f"CHOMP_MAX_SQUARES must be an integer, got {raw!r}") from None
    if value < 1:
        raise OutOfRange(f"CHOMP_MAX_SQUARES must be positive, got {value}")
    return value


def check_solvable(num_squares: int, limit: int | None = None) -> None:
    """Raise OutOfRange when a board is too large for exhaustive search."""
    limit = max_squares() if limit is None else limit
    if num_squares > limit:
        raise OutOfRange(
            f"Board has {num_squares} squares; exhaustive search is limited to {limit} "
            "(raise CHOMP_MAX_SQUARES or --max-squares to allow more)"
        )


def source_revision() -> str | None:
    """Git revision of the solver code, e.g. ``1a2b3c4-dirty``; None outside a checkout."""
    root = _source_checkout()
    if root is None:
        return None
    try:
        out = subprocess.check_output(
            ["git", "-C", str(root), "describe", "--always", "--dirty", "--abbrev=12"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out.strip() or None
