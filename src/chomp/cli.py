from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from .config import check_solvable, data_raw
from .datasets import ExportArgs, run_export
from .display import TITLE, format_board
from .game import POLICIES, Game, choose_move, play_out
from .game_basics import (
    DEFAULT_ALPHABET,
    BoardSize,
    BoardState,
    ChompError,
    InvalidMove,
    OutOfRange,
    deserialize_state,
    parse_position,
    serialize_state,
    size_for_squares,
)
from .solver import solve_state, winning_move

HELP_TEXT = (
    "Enter a square as `chomp <alpha-col> <num-row>` (or just `b2`).\n"
    "The square and everything right of it and below it is eaten.\n"
    "Whoever eats the poison square P loses.\n"
    "'hint' shows a winning move, 'q' quits."
)


def _add_board_args(p: argparse.ArgumentParser, require_size: bool = False) -> None:
    p.add_argument("--rows", type=int, required=require_size, default=None, help="Board rows")
    p.add_argument("--columns", type=int, required=require_size, default=None, help="Board columns")
    p.add_argument(
        "--alphabet",
        default=DEFAULT_ALPHABET,
        help=f"Column letters, one per column (default: {DEFAULT_ALPHABET})",
    )
    p.add_argument(
        "--max-squares",
        type=int,
        default=None,
        help="Largest board to search exhaustively (default: env CHOMP_MAX_SQUARES or 16)",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="chomp", description="Chomp solver and terminal game")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument("--seed", type=int, default=None, help="Seed for machine policies that use randomness")

    # play against the machine
    p_play = sub.add_parser("play", help="Play against the machine on a rows x columns board")
    _add_board_args(p_play, require_size=True)
    p_play.add_argument("--machine-first", action="store_true", help="Let the machine make the first move")
    p_play.add_argument("--policy", choices=POLICIES, default="optimal", help="Machine policy")
    p_play.add_argument("--epsilon", type=float, default=0.1, help="Random-move rate for the epsilon policy")

    # solve
    p_sol = sub.add_parser("solve", help="Find a winning move for the side to move")
    _add_board_args(p_sol)
    p_sol.add_argument("--board", help='Alive squares, e.g. "a1 a2 b1" (omit for a full rows x columns board)')
    p_sol.add_argument(
        "--stdin", action="store_true", help="Read many boards from stdin and stream CSV output"
    )

    # self-play
    p_self = sub.add_parser("selfplay", help="Play machine against machine and print the moves")
    _add_board_args(p_self, require_size=True)
    p_self.add_argument(
        "--policies", default="optimal,optimal", help='Policy per player, e.g. "optimal,random"'
    )
    p_self.add_argument("--epsilon", type=float, default=0.1, help="Random-move rate for the epsilon policy")

    # datasets group
    p_ds = sub.add_parser("datasets", help="Dataset utilities")
    g = p_ds.add_subparsers(dest="subcmd")
    p_export = g.add_parser(
        "export",
        help="Export solved positions (CSV by default; use --format parquet|both; parquet requires pandas+pyarrow)",
    )
    _add_board_args(p_export, require_size=True)
    p_export.add_argument(
        "--out", type=Path, default=None, help="Output directory (default: env CHOMP_DATA_RAW or data_raw)"
    )
    p_export.add_argument(
        "--format",
        choices=["csv", "parquet", "both"],
        default="csv",
        help="Export format: csv (default), parquet, both",
    )

    return p


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def _board_from_args(ns: argparse.Namespace) -> BoardState:
    if ns.board is not None:
        if ns.rows is not None and ns.columns is not None:
            size = BoardSize(ns.rows, ns.columns, ns.alphabet)
        else:
            size = size_for_squares(ns.board, ns.alphabet)
        return deserialize_state(ns.board, size)
    if ns.rows is None or ns.columns is None:
        raise ChompError("Give either --board or both --rows and --columns")
    return BoardState.full(BoardSize(ns.rows, ns.columns, ns.alphabet))


def _format_moves(moves, alphabet: str) -> str:
    return " ".join(p.to_algebraic(alphabet) for p in moves)


def play_human_vs_machine(
    size: BoardSize,
    machine_first: bool = False,
    policy: str = "optimal",
    rng: Optional[np.random.Generator] = None,
    epsilon: float = 0.1,
    input_fn: Optional[Callable[[str], str]] = None,
    max_squares: Optional[int] = None,
) -> Optional[int]:
    """Run a terminal game. Returns the losing player (0 moves first), or None if the human quits."""
    read = input_fn or input
    alphabet = size.alphabet
    game = Game(size)
    human = 1 if machine_first else 0

    print(TITLE)
    print(f"Rows: {size.rows} x Columns: {size.columns}")
    print(HELP_TEXT)

    while not game.is_over:
        print()
        print(format_board(game.state))
        if game.to_move == human:
            print("User Turn")
            while True:
                try:
                    raw = read("> ")
                except EOFError:
                    print("Input closed; leaving the game.")
                    return None
                cmd = raw.strip().lower()
                if cmd in ("q", "quit", "exit"):
                    print("Thanks for playing!")
                    return None
                if cmd in ("h", "help", "?"):
                    print(HELP_TEXT)
                    continue
                if cmd == "hint":
                    try:
                        check_solvable(len(game.state), max_squares)
                    except OutOfRange as e:
                        print(f"No hint: {e}")
                        continue
                    mv = winning_move(game.state)
                    if mv is None:
                        print("No forced win from here; every move loses against best play.")
                    else:
                        print(f"Winning move: {mv.to_algebraic(alphabet)}")
                    continue
                try:
                    pos = parse_position(raw, alphabet)
                    game.apply(pos)
                except InvalidMove as e:
                    print(f"Invalid move: {e}")
                    continue
                print(f"User Move: {pos.to_algebraic(alphabet)}")
                break
        else:
            mv = choose_move(game.state, policy, rng=rng, epsilon=epsilon)
            game.apply(mv)
            print(f"Machine Move: {mv.to_algebraic(alphabet)}")

    print()
    print(format_board(game.state))
    if game.loser == human:
        print("You took the poison square. The machine wins.")
    else:
        print("The machine took the poison square. You win!")
    return game.loser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    # Early exits
    if getattr(ns, "version", False):
        try:
            from importlib.metadata import PackageNotFoundError, version as _ver

            print(_ver("chomp-solver"))
        except PackageNotFoundError:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    rng = np.random.default_rng(ns.seed)

    if ns.cmd == "datasets" and ns.subcmd == "export":
        out = ns.out if ns.out is not None else data_raw()
        try:
            run_export(ExportArgs(
                out=out,
                rows=ns.rows,
                columns=ns.columns,
                alphabet=ns.alphabet,
                max_squares=ns.max_squares,
                verbose=ns.verbose,
                cli_argv=list(argv) if argv is not None else None,
                format=ns.format,
            ))
        except (ChompError, RuntimeError) as e:
            logging.error("%s", e)
            return 2
        logging.info("Exported datasets to: %s", out)
        return 0

    if ns.cmd == "solve":
        import sys as _sys
        if ns.stdin:
            import csv as _csv
            w = _csv.writer(_sys.stdout)
            w.writerow(["board", "outcome", "winning_move", "winning_moves"])
            for line in _sys.stdin:
                raw = line.strip()
                if not raw:
                    continue
                try:
                    size = size_for_squares(raw, ns.alphabet)
                    state = deserialize_state(raw, size)
                    check_solvable(len(state), ns.max_squares)
                except ChompError as e:
                    logging.debug("skipping %r: %s", raw, e)
                    continue
                res = solve_state(state)
                w.writerow([
                    serialize_state(state),
                    res['outcome'],
                    res['winning_move'].to_algebraic(ns.alphabet) if res['winning_move'] is not None else "",
                    _format_moves(res['winning_moves'], ns.alphabet),
                ])
            return 0
        try:
            state = _board_from_args(ns)
            check_solvable(len(state), ns.max_squares)
        except ChompError as e:
            logging.error("%s", e)
            return 2
        res = solve_state(state)
        best = res['winning_move']
        logging.info(
            "outcome=%s winning_move=%s winning_moves=%s",
            res['outcome'],
            best.to_algebraic(ns.alphabet) if best is not None else None,
            _format_moves(res['winning_moves'], ns.alphabet) or "-",
        )
        if ns.verbose:
            logging.debug("board=%s\n%s", serialize_state(state), format_board(state))
        return 0

    if ns.cmd == "play":
        try:
            size = BoardSize(ns.rows, ns.columns, ns.alphabet)
            if ns.policy != "random":
                check_solvable(size.num_squares, ns.max_squares)
        except ChompError as e:
            logging.error("%s", e)
            return 2
        if not 0.0 <= ns.epsilon <= 1.0:
            logging.error("Epsilon out of range [0,1]: %s", ns.epsilon)
            return 2
        play_human_vs_machine(
            size, ns.machine_first, ns.policy, rng=rng, epsilon=ns.epsilon, max_squares=ns.max_squares
        )
        return 0

    if ns.cmd == "selfplay":
        policies = [x.strip() for x in ns.policies.split(",") if x.strip()]
        if len(policies) != 2 or any(x not in POLICIES for x in policies):
            logging.error("--policies needs two of %s, got %r", ",".join(POLICIES), ns.policies)
            return 2
        try:
            size = BoardSize(ns.rows, ns.columns, ns.alphabet)
            check_solvable(size.num_squares, ns.max_squares)
        except ChompError as e:
            logging.error("%s", e)
            return 2
        seed = ns.seed if ns.seed is not None else 42
        res = play_out(size, policies, epsilon=ns.epsilon, seed=seed)
        for i, m in enumerate(res['moves'], start=1):
            logging.info("%d. player=%d move=%s", i, m['player'], m['move'])
        logging.info("plies=%d winner=%d loser=%d", res['plies'], res['winner'], res['loser'])
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
