#!/usr/bin/env python3
"""
Minesweeper engine - command line entry point.

Usage:
    python main.py new [--difficulty {easy,medium,hard} | --rows R --cols C --mines M]
    python main.py diagnose --row R --col C [--difficulty ...]
    python main.py simulate [--games N] [--difficulty ...] [--show]
"""
import argparse
import json
import logging
import random
from typing import Dict, List, Optional

import numpy as np

from src.minesweeper import Board, render_text


def build_board(args: argparse.Namespace, seed: Optional[int] = None) -> Board:
    """Create a board from the difficulty or custom size arguments."""
    rng = random.Random(seed)
    custom = (args.rows, args.cols, args.mines)
    if any(value is not None for value in custom):
        if any(value is None for value in custom):
            raise SystemExit("--rows, --cols and --mines must be given together")
        return Board.custom(args.rows, args.cols, args.mines, rng=rng)
    return Board.from_difficulty(args.difficulty, rng=rng)


def new(args: argparse.Namespace) -> None:
    """Create a board and print its summary."""
    board = build_board(args, args.seed)
    summary = board.summary()

    print(f"New {summary['difficulty']} game")
    print(f"  Size: {board.rows}x{board.cols}")
    print(f"  Mines: {board.mine_count}")
    print(f"  Status: {summary['status']}")
    problems = board.validate()
    print(f"  Validation: {'OK' if not problems else f'{len(problems)} problem(s)'}")


def diagnose(args: argparse.Namespace) -> None:
    """Reveal one cell on a fresh board and report what was exposed."""
    board = build_board(args, args.seed)
    before = board.summary()

    board.reveal(args.row, args.col)

    revealed_mines = sum(
        1 for view in board.visible_cells() if view.is_revealed and view.is_mine
    )
    clicked = board.cell_view(args.row, args.col)
    report = {
        "clickedCell": clicked.to_dict() if clicked is not None else None,
        "statusBefore": before["status"],
        "gameStatus": board.status.value,
        "revealedCells": board.revealed_count(),
        "revealedMines": revealed_mines,
        "validationErrors": [problem.to_dict() for problem in board.validate()],
        "message": "ERROR: Mine revealed while playing!"
        if revealed_mines and board.is_playing
        else "OK",
    }
    print(json.dumps(report, indent=2))


def play_random_game(board: Board, rng: np.random.Generator) -> Dict[str, int]:
    """
    Click random hidden cells until the game ends.

    Raises:
        AssertionError: If a mine shows while playing or validation fails.
    """
    moves = 0
    while board.is_playing:
        hidden = board.hidden_positions()
        row, col = hidden[int(rng.integers(len(hidden)))]
        board.reveal(row, col)
        moves += 1

        if board.is_playing and np.any(board.get_observation() == 9):
            raise AssertionError(f"Mine visible while playing after ({row}, {col})")
        problems = board.validate()
        if problems:
            raise AssertionError(f"Board invalid after ({row}, {col}): {problems}")

    return {
        "won": int(board.is_won),
        "moves": moves,
        "revealed": board.revealed_count(),
    }


def simulate(args: argparse.Namespace) -> None:
    """Play random games and print aggregate results."""
    rng = np.random.default_rng(args.seed)
    results: List[Dict[str, int]] = []

    print(f"Simulating {args.games} random games...")
    for _ in range(args.games):
        board = build_board(args, int(rng.integers(2**32)))
        results.append(play_random_game(board, rng))
        if args.show:
            print(render_text(board))
            print(f"-> {board.status.value}\n")

    wins = np.array([result["won"] for result in results])
    moves = np.array([result["moves"] for result in results])
    revealed = np.array([result["revealed"] for result in results])

    print("Results:")
    print(f"  Win rate: {wins.mean():.1%}")
    print(f"  Avg moves: {moves.mean():.1f}")
    print(f"  Avg revealed: {revealed.mean():.1f} cells")


def _add_board_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--difficulty",
        choices=["easy", "medium", "hard"],
        default="easy",
        help="Preset board size",
    )
    parser.add_argument("--rows", type=int, help="Custom number of rows")
    parser.add_argument("--cols", type=int, help="Custom number of columns")
    parser.add_argument("--mines", type=int, help="Custom number of mines")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Minesweeper engine - create, inspect and simulate games"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Show engine debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # New game command
    new_parser = subparsers.add_parser("new", help="Create a board")
    _add_board_arguments(new_parser)

    # Diagnose command
    diagnose_parser = subparsers.add_parser(
        "diagnose", help="Reveal one cell on a fresh board and report"
    )
    _add_board_arguments(diagnose_parser)
    diagnose_parser.add_argument("--row", type=int, required=True, help="Row to reveal")
    diagnose_parser.add_argument("--col", type=int, required=True, help="Column to reveal")

    # Simulate command
    simulate_parser = subparsers.add_parser(
        "simulate", help="Play random games and check invariants"
    )
    _add_board_arguments(simulate_parser)
    simulate_parser.add_argument(
        "--games", type=int, default=100, help="Number of games to play"
    )
    simulate_parser.add_argument(
        "--show", action="store_true", help="Print each final board"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    if args.command == "new":
        new(args)
    elif args.command == "diagnose":
        diagnose(args)
    elif args.command == "simulate":
        simulate(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
