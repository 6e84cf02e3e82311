"""
Plain record tree and JSON form of a Board.

The record keeps the field names of the data model (rows, cols,
mineCount, cells, status, difficulty) so an outside layer can store
and reload a game without going through the engine.
"""
import json
from typing import Any, Dict, List

from .board import Board, GameStatus
from .cell import Cell
from .difficulty import BoardConfig, Difficulty

_CELL_KEYS = ("isMine", "isRevealed", "isFlagged", "adjacentMines")
_BOARD_KEYS = ("rows", "cols", "mineCount", "difficulty", "status", "cells")


class RecordError(ValueError):
    """Raised when a record cannot be turned back into a Board."""


# ============================================================================
# Board -> Record
# ============================================================================

def _cell_to_record(cell: Cell) -> Dict[str, Any]:
    return {
        "isMine": cell.is_mine,
        "isRevealed": cell.is_revealed,
        "isFlagged": cell.is_flagged,
        "adjacentMines": cell.adjacent_mines,
    }


def to_record(board: Board) -> Dict[str, Any]:
    """Full board state, hidden mines included, as nested dicts and lists."""
    return {
        "rows": board.rows,
        "cols": board.cols,
        "mineCount": board.mine_count,
        "difficulty": board.difficulty.value,
        "status": board.status.value,
        "cells": [
            [_cell_to_record(cell) for cell in grid_row]
            for grid_row in board._grid
        ],
    }


# ============================================================================
# Record -> Board
# ============================================================================

def _cell_from_record(data: Any, row: int, col: int) -> Cell:
    if not isinstance(data, dict):
        raise RecordError(f"Cell ({row}, {col}) is not a mapping")
    missing = [key for key in _CELL_KEYS if key not in data]
    if missing:
        raise RecordError(f"Cell ({row}, {col}) is missing {', '.join(missing)}")
    adjacent = data["adjacentMines"]
    if isinstance(adjacent, bool) or not isinstance(adjacent, int) or not 0 <= adjacent <= 8:
        raise RecordError(f"Cell ({row}, {col}) has invalid adjacentMines {adjacent!r}")
    for key in ("isMine", "isRevealed", "isFlagged"):
        if not isinstance(data[key], bool):
            raise RecordError(f"Cell ({row}, {col}) has non-boolean {key} {data[key]!r}")
    return Cell(
        is_mine=data["isMine"],
        is_revealed=data["isRevealed"],
        is_flagged=data["isFlagged"],
        adjacent_mines=adjacent,
    )


def _grid_from_record(cells: Any, rows: int, cols: int) -> List[List[Cell]]:
    if not isinstance(cells, list) or len(cells) != rows:
        raise RecordError(f"Expected {rows} rows of cells")
    grid = []
    for row, grid_row in enumerate(cells):
        if not isinstance(grid_row, list) or len(grid_row) != cols:
            raise RecordError(f"Row {row} does not have {cols} cells")
        grid.append(
            [_cell_from_record(data, row, col) for col, data in enumerate(grid_row)]
        )
    return grid


def from_record(record: Dict[str, Any]) -> Board:
    """
    Rebuild a Board exactly as recorded.

    Nothing is clamped or re-placed; the stored layout is trusted as
    long as it is well formed. Use Board.validate() to check counts.

    Raises:
        RecordError: If the record is malformed.
    """
    if not isinstance(record, dict):
        raise RecordError("Board record must be a mapping")
    missing = [key for key in _BOARD_KEYS if key not in record]
    if missing:
        raise RecordError(f"Board record is missing {', '.join(missing)}")

    try:
        config = BoardConfig(record["rows"], record["cols"], record["mineCount"])
        difficulty = Difficulty.parse(record["difficulty"])
        status = GameStatus(record["status"])
    except (TypeError, ValueError) as exc:
        raise RecordError(str(exc)) from exc
    if config.num_mines >= config.total_cells:
        raise RecordError(
            f"mineCount {config.num_mines} leaves no safe cell on a "
            f"{config.rows}x{config.cols} board"
        )

    grid = _grid_from_record(record["cells"], config.rows, config.cols)
    return Board(config, difficulty, _grid=grid, _status=status)


# ============================================================================
# JSON Text
# ============================================================================

def dumps(board: Board) -> str:
    """Compact JSON text of the board record."""
    return json.dumps(to_record(board), separators=(",", ":"))


def loads(text: str) -> Board:
    """
    Parse JSON text produced by dumps().

    Raises:
        RecordError: If the text is not valid JSON or not a board record.
    """
    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecordError(f"Invalid board JSON: {exc}") from exc
    return from_record(record)
