"""
Minesweeper engine package.

Provides the board engine, cell views, the record codec and a keyed
session store.
"""
from .cell import Cell, CellState
from .difficulty import BoardConfig, Difficulty, EASY, MEDIUM, HARD, PRESETS
from .board import Board, Discrepancy, GameStatus
from .view import CellView, render_text
from .serialization import RecordError, to_record, from_record, dumps, loads
from .session import GameSessions

__all__ = [
    "Cell",
    "CellState",
    "BoardConfig",
    "Difficulty",
    "EASY",
    "MEDIUM",
    "HARD",
    "PRESETS",
    "Board",
    "Discrepancy",
    "GameStatus",
    "CellView",
    "render_text",
    "RecordError",
    "to_record",
    "from_record",
    "dumps",
    "loads",
    "GameSessions",
]
