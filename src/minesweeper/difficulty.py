"""
Board configuration and difficulty presets.

Holds the requested board dimensions, the fail-fast contract checks and
the clamping rules applied before a board is built.
"""
import math
from dataclasses import dataclass
from enum import Enum
from numbers import Integral
from typing import Dict, Union


# ============================================================================
# Constants
# ============================================================================

MIN_ROWS = 5
MAX_ROWS = 30
MIN_COLS = 5
MAX_COLS = 50
MIN_MINES = 1
MAX_MINE_DENSITY = 0.8


class Difficulty(Enum):
    """Named difficulty levels. Values are the names used in records."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value: Union["Difficulty", str]) -> "Difficulty":
        """
        Resolve a difficulty from a member or a case-insensitive name.

        Raises:
            ValueError: If the name matches no difficulty.
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown difficulty: {value!r}")

    @property
    def display_name(self) -> str:
        """Human readable label, e.g. 'Easy (9x9, 10 mines)'."""
        if self not in PRESETS:
            return self.value
        config = PRESETS[self]
        return (
            f"{self.value} ({config.rows}x{config.cols}, "
            f"{config.num_mines} mines)"
        )


def _check_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")


# ============================================================================
# Board Configuration
# ============================================================================

@dataclass(frozen=True)
class BoardConfig:
    """
    Requested dimensions of a Minesweeper board.

    Attributes:
        rows: Number of rows.
        cols: Number of columns.
        num_mines: Total mines to place.
    """

    rows: int = 9
    cols: int = 9
    num_mines: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Reject values that indicate a caller bug rather than user input."""
        _check_int("rows", self.rows)
        _check_int("cols", self.cols)
        _check_int("num_mines", self.num_mines)
        if self.rows < 1 or self.cols < 1:
            raise ValueError(
                f"Board dimensions must be positive, got {self.rows}x{self.cols}"
            )
        if self.num_mines < 0:
            raise ValueError("Number of mines cannot be negative")

    @property
    def total_cells(self) -> int:
        return self.rows * self.cols

    @property
    def safe_cells(self) -> int:
        return self.total_cells - self.num_mines

    def clamped(self) -> "BoardConfig":
        """
        Return a copy with every value pulled into the playable range.

        Rows are clamped to [5, 30], columns to [5, 50] and mines to
        [1, floor(rows * cols * 0.8)] of the clamped grid.
        """
        rows = min(max(self.rows, MIN_ROWS), MAX_ROWS)
        cols = min(max(self.cols, MIN_COLS), MAX_COLS)
        max_mines = math.floor(rows * cols * MAX_MINE_DENSITY)
        num_mines = min(max(self.num_mines, MIN_MINES), max_mines)
        return BoardConfig(int(rows), int(cols), int(num_mines))


# Preset difficulty levels
EASY = BoardConfig(9, 9, 10)
MEDIUM = BoardConfig(16, 16, 40)
HARD = BoardConfig(16, 30, 99)

PRESETS: Dict[Difficulty, BoardConfig] = {
    Difficulty.EASY: EASY,
    Difficulty.MEDIUM: MEDIUM,
    Difficulty.HARD: HARD,
}


def preset_config(difficulty: Union[Difficulty, str]) -> BoardConfig:
    """
    Look up the preset configuration for a named difficulty.

    Raises:
        ValueError: For unknown names and for CUSTOM, which has no preset.
    """
    level = Difficulty.parse(difficulty)
    if level not in PRESETS:
        raise ValueError(f"{level.value} difficulty has no preset dimensions")
    return PRESETS[level]
