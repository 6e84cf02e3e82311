"""
Pytest configuration and shared fixtures.
"""
import random
import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minesweeper import Board, BoardConfig, Cell, GameSessions


# ============================================================================
# Helpers
# ============================================================================

def revealed_positions(board: Board) -> List[Tuple[int, int]]:
    """Positions of every revealed cell, row-major."""
    return [
        (view.row, view.col) for view in board.visible_cells() if view.is_revealed
    ]


def safe_positions(board: Board) -> List[Tuple[int, int]]:
    """Positions of every non-mine cell, row-major."""
    mines = set(board.mine_positions())
    return [
        (row, col)
        for row in range(board.rows)
        for col in range(board.cols)
        if (row, col) not in mines
    ]


def assert_no_mine_shown_while_playing(board: Board) -> None:
    if board.is_playing:
        for row, col in board.mine_positions():
            assert board.cell_view(row, col).is_revealed is False


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible placement."""
    return random.Random(1234)


@pytest.fixture
def easy_board(rng: random.Random) -> Board:
    """Create an easy 9x9 board with 10 mines."""
    return Board.from_difficulty("easy", rng=rng)


@pytest.fixture
def corner_mine_board() -> Board:
    """5x5 board with its only mine in the bottom-right corner."""
    return Board.with_mines(5, 5, [(4, 4)])


@pytest.fixture
def small_board() -> Board:
    """3x3 board with a single mine in the middle of the top row."""
    return Board.with_mines(3, 3, [(0, 1)])


@pytest.fixture
def empty_board() -> Board:
    """Create a board with no mines for cascade testing."""
    return Board.with_mines(5, 5, [])


@pytest.fixture
def wall_board() -> Board:
    """
    7x7 board with a vertical wall of mines in column 3.

    Columns 0-1 and 5-6 are zero regions, columns 2 and 4 are numbers.
    """
    return Board.with_mines(7, 7, [(row, 3) for row in range(7)])


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(is_mine=True)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def valid_config() -> BoardConfig:
    """Create a valid board configuration."""
    return BoardConfig(9, 9, 10)


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def sessions() -> GameSessions:
    """Session store with a seeded random source."""
    return GameSessions(rng=random.Random(99))
