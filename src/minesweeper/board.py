"""
Board module for the Minesweeper engine.

Implements the game board with mine placement, cell revealing,
flagging and game status management.
"""
import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np

from .cell import Cell
from .difficulty import BoardConfig, Difficulty, preset_config
from .view import CellView

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


# ============================================================================
# Constants
# ============================================================================

class GameStatus(Enum):
    """Possible states of the game. WON and LOST are terminal."""

    PLAYING = "Playing"
    WON = "Won"
    LOST = "Lost"


@dataclass(frozen=True)
class Discrepancy:
    """
    One invariant violation found by Board.validate().

    Attributes:
        kind: "adjacency" for a wrong stored count, "mine_count" when the
            number of mine cells differs from the configured count.
        position: (row, col) of the cell, None for "mine_count".
        expected: Recomputed value.
        actual: Stored value.
    """

    kind: str
    position: Optional[Position]
    expected: int
    actual: int

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind,
            "expected": self.expected,
            "actual": self.actual,
        }
        if self.position is not None:
            data["row"], data["col"] = self.position
        return data


# ============================================================================
# Board Class
# ============================================================================

@dataclass
class Board:
    """
    Minesweeper game board.

    Manages the grid of cells, mine placement, revealing logic,
    and win/lose conditions. Board(config) places config.num_mines
    mines at random on the given dimensions, without clamping; the
    classmethods from_difficulty(), custom() and with_mines() cover
    presets, clamped sizes and fixed layouts.
    """

    config: BoardConfig
    difficulty: Difficulty = Difficulty.CUSTOM
    rng: Optional[random.Random] = field(default=None, repr=False, compare=False)
    _grid: List[List[Cell]] = field(default_factory=list, repr=False)
    _status: GameStatus = GameStatus.PLAYING

    def __post_init__(self) -> None:
        """Place mines and counts unless a finished grid was supplied."""
        if self._grid:
            return
        if self.config.num_mines >= self.config.total_cells:
            raise ValueError(f"Too many mines (max {self.config.total_cells - 1})")
        self._init_grid()
        self._place_mines(self.rng if self.rng is not None else random.Random())
        self._calculate_adjacent_mines()
        logger.debug(
            "Created %s board %dx%d with %d mines",
            self.difficulty.value, self.config.rows, self.config.cols,
            self.config.num_mines,
        )

    # ========================================================================
    # Construction
    # ========================================================================

    @classmethod
    def from_difficulty(
        cls,
        difficulty: Union[Difficulty, str],
        rng: Optional[random.Random] = None,
    ) -> "Board":
        """
        Create a board from a named preset.

        Args:
            difficulty: EASY, MEDIUM or HARD, as a member or a name.
            rng: Random source for mine placement.

        Raises:
            ValueError: For CUSTOM or an unknown name.
        """
        level = Difficulty.parse(difficulty)
        return cls(preset_config(level).clamped(), level, rng)

    @classmethod
    def custom(
        cls,
        rows: int,
        cols: int,
        mine_count: int,
        rng: Optional[random.Random] = None,
    ) -> "Board":
        """
        Create a board with custom dimensions, clamped to the playable range.

        Args:
            rows: Requested rows, clamped to [5, 30].
            cols: Requested columns, clamped to [5, 50].
            mine_count: Requested mines, clamped to [1, 80% of cells].
            rng: Random source for mine placement.

        Raises:
            ValueError: If a dimension is not positive or mine_count is
                negative.
            TypeError: If a value is not an integer.
        """
        config = BoardConfig(rows, cols, mine_count).clamped()
        return cls(config, Difficulty.CUSTOM, rng)

    @classmethod
    def with_mines(
        cls,
        rows: int,
        cols: int,
        mines: Iterable[Position],
        difficulty: Union[Difficulty, str] = Difficulty.CUSTOM,
    ) -> "Board":
        """
        Create a board with mines at fixed positions.

        Dimensions are used as given, without clamping. A preset
        difficulty is only accepted when the size and mine count are
        exactly that preset's.

        Raises:
            ValueError: On non-positive dimensions, duplicate or
                out-of-bounds positions, no safe cell left, or a preset
                label that does not match.
        """
        positions = [(row, col) for row, col in mines]
        if len(set(positions)) != len(positions):
            raise ValueError("Duplicate mine position")
        config = BoardConfig(rows, cols, len(positions))
        if config.num_mines >= config.total_cells:
            raise ValueError(f"Too many mines (max {config.total_cells - 1})")
        level = Difficulty.parse(difficulty)
        if level != Difficulty.CUSTOM and preset_config(level) != config:
            raise ValueError(
                f"{rows}x{cols} with {config.num_mines} mines does not match "
                f"{level.display_name}"
            )

        grid = [[Cell() for _ in range(cols)] for _ in range(rows)]
        for row, col in positions:
            if not (0 <= row < rows and 0 <= col < cols):
                raise ValueError(f"Mine position {(row, col)} is off the board")
            grid[row][col].is_mine = True
        board = cls(config, level, _grid=grid)
        board._calculate_adjacent_mines()
        return board

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _init_grid(self) -> None:
        """Create empty grid of cells."""
        self._grid = [
            [Cell() for _ in range(self.config.cols)]
            for _ in range(self.config.rows)
        ]

    def _place_mines(self, rng: random.Random) -> None:
        """Place mines by drawing random cells until enough distinct ones hit."""
        placed = 0
        while placed < self.config.num_mines:
            row = rng.randrange(self.config.rows)
            col = rng.randrange(self.config.cols)
            cell = self._grid[row][col]
            if not cell.is_mine:
                cell.is_mine = True
                placed += 1

    def _calculate_adjacent_mines(self) -> None:
        """Calculate adjacent mine counts for all non-mine cells."""
        for row, col in self._positions():
            cell = self._grid[row][col]
            if not cell.is_mine:
                cell.adjacent_mines = self._count_adjacent_mines(row, col)

    def _count_adjacent_mines(self, row: int, col: int) -> int:
        """Count mines adjacent to a specific cell."""
        count = 0
        for neighbor_row, neighbor_col in self._get_neighbors(row, col):
            if self._grid[neighbor_row][neighbor_col].is_mine:
                count += 1
        return count

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def _get_neighbors(self, row: int, col: int) -> List[Position]:
        """
        Get valid neighboring cell positions.

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            List of (row, col) tuples for valid neighbors.
        """
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self._is_valid_position(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def _is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.config.rows and 0 <= col < self.config.cols

    def _positions(self) -> Iterator[Position]:
        """All positions in row-major order."""
        for row in range(self.config.rows):
            for col in range(self.config.cols):
                yield row, col

    # ========================================================================
    # Game Actions (Mid-level)
    # ========================================================================

    def reveal(self, row: int, col: int) -> List[CellView]:
        """
        Reveal a cell at the given position.

        A mine loses the game and exposes every mine. A cell with no
        adjacent mines opens its neighborhood. Out-of-bounds positions,
        revealed or flagged cells and finished games are ignored.

        Args:
            row: Row index to reveal.
            col: Column index to reveal.

        Returns:
            Views of every cell changed by this call, empty on a no-op.
        """
        if not self._can_reveal(row, col):
            return []

        cell = self._grid[row][col]
        cell.reveal()
        changed = [(row, col)]

        if cell.is_mine:
            changed.extend(self._reveal_all_mines())
            self._status = GameStatus.LOST
            logger.debug("Mine hit at (%d, %d), game lost", row, col)
        else:
            if cell.adjacent_mines == 0:
                changed.extend(self._cascade_from(row, col))
            self._check_win_condition()

        return [self._view(r, c) for r, c in changed]

    def _can_reveal(self, row: int, col: int) -> bool:
        """Check if a cell can be revealed."""
        if self._status != GameStatus.PLAYING:
            return False
        if not self._is_valid_position(row, col):
            return False
        cell = self._grid[row][col]
        return not cell.is_revealed and not cell.is_flagged

    def _cascade_from(self, row: int, col: int) -> List[Position]:
        """
        Open the zero region around an already revealed empty cell.

        Uses an explicit queue; is_revealed doubles as the visited mark.
        Mines are never opened and flags stop propagation.
        """
        opened = []
        queue = deque([(row, col)])
        while queue:
            current_row, current_col = queue.popleft()
            for neighbor_row, neighbor_col in self._get_neighbors(
                current_row, current_col
            ):
                neighbor = self._grid[neighbor_row][neighbor_col]
                if neighbor.is_mine or not neighbor.reveal():
                    continue
                opened.append((neighbor_row, neighbor_col))
                if neighbor.adjacent_mines == 0:
                    queue.append((neighbor_row, neighbor_col))
        return opened

    def _reveal_all_mines(self) -> List[Position]:
        """Expose every mine, flagged or not."""
        exposed = []
        for row, col in self._positions():
            cell = self._grid[row][col]
            if cell.is_mine and cell.expose():
                exposed.append((row, col))
        return exposed

    def _check_win_condition(self) -> None:
        """Check if all non-mine cells are revealed."""
        if self.revealed_count() == self.config.safe_cells:
            self._status = GameStatus.WON
            logger.debug("All safe cells revealed, game won")

    def toggle_flag(self, row: int, col: int) -> List[CellView]:
        """
        Toggle flag on a cell.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            The view of the toggled cell, or an empty list if nothing
            changed.
        """
        if self._status != GameStatus.PLAYING:
            return []
        if not self._is_valid_position(row, col):
            return []
        if not self._grid[row][col].toggle_flag():
            return []
        return [self._view(row, col)]

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    @property
    def rows(self) -> int:
        return self.config.rows

    @property
    def cols(self) -> int:
        return self.config.cols

    @property
    def mine_count(self) -> int:
        return self.config.num_mines

    @property
    def status(self) -> GameStatus:
        """Get current game status."""
        return self._status

    @property
    def is_playing(self) -> bool:
        """Check if game is still in progress."""
        return self._status == GameStatus.PLAYING

    @property
    def is_won(self) -> bool:
        """Check if game was won."""
        return self._status == GameStatus.WON

    @property
    def is_lost(self) -> bool:
        """Check if game was lost."""
        return self._status == GameStatus.LOST

    def flag_count(self) -> int:
        """Number of flagged cells."""
        return sum(
            1 for row, col in self._positions() if self._grid[row][col].is_flagged
        )

    def revealed_count(self) -> int:
        """Number of revealed non-mine cells."""
        return sum(
            1
            for row, col in self._positions()
            if self._grid[row][col].is_revealed and not self._grid[row][col].is_mine
        )

    def mine_positions(self) -> List[Position]:
        """
        Positions of every mine.

        This discloses the hidden layout; callers should only show it
        once the game is lost.
        """
        return [
            (row, col) for row, col in self._positions() if self._grid[row][col].is_mine
        ]

    def hidden_positions(self) -> List[Position]:
        """Positions that can still be revealed (not revealed, not flagged)."""
        return [
            (row, col) for row, col in self._positions() if self._grid[row][col].is_hidden
        ]

    def _view(self, row: int, col: int) -> CellView:
        return CellView.of(self._grid[row][col], row, col)

    def cell_view(self, row: int, col: int) -> Optional[CellView]:
        """Get the view of a cell, or None if the position is invalid."""
        if not self._is_valid_position(row, col):
            return None
        return self._view(row, col)

    def visible_cells(self) -> List[CellView]:
        """Views of every revealed or flagged cell."""
        return [
            self._view(row, col)
            for row, col in self._positions()
            if self._grid[row][col].is_revealed or self._grid[row][col].is_flagged
        ]

    def summary(self) -> Dict[str, Any]:
        """Status and dimensions as a plain dict."""
        flags = self.flag_count()
        return {
            "status": self._status.value,
            "rows": self.rows,
            "cols": self.cols,
            "mineCount": self.mine_count,
            "difficulty": self.difficulty.value,
            "flagCount": flags,
            "remainingMines": self.mine_count - flags,
        }

    def validate(self) -> List[Discrepancy]:
        """
        Recompute adjacency counts and the mine total.

        Returns:
            Every mismatch found; an empty list means the board is
            consistent.
        """
        problems = []
        mines_found = 0
        for row, col in self._positions():
            cell = self._grid[row][col]
            if cell.is_mine:
                mines_found += 1
                continue
            expected = self._count_adjacent_mines(row, col)
            if cell.adjacent_mines != expected:
                problems.append(
                    Discrepancy("adjacency", (row, col), expected, cell.adjacent_mines)
                )
        if mines_found != self.mine_count:
            problems.append(
                Discrepancy("mine_count", None, self.mine_count, mines_found)
            )
        return problems

    def get_observation(self) -> np.ndarray:
        """
        Get board state as a numpy array.

        Returns:
            2D numpy array where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with adjacent count
                9 = revealed mine
        """
        obs = np.zeros((self.config.rows, self.config.cols), dtype=np.int8)
        for row, col in self._positions():
            obs[row, col] = self._grid[row][col].to_observation()
        return obs
