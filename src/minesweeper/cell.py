"""
Cell module for the Minesweeper engine.

A cell holds its content (mine or adjacency count) and its visibility
(revealed and/or flagged).
"""
from enum import Enum, auto
from dataclasses import dataclass


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """Visual state of a cell, derived from its flags."""

    HIDDEN = auto()
    REVEALED = auto()
    FLAGGED = auto()


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    A single cell in the Minesweeper grid.

    Attributes:
        is_mine: Whether this cell contains a mine.
        is_revealed: Whether the cell has been uncovered.
        is_flagged: Whether the player has marked the cell.
        adjacent_mines: Count of mines in neighboring cells (0-8).
            Meaningless for mine cells.
    """

    is_mine: bool = False
    is_revealed: bool = False
    is_flagged: bool = False
    adjacent_mines: int = 0

    def reveal(self) -> bool:
        """
        Reveal this cell.

        Returns:
            True if the cell was revealed, False if it was already
            revealed or is flagged.
        """
        if self.is_revealed or self.is_flagged:
            return False
        self.is_revealed = True
        return True

    def expose(self) -> bool:
        """
        Reveal this cell even if flagged. Only used to show mines on loss.

        Returns:
            True if the cell changed.
        """
        if self.is_revealed:
            return False
        self.is_revealed = True
        return True

    def toggle_flag(self) -> bool:
        """
        Toggle flag on this cell.

        Returns:
            True if flag was toggled, False if cell is revealed.
        """
        if self.is_revealed:
            return False
        self.is_flagged = not self.is_flagged
        return True

    @property
    def state(self) -> CellState:
        """Current visual state. A revealed cell reports REVEALED."""
        if self.is_revealed:
            return CellState.REVEALED
        if self.is_flagged:
            return CellState.FLAGGED
        return CellState.HIDDEN

    @property
    def is_hidden(self) -> bool:
        """Check if cell is neither revealed nor flagged."""
        return self.state == CellState.HIDDEN

    def to_observation(self) -> int:
        """
        Convert cell to an observation value.

        Returns:
            -1: Hidden cell
            -2: Flagged cell
            0-8: Revealed cell with adjacent mine count
            9: Revealed mine (game over state)
        """
        state = self.state
        if state == CellState.HIDDEN:
            return -1
        if state == CellState.FLAGGED:
            return -2
        if self.is_mine:
            return 9
        return self.adjacent_mines
