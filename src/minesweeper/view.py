"""
Read-only views of board cells.

Views are what leaves the engine: they never alias a Cell and never
disclose what an unrevealed cell contains.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from .cell import Cell

if TYPE_CHECKING:
    from .board import Board


@dataclass(frozen=True)
class CellView:
    """
    Snapshot of one cell as a player may see it.

    is_mine and adjacent_mines are None while the cell is unrevealed.
    """

    row: int
    col: int
    is_revealed: bool
    is_flagged: bool
    is_mine: Optional[bool] = None
    adjacent_mines: Optional[int] = None

    @classmethod
    def of(cls, cell: Cell, row: int, col: int) -> "CellView":
        """Build the view of a cell, withholding hidden content."""
        if not cell.is_revealed:
            return cls(row, col, False, cell.is_flagged)
        return cls(
            row,
            col,
            True,
            cell.is_flagged,
            is_mine=cell.is_mine,
            adjacent_mines=0 if cell.is_mine else cell.adjacent_mines,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Camel-cased dict; withheld fields are left out entirely."""
        data: Dict[str, Any] = {
            "row": self.row,
            "col": self.col,
            "isRevealed": self.is_revealed,
            "isFlagged": self.is_flagged,
        }
        if self.is_mine is not None:
            data["isMine"] = self.is_mine
        if self.adjacent_mines is not None:
            data["adjacentMines"] = self.adjacent_mines
        return data


# ============================================================================
# Text Rendering
# ============================================================================

def render_text(board: "Board") -> str:
    """Render a board as rows of single-character cells."""
    lines = []
    for row in range(board.rows):
        symbols = []
        for col in range(board.cols):
            view = board.cell_view(row, col)
            if not view.is_revealed:
                symbols.append("F" if view.is_flagged else ".")
            elif view.is_mine:
                symbols.append("*")
            elif view.adjacent_mines == 0:
                symbols.append(" ")
            else:
                symbols.append(str(view.adjacent_mines))
        lines.append(" ".join(symbols))
    return "\n".join(lines)
