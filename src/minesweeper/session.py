"""
Keyed game storage for request handlers.

Each session key owns one game, stored as JSON text and loaded, mutated
and stored again under a per-key lock. Responses are plain dicts ready
to be sent by whatever transport sits in front.
"""
import logging
import random
import threading
from typing import Any, Dict, Optional, Union

from .board import Board, GameStatus
from .difficulty import Difficulty
from .serialization import dumps, loads

logger = logging.getLogger(__name__)


def _failure(exc: Exception) -> Dict[str, Any]:
    return {"success": False, "error": str(exc)}


class GameSessions:
    """
    In-memory store with one game per session key.

    A request for a key with no game starts a fresh game at the default
    difficulty, the same way a new visitor gets a board.
    """

    def __init__(
        self,
        default_difficulty: Union[Difficulty, str] = Difficulty.EASY,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Args:
            default_difficulty: Preset used when a key has no game yet.
            rng: Random source shared by every board this store creates.
        """
        self.default_difficulty = Difficulty.parse(default_difficulty)
        self._rng = rng
        self._games: Dict[str, str] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def __contains__(self, key: str) -> bool:
        return key in self._games

    def __len__(self) -> int:
        return len(self._games)

    # ========================================================================
    # Storage
    # ========================================================================

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            return self._locks.setdefault(key, threading.Lock())

    def _load(self, key: str) -> Board:
        text = self._games.get(key)
        if text is None:
            logger.info(
                "No game for session %s, starting %s",
                key, self.default_difficulty.display_name,
            )
            return Board.from_difficulty(self.default_difficulty, rng=self._rng)
        return loads(text)

    def _store(self, key: str, board: Board) -> None:
        self._games[key] = dumps(board)

    def put(self, key: str, board: Board) -> None:
        """Store a board under a key, replacing any game it had."""
        with self._lock_for(key):
            self._store(key, board)

    def drop(self, key: str) -> None:
        """Forget the game for a key. The key keeps its lock."""
        with self._lock_for(key):
            self._games.pop(key, None)

    # ========================================================================
    # Requests
    # ========================================================================

    def new_game(
        self,
        key: str,
        difficulty: Union[Difficulty, str, None] = None,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        mines: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Replace the game for a key.

        Pass either a difficulty or all of rows, cols and mines.
        """
        logger.info("New game requested for session %s", key)
        custom = (rows, cols, mines)
        with self._lock_for(key):
            try:
                if any(value is not None for value in custom):
                    if any(value is None for value in custom):
                        raise ValueError("Custom games need rows, cols and mines")
                    board = Board.custom(rows, cols, mines, rng=self._rng)
                else:
                    board = Board.from_difficulty(
                        difficulty or self.default_difficulty, rng=self._rng
                    )
                self._store(key, board)
            except (ValueError, TypeError) as exc:
                logger.exception("Could not start a game for session %s", key)
                return _failure(exc)
        response = {"success": True, "message": "New game started"}
        response.update(board.summary())
        return response

    def reveal(self, key: str, row: int, col: int) -> Dict[str, Any]:
        """Reveal a cell and report every revealed cell."""
        logger.info("Reveal (%s, %s) in session %s", row, col, key)
        with self._lock_for(key):
            try:
                board = self._load(key)
                board.reveal(row, col)
                self._store(key, board)
            except (ValueError, TypeError) as exc:
                logger.exception("Reveal failed in session %s", key)
                return _failure(exc)

        revealed = [view for view in board.visible_cells() if view.is_revealed]
        return {
            "success": True,
            "clickedRow": row,
            "clickedCol": col,
            "revealedCells": [view.to_dict() for view in revealed],
            "gameStatus": board.status.value,
            "revealedMinesCount": sum(1 for view in revealed if view.is_mine),
        }

    def toggle_flag(self, key: str, row: int, col: int) -> Dict[str, Any]:
        """Toggle a flag and report the cell's flag state."""
        logger.info("Toggle flag (%s, %s) in session %s", row, col, key)
        with self._lock_for(key):
            try:
                board = self._load(key)
                board.toggle_flag(row, col)
                self._store(key, board)
            except (ValueError, TypeError) as exc:
                logger.exception("Flag toggle failed in session %s", key)
                return _failure(exc)

        view = board.cell_view(row, col)
        return {
            "success": True,
            "row": row,
            "col": col,
            "isFlagged": view.is_flagged if view is not None else False,
            "gameStatus": board.status.value,
        }

    def board_state(self, key: str) -> Dict[str, Any]:
        """
        Full player-visible state of a game, with validation results.

        Mine positions are only included once the game is lost.
        """
        with self._lock_for(key):
            try:
                board = self._load(key)
                self._store(key, board)
            except (ValueError, TypeError) as exc:
                logger.exception("Could not load game for session %s", key)
                return _failure(exc)

        state = {
            "success": True,
            "board": [
                board.cell_view(row, col).to_dict()
                for row in range(board.rows)
                for col in range(board.cols)
            ],
            "gameStatus": board.status.value,
            "difficulty": board.difficulty.value,
            "rows": board.rows,
            "cols": board.cols,
            "mineCount": board.mine_count,
            "flagCount": board.flag_count(),
            "validationErrors": [problem.to_dict() for problem in board.validate()],
        }
        if board.status == GameStatus.LOST:
            state["minePositions"] = [
                {"row": row, "col": col} for row, col in board.mine_positions()
            ]
        return state
