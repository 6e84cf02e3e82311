"""
Unit tests for the keyed session store.
"""
import threading

from minesweeper import Board, GameSessions


# ============================================================================
# New Game Tests
# ============================================================================

class TestNewGame:
    """Test starting games."""

    def test_default_difficulty(self, sessions: GameSessions) -> None:
        """Without arguments the store's default preset is used."""
        response = sessions.new_game("a")
        assert response["success"] is True
        assert response["difficulty"] == "Easy"
        assert (response["rows"], response["cols"], response["mineCount"]) == (9, 9, 10)
        assert "a" in sessions

    def test_named_difficulty(self, sessions: GameSessions) -> None:
        """Difficulty names are accepted."""
        response = sessions.new_game("a", difficulty="hard")
        assert (response["rows"], response["cols"]) == (16, 30)

    def test_custom_game(self, sessions: GameSessions) -> None:
        """Custom sizes go through clamping."""
        response = sessions.new_game("a", rows=2, cols=6, mines=3)
        assert response["difficulty"] == "Custom"
        assert (response["rows"], response["cols"], response["mineCount"]) == (5, 6, 3)

    def test_partial_custom_fails(self, sessions: GameSessions) -> None:
        """Custom games need all three values."""
        response = sessions.new_game("a", rows=5)
        assert response["success"] is False
        assert "rows, cols and mines" in response["error"]
        assert "a" not in sessions

    def test_unknown_difficulty_fails(self, sessions: GameSessions) -> None:
        """Bad names become an error response."""
        response = sessions.new_game("a", difficulty="nightmare")
        assert response == {"success": False, "error": "Unknown difficulty: 'nightmare'"}


# ============================================================================
# Reveal Tests
# ============================================================================

class TestReveal:
    """Test reveal requests."""

    def test_missing_game_starts_fresh(self, sessions: GameSessions) -> None:
        """A reveal for an unknown key creates a default game first."""
        response = sessions.reveal("new", 4, 4)
        assert response["success"] is True
        assert (response["clickedRow"], response["clickedCol"]) == (4, 4)
        assert "new" in sessions
        assert len(sessions) == 1

    def test_reveal_reports_all_revealed_cells(self, sessions: GameSessions) -> None:
        """Every revealed cell is listed, not only this move's."""
        sessions.put("k", Board.with_mines(3, 3, [(0, 1)]))
        sessions.reveal("k", 1, 1)
        response = sessions.reveal("k", 2, 0)
        cells = {(cell["row"], cell["col"]) for cell in response["revealedCells"]}
        assert cells == {(1, 0), (1, 1), (1, 2), (2, 0), (2, 1), (2, 2)}
        assert response["gameStatus"] == "Playing"
        assert response["revealedMinesCount"] == 0
        assert all(cell["isMine"] is False for cell in response["revealedCells"])

    def test_losing_reveal(self, sessions: GameSessions) -> None:
        """Hitting a mine reports the loss and the revealed mines."""
        sessions.put("k", Board.with_mines(3, 3, [(0, 0), (2, 2)]))
        response = sessions.reveal("k", 0, 0)
        assert response["gameStatus"] == "Lost"
        assert response["revealedMinesCount"] == 2

    def test_corrupt_game_reports_error(self, sessions: GameSessions) -> None:
        """Unreadable stored state becomes an error response."""
        sessions._games["bad"] = "{not json"
        response = sessions.reveal("bad", 0, 0)
        assert response["success"] is False
        assert response["error"].startswith("Invalid board JSON")

    def test_concurrent_reveals_are_serialized(self) -> None:
        """Parallel requests on one key never lose an update."""
        sessions = GameSessions()
        mines = [(row, col) for row in (0, 2, 4) for col in range(10)]
        sessions.put("k", Board.with_mines(5, 10, mines))
        targets = [(row, col) for row in (1, 3) for col in range(10)]
        threads = [
            threading.Thread(target=sessions.reveal, args=("k", row, col))
            for row, col in targets
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        state = sessions.board_state("k")
        revealed = {
            (cell["row"], cell["col"]) for cell in state["board"] if cell["isRevealed"]
        }
        assert revealed == set(targets)
        assert state["gameStatus"] == "Won"


# ============================================================================
# Flag Tests
# ============================================================================

class TestToggleFlag:
    """Test flag requests."""

    def test_toggle_twice(self, sessions: GameSessions) -> None:
        """The flag state is persisted between requests."""
        sessions.new_game("k")
        assert sessions.toggle_flag("k", 0, 0)["isFlagged"] is True
        response = sessions.toggle_flag("k", 0, 0)
        assert response["isFlagged"] is False
        assert response["gameStatus"] == "Playing"

    def test_out_of_bounds_flag(self, sessions: GameSessions) -> None:
        """Invalid positions are ignored."""
        sessions.new_game("k")
        response = sessions.toggle_flag("k", 50, 50)
        assert response["success"] is True
        assert response["isFlagged"] is False


# ============================================================================
# Board State Tests
# ============================================================================

class TestBoardState:
    """Test full state requests."""

    def test_state_hides_mines_while_playing(self, sessions: GameSessions) -> None:
        """Unrevealed cells carry no mine information."""
        sessions.put("k", Board.with_mines(3, 3, [(0, 1)]))
        state = sessions.board_state("k")
        assert len(state["board"]) == 9
        assert all("isMine" not in cell for cell in state["board"])
        assert "minePositions" not in state
        assert state["validationErrors"] == []

    def test_state_shows_mines_after_loss(self, sessions: GameSessions) -> None:
        """Mine positions are included once the game is lost."""
        sessions.put("k", Board.with_mines(3, 3, [(0, 1)]))
        sessions.reveal("k", 0, 1)
        state = sessions.board_state("k")
        assert state["gameStatus"] == "Lost"
        assert state["minePositions"] == [{"row": 0, "col": 1}]

    def test_drop_forgets_game(self, sessions: GameSessions) -> None:
        """Dropped keys start over."""
        sessions.new_game("k")
        sessions.drop("k")
        assert "k" not in sessions

    def test_drop_keeps_key_lock(self, sessions: GameSessions) -> None:
        """Requests before and after a drop share one lock."""
        in_flight = sessions._lock_for("k")
        sessions.new_game("k")
        sessions.drop("k")
        assert sessions._lock_for("k") is in_flight

    def test_drop_waits_for_running_request(self, sessions: GameSessions) -> None:
        """A drop cannot run while another request holds the key."""
        sessions.new_game("k")
        lock = sessions._lock_for("k")
        lock.acquire()
        dropper = threading.Thread(target=sessions.drop, args=("k",))
        dropper.start()
        dropper.join(timeout=0.2)
        assert dropper.is_alive()
        assert "k" in sessions

        lock.release()
        dropper.join()
        assert "k" not in sessions
        assert sessions._lock_for("k") is lock
