"""Live game record: current position, phase, status, selection, history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kingside.core.enums import Color, GameResult, GameStatus
from kingside.core.move_generator import MoveGenerator
from kingside.core.notation import STARTING_FEN, position_from_fen, position_to_fen
from kingside.core.position import Position
from kingside.core.rules import Rules
from kingside.game.interfaces import GamePhase

if TYPE_CHECKING:
    from kingside.core.move import Move
    from kingside.core.types import Square


@dataclass
class MoveRecord:
    """A single entry in the move history."""

    move: Move
    fen_after: str
    was_check: bool = False
    was_capture: bool = False

    @property
    def uci(self) -> str:
        return self.move.uci


@dataclass
class GameState:
    """Everything the controller tracks about the game in progress.

    ``position`` is replaced, never mutated, by :meth:`apply_move`. This is a
    pure data/logic class: no threading, no UI.
    """

    position: Position = field(default_factory=Position.initial, init=False)
    phase: GamePhase = field(default=GamePhase.NOT_STARTED, init=False)
    status: GameStatus = field(default=GameStatus.IN_PROGRESS, init=False)
    result: GameResult = field(default=GameResult.IN_PROGRESS, init=False)
    status_text: str = field(default="", init=False)
    selected: Square | None = field(default=None, init=False)
    legal_targets: list[Move] = field(default_factory=list, init=False)
    last_move: Move | None = field(default=None, init=False)
    move_history: list[MoveRecord] = field(default_factory=list, init=False)
    start_fen: str = field(default=STARTING_FEN, init=False)

    # ── Initialisation ───────────────────────────────────────────────────

    def setup(self, fen: str | None = None) -> None:
        """Initialise (or reset) the game. Raises ``ValueError`` on bad FEN."""
        position = position_from_fen(fen or STARTING_FEN)
        self.start_fen = fen or STARTING_FEN
        self.position = position
        self.phase = GamePhase.AWAITING_MOVE
        self.last_move = None
        self.move_history.clear()
        self.clear_selection()
        self._refresh_status()

    # ── Move application ─────────────────────────────────────────────────

    def apply_move(self, move: Move) -> MoveRecord:
        """Apply a validated move and return the history record.

        Caller is responsible for the legality check.
        """
        was_capture = move.capture
        self.position = self.position.apply_move(move)
        self._refresh_status()

        record = MoveRecord(
            move=move,
            fen_after=position_to_fen(self.position),
            was_check=self.status in (GameStatus.CHECK, GameStatus.CHECKMATE),
            was_capture=was_capture,
        )
        self.move_history.append(record)
        self.last_move = move
        self.clear_selection()
        return record

    # ── Selection ────────────────────────────────────────────────────────

    def select(self, sq: Square) -> None:
        self.selected = sq
        self.legal_targets = MoveGenerator(self.position).legal_moves_from(sq)

    def clear_selection(self) -> None:
        self.selected = None
        self.legal_targets = []

    # ── Query helpers ────────────────────────────────────────────────────

    @property
    def side_to_move(self) -> Color:
        return self.position.side_to_move

    @property
    def is_game_over(self) -> bool:
        return self.status.is_terminal

    @property
    def ply_count(self) -> int:
        """Number of half-moves played."""
        return len(self.move_history)

    @property
    def target_squares(self) -> list[Square]:
        """Destination squares of the selected piece."""
        return [move.to_sq for move in self.legal_targets]

    def legal_moves(self) -> list[Move]:
        """Legal moves in the current position."""
        return MoveGenerator(self.position).generate_legal_moves()

    def legal_moves_from(self, sq: Square) -> list[Move]:
        return MoveGenerator(self.position).legal_moves_from(sq)

    # ── Internal ─────────────────────────────────────────────────────────

    def _refresh_status(self) -> None:
        self.status = Rules.game_status(self.position)
        self.result = Rules.game_result(self.position)
