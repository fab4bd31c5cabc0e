"""GameController: the central orchestrator of a chess game.

Coordinates: GameState, MoveGenerator, the computer opponent's turn gating.
Emits events via simple callbacks so the computer-move session, a UI or tests
can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from kingside.core.enums import Color, GameResult, GameStatus
from kingside.core.move import Move
from kingside.core.move_generator import MoveGenerator
from kingside.core.position import Position
from kingside.core.types import Square
from kingside.game.interfaces import GamePhase, IGameController
from kingside.game.messages import t
from kingside.game.state import GameState

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[Move, "GameState"], None]
GameOverCallback = Callable[[GameResult], None]
PhaseCallback = Callable[[GamePhase], None]
StatusCallback = Callable[[str], None]
ComputerTurnCallback = Callable[[Position], None]
CancelledCallback = Callable[[], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_status_changed: list[StatusCallback] = field(default_factory=list)
    on_computer_turn: list[ComputerTurnCallback] = field(default_factory=list)
    on_computer_cancelled: list[CancelledCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    """Validates and applies moves, gates turns, notifies listeners.

    Every move reaching the live position goes through the legality filter
    in :meth:`submit_move`. While the computer is to move, human input is
    ignored; computer moves are only accepted in the THINKING phase.

    Thread-safety: call from a single thread (the Qt main thread). Computer
    moves arrive through ``submit_move(..., from_computer=True)`` from the
    session on that thread.
    """

    __slots__ = (
        "_state",
        "_vs_computer",
        "_computer_color",
        "events",
    )

    def __init__(
        self,
        *,
        vs_computer: bool = True,
        computer_color: Color = Color.BLACK,
    ) -> None:
        self._state = GameState()
        self._vs_computer = vs_computer
        self._computer_color = computer_color
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def position(self) -> Position:
        return self._state.position

    @property
    def vs_computer(self) -> bool:
        return self._vs_computer

    @property
    def computer_color(self) -> Color:
        return self._computer_color

    @property
    def is_computer_turn(self) -> bool:
        return (
            self._vs_computer
            and not self._state.is_game_over
            and self._state.side_to_move == self._computer_color
        )

    # ── IGameController impl ─────────────────────────────────────────────

    def new_game(self, fen: str | None = None) -> None:
        state = GameState()
        state.setup(fen)  # raises before anything is replaced

        self._cancel_computer_turn()
        self._state = state
        self._after_position_change()

    def select_square(self, sq: Square) -> bool:
        if not self._accepts_human_input():
            return False

        state = self._state
        piece = state.position.board[sq]
        own_piece = piece is not None and piece.color == state.side_to_move

        if state.selected is None:
            if own_piece:
                state.select(sq)
            return False

        for move in state.legal_targets:
            if move.to_sq == sq:
                return self.submit_move(move)

        if own_piece:
            state.select(sq)
        else:
            state.clear_selection()
        return False

    def try_move(self, from_sq: Square, to_sq: Square) -> bool:
        if not self._accepts_human_input():
            return False
        for move in self._state.legal_moves_from(from_sq):
            if move.to_sq == to_sq:
                return self.submit_move(move)
        return False

    def submit_move(self, move: Move, *, from_computer: bool = False) -> bool:
        state = self._state
        if state.is_game_over:
            return False
        if from_computer:
            if state.phase != GamePhase.THINKING:
                _LOGGER.debug("Dropping computer move %s outside its turn", move)
                return False
        elif not self._accepts_human_input():
            return False

        if not MoveGenerator(state.position).is_legal(move):
            return False

        state.apply_move(move)
        self._emit_move(move)
        self._after_position_change()
        return True

    def set_vs_computer(self, enabled: bool) -> None:
        self._cancel_computer_turn()
        self._vs_computer = enabled
        self._state.clear_selection()
        if not self._state.is_game_over:
            self._after_position_change()

    # ── Status / computer turn ───────────────────────────────────────────

    def set_status(self, text: str) -> None:
        """Show *text* in the status line (engine messages and the like)."""
        self._state.status_text = text
        for cb in self.events.on_status_changed:
            cb(text)

    def abort_computer_turn(self, message: str) -> None:
        """Give up on the current computer move and report *message*.

        The game stays where it is; toggling the computer off lets the human
        move for both sides, toggling it on again retries.
        """
        if self._state.phase != GamePhase.THINKING:
            return
        _LOGGER.warning("Computer turn abandoned: %s", message)
        self._set_phase(GamePhase.AWAITING_MOVE)
        self.set_status(message)

    # ── Internal helpers ─────────────────────────────────────────────────

    def _accepts_human_input(self) -> bool:
        state = self._state
        if state.is_game_over or state.phase == GamePhase.THINKING:
            return False
        return not self.is_computer_turn

    def _after_position_change(self) -> None:
        """Recompute phase and status text, then prompt whoever moves next."""
        state = self._state
        strings = t()

        if state.status == GameStatus.CHECKMATE:
            self._set_phase(GamePhase.GAME_OVER)
            self.set_status(strings.checkmate_text(state.side_to_move.opposite))
            self._emit_game_over(state.result)
            return
        if state.status == GameStatus.STALEMATE:
            self._set_phase(GamePhase.GAME_OVER)
            self.set_status(strings.status_stalemate)
            self._emit_game_over(state.result)
            return

        if self.is_computer_turn:
            self._set_phase(GamePhase.THINKING)
            self.set_status(strings.status_thinking)
            for cb in self.events.on_computer_turn:
                cb(state.position)
            return

        self._set_phase(GamePhase.AWAITING_MOVE)
        if state.status == GameStatus.CHECK:
            self.set_status(strings.status_check)
        else:
            self.set_status(strings.status_select)

    def _cancel_computer_turn(self) -> None:
        if self._state.phase != GamePhase.THINKING:
            return
        self._state.phase = GamePhase.AWAITING_MOVE
        for cb in self.events.on_computer_cancelled:
            cb()

    def _set_phase(self, phase: GamePhase) -> None:
        self._state.phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)

    def _emit_move(self, move: Move) -> None:
        for cb in self.events.on_move:
            cb(move, self._state)

    def _emit_game_over(self, result: GameResult) -> None:
        for cb in self.events.on_game_over:
            cb(result)
