"""Abstract interfaces for the game layer.

The computer-move pipeline and any UI depend on :class:`IGameController`,
not on the concrete controller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kingside.core.move import Move
    from kingside.core.types import Square


# ── Game phase FSM states ────────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Finite-state-machine states for a chess game."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    THINKING = auto()  # computer is choosing a move
    GAME_OVER = auto()


# ── Abstract interfaces ─────────────────────────────────────────────────────


class IGameController(ABC):
    """Interface for the game orchestrator."""

    @abstractmethod
    def new_game(self, fen: str | None = None) -> None:
        """Set up a new game from the start position or *fen*."""

    @abstractmethod
    def select_square(self, sq: Square) -> bool:
        """Handle a click on *sq*. Returns True if it played a move."""

    @abstractmethod
    def try_move(self, from_sq: Square, to_sq: Square) -> bool:
        """Play the legal move between two squares (drag and drop)."""

    @abstractmethod
    def submit_move(self, move: Move, *, from_computer: bool = False) -> bool:
        """Submit a move. Returns True if legal and applied."""

    @abstractmethod
    def set_vs_computer(self, enabled: bool) -> None:
        """Turn the computer opponent on or off."""
