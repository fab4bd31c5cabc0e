"""High-level chess rules: check, checkmate, stalemate, game status."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kingside.core.enums import Color, GameResult, GameStatus
from kingside.core.move_generator import MoveGenerator

if TYPE_CHECKING:
    from kingside.core.move import Move
    from kingside.core.position import Position


class Rules:
    """Static rule-checker that operates on a :class:`Position`."""

    # Product policy: no repetition or move-count draws. The halfmove clock
    # is kept for FEN only.

    @staticmethod
    def is_in_check(position: Position) -> bool:
        gen = MoveGenerator(position)
        return gen.is_in_check(position.side_to_move)

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        if not Rules.is_in_check(position):
            return False
        return not MoveGenerator(position).has_legal_moves()

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        if Rules.is_in_check(position):
            return False
        return not MoveGenerator(position).has_legal_moves()

    @staticmethod
    def legal_moves(position: Position) -> list[Move]:
        return MoveGenerator(position).generate_legal_moves()

    @staticmethod
    def game_status(position: Position) -> GameStatus:
        """What the side to move is facing."""
        gen = MoveGenerator(position)
        in_check = gen.is_in_check(position.side_to_move)
        if not gen.has_legal_moves():
            return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
        return GameStatus.CHECK if in_check else GameStatus.IN_PROGRESS

    @staticmethod
    def game_result(position: Position) -> GameResult:
        """Determine the current game result."""
        status = Rules.game_status(position)
        if status == GameStatus.CHECKMATE:
            return (
                GameResult.BLACK_WINS
                if position.side_to_move == Color.WHITE
                else GameResult.WHITE_WINS
            )
        if status == GameStatus.STALEMATE:
            return GameResult.DRAW
        return GameResult.IN_PROGRESS
