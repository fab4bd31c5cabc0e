"""Core domain layer: pure chess logic with zero external dependencies.

Quick start::

    from kingside.core import MoveGenerator, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    gen = MoveGenerator(pos)
    for move in gen.generate_legal_moves():
        print(move)
"""

from kingside.core.board import Board
from kingside.core.enums import (
    CastlingRights,
    Color,
    GameResult,
    GameStatus,
    MoveFlag,
    PieceType,
)
from kingside.core.move import AUTO_PROMOTE_TO_QUEEN, Move
from kingside.core.move_generator import (
    MoveGenerator,
    is_in_check,
    is_square_attacked,
)
from kingside.core.notation import (
    STARTING_FEN,
    parse_uci_move,
    position_from_fen,
    position_key,
    position_to_fen,
    resolve_uci_move,
)
from kingside.core.piece import Piece
from kingside.core.position import Position
from kingside.core.rules import Rules
from kingside.core.types import (
    Square,
    in_bounds,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameResult",
    "GameStatus",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Square",
    "in_bounds",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "AUTO_PROMOTE_TO_QUEEN",
    "Board",
    "Move",
    "MoveGenerator",
    "Piece",
    "Position",
    "Rules",
    "is_in_check",
    "is_square_attacked",
    # Notation
    "STARTING_FEN",
    "parse_uci_move",
    "position_from_fen",
    "position_key",
    "position_to_fen",
    "resolve_uci_move",
]
