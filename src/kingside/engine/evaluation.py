"""Static evaluation: material, piece-square terms, bishop pair, pawn count.

Scores are in pawns and always from a caller-chosen perspective color, so
``evaluate(pos, WHITE) == -evaluate(pos, BLACK)``. The constants are tuning
heuristics rather than anything principled.
"""

from __future__ import annotations

from typing import Final

from kingside.core.enums import Color, PieceType
from kingside.core.piece import Piece
from kingside.core.position import Position
from kingside.core.types import Square

PIECE_VALUES: Final[dict[PieceType, float]] = {
    PieceType.PAWN: 1.0,
    PieceType.KNIGHT: 3.0,
    PieceType.BISHOP: 3.2,
    PieceType.ROOK: 5.0,
    PieceType.QUEEN: 9.0,
    PieceType.KING: 100.0,
}

BISHOP_PAIR_BONUS: Final = 0.35
PAWN_COUNT_WEIGHT: Final = 0.03


def piece_square_bonus(piece: Piece, sq: Square) -> float:
    """Positional bonus for *piece* standing on *sq*, from its owner's side."""
    row, col = sq
    # Rows counted from the owner's back rank: 0 = home rank.
    rr = 7 - row if piece.color == Color.WHITE else row
    center_dist = abs(3.5 - col) + abs(3.5 - rr)

    ptype = piece.piece_type
    if ptype == PieceType.PAWN:
        return (6 - rr) * 0.05 - center_dist * 0.02
    if ptype in (PieceType.KNIGHT, PieceType.BISHOP):
        return 0.2 - center_dist * 0.04
    if ptype == PieceType.ROOK:
        return (0.08 if 0 < rr < 7 else 0.0) - center_dist * 0.01
    if ptype == PieceType.QUEEN:
        return -center_dist * 0.015
    # King: stay home.
    if rr <= 1:
        return 0.12
    return -center_dist * 0.03


def evaluate(position: Position, perspective: Color) -> float:
    """Score *position* for *perspective* (positive = good for that side)."""
    score = 0.0
    my_bishops = opp_bishops = 0
    my_pawns = opp_pawns = 0

    for sq, piece in position.board.pieces():
        mine = piece.color == perspective
        value = PIECE_VALUES[piece.piece_type] + piece_square_bonus(piece, sq)
        score += value if mine else -value

        if piece.piece_type == PieceType.BISHOP:
            if mine:
                my_bishops += 1
            else:
                opp_bishops += 1
        elif piece.piece_type == PieceType.PAWN:
            if mine:
                my_pawns += 1
            else:
                opp_pawns += 1

    if my_bishops >= 2:
        score += BISHOP_PAIR_BONUS
    if opp_bishops >= 2:
        score -= BISHOP_PAIR_BONUS
    score += (my_pawns - opp_pawns) * PAWN_COUNT_WEIGHT
    return score
