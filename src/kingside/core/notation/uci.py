"""Coordinate move notation (``e2e4``, ``e7e8q``) as spoken by UCI engines."""

from __future__ import annotations

from dataclasses import dataclass

from kingside.core.enums import PieceType
from kingside.core.move import AUTO_PROMOTE_TO_QUEEN, Move
from kingside.core.move_generator import MoveGenerator
from kingside.core.position import Position
from kingside.core.types import Square, parse_square

_PROMOTION_LETTERS: dict[str, PieceType] = {
    "q": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
}


@dataclass(frozen=True, slots=True)
class UciMove:
    """A parsed coordinate move, not yet checked against any position."""

    from_sq: Square
    to_sq: Square
    promotion: PieceType | None = None


def move_to_uci(move: Move) -> str:
    return move.uci


def parse_uci_move(text: str) -> UciMove:
    """Parse ``e2e4`` / ``e7e8q``; raises ``ValueError`` on anything else."""
    text = text.strip()
    if len(text) not in (4, 5):
        raise ValueError(f"Invalid coordinate move: {text!r}")
    from_sq = parse_square(text[0:2])
    to_sq = parse_square(text[2:4])
    promotion: PieceType | None = None
    if len(text) == 5:
        promotion = _PROMOTION_LETTERS.get(text[4].lower())
        if promotion is None:
            raise ValueError(f"Invalid promotion letter in {text!r}")
    return UciMove(from_sq, to_sq, promotion)


def resolve_uci_move(position: Position, text: str) -> Move | None:
    """Find the legal move in *position* that *text* names.

    Returns ``None`` for malformed text or a move that is not legal. Under the
    auto-queen policy any promotion letter resolves to the queen promotion.
    """
    try:
        parsed = parse_uci_move(text)
    except ValueError:
        return None

    candidates = [
        move
        for move in MoveGenerator(position).legal_moves_from(parsed.from_sq)
        if move.to_sq == parsed.to_sq
    ]
    if AUTO_PROMOTE_TO_QUEEN or parsed.promotion is None:
        return candidates[0] if candidates else None
    for move in candidates:
        if move.promotion == parsed.promotion:
            return move
    return None
