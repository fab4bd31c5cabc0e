"""Position: an immutable snapshot of the full game state.

A position is everything the rules and the search need: board, side to move,
castling rights, en-passant target and clocks. Applying a move never mutates
a position; it returns the next one.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from kingside.core.board import Board
from kingside.core.enums import CastlingRights, Color, MoveFlag, PieceType
from kingside.core.move import Move
from kingside.core.types import Square
from kingside.core.zobrist import (
    castling_key,
    compute_hash,
    en_passant_key,
    piece_key,
    side_to_move_key,
)

_ROOK_CORNERS: dict[Square, CastlingRights] = {
    (7, 0): CastlingRights.WHITE_QUEENSIDE,
    (7, 7): CastlingRights.WHITE_KINGSIDE,
    (0, 0): CastlingRights.BLACK_QUEENSIDE,
    (0, 7): CastlingRights.BLACK_KINGSIDE,
}


@dataclass(frozen=True, slots=True)
class Position:
    """Board + side to move + castling + en passant + clocks.

    ``zobrist_hash`` is derived; leave it at the default and it is computed
    from the other fields.
    """

    board: Board = field(default_factory=Board.initial)
    side_to_move: Color = Color.WHITE
    castling: CastlingRights = CastlingRights.ALL
    en_passant: Square | None = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    zobrist_hash: int = field(default=-1, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.zobrist_hash < 0:
            key = compute_hash(
                self.board, self.side_to_move, self.castling, self.en_passant
            )
            object.__setattr__(self, "zobrist_hash", key)

    def __hash__(self) -> int:
        return self.zobrist_hash

    # ── State transition ─────────────────────────────────────────────────

    def apply_move(self, move: Move) -> Position:
        """Return the position after *move*.

        The move is trusted: callers pass moves produced by the legality
        filter (see :class:`~kingside.core.move_generator.MoveGenerator`).
        """
        board = self.board
        piece = board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq}")

        captured = board[move.to_sq]
        capture_sq = move.to_sq
        if move.flag == MoveFlag.EN_PASSANT:
            capture_sq = (move.from_sq[0], move.to_sq[1])
            captured = board[capture_sq]

        next_board = board.after_move(move)
        key = self.zobrist_hash

        key ^= piece_key(piece, move.from_sq)
        if captured is not None:
            key ^= piece_key(captured, capture_sq)
        placed = next_board[move.to_sq]
        assert placed is not None
        key ^= piece_key(placed, move.to_sq)

        if move.is_castle:
            row = move.from_sq[0]
            rook_from, rook_to = (
                ((row, 7), (row, 5))
                if move.flag == MoveFlag.CASTLE_KINGSIDE
                else ((row, 0), (row, 3))
            )
            rook = next_board[rook_to]
            if rook is not None:
                key ^= piece_key(rook, rook_from) ^ piece_key(rook, rook_to)

        castling = self._next_castling(move, piece.piece_type, piece.color)
        if castling != self.castling:
            key ^= castling_key(self.castling) ^ castling_key(castling)

        en_passant: Square | None = None
        if move.flag == MoveFlag.DOUBLE_PAWN:
            en_passant = ((move.from_sq[0] + move.to_sq[0]) // 2, move.from_sq[1])
        if self.en_passant is not None:
            key ^= en_passant_key(self.en_passant)
        if en_passant is not None:
            key ^= en_passant_key(en_passant)

        if piece.piece_type == PieceType.PAWN or captured is not None:
            halfmove = 0
        else:
            halfmove = self.halfmove_clock + 1

        fullmove = self.fullmove_number
        if self.side_to_move == Color.BLACK:
            fullmove += 1

        return Position(
            board=next_board,
            side_to_move=self.side_to_move.opposite,
            castling=castling,
            en_passant=en_passant,
            halfmove_clock=halfmove,
            fullmove_number=fullmove,
            zobrist_hash=key ^ side_to_move_key(),
        )

    def _next_castling(
        self, move: Move, piece_type: PieceType, color: Color
    ) -> CastlingRights:
        castling = self.castling
        if piece_type == PieceType.KING:
            castling &= ~(
                CastlingRights.WHITE_BOTH
                if color == Color.WHITE
                else CastlingRights.BLACK_BOTH
            )
        # A rook leaving its corner, or anything landing on it.
        for sq in (move.from_sq, move.to_sq):
            right = _ROOK_CORNERS.get(sq)
            if right is not None:
                castling &= ~right
        return castling

    # ── Utilities ────────────────────────────────────────────────────────

    @classmethod
    def initial(cls) -> Position:
        """Standard starting position, White to move."""
        return cls()

    def has_castling(self, right: CastlingRights) -> bool:
        return bool(self.castling & right)
