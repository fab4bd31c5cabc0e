"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kingside.core.board import Board
from kingside.core.enums import CastlingRights, Color, MoveFlag, PieceType
from kingside.core.move import PROMOTION_CHOICES, Move
from kingside.core.piece import Piece
from kingside.core.types import Square, in_bounds

if TYPE_CHECKING:
    from kingside.core.position import Position


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

_SLIDER_DIRS: dict[PieceType, tuple[tuple[int, int], ...]] = {
    PieceType.BISHOP: BISHOP_DIRS,
    PieceType.ROOK: ROOK_DIRS,
    PieceType.QUEEN: QUEEN_DIRS,
}

# Row deltas: white pawns move towards row 0 (rank 8).
_PAWN_DIR: tuple[int, int] = (-1, 1)
_PAWN_START_ROW: tuple[int, int] = (6, 1)
_HOME_ROW: tuple[int, int] = (7, 0)

_KINGSIDE_RIGHT: tuple[CastlingRights, CastlingRights] = (
    CastlingRights.WHITE_KINGSIDE,
    CastlingRights.BLACK_KINGSIDE,
)
_QUEENSIDE_RIGHT: tuple[CastlingRights, CastlingRights] = (
    CastlingRights.WHITE_QUEENSIDE,
    CastlingRights.BLACK_QUEENSIDE,
)


# -- Attack oracle -----------------------------------------------------------


def is_square_attacked(board: Board, sq: Square, by_color: Color) -> bool:
    """Is *sq* attacked by any piece of *by_color*?

    Walks outward from the target: pawn diagonals, knight jumps, king steps,
    then slider rays up to the first blocker.
    """
    row, col = sq

    # A white pawn attacks towards row 0, so it sits one row *below* sq.
    pawn_row = row - _PAWN_DIR[int(by_color)]
    pawn = Piece(by_color, PieceType.PAWN)
    for dc in (-1, 1):
        if in_bounds(pawn_row, col + dc) and board[(pawn_row, col + dc)] == pawn:
            return True

    knight = Piece(by_color, PieceType.KNIGHT)
    for dr, dc in KNIGHT_OFFSETS:
        r, c = row + dr, col + dc
        if in_bounds(r, c) and board[(r, c)] == knight:
            return True

    king = Piece(by_color, PieceType.KING)
    for dr, dc in KING_OFFSETS:
        r, c = row + dr, col + dc
        if in_bounds(r, c) and board[(r, c)] == king:
            return True

    for dirs, slider in (
        (BISHOP_DIRS, PieceType.BISHOP),
        (ROOK_DIRS, PieceType.ROOK),
    ):
        for dr, dc in dirs:
            r, c = row + dr, col + dc
            while in_bounds(r, c):
                piece = board[(r, c)]
                if piece is not None:
                    if piece.color == by_color and piece.piece_type in (
                        slider,
                        PieceType.QUEEN,
                    ):
                        return True
                    break
                r += dr
                c += dc

    return False


def is_in_check(board: Board, color: Color) -> bool:
    """Is *color*'s king attacked? A board without that king is not in check."""
    king_sq = board.find_king(color)
    if king_sq is None:
        return False
    return is_square_attacked(board, king_sq, color.opposite)


# -- Generator -----------------------------------------------------------------


class MoveGenerator:
    """Generates pseudo-legal and legal moves for a :class:`Position`.

    Legality is decided by playing each candidate on a cloned board and
    asking the attack oracle whether the mover's king is left in check. The
    position itself is never modified.
    """

    __slots__ = ("_pos", "_board")

    def __init__(self, position: Position) -> None:
        self._pos = position
        self._board = position.board

    # -- Public API ---------------------------------------------------------

    def generate_legal_moves(self) -> list[Move]:
        """All strictly legal moves for the side to move."""
        legal: list[Move] = []
        for sq, _piece in self._board.pieces(self._pos.side_to_move):
            legal.extend(self.legal_moves_from(sq))
        return legal

    def generate_pseudo_legal_moves(self) -> list[Move]:
        """All pseudo-legal moves (may leave own king in check)."""
        moves: list[Move] = []
        for sq, _piece in self._board.pieces(self._pos.side_to_move):
            moves.extend(self.pseudo_legal_moves_from(sq))
        return moves

    def legal_moves_from(self, sq: Square) -> list[Move]:
        """Legal moves of the piece on *sq*; empty unless it is the mover's."""
        piece = self._board[sq]
        if piece is None or piece.color != self._pos.side_to_move:
            return []
        return [
            move
            for move in self.pseudo_legal_moves_from(sq)
            if self._keeps_king_safe(move, piece.color)
        ]

    def has_legal_moves(self) -> bool:
        """Whether the side to move has at least one legal move."""
        color = self._pos.side_to_move
        for sq, _piece in self._board.pieces(color):
            for move in self.pseudo_legal_moves_from(sq):
                if self._keeps_king_safe(move, color):
                    return True
        return False

    def is_legal(self, move: Move) -> bool:
        """Whether *move* is one of the legal moves in this position."""
        return move in self.legal_moves_from(move.from_sq)

    def pseudo_legal_moves_from(self, sq: Square) -> list[Move]:
        """Candidate moves for the piece on *sq*, ignoring self-check."""
        piece = self._board[sq]
        if piece is None:
            return []

        moves: list[Move] = []
        ptype = piece.piece_type
        if ptype == PieceType.PAWN:
            self._gen_pawn(sq, piece.color, moves)
        elif ptype == PieceType.KNIGHT:
            self._gen_steps(sq, piece.color, KNIGHT_OFFSETS, moves)
        elif ptype == PieceType.KING:
            self._gen_steps(sq, piece.color, KING_OFFSETS, moves)
            self._gen_castling(sq, piece.color, moves)
        else:
            self._gen_sliding(sq, piece.color, _SLIDER_DIRS[ptype], moves)
        return moves

    # -- Attack detection (public) -----------------------------------------

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked by the opponent?"""
        return is_in_check(self._board, color)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        """Is *sq* attacked by any piece of *by_color*?"""
        return is_square_attacked(self._board, sq, by_color)

    # -- Legality filter (private) -----------------------------------------

    def _keeps_king_safe(self, move: Move, color: Color) -> bool:
        return not is_in_check(self._board.after_move(move), color)

    # -- Piece-specific generators (private) -------------------------------

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        row, col = sq
        step = _PAWN_DIR[int(color)]
        next_row = row + step
        if not 0 <= next_row < 8:
            return
        last_row = next_row in (0, 7)

        if board.is_empty((next_row, col)):
            if last_row:
                for pt in PROMOTION_CHOICES:
                    moves.append(Move(sq, (next_row, col), promotion=pt))
            else:
                moves.append(Move(sq, (next_row, col)))
                two_row = row + 2 * step
                if row == _PAWN_START_ROW[int(color)] and board.is_empty(
                    (two_row, col)
                ):
                    moves.append(Move(sq, (two_row, col), MoveFlag.DOUBLE_PAWN))

        for dc in (-1, 1):
            target_sq = (next_row, col + dc)
            if not in_bounds(*target_sq):
                continue
            target = board[target_sq]
            if target is not None:
                if target.color == color:
                    continue
                if last_row:
                    for pt in PROMOTION_CHOICES:
                        moves.append(Move(sq, target_sq, capture=True, promotion=pt))
                else:
                    moves.append(Move(sq, target_sq, capture=True))
            elif target_sq == self._pos.en_passant:
                moves.append(Move(sq, target_sq, MoveFlag.EN_PASSANT, capture=True))

    def _gen_steps(
        self,
        sq: Square,
        color: Color,
        offsets: tuple[tuple[int, int], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        row, col = sq
        for dr, dc in offsets:
            to_sq = (row + dr, col + dc)
            if not in_bounds(*to_sq):
                continue
            target = board[to_sq]
            if target is None:
                moves.append(Move(sq, to_sq))
            elif target.color != color:
                moves.append(Move(sq, to_sq, capture=True))

    def _gen_sliding(
        self,
        sq: Square,
        color: Color,
        dirs: tuple[tuple[int, int], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        row, col = sq
        for dr, dc in dirs:
            r, c = row + dr, col + dc
            while in_bounds(r, c):
                target = board[(r, c)]
                if target is None:
                    moves.append(Move(sq, (r, c)))
                else:
                    if target.color != color:
                        moves.append(Move(sq, (r, c), capture=True))
                    break
                r += dr
                c += dc

    def _gen_castling(self, king_sq: Square, color: Color, moves: list[Move]) -> None:
        home = _HOME_ROW[int(color)]
        if king_sq != (home, 4):
            return
        castling = self._pos.castling
        ks_right = _KINGSIDE_RIGHT[int(color)]
        qs_right = _QUEENSIDE_RIGHT[int(color)]
        if not castling & (ks_right | qs_right):
            return

        board = self._board
        if is_in_check(board, color):
            return

        opponent = color.opposite
        rook = Piece(color, PieceType.ROOK)

        if (
            castling & ks_right
            and board[(home, 7)] == rook
            and board.is_empty((home, 5))
            and board.is_empty((home, 6))
            and not is_square_attacked(board, (home, 5), opponent)
            and not is_square_attacked(board, (home, 6), opponent)
        ):
            moves.append(Move(king_sq, (home, 6), MoveFlag.CASTLE_KINGSIDE))

        if (
            castling & qs_right
            and board[(home, 0)] == rook
            and board.is_empty((home, 3))
            and board.is_empty((home, 2))
            and board.is_empty((home, 1))
            and not is_square_attacked(board, (home, 3), opponent)
            and not is_square_attacked(board, (home, 2), opponent)
        ):
            moves.append(Move(king_sq, (home, 2), MoveFlag.CASTLE_QUEENSIDE))
