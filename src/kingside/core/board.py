"""Board - piece placement on an 8x8 grid."""

from __future__ import annotations

from collections.abc import Iterator

from kingside.core.enums import Color, MoveFlag, PieceType
from kingside.core.move import AUTO_PROMOTE_TO_QUEEN, Move
from kingside.core.piece import Piece
from kingside.core.types import Square

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Board:
    """8x8 matrix of optional pieces, indexed by ``(row, col)``.

    Row 0 is rank 8 and column 0 is file a. A board handed to a
    :class:`~kingside.core.position.Position` is never written to again;
    new positions get new boards from :meth:`after_move`.
    """

    __slots__ = ("_grid",)

    def __init__(self) -> None:
        self._grid: list[list[Piece | None]] = [[None] * 8 for _ in range(8)]

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._grid[sq[0]][sq[1]]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        self._grid[sq[0]][sq[1]] = piece

    def is_empty(self, sq: Square) -> bool:
        return self._grid[sq[0]][sq[1]] is None

    # -- Query helpers ------------------------------------------------------

    def pieces(self, color: Color | None = None) -> Iterator[tuple[Square, Piece]]:
        """Occupied squares (optionally of one color), rank 8 first."""
        for row, cells in enumerate(self._grid):
            for col, piece in enumerate(cells):
                if piece is not None and (color is None or piece.color == color):
                    yield (row, col), piece

    def find_king(self, color: Color) -> Square | None:
        """Square of *color*'s king, or None when it is missing."""
        king = Piece(color, PieceType.KING)
        for row, cells in enumerate(self._grid):
            for col, piece in enumerate(cells):
                if piece == king:
                    return (row, col)
        return None

    def rows(self) -> list[list[Piece | None]]:
        """A copy of the grid, row 0 (rank 8) first."""
        return [row.copy() for row in self._grid]

    # -- Copying / speculative application ----------------------------------

    def copy(self) -> Board:
        b = Board()
        b._grid = [row.copy() for row in self._grid]
        return b

    def after_move(self, move: Move) -> Board:
        """Return a new board with *move* played; ``self`` is untouched.

        Handles the en-passant capture square, the castling rook and pawn
        promotion. No legality checks happen here.
        """
        piece = self[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq}")

        nxt = self.copy()
        grid = nxt._grid
        from_row, from_col = move.from_sq
        to_row, to_col = move.to_sq

        grid[from_row][from_col] = None
        if move.flag == MoveFlag.EN_PASSANT:
            # The captured pawn sits beside the mover, not on the target.
            grid[from_row][to_col] = None

        placed = piece
        if piece.piece_type == PieceType.PAWN and to_row in (0, 7):
            promotion = move.promotion
            if promotion is None:
                if not AUTO_PROMOTE_TO_QUEEN:
                    raise ValueError(f"Promotion piece required for {move}")
                promotion = PieceType.QUEEN
            placed = Piece(piece.color, promotion)
        grid[to_row][to_col] = placed

        if move.flag == MoveFlag.CASTLE_KINGSIDE:
            grid[from_row][5] = grid[from_row][7]
            grid[from_row][7] = None
        elif move.flag == MoveFlag.CASTLE_QUEENSIDE:
            grid[from_row][3] = grid[from_row][0]
            grid[from_row][0] = None
        return nxt

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        b = cls()
        for col, pt in enumerate(_BACK_RANK):
            b._grid[0][col] = Piece(Color.BLACK, pt)
            b._grid[1][col] = Piece(Color.BLACK, PieceType.PAWN)
            b._grid[6][col] = Piece(Color.WHITE, PieceType.PAWN)
            b._grid[7][col] = Piece(Color.WHITE, pt)
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        lines: list[str] = []
        for row, cells in enumerate(self._grid):
            marks = [str(p) if p else "." for p in cells]
            lines.append(f"{8 - row} {' '.join(marks)}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)
