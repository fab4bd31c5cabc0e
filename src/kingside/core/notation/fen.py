"""FEN parsing and serialization."""

from __future__ import annotations

from kingside.core.board import Board
from kingside.core.enums import CastlingRights, Color
from kingside.core.piece import Piece
from kingside.core.position import Position
from kingside.core.types import Square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_LETTERS: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`."""
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise ValueError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]

    # 1. Piece placement, rank 8 first
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    for row, rank_text in enumerate(ranks):
        col = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise ValueError(f"Invalid FEN digit {ch!r}: {fen!r}")
                col += step
            else:
                if col >= 8:
                    raise ValueError(f"Invalid FEN rank width: {fen!r}")
                board[(row, col)] = Piece.from_char(ch)
                col += 1
            if col > 8:
                raise ValueError(f"Invalid FEN rank width: {fen!r}")
        if col != 8:
            raise ValueError(f"Invalid FEN rank width: {fen!r}")

    # 2. Side to move
    if side_part == "w":
        side = Color.WHITE
    elif side_part == "b":
        side = Color.BLACK
    else:
        raise ValueError(f"Invalid FEN side-to-move field: {side_part!r}")

    # 3. Castling
    castling = CastlingRights.NONE
    if castling_part != "-":
        rights = dict(_CASTLING_LETTERS)
        seen: set[str] = set()
        for ch in castling_part:
            right = rights.get(ch)
            if right is None or ch in seen:
                raise ValueError(f"Invalid FEN castling field: {castling_part!r}")
            seen.add(ch)
            castling |= right

    # 4. En passant
    ep: Square | None = None
    if ep_part != "-":
        ep = parse_square(ep_part)
        expected_ep_rank = 6 if side == Color.WHITE else 3
        if rank_of(ep) != expected_ep_rank:
            raise ValueError(
                f"Invalid FEN en-passant square for side-to-move: {ep_part!r}"
            )

    # 5-6. Clocks (optional)
    halfmove = _parse_clock(parts, 4, default=0, minimum=0, name="halfmove clock")
    fullmove = _parse_clock(parts, 5, default=1, minimum=1, name="fullmove number")

    return Position(board, side, castling, ep, halfmove, fullmove)


def _parse_clock(
    parts: list[str], index: int, *, default: int, minimum: int, name: str
) -> int:
    if len(parts) <= index:
        return default
    text = parts[index]
    if not text.isdigit() or int(text) < minimum:
        raise ValueError(f"Invalid FEN {name}: {text!r}")
    return int(text)


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN."""
    return f"{position_key(pos)} {pos.halfmove_clock} {pos.fullmove_number}"


def position_key(pos: Position) -> str:
    """First four FEN fields; identifies a position regardless of clocks."""
    # 1. Board
    rows: list[str] = []
    for cells in pos.board.rows():
        empty = 0
        row = ""
        for piece in cells:
            if piece is None:
                empty += 1
            else:
                if empty:
                    row += str(empty)
                    empty = 0
                row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)
    board_str = "/".join(rows)

    # 2. Castling
    castling_str = "".join(
        letter for letter, right in _CASTLING_LETTERS if pos.castling & right
    )
    if not castling_str:
        castling_str = "-"

    # 3. En passant
    ep_str = square_name(pos.en_passant) if pos.en_passant is not None else "-"

    return f"{board_str} {pos.side_to_move.fen_char} {castling_str} {ep_str}"
