"""Zobrist keys for hashing positions into transposition-table keys.

The key covers placement, side to move, castling rights and the en-passant
target. Clocks are deliberately left out.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from kingside.core.enums import CastlingRights, Color
from kingside.core.piece import Piece
from kingside.core.types import Square, square_index

if TYPE_CHECKING:
    from kingside.core.board import Board

_SEED: Final = 0x6B1D5EED2C0FFEE1
_MASK_64: Final = 0xFFFFFFFFFFFFFFFF


def _splitmix64(state: int) -> int:
    """Deterministic 64-bit bit-mixer suitable for static key generation."""
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


def _nth_key(index: int) -> int:
    return _splitmix64(_SEED + index)


# [color][piece_type - 1][square index]
_PIECE_KEYS: Final = tuple(
    tuple(
        tuple(_nth_key((color * 384) + (ptype * 64) + idx) for idx in range(64))
        for ptype in range(6)
    )
    for color in range(2)
)
_SIDE_TO_MOVE_KEY: Final = _nth_key(768)
_CASTLING_KEYS: Final = tuple(_nth_key(769 + idx) for idx in range(16))
_EN_PASSANT_KEYS: Final = tuple(_nth_key(785 + idx) for idx in range(64))


def piece_key(piece: Piece, sq: Square) -> int:
    """Hash key for a specific piece on a square."""
    return _PIECE_KEYS[int(piece.color)][int(piece.piece_type) - 1][square_index(sq)]


def side_to_move_key() -> int:
    """Toggled in whenever Black is to move."""
    return _SIDE_TO_MOVE_KEY


def castling_key(castling: CastlingRights) -> int:
    return _CASTLING_KEYS[int(castling) & 0xF]


def en_passant_key(ep_square: Square) -> int:
    return _EN_PASSANT_KEYS[square_index(ep_square)]


def compute_hash(
    board: Board,
    side_to_move: Color,
    castling: CastlingRights,
    en_passant: Square | None,
) -> int:
    """Full key computed from scratch."""
    key = castling_key(castling)
    if side_to_move == Color.BLACK:
        key ^= _SIDE_TO_MOVE_KEY
    if en_passant is not None:
        key ^= en_passant_key(en_passant)
    for sq, piece in board.pieces():
        key ^= piece_key(piece, sq)
    return key
