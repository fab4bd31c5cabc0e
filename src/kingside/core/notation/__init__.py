"""Notation package: FEN and coordinate (UCI) move parsing and serialization."""

from kingside.core.notation.fen import (
    STARTING_FEN,
    position_from_fen,
    position_key,
    position_to_fen,
)
from kingside.core.notation.uci import (
    UciMove,
    move_to_uci,
    parse_uci_move,
    resolve_uci_move,
)

__all__ = [
    "STARTING_FEN",
    "UciMove",
    "position_from_fen",
    "position_key",
    "position_to_fen",
    "move_to_uci",
    "parse_uci_move",
    "resolve_uci_move",
]
