"""Move value object and the promotion policy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from kingside.core.enums import MoveFlag, PieceType
from kingside.core.types import Square, square_name

# Pawns reaching the last rank always become queens; there is no
# under-promotion choice. Turning this off makes the generator emit one move
# per piece in PROMOTION_CHOICES instead.
AUTO_PROMOTE_TO_QUEEN: Final = True

PROMOTION_CHOICES: Final[tuple[PieceType, ...]] = (
    (PieceType.QUEEN,)
    if AUTO_PROMOTE_TO_QUEEN
    else (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)
)


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable value object representing a single chess move."""

    from_sq: Square
    to_sq: Square
    flag: MoveFlag = MoveFlag.NORMAL
    capture: bool = False
    promotion: PieceType | None = None

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += self.promotion.char
        return base

    @property
    def uci(self) -> str:
        """Coordinate notation, e.g. ``e2e4`` or ``e7e8q``."""
        return str(self)

    # ── Classification ───────────────────────────────────────────────────

    @property
    def is_castle(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)

    @property
    def is_promotion(self) -> bool:
        return self.promotion is not None

    @property
    def is_noisy(self) -> bool:
        """Captures, en passant and promotions; the quiescence move set."""
        return self.capture or self.promotion is not None
