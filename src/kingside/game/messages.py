"""Status-line strings shown to the player.

Usage::

    from kingside.game.messages import t

    print(t().status_select)               # "Select a piece to move."
    print(t().checkmate_text(Color.WHITE))  # "Checkmate. White wins."
"""

from __future__ import annotations

from dataclasses import dataclass

from kingside.core.enums import Color


@dataclass(frozen=True)
class Strings:
    status_select: str
    status_check: str
    status_checkmate: str  # "Checkmate. {winner} wins."
    status_stalemate: str
    status_thinking: str
    status_engine_loading: str
    status_engine_unavailable: str
    status_engine_error: str  # "Engine error: {msg}"

    color_white: str
    color_black: str

    def color_name(self, color: Color) -> str:
        return self.color_white if color == Color.WHITE else self.color_black

    def checkmate_text(self, winner: Color) -> str:
        return self.status_checkmate.format(winner=self.color_name(winner))

    def by_key(self, key: str) -> str:
        """Look up a ``status_*`` string by its short key, e.g. ``engine_loading``."""
        return getattr(self, f"status_{key}")


_EN = Strings(
    status_select="Select a piece to move.",
    status_check="Check.",
    status_checkmate="Checkmate. {winner} wins.",
    status_stalemate="Stalemate.",
    status_thinking="Computer is thinking...",
    status_engine_loading="Loading engine...",
    status_engine_unavailable="Engine unavailable, using backup AI.",
    status_engine_error="Engine error: {msg}",
    color_white="White",
    color_black="Black",
)


def t() -> Strings:
    """Return the status-line strings."""
    return _EN
