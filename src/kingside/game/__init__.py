"""Game management layer: controller, live state, status messages.

Quick start::

    from kingside.game import GameController

    ctrl = GameController(vs_computer=False)
    ctrl.new_game()
    ctrl.try_move(E2, E4)
"""

from kingside.game.controller import GameController, GameEvents
from kingside.game.interfaces import GamePhase, IGameController
from kingside.game.messages import Strings, t
from kingside.game.state import GameState, MoveRecord

__all__ = [
    # Interfaces
    "GamePhase",
    "IGameController",
    # Concrete
    "GameController",
    "GameEvents",
    "GameState",
    "MoveRecord",
    # Messages
    "Strings",
    "t",
]
