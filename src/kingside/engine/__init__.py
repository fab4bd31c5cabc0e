"""Chess engine package: built-in search, UCI adapter and Qt orchestration."""

from kingside.engine.external import (
    ChannelFactory,
    EngineChannel,
    EngineState,
    ExternalEngineAdapter,
)
from kingside.engine.python_search import MATE_SCORE, PythonSearchEngine
from kingside.engine.qt_bridge import EngineWorker
from kingside.engine.search import IEngine, SearchLimits, SearchResult
from kingside.engine.session import ComputerMoveSession
from kingside.engine.strength import limits_for_rating, uci_option_commands

__all__ = [
    "ChannelFactory",
    "ComputerMoveSession",
    "EngineChannel",
    "EngineState",
    "EngineWorker",
    "ExternalEngineAdapter",
    "IEngine",
    "MATE_SCORE",
    "PythonSearchEngine",
    "SearchLimits",
    "SearchResult",
    "limits_for_rating",
    "uci_option_commands",
]
