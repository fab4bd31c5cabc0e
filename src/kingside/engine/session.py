"""Computer-move orchestration on the Qt main thread.

Wires a :class:`~kingside.game.controller.GameController` to the external
engine adapter and to the fallback search running on a worker thread.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal

from kingside.config import EngineSettings
from kingside.core.move import Move
from kingside.core.notation import position_to_fen
from kingside.engine.external import ChannelFactory, ExternalEngineAdapter
from kingside.engine.qt_bridge import EngineWorker
from kingside.engine.strength import limits_for_rating
from kingside.game.interfaces import GamePhase
from kingside.game.messages import t

if TYPE_CHECKING:
    from kingside.core.position import Position
    from kingside.engine.search import IEngine
    from kingside.game.controller import GameController

_LOGGER = logging.getLogger(__name__)


class _EngineCommandBus(QObject):
    """Signal bridge for issuing worker commands with queued delivery."""

    search_requested = pyqtSignal(object, int)
    set_limits_requested = pyqtSignal(int, int)


class ComputerMoveSession:
    """Owns the computer's turn from prompt to committed move.

    On ``on_computer_turn`` the session waits the think delay, then asks the
    external engine (or, through the adapter's fallback hook, the worker
    thread). A move is committed after the commit delay, and only if the
    live position still equals the snapshot it was computed for.
    """

    _MAX_FAILURE_RETRIES = 1
    _THREAD_WAIT_MS = 2000

    __slots__ = (
        "__weakref__",
        "_controller",
        "_settings",
        "_adapter",
        "_command_bus",
        "_think_timer",
        "_poll_timer",
        "_reply_timer",
        "_commit_timer",
        "_engine_thread",
        "_engine_worker",
        "_request_id",
        "_snapshot",
        "_snapshot_fen",
        "_pending_move",
        "_awaiting_engine",
        "_remaining_failure_retries",
        "_is_shutting_down",
        "_is_started",
    )

    def __init__(
        self,
        *,
        controller: GameController,
        channel_factory: ChannelFactory | None = None,
        settings: EngineSettings | None = None,
        engine: IEngine | None = None,
        parent: QObject | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._controller = controller
        self._settings = settings or EngineSettings()
        self._adapter = ExternalEngineAdapter(
            channel_factory,
            settings=self._settings,
            on_move=self._on_engine_move,
            request_fallback=self._request_fallback,
            on_status=self._on_adapter_status,
            clock=clock,
        )

        self._command_bus = _EngineCommandBus(parent)

        self._think_timer = QTimer(parent)
        self._think_timer.setSingleShot(True)
        self._think_timer.timeout.connect(self._dispatch)

        self._poll_timer = QTimer(parent)
        self._poll_timer.setInterval(self._settings.loading_poll_ms)
        self._poll_timer.timeout.connect(self._poll_engine)

        self._reply_timer = QTimer(parent)
        self._reply_timer.setSingleShot(True)
        self._reply_timer.timeout.connect(self._adapter.reply_timed_out)

        self._commit_timer = QTimer(parent)
        self._commit_timer.setSingleShot(True)
        self._commit_timer.timeout.connect(self._commit_pending_move)

        limits = limits_for_rating(self._settings.rating)
        self._engine_thread = QThread(parent)
        self._engine_worker = EngineWorker(
            max_depth=limits.max_depth,
            time_limit_ms=limits.time_limit_ms,
            engine=engine,
        )

        self._request_id = 0
        self._snapshot: Position | None = None
        self._snapshot_fen: str | None = None
        self._pending_move: Move | None = None
        self._awaiting_engine = False
        self._remaining_failure_retries = 0
        self._is_shutting_down = False
        self._is_started = False

    # ── Lifecycle ────────────────────────────────────────────────────────

    @property
    def adapter(self) -> ExternalEngineAdapter:
        return self._adapter

    @property
    def is_started(self) -> bool:
        return self._is_started

    def setup(self) -> None:
        """Start the worker thread, open the engine and follow the controller."""
        if self._is_started:
            return
        self._is_shutting_down = False

        worker = self._engine_worker
        worker.moveToThread(self._engine_thread)
        self._command_bus.search_requested.connect(worker.request_move)
        self._command_bus.set_limits_requested.connect(worker.set_limits)
        worker.best_move_ready.connect(self._on_worker_best_move)
        worker.search_cancelled.connect(self._on_worker_cancelled)
        worker.search_no_move.connect(self._on_worker_no_move)
        worker.search_error.connect(self._on_worker_error)
        self._engine_thread.start()

        events = self._controller.events
        events.on_computer_turn.append(self.request_computer_move)
        events.on_computer_cancelled.append(self.cancel)
        self._is_started = True

        self._adapter.start()
        self._watch_handshake()

        if self._controller.state.phase == GamePhase.THINKING:
            self.request_computer_move(self._controller.position)

    def shutdown(self) -> None:
        """Cancel any search, close the engine and stop the worker thread."""
        if not self._is_started:
            return
        self._is_shutting_down = True
        self.cancel()
        self._poll_timer.stop()
        self._adapter.close()

        events = self._controller.events
        events.on_computer_turn.remove(self.request_computer_move)
        events.on_computer_cancelled.remove(self.cancel)

        self._engine_thread.quit()
        self._engine_thread.wait(self._THREAD_WAIT_MS)
        self._is_started = False

    def new_game(self, fen: str | None = None) -> None:
        """Reset the engine, then start a new game on the controller."""
        self._adapter.new_game()
        self._controller.new_game(fen)

    def set_rating(self, rating: int) -> None:
        """Apply *rating* to the engine options and the fallback limits."""
        self._adapter.set_rating(rating)
        limits = limits_for_rating(rating)
        if self._is_started:
            self._command_bus.set_limits_requested.emit(
                limits.max_depth, limits.time_limit_ms
            )
            return
        self._engine_worker.set_limits(limits.max_depth, limits.time_limit_ms)

    # ── Computer turn ────────────────────────────────────────────────────

    def request_computer_move(self, position: Position) -> None:
        """Start thinking about *position* after the think delay."""
        if not self._is_started or self._is_shutting_down:
            return
        self.cancel()
        self._request_id += 1
        self._snapshot = position
        self._snapshot_fen = position_to_fen(position)
        self._remaining_failure_retries = self._MAX_FAILURE_RETRIES
        self._think_timer.start(self._settings.think_delay_ms)

    def cancel(self) -> None:
        """Forget the current computer turn; late answers are dropped."""
        self._think_timer.stop()
        self._reply_timer.stop()
        self._commit_timer.stop()
        self._awaiting_engine = False
        self._pending_move = None
        self._clear_snapshot()
        self._adapter.cancel()
        # threading.Event under the hood: safe to set from this thread while
        # the worker is busy searching.
        self._engine_worker.cancel()

    def _dispatch(self) -> None:
        position = self._snapshot
        if self._is_shutting_down or position is None or not self._is_current():
            return

        if self._adapter.is_loading:
            self._awaiting_engine = True
            self._controller.set_status(t().status_engine_loading)
            self._watch_handshake()
            return

        self._adapter.request_move(position)
        if self._adapter.is_pending:
            self._reply_timer.start(self._adapter.reply_timeout_ms)
        self._watch_handshake()

    def _watch_handshake(self) -> None:
        if self._adapter.is_loading and not self._poll_timer.isActive():
            self._poll_timer.start()

    def _poll_engine(self) -> None:
        self._adapter.handshake_timed_out()
        if self._adapter.is_loading:
            return
        self._poll_timer.stop()
        if self._awaiting_engine:
            self._awaiting_engine = False
            self._dispatch()

    # ── Adapter callbacks ────────────────────────────────────────────────

    def _request_fallback(self, position: Position) -> None:
        self._reply_timer.stop()
        if not self._is_started or self._is_shutting_down:
            return
        if self._snapshot_fen != position_to_fen(position):
            return
        _LOGGER.debug("Fallback search for request %d", self._request_id)
        self._command_bus.search_requested.emit(position, self._request_id)

    def _on_engine_move(self, position: Position, move: Move) -> None:
        self._reply_timer.stop()
        if self._snapshot_fen != position_to_fen(position):
            return
        self._schedule_commit(move)

    def _on_adapter_status(self, key: str) -> None:
        if self._controller.state.phase == GamePhase.THINKING:
            self._controller.set_status(t().by_key(key))

    # ── Worker callbacks ─────────────────────────────────────────────────

    def _on_worker_best_move(
        self,
        request_id: int,
        move_obj: object,
        score: float,
        depth: int,
        nodes: int,
    ) -> None:
        if self._is_shutting_down or request_id != self._request_id:
            return
        if not isinstance(move_obj, Move):
            return
        _LOGGER.debug(
            "Fallback chose %s (score %.2f, depth %d, %d nodes)",
            move_obj,
            score,
            depth,
            nodes,
        )
        self._schedule_commit(move_obj)

    def _on_worker_cancelled(self, request_id: int) -> None:
        if request_id == self._request_id:
            _LOGGER.debug("Search %d cancelled", request_id)

    def _on_worker_no_move(
        self,
        request_id: int,
        _score: float,
        _depth: int,
        _nodes: int,
    ) -> None:
        self._handle_failure(request_id, "Engine produced no move")

    def _on_worker_error(self, request_id: int, message: str) -> None:
        self._handle_failure(request_id, message)

    def _handle_failure(self, request_id: int, message: str) -> None:
        if self._is_shutting_down or request_id != self._request_id:
            return
        position = self._snapshot
        if position is None:
            return
        if not self._is_current():
            self._clear_snapshot()
            return

        if self._remaining_failure_retries > 0:
            self._remaining_failure_retries -= 1
            self._request_id += 1
            _LOGGER.info("Retrying search after failure: %s", message)
            self._command_bus.search_requested.emit(position, self._request_id)
            return

        self._clear_snapshot()
        self._controller.abort_computer_turn(
            t().status_engine_error.format(msg=message)
        )

    # ── Commit ───────────────────────────────────────────────────────────

    def _schedule_commit(self, move: Move) -> None:
        if not self._is_current():
            return
        self._pending_move = move
        self._commit_timer.start(self._settings.commit_delay_ms)

    def _commit_pending_move(self) -> None:
        move = self._pending_move
        if self._is_shutting_down or move is None or not self._is_current():
            return
        self._pending_move = None
        self._clear_snapshot()
        if not self._controller.submit_move(move, from_computer=True):
            _LOGGER.warning("Computer move %s was rejected", move)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _is_current(self) -> bool:
        state = self._controller.state
        return (
            state.phase == GamePhase.THINKING
            and self._snapshot_fen is not None
            and self._snapshot_fen == position_to_fen(state.position)
        )

    def _clear_snapshot(self) -> None:
        self._snapshot = None
        self._snapshot_fen = None
