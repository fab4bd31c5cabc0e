"""Adapter speaking UCI to an external engine over an abstract line channel.

The adapter never spawns anything itself. A *channel factory* is handed the
adapter's :meth:`ExternalEngineAdapter.receive` and
:meth:`ExternalEngineAdapter.fail` callbacks and returns an object with
``send(command)`` and ``close()``. Whatever sits behind it (a subprocess, a
socket, a test double) is the embedder's business.

Timeouts are not measured by the adapter. The owner calls
:meth:`~ExternalEngineAdapter.handshake_timed_out` and
:meth:`~ExternalEngineAdapter.reply_timed_out` when its timers fire; both are
no-ops when nothing is outstanding any more.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from enum import Enum, auto
from typing import Protocol

from kingside.config import EngineSettings
from kingside.core.move import Move
from kingside.core.notation import position_to_fen, resolve_uci_move
from kingside.core.position import Position
from kingside.engine.python_search import PythonSearchEngine
from kingside.engine.strength import (
    limits_for_rating,
    movetime_for_rating,
    thread_count,
    uci_option_commands,
)

_LOGGER = logging.getLogger(__name__)

LineCallback = Callable[[str], None]
FailCallback = Callable[[str], None]
MoveCallback = Callable[[Position, Move], None]
FallbackCallback = Callable[[Position], None]
StatusCallback = Callable[[str], None]


class EngineChannel(Protocol):
    """Bidirectional text-line link to an engine process."""

    def send(self, command: str) -> None: ...

    def close(self) -> None: ...


ChannelFactory = Callable[[LineCallback, FailCallback], EngineChannel]


class EngineState(Enum):
    """Connection lifecycle of the external engine."""

    DISABLED = auto()
    IDLE = auto()
    AWAITING_UCIOK = auto()
    AWAITING_READYOK = auto()
    READY = auto()
    FAILED = auto()


# Status keys reported through ``on_status``; see kingside.game.messages.
STATUS_ENGINE_UNAVAILABLE = "engine_unavailable"


class ExternalEngineAdapter:
    """Asks a UCI engine for moves and falls back to the built-in search.

    Every move request carries a snapshot :class:`Position`. A reply is
    resolved against that snapshot's legal moves; anything malformed, late
    or illegal is dropped and the fallback is asked instead. At most one
    request is in flight.
    """

    __slots__ = (
        "_factory",
        "_settings",
        "_on_move",
        "_request_fallback",
        "_on_status",
        "_on_ready",
        "_clock",
        "_cpu_count",
        "_channel",
        "_state",
        "_rating",
        "_retry_after",
        "_pending",
        "_handshake_started",
        "_request_started",
        "__weakref__",
    )

    def __init__(
        self,
        channel_factory: ChannelFactory | None,
        *,
        settings: EngineSettings | None = None,
        on_move: MoveCallback,
        request_fallback: FallbackCallback | None = None,
        on_status: StatusCallback | None = None,
        on_ready: Callable[[], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        cpu_count: Callable[[], int | None] = os.cpu_count,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._factory = (
            channel_factory if self._settings.external_engine_enabled else None
        )
        self._on_move = on_move
        self._request_fallback = request_fallback or self._search_fallback
        self._on_status = on_status
        self._on_ready = on_ready
        self._clock = clock
        self._cpu_count = cpu_count

        self._channel: EngineChannel | None = None
        self._state = EngineState.IDLE if self._factory else EngineState.DISABLED
        self._rating = self._settings.rating
        self._retry_after = 0.0
        self._pending: Position | None = None
        self._handshake_started = 0.0
        self._request_started = 0.0

    # -- Properties ---------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == EngineState.READY

    @property
    def is_loading(self) -> bool:
        return self._state in (EngineState.AWAITING_UCIOK, EngineState.AWAITING_READYOK)

    @property
    def is_pending(self) -> bool:
        """Whether a ``go`` is outstanding."""
        return self._pending is not None

    @property
    def rating(self) -> int:
        return self._rating

    @property
    def reply_timeout_ms(self) -> int:
        """How long to wait for ``bestmove`` before giving up on a request."""
        return movetime_for_rating(self._rating) + self._settings.reply_grace_ms

    # -- Lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Open the channel and begin the ``uci``/``isready`` handshake."""
        if self._factory is None:
            return
        self._close_channel()
        self._pending = None
        self._state = EngineState.AWAITING_UCIOK
        self._handshake_started = self._clock()
        try:
            channel = self._factory(self.receive, self.fail)
        except Exception as exc:
            self._mark_failed(f"could not open engine channel: {exc}")
            return
        if self._state != EngineState.AWAITING_UCIOK:
            # the factory reported a failure before handing the channel over
            channel.close()
            return
        self._channel = channel
        self._send("uci")

    def close(self) -> None:
        """Drop the channel; the adapter can be :meth:`start`-ed again."""
        self._pending = None
        self._close_channel()
        if self._state != EngineState.DISABLED:
            self._state = EngineState.IDLE

    def new_game(self) -> None:
        """Reset the engine for a fresh game; only a ready engine is told."""
        self._pending = None
        if not self.is_ready:
            return
        for command in ("stop", "ucinewgame", "isready"):
            if not self._send(command):
                return

    def set_rating(self, rating: int) -> None:
        self._rating = rating
        if self.is_ready:
            self._apply_options()

    # -- Channel callbacks --------------------------------------------------

    def receive(self, line: str) -> None:
        """Feed one line of engine output."""
        line = line.strip()
        if not line:
            return

        if line == "uciok":
            if self._state == EngineState.AWAITING_UCIOK:
                self._state = EngineState.AWAITING_READYOK
                self._send("isready")
            return

        if line == "readyok":
            if self._state == EngineState.AWAITING_READYOK:
                self._state = EngineState.READY
                _LOGGER.info("External engine ready")
                if not self._apply_options():
                    return
                if self._on_ready is not None:
                    self._on_ready()
            return

        if line.startswith("bestmove"):
            self._handle_bestmove(line)

    def fail(self, reason: str) -> None:
        """The channel broke; fall back until the cooldown has passed."""
        if self._state in (EngineState.DISABLED, EngineState.FAILED):
            return
        snapshot = self._pending
        self._pending = None
        self._mark_failed(reason)
        if snapshot is not None:
            self._request_fallback(snapshot)

    def handshake_timed_out(self) -> None:
        if not self.is_loading:
            return
        elapsed_ms = (self._clock() - self._handshake_started) * 1000.0
        if elapsed_ms + 1e-6 >= self._settings.verify_timeout_ms:
            self.fail("engine handshake timed out")

    # -- Requests -----------------------------------------------------------

    def request_move(self, position: Position) -> bool:
        """Ask for a move in *position*.

        Returns ``False`` (and does nothing) while a previous request is
        still outstanding. When the engine is not ready the fallback search
        is asked instead.
        """
        if self._pending is not None:
            return False

        if self._state == EngineState.IDLE:
            self.start()
        elif self._state == EngineState.FAILED:
            now = self._clock()
            if now >= self._retry_after:
                self._retry_after = now + self._settings.retry_interval_ms / 1000.0
                _LOGGER.info("Retrying external engine")
                self.start()
            if not self.is_ready:
                self._report(STATUS_ENGINE_UNAVAILABLE)

        if self.is_ready:
            self._pending = position
            self._request_started = self._clock()
            commands = (
                "stop",
                f"position fen {position_to_fen(position)}",
                f"go movetime {movetime_for_rating(self._rating)}",
            )
            for command in commands:
                # a broken channel has already handed the snapshot to the fallback
                if not self._send(command):
                    break
            return True

        self._request_fallback(position)
        return True

    def reply_timed_out(self) -> None:
        """Abandon an overdue request and use the fallback."""
        snapshot = self._pending
        if snapshot is None:
            return
        elapsed_ms = (self._clock() - self._request_started) * 1000.0
        if elapsed_ms + 1e-6 < self.reply_timeout_ms:
            return
        _LOGGER.warning("External engine did not answer in %d ms", self.reply_timeout_ms)
        self._pending = None
        self._send("stop")
        self._request_fallback(snapshot)

    def cancel(self) -> None:
        """Forget the outstanding request; a late reply is ignored."""
        if self._pending is None:
            return
        self._pending = None
        self._send("stop")

    # -- Internals ----------------------------------------------------------

    def _handle_bestmove(self, line: str) -> None:
        snapshot = self._pending
        if snapshot is None:
            _LOGGER.debug("Ignoring stale reply: %s", line)
            return
        self._pending = None

        parts = line.split()
        text = parts[1] if len(parts) > 1 else ""
        move = None if text == "(none)" else resolve_uci_move(snapshot, text)
        if move is None:
            _LOGGER.warning("Unusable engine reply %r, using fallback", line)
            self._request_fallback(snapshot)
            return
        self._on_move(snapshot, move)

    def _apply_options(self) -> bool:
        threads = thread_count(self._cpu_count(), self._settings.max_threads)
        for command in uci_option_commands(
            self._rating, threads=threads, hash_mb=self._settings.hash_mb
        ):
            if not self._send(command):
                return False
        return True

    def _mark_failed(self, reason: str) -> None:
        _LOGGER.warning("External engine unavailable: %s", reason)
        self._close_channel()
        self._state = EngineState.FAILED
        self._retry_after = self._clock() + self._settings.cooldown_ms / 1000.0
        self._report(STATUS_ENGINE_UNAVAILABLE)

    def _send(self, command: str) -> bool:
        """Write *command*; False once the channel is gone.

        A channel that raises, or that reports a failure while sending, takes
        the adapter down through :meth:`fail`.
        """
        channel = self._channel
        if channel is None:
            raise RuntimeError(f"No engine channel open for {command!r}")
        try:
            channel.send(command)
        except Exception as exc:
            self.fail(f"could not send {command!r}: {exc}")
            return False
        return self._channel is channel

    def _close_channel(self) -> None:
        channel = self._channel
        self._channel = None
        if channel is not None:
            channel.close()

    def _report(self, status: str) -> None:
        if self._on_status is not None:
            self._on_status(status)

    def _search_fallback(self, position: Position) -> None:
        result = PythonSearchEngine().search(position, limits_for_rating(self._rating))
        if result.best_move is not None:
            self._on_move(position, result.best_move)
