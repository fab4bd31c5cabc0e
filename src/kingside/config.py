"""Runtime settings for the computer opponent."""

from __future__ import annotations

from dataclasses import dataclass

from kingside.core.enums import Color


@dataclass
class EngineSettings:
    """All tunable knobs of the computer opponent.

    Durations are milliseconds.
    """

    # Strength
    rating: int = 2800
    computer_color: Color = Color.BLACK

    # External engine
    external_engine_enabled: bool = True
    verify_timeout_ms: int = 6000
    cooldown_ms: int = 10000
    retry_interval_ms: int = 12000
    reply_grace_ms: int = 2000
    loading_poll_ms: int = 120
    max_threads: int = 2
    hash_mb: int = 128

    # Pacing
    think_delay_ms: int = 110
    commit_delay_ms: int = 180
