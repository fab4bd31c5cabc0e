"""Rating-driven strength knobs for both the fallback search and UCI engines."""

from __future__ import annotations

import math
from typing import Final

from kingside.engine.search import SearchLimits

UNLIMITED_RATING: Final = 2800
MIN_MOVETIME_MS: Final = 450
MAX_MOVETIME_MS: Final = 4500

# (minimum rating, max depth, time budget in ms), strongest first.
_FALLBACK_TIERS: Final[tuple[tuple[int, int, int], ...]] = (
    (2600, 8, 10_000),
    (2200, 7, 8_000),
    (1800, 6, 5_000),
)
_WEAKEST_TIER: Final = (4, 2_500)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def limits_for_rating(rating: int) -> SearchLimits:
    """Depth and wall-clock budget of the built-in search for *rating*."""
    for min_rating, depth, time_ms in _FALLBACK_TIERS:
        if rating >= min_rating:
            return SearchLimits(max_depth=depth, time_limit_ms=time_ms)
    depth, time_ms = _WEAKEST_TIER
    return SearchLimits(max_depth=depth, time_limit_ms=time_ms)


def skill_level(rating: int) -> int:
    """UCI ``Skill Level`` (0-20) approximating *rating*."""
    return _clamp(round_half_up((rating - 1000) / 70), 0, 20)


def movetime_for_rating(rating: int) -> int:
    """``go movetime`` budget in ms for *rating*."""
    return _clamp(round_half_up(rating * 1.15), MIN_MOVETIME_MS, MAX_MOVETIME_MS)


def thread_count(cpu_count: int | None, max_threads: int) -> int:
    return _clamp(cpu_count or 1, 1, max_threads)


def uci_option_commands(rating: int, *, threads: int, hash_mb: int) -> list[str]:
    """``setoption`` lines that configure a UCI engine for *rating*.

    At or above :data:`UNLIMITED_RATING` the engine plays at full strength
    and ``UCI_Elo`` is not sent.
    """
    limited = rating < UNLIMITED_RATING
    commands = [
        f"setoption name Threads value {threads}",
        f"setoption name Hash value {hash_mb}",
        f"setoption name UCI_LimitStrength value {'true' if limited else 'false'}",
    ]
    if limited:
        commands.append(f"setoption name UCI_Elo value {rating}")
    commands.append(f"setoption name Skill Level value {skill_level(rating)}")
    return commands
