"""Tests for rating-driven strength settings."""

import pytest

from kingside.engine.search import SearchLimits
from kingside.engine.strength import (
    limits_for_rating,
    movetime_for_rating,
    round_half_up,
    skill_level,
    thread_count,
    uci_option_commands,
)


class TestFallbackLimits:
    @pytest.mark.parametrize(
        ("rating", "depth", "time_ms"),
        [
            (2800, 8, 10_000),
            (2600, 8, 10_000),
            (2599, 7, 8_000),
            (2200, 7, 8_000),
            (1800, 6, 5_000),
            (1799, 4, 2_500),
            (600, 4, 2_500),
        ],
    )
    def test_tiers(self, rating: int, depth: int, time_ms: int) -> None:
        assert limits_for_rating(rating) == SearchLimits(
            max_depth=depth, time_limit_ms=time_ms
        )


class TestUciKnobs:
    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2

    @pytest.mark.parametrize(
        ("rating", "expected"),
        [(800, 0), (1000, 0), (1035, 1), (1700, 10), (2400, 20), (3200, 20)],
    )
    def test_skill_level(self, rating: int, expected: int) -> None:
        assert skill_level(rating) == expected

    @pytest.mark.parametrize(
        ("rating", "expected"),
        [(200, 450), (1000, 1150), (2000, 2300), (2800, 3220), (5000, 4500)],
    )
    def test_movetime(self, rating: int, expected: int) -> None:
        assert movetime_for_rating(rating) == expected

    def test_thread_count_is_clamped(self) -> None:
        assert thread_count(None, 2) == 1
        assert thread_count(1, 2) == 1
        assert thread_count(16, 2) == 2


class TestOptionCommands:
    def test_full_strength_skips_elo(self) -> None:
        assert uci_option_commands(2800, threads=2, hash_mb=128) == [
            "setoption name Threads value 2",
            "setoption name Hash value 128",
            "setoption name UCI_LimitStrength value false",
            "setoption name Skill Level value 20",
        ]

    def test_limited_strength_sends_elo(self) -> None:
        assert uci_option_commands(1500, threads=1, hash_mb=64) == [
            "setoption name Threads value 1",
            "setoption name Hash value 64",
            "setoption name UCI_LimitStrength value true",
            "setoption name UCI_Elo value 1500",
            "setoption name Skill Level value 7",
        ]
