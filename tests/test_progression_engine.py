"""Unit tests for ProgressionEngine - levels and ranks from lifetime XP.

Test Categories:
- Per-level requirement curve
- Level walk (boundaries, monotonicity, max level)
- Rank tables
- Lifetime XP sources (counter vs. retained history)
"""

from __future__ import annotations

import pytest

from custom_components.household_points import const
from custom_components.household_points.engines import ProgressionEngine


class TestLevelCurve:
    """Tests for xp_for_level and xp_to_reach_level."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [(1, 50), (2, 75), (3, 112), (4, 168), (5, 253)],
    )
    def test_xp_for_level(self, level: int, expected: int) -> None:
        """Requirement is floor(50 x 1.5^(n-1))."""
        assert ProgressionEngine.xp_for_level(level) == expected

    def test_xp_to_reach_level_is_cumulative(self) -> None:
        """Level 1 starts at 0; each level adds the previous requirement."""
        assert ProgressionEngine.xp_to_reach_level(1) == 0
        assert ProgressionEngine.xp_to_reach_level(2) == 50
        assert ProgressionEngine.xp_to_reach_level(3) == 125
        assert ProgressionEngine.xp_to_reach_level(5) == 405


class TestComputeLevel:
    """Tests for the level walk."""

    def test_zero_xp_is_level_one(self) -> None:
        """A new member starts at level 1 with no progress."""
        info = ProgressionEngine.compute_level(0)

        assert info["level"] == 1
        assert info["current_xp"] == 0
        assert info["xp_to_next_level"] == 50
        assert info["progress_percent"] == 0
        assert info["rank_name"] == "Beginner"

    def test_mid_level_progress(self) -> None:
        """60 XP is 10 into level 2 (75 needed), 13 percent."""
        info = ProgressionEngine.compute_level(60)

        assert info["level"] == 2
        assert info["current_xp"] == 10
        assert info["xp_to_next_level"] == 75
        assert info["progress_percent"] == 13
        assert info["total_xp"] == 60

    @pytest.mark.parametrize("level", range(1, 12))
    def test_exact_threshold_starts_next_level(self, level: int) -> None:
        """XP equal to the cumulative requirement lands at the next level start."""
        xp = ProgressionEngine.xp_to_reach_level(level + 1)
        info = ProgressionEngine.compute_level(xp)

        assert info["level"] == level + 1
        assert info["current_xp"] == 0

    def test_one_below_threshold_stays(self) -> None:
        """One XP short of a level keeps the previous one."""
        info = ProgressionEngine.compute_level(49)

        assert info["level"] == 1
        assert info["progress_percent"] == 98

    def test_level_is_monotonic(self) -> None:
        """Level never decreases as XP grows."""
        previous = 0
        for xp in range(0, 5000, 7):
            level = ProgressionEngine.compute_level(xp)["level"]
            assert level >= previous
            previous = level

    def test_max_level_caps_and_reports_full_progress(self) -> None:
        """XP beyond the last level stays at 50 with 100 percent progress."""
        at_max = ProgressionEngine.xp_to_reach_level(const.LEVEL_MAX)

        for xp in (at_max, at_max * 3):
            info = ProgressionEngine.compute_level(xp)
            assert info["level"] == const.LEVEL_MAX
            assert info["progress_percent"] == 100
            assert info["rank_name"] == "Ultimate"

    def test_negative_xp_treated_as_zero(self) -> None:
        """Negative input never goes below level 1."""
        info = ProgressionEngine.compute_level(-20)

        assert info["level"] == 1
        assert info["total_xp"] == 0


class TestRanks:
    """Tests for rank lookup."""

    @pytest.mark.parametrize(
        ("level", "standard", "alternate"),
        [
            (1, "Beginner", "Novice"),
            (4, "Beginner", "Novice"),
            (5, "Rising Star", "Apprentice"),
            (14, "Achiever", "Skilled"),
            (20, "Super Star", "Elite"),
            (39, "Legend", "Veteran"),
            (50, "Ultimate", "Legendary"),
        ],
    )
    def test_tables_share_thresholds(
        self, level: int, standard: str, alternate: str
    ) -> None:
        """Both tracks switch rank at the same levels."""
        assert ProgressionEngine.get_rank(level)["name"] == standard
        assert (
            ProgressionEngine.get_rank(level, const.TRACK_ALTERNATE)["name"]
            == alternate
        )

    def test_unknown_track_uses_standard(self) -> None:
        """An unknown track falls back to the standard table."""
        assert ProgressionEngine.get_rank(10, "unknown")["name"] == "Achiever"

    def test_compute_level_uses_track(self) -> None:
        """compute_level reports the alternate rank metadata."""
        info = ProgressionEngine.compute_level(405, const.TRACK_ALTERNATE)

        assert info["level"] == 5
        assert info["rank_name"] == "Apprentice"
        assert info["rank_icon"] == "zap"
        assert info["rank_color"] == "#60A5FA"


class TestTotalXp:
    """Tests for the lifetime XP sources."""

    def test_history_sum_counts_earned_only(self) -> None:
        """Spent and deducted lines are not XP."""
        history = [
            {const.DATA_ENTRY_POINTS: 10, const.DATA_ENTRY_TYPE: const.ENTRY_TYPE_EARNED},
            {const.DATA_ENTRY_POINTS: 7, const.DATA_ENTRY_TYPE: const.ENTRY_TYPE_SPENT},
            {const.DATA_ENTRY_POINTS: 3, const.DATA_ENTRY_TYPE: const.ENTRY_TYPE_DEDUCTED},
            {const.DATA_ENTRY_POINTS: 5, const.DATA_ENTRY_TYPE: const.ENTRY_TYPE_EARNED},
        ]
        assert ProgressionEngine.xp_from_history(history) == 15

    def test_counter_survives_truncated_history(self) -> None:
        """A larger lifetime counter wins over retained history."""
        ledger = {
            const.DATA_LEDGER_LIFETIME_XP: 900,
            const.DATA_LEDGER_HISTORY: [
                {const.DATA_ENTRY_POINTS: 10, const.DATA_ENTRY_TYPE: const.ENTRY_TYPE_EARNED}
            ],
        }
        assert ProgressionEngine.total_xp(ledger) == 900

    def test_legacy_ledger_without_counter(self) -> None:
        """Ledgers written before the counter fall back to history."""
        ledger = {
            const.DATA_LEDGER_HISTORY: [
                {const.DATA_ENTRY_POINTS: 10, const.DATA_ENTRY_TYPE: const.ENTRY_TYPE_EARNED}
            ]
        }
        assert ProgressionEngine.total_xp(ledger) == 10
