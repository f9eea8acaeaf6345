"""Progression Engine - Levels and ranks derived from lifetime XP.

Level n (n >= 1) is completed by earning floor(50 x 1.5^(n-1)) XP on top of
everything needed for the levels before it. Levels stop at 50. Each level maps
to a rank through one of two tables that share thresholds but differ in names
and icons ("standard" for kids, "alternate" for teens).

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
Results are recomputed on demand and never stored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import math
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import calculate_percentage

if TYPE_CHECKING:
    from ..type_defs import HistoryEntry, ProgressionInfo, RankInfo


class ProgressionEngine:
    """Pure logic engine for XP, level, and rank calculations."""

    @staticmethod
    def xp_for_level(level: int) -> int:
        """Return the XP required to complete the given level.

        Examples:
            xp_for_level(1) → 50
            xp_for_level(2) → 75
            xp_for_level(3) → 112
        """
        return math.floor(
            const.LEVEL_BASE_XP * math.pow(const.LEVEL_MULTIPLIER, level - 1)
        )

    @staticmethod
    def xp_to_reach_level(level: int) -> int:
        """Return the cumulative XP at which the given level starts.

        Examples:
            xp_to_reach_level(1) → 0
            xp_to_reach_level(2) → 50
            xp_to_reach_level(3) → 125
        """
        return sum(ProgressionEngine.xp_for_level(n) for n in range(1, level))

    @staticmethod
    def get_rank(level: int, track: str = const.TRACK_STANDARD) -> RankInfo:
        """Return the highest rank whose threshold is at or below level.

        Unknown tracks fall back to the standard table.
        """
        table = const.RANK_TABLES.get(track, const.RANKS_STANDARD)
        rank = table[0]
        for candidate in reversed(table):
            if level >= candidate[const.RANK_KEY_LEVEL]:
                rank = candidate
                break
        return dict(rank)  # type: ignore[return-value]

    @staticmethod
    def compute_level(
        total_xp: int, track: str = const.TRACK_STANDARD
    ) -> ProgressionInfo:
        """Derive level, rank, and in-level progress from total XP.

        Args:
            total_xp: Lifetime earned points (negative input is treated as 0)
            track: Rank table to use ("standard" or "alternate")

        Returns:
            ProgressionInfo. At the maximum level progress_percent is 100.

        Example:
            compute_level(60) → level 2, current_xp 10, xp_to_next_level 75,
            progress_percent 13
        """
        total_xp = max(0, int(total_xp))
        level = 1
        xp_consumed = 0

        while level < const.LEVEL_MAX:
            xp_for_next = ProgressionEngine.xp_for_level(level)
            if xp_consumed + xp_for_next > total_xp:
                break
            xp_consumed += xp_for_next
            level += 1

        current_xp = total_xp - xp_consumed
        xp_to_next = ProgressionEngine.xp_for_level(level)
        if level >= const.LEVEL_MAX:
            progress = 100
        else:
            progress = calculate_percentage(current_xp, xp_to_next)

        rank = ProgressionEngine.get_rank(level, track)
        return {
            "level": level,
            "rank_name": rank[const.RANK_KEY_NAME],
            "rank_color": rank[const.RANK_KEY_COLOR],
            "rank_icon": rank[const.RANK_KEY_ICON],
            "current_xp": current_xp,
            "xp_to_next_level": xp_to_next,
            "progress_percent": progress,
            "total_xp": total_xp,
        }

    # ────────────────────────────────────────────────────────────────
    # XP Sources
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def xp_from_history(history: Iterable[HistoryEntry]) -> int:
        """Sum the points of retained earned entries."""
        return sum(
            int(entry.get(const.DATA_ENTRY_POINTS) or 0)
            for entry in history
            if entry.get(const.DATA_ENTRY_TYPE) == const.ENTRY_TYPE_EARNED
        )

    @staticmethod
    def total_xp(ledger: Mapping[str, Any]) -> int:
        """Return lifetime XP for a ledger.

        The lifetime_xp counter survives history truncation. Ledgers written
        before the counter existed fall back to the retained-history sum, and
        the larger of the two wins.
        """
        from_history = ProgressionEngine.xp_from_history(
            ledger.get(const.DATA_LEDGER_HISTORY) or []
        )
        counter = int(ledger.get(const.DATA_LEDGER_LIFETIME_XP) or 0)
        return max(counter, from_history)
