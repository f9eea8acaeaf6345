"""Daily Goal Engine - Today's earned points against the configured goal.

Today's points come from the same-day completion records when the ledger has
them, otherwise from today's earned history lines. Records dated before today
are ignored, so yesterday's markers never count toward today's goal.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
from datetime import date
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_parse_date
from ..utils.math_utils import calculate_percentage, clamp

if TYPE_CHECKING:
    from ..type_defs import DailyProgress, LedgerData


def _iso(today: str | date) -> str:
    parsed = dt_parse_date(today)
    if parsed is None:
        raise ValueError(f"Invalid date: {today!r}")
    return parsed.isoformat()


class DailyGoalEngine:
    """Pure logic engine for daily goal evaluation."""

    @staticmethod
    def goal_settings(ledger: Mapping[str, Any]) -> tuple[int, bool]:
        """Return (daily_goal, enabled) with defaults for missing values."""
        goal = ledger.get(const.DATA_LEDGER_DAILY_GOAL) or const.DEFAULT_DAILY_GOAL
        enabled = ledger.get(const.DATA_LEDGER_DAILY_GOAL_ENABLED) is not False
        return int(goal), enabled

    @staticmethod
    def today_points(ledger: Mapping[str, Any], today: str | date) -> int:
        """Sum points earned today."""
        day = _iso(today)
        records = ledger.get(const.DATA_LEDGER_TODAY_COMPLETED)
        if isinstance(records, list):
            return sum(
                int(record.get(const.DATA_ENTRY_POINTS) or 0)
                for record in records
                if record.get(const.DATA_ENTRY_DATE) == day
            )

        return sum(
            int(entry.get(const.DATA_ENTRY_POINTS) or 0)
            for entry in ledger.get(const.DATA_LEDGER_HISTORY) or []
            if entry.get(const.DATA_ENTRY_DATE) == day
            and entry.get(const.DATA_ENTRY_TYPE) == const.ENTRY_TYPE_EARNED
        )

    @staticmethod
    def daily_progress(ledger: Mapping[str, Any], today: str | date) -> DailyProgress:
        """Evaluate today's progress toward the daily goal.

        Returns:
            DailyProgress. With the goal disabled, goal_percent is 0 and
            achieved is False; today_points is always reported.
        """
        points = DailyGoalEngine.today_points(ledger, today)
        goal, enabled = DailyGoalEngine.goal_settings(ledger)
        if not enabled:
            return {"today_points": points, "goal_percent": 0, "achieved": False}
        return {
            "today_points": points,
            "goal_percent": calculate_percentage(points, goal),
            "achieved": points >= goal,
        }

    @staticmethod
    def goal_just_achieved(
        previous_points: int, new_points: int, ledger: Mapping[str, Any]
    ) -> bool:
        """Return True only on the transition from below goal to at/above it."""
        goal, enabled = DailyGoalEngine.goal_settings(ledger)
        return enabled and previous_points < goal <= new_points

    @staticmethod
    def set_daily_goal(
        ledger: LedgerData,
        daily_goal: int | None = None,
        enabled: bool | None = None,
    ) -> LedgerData:
        """Return a copy of the ledger with updated goal settings.

        The goal is clamped to the supported 5-100 range; None leaves a
        setting unchanged.
        """
        updated = copy.deepcopy(ledger)
        if daily_goal is not None:
            updated[const.DATA_LEDGER_DAILY_GOAL] = clamp(
                int(daily_goal), const.DAILY_GOAL_MIN, const.DAILY_GOAL_MAX
            )
        if enabled is not None:
            updated[const.DATA_LEDGER_DAILY_GOAL_ENABLED] = bool(enabled)
        return updated
