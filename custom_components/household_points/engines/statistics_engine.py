"""Statistics Engine - Read-only summaries over a member's point history.

Provides the figures a history view needs:
- Weekly summary (Monday-start week, one row per day)
- Period statistics (points, activity count, active days, daily average)
- Most frequent activities
- Recent activity calendar (which of the last N days were active)
- Month calendar grid (earned points, count, and intensity per day)
- History grouped by date for the most recent dates

Only "earned" lines count. Spending and deductions are balance movements, not
activity, and are excluded everywhere except history_by_date, which lists
every line.

Design Principles:
    - Stateless: operates on the history list passed in
    - Retention-bound: figures cover retained history only (newest 100 lines)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
import math
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import (
    dt_month_end,
    dt_month_start,
    dt_parse_date,
    dt_week_start,
)
from ..utils.math_utils import round_half_up

if TYPE_CHECKING:
    from ..type_defs import (
        ActivityCount,
        CalendarDay,
        DaySummary,
        HistoryDay,
        HistoryEntry,
        MonthCalendar,
        MonthCalendarDay,
        PeriodStats,
    )


def _earned(history: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    return [
        entry
        for entry in history
        if entry.get(const.DATA_ENTRY_TYPE) == const.ENTRY_TYPE_EARNED
    ]


def _as_date(value: str | date) -> date:
    parsed = dt_parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


class StatisticsEngine:
    """Stateless summaries over point history.

    Example:
        summary = StatisticsEngine.weekly_summary(ledger["history"], "2026-01-21")
        month = StatisticsEngine.month_stats(ledger["history"], "2026-01-21")
    """

    @staticmethod
    def weekly_summary(
        history: Iterable[HistoryEntry], today: str | date
    ) -> list[DaySummary]:
        """Return seven day rows for the week containing today.

        Returns:
            Rows Monday through Sunday with completed count and points earned.
        """
        today_date = _as_date(today)
        start = dt_week_start(today_date)
        earned = _earned(history)

        summary: list[DaySummary] = []
        for offset in range(const.STATS_WEEK_DAYS):
            day = start + timedelta(days=offset)
            key = day.isoformat()
            day_entries = [e for e in earned if e.get(const.DATA_ENTRY_DATE) == key]
            summary.append(
                {
                    "date": key,
                    "day_name": day.strftime("%a"),
                    "completed": len(day_entries),
                    "points_earned": sum(
                        int(e.get(const.DATA_ENTRY_POINTS) or 0) for e in day_entries
                    ),
                    "is_today": day == today_date,
                }
            )
        return summary

    @staticmethod
    def period_stats(
        history: Iterable[HistoryEntry], start: str | date, end: str | date
    ) -> PeriodStats:
        """Summarize earned entries dated within [start, end] inclusive.

        average_per_day divides by active days, not calendar days.
        """
        first = _as_date(start).isoformat()
        last = _as_date(end).isoformat()
        entries = [
            e
            for e in _earned(history)
            if first <= str(e.get(const.DATA_ENTRY_DATE) or "") <= last
        ]
        points = sum(int(e.get(const.DATA_ENTRY_POINTS) or 0) for e in entries)
        active_days = len({e.get(const.DATA_ENTRY_DATE) for e in entries})
        return {
            "points": points,
            "activities": len(entries),
            "active_days": active_days,
            "average_per_day": (
                round_half_up(points / active_days) if active_days else 0
            ),
        }

    @staticmethod
    def week_stats(history: Iterable[HistoryEntry], today: str | date) -> PeriodStats:
        """Period statistics from Monday of this week through today."""
        return StatisticsEngine.period_stats(history, dt_week_start(today), today)

    @staticmethod
    def month_stats(history: Iterable[HistoryEntry], today: str | date) -> PeriodStats:
        """Period statistics from the first of this month through today."""
        return StatisticsEngine.period_stats(history, dt_month_start(today), today)

    @staticmethod
    def top_activities(
        history: Iterable[HistoryEntry],
        limit: int = const.STATS_TOP_ACTIVITIES_LIMIT,
    ) -> list[ActivityCount]:
        """Return the most frequently earned activities, by name.

        Ties keep the order in which names first appear (newest first).
        """
        counts: dict[str, ActivityCount] = {}
        for entry in _earned(history):
            name = entry.get(const.DATA_ENTRY_ACTIVITY_NAME) or ""
            row = counts.setdefault(
                name,
                {
                    "activity_name": name,
                    "activity_icon": entry.get(
                        const.DATA_ENTRY_ACTIVITY_ICON, const.DEFAULT_ACTIVITY_ICON
                    ),
                    "count": 0,
                    "points": 0,
                },
            )
            row["count"] += 1
            row["points"] += int(entry.get(const.DATA_ENTRY_POINTS) or 0)

        ranked = sorted(counts.values(), key=lambda row: row["count"], reverse=True)
        return ranked[:limit]

    @staticmethod
    def activity_calendar(
        history: Iterable[HistoryEntry],
        today: str | date,
        days: int = const.STATS_CALENDAR_DAYS,
    ) -> list[CalendarDay]:
        """Return the last `days` days, oldest first, flagging active ones."""
        today_date = _as_date(today)
        active = {e.get(const.DATA_ENTRY_DATE) for e in _earned(history)}
        calendar: list[CalendarDay] = []
        for back in range(days - 1, -1, -1):
            key = (today_date - timedelta(days=back)).isoformat()
            calendar.append(
                {"date": key, "active": key in active, "is_today": back == 0}
            )
        return calendar

    @staticmethod
    def month_calendar(
        history: Iterable[HistoryEntry], today: str | date
    ) -> MonthCalendar:
        """Return every day of today's month with earned points and count.

        intensity is ceil(count / 2), capped at STATS_INTENSITY_MAX; days
        with no earned lines are 0.
        """
        today_date = _as_date(today)
        first = dt_month_start(today_date)
        last = dt_month_end(today_date)

        per_day: dict[str, list[int]] = {}
        for entry in _earned(history):
            key = str(entry.get(const.DATA_ENTRY_DATE) or "")
            per_day.setdefault(key, []).append(
                int(entry.get(const.DATA_ENTRY_POINTS) or 0)
            )

        days: list[MonthCalendarDay] = []
        for number in range(1, last.day + 1):
            day = first.replace(day=number)
            points = per_day.get(day.isoformat(), [])
            days.append(
                {
                    "day": number,
                    "date": day.isoformat(),
                    "points": sum(points),
                    "count": len(points),
                    "intensity": min(
                        const.STATS_INTENSITY_MAX, math.ceil(len(points) / 2)
                    ),
                    "is_today": day == today_date,
                    "is_future": day > today_date,
                }
            )
        return {
            "month": first.strftime("%Y-%m"),
            "leading_blanks": first.weekday(),
            "days": days,
        }

    @staticmethod
    def history_by_date(
        history: Iterable[HistoryEntry],
        limit: int = const.STATS_HISTORY_DAYS,
    ) -> list[HistoryDay]:
        """Group every history line by date, newest date first.

        Unlike the other summaries this keeps spent and deducted lines, so a
        day's list matches the ledger. Only the newest `limit` dates are kept.
        """
        groups: dict[str, HistoryDay] = {}
        for entry in history:
            key = str(entry.get(const.DATA_ENTRY_DATE) or "")
            group = groups.setdefault(
                key, {"date": key, "earned": 0, "spent": 0, "entries": []}
            )
            group["entries"].append(entry)
            points = int(entry.get(const.DATA_ENTRY_POINTS) or 0)
            if entry.get(const.DATA_ENTRY_TYPE) == const.ENTRY_TYPE_EARNED:
                group["earned"] += points
            elif entry.get(const.DATA_ENTRY_TYPE) == const.ENTRY_TYPE_SPENT:
                group["spent"] += points

        ordered = sorted(groups.values(), key=lambda group: group["date"], reverse=True)
        return ordered[:limit]
