"""Streak Engine - Consecutive active-day counting.

A streak is the number of consecutive calendar days, walking back from today,
that contain at least one qualifying entry. If today has nothing yet the walk
starts from yesterday, so a member who has not acted today keeps yesterday's
streak until the day is over.

The same walk serves every entry source: point history (only "earned" lines
qualify) and journal-style entries (any dated entry qualifies). Callers pick the
source with earned_dates() or entry_dates() and pass the result to
streak_from_dates().

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import dt_parse_date

if TYPE_CHECKING:
    from ..type_defs import HistoryEntry, ISODate


def _date_key(value: Any) -> ISODate | None:
    """Normalize a stored date (or datetime string) to "YYYY-MM-DD"."""
    parsed = dt_parse_date(value)
    return parsed.isoformat() if parsed else None


class StreakEngine:
    """Pure logic engine for streak calculations.

    All methods are static - no instance state.
    """

    # ────────────────────────────────────────────────────────────────
    # Entry Sources
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def earned_dates(history: Iterable[HistoryEntry]) -> set[ISODate]:
        """Return the distinct dates holding at least one earned entry."""
        dates: set[ISODate] = set()
        for entry in history:
            if entry.get(const.DATA_ENTRY_TYPE) != const.ENTRY_TYPE_EARNED:
                continue
            key = _date_key(entry.get(const.DATA_ENTRY_DATE))
            if key:
                dates.add(key)
        return dates

    @staticmethod
    def entry_dates(
        entries: Iterable[Mapping[str, Any]],
        date_field: str = const.DATA_ENTRY_DATE,
    ) -> set[ISODate]:
        """Return the distinct dates of any dated entries (e.g. journal entries).

        Args:
            entries: Records carrying a date (or ISO datetime) under date_field
            date_field: Key to read the date from

        Returns:
            Set of ISO date strings; undated or unparseable entries are skipped.
        """
        dates: set[ISODate] = set()
        for entry in entries:
            key = _date_key(entry.get(date_field))
            if key:
                dates.add(key)
        return dates

    # ────────────────────────────────────────────────────────────────
    # Streak Walks
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def streak_from_dates(dates: Iterable[str], today: str | date) -> int:
        """Count consecutive days ending today, or yesterday when today is empty.

        Args:
            dates: Dates with activity (duplicates collapse)
            today: Member's local calendar date

        Returns:
            Streak length (0 when nothing qualifies)
        """
        active = {key for key in (_date_key(d) for d in dates) if key}
        if not active:
            return 0

        cursor = dt_parse_date(today)
        if cursor is None:
            raise ValueError(f"Invalid date: {today!r}")

        # Grace step: yesterday only counts if it is itself in the set
        if cursor.isoformat() not in active:
            cursor -= timedelta(days=1)

        streak = 0
        while cursor.isoformat() in active:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    @staticmethod
    def compute_streak(history: Iterable[HistoryEntry], today: str | date) -> int:
        """Return the current streak over a point history.

        Example:
            Earned entries on Mon, Tue, Wed; today is Thu with nothing yet → 3.
            Earned entries on Mon and Wed; today is Wed → 1.
        """
        return StreakEngine.streak_from_dates(
            StreakEngine.earned_dates(history), today
        )

    @staticmethod
    def longest_streak(dates: Iterable[str]) -> int:
        """Return the longest run of consecutive days found in dates."""
        parsed = sorted(
            {day for day in (dt_parse_date(d) for d in dates) if day is not None}
        )
        if not parsed:
            return 0

        best = current = 1
        for previous, day in zip(parsed, parsed[1:]):
            if day - previous == timedelta(days=1):
                current += 1
                best = max(best, current)
            else:
                current = 1
        return best
