"""Unit tests for StatisticsEngine - read-only history summaries.

TODAY is Wednesday 2026-01-21, so the current week runs Monday 01-19 to
Sunday 01-25.

Test Categories:
- Weekly summary
- Period statistics (week, month, custom range)
- Top activities
- Activity calendar
- Month calendar
- History grouped by date
"""

from __future__ import annotations

from typing import Any

import pytest

from custom_components.household_points import const
from custom_components.household_points.engines import StatisticsEngine

TODAY = "2026-01-21"


def make_entry(
    day: str,
    points: int,
    name: str = "Make bed",
    entry_type: str = const.ENTRY_TYPE_EARNED,
) -> dict[str, Any]:
    """Build a history line."""
    return {
        const.DATA_ENTRY_ACTIVITY_ID: name.lower().replace(" ", "-"),
        const.DATA_ENTRY_ACTIVITY_NAME: name,
        const.DATA_ENTRY_ACTIVITY_ICON: "star",
        const.DATA_ENTRY_DATE: day,
        const.DATA_ENTRY_POINTS: points,
        const.DATA_ENTRY_TYPE: entry_type,
    }


@pytest.fixture
def history() -> list[dict[str, Any]]:
    """Newest-first history spanning two weeks and a month boundary."""
    return [
        make_entry("2026-01-21", 10, "Do homework"),
        make_entry("2026-01-21", 7, "Movie night", const.ENTRY_TYPE_SPENT),
        make_entry("2026-01-19", 5),
        make_entry("2026-01-19", 3, "Brush teeth"),
        make_entry("2026-01-18", 4),
        make_entry("2026-01-02", 6),
        make_entry("2025-12-31", 9, "Brush teeth"),
    ]


class TestWeeklySummary:
    """Tests for the Monday-start weekly summary."""

    def test_rows_cover_monday_to_sunday(self, history: list[dict[str, Any]]) -> None:
        """Seven rows starting Monday, today flagged."""
        summary = StatisticsEngine.weekly_summary(history, TODAY)

        assert [row["date"] for row in summary] == [
            f"2026-01-{day}" for day in range(19, 26)
        ]
        assert summary[0]["day_name"] == "Mon"
        assert summary[6]["day_name"] == "Sun"
        assert [row["is_today"] for row in summary].index(True) == 2

    def test_counts_earned_only(self, history: list[dict[str, Any]]) -> None:
        """Spending on a day does not count as completed activity."""
        summary = StatisticsEngine.weekly_summary(history, TODAY)

        assert (summary[0]["completed"], summary[0]["points_earned"]) == (2, 8)
        assert (summary[1]["completed"], summary[1]["points_earned"]) == (0, 0)
        assert (summary[2]["completed"], summary[2]["points_earned"]) == (1, 10)

    def test_sunday_belongs_to_previous_week(self, history: list[dict[str, Any]]) -> None:
        """On a Sunday the week still starts the Monday before."""
        summary = StatisticsEngine.weekly_summary(history, "2026-01-18")

        assert summary[0]["date"] == "2026-01-12"
        assert summary[6]["is_today"] is True
        assert summary[6]["points_earned"] == 4


class TestPeriodStats:
    """Tests for period statistics."""

    def test_week_stats(self, history: list[dict[str, Any]]) -> None:
        """Monday through today."""
        assert StatisticsEngine.week_stats(history, TODAY) == {
            "points": 18,
            "activities": 3,
            "active_days": 2,
            "average_per_day": 9,
        }

    def test_month_stats(self, history: list[dict[str, Any]]) -> None:
        """First of the month through today."""
        assert StatisticsEngine.month_stats(history, TODAY) == {
            "points": 28,
            "activities": 5,
            "active_days": 4,
            "average_per_day": 7,
        }

    def test_range_is_inclusive(self, history: list[dict[str, Any]]) -> None:
        """Both ends of the range are included."""
        stats = StatisticsEngine.period_stats(history, "2025-12-31", "2026-01-02")

        assert stats["points"] == 15
        assert stats["active_days"] == 2

    def test_average_rounds_half_up(self) -> None:
        """5 points over 2 active days averages 3."""
        history = [make_entry("2026-01-20", 2), make_entry("2026-01-21", 3)]

        stats = StatisticsEngine.period_stats(history, "2026-01-19", TODAY)

        assert stats["average_per_day"] == 3

    def test_empty_history(self) -> None:
        """No history gives zeros without dividing by zero."""
        assert StatisticsEngine.week_stats([], TODAY) == {
            "points": 0,
            "activities": 0,
            "active_days": 0,
            "average_per_day": 0,
        }


class TestTopActivities:
    """Tests for most frequent activities."""

    def test_ranked_by_count(self, history: list[dict[str, Any]]) -> None:
        """Grouped by name, most frequent first, ties in first-seen order."""
        top = StatisticsEngine.top_activities(history)

        assert [(row["activity_name"], row["count"]) for row in top] == [
            ("Make bed", 3),
            ("Brush teeth", 2),
            ("Do homework", 1),
        ]
        assert top[0]["points"] == 15

    def test_limit(self, history: list[dict[str, Any]]) -> None:
        """Only `limit` rows are returned."""
        assert len(StatisticsEngine.top_activities(history, limit=1)) == 1


class TestActivityCalendar:
    """Tests for the recent activity calendar."""

    def test_last_seven_days(self, history: list[dict[str, Any]]) -> None:
        """Oldest first, ending today, active days flagged."""
        calendar = StatisticsEngine.activity_calendar(history, TODAY)

        assert calendar[0]["date"] == "2026-01-15"
        assert calendar[-1] == {"date": TODAY, "active": True, "is_today": True}
        active = [day["date"] for day in calendar if day["active"]]
        assert active == ["2026-01-18", "2026-01-19", "2026-01-21"]

    def test_custom_length(self) -> None:
        """The window length can be changed."""
        assert len(StatisticsEngine.activity_calendar([], TODAY, days=30)) == 30


class TestMonthCalendar:
    """Tests for the month calendar grid."""

    def test_covers_the_whole_month(self, history: list[dict[str, Any]]) -> None:
        """January 2026 starts on a Thursday and has 31 days."""
        calendar = StatisticsEngine.month_calendar(history, TODAY)

        assert calendar["month"] == "2026-01"
        assert calendar["leading_blanks"] == 3
        assert len(calendar["days"]) == 31
        assert calendar["days"][0]["date"] == "2026-01-01"
        assert calendar["days"][-1]["date"] == "2026-01-31"

    def test_day_figures(self, history: list[dict[str, Any]]) -> None:
        """Earned points and counts per day; spending and other months ignored."""
        days = {
            row["day"]: row
            for row in StatisticsEngine.month_calendar(history, TODAY)["days"]
        }

        assert (days[19]["points"], days[19]["count"], days[19]["intensity"]) == (8, 2, 1)
        assert (days[21]["points"], days[21]["count"]) == (10, 1)
        assert (days[2]["points"], days[2]["count"]) == (6, 1)
        assert (days[20]["points"], days[20]["intensity"]) == (0, 0)
        assert days[21]["is_today"] is True
        assert days[22]["is_future"] is True
        assert days[21]["is_future"] is False

    @pytest.mark.parametrize(
        ("completions", "intensity"), [(1, 1), (2, 1), (3, 2), (5, 3), (8, 4), (12, 4)]
    )
    def test_intensity(self, completions: int, intensity: int) -> None:
        """Intensity steps every two completions and stops at 4."""
        history = [make_entry("2026-02-10", 1) for _ in range(completions)]

        calendar = StatisticsEngine.month_calendar(history, "2026-02-14")

        assert len(calendar["days"]) == 28
        assert calendar["days"][9]["intensity"] == intensity


class TestHistoryByDate:
    """Tests for date-grouped history."""

    def test_groups_newest_first(self, history: list[dict[str, Any]]) -> None:
        """Every line is kept and each day totals its earned and spent points."""
        groups = StatisticsEngine.history_by_date(history)

        assert [g["date"] for g in groups] == [
            "2026-01-21",
            "2026-01-19",
            "2026-01-18",
            "2026-01-02",
            "2025-12-31",
        ]
        today = groups[0]
        assert (today["earned"], today["spent"]) == (10, 7)
        assert [e[const.DATA_ENTRY_ACTIVITY_NAME] for e in today["entries"]] == [
            "Do homework",
            "Movie night",
        ]
        assert groups[1]["earned"] == 8

    def test_deductions_listed_not_totalled(self) -> None:
        """A deduction shows in the day's lines but in neither total."""
        history = [make_entry(TODAY, 4, "Correction", const.ENTRY_TYPE_DEDUCTED)]

        (group,) = StatisticsEngine.history_by_date(history)

        assert (group["earned"], group["spent"]) == (0, 0)
        assert len(group["entries"]) == 1

    def test_limit(self, history: list[dict[str, Any]]) -> None:
        """Only the newest dates are returned."""
        groups = StatisticsEngine.history_by_date(history, limit=2)

        assert [g["date"] for g in groups] == ["2026-01-21", "2026-01-19"]
