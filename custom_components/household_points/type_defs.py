"""Type definitions for Household Points data structures.

TypedDict describes the fixed-key structures persisted per member (activities,
completion records, history entries, the ledger itself) and the derived values
the engines return (progression, daily progress, completion results).

IMPORTANT: This file must NOT import from managers or services to avoid
circular dependencies. Only import from typing (type machinery).

NOTE: TypedDict is STATIC ANALYSIS ONLY. Stored ledgers written by older
versions may lack keys; runtime defaulting lives in data_builders.normalize_ledger().
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

MemberId = str  # Caller-chosen member identifier
ActivityId = str  # "act-<stem>-<suffix>" for seeded entries
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00-05:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"

EntryType = Literal["earned", "spent", "deducted"]
Track = Literal["standard", "alternate"]


# =============================================================================
# Stored Structures
# =============================================================================


class ActivityData(TypedDict):
    """An activity a member can complete for points."""

    id: ActivityId
    name: str
    points: int
    icon: str
    category: str
    max_per_day: int
    time_of_day: str
    required: bool


class CompletionRecord(TypedDict):
    """Same-day completion marker.

    Only records whose date equals today count toward caps and daily goal;
    older records are ignored rather than deleted.
    """

    activity_id: ActivityId
    date: ISODate
    points: int
    base_points: int
    bonus: int
    completed_at: ISODatetime


class HistoryEntry(TypedDict):
    """A permanent ledger line (newest first, capped at 100)."""

    activity_id: str
    activity_name: str
    activity_icon: str
    date: ISODate
    completed_at: ISODatetime
    points: int  # Always a magnitude; direction comes from type
    base_points: int
    bonus: int
    type: EntryType


class LedgerData(TypedDict):
    """Per-member points record stored under members[member_id]["points"]."""

    balance: int
    activities: list[ActivityData]
    today_completed: list[CompletionRecord]
    history: list[HistoryEntry]
    daily_goal: int
    daily_goal_enabled: bool
    lifetime_xp: NotRequired[int]


# =============================================================================
# Derived Structures (never stored)
# =============================================================================


class RankInfo(TypedDict):
    """One row of a rank table."""

    level: int
    name: str
    color: str
    icon: str


class ProgressionInfo(TypedDict):
    """Level and rank derived from lifetime XP."""

    level: int
    rank_name: str
    rank_color: str
    rank_icon: str
    current_xp: int
    xp_to_next_level: int
    progress_percent: int
    total_xp: int


class DailyProgress(TypedDict):
    """Today's earned points measured against the daily goal."""

    today_points: int
    goal_percent: int
    achieved: bool


class CompletionResult(TypedDict):
    """Outcome of LedgerEngine.complete_activity()."""

    ledger: LedgerData
    awarded: int
    base_points: int
    bonus: int
    streak: int
    multiplier: float
    cap_reached: bool
    goal_just_achieved: bool


class DaySummary(TypedDict):
    """One row of the weekly summary."""

    date: ISODate
    day_name: str
    completed: int
    points_earned: int
    is_today: bool


class PeriodStats(TypedDict):
    """Earned-point statistics over an inclusive date range."""

    points: int
    activities: int
    active_days: int
    average_per_day: int


class ActivityCount(TypedDict):
    """Earned completions grouped by activity name."""

    activity_name: str
    activity_icon: str
    count: int
    points: int


class CalendarDay(TypedDict):
    """One cell of the recent activity calendar."""

    date: ISODate
    active: bool
    is_today: bool


class MonthCalendarDay(TypedDict):
    """One day of the month grid. intensity runs 0-4 with the earned count."""

    day: int
    date: ISODate
    points: int
    count: int
    intensity: int
    is_today: bool
    is_future: bool


class MonthCalendar(TypedDict):
    """The current month as a grid.

    leading_blanks is the number of empty cells before day 1 in a
    Monday-first week row.
    """

    month: str
    leading_blanks: int
    days: list[MonthCalendarDay]


class HistoryDay(TypedDict):
    """History lines of one date, newest first, with earned/spent totals."""

    date: ISODate
    earned: int
    spent: int
    entries: list[HistoryEntry]


# =============================================================================
# Event Payload Types
# =============================================================================
# Built by the BaseManager emit_* helpers


class PointsChangedEvent(TypedDict, total=False):
    """Event payload for SIGNAL_SUFFIX_POINTS_CHANGED.

    Emitted by: LedgerManager after every balance-changing write.
    """

    member_id: MemberId
    old_balance: int
    new_balance: int
    delta: int
    entry_type: EntryType | None
    activity_id: str | None


class DailyGoalAchievedEvent(TypedDict):
    """Event payload for SIGNAL_SUFFIX_DAILY_GOAL_ACHIEVED."""

    member_id: MemberId
    date: ISODate
    daily_goal: int
    today_points: int


class CatalogChangedEvent(TypedDict):
    """Event payload for SIGNAL_SUFFIX_CATALOG_CHANGED."""

    member_id: MemberId
    activity_id: ActivityId
    action: str
