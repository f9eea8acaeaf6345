"""Ledger Engine - Pure logic for point awards, debits, and catalog edits.

This engine provides stateless, pure Python functions for:
- Activity completion (per-day cap, streak bonus, daily goal transition)
- Manual balance adjustments and spending debits
- Task awards for work outside the activity catalog
- Administrative "reset today" of same-day completions
- Activity catalog add/update/delete

Every operation takes a ledger snapshot and returns a new one; the input is
never mutated. Persisting the returned snapshot is the caller's job. Two
callers writing the same member concurrently is last-writer-wins: the engine
holds no locks and the slower write silently replaces the faster one.

History is newest-first and capped at const.HISTORY_MAX_ENTRIES. Dropped lines
are gone for good; the lifetime_xp counter keeps leveling correct anyway.

Completion records are not capped or expired. Records from earlier days stay in
today_completed and are ignored by date filtering, so the list grows by one
record per completion for the life of the ledger. A ledger without the list
has it rebuilt from earned history (data_builders.build_completion_records).

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in LedgerManager.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from datetime import date
from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..utils.dt_utils import dt_now_iso, dt_parse_date
from ..utils.math_utils import apply_multiplier
from .goal_engine import DailyGoalEngine
from .progression_engine import ProgressionEngine
from .streak_engine import StreakEngine

if TYPE_CHECKING:
    from ..type_defs import (
        ActivityData,
        CompletionRecord,
        CompletionResult,
        EntryType,
        HistoryEntry,
        LedgerData,
    )


# ==============================================================================
# Exceptions
# ==============================================================================


class LedgerError(Exception):
    """Base class for ledger operation failures. No state was changed."""


class ActivityNotFoundError(LedgerError):
    """Raised when an activity id has no definition in the member's catalog."""

    def __init__(self, activity_id: str, member_id: str | None = None) -> None:
        self.activity_id = activity_id
        self.member_id = member_id
        owner = f" for member {member_id}" if member_id else ""
        super().__init__(f"Activity '{activity_id}' not found{owner}")


class InvalidAmountError(LedgerError):
    """Raised when an adjustment or debit has no usable magnitude."""

    def __init__(self, amount: Any) -> None:
        self.amount = amount
        super().__init__(f"Invalid point amount: {amount!r}")


class InsufficientFundsError(LedgerError):
    """Raised when a debit would take the balance below zero.

    Attributes:
        member_id: The member attempting the debit
        current_balance: Current point balance
        requested_amount: Amount attempted to spend
        shortfall: How much more is needed (requested - current)
    """

    def __init__(
        self,
        member_id: str,
        current_balance: int,
        requested_amount: int,
    ) -> None:
        self.member_id = member_id
        self.current_balance = current_balance
        self.requested_amount = requested_amount
        self.shortfall = requested_amount - current_balance
        super().__init__(
            f"Insufficient points for member {member_id}: "
            f"balance={current_balance}, requested={requested_amount}, "
            f"shortfall={self.shortfall}"
        )


def _iso_date(today: str | date) -> str:
    parsed = dt_parse_date(today)
    if parsed is None:
        raise ValueError(f"Invalid date: {today!r}")
    return parsed.isoformat()


def _working_copy(ledger: Mapping[str, Any]) -> LedgerData:
    """Deep-copy a ledger, defaulting the lists and balance the engine touches."""
    working: dict[str, Any] = copy.deepcopy(dict(ledger))
    for key in (
        const.DATA_LEDGER_ACTIVITIES,
        const.DATA_LEDGER_TODAY_COMPLETED,
        const.DATA_LEDGER_HISTORY,
    ):
        if not isinstance(working.get(key), list):
            working[key] = []
    working[const.DATA_LEDGER_BALANCE] = int(
        working.get(const.DATA_LEDGER_BALANCE) or 0
    )
    return working  # type: ignore[return-value]


class LedgerEngine:
    """Pure logic engine for ledger transitions.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.
    """

    # ────────────────────────────────────────────────────────────────
    # Lookups
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def find_activity(
        ledger: Mapping[str, Any], activity_id: str
    ) -> ActivityData | None:
        """Return the catalog entry for activity_id, or None."""
        for activity in ledger.get(const.DATA_LEDGER_ACTIVITIES) or []:
            if activity.get(const.DATA_ACTIVITY_ID) == activity_id:
                return activity
        return None

    @staticmethod
    def completions_today(
        ledger: Mapping[str, Any], activity_id: str, today: str | date
    ) -> int:
        """Count today's completion records for one activity."""
        day = _iso_date(today)
        return sum(
            1
            for record in ledger.get(const.DATA_LEDGER_TODAY_COMPLETED) or []
            if record.get(const.DATA_ENTRY_ACTIVITY_ID) == activity_id
            and record.get(const.DATA_ENTRY_DATE) == day
        )

    @staticmethod
    def bonus_multiplier(streak: int) -> float:
        """Return the streak bonus multiplier.

        Examples:
            bonus_multiplier(2) → 1.0
            bonus_multiplier(3) → 1.05
            bonus_multiplier(7) → 1.10
        """
        for min_streak, multiplier in const.STREAK_BONUS_TIERS:
            if streak >= min_streak:
                return multiplier
        return const.STREAK_BONUS_NONE

    # ────────────────────────────────────────────────────────────────
    # History Helpers
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def create_history_entry(
        *,
        entry_type: EntryType,
        points: int,
        activity_id: str,
        activity_name: str,
        activity_icon: str,
        today: str,
        completed_at: str,
        base_points: int | None = None,
        bonus: int = 0,
    ) -> HistoryEntry:
        """Create a history line. points is always a magnitude."""
        return {
            const.DATA_ENTRY_ACTIVITY_ID: activity_id,
            const.DATA_ENTRY_ACTIVITY_NAME: activity_name,
            const.DATA_ENTRY_ACTIVITY_ICON: activity_icon,
            const.DATA_ENTRY_DATE: today,
            const.DATA_ENTRY_COMPLETED_AT: completed_at,
            const.DATA_ENTRY_POINTS: points,
            const.DATA_ENTRY_BASE_POINTS: points if base_points is None else base_points,
            const.DATA_ENTRY_BONUS: bonus,
            const.DATA_ENTRY_TYPE: entry_type,
        }  # type: ignore[return-value]

    @staticmethod
    def prune_history(
        history: list[HistoryEntry],
        max_entries: int = const.HISTORY_MAX_ENTRIES,
    ) -> list[HistoryEntry]:
        """Trim history to max_entries, keeping the most recent.

        Modifies the list in place and returns it for convenience.
        Newest entries are at the FRONT of the list.
        """
        if len(history) > max_entries:
            del history[max_entries:]
        return history

    @staticmethod
    def _record_entry(working: LedgerData, entry: HistoryEntry) -> None:
        """Prepend an entry to a working copy and keep lifetime_xp in step."""
        if entry[const.DATA_ENTRY_TYPE] == const.ENTRY_TYPE_EARNED:
            # Seed the counter from history before the new line lands
            working[const.DATA_LEDGER_LIFETIME_XP] = (
                ProgressionEngine.total_xp(working) + entry[const.DATA_ENTRY_POINTS]
            )
        working[const.DATA_LEDGER_HISTORY].insert(0, entry)
        LedgerEngine.prune_history(working[const.DATA_LEDGER_HISTORY])

    # ────────────────────────────────────────────────────────────────
    # Activity Completion
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def complete_activity(
        ledger: LedgerData,
        activity_id: str,
        today: str | date,
        now: str | None = None,
    ) -> CompletionResult:
        """Award points for completing a catalog activity.

        Args:
            ledger: Current ledger snapshot (not modified)
            activity_id: Catalog id of the completed activity
            today: Member's local calendar date
            now: Completion timestamp; defaults to the current local time

        Returns:
            CompletionResult. When the activity's max_per_day is already met,
            cap_reached is True, awarded is 0, and the ledger is unchanged.

        Raises:
            ActivityNotFoundError: activity_id is not in the catalog.
        """
        day = _iso_date(today)
        activity = LedgerEngine.find_activity(ledger, activity_id)
        if activity is None:
            raise ActivityNotFoundError(activity_id)

        previous_points = DailyGoalEngine.today_points(ledger, day)
        working = _working_copy(ledger)
        if not isinstance(ledger.get(const.DATA_LEDGER_TODAY_COMPLETED), list):
            # No records stored: today's earned history stands in for them
            working[const.DATA_LEDGER_TODAY_COMPLETED] = db.build_completion_records(
                working[const.DATA_LEDGER_HISTORY], day
            )
        streak = StreakEngine.compute_streak(working[const.DATA_LEDGER_HISTORY], day)
        multiplier = LedgerEngine.bonus_multiplier(streak)
        base_points = int(activity.get(const.DATA_ACTIVITY_POINTS) or 0)

        max_per_day = int(
            activity.get(const.DATA_ACTIVITY_MAX_PER_DAY) or const.DEFAULT_MAX_PER_DAY
        )
        if LedgerEngine.completions_today(working, activity_id, day) >= max_per_day:
            return {
                "ledger": working,
                "awarded": 0,
                "base_points": base_points,
                "bonus": 0,
                "streak": streak,
                "multiplier": multiplier,
                "cap_reached": True,
                "goal_just_achieved": False,
            }

        awarded = apply_multiplier(base_points, multiplier)
        bonus = awarded - base_points
        completed_at = now or dt_now_iso()

        record: CompletionRecord = {
            const.DATA_ENTRY_ACTIVITY_ID: activity_id,
            const.DATA_ENTRY_DATE: day,
            const.DATA_ENTRY_POINTS: awarded,
            const.DATA_ENTRY_BASE_POINTS: base_points,
            const.DATA_ENTRY_BONUS: bonus,
            const.DATA_ENTRY_COMPLETED_AT: completed_at,
        }  # type: ignore[assignment]
        working[const.DATA_LEDGER_TODAY_COMPLETED].append(record)
        LedgerEngine._record_entry(
            working,
            LedgerEngine.create_history_entry(
                entry_type=const.ENTRY_TYPE_EARNED,
                points=awarded,
                activity_id=activity_id,
                activity_name=activity.get(const.DATA_ACTIVITY_NAME, ""),
                activity_icon=activity.get(
                    const.DATA_ACTIVITY_ICON, const.DEFAULT_ACTIVITY_ICON
                ),
                today=day,
                completed_at=completed_at,
                base_points=base_points,
                bonus=bonus,
            ),
        )
        working[const.DATA_LEDGER_BALANCE] += awarded

        new_points = previous_points + awarded
        return {
            "ledger": working,
            "awarded": awarded,
            "base_points": base_points,
            "bonus": bonus,
            "streak": streak,
            "multiplier": multiplier,
            "cap_reached": False,
            "goal_just_achieved": DailyGoalEngine.goal_just_achieved(
                previous_points, new_points, working
            ),
        }

    # ────────────────────────────────────────────────────────────────
    # Direct Balance Edits
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def adjust_balance(
        ledger: LedgerData,
        amount: int,
        reason: str,
        today: str | date,
        now: str | None = None,
    ) -> LedgerData:
        """Apply an administrative balance edit.

        Positive amounts are recorded as "earned" (they count toward streak,
        goal history, and XP); negative amounts as "deducted". The balance
        floors at 0. No cap or bonus applies.

        Raises:
            InvalidAmountError: amount is zero or not an integer.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount == 0:
            raise InvalidAmountError(amount)

        working = _working_copy(ledger)
        working[const.DATA_LEDGER_BALANCE] = max(
            0, working[const.DATA_LEDGER_BALANCE] + amount
        )
        LedgerEngine._record_entry(
            working,
            LedgerEngine.create_history_entry(
                entry_type=(
                    const.ENTRY_TYPE_EARNED if amount > 0 else const.ENTRY_TYPE_DEDUCTED
                ),
                points=abs(amount),
                activity_id=const.ADJUSTMENT_ACTIVITY_ID,
                activity_name=reason,
                activity_icon=const.DEFAULT_ADJUSTMENT_ICON,
                today=_iso_date(today),
                completed_at=now or dt_now_iso(),
            ),
        )
        return working

    @staticmethod
    def spend_points(
        ledger: LedgerData,
        amount: int,
        item_name: str,
        today: str | date,
        now: str | None = None,
        item_id: str | None = None,
        member_id: str = "",
    ) -> LedgerData:
        """Debit the balance for a redemption.

        Raises:
            InvalidAmountError: amount is not a positive integer.
            InsufficientFundsError: amount exceeds the current balance.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError(amount)

        working = _working_copy(ledger)
        balance = working[const.DATA_LEDGER_BALANCE]
        if balance < amount:
            raise InsufficientFundsError(member_id, balance, amount)

        working[const.DATA_LEDGER_BALANCE] = balance - amount
        LedgerEngine._record_entry(
            working,
            LedgerEngine.create_history_entry(
                entry_type=const.ENTRY_TYPE_SPENT,
                points=amount,
                activity_id=item_id or "",
                activity_name=item_name,
                activity_icon=const.DEFAULT_SPEND_ICON,
                today=_iso_date(today),
                completed_at=now or dt_now_iso(),
            ),
        )
        return working

    @staticmethod
    def award_task_points(
        ledger: LedgerData,
        points: int,
        task_id: str,
        task_name: str,
        today: str | date,
        now: str | None = None,
        icon: str = const.DEFAULT_TASK_ICON,
    ) -> LedgerData:
        """Award configured task points for work outside the activity catalog.

        Used for journal entries and ad-hoc tasks. Writes an earned history
        line only: no completion record, no cap, no streak bonus.

        Raises:
            InvalidAmountError: points is negative or not an integer.
        """
        if isinstance(points, bool) or not isinstance(points, int) or points < 0:
            raise InvalidAmountError(points)

        working = _working_copy(ledger)
        working[const.DATA_LEDGER_BALANCE] += points
        LedgerEngine._record_entry(
            working,
            LedgerEngine.create_history_entry(
                entry_type=const.ENTRY_TYPE_EARNED,
                points=points,
                activity_id=task_id,
                activity_name=task_name,
                activity_icon=icon,
                today=_iso_date(today),
                completed_at=now or dt_now_iso(),
            ),
        )
        return working

    # ────────────────────────────────────────────────────────────────
    # Reset Today
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def reset_today(
        ledger: LedgerData,
        today: str | date,
        activity_ids: Iterable[str] | None = None,
    ) -> tuple[LedgerData, int]:
        """Undo today's activity completions.

        Removes today's completion records (all, or only those for
        activity_ids), deducts their points from the balance (floor 0), and
        drops today's earned history lines for the same activities. Manual
        adjustments and task awards made today are kept.

        Returns:
            (new ledger, points removed from the balance)
        """
        day = _iso_date(today)
        selected = set(activity_ids) if activity_ids is not None else None
        working = _working_copy(ledger)

        def _matches(item: Mapping[str, Any]) -> bool:
            return item.get(const.DATA_ENTRY_DATE) == day and (
                selected is None
                or item.get(const.DATA_ENTRY_ACTIVITY_ID) in selected
            )

        removed_records = [
            r for r in working[const.DATA_LEDGER_TODAY_COMPLETED] if _matches(r)
        ]
        if not removed_records:
            return working, 0

        removed_ids = {r.get(const.DATA_ENTRY_ACTIVITY_ID) for r in removed_records}
        removed_points = sum(
            int(r.get(const.DATA_ENTRY_POINTS) or 0) for r in removed_records
        )
        xp_before = ProgressionEngine.total_xp(working)

        working[const.DATA_LEDGER_TODAY_COMPLETED] = [
            r for r in working[const.DATA_LEDGER_TODAY_COMPLETED] if not _matches(r)
        ]
        kept_history: list[HistoryEntry] = []
        removed_xp = 0
        for entry in working[const.DATA_LEDGER_HISTORY]:
            if (
                entry.get(const.DATA_ENTRY_DATE) == day
                and entry.get(const.DATA_ENTRY_TYPE) == const.ENTRY_TYPE_EARNED
                and entry.get(const.DATA_ENTRY_ACTIVITY_ID) in removed_ids
            ):
                removed_xp += int(entry.get(const.DATA_ENTRY_POINTS) or 0)
                continue
            kept_history.append(entry)
        working[const.DATA_LEDGER_HISTORY] = kept_history

        working[const.DATA_LEDGER_BALANCE] = max(
            0, working[const.DATA_LEDGER_BALANCE] - removed_points
        )
        working[const.DATA_LEDGER_LIFETIME_XP] = max(0, xp_before - removed_xp)
        return working, removed_points

    # ────────────────────────────────────────────────────────────────
    # Catalog
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def add_activity(ledger: LedgerData, activity: ActivityData) -> LedgerData:
        """Return a ledger with activity appended to the catalog."""
        working = _working_copy(ledger)
        working[const.DATA_LEDGER_ACTIVITIES].append(copy.deepcopy(activity))
        return working

    @staticmethod
    def update_activity(
        ledger: LedgerData, activity_id: str, activity: ActivityData
    ) -> LedgerData:
        """Replace a catalog entry. History lines keep their original names.

        Raises:
            ActivityNotFoundError: activity_id is not in the catalog.
        """
        working = _working_copy(ledger)
        activities = working[const.DATA_LEDGER_ACTIVITIES]
        for index, existing in enumerate(activities):
            if existing.get(const.DATA_ACTIVITY_ID) == activity_id:
                activities[index] = copy.deepcopy(activity)
                return working
        raise ActivityNotFoundError(activity_id)

    @staticmethod
    def delete_activity(ledger: LedgerData, activity_id: str) -> LedgerData:
        """Remove a catalog entry. History and today's records are untouched.

        Raises:
            ActivityNotFoundError: activity_id is not in the catalog.
        """
        if LedgerEngine.find_activity(ledger, activity_id) is None:
            raise ActivityNotFoundError(activity_id)
        working = _working_copy(ledger)
        working[const.DATA_LEDGER_ACTIVITIES] = [
            a
            for a in working[const.DATA_LEDGER_ACTIVITIES]
            if a.get(const.DATA_ACTIVITY_ID) != activity_id
        ]
        return working
