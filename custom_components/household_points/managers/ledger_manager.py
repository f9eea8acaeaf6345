"""Ledger Manager - Stateful orchestration of member point ledgers.

This manager handles every ledger-changing operation:
- Activity completion (cap, streak bonus, daily goal transition)
- Manual adjustments, spending debits, and task awards
- Resetting today's completions
- Activity catalog and daily goal administration
- Member summaries (balance, streak, level, goal, statistics)

ARCHITECTURE:
- LedgerManager = STATEFUL (reads the store, writes the result, emits events)
- LedgerEngine and friends = STATELESS (pure functions over ledger snapshots)

Each operation reads the member's ledger, computes the new snapshot with an
engine, and writes it back, with the store write as the only await after the
read. Within one Home Assistant instance that makes every operation atomic.
Two processes writing the same storage file are last-writer-wins.

Balance changes emit SIGNAL_SUFFIX_POINTS_CHANGED; crossing the daily goal
emits SIGNAL_SUFFIX_DAILY_GOAL_ACHIEVED, which this manager also re-fires as
a bus event for automations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const, data_builders as db
from ..engines import (
    ActivityNotFoundError,
    DailyGoalEngine,
    InsufficientFundsError,
    LedgerEngine,
    ProgressionEngine,
    StatisticsEngine,
    StreakEngine,
)
from ..utils.dt_utils import dt_now_iso, dt_today_iso
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Iterable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from ..store import HouseholdPointsStore
    from ..type_defs import (
        ActivityData,
        CompletionResult,
        LedgerData,
        ProgressionInfo,
    )


# Re-export exceptions for external use
__all__ = ["ActivityNotFoundError", "InsufficientFundsError", "LedgerManager"]


class LedgerManager(BaseManager):
    """Manager for member ledgers.

    Responsibilities:
    - Create (seed) ledgers on first access and repair malformed ones
    - Run engine transitions and persist the results
    - Emit points-changed and daily-goal events

    NOT responsible for:
    - Computing awards, streaks, levels (engines)
    - Storage mechanics (HouseholdPointsStore)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: HouseholdPointsStore,
    ) -> None:
        """Initialize the LedgerManager.

        Args:
            hass: Home Assistant instance
            config_entry: The config entry holding points configuration
            store: Per-member record storage
        """
        super().__init__(hass, config_entry)
        self._store = store

    async def async_setup(self) -> None:
        """Bridge daily goal achievements onto the event bus."""
        self.listen(
            const.SIGNAL_SUFFIX_DAILY_GOAL_ACHIEVED, self._on_daily_goal_achieved
        )

    @callback
    def _on_daily_goal_achieved(self, payload: dict[str, Any]) -> None:
        """Fire the public bus event for automations."""
        self.hass.bus.async_fire(const.EVENT_DAILY_GOAL_ACHIEVED, payload)

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def points_config(self) -> dict[str, Any]:
        """Return points settings, options overriding initial setup data."""
        merged = {
            const.CONF_KID_TASK_POINTS: const.DEFAULT_KID_TASK_POINTS,
            const.CONF_TEEN_TASK_POINTS: const.DEFAULT_TEEN_TASK_POINTS,
            const.CONF_DEFAULT_DAILY_GOAL: const.DEFAULT_DAILY_GOAL,
            const.CONF_DEFAULT_DAILY_GOAL_ENABLED: const.DEFAULT_DAILY_GOAL_ENABLED,
        }
        merged.update(self.config_entry.data)
        merged.update(self.config_entry.options)
        return merged

    def task_points_for(self, member_type: str) -> int:
        """Return configured task points for a member type (kid or teen)."""
        config = self.points_config
        if member_type == const.MEMBER_TYPE_TEEN:
            return max(0, int(config[const.CONF_TEEN_TASK_POINTS]))
        return max(0, int(config[const.CONF_KID_TASK_POINTS]))

    # =========================================================================
    # Ledger Access
    # =========================================================================

    def get_ledger(self, member_id: str) -> LedgerData:
        """Return the member's ledger without persisting any repair."""
        config = self.points_config
        ledger, _changed = db.normalize_ledger(
            self._store.read(member_id, const.STORE_KIND_POINTS),
            daily_goal=int(config[const.CONF_DEFAULT_DAILY_GOAL]),
            daily_goal_enabled=bool(config[const.CONF_DEFAULT_DAILY_GOAL_ENABLED]),
        )
        return ledger

    async def async_get_ledger(self, member_id: str) -> LedgerData:
        """Return the member's ledger, persisting seeding or repairs.

        Persisting the seed keeps the generated activity ids stable.
        """
        config = self.points_config
        raw = self._store.read(member_id, const.STORE_KIND_POINTS)
        ledger, changed = db.normalize_ledger(
            raw,
            daily_goal=int(config[const.CONF_DEFAULT_DAILY_GOAL]),
            daily_goal_enabled=bool(config[const.CONF_DEFAULT_DAILY_GOAL_ENABLED]),
        )
        if changed:
            if raw is None:
                const.LOGGER.info(
                    "INFO: Created ledger for member '%s' with %s default activities",
                    member_id,
                    len(ledger[const.DATA_LEDGER_ACTIVITIES]),
                )
            await self._store.async_write(
                member_id, const.STORE_KIND_POINTS, ledger
            )
        return ledger

    async def _async_commit(
        self,
        member_id: str,
        before: LedgerData,
        after: LedgerData,
        *,
        entry_type: str | None = None,
        activity_id: str | None = None,
    ) -> None:
        """Persist a new snapshot and announce any balance change."""
        await self._store.async_write(member_id, const.STORE_KIND_POINTS, after)

        old_balance = before[const.DATA_LEDGER_BALANCE]
        new_balance = after[const.DATA_LEDGER_BALANCE]
        if entry_type is not None or old_balance != new_balance:
            self.emit_points_changed(
                member_id,
                old_balance,
                new_balance,
                entry_type=entry_type,
                activity_id=activity_id,
            )

    # =========================================================================
    # Point Operations
    # =========================================================================

    async def async_complete_activity(
        self, member_id: str, activity_id: str
    ) -> CompletionResult:
        """Complete an activity for a member.

        Returns:
            CompletionResult. A capped completion is not written.

        Raises:
            ActivityNotFoundError: The activity is not in the member's catalog.
        """
        ledger = await self.async_get_ledger(member_id)
        today = dt_today_iso()
        try:
            result = LedgerEngine.complete_activity(
                ledger, activity_id, today, dt_now_iso()
            )
        except ActivityNotFoundError as err:
            const.LOGGER.warning(
                "WARNING: Complete Activity: '%s' not found for member '%s'",
                activity_id,
                member_id,
            )
            raise ActivityNotFoundError(activity_id, member_id) from err

        if result["cap_reached"]:
            const.LOGGER.debug(
                "DEBUG: Daily cap reached for member '%s', activity '%s'",
                member_id,
                activity_id,
            )
            return result

        await self._async_commit(
            member_id,
            ledger,
            result["ledger"],
            entry_type=const.ENTRY_TYPE_EARNED,
            activity_id=activity_id,
        )
        if result["goal_just_achieved"]:
            self.emit_daily_goal_achieved(
                member_id,
                today,
                result["ledger"][const.DATA_LEDGER_DAILY_GOAL],
                DailyGoalEngine.today_points(result["ledger"], today),
            )

        const.LOGGER.debug(
            "DEBUG: Member '%s' completed '%s': awarded=%s (base=%s, streak=%s)",
            member_id,
            activity_id,
            result["awarded"],
            result["base_points"],
            result["streak"],
        )
        return result

    async def async_adjust_points(
        self, member_id: str, amount: int, reason: str
    ) -> LedgerData:
        """Apply an administrative balance edit (balance floors at 0).

        Raises:
            InvalidAmountError: amount is zero.
        """
        ledger = await self.async_get_ledger(member_id)
        updated = LedgerEngine.adjust_balance(
            ledger, amount, reason, dt_today_iso(), dt_now_iso()
        )
        await self._async_commit(
            member_id,
            ledger,
            updated,
            entry_type=(
                const.ENTRY_TYPE_EARNED if amount > 0 else const.ENTRY_TYPE_DEDUCTED
            ),
        )
        const.LOGGER.info(
            "INFO: Adjusted member '%s' by %s (%s): balance %s -> %s",
            member_id,
            amount,
            reason,
            ledger[const.DATA_LEDGER_BALANCE],
            updated[const.DATA_LEDGER_BALANCE],
        )
        return updated

    async def async_spend_points(
        self,
        member_id: str,
        amount: int,
        item_name: str,
        item_id: str | None = None,
    ) -> LedgerData:
        """Debit points for a redemption.

        Raises:
            InvalidAmountError: amount is not positive.
            InsufficientFundsError: The balance is too low.
        """
        ledger = await self.async_get_ledger(member_id)
        try:
            updated = LedgerEngine.spend_points(
                ledger,
                amount,
                item_name,
                dt_today_iso(),
                dt_now_iso(),
                item_id=item_id,
                member_id=member_id,
            )
        except InsufficientFundsError as err:
            const.LOGGER.warning(
                "WARNING: Spend Points: NSF for member=%s, balance=%s, requested=%s",
                member_id,
                err.current_balance,
                err.requested_amount,
            )
            raise

        await self._async_commit(
            member_id,
            ledger,
            updated,
            entry_type=const.ENTRY_TYPE_SPENT,
            activity_id=item_id,
        )
        return updated

    async def async_award_task_points(
        self,
        member_id: str,
        task_id: str,
        task_name: str,
        member_type: str = const.MEMBER_TYPE_KID,
    ) -> tuple[LedgerData, int]:
        """Award the configured kid/teen task points.

        Returns:
            (updated ledger, points awarded)
        """
        points = self.task_points_for(member_type)
        ledger = await self.async_get_ledger(member_id)
        updated = LedgerEngine.award_task_points(
            ledger, points, task_id, task_name, dt_today_iso(), dt_now_iso()
        )
        await self._async_commit(
            member_id,
            ledger,
            updated,
            entry_type=const.ENTRY_TYPE_EARNED,
            activity_id=task_id,
        )
        return updated, points

    async def async_reset_today(
        self, member_id: str, activity_ids: Iterable[str] | None = None
    ) -> tuple[LedgerData, int]:
        """Undo today's completions (all, or only activity_ids).

        Returns:
            (updated ledger, points removed)
        """
        ledger = await self.async_get_ledger(member_id)
        updated, removed = LedgerEngine.reset_today(
            ledger, dt_today_iso(), activity_ids
        )
        if updated == ledger:
            const.LOGGER.debug(
                "DEBUG: Reset Today: nothing to reset for member '%s'", member_id
            )
            return updated, removed

        await self._async_commit(member_id, ledger, updated)
        const.LOGGER.info(
            "INFO: Reset today's completions for member '%s', removed %s points",
            member_id,
            removed,
        )
        return updated, removed

    # =========================================================================
    # Catalog & Goal Administration
    # =========================================================================

    def _raise_on_errors(self, errors: dict[str, str]) -> None:
        if errors:
            field, translation_key = next(iter(errors.items()))
            raise db.EntityValidationError(field=field, translation_key=translation_key)

    async def async_add_activity(
        self, member_id: str, data: dict[str, Any]
    ) -> ActivityData:
        """Validate, build, and add an activity to the member's catalog.

        Raises:
            EntityValidationError: The activity data is invalid.
        """
        ledger = await self.async_get_ledger(member_id)
        self._raise_on_errors(
            db.validate_activity_data(data, ledger[const.DATA_LEDGER_ACTIVITIES])
        )
        activity = db.build_activity(data)
        await self._store.async_write(
            member_id,
            const.STORE_KIND_POINTS,
            LedgerEngine.add_activity(ledger, activity),
        )
        self.emit_catalog_changed(
            member_id, activity[const.DATA_ACTIVITY_ID], const.CATALOG_ACTION_ADDED
        )
        return activity

    async def async_update_activity(
        self, member_id: str, activity_id: str, data: dict[str, Any]
    ) -> ActivityData:
        """Update an activity in place. Past history keeps its old names.

        Raises:
            ActivityNotFoundError: The activity is not in the catalog.
            EntityValidationError: The activity data is invalid.
        """
        ledger = await self.async_get_ledger(member_id)
        existing = LedgerEngine.find_activity(ledger, activity_id)
        if existing is None:
            raise ActivityNotFoundError(activity_id, member_id)

        self._raise_on_errors(
            db.validate_activity_data(
                data,
                ledger[const.DATA_LEDGER_ACTIVITIES],
                is_update=True,
                current_activity_id=activity_id,
            )
        )
        activity = db.build_activity(data, existing=existing)
        await self._store.async_write(
            member_id,
            const.STORE_KIND_POINTS,
            LedgerEngine.update_activity(ledger, activity_id, activity),
        )
        self.emit_catalog_changed(
            member_id, activity_id, const.CATALOG_ACTION_UPDATED
        )
        return activity

    async def async_delete_activity(self, member_id: str, activity_id: str) -> None:
        """Remove an activity from the catalog.

        Raises:
            ActivityNotFoundError: The activity is not in the catalog.
        """
        ledger = await self.async_get_ledger(member_id)
        try:
            updated = LedgerEngine.delete_activity(ledger, activity_id)
        except ActivityNotFoundError as err:
            raise ActivityNotFoundError(activity_id, member_id) from err
        await self._store.async_write(member_id, const.STORE_KIND_POINTS, updated)
        self.emit_catalog_changed(
            member_id, activity_id, const.CATALOG_ACTION_DELETED
        )

    async def async_set_daily_goal(
        self,
        member_id: str,
        daily_goal: int | None = None,
        enabled: bool | None = None,
    ) -> LedgerData:
        """Change the member's daily goal (clamped to 5-100) or its flag."""
        ledger = await self.async_get_ledger(member_id)
        updated = DailyGoalEngine.set_daily_goal(ledger, daily_goal, enabled)
        await self._store.async_write(member_id, const.STORE_KIND_POINTS, updated)
        return updated

    # =========================================================================
    # Derived Views
    # =========================================================================

    @staticmethod
    def get_progression(
        ledger: LedgerData, member_type: str = const.MEMBER_TYPE_KID
    ) -> ProgressionInfo:
        """Return level and rank for a ledger on the member type's track."""
        track = const.MEMBER_TYPE_TRACKS.get(member_type, const.TRACK_STANDARD)
        return ProgressionEngine.compute_level(
            ProgressionEngine.total_xp(ledger), track
        )

    async def async_get_member_summary(
        self, member_id: str, member_type: str = const.MEMBER_TYPE_KID
    ) -> dict[str, Any]:
        """Return everything a points view needs for one member."""
        ledger = await self.async_get_ledger(member_id)
        today = dt_today_iso()
        history = ledger[const.DATA_LEDGER_HISTORY]
        earned_dates = StreakEngine.earned_dates(history)

        completed_today: dict[str, int] = {}
        for record in ledger[const.DATA_LEDGER_TODAY_COMPLETED]:
            if record.get(const.DATA_ENTRY_DATE) == today:
                key = record.get(const.DATA_ENTRY_ACTIVITY_ID, "")
                completed_today[key] = completed_today.get(key, 0) + 1

        return {
            "member_id": member_id,
            "member_type": member_type,
            "date": today,
            const.DATA_LEDGER_BALANCE: ledger[const.DATA_LEDGER_BALANCE],
            "streak": StreakEngine.streak_from_dates(earned_dates, today),
            "longest_streak": StreakEngine.longest_streak(earned_dates),
            "progression": self.get_progression(ledger, member_type),
            "daily_progress": DailyGoalEngine.daily_progress(ledger, today),
            const.DATA_LEDGER_DAILY_GOAL: ledger[const.DATA_LEDGER_DAILY_GOAL],
            const.DATA_LEDGER_DAILY_GOAL_ENABLED: ledger[
                const.DATA_LEDGER_DAILY_GOAL_ENABLED
            ],
            const.DATA_LEDGER_ACTIVITIES: ledger[const.DATA_LEDGER_ACTIVITIES],
            "category_names": const.CATEGORY_NAMES.get(
                member_type, const.CATEGORY_NAMES[const.MEMBER_TYPE_KID]
            ),
            "completed_today": completed_today,
            "weekly_summary": StatisticsEngine.weekly_summary(history, today),
            "week_stats": StatisticsEngine.week_stats(history, today),
            "month_stats": StatisticsEngine.month_stats(history, today),
            "top_activities": StatisticsEngine.top_activities(history),
            "activity_calendar": StatisticsEngine.activity_calendar(history, today),
            "month_calendar": StatisticsEngine.month_calendar(history, today),
            "history_by_date": StatisticsEngine.history_by_date(history),
        }
