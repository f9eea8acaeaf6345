"""Tests for LedgerManager - stateful ledger orchestration.

The manager reads a member's ledger from the store, runs an engine transition,
writes the result back, and emits dispatcher signals.

Test Categories:
- Ledger seeding and repair
- Completion (persist, signals, cap, goal event)
- Adjust / spend / task awards
- Reset today
- Catalog administration
- Member summary
"""

from __future__ import annotations

from typing import Any

import pytest
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_capture_events,
)

from custom_components.household_points import const
from custom_components.household_points.data_builders import EntityValidationError
from custom_components.household_points.engines import (
    ActivityNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
)
from custom_components.household_points.managers import LedgerManager
from custom_components.household_points.managers.base_manager import get_event_signal

MEMBER = "emma"


async def activity_id_for(manager: LedgerManager, name: str, member: str = MEMBER) -> str:
    """Return the seeded activity id with the given name."""
    ledger = await manager.async_get_ledger(member)
    return next(
        a[const.DATA_ACTIVITY_ID]
        for a in ledger[const.DATA_LEDGER_ACTIVITIES]
        if a[const.DATA_ACTIVITY_NAME] == name
    )


def capture_signal(
    hass: HomeAssistant, entry: MockConfigEntry, suffix: str
) -> list[dict[str, Any]]:
    """Collect payloads sent on one of the entry's dispatcher signals."""
    payloads: list[dict[str, Any]] = []

    @callback
    def _record(payload: dict[str, Any]) -> None:
        payloads.append(payload)

    async_dispatcher_connect(hass, get_event_signal(entry.entry_id, suffix), _record)
    return payloads


class TestLedgerAccess:
    """Tests for seeding and repairing ledgers."""

    async def test_first_access_seeds_and_persists(
        self, hass: HomeAssistant, ledger_manager: LedgerManager
    ) -> None:
        """A new member gets the seed catalog, written once."""
        store = hass.data[const.DOMAIN]["test_entry_id"][const.STORE]
        assert store.read(MEMBER, const.STORE_KIND_POINTS) is None

        ledger = await ledger_manager.async_get_ledger(MEMBER)

        assert ledger[const.DATA_LEDGER_BALANCE] == 0
        assert ledger[const.DATA_LEDGER_DAILY_GOAL] == const.DEFAULT_DAILY_GOAL
        assert store.read(MEMBER, const.STORE_KIND_POINTS) == ledger

    async def test_seeded_ids_are_stable(self, ledger_manager: LedgerManager) -> None:
        """Reading twice returns the same generated ids."""
        first = await activity_id_for(ledger_manager, "Make bed")
        second = await activity_id_for(ledger_manager, "Make bed")

        assert first == second

    async def test_get_ledger_does_not_write(
        self, hass: HomeAssistant, ledger_manager: LedgerManager
    ) -> None:
        """The read-only accessor never persists."""
        store = hass.data[const.DOMAIN]["test_entry_id"][const.STORE]

        ledger_manager.get_ledger(MEMBER)

        assert store.read(MEMBER, const.STORE_KIND_POINTS) is None

    async def test_malformed_ledger_repaired(
        self, hass: HomeAssistant, ledger_manager: LedgerManager
    ) -> None:
        """A stored ledger missing its lists is repaired and saved."""
        store = hass.data[const.DOMAIN]["test_entry_id"][const.STORE]
        await store.async_write(MEMBER, const.STORE_KIND_POINTS, {"balance": 9})

        ledger = await ledger_manager.async_get_ledger(MEMBER)

        assert ledger[const.DATA_LEDGER_BALANCE] == 9
        assert store.read(MEMBER, const.STORE_KIND_POINTS)[const.DATA_LEDGER_HISTORY] == []


class TestCompleteActivity:
    """Tests for async_complete_activity."""

    async def test_completion_persists_and_signals(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        ledger_manager: LedgerManager,
    ) -> None:
        """Points are saved and a points-changed signal is sent."""
        signals = capture_signal(hass, init_integration, const.SIGNAL_SUFFIX_POINTS_CHANGED)
        activity_id = await activity_id_for(ledger_manager, "Make bed")

        result = await ledger_manager.async_complete_activity(MEMBER, activity_id)
        await hass.async_block_till_done()

        assert result["awarded"] == 5
        stored = ledger_manager.get_ledger(MEMBER)
        assert stored[const.DATA_LEDGER_BALANCE] == 5
        assert signals == [
            {
                "member_id": MEMBER,
                "old_balance": 0,
                "new_balance": 5,
                "delta": 5,
                "entry_type": const.ENTRY_TYPE_EARNED,
                "activity_id": activity_id,
            }
        ]

    async def test_cap_reached_not_written(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        ledger_manager: LedgerManager,
    ) -> None:
        """A capped completion changes nothing and sends no signal."""
        activity_id = await activity_id_for(ledger_manager, "Make bed")
        await ledger_manager.async_complete_activity(MEMBER, activity_id)
        signals = capture_signal(hass, init_integration, const.SIGNAL_SUFFIX_POINTS_CHANGED)

        result = await ledger_manager.async_complete_activity(MEMBER, activity_id)
        await hass.async_block_till_done()

        assert result["cap_reached"] is True
        assert ledger_manager.get_ledger(MEMBER)[const.DATA_LEDGER_BALANCE] == 5
        assert signals == []

    async def test_unknown_activity(self, ledger_manager: LedgerManager) -> None:
        """The error carries the member id."""
        with pytest.raises(ActivityNotFoundError) as exc_info:
            await ledger_manager.async_complete_activity(MEMBER, "act-missing")

        assert exc_info.value.member_id == MEMBER
        assert exc_info.value.activity_id == "act-missing"

    async def test_goal_event_fired_once(
        self, hass: HomeAssistant, ledger_manager: LedgerManager
    ) -> None:
        """Crossing the goal fires the bus event; later completions do not."""
        events = async_capture_events(hass, const.EVENT_DAILY_GOAL_ACHIEVED)
        await ledger_manager.async_set_daily_goal(MEMBER, daily_goal=5)

        await ledger_manager.async_complete_activity(
            MEMBER, await activity_id_for(ledger_manager, "Make bed")
        )
        await ledger_manager.async_complete_activity(
            MEMBER, await activity_id_for(ledger_manager, "Brush teeth (AM)")
        )
        await hass.async_block_till_done()

        assert len(events) == 1
        assert events[0].data["member_id"] == MEMBER
        assert events[0].data["daily_goal"] == 5
        assert events[0].data["today_points"] == 5

    async def test_members_are_independent(self, ledger_manager: LedgerManager) -> None:
        """Each member has their own ledger and cap."""
        await ledger_manager.async_complete_activity(
            MEMBER, await activity_id_for(ledger_manager, "Make bed")
        )

        other = await ledger_manager.async_complete_activity(
            "liam", await activity_id_for(ledger_manager, "Make bed", "liam")
        )

        assert other["cap_reached"] is False
        assert ledger_manager.get_ledger("liam")[const.DATA_LEDGER_BALANCE] == 5


class TestBalanceOperations:
    """Tests for adjust, spend, and task awards."""

    async def test_adjust_points(self, ledger_manager: LedgerManager) -> None:
        """Adjustments floor at zero."""
        await ledger_manager.async_adjust_points(MEMBER, 10, "Extra help")
        updated = await ledger_manager.async_adjust_points(MEMBER, -50, "Penalty")

        assert updated[const.DATA_LEDGER_BALANCE] == 0
        assert ledger_manager.get_ledger(MEMBER)[const.DATA_LEDGER_BALANCE] == 0

    async def test_adjust_zero_rejected(self, ledger_manager: LedgerManager) -> None:
        """A zero adjustment is invalid."""
        with pytest.raises(InvalidAmountError):
            await ledger_manager.async_adjust_points(MEMBER, 0, "Nothing")

    async def test_spend_points(self, ledger_manager: LedgerManager) -> None:
        """Spending debits the stored balance; NSF leaves it alone."""
        await ledger_manager.async_adjust_points(MEMBER, 20, "Start")

        await ledger_manager.async_spend_points(MEMBER, 15, "Ice cream")
        with pytest.raises(InsufficientFundsError):
            await ledger_manager.async_spend_points(MEMBER, 15, "Ice cream")

        assert ledger_manager.get_ledger(MEMBER)[const.DATA_LEDGER_BALANCE] == 5

    async def test_task_points_by_member_type(self, ledger_manager: LedgerManager) -> None:
        """Kids and teens get their configured task points."""
        _ledger, kid_points = await ledger_manager.async_award_task_points(
            MEMBER, "journal-1", "Journal", const.MEMBER_TYPE_KID
        )
        _ledger, teen_points = await ledger_manager.async_award_task_points(
            "ava", "journal-1", "Journal", const.MEMBER_TYPE_TEEN
        )

        assert kid_points == const.DEFAULT_KID_TASK_POINTS
        assert teen_points == const.DEFAULT_TEEN_TASK_POINTS

    async def test_options_override_task_points(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        ledger_manager: LedgerManager,
    ) -> None:
        """Saved options take effect without a reload."""
        hass.config_entries.async_update_entry(
            init_integration,
            options={
                **init_integration.data,
                const.CONF_KID_TASK_POINTS: 7,
            },
        )

        _ledger, points = await ledger_manager.async_award_task_points(
            MEMBER, "t1", "Task"
        )

        assert points == 7


class TestResetToday:
    """Tests for async_reset_today."""

    async def test_reset_removes_todays_points(
        self, ledger_manager: LedgerManager
    ) -> None:
        """Today's completion points are deducted; adjustments stay."""
        activity_id = await activity_id_for(ledger_manager, "Make bed")
        await ledger_manager.async_complete_activity(MEMBER, activity_id)
        await ledger_manager.async_adjust_points(MEMBER, 3, "Bonus")

        updated, removed = await ledger_manager.async_reset_today(MEMBER)

        assert removed == 5
        assert updated[const.DATA_LEDGER_BALANCE] == 3
        assert ledger_manager.get_ledger(MEMBER)[const.DATA_LEDGER_BALANCE] == 3

    async def test_nothing_to_reset_sends_no_signal(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        ledger_manager: LedgerManager,
    ) -> None:
        """Resetting an untouched day is a no-op."""
        await ledger_manager.async_get_ledger(MEMBER)
        signals = capture_signal(hass, init_integration, const.SIGNAL_SUFFIX_POINTS_CHANGED)

        _updated, removed = await ledger_manager.async_reset_today(MEMBER)
        await hass.async_block_till_done()

        assert removed == 0
        assert signals == []


class TestCatalog:
    """Tests for catalog administration."""

    async def test_add_update_delete(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        ledger_manager: LedgerManager,
    ) -> None:
        """Catalog edits persist and send catalog-changed signals."""
        signals = capture_signal(hass, init_integration, const.SIGNAL_SUFFIX_CATALOG_CHANGED)

        activity = await ledger_manager.async_add_activity(
            MEMBER, {const.DATA_ACTIVITY_NAME: "Feed the cat", const.DATA_ACTIVITY_POINTS: 4}
        )
        activity_id = activity[const.DATA_ACTIVITY_ID]
        await ledger_manager.async_update_activity(
            MEMBER, activity_id, {const.DATA_ACTIVITY_MAX_PER_DAY: 2}
        )

        result = await ledger_manager.async_complete_activity(MEMBER, activity_id)
        assert result["awarded"] == 4
        result = await ledger_manager.async_complete_activity(MEMBER, activity_id)
        assert result["cap_reached"] is False

        await ledger_manager.async_delete_activity(MEMBER, activity_id)
        await hass.async_block_till_done()

        assert [s["action"] for s in signals] == [
            const.CATALOG_ACTION_ADDED,
            const.CATALOG_ACTION_UPDATED,
            const.CATALOG_ACTION_DELETED,
        ]
        assert {s["activity_id"] for s in signals} == {activity_id}
        with pytest.raises(ActivityNotFoundError):
            await ledger_manager.async_complete_activity(MEMBER, activity_id)

    async def test_duplicate_name_rejected(self, ledger_manager: LedgerManager) -> None:
        """Names must be unique within a member's catalog."""
        with pytest.raises(EntityValidationError) as exc_info:
            await ledger_manager.async_add_activity(
                MEMBER, {const.DATA_ACTIVITY_NAME: "Make bed"}
            )

        assert exc_info.value.translation_key == const.TRANS_KEY_CFOF_DUPLICATE_ACTIVITY

    async def test_update_unknown(self, ledger_manager: LedgerManager) -> None:
        """Updating a missing activity raises with the member id."""
        with pytest.raises(ActivityNotFoundError) as exc_info:
            await ledger_manager.async_update_activity(MEMBER, "act-missing", {})

        assert exc_info.value.member_id == MEMBER


class TestSummary:
    """Tests for async_get_member_summary."""

    async def test_summary_contents(self, ledger_manager: LedgerManager) -> None:
        """The summary reflects balance, streak, level, and goal progress."""
        await ledger_manager.async_complete_activity(
            MEMBER, await activity_id_for(ledger_manager, "Clean room")
        )

        summary = await ledger_manager.async_get_member_summary(
            MEMBER, const.MEMBER_TYPE_TEEN
        )

        assert summary[const.DATA_LEDGER_BALANCE] == 10
        assert summary["streak"] == 1
        assert summary["longest_streak"] == 1
        assert summary["progression"]["level"] == 1
        assert summary["progression"]["rank_name"] == "Novice"
        assert summary["daily_progress"] == {
            "today_points": 10,
            "goal_percent": 50,
            "achieved": False,
        }
        assert summary["category_names"][const.CATEGORY_HYGIENE] == "Self-Care"
        assert sum(summary["completed_today"].values()) == 1
        assert len(summary["weekly_summary"]) == 7
        assert summary["week_stats"]["points"] == 10
        assert summary["activity_calendar"][-1]["active"] is True
        assert summary["top_activities"][0]["activity_name"] == "Clean room"
        today_cell = next(d for d in summary["month_calendar"]["days"] if d["is_today"])
        assert (today_cell["points"], today_cell["count"]) == (10, 1)
        assert summary["history_by_date"][0]["earned"] == 10


class TestSignals:
    """Tests for the entry-scoped signal helpers."""

    async def test_listen_until_unload(
        self,
        hass: HomeAssistant,
        init_integration: MockConfigEntry,
        ledger_manager: LedgerManager,
    ) -> None:
        """Listeners get the payload dict and are dropped when the entry unloads."""
        received: list[dict[str, Any]] = []

        @callback
        def _record(payload: dict[str, Any]) -> None:
            received.append(payload)

        ledger_manager.listen(const.SIGNAL_SUFFIX_POINTS_CHANGED, _record)

        ledger_manager.emit_points_changed(MEMBER, 3, 8)
        await hass.config_entries.async_unload(init_integration.entry_id)
        await hass.async_block_till_done()
        ledger_manager.emit_points_changed(MEMBER, 8, 9)

        assert received == [
            {
                "member_id": MEMBER,
                "old_balance": 3,
                "new_balance": 8,
                "delta": 5,
                "entry_type": None,
                "activity_id": None,
            }
        ]

    async def test_unknown_signal_rejected(self, ledger_manager: LedgerManager) -> None:
        """Only the ledger signals can be subscribed to."""
        with pytest.raises(ValueError):
            ledger_manager.listen("badges_changed", lambda payload: None)
