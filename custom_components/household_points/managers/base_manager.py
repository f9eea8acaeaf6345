"""Ledger signal plumbing shared by Household Points managers.

Three dispatcher signals exist per config entry, each formatted as
household_points_{entry_id}_{suffix}:

- points_changed: a member's balance moved or a history line was written
- daily_goal_achieved: a completion pushed today's points over the goal
- catalog_changed: an activity was added, updated, or deleted

Managers publish through the emit_* helpers so every payload has the shape of
its TypedDict in type_defs. Listeners receive that payload as a single dict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from ..type_defs import (
        CatalogChangedEvent,
        DailyGoalAchievedEvent,
        EntryType,
        PointsChangedEvent,
    )


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Return the dispatcher signal name for one entry's ledger signal.

    Example:
        get_event_signal("abc123", "points_changed")
        → "household_points_abc123_points_changed"
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


class BaseManager:
    """Entry-scoped publisher and subscriber for the ledger signals."""

    def __init__(self, hass: HomeAssistant, config_entry: ConfigEntry) -> None:
        self.hass = hass
        self.config_entry = config_entry
        self.entry_id = config_entry.entry_id

    async def async_setup(self) -> None:
        """Subscribe to signals. Called once from async_setup_entry."""

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def _send(self, suffix: str, payload: Mapping[str, Any]) -> None:
        if suffix not in const.LEDGER_SIGNAL_SUFFIXES:
            raise ValueError(f"Unknown ledger signal: {suffix}")
        const.LOGGER.debug(
            "DEBUG: Signal %s for member '%s' (entry %s)",
            suffix,
            payload.get("member_id"),
            self.entry_id,
        )
        async_dispatcher_send(
            self.hass, get_event_signal(self.entry_id, suffix), dict(payload)
        )

    def emit_points_changed(
        self,
        member_id: str,
        old_balance: int,
        new_balance: int,
        *,
        entry_type: EntryType | None = None,
        activity_id: str | None = None,
    ) -> None:
        """Announce a balance write. delta is derived from the two balances."""
        payload: PointsChangedEvent = {
            "member_id": member_id,
            "old_balance": old_balance,
            "new_balance": new_balance,
            "delta": new_balance - old_balance,
            "entry_type": entry_type,
            "activity_id": activity_id,
        }
        self._send(const.SIGNAL_SUFFIX_POINTS_CHANGED, payload)

    def emit_daily_goal_achieved(
        self, member_id: str, today: str, daily_goal: int, today_points: int
    ) -> None:
        payload: DailyGoalAchievedEvent = {
            "member_id": member_id,
            "date": today,
            "daily_goal": daily_goal,
            "today_points": today_points,
        }
        self._send(const.SIGNAL_SUFFIX_DAILY_GOAL_ACHIEVED, payload)

    def emit_catalog_changed(
        self, member_id: str, activity_id: str, action: str
    ) -> None:
        """Announce a catalog edit; action is one of the CATALOG_ACTION_* values."""
        payload: CatalogChangedEvent = {
            "member_id": member_id,
            "activity_id": activity_id,
            "action": action,
        }
        self._send(const.SIGNAL_SUFFIX_CATALOG_CHANGED, payload)

    # ------------------------------------------------------------------
    # Subscribing
    # ------------------------------------------------------------------

    def listen(self, suffix: str, target: Callable[[dict[str, Any]], Any]) -> None:
        """Connect target to one of this entry's signals until the entry unloads."""
        if suffix not in const.LEDGER_SIGNAL_SUFFIXES:
            raise ValueError(f"Unknown ledger signal: {suffix}")
        self.config_entry.async_on_unload(
            async_dispatcher_connect(
                self.hass, get_event_signal(self.entry_id, suffix), target
            )
        )
