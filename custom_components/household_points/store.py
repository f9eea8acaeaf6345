# File: store.py
"""Handles persistent data storage for the Household Points integration.

Uses Home Assistant's Storage helper to keep one record per member and kind
(currently only "points", the member's ledger). Records are read and replaced
wholesale; the store knows nothing about their contents.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const
from .utils.dt_utils import dt_now_iso

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class HouseholdPointsStore:
    """Per-member key-value storage for Household Points data.

    Thin wrapper around Home Assistant's Store API. Data is kept in memory and
    written to disk on every write.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_CREATED_AT: dt_now_iso(),
            },
            const.DATA_MEMBERS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure.
        """
        const.LOGGER.debug("DEBUG: HouseholdPointsStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = HouseholdPointsStore.get_default_structure()
            return

        self._data = existing_data
        if not isinstance(self._data.get(const.DATA_MEMBERS), dict):
            const.LOGGER.warning(
                "WARNING: Storage has no members section, starting with none"
            )
            self._data[const.DATA_MEMBERS] = {}
        self._data.setdefault(
            const.DATA_META, {const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION}
        )
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s members",
            len(self._data[const.DATA_MEMBERS]),
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    @property
    def members(self) -> dict[str, dict[str, Any]]:
        """Return the members section (member_id -> {kind: record})."""
        return self._data.setdefault(const.DATA_MEMBERS, {})

    # ------------------------------------------------------------------
    # Per-member records
    # ------------------------------------------------------------------

    def read(self, member_id: str, kind: str) -> Any | None:
        """Return a copy of a member's record, or None if never written."""
        record = self.members.get(member_id, {}).get(kind)
        if record is None:
            return None
        return copy.deepcopy(record)

    async def async_write(self, member_id: str, kind: str, value: Any) -> None:
        """Replace a member's record and persist."""
        self.members.setdefault(member_id, {})[kind] = copy.deepcopy(value)
        const.LOGGER.debug("DEBUG: Writing %s record for member '%s'", kind, member_id)
        await self.async_save()

    async def async_delete_member(self, member_id: str) -> bool:
        """Remove every record for a member. Returns False if none existed."""
        if self.members.pop(member_id, None) is None:
            return False
        const.LOGGER.info("INFO: Removed stored data for member '%s'", member_id)
        await self.async_save()
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Errors are logged but do not stop execution:
            OSError: File system issues prevent saving.
            TypeError: Data contains non-serializable types.
            ValueError: Data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )

    async def async_clear_data(self) -> None:
        """Clear all stored data and reset to default structure."""
        const.LOGGER.warning(
            "WARNING: Clearing all Household Points data and resetting storage"
        )
        self._data = HouseholdPointsStore.get_default_structure()
        await self.async_save()

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        self._data = HouseholdPointsStore.get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
