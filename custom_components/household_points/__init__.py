# File: __init__.py
"""Initialization file for the Household Points integration.

Handles setting up the integration: loading the config entry, initializing
per-member storage, creating the ledger manager, and registering services.

Key Features:
- Config entry setup and unload support.
- Storage management for persistent ledgers.
- Service registration for points, catalog, and summaries.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util

from . import const
from .managers import LedgerManager
from .services import async_setup_services, async_unload_services
from .store import HouseholdPointsStore
from .utils import dt_utils


def _set_default_timezone(hass: HomeAssistant) -> None:
    """Use Home Assistant's configured timezone for local calendar dates."""
    tz = dt_util.get_time_zone(hass.config.time_zone)
    if tz is not None:
        dt_utils.set_default_timezone(tz)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info(
        "INFO: Starting setup for Household Points entry: %s", entry.entry_id
    )

    # Must be done before any ledger date is computed
    _set_default_timezone(hass)

    store = HouseholdPointsStore(hass, const.STORAGE_KEY)
    await store.async_initialize()

    ledger_manager = LedgerManager(hass, entry, store)
    await ledger_manager.async_setup()

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.STORE: store,
        const.LEDGER_MANAGER: ledger_manager,
    }

    async_setup_services(hass)

    const.LOGGER.info(
        "INFO: Household Points setup complete for entry: %s", entry.entry_id
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Household Points entry: %s", entry.entry_id)

    hass.data[const.DOMAIN].pop(entry.entry_id, None)
    if not hass.data[const.DOMAIN]:
        await async_unload_services(hass)

    return True


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry by deleting its storage file."""
    const.LOGGER.info("INFO: Removing Household Points entry: %s", entry.entry_id)

    store = HouseholdPointsStore(hass, const.STORAGE_KEY)
    await store.async_delete_storage()

    const.LOGGER.info("INFO: Household Points entry data cleared: %s", entry.entry_id)
