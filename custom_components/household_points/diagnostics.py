"""Diagnostics support for Household Points integration.

Returns the raw storage data, identical to the household_points_data file, so
it can be used directly for troubleshooting or data recovery.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .store import HouseholdPointsStore


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry.

    The raw storage data is returned unchanged; ledger repair happens on read,
    so older shapes are shown exactly as stored.
    """
    store: HouseholdPointsStore = hass.data[const.DOMAIN][entry.entry_id][const.STORE]
    return {
        "config": {**entry.data, **entry.options},
        "storage": store.data,
    }
