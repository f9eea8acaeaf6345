# File: config_flow.py
"""Config flow for the Household Points integration.

A single instance holds every member's ledger, so the flow has one step that
collects the points settings and aborts if an entry already exists.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import HouseholdPointsOptionsFlowHandler


class HouseholdPointsConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Household Points."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Collect points settings and create the entry."""
        if self._async_current_entries():
            return self.async_abort(reason=const.TRANS_KEY_CFOF_SINGLE_INSTANCE)

        if user_input is not None:
            const.LOGGER.debug("DEBUG: Creating Household Points entry")
            return self.async_create_entry(
                title=const.HOUSEHOLD_POINTS_TITLE,
                data={**fh.default_points_config(), **user_input},
            )

        return self.async_show_form(
            step_id="user", data_schema=fh.build_points_config_schema()
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return HouseholdPointsOptionsFlowHandler()
