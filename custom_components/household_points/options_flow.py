# File: options_flow.py
"""Options Flow for the Household Points integration.

Edits the points settings. The ledger manager reads them on every call, so
saved options take effect without a reload.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class HouseholdPointsOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for editing points settings."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and save the points settings."""
        if user_input is not None:
            const.LOGGER.debug("DEBUG: Updating Household Points options")
            return self.async_create_entry(title="", data=user_input)

        current = {**self.config_entry.data, **self.config_entry.options}
        return self.async_show_form(
            step_id="init", data_schema=fh.build_points_config_schema(current)
        )
