"""Shared fixtures for Household Points tests."""

from typing import Any

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.household_points import const
from custom_components.household_points.managers import LedgerManager

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a config entry with the default points settings."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.HOUSEHOLD_POINTS_TITLE,
        data={
            const.CONF_KID_TASK_POINTS: const.DEFAULT_KID_TASK_POINTS,
            const.CONF_TEEN_TASK_POINTS: const.DEFAULT_TEEN_TASK_POINTS,
            const.CONF_DEFAULT_DAILY_GOAL: const.DEFAULT_DAILY_GOAL,
            const.CONF_DEFAULT_DAILY_GOAL_ENABLED: const.DEFAULT_DAILY_GOAL_ENABLED,
        },
        options={},
        entry_id="test_entry_id",
    )


@pytest.fixture
async def init_integration(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry
) -> MockConfigEntry:
    """Set up the integration and return its config entry."""
    mock_config_entry.add_to_hass(hass)
    await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()
    return mock_config_entry


@pytest.fixture
def ledger_manager(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> LedgerManager:
    """Return the ledger manager of the loaded entry."""
    return hass.data[const.DOMAIN][init_integration.entry_id][const.LEDGER_MANAGER]
