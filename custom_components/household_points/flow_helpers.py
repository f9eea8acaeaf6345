# File: flow_helpers.py
"""Helpers shared by the config flow and the options flow.

Both flows edit the same four points settings, so the form schema and its
validation live here once.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import voluptuous as vol

from . import const


def default_points_config() -> dict[str, Any]:
    """Return the points settings used when nothing is configured."""
    return {
        const.CONF_KID_TASK_POINTS: const.DEFAULT_KID_TASK_POINTS,
        const.CONF_TEEN_TASK_POINTS: const.DEFAULT_TEEN_TASK_POINTS,
        const.CONF_DEFAULT_DAILY_GOAL: const.DEFAULT_DAILY_GOAL,
        const.CONF_DEFAULT_DAILY_GOAL_ENABLED: const.DEFAULT_DAILY_GOAL_ENABLED,
    }


def build_points_config_schema(defaults: Mapping[str, Any] | None = None) -> vol.Schema:
    """Build the points settings form, pre-filled with defaults."""
    values = {**default_points_config(), **(defaults or {})}
    return vol.Schema(
        {
            vol.Required(
                const.CONF_KID_TASK_POINTS,
                default=values[const.CONF_KID_TASK_POINTS],
            ): vol.All(
                vol.Coerce(int), vol.Range(min=0, max=const.TASK_POINTS_MAX)
            ),
            vol.Required(
                const.CONF_TEEN_TASK_POINTS,
                default=values[const.CONF_TEEN_TASK_POINTS],
            ): vol.All(
                vol.Coerce(int), vol.Range(min=0, max=const.TASK_POINTS_MAX)
            ),
            vol.Required(
                const.CONF_DEFAULT_DAILY_GOAL,
                default=values[const.CONF_DEFAULT_DAILY_GOAL],
            ): vol.All(
                vol.Coerce(int),
                vol.Range(min=const.DAILY_GOAL_MIN, max=const.DAILY_GOAL_MAX),
            ),
            vol.Required(
                const.CONF_DEFAULT_DAILY_GOAL_ENABLED,
                default=values[const.CONF_DEFAULT_DAILY_GOAL_ENABLED],
            ): bool,
        }
    )
