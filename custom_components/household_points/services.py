# File: services.py
"""Defines custom services for the Household Points integration.

These services are the integration's public surface: dashboards, scripts, and
automations call them to complete activities, edit balances, manage the
activity catalog, and read member summaries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, SupportsResponse
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv

from . import const
from .data_builders import EntityValidationError
from .engines import ActivityNotFoundError, InsufficientFundsError, InvalidAmountError

if TYPE_CHECKING:
    from .managers import LedgerManager

# --- Service Schemas ---
COMPLETE_ACTIVITY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_ACTIVITY_ID): cv.string,
    }
)

ADJUST_POINTS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_AMOUNT): vol.Coerce(int),
        vol.Optional(const.FIELD_REASON, default="Manual adjustment"): cv.string,
    }
)

SPEND_POINTS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_AMOUNT): vol.Coerce(int),
        vol.Required(const.FIELD_ITEM_NAME): cv.string,
        vol.Optional(const.FIELD_ITEM_ID): cv.string,
    }
)

AWARD_TASK_POINTS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_TASK_ID): cv.string,
        vol.Required(const.FIELD_TASK_NAME): cv.string,
        vol.Optional(
            const.FIELD_MEMBER_TYPE, default=const.MEMBER_TYPE_KID
        ): vol.In(const.MEMBER_TYPES),
    }
)

RESET_TODAY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Optional(const.FIELD_ACTIVITY_IDS): vol.All(cv.ensure_list, [cv.string]),
    }
)

_ACTIVITY_FIELDS = {
    vol.Optional(const.FIELD_POINTS): vol.All(vol.Coerce(int), vol.Range(min=0)),
    vol.Optional(const.FIELD_ICON): cv.string,
    vol.Optional(const.FIELD_CATEGORY): vol.In(const.ACTIVITY_CATEGORIES),
    vol.Optional(const.FIELD_MAX_PER_DAY): vol.All(vol.Coerce(int), vol.Range(min=1)),
    vol.Optional(const.FIELD_TIME_OF_DAY): vol.In(const.TIME_OF_DAY_OPTIONS),
    vol.Optional(const.FIELD_REQUIRED): cv.boolean,
}

ADD_ACTIVITY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_NAME): cv.string,
        **_ACTIVITY_FIELDS,
    }
)

UPDATE_ACTIVITY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_ACTIVITY_ID): cv.string,
        vol.Optional(const.FIELD_NAME): cv.string,
        **_ACTIVITY_FIELDS,
    }
)

DELETE_ACTIVITY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_ACTIVITY_ID): cv.string,
    }
)

SET_DAILY_GOAL_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Optional(const.FIELD_DAILY_GOAL): vol.Coerce(int),
        vol.Optional(const.FIELD_ENABLED): cv.boolean,
    }
)

GET_MEMBER_SUMMARY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
        vol.Optional(
            const.FIELD_MEMBER_TYPE, default=const.MEMBER_TYPE_KID
        ): vol.In(const.MEMBER_TYPES),
    }
)

# Service field -> activity data key
_ACTIVITY_FIELD_MAP = {
    const.FIELD_NAME: const.DATA_ACTIVITY_NAME,
    const.FIELD_POINTS: const.DATA_ACTIVITY_POINTS,
    const.FIELD_ICON: const.DATA_ACTIVITY_ICON,
    const.FIELD_CATEGORY: const.DATA_ACTIVITY_CATEGORY,
    const.FIELD_MAX_PER_DAY: const.DATA_ACTIVITY_MAX_PER_DAY,
    const.FIELD_TIME_OF_DAY: const.DATA_ACTIVITY_TIME_OF_DAY,
    const.FIELD_REQUIRED: const.DATA_ACTIVITY_REQUIRED,
}


def _get_first_entry_id(hass: HomeAssistant) -> str | None:
    """Retrieve the first loaded Household Points config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def _get_manager(hass: HomeAssistant, service: str) -> LedgerManager:
    entry_id = _get_first_entry_id(hass)
    if not entry_id:
        const.LOGGER.warning("WARNING: %s: no Household Points entry loaded", service)
        raise HomeAssistantError(
            translation_domain=const.DOMAIN,
            translation_key=const.TRANS_KEY_ERROR_NO_ENTRY,
        )
    return hass.data[const.DOMAIN][entry_id][const.LEDGER_MANAGER]


def _activity_not_found(err: ActivityNotFoundError) -> ServiceValidationError:
    return ServiceValidationError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_ACTIVITY_NOT_FOUND,
        translation_placeholders={
            "activity_id": err.activity_id,
            "member_id": err.member_id or "",
        },
    )


def _invalid_amount(err: InvalidAmountError) -> ServiceValidationError:
    return ServiceValidationError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_INVALID_AMOUNT,
        translation_placeholders={"amount": str(err.amount)},
    )


def _invalid_activity(err: EntityValidationError) -> ServiceValidationError:
    return ServiceValidationError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_INVALID_ACTIVITY,
        translation_placeholders={"field": err.field, "reason": err.translation_key},
    )


def _activity_data(call_data: dict[str, Any]) -> dict[str, Any]:
    return {
        data_key: call_data[field]
        for field, data_key in _ACTIVITY_FIELD_MAP.items()
        if field in call_data
    }


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Household Points services."""

    # --- Points ---

    async def handle_complete_activity(call: ServiceCall) -> dict[str, Any]:
        """Handle completing an activity for a member."""
        manager = _get_manager(hass, "Complete Activity")
        member_id = call.data[const.FIELD_MEMBER_ID]
        activity_id = call.data[const.FIELD_ACTIVITY_ID]

        try:
            result = await manager.async_complete_activity(member_id, activity_id)
        except ActivityNotFoundError as err:
            raise _activity_not_found(err) from err

        return {
            "awarded": result["awarded"],
            "base_points": result["base_points"],
            "bonus": result["bonus"],
            "streak": result["streak"],
            "cap_reached": result["cap_reached"],
            "goal_just_achieved": result["goal_just_achieved"],
            "balance": result["ledger"][const.DATA_LEDGER_BALANCE],
        }

    async def handle_adjust_points(call: ServiceCall) -> None:
        """Handle a manual balance adjustment."""
        manager = _get_manager(hass, "Adjust Points")
        try:
            await manager.async_adjust_points(
                call.data[const.FIELD_MEMBER_ID],
                call.data[const.FIELD_AMOUNT],
                call.data[const.FIELD_REASON],
            )
        except InvalidAmountError as err:
            raise _invalid_amount(err) from err

    async def handle_spend_points(call: ServiceCall) -> None:
        """Handle spending points on a reward."""
        manager = _get_manager(hass, "Spend Points")
        member_id = call.data[const.FIELD_MEMBER_ID]
        item_name = call.data[const.FIELD_ITEM_NAME]
        try:
            await manager.async_spend_points(
                member_id,
                call.data[const.FIELD_AMOUNT],
                item_name,
                call.data.get(const.FIELD_ITEM_ID),
            )
        except InvalidAmountError as err:
            raise _invalid_amount(err) from err
        except InsufficientFundsError as err:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INSUFFICIENT_FUNDS,
                translation_placeholders={
                    "member_id": member_id,
                    "item_name": item_name,
                    "balance": str(err.current_balance),
                    "amount": str(err.requested_amount),
                },
            ) from err
        const.LOGGER.info(
            "INFO: Member '%s' spent %s points on '%s'",
            member_id,
            call.data[const.FIELD_AMOUNT],
            item_name,
        )

    async def handle_award_task_points(call: ServiceCall) -> None:
        """Handle awarding configured task points."""
        manager = _get_manager(hass, "Award Task Points")
        await manager.async_award_task_points(
            call.data[const.FIELD_MEMBER_ID],
            call.data[const.FIELD_TASK_ID],
            call.data[const.FIELD_TASK_NAME],
            call.data[const.FIELD_MEMBER_TYPE],
        )

    async def handle_reset_today(call: ServiceCall) -> None:
        """Handle resetting today's completions."""
        manager = _get_manager(hass, "Reset Today")
        await manager.async_reset_today(
            call.data[const.FIELD_MEMBER_ID],
            call.data.get(const.FIELD_ACTIVITY_IDS),
        )

    # --- Catalog ---

    async def handle_add_activity(call: ServiceCall) -> dict[str, Any]:
        """Handle adding an activity to a member's catalog."""
        manager = _get_manager(hass, "Add Activity")
        try:
            activity = await manager.async_add_activity(
                call.data[const.FIELD_MEMBER_ID], _activity_data(dict(call.data))
            )
        except EntityValidationError as err:
            raise _invalid_activity(err) from err
        return {"activity": dict(activity)}

    async def handle_update_activity(call: ServiceCall) -> None:
        """Handle updating an activity."""
        manager = _get_manager(hass, "Update Activity")
        try:
            await manager.async_update_activity(
                call.data[const.FIELD_MEMBER_ID],
                call.data[const.FIELD_ACTIVITY_ID],
                _activity_data(dict(call.data)),
            )
        except ActivityNotFoundError as err:
            raise _activity_not_found(err) from err
        except EntityValidationError as err:
            raise _invalid_activity(err) from err

    async def handle_delete_activity(call: ServiceCall) -> None:
        """Handle deleting an activity."""
        manager = _get_manager(hass, "Delete Activity")
        try:
            await manager.async_delete_activity(
                call.data[const.FIELD_MEMBER_ID], call.data[const.FIELD_ACTIVITY_ID]
            )
        except ActivityNotFoundError as err:
            raise _activity_not_found(err) from err

    async def handle_set_daily_goal(call: ServiceCall) -> None:
        """Handle changing a member's daily goal."""
        manager = _get_manager(hass, "Set Daily Goal")
        await manager.async_set_daily_goal(
            call.data[const.FIELD_MEMBER_ID],
            call.data.get(const.FIELD_DAILY_GOAL),
            call.data.get(const.FIELD_ENABLED),
        )

    # --- Read ---

    async def handle_get_member_summary(call: ServiceCall) -> dict[str, Any]:
        """Handle returning a member's points summary."""
        manager = _get_manager(hass, "Get Member Summary")
        return await manager.async_get_member_summary(
            call.data[const.FIELD_MEMBER_ID], call.data[const.FIELD_MEMBER_TYPE]
        )

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_COMPLETE_ACTIVITY,
        handle_complete_activity,
        schema=COMPLETE_ACTIVITY_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADJUST_POINTS,
        handle_adjust_points,
        schema=ADJUST_POINTS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SPEND_POINTS,
        handle_spend_points,
        schema=SPEND_POINTS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_AWARD_TASK_POINTS,
        handle_award_task_points,
        schema=AWARD_TASK_POINTS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RESET_TODAY,
        handle_reset_today,
        schema=RESET_TODAY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_ACTIVITY,
        handle_add_activity,
        schema=ADD_ACTIVITY_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_ACTIVITY,
        handle_update_activity,
        schema=UPDATE_ACTIVITY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_ACTIVITY,
        handle_delete_activity,
        schema=DELETE_ACTIVITY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_DAILY_GOAL,
        handle_set_daily_goal,
        schema=SET_DAILY_GOAL_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_MEMBER_SUMMARY,
        handle_get_member_summary,
        schema=GET_MEMBER_SUMMARY_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    const.LOGGER.info("INFO: Household Points services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Household Points services when unloading the integration."""
    for service in const.ALL_SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Household Points services have been unregistered")
