"""Ledger and activity construction helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Activity field defaults
- Activity business-rule validation
- Complete activity structure building
- Seeding a new member's ledger with the default catalog
- Recovering stored ledgers with missing or legacy fields

### Build Functions
`build_activity()` takes service input (DATA_* keys), generates an id for new
activities, applies field defaults, and returns a complete dict ready for
storage. The same function handles updates by layering input over the existing
activity.

### Validation Functions
`validate_activity_data()` returns a dict of errors (empty if valid). It is
called by services before building.

### Ledger Recovery
`normalize_ledger()` is applied on every store read. A stored ledger missing
its lists gets empty ones (or the seed catalog for activities) instead of
failing, and camelCase keys from older exports are renamed.

Consumers:
- managers/ledger_manager.py
- services.py
"""

from __future__ import annotations

import copy
from typing import Any
import uuid

from . import const
from .type_defs import ActivityData, CompletionRecord, LedgerData

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_list_field(value: Any) -> list[Any]:
    """Normalize a field that should be a list.

    None and non-list values become an empty list; only a real list is kept.
    """
    if isinstance(value, list):
        return value
    return []


def _coerce_int(value: Any, default: int) -> int:
    """Return value as int, or default when it cannot be read as one."""
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _new_activity_id(stem: str | None = None) -> str:
    suffix = uuid.uuid4().hex[:8]
    if stem:
        return f"{const.ACTIVITY_ID_PREFIX}{stem}-{suffix}"
    return f"{const.ACTIVITY_ID_PREFIX}{suffix}"


# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The DATA_* key of the field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders

    Example:
        raise EntityValidationError(
            field=const.DATA_ACTIVITY_NAME,
            translation_key=const.TRANS_KEY_CFOF_ACTIVITY_NAME_REQUIRED,
        )
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


# ==============================================================================
# ACTIVITIES
# ==============================================================================


def validate_activity_data(
    data: dict[str, Any],
    existing_activities: list[ActivityData] | None = None,
    *,
    is_update: bool = False,
    current_activity_id: str | None = None,
) -> dict[str, str]:
    """Validate activity business rules.

    Args:
        data: Activity data dict with DATA_ACTIVITY_* keys
        existing_activities: The member's catalog, for duplicate checking
        is_update: True if updating an existing activity
        current_activity_id: ID being updated (excluded from duplicate check)

    Returns:
        Dict of errors: {field: translation_key}. Empty dict means valid.

    Validation Rules:
        1. Name not empty (create) or not blank (update if provided)
        2. Name not duplicate within the member's catalog
        3. Points is an integer >= 0
        4. max_per_day is an integer >= 1
        5. Category and time of day are known values
    """
    errors: dict[str, str] = {}

    # === 1. Name ===
    name = data.get(const.DATA_ACTIVITY_NAME, "")
    if isinstance(name, str):
        name = name.strip()

    if (not is_update or const.DATA_ACTIVITY_NAME in data) and not name:
        errors[const.DATA_ACTIVITY_NAME] = const.TRANS_KEY_CFOF_ACTIVITY_NAME_REQUIRED
        return errors

    # === 2. Duplicate name ===
    if name and existing_activities:
        for activity in existing_activities:
            if activity.get(const.DATA_ACTIVITY_ID) == current_activity_id:
                continue
            if activity.get(const.DATA_ACTIVITY_NAME) == name:
                errors[const.DATA_ACTIVITY_NAME] = (
                    const.TRANS_KEY_CFOF_DUPLICATE_ACTIVITY
                )
                return errors

    # === 3. Points ===
    if const.DATA_ACTIVITY_POINTS in data:
        points = _coerce_int(data[const.DATA_ACTIVITY_POINTS], -1)
        if points < 0:
            errors[const.DATA_ACTIVITY_POINTS] = const.TRANS_KEY_CFOF_INVALID_POINTS

    # === 4. Max per day ===
    if const.DATA_ACTIVITY_MAX_PER_DAY in data:
        max_per_day = _coerce_int(data[const.DATA_ACTIVITY_MAX_PER_DAY], 0)
        if max_per_day < 1:
            errors[const.DATA_ACTIVITY_MAX_PER_DAY] = (
                const.TRANS_KEY_CFOF_INVALID_MAX_PER_DAY
            )

    # === 5. Enumerations ===
    category = data.get(const.DATA_ACTIVITY_CATEGORY)
    if category is not None and category not in const.ACTIVITY_CATEGORIES:
        errors[const.DATA_ACTIVITY_CATEGORY] = const.TRANS_KEY_CFOF_INVALID_CATEGORY

    time_of_day = data.get(const.DATA_ACTIVITY_TIME_OF_DAY)
    if time_of_day is not None and time_of_day not in const.TIME_OF_DAY_OPTIONS:
        errors[const.DATA_ACTIVITY_TIME_OF_DAY] = (
            const.TRANS_KEY_CFOF_INVALID_TIME_OF_DAY
        )

    return errors


def build_activity(
    user_input: dict[str, Any],
    existing: ActivityData | None = None,
) -> ActivityData:
    """Build activity data for create or update operations.

    Args:
        user_input: Data with DATA_ACTIVITY_* keys (may have missing fields)
        existing: None for create, the current activity for update

    Returns:
        Complete ActivityData ready for storage

    Raises:
        EntityValidationError: If the resulting name is empty

    Examples:
        # CREATE mode - generates an id, applies defaults for missing fields
        activity = build_activity({DATA_ACTIVITY_NAME: "Feed the cat"})

        # UPDATE mode - preserves existing fields not in user_input
        activity = build_activity({DATA_ACTIVITY_POINTS: 8}, existing=old)
    """

    def get_field(data_key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if data_key in user_input:
            return user_input[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    raw_name = get_field(const.DATA_ACTIVITY_NAME, "")
    name = str(raw_name).strip() if raw_name else ""
    if not name:
        raise EntityValidationError(
            field=const.DATA_ACTIVITY_NAME,
            translation_key=const.TRANS_KEY_CFOF_ACTIVITY_NAME_REQUIRED,
        )

    if existing is None:
        activity_id = _new_activity_id()
    else:
        activity_id = existing.get(const.DATA_ACTIVITY_ID) or _new_activity_id()

    return ActivityData(
        id=activity_id,
        name=name,
        points=max(
            0,
            _coerce_int(
                get_field(const.DATA_ACTIVITY_POINTS, const.DEFAULT_ACTIVITY_POINTS),
                const.DEFAULT_ACTIVITY_POINTS,
            ),
        ),
        icon=str(get_field(const.DATA_ACTIVITY_ICON, const.DEFAULT_ACTIVITY_ICON)),
        category=str(
            get_field(const.DATA_ACTIVITY_CATEGORY, const.DEFAULT_ACTIVITY_CATEGORY)
        ),
        max_per_day=max(
            1,
            _coerce_int(
                get_field(const.DATA_ACTIVITY_MAX_PER_DAY, const.DEFAULT_MAX_PER_DAY),
                const.DEFAULT_MAX_PER_DAY,
            ),
        ),
        time_of_day=str(
            get_field(const.DATA_ACTIVITY_TIME_OF_DAY, const.TIME_OF_DAY_ANY)
        ),
        required=bool(get_field(const.DATA_ACTIVITY_REQUIRED, False)),
    )


def build_default_activities() -> list[ActivityData]:
    """Build the seed catalog. Ids get a random suffix per member."""
    return [
        ActivityData(
            id=_new_activity_id(stem),
            name=name,
            points=points,
            icon=icon,
            category=category,
            max_per_day=const.DEFAULT_MAX_PER_DAY,
            time_of_day=const.TIME_OF_DAY_ANY,
            required=False,
        )
        for category in const.ACTIVITY_CATEGORIES
        for stem, name, points, icon in const.DEFAULT_ACTIVITIES[category]
    ]


# ==============================================================================
# LEDGERS
# ==============================================================================


def build_default_ledger(
    daily_goal: int = const.DEFAULT_DAILY_GOAL,
    daily_goal_enabled: bool = const.DEFAULT_DAILY_GOAL_ENABLED,
) -> LedgerData:
    """Build a fresh ledger for a member seen for the first time."""
    return LedgerData(
        balance=0,
        activities=build_default_activities(),
        today_completed=[],
        history=[],
        daily_goal=daily_goal,
        daily_goal_enabled=daily_goal_enabled,
        lifetime_xp=0,
    )


def build_completion_records(
    history: list[dict[str, Any]], day: str | None = None
) -> list[CompletionRecord]:
    """Rebuild completion records from earned history lines.

    Used when a stored ledger lost its today_completed list. Each earned line
    becomes one record with the same date and points, oldest first, so the
    date-filtered totals match what the history says. With day set, only
    that day's lines are used.
    """
    return [
        CompletionRecord(
            activity_id=entry.get(const.DATA_ENTRY_ACTIVITY_ID, ""),
            date=entry.get(const.DATA_ENTRY_DATE, ""),
            points=_coerce_int(entry.get(const.DATA_ENTRY_POINTS), 0),
            base_points=_coerce_int(
                entry.get(const.DATA_ENTRY_BASE_POINTS),
                _coerce_int(entry.get(const.DATA_ENTRY_POINTS), 0),
            ),
            bonus=_coerce_int(entry.get(const.DATA_ENTRY_BONUS), 0),
            completed_at=entry.get(const.DATA_ENTRY_COMPLETED_AT, ""),
        )
        for entry in reversed(history)
        if isinstance(entry, dict)
        and entry.get(const.DATA_ENTRY_TYPE) == const.ENTRY_TYPE_EARNED
        and (day is None or entry.get(const.DATA_ENTRY_DATE) == day)
    ]


# camelCase keys written by older exports → current keys
_LEGACY_KEYS: dict[str, str] = {
    "todayCompleted": const.DATA_LEDGER_TODAY_COMPLETED,
    "dailyGoal": const.DATA_LEDGER_DAILY_GOAL,
    "dailyGoalEnabled": const.DATA_LEDGER_DAILY_GOAL_ENABLED,
    "lifetimeXP": const.DATA_LEDGER_LIFETIME_XP,
    "maxPerDay": const.DATA_ACTIVITY_MAX_PER_DAY,
    "timeOfDay": const.DATA_ACTIVITY_TIME_OF_DAY,
    "activityId": const.DATA_ENTRY_ACTIVITY_ID,
    "activityName": const.DATA_ENTRY_ACTIVITY_NAME,
    "activityIcon": const.DATA_ENTRY_ACTIVITY_ICON,
    "completedAt": const.DATA_ENTRY_COMPLETED_AT,
    "basePoints": const.DATA_ENTRY_BASE_POINTS,
}


def _rename_legacy_keys(item: dict[str, Any]) -> bool:
    """Rename legacy keys in place. Returns True if anything changed."""
    changed = False
    for old_key, new_key in _LEGACY_KEYS.items():
        if old_key in item:
            value = item.pop(old_key)
            item.setdefault(new_key, value)
            changed = True
    return changed


def normalize_ledger(
    raw: Any,
    *,
    daily_goal: int = const.DEFAULT_DAILY_GOAL,
    daily_goal_enabled: bool = const.DEFAULT_DAILY_GOAL_ENABLED,
) -> tuple[LedgerData, bool]:
    """Return a complete ledger built from whatever was stored.

    Args:
        raw: Stored value (None, a partial dict, or a complete ledger)
        daily_goal: Goal to use when the stored ledger has none
        daily_goal_enabled: Goal flag to use when the stored ledger has none

    Returns:
        (ledger, changed). changed is True when the result differs from raw
        and should be written back.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            const.LOGGER.debug(
                "DEBUG: Discarding malformed ledger of type %s", type(raw).__name__
            )
        return build_default_ledger(daily_goal, daily_goal_enabled), True

    ledger: dict[str, Any] = copy.deepcopy(raw)
    changed = _rename_legacy_keys(ledger)

    if not isinstance(ledger.get(const.DATA_LEDGER_ACTIVITIES), list):
        const.LOGGER.debug("DEBUG: Ledger has no activities, seeding defaults")
        ledger[const.DATA_LEDGER_ACTIVITIES] = build_default_activities()
        changed = True

    records_missing = not isinstance(
        ledger.get(const.DATA_LEDGER_TODAY_COMPLETED), list
    )
    for key in (const.DATA_LEDGER_TODAY_COMPLETED, const.DATA_LEDGER_HISTORY):
        if not isinstance(ledger.get(key), list):
            const.LOGGER.debug("DEBUG: Ledger missing '%s', defaulting to []", key)
            ledger[key] = _normalize_list_field(ledger.get(key))
            changed = True

    for collection in (
        const.DATA_LEDGER_ACTIVITIES,
        const.DATA_LEDGER_TODAY_COMPLETED,
        const.DATA_LEDGER_HISTORY,
    ):
        items = [item for item in ledger[collection] if isinstance(item, dict)]
        if len(items) != len(ledger[collection]):
            changed = True
        for item in items:
            changed = _rename_legacy_keys(item) or changed
        ledger[collection] = items

    if records_missing and ledger[const.DATA_LEDGER_HISTORY]:
        ledger[const.DATA_LEDGER_TODAY_COMPLETED] = build_completion_records(
            ledger[const.DATA_LEDGER_HISTORY]
        )

    for activity in ledger[const.DATA_LEDGER_ACTIVITIES]:
        for key, default in (
            (const.DATA_ACTIVITY_MAX_PER_DAY, const.DEFAULT_MAX_PER_DAY),
            (const.DATA_ACTIVITY_ICON, const.DEFAULT_ACTIVITY_ICON),
            (const.DATA_ACTIVITY_CATEGORY, const.DEFAULT_ACTIVITY_CATEGORY),
            (const.DATA_ACTIVITY_TIME_OF_DAY, const.TIME_OF_DAY_ANY),
            (const.DATA_ACTIVITY_REQUIRED, False),
        ):
            if key not in activity:
                activity[key] = default
                changed = True

    balance = _coerce_int(ledger.get(const.DATA_LEDGER_BALANCE), 0)
    if balance < 0:
        balance = 0
    if ledger.get(const.DATA_LEDGER_BALANCE) != balance:
        ledger[const.DATA_LEDGER_BALANCE] = balance
        changed = True

    if const.DATA_LEDGER_DAILY_GOAL not in ledger:
        ledger[const.DATA_LEDGER_DAILY_GOAL] = daily_goal
        changed = True
    if const.DATA_LEDGER_DAILY_GOAL_ENABLED not in ledger:
        ledger[const.DATA_LEDGER_DAILY_GOAL_ENABLED] = daily_goal_enabled
        changed = True

    return ledger, changed  # type: ignore[return-value]
