# File: const.py
"""Constants for the Household Points integration.

This file centralizes configuration keys, defaults, storage keys, rank and
category tables, service names, and event names for consistency across the
integration.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
HOUSEHOLD_POINTS_TITLE = "Household Points"

# Integration Domain
DOMAIN = "household_points"

# Logger
LOGGER = logging.getLogger(__package__)

# hass.data keys
STORE = "store"
LEDGER_MANAGER = "ledger_manager"

# Storage and Versioning
STORAGE_KEY = "household_points_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Top-level storage sections
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_CREATED_AT = "created_at"
DATA_MEMBERS = "members"

# Per-member record kinds
STORE_KIND_POINTS = "points"

# ------------------------------------------------------------------------------------------------
# Configuration Keys & Defaults
# ------------------------------------------------------------------------------------------------
CONF_KID_TASK_POINTS = "kid_task_points"
CONF_TEEN_TASK_POINTS = "teen_task_points"
CONF_DEFAULT_DAILY_GOAL = "default_daily_goal"
CONF_DEFAULT_DAILY_GOAL_ENABLED = "default_daily_goal_enabled"

DEFAULT_KID_TASK_POINTS = 3
DEFAULT_TEEN_TASK_POINTS = 5
DEFAULT_DAILY_GOAL = 20
DEFAULT_DAILY_GOAL_ENABLED = True

DAILY_GOAL_MIN = 5
DAILY_GOAL_MAX = 100

TASK_POINTS_MAX = 1000

# ------------------------------------------------------------------------------------------------
# Member Types & Progression Tracks
# ------------------------------------------------------------------------------------------------
MEMBER_TYPE_KID = "kid"
MEMBER_TYPE_TEEN = "teen"
MEMBER_TYPES: Final = (MEMBER_TYPE_KID, MEMBER_TYPE_TEEN)

TRACK_STANDARD = "standard"
TRACK_ALTERNATE = "alternate"

MEMBER_TYPE_TRACKS: Final = {
    MEMBER_TYPE_KID: TRACK_STANDARD,
    MEMBER_TYPE_TEEN: TRACK_ALTERNATE,
}

# ------------------------------------------------------------------------------------------------
# Ledger Data Keys
# ------------------------------------------------------------------------------------------------
DATA_LEDGER_BALANCE = "balance"
DATA_LEDGER_ACTIVITIES = "activities"
DATA_LEDGER_TODAY_COMPLETED = "today_completed"
DATA_LEDGER_HISTORY = "history"
DATA_LEDGER_DAILY_GOAL = "daily_goal"
DATA_LEDGER_DAILY_GOAL_ENABLED = "daily_goal_enabled"
DATA_LEDGER_LIFETIME_XP = "lifetime_xp"

# Activity definition
DATA_ACTIVITY_ID = "id"
DATA_ACTIVITY_NAME = "name"
DATA_ACTIVITY_POINTS = "points"
DATA_ACTIVITY_ICON = "icon"
DATA_ACTIVITY_CATEGORY = "category"
DATA_ACTIVITY_MAX_PER_DAY = "max_per_day"
DATA_ACTIVITY_TIME_OF_DAY = "time_of_day"
DATA_ACTIVITY_REQUIRED = "required"

# Completion records and history entries share these keys
DATA_ENTRY_ACTIVITY_ID = "activity_id"
DATA_ENTRY_ACTIVITY_NAME = "activity_name"
DATA_ENTRY_ACTIVITY_ICON = "activity_icon"
DATA_ENTRY_DATE = "date"
DATA_ENTRY_COMPLETED_AT = "completed_at"
DATA_ENTRY_POINTS = "points"
DATA_ENTRY_BASE_POINTS = "base_points"
DATA_ENTRY_BONUS = "bonus"
DATA_ENTRY_TYPE = "type"

ENTRY_TYPE_EARNED = "earned"
ENTRY_TYPE_SPENT = "spent"
ENTRY_TYPE_DEDUCTED = "deducted"

# Retention: newest-first history keeps at most this many lines
HISTORY_MAX_ENTRIES = 100

# Activity defaults
DEFAULT_MAX_PER_DAY = 1
DEFAULT_ACTIVITY_POINTS = 5
DEFAULT_ACTIVITY_ICON = "star"
DEFAULT_ACTIVITY_CATEGORY = "custom"
DEFAULT_ADJUSTMENT_ICON = "sliders"
DEFAULT_SPEND_ICON = "gift"
DEFAULT_TASK_ICON = "check-square"

TIME_OF_DAY_ANY = "any"
TIME_OF_DAY_OPTIONS: Final = (TIME_OF_DAY_ANY, "morning", "afternoon", "evening")

ACTIVITY_ID_PREFIX = "act-"
ADJUSTMENT_ACTIVITY_ID = "manual-adjustment"

# ------------------------------------------------------------------------------------------------
# Streak Bonus & Leveling Curve
# ------------------------------------------------------------------------------------------------
# (minimum streak days, multiplier), highest tier first
STREAK_BONUS_TIERS: Final = ((7, 1.10), (3, 1.05))
STREAK_BONUS_NONE = 1.0

LEVEL_BASE_XP = 50
LEVEL_MULTIPLIER = 1.5
LEVEL_MAX = 50

# Rank thresholds shared by both tracks, ascending
RANK_KEY_LEVEL = "level"
RANK_KEY_NAME = "name"
RANK_KEY_COLOR = "color"
RANK_KEY_ICON = "icon"

RANKS_STANDARD: Final = (
    {"level": 1, "name": "Beginner", "color": "#9CA3AF", "icon": "seedling"},
    {"level": 5, "name": "Rising Star", "color": "#60A5FA", "icon": "star"},
    {"level": 10, "name": "Achiever", "color": "#34D399", "icon": "trophy"},
    {"level": 15, "name": "Champion", "color": "#A78BFA", "icon": "medal"},
    {"level": 20, "name": "Super Star", "color": "#F59E0B", "icon": "crown"},
    {"level": 30, "name": "Legend", "color": "#EF4444", "icon": "flame"},
    {"level": 40, "name": "Master", "color": "#EC4899", "icon": "gem"},
    {"level": 50, "name": "Ultimate", "color": "#8B5CF6", "icon": "sparkles"},
)

RANKS_ALTERNATE: Final = (
    {"level": 1, "name": "Novice", "color": "#9CA3AF", "icon": "user"},
    {"level": 5, "name": "Apprentice", "color": "#60A5FA", "icon": "zap"},
    {"level": 10, "name": "Skilled", "color": "#34D399", "icon": "target"},
    {"level": 15, "name": "Expert", "color": "#A78BFA", "icon": "award"},
    {"level": 20, "name": "Elite", "color": "#F59E0B", "icon": "star"},
    {"level": 30, "name": "Veteran", "color": "#EF4444", "icon": "shield"},
    {"level": 40, "name": "Master", "color": "#EC4899", "icon": "gem"},
    {"level": 50, "name": "Legendary", "color": "#8B5CF6", "icon": "crown"},
)

RANK_TABLES: Final = {
    TRACK_STANDARD: RANKS_STANDARD,
    TRACK_ALTERNATE: RANKS_ALTERNATE,
}

# ------------------------------------------------------------------------------------------------
# Activity Categories & Seed Catalog
# ------------------------------------------------------------------------------------------------
CATEGORY_HYGIENE = "hygiene"
CATEGORY_CHORES = "chores"
CATEGORY_SCHOOL = "school"
CATEGORY_HEALTH = "health"
CATEGORY_KINDNESS = "kindness"
CATEGORY_CUSTOM = "custom"

ACTIVITY_CATEGORIES: Final = (
    CATEGORY_HYGIENE,
    CATEGORY_CHORES,
    CATEGORY_SCHOOL,
    CATEGORY_HEALTH,
    CATEGORY_KINDNESS,
    CATEGORY_CUSTOM,
)

# Display names per member type; ids are shared
CATEGORY_NAMES: Final = {
    MEMBER_TYPE_KID: {
        CATEGORY_HYGIENE: "Hygiene",
        CATEGORY_CHORES: "Chores",
        CATEGORY_SCHOOL: "School",
        CATEGORY_HEALTH: "Health",
        CATEGORY_KINDNESS: "Kindness",
        CATEGORY_CUSTOM: "Other",
    },
    MEMBER_TYPE_TEEN: {
        CATEGORY_HYGIENE: "Self-Care",
        CATEGORY_CHORES: "Responsibilities",
        CATEGORY_SCHOOL: "Academics",
        CATEGORY_HEALTH: "Wellness",
        CATEGORY_KINDNESS: "Social",
        CATEGORY_CUSTOM: "Other",
    },
}

# Seed catalog: category -> (id stem, name, points, icon)
DEFAULT_ACTIVITIES: Final = {
    CATEGORY_HYGIENE: (
        ("brush-am", "Brush teeth (AM)", 3, "smile"),
        ("brush-pm", "Brush teeth (PM)", 3, "smile"),
        ("shower", "Take shower", 5, "droplets"),
    ),
    CATEGORY_CHORES: (
        ("bed", "Make bed", 5, "bed"),
        ("dishes", "Help with dishes", 8, "home"),
        ("room", "Clean room", 10, "home"),
    ),
    CATEGORY_SCHOOL: (
        ("homework", "Do homework", 10, "book"),
        ("read", "Read for 20 min", 7, "book-open"),
    ),
    CATEGORY_HEALTH: (),
    CATEGORY_KINDNESS: (),
    CATEGORY_CUSTOM: (),
}

# ------------------------------------------------------------------------------------------------
# Statistics
# ------------------------------------------------------------------------------------------------
STATS_TOP_ACTIVITIES_LIMIT = 5
STATS_CALENDAR_DAYS = 7
STATS_WEEK_DAYS = 7
STATS_HISTORY_DAYS = 14
STATS_INTENSITY_MAX = 4

# ------------------------------------------------------------------------------------------------
# Events & Signals
# ------------------------------------------------------------------------------------------------
# Dispatcher suffixes, formatted as household_points_{entry_id}_{suffix}
SIGNAL_SUFFIX_POINTS_CHANGED = "points_changed"
SIGNAL_SUFFIX_DAILY_GOAL_ACHIEVED = "daily_goal_achieved"
SIGNAL_SUFFIX_CATALOG_CHANGED = "catalog_changed"
LEDGER_SIGNAL_SUFFIXES: Final = frozenset(
    {
        SIGNAL_SUFFIX_POINTS_CHANGED,
        SIGNAL_SUFFIX_DAILY_GOAL_ACHIEVED,
        SIGNAL_SUFFIX_CATALOG_CHANGED,
    }
)

CATALOG_ACTION_ADDED = "added"
CATALOG_ACTION_UPDATED = "updated"
CATALOG_ACTION_DELETED = "deleted"

# Bus event for automations
EVENT_DAILY_GOAL_ACHIEVED = f"{DOMAIN}_daily_goal_achieved"

# ------------------------------------------------------------------------------------------------
# Services & Fields
# ------------------------------------------------------------------------------------------------
SERVICE_COMPLETE_ACTIVITY = "complete_activity"
SERVICE_ADJUST_POINTS = "adjust_points"
SERVICE_SPEND_POINTS = "spend_points"
SERVICE_AWARD_TASK_POINTS = "award_task_points"
SERVICE_RESET_TODAY = "reset_today"
SERVICE_ADD_ACTIVITY = "add_activity"
SERVICE_UPDATE_ACTIVITY = "update_activity"
SERVICE_DELETE_ACTIVITY = "delete_activity"
SERVICE_SET_DAILY_GOAL = "set_daily_goal"
SERVICE_GET_MEMBER_SUMMARY = "get_member_summary"

ALL_SERVICES: Final = (
    SERVICE_COMPLETE_ACTIVITY,
    SERVICE_ADJUST_POINTS,
    SERVICE_SPEND_POINTS,
    SERVICE_AWARD_TASK_POINTS,
    SERVICE_RESET_TODAY,
    SERVICE_ADD_ACTIVITY,
    SERVICE_UPDATE_ACTIVITY,
    SERVICE_DELETE_ACTIVITY,
    SERVICE_SET_DAILY_GOAL,
    SERVICE_GET_MEMBER_SUMMARY,
)

FIELD_MEMBER_ID = "member_id"
FIELD_MEMBER_TYPE = "member_type"
FIELD_ACTIVITY_ID = "activity_id"
FIELD_ACTIVITY_IDS = "activity_ids"
FIELD_AMOUNT = "amount"
FIELD_REASON = "reason"
FIELD_ITEM_NAME = "item_name"
FIELD_ITEM_ID = "item_id"
FIELD_TASK_ID = "task_id"
FIELD_TASK_NAME = "task_name"
FIELD_NAME = "name"
FIELD_POINTS = "points"
FIELD_ICON = "icon"
FIELD_CATEGORY = "category"
FIELD_MAX_PER_DAY = "max_per_day"
FIELD_TIME_OF_DAY = "time_of_day"
FIELD_REQUIRED = "required"
FIELD_DAILY_GOAL = "daily_goal"
FIELD_ENABLED = "enabled"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_NO_ENTRY = "no_entry"
TRANS_KEY_ERROR_ACTIVITY_NOT_FOUND = "activity_not_found"
TRANS_KEY_ERROR_INVALID_AMOUNT = "invalid_amount"
TRANS_KEY_ERROR_INSUFFICIENT_FUNDS = "insufficient_funds"
TRANS_KEY_ERROR_INVALID_ACTIVITY = "invalid_activity"

TRANS_KEY_CFOF_ACTIVITY_NAME_REQUIRED = "activity_name_required"
TRANS_KEY_CFOF_DUPLICATE_ACTIVITY = "duplicate_activity"
TRANS_KEY_CFOF_INVALID_POINTS = "invalid_points"
TRANS_KEY_CFOF_INVALID_MAX_PER_DAY = "invalid_max_per_day"
TRANS_KEY_CFOF_INVALID_CATEGORY = "invalid_category"
TRANS_KEY_CFOF_INVALID_TIME_OF_DAY = "invalid_time_of_day"
TRANS_KEY_CFOF_SINGLE_INSTANCE = "single_instance_allowed"
