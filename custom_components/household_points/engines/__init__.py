"""Engine modules for Household Points integration.

Contains specialized computation engines:
- ledger_engine: Activity completion, balance edits, reset today, catalog edits
- streak_engine: Consecutive active-day counting
- progression_engine: Level and rank derivation from lifetime XP
- goal_engine: Daily goal progress and achievement transition
- statistics_engine: Weekly and period summaries over history
"""

# Use relative imports within package to avoid mypy module resolution issues
from .goal_engine import DailyGoalEngine
from .ledger_engine import (
    ActivityNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    LedgerEngine,
    LedgerError,
)
from .progression_engine import ProgressionEngine
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine

__all__ = [
    "ActivityNotFoundError",
    "DailyGoalEngine",
    "InsufficientFundsError",
    "InvalidAmountError",
    "LedgerEngine",
    "LedgerError",
    "ProgressionEngine",
    "StatisticsEngine",
    "StreakEngine",
]
