"""Manager modules for Household Points integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and handle persistence.
"""

from .base_manager import BaseManager
from .ledger_manager import LedgerManager

__all__ = [
    "BaseManager",
    "LedgerManager",
]
