# File: utils/__init__.py
"""Pure Python utilities for Household Points.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Local calendar dates, day stepping, week/month boundaries
    - math_utils: Half-up rounding, multipliers, percentages, clamping

Usage:
    from . import dt_utils
    from .math_utils import round_half_up
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
