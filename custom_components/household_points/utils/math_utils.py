# File: utils/math_utils.py
"""Math and calculation utilities for Household Points.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Points are whole numbers. Every fractional intermediate (streak bonus,
goal percentage, level progress) is rounded half-up, so 10.5 becomes 11
rather than Python's banker's-rounded 10.

Functions:
    - round_half_up: Integer rounding with .5 always rounding up
    - apply_multiplier: Multiplier arithmetic returning whole points
    - calculate_percentage: Progress percentage capped at 100
    - clamp: Bound a value to an inclusive range
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with exact halves rounding up.

    Examples:
        round_half_up(10.5) → 11
        round_half_up(10.49) → 10
        round_half_up(2.5) → 3  # round() would give 2
    """
    return math.floor(value + 0.5)


def apply_multiplier(base: int, multiplier: float) -> int:
    """Apply a multiplier to a base point value.

    Examples:
        apply_multiplier(10, 1.10) → 11
        apply_multiplier(10, 1.05) → 11
        apply_multiplier(7, 1.05) → 7
    """
    return round_half_up(base * multiplier)


def calculate_percentage(current: float, target: float) -> int:
    """Calculate a whole progress percentage, capped at 100.

    Returns:
        Percentage (0-100), or 0 if target is not positive

    Examples:
        calculate_percentage(15, 20) → 75
        calculate_percentage(30, 20) → 100
        calculate_percentage(5, 0) → 0  # Division by zero protection
    """
    if target <= 0:
        return 0
    return min(100, round_half_up((current / target) * 100))


def clamp(value: int, min_val: int, max_val: int) -> int:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 5, 100) → 100
        clamp(2, 5, 100) → 5
    """
    return max(min_val, min(value, max_val))
