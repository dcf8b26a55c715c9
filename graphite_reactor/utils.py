"""
Utility Functions for the Graphite Chamber Model

This module provides helper functions for unit conversions,
numeric guards and formatting.
"""

import math
import logging

from scipy.constants import zero_Celsius

logger = logging.getLogger(__name__)


def celsius_to_kelvin(celsius: float) -> float:
    """Convert temperature from Celsius to Kelvin."""
    return celsius + zero_Celsius


def kelvin_to_celsius(kelvin: float) -> float:
    """Convert temperature from Kelvin to Celsius."""
    return kelvin - zero_Celsius


def clamp(value: float, lower: float, upper: float) -> float:
    """Limit ``value`` to the closed range [lower, upper]."""
    return max(lower, min(upper, value))


def finite_or_zero(value: float, label: str = "value") -> float:
    """
    Replace a non-finite number with zero.

    NaN and infinities are logged as a warning so the fault stays visible
    while the caller keeps running with a safe value.

    Args:
        value: Number to check
        label: Name of the quantity, used in the warning

    Returns:
        ``value`` when finite, otherwise 0.0
    """
    if math.isfinite(value):
        return value
    logger.warning("Invalid %s %r replaced with 0", label, value)
    return 0.0


def format_scientific(value: float, precision: int = 3) -> str:
    """
    Format a number in scientific notation.

    Args:
        value: Number to format
        precision: Number of decimal places

    Returns:
        Formatted string
    """
    if value == 0:
        return "0"
    return f"{value:.{precision}e}"
