"""Formatting utilities for currency and percentage display."""

from __future__ import annotations

from typing import Union


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a currency amount with proper formatting.

    Negative amounts keep the minus sign in front of the dollar sign.

    Args:
        amount: The amount to format
        include_sign: Whether to include the dollar sign

    Returns:
        Formatted currency string (e.g., "$1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-50)
        '-$50.00'
    """
    formatted = f"{abs(amount):,.2f}"
    if include_sign:
        formatted = f"${formatted}"
    return f"-{formatted}" if amount < 0 else formatted


def format_percentage(value: Union[float, int]) -> str:
    """Format a percentage with one decimal place.

    Example:
        >>> format_percentage(12.345)
        '12.3%'
    """
    return f"{value:.1f}%"
