"""
Formatting utilities.
"""

from typing import Optional, Union


def format_currency(amount: Optional[Union[int, float]], currency: str = "USD") -> str:
    """
    Format an amount as whole-unit currency.

    Args:
        amount: The amount (fractions are rounded); None renders as "-".
        currency: Currency code (default USD).

    Returns:
        Formatted currency string.
    """
    if amount is None:
        return "-"
    symbols = {
        "USD": "$",
        "GBP": "£",
        "EUR": "€",
    }
    symbol = symbols.get(currency, currency + " ")
    whole = int(round(amount))
    sign = "-" if whole < 0 else ""
    return f"{sign}{symbol}{abs(whole):,}"


def format_percent(value: float, decimals: int = 1) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string.
    """
    return f"{value:.{decimals}f}%"


def format_ratio(value: float, decimals: int = 2) -> str:
    """Format an equity ratio as a multiple, e.g. 5.00x."""
    return f"{value:.{decimals}f}x"
