"""Display formatting for KPI values.

- Currency: whole units with thousands separators and a currency suffix
- Ratios: X.XXx
- Percentages: X.XX%
- Integers: comma separators
"""

import math

CURRENCY_SUFFIX = "TL"


def _missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def format_currency(value: float | int | None, suffix: str = CURRENCY_SUFFIX) -> str:
    """Format a money value as whole units, e.g. ``12,345 TL``."""
    if _missing(value):
        return "N/A"
    return f"{value:,.0f} {suffix}".rstrip()


def format_ratio(value: float | int | None) -> str:
    """Format a return ratio such as ROAS as ``4.00x``."""
    if _missing(value):
        return "N/A"
    return f"{value:.2f}x"


def format_percentage(value: float | int | None) -> str:
    """Format a value already expressed in percent as ``X.XX%``."""
    if _missing(value):
        return "N/A"
    return f"{value:.2f}%"


def format_integer(value: float | int | None) -> str:
    """Format a whole number with comma separators."""
    if _missing(value):
        return "N/A"
    return f"{int(value):,}"


def format_amount(value: float | int | None) -> str:
    """Format a money value with two decimals, e.g. ``10.00``."""
    if _missing(value):
        return "N/A"
    return f"{value:,.2f}"
