"""
Numeric helpers for turning Wakapi durations into CSV cells.

This module holds the small conversions the pipeline applies to every
project/language entry: seconds to hours, top-N selection, and rendering
numbers the way they should appear in the CSV files.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, TypeVar, Union

T = TypeVar("T")

Number = Union[int, float]


def to_hours(seconds: Number) -> float:
    """
    Convert seconds to hours, rounded to 2 decimal places.

    **Mathematical**: hours = seconds / 3600, rounded half-up at the third
    decimal. Decimal arithmetic is used so that values landing exactly on a
    half (e.g. 0.125 h = 450 s) round up instead of following binary float
    representation.

    Args:
        seconds: Duration in seconds (int or float, non-negative expected).

    Returns:
        Hours as a float with at most 2 decimals.

    Example:
        >>> to_hours(5400)
        1.5
        >>> to_hours(100)
        0.03
    """
    hours = Decimal(str(seconds)) / Decimal(3600)
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def pick_top(items: Optional[Iterable[T]], n: int) -> List[T]:
    """
    Return the first n items, in their given order.

    The caller sorts beforehand (the pipeline sorts by descending seconds).

    Args:
        items: Items to take from. None is treated as empty.
        n: Maximum number of items to return.

    Returns:
        A new list with at most n items.

    Example:
        >>> pick_top([1, 2, 3, 4, 5], 3)
        [1, 2, 3]
        >>> pick_top(None, 3)
        []
    """
    if not items or n <= 0:
        return []
    return list(items)[:n]


def format_number(value: Optional[Number]) -> str:
    """
    Render a number for a CSV cell.

    Integral values are written without a fractional part so that whole
    seconds and whole hours read naturally (3600.0 → "3600", 1.0 → "1");
    other floats use Python's shortest repr (1.5 → "1.5"). None becomes "".

    Example:
        >>> format_number(to_hours(3600))
        '1'
        >>> format_number(98.73)
        '98.73'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
