"""
Clock abstractions and local date stamps.

This module provides a simple, testable way to obtain "now" via a clock object
rather than calling datetime.now() directly. The daily sync keys every row by
the local calendar date, so tests freeze the clock to check which date a run
writes under.

Unlike UTC timestamps, the date stamp here is deliberately local: a session at
23:30 local time belongs to that local day even if it is already tomorrow in UTC.
"""

import datetime as dt
from typing import Protocol, Union


class Clock(Protocol):
    """
    Abstract time source protocol.

    **Usage**: Consumers accept a Clock (constructor or function parameter) and
    call clock.now() whenever they need the current time. In production pass a
    RealClock; in tests pass a FrozenClock.
    """

    def now(self) -> dt.datetime:
        """Return the current time according to this clock."""
        ...


class RealClock:
    """
    Clock that returns the actual current system time in the local timezone.

    **Usage**:
        clock = RealClock()
        today = local_date_stamp(clock.now())
    """

    def now(self) -> dt.datetime:
        """Return the current local time as a timezone-aware datetime."""
        return dt.datetime.now().astimezone()


class FrozenClock:
    """
    Clock that always returns a fixed timestamp (for deterministic tests).

    **Usage**:
        clock = FrozenClock(dt.datetime(2026, 2, 14, 9, 30))
        clock.now()  # Always 2026-02-14 09:30
    """

    def __init__(self, fixed_now: dt.datetime):
        """
        Args:
            fixed_now: The datetime to return on every call to now().
        """
        self._fixed_now = fixed_now

    def now(self) -> dt.datetime:
        return self._fixed_now


def local_date_stamp(value: Union[dt.datetime, dt.date]) -> str:
    """
    Format a date as YYYY-MM-DD using its own calendar fields.

    For an aware datetime the fields are those of its own timezone; callers
    wanting the machine's local date pass a datetime already converted with
    astimezone() (RealClock does this). No UTC conversion happens here.

    Args:
        value: datetime or date.

    Returns:
        Zero-padded "YYYY-MM-DD".

    Example:
        >>> local_date_stamp(dt.date(2026, 1, 5))
        '2026-01-05'
    """
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
