"""Calendar arithmetic for recurring bookings and billing sweeps

Pure functions only. No clock access: callers pass ``today``.
"""

from calendar import monthrange
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional


class Frequency(str, Enum):
    """Cadence of a recurring template"""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class UnknownFrequencyError(ValueError):
    code = "UNKNOWN_FREQUENCY"


def parse_frequency(value: str) -> Frequency:
    """
    Parse a stored frequency string

    Raises:
        UnknownFrequencyError: value is not weekly, biweekly or monthly
    """
    try:
        return Frequency(value)
    except ValueError:
        raise UnknownFrequencyError(f"Unknown recurrence frequency: {value!r}")


def add_months(start: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Move ``start`` forward by whole calendar months

    The day of month is ``anchor_day`` (or ``start.day``) clamped to the
    last valid day of the target month, so Jan 31 + 1 month is Feb 28/29
    and never rolls into March.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = anchor_day or start.day
    _, last_day = monthrange(year, month)
    return date(year, month, min(day, last_day))


def advance_occurrence(
    current: date,
    frequency: Frequency,
    anchor_day: Optional[int] = None,
) -> date:
    """
    Return the occurrence following ``current``

    weekly +7 days, biweekly +14 days, monthly +1 calendar month with the
    day clamped (see ``add_months``). ``anchor_day`` keeps a monthly
    schedule pinned to its original day after a clamped month.
    """
    frequency = parse_frequency(frequency) if isinstance(frequency, str) else frequency
    if frequency == Frequency.WEEKLY:
        return current + timedelta(days=7)
    if frequency == Frequency.BIWEEKLY:
        return current + timedelta(days=14)
    return add_months(current, 1, anchor_day=anchor_day)


def is_overdue(due_date: Optional[date], today: date, amount_due: Decimal) -> bool:
    """True iff the due date has passed and money is still owed"""
    if due_date is None:
        return False
    return due_date < today and amount_due > 0


def tomorrow_window(today: date) -> date:
    """The date the reminder sweep targets"""
    return today + timedelta(days=1)
