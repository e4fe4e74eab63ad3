"""
Recurring event date generation.

All arithmetic runs on UTC calendar fields so that weekly series keep the
same UTC time across daylight-saving transitions. The client preview and the
server must agree on the occurrence count, so the rules here are exact:

- weekly: +7 days, biweekly: +14 days
- monthly: same day of month as the first occurrence, clamped to the last
  day of shorter months (Jan 31 -> Feb 28 -> Mar 31, never Mar 28)
- generation stops once the next candidate is strictly after ``until`` or
  52 occurrences exist
"""

from datetime import datetime
from enum import Enum
from typing import Iterator, List, Union

import pendulum
from pendulum import DateTime

MAX_RECURRENCE_INSTANCES = 52

DateInput = Union[DateTime, datetime, str]


class Frequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


_DAY_STEPS = {
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 14,
}


def to_utc(value: DateInput) -> DateTime:
    """
    Normalize a date input to a UTC pendulum DateTime.

    Date-only strings ("2026-01-05") mean midnight UTC. Naive datetimes are
    taken as UTC.
    """
    if isinstance(value, str):
        parsed = pendulum.parse(value, tz="UTC")
        if not isinstance(parsed, DateTime):
            raise ValueError(f"Could not parse datetime: {value}")
        return parsed.in_timezone("UTC")

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz="UTC")
        return pendulum.instance(value).in_timezone("UTC")

    raise TypeError(f"Unsupported date value: {value!r}")


def _monthly_occurrence(start: DateTime, months_ahead: int) -> DateTime:
    """The start shifted by whole months, clamped to the target month's length."""
    first_of_month = start.set(day=1).add(months=months_ahead)
    day = min(start.day, first_of_month.days_in_month)
    return first_of_month.set(day=day)


def iter_recurring_dates(start: DateInput, frequency: Union[Frequency, str], until: DateInput) -> Iterator[DateTime]:
    """Yield occurrences lazily; see ``generate_recurring_dates``."""
    frequency = Frequency(frequency)
    first = to_utc(start)
    limit = to_utc(until)

    yield first
    emitted = 1

    while emitted < MAX_RECURRENCE_INSTANCES:
        if frequency is Frequency.MONTHLY:
            candidate = _monthly_occurrence(first, emitted)
        else:
            candidate = first.add(days=_DAY_STEPS[frequency] * emitted)

        if candidate > limit:
            return

        yield candidate
        emitted += 1


def generate_recurring_dates(
    start: DateInput,
    frequency: Union[Frequency, str],
    until: DateInput,
) -> List[DateTime]:
    """
    Generate the occurrence dates of a recurring event.

    Args:
        start: First occurrence (always part of the result)
        frequency: weekly, biweekly or monthly
        until: Last instant an occurrence may fall on (inclusive)

    Returns:
        UTC DateTimes, at most MAX_RECURRENCE_INSTANCES of them. When
        ``until`` is not after ``start`` only the start is returned.
    """
    return list(iter_recurring_dates(start, frequency, until))


def count_occurrences(start: DateInput, frequency: Union[Frequency, str], until: DateInput) -> int:
    """Number of occurrences ``generate_recurring_dates`` would produce."""
    return sum(1 for _ in iter_recurring_dates(start, frequency, until))
