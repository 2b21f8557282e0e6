"""Recurrence pattern generator.

Builds fixed-shape cron expressions, with a plain English description,
from a handful of choices: daily, weekly on selected days, or monthly on a
day of the month. The generator only emits strings; evaluating them is the
job of ``CronSpec`` and the search module.

Example:
    >>> schedule = generate_schedule("weekly", "09:30", weekdays=["friday", "monday"])
    >>> schedule.expression
    '0 30 9 * * 1,5'
    >>> schedule.description
    'Runs every week on Monday, Friday at 09:30.'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from cronlens.scheduling.cron import CronSpec


class PatternError(ValueError):
    """Raised for unknown patterns or malformed inputs."""


class RecurrencePattern(str, Enum):
    """Supported recurrence choices."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# Sunday first, so the index is the cron day-of-week number
WEEKDAYS: tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

NO_TIME_DESCRIPTION = "Please select a time"


@dataclass(frozen=True)
class GeneratedSchedule:
    """A generated cron expression and its description."""

    description: str
    expression: str

    @property
    def spec(self) -> CronSpec | None:
        """The parsed expression, or None when nothing was generated."""
        if not self.expression:
            return None
        return CronSpec.parse(self.expression)


def generate_schedule(
    pattern: RecurrencePattern | str,
    time: str = "12:00",
    *,
    weekdays: Iterable[str] = (),
    day_of_month: int = 1,
) -> GeneratedSchedule:
    """Generate a cron expression from recurrence choices.

    Args:
        pattern: ``daily``, ``weekly`` or ``monthly``.
        time: Time of day as ``HH:MM``. Empty means no time chosen yet.
        weekdays: Day names for the weekly pattern, any order.
        day_of_month: Day (1-31) for the monthly pattern.

    Returns:
        GeneratedSchedule with description and expression.

    Raises:
        PatternError: Unknown pattern, malformed time, unknown weekday
            or day out of range.
    """
    try:
        pattern = RecurrencePattern(pattern)
    except ValueError:
        raise PatternError(f"Unknown recurrence pattern: {pattern}") from None

    if not time:
        return GeneratedSchedule(description=NO_TIME_DESCRIPTION, expression="")

    hour, minute = parse_time(time)
    at = f"{hour:02d}:{minute:02d}"

    if pattern is RecurrencePattern.DAILY:
        return GeneratedSchedule(
            description=f"Runs every day at {at}.",
            expression=f"0 {minute} {hour} * * *",
        )

    if pattern is RecurrencePattern.WEEKLY:
        selected = _select_weekdays(weekdays)
        if not selected:
            return GeneratedSchedule(
                description=f"Runs every week at {at}.",
                expression=f"0 {minute} {hour} * * *",
            )
        days_text = ", ".join(WEEKDAYS[d].capitalize() for d in selected)
        day_numbers = ",".join(str(d) for d in selected)
        return GeneratedSchedule(
            description=f"Runs every week on {days_text} at {at}.",
            expression=f"0 {minute} {hour} * * {day_numbers}",
        )

    if not 1 <= day_of_month <= 31:
        raise PatternError(f"Day of month must be 1-31, got {day_of_month}")
    return GeneratedSchedule(
        description=(
            f"Runs every month on the {ordinal_suffix(day_of_month)} day at {at}."
        ),
        expression=f"0 {minute} {hour} {day_of_month} * *",
    )


def parse_time(value: str) -> tuple[int, int]:
    """Parse ``HH:MM`` into (hour, minute)."""
    hours, sep, minutes = value.partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit():
        raise PatternError(f"Invalid time {value!r}, expected HH:MM")

    hour, minute = int(hours), int(minutes)
    if hour > 23 or minute > 59:
        raise PatternError(f"Invalid time {value!r}, expected HH:MM")
    return hour, minute


def ordinal_suffix(day: int) -> str:
    """Render 1 as '1st', 2 as '2nd', 11 as '11th' and so on."""
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _select_weekdays(names: Iterable[str]) -> list[int]:
    """Day numbers for the given names, Sunday first, without duplicates."""
    numbers = set()
    for name in names:
        key = name.strip().lower()
        if key not in WEEKDAYS:
            raise PatternError(f"Unknown weekday: {name}")
        numbers.add(WEEKDAYS.index(key))
    return sorted(numbers)
