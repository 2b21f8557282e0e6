"""Next-occurrence search for validated cron specs.

The search walks a candidate timestamp forward from one second after the
start time, testing each candidate with ``matches``. Between tests the
candidate is advanced by a coarse-to-fine skip heuristic that jumps over
stretches of time which cannot match. The heuristic only ever moves the
candidate forward and never past a matching timestamp; ``matches`` stays
the sole judge of what is returned.

Every search is bounded by an iteration budget, so specs that can never
fire (``0 0 0 31 2 *``) terminate with fewer results instead of hanging.

Example:
    >>> spec = CronSpec.parse("0 30 14 * * *")
    >>> next_occurrences(spec, datetime(2024, 1, 1), count=2)
    [datetime(2024, 1, 1, 14, 30), datetime(2024, 1, 2, 14, 30)]
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta, MAXYEAR
from typing import Iterator

from cronlens.scheduling.cron import CronSpec, matches

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 5
DEFAULT_MAX_ITERATIONS = 10_000
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_ONE_SECOND = timedelta(seconds=1)


def iter_occurrences(
    spec: CronSpec,
    after: datetime | None = None,
    *,
    count: int = DEFAULT_COUNT,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Iterator[datetime]:
    """Lazily yield up to ``count`` matching timestamps after ``after``.

    Each call starts a fresh search; nothing is shared between iterators.

    Args:
        spec: A validated cron spec.
        after: Start time (default: now). Sub-second precision is dropped.
        count: Maximum number of timestamps to yield.
        max_iterations: Maximum number of candidates to test.

    Yields:
        Matching timestamps in strictly increasing order.
    """
    if after is None:
        after = datetime.now()

    try:
        candidate = after.replace(microsecond=0) + _ONE_SECOND
    except OverflowError:
        return

    found = 0
    iterations = 0

    while found < count and iterations < max_iterations:
        iterations += 1

        if matches(spec, candidate):
            found += 1
            yield candidate

        try:
            candidate = next_candidate(spec, candidate)
        except OverflowError:
            logger.debug("Search for %r reached the end of the calendar", str(spec))
            return

    if found < count:
        logger.debug(
            "Iteration budget of %d exhausted for %r with %d of %d matches",
            max_iterations,
            str(spec),
            found,
            count,
        )


def next_occurrences(
    spec: CronSpec,
    after: datetime | None = None,
    count: int = DEFAULT_COUNT,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> list[datetime]:
    """Collect the next ``count`` matching timestamps.

    May return fewer (possibly none) when the iteration budget runs out.
    """
    return list(
        iter_occurrences(spec, after, count=count, max_iterations=max_iterations)
    )


def format_occurrence(dt: datetime, fmt: str = TIMESTAMP_FORMAT) -> str:
    return dt.strftime(fmt)


# =============================================================================
# Skip Heuristic
# =============================================================================


def next_candidate(spec: CronSpec, candidate: datetime) -> datetime:
    """Advance a candidate to the next timestamp worth testing.

    Rules, first applicable wins:
        1. Plain day-of-month: jump to the target day (this month or the next
           month that has it) once today is before it, past it, or out of
           matching times.
        2. Plain hour: jump to the target hour tomorrow once this hour is past
           or out of matching minutes/seconds.
        3. Plain second already reached: next minute at the target second.
        4. Complex seconds: one second forward.
        5. Plain minute passed: next hour at the target minute.
        6. One second forward.

    Jumps land on the earliest time of day that plain hour, minute and
    second fields allow; other time fields start at zero.

    Raises:
        OverflowError: The next candidate is past ``datetime.max``.
    """
    day = spec.days.plain_value
    hour = spec.hours.plain_value
    minute = spec.minutes.plain_value
    second = spec.seconds.plain_value

    if day is not None:
        if candidate.day > day or (
            candidate.day == day and not _time_left_today(spec, candidate)
        ):
            return _seed_time(spec, _next_month_on_day(candidate, day))
        if candidate.day < day:
            if day <= _days_in_month(candidate.year, candidate.month):
                return _seed_time(spec, candidate.replace(day=day))
            return _seed_time(spec, _next_month_on_day(candidate, day))

    if hour is not None and (
        candidate.hour > hour
        or (candidate.hour == hour and not _time_left_this_hour(spec, candidate))
    ):
        tomorrow = candidate + timedelta(days=1)
        return _seed_time(spec, tomorrow.replace(hour=hour))

    if second is not None and candidate.second >= second:
        return (candidate + timedelta(minutes=1)).replace(second=second)

    if second is None:
        return candidate + _ONE_SECOND

    if minute is not None and candidate.minute > minute:
        return (candidate + timedelta(hours=1)).replace(minute=minute, second=second)

    return candidate + _ONE_SECOND


def _seed_time(spec: CronSpec, dt: datetime) -> datetime:
    """Set the time of day to the earliest one plain fields allow."""
    hour = spec.hours.plain_value
    minute = spec.minutes.plain_value
    second = spec.seconds.plain_value
    return dt.replace(
        hour=hour if hour is not None else 0,
        minute=minute if minute is not None else 0,
        second=second if second is not None else 0,
        microsecond=0,
    )


def _time_left_today(spec: CronSpec, candidate: datetime) -> bool:
    """False when no later time today can satisfy the plain time fields."""
    hour = spec.hours.plain_value
    if hour is None or candidate.hour < hour:
        return True
    if candidate.hour > hour:
        return False
    return _time_left_this_hour(spec, candidate)


def _time_left_this_hour(spec: CronSpec, candidate: datetime) -> bool:
    """False when no later time this hour can satisfy the plain minute/second."""
    minute = spec.minutes.plain_value
    if minute is None or candidate.minute < minute:
        return True
    if candidate.minute > minute:
        return False

    second = spec.seconds.plain_value
    if second is None:
        return True
    # The candidate itself has already been tested
    return candidate.second < second


def _next_month_on_day(candidate: datetime, day: int) -> datetime:
    """Midnight of ``day`` in the first following month that has it."""
    year, month = candidate.year, candidate.month
    while True:
        month += 1
        if month > 12:
            year += 1
            month = 1
        if year > MAXYEAR:
            raise OverflowError("date value out of range")
        if day <= _days_in_month(year, month):
            return datetime(year, month, day)


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]
