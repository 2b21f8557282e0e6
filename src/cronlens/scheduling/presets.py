"""Predefined six-field cron expressions.

Presets are fixed literal expressions offered as starting points; they are
parsed once at import time like any other input.

Usage:
    >>> from cronlens.scheduling.presets import DAILY, get_preset
    >>> DAILY.expression
    '0 0 0 * * *'
    >>> get_preset("weekdays-9am").expression
    '0 0 9 * * 1-5'
"""

from cronlens.scheduling.cron import CronSpec


# =============================================================================
# Sub-hour Intervals
# =============================================================================

EVERY_SECOND = CronSpec.parse("* * * * * *")

EVERY_MINUTE = CronSpec.parse("0 * * * * *")

EVERY_5_MINUTES = CronSpec.parse("0 */5 * * * *")

EVERY_15_MINUTES = CronSpec.parse("0 */15 * * * *")

EVERY_30_MINUTES = CronSpec.parse("0 */30 * * * *")


# =============================================================================
# Calendar Intervals
# =============================================================================

# Top of every hour
HOURLY = CronSpec.parse("0 0 * * * *")

# Every day at midnight
DAILY = CronSpec.parse("0 0 0 * * *")
MIDNIGHT = DAILY

# Every day at 12:00
NOON = CronSpec.parse("0 0 12 * * *")

# Monday-Friday at 9 AM
WEEKDAYS_9AM = CronSpec.parse("0 0 9 * * 1-5")

# Every Sunday at midnight
WEEKLY = CronSpec.parse("0 0 0 * * SUN")

# First day of every month at midnight
MONTHLY = CronSpec.parse("0 0 0 1 * *")

# January 1st at midnight
YEARLY = CronSpec.parse("0 0 0 1 JAN *")
ANNUALLY = YEARLY


# =============================================================================
# Preset Registry
# =============================================================================

PRESETS: dict[str, CronSpec] = {
    "every_second": EVERY_SECOND,
    "every_minute": EVERY_MINUTE,
    "every_5_minutes": EVERY_5_MINUTES,
    "every_15_minutes": EVERY_15_MINUTES,
    "every_30_minutes": EVERY_30_MINUTES,
    "hourly": HOURLY,
    "daily": DAILY,
    "midnight": MIDNIGHT,
    "noon": NOON,
    "weekdays_9am": WEEKDAYS_9AM,
    "weekly": WEEKLY,
    "monthly": MONTHLY,
    "yearly": YEARLY,
    "annually": ANNUALLY,
}


def get_preset(name: str) -> CronSpec | None:
    """Get a preset by name (case-insensitive, ``-`` and ``_`` interchangeable)."""
    return PRESETS.get(name.lower().replace("-", "_"))


def list_presets() -> list[str]:
    return list(PRESETS.keys())
