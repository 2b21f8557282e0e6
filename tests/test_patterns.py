"""Tests for the recurrence pattern generator."""

import pytest
from datetime import datetime

from cronlens.scheduling import (
    CronSpec,
    GeneratedSchedule,
    PatternError,
    RecurrencePattern,
    generate_schedule,
    next_occurrences,
)
from cronlens.scheduling.patterns import (
    NO_TIME_DESCRIPTION,
    ordinal_suffix,
    parse_time,
)


# =============================================================================
# Daily Pattern Tests
# =============================================================================


class TestDailyPattern:
    """Tests for the daily pattern."""

    def test_daily(self):
        schedule = generate_schedule("daily", "14:30")
        assert schedule.description == "Runs every day at 14:30."
        assert schedule.expression == "0 30 14 * * *"

    def test_values_without_leading_zeros(self):
        """Test the expression drops leading zeros while the text keeps them."""
        schedule = generate_schedule(RecurrencePattern.DAILY, "09:05")
        assert schedule.description == "Runs every day at 09:05."
        assert schedule.expression == "0 5 9 * * *"

    def test_default_time(self):
        assert generate_schedule("daily").expression == "0 0 12 * * *"

    def test_generated_spec_is_valid(self):
        spec = generate_schedule("daily", "06:15").spec
        assert isinstance(spec, CronSpec)
        assert next_occurrences(spec, datetime(2024, 1, 1), count=1) == [
            datetime(2024, 1, 1, 6, 15)
        ]


# =============================================================================
# Weekly Pattern Tests
# =============================================================================


class TestWeeklyPattern:
    """Tests for the weekly pattern."""

    def test_selected_days_sorted(self):
        """Test weekdays are emitted Sunday first regardless of input order."""
        schedule = generate_schedule("weekly", "09:30", weekdays=["friday", "monday"])
        assert schedule.description == "Runs every week on Monday, Friday at 09:30."
        assert schedule.expression == "0 30 9 * * 1,5"

    def test_sunday_is_zero(self):
        schedule = generate_schedule("weekly", "08:00", weekdays=["saturday", "sunday"])
        assert schedule.expression == "0 0 8 * * 0,6"
        assert schedule.description == "Runs every week on Sunday, Saturday at 08:00."

    def test_single_day(self):
        schedule = generate_schedule("weekly", "18:45", weekdays=["Wednesday"])
        assert schedule.expression == "0 45 18 * * 3"

    def test_duplicates_collapse(self):
        schedule = generate_schedule("weekly", "10:00", weekdays=["monday", "MONDAY"])
        assert schedule.expression == "0 0 10 * * 1"

    def test_no_days_selected(self):
        """Test an empty selection falls back to every day."""
        schedule = generate_schedule("weekly", "07:00")
        assert schedule.description == "Runs every week at 07:00."
        assert schedule.expression == "0 0 7 * * *"

    def test_unknown_weekday(self):
        with pytest.raises(PatternError, match="Unknown weekday"):
            generate_schedule("weekly", "07:00", weekdays=["funday"])

    def test_generated_spec_fires_on_selected_days(self):
        """Test Jan 1, 2024 (Monday) and Jan 5 (Friday)."""
        spec = generate_schedule("weekly", "09:30", weekdays=["monday", "friday"]).spec
        assert next_occurrences(spec, datetime(2024, 1, 1), count=3) == [
            datetime(2024, 1, 1, 9, 30),
            datetime(2024, 1, 5, 9, 30),
            datetime(2024, 1, 8, 9, 30),
        ]


# =============================================================================
# Monthly Pattern Tests
# =============================================================================


class TestMonthlyPattern:
    """Tests for the monthly pattern."""

    def test_monthly(self):
        schedule = generate_schedule("monthly", "12:00", day_of_month=15)
        assert schedule.description == "Runs every month on the 15th day at 12:00."
        assert schedule.expression == "0 0 12 15 * *"

    @pytest.mark.parametrize(
        "day,text",
        [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"),
         (12, "12th"), (13, "13th"), (21, "21st"), (22, "22nd"), (23, "23rd"), (31, "31st")],
    )
    def test_ordinal_suffix(self, day, text):
        assert ordinal_suffix(day) == text

    @pytest.mark.parametrize("day", [0, 32, -1])
    def test_day_out_of_range(self, day):
        with pytest.raises(PatternError):
            generate_schedule("monthly", "12:00", day_of_month=day)

    def test_generated_spec(self):
        spec = generate_schedule("monthly", "00:00", day_of_month=1).spec
        assert spec.expression == "0 0 0 1 * *"


# =============================================================================
# Input Handling Tests
# =============================================================================


class TestPatternInputs:
    """Tests for time parsing and error handling."""

    def test_empty_time(self):
        """Test no time yields a prompt and no expression."""
        schedule = generate_schedule("daily", "")
        assert schedule == GeneratedSchedule(description=NO_TIME_DESCRIPTION, expression="")
        assert schedule.spec is None

    def test_unknown_pattern(self):
        with pytest.raises(PatternError, match="Unknown recurrence pattern"):
            generate_schedule("hourly", "10:00")

    def test_pattern_errors_are_value_errors(self):
        assert issubclass(PatternError, ValueError)

    def test_parse_time(self):
        assert parse_time("00:00") == (0, 0)
        assert parse_time("23:59") == (23, 59)
        assert parse_time("7:05") == (7, 5)

    @pytest.mark.parametrize("value", ["24:00", "12:60", "1200", "ab:cd", "12:", ":30"])
    def test_invalid_time(self, value):
        with pytest.raises(PatternError, match="Invalid time"):
            parse_time(value)
