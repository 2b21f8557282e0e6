"""Six-field cron expression parser, validator and matcher.

This module turns a whitespace separated cron string into an immutable
``CronSpec`` and decides whether a calendar timestamp satisfies it.

Field layout:
    Position  Label       Values              Shapes
    ──────────────────────────────────────────────────────────
    1         seconds     0-59                * N a-b b/s a,b,c
    2         minutes     0-59                * N a-b b/s a,b,c
    3         hours       0-23                * N a-b b/s a,b,c
    4         days        1-31                * N a-b b/s a,b,c
    5         month       1-12 or JAN-DEC     * N a-b b/s a,b,c
    6         dayOfWeek   0-7 or SUN-SAT      * N a-b b/s a,b,c

A field holds exactly one shape. The shape is chosen by scanning for ``-``,
then ``/``, then ``,``; the first delimiter found wins. Names are accepted
only as a whole single-value token. In the day-of-week field a plain 7
denotes Sunday like 0; a 7 inside a list, range or step is not aliased.

All six fields must match for a timestamp to match. Day-of-month and
day-of-week are ANDed like every other field, even when both are restricted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Sequence

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class CronValidationError(ValueError):
    """Base class for cron validation failures.

    Attributes:
        field: Label of the offending field, or None for structural errors.
        fragment: Smallest implicated part of the input.
        expression: The full expression being validated.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        fragment: str = "",
        expression: str = "",
    ) -> None:
        self.field = field
        self.fragment = fragment
        self.expression = expression
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class StructuralError(CronValidationError):
    """Raised when the expression does not have exactly six fields."""

    def __init__(self, actual: int, expression: str = "") -> None:
        self.expected = FIELD_COUNT
        self.actual = actual
        super().__init__(
            f"Invalid expression: Expected {FIELD_COUNT} fields but got {actual}. "
            f"Format: {' '.join(ft.label for ft in FIELD_ORDER)}",
            expression=expression,
        )


class FieldRangeError(CronValidationError):
    """A numeric sub-token lies outside its field's bounds."""


class FieldSyntaxError(CronValidationError):
    """A sub-token is not a number (or a name where names are allowed)."""


# =============================================================================
# Field Types
# =============================================================================


class CronFieldType(Enum):
    """The six cron positions, in expression order."""

    SECOND = auto()
    MINUTE = auto()
    HOUR = auto()
    DAY_OF_MONTH = auto()
    MONTH = auto()
    DAY_OF_WEEK = auto()

    @property
    def label(self) -> str:
        """Name used in error messages and field breakdowns."""
        return _FIELD_LABELS[self]

    @property
    def constraints(self) -> "FieldConstraints":
        return FIELD_CONSTRAINTS[self]


_FIELD_LABELS: dict[CronFieldType, str] = {
    CronFieldType.SECOND: "seconds",
    CronFieldType.MINUTE: "minutes",
    CronFieldType.HOUR: "hours",
    CronFieldType.DAY_OF_MONTH: "days",
    CronFieldType.MONTH: "month",
    CronFieldType.DAY_OF_WEEK: "dayOfWeek",
}


class FieldShape(Enum):
    """Syntactic form of a field value."""

    WILDCARD = "wildcard"
    SINGLE = "single"
    RANGE = "range"
    STEP = "step"
    LIST = "list"


@dataclass(frozen=True)
class FieldConstraints:
    """Bounds and accepted names for a cron field."""

    min_value: int
    max_value: int
    names: dict[str, int] = field(default_factory=dict)


MONTH_NAMES: dict[str, int] = {
    "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4,
    "MAY": 5, "JUN": 6, "JUL": 7, "AUG": 8,
    "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
}

DAY_NAMES: dict[str, int] = {
    "SUN": 0, "MON": 1, "TUE": 2, "WED": 3,
    "THU": 4, "FRI": 5, "SAT": 6,
}

FIELD_CONSTRAINTS: dict[CronFieldType, FieldConstraints] = {
    CronFieldType.SECOND: FieldConstraints(0, 59),
    CronFieldType.MINUTE: FieldConstraints(0, 59),
    CronFieldType.HOUR: FieldConstraints(0, 23),
    CronFieldType.DAY_OF_MONTH: FieldConstraints(1, 31),
    CronFieldType.MONTH: FieldConstraints(1, 12, names=MONTH_NAMES),
    # A plain 7 is also Sunday
    CronFieldType.DAY_OF_WEEK: FieldConstraints(0, 7, names=DAY_NAMES),
}

FIELD_ORDER: tuple[CronFieldType, ...] = (
    CronFieldType.SECOND,
    CronFieldType.MINUTE,
    CronFieldType.HOUR,
    CronFieldType.DAY_OF_MONTH,
    CronFieldType.MONTH,
    CronFieldType.DAY_OF_WEEK,
)

FIELD_COUNT = len(FIELD_ORDER)

_INTEGER = re.compile(r"[0-9]+")


# =============================================================================
# Cron Field
# =============================================================================


@dataclass(frozen=True)
class CronField:
    """One parsed cron field.

    Attributes:
        field_type: Position of this field.
        raw: The token as written.
        shape: Which of the five shapes the token has.
        values: ``(v,)`` for a single value, ``(start, end)`` for a range,
            the members of a list, empty otherwise.
        step_base: Start of a step, None when the base is ``*``.
        step: Step size for the step shape.
    """

    field_type: CronFieldType
    raw: str
    shape: FieldShape
    values: tuple[int, ...] = ()
    step_base: int | None = None
    step: int | None = None

    @classmethod
    def parse(cls, token: str, field_type: CronFieldType) -> "CronField":
        """Parse and validate a single token.

        Raises:
            FieldRangeError: A number is outside the field bounds.
            FieldSyntaxError: A piece is not a number.
        """
        return _FieldParser(token, field_type).parse()

    @property
    def is_any(self) -> bool:
        return self.shape is FieldShape.WILDCARD

    @property
    def is_plain(self) -> bool:
        """True for a plain single value (no ``*``, ``-``, ``/`` or ``,``)."""
        return self.shape is FieldShape.SINGLE

    @property
    def plain_value(self) -> int | None:
        return self.values[0] if self.shape is FieldShape.SINGLE else None

    def matches(self, value: int) -> bool:
        """Check if a calendar value satisfies this field.

        For day-of-week, ``value`` is 0-6 with 0 for Sunday. A plain ``7``
        also means Sunday; lists, ranges and steps are matched as written.
        """
        if (
            self.field_type is CronFieldType.DAY_OF_WEEK
            and value == 0
            and self.plain_value == 7
        ):
            return True
        return self._matches_value(value)

    def _matches_value(self, value: int) -> bool:
        shape = self.shape
        if shape is FieldShape.WILDCARD:
            return True
        if shape is FieldShape.STEP:
            if self.step_base is None:
                return value % self.step == 0
            return value >= self.step_base and (value - self.step_base) % self.step == 0
        if shape is FieldShape.RANGE:
            start, end = self.values
            return start <= value <= end
        return value in self.values

    def __str__(self) -> str:
        return self.raw


class _FieldParser:
    """Validates one token and builds its CronField."""

    def __init__(self, token: str, field_type: CronFieldType) -> None:
        self._token = token
        self._type = field_type
        self._constraints = field_type.constraints

    def parse(self) -> CronField:
        token = self._token

        if token == "*":
            return CronField(self._type, token, FieldShape.WILDCARD)
        if "-" in token:
            return self._parse_range()
        if "/" in token:
            return self._parse_step()
        if "," in token:
            return self._parse_list()
        return self._parse_single()

    def _parse_range(self) -> CronField:
        pieces = self._token.split("-")
        if len(pieces) != 2:
            raise self._error(FieldSyntaxError, "Invalid range", self._token)
        start = self._number(pieces[0], "Invalid range", self._token)
        end = self._number(pieces[1], "Invalid range", self._token)
        return CronField(self._type, self._token, FieldShape.RANGE, values=(start, end))

    def _parse_step(self) -> CronField:
        pieces = self._token.split("/")
        if len(pieces) != 2:
            raise self._error(FieldSyntaxError, "Invalid value", self._token)
        base_token, step_token = pieces

        base = None
        if base_token != "*":
            base = self._number(base_token, "Invalid value", self._token)
        step = self._number(
            step_token,
            "Invalid step",
            self._token,
            min_value=1,
        )
        return CronField(
            self._type,
            self._token,
            FieldShape.STEP,
            step_base=base,
            step=step,
        )

    def _parse_list(self) -> CronField:
        values = tuple(
            self._number(item, "Invalid value", item)
            for item in self._token.split(",")
        )
        return CronField(self._type, self._token, FieldShape.LIST, values=values)

    def _parse_single(self) -> CronField:
        token = self._token
        suffix = f" (must be {self._constraints.min_value}-{self._constraints.max_value})"

        # Names are a fallback for tokens that are not numbers
        if not _INTEGER.fullmatch(token):
            name_value = self._constraints.names.get(token.upper())
            if name_value is not None:
                return CronField(self._type, token, FieldShape.SINGLE, values=(name_value,))

        value = self._number(token, "Invalid value", token, suffix=suffix)
        return CronField(self._type, token, FieldShape.SINGLE, values=(value,))

    def _number(
        self,
        piece: str,
        prefix: str,
        fragment: str,
        *,
        min_value: int | None = None,
        suffix: str = "",
    ) -> int:
        """Parse a plain integer within bounds.

        Step sizes use ``min_value=1`` and keep the field maximum.
        """
        if not _INTEGER.fullmatch(piece):
            raise self._error(FieldSyntaxError, prefix, fragment, suffix)

        value = int(piece)
        low = self._constraints.min_value if min_value is None else min_value
        if value < low or value > self._constraints.max_value:
            raise self._error(FieldRangeError, prefix, fragment, suffix)
        return value

    def _error(
        self,
        error_type: type[CronValidationError],
        prefix: str,
        fragment: str,
        suffix: str = "",
    ) -> CronValidationError:
        label = self._type.label
        return error_type(f"{prefix} in {label}: {fragment}{suffix}", label, fragment)


# =============================================================================
# Cron Spec
# =============================================================================


@dataclass(frozen=True)
class CronSpec:
    """A fully validated six-field cron expression.

    CronSpec is immutable; a new one is built for every input. Only a spec
    that passed validation of all six fields can be constructed through
    ``parse``/``validate``.

    Example:
        >>> spec = CronSpec.parse("0 30 14 * * *")
        >>> spec.matches(datetime(2024, 1, 1, 14, 30, 0))
        True
    """

    seconds: CronField
    minutes: CronField
    hours: CronField
    days: CronField
    month: CronField
    day_of_week: CronField

    @classmethod
    def parse(cls, expression: str) -> "CronSpec":
        """Parse a cron expression.

        Raises:
            CronValidationError: If the expression is invalid.
        """
        result = validate_expression(expression)
        if result.error is not None:
            raise result.error
        return result.spec

    @property
    def fields(self) -> tuple[CronField, ...]:
        return (
            self.seconds,
            self.minutes,
            self.hours,
            self.days,
            self.month,
            self.day_of_week,
        )

    @property
    def expression(self) -> str:
        """Canonical single-spaced expression."""
        return " ".join(f.raw for f in self.fields)

    @property
    def field_values(self) -> dict[str, str]:
        """Raw tokens keyed by field label."""
        return {f.field_type.label: f.raw for f in self.fields}

    @property
    def active_fields(self) -> dict[str, bool]:
        """Whether each field restricts its value (is not ``*``)."""
        return {f.field_type.label: not f.is_any for f in self.fields}

    def get_field(self, field_type: CronFieldType) -> CronField:
        return self.fields[FIELD_ORDER.index(field_type)]

    def matches(self, dt: datetime) -> bool:
        return matches(self, dt)

    def __str__(self) -> str:
        return self.expression


# =============================================================================
# Validation
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validation: a spec or an error, never both."""

    spec: CronSpec | None = None
    error: CronValidationError | None = None

    def __post_init__(self) -> None:
        if (self.spec is None) == (self.error is None):
            raise ValueError("ValidationResult needs exactly one of spec or error")

    @property
    def is_valid(self) -> bool:
        return self.spec is not None

    @property
    def field(self) -> str | None:
        return self.error.field if self.error else None

    @property
    def message(self) -> str:
        return str(self.error) if self.error else ""


def validate(tokens: Sequence[str]) -> ValidationResult:
    """Validate six cron tokens.

    Fields are checked in order and validation stops at the first
    invalid sub-token.

    Args:
        tokens: The whitespace-split expression.

    Returns:
        ValidationResult with either the CronSpec or the first error.
    """
    expression = " ".join(tokens)

    if len(tokens) != FIELD_COUNT:
        error = StructuralError(len(tokens), expression)
        logger.debug("Rejected cron expression %r: %s", expression, error)
        return ValidationResult(error=error)

    parsed = []
    for token, field_type in zip(tokens, FIELD_ORDER):
        try:
            parsed.append(CronField.parse(token, field_type))
        except CronValidationError as e:
            e.expression = expression
            logger.debug("Rejected cron expression %r: %s", expression, e)
            return ValidationResult(error=e)

    return ValidationResult(spec=CronSpec(*parsed))


def validate_expression(expression: str) -> ValidationResult:
    """Split an expression on whitespace and validate it."""
    return validate(expression.split())


def is_valid_expression(expression: str) -> bool:
    return validate_expression(expression).is_valid


# =============================================================================
# Matching
# =============================================================================


def cron_weekday(dt: datetime) -> int:
    """Day of week with Sunday as 0."""
    # Python weekday: Monday=0, Sunday=6
    return (dt.weekday() + 1) % 7


def field_matches(cron_field: CronField, value: int) -> bool:
    return cron_field.matches(value)


def matches_day_of_week(cron_field: CronField, weekday: int) -> bool:
    """Match a 0-6 weekday against a day-of-week field, a plain 7 standing for 0."""
    return cron_field.matches(weekday)


def matches(spec: CronSpec, dt: datetime) -> bool:
    """Check whether all six fields match a timestamp."""
    return (
        spec.seconds.matches(dt.second)
        and spec.minutes.matches(dt.minute)
        and spec.hours.matches(dt.hour)
        and spec.days.matches(dt.day)
        and spec.month.matches(dt.month)
        and spec.day_of_week.matches(cron_weekday(dt))
    )
