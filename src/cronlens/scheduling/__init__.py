"""Scheduling module for CronLens.

This module provides a six-field cron expression validator, matcher and
next-occurrence search, plus presets, a recurrence pattern generator and a
debounced evaluator for interactive editing.

Features:
    - Six-field cron (second, minute, hour, day, month, weekday)
    - Wildcard, single value, range, step and list shapes
    - Named months and weekdays (single values only)
    - A plain 7 means Sunday, like 0
    - Field-scoped validation errors returned as data
    - Bounded next-occurrence search with a coarse-to-fine skip heuristic

Syntax Reference:
    Field         Values            Shapes
    ─────────────────────────────────────────────
    Second        0-59              * N a-b b/s a,b
    Minute        0-59              * N a-b b/s a,b
    Hour          0-23              * N a-b b/s a,b
    Day of Month  1-31              * N a-b b/s a,b
    Month         1-12 or JAN-DEC   * N a-b b/s a,b
    Day of Week   0-7 or SUN-SAT    * N a-b b/s a,b

Usage:
    >>> from cronlens.scheduling import CronSpec, validate_expression, next_occurrences
    >>>
    >>> result = validate_expression("0 30 14 * * *")
    >>> result.is_valid
    True
    >>> next_occurrences(result.spec, count=3)
    >>>
    >>> validate_expression("0 0 0 32 * *").message
    'Invalid value in days: 32 (must be 1-31)'
"""

from cronlens.scheduling.cron import (
    # Core
    CronSpec,
    CronField,
    CronFieldType,
    FieldShape,
    FieldConstraints,
    FIELD_CONSTRAINTS,
    FIELD_ORDER,
    # Errors
    CronValidationError,
    StructuralError,
    FieldRangeError,
    FieldSyntaxError,
    # Validation
    ValidationResult,
    validate,
    validate_expression,
    is_valid_expression,
    # Matching
    matches,
    field_matches,
    matches_day_of_week,
)

from cronlens.scheduling.search import (
    DEFAULT_COUNT,
    DEFAULT_MAX_ITERATIONS,
    TIMESTAMP_FORMAT,
    iter_occurrences,
    next_occurrences,
    next_candidate,
    format_occurrence,
)

from cronlens.scheduling.patterns import (
    GeneratedSchedule,
    PatternError,
    RecurrencePattern,
    generate_schedule,
)

from cronlens.scheduling.evaluator import (
    CronEvaluator,
    Evaluation,
)

from cronlens.scheduling.presets import (
    PRESETS,
    get_preset,
    list_presets,
)

__all__ = [
    # Core
    "CronSpec",
    "CronField",
    "CronFieldType",
    "FieldShape",
    "FieldConstraints",
    "FIELD_CONSTRAINTS",
    "FIELD_ORDER",
    # Errors
    "CronValidationError",
    "StructuralError",
    "FieldRangeError",
    "FieldSyntaxError",
    # Validation
    "ValidationResult",
    "validate",
    "validate_expression",
    "is_valid_expression",
    # Matching
    "matches",
    "field_matches",
    "matches_day_of_week",
    # Search
    "DEFAULT_COUNT",
    "DEFAULT_MAX_ITERATIONS",
    "TIMESTAMP_FORMAT",
    "iter_occurrences",
    "next_occurrences",
    "next_candidate",
    "format_occurrence",
    # Patterns
    "GeneratedSchedule",
    "PatternError",
    "RecurrencePattern",
    "generate_schedule",
    # Evaluator
    "CronEvaluator",
    "Evaluation",
    # Presets
    "PRESETS",
    "get_preset",
    "list_presets",
]
