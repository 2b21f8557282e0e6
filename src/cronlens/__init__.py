"""CronLens - Six-field cron expression validator and next-execution previewer."""

from cronlens.scheduling import (
    CronEvaluator,
    CronSpec,
    CronValidationError,
    Evaluation,
    ValidationResult,
    generate_schedule,
    is_valid_expression,
    matches,
    next_occurrences,
    validate,
    validate_expression,
)

__version__ = "0.1.0"

__all__ = [
    "CronEvaluator",
    "CronSpec",
    "CronValidationError",
    "Evaluation",
    "ValidationResult",
    "generate_schedule",
    "is_valid_expression",
    "matches",
    "next_occurrences",
    "validate",
    "validate_expression",
    "__version__",
]
