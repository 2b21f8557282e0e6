"""Debounced evaluation of cron expressions as they are edited.

``CronEvaluator`` validates every submitted expression immediately and
schedules the next-occurrence search on a timer, so a burst of edits only
pays for one search. Each submission bumps a generation token; a search
that finishes after a newer submission is discarded rather than published.

Example:
    >>> evaluator = CronEvaluator(debounce_seconds=0.3, on_result=print)
    >>> evaluator.submit("0 */5 * * * *")
    1
    >>> evaluator.wait()
    True
    >>> evaluator.latest.formatted()
    ['2024-01-01 10:05:00', ...]
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from cronlens.scheduling.cron import (
    FIELD_ORDER,
    CronSpec,
    CronValidationError,
    validate_expression,
)
from cronlens.scheduling.search import (
    DEFAULT_COUNT,
    DEFAULT_MAX_ITERATIONS,
    TIMESTAMP_FORMAT,
    format_occurrence,
    next_occurrences,
)

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


@dataclass(frozen=True)
class Evaluation:
    """Snapshot of one evaluated expression.

    Attributes:
        expression: The input as submitted.
        generation: Token of the submission that produced this snapshot.
        spec: Parsed spec when the input is valid.
        error: Validation error when the input is invalid.
        occurrences: Next matching timestamps (empty while pending).
        pending: True while the search is scheduled but not yet run.
    """

    expression: str
    generation: int = 0
    spec: CronSpec | None = None
    error: CronValidationError | None = None
    occurrences: tuple[datetime, ...] = ()
    pending: bool = False

    @property
    def is_valid(self) -> bool:
        return self.spec is not None

    @property
    def is_empty(self) -> bool:
        return not self.expression.strip()

    @property
    def field_values(self) -> dict[str, str]:
        """Raw field tokens; all ``*`` unless the input is valid."""
        if self.spec is None:
            return {ft.label: "*" for ft in FIELD_ORDER}
        return self.spec.field_values

    @property
    def active_fields(self) -> dict[str, bool]:
        if self.spec is None:
            return {ft.label: False for ft in FIELD_ORDER}
        return self.spec.active_fields

    def formatted(self, fmt: str = TIMESTAMP_FORMAT) -> list[str]:
        return [format_occurrence(dt, fmt) for dt in self.occurrences]


class CronEvaluator:
    """Validates and searches cron expressions, debouncing the search.

    Only the most recent submission is ever published. Searches are bounded
    by ``max_iterations``; a search that has started is not interrupted, its
    result is simply dropped if it is stale.
    """

    def __init__(
        self,
        *,
        count: int = DEFAULT_COUNT,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_result: Callable[[Evaluation], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize evaluator.

        Args:
            count: Number of occurrences to compute.
            max_iterations: Search iteration budget.
            debounce_seconds: Delay before a submitted search runs.
            on_result: Called with every published Evaluation.
            clock: Source of the search start time.
        """
        self.count = count
        self.max_iterations = max_iterations
        self.debounce_seconds = debounce_seconds
        self._on_result = on_result
        self._clock = clock

        self._lock = threading.RLock()
        self._generation = 0
        self._timer: threading.Timer | None = None
        self._latest: Evaluation | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest(self) -> Evaluation | None:
        """Most recently published snapshot."""
        return self._latest

    def evaluate(self, expression: str, after: datetime | None = None) -> Evaluation:
        """Validate and search synchronously, without touching evaluator state."""
        snapshot = self._validate(expression, self._generation)
        if snapshot.spec is None:
            return snapshot
        occurrences = next_occurrences(
            snapshot.spec,
            after if after is not None else self._clock(),
            count=self.count,
            max_iterations=self.max_iterations,
        )
        return Evaluation(
            expression=expression,
            generation=snapshot.generation,
            spec=snapshot.spec,
            occurrences=tuple(occurrences),
        )

    def submit(self, expression: str) -> int:
        """Submit an edited expression.

        Validation results are published right away. A valid expression is
        published as pending and its search runs after the debounce delay,
        replacing any search still waiting to run.

        Returns:
            The generation token assigned to this submission.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._cancel_timer()

            snapshot = self._validate(expression, generation)
            if snapshot.spec is None:
                self._publish(snapshot)
                return generation

            self._publish(
                Evaluation(
                    expression=expression,
                    generation=generation,
                    spec=snapshot.spec,
                    pending=True,
                )
            )
            self._timer = threading.Timer(
                self.debounce_seconds,
                self._run_search,
                args=(generation, expression, snapshot.spec),
            )
            self._timer.daemon = True
            self._timer.start()
            return generation

    def cancel(self) -> None:
        """Drop any pending search and invalidate in-flight ones."""
        with self._lock:
            self._generation += 1
            self._cancel_timer()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the scheduled search, if any, to finish.

        Returns:
            True if no search is left running.
        """
        timer = self._timer
        if timer is None:
            return True
        timer.join(timeout)
        return not timer.is_alive()

    def _validate(self, expression: str, generation: int) -> Evaluation:
        if not expression.strip():
            return Evaluation(expression=expression, generation=generation)

        result = validate_expression(expression)
        if result.error is not None:
            return Evaluation(
                expression=expression,
                generation=generation,
                error=result.error,
            )
        return Evaluation(expression=expression, generation=generation, spec=result.spec)

    def _run_search(self, generation: int, expression: str, spec: CronSpec) -> None:
        occurrences = next_occurrences(
            spec,
            self._clock(),
            count=self.count,
            max_iterations=self.max_iterations,
        )

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "Discarding stale evaluation of %r (generation %d, current %d)",
                    expression,
                    generation,
                    self._generation,
                )
                return
            self._publish(
                Evaluation(
                    expression=expression,
                    generation=generation,
                    spec=spec,
                    occurrences=tuple(occurrences),
                )
            )

    def _publish(self, evaluation: Evaluation) -> None:
        self._latest = evaluation
        if self._on_result is not None:
            self._on_result(evaluation)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
