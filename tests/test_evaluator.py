"""Tests for the debounced evaluator and evaluation reports."""

import json
import threading
from datetime import datetime

import pytest

from cronlens.report import EvaluationReport
from cronlens.scheduling import (
    CronEvaluator,
    Evaluation,
    FieldRangeError,
    StructuralError,
)


START = datetime(2024, 1, 1, 0, 0, 0)


def fixed_clock():
    return START


@pytest.fixture
def published():
    return []


@pytest.fixture
def evaluator(published):
    evaluator = CronEvaluator(
        count=3,
        debounce_seconds=0,
        on_result=published.append,
        clock=fixed_clock,
    )
    yield evaluator
    evaluator.cancel()


# =============================================================================
# Evaluation Tests
# =============================================================================


class TestEvaluation:
    """Tests for evaluation snapshots."""

    def test_empty_snapshot(self):
        evaluation = Evaluation(expression="   ")
        assert evaluation.is_empty
        assert not evaluation.is_valid
        assert evaluation.error is None
        assert set(evaluation.field_values.values()) == {"*"}
        assert not any(evaluation.active_fields.values())

    def test_formatted(self):
        evaluation = Evaluation(
            expression="0 30 14 * * *",
            occurrences=(datetime(2024, 1, 1, 14, 30),),
        )
        assert evaluation.formatted() == ["2024-01-01 14:30:00"]
        assert evaluation.formatted("%H:%M") == ["14:30"]


# =============================================================================
# Synchronous Evaluation Tests
# =============================================================================


class TestEvaluate:
    """Tests for CronEvaluator.evaluate."""

    def test_valid_expression(self, evaluator):
        evaluation = evaluator.evaluate("0 30 14 * * *")
        assert evaluation.is_valid
        assert evaluation.occurrences == (
            datetime(2024, 1, 1, 14, 30),
            datetime(2024, 1, 2, 14, 30),
            datetime(2024, 1, 3, 14, 30),
        )
        assert evaluation.field_values["minutes"] == "30"
        assert evaluation.active_fields["days"] is False

    def test_explicit_start(self, evaluator):
        evaluation = evaluator.evaluate("0 0 0 1 * *", after=datetime(2024, 3, 15, 12))
        assert evaluation.occurrences[0] == datetime(2024, 4, 1)

    def test_invalid_expression(self, evaluator):
        evaluation = evaluator.evaluate("0 0 0 32 * *")
        assert not evaluation.is_valid
        assert isinstance(evaluation.error, FieldRangeError)
        assert evaluation.occurrences == ()

    def test_empty_expression(self, evaluator):
        evaluation = evaluator.evaluate("")
        assert evaluation.is_empty
        assert evaluation.error is None
        assert evaluation.spec is None

    def test_does_not_publish(self, evaluator, published):
        evaluator.evaluate("* * * * * *")
        assert published == []
        assert evaluator.latest is None
        assert evaluator.generation == 0


# =============================================================================
# Debounced Submission Tests
# =============================================================================


class TestSubmit:
    """Tests for debounced submission."""

    def test_generation_increases(self, evaluator):
        first = evaluator.submit("* * * * * *")
        second = evaluator.submit("0 * * * * *")
        assert second == first + 1
        assert evaluator.generation == second

    def test_valid_expression_publishes_pending_then_result(self, evaluator, published):
        generation = evaluator.submit("0 30 14 * * *")
        assert evaluator.wait(timeout=5)

        assert len(published) == 2
        pending, result = published
        assert pending.pending
        assert pending.occurrences == ()
        assert not result.pending
        assert result.generation == generation
        assert result.formatted() == [
            "2024-01-01 14:30:00",
            "2024-01-02 14:30:00",
            "2024-01-03 14:30:00",
        ]
        assert evaluator.latest is result

    def test_invalid_expression_published_immediately(self, evaluator, published):
        evaluator.submit("0 30 14 * *")
        assert evaluator.wait(timeout=5)

        assert len(published) == 1
        assert isinstance(published[0].error, StructuralError)
        assert "Expected 6 fields but got 5" in str(published[0].error)

    def test_empty_expression_published_immediately(self, evaluator, published):
        evaluator.submit("")
        assert len(published) == 1
        assert published[0].is_empty
        assert published[0].error is None

    def test_new_submission_replaces_waiting_search(self, published):
        """Test a burst of edits runs only the last search."""
        evaluator = CronEvaluator(
            count=1,
            debounce_seconds=60,
            on_result=published.append,
            clock=fixed_clock,
        )
        evaluator.submit("0 0 0 1 * *")
        evaluator.submit("0 0 0 2 * *")
        evaluator.cancel()

        assert [e.pending for e in published] == [True, True]
        assert evaluator.wait(timeout=5)
        assert len(published) == 2

    def test_invalid_edit_cancels_waiting_search(self, published):
        evaluator = CronEvaluator(
            debounce_seconds=60,
            on_result=published.append,
            clock=fixed_clock,
        )
        evaluator.submit("0 0 0 1 * *")
        evaluator.submit("0 0 0 32 * *")

        assert evaluator.wait(timeout=5)
        assert evaluator.latest.error is not None
        assert len(published) == 2

    def test_stale_search_is_discarded(self, published):
        """Test a search that finishes after a newer submission is dropped."""
        entered = threading.Event()
        release = threading.Event()

        def blocking_clock():
            entered.set()
            release.wait(5)
            return START

        evaluator = CronEvaluator(
            count=1,
            debounce_seconds=0,
            on_result=published.append,
            clock=blocking_clock,
        )
        evaluator.submit("0 0 0 1 * *")
        assert entered.wait(5)
        stale_timer = evaluator._timer

        latest = evaluator.submit("0 0 0 2 * *")
        release.set()
        assert evaluator.wait(timeout=5)
        stale_timer.join(5)

        results = [e for e in published if not e.pending]
        assert len(results) == 1
        assert results[0].generation == latest
        assert results[0].occurrences == (datetime(2024, 1, 2),)

    def test_cancel_invalidates_running_search(self, published):
        entered = threading.Event()
        release = threading.Event()

        def blocking_clock():
            entered.set()
            release.wait(5)
            return START

        evaluator = CronEvaluator(
            debounce_seconds=0,
            on_result=published.append,
            clock=blocking_clock,
        )
        evaluator.submit("* * * * * *")
        assert entered.wait(5)
        running = evaluator._timer

        evaluator.cancel()
        release.set()
        running.join(5)

        assert [e.pending for e in published] == [True]

    def test_wait_without_submission(self, evaluator):
        assert evaluator.wait(timeout=0)


# =============================================================================
# Report Tests
# =============================================================================


class TestEvaluationReport:
    """Tests for report rendering."""

    def test_to_dict_valid(self, evaluator):
        report = EvaluationReport(evaluator.evaluate("0 30 14 * * *"))
        data = report.to_dict()

        assert data["expression"] == "0 30 14 * * *"
        assert data["valid"] is True
        assert data["error"] is None
        assert data["fields"]["hours"] == "14"
        assert data["active_fields"]["month"] is False
        assert data["next_executions"][0] == "2024-01-01 14:30:00"

    def test_to_dict_invalid(self, evaluator):
        report = EvaluationReport(evaluator.evaluate("0 0 0 32 * *"))
        data = report.to_dict()

        assert data["valid"] is False
        assert data["error"] == {
            "type": "FieldRangeError",
            "field": "days",
            "fragment": "32",
            "message": "Invalid value in days: 32 (must be 1-31)",
        }
        assert data["next_executions"] == []

    def test_to_dict_reports_shortfall(self, evaluator):
        """Test JSON output carries the requested count next to the results."""
        report = EvaluationReport(evaluator.evaluate("0 0 0 31 2 *"), requested=3)
        data = report.to_dict()

        assert data["requested"] == 3
        assert data["pending"] is False
        assert data["next_executions"] == []

    def test_to_dict_pending(self):
        evaluator = CronEvaluator(debounce_seconds=60, clock=fixed_clock)
        evaluator.submit("* * * * * *")
        try:
            data = EvaluationReport(evaluator.latest).to_dict()
        finally:
            evaluator.cancel()
        assert data["pending"] is True
        assert data["requested"] is None

    def test_to_json(self, evaluator):
        report = EvaluationReport(evaluator.evaluate("*/15 * * * * *"))
        data = json.loads(report.to_json())
        assert len(data["next_executions"]) == 3

    def test_custom_timestamp_format(self, evaluator):
        report = EvaluationReport(
            evaluator.evaluate("0 30 14 * * *"),
            timestamp_format="%d/%m %H:%M",
        )
        assert report.to_dict()["next_executions"][0] == "01/01 14:30"

    def test_str_lists_executions(self, evaluator):
        output = str(EvaluationReport(evaluator.evaluate("0 30 14 * * *")))
        assert "Cron Expression" in output
        assert "Next executions" in output

    def test_str_shows_error(self, evaluator):
        output = str(EvaluationReport(evaluator.evaluate("0 0 0 32 * *")))
        assert "Invalid value in days" in output
        assert "Next executions" not in output

    def test_str_without_results(self, evaluator):
        output = str(EvaluationReport(evaluator.evaluate("0 0 0 31 2 *"), requested=3))
        assert "No upcoming executions found" in output
        assert "within the iteration budget" in output

    def test_str_pending(self):
        evaluator = CronEvaluator(debounce_seconds=60, clock=fixed_clock)
        evaluator.submit("* * * * * *")
        try:
            output = str(EvaluationReport(evaluator.latest))
        finally:
            evaluator.cancel()
        assert "Calculating" in output

    def test_str_empty(self, evaluator):
        output = str(EvaluationReport(evaluator.evaluate("")))
        assert "No expression given" in output
