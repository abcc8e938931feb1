"""Tests for rendering outcomes into structured results."""

from __future__ import annotations

from unittest.mock import patch

from pgspine.resilience.classifier import ErrorClassification, FailureClass
from pgspine.resilience.outcome import Failure, Success
from pgspine.resilience.reporter import (
    CONNECTION_TEST_ADVICE,
    DEFAULT_ADVICE,
    Advice,
    OutcomeReporter,
)

TRANSIENT_TEXT = "This appears to be a transient error. The operation was retried automatically."
PERMANENT_TEXT = "This error requires attention and cannot be automatically retried."


class TestRenderSuccess:
    def test_shape(self):
        result = OutcomeReporter().render(Success([{"id": 1}])).to_dict()
        assert result == {"success": True, "data": [{"id": 1}]}

    def test_details_are_merged(self):
        result = OutcomeReporter().render(
            Success([]), details={"rowCount": 0, "database": "reporting"}
        ).to_dict()
        assert result == {"success": True, "data": [], "rowCount": 0, "database": "reporting"}

    def test_details_do_not_override_core_keys(self):
        result = OutcomeReporter().render(Success(1), details={"success": False, "data": 2}).to_dict()
        assert result["success"] is True
        assert result["data"] == 1


class TestRenderFailure:
    def test_transient_failure(self):
        outcome = Failure(ErrorClassification(FailureClass.TRANSIENT, "40P01"), "deadlock detected", attempts=3)
        result = OutcomeReporter().render(outcome, details={"database": "reporting"}).to_dict()
        assert result == {
            "success": False,
            "error": "deadlock detected",
            "diagnosticCode": "40P01",
            "isTransient": True,
            "suggestion": TRANSIENT_TEXT,
            "attempts": 3,
            "database": "reporting",
        }

    def test_permanent_failure_without_code(self):
        outcome = Failure(ErrorClassification.permanent(), "No connection string found for database 'x'")
        result = OutcomeReporter().render(outcome).to_dict()
        assert result["success"] is False
        assert result["diagnosticCode"] is None
        assert result["isTransient"] is False
        assert result["suggestion"] == PERMANENT_TEXT
        assert result["attempts"] == 1

    def test_connection_test_advice(self):
        outcome = Failure(ErrorClassification.permanent("28P01"), "password authentication failed")
        result = OutcomeReporter().render(outcome, advice=CONNECTION_TEST_ADVICE).to_dict()
        assert result["suggestion"] == (
            "Connection test failed. Please check your connection string and database availability."
        )

    def test_reporter_level_advice(self):
        advice = Advice(transient="try again", permanent="give up")
        outcome = Failure(ErrorClassification(FailureClass.TRANSIENT), "reset")
        assert OutcomeReporter(advice).render(outcome).suggestion == "try again"

    def test_default_advice_texts(self):
        assert DEFAULT_ADVICE.transient == TRANSIENT_TEXT
        assert DEFAULT_ADVICE.permanent == PERMANENT_TEXT


class TestRenderFallback:
    def test_non_outcome_degrades_to_failure(self):
        result = OutcomeReporter().render("not an outcome").to_dict()  # type: ignore[arg-type]
        assert result["success"] is False
        assert result["error"].startswith("Failed to render result")
        assert result["suggestion"] == PERMANENT_TEXT

    def test_rendering_fault_degrades_to_failure(self):
        reporter = OutcomeReporter()
        with patch.object(reporter, "_render", side_effect=RuntimeError("boom")):
            result = reporter.render(Success(1)).to_dict()
        assert result == {
            "success": False,
            "error": "Failed to render result: boom",
            "diagnosticCode": None,
            "isTransient": False,
            "suggestion": PERMANENT_TEXT,
        }
