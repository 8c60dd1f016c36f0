"""Tests for the error framework."""

from __future__ import annotations

from memolens.errors import (
    ExitCode,
    MemolensError,
    NotAComponentError,
    ParseError,
    ProcessingResult,
    RuleEvaluationError,
)


class TestErrors:
    """Test exception classes."""

    def test_exit_codes(self) -> None:
        """Test exit code values are stable."""
        assert ExitCode.SUCCESS == 0
        assert ExitCode.CONFIG_ERROR == 1
        assert ExitCode.PARTIAL_SUCCESS == 2
        assert ExitCode.FATAL_ERROR == 3

    def test_to_dict(self) -> None:
        """Test error context is carried into the JSON form."""
        error = ParseError("Cannot read", file_path="src/App.tsx", line=3)
        data = error.to_dict()
        assert data["error"] == "ParseError"
        assert data["message"] == "Cannot read"
        assert data["file_path"] == "src/App.tsx"
        assert data["line"] == 3
        assert data["exit_code"] == ExitCode.PARTIAL_SUCCESS

    def test_not_a_component(self) -> None:
        """Test the exclusion error names the location."""
        error = NotAComponentError("src/App.tsx", 12)
        assert "src/App.tsx:12" in error.message
        assert error.exit_code == ExitCode.PARTIAL_SUCCESS

    def test_rule_evaluation_error(self) -> None:
        """Test the cause is kept on rule failures."""
        cause = KeyError("x")
        error = RuleEvaluationError("wrap-in-memo", "Card", cause)
        assert error.cause is cause
        assert error.to_dict()["rule"] == "wrap-in-memo"


class TestProcessingResult:
    """Test result aggregation."""

    def test_empty_is_success(self) -> None:
        """Test no errors and no skips exits cleanly."""
        result = ProcessingResult()
        assert result.success
        assert result.exit_code == ExitCode.SUCCESS

    def test_skipped_is_partial(self) -> None:
        """Test skipped files downgrade to partial success."""
        result = ProcessingResult()
        result.add_processed("a.tsx")
        result.add_skipped("b.test.tsx", "ignore_pattern")
        assert result.exit_code == ExitCode.PARTIAL_SUCCESS
        assert result.to_dict()["skipped_files"] == [
            {"path": "b.test.tsx", "reason": "ignore_pattern"}
        ]

    def test_fatal_wins_over_partial(self) -> None:
        """Test a fatal error decides the exit code."""
        result = ProcessingResult()
        result.add_error(ParseError("bad", file_path="a.tsx"))
        result.add_error(MemolensError("crash"))
        assert not result.success
        assert result.exit_code == ExitCode.FATAL_ERROR

    def test_exclusions_and_rule_failures(self) -> None:
        """Test excluded candidates and rule failures are counted."""
        result = ProcessingResult()
        result.add_excluded(NotAComponentError("a.tsx", 4))
        result.add_error(RuleEvaluationError("r", "A", ValueError()))
        data = result.to_dict()
        assert data["excluded"] == 1
        assert data["excluded_candidates"][0]["line"] == 4
        assert data["rule_failures"] == 1
        assert result.exit_code == ExitCode.PARTIAL_SUCCESS
