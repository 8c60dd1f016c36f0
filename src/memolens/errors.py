"""Error handling framework for memolens."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """memolens CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Malformed configuration (user fixable)
    PARTIAL_SUCCESS = 2  # Some files or candidates skipped
    FATAL_ERROR = 3  # Unexpected crash


class MemolensError(Exception):
    """Base exception for memolens errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            **self.context,
        }


class ConfigError(MemolensError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class MalformedConfigurationError(ConfigError):
    """Thresholds missing, non-positive, or otherwise unusable."""

    def __init__(self, message: str, field: str | None = None, **context: Any) -> None:
        super().__init__(message, field=field, **context)
        self.field = field


class AnalysisError(MemolensError):
    """Errors local to one candidate node or one rule."""

    exit_code = ExitCode.PARTIAL_SUCCESS


class NotAComponentError(AnalysisError):
    """No binding name could be resolved for a candidate function."""

    def __init__(self, file_path: str, line: int | None = None) -> None:
        super().__init__(
            f"Not a component: no binding name at {file_path}:{line}",
            file_path=file_path,
            line=line,
        )
        self.file_path = file_path
        self.line = line


class RuleEvaluationError(AnalysisError):
    """A rule's test, suggestion or example callable raised."""

    def __init__(self, rule: str, component: str, cause: BaseException) -> None:
        super().__init__(
            f"Rule {rule!r} failed on {component}: {cause}",
            rule=rule,
            component=component,
        )
        self.rule = rule
        self.component = component
        self.cause = cause


class ParseError(MemolensError):
    """File parsing errors."""

    exit_code = ExitCode.PARTIAL_SUCCESS

    def __init__(self, message: str, file_path: str, line: int | None = None, **context: Any):
        super().__init__(message, file_path=file_path, line=line, **context)
        self.file_path = file_path
        self.line = line


class UnsupportedLanguageError(MemolensError):
    """Language not supported."""

    exit_code = ExitCode.PARTIAL_SUCCESS

    def __init__(self, language: str, file_path: str):
        super().__init__(
            f"Unsupported language: {language}",
            language=language,
            file_path=file_path,
        )
        self.language = language
        self.file_path = file_path


class ProcessingResult:
    """Diagnostics side-channel for a scan over many files and candidates."""

    def __init__(self) -> None:
        self.processed: list[str] = []
        self.skipped: list[dict[str, Any]] = []
        self.excluded: list[dict[str, Any]] = []
        self.errors: list[MemolensError] = []

    @property
    def success(self) -> bool:
        """True if no fatal errors occurred."""
        return not any(e.exit_code == ExitCode.FATAL_ERROR for e in self.errors)

    @property
    def exit_code(self) -> ExitCode:
        """Determine exit code based on results."""
        if not self.errors and not self.skipped:
            return ExitCode.SUCCESS
        if any(e.exit_code == ExitCode.CONFIG_ERROR for e in self.errors):
            return ExitCode.CONFIG_ERROR
        if any(e.exit_code == ExitCode.FATAL_ERROR for e in self.errors):
            return ExitCode.FATAL_ERROR
        return ExitCode.PARTIAL_SUCCESS

    @property
    def rule_failures(self) -> list[RuleEvaluationError]:
        return [e for e in self.errors if isinstance(e, RuleEvaluationError)]

    def add_processed(self, file_path: str) -> None:
        """Mark a file as successfully processed."""
        self.processed.append(file_path)

    def add_skipped(self, file_path: str, reason: str) -> None:
        """Mark a file as skipped."""
        self.skipped.append({"path": file_path, "reason": reason})

    def add_excluded(self, error: NotAComponentError) -> None:
        """Record a candidate node that was dropped from the results."""
        self.excluded.append({"path": error.file_path, "line": error.line, "reason": error.message})

    def add_error(self, error: MemolensError) -> None:
        """Record an error."""
        self.errors.append(error)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for JSON output."""
        return {
            "success": self.success,
            "exit_code": self.exit_code,
            "processed": len(self.processed),
            "skipped": len(self.skipped),
            "excluded": len(self.excluded),
            "rule_failures": len(self.rule_failures),
            "errors": [e.to_dict() for e in self.errors],
            "skipped_files": self.skipped,
            "excluded_candidates": self.excluded,
        }
