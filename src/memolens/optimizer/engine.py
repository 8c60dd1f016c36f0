"""Optimization engine: turns component analyses into ranked suggestions.

Usage:
    from memolens.config import AnalyzerConfig
    from memolens.optimizer import OptimizationEngine

    engine = OptimizationEngine(AnalyzerConfig())
    suggestions = engine.generate_suggestions(analysis)
"""

from __future__ import annotations

import hashlib
import logging
import re
import threading
from typing import Any

from memolens.analyzer.models import ComponentAnalysis, OptimizationSuggestion
from memolens.config import AnalyzerConfig
from memolens.errors import RuleEvaluationError
from memolens.optimizer.impact import calculate_impact, calculate_priority
from memolens.optimizer.rules import DEFAULT_RULES

logger = logging.getLogger(__name__)


def compute_content_hash(analysis: ComponentAnalysis) -> str:
    """Stable hash of a component's identity and file path."""
    digest = hashlib.sha256()
    digest.update(analysis.name.encode("utf-8"))
    digest.update(b"\0")
    digest.update(analysis.file_path.encode("utf-8"))
    return digest.hexdigest()


class OptimizationEngine:
    """Evaluates rules against component analyses.

    Built-in rules run first, custom rules from the configuration after
    them. Results are cached per content hash for the engine's lifetime.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        """Initialize the engine.

        Args:
            config: Analyzer configuration; defaults are used when omitted.

        Raises:
            MalformedConfigurationError: If the configuration is invalid.
        """
        self.config = config or AnalyzerConfig()
        self.config.validate_thresholds()
        self.rules: list[Any] = [*DEFAULT_RULES, *self.config.custom_rules]
        self._ignore = [re.compile(p) for p in self.config.ignore_patterns]
        self._processed: set[str] = set()
        self._cache: dict[str, list[OptimizationSuggestion]] = {}
        self._lock = threading.Lock()
        self.failures: list[RuleEvaluationError] = []

    def is_ignored(self, file_path: str) -> bool:
        return any(pattern.search(file_path) for pattern in self._ignore)

    def clear_cache(self) -> None:
        with self._lock:
            self._processed.clear()
            self._cache.clear()

    def generate_suggestions(self, analysis: ComponentAnalysis) -> list[OptimizationSuggestion]:
        """Ranked suggestions for one component.

        Repeated calls for the same name and file path return the cached
        result.
        """
        key = compute_content_hash(analysis)
        with self._lock:
            if key in self._processed:
                return list(self._cache[key])

        suggestions: list[OptimizationSuggestion] = []
        if self.is_ignored(analysis.file_path):
            logger.debug(f"Skipping rules for {analysis.file_path}: matches ignore pattern")
        else:
            for rule in self.rules:
                suggestion = self._evaluate(rule, analysis)
                if suggestion is not None:
                    suggestions.append(suggestion)

        suggestions.sort(key=lambda s: (s.priority, s.impact.improvement), reverse=True)

        with self._lock:
            self._processed.add(key)
            self._cache[key] = suggestions
        return list(suggestions)

    def apply(self, analysis: ComponentAnalysis) -> ComponentAnalysis:
        """Attach suggestions to ``analysis`` (once) and return it."""
        analysis.attach_suggestions(self.generate_suggestions(analysis))
        return analysis

    def _evaluate(self, rule: Any, analysis: ComponentAnalysis) -> OptimizationSuggestion | None:
        """Run one rule; failures are recorded and yield no suggestion."""
        try:
            is_applied = getattr(rule, "is_applied", None)
            if is_applied is not None and is_applied(analysis):
                logger.debug(f"Rule {rule.name} already applied in {analysis.name}")
                return None
            if not rule.test(analysis):
                return None

            code_example = getattr(rule, "code_example", None)
            return OptimizationSuggestion(
                type=rule.name,
                description=rule.suggestion(analysis),
                priority=calculate_priority(rule.priority, analysis),
                impact=calculate_impact(analysis, getattr(rule, "bundle_size_impact", 0.0)),
                code_example=code_example(analysis) if code_example is not None else "",
            )
        except Exception as e:
            error = RuleEvaluationError(getattr(rule, "name", repr(rule)), analysis.name, e)
            logger.warning(error.message)
            with self._lock:
                self.failures.append(error)
            return None
