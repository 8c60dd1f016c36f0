"""memolens scanner - parse files, find components, run the engine."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tree_sitter import Node

from memolens.analyzer.component import analyze_component
from memolens.analyzer.hooks import HookRuleValidator, HookViolation
from memolens.analyzer.models import ComponentAnalysis, OptimizationSuggestion
from memolens.config import AnalyzerConfig
from memolens.errors import MemolensError, NotAComponentError, ProcessingResult
from memolens.logging import get_logger
from memolens.optimizer.engine import OptimizationEngine
from memolens.parser.base import (
    LANGUAGE_EXTENSIONS,
    ParsedSource,
    is_function_node,
    parse_file,
    parse_source,
    walk,
)
from memolens.parser.queries import COMPONENT_FUNCTION_TYPES, is_component_shaped

# Directories never descended into
SKIP_DIRECTORIES = frozenset({"node_modules", "dist", "build", "coverage"})


@dataclass
class ScanReport:
    """Result of scanning files for components."""

    root: str = ""
    analyses: list[ComponentAnalysis] = field(default_factory=list)
    violations: dict[str, list[HookViolation]] = field(default_factory=dict)
    result: ProcessingResult = field(default_factory=ProcessingResult)

    @property
    def suggestions(self) -> list[OptimizationSuggestion]:
        return [s for a in self.analyses for s in a.suggestions]

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "components": [a.to_dict() for a in self.analyses],
            "violations": {
                key: [v.to_dict() for v in found] for key, found in self.violations.items()
            },
            "summary": self.result.to_dict(),
        }


def component_key(file_path: str, name: str) -> str:
    return f"{file_path}:{name}"


def find_component_nodes(parsed: ParsedSource) -> list[Node]:
    """Function-like nodes in the file that are component shaped."""
    return [
        n
        for n in walk(parsed.root)
        if is_function_node(n, COMPONENT_FUNCTION_TYPES) and is_component_shaped(n, parsed.source)
    ]


def analyze_parsed(
    parsed: ParsedSource,
    config: AnalyzerConfig,
    result: ProcessingResult | None = None,
    validator: HookRuleValidator | None = None,
    violations: dict[str, list[HookViolation]] | None = None,
) -> list[ComponentAnalysis]:
    """Analyze every component in a parsed file.

    Candidates without a resolvable name are recorded in ``result`` and
    left out of the returned list.
    """
    logger = get_logger("scanner")
    result = result if result is not None else ProcessingResult()
    analyses: list[ComponentAnalysis] = []

    for node in find_component_nodes(parsed):
        try:
            analysis = analyze_component(node, parsed.path, config, parsed.source)
        except NotAComponentError as e:
            logger.debug(e.message)
            result.add_excluded(e)
            continue
        analyses.append(analysis)

        if validator is not None:
            key = component_key(parsed.path, analysis.name)
            found = validator.validate(node, parsed.source, key)
            if found and violations is not None:
                violations[key] = found

    result.add_processed(parsed.path)
    return analyses


def analyze_source(
    source: bytes | str,
    file_path: str = "<memory>",
    config: AnalyzerConfig | None = None,
    result: ProcessingResult | None = None,
    language: str = "tsx",
) -> list[ComponentAnalysis]:
    """Analyze components in an in-memory source string."""
    parsed = parse_source(source, file_path, language)
    return analyze_parsed(parsed, config or AnalyzerConfig(), result)


def analyze_file(
    path: Path,
    config: AnalyzerConfig | None = None,
    result: ProcessingResult | None = None,
) -> list[ComponentAnalysis]:
    """Analyze components in one file; the grammar follows the extension.

    Raises:
        UnsupportedLanguageError: For extensions without a grammar.
        ParseError: If the file cannot be read.
    """
    parsed = parse_file(path)
    return analyze_parsed(parsed, config or AnalyzerConfig(), result)


def _is_ignored(rel_path: str, patterns: list[re.Pattern[str]]) -> bool:
    return any(p.search(rel_path) for p in patterns)


def iter_source_files(root: Path, config: AnalyzerConfig, result: ProcessingResult) -> list[Path]:
    """Source files under ``root`` that are neither hidden nor ignored."""
    logger = get_logger("scanner")
    patterns = [re.compile(p) for p in config.ignore_patterns]
    files: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d not in SKIP_DIRECTORIES
        )

        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            file_path = current_dir / filename
            if file_path.suffix.lower() not in LANGUAGE_EXTENSIONS:
                continue
            rel_path = file_path.relative_to(root).as_posix()
            if _is_ignored(rel_path, patterns):
                logger.debug(f"Ignoring {rel_path}")
                result.add_skipped(rel_path, "ignore_pattern")
                continue
            files.append(file_path)

    return files


def scan_project(
    root: Path,
    config: AnalyzerConfig | None = None,
    engine: OptimizationEngine | None = None,
) -> ScanReport:
    """Scan a directory (or a single file) and attach suggestions.

    Args:
        root: Directory or file to scan.
        config: Analyzer configuration; defaults when omitted.
        engine: Engine to reuse; a new one is built from ``config`` otherwise.

    Returns:
        ScanReport with analyses, hook-rule violations and diagnostics.
    """
    logger = get_logger("scanner")
    config = config or AnalyzerConfig()
    engine = engine or OptimizationEngine(config)
    root = root.resolve()
    base = root.parent if root.is_file() else root

    report = ScanReport(root=str(root))
    validator = HookRuleValidator()
    files = [root] if root.is_file() else iter_source_files(root, config, report.result)

    logger.info(f"Scanning {len(files)} files under {root}")
    failures_before = len(engine.failures)

    for file_path in files:
        rel_path = file_path.relative_to(base).as_posix()
        try:
            parsed = parse_file(file_path, rel_path)
        except MemolensError as e:
            logger.warning(e.message)
            report.result.add_error(e)
            report.result.add_skipped(rel_path, type(e).__name__)
            continue

        for analysis in analyze_parsed(parsed, config, report.result, validator, report.violations):
            report.analyses.append(engine.apply(analysis))

    for failure in engine.failures[failures_before:]:
        report.result.add_error(failure)

    logger.info(
        f"Analyzed {len(report.analyses)} components, {len(report.suggestions)} suggestions"
    )
    return report
