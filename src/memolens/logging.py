"""Logging and terminal output for memolens.

Library modules log through ``logging.getLogger(__name__)`` (or
``get_logger``) and never configure handlers. The CLI calls
``setup_logging`` once and renders reports with ``print_report``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from memolens.analyzer.hooks import HookViolation
    from memolens.analyzer.models import ComponentAnalysis
    from memolens.scanner import ScanReport

Verbosity = Literal["quiet", "normal", "verbose"]

LOGGER_NAME = "memolens"

LEVELS: dict[str, int] = {
    "quiet": logging.ERROR,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}

# Reports go to stdout, diagnostics and log records to stderr
console = Console()
err_console = Console(stderr=True)


def setup_logging(verbosity: Verbosity = "normal") -> logging.Logger:
    """Route ``memolens.*`` records to a rich handler on stderr.

    Calling it again replaces the handler, so repeated CLI invocations in
    one process do not duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(LEVELS[verbosity])

    verbose = verbosity == "verbose"
    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s" if verbose else "%(message)s"))
    logger.addHandler(handler)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """The memolens logger, or the child named ``memolens.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_status(message: str, ok: bool = True) -> None:
    """One-line status for commands that write files."""
    console.print(f"[green]{message}[/green]" if ok else message)


def suggestion_table(analysis: ComponentAnalysis) -> Table:
    """Ranked suggestions of one component with their impact estimates."""
    table = Table(title=f"{analysis.name} ({analysis.file_path}:{analysis.line})")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Priority", justify="right")
    table.add_column("Render", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("Bundle", justify="right")
    table.add_column("Suggestion")
    for suggestion in analysis.suggestions:
        impact = suggestion.impact
        table.add_row(
            suggestion.type,
            str(suggestion.priority),
            f"{impact.render_time_improvement:.0%}",
            f"{impact.memory_improvement:.0%}",
            f"{impact.bundle_size_impact:.0%}",
            escape(suggestion.description),
        )
    return table


def format_violation(key: str, violation: HookViolation) -> str:
    """``file:Component[:line] [kind] message``."""
    line = f":{violation.line}" if violation.line else ""
    return f"{key}{line} [{violation.kind.value}] {violation.message}"


def print_report(
    report: ScanReport,
    verbosity: Verbosity = "normal",
    out: Console | None = None,
    err: Console | None = None,
) -> None:
    """Render a scan report: suggestion tables, hook diagnostics, summary."""
    out = out or console
    err = err or err_console

    for analysis in report.analyses:
        if not analysis.suggestions:
            continue
        out.print(suggestion_table(analysis))
        if verbosity == "verbose":
            for suggestion in analysis.suggestions:
                if suggestion.code_example:
                    out.print(f"[dim]{suggestion.type}:[/dim]")
                    out.print(suggestion.code_example, markup=False, highlight=False)

    for key, violations in report.violations.items():
        for violation in violations:
            err.print(f"[yellow]Hook rule:[/yellow] {escape(format_violation(key, violation))}", highlight=False)

    result = report.result
    for failure in result.rule_failures:
        err.print(f"[yellow]Rule failed:[/yellow] {escape(failure.message)}", highlight=False)

    if verbosity == "quiet":
        return
    out.print(
        f"\n{len(report.analyses)} components, {len(report.suggestions)} suggestions, "
        f"{len(result.excluded)} excluded, {len(result.skipped)} skipped",
        highlight=False,
    )
    if not report.suggestions:
        out.print("[green]No optimization suggestions[/green]")
