"""memolens CLI - memoization advice for React components."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

# Load .env file before any other imports that might use env vars
load_dotenv()

import click  # noqa: E402

from memolens import __version__  # noqa: E402

if TYPE_CHECKING:
    from memolens.config import AnalyzerConfig
    from memolens.logging import Verbosity


class MemolensContext:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.verbosity: Verbosity = "normal"


pass_context = click.make_pass_decorator(MemolensContext, ensure=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(version=__version__, prog_name="memolens")
@pass_context
def cli(ctx: MemolensContext, verbose: bool, quiet: bool, config: Path | None) -> None:
    """memolens - find memoization opportunities in React components.

    \b
    Commands:
      analyze      Analyze components and print suggestions
      init         Write a default .memolensrc.toml
    """
    from memolens.logging import setup_logging

    if quiet:
        ctx.verbosity = "quiet"
    elif verbose:
        ctx.verbosity = "verbose"
    else:
        ctx.verbosity = "normal"

    setup_logging(ctx.verbosity)
    ctx.config_path = config


def _load_config(ctx: MemolensContext) -> AnalyzerConfig:
    from memolens.config import AnalyzerConfig
    from memolens.errors import MalformedConfigurationError
    from memolens.logging import print_error

    try:
        return AnalyzerConfig.load(ctx.config_path)
    except MalformedConfigurationError as e:
        print_error(e.message)
        sys.exit(e.exit_code)


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path), default=".")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@pass_context
def analyze(ctx: MemolensContext, path: Path, as_json: bool) -> None:
    """Analyze components under PATH and print ranked suggestions."""
    from memolens.logging import print_report
    from memolens.optimizer import OptimizationEngine
    from memolens.scanner import scan_project

    config = _load_config(ctx)
    report = scan_project(path, config, OptimizationEngine(config))

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report, ctx.verbosity)

    sys.exit(report.result.exit_code)


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite existing .memolensrc.toml")
def init(force: bool) -> None:
    """Initialize a new .memolensrc.toml configuration file.

    Creates a configuration file with the default thresholds in the
    current directory.
    """
    from memolens.config import CONFIG_FILENAME, get_default_config_toml
    from memolens.errors import ExitCode
    from memolens.logging import print_error, print_status, print_warning

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists() and not force:
        print_warning(f"Configuration file already exists: {config_path}")
        print_status("Use --force to overwrite", ok=False)
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        config_path.write_text(get_default_config_toml())
        print_status(f"Created {config_path}")
    except PermissionError:
        print_error(f"Permission denied: {config_path}")
        sys.exit(ExitCode.CONFIG_ERROR)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
