"""Tests for the memolens CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from memolens.cli import cli
from memolens.config import CONFIG_FILENAME

GRID = """\
export function Grid() {
  const cells = new Array(1000).map((_, i) => i);
  return <div>{cells}</div>;
}
"""


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """CLI runner isolated from any user-level configuration."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "app"
    root.mkdir()
    (root / "Grid.tsx").write_text(GRID)
    return root


class TestCliGroup:
    """Test the top-level command group."""

    def test_help(self, runner: CliRunner) -> None:
        """Test that the help lists both commands."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "analyze" in result.output
        assert "init" in result.output

    def test_version(self, runner: CliRunner) -> None:
        """Test --version flag."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "memolens" in result.output
        assert "0.1.0" in result.output


class TestAnalyzeCommand:
    """Test the analyze command."""

    def test_json_output(self, runner: CliRunner, project: Path) -> None:
        """Test --json prints the full report."""
        result = runner.invoke(cli, ["-q", "analyze", str(project), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        (component,) = data["components"]
        assert component["name"] == "Grid"
        assert [s["type"] for s in component["suggestions"]] == ["memoize-expensive-value"]
        assert data["summary"]["exit_code"] == 0

    def test_table_output(self, runner: CliRunner, project: Path) -> None:
        """Test the default output names the component and the rule."""
        result = runner.invoke(cli, ["analyze", str(project)])
        assert result.exit_code == 0
        assert "Grid" in result.output
        assert "memoize-expensive-value" in result.output

    def test_config_thresholds_apply(self, runner: CliRunner, project: Path, tmp_path: Path) -> None:
        """Test --config raises the array threshold above the literal size."""
        config_path = tmp_path / "loose.toml"
        config_path.write_text(
            "[performance_threshold]\ncomplexity = 10\narray_size = 5000\ncomputation_weight = 0.7\n"
        )
        result = runner.invoke(
            cli, ["-q", "--config", str(config_path), "analyze", str(project), "--json"]
        )
        assert result.exit_code == 0
        (component,) = json.loads(result.stdout)["components"]
        assert component["suggestions"] == []

    def test_malformed_config(self, runner: CliRunner, project: Path, tmp_path: Path) -> None:
        """Test an invalid configuration exits with the config error code."""
        config_path = tmp_path / "bad.toml"
        config_path.write_text("ignore_patterns = ['(']\n")
        result = runner.invoke(cli, ["--config", str(config_path), "analyze", str(project)])
        assert result.exit_code == 1

    def test_skipped_files_are_partial(self, runner: CliRunner, project: Path) -> None:
        """Test ignored files lead to a partial-success exit code."""
        (project / "Grid.test.tsx").write_text(GRID)
        result = runner.invoke(cli, ["-q", "analyze", str(project), "--json"])
        assert result.exit_code == 2


class TestInitCommand:
    """Test the init command."""

    def test_creates_config(self, runner: CliRunner) -> None:
        """Test init writes the default configuration once."""
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init"])
            assert result.exit_code == 0
            assert "[performance_threshold]" in Path(CONFIG_FILENAME).read_text()

            again = runner.invoke(cli, ["init"])
            assert again.exit_code == 1

            forced = runner.invoke(cli, ["init", "--force"])
            assert forced.exit_code == 0
