"""Tests for file discovery and project scans."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from memolens.analyzer.hooks import ViolationKind
from memolens.config import AnalyzerConfig
from memolens.errors import ExitCode, ProcessingResult, UnsupportedLanguageError
from memolens.scanner import analyze_file, analyze_source, iter_source_files, scan_project

CARD = """\
import { useState } from "react";

export function Card({ title }: { title: string }) {
  const [open, setOpen] = useState(false);
  const handleToggle = () => setOpen(!open);
  return <button onClick={handleToggle}>{title}</button>;
}
"""

BAD = """\
export function Bad({ flag }) {
  if (flag) {
    useEffect(() => {}, []);
  }
  return <div />;
}
"""

ANONYMOUS = """\
export default function () {
  return <div />;
}
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project tree with ignored, hidden and vendored files."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "Card.tsx").write_text(CARD)
    (src / "Card.test.tsx").write_text(CARD)
    (src / "Bad.tsx").write_text(BAD)
    (src / "Anon.jsx").write_text(ANONYMOUS)
    (src / "util.ts").write_text("export const add = (a: number, b: number) => a + b;\n")
    (src / "README.md").write_text("# not source\n")

    vendored = tmp_path / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "index.jsx").write_text(CARD)

    hidden = tmp_path / ".cache"
    hidden.mkdir()
    (hidden / "Card.tsx").write_text(CARD)
    return tmp_path


class TestIterSourceFiles:
    """Test source file discovery."""

    def test_discovery(self, project: Path) -> None:
        """Test vendored, hidden and ignored files are left out."""
        result = ProcessingResult()
        files = iter_source_files(project, AnalyzerConfig(), result)
        assert [f.relative_to(project).as_posix() for f in files] == [
            "src/Anon.jsx",
            "src/Bad.tsx",
            "src/Card.tsx",
            "src/util.ts",
        ]
        assert result.skipped == [{"path": "src/Card.test.tsx", "reason": "ignore_pattern"}]

    def test_custom_ignore_patterns(self, project: Path) -> None:
        """Test configured patterns replace the defaults."""
        config = AnalyzerConfig(ignore_patterns=[r"^src/Bad"])
        files = iter_source_files(project, config, ProcessingResult())
        names = [f.name for f in files]
        assert "Bad.tsx" not in names
        assert "Card.test.tsx" in names


class TestScanProject:
    """Test whole-project scans."""

    def test_scan(self, project: Path) -> None:
        """Test analyses, violations and diagnostics from one scan."""
        report = scan_project(project)

        assert [a.name for a in report.analyses] == ["Bad", "Card"]
        card = report.analyses[1]
        assert card.file_path == "src/Card.tsx"
        assert card.dependencies == {"react"}
        assert "memoize-event-handlers" in [s.type for s in card.suggestions]

        (violation,) = report.violations["src/Bad.tsx:Bad"]
        assert violation.kind is ViolationKind.CONDITION
        assert violation.hook == "useEffect"

        result = report.result
        assert len(result.processed) == 4
        assert [e["path"] for e in result.excluded] == ["src/Anon.jsx"]
        assert result.exit_code == ExitCode.PARTIAL_SUCCESS

    def test_report_is_json_serializable(self, project: Path) -> None:
        """Test the report converts to plain JSON."""
        data = json.loads(json.dumps(scan_project(project).to_dict()))
        assert [c["name"] for c in data["components"]] == ["Bad", "Card"]
        assert data["summary"]["excluded"] == 1
        assert data["violations"]["src/Bad.tsx:Bad"][0]["kind"] == "condition"

    def test_single_file_root(self, project: Path) -> None:
        """Test a file root is scanned on its own."""
        report = scan_project(project / "src" / "Card.tsx")
        assert [a.file_path for a in report.analyses] == ["Card.tsx"]
        assert report.result.exit_code == ExitCode.SUCCESS


class TestAnalyzeHelpers:
    """Test in-memory and single-file analysis."""

    def test_analyze_source(self) -> None:
        """Test components are found in source text."""
        (analysis,) = analyze_source(CARD, "Card.tsx")
        assert analysis.name == "Card"
        assert analysis.line == 3
        assert analysis.suggestions == []

    def test_unexported_functions_ignored(self) -> None:
        """Test non-exported markup functions are not components."""
        source = "function Hidden() {\n  return <div />;\n}\n"
        assert analyze_source(source) == []

    def test_excluded_candidate(self) -> None:
        """Test anonymous default exports are recorded as excluded."""
        result = ProcessingResult()
        assert analyze_source(ANONYMOUS, "Anon.tsx", result=result) == []
        assert result.excluded[0]["path"] == "Anon.tsx"

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Test files without a grammar are rejected."""
        path = tmp_path / "styles.css"
        path.write_text("a {}\n")
        with pytest.raises(UnsupportedLanguageError):
            analyze_file(path)
