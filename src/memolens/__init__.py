"""memolens - static memoization advice for React function components."""

__version__ = "0.1.0"

from memolens.analyzer import ComponentAnalysis, OptimizationSuggestion, analyze_component  # noqa: E402
from memolens.config import AnalyzerConfig  # noqa: E402
from memolens.optimizer import OptimizationEngine  # noqa: E402
from memolens.scanner import analyze_file, analyze_source, scan_project  # noqa: E402

__all__ = [
    "__version__",
    "AnalyzerConfig",
    "ComponentAnalysis",
    "OptimizationEngine",
    "OptimizationSuggestion",
    "analyze_component",
    "analyze_file",
    "analyze_source",
    "scan_project",
]
