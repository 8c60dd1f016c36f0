"""Component extraction: assemble a ComponentAnalysis for one function node."""

from __future__ import annotations

import logging

from tree_sitter import Node

from memolens.analyzer.hooks import analyze_hooks
from memolens.analyzer.metrics import calculate_complexity, external_imports
from memolens.analyzer.models import FRAMEWORK_DEPENDENCY, ComponentAnalysis
from memolens.analyzer.props import extract_props
from memolens.analyzer.render import analyze_rendering_behavior
from memolens.config import AnalyzerConfig
from memolens.errors import NotAComponentError
from memolens.parser.base import node_line
from memolens.parser.queries import binding_name_of

logger = logging.getLogger(__name__)


def collect_dependencies(node: Node, source: bytes, has_hooks: bool) -> set[str]:
    """External import specifiers plus the framework marker when hooks are used."""
    dependencies = set(external_imports(node, source))
    if has_hooks:
        dependencies.add(FRAMEWORK_DEPENDENCY)
    return dependencies


def analyze_component(
    node: Node,
    file_path: str,
    config: AnalyzerConfig,
    source: bytes,
) -> ComponentAnalysis:
    """Build the analysis for one component-shaped function.

    Args:
        node: Function-like node accepted by ``is_component_shaped``.
        file_path: Identifier of the file, carried through unchanged.
        config: Analyzer thresholds.
        source: Source bytes the node's offsets point into.

    Returns:
        ComponentAnalysis with an empty suggestion list.

    Raises:
        NotAComponentError: If no binding name can be resolved.
    """
    name = binding_name_of(node, source)
    if name is None:
        raise NotAComponentError(file_path, node_line(node))

    hooks = analyze_hooks(node, source)
    analysis = ComponentAnalysis(
        name=name,
        file_path=file_path,
        props=extract_props(node, source),
        hooks=hooks,
        complexity=calculate_complexity(node, source),
        render_analysis=analyze_rendering_behavior(node, source, config, hooks),
        dependencies=collect_dependencies(node, source, bool(hooks)),
        line=node_line(node),
    )
    logger.debug(
        f"Analyzed {name} in {file_path}: {len(analysis.props)} props, {len(hooks)} hooks, "
        f"cyclomatic {analysis.complexity.cyclomatic_complexity}"
    )
    return analysis
