"""memolens analyzer - per-component facts extracted from the syntax tree."""

from memolens.analyzer.component import analyze_component
from memolens.analyzer.hooks import HookRuleValidator, HookViolation, ViolationKind, analyze_hooks, validate_hook_rules
from memolens.analyzer.metrics import calculate_complexity
from memolens.analyzer.models import (
    ChildComponent,
    ComplexityMetrics,
    ComponentAnalysis,
    EventHandler,
    HandlerType,
    HookInfo,
    HookType,
    Impact,
    OptimizationSuggestion,
    PropInfo,
    PropType,
    RenderAnalysis,
)
from memolens.analyzer.props import extract_props
from memolens.analyzer.render import analyze_rendering_behavior

__all__ = [
    "analyze_component",
    "analyze_hooks",
    "analyze_rendering_behavior",
    "calculate_complexity",
    "extract_props",
    "validate_hook_rules",
    "HookRuleValidator",
    "HookViolation",
    "ViolationKind",
    "ChildComponent",
    "ComplexityMetrics",
    "ComponentAnalysis",
    "EventHandler",
    "HandlerType",
    "HookInfo",
    "HookType",
    "Impact",
    "OptimizationSuggestion",
    "PropInfo",
    "PropType",
    "RenderAnalysis",
]
