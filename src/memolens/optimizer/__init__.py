"""memolens optimizer - rule engine producing ranked suggestions."""

from memolens.optimizer.engine import OptimizationEngine, compute_content_hash
from memolens.optimizer.impact import calculate_impact, calculate_priority
from memolens.optimizer.rules import DEFAULT_RULES, OptimizationRule, Rule

__all__ = [
    "OptimizationEngine",
    "OptimizationRule",
    "Rule",
    "DEFAULT_RULES",
    "calculate_impact",
    "calculate_priority",
    "compute_content_hash",
]
