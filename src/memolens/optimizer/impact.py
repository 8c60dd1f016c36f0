"""Priority and impact estimation for suggestions."""

from __future__ import annotations

from memolens.analyzer.models import ComponentAnalysis, HookType, Impact

MIN_PRIORITY = 1
MAX_PRIORITY = 10


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def has_leak_potential(analysis: ComponentAnalysis) -> bool:
    """An effect with no visible cleanup work, or a handler without cleanup."""
    if any(h.complexity <= 1 for h in analysis.hooks_of(HookType.EFFECT)):
        return True
    return any(not h.has_cleanup for h in analysis.render_analysis.event_handlers)


def estimate_render_time_improvement(analysis: ComponentAnalysis) -> float:
    render = analysis.render_analysis
    improvement = analysis.complexity.cyclomatic_complexity * 0.1
    if render.has_expensive_calculations:
        improvement += 0.2
    if render.has_expensive_operations:
        improvement += 0.15
    return clamp(improvement)


def estimate_memory_improvement(analysis: ComponentAnalysis) -> float:
    render = analysis.render_analysis
    improvement = 0.0
    if render.estimated_render_count > 5:
        improvement += 0.2
    if render.has_expensive_operations:
        improvement += 0.3
    if has_leak_potential(analysis):
        improvement += 0.1
    return clamp(improvement)


def calculate_impact(analysis: ComponentAnalysis, bundle_size_impact: float = 0.0) -> Impact:
    """Impact of a rule on a component, every term clamped to [0, 1]."""
    return Impact(
        render_time_improvement=estimate_render_time_improvement(analysis),
        memory_improvement=estimate_memory_improvement(analysis),
        bundle_size_impact=clamp(bundle_size_impact),
    )


def calculate_priority(base: int, analysis: ComponentAnalysis) -> int:
    """Boost a rule's base priority by render count, complexity and children."""
    priority = base
    if analysis.render_analysis.estimated_render_count > 5:
        priority += 2
    if analysis.complexity.cyclomatic_complexity > 8:
        priority += 2
    if analysis.render_analysis.has_child_components:
        priority += 1
    return int(clamp(priority, MIN_PRIORITY, MAX_PRIORITY))
