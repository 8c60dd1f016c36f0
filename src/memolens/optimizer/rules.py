"""Optimization rules.

A rule is a plain record of callables: ``test`` decides whether it fires,
``suggestion`` renders the description, ``code_example`` renders sample
code, and ``is_applied`` reports that the optimization is already in
place. Custom rules only need ``name``, ``description``, ``priority``,
``test`` and ``suggestion``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from memolens.analyzer.models import ComponentAnalysis, HookType, PropType

# Dependency arrays longer than this are flagged
MAX_DEPENDENCIES = 3

Predicate = Callable[[ComponentAnalysis], bool]
Formatter = Callable[[ComponentAnalysis], str]


@runtime_checkable
class Rule(Protocol):
    """Protocol every rule (built-in or custom) satisfies."""

    name: str
    description: str
    priority: int

    def test(self, analysis: ComponentAnalysis) -> bool: ...

    def suggestion(self, analysis: ComponentAnalysis) -> str: ...


def _never(analysis: ComponentAnalysis) -> bool:
    return False


def _no_example(analysis: ComponentAnalysis) -> str:
    return ""


@dataclass(frozen=True)
class OptimizationRule:
    """One optimization rule."""

    name: str
    description: str
    priority: int
    test: Predicate
    suggestion: Formatter
    code_example: Formatter = _no_example
    is_applied: Predicate = _never
    bundle_size_impact: float = 0.0


def wrapped_functions(analysis: ComponentAnalysis) -> set[str]:
    """Names bound to useCallback results."""
    return {h.wrapped_function for h in analysis.hooks_of(HookType.CALLBACK) if h.wrapped_function}


def unwrapped_functions(analysis: ComponentAnalysis) -> list[str]:
    """Handlers and function props not bound through useCallback."""
    wrapped = wrapped_functions(analysis)
    names: list[str] = []
    for handler in analysis.render_analysis.event_handlers:
        if handler.name not in wrapped and handler.name not in names:
            names.append(handler.name)
    for prop in analysis.props:
        if prop.type is PropType.FUNCTION and prop.name not in wrapped and prop.name not in names:
            names.append(prop.name)
    return names


def memoized_children(analysis: ComponentAnalysis) -> list[str]:
    """Memo-wrapped components other than the component itself."""
    return [c.name for c in analysis.render_analysis.memoized_components if c.name != analysis.name]


def oversized_dependency_hooks(analysis: ComponentAnalysis) -> list[tuple[str, int]]:
    hooks = analysis.hooks_of(HookType.EFFECT, HookType.MEMO, HookType.CALLBACK)
    return [(h.name, len(h.dependencies)) for h in hooks if len(h.dependencies) > MAX_DEPENDENCIES]


def _has_hook(*types: HookType) -> Predicate:
    def check(analysis: ComponentAnalysis) -> bool:
        return bool(analysis.hooks_of(*types))

    return check


# memoize-expensive-value


def _expensive_value_test(analysis: ComponentAnalysis) -> bool:
    if any(h.wrapped_function for h in analysis.hooks_of(HookType.CALLBACK)):
        return False
    render = analysis.render_analysis
    return (
        analysis.complexity.cyclomatic_complexity > 5
        or render.has_expensive_calculations
        or render.has_expensive_operations
    )


def _expensive_value_suggestion(analysis: ComponentAnalysis) -> str:
    render = analysis.render_analysis
    reasons = [f"cyclomatic complexity {analysis.complexity.cyclomatic_complexity}"]
    if render.has_expensive_calculations:
        reasons.append("nested loops above the complexity threshold")
    if render.has_expensive_operations:
        reasons.append("large array operations")
    return (
        f"Consider useMemo for derived values in {analysis.name} "
        f"({', '.join(reasons)}); recomputing them on each of an estimated "
        f"{render.estimated_render_count} renders is wasted work."
    )


def _expensive_value_example(analysis: ComponentAnalysis) -> str:
    return (
        "const value = useMemo(() => {\n"
        "  return expensiveOperation(input);\n"
        "}, [input]);"
    )


# memoize-event-handlers


def _event_handlers_test(analysis: ComponentAnalysis) -> bool:
    if unwrapped_functions(analysis):
        return True
    return analysis.render_analysis.has_child_components and not analysis.hooks_of(HookType.CALLBACK)


def _event_handlers_suggestion(analysis: ComponentAnalysis) -> str:
    names = unwrapped_functions(analysis)
    if not names:
        return (
            f"{analysis.name} passes functions to child components; wrap them in useCallback "
            "to keep their identity stable between renders."
        )
    return (
        f"Consider useCallback for {len(names)} function(s) in {analysis.name}: "
        f"{', '.join(names)}. They are recreated on every render."
    )


def _event_handlers_example(analysis: ComponentAnalysis) -> str:
    names = unwrapped_functions(analysis)
    name = names[0] if names and names[0].startswith(("handle", "on")) else "handleEvent"
    return (
        f"const {name} = useCallback((event) => {{\n"
        "  // handler logic\n"
        "}, [/* dependencies */]);"
    )


# memoize-callback-for-memo-children


def _memo_children_test(analysis: ComponentAnalysis) -> bool:
    return bool(memoized_children(analysis)) and analysis.render_analysis.function_prop_passing


def _memo_children_suggestion(analysis: ComponentAnalysis) -> str:
    children = [
        c for c in analysis.render_analysis.memoized_components if c.name != analysis.name
    ]
    details = ", ".join(
        f"{c.name} ({', '.join(c.received_functions)})" if c.received_functions else c.name
        for c in children
    )
    return (
        f"{analysis.name} passes functions to {len(children)} memoized component(s): {details}. "
        "Wrap those callbacks in useCallback so memo can skip re-renders."
    )


def _memo_children_example(analysis: ComponentAnalysis) -> str:
    children = memoized_children(analysis)
    child = children[0] if children else "MemoizedChild"
    return (
        "const handleAction = useCallback((value) => {\n"
        "  // callback logic\n"
        "}, [/* dependencies */]);\n"
        "\n"
        f"<{child} onAction={{handleAction}} />"
    )


# wrap-in-memo


def _wrap_in_memo_test(analysis: ComponentAnalysis) -> bool:
    return (
        len(analysis.hooks) <= 1
        and len(analysis.props) >= 1
        and analysis.render_analysis.estimated_render_count > 3
    )


def _wrap_in_memo_applied(analysis: ComponentAnalysis) -> bool:
    return any(c.name == analysis.name for c in analysis.render_analysis.memoized_components)


def _wrap_in_memo_suggestion(analysis: ComponentAnalysis) -> str:
    return (
        f"{analysis.name} receives {len(analysis.props)} prop(s), uses {len(analysis.hooks)} hook(s) "
        f"and renders an estimated {analysis.render_analysis.estimated_render_count} times; "
        "wrap it in React.memo to skip renders with unchanged props."
    )


def _wrap_in_memo_example(analysis: ComponentAnalysis) -> str:
    props = ", ".join(p.name for p in analysis.props)
    return (
        f"const {analysis.name} = React.memo(function {analysis.name}({{ {props} }}) {{\n"
        "  // render logic\n"
        "});"
    )


# optimize-dependency-arrays


def _dependency_arrays_test(analysis: ComponentAnalysis) -> bool:
    return bool(oversized_dependency_hooks(analysis))


def _dependency_arrays_suggestion(analysis: ComponentAnalysis) -> str:
    oversized = oversized_dependency_hooks(analysis)
    largest = max(count for _, count in oversized)
    hooks = ", ".join(f"{name} ({count})" for name, count in oversized)
    return (
        f"{len(oversized)} hook(s) in {analysis.name} depend on more than {MAX_DEPENDENCIES} values "
        f"(largest: {largest}): {hooks}. Split them or derive stable values first."
    )


def _dependency_arrays_example(analysis: ComponentAnalysis) -> str:
    return (
        "const query = useMemo(() => ({ page, size }), [page, size]);\n"
        "useEffect(() => {\n"
        "  fetchItems(query);\n"
        "}, [query]);"
    )


MEMOIZE_EXPENSIVE_VALUE = OptimizationRule(
    name="memoize-expensive-value",
    description="Suggest useMemo for expensive derived values",
    priority=5,
    test=_expensive_value_test,
    suggestion=_expensive_value_suggestion,
    code_example=_expensive_value_example,
    is_applied=_has_hook(HookType.MEMO),
    bundle_size_impact=0.01,
)

MEMOIZE_EVENT_HANDLERS = OptimizationRule(
    name="memoize-event-handlers",
    description="Suggest useCallback for event handlers and function props",
    priority=4,
    test=_event_handlers_test,
    suggestion=_event_handlers_suggestion,
    code_example=_event_handlers_example,
    is_applied=_has_hook(HookType.CALLBACK),
    bundle_size_impact=0.01,
)

MEMOIZE_CALLBACK_FOR_MEMO_CHILDREN = OptimizationRule(
    name="memoize-callback-for-memo-children",
    description="Suggest useCallback for functions passed to memoized children",
    priority=4,
    test=_memo_children_test,
    suggestion=_memo_children_suggestion,
    code_example=_memo_children_example,
    is_applied=_has_hook(HookType.CALLBACK),
    bundle_size_impact=0.01,
)

WRAP_IN_MEMO = OptimizationRule(
    name="wrap-in-memo",
    description="Suggest React.memo for cheap, prop-driven components",
    priority=3,
    test=_wrap_in_memo_test,
    suggestion=_wrap_in_memo_suggestion,
    code_example=_wrap_in_memo_example,
    is_applied=_wrap_in_memo_applied,
    bundle_size_impact=0.02,
)

OPTIMIZE_DEPENDENCY_ARRAYS = OptimizationRule(
    name="optimize-dependency-arrays",
    description="Flag hooks with long dependency arrays",
    priority=3,
    test=_dependency_arrays_test,
    suggestion=_dependency_arrays_suggestion,
    code_example=_dependency_arrays_example,
    bundle_size_impact=0.0,
)

DEFAULT_RULES: list[OptimizationRule] = [
    MEMOIZE_EXPENSIVE_VALUE,
    MEMOIZE_EVENT_HANDLERS,
    MEMOIZE_CALLBACK_FOR_MEMO_CHILDREN,
    WRAP_IN_MEMO,
    OPTIMIZE_DEPENDENCY_ARRAYS,
]
