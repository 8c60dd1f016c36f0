"""Data models for component analysis and optimization suggestions.

Every record here is built once per detected component and then left
alone; the only late write is ``ComponentAnalysis.attach_suggestions``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Added to ComponentAnalysis.dependencies when any hook call is present
FRAMEWORK_DEPENDENCY = "react"


class PropType(Enum):
    """Inferred type of a component prop."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    FUNCTION = "function"
    OBJECT = "object"
    ARRAY = "array"
    ELEMENT = "element"
    NODE = "node"
    CUSTOM = "custom"


class HookType(Enum):
    """Known hook kinds; anything else named ``use*`` is CUSTOM."""

    STATE = "useState"
    EFFECT = "useEffect"
    MEMO = "useMemo"
    CALLBACK = "useCallback"
    REF = "useRef"
    CONTEXT = "useContext"
    REDUCER = "useReducer"
    CUSTOM = "custom"

    @classmethod
    def from_name(cls, name: str) -> HookType:
        for member in cls:
            if member.value == name:
                return member
        return cls.CUSTOM


class HandlerType(Enum):
    """Event handler category, matched by substring in priority order."""

    CLICK = "click"
    CHANGE = "change"
    SUBMIT = "submit"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PropInfo:
    """A prop received by a component."""

    name: str
    type: PropType
    usage_count: int = 0
    is_required: bool = True
    updates: int = 0  # direct reassignments; non-zero is unusual but not an error

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "usage_count": self.usage_count,
            "is_required": self.is_required,
            "updates": self.updates,
        }


@dataclass(frozen=True)
class HookInfo:
    """One hook call site."""

    name: str
    type: HookType
    dependencies: list[str] = field(default_factory=list)
    complexity: int = 1
    wrapped_function: str | None = None  # only for useCallback bound to a const/let
    line: int = 0
    column: int = 0

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "dependencies": list(self.dependencies),
            "complexity": self.complexity,
            "line": self.line,
            "column": self.column,
        }
        if self.wrapped_function:
            result["wrapped_function"] = self.wrapped_function
        return result


@dataclass(frozen=True)
class ComplexityMetrics:
    """Size and branching metrics for one component body."""

    cyclomatic_complexity: int = 1
    cognitive_complexity: int = 0
    lines_of_code: int = 1
    dependencies: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "cyclomatic_complexity": self.cyclomatic_complexity,
            "cognitive_complexity": self.cognitive_complexity,
            "lines_of_code": self.lines_of_code,
            "dependencies": self.dependencies,
        }


@dataclass(frozen=True)
class EventHandler:
    """A function passed to markup as an event handler."""

    name: str
    type: HandlerType = HandlerType.CUSTOM
    uses_props: bool = False
    uses_state: bool = False
    has_cleanup: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "uses_props": self.uses_props,
            "uses_state": self.uses_state,
            "has_cleanup": self.has_cleanup,
        }


@dataclass(frozen=True)
class ChildComponent:
    """A memo-wrapped component seen from the analyzed component."""

    name: str
    is_memoized: bool = True
    received_functions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "is_memoized": self.is_memoized,
            "received_functions": list(self.received_functions),
        }


@dataclass(frozen=True)
class RenderAnalysis:
    """Heuristic facts about how often and how expensively a component renders."""

    estimated_render_count: int = 1
    has_expensive_calculations: bool = False
    has_expensive_operations: bool = False
    affected_by_state_changes: bool = False
    event_handlers: list[EventHandler] = field(default_factory=list)
    has_child_components: bool = False
    memoized_components: list[ChildComponent] = field(default_factory=list)
    function_prop_passing: bool = False
    has_state_updates: bool = False

    @property
    def has_event_handlers(self) -> bool:
        return len(self.event_handlers) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "estimated_render_count": self.estimated_render_count,
            "has_expensive_calculations": self.has_expensive_calculations,
            "has_expensive_operations": self.has_expensive_operations,
            "affected_by_state_changes": self.affected_by_state_changes,
            "event_handlers": [h.to_dict() for h in self.event_handlers],
            "has_event_handlers": self.has_event_handlers,
            "has_child_components": self.has_child_components,
            "memoized_components": [c.to_dict() for c in self.memoized_components],
            "function_prop_passing": self.function_prop_passing,
            "has_state_updates": self.has_state_updates,
        }


@dataclass(frozen=True)
class Impact:
    """Estimated benefit of applying a suggestion, each term in [0, 1]."""

    render_time_improvement: float = 0.0
    memory_improvement: float = 0.0
    bundle_size_impact: float = 0.0

    @property
    def improvement(self) -> float:
        """Render-time plus memory terms; the sort tie-breaker."""
        return self.render_time_improvement + self.memory_improvement

    def to_dict(self) -> dict[str, Any]:
        return {
            "render_time_improvement": self.render_time_improvement,
            "memory_improvement": self.memory_improvement,
            "bundle_size_impact": self.bundle_size_impact,
        }


@dataclass(frozen=True)
class OptimizationSuggestion:
    """One ranked, explainable optimization."""

    type: str
    description: str
    priority: int
    impact: Impact = field(default_factory=Impact)
    code_example: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "priority": self.priority,
            "impact": self.impact.to_dict(),
            "code_example": self.code_example,
        }


@dataclass
class ComponentAnalysis:
    """Everything known about one component after a single analysis pass."""

    name: str
    file_path: str
    props: list[PropInfo] = field(default_factory=list)
    hooks: list[HookInfo] = field(default_factory=list)
    complexity: ComplexityMetrics = field(default_factory=ComplexityMetrics)
    render_analysis: RenderAnalysis = field(default_factory=RenderAnalysis)
    dependencies: set[str] = field(default_factory=set)
    suggestions: list[OptimizationSuggestion] = field(default_factory=list)
    line: int = 0
    _suggestions_attached: bool = field(default=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("ComponentAnalysis requires a non-empty name")

    def hooks_of(self, *types: HookType) -> list[HookInfo]:
        return [h for h in self.hooks if h.type in types]

    def attach_suggestions(self, suggestions: list[OptimizationSuggestion]) -> None:
        """One-time population of ``suggestions``."""
        if self._suggestions_attached:
            raise RuntimeError(f"Suggestions already attached to {self.name}")
        self.suggestions = list(suggestions)
        self._suggestions_attached = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "file_path": self.file_path,
            "line": self.line,
            "props": [p.to_dict() for p in self.props],
            "hooks": [h.to_dict() for h in self.hooks],
            "complexity": self.complexity.to_dict(),
            "render_analysis": self.render_analysis.to_dict(),
            "dependencies": sorted(self.dependencies),
            "suggestions": [s.to_dict() for s in self.suggestions],
        }
