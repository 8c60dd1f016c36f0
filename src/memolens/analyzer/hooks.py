"""Hook usage analysis and hook-rule validation.

Usage:
    from memolens.analyzer.hooks import analyze_hooks, HookRuleValidator

    hooks = analyze_hooks(component_node, source)

    validator = HookRuleValidator()
    for violation in validator.validate(component_node, source, key="App.tsx:App"):
        print(violation.message)
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tree_sitter import Node

from memolens.analyzer.models import HookInfo, HookType
from memolens.parser.base import (
    LOOP_TYPES,
    binary_operator,
    call_arguments,
    callee_name,
    get_node_text,
    node_line,
    unwrap_parens,
    walk,
)
from memolens.parser.queries import (
    EFFECT_HOOK,
    STATE_HOOK,
    is_function_value,
    is_hook_call,
    is_set_state_member,
    is_specific_hook,
    is_state_setter_call,
)
from memolens.parser.scope import is_declaration_site, resolve_binding

logger = logging.getLogger(__name__)

CONDITION_TYPES = frozenset({"if_statement", "switch_statement", "ternary_expression"})

# Hooks whose results never change identity between renders
STABLE_HOOKS = frozenset({"useRef"})


class ViolationKind(Enum):
    """Kind of hook-rule violation."""

    LOOP = "loop"
    CONDITION = "condition"
    ORDER = "order"
    MISSING_DEPENDENCY = "missing_dependency"


@dataclass(frozen=True)
class HookViolation:
    """A hook-rule diagnostic; not part of ComponentAnalysis."""

    kind: ViolationKind
    message: str
    hook: str | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "hook": self.hook,
            "line": self.line,
        }


def hook_dependencies(call: Node, source: bytes) -> list[str]:
    """Identifier elements of a literal dependency array (second argument)."""
    args = call_arguments(call)
    if len(args) < 2:
        return []
    deps = unwrap_parens(args[1])
    if deps is None or deps.type != "array":
        return []
    return [get_node_text(e, source) for e in deps.named_children if e.type == "identifier"]


def has_dependency_array(call: Node) -> bool:
    args = call_arguments(call)
    return len(args) >= 2 and unwrap_parens(args[1]).type == "array"


def wrapped_function_name(call: Node, source: bytes) -> str | None:
    """Identifier a useCallback result is bound to via const/let."""
    parent = call.parent
    if parent is None or parent.type != "variable_declarator":
        return None
    value = parent.child_by_field_name("value")
    if value is None or value.start_byte != call.start_byte:
        return None
    declaration = parent.parent
    if declaration is None or declaration.type != "lexical_declaration":
        return None
    name = parent.child_by_field_name("name")
    if name is None or name.type != "identifier":
        return None
    return get_node_text(name, source)


def calculate_hook_complexity(call: Node, source: bytes) -> int:
    """1, plus branching in the callback, plus ceil(deps / 3)."""
    complexity = 1
    args = call_arguments(call)
    callback = unwrap_parens(args[0]) if args else None

    if callback is not None and is_function_value(callback):
        for n in walk(callback):
            if n.type == "if_statement":
                complexity += 1
            elif n.type in LOOP_TYPES:
                complexity += 2
            elif n.type == "ternary_expression":
                complexity += 1
            elif n.type == "binary_expression" and binary_operator(n, source) in ("&&", "||"):
                complexity += 1
            elif n.type == "call_expression" and is_state_setter_call(n, source):
                complexity += 1
            elif n.type == "member_expression" and is_set_state_member(n, source):
                complexity += 1

    complexity += math.ceil(len(hook_dependencies(call, source)) / 3)
    return complexity


def analyze_hooks(node: Node, source: bytes) -> list[HookInfo]:
    """Enumerate hook calls in appearance order, one record per call site."""
    hooks: dict[tuple[str, int, int], HookInfo] = {}

    for call in walk(node):
        if not is_hook_call(call, source):
            continue
        name = callee_name(call, source)
        line, column = call.start_point[0] + 1, call.start_point[1]
        key = (name, line, column)
        if key in hooks:
            continue

        hook_type = HookType.from_name(name)
        hooks[key] = HookInfo(
            name=name,
            type=hook_type,
            dependencies=hook_dependencies(call, source),
            complexity=calculate_hook_complexity(call, source),
            wrapped_function=(
                wrapped_function_name(call, source) if hook_type is HookType.CALLBACK else None
            ),
            line=line,
            column=column,
        )

    return list(hooks.values())


def _within(inner: Node, outer: Node) -> bool:
    return outer.start_byte <= inner.start_byte and inner.end_byte <= outer.end_byte


class HookRuleValidator:
    """Checks hook placement, call order and effect dependencies.

    A hook name that reappears at a different ordinal than its first
    occurrence in the top-level call order is an order violation. The
    first order seen for a component key is also recorded, and later
    validations of the same key are compared against it.
    """

    def __init__(self) -> None:
        self._orders: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def recorded_order(self, key: str) -> list[str] | None:
        with self._lock:
            order = self._orders.get(key)
            return list(order) if order is not None else None

    def validate(self, node: Node, source: bytes, key: str | None = None) -> list[HookViolation]:
        """Validate hook rules for one component.

        Args:
            node: Component function node.
            source: Source bytes of the file.
            key: Component identity used for the call-order comparison.

        Returns:
            Violations in traversal order.
        """
        violations: list[HookViolation] = []
        order: list[str] = []

        def visit(n: Node, context: ViolationKind | None) -> None:
            if is_hook_call(n, source):
                name = callee_name(n, source)
                if context is ViolationKind.LOOP:
                    violations.append(
                        HookViolation(context, f'Hook "{name}" is called inside a loop', name, node_line(n))
                    )
                elif context is ViolationKind.CONDITION:
                    violations.append(
                        HookViolation(context, f'Hook "{name}" is called inside a condition', name, node_line(n))
                    )
                else:
                    order.append(name)
                if name == EFFECT_HOOK:
                    violations.extend(self._missing_dependencies(n, node, source))

            child_context = context
            if n.type in LOOP_TYPES:
                child_context = ViolationKind.LOOP
            elif n.type in CONDITION_TYPES:
                child_context = ViolationKind.CONDITION
            for child in n.children:
                visit(child, child_context)

        visit(node, None)

        consistent = _is_consistent_order(order)
        if key is not None:
            consistent = self._check_order(key, order) and consistent
        if not consistent:
            violations.append(
                HookViolation(ViolationKind.ORDER, "Hooks are called in inconsistent order")
            )
        return violations

    def _check_order(self, key: str, order: list[str]) -> bool:
        with self._lock:
            recorded = self._orders.get(key)
            if recorded is None:
                self._orders[key] = list(order)
                return True
        for name in dict.fromkeys(order):
            if name in recorded and order.index(name) != recorded.index(name):
                logger.debug(f"Hook {name} moved from {recorded.index(name)} to {order.index(name)} in {key}")
                return False
        return True

    def _missing_dependencies(self, call: Node, component: Node, source: bytes) -> list[HookViolation]:
        if not has_dependency_array(call):
            return []
        args = call_arguments(call)
        callback = unwrap_parens(args[0])
        if not is_function_value(callback):
            return []

        deps = set(hook_dependencies(call, source))
        reported: list[str] = []
        for ident in walk(callback):
            if ident.type not in ("identifier", "shorthand_property_identifier"):
                continue
            if is_declaration_site(ident):
                continue
            name = get_node_text(ident, source)
            if name in deps or name in reported:
                continue
            binding = resolve_binding(ident, source, name)
            if binding is None or _within(binding.scope, callback):
                continue
            if not _within(binding.scope, component):
                continue
            if _is_stable_binding(binding.value, binding.array_index, source):
                continue
            reported.append(name)

        return [
            HookViolation(
                ViolationKind.MISSING_DEPENDENCY,
                f"Effect is missing dependency: {name}",
                EFFECT_HOOK,
                node_line(call),
            )
            for name in reported
        ]


def _is_stable_binding(value: Node | None, array_index: int | None, source: bytes) -> bool:
    """State setters and refs keep their identity across renders."""
    value = unwrap_parens(value)
    if value is None or value.type != "call_expression":
        return False
    if array_index == 1 and is_specific_hook(value, source, STATE_HOOK):
        return True
    return callee_name(value, source) in STABLE_HOOKS and array_index is None


def _is_consistent_order(order: list[str]) -> bool:
    """Each hook name sits at the ordinal of its first occurrence."""
    return all(order.index(name) == index for index, name in enumerate(order))


def validate_hook_rules(node: Node, source: bytes) -> list[HookViolation]:
    """Validate with a fresh validator (no recorded call orders)."""
    return HookRuleValidator().validate(node, source)


__all__ = [
    "HookRuleValidator",
    "HookViolation",
    "ViolationKind",
    "analyze_hooks",
    "calculate_hook_complexity",
    "hook_dependencies",
    "validate_hook_rules",
    "wrapped_function_name",
]
