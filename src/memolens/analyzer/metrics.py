"""Complexity metrics for component bodies."""

from __future__ import annotations

from tree_sitter import Node

from memolens.analyzer.models import ComplexityMetrics
from memolens.parser.base import (
    LOOP_TYPES,
    binary_operator,
    function_body,
    get_node_text,
    string_value,
    walk,
)
from memolens.parser.queries import is_hook_call

# Binary operators that count as decision points
LOGICAL_OPERATORS: set[str] = {"&&", "||"}

NESTING_TYPES = LOOP_TYPES | {"if_statement"}


def program_of(node: Node) -> Node:
    """Root of the tree ``node`` belongs to."""
    while node.parent is not None:
        node = node.parent
    return node


def is_external_specifier(specifier: str) -> bool:
    return bool(specifier) and not specifier.startswith((".", "/"))


def external_imports(node: Node, source: bytes) -> list[str]:
    """Distinct non-relative static import specifiers of the enclosing file, in order."""
    program = program_of(node)
    seen: list[str] = []
    for statement in program.named_children:
        if statement.type != "import_statement":
            continue
        spec = statement.child_by_field_name("source")
        if spec is None:
            continue
        module = string_value(spec, source)
        if is_external_specifier(module) and module not in seen:
            seen.append(module)
    return seen


def has_hook_call(node: Node, source: bytes) -> bool:
    return any(is_hook_call(n, source) for n in walk(node))


def is_logical(node: Node, source: bytes) -> bool:
    return binary_operator(node, source) in LOGICAL_OPERATORS


def calculate_cyclomatic_complexity(body: Node, source: bytes) -> int:
    """McCabe complexity: 1 plus one per decision point.

    Decision points: if, switch case, && / ||, loops, try, catch, finally.
    """
    complexity = 1
    for n in walk(body):
        if n.type in ("if_statement", "switch_case") or n.type in LOOP_TYPES:
            complexity += 1
        elif n.type == "binary_expression" and is_logical(n, source):
            complexity += 1
        elif n.type == "try_statement":
            complexity += 1
            if n.child_by_field_name("handler") is not None:
                complexity += 1
            if n.child_by_field_name("finalizer") is not None:
                complexity += 1
    return complexity


def calculate_cognitive_complexity(body: Node, source: bytes) -> int:
    """Nesting-weighted complexity.

    if/loops add 1 + current depth and deepen their own subtree only;
    ternaries and && / || add a flat 1.
    """
    complexity = 0

    def visit(n: Node, depth: int) -> None:
        nonlocal complexity
        child_depth = depth
        if n.type in NESTING_TYPES:
            complexity += 1 + depth
            child_depth = depth + 1
        elif n.type == "ternary_expression":
            complexity += 1
        elif n.type == "binary_expression" and is_logical(n, source):
            complexity += 1
        for child in n.children:
            visit(child, child_depth)

    visit(body, 0)
    return complexity


def calculate_lines_of_code(node: Node, source: bytes) -> int:
    return max(1, get_node_text(node, source).count("\n") + 1)


def calculate_dependencies(node: Node, source: bytes) -> int:
    """Distinct external imports of the file plus one if any hook is called."""
    count = len(external_imports(node, source))
    if has_hook_call(node, source):
        count += 1
    return count


def calculate_complexity(node: Node, source: bytes) -> ComplexityMetrics:
    """Compute all metrics for a function-like node."""
    body = function_body(node) or node
    return ComplexityMetrics(
        cyclomatic_complexity=calculate_cyclomatic_complexity(body, source),
        cognitive_complexity=calculate_cognitive_complexity(body, source),
        lines_of_code=calculate_lines_of_code(node, source),
        dependencies=calculate_dependencies(node, source),
    )
