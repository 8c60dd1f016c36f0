"""Lexical binding resolution over tree-sitter nodes.

Tree-sitter produces a concrete syntax tree with no scope model, so the
analyzers resolve identifiers here: walk outwards from the identifier and
return the innermost declaration site that binds the same name.

Scopes considered are the program, statement blocks, switch bodies,
function-like nodes (their parameters), ``for`` heads and catch clauses.
Declarations inside a nested function never leak outwards.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tree_sitter import Node

from memolens.parser.base import FUNCTION_TYPES, get_node_text, is_function_node

SCOPE_TYPES = frozenset(
    {
        "program",
        "statement_block",
        "switch_body",
        "for_statement",
        "for_in_statement",
        "catch_clause",
    }
    | FUNCTION_TYPES
)

DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})


@dataclass
class Binding:
    """Where a name was introduced."""

    name: str
    kind: str  # variable | function | parameter | import | catch | class
    identifier: Node
    scope: Node
    declarator: Node | None = None
    array_index: int | None = None  # position in a top-level array pattern

    @property
    def value(self) -> Node | None:
        """Initializer of the declarator, if any."""
        if self.declarator is None:
            return None
        return self.declarator.child_by_field_name("value")


def array_pattern_elements(pattern: Node) -> list[tuple[int, Node]]:
    """Elements of an array pattern with their positional index (holes count)."""
    elements: list[tuple[int, Node]] = []
    index = 0
    for child in pattern.children:
        if child.type == ",":
            index += 1
        elif child.is_named and child.type != "comment":
            elements.append((index, child))
    return elements


def pattern_identifiers(pattern: Node | None) -> list[tuple[Node, int | None]]:
    """Identifiers bound by a declaration pattern.

    Returns (identifier node, array index) pairs; the index is set only
    for direct elements of a top-level array pattern.
    """
    if pattern is None:
        return []
    kind = pattern.type
    if kind in ("identifier", "shorthand_property_identifier_pattern"):
        return [(pattern, None)]
    if kind in ("required_parameter", "optional_parameter"):
        return pattern_identifiers(pattern.child_by_field_name("pattern"))
    if kind in ("assignment_pattern", "object_assignment_pattern"):
        return pattern_identifiers(pattern.child_by_field_name("left"))
    if kind == "rest_pattern":
        return [(n, None) for c in pattern.named_children for n, _ in pattern_identifiers(c)]
    if kind == "pair_pattern":
        return pattern_identifiers(pattern.child_by_field_name("value"))
    if kind == "object_pattern":
        found: list[tuple[Node, int | None]] = []
        for child in pattern.named_children:
            found.extend((n, None) for n, _ in pattern_identifiers(child))
        return found
    if kind == "array_pattern":
        found = []
        for index, element in array_pattern_elements(pattern):
            inner = pattern_identifiers(element)
            direct = element.type in ("identifier", "assignment_pattern")
            found.extend((n, index if direct else None) for n, _ in inner)
        return found
    return []


def _statements(scope: Node) -> Iterator[Node]:
    for child in scope.named_children:
        if child.type in ("switch_case", "switch_default"):
            yield from (c for c in child.named_children if c.type != "comment")
        elif child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
            if declaration is not None:
                yield declaration
        else:
            yield child


def _declarator_bindings(declaration: Node, scope: Node, source: bytes) -> Iterator[Binding]:
    for declarator in declaration.named_children:
        if declarator.type != "variable_declarator":
            continue
        for ident, index in pattern_identifiers(declarator.child_by_field_name("name")):
            yield Binding(
                name=get_node_text(ident, source),
                kind="variable",
                identifier=ident,
                scope=scope,
                declarator=declarator,
                array_index=index,
            )


def _import_bindings(statement: Node, scope: Node, source: bytes) -> Iterator[Binding]:
    clause = next((c for c in statement.named_children if c.type == "import_clause"), None)
    if clause is None:
        return
    for child in clause.named_children:
        names: list[Node] = []
        if child.type == "identifier":
            names.append(child)
        elif child.type == "namespace_import":
            names.extend(c for c in child.named_children if c.type == "identifier")
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                if local is not None:
                    names.append(local)
        for ident in names:
            yield Binding(get_node_text(ident, source), "import", ident, scope)


def scope_bindings(scope: Node, source: bytes) -> Iterator[Binding]:
    """All bindings introduced directly by ``scope``."""
    kind = scope.type
    if is_function_node(scope):
        params = scope.child_by_field_name("parameters")
        if params is not None:
            for param in params.named_children:
                for ident, index in pattern_identifiers(param):
                    yield Binding(get_node_text(ident, source), "parameter", ident, scope, array_index=index)
        single = scope.child_by_field_name("parameter")
        if single is not None:
            for ident, index in pattern_identifiers(single):
                yield Binding(get_node_text(ident, source), "parameter", ident, scope, array_index=index)
        return
    if kind == "for_statement":
        init = scope.child_by_field_name("initializer")
        if init is not None and init.type in DECLARATION_TYPES:
            yield from _declarator_bindings(init, scope, source)
        return
    if kind == "for_in_statement":
        for ident, index in pattern_identifiers(scope.child_by_field_name("left")):
            yield Binding(get_node_text(ident, source), "variable", ident, scope, array_index=index)
        return
    if kind == "catch_clause":
        for ident, _ in pattern_identifiers(scope.child_by_field_name("parameter")):
            yield Binding(get_node_text(ident, source), "catch", ident, scope)
        return

    for statement in _statements(scope):
        if statement.type in DECLARATION_TYPES:
            yield from _declarator_bindings(statement, scope, source)
        elif statement.type in ("function_declaration", "generator_function_declaration"):
            name = statement.child_by_field_name("name")
            if name is not None:
                yield Binding(get_node_text(name, source), "function", name, scope, declarator=statement)
        elif statement.type == "class_declaration":
            name = statement.child_by_field_name("name")
            if name is not None:
                yield Binding(get_node_text(name, source), "class", name, scope, declarator=statement)
        elif statement.type == "import_statement":
            yield from _import_bindings(statement, scope, source)


def lookup(scope: Node, name: str, source: bytes) -> Binding | None:
    """Binding for ``name`` declared directly in ``scope``."""
    for binding in scope_bindings(scope, source):
        if binding.name == name:
            return binding
    return None


def resolve_binding(identifier: Node, source: bytes, name: str | None = None) -> Binding | None:
    """Innermost binding visible from ``identifier`` for its name."""
    name = name or get_node_text(identifier, source)
    current = identifier.parent
    while current is not None:
        if is_function_node(current, SCOPE_TYPES):
            binding = lookup(current, name, source)
            if binding is not None:
                return binding
        current = current.parent
    return None


def is_declaration_site(identifier: Node) -> bool:
    """True if ``identifier`` is the name being declared, not a reference."""
    if identifier.type == "shorthand_property_identifier_pattern":
        return True
    parent = identifier.parent
    if parent is None:
        return False
    if parent.type in ("variable_declarator", "function_declaration", "class_declaration",
                       "generator_function_declaration", "function_expression", "function"):
        name = parent.child_by_field_name("name")
        return name is not None and name.start_byte == identifier.start_byte
    if parent.type in ("array_pattern", "object_pattern", "rest_pattern",
                       "required_parameter", "optional_parameter", "formal_parameters",
                       "import_specifier", "import_clause", "namespace_import"):
        return True
    if parent.type in ("assignment_pattern", "object_assignment_pattern"):
        left = parent.child_by_field_name("left")
        return left is not None and left.start_byte == identifier.start_byte
    if parent.type == "pair_pattern":
        value = parent.child_by_field_name("value")
        return value is not None and value.start_byte == identifier.start_byte
    if parent.type == "arrow_function":
        param = parent.child_by_field_name("parameter")
        return param is not None and param.start_byte == identifier.start_byte
    if parent.type == "catch_clause":
        return True
    return False
