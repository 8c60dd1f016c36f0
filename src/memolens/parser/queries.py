"""Stateless predicates and accessors over component syntax trees."""

from __future__ import annotations

from tree_sitter import Node

from memolens.parser.base import (
    FUNCTION_TYPES,
    MARKUP_TYPES,
    ancestors,
    call_arguments,
    callee_name,
    contains_type,
    get_node_text,
    is_function_node,
    member_parts,
    unwrap_parens,
    walk,
)
from memolens.parser.scope import resolve_binding

STATE_HOOK = "useState"
EFFECT_HOOK = "useEffect"
MEMO_HOOK = "useMemo"
CALLBACK_HOOK = "useCallback"

COMPONENT_FUNCTION_TYPES = FUNCTION_TYPES - {"method_definition"}
FUNCTION_VALUE_TYPES = frozenset({"arrow_function", "function_expression", "function"})
DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})


def is_hook_name(name: str | None) -> bool:
    """``use`` followed by an uppercase letter."""
    return bool(name) and name.startswith("use") and len(name) > 3 and name[3].isupper()


def is_hook_call(node: Node, source: bytes) -> bool:
    """True iff ``node`` is a call to a plain identifier named like a hook."""
    return node.type == "call_expression" and is_hook_name(callee_name(node, source))


def is_specific_hook(node: Node, source: bytes, hook_name: str) -> bool:
    return node.type == "call_expression" and callee_name(node, source) == hook_name


def is_function_value(node: Node | None) -> bool:
    """Function or arrow expression (parentheses allowed)."""
    node = unwrap_parens(node)
    return is_function_node(node, FUNCTION_VALUE_TYPES)


def _export_statement_of(node: Node) -> Node | None:
    """The export_statement directly wrapping a top-level declaration."""
    parent = node.parent
    if parent is not None and parent.type == "export_statement":
        return parent
    return None


def _top_level_statement(node: Node) -> Node | None:
    """Module-level statement that binds ``node``, or None if nested."""
    parent = node.parent
    if parent is None:
        return None
    if node.type in ("function_declaration", "generator_function_declaration"):
        statement = node
    elif parent.type == "variable_declarator":
        value = parent.child_by_field_name("value")
        if value is None or value.start_byte != node.start_byte:
            return None
        statement = parent.parent
        if statement is None or statement.type not in DECLARATION_TYPES:
            return None
    elif parent.type == "export_statement":
        statement = node
    else:
        return None

    container = statement.parent
    if container is not None and container.type == "export_statement":
        container = container.parent
    if container is None or container.type != "program":
        return None
    return statement


def _is_exported_by_name(program: Node, name: str, source: bytes) -> bool:
    """``export default Name``, ``export { Name }`` or ``export default memo(Name)``."""
    for statement in program.named_children:
        if statement.type != "export_statement":
            continue
        value = unwrap_parens(statement.child_by_field_name("value"))
        if value is not None:
            if value.type == "identifier" and get_node_text(value, source) == name:
                return True
            if value.type == "call_expression" and is_memo_wrapper_call(value, source):
                args = call_arguments(value)
                if args and args[0].type == "identifier" and get_node_text(args[0], source) == name:
                    return True
        for clause in statement.named_children:
            if clause.type != "export_clause":
                continue
            for spec in clause.named_children:
                local = spec.child_by_field_name("name")
                if local is not None and get_node_text(local, source) == name:
                    return True
    return False


def is_component_shaped(node: Node, source: bytes) -> bool:
    """Exported, module-level function whose body contains markup."""
    if not is_function_node(node, COMPONENT_FUNCTION_TYPES):
        return False
    statement = _top_level_statement(node)
    if statement is None:
        return False

    exported = _export_statement_of(statement) is not None or statement.type == "export_statement"
    if not exported:
        name = binding_name_of(node, source)
        program = statement.parent
        if name is None or program is None:
            return False
        exported = _is_exported_by_name(program, name, source)
    if not exported:
        return False

    body = node.child_by_field_name("body")
    return body is not None and contains_type(body, MARKUP_TYPES)


def _declared_name(statement: Node, source: bytes) -> str | None:
    if statement.type == "export_statement":
        declaration = statement.child_by_field_name("declaration")
        return _declared_name(declaration, source) if declaration is not None else None
    if statement.type in DECLARATION_TYPES:
        for declarator in statement.named_children:
            if declarator.type == "variable_declarator":
                name = declarator.child_by_field_name("name")
                if name is not None and name.type == "identifier":
                    return get_node_text(name, source)
                return None
    if statement.type in ("function_declaration", "generator_function_declaration", "class_declaration"):
        name = statement.child_by_field_name("name")
        return get_node_text(name, source) if name is not None else None
    return None


def binding_name_of(node: Node, source: bytes) -> str | None:
    """Name a function is bound to.

    Tries the function's own identifier, then the variable declarator it
    initializes, then (for ``export default <expr>``) the preceding named
    declaration.
    """
    own = node.child_by_field_name("name")
    if own is not None and own.type == "identifier":
        return get_node_text(own, source)

    parent = node.parent
    if parent is None:
        return None
    if parent.type == "variable_declarator":
        name = parent.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            return get_node_text(name, source)
        return None

    if parent.type == "export_statement" and any(c.type == "default" for c in parent.children):
        previous = parent.prev_named_sibling
        while previous is not None and previous.type == "comment":
            previous = previous.prev_named_sibling
        if previous is not None:
            return _declared_name(previous, source)
    return None


def is_state_setter_call(call: Node, source: bytes) -> bool:
    """Call whose callee was introduced as the second element of a useState pattern."""
    if call.type != "call_expression":
        return False
    function = call.child_by_field_name("function")
    if function is None or function.type != "identifier":
        return False
    binding = resolve_binding(function, source)
    if binding is None or binding.kind != "variable" or binding.array_index != 1:
        return False
    init = unwrap_parens(binding.value)
    return init is not None and is_specific_hook(init, source, STATE_HOOK)


def is_set_state_member(node: Node, source: bytes) -> bool:
    """Member access whose property is literally ``setState``."""
    _, prop = member_parts(node, source)
    return prop == "setState"


def state_value_binding(identifier: Node, source: bytes) -> bool:
    """Identifier bound as the first element of a useState pattern."""
    binding = resolve_binding(identifier, source)
    if binding is None or binding.kind != "variable" or binding.array_index != 0:
        return False
    init = unwrap_parens(binding.value)
    return init is not None and is_specific_hook(init, source, STATE_HOOK)


def bound_function(identifier: Node, source: bytes) -> Node | None:
    """Function node an identifier is bound to, if any.

    Declarators initialized by ``useCallback(fn, deps)`` resolve to ``fn``.
    """
    binding = resolve_binding(identifier, source)
    if binding is None:
        return None
    if binding.kind == "function":
        return binding.declarator
    if binding.kind != "variable" or binding.array_index is not None:
        return None
    value = unwrap_parens(binding.value)
    if value is None:
        return None
    if is_function_node(value, FUNCTION_VALUE_TYPES):
        return value
    if is_specific_hook(value, source, CALLBACK_HOOK):
        args = call_arguments(value)
        if args and is_function_value(args[0]):
            return unwrap_parens(args[0])
    return None


def is_memo_wrapper_call(call: Node, source: bytes) -> bool:
    """``memo(X)`` or a qualified ``React.memo(X)``."""
    if call.type != "call_expression":
        return False
    function = call.child_by_field_name("function")
    if function is None:
        return False
    if function.type == "identifier":
        return get_node_text(function, source) == "memo"
    _, prop = member_parts(function, source)
    return prop == "memo"


def is_wrapped_by_hook(node: Node, source: bytes, hook_name: str) -> bool:
    """True if any ancestor (or ``node``) is a call to ``hook_name``."""
    if is_specific_hook(node, source, hook_name):
        return True
    return any(is_specific_hook(a, source, hook_name) for a in ancestors(node))


def jsx_attributes(element: Node) -> list[Node]:
    """jsx_attribute children of an opening or self-closing element."""
    return [c for c in element.named_children if c.type == "jsx_attribute"]


def jsx_attribute_parts(attribute: Node, source: bytes) -> tuple[str, Node | None]:
    """(attribute name, value expression) of a jsx_attribute.

    The value is the expression inside ``{...}`` when present.
    """
    named = [c for c in attribute.named_children if c.type != "comment"]
    if not named:
        return "", None
    name = get_node_text(named[0], source)
    if len(named) < 2:
        return name, None
    value = named[-1]
    if value.type == "jsx_expression":
        inner = [c for c in value.named_children if c.type != "comment"]
        return name, unwrap_parens(inner[0]) if inner else None
    return name, value


def jsx_tag_name(element: Node, source: bytes) -> str | None:
    """Tag name of an opening or self-closing element (None for fragments)."""
    name = element.child_by_field_name("name")
    if name is None:
        return None
    return get_node_text(name, source)


def jsx_open_tags(node: Node) -> list[Node]:
    """All jsx opening and self-closing elements under ``node``."""
    return [n for n in walk(node) if n.type in ("jsx_opening_element", "jsx_self_closing_element")]


def is_component_tag(tag: str | None) -> bool:
    return bool(tag) and tag[0].isupper()
