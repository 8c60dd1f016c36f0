"""Render behavior heuristics.

Everything here is a static estimate over one component's tree: how often
it is likely to render, whether it does expensive work while rendering,
and what it hands to its children.
"""

from __future__ import annotations

from tree_sitter import Node

from memolens.analyzer.metrics import program_of
from memolens.analyzer.models import (
    ChildComponent,
    EventHandler,
    HandlerType,
    HookInfo,
    HookType,
    RenderAnalysis,
)
from memolens.analyzer.props import PROPS_IDENTIFIER, looks_like_handler, prop_identifiers
from memolens.config import AnalyzerConfig
from memolens.parser.base import (
    LOOP_TYPES,
    ancestors,
    call_arguments,
    callee_name,
    function_body,
    get_node_text,
    member_parts,
    numeric_value,
    unwrap_parens,
    walk,
)
from memolens.parser.queries import (
    EFFECT_HOOK,
    MEMO_HOOK,
    binding_name_of,
    bound_function,
    is_component_tag,
    is_function_value,
    is_hook_call,
    is_memo_wrapper_call,
    is_set_state_member,
    is_specific_hook,
    is_state_setter_call,
    is_wrapped_by_hook,
    jsx_attribute_parts,
    jsx_attributes,
    jsx_open_tags,
    jsx_tag_name,
    state_value_binding,
)
from memolens.parser.scope import is_declaration_site, resolve_binding

ARRAY_TRANSFORMS = frozenset({"map", "filter", "reduce", "forEach", "fill"})

CLEANUP_CALLS = frozenset(
    {
        "removeEventListener",
        "clearTimeout",
        "clearInterval",
        "cancelAnimationFrame",
        "unsubscribe",
        "disconnect",
        "abort",
    }
)

# Substring -> handler type, checked in this order
HANDLER_KEYWORDS: list[tuple[str, HandlerType]] = [
    ("click", HandlerType.CLICK),
    ("change", HandlerType.CHANGE),
    ("submit", HandlerType.SUBMIT),
]

STATEFUL_HOOKS = (HookType.STATE, HookType.REDUCER, HookType.CONTEXT)

ANONYMOUS_MEMO_COMPONENT = "AnonymousMemoComponent"


def estimate_render_count(hooks: list[HookInfo]) -> int:
    """1, plus 2 per state hook call site and 1 per effect hook call site."""
    count = 1
    for hook in hooks:
        if hook.type is HookType.STATE:
            count += 2
        elif hook.type is HookType.EFFECT:
            count += 1
    return count


def loop_height(node: Node) -> int:
    """Length of the longest chain of nested loops in ``node``'s subtree."""
    height = max((loop_height(child) for child in node.children), default=0)
    return height + 1 if node.type in LOOP_TYPES else height


def has_expensive_calculations(node: Node, complexity_threshold: int) -> bool:
    """A loop whose ``2 ** nested_depth`` exceeds the threshold (strictly)."""
    height = loop_height(node)
    if height == 0:
        return False
    return 2 ** (height - 1) > complexity_threshold


def _length_literal(node: Node | None, source: bytes) -> float | None:
    """Numeric size of ``n`` or ``{ length: n }``."""
    node = unwrap_parens(node)
    if node is None:
        return None
    if node.type == "object":
        for pair in node.named_children:
            if pair.type != "pair":
                continue
            key = pair.child_by_field_name("key")
            if key is not None and get_node_text(key, source) == "length":
                return numeric_value(pair.child_by_field_name("value"), source)
        return None
    return numeric_value(node, source)


def array_chain_size(node: Node | None, source: bytes) -> float | None:
    """Statically known size of an array construction chain.

    Recognizes ``new Array(n)``, ``Array(n)``, ``Array.from(n)`` and
    ``Array.from({ length: n })`` optionally followed by transforms.
    Returns None when the size cannot be proven.
    """
    node = unwrap_parens(node)
    if node is None:
        return None

    if node.type == "arrow_function":
        body = function_body(node)
        if body is not None and body.type != "statement_block":
            return array_chain_size(body, source)
        return None

    if node.type == "new_expression":
        constructor = node.child_by_field_name("constructor")
        if constructor is None or get_node_text(constructor, source) != "Array":
            return None
        args = call_arguments(node)
        return _length_literal(args[0], source) if len(args) == 1 else None

    if node.type != "call_expression":
        return None

    if callee_name(node, source) == "Array":
        args = call_arguments(node)
        return numeric_value(args[0], source) if len(args) == 1 else None

    function = node.child_by_field_name("function")
    if function is None:
        return None
    obj, prop = member_parts(function, source)
    if obj is None:
        return None
    if prop == "from" and obj.type == "identifier" and get_node_text(obj, source) == "Array":
        args = call_arguments(node)
        return _length_literal(args[0], source) if args else None
    if prop in ARRAY_TRANSFORMS:
        return array_chain_size(obj, source)
    return None


def _expensive_candidates(node: Node) -> list[Node]:
    """Initializers, arrow expression bodies and call/new expressions."""
    candidates: list[Node] = []
    for n in walk(node):
        if n.type == "variable_declarator":
            value = n.child_by_field_name("value")
            if value is not None:
                candidates.append(value)
        elif n.type == "arrow_function":
            body = function_body(n)
            if body is not None and body.type != "statement_block":
                candidates.append(body)
        elif n.type in ("call_expression", "new_expression"):
            candidates.append(n)
    return candidates


def has_expensive_operations(node: Node, source: bytes, array_size_threshold: int) -> bool:
    """An array chain above the size threshold not already inside useMemo."""
    for candidate in _expensive_candidates(node):
        size = array_chain_size(candidate, source)
        if size is None or size <= array_size_threshold:
            continue
        if is_wrapped_by_hook(candidate, source, MEMO_HOOK):
            continue
        return True
    return False


def _attribute_passes_function(value: Node | None, source: bytes) -> bool:
    """Function literal or identifier bound to a function."""
    if value is None:
        return False
    if is_function_value(value):
        return True
    return value.type == "identifier" and bound_function(value, source) is not None


def classify_handler(*names: str) -> HandlerType:
    text = " ".join(names).lower()
    for keyword, handler_type in HANDLER_KEYWORDS:
        if keyword in text:
            return handler_type
    return HandlerType.CUSTOM


def _calls_cleanup(function: Node, source: bytes) -> bool:
    for n in walk(function):
        if n.type != "call_expression":
            continue
        name = callee_name(n, source)
        if name is None:
            target = n.child_by_field_name("function")
            _, name = member_parts(target, source) if target is not None else (None, None)
        if name in CLEANUP_CALLS:
            return True
    return False


def _is_effect_callback_with_return(function: Node, source: bytes) -> bool:
    arguments = function.parent
    call = arguments.parent if arguments is not None else None
    if call is None or not is_specific_hook(call, source, EFFECT_HOOK):
        return False
    args = call_arguments(call)
    if not args or unwrap_parens(args[0]).start_byte != function.start_byte:
        return False
    return any(n.type == "return_statement" for n in walk(function, skip_functions=True))


class _HandlerScan:
    """Facts about the component needed to describe its handlers."""

    def __init__(self, node: Node, source: bytes) -> None:
        self.node = node
        self.source = source
        self.prop_sites = {n.start_byte for n in prop_identifiers(node, source)}

    def uses_props(self, function: Node) -> bool:
        for n in walk(function):
            if n.type not in ("identifier", "shorthand_property_identifier") or is_declaration_site(n):
                continue
            if get_node_text(n, self.source) == PROPS_IDENTIFIER:
                return True
            binding = resolve_binding(n, self.source)
            if binding is not None and binding.identifier.start_byte in self.prop_sites:
                return True
        return False

    def uses_state(self, function: Node) -> bool:
        for n in walk(function):
            if n.type == "call_expression" and is_state_setter_call(n, self.source):
                return True
            if n.type == "member_expression" and is_set_state_member(n, self.source):
                return True
            if n.type == "identifier" and not is_declaration_site(n) and state_value_binding(n, self.source):
                return True
        return False

    def describe(self, name: str, attribute: str, function: Node) -> EventHandler:
        return EventHandler(
            name=name,
            type=classify_handler(name, attribute),
            uses_props=self.uses_props(function),
            uses_state=self.uses_state(function),
            has_cleanup=(
                _calls_cleanup(function, self.source)
                or _is_effect_callback_with_return(function, self.source)
            ),
        )


def _top_level_functions(node: Node, source: bytes) -> list[tuple[str, Node]]:
    """``handle*`` / ``on*`` functions declared directly in the component body."""
    body = function_body(node)
    if body is None or body.type != "statement_block":
        return []
    found: list[tuple[str, Node]] = []
    for statement in body.named_children:
        if statement.type in ("function_declaration", "generator_function_declaration"):
            name = statement.child_by_field_name("name")
            if name is not None and looks_like_handler(get_node_text(name, source)):
                found.append((get_node_text(name, source), statement))
        elif statement.type in ("lexical_declaration", "variable_declaration"):
            for declarator in statement.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                if name is None or name.type != "identifier":
                    continue
                function = bound_function(name, source)
                if function is not None and looks_like_handler(get_node_text(name, source)):
                    found.append((get_node_text(name, source), function))
    return found


def find_event_handlers(node: Node, source: bytes) -> list[EventHandler]:
    """Event handlers passed to markup, deduplicated by name."""
    scan = _HandlerScan(node, source)
    handlers: dict[str, EventHandler] = {}
    passed: dict[str, str] = {}

    for tag in jsx_open_tags(node):
        for attribute in jsx_attributes(tag):
            attr_name, value = jsx_attribute_parts(attribute, source)
            if value is None:
                continue
            if value.type == "identifier":
                passed.setdefault(get_node_text(value, source), attr_name)
            if not attr_name.startswith("on"):
                continue
            if is_function_value(value):
                function, name = unwrap_parens(value), attr_name
            elif value.type == "identifier":
                function, name = bound_function(value, source), get_node_text(value, source)
            else:
                continue
            if function is not None and name not in handlers:
                handlers[name] = scan.describe(name, attr_name, function)

    for name, function in _top_level_functions(node, source):
        if name in passed and name not in handlers:
            handlers[name] = scan.describe(name, passed[name], function)

    return list(handlers.values())


def has_child_components(node: Node, source: bytes) -> bool:
    """An uppercase tag that receives a function or a handler-named identifier."""
    for tag in jsx_open_tags(node):
        if not is_component_tag(jsx_tag_name(tag, source)):
            continue
        for attribute in jsx_attributes(tag):
            attr_name, value = jsx_attribute_parts(attribute, source)
            if _attribute_passes_function(value, source):
                return True
            if value is not None and value.type == "identifier":
                if looks_like_handler(attr_name) or looks_like_handler(get_node_text(value, source)):
                    return True
    return False


def _memo_wrapped_name(call: Node, source: bytes) -> str:
    args = call_arguments(call)
    target = unwrap_parens(args[0]) if args else None
    if target is not None and target.type == "identifier":
        return get_node_text(target, source)
    parent = call.parent
    if parent is not None and parent.type == "variable_declarator":
        name = parent.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            return get_node_text(name, source)
    return ANONYMOUS_MEMO_COMPONENT


def _received_functions(tags: list[Node], source: bytes) -> list[str]:
    received: list[str] = []
    for tag in tags:
        for attribute in jsx_attributes(tag):
            attr_name, value = jsx_attribute_parts(attribute, source)
            if attr_name in received:
                continue
            if _attribute_passes_function(value, source) or (
                value is not None and looks_like_handler(attr_name)
            ):
                received.append(attr_name)
    return received


def find_memoized_components(node: Node, source: bytes, component_name: str | None) -> list[ChildComponent]:
    """Memo-wrapped components that are the component itself or rendered by it."""
    program = program_of(node)

    tags_by_name: dict[str, list[Node]] = {}
    for tag in jsx_open_tags(node):
        name = jsx_tag_name(tag, source)
        if name:
            tags_by_name.setdefault(name, []).append(tag)

    found: dict[str, ChildComponent] = {}
    for call in walk(program):
        if call.type != "call_expression" or not is_memo_wrapper_call(call, source):
            continue
        name = _memo_wrapped_name(call, source)
        if name in found:
            continue
        if name != component_name and name not in tags_by_name:
            continue
        found[name] = ChildComponent(
            name=name,
            is_memoized=True,
            received_functions=_received_functions(tags_by_name.get(name, []), source),
        )
    return list(found.values())


def _in_dependency_array(node: Node, source: bytes) -> bool:
    """True if ``node`` sits inside the dependency-array argument of a hook call."""
    for ancestor in ancestors(node):
        if ancestor.type != "array":
            continue
        arguments = ancestor.parent
        call = arguments.parent if arguments is not None and arguments.type == "arguments" else None
        if call is None or not is_hook_call(call, source):
            continue
        args = call_arguments(call)
        if any(arg.start_byte == ancestor.start_byte for arg in args[1:]):
            return True
    return False


def has_function_prop_passing(node: Node, source: bytes) -> bool:
    for tag in jsx_open_tags(node):
        for attribute in jsx_attributes(tag):
            _, value = jsx_attribute_parts(attribute, source)
            if _attribute_passes_function(value, source) and not _in_dependency_array(attribute, source):
                return True
    return False


def has_state_updates(node: Node, source: bytes) -> bool:
    for n in walk(node):
        if n.type == "call_expression" and is_state_setter_call(n, source):
            return True
        if n.type == "member_expression" and is_set_state_member(n, source):
            return True
    return False


def analyze_rendering_behavior(
    node: Node, source: bytes, config: AnalyzerConfig, hooks: list[HookInfo]
) -> RenderAnalysis:
    """Compute RenderAnalysis for a component function.

    Args:
        node: Component function node.
        source: Source bytes of the file.
        config: Thresholds for the expensive-work checks.
        hooks: Hook facts from ``analyze_hooks`` for the same node.
    """
    thresholds = config.performance_threshold
    body = function_body(node) or node
    state_updates = has_state_updates(node, source)

    return RenderAnalysis(
        estimated_render_count=estimate_render_count(hooks),
        has_expensive_calculations=has_expensive_calculations(body, thresholds.complexity),
        has_expensive_operations=has_expensive_operations(body, source, thresholds.array_size),
        affected_by_state_changes=state_updates or any(h.type in STATEFUL_HOOKS for h in hooks),
        event_handlers=find_event_handlers(node, source),
        has_child_components=has_child_components(node, source),
        memoized_components=find_memoized_components(node, source, binding_name_of(node, source)),
        function_prop_passing=has_function_prop_passing(node, source),
        has_state_updates=state_updates,
    )
