"""Prop extraction for component functions.

Props come from the component's sole destructured object parameter, or
from ``props.<name>`` accesses when the parameter is a plain identifier.
Types are read from the parameter annotation (inline object type, or an
interface / type alias declared in the same file); without one a naming
heuristic applies.
"""

from __future__ import annotations

from tree_sitter import Node

from memolens.analyzer.metrics import program_of
from memolens.analyzer.models import PropInfo, PropType
from memolens.parser.base import get_node_text, member_parts, walk
from memolens.parser.scope import is_declaration_site, resolve_binding

PRIMITIVE_TYPES: dict[str, PropType] = {
    "string": PropType.STRING,
    "number": PropType.NUMBER,
    "boolean": PropType.BOOLEAN,
    "object": PropType.OBJECT,
}

REFERENCE_TYPES: dict[str, PropType] = {
    "Array": PropType.ARRAY,
    "ReadonlyArray": PropType.ARRAY,
    "Function": PropType.FUNCTION,
    "Element": PropType.ELEMENT,
    "ReactElement": PropType.ELEMENT,
    "ReactNode": PropType.NODE,
    "ReactChild": PropType.NODE,
    "ReactFragment": PropType.NODE,
    "ReactNodeArray": PropType.NODE,
}

ABSENT_TYPES = frozenset({"undefined", "null"})

ASSIGNMENT_TYPES = frozenset({"assignment_expression", "augmented_assignment_expression"})

PROPS_IDENTIFIER = "props"

# name -> (type node or None, optional marker)
TypeMembers = dict[str, tuple[Node | None, bool]]


def looks_like_handler(name: str) -> bool:
    """``handle*`` / ``on*`` names are assumed to carry functions."""
    return name.startswith(("handle", "on"))


def function_parameters(node: Node) -> list[Node]:
    params = node.child_by_field_name("parameters")
    if params is not None:
        return [p for p in params.named_children if p.type != "comment"]
    single = node.child_by_field_name("parameter")
    return [single] if single is not None else []


def _type_of_annotation(annotation: Node | None) -> Node | None:
    if annotation is None:
        return None
    if annotation.type == "type_annotation":
        inner = [c for c in annotation.named_children if c.type != "comment"]
        return inner[0] if inner else None
    return annotation


def parameter_parts(param: Node) -> tuple[Node | None, Node | None]:
    """(binding pattern, annotated type) of a formal parameter."""
    if param.type in ("required_parameter", "optional_parameter"):
        pattern = param.child_by_field_name("pattern")
        annotation = _type_of_annotation(param.child_by_field_name("type"))
    else:
        pattern, annotation = param, None
    if pattern is not None and pattern.type == "assignment_pattern":
        pattern = pattern.child_by_field_name("left")
    return pattern, annotation


def declarator_props_type(node: Node) -> Node | None:
    """``Props`` from ``const X: FC<Props> = (...) => ...``."""
    parent = node.parent
    if parent is None or parent.type != "variable_declarator":
        return None
    annotation = _type_of_annotation(parent.child_by_field_name("type"))
    if annotation is None or annotation.type != "generic_type":
        return None
    arguments = annotation.child_by_field_name("type_arguments")
    if arguments is None:
        return None
    types = [c for c in arguments.named_children if c.type != "comment"]
    return types[0] if types else None


def _type_declarations(program: Node, source: bytes) -> dict[str, Node]:
    """Interfaces and type aliases declared at module level, by name."""
    declarations: dict[str, Node] = {}
    for statement in program.named_children:
        if statement.type == "export_statement":
            statement = statement.child_by_field_name("declaration") or statement
        if statement.type in ("interface_declaration", "type_alias_declaration"):
            name = statement.child_by_field_name("name")
            if name is not None:
                declarations.setdefault(get_node_text(name, source), statement)
    return declarations


def _reference_name(type_node: Node, source: bytes) -> str:
    """Last segment of a type reference (``React.ReactNode`` -> ``ReactNode``)."""
    if type_node.type == "generic_type":
        name = type_node.child_by_field_name("name")
        type_node = name if name is not None else type_node.named_children[0]
    return get_node_text(type_node, source).rsplit(".", 1)[-1]


def type_members(type_node: Node | None, source: bytes, seen: frozenset[str] = frozenset()) -> TypeMembers:
    """Property signatures of an object-like type, following same-file references."""
    if type_node is None:
        return {}
    kind = type_node.type

    if kind in ("object_type", "interface_body"):
        members: TypeMembers = {}
        for signature in type_node.named_children:
            if signature.type != "property_signature":
                continue
            name = signature.child_by_field_name("name")
            if name is None:
                continue
            optional = any(c.type == "?" for c in signature.children)
            members[get_node_text(name, source).strip("'\"")] = (
                _type_of_annotation(signature.child_by_field_name("type")),
                optional,
            )
        return members

    if kind == "parenthesized_type":
        inner = type_node.named_children
        return type_members(inner[0], source, seen) if inner else {}

    if kind == "intersection_type":
        merged: TypeMembers = {}
        for part in type_node.named_children:
            merged.update(type_members(part, source, seen))
        return merged

    if kind in ("type_identifier", "generic_type", "nested_type_identifier"):
        name = _reference_name(type_node, source)
        if name in seen:
            return {}
        declaration = _type_declarations(program_of(type_node), source).get(name)
        if declaration is None:
            return {}
        if declaration.type == "interface_declaration":
            body = declaration.child_by_field_name("body")
            return type_members(body, source, seen | {name})
        return type_members(declaration.child_by_field_name("value"), source, seen | {name})

    return {}


def _union_members(type_node: Node) -> list[Node]:
    if type_node.type == "union_type":
        found: list[Node] = []
        for part in type_node.named_children:
            found.extend(_union_members(part))
        return found
    if type_node.type == "parenthesized_type" and type_node.named_children:
        return _union_members(type_node.named_children[0])
    return [type_node]


def _is_absent(type_node: Node, source: bytes) -> bool:
    return get_node_text(type_node, source).strip() in ABSENT_TYPES


def admits_absent(type_node: Node | None, source: bytes) -> bool:
    """True for a union with an ``undefined`` / ``null`` variant."""
    if type_node is None:
        return False
    members = _union_members(type_node)
    return len(members) > 1 and any(_is_absent(m, source) for m in members)


def infer_prop_type(type_node: Node | None, source: bytes) -> PropType:
    """Map a type annotation onto a PropType."""
    if type_node is None:
        return PropType.CUSTOM

    members = [m for m in _union_members(type_node) if not _is_absent(m, source)]
    if len(members) != 1:
        inferred = {infer_prop_type(m, source) for m in members}
        return inferred.pop() if len(inferred) == 1 else PropType.CUSTOM
    type_node = members[0]

    kind = type_node.type
    if kind == "predefined_type":
        return PRIMITIVE_TYPES.get(get_node_text(type_node, source), PropType.CUSTOM)
    if kind in ("function_type", "constructor_type"):
        return PropType.FUNCTION
    if kind in ("array_type", "tuple_type", "readonly_type"):
        return PropType.ARRAY
    if kind == "object_type":
        return PropType.OBJECT
    if kind == "literal_type":
        text = get_node_text(type_node, source)
        if text in ("true", "false"):
            return PropType.BOOLEAN
        if text[:1] in ("'", '"', "`"):
            return PropType.STRING
        if text.lstrip("-")[:1].isdigit():
            return PropType.NUMBER
        return PropType.CUSTOM
    if kind in ("type_identifier", "nested_type_identifier", "generic_type"):
        return REFERENCE_TYPES.get(_reference_name(type_node, source), PropType.CUSTOM)
    return PropType.CUSTOM


def _pattern_entries(pattern: Node, source: bytes) -> list[tuple[str, Node]]:
    """(prop name, local identifier) pairs of an object pattern."""
    entries: list[tuple[str, Node]] = []
    for child in pattern.named_children:
        if child.type == "shorthand_property_identifier_pattern":
            entries.append((get_node_text(child, source), child))
        elif child.type == "object_assignment_pattern":
            left = child.child_by_field_name("left")
            if left is not None and left.type == "shorthand_property_identifier_pattern":
                entries.append((get_node_text(left, source), left))
        elif child.type == "pair_pattern":
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            if value is not None and value.type == "assignment_pattern":
                value = value.child_by_field_name("left")
            if key is not None and value is not None and value.type == "identifier":
                entries.append((get_node_text(key, source).strip("'\""), value))
    return entries


def _binds_to(reference: Node, declared: Node, source: bytes) -> bool:
    binding = resolve_binding(reference, source)
    return binding is not None and binding.identifier.start_byte == declared.start_byte


def _count_references(node: Node, declared: Node, source: bytes) -> tuple[int, int]:
    """(usages, reassignments) of the binding introduced at ``declared``."""
    name = get_node_text(declared, source)
    usages = updates = 0
    for n in walk(node):
        if n.type in ("identifier", "shorthand_property_identifier"):
            if get_node_text(n, source) != name or is_declaration_site(n):
                continue
            if _binds_to(n, declared, source):
                usages += 1
        elif n.type in ASSIGNMENT_TYPES:
            left = n.child_by_field_name("left")
            if left is not None and left.type == "identifier" and get_node_text(left, source) == name:
                if _binds_to(left, declared, source):
                    updates += 1
        elif n.type == "update_expression":
            argument = n.child_by_field_name("argument")
            if argument is not None and argument.type == "identifier" and get_node_text(argument, source) == name:
                if _binds_to(argument, declared, source):
                    updates += 1
    return usages, updates


def _props_member_name(node: Node, props_name: str, source: bytes) -> str | None:
    obj, prop = member_parts(node, source)
    if obj is None or obj.type != "identifier" or get_node_text(obj, source) != props_name:
        return None
    return prop


def _member_accesses(node: Node, declared: Node, source: bytes) -> tuple[list[str], dict[str, int], dict[str, int]]:
    """Names, usage counts and reassignments of ``props.<name>`` accesses."""
    props_name = get_node_text(declared, source)
    order: list[str] = []
    usages: dict[str, int] = {}
    updates: dict[str, int] = {}
    for n in walk(node):
        if n.type == "member_expression":
            name = _props_member_name(n, props_name, source)
            if name is None or not _binds_to(n.child_by_field_name("object"), declared, source):
                continue
            if name not in usages:
                order.append(name)
                usages[name] = 0
                updates[name] = 0
            usages[name] += 1
        elif n.type in ASSIGNMENT_TYPES:
            left = n.child_by_field_name("left")
            name = _props_member_name(left, props_name, source) if left is not None else None
            if name is not None:
                updates[name] = updates.get(name, 0) + 1
    return order, usages, updates


def _prop_info(
    name: str, members: TypeMembers, source: bytes, usage_count: int, updates: int
) -> PropInfo:
    if name in members:
        type_node, optional = members[name]
        prop_type = infer_prop_type(type_node, source)
        if type_node is None and looks_like_handler(name):
            prop_type = PropType.FUNCTION
        is_required = not optional and not admits_absent(type_node, source)
    else:
        prop_type = PropType.FUNCTION if looks_like_handler(name) else PropType.CUSTOM
        is_required = True
    return PropInfo(
        name=name,
        type=prop_type,
        usage_count=usage_count,
        is_required=is_required,
        updates=updates,
    )


def extract_props(node: Node, source: bytes) -> list[PropInfo]:
    """Props received by a component function, in declaration order."""
    params = function_parameters(node)
    if len(params) != 1:
        return []

    pattern, annotation = parameter_parts(params[0])
    if pattern is None:
        return []
    members = type_members(annotation or declarator_props_type(node), source)

    props: dict[str, PropInfo] = {}
    if pattern.type == "object_pattern":
        for name, local in _pattern_entries(pattern, source):
            if name in props:
                continue
            usages, updates = _count_references(node, local, source)
            props[name] = _prop_info(name, members, source, usages, updates)
    elif pattern.type == "identifier":
        order, usages, updates = _member_accesses(node, pattern, source)
        for name in order:
            props[name] = _prop_info(name, members, source, usages[name], updates.get(name, 0))

    return list(props.values())


def prop_identifiers(node: Node, source: bytes) -> list[Node]:
    """Declaration nodes of the component's prop bindings (including ``props`` itself)."""
    params = function_parameters(node)
    if len(params) != 1:
        return []
    pattern, _ = parameter_parts(params[0])
    if pattern is None:
        return []
    if pattern.type == "identifier":
        return [pattern]
    if pattern.type == "object_pattern":
        return [local for _, local in _pattern_entries(pattern, source)]
    return []


__all__ = [
    "PROPS_IDENTIFIER",
    "extract_props",
    "infer_prop_type",
    "looks_like_handler",
    "prop_identifiers",
    "type_members",
]
