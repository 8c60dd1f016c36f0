"""Tree-sitter parsing and generic node helpers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from tree_sitter import Language, Node, Parser, Tree

from memolens.errors import ParseError, UnsupportedLanguageError
from memolens.logging import get_logger

LANGUAGE_EXTENSIONS: dict[str, str] = {
    ".tsx": "tsx",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".jsx": "jsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",  # older tree-sitter-javascript name for function_expression
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

MARKUP_TYPES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})

LOOP_TYPES = frozenset({"for_statement", "for_in_statement", "while_statement", "do_statement"})

_languages: dict[str, Language] = {}


@dataclass
class ParsedSource:
    """A parsed file: the tree plus the bytes its offsets point into."""

    path: str
    language: str
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node


def _get_language(lang: str) -> Language:
    """Get or create Tree-sitter Language instance."""
    if lang not in _languages:
        if lang in ("typescript", "tsx"):
            import tree_sitter_typescript as tstypescript

            if lang == "typescript":
                _languages[lang] = Language(tstypescript.language_typescript())
            else:
                _languages[lang] = Language(tstypescript.language_tsx())
        elif lang in ("javascript", "jsx"):
            # JSX uses the JavaScript grammar which supports JSX
            import tree_sitter_javascript as tsjavascript

            _languages[lang] = Language(tsjavascript.language())
        else:
            raise UnsupportedLanguageError(lang, "")
    return _languages[lang]


def detect_language(file_path: Path | str) -> str | None:
    """Detect grammar name from file extension."""
    return LANGUAGE_EXTENSIONS.get(Path(file_path).suffix.lower())


def parse_source(source: bytes | str, file_path: str = "<memory>", language: str = "tsx") -> ParsedSource:
    """Parse source text with the grammar for ``language``."""
    if isinstance(source, str):
        source = source.encode("utf-8")
    parser = Parser(_get_language(language))
    tree = parser.parse(source)
    if tree.root_node.has_error:
        get_logger("parser").warning(f"Parse errors in {file_path}")
    return ParsedSource(path=file_path, language=language, source=source, tree=tree)


def parse_file(file_path: Path, display_path: str | None = None) -> ParsedSource:
    """Read and parse a source file.

    Args:
        file_path: Path to the source file
        display_path: Optional path to record instead of ``file_path``

    Returns:
        ParsedSource for the file

    Raises:
        UnsupportedLanguageError: extension has no known grammar
        ParseError: the file cannot be read
    """
    stored_path = display_path if display_path is not None else str(file_path)
    language = detect_language(file_path)
    if language is None:
        raise UnsupportedLanguageError(file_path.suffix or "<none>", stored_path)
    try:
        source = file_path.read_bytes()
    except OSError as e:
        raise ParseError(f"Cannot read {file_path}: {e}", stored_path) from e
    return parse_source(source, stored_path, language)


def get_node_text(node: Node, source: bytes) -> str:
    """Extract text content of a node."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def node_line(node: Node) -> int:
    """1-based start line."""
    return node.start_point[0] + 1


def walk(node: Node, skip_functions: bool = False) -> Iterator[Node]:
    """Pre-order traversal of ``node`` and its descendants.

    With ``skip_functions`` nested function-like nodes below ``node`` are
    yielded but not entered.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if skip_functions and current is not node and is_function_node(current):
            continue
        stack.extend(reversed(current.children))


def is_function_node(node: Node | None, types: frozenset[str] = FUNCTION_TYPES) -> bool:
    """Named node of a function-like type.

    The ``function`` keyword token shares its type name with the older
    function expression node, so anonymous nodes never match.
    """
    return node is not None and node.is_named and node.type in types


def contains_type(node: Node, types: frozenset[str] | set[str]) -> bool:
    """True if ``node`` or any descendant has one of ``types``."""
    return any(n.type in types for n in walk(node))


def ancestors(node: Node) -> Iterator[Node]:
    """Yield the parents of ``node`` up to the root."""
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def unwrap_parens(node: Node | None) -> Node | None:
    """Strip parenthesized_expression wrappers."""
    while node is not None and node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        if not inner:
            return node
        node = inner[0]
    return node


def call_arguments(call: Node) -> list[Node]:
    """Argument expressions of a call or new expression, comments excluded."""
    args = call.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return []
    return [c for c in args.named_children if c.type != "comment"]


def callee_name(call: Node, source: bytes) -> str | None:
    """Name of a call whose callee is a plain identifier."""
    function = call.child_by_field_name("function")
    if function is not None and function.type == "identifier":
        return get_node_text(function, source)
    return None


def member_parts(node: Node, source: bytes) -> tuple[Node | None, str | None]:
    """(object node, property name) of a member_expression."""
    if node.type != "member_expression":
        return None, None
    prop = node.child_by_field_name("property")
    return node.child_by_field_name("object"), get_node_text(prop, source) if prop else None


def numeric_value(node: Node | None, source: bytes) -> float | None:
    """Value of a numeric literal, or None if ``node`` is not one."""
    node = unwrap_parens(node)
    if node is None or node.type != "number":
        return None
    text = get_node_text(node, source).replace("_", "").rstrip("n")
    try:
        return float(int(text, 0))
    except ValueError:
        try:
            return float(text)
        except ValueError:
            return None


def string_value(node: Node, source: bytes) -> str:
    """Contents of a string literal without its quotes."""
    fragments = [c for c in node.named_children if c.type == "string_fragment"]
    if fragments:
        return "".join(get_node_text(f, source) for f in fragments)
    return get_node_text(node, source).strip("'\"`")


def binary_operator(node: Node, source: bytes) -> str | None:
    """Operator token of a binary_expression."""
    if node.type != "binary_expression":
        return None
    op = node.child_by_field_name("operator")
    return get_node_text(op, source) if op is not None else None


def function_body(node: Node) -> Node | None:
    """Body of a function-like node (a statement_block or an expression)."""
    return node.child_by_field_name("body")
