"""memolens parser - Tree-sitter trees and queries over them."""

from memolens.parser.base import ParsedSource, detect_language, get_node_text, parse_file, parse_source
from memolens.parser.queries import binding_name_of, is_component_shaped, is_hook_call
from memolens.parser.scope import Binding, resolve_binding

__all__ = [
    "parse_source",
    "parse_file",
    "detect_language",
    "get_node_text",
    "ParsedSource",
    "is_hook_call",
    "is_component_shaped",
    "binding_name_of",
    "resolve_binding",
    "Binding",
]
