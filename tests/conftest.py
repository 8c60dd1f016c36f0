"""Shared fixtures: parse TSX snippets and locate component nodes."""

from __future__ import annotations

import textwrap
from collections.abc import Callable

import pytest
from tree_sitter import Node

from memolens.config import AnalyzerConfig
from memolens.parser import ParsedSource, binding_name_of, parse_source
from memolens.parser.base import is_function_node, walk
from memolens.parser.queries import COMPONENT_FUNCTION_TYPES


def parse_tsx(source: str, file_path: str = "Component.tsx") -> ParsedSource:
    return parse_source(textwrap.dedent(source), file_path, "tsx")


def find_function(parsed: ParsedSource, name: str) -> Node:
    """First function-like node bound to ``name``."""
    for node in walk(parsed.root):
        if is_function_node(node, COMPONENT_FUNCTION_TYPES) and binding_name_of(node, parsed.source) == name:
            return node
    raise LookupError(f"No function named {name}")


@pytest.fixture
def parse() -> Callable[..., ParsedSource]:
    """Parse a dedented TSX snippet."""
    return parse_tsx


@pytest.fixture
def function_node() -> Callable[[str, str], tuple[Node, bytes]]:
    """Parse a snippet and return (function node, source bytes) for a name."""

    def _find(source: str, name: str) -> tuple[Node, bytes]:
        parsed = parse_tsx(source)
        return find_function(parsed, name), parsed.source

    return _find


@pytest.fixture
def config() -> AnalyzerConfig:
    return AnalyzerConfig()
