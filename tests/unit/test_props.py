"""Tests for prop extraction and type inference."""

from __future__ import annotations

from memolens.analyzer.models import PropType
from memolens.analyzer.props import extract_props, looks_like_handler


def _by_name(props):
    return {p.name: p for p in props}


class TestAnnotatedProps:
    """Test props typed through annotations."""

    def test_interface_annotation(self, function_node) -> None:
        """Test types and optionality come from a same-file interface."""
        node, source = function_node(
            """
            interface CardProps {
              title: string;
              count?: number;
              onSelect: (id: string) => void;
              items: Array<string>;
              icon: React.ReactNode;
              footer: string | undefined;
            }

            export function Card({ title, count, onSelect, items, icon, footer }: CardProps) {
              return <div onClick={() => onSelect(title)}>{title}{count}{items}{icon}{footer}</div>;
            }
            """,
            "Card",
        )
        props = extract_props(node, source)
        assert [p.name for p in props] == ["title", "count", "onSelect", "items", "icon", "footer"]

        by_name = _by_name(props)
        assert by_name["title"].type is PropType.STRING
        assert by_name["title"].is_required is True
        assert by_name["title"].usage_count == 2
        assert by_name["count"].type is PropType.NUMBER
        assert by_name["count"].is_required is False
        assert by_name["onSelect"].type is PropType.FUNCTION
        assert by_name["items"].type is PropType.ARRAY
        assert by_name["icon"].type is PropType.NODE
        assert by_name["footer"].type is PropType.STRING
        assert by_name["footer"].is_required is False

    def test_inline_object_type(self, function_node) -> None:
        """Test inline object type annotations."""
        node, source = function_node(
            """
            export function Toggle({ label, disabled }: { label: string; disabled?: boolean }) {
              return <button disabled={disabled}>{label}</button>;
            }
            """,
            "Toggle",
        )
        by_name = _by_name(extract_props(node, source))
        assert by_name["label"].type is PropType.STRING
        assert by_name["label"].is_required is True
        assert by_name["disabled"].type is PropType.BOOLEAN
        assert by_name["disabled"].is_required is False

    def test_type_alias_and_null_union(self, function_node) -> None:
        """Test type aliases are followed and null unions are optional."""
        node, source = function_node(
            """
            type AvatarProps = {
              size: number;
              src: string | null;
              meta: object;
            };

            export const Avatar = ({ size, src, meta }: AvatarProps) => <img width={size} src={src} />;
            """,
            "Avatar",
        )
        by_name = _by_name(extract_props(node, source))
        assert by_name["size"].type is PropType.NUMBER
        assert by_name["src"].type is PropType.STRING
        assert by_name["src"].is_required is False
        assert by_name["meta"].type is PropType.OBJECT
        assert by_name["meta"].usage_count == 0


class TestUnannotatedProps:
    """Test the naming heuristic and props.<name> access."""

    def test_naming_heuristic(self, function_node) -> None:
        """Test handle/on names are functions and everything else is custom."""
        node, source = function_node(
            """
            export function Dialog({ onClose, handleSave, name }) {
              return <div onClick={onClose}>{name}</div>;
            }
            """,
            "Dialog",
        )
        by_name = _by_name(extract_props(node, source))
        assert by_name["onClose"].type is PropType.FUNCTION
        assert by_name["handleSave"].type is PropType.FUNCTION
        assert by_name["name"].type is PropType.CUSTOM
        assert by_name["handleSave"].usage_count == 0
        assert all(p.is_required for p in by_name.values())

    def test_renamed_binding(self, function_node) -> None:
        """Test renamed destructuring keeps the prop name and counts the local."""
        node, source = function_node(
            """
            export function Heading({ title: text }) {
              return <h1>{text}{text}</h1>;
            }
            """,
            "Heading",
        )
        (prop,) = extract_props(node, source)
        assert prop.name == "title"
        assert prop.usage_count == 2

    def test_props_member_access(self, function_node) -> None:
        """Test props.<name> accesses define the props in first-use order."""
        node, source = function_node(
            """
            export function Badge(props) {
              return <span className={props.color}>{props.label}{props.label}</span>;
            }
            """,
            "Badge",
        )
        props = extract_props(node, source)
        assert [(p.name, p.usage_count) for p in props] == [("color", 1), ("label", 2)]
        assert all(p.type is PropType.CUSTOM for p in props)

    def test_reassignment_counts_updates(self, function_node) -> None:
        """Test direct reassignment of a prop binding is counted."""
        node, source = function_node(
            """
            export function Mutating({ value }) {
              value = value + 1;
              return <div>{value}</div>;
            }
            """,
            "Mutating",
        )
        (prop,) = extract_props(node, source)
        assert prop.updates == 1

    def test_no_parameters(self, function_node) -> None:
        """Test components without parameters have no props."""
        node, source = function_node(
            """
            export function Empty() {
              return <div />;
            }
            """,
            "Empty",
        )
        assert extract_props(node, source) == []


class TestLooksLikeHandler:
    """Test the handler naming heuristic."""

    def test_names(self) -> None:
        """Test plain handle/on prefixes, whatever follows them."""
        assert looks_like_handler("onClick")
        assert looks_like_handler("onclick")
        assert looks_like_handler("handleSubmit")
        assert looks_like_handler("handler")
        assert not looks_like_handler("title")
        assert not looks_like_handler("close")
