"""Tests for render behavior heuristics."""

from __future__ import annotations

from memolens.analyzer.hooks import analyze_hooks
from memolens.analyzer.models import HandlerType
from memolens.analyzer.render import (
    analyze_rendering_behavior,
    array_chain_size,
    has_expensive_calculations,
    has_expensive_operations,
)
from memolens.config import AnalyzerConfig
from memolens.parser.base import function_body, walk


def _render(function_node, source: str, name: str, config: AnalyzerConfig | None = None):
    node, src = function_node(source, name)
    return analyze_rendering_behavior(node, src, config or AnalyzerConfig(), analyze_hooks(node, src))


def _loops(depth: int) -> str:
    """Component with ``depth`` nested for loops."""
    body = "work();"
    for i in range(depth):
        body = f"for (let i{i} = 0; i{i} < n; i{i}++) {{ {body} }}"
    return f"export function Loops({{ n }}) {{ {body} return <div />; }}"


class TestRenderCount:
    """Test render count estimation."""

    def test_state_and_effect_weights(self, function_node) -> None:
        """Test two state hooks and one effect estimate 1 + 2 + 2 + 1."""
        analysis = _render(
            function_node,
            """
            export function Dashboard({ a, b, c, d }) {
              const [x, setX] = useState(0);
              const [y, setY] = useState(1);
              useEffect(() => {}, [a, b, c, d]);
              return <div>{x}{y}</div>;
            }
            """,
            "Dashboard",
        )
        assert analysis.estimated_render_count == 6
        assert analysis.affected_by_state_changes is True

    def test_no_hooks(self, function_node) -> None:
        """Test components without hooks render once."""
        analysis = _render(function_node, "export const A = () => <div />;", "A")
        assert analysis.estimated_render_count == 1
        assert analysis.affected_by_state_changes is False


class TestExpensiveCalculations:
    """Test loop nesting against the complexity threshold."""

    def test_threshold_is_strict(self, function_node) -> None:
        """Test 2^depth equal to the threshold does not trigger, one more does."""
        at_threshold, source = function_node(_loops(3), "Loops")
        assert not has_expensive_calculations(function_body(at_threshold), 4)

        above, source = function_node(_loops(4), "Loops")
        assert has_expensive_calculations(function_body(above), 4)

    def test_single_loop(self, function_node) -> None:
        """Test a single loop costs 1 and never exceeds a positive threshold."""
        node, _ = function_node(_loops(1), "Loops")
        assert not has_expensive_calculations(function_body(node), 1)

    def test_uses_configured_threshold(self, function_node) -> None:
        """Test the analyzer reads the threshold from the configuration."""
        config = AnalyzerConfig.from_dict(
            {"performanceThreshold": {"complexity": 2, "arraySize": 100, "computationWeight": 0.7}}
        )
        analysis = _render(function_node, _loops(3), "Loops", config)
        assert analysis.has_expensive_calculations is True
        assert _render(function_node, _loops(3), "Loops").has_expensive_calculations is False


class TestExpensiveOperations:
    """Test array construction chains."""

    def test_large_literal_array_with_map(self, function_node) -> None:
        """Test new Array(1000).map(...) above a threshold of 100."""
        analysis = _render(
            function_node,
            """
            export function Grid() {
              const cells = new Array(1000).map((_, i) => i);
              return <div>{cells}</div>;
            }
            """,
            "Grid",
        )
        assert analysis.has_expensive_operations is True

    def test_wrapped_in_use_memo(self, function_node) -> None:
        """Test chains inside useMemo are not flagged."""
        analysis = _render(
            function_node,
            """
            export function Grid() {
              const cells = useMemo(() => new Array(1000).map((_, i) => i), []);
              return <div>{cells}</div>;
            }
            """,
            "Grid",
        )
        assert analysis.has_expensive_operations is False

    def test_size_at_threshold(self, function_node) -> None:
        """Test sizes equal to the threshold are not expensive."""
        node, source = function_node(
            """
            export function Small() {
              const cells = Array.from({ length: 100 }).map((_, i) => i);
              return <div>{cells}</div>;
            }
            """,
            "Small",
        )
        assert not has_expensive_operations(node, source, 100)
        assert has_expensive_operations(node, source, 99)

    def test_unknown_size_never_triggers(self, function_node) -> None:
        """Test chains without a literal size are ignored."""
        node, source = function_node(
            """
            export function Dynamic({ n, items }) {
              const a = new Array(n).fill(0);
              const b = items.map((x) => x * 2).filter(Boolean);
              return <div>{a}{b}</div>;
            }
            """,
            "Dynamic",
        )
        assert not has_expensive_operations(node, source, 1)

    def test_chain_size(self, parse) -> None:
        """Test chain roots and transforms."""
        parsed = parse("x = Array.from(5000).filter(Boolean).fill(1);\n")
        call = next(n for n in walk(parsed.root) if n.type == "call_expression")
        assert array_chain_size(call, parsed.source) == 5000


FORM = """
    export function Form({ onSubmit }) {
      const [value, setValue] = useState("");
      const handleChange = (e) => setValue(e.target.value);
      function handleReset() {
        setValue("");
      }
      return (
        <form onSubmit={() => onSubmit(value)}>
          <input onChange={handleChange} />
          <Button onClick={handleReset} />
          <button onClick={() => console.log("x")} />
        </form>
      );
    }
    """


class TestEventHandlers:
    """Test handler discovery and description."""

    def test_handlers_found_in_markup_order(self, function_node) -> None:
        """Test inline and bound handlers are reported once each."""
        analysis = _render(function_node, FORM, "Form")
        assert [h.name for h in analysis.event_handlers] == [
            "onSubmit",
            "handleChange",
            "handleReset",
            "onClick",
        ]
        assert analysis.has_event_handlers is True

    def test_handler_types(self, function_node) -> None:
        """Test handler types come from names, click before change before submit."""
        handlers = {h.name: h for h in _render(function_node, FORM, "Form").event_handlers}
        assert handlers["onSubmit"].type is HandlerType.SUBMIT
        assert handlers["handleChange"].type is HandlerType.CHANGE
        assert handlers["handleReset"].type is HandlerType.CLICK
        assert handlers["onClick"].type is HandlerType.CLICK

    def test_props_and_state_usage(self, function_node) -> None:
        """Test usesProps and usesState flags."""
        handlers = {h.name: h for h in _render(function_node, FORM, "Form").event_handlers}
        assert handlers["onSubmit"].uses_props is True
        assert handlers["onSubmit"].uses_state is True
        assert handlers["handleChange"].uses_props is False
        assert handlers["handleChange"].uses_state is True
        assert handlers["onClick"].uses_state is False

    def test_cleanup_call(self, function_node) -> None:
        """Test removal-style calls mark a handler as cleaning up."""
        analysis = _render(
            function_node,
            """
            export function Scroller({ listener }) {
              const onDetach = () => window.removeEventListener("scroll", listener);
              return <div onBlur={onDetach} />;
            }
            """,
            "Scroller",
        )
        (handler,) = analysis.event_handlers
        assert handler.has_cleanup is True

    def test_declared_handler_passed_to_non_event_attribute(self, function_node) -> None:
        """Test handle* declarations passed by identifier are found."""
        analysis = _render(
            function_node,
            """
            export function Table() {
              const handleSort = (key) => key;
              return <Grid sorter={handleSort} />;
            }
            """,
            "Table",
        )
        assert [h.name for h in analysis.event_handlers] == ["handleSort"]


class TestChildren:
    """Test child component and function prop facts."""

    def test_child_with_function_prop(self, function_node) -> None:
        """Test uppercase tags receiving functions count as child components."""
        analysis = _render(function_node, FORM, "Form")
        assert analysis.has_child_components is True
        assert analysis.function_prop_passing is True
        assert analysis.has_state_updates is True

    def test_presentational_child(self, function_node) -> None:
        """Test uppercase tags without function props do not count."""
        analysis = _render(
            function_node,
            """
            export function Page() {
              return <Header title="Home" />;
            }
            """,
            "Page",
        )
        assert analysis.has_child_components is False
        assert analysis.function_prop_passing is False

    def test_memoized_child_components(self, function_node) -> None:
        """Test memo-wrapped components rendered here are listed with their function props."""
        analysis = _render(
            function_node,
            """
            const Row = memo(function Row({ onPick }) {
              return <li onClick={onPick} />;
            });

            export function List() {
              const pick = useCallback(() => {}, []);
              return <ul><Row onPick={pick} label="x" /></ul>;
            }
            """,
            "List",
        )
        (child,) = analysis.memoized_components
        assert child.name == "Row"
        assert child.is_memoized is True
        assert child.received_functions == ["onPick"]

    def test_self_memoized(self, function_node) -> None:
        """Test memo(Self) at module level lists the component itself."""
        analysis = _render(
            function_node,
            """
            function Label({ text }) {
              return <span>{text}</span>;
            }
            export default memo(Label);
            """,
            "Label",
        )
        assert [c.name for c in analysis.memoized_components] == ["Label"]

    def test_memo_not_rendered_here(self, function_node) -> None:
        """Test memo components that are not rendered are ignored."""
        analysis = _render(
            function_node,
            """
            const Other = memo(OtherImpl);
            export function Solo() {
              return <div />;
            }
            """,
            "Solo",
        )
        assert analysis.memoized_components == []

    def test_markup_inside_dependency_array(self, function_node) -> None:
        """Test attributes inside a hook's dependency array are not function props."""
        analysis = _render(
            function_node,
            """
            export function Odd() {
              const value = useMemo(() => 1, [<Child onPick={() => {}} />]);
              return <div>{value}</div>;
            }
            """,
            "Odd",
        )
        assert analysis.function_prop_passing is False
