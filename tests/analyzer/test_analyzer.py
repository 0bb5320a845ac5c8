"""
Tests for the React semantic analyzer.
"""

import pytest

from conftest import Stages, codes

from react2svelte.analyzer import (
    ComponentInstance,
    ConditionalBlock,
    ContextDirection,
    DependencyKind,
    DerivedForm,
    EffectTiming,
    Element,
    ListBlock,
    LocalKind,
    ModuleItemKind,
    PropsPattern,
    SlotInvocation,
    StateKind,
)
from react2svelte.analyzer.render import clean_jsx_text
from react2svelte.diagnostics import Severity
from react2svelte.errors import NoComponentError


# =============================================================================
# COMPONENT DISCOVERY
# =============================================================================


class TestComponentDiscovery:
    """Choosing the component and reading its props."""

    def test_default_export_wins(self, stages):
        model = stages.analyze("""
            function Helper() {
              return <span />;
            }

            export default function Page() {
              return <main />;
            }
        """)
        assert model.name == "Page"
        assert "extra-component" in codes(stages.diagnostics.diagnostics, Severity.WARNING)

    def test_default_export_by_identifier(self, stages):
        model = stages.analyze("""
            const Card = ({ title }) => <h2>{title}</h2>;
            export default Card;
        """)
        assert model.name == "Card"
        assert [p.name for p in model.props] == ["title"]

    def test_memo_wrapper_is_erased(self, stages):
        model = stages.analyze("""
            const Badge = React.memo(function Badge({ label }) {
              return <b>{label}</b>;
            });
        """)
        assert model.name == "Badge"
        assert "memo-erased" in codes(stages.diagnostics.diagnostics, Severity.INFO)

    def test_component_name_override(self):
        model = Stages(component_name="Renamed").analyze("""
            function Original() {
              return <div />;
            }
        """)
        assert model.name == "Renamed"

    def test_no_component_is_fatal(self, stages):
        with pytest.raises(NoComponentError):
            stages.analyze("export const answer = 42;\n")

    def test_destructured_props(self, stages):
        model = stages.analyze("""
            function Button({ label, size = 'md', onPress, ...rest }) {
              return <button {...rest}>{label}{size}</button>;
            }
        """)
        assert model.props_pattern is PropsPattern.DESTRUCTURED
        props = {p.name: p for p in model.props}
        assert props["size"].default_value.text == "'md'"
        assert props["onPress"].is_event_handler
        assert props["rest"].is_rest
        assert not props["label"].is_event_handler

    def test_props_identifier(self, stages):
        model = stages.analyze("""
            function Title(props) {
              return <h1>{props.text}</h1>;
            }
        """)
        assert model.props_pattern is PropsPattern.IDENTIFIER
        assert model.props_identifier == "props"

    def test_forward_ref_becomes_bindable(self, stages):
        model = stages.analyze("""
            const Field = forwardRef(function Field({ label }, ref) {
              return <input ref={ref} aria-label={label} />;
            });
        """)
        ref = [p for p in model.props if p.is_bindable]
        assert len(ref) == 1
        assert ref[0].name == "ref"
        assert model.ref_bindings["ref"].forwarded

    def test_typescript_props_type(self, ts_stages):
        model = ts_stages.analyze("""
            interface Props { label: string }
            function Chip({ label }: Props) {
              return <span>{label}</span>;
            }
        """)
        assert model.props_type == "Props"
        assert model.module_items[0].kind is ModuleItemKind.TYPE


# =============================================================================
# HOOKS
# =============================================================================


class TestStateHooks:
    """useState and useReducer bindings."""

    def test_use_state_records_setter_sites(self, stages):
        model = stages.analyze("""
            function Counter() {
              const [count, setCount] = useState(0);
              const reset = () => setCount(0);
              return <button onClick={() => setCount(c => c + 1)}>{count}</button>;
            }
        """)
        state = model.state_bindings["count"]
        assert state.kind is StateKind.PLAIN
        assert state.setter == "setCount"
        assert state.initial_expression.text == "0"
        assert len(state.setter_call_sites) == 2
        assert state.setter_references == ()

    def test_setter_passed_as_value(self, stages):
        model = stages.analyze("""
            function Picker() {
              const [value, setValue] = useState('');
              return <Select onSelect={setValue} value={value} />;
            }
        """)
        assert len(model.state_bindings["value"].setter_references) == 1

    def test_lazy_initializer(self, stages):
        model = stages.analyze("""
            function Lazy() {
              const [items] = useState(() => loadItems());
              return <ul>{items.length}</ul>;
            }
        """)
        assert model.state_bindings["items"].lazy_initializer

    def test_use_reducer(self, stages):
        model = stages.analyze("""
            function reducer(state, action) {
              return state + action;
            }

            function Tally() {
              const [total, dispatch] = useReducer(reducer, 0);
              return <button onClick={() => dispatch(1)}>{total}</button>;
            }
        """)
        state = model.state_bindings["total"]
        assert state.kind is StateKind.REDUCER
        assert state.dispatch == "dispatch"
        assert state.reducer.text == "reducer"

    def test_dynamic_reducer_warns(self, stages):
        stages.analyze("""
            function Tally({ reducers }) {
              const [total, dispatch] = useReducer(reducers.main, 0);
              return <span>{total}</span>;
            }
        """)
        assert "dynamic-hook-argument" in codes(stages.diagnostics.diagnostics, Severity.WARNING)


class TestDerivedHooks:
    """useMemo and implicitly derived constants."""

    def test_use_memo_expression_form(self, stages):
        model = stages.analyze("""
            function Total({ items }) {
              const sum = useMemo(() => items.reduce((a, b) => a + b, 0), [items]);
              return <p>{sum}</p>;
            }
        """)
        derived = model.derived_bindings["sum"]
        assert derived.form is DerivedForm.EXPRESSION
        assert derived.declared_dependencies == ("items",)
        assert not derived.dependency_expressions_implicit

    def test_use_memo_block_form(self, stages):
        model = stages.analyze("""
            function Total({ items }) {
              const sum = useMemo(() => {
                return items.length;
              }, [items]);
              return <p>{sum}</p>;
            }
        """)
        assert model.derived_bindings["sum"].form is DerivedForm.FUNCTION

    def test_stale_dependency(self, stages):
        stages.analyze("""
            function Total({ items, unused }) {
              const sum = useMemo(() => items.length, [items, unused]);
              return <p>{sum}</p>;
            }
        """)
        warnings = [d for d in stages.diagnostics.diagnostics if d.code == "stale-dependency"]
        assert len(warnings) == 1
        assert "unused" in warnings[0].message

    def test_implicit_derived_constant(self, stages):
        model = stages.analyze("""
            function Greeting({ name }) {
              const upper = name.toUpperCase();
              const fixed = 'hello';
              return <p>{fixed} {upper}</p>;
            }
        """)
        assert model.derived_bindings["upper"].dependency_expressions_implicit
        assert "fixed" not in model.derived_bindings
        assert any(local.kind is LocalKind.CONSTANT for local in model.locals)


class TestEffectHooks:
    """Effect classification by dependency shape."""

    EFFECTS = """
        function Clock({ a, b }) {
          useEffect(() => {
            console.log('mounted');
          }, []);
          useEffect(() => {
            console.log('render');
          });
          useEffect(() => {
            console.log(a, b);
          }, [a, b]);
          return <div />;
        }
    """

    def test_three_dependency_shapes(self, stages):
        model = stages.analyze(self.EFFECTS)
        kinds = [effect.dependency_kind for effect in model.effects]
        assert kinds == [
            DependencyKind.ON_MOUNT,
            DependencyKind.ON_EVERY_UPDATE,
            DependencyKind.ON_DEPS,
        ]
        assert model.effects[2].declared_dependencies == ("a", "b")
        assert "effect-every-update" in codes(stages.diagnostics.diagnostics, Severity.INFO)

    def test_cleanup_is_captured(self, stages):
        model = stages.analyze("""
            function Ticker() {
              useEffect(() => {
                const id = setInterval(tick, 1000);
                return () => clearInterval(id);
              }, []);
              return <div />;
            }
        """)
        effect = model.effects[0]
        assert effect.cleanup_expression.text == "() => clearInterval(id)"
        assert len(effect.body_statements) == 1

    def test_layout_effect_timing(self, stages):
        model = stages.analyze("""
            function Measure() {
              useLayoutEffect(() => {
                measure();
              }, []);
              return <div />;
            }
        """)
        assert model.effects[0].timing is EffectTiming.PRE_PAINT


class TestContextAndRefs:
    """createContext, providers, consumers and refs."""

    def test_provider_and_consumer(self, stages):
        model = stages.analyze("""
            const ThemeContext = createContext('light');

            export default function App({ children }) {
              const theme = useContext(ThemeContext);
              return (
                <ThemeContext.Provider value="dark">
                  <main className={theme}>{children}</main>
                </ThemeContext.Provider>
              );
            }
        """)
        assert "ThemeContext" in model.context_definitions
        directions = {use.direction: use for use in model.context_uses}
        consumer = directions[ContextDirection.CONSUME]
        assert consumer.key == "ThemeContext"
        assert consumer.default_expression.text == "'light'"
        provider = directions[ContextDirection.PROVIDE]
        assert provider.value_expression.text == '"dark"'
        assert model.render_tree.children[0].tag == "main"

    def test_ref_is_linked_to_element(self, stages):
        model = stages.analyze("""
            function Focus() {
              const input = useRef(null);
              const timer = useRef(0);
              return <input ref={input} />;
            }
        """)
        assert model.ref_bindings["input"].target_node_id == model.render_tree.node_id
        assert model.ref_bindings["timer"].target_node_id is None


# =============================================================================
# RENDER TREE
# =============================================================================


class TestRenderTree:
    """Normalisation of the returned JSX."""

    def test_conditional_and_list(self, stages):
        model = stages.analyze("""
            function List({ items, loading }) {
              return (
                <ul>
                  {loading && <li>Loading</li>}
                  {items.map(item => <li key={item.id}>{item.name}</li>)}
                </ul>
              );
            }
        """)
        root = model.render_tree
        assert isinstance(root, Element)
        conditional, listing = root.children
        assert isinstance(conditional, ConditionalBlock)
        assert conditional.condition.text == "loading"
        assert isinstance(listing, ListBlock)
        assert listing.key_expression.text == "item.id"
        assert listing.item_binding.text == "item"

    def test_list_without_key(self, stages):
        model = stages.analyze("""
            function List({ items }) {
              return <ul>{items.map((item, i) => <li>{item}</li>)}</ul>;
            }
        """)
        listing = model.render_tree.children[0]
        assert listing.key_expression is None
        assert listing.index_binding == "i"

    def test_early_return_becomes_conditional(self, stages):
        model = stages.analyze("""
            function Gate({ user }) {
              if (!user) return <p>Sign in</p>;
              return <p>Welcome</p>;
            }
        """)
        root = model.render_tree
        assert isinstance(root, ConditionalBlock)
        assert root.condition.text == "(!user)"
        assert isinstance(root.alternate, Element)

    def test_children_and_render_props(self, stages):
        model = stages.analyze("""
            function Layout({ children, renderFooter }) {
              return (
                <div>
                  {children}
                  {renderFooter(2024)}
                  <Table rows={[]} renderRow={(row) => <tr>{row.id}</tr>} />
                </div>
              );
            }
        """)
        first, second, table = model.render_tree.children
        assert isinstance(first, SlotInvocation) and first.slot_name == "children"
        assert isinstance(second, SlotInvocation) and second.slot_name == "renderFooter"
        assert model.children_slots["renderFooter"] == ("2024",)
        assert isinstance(table, ComponentInstance)
        assert [slot.name for slot in table.slot_contents] == ["renderRow"]

    def test_style_element_is_extracted(self, stages):
        model = stages.analyze("""
            function Styled() {
              return (
                <div>
                  <style>{`
                    .box { color: red; }
                  `}</style>
                </div>
              );
            }
        """)
        assert model.styles == (".box { color: red; }",)

    def test_local_snippet(self, stages):
        model = stages.analyze("""
            function Menu({ items }) {
              const renderItem = (item) => <li>{item}</li>;
              return <ul>{items.map(item => renderItem(item))}</ul>;
            }
        """)
        assert [snippet.name for snippet in model.snippets] == ["renderItem"]

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (" ", " "),
            ("Hello ", "Hello "),
            ("\n  Hello\n  world\n", "Hello world"),
            ("  \n   ", ""),
            ("a\t", "a "),
        ],
    )
    def test_jsx_text_whitespace(self, raw, expected):
        assert clean_jsx_text(raw) == expected


class TestResolution:
    """Identifier resolution diagnostics."""

    def test_unresolved_reference(self, stages):
        stages.analyze("""
            function Broken() {
              return <p>{missing}</p>;
            }
        """)
        warnings = [d for d in stages.diagnostics.diagnostics if d.code == "unresolved-reference"]
        assert [d.construct for d in warnings] == ["missing"]

    def test_imports_and_globals_resolve(self, stages):
        stages.analyze("""
            import { format } from './format';

            function Stamp({ when }) {
              return <time>{format(when)} {Math.round(1.5)}</time>;
            }
        """)
        assert "unresolved-reference" not in codes(stages.diagnostics.diagnostics)

    def test_duplicate_binding(self, stages):
        model = stages.analyze("""
            function Twice() {
              const [a, setA] = useState(1);
              const [a, setOther] = useState(2);
              return <p>{a}</p>;
            }
        """)
        assert "duplicate-binding" in codes(stages.diagnostics.diagnostics, Severity.ERROR)
        assert any(local.kind is LocalKind.UNSUPPORTED for local in model.locals)
