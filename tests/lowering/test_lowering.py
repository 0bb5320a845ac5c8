"""
Tests for lowering the component model into the Svelte IR.
"""

from conftest import codes

from react2svelte.diagnostics import Severity
from react2svelte.ir import (
    AttributeKind,
    ComponentNode,
    ContextGet,
    ContextSet,
    DerivedDeclaration,
    EachBlock,
    EffectDeclaration,
    EffectRune,
    ElementNode,
    ExpressionTag,
    IfBlock,
    PropsDeclaration,
    RawStatement,
    RefDeclaration,
    RenderTag,
    ScriptPlaceholder,
    SnippetBlock,
    StateDeclaration,
)
from react2svelte.lowering import css_property, event_name
from react2svelte.lowering.attributes import css_number, escape_attribute


def attribute(element, name):
    return next(attr for attr in element.attributes if attr.name == name)


def script_of(ir, kind):
    return [node for node in ir.script if isinstance(node, kind)]


# =============================================================================
# SCRIPT
# =============================================================================


class TestStateLowering:
    """State cells and setter rewriting."""

    def test_counter(self, stages):
        ir = stages.lower("""
            function Counter({ initial = 0 }) {
              const [count, setCount] = useState(initial);
              return <button onClick={() => setCount(c => c + 1)}>{count}</button>;
            }
        """)
        props, state = ir.script
        assert isinstance(props, PropsDeclaration)
        assert props.entries[0].name == "initial"
        assert props.entries[0].default == "0"
        assert state == StateDeclaration(name="count", initial="initial")
        button = ir.template[0]
        click = attribute(button, "onclick")
        assert click.kind is AttributeKind.EVENT
        assert click.value == "() => (count = count + 1)"
        assert button.children == (ExpressionTag(expression="count"),)
        assert not stages.diagnostics.has_errors()

    def test_setter_statement_is_plain_assignment(self, stages):
        ir = stages.lower("""
            function Toggle() {
              const [open, setOpen] = useState(false);
              function flip() {
                setOpen(!open);
              }
              return <button onClick={flip}>{String(open)}</button>;
            }
        """)
        flip = script_of(ir, RawStatement)[0]
        assert flip.text == "function flip() {\n  open = !open;\n}"

    def test_block_updater_is_called(self, stages):
        ir = stages.lower("""
            function Items() {
              const [items, setItems] = useState([]);
              const add = () => setItems(prev => { return [...prev, 1]; });
              return <p>{items.length}</p>;
            }
        """)
        add = script_of(ir, RawStatement)[0]
        assert "items = (prev => { return [...prev, 1]; })(items)" in add.text

    def test_setter_as_value(self, stages):
        ir = stages.lower("""
            function Picker() {
              const [value, setValue] = useState('');
              return <Select onSelect={setValue} />;
            }
        """)
        select = ir.template[0]
        assert isinstance(select, ComponentNode)
        assert attribute(select, "onSelect").value == "(next) => (value = next)"
        assert "setter-as-value" in codes(stages.diagnostics.diagnostics, Severity.INFO)

    def test_lazy_initializer_is_unwrapped(self, stages):
        ir = stages.lower("""
            function Lazy() {
              const [items] = useState(() => load());
              return <p>{items}</p>;
            }
        """)
        assert script_of(ir, StateDeclaration)[0].initial == "load()"

    def test_reducer_dispatch(self, stages):
        ir = stages.lower("""
            function reducer(state, action) {
              return state + action;
            }

            function Tally() {
              const [total, dispatch] = useReducer(reducer, 0);
              return <button onClick={() => dispatch(1)}>{total}</button>;
            }
        """)
        state = script_of(ir, StateDeclaration)[0]
        assert state.name == "total" and state.initial == "0"
        texts = [node.text for node in script_of(ir, RawStatement)]
        assert texts[0].startswith("function reducer(state, action)")
        assert "function dispatch(action) {\n  total = reducer(total, action);\n}" in texts


class TestDerivedLowering:
    """$derived and $derived.by."""

    def test_memo_and_implicit(self, stages):
        ir = stages.lower("""
            function Total({ items, factor }) {
              const sum = useMemo(() => items.length * factor, [items, factor]);
              const label = `Total: ${sum}`;
              const heavy = useMemo(() => {
                return items.map(x => x * 2);
              }, [items]);
              return <p>{label}{heavy.length}</p>;
            }
        """)
        derived = script_of(ir, DerivedDeclaration)
        assert derived[0] == DerivedDeclaration(target="sum", expression="items.length * factor")
        assert derived[1].target == "label"
        assert derived[1].expression == "`Total: ${sum}`"
        assert derived[2].by
        assert derived[2].expression.startswith("() => {")


class TestEffectLowering:
    """Effect runes chosen by timing and dependency kind."""

    def test_runes(self, stages):
        ir = stages.lower("""
            function Clock({ a }) {
              useEffect(() => {
                const id = setInterval(() => {}, 1000);
                return () => clearInterval(id);
              }, []);
              useEffect(() => {
                document.title = a;
              }, [a]);
              useLayoutEffect(() => {
                console.log(a);
              }, []);
              return <div />;
            }
        """)
        mount, tracked, layout = script_of(ir, EffectDeclaration)
        assert mount.rune is EffectRune.ON_MOUNT
        assert mount.body == ("const id = setInterval(() => {}, 1000);",)
        assert mount.cleanup == "() => clearInterval(id)"
        assert tracked.rune is EffectRune.EFFECT
        assert tracked.body == ("document.title = a;",)
        assert layout.rune is EffectRune.EFFECT_PRE
        assert layout.untrack
        assert ir.svelte_imports == ("onMount", "untrack")

    def test_expression_body_keeps_cleanup(self, stages):
        ir = stages.lower("""
            function Live({ channel }) {
              useEffect(() => subscribe(channel), [channel]);
              return <div />;
            }
        """)
        effect = script_of(ir, EffectDeclaration)[0]
        assert effect.body == ("return subscribe(channel);",)


class TestContextAndRefLowering:
    """getContext/setContext and bind:this."""

    def test_context(self, stages):
        ir = stages.lower("""
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
        get = script_of(ir, ContextGet)[0]
        assert get == ContextGet(target="theme", key="ThemeContext", default="'light'")
        assert ir.script[-1] == ContextSet(key="ThemeContext", value='"dark"')
        assert ir.svelte_imports == ("getContext", "setContext")
        main = ir.template[0]
        assert main.tag == "main"
        assert attribute(main, "class").value == "theme"
        assert main.children == (RenderTag(expression="children?.()"),)

    def test_refs(self, stages):
        ir = stages.lower("""
            function Focus() {
              const input = useRef(null);
              const renders = useRef(0);
              useEffect(() => {
                input.current.focus();
                renders.current += 1;
              }, []);
              return <input ref={input} />;
            }
        """)
        refs = script_of(ir, RefDeclaration)
        assert refs[0] == RefDeclaration(name="input", initial="null", reactive=True)
        assert refs[1] == RefDeclaration(name="renders", initial="0", reactive=False)
        effect = script_of(ir, EffectDeclaration)[0]
        assert effect.body == ("input.focus();", "renders += 1;")
        element = ir.template[0]
        assert element.void
        assert attribute(element, "this").kind is AttributeKind.BIND


class TestPlaceholders:
    """Unsupported constructs become TODO placeholders."""

    def test_unsupported_hook(self, stages):
        ir = stages.lower("""
            function Search() {
              const [isPending, startTransition] = useTransition();
              return <p>{isPending ? 'busy' : 'idle'}</p>;
            }
        """)
        placeholder = script_of(ir, ScriptPlaceholder)[0]
        assert placeholder.marker.startswith("TODO(r2s#")
        assert placeholder.original == "const [isPending, startTransition] = useTransition()"
        error = [d for d in stages.diagnostics.diagnostics if d.severity == Severity.ERROR][0]
        assert error.code == "unsupported-pattern"
        assert placeholder.marker == f"TODO({error.marker})"

    def test_callback_ref(self, stages):
        ir = stages.lower("""
            function Measure() {
              return <div ref={(el) => measure(el)} />;
            }
        """)
        placeholder, element = ir.template
        assert placeholder.marker.startswith("TODO(r2s#")
        assert element.tag == "div"


# =============================================================================
# TEMPLATE
# =============================================================================


class TestTemplateLowering:
    """Blocks, attributes and component slots."""

    def test_keyed_and_unkeyed_lists(self, stages):
        ir = stages.lower("""
            function Lists({ items }) {
              return (
                <div>
                  <ul>{items.map(item => <li key={item.id}>{item.name}</li>)}</ul>
                  <ol>{items.map(item => <li>{item.name}</li>)}</ol>
                </div>
              );
            }
        """)
        keyed = ir.template[0].children[0].children[0]
        unkeyed = ir.template[0].children[1].children[0]
        assert isinstance(keyed, EachBlock)
        assert (keyed.expression, keyed.item, keyed.key, keyed.index) == ("items", "item", "item.id", None)
        assert (unkeyed.key, unkeyed.index) == ("i", "i")
        assert codes(stages.diagnostics.diagnostics, Severity.WARNING) == ["missing-key"]

    def test_list_const_tags(self, stages):
        ir = stages.lower("""
            function Prices({ rows }) {
              return (
                <ul>
                  {rows.map((row) => {
                    const total = row.price * row.qty;
                    return <li key={row.id}>{total}</li>;
                  })}
                </ul>
              );
            }
        """)
        each = ir.template[0].children[0]
        assert each.children[0].declaration == "total = row.price * row.qty"

    def test_conditionals(self, stages):
        ir = stages.lower("""
            function Status({ loading, error }) {
              return (
                <section>
                  {loading ? <p>Loading</p> : error ? <p>{error}</p> : <p>Done</p>}
                </section>
              );
            }
        """)
        block = ir.template[0].children[0]
        assert isinstance(block, IfBlock)
        assert [b.condition for b in block.branches] == ["loading", "error"]
        assert block.else_children[0].children[0].text == "Done"

    def test_dom_attributes(self, stages):
        ir = stages.lower("""
            function Field({ id, gap }) {
              return (
                <label htmlFor={id} className="field" onDoubleClick={reset}
                  style={{ fontSize: 12, zIndex: 2, color: 'red', marginTop: gap }}>
                  <input id={id} type="checkbox" disabled onChange={toggle} />
                </label>
              );
            }
        """)
        label = ir.template[0]
        assert attribute(label, "for").value == "id"
        assert attribute(label, "class").kind is AttributeKind.STATIC
        assert attribute(label, "ondblclick").value == "reset"
        styles = {a.name: a.value for a in label.attributes if a.kind is AttributeKind.STYLE}
        assert styles == {"font-size": '"12px"', "z-index": '"2"', "color": '"red"', "margin-top": "{gap}"}
        checkbox = label.children[0]
        assert isinstance(checkbox, ElementNode)
        assert attribute(checkbox, "id").kind is AttributeKind.SHORTHAND
        assert attribute(checkbox, "disabled").kind is AttributeKind.BOOLEAN
        assert attribute(checkbox, "onchange").value == "toggle"

    def test_controlled_inputs(self, stages):
        ir = stages.lower("""
            function Form() {
              const [name, setName] = useState('');
              const [agree, setAgree] = useState(false);
              return (
                <form>
                  <input value={name} onChange={e => setName(e.target.value)} />
                  <input type="checkbox" checked={agree} onChange={(e) => setAgree(e.target.checked)} />
                </form>
              );
            }
        """)
        text, checkbox = ir.template[0].children
        assert [(a.kind, a.name, a.value) for a in text.attributes] == [
            (AttributeKind.BIND, "value", "name")
        ]
        assert attribute(checkbox, "checked").kind is AttributeKind.BIND
        assert not any(a.name == "onchange" for a in checkbox.attributes)

    def test_render_props_and_snippets(self, stages):
        ir = stages.lower("""
            function Menu({ items }) {
              const renderItem = (item) => <li>{item}</li>;
              return (
                <div>
                  <ul>{items.map(item => renderItem(item))}</ul>
                  <Table renderRow={(row) => <tr>{row.id}</tr>}>
                    <caption>Rows</caption>
                  </Table>
                </div>
              );
            }
        """)
        snippet = ir.template[0]
        assert snippet == SnippetBlock(
            name="renderItem",
            params="item",
            children=(ElementNode(tag="li", children=(ExpressionTag(expression="item"),)),),
        )
        container = ir.template[1]
        each = container.children[0].children[0]
        assert each.children == (RenderTag(expression="renderItem(item)"),)
        table = container.children[1]
        assert isinstance(table, ComponentNode)
        assert isinstance(table.children[0], SnippetBlock)
        assert table.children[0].name == "renderRow"
        assert table.children[0].params == "row"

    def test_component_import_is_rewritten(self, stages):
        ir = stages.lower("""
            import Button from './Button';
            import { format } from './format';

            export default function Toolbar() {
              return <Button label={format('x')} />;
            }
        """)
        assert ir.imports == (
            "import Button from './Button.svelte';",
            "import { format } from './format';",
        )
        assert "import-rewritten" in codes(stages.diagnostics.diagnostics, Severity.INFO)


class TestAttributeHelpers:
    """Pure attribute helpers."""

    def test_event_names(self):
        assert event_name("onClick", "button") == "onclick"
        assert event_name("onChange", "input", "text") == "oninput"
        assert event_name("onChange", "select") == "onchange"
        assert event_name("onDoubleClick", "div") == "ondblclick"

    def test_css_helpers(self):
        assert css_property("backgroundColor") == "background-color"
        assert css_property("WebkitTransform") == "-webkit-transform"
        assert css_property("--accent") == "--accent"
        assert css_number("width", "10") == "10px"
        assert css_number("opacity", "0.5") == "0.5"
        assert css_number("margin", "0") == "0"

    def test_escape_attribute(self):
        assert escape_attribute('say "{hi}"') == "say &quot;&#123;hi&#125;&quot;"
