"""
Tests for the Svelte emitter.
"""

from react2svelte.codegen.svelte import SvelteEmitter
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
    IfBranch,
    PropEntry,
    PropsDeclaration,
    RawStatement,
    RefDeclaration,
    RenderTag,
    ScriptPlaceholder,
    SnippetBlock,
    StateDeclaration,
    SvelteComponentIR,
    TemplateAttribute,
    TemplatePlaceholder,
    TextNode,
)


def emit(ir, indent_width=2):
    return SvelteEmitter(indent_width).emit(ir)


def attr(kind, name="", value=None):
    return TemplateAttribute(kind=kind, name=name, value=value)


class TestFileLayout:
    """Script, markup and style sections."""

    def test_full_component(self):
        ir = SvelteComponentIR(
            name="Counter",
            svelte_imports=("onMount",),
            imports=("import Child from './Child.svelte';",),
            script=(
                PropsDeclaration(
                    entries=(PropEntry(name="initial", default="0"), PropEntry(name="rest", rest=True))
                ),
                StateDeclaration(name="count", initial="initial"),
                EffectDeclaration(
                    rune=EffectRune.ON_MOUNT,
                    body=("console.log(count);",),
                    cleanup="() => console.log('bye')",
                ),
            ),
            template=(
                ElementNode(
                    tag="button",
                    attributes=(attr(AttributeKind.EVENT, "onclick", "() => (count = count + 1)"),),
                    children=(ExpressionTag(expression="count"),),
                ),
            ),
            style=".a {\n  color: red;\n}",
        )
        assert emit(ir) == (
            "<script>\n"
            "  import { onMount } from 'svelte';\n"
            "  import Child from './Child.svelte';\n"
            "\n"
            "  let { initial = 0, ...rest } = $props();\n"
            "  let count = $state(initial);\n"
            "\n"
            "  onMount(() => {\n"
            "    console.log(count);\n"
            "    return () => console.log('bye');\n"
            "  });\n"
            "</script>\n"
            "\n"
            "<button onclick={() => (count = count + 1)}>{count}</button>\n"
            "\n"
            "<style>\n"
            "  .a {\n"
            "    color: red;\n"
            "  }\n"
            "</style>\n"
        )

    def test_typescript_and_module_script(self):
        ir = SvelteComponentIR(
            name="Typed",
            typescript=True,
            module_script=(RawStatement(text="export const LIMIT = 3;"),),
            script=(
                PropsDeclaration(identifier="props", type_annotation="Props"),
                StateDeclaration(name="n", initial="0", type_arguments="number"),
                RefDeclaration(name="el", reactive=True, type_arguments="HTMLDivElement"),
                RefDeclaration(name="timer", type_arguments="number"),
            ),
        )
        assert emit(ir) == (
            '<script module lang="ts">\n'
            "  export const LIMIT = 3;\n"
            "</script>\n"
            "\n"
            '<script lang="ts">\n'
            "  let props: Props = $props();\n"
            "  let n = $state<number>(0);\n"
            "  let el = $state<HTMLDivElement>(null);\n"
            "  let timer: number;\n"
            "</script>\n"
        )

    def test_type_arguments_dropped_in_javascript(self):
        ir = SvelteComponentIR(
            name="Plain",
            script=(StateDeclaration(name="n", initial="0", type_arguments="number"),),
        )
        assert "let n = $state(0);" in emit(ir)

    def test_indent_width(self):
        ir = SvelteComponentIR(
            name="Wide",
            template=(
                ElementNode(
                    tag="div",
                    children=(
                        ElementNode(tag="p", children=(TextNode(text="a"),)),
                        ElementNode(tag="p", children=(TextNode(text="b"),)),
                    ),
                ),
            ),
        )
        assert emit(ir, indent_width=4) == "<div>\n    <p>a</p>\n    <p>b</p>\n</div>\n"


class TestScriptDeclarations:
    """Rune declarations."""

    def render(self, *nodes):
        return emit(SvelteComponentIR(name="S", typescript=True, script=nodes))

    def test_derived_and_context(self):
        text = self.render(
            DerivedDeclaration(target="total", expression="a + b"),
            DerivedDeclaration(target="list", expression="() => []", by=True, type_annotation="number[]"),
            ContextGet(target="theme", key="ThemeContext", default="'light'"),
            ContextSet(key="ThemeContext", value="theme"),
        )
        assert "  let total = $derived(a + b);\n" in text
        assert "  let list: number[] = $derived.by(() => []);\n" in text
        assert "  const theme = getContext('ThemeContext') ?? 'light';\n" in text
        assert "  setContext('ThemeContext', theme);\n" in text

    def test_effect_shapes(self):
        text = self.render(
            EffectDeclaration(rune=EffectRune.EFFECT_PRE, body=("measure();",), untrack=True),
            EffectDeclaration(rune=EffectRune.EFFECT, function_reference="sync"),
            EffectDeclaration(rune=EffectRune.ON_MOUNT, body=("await load();",), is_async=True),
        )
        assert (
            "  $effect.pre(() => {\n"
            "    return untrack(() => {\n"
            "      measure();\n"
            "    });\n"
            "  });\n"
        ) in text
        assert "  $effect(sync);\n" in text
        assert "  onMount(async () => {\n    await load();\n  });\n" in text

    def test_bindable_props(self):
        text = self.render(
            PropsDeclaration(
                entries=(
                    PropEntry(name="label"),
                    PropEntry(name="ref", local_name="inputRef", bindable=True),
                ),
                type_annotation="Props",
            )
        )
        assert "let { label, ref: inputRef = $bindable() }: Props = $props();" in text

    def test_script_placeholder(self):
        text = self.render(
            ScriptPlaceholder(
                marker="TODO(r2s#1)",
                reason="useTransition has no Svelte 5 equivalent",
                original="const [a, b] = useTransition()",
            )
        )
        assert (
            "  // TODO(r2s#1): useTransition has no Svelte 5 equivalent\n"
            "  // const [a, b] = useTransition()\n"
        ) in text


class TestMarkup:
    """Template elements, attributes and blocks."""

    def test_attributes(self):
        ir = SvelteComponentIR(
            name="A",
            template=(
                ElementNode(
                    tag="input",
                    attributes=(
                        attr(AttributeKind.BIND, "value", "value"),
                        attr(AttributeKind.STATIC, "type", "text"),
                        attr(AttributeKind.BOOLEAN, "disabled"),
                        attr(AttributeKind.SPREAD, value="rest"),
                        attr(AttributeKind.STYLE, "color", '"red"'),
                        attr(AttributeKind.SHORTHAND, "id", "id"),
                    ),
                    void=True,
                ),
                ElementNode(tag="div"),
                ComponentNode(name="Child", attributes=(attr(AttributeKind.EXPRESSION, "count", "n"),)),
            ),
        )
        assert emit(ir) == (
            '<input bind:value type="text" disabled {...rest} style:color="red" {id} />\n'
            "<div></div>\n"
            "<Child count={n} />\n"
        )

    def test_blocks_and_snippets(self):
        ir = SvelteComponentIR(
            name="B",
            template=(
                SnippetBlock(
                    name="row",
                    params="item",
                    children=(ElementNode(tag="li", children=(ExpressionTag(expression="item.name"),)),),
                ),
                IfBlock(
                    branches=(
                        IfBranch(condition="loading", children=(TextNode(text="Loading"),)),
                        IfBranch(condition="error", children=(ExpressionTag(expression="error"),)),
                    ),
                    else_children=(
                        EachBlock(
                            expression="items",
                            item="item",
                            key="item.id",
                            children=(RenderTag(expression="row(item)"),),
                        ),
                    ),
                ),
            ),
        )
        assert emit(ir) == (
            "{#snippet row(item)}\n"
            "  <li>{item.name}</li>\n"
            "{/snippet}\n"
            "\n"
            "{#if loading}\n"
            "  Loading\n"
            "{:else if error}\n"
            "  {error}\n"
            "{:else}\n"
            "  {#each items as item (item.id)}\n"
            "    {@render row(item)}\n"
            "  {/each}\n"
            "{/if}\n"
        )

    def test_multiline_attribute(self):
        ir = SvelteComponentIR(
            name="M",
            template=(
                ElementNode(
                    tag="button",
                    attributes=(attr(AttributeKind.EVENT, "onclick", "() => {\n  save();\n}"),),
                    children=(TextNode(text="Save"),),
                ),
            ),
        )
        assert emit(ir) == (
            "<button\n"
            "  onclick={() => {\n"
            "    save();\n"
            "  }}\n"
            ">\n"
            "  Save\n"
            "</button>\n"
        )

    def test_inline_text_with_nested_element(self):
        ir = SvelteComponentIR(
            name="T",
            template=(
                ElementNode(
                    tag="p",
                    children=(
                        TextNode(text="Hello "),
                        ElementNode(tag="b", children=(ExpressionTag(expression="name"),)),
                        TextNode(text="!"),
                    ),
                ),
            ),
        )
        assert emit(ir) == "<p>Hello <b>{name}</b>!</p>\n"

    def test_template_placeholder_escapes_comment_end(self):
        ir = SvelteComponentIR(
            name="P",
            template=(
                TemplatePlaceholder(
                    marker="TODO(r2s#2)",
                    reason="callback refs",
                    original="<div ref={(el) => x--> 1} />",
                ),
            ),
        )
        assert emit(ir) == (
            "<!-- TODO(r2s#2): callback refs\n"
            "<div ref={(el) => x--&gt; 1} />\n"
            "-->\n"
        )

    def test_emission_is_deterministic(self):
        ir = SvelteComponentIR(
            name="D",
            svelte_imports=("getContext", "onMount"),
            template=(ElementNode(tag="p", children=(TextNode(text="x"),)),),
        )
        emitter = SvelteEmitter(2)
        assert emitter.emit(ir) == emitter.emit(ir)
