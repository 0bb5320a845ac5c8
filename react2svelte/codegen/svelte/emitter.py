"""
Svelte 5 source emitter.

Serializes a :class:`SvelteComponentIR` into ``.svelte`` source text:

    <script module>   exported module-level declarations (optional)
    <script>          svelte imports, user imports, props, declarations
    template          markup, blocks and snippets
    <style>           extracted CSS (optional)

Emission is a pure function of the IR and the indent width.
"""

from __future__ import annotations

import textwrap
from typing import List, Optional, Sequence

from react2svelte.ir import (
    AttributeKind,
    ComponentNode,
    ConstTag,
    ContextGet,
    ContextSet,
    DerivedDeclaration,
    EachBlock,
    EffectDeclaration,
    EffectRune,
    ElementNode,
    ExpressionTag,
    HtmlTag,
    IfBlock,
    PropsDeclaration,
    RawStatement,
    RefDeclaration,
    RenderTag,
    ScriptNode,
    ScriptPlaceholder,
    SnippetBlock,
    StateDeclaration,
    SvelteComponentIR,
    TemplateAttribute,
    TemplateNode,
    TemplatePlaceholder,
    TextNode,
)

INLINE_LIMIT = 100

_INLINE_TYPES = (TextNode, ExpressionTag, HtmlTag, RenderTag)


def _quote(key: str) -> str:
    return "'" + key.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _escape_comment(text: str) -> str:
    return text.replace("-->", "--&gt;")


def _inline_candidate(children: Sequence[TemplateNode]) -> bool:
    """Nested elements stay on one line only inside running text."""
    if not any(isinstance(child, ElementNode) for child in children):
        return True
    return any(isinstance(child, TextNode) and child.text.strip() for child in children)


class SvelteEmitter:
    """Render IR to text with ``indent_width`` spaces per level."""

    def __init__(self, indent_width: int = 2):
        self.indent = " " * indent_width

    def emit(self, ir: SvelteComponentIR) -> str:
        sections: List[str] = []
        if ir.module_script:
            sections.append(self._script_block(ir, self._script_body(ir.module_script, ir), module=True))
        instance = self._instance_lines(ir)
        if instance:
            sections.append(self._script_block(ir, instance, module=False))
        markup = self._nodes(ir.template, 0, top_level=True)
        if markup:
            sections.append("\n".join(markup))
        if ir.style:
            sections.append(self._style(ir.style))
        return "\n\n".join(sections) + "\n"

    # ------------------------------------------------------------------
    # Script
    # ------------------------------------------------------------------

    def _script_block(self, ir: SvelteComponentIR, lines: List[str], *, module: bool) -> str:
        attributes = []
        if module:
            attributes.append("module")
        if ir.typescript:
            attributes.append('lang="ts"')
        open_tag = "<script" + "".join(f" {a}" for a in attributes) + ">"
        body = [self.indent + line if line else "" for line in lines]
        return "\n".join([open_tag] + body + ["</script>"])

    def _instance_lines(self, ir: SvelteComponentIR) -> List[str]:
        lines: List[str] = []
        if ir.svelte_imports:
            lines.append(f"import {{ {', '.join(ir.svelte_imports)} }} from 'svelte';")
        for statement in ir.imports:
            lines.extend(statement.split("\n"))
        body = self._script_body(ir.script, ir)
        if lines and body:
            lines.append("")
        lines.extend(body)
        return lines

    def _script_body(self, nodes: Sequence[ScriptNode], ir: SvelteComponentIR) -> List[str]:
        lines: List[str] = []
        previous_multiline = False
        for node in nodes:
            rendered = self._declaration(node, ir)
            multiline = len(rendered) > 1
            if lines and (multiline or previous_multiline):
                lines.append("")
            lines.extend(rendered)
            previous_multiline = multiline
        return lines

    def _declaration(self, node: ScriptNode, ir: SvelteComponentIR) -> List[str]:
        if isinstance(node, PropsDeclaration):
            return self._props(node).split("\n")
        if isinstance(node, StateDeclaration):
            type_args = f"<{node.type_arguments}>" if ir.typescript and node.type_arguments else ""
            return f"let {node.name} = $state{type_args}({node.initial or ''});".split("\n")
        if isinstance(node, DerivedDeclaration):
            annotation = f": {node.type_annotation}" if node.type_annotation else ""
            rune = "$derived.by" if node.by else "$derived"
            return f"let {node.target}{annotation} = {rune}({node.expression});".split("\n")
        if isinstance(node, EffectDeclaration):
            return self._effect(node)
        if isinstance(node, ContextGet):
            lookup = f"getContext({_quote(node.key)})"
            if node.default is not None:
                lookup += f" ?? {node.default}"
            return f"const {node.target} = {lookup};".split("\n")
        if isinstance(node, ContextSet):
            return f"setContext({_quote(node.key)}, {node.value});".split("\n")
        if isinstance(node, RefDeclaration):
            return self._ref(node, ir).split("\n")
        if isinstance(node, RawStatement):
            return node.text.split("\n")
        if isinstance(node, ScriptPlaceholder):
            lines = [f"// {node.marker}: {node.reason}"]
            lines.extend(f"// {line}" if line else "//" for line in node.original.split("\n"))
            return lines
        raise TypeError(f"unknown script node {type(node).__name__}")

    def _props(self, node: PropsDeclaration) -> str:
        annotation = f": {node.type_annotation}" if node.type_annotation else ""
        if node.identifier is not None and not node.entries:
            return f"let {node.identifier}{annotation} = $props();"
        parts = []
        for entry in node.entries:
            if entry.rest:
                parts.append(f"...{entry.name}")
                continue
            target = entry.name
            if entry.local_name:
                target += f": {entry.local_name}"
            if entry.bindable:
                target += " = $bindable()"
            elif entry.default is not None:
                target += f" = {entry.default}"
            parts.append(target)
        return f"let {{ {', '.join(parts)} }}{annotation} = $props();"

    def _ref(self, node: RefDeclaration, ir: SvelteComponentIR) -> str:
        typed = ir.typescript and node.type_arguments
        if node.reactive:
            type_args = f"<{node.type_arguments}>" if typed else ""
            return f"let {node.name} = $state{type_args}({node.initial or 'null'});"
        annotation = f": {node.type_arguments}" if typed else ""
        if node.initial is None:
            return f"let {node.name}{annotation};"
        return f"let {node.name}{annotation} = {node.initial};"

    def _effect(self, node: EffectDeclaration) -> List[str]:
        rune = node.rune.value
        if node.function_reference is not None:
            if node.untrack:
                return [f"{rune}(() => untrack({node.function_reference}));"]
            return [f"{rune}({node.function_reference});"]

        inner: List[str] = []
        for statement in node.body:
            inner.extend(statement.split("\n"))
        if node.cleanup is not None:
            cleanup = node.cleanup.split("\n")
            cleanup[0] = f"return {cleanup[0]}"
            cleanup[-1] = f"{cleanup[-1]};"
            inner.extend(cleanup)
        prefix = "async " if node.is_async else ""
        if node.untrack:
            wrapped = [f"return untrack({prefix}() => {{"]
            wrapped.extend(self._indented(inner))
            wrapped.append("});")
            inner = wrapped
            prefix = ""
        if not inner:
            return [f"{rune}({prefix}() => {{}});"]
        lines = [f"{rune}({prefix}() => {{"]
        lines.extend(self._indented(inner))
        lines.append("});")
        return lines

    def _indented(self, lines: Sequence[str], depth: int = 1) -> List[str]:
        pad = self.indent * depth
        return [pad + line if line else "" for line in lines]

    # ------------------------------------------------------------------
    # Template
    # ------------------------------------------------------------------

    def _nodes(self, nodes: Sequence[TemplateNode], depth: int, *, top_level: bool = False) -> List[str]:
        lines: List[str] = []
        for index, node in enumerate(nodes):
            rendered = self._node(node, depth)
            if not rendered:
                continue
            lines.extend(rendered)
            if top_level and isinstance(node, SnippetBlock) and index < len(nodes) - 1:
                lines.append("")
        return lines

    def _node(self, node: TemplateNode, depth: int) -> List[str]:
        pad = self.indent * depth
        if isinstance(node, TextNode):
            text = node.text.strip()
            return [pad + text] if text else []
        if isinstance(node, (ExpressionTag, HtmlTag, RenderTag, ConstTag)):
            return self._with_pad(self._tag(node), depth)
        if isinstance(node, ElementNode):
            return self._element(node.tag, node.attributes, node.children, depth, void=node.void, component=False)
        if isinstance(node, ComponentNode):
            return self._element(node.name, node.attributes, node.children, depth, void=False, component=True)
        if isinstance(node, IfBlock):
            lines: List[str] = []
            for position, branch in enumerate(node.branches):
                opener = "{#if " if position == 0 else "{:else if "
                lines.extend(self._with_pad(f"{opener}{branch.condition}}}", depth))
                lines.extend(self._nodes(branch.children, depth + 1))
            if node.else_children is not None:
                lines.append(pad + "{:else}")
                lines.extend(self._nodes(node.else_children, depth + 1))
            lines.append(pad + "{/if}")
            return lines
        if isinstance(node, EachBlock):
            head = f"{{#each {node.expression} as {node.item}"
            if node.index:
                head += f", {node.index}"
            if node.key:
                head += f" ({node.key})"
            head += "}"
            lines = self._with_pad(head, depth)
            lines.extend(self._nodes(node.children, depth + 1))
            lines.append(pad + "{/each}")
            return lines
        if isinstance(node, SnippetBlock):
            lines = self._with_pad(f"{{#snippet {node.name}({node.params})}}", depth)
            lines.extend(self._nodes(node.children, depth + 1))
            lines.append(pad + "{/snippet}")
            return lines
        if isinstance(node, TemplatePlaceholder):
            lines = [f"{pad}<!-- {node.marker}: {_escape_comment(node.reason)}"]
            lines.extend(
                pad + _escape_comment(line) if line else "" for line in node.original.split("\n")
            )
            lines.append(pad + "-->")
            return lines
        raise TypeError(f"unknown template node {type(node).__name__}")

    def _with_pad(self, text: str, depth: int) -> List[str]:
        pad = self.indent * depth
        return [pad + line if line else "" for line in text.split("\n")]

    def _tag(self, node: TemplateNode) -> str:
        if isinstance(node, ExpressionTag):
            return f"{{{node.expression}}}"
        if isinstance(node, HtmlTag):
            return f"{{@html {node.expression}}}"
        if isinstance(node, RenderTag):
            return f"{{@render {node.expression}}}"
        return f"{{@const {node.declaration}}}"

    def _inline(self, node: TemplateNode) -> Optional[str]:
        """Single-line rendering of ``node``, or None when it needs a block."""
        if isinstance(node, TextNode):
            return node.text if "\n" not in node.text else None
        if isinstance(node, _INLINE_TYPES):
            text = self._tag(node)
            return text if "\n" not in text else None
        if isinstance(node, ElementNode) and not node.void:
            open_tag = self._open_tag(node.tag, node.attributes)
            if open_tag is None:
                return None
            parts = [self._inline(child) for child in node.children]
            if any(part is None for part in parts):
                return None
            return f"{open_tag}{''.join(parts)}</{node.tag}>"
        return None

    def _open_tag(self, name: str, attributes: Sequence[TemplateAttribute], close: str = ">") -> Optional[str]:
        rendered = [self._attribute(attr) for attr in attributes]
        if any("\n" in attr for attr in rendered):
            return None
        return "<" + name + "".join(f" {attr}" for attr in rendered) + close

    def _element(
        self,
        name: str,
        attributes: Sequence[TemplateAttribute],
        children: Sequence[TemplateNode],
        depth: int,
        *,
        void: bool,
        component: bool,
    ) -> List[str]:
        pad = self.indent * depth
        self_closing = void or (component and not children)
        close = " />" if self_closing else ">"
        open_tag = self._open_tag(name, attributes, close)
        if open_tag is not None:
            opening = [pad + open_tag]
        else:
            opening = [f"{pad}<{name}"]
            for attr in attributes:
                opening.extend(self._with_pad(self._attribute(attr), depth + 1))
            opening.append(pad + close.strip())
        if self_closing:
            return opening
        if not children:
            opening[-1] += f"</{name}>"
            return opening

        if open_tag is not None and _inline_candidate(children):
            parts = [self._inline(child) for child in children]
            if all(part is not None for part in parts):
                inline = "".join(parts).strip()
                if len(pad) + len(open_tag) + len(inline) <= INLINE_LIMIT:
                    return [f"{pad}{open_tag}{inline}</{name}>"]

        lines = opening
        lines.extend(self._nodes(children, depth + 1))
        lines.append(f"{pad}</{name}>")
        return lines

    def _attribute(self, attr: TemplateAttribute) -> str:
        kind = attr.kind
        if kind is AttributeKind.STATIC:
            return f'{attr.name}="{attr.value}"'
        if kind in (AttributeKind.EXPRESSION, AttributeKind.EVENT):
            return f"{attr.name}={{{attr.value}}}"
        if kind is AttributeKind.SHORTHAND:
            return f"{{{attr.value}}}"
        if kind is AttributeKind.BOOLEAN:
            return attr.name
        if kind is AttributeKind.SPREAD:
            return f"{{...{attr.value}}}"
        if kind is AttributeKind.BIND:
            if attr.value == attr.name:
                return f"bind:{attr.name}"
            return f"bind:{attr.name}={{{attr.value}}}"
        if kind is AttributeKind.STYLE:
            return f"style:{attr.name}={attr.value}"
        raise TypeError(f"unknown attribute kind {kind}")

    # ------------------------------------------------------------------
    # Style
    # ------------------------------------------------------------------

    def _style(self, css: str) -> str:
        lines = css.split("\n")
        first = lines[0].strip()
        rest = textwrap.dedent("\n".join(lines[1:])).split("\n") if len(lines) > 1 else []
        body = [first] + rest
        return "\n".join(["<style>"] + self._indented(body) + ["</style>"])


def emit(ir: SvelteComponentIR, indent_width: int = 2) -> str:
    return SvelteEmitter(indent_width).emit(ir)


__all__ = ["SvelteEmitter", "emit", "INLINE_LIMIT"]
