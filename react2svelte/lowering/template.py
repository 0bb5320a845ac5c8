"""Render tree to Svelte template lowering."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from react2svelte.analyzer.hooks import call_arguments
from react2svelte.analyzer.model import (
    Attribute,
    ComponentInstance,
    ComponentModel,
    ConditionalBlock,
    Element,
    EventBinding,
    Fragment,
    ListBlock,
    RawHtml,
    RenderNode,
    SlotContent,
    SlotInvocation,
    SnippetDefinition,
    Text,
    TextExpression,
    Unsupported,
)
from react2svelte.analyzer.render import expression_of
from react2svelte.analyzer.scope import function_parameters, local_bindings, parameter_pattern, pattern_names
from react2svelte.ast import SyntaxNode
from react2svelte.diagnostics import DiagnosticCollector, Severity, Stage
from react2svelte.errors import AnalysisAmbiguity, MissingKeyError, UnsupportedPatternError
from react2svelte.ir import (
    AttributeKind,
    ComponentNode,
    ConstTag,
    EachBlock,
    ElementNode,
    ExpressionTag,
    HtmlTag,
    IfBlock,
    IfBranch,
    RenderTag,
    SnippetBlock,
    TemplateAttribute,
    TemplateNode,
    TextNode,
)

from .attributes import (
    VOID_ELEMENTS,
    css_number,
    css_property,
    dom_attribute_name,
    escape_attribute,
    escape_text,
    event_name,
)
from .expressions import ExpressionRewriter
from .placeholders import PlaceholderFactory

_STRING_TYPES = ("string",)
_BINDABLE_TAGS = frozenset({"input", "textarea", "select"})


def strip_parens(node: SyntaxNode) -> SyntaxNode:
    while node.type == "parenthesized_expression" and node.named_children:
        node = node.named_children[0]
    return node


def params_text(params: Optional[SyntaxNode]) -> str:
    if params is None:
        return ""
    text = params.text.strip()
    if params.type == "formal_parameters" and text.startswith("(") and text.endswith(")"):
        text = text[1:-1].strip()
    return text


def string_literal_value(node: SyntaxNode) -> Optional[str]:
    """Contents of a plain string literal without escapes, else None."""
    node = strip_parens(node)
    if node.type == "string" or (
        node.type == "template_string" and node.child_of_type("template_substitution") is None
    ):
        inner = node.text[1:-1]
        if "\\" in inner:
            return None
        return inner
    return None


class TemplateLowerer:
    """Lower a :class:`RenderNode` tree into template IR nodes."""

    def __init__(
        self,
        model: ComponentModel,
        rewriter: ExpressionRewriter,
        placeholders: PlaceholderFactory,
        diagnostics: DiagnosticCollector,
    ):
        self.model = model
        self.rewriter = rewriter
        self.placeholders = placeholders
        self.diagnostics = diagnostics
        self.component_tags: Set[str] = set()
        self._reserved: Set[str] = set(model.reactive_names())
        for local in model.locals:
            self._reserved.update(local.names)

    # ------------------------------------------------------------------

    def lower_snippet(self, snippet: SnippetDefinition) -> SnippetBlock:
        return SnippetBlock(
            name=snippet.name,
            params=params_text(snippet.params),
            children=self.lower(snippet.body),
        )

    def lower(self, node: Optional[RenderNode]) -> Tuple[TemplateNode, ...]:
        if node is None:
            return ()
        return tuple(self._lower(node))

    def _lower(self, node: RenderNode) -> List[TemplateNode]:
        if isinstance(node, Fragment):
            result: List[TemplateNode] = []
            for child in node.children:
                result.extend(self._lower(child))
            return result
        if isinstance(node, Text):
            return [TextNode(text=node.value)]
        if isinstance(node, Unsupported):
            return [self.placeholders.template(node.node, node.reason, node.construct)]
        anchor = _anchor(node)
        try:
            return self._dispatch(node)
        except UnsupportedPatternError as exc:
            if anchor is None:
                raise
            return [self.placeholders.template(anchor, exc.message, exc.construct)]

    def _dispatch(self, node: RenderNode) -> List[TemplateNode]:
        if isinstance(node, TextExpression):
            literal = string_literal_value(node.expression)
            if literal is not None:
                return [TextNode(text=escape_text(literal))]
            return [ExpressionTag(expression=self._expr(node.expression))]
        if isinstance(node, RawHtml):
            return [HtmlTag(expression=self._expr(node.expression))]
        if isinstance(node, Element):
            return self._element(node)
        if isinstance(node, ComponentInstance):
            return self._component(node)
        if isinstance(node, ConditionalBlock):
            return [self._conditional(node)]
        if isinstance(node, ListBlock):
            return [self._each(node)]
        if isinstance(node, SlotInvocation):
            return [self._render_tag(node)]
        raise TypeError(f"unknown render node {type(node).__name__}")

    def _expr(self, node: SyntaxNode) -> str:
        return self.rewriter.rewrite(strip_parens(node))

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _conditional(self, node: ConditionalBlock) -> IfBlock:
        branches: List[IfBranch] = []
        else_children: Optional[Tuple[TemplateNode, ...]] = None
        current: RenderNode = node
        while isinstance(current, ConditionalBlock):
            branches.append(
                IfBranch(condition=self._expr(current.condition), children=self.lower(current.consequent))
            )
            alternate = current.alternate
            if isinstance(alternate, ConditionalBlock):
                current = alternate
                continue
            if alternate is not None:
                else_children = self.lower(alternate)
            break
        return IfBlock(branches=tuple(branches), else_children=else_children)

    def _each(self, node: ListBlock) -> EachBlock:
        item = node.item_binding.text if node.item_binding is not None else "_"
        index = node.index_binding
        if node.key_expression is not None:
            key = self._expr(node.key_expression)
        else:
            if index is None:
                index = self._index_name(node)
            key = index
            self.diagnostics.from_exception(
                MissingKeyError(
                    f"list items have no key; the each block is keyed by index '{index}'",
                    node=node.node,
                    construct=".map()",
                ),
                Stage.LOWER,
                Severity.WARNING,
            )
        children: List[TemplateNode] = []
        for declaration in node.local_declarations:
            for declarator in declaration.named_children:
                if declarator.type == "variable_declarator":
                    children.append(ConstTag(declaration=self.rewriter.rewrite(declarator)))
        children.extend(self._lower(node.body))
        return EachBlock(
            expression=self._expr(node.iterable_expression),
            item=item,
            index=index,
            key=key,
            children=tuple(children),
        )

    def _index_name(self, node: ListBlock) -> str:
        taken = set(self._reserved)
        taken.update(pattern_names(node.item_binding))
        for declaration in node.local_declarations:
            taken.update(local_bindings(declaration))
        for candidate in ("i", "index", "idx"):
            if candidate not in taken:
                return candidate
        suffix = 1
        while f"i{suffix}" in taken:
            suffix += 1
        return f"i{suffix}"

    def _render_tag(self, node: SlotInvocation) -> RenderTag:
        args = ", ".join(self._expr(arg) for arg in node.args)
        if node.optional:
            return RenderTag(expression=f"{node.callee}?.({args})")
        return RenderTag(expression=f"{node.callee}({args})")

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def _element(self, node: Element) -> List[TemplateNode]:
        before: List[TemplateNode] = []
        input_type = _static_attribute(node.attributes, "type")
        bindings, consumed = self._controlled(node, input_type)
        attributes: List[TemplateAttribute] = []

        items: List[Union[Attribute, EventBinding]] = list(node.attributes) + list(node.event_bindings)
        items.sort(key=lambda item: item.node.start)
        for item in items:
            try:
                if isinstance(item, EventBinding):
                    if item.node in consumed:
                        continue
                    attributes.append(self._event(item, node.tag, input_type))
                elif item.name in bindings:
                    attributes.append(
                        TemplateAttribute(kind=AttributeKind.BIND, name=item.name, value=bindings[item.name])
                    )
                elif item.name == "style" and not item.is_spread:
                    attributes.extend(self._style(item))
                else:
                    attributes.append(self._attribute(item, dom=True))
            except UnsupportedPatternError as exc:
                before.append(self.placeholders.template(item.node, exc.message, exc.construct))

        if node.ref is not None:
            attributes.append(TemplateAttribute(kind=AttributeKind.BIND, name="this", value=node.ref))
        if node.ref_expression is not None:
            before.append(
                self.placeholders.template(
                    node.ref_expression,
                    "callback refs have no direct Svelte equivalent; use bind:this or an attachment",
                    "ref",
                )
            )

        children: Tuple[TemplateNode, ...] = ()
        for child in node.children:
            children += tuple(self._lower(child))
        element = ElementNode(
            tag=node.tag,
            attributes=tuple(attributes),
            children=children,
            void=node.tag in VOID_ELEMENTS,
        )
        return before + [element]

    def _event(self, item: EventBinding, tag: str, input_type: Optional[str]) -> TemplateAttribute:
        name = event_name(item.name, tag, input_type)
        value = self._expr(item.handler)
        if value == name:
            return TemplateAttribute(kind=AttributeKind.SHORTHAND, name=name, value=value)
        return TemplateAttribute(kind=AttributeKind.EVENT, name=name, value=value)

    def _attribute(self, item: Attribute, *, dom: bool) -> TemplateAttribute:
        if item.is_spread:
            return TemplateAttribute(kind=AttributeKind.SPREAD, value=self._expr(item.value))
        name = dom_attribute_name(item.name) if dom else item.name
        raw = item.value
        if raw is None:
            return TemplateAttribute(kind=AttributeKind.BOOLEAN, name=name)
        if raw.type in _STRING_TYPES:
            return TemplateAttribute(kind=AttributeKind.STATIC, name=name, value=escape_attribute(raw.text[1:-1]))
        expression = expression_of(raw)
        if expression is None:
            return TemplateAttribute(kind=AttributeKind.BOOLEAN, name=name)
        value = self._expr(expression)
        if value == name:
            return TemplateAttribute(kind=AttributeKind.SHORTHAND, name=name, value=value)
        return TemplateAttribute(kind=AttributeKind.EXPRESSION, name=name, value=value)

    def _style(self, item: Attribute) -> List[TemplateAttribute]:
        raw = item.value
        expression = expression_of(raw) if raw is not None else None
        if raw is None or raw.type in _STRING_TYPES or expression is None:
            return [self._attribute(item, dom=True)]
        target = strip_parens(expression)
        if target.type != "object" or any(p.type != "pair" for p in target.named_children):
            self.diagnostics.from_exception(
                AnalysisAmbiguity(
                    "style is not an object literal; Svelte expects a CSS string here",
                    node=item.node,
                    construct="style",
                ),
                Stage.LOWER,
                Severity.INFO,
            )
            return [self._attribute(item, dom=True)]
        directives: List[TemplateAttribute] = []
        for pair in target.named_children:
            key = pair.field("key")
            value = pair.field("value")
            if key is None or value is None or key.type == "computed_property_name":
                raise UnsupportedPatternError(
                    "computed style keys cannot be converted",
                    node=pair,
                    construct="style",
                )
            prop = key.text.strip("'\"")
            css_name = css_property(prop)
            literal = string_literal_value(value)
            if literal is not None:
                directives.append(
                    TemplateAttribute(kind=AttributeKind.STYLE, name=css_name, value=f'"{escape_attribute(literal)}"')
                )
            elif value.type == "number" or (value.type == "unary_expression" and value.text.lstrip("-").replace(".", "", 1).isdigit()):
                directives.append(
                    TemplateAttribute(
                        kind=AttributeKind.STYLE, name=css_name, value=f'"{css_number(prop, value.text)}"'
                    )
                )
            else:
                directives.append(
                    TemplateAttribute(kind=AttributeKind.STYLE, name=css_name, value="{" + self._expr(value) + "}")
                )
        return directives

    def _controlled(
        self, node: Element, input_type: Optional[str]
    ) -> Tuple[Dict[str, str], Set[SyntaxNode]]:
        """Detect ``value={s}`` + ``onChange={e => setS(e.target.value)}`` pairs."""
        bindings: Dict[str, str] = {}
        consumed: Set[SyntaxNode] = set()
        if node.tag not in _BINDABLE_TAGS:
            return bindings, consumed
        for prop in ("value", "checked"):
            if prop == "checked" and input_type not in ("checkbox", "radio"):
                continue
            attribute = next((a for a in node.attributes if a.name == prop and not a.is_spread), None)
            if attribute is None or attribute.value is None:
                continue
            expression = expression_of(attribute.value)
            if expression is None:
                continue
            state = self.model.state_bindings.get(strip_parens(expression).text)
            if state is None or state.setter is None:
                continue
            for event in node.event_bindings:
                if event.name not in ("onChange", "onInput"):
                    continue
                if _updates_from_target(event.handler, state.setter, prop):
                    bindings[prop] = state.name
                    consumed.add(event.node)
                    break
        return bindings, consumed

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _component(self, node: ComponentInstance) -> List[TemplateNode]:
        self.component_tags.add(node.name.split(".")[0])
        before: List[TemplateNode] = []
        attributes: List[TemplateAttribute] = []
        for item in node.props_expressions:
            try:
                if item.name == "ref" and item.value is not None:
                    target = expression_of(item.value)
                    if target is not None and strip_parens(target).text in self.model.ref_bindings:
                        attributes.append(
                            TemplateAttribute(kind=AttributeKind.BIND, name="ref", value=strip_parens(target).text)
                        )
                        continue
                attributes.append(self._attribute(item, dom=False))
            except UnsupportedPatternError as exc:
                before.append(self.placeholders.template(item.node, exc.message, exc.construct))

        children: List[TemplateNode] = []
        for slot in node.slot_contents:
            children.extend(self._slot(slot))
        return before + [ComponentNode(name=node.name, attributes=tuple(attributes), children=tuple(children))]

    def _slot(self, slot: SlotContent) -> Sequence[TemplateNode]:
        body = self.lower(slot.body)
        if slot.name == "children" and slot.params is None:
            return body
        return [SnippetBlock(name=slot.name, params=params_text(slot.params), children=body)]


def _anchor(node: RenderNode) -> Optional[SyntaxNode]:
    for attribute in ("node", "expression", "condition"):
        value = getattr(node, attribute, None)
        if isinstance(value, SyntaxNode):
            return value
    if isinstance(node, SlotInvocation) and node.args:
        return node.args[0]
    return None


def _static_attribute(attributes: Sequence[Attribute], name: str) -> Optional[str]:
    for attribute in attributes:
        if attribute.name == name and attribute.value is not None and attribute.value.type == "string":
            return attribute.value.text[1:-1]
    return None


def _updates_from_target(handler: SyntaxNode, setter: str, prop: str) -> bool:
    """True for ``e => setS(e.target.<prop>)`` style handlers."""
    function = strip_parens(handler)
    if not function.is_function:
        return False
    params = function_parameters(function)
    if len(params) != 1:
        return False
    event = parameter_pattern(params[0])
    if event.type != "identifier":
        return False
    body = function.field("body")
    if body is None:
        return False
    if body.type == "statement_block":
        statements = body.named_children
        if len(statements) != 1 or statements[0].type != "expression_statement":
            return False
        body = statements[0].named_children[0] if statements[0].named_children else None
        if body is None:
            return False
    call = strip_parens(body)
    if call.type != "call_expression":
        return False
    callee = call.field("function")
    if callee is None or callee.text != setter:
        return False
    args = call_arguments(call)
    if len(args) != 1:
        return False
    argument = "".join(args[0].text.split())
    return argument in (f"{event.text}.target.{prop}", f"{event.text}.currentTarget.{prop}")


__all__ = ["TemplateLowerer", "params_text", "strip_parens", "string_literal_value"]
