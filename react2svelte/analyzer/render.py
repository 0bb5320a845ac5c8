"""
JSX render tree construction.

Walks JSX expressions returned by a component (and JSX nested in
``{...}`` containers) into the normalized :data:`RenderNode` graph:

- ``{cond && <X/>}`` and ``{cond ? <X/> : <Y/>}`` become conditional blocks
- ``items.map(item => <li key={item.id}/>)`` becomes a list block
- capitalized tags become component instances with slot contents
- ``{children}`` / ``{renderItem(x)}`` become slot invocations
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from react2svelte.ast import SyntaxNode
from react2svelte.diagnostics import (
    CONTEXT_PROVIDER_HOISTED,
    DiagnosticCollector,
    Stage,
    UNSUPPORTED_PATTERN,
)

from .model import (
    Attribute,
    ComponentInstance,
    ConditionalBlock,
    ContextDirection,
    ContextUse,
    Element,
    EventBinding,
    Fragment,
    ListBlock,
    RawHtml,
    RenderNode,
    SlotContent,
    SlotInvocation,
    Text,
    TextExpression,
    Unsupported,
)
from .scope import function_parameters, parameter_pattern

EVENT_ATTRIBUTE_RE = re.compile(r"^on[A-Z]")

_EMPTY_LITERALS = frozenset({"null", "undefined", "false", "true"})


@dataclass
class RenderContext:
    """Names the render walk needs to know about, plus what it discovers."""

    prop_names: Set[str] = field(default_factory=set)
    props_identifier: Optional[str] = None
    snippet_names: Set[str] = field(default_factory=set)
    context_keys: Set[str] = field(default_factory=set)
    ref_names: Set[str] = field(default_factory=set)
    # discovered while walking
    ref_targets: Dict[str, str] = field(default_factory=dict)
    providers: List[ContextUse] = field(default_factory=list)
    slots: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    styles: List[str] = field(default_factory=list)


def is_empty_value(node: SyntaxNode) -> bool:
    node = node.unwrap()
    return node.type in _EMPTY_LITERALS or (node.type == "identifier" and node.text == "undefined")


def binary_operator(node: SyntaxNode) -> Optional[str]:
    operator = node.field("operator")
    return operator.type if operator is not None else None


def map_call_parts(node: SyntaxNode) -> Optional[Tuple[SyntaxNode, SyntaxNode]]:
    """Return ``(iterable, callback)`` for ``iterable.map(callback)`` calls."""
    if node.type != "call_expression":
        return None
    function = node.field("function")
    if function is None or function.type != "member_expression":
        return None
    prop = function.field("property")
    if prop is None or prop.text != "map":
        return None
    arguments = node.field("arguments")
    if arguments is None or not arguments.named_children:
        return None
    return function.field("object"), arguments.named_children[0]


def clean_jsx_text(raw: str) -> str:
    """Apply JSX whitespace rules to a text child."""
    lines = re.split(r"\r\n|\n|\r", raw)
    kept = []
    for index, line in enumerate(lines):
        trimmed = line.replace("\t", " ")
        if index != 0:
            trimmed = trimmed.lstrip(" ")
        if index != len(lines) - 1:
            trimmed = trimmed.rstrip(" ")
        if trimmed:
            kept.append(trimmed)
    # Lines that survive trimming are joined by a single space.
    return " ".join(kept)


def _tag_name(node: SyntaxNode) -> Optional[str]:
    if node.type == "jsx_self_closing_element":
        name = node.field("name")
    elif node.type == "jsx_element":
        open_tag = node.field("open_tag")
        name = open_tag.field("name") if open_tag is not None else None
    else:
        return None
    return re.sub(r"\s+", "", name.text) if name is not None else None


def _attribute_nodes(node: SyntaxNode) -> Tuple[SyntaxNode, ...]:
    if node.type == "jsx_self_closing_element":
        holder = node
    elif node.type == "jsx_element":
        holder = node.field("open_tag")
    else:
        return ()
    if holder is None:
        return ()
    return tuple(
        child
        for child in holder.named_children
        if child.type == "jsx_attribute" or (child.type == "jsx_expression" and child.field_name != "name")
    )


def _attribute_name(attr: SyntaxNode) -> str:
    return attr.named_children[0].text


def _attribute_value(attr: SyntaxNode) -> Optional[SyntaxNode]:
    values = attr.named_children[1:]
    return values[0] if values else None


def expression_of(container: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the expression inside a ``{...}`` JSX container, if any."""
    if container.type != "jsx_expression":
        return container
    inner = container.named_children
    return inner[0] if inner else None


def find_key(node: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the ``key`` attribute expression of a JSX element."""
    node = node.unwrap()
    for attr in _attribute_nodes(node):
        if attr.type == "jsx_attribute" and _attribute_name(attr) == "key":
            value = _attribute_value(attr)
            if value is None:
                return None
            return expression_of(value)
    return None


class RenderTreeBuilder:
    """Build render nodes from JSX-bearing expressions."""

    def __init__(self, context: RenderContext, diagnostics: DiagnosticCollector):
        self.context = context
        self.diagnostics = diagnostics
        self._counter = 0
        self._nesting = 0

    def next_id(self) -> str:
        self._counter += 1
        return f"n{self._counter}"

    # ------------------------------------------------------------------
    # Expression-level classification
    # ------------------------------------------------------------------

    def is_renderish(self, node: SyntaxNode) -> bool:
        node = node.unwrap()
        return node.contains_jsx() or self._slot_invocation(node) is not None

    def build_value(self, node: Optional[SyntaxNode]) -> Optional[RenderNode]:
        """Build the render node for an expression in render position."""
        if node is None:
            return None
        node = node.unwrap()
        if is_empty_value(node):
            return None
        if node.is_jsx:
            return self.build_jsx(node)

        if node.type == "binary_expression" and binary_operator(node) == "&&":
            right = node.field("right")
            consequent = self._nested(right)
            if consequent is None:
                return None
            return ConditionalBlock(condition=node.field("left"), consequent=consequent)

        if node.type == "ternary_expression":
            consequence = node.field("consequence")
            alternative = node.field("alternative")
            branches = [b for b in (consequence, alternative) if b is not None]
            if any(self.is_renderish(b) or is_empty_value(b) for b in branches):
                return ConditionalBlock(
                    condition=node.field("condition"),
                    consequent=self._nested(consequence) or Fragment(),
                    alternate=self._nested(alternative),
                )
            return TextExpression(expression=node)

        map_parts = map_call_parts(node)
        if map_parts is not None and map_parts[1].is_function and self._renders_items(map_parts[1]):
            return self.build_list(node, *map_parts)

        slot = self._slot_invocation(node)
        if slot is not None:
            return slot

        if node.contains_jsx():
            return self._unsupported(node, "JSX in this expression position cannot be converted")
        return TextExpression(expression=node)

    def _renders_items(self, callback: SyntaxNode) -> bool:
        """True when a map callback returns JSX or calls a local snippet."""
        if callback.contains_jsx():
            return True
        returned = function_return(callback)
        if returned is None:
            return False
        returned = returned.unwrap()
        if returned.type != "call_expression":
            return False
        callee = returned.field("function")
        return callee is not None and callee.type == "identifier" and callee.text in self.context.snippet_names

    def _nested(self, node: Optional[SyntaxNode]) -> Optional[RenderNode]:
        self._nesting += 1
        try:
            return self.build_value(node)
        finally:
            self._nesting -= 1

    def _slot_invocation(self, node: SyntaxNode) -> Optional[SlotInvocation]:
        callee = node
        args: Tuple[SyntaxNode, ...] = ()
        is_call = node.type == "call_expression"
        if is_call:
            callee = node.field("function")
            arguments = node.field("arguments")
            args = arguments.named_children if arguments is not None else ()
            if callee is None:
                return None
        name = self._slot_name(callee)
        if name is None:
            return None
        if not is_call and name != "children" and name not in self.context.snippet_names:
            return None
        if name in self.context.snippet_names and callee.text == name:
            return SlotInvocation(slot_name=name, callee=name, args=args, optional=False)
        self.context.slots.setdefault(name, tuple(arg.text for arg in args))
        return SlotInvocation(slot_name=name, callee=callee.text, args=args, optional=True)

    def _slot_name(self, callee: SyntaxNode) -> Optional[str]:
        if callee.type == "identifier":
            name = callee.text
            if name in self.context.snippet_names:
                return name
            if name in self.context.prop_names:
                return name
            return None
        if callee.type == "member_expression" and self.context.props_identifier:
            obj = callee.field("object")
            prop = callee.field("property")
            if obj is not None and prop is not None and obj.text == self.context.props_identifier:
                return prop.text
        return None

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def build_list(
        self, node: SyntaxNode, iterable: SyntaxNode, callback: SyntaxNode
    ) -> RenderNode:
        params = function_parameters(callback)
        item = parameter_pattern(params[0]) if params else None
        index = None
        if len(params) > 1:
            index_node = parameter_pattern(params[1])
            if index_node.type != "identifier":
                return self._unsupported(node, "destructured list index parameter")
            index = index_node.text

        body = callback.field("body")
        declarations: List[SyntaxNode] = []
        returned: Optional[SyntaxNode] = body
        if body is not None and body.type == "statement_block":
            returned = None
            statements = body.named_children
            for position, statement in enumerate(statements):
                if statement.type == "lexical_declaration" and not statement.contains_jsx():
                    declarations.append(statement)
                elif statement.type == "return_statement" and position == len(statements) - 1:
                    values = statement.named_children
                    returned = values[0] if values else None
                else:
                    return self._unsupported(
                        node, "list callback bodies may only declare constants and return JSX"
                    )
        if returned is None:
            return self._unsupported(node, "list callback does not return JSX")

        key = find_key(returned)
        self._nesting += 1
        try:
            rendered = self.build_value(returned)
        finally:
            self._nesting -= 1
        return ListBlock(
            node=node,
            iterable_expression=iterable,
            body=rendered if rendered is not None else Fragment(),
            item_binding=item,
            index_binding=index,
            key_expression=key,
            local_declarations=tuple(declarations),
        )

    # ------------------------------------------------------------------
    # JSX
    # ------------------------------------------------------------------

    def build_jsx(self, node: SyntaxNode) -> Optional[RenderNode]:
        name = _tag_name(node)
        children = self._children(node)

        if node.type == "jsx_fragment" or not name or name in ("Fragment", "React.Fragment"):
            return Fragment(children=children)

        provider_key = self._provider_key(name)
        if provider_key is not None:
            return self._provider(node, provider_key, children)

        if name == "style":
            return self._style(node)

        if name[0].islower() and "." not in name:
            return self._element(node, name, children)
        return self._component(node, name, children)

    def _children(self, node: SyntaxNode) -> Tuple[RenderNode, ...]:
        if node.type == "jsx_self_closing_element":
            return ()
        result: List[RenderNode] = []
        for child in node.children:
            if child.field_name in ("open_tag", "close_tag") or not child.is_named:
                continue
            if child.type in ("jsx_opening_element", "jsx_closing_element", "comment"):
                continue
            if child.type == "jsx_text":
                text = clean_jsx_text(child.text)
                if text:
                    result.append(Text(value=text))
            elif child.type == "html_character_reference":
                result.append(Text(value=child.text))
            elif child.type == "jsx_expression":
                inner = expression_of(child)
                if inner is None:
                    continue
                if inner.type == "spread_element":
                    result.append(self._unsupported(child, "spread children"))
                    continue
                rendered = self._nested(inner)
                if rendered is not None:
                    result.append(rendered)
            elif child.is_jsx:
                rendered = self.build_jsx(child)
                if rendered is not None:
                    result.append(rendered)
        return tuple(result)

    def _provider_key(self, name: str) -> Optional[str]:
        if name.endswith(".Provider"):
            return name[: -len(".Provider")]
        if name in self.context.context_keys:
            return name
        return None

    def _provider(
        self, node: SyntaxNode, key: str, children: Tuple[RenderNode, ...]
    ) -> RenderNode:
        value = None
        for attr in _attribute_nodes(node):
            if attr.type == "jsx_attribute" and _attribute_name(attr) == "value":
                raw = _attribute_value(attr)
                value = expression_of(raw) if raw is not None else None
        nested = self._nesting > 0
        if nested:
            self.diagnostics.warning(
                Stage.ANALYZE,
                CONTEXT_PROVIDER_HOISTED,
                f"{key} provider is rendered conditionally; setContext runs once"
                " during component initialisation",
                line=node.line,
                column=node.column,
                construct=f"{key}.Provider",
            )
        self.context.providers.append(
            ContextUse(
                key=key,
                direction=ContextDirection.PROVIDE,
                node=node,
                value_expression=value,
                nested=nested,
            )
        )
        return Fragment(children=children)

    def _style(self, node: SyntaxNode) -> Optional[RenderNode]:
        is_global = any(
            attr.type == "jsx_attribute" and _attribute_name(attr) == "global"
            for attr in _attribute_nodes(node)
        )
        css_parts: List[str] = []
        for child in node.children:
            if child.type == "jsx_text":
                css_parts.append(child.text)
            elif child.type == "jsx_expression":
                inner = expression_of(child)
                if inner is None:
                    continue
                inner = inner.unwrap()
                if inner.type == "template_string" and not inner.child_of_type("template_substitution"):
                    css_parts.append(inner.text[1:-1])
                elif inner.type == "string":
                    css_parts.append(inner.text[1:-1])
                else:
                    return self._unsupported(node, "dynamic <style> content")
        css = "\n".join(part.strip("\n") for part in css_parts).strip()
        if css:
            if is_global:
                css = ":global {\n" + css + "\n}"
            self.context.styles.append(css)
        return None

    def _split_attributes(self, node: SyntaxNode, *, dom: bool):
        attributes: List[Attribute] = []
        events: List[EventBinding] = []
        ref_name: Optional[str] = None
        ref_expression: Optional[SyntaxNode] = None
        html: Optional[SyntaxNode] = None
        for attr in _attribute_nodes(node):
            if attr.type == "jsx_expression":
                inner = expression_of(attr)
                if inner is not None and inner.type == "spread_element":
                    argument = inner.named_children[0] if inner.named_children else inner
                    attributes.append(Attribute(name="...", node=attr, value=argument, is_spread=True))
                continue
            name = _attribute_name(attr)
            raw = _attribute_value(attr)
            value = expression_of(raw) if raw is not None else None
            if name == "key":
                continue
            if name == "ref" and value is not None:
                target = value.unwrap()
                if target.type == "identifier" and target.text in self.context.ref_names:
                    ref_name = target.text
                else:
                    ref_expression = value
                continue
            if dom and name == "dangerouslySetInnerHTML" and value is not None:
                html = _inner_html_value(value)
                if html is None:
                    self.diagnostics.error(
                        Stage.ANALYZE,
                        UNSUPPORTED_PATTERN,
                        "dangerouslySetInnerHTML must be an object literal with __html",
                        line=attr.line,
                        column=attr.column,
                        construct="dangerouslySetInnerHTML",
                    )
                continue
            if dom and EVENT_ATTRIBUTE_RE.match(name) and value is not None:
                events.append(EventBinding(name=name, handler=value, node=attr))
                continue
            attributes.append(Attribute(name=name, node=attr, value=raw))
        return attributes, events, ref_name, ref_expression, html

    def _element(
        self, node: SyntaxNode, tag: str, children: Tuple[RenderNode, ...]
    ) -> RenderNode:
        node_id = self.next_id()
        attributes, events, ref_name, ref_expression, html = self._split_attributes(node, dom=True)
        if ref_name is not None:
            self.context.ref_targets.setdefault(ref_name, node_id)
        if html is not None:
            children = (RawHtml(expression=html),)
        return Element(
            tag=tag,
            node=node,
            node_id=node_id,
            attributes=tuple(attributes),
            event_bindings=tuple(events),
            children=children,
            ref=ref_name,
            ref_expression=ref_expression,
            html=html,
        )

    def _component(
        self, node: SyntaxNode, name: str, children: Tuple[RenderNode, ...]
    ) -> RenderNode:
        node_id = self.next_id()
        props: List[Attribute] = []
        slots: List[SlotContent] = []
        for attr in _attribute_nodes(node):
            if attr.type == "jsx_expression":
                inner = expression_of(attr)
                if inner is not None and inner.type == "spread_element":
                    argument = inner.named_children[0] if inner.named_children else inner
                    props.append(Attribute(name="...", node=attr, value=argument, is_spread=True))
                continue
            attr_name = _attribute_name(attr)
            raw = _attribute_value(attr)
            if attr_name == "key":
                continue
            value = expression_of(raw) if raw is not None else None
            slot = self._slot_from_value(attr_name, value)
            if slot is not None:
                slots.append(slot)
                continue
            props.append(Attribute(name=attr_name, node=attr, value=raw))

        render_function = self._children_function(node)
        if render_function is not None:
            slots.append(render_function)
        elif children:
            body = children[0] if len(children) == 1 else Fragment(children=children)
            slots.append(SlotContent(name="children", body=body))
        return ComponentInstance(
            name=name,
            node=node,
            node_id=node_id,
            props_expressions=tuple(props),
            slot_contents=tuple(slots),
        )

    def _slot_from_value(self, name: str, value: Optional[SyntaxNode]) -> Optional[SlotContent]:
        if value is None:
            return None
        value = value.unwrap()
        if value.is_jsx:
            body = self._nested(value)
            return SlotContent(name=name, body=body or Fragment())
        if value.is_function and value.contains_jsx():
            body_node = function_return(value)
            if body_node is None:
                return None
            params = value.field("parameters") or value.field("parameter")
            body = self._nested(body_node)
            return SlotContent(name=name, body=body or Fragment(), params=params)
        return None

    def _children_function(self, node: SyntaxNode) -> Optional[SlotContent]:
        if node.type != "jsx_element":
            return None
        expressions = [
            child
            for child in node.named_children
            if child.type not in ("jsx_opening_element", "jsx_closing_element")
            and not (child.type == "jsx_text" and not child.text.strip())
        ]
        if len(expressions) != 1 or expressions[0].type != "jsx_expression":
            return None
        inner = expression_of(expressions[0])
        if inner is None:
            return None
        return self._slot_from_value("children", inner)

    def _unsupported(
        self, node: SyntaxNode, reason: str, construct: Optional[str] = None
    ) -> Unsupported:
        return Unsupported(node=node, reason=reason, construct=construct)


def _inner_html_value(value: SyntaxNode) -> Optional[SyntaxNode]:
    value = value.unwrap()
    if value.type != "object":
        return None
    for pair in value.named_children:
        if pair.type == "pair":
            key = pair.field("key")
            if key is not None and key.text.strip("'\"") == "__html":
                return pair.field("value")
    return None


def function_return(function: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the JSX expression a function returns, if it only returns."""
    body = function.field("body")
    if body is None:
        return None
    if body.type != "statement_block":
        return body
    statements = body.named_children
    if len(statements) == 1 and statements[0].type == "return_statement":
        values = statements[0].named_children
        return values[0] if values else None
    return None


__all__ = [
    "RenderContext",
    "RenderTreeBuilder",
    "clean_jsx_text",
    "expression_of",
    "find_key",
    "function_return",
    "is_empty_value",
    "map_call_parts",
    "EVENT_ATTRIBUTE_RE",
]

