"""Source-preserving expression rewriting."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Set

from react2svelte.analyzer.hooks import HookKind, call_arguments, match_hook
from react2svelte.analyzer.model import ComponentModel, StateBinding
from react2svelte.analyzer.scope import function_parameters, parameter_pattern
from react2svelte.ast import SyntaxNode
from react2svelte.diagnostics import DiagnosticCollector, SETTER_AS_VALUE, Stage
from react2svelte.errors import UnsupportedPatternError

Replacer = Callable[[SyntaxNode, Optional[SyntaxNode]], Optional[str]]

_STATEMENT_PARENTS = frozenset({"expression_statement"})


def splice(node: SyntaxNode, replace: Replacer, parent: Optional[SyntaxNode] = None) -> str:
    """Render ``node`` from its source, substituting nodes ``replace`` claims.

    Text between children is copied byte for byte, so comments and spacing
    survive untouched around rewritten sub-expressions.
    """
    replaced = replace(node, parent)
    if replaced is not None:
        return replaced
    if not node.children:
        return node.text
    source = node.source
    parts: List[str] = []
    cursor = node.start
    for child in node.children:
        parts.append(source.slice(cursor, child.start))
        parts.append(splice(child, replace, node))
        cursor = child.end
    parts.append(source.slice(cursor, node.end))
    return "".join(parts)


def base_indent(node: SyntaxNode) -> int:
    """Width of the leading whitespace on the line where ``node`` starts."""
    data = node.source.data
    line_start = data.rfind(b"\n", 0, node.start) + 1
    width = 0
    for byte in data[line_start:node.start]:
        if byte in (0x20, 0x09):
            width += 1
        else:
            break
    return width


def reindent(text: str, node: SyntaxNode) -> List[str]:
    """Split ``text`` into lines, dedenting continuation lines.

    Lines inside multi-line template literals keep their whitespace.
    """
    lines = text.split("\n")
    if len(lines) == 1:
        return lines
    indent = base_indent(node)
    protected: Set[int] = set()
    for literal in node.walk():
        if literal.type == "template_string" and literal.location.is_multiline:
            protected.update(line - node.line for line in literal.location.spanned_lines())
    result = [lines[0].rstrip()]
    for offset, line in enumerate(lines[1:], start=1):
        if offset in protected:
            result.append(line)
            continue
        strip = 0
        while strip < indent and strip < len(line) and line[strip] in " \t":
            strip += 1
        result.append(line[strip:].rstrip())
    return result


class ExpressionRewriter:
    """Rewrite React-isms inside script and template expressions.

    - ``setX(v)`` call sites become assignments to the state cell
    - ``setX`` passed as a value becomes an assigning arrow function
    - ``ref.current`` becomes ``ref``
    - any remaining hook call raises :class:`UnsupportedPatternError`
    """

    def __init__(self, model: ComponentModel, diagnostics: DiagnosticCollector):
        self.model = model
        self.diagnostics = diagnostics
        self._call_sites: Dict[tuple, StateBinding] = {}
        self._references: Dict[tuple, StateBinding] = {}
        for binding in model.state_bindings.values():
            for span in binding.setter_call_sites:
                self._call_sites[span] = binding
            for span in binding.setter_references:
                self._references[span] = binding
        self._refs = frozenset(model.ref_bindings)
        self._reported: Set[tuple] = set()

    def rewrite(
        self,
        node: SyntaxNode,
        substitutions: Optional[Dict[str, str]] = None,
        *,
        statement: bool = False,
    ) -> str:
        subs = substitutions or {}

        def replace(current: SyntaxNode, parent: Optional[SyntaxNode]) -> Optional[str]:
            if parent is None and statement:
                parent = _STATEMENT_SENTINEL
            return self._replace(current, parent, subs)

        return splice(node, replace)

    def lines(self, node: SyntaxNode, *, statement: bool = False) -> List[str]:
        return reindent(self.rewrite(node, statement=statement), node)

    # ------------------------------------------------------------------

    def _replace(
        self, node: SyntaxNode, parent: Optional[SyntaxNode], subs: Dict[str, str]
    ) -> Optional[str]:
        kind = node.type
        if kind == "call_expression":
            binding = self._call_sites.get(node.span)
            if binding is not None:
                return self._assignment(node, parent, binding, subs)
            hook = match_hook(node)
            if hook is not None and hook.kind is not HookKind.CUSTOM:
                raise UnsupportedPatternError(
                    f"{hook.name} cannot be converted in this position",
                    node=node,
                    construct=hook.name,
                )
            return None
        if kind in ("identifier", "shorthand_property_identifier"):
            binding = self._references.get(node.span)
            if binding is not None:
                return self._setter_value(node, binding)
            if node.text in subs:
                if kind == "shorthand_property_identifier":
                    return f"{node.text}: {subs[node.text]}"
                return subs[node.text]
            return None
        if kind == "member_expression":
            obj = node.field("object")
            prop = node.field("property")
            if (
                obj is not None
                and prop is not None
                and obj.type == "identifier"
                and obj.text in self._refs
                and prop.text == "current"
            ):
                return obj.text
            return None
        if node.is_jsx:
            raise UnsupportedPatternError(
                "JSX outside the returned markup cannot be converted",
                node=node,
                construct="JSX",
            )
        return None

    def _assignment(
        self,
        node: SyntaxNode,
        parent: Optional[SyntaxNode],
        binding: StateBinding,
        subs: Dict[str, str],
    ) -> str:
        args = call_arguments(node)
        if not args:
            value = "undefined"
        else:
            argument = args[0]
            inner = argument.unwrap()
            if inner.is_function:
                value = self._updater(inner, binding, subs)
            else:
                value = self.rewrite(argument, subs)
        text = f"{binding.name} = {value}"
        if parent is None or parent.type not in _STATEMENT_PARENTS:
            text = f"({text})"
        return text

    def _updater(self, function: SyntaxNode, binding: StateBinding, subs: Dict[str, str]) -> str:
        params = function_parameters(function)
        body = function.field("body")
        simple = (
            len(params) <= 1
            and body is not None
            and body.type != "statement_block"
            and not function.has_token("async")
        )
        if simple:
            if not params:
                return self.rewrite(body, subs)
            pattern = parameter_pattern(params[0])
            if pattern.type == "identifier":
                merged = dict(subs)
                merged[pattern.text] = binding.name
                return self.rewrite(body, merged)
        return f"({self.rewrite(function, subs)})({binding.name})"

    def _setter_value(self, node: SyntaxNode, binding: StateBinding) -> str:
        if node.span not in self._reported:
            self._reported.add(node.span)
            self.diagnostics.info(
                Stage.LOWER,
                SETTER_AS_VALUE,
                f"{binding.setter} is passed as a value; it became an arrow function"
                f" assigning {binding.name}",
                line=node.line,
                column=node.column,
                construct=binding.setter,
            )
        param = "next" if binding.name == "value" else "value"
        arrow = f"({param}) => ({binding.name} = {param})"
        if node.type == "shorthand_property_identifier":
            return f"{node.text}: {arrow}"
        return arrow


class _StatementParent:
    type = "expression_statement"


_STATEMENT_SENTINEL = _StatementParent()


__all__ = ["ExpressionRewriter", "splice", "reindent", "base_indent"]
