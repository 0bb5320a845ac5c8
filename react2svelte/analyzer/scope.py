"""Identifier binding and reference collection for JavaScript syntax trees."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from react2svelte.ast import SyntaxNode

REFERENCE_TYPES = frozenset({"identifier", "shorthand_property_identifier"})

JS_GLOBALS = frozenset(
    """
    undefined NaN Infinity globalThis window document console Math JSON Date
    Array Object String Number Boolean Symbol BigInt Map Set WeakMap WeakSet
    Promise Proxy Reflect Function RegExp Error TypeError RangeError SyntaxError
    ReferenceError AggregateError parseInt parseFloat isNaN isFinite
    encodeURIComponent decodeURIComponent encodeURI decodeURI setTimeout
    clearTimeout setInterval clearInterval requestAnimationFrame
    cancelAnimationFrame requestIdleCallback cancelIdleCallback queueMicrotask
    structuredClone fetch localStorage sessionStorage navigator location history
    alert confirm prompt Intl URL URLSearchParams FormData Headers Request
    Response AbortController AbortSignal Event CustomEvent KeyboardEvent
    MouseEvent PointerEvent FocusEvent InputEvent SubmitEvent HTMLElement
    HTMLInputElement HTMLFormElement Element Node NodeList ResizeObserver
    IntersectionObserver MutationObserver performance crypto atob btoa Blob File
    FileReader TextEncoder TextDecoder WebSocket Worker EventSource
    XMLHttpRequest Notification DOMParser Image Audio matchMedia
    getComputedStyle scrollTo innerWidth innerHeight screen arguments process
    require module exports Buffer Uint8Array Int32Array Float32Array Float64Array
    ArrayBuffer DataView Atomics SharedArrayBuffer Iterator eval import
    """.split()
)


def pattern_names(pattern: Optional[SyntaxNode]) -> List[str]:
    """Return every identifier bound by a declaration or parameter pattern."""
    if pattern is None:
        return []
    kind = pattern.type
    if kind in ("identifier", "shorthand_property_identifier_pattern"):
        return [pattern.text]
    if kind in ("required_parameter", "optional_parameter"):
        return pattern_names(pattern.field("pattern"))
    if kind in ("assignment_pattern", "object_assignment_pattern"):
        return pattern_names(pattern.field("left"))
    if kind == "pair_pattern":
        return pattern_names(pattern.field("value"))
    if kind in ("rest_pattern", "object_pattern", "array_pattern", "formal_parameters"):
        names: List[str] = []
        for child in pattern.named_children:
            names.extend(pattern_names(child))
        return names
    return []


def function_parameters(function: SyntaxNode) -> List[SyntaxNode]:
    """Return parameter pattern nodes of a function or arrow function."""
    single = function.field("parameter")
    if single is not None:
        return [single]
    params = function.field("parameters")
    if params is None:
        return []
    return list(params.named_children)


def parameter_pattern(param: SyntaxNode) -> SyntaxNode:
    """Unwrap TypeScript parameter wrappers to the underlying pattern."""
    if param.type in ("required_parameter", "optional_parameter"):
        inner = param.field("pattern")
        if inner is not None:
            return inner
    return param


def parameter_type(param: SyntaxNode) -> Optional[str]:
    if param.type in ("required_parameter", "optional_parameter"):
        annotation = param.field("type")
        if annotation is not None:
            return annotation.text.lstrip(":").strip()
    return None


def local_bindings(node: SyntaxNode) -> Set[str]:
    """Collect names declared anywhere inside ``node``.

    Scoping is flattened: a name declared in any nested function or block
    counts as bound for the whole subtree.
    """
    bound: Set[str] = set()
    for child in node.walk():
        kind = child.type
        if child.is_function:
            for param in function_parameters(child):
                bound.update(pattern_names(param))
            if kind == "function_declaration" or kind in ("function_expression", "function"):
                name = child.field("name")
                if name is not None:
                    bound.add(name.text)
        elif kind == "variable_declarator":
            bound.update(pattern_names(child.field("name")))
        elif kind in ("class_declaration", "class"):
            name = child.field("name")
            if name is not None:
                bound.add(name.text)
        elif kind == "catch_clause":
            bound.update(pattern_names(child.field("parameter")))
        elif kind == "for_in_statement":
            bound.update(pattern_names(child.field("left")))
    return bound


def _is_lowercase_tag(node: SyntaxNode) -> bool:
    return node.text[:1].islower()


def references(node: SyntaxNode) -> List[SyntaxNode]:
    """Return identifier nodes used in expression position within ``node``."""
    found: List[SyntaxNode] = []

    def visit(current: SyntaxNode) -> None:
        kind = current.type
        if kind == "jsx_closing_element":
            return
        if kind in ("jsx_opening_element", "jsx_self_closing_element"):
            for child in current.children:
                if child.field_name == "name":
                    if child.type == "identifier" and _is_lowercase_tag(child):
                        continue
                    if child.type == "identifier":
                        found.append(child)
                        continue
                visit(child)
            return
        if kind == "jsx_attribute":
            for child in current.named_children[1:]:
                visit(child)
            return
        if kind in ("variable_declarator",):
            name = current.field("name")
            for child in current.children:
                if child is name:
                    _visit_pattern_defaults(child, visit)
                else:
                    visit(child)
            return
        if kind in REFERENCE_TYPES:
            found.append(current)
            return
        if kind in ("type_annotation", "type_arguments", "type_parameters", "statement_identifier"):
            return
        for child in current.children:
            visit(child)

    visit(node)
    return found


def _visit_pattern_defaults(pattern: SyntaxNode, visit) -> None:
    for child in pattern.walk():
        if child.type in ("assignment_pattern", "object_assignment_pattern"):
            right = child.field("right")
            if right is not None:
                visit(right)


def referenced_names(node: SyntaxNode) -> Set[str]:
    return {ref.text for ref in references(node)}


class ScopeResolver:
    """Resolve identifier references against a set of known names."""

    def __init__(self, known: Iterable[str]):
        self.known: Set[str] = set(known) | set(JS_GLOBALS)

    def add(self, names: Iterable[str]) -> None:
        self.known.update(names)

    def unresolved(self, node: SyntaxNode, extra: Iterable[str] = ()) -> List[SyntaxNode]:
        bound = local_bindings(node) | set(extra)
        missing: List[SyntaxNode] = []
        seen: Set[str] = set()
        for ref in references(node):
            name = ref.text
            if name in self.known or name in bound or name in seen:
                continue
            seen.add(name)
            missing.append(ref)
        return missing


__all__ = [
    "JS_GLOBALS",
    "pattern_names",
    "function_parameters",
    "parameter_pattern",
    "parameter_type",
    "local_bindings",
    "references",
    "referenced_names",
    "ScopeResolver",
]
