"""Function component discovery and props extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from react2svelte.ast import SyntaxNode, SyntaxTree

from .hooks import call_arguments, callee_name
from .model import PropBinding, PropsPattern
from .render import EVENT_ATTRIBUTE_RE
from .scope import function_parameters, parameter_pattern, parameter_type, pattern_names

COMPONENT_NAME_RE = re.compile(r"^[A-Z][A-Za-z0-9_]*$")

MEMO_WRAPPERS = frozenset({"memo"})
FORWARD_REF_WRAPPERS = frozenset({"forwardRef"})
_FC_TYPE_RE = re.compile(r"^(?:React\s*\.\s*)?(?:FC|FunctionComponent|VFC)\s*<(?P<props>.+)>$", re.S)


@dataclass(frozen=True)
class ComponentCandidate:
    """A top-level function that looks like a React component."""

    name: str
    function: SyntaxNode
    statement: SyntaxNode
    wrappers: Tuple[str, ...] = ()
    is_default_export: bool = False
    type_annotation: Optional[str] = None

    @property
    def is_memo(self) -> bool:
        return any(w in MEMO_WRAPPERS for w in self.wrappers)

    @property
    def is_forward_ref(self) -> bool:
        return any(w in FORWARD_REF_WRAPPERS for w in self.wrappers)


@dataclass(frozen=True)
class PropsInfo:
    pattern: PropsPattern
    bindings: Tuple[PropBinding, ...] = ()
    identifier: Optional[str] = None
    type_annotation: Optional[str] = None


def unwrap_component(node: SyntaxNode) -> Tuple[Optional[SyntaxNode], Tuple[str, ...]]:
    """Strip ``memo``/``forwardRef`` wrappers down to the function node."""
    wrappers: List[str] = []
    current: Optional[SyntaxNode] = node.unwrap()
    while current is not None and current.type == "call_expression":
        name = callee_name(current)
        if name not in MEMO_WRAPPERS and name not in FORWARD_REF_WRAPPERS:
            return None, tuple(wrappers)
        wrappers.append(name)
        args = call_arguments(current)
        current = args[0].unwrap() if args else None
    return current, tuple(wrappers)


def _returns_markup(function: SyntaxNode) -> bool:
    body = function.field("body")
    if body is None:
        return False
    if body.contains_jsx():
        return True
    return False


def _candidate_from_function(
    name: Optional[str],
    function: Optional[SyntaxNode],
    statement: SyntaxNode,
    wrappers: Tuple[str, ...],
    *,
    default: bool,
    type_annotation: Optional[str] = None,
) -> Optional[ComponentCandidate]:
    if function is None or not function.is_function:
        return None
    if name is None:
        own_name = function.field("name")
        name = own_name.text if own_name is not None else None
    if name is None and default:
        name = "Component"
    if name is None or not COMPONENT_NAME_RE.match(name):
        return None
    if not _returns_markup(function):
        return None
    return ComponentCandidate(
        name=name,
        function=function,
        statement=statement,
        wrappers=wrappers,
        is_default_export=default,
        type_annotation=type_annotation,
    )


def _declarator_candidates(
    declaration: SyntaxNode, statement: SyntaxNode, *, default: bool
) -> List[ComponentCandidate]:
    found = []
    for declarator in declaration.named_children:
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.field("name")
        value = declarator.field("value")
        if name_node is None or value is None or name_node.type != "identifier":
            continue
        function, wrappers = unwrap_component(value)
        annotation = declarator.field("type")
        type_text = annotation.text.lstrip(":").strip() if annotation is not None else None
        candidate = _candidate_from_function(
            name_node.text,
            function,
            statement,
            wrappers,
            default=default,
            type_annotation=type_text,
        )
        if candidate is not None:
            found.append(candidate)
    return found


def find_components(tree: SyntaxTree) -> List[ComponentCandidate]:
    """Return component candidates in source order; a default export is flagged."""
    candidates: List[ComponentCandidate] = []
    default_name: Optional[str] = None
    default_wrappers: Tuple[str, ...] = ()

    for statement in tree.statements:
        if statement.type == "function_declaration":
            candidate = _candidate_from_function(None, statement, statement, (), default=False)
            if candidate is not None:
                candidates.append(candidate)
        elif statement.type in ("lexical_declaration", "variable_declaration"):
            candidates.extend(_declarator_candidates(statement, statement, default=False))
        elif statement.type == "export_statement":
            is_default = statement.has_token("default")
            declaration = statement.field("declaration")
            value = statement.field("value")
            if declaration is not None:
                if declaration.type == "function_declaration":
                    candidate = _candidate_from_function(
                        None, declaration, statement, (), default=is_default
                    )
                    if candidate is not None:
                        candidates.append(candidate)
                elif declaration.type in ("lexical_declaration", "variable_declaration"):
                    candidates.extend(
                        _declarator_candidates(declaration, statement, default=False)
                    )
            elif value is not None and is_default:
                function, wrappers = unwrap_component(value)
                if function is not None and function.is_function:
                    candidate = _candidate_from_function(
                        None, function, statement, wrappers, default=True
                    )
                    if candidate is not None:
                        candidates.append(candidate)
                elif function is not None and function.type == "identifier":
                    default_name = function.text
                    default_wrappers = wrappers

    if default_name is not None:
        for index, candidate in enumerate(candidates):
            if candidate.name == default_name:
                candidates[index] = ComponentCandidate(
                    name=candidate.name,
                    function=candidate.function,
                    statement=candidate.statement,
                    wrappers=candidate.wrappers + default_wrappers,
                    is_default_export=True,
                    type_annotation=candidate.type_annotation,
                )
                break
    return candidates


def consumed_statements(tree: SyntaxTree, chosen: ComponentCandidate) -> Tuple[SyntaxNode, ...]:
    """Top-level statements that belong to the chosen component."""
    consumed = [chosen.statement]
    for statement in tree.statements:
        if statement.type != "export_statement" or not statement.has_token("default"):
            continue
        value = statement.field("value")
        if value is None:
            continue
        target, _ = unwrap_component(value)
        if target is not None and target.type == "identifier" and target.text == chosen.name:
            consumed.append(statement)
    return tuple(consumed)


def select_component(candidates: List[ComponentCandidate]) -> Optional[ComponentCandidate]:
    for candidate in candidates:
        if candidate.is_default_export:
            return candidate
    return candidates[0] if candidates else None


def _fc_props_type(type_annotation: Optional[str]) -> Optional[str]:
    if not type_annotation:
        return None
    match = _FC_TYPE_RE.match(type_annotation.strip())
    return match.group("props").strip() if match else None


def extract_props(candidate: ComponentCandidate) -> PropsInfo:
    """Read the props parameter (and a forwarded ref) of a component."""
    params = function_parameters(candidate.function)
    fc_type = _fc_props_type(candidate.type_annotation)
    ref_binding: Optional[PropBinding] = None
    if candidate.is_forward_ref and len(params) > 1:
        ref_pattern = parameter_pattern(params[1])
        if ref_pattern.type == "identifier":
            ref_binding = PropBinding(
                name="ref",
                node=ref_pattern,
                is_bindable=True,
                local_name=ref_pattern.text if ref_pattern.text != "ref" else None,
            )

    if not params:
        bindings = (ref_binding,) if ref_binding else ()
        return PropsInfo(pattern=PropsPattern.NONE, bindings=bindings, type_annotation=fc_type)

    first = params[0]
    pattern = parameter_pattern(first)
    type_annotation = parameter_type(first) or fc_type

    if pattern.type == "identifier":
        bindings = (ref_binding,) if ref_binding else ()
        return PropsInfo(
            pattern=PropsPattern.IDENTIFIER,
            bindings=bindings,
            identifier=pattern.text,
            type_annotation=type_annotation,
        )

    if pattern.type == "assignment_pattern":
        # ({ a } = {}) => ...
        left = pattern.field("left")
        if left is not None:
            pattern = left

    if pattern.type != "object_pattern":
        return PropsInfo(pattern=PropsPattern.NONE, type_annotation=type_annotation)

    bindings: List[PropBinding] = []
    for element in pattern.named_children:
        binding = _prop_binding(element)
        if binding is not None:
            bindings.append(binding)
    if ref_binding is not None:
        bindings.append(ref_binding)
    return PropsInfo(
        pattern=PropsPattern.DESTRUCTURED,
        bindings=tuple(bindings),
        type_annotation=type_annotation,
    )


def _prop_binding(element: SyntaxNode) -> Optional[PropBinding]:
    kind = element.type
    if kind == "shorthand_property_identifier_pattern":
        return PropBinding(
            name=element.text,
            node=element,
            is_event_handler=bool(EVENT_ATTRIBUTE_RE.match(element.text)),
        )
    if kind == "object_assignment_pattern":
        left = element.field("left")
        name = left.text if left is not None else element.text
        return PropBinding(
            name=name,
            node=element,
            default_value=element.field("right"),
            is_event_handler=bool(EVENT_ATTRIBUTE_RE.match(name)),
        )
    if kind == "pair_pattern":
        key = element.field("key")
        value = element.field("value")
        name = key.text.strip("'\"") if key is not None else element.text
        local_names = pattern_names(value)
        default = None
        if value is not None and value.type == "assignment_pattern":
            default = value.field("right")
        local = local_names[0] if len(local_names) == 1 else None
        return PropBinding(
            name=name,
            node=element,
            default_value=default,
            is_event_handler=bool(EVENT_ATTRIBUTE_RE.match(name)),
            local_name=local if local != name else None,
        )
    if kind == "rest_pattern":
        names = pattern_names(element)
        return PropBinding(name=names[0] if names else "rest", node=element, is_rest=True)
    return None


__all__ = [
    "ComponentCandidate",
    "PropsInfo",
    "find_components",
    "select_component",
    "consumed_statements",
    "extract_props",
    "unwrap_component",
]
