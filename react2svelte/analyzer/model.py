"""
Component model produced by the React semantic analyzer.

The model captures what a React component *means* (state, derived values,
effects, props, context, refs and a normalized render tree) while still
pointing at the original syntax nodes for every expression. It is frozen:
the lowering engine reads it and builds a separate IR.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from react2svelte.ast import SyntaxNode

Span = Tuple[int, int]


# =============================================================================
# Enumerations
# =============================================================================

class StateKind(str, Enum):
    PLAIN = "plain"
    REDUCER = "reducer"


class EffectTiming(str, Enum):
    POST_PAINT = "post_paint"
    PRE_PAINT = "pre_paint"


class DependencyKind(str, Enum):
    ON_MOUNT = "on_mount"
    ON_DEPS = "on_deps"
    ON_EVERY_UPDATE = "on_every_update"


class ContextDirection(str, Enum):
    PROVIDE = "provide"
    CONSUME = "consume"


class PropsPattern(str, Enum):
    """Shape of the component's first parameter."""
    DESTRUCTURED = "destructured"
    IDENTIFIER = "identifier"
    NONE = "none"


class DerivedForm(str, Enum):
    EXPRESSION = "expression"  # $derived(expr)
    FUNCTION = "function"  # $derived.by(fn)


class LocalKind(str, Enum):
    """Component-body statements that are not hooks."""
    FUNCTION = "function"
    CALLBACK = "callback"
    CONSTANT = "constant"
    VARIABLE = "variable"
    STATEMENT = "statement"
    PROPS_ID = "props_id"
    UNSUPPORTED = "unsupported"


class ModuleItemKind(str, Enum):
    IMPORT = "import"
    DECLARATION = "declaration"
    EXPORTED = "exported"
    TYPE = "type"


# =============================================================================
# Bindings
# =============================================================================

@dataclass(frozen=True)
class PropBinding:
    """One entry of the destructured props parameter."""
    name: str
    node: SyntaxNode
    default_value: Optional[SyntaxNode] = None
    type_annotation: Optional[str] = None
    is_event_handler: bool = False
    is_rest: bool = False
    is_bindable: bool = False
    local_name: Optional[str] = None

    @property
    def binding_name(self) -> str:
        """Name the prop is visible under inside the component body."""
        return self.local_name or self.name


@dataclass(frozen=True)
class StateBinding:
    """A ``useState`` or ``useReducer`` cell."""
    name: str
    node: SyntaxNode
    kind: StateKind
    initial_expression: Optional[SyntaxNode] = None
    setter: Optional[str] = None
    setter_call_sites: Tuple[Span, ...] = ()
    setter_references: Tuple[Span, ...] = ()
    reducer: Optional[SyntaxNode] = None
    reducer_initializer: Optional[SyntaxNode] = None
    dispatch: Optional[str] = None
    type_arguments: Optional[str] = None
    lazy_initializer: bool = False


@dataclass(frozen=True)
class DerivedBinding:
    """A value recomputed whenever a reactive value it reads changes."""
    name: str
    node: SyntaxNode
    expression: SyntaxNode
    dependency_expressions_implicit: bool = True
    names: Tuple[str, ...] = ()
    declared_dependencies: Tuple[str, ...] = ()
    form: DerivedForm = DerivedForm.EXPRESSION
    type_annotation: Optional[str] = None


@dataclass(frozen=True)
class EffectBinding:
    """A ``useEffect`` / ``useLayoutEffect`` call."""
    node: SyntaxNode
    hook: str
    body_expression: SyntaxNode
    timing: EffectTiming
    dependency_kind: DependencyKind
    body_statements: Tuple[SyntaxNode, ...] = ()
    cleanup_expression: Optional[SyntaxNode] = None
    declared_dependencies: Tuple[str, ...] = ()
    is_function_reference: bool = False
    expression_body: bool = False


@dataclass(frozen=True)
class ContextUse:
    key: str
    direction: ContextDirection
    node: SyntaxNode
    value_expression: Optional[SyntaxNode] = None
    binding: Optional[SyntaxNode] = None
    default_expression: Optional[SyntaxNode] = None
    nested: bool = False


@dataclass(frozen=True)
class ContextDefinition:
    """A module-level ``createContext(default)`` declaration."""
    key: str
    node: SyntaxNode
    default_expression: Optional[SyntaxNode] = None


@dataclass(frozen=True)
class RefBinding:
    name: str
    node: SyntaxNode
    target_node_id: Optional[str] = None
    initial_expression: Optional[SyntaxNode] = None
    type_arguments: Optional[str] = None
    forwarded: bool = False


@dataclass(frozen=True)
class LocalDeclaration:
    kind: LocalKind
    node: SyntaxNode
    names: Tuple[str, ...] = ()
    function: Optional[SyntaxNode] = None
    keyword: Optional[str] = None
    reason: Optional[str] = None
    construct: Optional[str] = None


@dataclass(frozen=True)
class ModuleItem:
    kind: ModuleItemKind
    node: SyntaxNode
    text: Optional[str] = None
    names: Tuple[str, ...] = ()


# =============================================================================
# Render tree
# =============================================================================

@dataclass(frozen=True)
class Attribute:
    """A JSX attribute. ``value`` is None for boolean attributes."""
    name: str
    node: SyntaxNode
    value: Optional[SyntaxNode] = None
    is_spread: bool = False


@dataclass(frozen=True)
class EventBinding:
    name: str
    handler: SyntaxNode
    node: SyntaxNode


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class TextExpression:
    expression: SyntaxNode


@dataclass(frozen=True)
class RawHtml:
    expression: SyntaxNode


@dataclass(frozen=True)
class Element:
    tag: str
    node: SyntaxNode
    node_id: str
    attributes: Tuple[Attribute, ...] = ()
    event_bindings: Tuple[EventBinding, ...] = ()
    children: Tuple["RenderNode", ...] = ()
    ref: Optional[str] = None
    ref_expression: Optional[SyntaxNode] = None
    html: Optional[SyntaxNode] = None


@dataclass(frozen=True)
class SlotContent:
    """Markup passed to a child component (children or a render prop)."""
    name: str
    body: "RenderNode"
    params: Optional[SyntaxNode] = None


@dataclass(frozen=True)
class ComponentInstance:
    name: str
    node: SyntaxNode
    node_id: str
    props_expressions: Tuple[Attribute, ...] = ()
    slot_contents: Tuple[SlotContent, ...] = ()


@dataclass(frozen=True)
class SlotInvocation:
    slot_name: str
    callee: str
    args: Tuple[SyntaxNode, ...] = ()
    optional: bool = True


@dataclass(frozen=True)
class ConditionalBlock:
    condition: SyntaxNode
    consequent: "RenderNode"
    alternate: Optional["RenderNode"] = None


@dataclass(frozen=True)
class ListBlock:
    node: SyntaxNode
    iterable_expression: SyntaxNode
    body: "RenderNode"
    item_binding: Optional[SyntaxNode] = None
    index_binding: Optional[str] = None
    key_expression: Optional[SyntaxNode] = None
    local_declarations: Tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True)
class Fragment:
    children: Tuple["RenderNode", ...] = ()


@dataclass(frozen=True)
class Unsupported:
    node: SyntaxNode
    reason: str
    construct: Optional[str] = None


RenderNode = Union[
    Element,
    Text,
    TextExpression,
    RawHtml,
    ConditionalBlock,
    ListBlock,
    ComponentInstance,
    SlotInvocation,
    Fragment,
    Unsupported,
]


@dataclass(frozen=True)
class SnippetDefinition:
    """A body-level JSX value or JSX-returning function."""
    name: str
    node: SyntaxNode
    body: RenderNode
    params: Optional[SyntaxNode] = None


# =============================================================================
# Component model
# =============================================================================

def _frozen(mapping: Optional[Mapping] = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ComponentModel:
    """Root artifact produced once per source file by the analyzer."""

    name: str
    node: SyntaxNode
    props: Tuple[PropBinding, ...] = ()
    props_pattern: PropsPattern = PropsPattern.NONE
    props_identifier: Optional[str] = None
    props_type: Optional[str] = None
    state_bindings: Mapping[str, StateBinding] = field(default_factory=_frozen)
    derived_bindings: Mapping[str, DerivedBinding] = field(default_factory=_frozen)
    effects: Tuple[EffectBinding, ...] = ()
    context_uses: Tuple[ContextUse, ...] = ()
    context_definitions: Mapping[str, ContextDefinition] = field(default_factory=_frozen)
    ref_bindings: Mapping[str, RefBinding] = field(default_factory=_frozen)
    render_tree: Optional[RenderNode] = None
    children_slots: Mapping[str, Tuple[str, ...]] = field(default_factory=_frozen)
    snippets: Tuple[SnippetDefinition, ...] = ()
    locals: Tuple[LocalDeclaration, ...] = ()
    module_items: Tuple[ModuleItem, ...] = ()
    styles: Tuple[str, ...] = ()
    typescript: bool = False

    @property
    def setters(self) -> Mapping[str, StateBinding]:
        return MappingProxyType(
            {b.setter: b for b in self.state_bindings.values() if b.setter}
        )

    @property
    def prop_names(self) -> Tuple[str, ...]:
        return tuple(p.binding_name for p in self.props)

    def reactive_names(self) -> frozenset:
        names = set(self.prop_names)
        if self.props_identifier:
            names.add(self.props_identifier)
        names.update(self.state_bindings)
        for derived in self.derived_bindings.values():
            names.update(derived.names or (derived.name,))
        names.update(name for name, ref in self.ref_bindings.items() if ref.target_node_id)
        return frozenset(names)


__all__ = [
    "StateKind",
    "EffectTiming",
    "DependencyKind",
    "ContextDirection",
    "PropsPattern",
    "DerivedForm",
    "LocalKind",
    "ModuleItemKind",
    "PropBinding",
    "StateBinding",
    "DerivedBinding",
    "EffectBinding",
    "ContextUse",
    "ContextDefinition",
    "RefBinding",
    "LocalDeclaration",
    "ModuleItem",
    "Attribute",
    "EventBinding",
    "Text",
    "TextExpression",
    "RawHtml",
    "Element",
    "SlotContent",
    "ComponentInstance",
    "SlotInvocation",
    "ConditionalBlock",
    "ListBlock",
    "Fragment",
    "Unsupported",
    "RenderNode",
    "SnippetDefinition",
    "ComponentModel",
]
