"""
Svelte-oriented intermediate representation.

The lowering engine produces these nodes from a ``ComponentModel``; the
emitter serializes them. Expressions are carried as already-rewritten source
strings, so the emitter only decides layout.

Design Principles:
------------------
1. **Frozen**: every node is an immutable dataclass holding tuples
2. **Ordered**: script declarations are stored in emission order
3. **Emitter-only layout**: no node carries indentation
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


# =============================================================================
# Enumerations
# =============================================================================

class AttributeKind(str, Enum):
    """How a template attribute is written."""
    STATIC = "static"  # name="value"
    EXPRESSION = "expression"  # name={value}
    SHORTHAND = "shorthand"  # {name}
    BOOLEAN = "boolean"  # name
    SPREAD = "spread"  # {...value}
    EVENT = "event"  # onclick={value}
    BIND = "bind"  # bind:name={value}
    STYLE = "style"  # style:name="value" / style:name={value}


class EffectRune(str, Enum):
    ON_MOUNT = "onMount"
    EFFECT = "$effect"
    EFFECT_PRE = "$effect.pre"


# =============================================================================
# Script declarations
# =============================================================================

@dataclass(frozen=True)
class PropEntry:
    name: str
    local_name: Optional[str] = None
    default: Optional[str] = None
    bindable: bool = False
    rest: bool = False


@dataclass(frozen=True)
class PropsDeclaration:
    """``let { a, b = 1, ...rest }: Props = $props();``"""
    entries: Tuple[PropEntry, ...] = ()
    identifier: Optional[str] = None
    type_annotation: Optional[str] = None


@dataclass(frozen=True)
class StateDeclaration:
    name: str
    initial: Optional[str] = None
    type_arguments: Optional[str] = None


@dataclass(frozen=True)
class DerivedDeclaration:
    target: str
    expression: str
    by: bool = False
    type_annotation: Optional[str] = None


@dataclass(frozen=True)
class EffectDeclaration:
    """An effect rune or ``onMount`` call.

    ``body`` holds the callback's statements, one source fragment each.
    When ``function_reference`` is set the callback is passed by name.
    """
    rune: EffectRune
    body: Tuple[str, ...] = ()
    cleanup: Optional[str] = None
    untrack: bool = False
    is_async: bool = False
    function_reference: Optional[str] = None


@dataclass(frozen=True)
class ContextGet:
    target: str
    key: str
    default: Optional[str] = None


@dataclass(frozen=True)
class ContextSet:
    key: str
    value: str


@dataclass(frozen=True)
class RefDeclaration:
    """A ref: reactive when bound to an element, a plain variable otherwise."""
    name: str
    initial: Optional[str] = None
    reactive: bool = False
    type_arguments: Optional[str] = None


@dataclass(frozen=True)
class RawStatement:
    """Source passed through after identifier rewriting."""
    text: str


@dataclass(frozen=True)
class ScriptPlaceholder:
    marker: str
    reason: str
    original: str


ScriptNode = Union[
    PropsDeclaration,
    StateDeclaration,
    DerivedDeclaration,
    EffectDeclaration,
    ContextGet,
    ContextSet,
    RefDeclaration,
    RawStatement,
    ScriptPlaceholder,
]


# =============================================================================
# Template
# =============================================================================

@dataclass(frozen=True)
class TemplateAttribute:
    kind: AttributeKind
    name: str = ""
    value: Optional[str] = None


@dataclass(frozen=True)
class ElementNode:
    tag: str
    attributes: Tuple[TemplateAttribute, ...] = ()
    children: Tuple["TemplateNode", ...] = ()
    void: bool = False


@dataclass(frozen=True)
class ComponentNode:
    name: str
    attributes: Tuple[TemplateAttribute, ...] = ()
    children: Tuple["TemplateNode", ...] = ()


@dataclass(frozen=True)
class TextNode:
    text: str


@dataclass(frozen=True)
class ExpressionTag:
    expression: str


@dataclass(frozen=True)
class HtmlTag:
    expression: str


@dataclass(frozen=True)
class RenderTag:
    expression: str


@dataclass(frozen=True)
class ConstTag:
    declaration: str


@dataclass(frozen=True)
class IfBranch:
    condition: str
    children: Tuple["TemplateNode", ...] = ()


@dataclass(frozen=True)
class IfBlock:
    branches: Tuple[IfBranch, ...]
    else_children: Optional[Tuple["TemplateNode", ...]] = None


@dataclass(frozen=True)
class EachBlock:
    expression: str
    item: str
    index: Optional[str] = None
    key: Optional[str] = None
    children: Tuple["TemplateNode", ...] = ()


@dataclass(frozen=True)
class SnippetBlock:
    name: str
    params: str = ""
    children: Tuple["TemplateNode", ...] = ()


@dataclass(frozen=True)
class TemplatePlaceholder:
    marker: str
    reason: str
    original: str


TemplateNode = Union[
    ElementNode,
    ComponentNode,
    TextNode,
    ExpressionTag,
    HtmlTag,
    RenderTag,
    ConstTag,
    IfBlock,
    EachBlock,
    SnippetBlock,
    TemplatePlaceholder,
]


# =============================================================================
# Root
# =============================================================================

@dataclass(frozen=True)
class SvelteComponentIR:
    """Everything the emitter needs for one ``.svelte`` file."""

    name: str
    typescript: bool = False
    svelte_imports: Tuple[str, ...] = ()
    imports: Tuple[str, ...] = ()
    module_script: Tuple[ScriptNode, ...] = ()
    script: Tuple[ScriptNode, ...] = ()
    template: Tuple[TemplateNode, ...] = ()
    style: Optional[str] = None


__all__ = [
    "AttributeKind",
    "EffectRune",
    "PropEntry",
    "PropsDeclaration",
    "StateDeclaration",
    "DerivedDeclaration",
    "EffectDeclaration",
    "ContextGet",
    "ContextSet",
    "RefDeclaration",
    "RawStatement",
    "ScriptPlaceholder",
    "ScriptNode",
    "TemplateAttribute",
    "ElementNode",
    "ComponentNode",
    "TextNode",
    "ExpressionTag",
    "HtmlTag",
    "RenderTag",
    "ConstTag",
    "IfBranch",
    "IfBlock",
    "EachBlock",
    "SnippetBlock",
    "TemplatePlaceholder",
    "TemplateNode",
    "SvelteComponentIR",
]
