"""React semantic analysis: hooks, props, context, refs and the render tree."""

from .core import ReactAnalyzer, analyze
from .hooks import HookCall, HookKind, match_hook
from .model import (
    Attribute,
    ComponentInstance,
    ComponentModel,
    ConditionalBlock,
    ContextDefinition,
    ContextDirection,
    ContextUse,
    DependencyKind,
    DerivedBinding,
    DerivedForm,
    EffectBinding,
    EffectTiming,
    Element,
    EventBinding,
    Fragment,
    ListBlock,
    LocalDeclaration,
    LocalKind,
    ModuleItem,
    ModuleItemKind,
    PropBinding,
    PropsPattern,
    RawHtml,
    RefBinding,
    RenderNode,
    SlotContent,
    SlotInvocation,
    SnippetDefinition,
    StateBinding,
    StateKind,
    Text,
    TextExpression,
    Unsupported,
)

__all__ = [
    "ReactAnalyzer",
    "analyze",
    "HookCall",
    "HookKind",
    "match_hook",
    "Attribute",
    "ComponentInstance",
    "ComponentModel",
    "ConditionalBlock",
    "ContextDefinition",
    "ContextDirection",
    "ContextUse",
    "DependencyKind",
    "DerivedBinding",
    "DerivedForm",
    "EffectBinding",
    "EffectTiming",
    "Element",
    "EventBinding",
    "Fragment",
    "ListBlock",
    "LocalDeclaration",
    "LocalKind",
    "ModuleItem",
    "ModuleItemKind",
    "PropBinding",
    "PropsPattern",
    "RawHtml",
    "RefBinding",
    "RenderNode",
    "SlotContent",
    "SlotInvocation",
    "SnippetDefinition",
    "StateBinding",
    "StateKind",
    "Text",
    "TextExpression",
    "Unsupported",
]
