"""
Intermediate representation for Svelte 5 components.

Core Concepts:
--------------
- **SvelteComponentIR**: module script, instance script, template and style
- **Script nodes**: props, ``$state``/``$derived`` cells, effects, context
- **Template nodes**: elements, components, blocks, snippets and tags

Usage:
------
    from react2svelte.lowering import LoweringEngine
    from react2svelte.codegen.svelte import SvelteEmitter

    ir = LoweringEngine(diagnostics, options).lower(model)
    text = SvelteEmitter(indent_width=2).emit(ir)
"""

from .spec import (
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
    IfBranch,
    PropEntry,
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

__all__ = [
    "AttributeKind",
    "ComponentNode",
    "ConstTag",
    "ContextGet",
    "ContextSet",
    "DerivedDeclaration",
    "EachBlock",
    "EffectDeclaration",
    "EffectRune",
    "ElementNode",
    "ExpressionTag",
    "HtmlTag",
    "IfBlock",
    "IfBranch",
    "PropEntry",
    "PropsDeclaration",
    "RawStatement",
    "RefDeclaration",
    "RenderTag",
    "ScriptNode",
    "ScriptPlaceholder",
    "SnippetBlock",
    "StateDeclaration",
    "SvelteComponentIR",
    "TemplateAttribute",
    "TemplateNode",
    "TemplatePlaceholder",
    "TextNode",
]
