"""Syntax tree shared by the parser and the analyzer."""

from .nodes import FUNCTION_TYPES, JSX_ELEMENT_TYPES, SourceText, SyntaxNode, SyntaxTree
from .source_location import SourceLocation

__all__ = [
    "SourceLocation",
    "SourceText",
    "SyntaxNode",
    "SyntaxTree",
    "JSX_ELEMENT_TYPES",
    "FUNCTION_TYPES",
]
