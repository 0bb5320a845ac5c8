"""
Generic, immutable syntax tree shared by every conversion stage.

The parser adapts concrete tree-sitter trees into :class:`SyntaxNode`
objects so that later stages never depend on tree-sitter directly. JSX is
represented by ordinary node variants (``jsx_element``,
``jsx_self_closing_element`` ...) inside the same tree, which keeps the
analyzer's walk uniform.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field as dc_field
from typing import Callable, Iterator, List, Optional, Tuple

from .source_location import SourceLocation

JSX_ELEMENT_TYPES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})

FUNCTION_TYPES = frozenset(
    {"arrow_function", "function_expression", "function", "function_declaration"}
)


class SourceText:
    """Source bytes plus line bookkeeping for byte-offset to location mapping."""

    def __init__(self, text: str, name: str = "<input>"):
        self.text = text
        self.name = name
        self.data = text.encode("utf-8")
        self._line_starts: List[int] = [0]
        for index, byte in enumerate(self.data):
            if byte == 0x0A:
                self._line_starts.append(index + 1)

    def slice(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8", errors="replace")

    def location(self, start: int, end: int) -> SourceLocation:
        line, column = self.position(start)
        end_line, end_column = self.position(end)
        return SourceLocation(
            source_name=self.name,
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
        )

    def position(self, offset: int) -> Tuple[int, int]:
        row = bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[row]
        column = len(self.data[line_start:offset].decode("utf-8", errors="replace"))
        return row + 1, column + 1


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """A node of the adapted syntax tree. Compared and hashed by identity."""

    type: str
    start: int
    end: int
    location: SourceLocation
    source: SourceText = dc_field(repr=False)
    children: Tuple["SyntaxNode", ...] = dc_field(default=(), repr=False)
    field_name: Optional[str] = None
    is_named: bool = True
    is_missing: bool = False

    @property
    def text(self) -> str:
        return self.source.slice(self.start, self.end)

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start, self.end)

    @property
    def named_children(self) -> Tuple["SyntaxNode", ...]:
        return tuple(
            child for child in self.children if child.is_named and child.type != "comment"
        )

    def field(self, name: str) -> Optional["SyntaxNode"]:
        for child in self.children:
            if child.field_name == name:
                return child
        return None

    def fields(self, name: str) -> Tuple["SyntaxNode", ...]:
        return tuple(child for child in self.children if child.field_name == name)

    def child_of_type(self, *types: str) -> Optional["SyntaxNode"]:
        for child in self.children:
            if child.type in types:
                return child
        return None

    def has_token(self, token: str) -> bool:
        """Return True when an anonymous child token equals ``token``."""
        return any(not child.is_named and child.type == token for child in self.children)

    def walk(self) -> Iterator["SyntaxNode"]:
        """Pre-order traversal including this node."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(
        self,
        predicate: Callable[["SyntaxNode"], bool],
        *,
        prune: Optional[Callable[["SyntaxNode"], bool]] = None,
    ) -> List["SyntaxNode"]:
        """Collect descendants matching ``predicate``; ``prune`` stops descent."""
        found: List[SyntaxNode] = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if predicate(node):
                found.append(node)
            if prune is not None and prune(node):
                continue
            stack.extend(reversed(node.children))
        return found

    def contains_jsx(self) -> bool:
        return any(node.type in JSX_ELEMENT_TYPES for node in self.walk())

    @property
    def is_jsx(self) -> bool:
        return self.type in JSX_ELEMENT_TYPES

    @property
    def is_function(self) -> bool:
        return self.type in FUNCTION_TYPES

    def unwrap(self) -> "SyntaxNode":
        """Strip parentheses and TypeScript-only expression wrappers."""
        node = self
        while True:
            if node.type == "parenthesized_expression" and node.named_children:
                node = node.named_children[0]
            elif node.type in ("as_expression", "satisfies_expression", "non_null_expression"):
                node = node.named_children[0]
            else:
                return node

    def __repr__(self) -> str:
        snippet = self.text
        if len(snippet) > 40:
            snippet = snippet[:37] + "..."
        return f"SyntaxNode({self.type!r}, {self.line}:{self.column}, {snippet!r})"


@dataclass(frozen=True)
class SyntaxTree:
    """A parsed module: the root node and the source it was built from."""

    root: SyntaxNode
    source: SourceText
    language: str

    @property
    def statements(self) -> Tuple[SyntaxNode, ...]:
        return self.root.named_children


__all__ = [
    "SourceText",
    "SyntaxNode",
    "SyntaxTree",
    "JSX_ELEMENT_TYPES",
    "FUNCTION_TYPES",
]
