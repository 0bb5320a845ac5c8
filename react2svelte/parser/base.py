"""
Source parser: tree-sitter adaptation layer.

Parsing itself is delegated to the tree-sitter grammars shipped with
``tree_sitter_language_pack``. This module selects the grammar, converts the
concrete tree into :class:`~react2svelte.ast.SyntaxNode` objects and turns
syntax problems into structured :class:`~react2svelte.errors.ParseError`
exceptions instead of tree-sitter's error-recovering partial trees.
"""

from __future__ import annotations

import re
from typing import Optional

import tree_sitter_language_pack

from react2svelte.ast import SourceText, SyntaxNode, SyntaxTree
from react2svelte.config import ConversionOptions, DEFAULT_OPTIONS
from react2svelte.errors import ParseError, UnsupportedPatternError
from react2svelte.observability import get_logger

logger = get_logger(__name__)

JAVASCRIPT_GRAMMAR = "javascript"
TSX_GRAMMAR = "tsx"

_CLASS_COMPONENT_RE = re.compile(r"\bextends\s+(?:React\s*\.\s*)?(?:Pure)?Component\b")


class SourceParser:
    """
    Parse React component source into a :class:`SyntaxTree`.

    A parser instance is cheap and holds no state between calls beyond the
    options; each :meth:`parse` call creates its own tree-sitter parser so
    that concurrent invocations never share one.
    """

    def __init__(self, options: Optional[ConversionOptions] = None):
        self.options = options or DEFAULT_OPTIONS

    @property
    def grammar(self) -> str:
        return TSX_GRAMMAR if self.options.typescript else JAVASCRIPT_GRAMMAR

    def parse(self, source_text: str) -> SyntaxTree:
        """
        Parse source text.

        Args:
            source_text: Complete component module source.

        Returns:
            The adapted syntax tree.

        Raises:
            ParseError: On syntax errors or mismatched JSX tags.
            UnsupportedPatternError: When the module defines class components.
        """
        source = SourceText(source_text, name=self.options.source_name)
        ts_parser = tree_sitter_language_pack.get_parser(self.grammar)
        ts_tree = ts_parser.parse(source.data)
        root = _adapt(ts_tree.root_node, source, None)

        if ts_tree.root_node.has_error:
            self._raise_syntax_error(root)
        self._check_jsx_tags(root)
        self._reject_class_components(root)

        logger.debug(
            "Parsed %s with %s grammar (%d top-level statements)",
            source.name,
            self.grammar,
            len(root.named_children),
        )
        return SyntaxTree(root=root, source=source, language=self.grammar)

    def _raise_syntax_error(self, root: SyntaxNode) -> None:
        for node in root.walk():
            if node.is_missing:
                raise ParseError(
                    f"Missing {node.type!r}",
                    node=node,
                )
            if node.type == "ERROR":
                snippet = node.text.strip().splitlines()[0] if node.text.strip() else ""
                message = "Unexpected syntax"
                if snippet:
                    message += f" near {snippet[:40]!r}"
                if not self.options.typescript and ":" in snippet:
                    hint = "enable the typescript option for TypeScript sources"
                else:
                    hint = None
                raise ParseError(
                    message,
                    node=node,
                    hint=hint,
                )
        raise ParseError("Unexpected syntax", node=root)

    def _check_jsx_tags(self, root: SyntaxNode) -> None:
        for node in root.walk():
            if node.type != "jsx_element":
                continue
            open_tag = node.field("open_tag")
            close_tag = node.field("close_tag")
            if open_tag is None or close_tag is None:
                continue
            open_name = _tag_name(open_tag)
            close_name = _tag_name(close_tag)
            if open_name != close_name:
                raise ParseError(
                    f"Expected corresponding JSX closing tag for <{open_name}>"
                    f" but found </{close_name}>",
                    node=close_tag,
                )

    def _reject_class_components(self, root: SyntaxNode) -> None:
        for node in root.walk():
            if node.type not in ("class_declaration", "class"):
                continue
            heritage = node.child_of_type("class_heritage")
            if heritage is None or not _CLASS_COMPONENT_RE.search(heritage.text):
                continue
            name_node = node.field("name")
            name = name_node.text if name_node is not None else "<anonymous>"
            raise UnsupportedPatternError(
                f"Class component {name} cannot be converted; rewrite it as a"
                " function component first",
                node=node,
                construct="class component",
            )


def _tag_name(tag: SyntaxNode) -> str:
    name = tag.field("name")
    if name is None:
        return ""
    return re.sub(r"\s+", "", name.text)


def _adapt(ts_node, source: SourceText, field_name: Optional[str]) -> SyntaxNode:
    children = []
    cursor = ts_node.walk()
    if cursor.goto_first_child():
        while True:
            children.append(_adapt(cursor.node, source, cursor.field_name))
            if not cursor.goto_next_sibling():
                break
    return SyntaxNode(
        type=ts_node.type,
        start=ts_node.start_byte,
        end=ts_node.end_byte,
        location=source.location(ts_node.start_byte, ts_node.end_byte),
        source=source,
        children=tuple(children),
        field_name=field_name,
        is_named=ts_node.is_named,
        is_missing=ts_node.is_missing,
    )


def parse_source(source_text: str, options: Optional[ConversionOptions] = None) -> SyntaxTree:
    """Convenience wrapper around :class:`SourceParser`."""
    return SourceParser(options).parse(source_text)


__all__ = ["SourceParser", "parse_source", "JAVASCRIPT_GRAMMAR", "TSX_GRAMMAR"]
