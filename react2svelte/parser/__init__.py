"""Source parser for React component modules."""

from .base import JAVASCRIPT_GRAMMAR, TSX_GRAMMAR, SourceParser, parse_source

__all__ = ["SourceParser", "parse_source", "JAVASCRIPT_GRAMMAR", "TSX_GRAMMAR"]
