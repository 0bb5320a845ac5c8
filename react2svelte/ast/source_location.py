"""Where a syntax node sits in the converted module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SourceLocation:
    """
    Start and end position of a node.

    Lines and columns are 1-based; columns count characters, not bytes.
    ``end_column`` points one past the last character.
    """
    source_name: str
    line: int
    column: int
    end_line: int
    end_column: int

    @property
    def is_multiline(self) -> bool:
        return self.end_line > self.line

    def spanned_lines(self) -> Tuple[int, ...]:
        """Every line number the node touches after its first."""
        return tuple(range(self.line + 1, self.end_line + 1))

    def __str__(self) -> str:
        if self.is_multiline:
            return f"{self.source_name}:{self.line}:{self.column}-{self.end_line}:{self.end_column}"
        return f"{self.source_name}:{self.line}:{self.column}"


__all__ = ["SourceLocation"]
