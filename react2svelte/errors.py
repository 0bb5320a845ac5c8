"""Exceptions raised by the conversion stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ErrorLocation:
    """Source position of an error or diagnostic; every part may be unknown."""

    path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    @classmethod
    def of(cls, node: Any) -> "ErrorLocation":
        """Location of a syntax node (anything with ``source.name``, ``line`` and ``column``)."""
        return cls(path=node.source.name, line=node.line, column=node.column)

    @property
    def known(self) -> bool:
        return self.line is not None

    def __str__(self) -> str:
        parts = [self.path or "<input>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)


class R2SError(Exception):
    """
    Base class for errors that stop a stage.

    The position comes from ``node`` when one is given, otherwise from the
    explicit ``path``/``line``/``column`` keywords. ``construct`` names the
    React construct at fault and is carried onto the resulting diagnostic.
    """

    code: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        node: Any = None,
        path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        construct: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if node is not None:
            self.location = ErrorLocation.of(node)
        else:
            self.location = ErrorLocation(path=path, line=line, column=column)
        self.construct = construct
        self.hint = hint

    def format(self) -> str:
        """Compiler-style one-liner, followed by the hint on its own line."""
        text = f"{self.location}: error[{self.code or 'error'}]: {self.message}"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text


class ParseError(R2SError):
    """Raised when the source cannot be parsed. Fatal for the invocation."""

    code = "parse-error"


class UnsupportedPatternError(R2SError):
    """Raised for a construct that has no Svelte equivalent."""

    code = "unsupported-pattern"


class NoComponentError(R2SError):
    """Raised when a parsed module contains no function component."""

    code = "no-component"


class MissingKeyError(R2SError):
    code = "missing-key"


class AnalysisAmbiguity(R2SError):
    code = "analysis-ambiguity"


__all__ = [
    "R2SError",
    "ParseError",
    "UnsupportedPatternError",
    "NoComponentError",
    "MissingKeyError",
    "AnalysisAmbiguity",
    "ErrorLocation",
]
