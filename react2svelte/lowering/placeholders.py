"""Passthrough placeholders for constructs without a Svelte equivalent."""

from __future__ import annotations

from typing import Optional

from react2svelte.ast import SyntaxNode
from react2svelte.diagnostics import DiagnosticCollector, Stage, UNSUPPORTED_PATTERN
from react2svelte.ir import ScriptPlaceholder, TemplatePlaceholder

from .expressions import reindent


class PlaceholderFactory:
    """Record an ``unsupported-pattern`` ERROR and build the matching placeholder.

    Parameters
    ----------
    diagnostics:
        Collector the ERROR is recorded on. The diagnostic id becomes the
        ``TODO(r2s#<id>)`` marker so the output can be traced back to the
        report.
    """

    def __init__(self, diagnostics: DiagnosticCollector):
        self.diagnostics = diagnostics

    def _record(self, node: SyntaxNode, reason: str, construct: Optional[str]) -> str:
        diagnostic = self.diagnostics.error(
            Stage.LOWER,
            UNSUPPORTED_PATTERN,
            f"{reason}; left as a TODO",
            line=node.line,
            column=node.column,
            construct=construct,
        )
        return f"TODO({diagnostic.marker})"

    def script(
        self,
        node: SyntaxNode,
        reason: str,
        construct: Optional[str] = None,
        *,
        prefix: str = "",
    ) -> ScriptPlaceholder:
        marker = self._record(node, reason, construct)
        original = "\n".join(reindent(prefix + node.text, node))
        return ScriptPlaceholder(marker=marker, reason=reason, original=original)

    def template(
        self, node: SyntaxNode, reason: str, construct: Optional[str] = None
    ) -> TemplatePlaceholder:
        marker = self._record(node, reason, construct)
        original = "\n".join(reindent(node.text, node))
        return TemplatePlaceholder(marker=marker, reason=reason, original=original)


__all__ = ["PlaceholderFactory"]
