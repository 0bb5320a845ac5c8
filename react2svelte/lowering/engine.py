"""
Lowering engine: ``ComponentModel`` -> ``SvelteComponentIR``.

Failure policy: a construct without a Svelte equivalent becomes a
passthrough placeholder plus an ``unsupported-pattern`` ERROR. Lowering
itself never aborts; unexpected exceptions propagate to the pipeline.
"""

from __future__ import annotations

from typing import List, Optional

from react2svelte.analyzer.model import ComponentModel
from react2svelte.config import ConversionOptions, DEFAULT_OPTIONS
from react2svelte.diagnostics import DiagnosticCollector
from react2svelte.ir import ScriptNode, SvelteComponentIR
from react2svelte.observability import log_stage_event

from .expressions import ExpressionRewriter
from .placeholders import PlaceholderFactory
from .script import ScriptLowerer
from .template import TemplateLowerer


class LoweringEngine:
    """Map the analyzed component onto the Svelte IR."""

    def __init__(
        self,
        diagnostics: DiagnosticCollector,
        options: Optional[ConversionOptions] = None,
    ):
        self.diagnostics = diagnostics
        self.options = options or DEFAULT_OPTIONS

    def lower(self, model: ComponentModel) -> SvelteComponentIR:
        """Lower ``model``.

        Args:
            model: Frozen component model from the analyzer.

        Returns:
            The IR for one ``.svelte`` file. Script declarations keep the
            order of the React source; context provision comes last.
        """
        rewriter = ExpressionRewriter(model, self.diagnostics)
        placeholders = PlaceholderFactory(self.diagnostics)
        scripts = ScriptLowerer(model, rewriter, placeholders, self.diagnostics, self.options.indent)
        templates = TemplateLowerer(model, rewriter, placeholders, self.diagnostics)

        props = scripts.props()
        ordered = scripts.declarations()
        provisions = scripts.provisions()

        template = tuple(templates.lower_snippet(snippet) for snippet in model.snippets)
        template += templates.lower(model.render_tree)

        imports, types, module_script, module_declarations = scripts.module_items(templates.component_tags)
        ordered = sorted(module_declarations + ordered, key=lambda item: item[0])

        script: List[ScriptNode] = list(types)
        if props is not None:
            script.append(props)
        for _, nodes in ordered:
            script.extend(nodes)
        script.extend(provisions)

        style = "\n\n".join(model.styles) if model.styles else None
        ir = SvelteComponentIR(
            name=model.name,
            typescript=model.typescript,
            svelte_imports=tuple(sorted(scripts.svelte_imports)),
            imports=tuple(imports),
            module_script=tuple(module_script),
            script=tuple(script),
            template=template,
            style=style,
        )
        log_stage_event(
            stage="lower",
            event="ir",
            source_name=self.options.source_name,
            extras={
                "script": len(ir.script),
                "module_script": len(ir.module_script),
                "template": len(ir.template),
            },
        )
        return ir


__all__ = ["LoweringEngine"]
