"""
Conversion pipeline: Parser -> Analyzer -> Lowering -> Emitter.

Each stage consumes the previous stage's output and reports into one
shared :class:`DiagnosticCollector`. A fatal stage error ends the run with
``output_text=None``; non-fatal problems become diagnostics and, where a
construct cannot be translated, ``TODO(r2s#N)`` markers in the output.
"""

from __future__ import annotations

from typing import Any, Mapping, NamedTuple, Optional, Tuple, Union

from .analyzer import ReactAnalyzer
from .codegen.svelte import SvelteEmitter
from .config import ConversionOptions, DEFAULT_OPTIONS
from .diagnostics import INTERNAL_ERROR, Diagnostic, DiagnosticCollector, Stage
from .errors import NoComponentError, ParseError, UnsupportedPatternError
from .lowering import LoweringEngine
from .observability import get_logger, log_stage_event
from .parser import SourceParser

logger = get_logger(__name__)

OptionsLike = Union[ConversionOptions, Mapping[str, Any], None]


class ConversionResult(NamedTuple):
    """Outcome of one conversion."""

    output_text: Optional[str]
    diagnostics: Tuple[Diagnostic, ...]

    @property
    def ok(self) -> bool:
        return self.output_text is not None


def resolve_options(options: OptionsLike) -> ConversionOptions:
    """Accept an options model, a plain mapping (snake or camel case) or None."""
    if options is None:
        return DEFAULT_OPTIONS
    if isinstance(options, ConversionOptions):
        return options
    return ConversionOptions.model_validate(dict(options))


def convert(source_text: str, options: OptionsLike = None) -> ConversionResult:
    """
    Convert one React function component module to a Svelte 5 component.

    Args:
        source_text: JSX or TSX module source.
        options: :class:`ConversionOptions` or an equivalent mapping.

    Returns:
        A :class:`ConversionResult`. ``output_text`` is None when parsing
        failed, no component was found, an internal error occurred, or
        strict mode is on and any ERROR was recorded.

    Raises:
        pydantic.ValidationError: When ``options`` is malformed.
    """
    opts = resolve_options(options)
    diagnostics = DiagnosticCollector(strict=opts.strict_mode, source_name=opts.source_name)
    stage = Stage.PARSE

    try:
        tree = SourceParser(opts).parse(source_text)
        log_stage_event(stage="parse", event="complete", source_name=opts.source_name)

        stage = Stage.ANALYZE
        model = ReactAnalyzer(diagnostics, opts).analyze(tree)

        stage = Stage.LOWER
        ir = LoweringEngine(diagnostics, opts).lower(model)

        stage = Stage.EMIT
        output = SvelteEmitter(opts.indent_width).emit(ir)
        log_stage_event(
            stage="emit",
            event="complete",
            source_name=opts.source_name,
            extras={"length": len(output)},
        )
    except (ParseError, UnsupportedPatternError, NoComponentError) as exc:
        diagnostics.from_exception(exc, stage)
        log_stage_event(
            stage=stage.value,
            event="failed",
            source_name=opts.source_name,
            extras={"code": exc.code},
        )
        return ConversionResult(None, diagnostics.diagnostics)
    except Exception as exc:
        logger.exception("Internal error while converting %s", opts.source_name)
        diagnostics.error(stage, INTERNAL_ERROR, f"internal error: {exc}")
        return ConversionResult(None, diagnostics.diagnostics)

    if opts.strict_mode and diagnostics.has_errors():
        log_stage_event(
            stage="emit",
            event="rejected",
            source_name=opts.source_name,
            extras={"errors": diagnostics.error_count()},
        )
        return ConversionResult(None, diagnostics.diagnostics)
    return ConversionResult(output, diagnostics.diagnostics)


__all__ = ["ConversionResult", "convert", "resolve_options"]
