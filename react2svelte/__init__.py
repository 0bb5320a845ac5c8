"""
React to Svelte 5 component converter.

The package converts one React function component module (JSX or TSX)
into one Svelte 5 component using runes. The pipeline is organised as:

* ``parser`` - tree-sitter based source parser producing ``SyntaxNode``
  trees with byte spans and line/column positions.
* ``analyzer`` - finds the component and classifies props, hooks,
  locals and the render tree into a ``ComponentModel``.
* ``lowering`` - maps the model onto the Svelte IR, replacing anything
  without an equivalent with a ``TODO(r2s#N)`` placeholder.
* ``codegen.svelte`` - deterministic ``.svelte`` text emitter.

Every stage reports into a shared ``DiagnosticCollector``; see
:func:`convert` for the single public entry point.
"""

from .config import ConversionOptions
from .diagnostics import Diagnostic, DiagnosticCollector, Severity, Stage
from .errors import (
    AnalysisAmbiguity,
    MissingKeyError,
    NoComponentError,
    ParseError,
    R2SError,
    UnsupportedPatternError,
)
from .pipeline import ConversionResult, convert

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "convert",
    "ConversionResult",
    "ConversionOptions",
    "Diagnostic",
    "DiagnosticCollector",
    "Severity",
    "Stage",
    "R2SError",
    "ParseError",
    "UnsupportedPatternError",
    "NoComponentError",
    "MissingKeyError",
    "AnalysisAmbiguity",
]
