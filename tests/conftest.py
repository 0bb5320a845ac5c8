"""Shared fixtures for the react2svelte test-suite."""

import textwrap

import pytest

from react2svelte.analyzer import ReactAnalyzer
from react2svelte.codegen.svelte import SvelteEmitter
from react2svelte.config import ConversionOptions
from react2svelte.diagnostics import DiagnosticCollector, Severity
from react2svelte.lowering import LoweringEngine
from react2svelte.parser import SourceParser


def source(text: str) -> str:
    """Dedent an inline component source."""
    return textwrap.dedent(text).strip() + "\n"


def codes(diagnostics, severity=None):
    """Diagnostic codes, optionally filtered by severity."""
    return [d.code for d in diagnostics if severity is None or d.severity == severity]


def errors(diagnostics):
    return [d for d in diagnostics if d.severity == Severity.ERROR]


class Stages:
    """Run the pipeline stage by stage against one collector."""

    def __init__(self, **options):
        self.options = ConversionOptions(**options)
        self.diagnostics = DiagnosticCollector(
            strict=self.options.strict_mode, source_name=self.options.source_name
        )

    def parse(self, text: str):
        return SourceParser(self.options).parse(source(text))

    def analyze(self, text: str):
        return ReactAnalyzer(self.diagnostics, self.options).analyze(self.parse(text))

    def lower(self, text: str):
        return LoweringEngine(self.diagnostics, self.options).lower(self.analyze(text))

    def emit(self, text: str) -> str:
        return SvelteEmitter(self.options.indent_width).emit(self.lower(text))


@pytest.fixture
def stages():
    return Stages()


@pytest.fixture
def ts_stages():
    return Stages(typescript=True)
