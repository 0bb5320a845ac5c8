"""Diagnostics collected across every stage of a conversion."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .errors import ErrorLocation, R2SError


class Severity(str, Enum):
    """Severity levels for diagnostics."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class Stage(str, Enum):
    """Pipeline stage that produced a diagnostic."""

    PARSE = "parse"
    ANALYZE = "analyze"
    LOWER = "lower"
    EMIT = "emit"

    def __str__(self) -> str:
        return self.value


# Diagnostic codes
PARSE_ERROR = "parse-error"
UNSUPPORTED_PATTERN = "unsupported-pattern"
NO_COMPONENT = "no-component"
STALE_DEPENDENCY = "stale-dependency"
MISSING_KEY = "missing-key"
ANALYSIS_AMBIGUITY = "analysis-ambiguity"
DYNAMIC_HOOK_ARGUMENT = "dynamic-hook-argument"
UNRESOLVED_REFERENCE = "unresolved-reference"
DUPLICATE_BINDING = "duplicate-binding"
EXTRA_COMPONENT = "extra-component"
MEMO_ERASED = "memo-erased"
EFFECT_EVERY_UPDATE = "effect-every-update"
SETTER_AS_VALUE = "setter-as-value"
CONTEXT_PROVIDER_HOISTED = "context-provider-hoisted"
CONTEXT_VALUE_SNAPSHOT = "context-value-snapshot"
HOOK_ERASED = "hook-erased"
IMPORT_REWRITTEN = "import-rewritten"
INTERNAL_ERROR = "internal-error"


@dataclass(frozen=True)
class Diagnostic:
    """A single diagnostic record."""

    id: int
    severity: Severity
    stage: Stage
    code: str
    message: str
    location: ErrorLocation = ErrorLocation()
    construct: Optional[str] = None

    @property
    def line(self) -> Optional[int]:
        return self.location.line

    @property
    def column(self) -> Optional[int]:
        return self.location.column

    @property
    def marker(self) -> str:
        """Identifier used by emitted ``TODO`` markers."""
        return f"r2s#{self.id}"

    def format(self) -> str:
        prefix = ""
        if self.location.line is not None:
            prefix = f"line {self.location.line}"
            if self.location.column is not None:
                prefix += f":{self.location.column}"
            prefix += ": "
        construct = f"`{self.construct}` " if self.construct else ""
        return f"{prefix}{self.severity.value}: {construct}{self.message} [{self.code}]"


class DiagnosticCollector:
    """
    Ordered, append-only accumulator of diagnostics.

    The collector never raises. In strict mode every WARNING is escalated to
    ERROR at the moment it is recorded.
    """

    def __init__(self, *, strict: bool = False, source_name: Optional[str] = None):
        self.strict = strict
        self.source_name = source_name
        self._records: List[Diagnostic] = []

    def report(
        self,
        severity: Severity,
        stage: Stage,
        code: str,
        message: str,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
        construct: Optional[str] = None,
    ) -> Diagnostic:
        if self.strict and severity == Severity.WARNING:
            severity = Severity.ERROR
        diagnostic = Diagnostic(
            id=len(self._records) + 1,
            severity=severity,
            stage=stage,
            code=code,
            message=message,
            location=ErrorLocation(path=self.source_name, line=line, column=column),
            construct=construct,
        )
        self._records.append(diagnostic)
        return diagnostic

    def info(self, stage: Stage, code: str, message: str, **kwargs) -> Diagnostic:
        return self.report(Severity.INFO, stage, code, message, **kwargs)

    def warning(self, stage: Stage, code: str, message: str, **kwargs) -> Diagnostic:
        return self.report(Severity.WARNING, stage, code, message, **kwargs)

    def error(self, stage: Stage, code: str, message: str, **kwargs) -> Diagnostic:
        return self.report(Severity.ERROR, stage, code, message, **kwargs)

    def from_exception(
        self,
        exc: R2SError,
        stage: Stage,
        severity: Severity = Severity.ERROR,
    ) -> Diagnostic:
        message = exc.message
        if exc.hint:
            message = f"{message}; {exc.hint}"
        return self.report(
            severity,
            stage,
            exc.code or INTERNAL_ERROR,
            message,
            line=exc.location.line,
            column=exc.location.column,
            construct=exc.construct,
        )

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._records)

    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self._records)

    def error_count(self) -> int:
        return sum(1 for d in self._records if d.severity == Severity.ERROR)

    def warning_count(self) -> int:
        return sum(1 for d in self._records if d.severity == Severity.WARNING)

    def __len__(self) -> int:
        return len(self._records)


__all__ = [
    "Severity",
    "Stage",
    "Diagnostic",
    "DiagnosticCollector",
]
