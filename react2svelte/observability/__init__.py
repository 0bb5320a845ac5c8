"""Observability helpers (logging) for react2svelte."""

from .logging import get_logger, log_stage_event

__all__ = ["get_logger", "log_stage_event"]
