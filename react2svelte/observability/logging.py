"""Centralised logging helpers for react2svelte."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

_LOGGER_CACHE: Dict[str, logging.Logger] = {}


def get_logger(name: str = "react2svelte") -> logging.Logger:
    """Return a cached :class:`logging.Logger` instance."""

    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = logging.getLogger(name)
    return _LOGGER_CACHE[name]


def log_stage_event(
    *,
    stage: str,
    event: str,
    source_name: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
    extras: Optional[Dict[str, Any]] = None,
) -> None:
    """Emit a structured debug entry for a pipeline stage transition."""

    payload: Dict[str, Any] = {
        "stage": stage,
        "source": source_name or "<input>",
    }
    if extras:
        payload.update(extras)
    target_logger = logger or get_logger("react2svelte.pipeline")
    target_logger.debug(
        "%s %s",
        stage,
        event,
        extra={"r2s_event": f"{stage}.{event}", "r2s_data": payload},
    )


__all__ = ["get_logger", "log_stage_event"]
