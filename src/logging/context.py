# src/logging/context.py - v2
"""Contextual logging support: attach document, batch_id and step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per document of a batch.
_document: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document", default=None
)
_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    document: str | None = None
    batch_id: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document=_document.get(),
        batch_id=_batch_id.get(),
        step=_step.get(),
    )


def set_batch_context(batch_id: str) -> None:
    """Set batch-level context (called once per batch run)."""
    _batch_id.set(batch_id)


def set_document_context(document: str) -> None:
    """Set document-level context and reset the step."""
    _document.set(document)
    _step.set(None)


def set_step(step: str | None) -> None:
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _document.set(None)
    _batch_id.set(None)
    _step.set(None)
