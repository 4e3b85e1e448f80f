# src/logging/context.py - v2
"""Contextual logging support: attach run_id, unit_id and file to log records.

Each worker runs in its own asyncio task, which owns a copy of the context,
so values set while dispatching one work item never leak into another.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_unit_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "unit_id", default=None
)
_file: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    run_id: str | None = None
    unit_id: str | None = None
    file: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        unit_id=_unit_id.get(),
        file=_file.get(),
    )


def set_run_context(run_id: str) -> contextvars.Token[str | None]:
    """Set run-level context; pass the returned token to reset_run_context()."""
    return _run_id.set(run_id)


def reset_run_context(token: contextvars.Token[str | None]) -> None:
    """Restore the run id that was current before set_run_context()."""
    _run_id.reset(token)


def set_unit_context(unit_id: str, file: str | None = None) -> None:
    """Set work-item context (called per dispatched unit or file)."""
    _unit_id.set(unit_id)
    _file.set(file)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _unit_id.set(None)
    _file.set(None)
