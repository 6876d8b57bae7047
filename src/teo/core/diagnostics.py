"""Diagnostic events emitted by pipeline stages.

Pipeline components never log on their own. They receive a ``DiagnosticSink``
and emit ``Diagnostic`` events into it; the caller decides whether those end
up in structlog, in memory, or both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

import structlog

from teo.core.errors import TeoError

Severity = Literal["debug", "info", "warning", "error"]


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single stage event."""

    stage: str  # diff | enrichment | strategy | aggregation | advisory | matching
    event: str
    severity: Severity = "info"
    data: dict[str, Any] = field(default_factory=dict)
    error: TeoError | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "stage": self.stage,
            "event": self.event,
            "severity": self.severity,
            **self.data,
        }
        if self.error is not None:
            out["error"] = self.error.to_dict()
        return out


class DiagnosticSink(Protocol):
    """Anything that accepts diagnostics."""

    def emit(self, diagnostic: Diagnostic) -> None: ...


class NullSink:
    """Discards everything."""

    def emit(self, diagnostic: Diagnostic) -> None:  # noqa: ARG002
        return None


class LoggingSink:
    """Forwards diagnostics to structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._log = logger or structlog.get_logger("teo")

    def emit(self, diagnostic: Diagnostic) -> None:
        kv = dict(diagnostic.data)
        kv["stage"] = diagnostic.stage
        if diagnostic.error is not None:
            kv["error"] = str(diagnostic.error)
            kv["error_code"] = diagnostic.error.error_name
        getattr(self._log, diagnostic.severity)(diagnostic.event, **kv)


class DiagnosticLog:
    """Records diagnostics in order, optionally forwarding to another sink.

    Safe to share across asyncio tasks: ``emit`` is called from the event loop
    only (worker threads hand their outcomes back before anything is emitted).
    """

    def __init__(self, forward: DiagnosticSink | None = None) -> None:
        self._events: list[Diagnostic] = []
        self._forward = forward

    def emit(self, diagnostic: Diagnostic) -> None:
        self._events.append(diagnostic)
        if self._forward is not None:
            self._forward.emit(diagnostic)

    @property
    def events(self) -> tuple[Diagnostic, ...]:
        return tuple(self._events)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self._events if d.error is not None]

    def for_stage(self, stage: str) -> list[Diagnostic]:
        return [d for d in self._events if d.stage == stage]

    def __len__(self) -> int:
        return len(self._events)
