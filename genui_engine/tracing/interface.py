"""TraceCollector ABC and a no-op implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class TraceCollector(ABC):
    """Collects per-request structured events (tool markers, timings)."""

    @abstractmethod
    async def emit(self, trace_id: str, event_type: str, data: dict[str, Any]) -> None: ...

    @abstractmethod
    async def flush(self, trace_id: str) -> None: ...


class NullTraceCollector(TraceCollector):
    async def emit(self, trace_id: str, event_type: str, data: dict[str, Any]) -> None:
        return None

    async def flush(self, trace_id: str) -> None:
        return None
