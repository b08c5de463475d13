"""JSONL file-based trace collector."""

from __future__ import annotations

import json
import time
from collections import defaultdict
from pathlib import Path
from typing import Any

from genui_engine.tracing.interface import TraceCollector


class JSONLTraceCollector(TraceCollector):
    """Buffers events per request and appends them to ``{trace_dir}/{trace_id}.jsonl``.

    The directory is created on first flush. Buffers are dropped on flush,
    including for requests that ended in an error.
    """

    def __init__(self, trace_dir: str | Path = "./traces") -> None:
        self.trace_dir = Path(trace_dir)
        self._buffers: defaultdict[str, list[dict[str, Any]]] = defaultdict(list)

    def path_for(self, trace_id: str) -> Path:
        return self.trace_dir / f"{trace_id}.jsonl"

    async def emit(self, trace_id: str, event_type: str, data: dict[str, Any]) -> None:
        self._buffers[trace_id].append({
            "ts": time.time(),
            "trace_id": trace_id,
            "event": event_type,
            **data,
        })

    async def flush(self, trace_id: str) -> None:
        entries = self._buffers.pop(trace_id, None)
        if not entries:
            return
        self.trace_dir.mkdir(parents=True, exist_ok=True)
        with self.path_for(trace_id).open("a", encoding="utf-8") as fh:
            fh.writelines(json.dumps(entry, default=str) + "\n" for entry in entries)
