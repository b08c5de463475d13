"""GenerationService — per-request orchestration."""

from __future__ import annotations

import logging
import time
from contextlib import aclosing
from typing import AsyncIterator

from genui_engine.engine.history import compact_history
from genui_engine.engine.models import GenerateRequest, PersistedMessage, StreamTokenType
from genui_engine.engine.prompts import COMPONENT_SYSTEM_PROMPT, describe_turn
from genui_engine.engine.sanitizer import sanitize_component
from genui_engine.providers.selector import ProviderSelector
from genui_engine.storage.interface import MessageStore
from genui_engine.tools.registry import ToolRegistry
from genui_engine.tracing.interface import NullTraceCollector, TraceCollector

logger = logging.getLogger(__name__)

_MARKER_EVENTS = {
    StreamTokenType.TOOL_STARTED: "tool_started",
    StreamTokenType.TOOL_ENDED: "tool_ended",
    StreamTokenType.LOOP_LIMIT: "tool_loop_limit",
}


class GenerationService:
    """Public API: ``async for fragment in service.handle(request): ...``

    Yields raw model text fragments as they arrive. Tool markers are logged
    and traced but never yielded. The sanitized component is persisted only
    after the stream completes cleanly.
    """

    def __init__(
        self,
        store: MessageStore,
        selector: ProviderSelector,
        tool_registry: ToolRegistry | None = None,
        trace_collector: TraceCollector | None = None,
        system_prompt: str = COMPONENT_SYSTEM_PROMPT,
    ) -> None:
        self.store = store
        self._selector = selector
        self._tools = tool_registry
        self._trace = trace_collector or NullTraceCollector()
        self._system_prompt = system_prompt

    async def handle(self, request: GenerateRequest) -> AsyncIterator[str]:
        trace_id = request.trace_id
        t_start = time.time()

        # 1. Provider (configuration errors surface before any I/O) ----
        provider = self._selector.get_provider(request.model)
        await self._trace.emit(trace_id, "provider_selected", {
            "requested": request.model,
            "provider": provider.name,
            "model": provider.model,
        })

        try:
            # 2. Persist the user turn -----------------------------------
            await self.store.append_message(PersistedMessage(
                session_id=request.session_id,
                role="user",
                content=request.prompt,
            ))

            # 3. Load + compact history ----------------------------------
            history = await self.store.list_messages(request.session_id)
            conversation = compact_history(history)

            # 4. Stream ----------------------------------------------------
            parts: list[str] = []
            t_llm = time.time()
            stream = provider.generate_stream_with_history(
                self._system_prompt, conversation, self._tools,
            )
            async with aclosing(stream) as tokens:
                async for token in tokens:
                    if token.is_marker:
                        logger.info("session=%s %s", request.session_id, token.marker)
                        await self._trace.emit(trace_id, _MARKER_EVENTS[token.type], {
                            "tool": token.tool_name,
                            "elapsed_ms": round((time.time() - t_llm) * 1000, 2),
                        })
                        continue
                    parts.append(token.text)
                    yield token.text

            # 5. Sanitize + persist the ai turn ----------------------------
            code = sanitize_component("".join(parts))
            await self.store.append_message(PersistedMessage(
                session_id=request.session_id,
                role="ai",
                content=describe_turn(request.prompt),
                component_code=code,
                provider_name=provider.name,
            ))
            await self._trace.emit(trace_id, "generation_done", {
                "provider": provider.name,
                "raw_chars": sum(len(p) for p in parts),
                "code_chars": len(code),
                "total_latency_ms": round((time.time() - t_start) * 1000, 2),
            })
        finally:
            await self._trace.flush(trace_id)
