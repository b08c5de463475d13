"""Anthropic adapter — Messages API with manual tool-loop reconstruction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from genui_engine.engine.models import ConversationMessage, ToolInvocation, ToolResult
from genui_engine.providers.base import DEFAULT_MAX_TOOL_ROUNDS, ProviderAdapter, TurnItem
from genui_engine.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-haiku-4-5-20251001"

_ROLE_MAP = {"user": "user", "ai": "assistant"}


@dataclass
class _AnthropicSession:
    system: str
    messages: list[dict[str, Any]]
    tools: list[dict[str, Any]] | None
    turn_text: list[str] = field(default_factory=list)


class AnthropicAdapter(ProviderAdapter):
    name = "anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        *,
        client: Any = None,
        timeout: float = 120.0,
        max_tokens: int = 4096,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
    ) -> None:
        super().__init__(model=model, max_tool_rounds=max_tool_rounds)
        if client is None:
            # Late import so the rest of the package works without anthropic installed
            from anthropic import AsyncAnthropic

            client = AsyncAnthropic(api_key=api_key, timeout=timeout)
        self._client = client
        self.max_tokens = max_tokens

    def render_tools(self, tools: ToolRegistry) -> list[dict[str, Any]]:
        rendered = []
        for tool in tools.definitions():
            params = tool.describe_parameters()
            rendered.append({
                "name": tool.name,
                "description": tool.description,
                "input_schema": {
                    "type": "object",
                    "properties": {
                        p.name: {"type": p.type, "description": p.description}
                        for p in params
                    },
                    "required": [p.name for p in params if p.required],
                },
            })
        return rendered

    async def _start_session(
        self,
        system_prompt: str,
        messages: list[ConversationMessage],
        tools: ToolRegistry | None,
    ) -> _AnthropicSession:
        return _AnthropicSession(
            system=system_prompt,
            messages=[{"role": _ROLE_MAP[m.role], "content": m.content} for m in messages],
            tools=self.render_tools(tools) if tools is not None else None,
        )

    def _record_tool_round(self, session: _AnthropicSession, results: list[ToolResult]) -> None:
        """Append the assistant tool_use turn and the user tool_result turn."""
        assistant_content: list[dict[str, Any]] = []
        text = "".join(session.turn_text)
        if text:
            assistant_content.append({"type": "text", "text": text})
        # Skipped calls are left out of both halves so every tool_use has its result
        assistant_content.extend(
            {
                "type": "tool_use",
                "id": r.invocation.id,
                "name": r.invocation.name,
                "input": r.arguments,
            }
            for r in results
        )
        session.messages.append({"role": "assistant", "content": assistant_content})
        session.messages.append({
            "role": "user",
            "content": [
                {"type": "tool_result", "tool_use_id": r.invocation.id, "content": r.output}
                for r in results
            ],
        })

    async def _stream_turn(
        self,
        session: _AnthropicSession,
        tool_results: list[ToolResult] | None,
    ) -> AsyncIterator[TurnItem]:
        if tool_results:
            self._record_tool_round(session, tool_results)
        session.turn_text = []

        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": session.system,
            "messages": session.messages,
            "stream": True,
        }
        if session.tools:
            request["tools"] = session.tools

        open_calls: dict[int, ToolInvocation] = {}
        stream = await self._client.messages.create(**request)
        async with stream:
            async for event in stream:
                if event.type == "content_block_start":
                    block = event.content_block
                    if block.type == "tool_use":
                        open_calls[event.index] = ToolInvocation(id=block.id, name=block.name)

                elif event.type == "content_block_delta":
                    delta = event.delta
                    if delta.type == "text_delta":
                        session.turn_text.append(delta.text)
                        yield delta.text
                    elif delta.type == "input_json_delta" and event.index in open_calls:
                        open_calls[event.index].append(delta.partial_json)

                elif event.type == "content_block_stop" and event.index in open_calls:
                    yield open_calls.pop(event.index)

                elif event.type == "message_delta":
                    logger.debug("anthropic stop_reason=%s", event.delta.stop_reason)
