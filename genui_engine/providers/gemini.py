"""Gemini adapter — native chat session + function calling via google-genai."""

from __future__ import annotations

import json
import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from google import genai
from google.genai import types

from genui_engine.engine.models import ConversationMessage, ToolInvocation, ToolResult
from genui_engine.providers.base import DEFAULT_MAX_TOOL_ROUNDS, ProviderAdapter, TurnItem
from genui_engine.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
PRIMING_ACK = "Understood. I will follow these instructions for the rest of our conversation."

_ROLE_MAP = {"user": "user", "ai": "model"}


@dataclass
class _GeminiSession:
    chat: Any
    opening: str
    synthetic_ids: set[str] = field(default_factory=set)


def _text_content(role: str, text: str) -> dict[str, Any]:
    return {"role": role, "parts": [{"text": text}]}


def _chunk_parts(chunk: Any) -> list[Any]:
    candidates = getattr(chunk, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return []
    return list(candidates[0].content.parts or [])


class GeminiAdapter(ProviderAdapter):
    name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_GEMINI_MODEL,
        *,
        client: Any = None,
        timeout: float = 120.0,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
    ) -> None:
        super().__init__(model=model, max_tool_rounds=max_tool_rounds)
        if client is None:
            client = genai.Client(
                api_key=api_key,
                http_options={"timeout": int(timeout * 1000)},
            )
        self._client = client

    def render_tools(self, tools: ToolRegistry) -> list[dict[str, Any]]:
        declarations = []
        for tool in tools.definitions():
            params = tool.describe_parameters()
            declarations.append({
                "name": tool.name,
                "description": tool.description,
                "parameters": {
                    "type": "OBJECT",
                    "properties": {
                        p.name: {"type": p.type.upper(), "description": p.description}
                        for p in params
                    },
                    "required": [p.name for p in params if p.required],
                },
            })
        return [{"function_declarations": declarations}]

    async def _start_session(
        self,
        system_prompt: str,
        messages: list[ConversationMessage],
        tools: ToolRegistry | None,
    ) -> _GeminiSession:
        # Chat sessions have no system role; a priming exchange carries the prompt.
        history = [
            _text_content("user", system_prompt),
            _text_content("model", PRIMING_ACK),
        ]
        *prior, last = messages or [ConversationMessage(role="user", content="")]
        history.extend(_text_content(_ROLE_MAP[m.role], m.content) for m in prior)

        config: dict[str, Any] = {}
        if tools is not None:
            config["tools"] = self.render_tools(tools)

        chat = self._client.aio.chats.create(
            model=self.model,
            history=history,
            config=config or None,
        )
        return _GeminiSession(chat=chat, opening=last.content)

    async def _stream_turn(
        self,
        session: _GeminiSession,
        tool_results: list[ToolResult] | None,
    ) -> AsyncIterator[TurnItem]:
        if tool_results is None:
            message: Any = session.opening
        else:
            message = [self._function_response(session, r) for r in tool_results]

        stream = await session.chat.send_message_stream(message)
        async with aclosing(stream) as chunks:
            async for chunk in chunks:
                for part in _chunk_parts(chunk):
                    if getattr(part, "thought", False):
                        continue
                    call = getattr(part, "function_call", None)
                    if call is not None:
                        call_id = call.id
                        if not call_id:
                            call_id = f"{call.name}-{len(session.synthetic_ids) + 1}"
                            session.synthetic_ids.add(call_id)
                        yield ToolInvocation(
                            id=call_id,
                            name=call.name,
                            raw_arguments=json.dumps(call.args or {}),
                        )
                    elif getattr(part, "text", None):
                        yield part.text

    @staticmethod
    def _function_response(session: _GeminiSession, result: ToolResult) -> types.Part:
        # Ids Gemini never sent are not echoed back
        call_id = None if result.invocation.id in session.synthetic_ids else result.invocation.id
        return types.Part(function_response=types.FunctionResponse(
            id=call_id,
            name=result.invocation.name,
            response={"result": result.output},
        ))
