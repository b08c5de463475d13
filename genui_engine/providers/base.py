"""ProviderAdapter — the vendor-neutral streaming tool loop.

Each vendor adapter supplies three hooks and inherits the loop:

* ``_start_session``  — convert system prompt + conversation into native history
* ``_stream_turn``    — one streaming round trip; yields ``str`` text fragments
  and completed ``ToolInvocation`` objects
* ``render_tools``    — render ``ParameterSpec`` lists into the wire format
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import aclosing
from typing import Any, AsyncIterator, Sequence

from genui_engine.engine.errors import ToolArgumentsError
from genui_engine.engine.models import (
    ConversationMessage,
    StreamToken,
    StreamTokenType,
    ToolInvocation,
    ToolResult,
)
from genui_engine.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 8

TurnItem = str | ToolInvocation


def merge_consecutive(messages: Sequence[ConversationMessage]) -> list[ConversationMessage]:
    """Collapse runs of same-role messages into one, joined by a blank line."""
    merged: list[ConversationMessage] = []
    for msg in messages:
        if merged and merged[-1].role == msg.role:
            merged[-1] = ConversationMessage(
                role=msg.role,
                content=f"{merged[-1].content}\n\n{msg.content}",
            )
        else:
            merged.append(msg)
    return merged


class ProviderAdapter(ABC):
    """Uniform generation contract over one LLM vendor."""

    name: str = "base"

    def __init__(self, model: str, max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS) -> None:
        self.model = model
        self.max_tool_rounds = max_tool_rounds

    # ------------------------------------------------------------------
    # Vendor hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def render_tools(self, tools: ToolRegistry) -> Any: ...

    @abstractmethod
    async def _start_session(
        self,
        system_prompt: str,
        messages: list[ConversationMessage],
        tools: ToolRegistry | None,
    ) -> Any: ...

    @abstractmethod
    def _stream_turn(
        self,
        session: Any,
        tool_results: list[ToolResult] | None,
    ) -> AsyncIterator[TurnItem]:
        """Run one streaming call.

        When ``tool_results`` is given, the previous turn's tool-call record
        and the results are appended to ``session`` before the call is made.
        """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        tools: ToolRegistry | None = None,
    ) -> str:
        """Single-shot, history-free generation. Returns the full text."""
        parts: list[str] = []
        messages = [ConversationMessage(role="user", content=user_prompt)]
        async with aclosing(
            self.generate_stream_with_history(system_prompt, messages, tools)
        ) as stream:
            async for token in stream:
                if token.type is StreamTokenType.TEXT:
                    parts.append(token.text)
        return "".join(parts)

    async def generate_stream_with_history(
        self,
        system_prompt: str,
        messages: Sequence[ConversationMessage],
        tools: ToolRegistry | None = None,
    ) -> AsyncIterator[StreamToken]:
        if tools is not None and not len(tools):
            tools = None
        session = await self._start_session(system_prompt, merge_consecutive(messages), tools)

        pending: list[ToolResult] | None = None
        for round_no in range(self.max_tool_rounds + 1):
            invocations: list[ToolInvocation] = []
            async with aclosing(self._stream_turn(session, pending)) as turn:
                async for item in turn:
                    if isinstance(item, ToolInvocation):
                        invocations.append(item)
                    elif item:
                        yield StreamToken.fragment(item)

            if not invocations:
                return

            if round_no == self.max_tool_rounds:
                logger.warning(
                    "provider=%s tool loop limit (%d rounds) reached; dropping %d call(s)",
                    self.name, self.max_tool_rounds, len(invocations),
                )
                yield StreamToken.loop_limit()
                return

            results: list[ToolResult] = []
            for invocation in invocations:
                yield StreamToken.tool_started(invocation.name)
                result = await self._run_invocation(invocation, tools)
                yield StreamToken.tool_ended(invocation.name)
                if result is not None:
                    results.append(result)

            if not results:
                logger.warning(
                    "provider=%s every tool call in round %d was skipped; ending generation",
                    self.name, round_no,
                )
                return
            pending = results

    # ------------------------------------------------------------------
    # Tool execution
    # ------------------------------------------------------------------

    async def _run_invocation(
        self,
        invocation: ToolInvocation,
        tools: ToolRegistry | None,
    ) -> ToolResult | None:
        """Execute one call. Returns None when the call is skipped."""
        if tools is None or tools.get(invocation.name) is None:
            logger.warning("provider=%s unknown tool %r requested; skipping", self.name, invocation.name)
            return None
        try:
            arguments = invocation.parse_arguments()
        except ToolArgumentsError as exc:
            logger.warning("provider=%s %s; skipping", self.name, exc)
            return None

        output = await tools.execute(invocation.name, arguments)
        return ToolResult(invocation=invocation, arguments=arguments, output=output)
