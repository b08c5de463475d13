"""Scripted provider — deterministic, pre-loaded turns. Used in tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from genui_engine.engine.models import ConversationMessage, ToolInvocation, ToolResult
from genui_engine.providers.base import DEFAULT_MAX_TOOL_ROUNDS, ProviderAdapter, TurnItem
from genui_engine.tools.registry import ToolRegistry


@dataclass
class ScriptedTurn:
    """One model turn: text fragments, then tool calls as (name, raw JSON args).

    When ``error`` is set it is raised after the fragments, the way a dropped
    vendor connection surfaces mid-stream.
    """

    fragments: list[str] = field(default_factory=list)
    tool_calls: list[tuple[str, str]] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class _ScriptedSession:
    system_prompt: str
    messages: list[ConversationMessage]
    tool_results: list[list[ToolResult]] = field(default_factory=list)


class ScriptedProvider(ProviderAdapter):
    """Plays ``turns`` in order; an exhausted script ends with an empty turn."""

    name = "scripted"

    def __init__(
        self,
        turns: list[ScriptedTurn],
        *,
        name: str | None = None,
        max_tool_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
    ) -> None:
        super().__init__(model="scripted-v1", max_tool_rounds=max_tool_rounds)
        if name is not None:
            self.name = name
        self._turns = list(turns)
        self._turn_index = 0
        self.sessions: list[_ScriptedSession] = []

    @property
    def call_count(self) -> int:
        return self._turn_index

    def render_tools(self, tools: ToolRegistry) -> list[dict[str, Any]]:
        return [
            {"name": t.name, "parameters": [p.name for p in t.describe_parameters()]}
            for t in tools.definitions()
        ]

    async def _start_session(
        self,
        system_prompt: str,
        messages: list[ConversationMessage],
        tools: ToolRegistry | None,
    ) -> _ScriptedSession:
        session = _ScriptedSession(system_prompt=system_prompt, messages=list(messages))
        self.sessions.append(session)
        return session

    async def _stream_turn(
        self,
        session: _ScriptedSession,
        tool_results: list[ToolResult] | None,
    ) -> AsyncIterator[TurnItem]:
        if tool_results is not None:
            session.tool_results.append(tool_results)
        if self._turn_index >= len(self._turns):
            return
        turn = self._turns[self._turn_index]
        self._turn_index += 1

        for fragment in turn.fragments:
            yield fragment
        if turn.error is not None:
            raise turn.error
        for i, (tool_name, raw_args) in enumerate(turn.tool_calls):
            yield ToolInvocation(
                id=f"call-{self._turn_index}-{i}",
                name=tool_name,
                raw_arguments=raw_args,
            )
