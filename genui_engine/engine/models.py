"""Core data models — no internal dependencies beyond errors, only Pydantic + stdlib."""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from genui_engine.engine.errors import ToolArgumentsError

Role = Literal["user", "ai"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    """Serializes with camelCase aliases, accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Conversation (vendor-neutral adapter input)
# ---------------------------------------------------------------------------

class ConversationMessage(BaseModel):
    role: Role
    content: str


# ---------------------------------------------------------------------------
# Persistence records
# ---------------------------------------------------------------------------

class PersistedMessage(_CamelModel):
    """A stored chat turn. ai-role rows carry the sanitized artifact."""

    id: int | None = None
    session_id: str
    role: Role
    content: str
    component_code: str | None = None
    provider_name: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    def to_conversation(self) -> ConversationMessage:
        return ConversationMessage(role=self.role, content=self.content)


class Conversation(_CamelModel):
    id: str
    title: str = "New Conversation"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Inbound request (adapter → service)
# ---------------------------------------------------------------------------

class GenerateRequest(_CamelModel):
    """Adapter-agnostic generation request."""

    prompt: str = Field(min_length=1)
    session_id: str = Field(min_length=1)
    model: str | None = None
    trace_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


# ---------------------------------------------------------------------------
# Tool loop helpers
# ---------------------------------------------------------------------------

class ToolInvocation(BaseModel):
    """A tool call being assembled from streamed fragments. Never persisted."""

    id: str
    name: str
    raw_arguments: str = ""

    def append(self, fragment: str) -> None:
        self.raw_arguments += fragment

    def parse_arguments(self) -> dict[str, Any]:
        if not self.raw_arguments.strip():
            return {}
        try:
            parsed = json.loads(self.raw_arguments)
        except json.JSONDecodeError as exc:
            raise ToolArgumentsError(
                f"Malformed arguments for tool '{self.name}': {exc}"
            ) from exc
        if not isinstance(parsed, dict):
            raise ToolArgumentsError(
                f"Arguments for tool '{self.name}' must be a JSON object"
            )
        return parsed


class ToolResult(BaseModel):
    invocation: ToolInvocation
    arguments: dict[str, Any]
    output: str


# ---------------------------------------------------------------------------
# Outbound stream (adapter → service)
# ---------------------------------------------------------------------------

class StreamTokenType(str, Enum):
    TEXT = "text"
    TOOL_STARTED = "tool_started"
    TOOL_ENDED = "tool_ended"
    LOOP_LIMIT = "loop_limit"


class StreamToken(BaseModel):
    type: StreamTokenType
    text: str = ""
    tool_name: str | None = None

    @classmethod
    def fragment(cls, text: str) -> StreamToken:
        return cls(type=StreamTokenType.TEXT, text=text)

    @classmethod
    def tool_started(cls, name: str) -> StreamToken:
        return cls(type=StreamTokenType.TOOL_STARTED, tool_name=name)

    @classmethod
    def tool_ended(cls, name: str) -> StreamToken:
        return cls(type=StreamTokenType.TOOL_ENDED, tool_name=name)

    @classmethod
    def loop_limit(cls) -> StreamToken:
        return cls(type=StreamTokenType.LOOP_LIMIT)

    @property
    def is_marker(self) -> bool:
        return self.type is not StreamTokenType.TEXT

    @property
    def marker(self) -> str | None:
        """``tool-started:<name>`` style label, or None for text."""
        if self.type is StreamTokenType.TOOL_STARTED:
            return f"tool-started:{self.tool_name}"
        if self.type is StreamTokenType.TOOL_ENDED:
            return f"tool-ended:{self.tool_name}"
        if self.type is StreamTokenType.LOOP_LIMIT:
            return "tool-loop-limit"
        return None
