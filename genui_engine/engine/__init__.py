from genui_engine.engine.errors import ConfigurationError, GenerationError, ToolArgumentsError
from genui_engine.engine.history import compact_history
from genui_engine.engine.models import (
    Conversation,
    ConversationMessage,
    GenerateRequest,
    PersistedMessage,
    StreamToken,
    StreamTokenType,
    ToolInvocation,
    ToolResult,
)
from genui_engine.engine.sanitizer import sanitize_component

__all__ = [
    "ConfigurationError",
    "Conversation",
    "ConversationMessage",
    "GenerateRequest",
    "GenerationError",
    "PersistedMessage",
    "StreamToken",
    "StreamTokenType",
    "ToolArgumentsError",
    "ToolInvocation",
    "ToolResult",
    "compact_history",
    "sanitize_component",
]
