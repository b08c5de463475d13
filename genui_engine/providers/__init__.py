from genui_engine.providers.base import DEFAULT_MAX_TOOL_ROUNDS, ProviderAdapter, merge_consecutive
from genui_engine.providers.anthropic import AnthropicAdapter
from genui_engine.providers.gemini import GeminiAdapter
from genui_engine.providers.mock import ScriptedProvider, ScriptedTurn
from genui_engine.providers.selector import (
    DEFAULT_PROVIDER,
    PROVIDERS,
    ProviderSelector,
    ProviderSpec,
    get_provider,
)

__all__ = [
    "AnthropicAdapter",
    "DEFAULT_MAX_TOOL_ROUNDS",
    "DEFAULT_PROVIDER",
    "GeminiAdapter",
    "PROVIDERS",
    "ProviderAdapter",
    "ProviderSelector",
    "ProviderSpec",
    "ScriptedProvider",
    "ScriptedTurn",
    "get_provider",
    "merge_consecutive",
]
