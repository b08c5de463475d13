"""genui_engine — multi-provider streaming core for generated-UI chat.

Usage::

    from genui_engine import create_service
    from genui_engine.engine.models import GenerateRequest

    service = create_service()
    await service.store.open()
    async for fragment in service.handle(GenerateRequest(prompt="weather today", session_id="s1")):
        print(fragment, end="")
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()  # reads .env into os.environ (no-op if file missing)

from genui_engine.engine.models import GenerateRequest, StreamToken, StreamTokenType
from genui_engine.engine.service import GenerationService
from genui_engine.providers.base import DEFAULT_MAX_TOOL_ROUNDS
from genui_engine.providers.selector import DEFAULT_PROVIDER, ProviderSelector
from genui_engine.storage.in_memory import InMemoryMessageStore
from genui_engine.storage.interface import MessageStore
from genui_engine.storage.sqlite import SQLiteMessageStore
from genui_engine.tools.builtins import make_brave_search_tool, make_duckduckgo_search_tool
from genui_engine.tools.registry import ToolRegistry
from genui_engine.tracing.jsonl_tracer import JSONLTraceCollector

__all__ = [
    "GenerateRequest",
    "GenerationService",
    "StreamToken",
    "StreamTokenType",
    "build_tool_registry",
    "create_service",
]


def build_tool_registry(brave_api_key: str | None = None) -> ToolRegistry:
    registry = ToolRegistry()
    if brave_api_key:
        registry.register(make_brave_search_tool(brave_api_key))
    registry.register(make_duckduckgo_search_tool())
    return registry


def create_service(
    *,
    database_path: str | None = None,
    trace_dir: str | None = None,
    default_provider: str | None = None,
    brave_api_key: str | None = None,
    max_tool_rounds: int | None = None,
    store: MessageStore | None = None,
) -> GenerationService:
    """Wire all components and return a ready-to-use GenerationService.

    The store is constructed but not opened; call ``await service.store.open()``
    at startup and ``close()`` at shutdown (the web adapter's lifespan does).

    Environment variables (all optional):
      GEMINI_API_KEY / ANTHROPIC_API_KEY — provider credentials, checked per request
      GEMINI_MODEL / ANTHROPIC_MODEL     — model overrides
      DEFAULT_PROVIDER  — default ``gemini``
      DATABASE_PATH     — default ``conversations.db``; ``:memory:`` keeps history in RAM
      TRACE_DIR         — default ``./traces``
      BRAVE_API_KEY     — enables the brave_web_search tool
      MAX_TOOL_ROUNDS   — default 8
    """
    database_path = database_path or os.environ.get("DATABASE_PATH", "conversations.db")
    trace_dir = trace_dir or os.environ.get("TRACE_DIR", "./traces")
    default_provider = default_provider or os.environ.get("DEFAULT_PROVIDER", DEFAULT_PROVIDER)
    brave_api_key = brave_api_key or os.environ.get("BRAVE_API_KEY")
    if max_tool_rounds is None:
        max_tool_rounds = int(os.environ.get("MAX_TOOL_ROUNDS", DEFAULT_MAX_TOOL_ROUNDS))

    # -- components --
    if store is None:
        if database_path == ":memory:":
            store = InMemoryMessageStore()
        else:
            store = SQLiteMessageStore(database_path)

    selector = ProviderSelector(default=default_provider, max_tool_rounds=max_tool_rounds)

    return GenerationService(
        store=store,
        selector=selector,
        tool_registry=build_tool_registry(brave_api_key),
        trace_collector=JSONLTraceCollector(trace_dir),
    )
