"""Shared fixtures for genui_engine tests."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from genui_engine.engine.service import GenerationService
from genui_engine.providers.base import ProviderAdapter
from genui_engine.providers.selector import ProviderSelector, ProviderSpec
from genui_engine.storage.in_memory import InMemoryMessageStore
from genui_engine.tools.builtins import WebSearchInput
from genui_engine.tools.registry import ToolDef, ToolRegistry
from genui_engine.tracing.jsonl_tracer import JSONLTraceCollector


class EchoInput(BaseModel):
    msg: str


async def _echo_handler(inp: EchoInput) -> dict:
    return {"echo": inp.msg}


async def _empty_search_handler(inp: WebSearchInput) -> str:
    return "[]"


ECHO_TOOL = ToolDef(
    name="echo",
    description="Echoes input",
    input_model=EchoInput,
    handler=_echo_handler,
)

STUB_BRAVE_TOOL = ToolDef(
    name="brave_web_search",
    description="Stub web search that never finds anything",
    input_model=WebSearchInput,
    handler=_empty_search_handler,
)


def selector_for(provider: ProviderAdapter, name: str = "gemini", calls: list | None = None) -> ProviderSelector:
    """A selector whose ``name`` provider is the given (already built) adapter."""

    def _factory(api_key: str, model: str, max_tool_rounds: int) -> ProviderAdapter:
        if calls is not None:
            calls.append((api_key, model))
        return provider

    spec = ProviderSpec("TEST_API_KEY", "TEST_MODEL", "test-model", _factory)
    return ProviderSelector(
        {"TEST_API_KEY": "secret"},
        default=name,
        providers={name: spec},
    )


@pytest.fixture
def store():
    return InMemoryMessageStore()


@pytest.fixture
def tool_registry():
    registry = ToolRegistry()
    registry.register(ECHO_TOOL)
    registry.register(STUB_BRAVE_TOOL)
    return registry


@pytest.fixture
def trace_collector(tmp_path):
    return JSONLTraceCollector(trace_dir=tmp_path / "traces")


@pytest.fixture
def make_service(store, tool_registry, trace_collector):
    def _make(provider: ProviderAdapter) -> GenerationService:
        return GenerationService(
            store=store,
            selector=selector_for(provider),
            tool_registry=tool_registry,
            trace_collector=trace_collector,
        )

    return _make


@pytest.fixture
def make_selector():
    return selector_for
