"""Built-in web search tools: brave_web_search and duckduckgo_web_search."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from genui_engine.tools.registry import ToolDef

logger = logging.getLogger(__name__)

MAX_RESULTS = 5
HTTP_TIMEOUT = 10.0
NO_RESULTS = "No results found."
TIMEOUT_MESSAGE = "Error: Search request timed out. Please try again."


class WebSearchInput(BaseModel):
    query: str = Field(description="The search query to execute.")


class SearchHit(BaseModel):
    title: str
    url: str
    snippet: str = "No description available"


def _format_hits(hits: list[SearchHit]) -> str:
    if not hits:
        return NO_RESULTS
    return json.dumps([h.model_dump() for h in hits[:MAX_RESULTS]])


async def _get_json(
    url: str,
    params: dict[str, Any],
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    async with httpx.AsyncClient(transport=transport, timeout=HTTP_TIMEOUT) as client:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()


# ---------------------------------------------------------------------------
# brave_web_search — Brave Search JSON API
# ---------------------------------------------------------------------------

BRAVE_ENDPOINT = "https://api.search.brave.com/res/v1/web/search"


def make_brave_search_tool(
    api_key: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ToolDef:
    """Factory — binds a Brave subscription token into the tool handler."""

    async def _brave_handler(inp: WebSearchInput) -> str:
        logger.info("Performing Brave search for %r", inp.query)
        try:
            data = await _get_json(
                BRAVE_ENDPOINT,
                params={"q": inp.query, "count": MAX_RESULTS},
                headers={"Accept": "application/json", "X-Subscription-Token": api_key},
                transport=transport,
            )
        except httpx.TimeoutException:
            return TIMEOUT_MESSAGE
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Brave search error: %s", exc)
            return f"Error performing search: {exc}"

        hits = [
            SearchHit(
                title=item["title"],
                url=item["url"],
                snippet=item.get("description") or "No description available",
            )
            for item in (data.get("web") or {}).get("results", [])
            if item.get("title") and item.get("url")
        ]
        return _format_hits(hits)

    return ToolDef(
        name="brave_web_search",
        description=(
            "Performs a web search using Brave Search to find current information "
            "on topics, news, or specific queries. Use this tool when the user asks "
            "a question that requires external knowledge or up-to-date information."
        ),
        input_model=WebSearchInput,
        handler=_brave_handler,
        timeout=HTTP_TIMEOUT + 5,
    )


# ---------------------------------------------------------------------------
# duckduckgo_web_search — DuckDuckGo Instant Answer API
# ---------------------------------------------------------------------------

DUCKDUCKGO_ENDPOINT = "https://api.duckduckgo.com/"


def _flatten_topics(topics: list[dict[str, Any]]) -> list[dict[str, Any]]:
    flat: list[dict[str, Any]] = []
    for topic in topics:
        # Category groups nest their entries under "Topics"
        if "Topics" in topic:
            flat.extend(_flatten_topics(topic["Topics"]))
        else:
            flat.append(topic)
    return flat


def make_duckduckgo_search_tool(
    transport: httpx.AsyncBaseTransport | None = None,
) -> ToolDef:

    async def _ddg_handler(inp: WebSearchInput) -> str:
        logger.info("Performing DuckDuckGo search for %r", inp.query)
        try:
            data = await _get_json(
                DUCKDUCKGO_ENDPOINT,
                params={"q": inp.query, "format": "json", "no_html": 1, "skip_disambig": 1},
                transport=transport,
            )
        except httpx.TimeoutException:
            return TIMEOUT_MESSAGE
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("DuckDuckGo search error: %s", exc)
            return f"Error performing search: {exc}"

        hits: list[SearchHit] = []
        if data.get("AbstractText") and data.get("AbstractURL"):
            hits.append(SearchHit(
                title=data.get("Heading") or inp.query,
                url=data["AbstractURL"],
                snippet=data["AbstractText"],
            ))
        for topic in _flatten_topics(data.get("RelatedTopics", [])):
            text, url = topic.get("Text"), topic.get("FirstURL")
            if text and url:
                hits.append(SearchHit(title=text.split(" - ")[0], url=url, snippet=text))
        return _format_hits(hits)

    return ToolDef(
        name="duckduckgo_web_search",
        description=(
            "Performs a web search using DuckDuckGo to find current information on "
            "topics, news, or specific queries. Use this tool when the user asks a "
            "question that requires external knowledge or up-to-date information."
        ),
        input_model=WebSearchInput,
        handler=_ddg_handler,
        timeout=HTTP_TIMEOUT + 5,
    )
