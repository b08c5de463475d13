"""Tool registry with Pydantic v2 schemas, timeout, retry, and error-as-text results."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterSpec:
    """Vendor-neutral description of one tool parameter."""

    name: str
    type: str
    description: str
    required: bool


def _schema_type(prop: dict[str, Any]) -> str:
    if "type" in prop:
        return prop["type"]
    # Optional[...] fields come through as anyOf [<type>, null]
    for option in prop.get("anyOf", []):
        if option.get("type") not in (None, "null"):
            return option["type"]
    return "string"


@dataclass(frozen=True)
class ToolDef:
    """Registration record for a single tool."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[..., Awaitable[Any]]
    output_model: type[BaseModel] | None = None
    timeout: float = 30.0
    max_retries: int = 1

    def describe_parameters(self) -> list[ParameterSpec]:
        schema = self.input_model.model_json_schema()
        required = set(schema.get("required", []))
        return [
            ParameterSpec(
                name=prop_name,
                type=_schema_type(prop),
                description=prop.get("description", ""),
                required=prop_name in required,
            )
            for prop_name, prop in schema.get("properties", {}).items()
        ]


class ToolRegistry:
    """Central tool store. ``execute`` always answers with text."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDef] = {}

    # -- registration -------------------------------------------------------

    def register(self, tool_def: ToolDef) -> None:
        self._tools[tool_def.name] = tool_def
        logger.info("Registered tool %s", tool_def.name)

    def get(self, name: str) -> ToolDef | None:
        return self._tools.get(name)

    def definitions(self) -> list[ToolDef]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    # -- execution ----------------------------------------------------------

    def _serialize(self, tool: ToolDef, raw: Any) -> str:
        if isinstance(raw, str):
            return raw
        if tool.output_model is not None and not isinstance(raw, BaseModel):
            raw = tool.output_model.model_validate(raw)
        if isinstance(raw, BaseModel):
            return raw.model_dump_json()
        return json.dumps(raw, default=str)

    async def execute(self, name: str, arguments: dict[str, Any]) -> str:
        tool = self._tools.get(name)
        if tool is None:
            raise ValueError(f"Tool '{name}' not found")

        try:
            validated_input = tool.input_model.model_validate(arguments)
        except ValidationError as exc:
            logger.warning("tool=%s invalid arguments: %s", name, exc)
            return f"Error: invalid arguments for tool {name}: {exc}"

        last_error = ""
        for attempt in range(1, tool.max_retries + 2):  # +2 because range is exclusive
            try:
                t0 = time.time()
                raw = await asyncio.wait_for(
                    tool.handler(validated_input),
                    timeout=tool.timeout,
                )
                output = self._serialize(tool, raw)
                logger.info(
                    "tool=%s attempt=%d latency=%.3fs OK",
                    name, attempt, time.time() - t0,
                )
                return output

            except asyncio.TimeoutError:
                last_error = f"Error: tool {name} timed out after {tool.timeout}s"
                logger.warning("tool=%s attempt=%d timed out", name, attempt)
            except Exception as exc:
                last_error = f"Error executing tool {name}: {exc}"
                logger.warning("tool=%s attempt=%d error=%s", name, attempt, exc)

        return last_error
