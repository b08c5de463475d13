"""FastAPI adapter — thin translation layer, no business logic."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel, Field, ValidationError

from genui_engine import create_service
from genui_engine.engine.errors import ConfigurationError
from genui_engine.engine.models import GenerateRequest
from genui_engine.engine.service import GenerationService

logger = logging.getLogger(__name__)


class TitleUpdate(BaseModel):
    title: str = Field(min_length=1, max_length=200)


def _error(status: int, error: str, details: str | None = None) -> JSONResponse:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(body, status_code=status)


def create_app(service: GenerationService | None = None) -> FastAPI:
    service = service or create_service()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.store.open()
        try:
            yield
        finally:
            await service.store.close()

    app = FastAPI(title="GenUI Engine API", version="0.1.0", lifespan=lifespan)

    @app.post("/api/generate")
    async def generate(request: Request) -> Response:
        try:
            body = await request.json()
            gen_request = GenerateRequest.model_validate(body)
        except (ValueError, ValidationError) as exc:
            return _error(400, "prompt and sessionId are required", str(exc))

        fragments = service.handle(gen_request)

        # Pull the first fragment before committing to a streaming response so
        # failures up to this point can still be reported as JSON.
        try:
            first = await fragments.__anext__()
        except StopAsyncIteration:
            first = ""
        except ConfigurationError as exc:
            logger.error("Configuration error: %s", exc)
            return _error(500, "Provider is not configured", str(exc))
        except Exception as exc:
            logger.exception("Generation failed before streaming started")
            return _error(502, "Failed to generate component", str(exc))

        async def body_stream() -> AsyncIterator[str]:
            try:
                if first:
                    yield first
                async for fragment in fragments:
                    yield fragment
            except Exception:
                # Headers are committed; close the stream without an error body.
                logger.exception("Generation failed mid-stream session=%s", gen_request.session_id)
            finally:
                await fragments.aclose()

        return StreamingResponse(
            body_stream(),
            media_type="text/plain; charset=utf-8",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )

    @app.get("/api/conversations")
    async def list_conversations() -> JSONResponse:
        conversations = await service.store.list_conversations()
        return JSONResponse([c.model_dump(mode="json", by_alias=True) for c in conversations])

    @app.get("/api/conversations/{session_id}/messages")
    async def conversation_history(session_id: str) -> JSONResponse:
        messages = await service.store.list_messages(session_id)
        return JSONResponse([m.model_dump(mode="json", by_alias=True) for m in messages])

    @app.patch("/api/conversations/{session_id}")
    async def rename_conversation(session_id: str, update: TitleUpdate) -> JSONResponse:
        convo = await service.store.update_title(session_id, update.title)
        if convo is None:
            return _error(404, f"Conversation '{session_id}' not found")
        return JSONResponse(convo.model_dump(mode="json", by_alias=True))

    @app.delete("/api/conversations/{session_id}")
    async def delete_conversation(session_id: str) -> Response:
        if not await service.store.delete_conversation(session_id):
            return _error(404, f"Conversation '{session_id}' not found")
        return Response(status_code=204)

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app


# Module-level instance for ``uvicorn genui_engine.adapters.web_fastapi.app:app``
app = create_app()


def serve() -> None:
    """Entry-point for ``genui-web`` console script."""
    import uvicorn

    uvicorn.run(
        "genui_engine.adapters.web_fastapi.app:app",
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
