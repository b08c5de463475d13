"""Tests for GeminiAdapter against a fake chat client and a stubbed google-genai chat."""

from __future__ import annotations

import json
from types import SimpleNamespace

from google import genai
from google.genai import types

from genui_engine.engine.models import ConversationMessage, StreamTokenType
from genui_engine.providers.gemini import PRIMING_ACK, GeminiAdapter


# -- fake SDK ---------------------------------------------------------------

def text_chunk(text, thought=False):
    part = SimpleNamespace(text=text, function_call=None, thought=thought)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def call_chunk(name, args, call_id=None):
    call = SimpleNamespace(id=call_id, name=name, args=args)
    part = SimpleNamespace(text=None, function_call=call, thought=None)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class FakeChat:
    def __init__(self, turns):
        self._turns = list(turns)
        self.sent = []
        self.closed_streams = 0

    async def send_message_stream(self, message):
        self.sent.append(message)
        chunks = self._turns.pop(0)

        async def _gen():
            try:
                for chunk in chunks:
                    yield chunk
            finally:
                self.closed_streams += 1

        return _gen()


class FakeChats:
    def __init__(self, turns):
        self._turns = turns
        self.created = []

    def create(self, *, model, history=None, config=None):
        chat = FakeChat(self._turns)
        self.created.append({"model": model, "history": history, "config": config, "chat": chat})
        return chat


class FakeGenaiClient:
    def __init__(self, turns):
        self.aio = SimpleNamespace(chats=FakeChats(turns))


async def _run(adapter, messages, tools=None):
    return [t async for t in adapter.generate_stream_with_history("SYS", messages, tools)]


# -- tests ------------------------------------------------------------------

class TestGeminiSession:
    async def test_priming_pair_carries_system_prompt(self):
        client = FakeGenaiClient([[text_chunk("<div>"), text_chunk("ok</div>")]])
        adapter = GeminiAdapter(client=client, model="gemini-test")

        tokens = await _run(adapter, [
            ConversationMessage(role="user", content="first"),
            ConversationMessage(role="ai", content="const A = 1;"),
            ConversationMessage(role="user", content="change it"),
        ])

        assert [t.text for t in tokens] == ["<div>", "ok</div>"]
        [created] = client.aio.chats.created
        assert created["model"] == "gemini-test"
        assert created["config"] is None
        assert created["history"] == [
            {"role": "user", "parts": [{"text": "SYS"}]},
            {"role": "model", "parts": [{"text": PRIMING_ACK}]},
            {"role": "user", "parts": [{"text": "first"}]},
            {"role": "model", "parts": [{"text": "const A = 1;"}]},
        ]
        assert created["chat"].sent == ["change it"]

    async def test_thought_parts_are_not_streamed(self):
        client = FakeGenaiClient([[text_chunk("planning...", thought=True), text_chunk("<p/>")]])
        adapter = GeminiAdapter(client=client)

        tokens = await _run(adapter, [ConversationMessage(role="user", content="x")])
        assert [t.text for t in tokens] == ["<p/>"]


class TestGeminiToolLoop:
    async def test_function_call_round_trip(self, tool_registry):
        client = FakeGenaiClient([
            [text_chunk("Searching. "), call_chunk("brave_web_search", {"query": "weather"}, "fc-1")],
            [text_chunk("<div>Weather</div>")],
        ])
        adapter = GeminiAdapter(client=client)

        tokens = await _run(adapter, [ConversationMessage(role="user", content="weather today")], tool_registry)

        assert [t.marker for t in tokens if t.is_marker] == [
            "tool-started:brave_web_search", "tool-ended:brave_web_search",
        ]
        assert "".join(t.text for t in tokens if t.type is StreamTokenType.TEXT) == (
            "Searching. <div>Weather</div>"
        )

        created = client.aio.chats.created[0]
        [tool_group] = created["config"]["tools"]
        declaration = next(d for d in tool_group["function_declarations"] if d["name"] == "brave_web_search")
        assert declaration["parameters"] == {
            "type": "OBJECT",
            "properties": {"query": {"type": "STRING", "description": "The search query to execute."}},
            "required": ["query"],
        }

        opening, follow_up = created["chat"].sent
        assert opening == "weather today"
        assert follow_up == [types.Part(function_response=types.FunctionResponse(
            id="fc-1",
            name="brave_web_search",
            response={"result": "[]"},
        ))]

    async def test_missing_call_id_is_not_echoed(self, tool_registry):
        client = FakeGenaiClient([
            [call_chunk("echo", {"msg": "a"})],
            [text_chunk("done")],
        ])
        adapter = GeminiAdapter(client=client)

        await _run(adapter, [ConversationMessage(role="user", content="go")], tool_registry)

        [response] = client.aio.chats.created[0]["chat"].sent[1]
        assert response.function_response.id is None
        assert response.function_response.name == "echo"

    async def test_generate_is_history_free(self):
        client = FakeGenaiClient([[text_chunk("a"), text_chunk("b")]])
        adapter = GeminiAdapter(client=client)

        assert await adapter.generate("SYS", "prompt") == "ab"
        created = client.aio.chats.created[0]
        assert len(created["history"]) == 2
        assert created["chat"].sent == ["prompt"]

    async def test_closing_the_token_stream_closes_the_vendor_stream(self):
        client = FakeGenaiClient([[text_chunk("a"), text_chunk("b"), text_chunk("c")]])
        adapter = GeminiAdapter(client=client)

        tokens = adapter.generate_stream_with_history("SYS", [ConversationMessage(role="user", content="x")])
        assert (await tokens.__anext__()).text == "a"
        await tokens.aclose()

        assert client.aio.chats.created[0]["chat"].closed_streams == 1


# -- real SDK chat session, model endpoint stubbed ----------------------------

def sdk_response(*parts):
    return types.GenerateContentResponse(candidates=[
        types.Candidate(content=types.Content(role="model", parts=list(parts))),
    ])


class TestGeminiWithSdkChat:
    async def test_tool_round_trip_through_real_chat(self, tool_registry, monkeypatch):
        client = genai.Client(api_key="test-key")
        turns = [
            [sdk_response(types.Part(function_call=types.FunctionCall(id="fc-1", name="echo", args={"msg": "hi"})))],
            [sdk_response(types.Part(text="<div>hi</div>"))],
        ]
        requests = []

        async def fake_generate_content_stream(*, model, contents, config=None):
            requests.append(contents)
            chunks = turns.pop(0)

            async def _gen():
                for chunk in chunks:
                    yield chunk

            return _gen()

        monkeypatch.setattr(client.aio.models, "generate_content_stream", fake_generate_content_stream)
        adapter = GeminiAdapter(client=client, model="gemini-test")

        tokens = await _run(adapter, [ConversationMessage(role="user", content="say hi")], tool_registry)

        assert [t.marker for t in tokens if t.is_marker] == ["tool-started:echo", "tool-ended:echo"]
        assert "".join(t.text for t in tokens if t.type is StreamTokenType.TEXT) == "<div>hi</div>"

        assert len(requests) == 2
        tool_turn = requests[1][-1]
        assert tool_turn.role == "user"
        [part] = tool_turn.parts
        assert part.function_response.id == "fc-1"
        assert part.function_response.name == "echo"
        assert json.loads(part.function_response.response["result"]) == {"echo": "hi"}
