"""Tests for compact_history — the Active Component strategy."""

from __future__ import annotations

from genui_engine.engine.history import compact_history, placeholder_for
from genui_engine.engine.models import PersistedMessage


def user(text):
    return PersistedMessage(session_id="s", role="user", content=text)


def ai(description, code):
    return PersistedMessage(session_id="s", role="ai", content=description, component_code=code)


class TestCompaction:
    def test_only_latest_component_kept_in_full(self):
        codes = [f"const GeneratedComponent = () => <div>{i}</div>;" for i in range(3)]
        history = []
        for i, code in enumerate(codes):
            history += [user(f"prompt {i}"), ai(f"component {i}", code)]
        history.append(user("make it blue"))

        compacted = compact_history(history)

        ai_turns = [m.content for m in compacted if m.role == "ai"]
        assert ai_turns[-1] == codes[-1]
        for i, content in enumerate(ai_turns[:-1]):
            assert content == f"[Previously generated component: component {i}]"
            assert codes[i] not in content
        all_text = "".join(m.content for m in compacted)
        assert sum(all_text.count(code) for code in codes) == 1

    def test_user_messages_pass_through_in_order(self):
        history = [user("a"), ai("d1", "c1"), user("b"), ai("d2", "c2"), user("c")]
        compacted = compact_history(history)
        assert [(m.role, m.content) for m in compacted] == [
            ("user", "a"),
            ("ai", placeholder_for(history[1])),
            ("user", "b"),
            ("ai", "c2"),
            ("user", "c"),
        ]

    def test_first_turn_is_unchanged(self):
        compacted = compact_history([user("hello")])
        assert [(m.role, m.content) for m in compacted] == [("user", "hello")]

    def test_latest_without_code_falls_back_to_description(self):
        compacted = compact_history([user("a"), ai("just a note", None), user("b")])
        assert compacted[1].content == "just a note"

    def test_consecutive_ai_turns_only_last_is_active(self):
        compacted = compact_history([user("a"), ai("d1", "c1"), ai("d2", "c2")])
        assert [m.content for m in compacted] == [
            "a", "[Previously generated component: d1]", "c2",
        ]

    def test_empty_history(self):
        assert compact_history([]) == []
