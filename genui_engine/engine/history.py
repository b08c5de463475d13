"""History compaction — the "Active Component" strategy.

Only the most recent ai turn keeps its full component code so the model can
refine it. Earlier ai turns collapse to a one-line placeholder built from
their stored description; user turns pass through unchanged.
"""

from __future__ import annotations

from typing import Sequence

from genui_engine.engine.models import ConversationMessage, PersistedMessage

PLACEHOLDER_TEMPLATE = "[Previously generated component: {description}]"


def placeholder_for(message: PersistedMessage) -> str:
    return PLACEHOLDER_TEMPLATE.format(description=message.content)


def compact_history(messages: Sequence[PersistedMessage]) -> list[ConversationMessage]:
    active_index = next(
        (i for i in range(len(messages) - 1, -1, -1) if messages[i].role == "ai"),
        None,
    )
    if active_index is None:
        return [m.to_conversation() for m in messages]

    compacted: list[ConversationMessage] = []
    for i, msg in enumerate(messages):
        if msg.role == "user":
            compacted.append(msg.to_conversation())
        elif i == active_index:
            compacted.append(ConversationMessage(role="ai", content=msg.component_code or msg.content))
        else:
            compacted.append(ConversationMessage(role="ai", content=placeholder_for(msg)))
    return compacted
