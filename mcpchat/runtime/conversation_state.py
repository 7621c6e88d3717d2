from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

from mcpchat.errors import ConversationError
from mcpchat.llm.types import ToolCall

TurnRole = Literal["user", "assistant", "tool"]


@dataclass(frozen=True)
class Turn:
    role: TurnRole
    content: str
    tool_call_id: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()


def serialize_tool_output(output: Any) -> str:
    """Render a tool result as the text the chat API expects.

    Strings pass through unchanged; dict/list results are JSON-encoded.
    """
    if output is None:
        return ""
    if isinstance(output, str):
        return output
    if isinstance(output, (dict, list)):
        return json.dumps(output, ensure_ascii=False)
    return str(output)


@dataclass
class ConversationState:
    """Append-only turn log for one query."""

    _turns: list[Turn] = field(default_factory=list)
    _pending_call_ids: set[str] = field(default_factory=set)
    _answered_call_ids: set[str] = field(default_factory=set)

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def append_user_message(self, text: str) -> Turn:
        turn = Turn(role="user", content=text)
        self._turns.append(turn)
        return turn

    def append_assistant_message(self, text: str, tool_calls: Sequence[ToolCall] = ()) -> Turn:
        turn = Turn(role="assistant", content=text or "", tool_calls=tuple(tool_calls))
        call_ids = [call.call_id for call in turn.tool_calls]
        if len(set(call_ids)) != len(call_ids):
            raise ConversationError(f"Assistant turn repeats a tool call id: {call_ids}")
        for call in turn.tool_calls:
            if call.call_id in self._pending_call_ids or call.call_id in self._answered_call_ids:
                raise ConversationError(f"Duplicate tool call id {call.call_id!r}")
        self._pending_call_ids.update(call.call_id for call in turn.tool_calls)
        self._turns.append(turn)
        return turn

    def append_tool_result(self, call_id: str, output: Any) -> Turn:
        if call_id in self._answered_call_ids:
            raise ConversationError(f"Tool call {call_id!r} already has a result")
        if call_id not in self._pending_call_ids:
            raise ConversationError(
                f"Tool result references unknown tool call {call_id!r}"
            )
        turn = Turn(role="tool", content=serialize_tool_output(output), tool_call_id=call_id)
        self._pending_call_ids.discard(call_id)
        self._answered_call_ids.add(call_id)
        self._turns.append(turn)
        return turn

    def tool_result_turns(self) -> list[Turn]:
        return [turn for turn in self._turns if turn.role == "tool"]

    @property
    def pending_call_ids(self) -> frozenset[str]:
        return frozenset(self._pending_call_ids)
