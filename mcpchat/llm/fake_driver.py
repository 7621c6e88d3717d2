from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from mcpchat.llm.driver import ToolCallingDriver
from mcpchat.llm.types import ToolCall, TurnResult
from mcpchat.runtime.conversation_state import Turn


def _parse_chat_message(message: dict) -> TurnResult:
    tool_calls: list[ToolCall] = []
    for call in message.get("tool_calls") or []:
        func = call.get("function") or {}
        arguments = func.get("arguments", "")
        if isinstance(arguments, dict):
            arguments = json.dumps(arguments, ensure_ascii=False)
        tool_calls.append(ToolCall(
            name=func.get("name", ""),
            call_id=call.get("id", ""),
            arguments=arguments or "",
            raw=call,
        ))
    return TurnResult(
        output_text=message.get("content") or "",
        tool_calls=tool_calls,
        raw_message=message,
    )


@dataclass(frozen=True)
class RecordedCall:
    turns: tuple[Turn, ...]
    tools: list[dict] | None
    kwargs: dict


class FakeDriver(ToolCallingDriver):
    """Replays a fixed script of model replies and records every request.

    Script items may be a TurnResult, a chat-completion style message dict
    (``{"content": ..., "tool_calls": [...]}``), or an exception instance to
    raise.
    """

    def __init__(self, script: Iterable[Any]):
        self._script = list(script)
        self._cursor = 0
        self.calls: list[RecordedCall] = []

    def create_turn(
        self,
        *,
        turns: Sequence[Turn],
        tools: list[dict] | None = None,
        **kwargs: Any,
    ) -> TurnResult:
        self.calls.append(RecordedCall(turns=tuple(turns), tools=tools, kwargs=dict(kwargs)))
        if self._cursor >= len(self._script):
            raise RuntimeError("FakeDriver script exhausted")
        item = self._script[self._cursor]
        self._cursor += 1
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, TurnResult):
            return item
        if isinstance(item, str):
            return TurnResult(output_text=item, tool_calls=[], raw_message={"content": item})
        if isinstance(item, dict):
            return _parse_chat_message(item)
        raise TypeError(f"Unsupported FakeDriver script item: {type(item).__name__}")


def tool_call_message(*calls: tuple[str, str, Any], content: str = "") -> dict:
    """Build a scripted assistant message carrying ``(id, name, arguments)`` calls."""
    return {
        "role": "assistant",
        "content": content,
        "tool_calls": [
            {
                "id": call_id,
                "type": "function",
                "function": {
                    "name": name,
                    "arguments": arguments if isinstance(arguments, str) else json.dumps(arguments),
                },
            }
            for call_id, name, arguments in calls
        ],
    }


__all__ = ["FakeDriver", "RecordedCall", "tool_call_message"]
