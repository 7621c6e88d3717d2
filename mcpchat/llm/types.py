from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ToolCall:
    name: str
    call_id: str
    arguments: str
    raw: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class TurnResult:
    output_text: str
    tool_calls: list[ToolCall]
    raw_message: dict = field(default_factory=dict, compare=False)
