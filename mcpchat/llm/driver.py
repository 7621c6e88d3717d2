from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence

from mcpchat.llm.types import TurnResult

if TYPE_CHECKING:
    from mcpchat.runtime.conversation_state import Turn


class ToolCallingDriver(Protocol):
    def create_turn(
        self,
        *,
        turns: Sequence["Turn"],
        tools: list[dict] | None = None,
        **kwargs: Any,
    ) -> TurnResult:
        ...
