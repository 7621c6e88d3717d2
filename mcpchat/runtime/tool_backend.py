from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from mcpchat.runtime.tool_catalog import ToolDescriptor


@dataclass(frozen=True)
class ToolCallResult:
    tool_call_id: str
    content: Any


class ToolBackend(Protocol):
    async def list_tools(self) -> list[ToolDescriptor]:
        ...

    async def invoke(
        self,
        name: str,
        arguments: dict[str, Any],
        *,
        call_id: str = "",
    ) -> ToolCallResult:
        ...

    async def close(self) -> None:
        ...
