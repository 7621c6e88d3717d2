from __future__ import annotations

from typing import Any

import pytest

from mcpchat.errors import ToolExecutionError
from mcpchat.runtime.tool_backend import ToolCallResult
from mcpchat.runtime.tool_catalog import ToolCatalog, ToolDescriptor


class FakeToolBackend:
    """In-memory tool backend; ``results`` maps tool name to result content or an exception."""

    def __init__(self, results: dict[str, Any] | None = None) -> None:
        self.results = dict(results or {})
        self.invocations: list[tuple[str, dict, str]] = []
        self.closed = False

    async def list_tools(self) -> list[ToolDescriptor]:
        return [ToolDescriptor(name=name) for name in self.results]

    async def invoke(self, name: str, arguments: dict[str, Any], *, call_id: str = "") -> ToolCallResult:
        self.invocations.append((name, arguments, call_id))
        outcome = self.results.get(name)
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            outcome = outcome(arguments)
        return ToolCallResult(tool_call_id=call_id, content=outcome)

    async def close(self) -> None:
        self.closed = True


WRITE_NOTE = ToolDescriptor(
    name="write_note",
    description="Write a note to flomo",
    parameter_schema={
        "type": "object",
        "properties": {"content": {"type": "string"}},
        "required": ["content"],
    },
)


@pytest.fixture
def write_note_catalog() -> ToolCatalog:
    return ToolCatalog.of([WRITE_NOTE])


@pytest.fixture
def make_backend():
    def _make(results: dict[str, Any] | None = None) -> FakeToolBackend:
        return FakeToolBackend(results)

    return _make


@pytest.fixture
def failing_tool() -> ToolExecutionError:
    return ToolExecutionError("Tool write_note reported an error: disk full", tool_name="write_note")
