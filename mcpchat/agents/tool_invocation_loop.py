from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from mcpchat.errors import ToolExecutionError, UnknownToolError
from mcpchat.llm.driver import ToolCallingDriver
from mcpchat.llm.types import ToolCall, TurnResult
from mcpchat.runtime.conversation_state import ConversationState
from mcpchat.runtime.tool_backend import ToolBackend
from mcpchat.runtime.tool_catalog import ToolCatalog
from mcpchat.ui import NullReporter, Reporter, make_event
from mcpchat.ui.reporters import compact_params

# One round of tool calls per query. The follow-up model call is made without
# tools, so a model that wants to chain further calls gets a text-only reply.
MAX_TOOL_ROUNDS = 1


@dataclass
class QueryResult:
    output_text: str
    conversation: ConversationState
    dispatched: list[ToolCall] = field(default_factory=list)
    rounds: int = 0


def format_tool_call_line(name: str, arguments: Any) -> str:
    return f"[Calling tool {name} with args {json.dumps(arguments, ensure_ascii=False, separators=(',', ':'))}]"


class ToolInvocationLoop:
    """Answers one user query, running at most one round of tool calls.

    AwaitingModel -> (ToolDispatch -> AwaitingModel)? -> Done. Tool calls are
    dispatched sequentially in the order the model emitted them; the first
    failure aborts the query.
    """

    def __init__(
        self,
        *,
        driver: ToolCallingDriver,
        backend: ToolBackend,
        catalog: ToolCatalog,
        reporter: Optional[Reporter] = None,
        driver_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.driver = driver
        self.backend = backend
        self.catalog = catalog
        self.reporter = reporter or NullReporter()
        self.driver_kwargs = driver_kwargs or {}
        self.logger = logging.getLogger(__name__)

    def _emit(
        self,
        name: str,
        *,
        level: str = "info",
        category: Optional[str] = None,
        step_id: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.reporter.emit(make_event(
            name,
            level=level,
            category=category,
            step_id=step_id,
            payload=payload or {},
        ))

    async def process_query(self, text: str) -> str:
        result = await self.run(text)
        return result.output_text

    async def run(self, text: str) -> QueryResult:
        state = ConversationState()
        state.append_user_message(text)
        output_lines: list[str] = []
        dispatched: list[ToolCall] = []

        tools = self.catalog.function_specs() or None
        turn = await self._call_model(state, tools=tools, kind="initial")
        state.append_assistant_message(turn.output_text, turn.tool_calls)
        if turn.output_text:
            output_lines.append(turn.output_text)

        if not turn.tool_calls:
            self._emit("QUERY_END", category="query", payload={"tool_calls": 0})
            return QueryResult(output_text="\n".join(output_lines), conversation=state)

        for step, tool_call in enumerate(turn.tool_calls):
            line = await self._dispatch(state, tool_call, step=step)
            output_lines.append(line)
            dispatched.append(tool_call)

        follow_up = await self._call_model(state, tools=None, kind="follow_up")
        if follow_up.tool_calls:
            self.logger.warning(
                "Dropping %d tool call(s) from follow-up reply; only %d round(s) of tool calls are supported",
                len(follow_up.tool_calls),
                MAX_TOOL_ROUNDS,
            )
        state.append_assistant_message(follow_up.output_text)
        if follow_up.output_text:
            output_lines.append(follow_up.output_text)

        self._emit("QUERY_END", category="query", payload={"tool_calls": len(dispatched)})
        return QueryResult(
            output_text="\n".join(output_lines),
            conversation=state,
            dispatched=dispatched,
            rounds=MAX_TOOL_ROUNDS,
        )

    async def _call_model(
        self,
        state: ConversationState,
        *,
        tools: Optional[list[dict]],
        kind: str,
    ) -> TurnResult:
        self._emit("LLM_CALL_START", category="llm", payload={"kind": kind})
        # The driver is blocking; run it off the event loop so the stdio
        # transport keeps draining the server's output meanwhile.
        turn = await asyncio.to_thread(
            self.driver.create_turn,
            turns=state.turns,
            tools=tools,
            **self.driver_kwargs,
        )
        self._emit("LLM_CALL_END", category="llm", payload={
            "kind": kind,
            "tool_calls": len(turn.tool_calls),
        })
        return turn

    async def _dispatch(self, state: ConversationState, tool_call: ToolCall, *, step: int) -> str:
        if tool_call.name not in self.catalog:
            self._emit("TOOL_UNKNOWN", level="error", category="tool", step_id=step, payload={
                "tool": tool_call.name,
            })
            raise UnknownToolError(tool_call.name, self.catalog.names)

        arguments = self._parse_arguments(tool_call)
        line = format_tool_call_line(tool_call.name, arguments)
        self.logger.info("Invoking tool %s with args %s", tool_call.name, arguments)
        self._emit("TOOL_CALL_START", category="tool", step_id=step, payload={
            "tool": tool_call.name,
            "params_compact": compact_params(arguments),
        })
        try:
            result = await self.backend.invoke(tool_call.name, arguments, call_id=tool_call.call_id)
        except ToolExecutionError:
            self._emit("TOOL_CALL_END", level="error", category="tool", step_id=step, payload={
                "tool": tool_call.name,
                "status": "failed",
            })
            raise
        state.append_tool_result(tool_call.call_id, result.content)
        self._emit("TOOL_CALL_END", category="tool", step_id=step, payload={
            "tool": tool_call.name,
            "status": "success",
        })
        return line

    @staticmethod
    def _parse_arguments(tool_call: ToolCall) -> dict[str, Any]:
        arguments = tool_call.arguments
        if arguments is None or not str(arguments).strip():
            return {}
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError as exc:
            raise ToolExecutionError(
                f"Invalid JSON arguments for tool {tool_call.name}: {exc}",
                tool_name=tool_call.name,
            ) from exc
        if not isinstance(parsed, dict):
            raise ToolExecutionError(
                f"Arguments for tool {tool_call.name} must be a JSON object, got {type(parsed).__name__}",
                tool_name=tool_call.name,
            )
        return parsed


__all__ = ["ToolInvocationLoop", "QueryResult", "MAX_TOOL_ROUNDS", "format_tool_call_line"]
