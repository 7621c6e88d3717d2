from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import openai
from openai import OpenAI

from mcpchat.errors import ModelAPIError
from mcpchat.llm.driver import ToolCallingDriver
from mcpchat.llm.types import ToolCall, TurnResult
from mcpchat.runtime.conversation_state import Turn


def _turns_to_chat_messages(turns: Sequence[Turn]) -> list[dict]:
    messages: list[dict] = []
    for turn in turns:
        if turn.role == "tool":
            messages.append({
                "role": "tool",
                "tool_call_id": turn.tool_call_id or "",
                "content": turn.content,
            })
            continue
        if turn.role == "assistant" and turn.tool_calls:
            messages.append({
                "role": "assistant",
                "content": turn.content or None,
                "tool_calls": [
                    {
                        "id": call.call_id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments or ""},
                    }
                    for call in turn.tool_calls
                ],
            })
            continue
        messages.append({"role": turn.role, "content": turn.content})
    return messages


def _extract_chat_content(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, dict) and block.get("text"):
                parts.append(block.get("text") or "")
        return "".join(parts)
    return str(content) if content is not None else ""


def _turnresult_from_chat_response(choice_message: Any) -> TurnResult:
    if isinstance(choice_message, dict):
        raw = dict(choice_message)
    elif hasattr(choice_message, "model_dump"):
        raw = choice_message.model_dump(exclude_none=True)
    else:
        raw = {}

    parsed_tool_calls: list[ToolCall] = []
    for call in raw.get("tool_calls") or []:
        func = call.get("function") or {}
        parsed_tool_calls.append(ToolCall(
            name=func.get("name") or "",
            call_id=call.get("id") or "",
            arguments=func.get("arguments") or "",
            raw=call,
        ))

    return TurnResult(
        output_text=_extract_chat_content(raw.get("content")),
        tool_calls=parsed_tool_calls,
        raw_message=raw,
    )


class OpenAIChatCompletionsDriver(ToolCallingDriver):
    def __init__(
        self,
        *,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        default_headers: Optional[Dict[str, str]] = None,
        timeout_s: Optional[float] = None,
        max_retries: int = 0,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        client: Any | None = None,
    ) -> None:
        if client is not None:
            self.client = client
        else:
            kwargs: dict[str, Any] = {"api_key": api_key, "max_retries": max_retries}
            if base_url:
                kwargs["base_url"] = base_url
            if default_headers:
                kwargs["default_headers"] = default_headers
            if timeout_s is not None:
                kwargs["timeout"] = timeout_s
            self.client = OpenAI(**kwargs)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def create_turn(
        self,
        *,
        turns: Sequence[Turn],
        tools: list[dict] | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> TurnResult:
        payload: dict[str, Any] = {
            "model": model or self.model,
            "messages": _turns_to_chat_messages(turns),
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        payload.update(kwargs)

        try:
            resp = self.client.chat.completions.create(**payload)
        except openai.OpenAIError as exc:
            raise ModelAPIError(f"{type(exc).__name__}: {exc}") from exc
        if not resp.choices:
            raise ModelAPIError("Chat completion returned no choices")
        return _turnresult_from_chat_response(resp.choices[0].message)


__all__ = ["OpenAIChatCompletionsDriver"]
