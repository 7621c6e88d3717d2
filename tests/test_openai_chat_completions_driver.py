from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest
from openai.types.chat import ChatCompletion

from mcpchat.errors import ModelAPIError
from mcpchat.llm.openai_chat_completions_driver import OpenAIChatCompletionsDriver
from mcpchat.llm.types import ToolCall
from mcpchat.runtime.conversation_state import ConversationState


class _RecordingCompletions:
    def __init__(self, responses: list) -> None:
        self.responses = list(responses)
        self.payloads: list[dict] = []

    def create(self, **payload):
        self.payloads.append(payload)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _client(responses: list) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=_RecordingCompletions(responses)))


def _completion(message: dict, finish_reason: str = "stop") -> ChatCompletion:
    return ChatCompletion.model_validate({
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "deepseek-chat",
        "choices": [{"index": 0, "finish_reason": finish_reason, "message": message}],
    })


def test_create_turn_parses_tool_calls_and_sends_tools() -> None:
    client = _client([
        _completion(
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [{
                    "id": "call-1",
                    "type": "function",
                    "function": {"name": "write_note", "arguments": '{"content": "hello"}'},
                }],
            },
            finish_reason="tool_calls",
        ),
    ])
    driver = OpenAIChatCompletionsDriver(model="deepseek-chat", api_key="sk-test", max_tokens=1000, client=client)
    state = ConversationState()
    state.append_user_message("save this: hello")
    tools = [{"type": "function", "function": {"name": "write_note", "description": "", "parameters": {}}}]

    turn = driver.create_turn(turns=state.turns, tools=tools)

    assert turn.output_text == ""
    assert turn.tool_calls == [ToolCall(name="write_note", call_id="call-1", arguments='{"content": "hello"}')]
    payload = client.chat.completions.payloads[0]
    assert payload["model"] == "deepseek-chat"
    assert payload["max_tokens"] == 1000
    assert payload["tools"] == tools
    assert payload["tool_choice"] == "auto"
    assert payload["messages"] == [{"role": "user", "content": "save this: hello"}]


def test_follow_up_messages_carry_tool_calls_and_results() -> None:
    client = _client([_completion({"role": "assistant", "content": "Saved as slug123."})])
    driver = OpenAIChatCompletionsDriver(model="deepseek-chat", api_key="sk-test", client=client)
    state = ConversationState()
    state.append_user_message("save this: hello")
    state.append_assistant_message("", [ToolCall(name="write_note", call_id="1", arguments='{"content": "hello"}')])
    state.append_tool_result("1", [{"type": "text", "text": "ok:slug123"}])

    turn = driver.create_turn(turns=state.turns, tools=None)

    assert turn.output_text == "Saved as slug123."
    assert turn.tool_calls == []
    payload = client.chat.completions.payloads[0]
    assert "tools" not in payload
    assert payload["messages"][1] == {
        "role": "assistant",
        "content": None,
        "tool_calls": [{
            "id": "1",
            "type": "function",
            "function": {"name": "write_note", "arguments": '{"content": "hello"}'},
        }],
    }
    assert payload["messages"][2] == {
        "role": "tool",
        "tool_call_id": "1",
        "content": '[{"type": "text", "text": "ok:slug123"}]',
    }


def test_api_errors_become_model_api_errors() -> None:
    request = httpx.Request("POST", "https://api.deepseek.com/chat/completions")
    client = _client([openai.APIConnectionError(request=request)])
    driver = OpenAIChatCompletionsDriver(model="deepseek-chat", api_key="sk-test", client=client)
    state = ConversationState()
    state.append_user_message("hi")

    with pytest.raises(ModelAPIError):
        driver.create_turn(turns=state.turns)
