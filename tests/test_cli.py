from __future__ import annotations

import pytest

from mcpchat import cli
from mcpchat.llm.fake_driver import FakeDriver, tool_call_message
from mcpchat.session import ExitStatus


def test_missing_argument_prints_usage(capsys) -> None:
    status = cli.run([])

    assert status is ExitStatus.OK
    assert capsys.readouterr().out.strip() == cli.USAGE


def test_missing_api_key_is_a_startup_failure(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("DEEPSEEK_API_KEY", "MCPCHAT_LLM_PROVIDER", "MCPCHAT_API_KEY_ENV", "MCPCHAT_LLM_CONFIG"):
        monkeypatch.delenv(name, raising=False)

    status = cli.run(["server.py"])

    assert status is ExitStatus.STARTUP_FAILED
    assert "DEEPSEEK_API_KEY is not set" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_bad_server_script_is_a_startup_failure(capsys) -> None:
    status = await cli.run_client(
        "server.txt",
        driver=FakeDriver([]),
        input_fn=lambda prompt: "quit",
    )

    assert status is ExitStatus.STARTUP_FAILED
    assert ".js or .py" in capsys.readouterr().err


def test_server_env_forwards_listed_names(monkeypatch) -> None:
    monkeypatch.setenv("FLOMO_API_URL", "https://flomo.example/")
    monkeypatch.setenv("MCPCHAT_SERVER_ENV", "FLOMO_API_URL, NOT_SET_ANYWHERE")
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)

    env = cli._server_env()

    assert env["FLOMO_API_URL"] == "https://flomo.example/"
    assert "NOT_SET_ANYWHERE" not in env


ECHO_SERVER = '''
from mcp.server.fastmcp import FastMCP

server = FastMCP("echo")


@server.tool()
def echo(text: str) -> str:
    """Echo text back"""
    return f"echo:{text}"


if __name__ == "__main__":
    server.run()
'''


@pytest.mark.asyncio
async def test_run_client_end_to_end(tmp_path) -> None:
    script = tmp_path / "echo_server.py"
    script.write_text(ECHO_SERVER, encoding="utf-8")
    driver = FakeDriver([
        tool_call_message(("call-1", "echo", {"text": "hi"})),
        "The server said echo:hi.",
    ])
    lines = iter(["please echo hi", "quit"])
    printed: list[str] = []

    status = await cli.run_client(
        str(script),
        driver=driver,
        input_fn=lambda prompt: next(lines),
        output_fn=printed.append,
    )

    assert status is ExitStatus.OK
    assert printed[0] == "Connected to server with tools: ['echo']"
    assert '\n[Calling tool echo with args {"text":"hi"}]\nThe server said echo:hi.' in printed
    tool_turn = driver.calls[1].turns[-1]
    assert tool_turn.tool_call_id == "call-1"
    assert "echo:hi" in tool_turn.content
