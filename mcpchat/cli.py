"""
Command-line entry point: ``mcpchat <path_to_server_script>``.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv
from mcp.client.stdio import get_default_environment

from mcpchat.agents import ToolInvocationLoop
from mcpchat.errors import MCPChatError
from mcpchat.llm.config import LLMConfig
from mcpchat.llm.driver import ToolCallingDriver
from mcpchat.llm.factory import build_tool_driver
from mcpchat.runtime import MCPToolServerConnection
from mcpchat.session import ExitStatus, InteractiveSession
from mcpchat.ui import Reporter, create_reporter, make_event

USAGE = "Usage: mcpchat <path_to_server_script>"

_logger = logging.getLogger(__name__)


def _server_env() -> dict[str, str]:
    """Default MCP child environment plus the names listed in MCPCHAT_SERVER_ENV."""
    env = dict(get_default_environment())
    for name in os.getenv("MCPCHAT_SERVER_ENV", "").split(","):
        name = name.strip()
        if name and name in os.environ:
            env[name] = os.environ[name]
    return env


async def run_client(
    server_script: str,
    *,
    driver: ToolCallingDriver,
    reporter: Optional[Reporter] = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    server_env: Optional[dict[str, str]] = None,
) -> ExitStatus:
    try:
        connection = MCPToolServerConnection(server_script, env=server_env)
        catalog = await connection.connect()
    except MCPChatError as exc:
        _logger.error("Startup failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return ExitStatus.STARTUP_FAILED
    try:
        output_fn(f"Connected to server with tools: {catalog.names}")
        if reporter is not None:
            reporter.emit(make_event("SERVER_CONNECTED", category="server", payload={
                "server": server_script,
                "tools": catalog.names,
            }))
        loop = ToolInvocationLoop(
            driver=driver,
            backend=connection,
            catalog=catalog,
            reporter=reporter,
        )
        session = InteractiveSession(loop.process_query, input_fn=input_fn, output_fn=output_fn)
        return await session.run()
    finally:
        await connection.close()


def _configure_logging() -> None:
    level_name = os.getenv("MCPCHAT_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run(argv: Optional[Sequence[str]] = None) -> ExitStatus:
    parser = argparse.ArgumentParser(
        prog="mcpchat",
        description="Chat with an LLM that can call tools from an MCP server",
    )
    parser.add_argument("server_script", nargs="?", help="Path to the tool server script (.py or .js)")
    args = parser.parse_args(argv)

    if not args.server_script:
        print(USAGE)
        return ExitStatus.OK

    load_dotenv()
    _configure_logging()

    try:
        cfg = LLMConfig.from_env_or_file()
        driver = build_tool_driver(cfg)
    except MCPChatError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return ExitStatus.STARTUP_FAILED

    reporter = create_reporter(os.getenv("MCPCHAT_UI", "plain").strip().lower() or "plain")
    try:
        return asyncio.run(run_client(
            args.server_script,
            driver=driver,
            reporter=reporter,
            server_env=_server_env(),
        ))
    except KeyboardInterrupt:
        return ExitStatus.OK
    finally:
        reporter.close()


def main() -> None:
    sys.exit(int(run()))


if __name__ == "__main__":
    main()
