from __future__ import annotations

import logging
import sys
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any, Optional, Sequence

import anyio
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError

from mcpchat.errors import ToolExecutionError, ToolServerConnectionError
from mcpchat.runtime.tool_backend import ToolBackend, ToolCallResult
from mcpchat.runtime.tool_catalog import ToolCatalog, ToolDescriptor, descriptor_from_mcp_tool

_CHANNEL_ERRORS = (
    McpError,
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
    anyio.EndOfStream,
    OSError,
)


def resolve_server_command(script_path: str) -> tuple[str, list[str]]:
    """Pick the interpreter for a tool server script from its extension.

    ``.py`` scripts run under the current interpreter, ``.js`` scripts under
    ``node``. Nothing is spawned here.
    """
    suffix = Path(script_path).suffix.lower()
    if suffix == ".py":
        return sys.executable, [script_path]
    if suffix == ".js":
        return "node", [script_path]
    raise ToolServerConnectionError(
        f"Server script must be a .js or .py file: {script_path}"
    )


def _dump_content_block(block: Any) -> Any:
    if hasattr(block, "model_dump"):
        return block.model_dump(mode="json", exclude_none=True)
    return block


def _error_text(content: Sequence[Any]) -> str:
    parts: list[str] = []
    for block in content or []:
        text = getattr(block, "text", None)
        parts.append(text if text is not None else str(block))
    return "\n".join(parts) or "tool reported an error"


class MCPToolServerConnection(ToolBackend):
    """Client side of one MCP tool server running as a child process over stdio.

    Usage:
        conn = MCPToolServerConnection("server.py")
        catalog = await conn.connect()
        try:
            result = await conn.invoke("write_note", {"content": "hi"})
        finally:
            await conn.close()

    ``connect()`` returns the only catalog snapshot; the connection keeps no
    public copy of it.
    """

    def __init__(
        self,
        script_path: str,
        *,
        args: Sequence[str] = (),
        env: Optional[dict[str, str]] = None,
        cwd: Optional[str] = None,
        client_name: str = "mcpchat",
    ) -> None:
        command, base_args = resolve_server_command(script_path)
        self.script_path = script_path
        self.params = StdioServerParameters(
            command=command,
            args=[*base_args, *args],
            env=env,
            cwd=cwd,
        )
        self.client_name = client_name
        self._listed = False
        self._stack: Optional[AsyncExitStack] = None
        self._session: Optional[ClientSession] = None
        self.logger = logging.getLogger(__name__)

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> ToolCatalog:
        if self._session is not None:
            raise ToolServerConnectionError(f"Already connected to {self.script_path}")
        stack = AsyncExitStack()
        await stack.__aenter__()
        self._stack = stack
        try:
            read_stream, write_stream = await stack.enter_async_context(stdio_client(self.params))
            session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
            await session.initialize()
        except Exception as exc:
            await self.close()
            raise ToolServerConnectionError(
                f"Failed to start tool server {self.script_path}: {exc}"
            ) from exc
        self._session = session
        self.logger.info("Connected to tool server %s (%s)", self.script_path, self.params.command)

        try:
            catalog = ToolCatalog.of(await self.list_tools())
        except ValueError as exc:
            await self.close()
            raise ToolServerConnectionError(str(exc)) from exc
        except Exception:
            await self.close()
            raise
        self._listed = True
        return catalog

    async def list_tools(self) -> list[ToolDescriptor]:
        session = self._require_session()
        try:
            result = await session.list_tools()
        except _CHANNEL_ERRORS as exc:
            raise ToolServerConnectionError(f"list_tools failed: {exc}") from exc
        descriptors = [descriptor_from_mcp_tool(tool) for tool in result.tools]
        self.logger.debug("Server tools: %s", [d.name for d in descriptors])
        return descriptors

    async def invoke(
        self,
        name: str,
        arguments: dict[str, Any],
        *,
        call_id: str = "",
    ) -> ToolCallResult:
        session = self._require_session()
        if not self._listed:
            raise ToolServerConnectionError("Tool catalog has not been listed yet")
        try:
            result = await session.call_tool(name, arguments)
        except _CHANNEL_ERRORS as exc:
            raise ToolExecutionError(f"Tool {name} failed: {exc}", tool_name=name) from exc
        if result.isError:
            raise ToolExecutionError(
                f"Tool {name} reported an error: {_error_text(result.content)}",
                tool_name=name,
            )
        content = [_dump_content_block(block) for block in result.content or []]
        return ToolCallResult(tool_call_id=call_id, content=content)

    async def close(self) -> None:
        stack, self._stack = self._stack, None
        self._session = None
        self._listed = False
        if stack is None:
            return
        try:
            await stack.aclose()
        except Exception as exc:
            self.logger.warning("Error while shutting down tool server %s: %s", self.script_path, exc)
        else:
            self.logger.info("Closed tool server %s", self.script_path)

    async def __aenter__(self) -> "MCPToolServerConnection":
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise ToolServerConnectionError(f"Not connected to tool server {self.script_path}")
        return self._session


__all__ = ["MCPToolServerConnection", "resolve_server_command"]
