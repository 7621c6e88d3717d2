from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional

from mcpchat.errors import MCPChatError

_logger = logging.getLogger(__name__)

EXIT_COMMAND = "quit"


class ExitStatus(enum.IntEnum):
    OK = 0
    STARTUP_FAILED = 1
    QUERY_FAILED = 2


class InteractiveSession:
    """Read a query, answer it, print the answer, repeat until ``quit``.

    A failed query ends the session with ``ExitStatus.QUERY_FAILED``; the
    caller owns the tool server connection and closes it afterwards.
    """

    def __init__(
        self,
        process_query: Callable[[str], Awaitable[str]],
        *,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        prompt: str = "\nQuery: ",
    ) -> None:
        self.process_query = process_query
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.prompt = prompt

    async def _read_line(self) -> Optional[str]:
        # input() blocks; keep the event loop free for the stdio transport.
        try:
            return await asyncio.to_thread(self.input_fn, self.prompt)
        except EOFError:
            return None

    async def run(self) -> ExitStatus:
        self.output_fn("\nMCP Client Started!")
        self.output_fn(f"Type your queries or '{EXIT_COMMAND}' to exit.")
        while True:
            try:
                line = await self._read_line()
            except KeyboardInterrupt:
                return ExitStatus.OK
            if line is None:
                return ExitStatus.OK
            query = line.strip()
            if query.lower() == EXIT_COMMAND:
                return ExitStatus.OK
            if not query:
                continue
            try:
                response = await self.process_query(query)
            except MCPChatError as exc:
                _logger.error("Query failed: %s", exc)
                self.output_fn(f"\nError: {exc}")
                return ExitStatus.QUERY_FAILED
            self.output_fn("\n" + response)


__all__ = ["InteractiveSession", "ExitStatus", "EXIT_COMMAND"]
