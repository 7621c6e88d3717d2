#!/usr/bin/env python3
"""
MCP tool server that writes notes to flomo.

Run over stdio, e.g. ``mcpchat path/to/flomo_server.py`` with ``FLOMO_API_URL``
forwarded through ``MCPCHAT_SERVER_ENV=FLOMO_API_URL``, or directly with
``python flomo_server.py --flomo_api_url=<url>``.
"""

import os
import sys
from typing import Annotated, Optional, Sequence

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from mcpchat.servers.flomo_client import FlomoAPIError, FlomoClient

MEMO_URL = "https://v.flomoapp.com/mine/?memo_id={slug}"


def parse_args(argv: Sequence[str]) -> dict[str, str]:
    """Collect ``--key=value`` arguments; anything else is ignored."""
    args: dict[str, str] = {}
    for arg in argv:
        if arg.startswith("--"):
            key, _, value = arg[2:].partition("=")
            args[key] = value
    return args


def resolve_api_url(argv: Sequence[str]) -> str:
    return parse_args(argv).get("flomo_api_url") or os.getenv("FLOMO_API_URL", "")


async def write_note_to_flomo(client: FlomoClient, content: str) -> str:
    if not content:
        raise ValueError("content is required")
    res = await client.write_note(content)
    memo = res.get("memo") or {}
    slug = memo.get("slug") if isinstance(memo, dict) else None
    if not slug:
        raise FlomoAPIError(
            f"Failed to write note to flomo: {res.get('message') or 'unknown error'}"
        )
    return f"write note to flomo success: {MEMO_URL.format(slug=slug)}"


def build_server(api_url: str, *, client: Optional[FlomoClient] = None) -> FastMCP:
    server = FastMCP("flomo-mcp")

    @server.tool(name="write_note", description="Write a note to flomo")
    async def write_note(
        content: Annotated[str, Field(description="Text content of the note with Markdown format")],
    ) -> str:
        if client is None and not api_url:
            raise ValueError("Flomo API URL is not set")
        return await write_note_to_flomo(client or FlomoClient(api_url), content)

    return server


def main() -> None:
    build_server(resolve_api_url(sys.argv[1:])).run()


if __name__ == "__main__":
    main()
