"""Error hierarchy for the chat client.

Every error raised on purpose by the client inherits from MCPChatError so the
CLI can tell expected failures apart from bugs.
"""

from __future__ import annotations


class MCPChatError(Exception):
    """Base for all client errors."""


class ConfigError(MCPChatError):
    """Missing or invalid configuration (e.g., no API key)."""


class ConversationError(MCPChatError):
    """A turn would break the conversation log invariants."""


class ToolServerConnectionError(MCPChatError, ConnectionError):
    """The tool server could not be launched, or its channel is unusable."""


class UnknownToolError(MCPChatError):
    """The model asked for a tool the server does not expose."""

    def __init__(self, tool_name: str, available: list[str] | None = None) -> None:
        self.tool_name = tool_name
        self.available = list(available or [])
        message = f"Unknown tool: {tool_name!r}"
        if self.available:
            message = f"{message} (available: {', '.join(self.available)})"
        super().__init__(message)


class ToolExecutionError(MCPChatError):
    """A tool call failed on the server side or could not be issued."""

    def __init__(self, message: str, *, tool_name: str | None = None) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class ModelAPIError(MCPChatError):
    """The chat-completion request failed (auth, rate limit, network, bad reply)."""


__all__ = [
    "MCPChatError",
    "ConfigError",
    "ConversationError",
    "ToolServerConnectionError",
    "UnknownToolError",
    "ToolExecutionError",
    "ModelAPIError",
]
