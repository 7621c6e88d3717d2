"""Chat client that lets an LLM call tools exposed by an MCP server."""

from .agents import MAX_TOOL_ROUNDS, QueryResult, ToolInvocationLoop
from .errors import (
    ConfigError,
    MCPChatError,
    ModelAPIError,
    ToolExecutionError,
    ToolServerConnectionError,
    UnknownToolError,
)
from .runtime import ConversationState, MCPToolServerConnection, ToolCatalog, ToolDescriptor
from .session import ExitStatus, InteractiveSession

__version__ = "0.1.0"

__all__ = [
    "MAX_TOOL_ROUNDS",
    "QueryResult",
    "ToolInvocationLoop",
    "ConfigError",
    "MCPChatError",
    "ModelAPIError",
    "ToolExecutionError",
    "ToolServerConnectionError",
    "UnknownToolError",
    "ConversationState",
    "MCPToolServerConnection",
    "ToolCatalog",
    "ToolDescriptor",
    "ExitStatus",
    "InteractiveSession",
]
