"""Runtime pieces: conversation log, tool catalog, and tool server backends."""

from .conversation_state import ConversationState, Turn, serialize_tool_output
from .tool_catalog import ToolCatalog, ToolDescriptor, from_descriptors
from .tool_backend import ToolBackend, ToolCallResult
from .mcp_tool_backend import MCPToolServerConnection, resolve_server_command

__all__ = [
    "ConversationState",
    "Turn",
    "serialize_tool_output",
    "ToolCatalog",
    "ToolDescriptor",
    "from_descriptors",
    "ToolBackend",
    "ToolCallResult",
    "MCPToolServerConnection",
    "resolve_server_command",
]
