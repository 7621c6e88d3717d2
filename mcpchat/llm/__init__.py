"""LLM driver abstractions and tool-calling utilities."""

from .types import ToolCall, TurnResult
from .driver import ToolCallingDriver

__all__ = ["ToolCall", "TurnResult", "ToolCallingDriver"]
