from .tool_invocation_loop import MAX_TOOL_ROUNDS, QueryResult, ToolInvocationLoop

__all__ = ["MAX_TOOL_ROUNDS", "QueryResult", "ToolInvocationLoop"]
