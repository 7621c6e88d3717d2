"""Example MCP tool servers that can be launched by the client."""
