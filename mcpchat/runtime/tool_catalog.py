from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str = ""
    parameter_schema: dict = field(default_factory=dict, hash=False)


def descriptor_from_mcp_tool(tool: Any) -> ToolDescriptor:
    """Map an MCP ``Tool`` (or an equivalent dict) to a ToolDescriptor."""
    if isinstance(tool, dict):
        name = tool.get("name", "")
        description = tool.get("description")
        schema = tool.get("inputSchema")
    else:
        name = getattr(tool, "name", "")
        description = getattr(tool, "description", None)
        schema = getattr(tool, "inputSchema", None)
    return ToolDescriptor(
        name=name,
        description=description or "",
        parameter_schema=dict(schema) if isinstance(schema, dict) else {},
    )


def function_spec(descriptor: ToolDescriptor) -> dict:
    return {
        "type": "function",
        "function": {
            "name": descriptor.name,
            "description": descriptor.description or "",
            "parameters": copy.deepcopy(descriptor.parameter_schema),
        },
    }


def from_descriptors(descriptors: Iterable[ToolDescriptor]) -> list[dict]:
    """Convert descriptors to chat-completion function specs, one per tool, in order.

    The parameter schema is passed through as-is; the provider validates it.
    """
    return [function_spec(descriptor) for descriptor in descriptors]


@dataclass(frozen=True)
class ToolCatalog:
    """Snapshot of the tools a server exposed at connection time."""

    descriptors: tuple[ToolDescriptor, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for descriptor in self.descriptors:
            if descriptor.name in seen:
                raise ValueError(f"Duplicate tool name in catalog: {descriptor.name!r}")
            seen.add(descriptor.name)

    @classmethod
    def of(cls, descriptors: Iterable[ToolDescriptor]) -> "ToolCatalog":
        return cls(descriptors=tuple(descriptors))

    @property
    def names(self) -> list[str]:
        return [descriptor.name for descriptor in self.descriptors]

    def get(self, name: str) -> Optional[ToolDescriptor]:
        for descriptor in self.descriptors:
            if descriptor.name == name:
                return descriptor
        return None

    def function_specs(self) -> list[dict]:
        return from_descriptors(self.descriptors)

    def __contains__(self, name: object) -> bool:
        return any(descriptor.name == name for descriptor in self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)


__all__ = [
    "ToolDescriptor",
    "ToolCatalog",
    "descriptor_from_mcp_tool",
    "function_spec",
    "from_descriptors",
]
