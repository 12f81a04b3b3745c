"""
Named, ordered collection of locally invocable functions (a "plugin").
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List

from pizza_order_client.domain.errors import ToolAdaptationError, UnresolvedLookupError

from .tool_base import Tool


class ToolNamespace:
    """
    Registers functions under a label and resolves names for direct and model-driven calls.

    Functions are exported to the model as "<label>_<name>".
    """

    def __init__(self, label: str):
        """
        Args:
            label: namespace label, e.g. "PizzaTools"
        """
        self.label = label
        self.tools: Dict[str, Tool] = {}

    def add(self, tool: Tool) -> None:
        """
        Register a tool instance.

        Raises:
            ToolAdaptationError: if a tool with the same name is already registered
        """
        if tool.name in self.tools:
            raise ToolAdaptationError(tool.name, f"duplicate function name in namespace '{self.label}'")
        self.tools[tool.name] = tool

    def qualified_name(self, tool: Tool) -> str:
        return f"{self.label}_{tool.name}"

    def resolve(self, name: str) -> Tool:
        """
        Resolve a function by exact name, else by unique suffix.

        Exact matching accepts both the short and the qualified name. Suffix
        matching considers both as well.

        Raises:
            UnresolvedLookupError: zero or several functions match
        """
        if not name:
            raise UnresolvedLookupError(name)
        if name in self.tools:
            return self.tools[name]
        for tool in self.tools.values():
            if self.qualified_name(tool) == name:
                return tool

        matches = [
            tool for tool in self.tools.values()
            if tool.name.endswith(name) or self.qualified_name(tool).endswith(name)
        ]
        if len(matches) == 1:
            return matches[0]
        raise UnresolvedLookupError(name, [tool.name for tool in matches])

    def list_tools(self) -> List[Dict[str, Any]]:
        """
        Get information about all registered tools.

        Returns:
            List of dictionaries with name, qualified_name, description and input_schema
        """
        return [
            {
                "name": tool.name,
                "qualified_name": self.qualified_name(tool),
                "description": tool.description,
                "input_schema": tool.input_schema,
            }
            for tool in self.tools.values()
        ]

    def to_openai_tools(self) -> List[Dict[str, Any]]:
        """Function definitions for the Chat Completions "tools" parameter."""
        return [tool.get_tool_definition(self.qualified_name(tool)) for tool in self.tools.values()]

    def __iter__(self) -> Iterator[Tool]:
        return iter(self.tools.values())

    def __len__(self) -> int:
        return len(self.tools)

    def __contains__(self, name: object) -> bool:
        return name in self.tools


__all__ = ["ToolNamespace"]
