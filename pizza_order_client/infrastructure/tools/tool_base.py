"""
Tool base class shared by every locally invocable function.

Function definitions are exported in the OpenAI Chat Completions "tools" format.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class Tool(ABC):

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name used in function calling format."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what the tool does."""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> Dict[str, Any]:
        """
        JSONSchema object defining accepted arguments.
        Must include:
        - type: "object"
        - properties: Parameter definitions
        """
        pass

    @abstractmethod
    def run(self, input: Optional[Dict[str, Any]] = None) -> Any:
        """Execute the tool with the given arguments."""
        pass

    def get_tool_definition(self, name: Optional[str] = None) -> Dict[str, Any]:
        """Get the tool definition in OpenAI's function format.

        Args:
            name: exported function name (e.g. namespace-qualified); defaults to self.name
        """
        schema = self.input_schema if isinstance(self.input_schema, dict) else {}
        # Keep $defs, additionalProperties etc. so $ref pointers stay resolvable
        parameters: Dict[str, Any] = copy.deepcopy(schema)
        parameters["type"] = "object"
        parameters["properties"] = parameters.get("properties") or {}
        required = parameters.pop("required", None) or []
        if required:
            parameters["required"] = list(required)

        return {
            "type": "function",
            "function": {
                "name": name or self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }
