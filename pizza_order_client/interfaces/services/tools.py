"""
Tool provider, catalog and invocation ports.
"""
from __future__ import annotations
from typing import Protocol, List, Optional, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from pizza_order_client.abstractions.dto.tools import ToolDescriptor, ToolInvocationResult

class IToolProvider(Protocol):
    """Remote capability set (an MCP server session)."""
    def list_tools(self) -> List["ToolDescriptor"]:
        ...
    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        ...

class IToolCatalog(Protocol):
    def list_tools(self) -> List["ToolDescriptor"]:
        ...
    def get_tool(self, name: str) -> Optional["ToolDescriptor"]:
        ...

class IToolInvocationAdapter(Protocol):
    def execute(self, name: str, params: Optional[Dict[str, Any]] = None) -> "ToolInvocationResult":
        ...

__all__ = ["IToolProvider", "IToolCatalog", "IToolInvocationAdapter"]
