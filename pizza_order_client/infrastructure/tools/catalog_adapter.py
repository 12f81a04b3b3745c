"""
Tool catalog adapter implementing IToolCatalog over a ToolNamespace.
"""

from typing import List, Optional, TYPE_CHECKING
from pizza_order_client.abstractions.dto.tools import ToolDescriptor
from pizza_order_client.domain.errors import UnresolvedLookupError

if TYPE_CHECKING:
    from pizza_order_client.interfaces.services.tools import IToolCatalog

from .tool_namespace import ToolNamespace


class NamespaceCatalogAdapter:
    """
    Adapter for ToolNamespace to implement IToolCatalog interface.
    Descriptors carry the qualified names the model sees.
    """

    def __init__(self, namespace: ToolNamespace):
        self.namespace = namespace

    def list_tools(self) -> List["ToolDescriptor"]:
        return [
            ToolDescriptor(
                name=info["qualified_name"],
                description=info["description"],
                raw_schema=info["input_schema"],
            )
            for info in self.namespace.list_tools()
        ]

    def get_tool(self, name: str) -> Optional["ToolDescriptor"]:
        try:
            tool = self.namespace.resolve(name)
        except UnresolvedLookupError:
            return None
        return ToolDescriptor(
            name=self.namespace.qualified_name(tool),
            description=tool.description,
            raw_schema=tool.input_schema,
        )
