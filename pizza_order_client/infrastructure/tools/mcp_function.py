"""
Adapter from remote MCP tool descriptors to locally invocable functions.

Each descriptor is adapted independently: one malformed descriptor yields a
ToolAdaptationError for that descriptor alone while the others still register.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, Optional, TYPE_CHECKING

from pizza_order_client.abstractions.dto.tools import AdaptationReport, ToolDescriptor
from pizza_order_client.domain.errors import ToolAdaptationError

from .tool_base import Tool

if TYPE_CHECKING:
    from pizza_order_client.interfaces.services.tools import IToolProvider
    from .tool_namespace import ToolNamespace

logger = logging.getLogger(__name__)

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")


def sanitize_function_name(name: str) -> str:
    """Replace characters not allowed in function names with '_'."""
    return _INVALID_NAME_CHARS.sub("_", name.strip())


class McpFunction(Tool):
    """
    A remote MCP tool bound to the provider that serves it.

    `name` is the stable local function name; `remote_name` is what tools/call receives.
    """

    def __init__(self, descriptor: ToolDescriptor, provider: "IToolProvider", name: str, schema: Dict[str, Any]) -> None:
        self._descriptor = descriptor
        self._provider = provider
        self._name = name
        self._schema = schema

    @property
    def name(self) -> str:
        return self._name

    @property
    def remote_name(self) -> str:
        return self._descriptor.name

    @property
    def description(self) -> str:
        return self._descriptor.description

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self._schema

    @property
    def descriptor(self) -> ToolDescriptor:
        return self._descriptor

    def run(self, input: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke the remote tool and return its result unmodified."""
        logger.info(f"Invoking tool {self.remote_name}")
        return self._provider.call_tool(self.remote_name, dict(input or {}))

    def __repr__(self) -> str:
        return f"McpFunction(name={self._name!r}, remote_name={self.remote_name!r})"


def adapt(descriptor: ToolDescriptor, provider: "IToolProvider") -> McpFunction:
    """
    Convert one descriptor into an McpFunction.

    Raises:
        ToolAdaptationError: when the name or the parameter schema is unusable
    """
    raw_name = getattr(descriptor, "name", None)
    if not isinstance(raw_name, str) or not raw_name.strip():
        raise ToolAdaptationError(str(raw_name or "<unnamed>"), "tool name is missing")

    name = sanitize_function_name(raw_name)
    if not name.strip("_"):
        raise ToolAdaptationError(raw_name, "tool name has no usable characters")

    schema = descriptor.raw_schema
    if schema is None or schema == {}:
        schema = {"type": "object", "properties": {}}
    if not isinstance(schema, dict):
        raise ToolAdaptationError(raw_name, f"parameter schema must be an object, got {type(schema).__name__}")
    if "type" in schema and schema["type"] != "object":
        raise ToolAdaptationError(raw_name, f"parameter schema type must be 'object', got {schema['type']!r}")
    properties = schema.get("properties", {})
    if properties is not None and not isinstance(properties, dict):
        raise ToolAdaptationError(raw_name, "parameter schema 'properties' must be an object")

    return McpFunction(descriptor, provider, name=name, schema=schema)


def adapt_all(
    descriptors: Iterable[ToolDescriptor],
    provider: "IToolProvider",
    namespace: "ToolNamespace",
) -> AdaptationReport:
    """Adapt every descriptor and register the successes into `namespace`."""
    report = AdaptationReport()
    for descriptor in descriptors:
        try:
            function = adapt(descriptor, provider)
            namespace.add(function)
        except ToolAdaptationError as e:
            logger.warning(str(e))
            report.errors.append(e)
            continue
        logger.debug(f"Registered tool {function.remote_name} as {namespace.qualified_name(function)}")
        report.functions.append(function)
    return report


__all__ = ["McpFunction", "adapt", "adapt_all", "sanitize_function_name"]
