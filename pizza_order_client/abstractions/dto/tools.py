"""
Shared tool DTOs for catalogs, adaptation reports and invocation results.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from pizza_order_client.domain.errors import ToolAdaptationError
    from pizza_order_client.infrastructure.tools.mcp_function import McpFunction

@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    raw_schema: Dict[str, Any]

@dataclass
class ToolInvocationResult:
    ok: bool
    value: Any
    error: Optional[str]
    tool_name: str
    inner_error: Optional[str] = None

@dataclass
class AdaptationReport:
    functions: List["McpFunction"] = field(default_factory=list)
    errors: List["ToolAdaptationError"] = field(default_factory=list)

__all__ = ["ToolDescriptor", "ToolInvocationResult", "AdaptationReport"]
