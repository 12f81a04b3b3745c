"""
Error hierarchy for the pizza order client.

Startup errors (ConfigurationError, ToolProviderConnectionError) are fatal.
ToolAdaptationError is recorded per descriptor and never aborts a batch.
AgentInvocationError is caught at the chat-loop turn boundary.
"""
from __future__ import annotations

from typing import Optional, Sequence


class PizzaClientError(Exception):
    """Base class for all client errors."""


class ConfigurationError(PizzaClientError):
    """Missing or invalid configuration value."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class ToolProviderConnectionError(PizzaClientError, ConnectionError):
    """The MCP tool provider is unreachable or rejected the handshake."""

    def __init__(self, message: str, endpoint: str = "") -> None:
        super().__init__(message)
        self.endpoint = endpoint


class ToolAdaptationError(PizzaClientError):
    """A single tool descriptor could not be converted into a local function."""

    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__(f"Cannot adapt tool '{tool_name}': {reason}")
        self.tool_name = tool_name
        self.reason = reason


class UnresolvedLookupError(PizzaClientError, LookupError):
    """A tool name matched zero or several registered functions."""

    def __init__(self, name: str, candidates: Sequence[str] = ()) -> None:
        if candidates:
            message = f"Tool name '{name}' is ambiguous; matches: {', '.join(candidates)}"
        else:
            message = f"No registered function matches '{name}'"
        super().__init__(message)
        self.name = name
        self.candidates = list(candidates)

    def __str__(self) -> str:
        return self.args[0]


class ToolExecutionError(PizzaClientError):
    """The tool provider reported a failed tool call."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"Tool '{tool_name}' failed: {message}")
        self.tool_name = tool_name


class AgentInvocationError(PizzaClientError):
    """A conversational turn failed. The cause is chained via __cause__."""

    def __init__(self, message: str, inner: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.inner = inner


__all__ = [
    "PizzaClientError",
    "ConfigurationError",
    "ToolProviderConnectionError",
    "ToolAdaptationError",
    "UnresolvedLookupError",
    "ToolExecutionError",
    "AgentInvocationError",
]
