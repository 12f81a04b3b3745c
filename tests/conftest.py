"""
Shared test fixtures and fakes.

The MCP server and the chat completion backend are replaced by deterministic
fakes so no test touches the network.
"""

import os
import sys
from typing import Any, Dict, List, Optional

import pytest

# Ensure project root is on sys.path so package imports resolve in tests
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from pizza_order_client.abstractions.dto.tools import ToolDescriptor
from pizza_order_client.domain.errors import ToolProviderConnectionError
from pizza_order_client.infrastructure.config.settings import Settings
from pizza_order_client.infrastructure.tools.mcp_function import adapt_all
from pizza_order_client.infrastructure.tools.tool_namespace import ToolNamespace
from pizza_order_client.interfaces.services.llm import CompletionMessage, ToolChoice

# Shape returned by the Pizza MCP server for get_pizzas
PIZZA_LIST = [
    {
        "type": "text",
        "text": '[{"id":"pizza-1","name":"Margherita","price":9.5},{"id":"pizza-2","name":"Pepperoni","price":11}]',
    }
]


# -----------------------------------------------------------------------------
# Fakes
# -----------------------------------------------------------------------------

class FakeToolProvider:
    """In-memory IToolProvider. Results may be values or exceptions to raise."""

    def __init__(
        self,
        descriptors: Optional[List[ToolDescriptor]] = None,
        results: Optional[Dict[str, Any]] = None,
        fail_connect: bool = False,
    ) -> None:
        self.descriptors = list(descriptors or [])
        self.results = dict(results or {})
        self.fail_connect = fail_connect
        self.calls: List[tuple] = []
        self.entered = False
        self.closed = False

    def __enter__(self):
        if self.fail_connect:
            raise ToolProviderConnectionError("MCP server unreachable", endpoint="http://fake/mcp")
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self.descriptors)

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((name, arguments))
        result = self.results.get(name)
        if isinstance(result, Exception):
            raise result
        return result


class ScriptedBackend:
    """ICompletionBackend replaying a fixed script of messages (or exceptions)."""

    model = "fake-model"

    def __init__(self, script: List[Any]) -> None:
        self.script = list(script)
        self.requests: List[Dict[str, Any]] = []

    def complete(self, messages, tools=None, tool_choice=ToolChoice.AUTO, temperature=None) -> CompletionMessage:
        self.requests.append({
            "messages": list(messages),
            "tools": tools,
            "tool_choice": tool_choice,
            "temperature": temperature,
        })
        if not self.script:
            raise AssertionError("backend called more often than scripted")
        step = self.script.pop(0)
        if isinstance(step, BaseException):
            raise step
        return step


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def pizza_descriptors() -> List[ToolDescriptor]:
    return [
        ToolDescriptor(name="get_pizzas", description="list pizzas", raw_schema={}),
        ToolDescriptor(
            name="place_order",
            description="Place a pizza order",
            raw_schema={
                "type": "object",
                "properties": {
                    "userId": {"type": "string", "description": "User id"},
                    "items": {"type": "array", "items": {"type": "object"}},
                },
                "required": ["userId", "items"],
            },
        ),
    ]


@pytest.fixture
def fake_provider(pizza_descriptors) -> FakeToolProvider:
    return FakeToolProvider(
        descriptors=pizza_descriptors,
        results={"get_pizzas": PIZZA_LIST, "place_order": {"orderId": "order-42", "status": "pending"}},
    )


@pytest.fixture
def namespace(pizza_descriptors, fake_provider) -> ToolNamespace:
    ns = ToolNamespace("PizzaTools")
    report = adapt_all(pizza_descriptors, fake_provider, ns)
    assert not report.errors
    return ns


@pytest.fixture
def provider_cls():
    return FakeToolProvider


@pytest.fixture
def backend_cls():
    return ScriptedBackend


@pytest.fixture
def make_settings():
    """Build Settings from flat keys; the API key is set unless overridden."""
    def _make(**overrides: str) -> Settings:
        values = {"OpenAI:ApiKey": "test-key"}
        for key, value in overrides.items():
            values[key.replace("__", ":")] = value
        return Settings({k: v for k, v in values.items() if v is not None})
    return _make
